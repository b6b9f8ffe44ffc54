from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

from ..metrics.base import Metric, RenderContext
from ..metrics.registry import MetricRegistry
from ..resources import get_string

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedMetric:
    id: str
    label: str
    metric: Metric

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "label": self.label, **self.metric.to_dict()}


@dataclass
class RenderReport:
    """Outcome of one render pass over the registry."""

    metrics: List[RenderedMetric] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metrics": [rendered.to_dict() for rendered in self.metrics],
            "skipped": list(self.skipped),
            "failed": list(self.failed),
        }


def render_metrics(
    registry: MetricRegistry,
    context: RenderContext,
    resolve_label: Callable[[str], str] = get_string,
) -> RenderReport:
    """Evaluate every registered metric against ``context``.

    A definition that raises is recorded as failed and the pass moves on;
    one that returns ``None`` is recorded as skipped. Results are ordered
    by metric id.
    """
    report = RenderReport()
    for definition in sorted(registry.all(), key=lambda d: d.id):
        try:
            metric = definition.evaluate(context)
        except Exception:
            logger.exception("Failed to compute metric %r", definition.id)
            report.failed.append(definition.id)
            continue
        if metric is None:
            report.skipped.append(definition.id)
            continue
        report.metrics.append(
            RenderedMetric(definition.id, resolve_label(definition.label_key), metric)
        )
    return report
