from __future__ import annotations

import threading
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable, ContextManager, Dict, Optional, Protocol, runtime_checkable


class MetricStyle(str, Enum):
    """Visual severity of a rendered metric, used as a CSS class suffix."""

    DEFAULT = "default"
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"


@dataclass(frozen=True)
class Metric:
    """Rendered result of a metric computation."""

    value: str
    int_value: Optional[int] = None
    style: MetricStyle = MetricStyle.DEFAULT
    highlighted: bool = False
    title: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["style"] = self.style.value
        return data


@dataclass(frozen=True)
class StatisticsSnapshot:
    """Point-in-time counts read from the message store."""

    servers: int = 0
    published_processing: int = 0
    published_succeeded: int = 0
    published_failed: int = 0
    received_processing: int = 0
    received_succeeded: int = 0
    received_failed: int = 0


@runtime_checkable
class SetCardinalityConnection(Protocol):
    """Connection capability for counting the members of a named set."""

    def get_set_count(self, name: str) -> int:
        ...


class Storage(Protocol):
    def get_connection(self) -> ContextManager[Any]:
        """Open a scoped connection; callers must use it as a context manager."""
        ...


class RenderContext:
    """Read-only inputs handed to every metric computation.

    Statistics are either given up front or loaded on first access through
    ``load_statistics``. Loading happens inside whichever computation reads
    them first, so a failing statistics source fails those metrics only.
    A failed load is not cached; the next reader tries again.
    """

    def __init__(
        self,
        storage: Storage,
        statistics: Optional[StatisticsSnapshot] = None,
        load_statistics: Optional[Callable[[], StatisticsSnapshot]] = None,
    ) -> None:
        if statistics is None and load_statistics is None:
            raise ValueError("RenderContext needs statistics or a way to load them.")
        self._storage = storage
        self._statistics = statistics
        self._load_statistics = load_statistics
        self._lock = threading.Lock()

    @property
    def storage(self) -> Storage:
        return self._storage

    @property
    def statistics(self) -> StatisticsSnapshot:
        if self._statistics is None:
            with self._lock:
                if self._statistics is None:
                    self._statistics = self._load_statistics()
        return self._statistics


ComputeFn = Callable[[RenderContext], Optional[Metric]]


@dataclass(frozen=True)
class MetricDefinition:
    """Named metric: a stable id, a label key and a deferred computation.

    ``compute`` may return ``None`` to signal that the metric has nothing to
    show; callers omit it from the page in that case.
    """

    id: str
    label_key: str
    compute: ComputeFn

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Metric definition id must be a non-empty string.")

    def evaluate(self, context: RenderContext) -> Optional[Metric]:
        return self.compute(context)


def format_count(value: int) -> str:
    """Format an integer with thousands separators and no decimals.

    The format is culture-invariant ("1,234" on every host); the process
    locale is not consulted.
    """
    return f"{value:,d}"
