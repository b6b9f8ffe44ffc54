import logging
import threading
from typing import Dict, List

from .base import MetricDefinition

logger = logging.getLogger(__name__)


class MetricRegistry:
    """Thread-safe catalog of metric definitions keyed by id.

    Registration inserts or replaces; readers always get a detached list.
    """

    def __init__(self) -> None:
        self._definitions: Dict[str, MetricDefinition] = {}
        self._lock = threading.Lock()

    def register(self, definition: MetricDefinition) -> None:
        if definition is None:
            raise ValueError("Metric definition must not be None.")
        if not isinstance(definition, MetricDefinition):
            raise TypeError(
                f"Expected MetricDefinition, got {type(definition).__name__}."
            )
        with self._lock:
            replaced = definition.id in self._definitions
            self._definitions[definition.id] = definition
        if replaced:
            logger.debug("Replaced metric definition %r", definition.id)

    def all(self) -> List[MetricDefinition]:
        with self._lock:
            return list(self._definitions.values())

    def get(self, metric_id: str) -> MetricDefinition:
        with self._lock:
            try:
                return self._definitions[metric_id]
            except KeyError:
                raise KeyError(f"Metric '{metric_id}' is not registered.") from None

    def ids(self) -> List[str]:
        with self._lock:
            return sorted(self._definitions)

    def __contains__(self, metric_id: object) -> bool:
        with self._lock:
            return metric_id in self._definitions

    def __len__(self) -> int:
        with self._lock:
            return len(self._definitions)
