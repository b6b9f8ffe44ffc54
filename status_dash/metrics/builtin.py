import logging
from typing import Callable, List, Optional

from ..resources import get_string
from .base import (
    Metric,
    MetricDefinition,
    MetricStyle,
    RenderContext,
    SetCardinalityConnection,
    StatisticsSnapshot,
    format_count,
)
from .registry import MetricRegistry

logger = logging.getLogger(__name__)

RETRY_SET_NAME = "retries"

CountGetter = Callable[[StatisticsSnapshot], int]


def _server_count(context: RenderContext) -> Metric:
    servers = context.statistics.servers
    if servers == 0:
        return Metric(
            format_count(servers),
            style=MetricStyle.WARNING,
            highlighted=True,
            title=get_string("Metrics_NoActiveServers"),
        )
    return Metric(format_count(servers))


def _retries_count(context: RenderContext) -> Optional[Metric]:
    with context.storage.get_connection() as connection:
        if not isinstance(connection, SetCardinalityConnection):
            logger.debug(
                "Storage connection %s cannot count sets; retries metric unsupported",
                type(connection).__name__,
            )
            return None
        retry_count = connection.get_set_count(RETRY_SET_NAME)

    return Metric(
        format_count(retry_count),
        style=MetricStyle.WARNING if retry_count > 0 else MetricStyle.DEFAULT,
    )


def _failed_count_or_null(count_of: CountGetter) -> Callable[[RenderContext], Optional[Metric]]:
    def compute(context: RenderContext) -> Optional[Metric]:
        failed = count_of(context.statistics)
        if failed <= 0:
            return None
        text = format_count(failed)
        return Metric(
            text,
            style=MetricStyle.DANGER,
            highlighted=True,
            title=get_string("Metrics_FailedCountOrNull").format(text),
        )

    return compute


def _processing_count(count_of: CountGetter) -> Callable[[RenderContext], Metric]:
    def compute(context: RenderContext) -> Metric:
        processing = count_of(context.statistics)
        return Metric(
            format_count(processing),
            style=MetricStyle.WARNING if processing > 0 else MetricStyle.DEFAULT,
        )

    return compute


def _succeeded_count(count_of: CountGetter) -> Callable[[RenderContext], Metric]:
    def compute(context: RenderContext) -> Metric:
        succeeded = count_of(context.statistics)
        return Metric(format_count(succeeded), int_value=succeeded)

    return compute


def _failed_count(count_of: CountGetter) -> Callable[[RenderContext], Metric]:
    def compute(context: RenderContext) -> Metric:
        failed = count_of(context.statistics)
        return Metric(
            format_count(failed),
            int_value=failed,
            style=MetricStyle.DANGER if failed > 0 else MetricStyle.DEFAULT,
            highlighted=failed > 0,
        )

    return compute


SERVER_COUNT = MetricDefinition("servers:count", "Metrics_Servers", _server_count)
RETRIES_COUNT = MetricDefinition("retries:count", "Metrics_Retries", _retries_count)

PUBLISHED_FAILED_COUNT_OR_NULL = MetricDefinition(
    "published_failed:count-or-null",
    "Metrics_FailedJobs",
    _failed_count_or_null(lambda stats: stats.published_failed),
)
RECEIVED_FAILED_COUNT_OR_NULL = MetricDefinition(
    "received_failed:count-or-null",
    "Metrics_FailedJobs",
    _failed_count_or_null(lambda stats: stats.received_failed),
)

PUBLISHED_PROCESSING_COUNT = MetricDefinition(
    "published_processing:count",
    "Metrics_ProcessingJobs",
    _processing_count(lambda stats: stats.published_processing),
)
RECEIVED_PROCESSING_COUNT = MetricDefinition(
    "received_processing:count",
    "Metrics_ProcessingJobs",
    _processing_count(lambda stats: stats.received_processing),
)

PUBLISHED_SUCCEEDED_COUNT = MetricDefinition(
    "published_succeeded:count",
    "Metrics_SucceededJobs",
    _succeeded_count(lambda stats: stats.published_succeeded),
)
RECEIVED_SUCCEEDED_COUNT = MetricDefinition(
    "received_succeeded:count",
    "Metrics_SucceededJobs",
    _succeeded_count(lambda stats: stats.received_succeeded),
)

PUBLISHED_FAILED_COUNT = MetricDefinition(
    "published_failed:count",
    "Metrics_FailedJobs",
    _failed_count(lambda stats: stats.published_failed),
)
RECEIVED_FAILED_COUNT = MetricDefinition(
    "received_failed:count",
    "Metrics_FailedJobs",
    _failed_count(lambda stats: stats.received_failed),
)


DEFAULT_DEFINITIONS: List[MetricDefinition] = [
    SERVER_COUNT,
    RETRIES_COUNT,
    PUBLISHED_FAILED_COUNT_OR_NULL,
    RECEIVED_FAILED_COUNT_OR_NULL,
    PUBLISHED_PROCESSING_COUNT,
    RECEIVED_PROCESSING_COUNT,
    PUBLISHED_SUCCEEDED_COUNT,
    RECEIVED_SUCCEEDED_COUNT,
    PUBLISHED_FAILED_COUNT,
    RECEIVED_FAILED_COUNT,
]


def create_default_registry() -> MetricRegistry:
    """Build a registry seeded with the built-in metrics."""
    registry = MetricRegistry()
    for definition in DEFAULT_DEFINITIONS:
        registry.register(definition)
    return registry
