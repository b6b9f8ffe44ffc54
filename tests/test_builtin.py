"""Tests for status_dash.metrics.builtin — styling policy of each built-in metric."""

import pytest

from status_dash.metrics import builtin
from status_dash.metrics.base import MetricDefinition, MetricStyle
from status_dash.metrics.builtin import create_default_registry


class TestDefaultRegistry:
    def test_ten_builtins(self):
        registry = create_default_registry()
        assert registry.ids() == sorted(
            [
                "servers:count",
                "retries:count",
                "published_failed:count-or-null",
                "received_failed:count-or-null",
                "published_processing:count",
                "received_processing:count",
                "published_succeeded:count",
                "received_succeeded:count",
                "published_failed:count",
                "received_failed:count",
            ]
        )

    def test_registries_are_independent(self):
        first = create_default_registry()
        second = create_default_registry()
        first.register(MetricDefinition("extra:count", "Extra", lambda c: None))
        assert "extra:count" in first
        assert "extra:count" not in second


class TestServerCount:
    def test_no_servers_warns(self, make_context):
        metric = builtin.SERVER_COUNT.evaluate(make_context(servers=0))
        assert metric.value == "0"
        assert metric.style is MetricStyle.WARNING
        assert metric.highlighted is True
        assert metric.title

    def test_servers_present(self, make_context):
        metric = builtin.SERVER_COUNT.evaluate(make_context(servers=5))
        assert metric.value == "5"
        assert metric.style is MetricStyle.DEFAULT
        assert metric.highlighted is False
        assert not metric.title
        assert metric.int_value is None


class TestRetriesCount:
    def test_pending_retries_warn(self, make_context, make_storage):
        storage = make_storage(sets={"retries": 1500})
        metric = builtin.RETRIES_COUNT.evaluate(make_context(storage=storage))
        assert metric.value == "1,500"
        assert metric.style is MetricStyle.WARNING
        assert storage.events == ["open", "close"]

    def test_no_retries(self, make_context, make_storage):
        storage = make_storage(sets={"other": 3})
        metric = builtin.RETRIES_COUNT.evaluate(make_context(storage=storage))
        assert metric.value == "0"
        assert metric.style is MetricStyle.DEFAULT

    def test_unsupported_connection_returns_none(self, make_context, make_storage):
        storage = make_storage(capable=False)
        assert builtin.RETRIES_COUNT.evaluate(make_context(storage=storage)) is None
        assert storage.events == ["open", "close"]

    def test_storage_failure_propagates_and_releases(self, make_context, make_storage):
        storage = make_storage(error=ConnectionError("storage down"))
        with pytest.raises(ConnectionError):
            builtin.RETRIES_COUNT.evaluate(make_context(storage=storage))
        assert storage.events == ["open", "close"]


class TestFailedCountOrNull:
    @pytest.mark.parametrize(
        "definition,field",
        [
            (builtin.PUBLISHED_FAILED_COUNT_OR_NULL, "published_failed"),
            (builtin.RECEIVED_FAILED_COUNT_OR_NULL, "received_failed"),
        ],
    )
    def test_zero_returns_none(self, make_context, definition, field):
        assert definition.evaluate(make_context(**{field: 0})) is None

    @pytest.mark.parametrize(
        "definition,field",
        [
            (builtin.PUBLISHED_FAILED_COUNT_OR_NULL, "published_failed"),
            (builtin.RECEIVED_FAILED_COUNT_OR_NULL, "received_failed"),
        ],
    )
    def test_failures_are_danger(self, make_context, definition, field):
        metric = definition.evaluate(make_context(**{field: 1234}))
        assert metric.value == "1,234"
        assert metric.style is MetricStyle.DANGER
        assert metric.highlighted is True
        assert "1,234" in metric.title

    def test_reads_only_its_channel(self, make_context):
        context = make_context(published_failed=0, received_failed=7)
        assert builtin.PUBLISHED_FAILED_COUNT_OR_NULL.evaluate(context) is None
        assert builtin.RECEIVED_FAILED_COUNT_OR_NULL.evaluate(context).value == "7"


class TestProcessingCount:
    def test_processing_warns(self, make_context):
        metric = builtin.PUBLISHED_PROCESSING_COUNT.evaluate(make_context(published_processing=3))
        assert metric.style is MetricStyle.WARNING
        assert metric.highlighted is False
        assert metric.title is None

    def test_idle_is_default(self, make_context):
        metric = builtin.RECEIVED_PROCESSING_COUNT.evaluate(make_context(received_processing=0))
        assert metric.value == "0"
        assert metric.style is MetricStyle.DEFAULT


class TestSucceededCount:
    def test_carries_int_value(self, make_context):
        metric = builtin.PUBLISHED_SUCCEEDED_COUNT.evaluate(
            make_context(published_succeeded=2_000_000)
        )
        assert metric.value == "2,000,000"
        assert metric.int_value == 2_000_000
        assert metric.style is MetricStyle.DEFAULT

    def test_received(self, make_context):
        metric = builtin.RECEIVED_SUCCEEDED_COUNT.evaluate(make_context(received_succeeded=0))
        assert metric.int_value == 0
        assert metric.style is MetricStyle.DEFAULT


class TestFailedCount:
    def test_zero_still_rendered(self, make_context):
        metric = builtin.PUBLISHED_FAILED_COUNT.evaluate(make_context(published_failed=0))
        assert metric is not None
        assert metric.style is MetricStyle.DEFAULT
        assert metric.highlighted is False
        assert metric.int_value == 0

    def test_failures_are_danger(self, make_context):
        metric = builtin.RECEIVED_FAILED_COUNT.evaluate(make_context(received_failed=12))
        assert metric.style is MetricStyle.DANGER
        assert metric.highlighted is True
        assert metric.int_value == 12
        assert metric.title is None
