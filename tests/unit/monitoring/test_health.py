"""Unit tests for health and readiness checks."""
from unittest.mock import MagicMock

import pytest

from unified_replication.monitoring.health import HealthChecker, ReadinessChecker


def engine_with(operation_count=0, error_count=0):
    engine = MagicMock()
    engine.get_metrics.return_value = {
        "operation_count": operation_count,
        "error_count": error_count,
        "cache_entries": 2,
    }
    return engine


class TestHealthChecker:
    def test_healthy(self):
        checker = HealthChecker(engine_with(operation_count=10, error_count=2))

        status = checker.check()

        assert status.healthy
        assert status.message == "All systems operational"
        assert status.error_rate == pytest.approx(0.2)
        assert status.details["error_rate"] == "20.00%"
        assert checker.check_count == 1
        assert checker.last_status is status

    def test_high_error_rate(self):
        status = HealthChecker(engine_with(operation_count=4, error_count=3)).check()

        assert not status.healthy
        assert status.message == "High error rate: 75.00%"

    def test_half_failed_is_still_healthy(self):
        assert HealthChecker(engine_with(operation_count=4, error_count=2)).check().healthy

    def test_no_operations(self):
        status = HealthChecker(engine_with()).check()
        assert status.healthy
        assert status.error_rate == 0.0

    def test_missing_engine(self):
        status = HealthChecker().check()
        assert not status.healthy
        assert status.message == "Controller engine not available"

    def test_missing_component(self):
        engine = engine_with()
        engine.discovery = None

        status = HealthChecker(engine).check()

        assert not status.healthy
        assert status.message == "Discovery engine not available"

    def test_to_dict(self):
        result = HealthChecker(engine_with(operation_count=1)).check().to_dict()
        assert result["healthy"] is True
        assert result["operation_count"] == 1
        assert result["details"]["cache_entries"] == 2


class TestReadinessChecker:
    def test_not_ready_until_marked(self):
        checker = ReadinessChecker(engine_with())
        assert not checker.check()

        checker.set_ready(True)
        assert checker.is_ready()
        assert checker.check()

    def test_requires_engine_components(self):
        engine = engine_with()
        engine.registry = None
        checker = ReadinessChecker(engine)
        checker.set_ready(True)

        assert not checker.check()

    def test_requires_engine(self):
        checker = ReadinessChecker()
        checker.set_ready(True)
        assert not checker.check()
