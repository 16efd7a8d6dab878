"""
Unit tests for utility modules.

Tests for error_handling and advanced_logging.
"""

import logging
import logging.handlers
from unittest.mock import Mock

import pytest

from density_clustering.utils.advanced_logging import (
    LogContext,
    PerformanceLogger,
    configure_logging,
    get_logger,
    timed,
)
from density_clustering.utils.error_handling import (
    DBSCANClusteringError,
    ErrorKind,
    InvalidConfigurationError,
    InvalidInputError,
    MetricError,
)


@pytest.mark.unit
class TestErrorHandling:
    """Test error handling utilities."""

    def test_error_hierarchy(self):
        for error_class in (InvalidInputError, InvalidConfigurationError, MetricError):
            assert issubclass(error_class, DBSCANClusteringError)

    def test_error_kinds(self):
        assert InvalidInputError("x").kind == ErrorKind.INVALID_INPUT
        assert InvalidConfigurationError("x").kind == ErrorKind.INVALID_CONFIGURATION
        assert MetricError("x").kind == ErrorKind.METRIC_ERROR
        assert DBSCANClusteringError("x").kind is None

    def test_error_code_defaults(self):
        assert InvalidInputError("x").error_code == "invalid_input"
        assert DBSCANClusteringError("x").error_code == "DBSCANClusteringError"
        assert MetricError("x", error_code="CUSTOM").error_code == "CUSTOM"

    def test_to_dict(self):
        error = InvalidConfigurationError("bad epsilon", details={"epsilon": -1})
        data = error.to_dict()

        assert data["error_type"] == "InvalidConfigurationError"
        assert data["error_kind"] == "invalid_configuration"
        assert data["message"] == "bad epsilon"
        assert data["details"] == {"epsilon": -1}
        assert data["timestamp"] > 0
        assert str(error) == "bad epsilon"


@pytest.mark.unit
class TestAdvancedLogging:
    """Test advanced logging utilities."""

    def test_configure_logging(self):
        configure_logging(log_level="WARNING", log_format="console")
        assert logging.getLogger().level == logging.WARNING

        configure_logging(log_level="INFO", log_format="json")
        assert logging.getLogger().level == logging.INFO

    def test_configure_logging_file(self, tmp_path):
        log_file = tmp_path / "logs" / "clustering.log"
        root = logging.getLogger()
        handlers_before = list(root.handlers)

        try:
            configure_logging(log_level="INFO", log_file=str(log_file))
            assert log_file.parent.exists()
            assert any(
                isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers
            )
        finally:
            for handler in root.handlers[:]:
                if handler not in handlers_before:
                    root.removeHandler(handler)
                    handler.close()

    def test_correlation_context(self):
        assert LogContext.get_correlation_id() is None

        with LogContext.correlation_context("req-42"):
            assert LogContext.get_correlation_id() == "req-42"
            with LogContext.correlation_context("req-43"):
                assert LogContext.get_correlation_id() == "req-43"
            assert LogContext.get_correlation_id() == "req-42"

        assert LogContext.get_correlation_id() is None

    def test_get_logger(self):
        assert get_logger(__name__) is not None

    def test_performance_logger_success(self):
        logger = Mock()

        with PerformanceLogger("unit_op", logger=logger, item_count=10, run="a") as perf:
            sum(range(1000))

        assert perf.elapsed_time >= 0
        logger.debug.assert_called_once()
        logger.info.assert_called_once()
        event, = logger.info.call_args.args
        kwargs = logger.info.call_args.kwargs
        assert event == "operation_completed"
        assert kwargs["operation"] == "unit_op"
        assert kwargs["run"] == "a"

    def test_performance_logger_failure(self):
        logger = Mock()

        with pytest.raises(MetricError):
            with PerformanceLogger("unit_op", logger=logger):
                raise MetricError("distance failed")

        logger.error.assert_called_once()
        kwargs = logger.error.call_args.kwargs
        assert kwargs["error_type"] == "MetricError"
        assert kwargs["error"] == "distance failed"

    def test_elapsed_time_before_start(self):
        assert PerformanceLogger("idle", logger=Mock()).elapsed_time == 0.0

    def test_timed_decorator(self):
        @timed(operation="add")
        def add(a, b):
            return a + b

        assert add(2, 3) == 5
        assert add.__name__ == "add"
