"""
Error Handling Module

Provides the exception hierarchy raised by the clustering engine:
- A base error carrying code, details and timestamp
- One subclass per failure kind (input, configuration, metric)
"""

import time
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Failure kinds reported by a clustering run."""

    INVALID_INPUT = "invalid_input"
    INVALID_CONFIGURATION = "invalid_configuration"
    METRIC_ERROR = "metric_error"


# =============================================================================
# Custom Exception Hierarchy
# =============================================================================


class DBSCANClusteringError(Exception):
    """Base exception for all clustering errors."""

    kind: Optional[ErrorKind] = None

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or (
            self.kind.value if self.kind else self.__class__.__name__
        )
        self.details = details or {}
        self.timestamp = time.time()

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/API responses."""
        return {
            "error_type": self.__class__.__name__,
            "error_kind": self.kind.value if self.kind else None,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp,
        }


class InvalidInputError(DBSCANClusteringError):
    """Input values are missing, empty, too few or unusable."""

    kind = ErrorKind.INVALID_INPUT


class InvalidConfigurationError(DBSCANClusteringError):
    """Distance metric, epsilon or minimum member count is invalid."""

    kind = ErrorKind.INVALID_CONFIGURATION


class MetricError(DBSCANClusteringError):
    """The distance metric failed to compute a distance."""

    kind = ErrorKind.METRIC_ERROR
