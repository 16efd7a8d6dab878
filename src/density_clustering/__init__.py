"""Density-based (DBSCAN) clustering over caller-defined distance metrics."""

from density_clustering.core import (
    ClusteringEngine,
    ClusteringResult,
    DBSCANClusterer,
    DistanceMetric,
)
from density_clustering.utils.error_handling import (
    DBSCANClusteringError,
    ErrorKind,
    InvalidConfigurationError,
    InvalidInputError,
    MetricError,
)

__version__ = "0.1.0"

__all__ = [
    "DBSCANClusterer",
    "ClusteringEngine",
    "ClusteringResult",
    "DistanceMetric",
    "DBSCANClusteringError",
    "ErrorKind",
    "InvalidInputError",
    "InvalidConfigurationError",
    "MetricError",
]
