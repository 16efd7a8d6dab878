"""
Core clustering module.

Exports:
- DBSCANClusterer: Density-based clustering over a caller-supplied metric
- ClusteringEngine: Orchestration with settings defaults and timing
- ClusteringResult: Result container
- ClusteringConfig: Configuration container
- Distance metrics and the metric registry
"""

from density_clustering.core.base_clustering import (
    ClusteringConfig,
    ClusteringResult,
)
from density_clustering.core.distance import (
    METRICS,
    AbsoluteDifferenceMetric,
    CosineMetric,
    DistanceMetric,
    EuclideanMetric,
    FunctionMetric,
    HaversineMetric,
    ManhattanMetric,
    MinkowskiMetric,
    get_metric,
)
from density_clustering.core.dbscan import DBSCANClusterer
from density_clustering.core.clustering_engine import ClusteringEngine

__all__ = [
    "DBSCANClusterer",
    "ClusteringEngine",
    "ClusteringResult",
    "ClusteringConfig",
    "DistanceMetric",
    "FunctionMetric",
    "AbsoluteDifferenceMetric",
    "MinkowskiMetric",
    "EuclideanMetric",
    "ManhattanMetric",
    "CosineMetric",
    "HaversineMetric",
    "METRICS",
    "get_metric",
]
