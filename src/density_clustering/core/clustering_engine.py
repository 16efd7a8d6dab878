"""
Clustering Engine - Orchestrates clustering operations.

Main entry point for clustering functionality. Resolves the distance
metric, applies default parameters from settings, runs the DBSCAN
clusterer and packages the outcome as a ClusteringResult.
"""

import logging
import numbers
from typing import Any, Dict, Iterable, Optional, Union

from density_clustering.config.settings_loader import ConfigManager, DBSCANSettings
from density_clustering.core.base_clustering import ClusteringConfig, ClusteringResult
from density_clustering.core.dbscan import DBSCANClusterer, MetricLike
from density_clustering.core.distance import METRICS, DistanceMetric, get_metric
from density_clustering.schemas.data_models import (
    ClusteringRequest,
    ClusteringSummary,
    ClusterOutput,
)
from density_clustering.utils.advanced_logging import (
    LogContext,
    PerformanceLogger,
    configure_logging,
    get_logger,
    timed,
)
from density_clustering.utils.error_handling import InvalidConfigurationError

logger = logging.getLogger(__name__)


class ClusteringEngine:
    """
    Main clustering engine.

    Provides a single entry point for DBSCAN runs with defaults taken from
    DBSCANSettings. Each call builds its own DBSCANClusterer, so one engine
    may serve sequential requests; concurrent callers still need one
    engine (or external locking) per thread since settings are shared.
    """

    # Registry of available distance metrics
    METRICS = METRICS

    def __init__(self, settings: Optional[DBSCANSettings] = None):
        """
        Initialize clustering engine.

        Args:
            settings: Default run parameters (package defaults if None)
        """
        self.settings = settings or DBSCANSettings()
        logger.info(
            f"Initialized ClusteringEngine: epsilon={self.settings.epsilon}, "
            f"min_points={self.settings.min_points}, metric={self.settings.metric}"
        )

    @classmethod
    def from_config(cls, config_path: Optional[str] = None) -> "ClusteringEngine":
        """
        Build an engine from the YAML settings file and configure logging.

        Args:
            config_path: Path to settings file (default search path if None)

        Returns:
            ClusteringEngine using the configured DBSCAN defaults
        """
        if config_path is None:
            settings = ConfigManager.get_settings()
        else:
            settings = ConfigManager.reload_config(config_path)
        configure_logging(
            log_level=settings.logging.level,
            log_format=settings.logging.format,
            log_file=settings.logging.file,
            service_name=settings.service.name,
        )
        return cls(settings.clustering.dbscan)

    def resolve_metric(
        self,
        metric: Optional[Union[str, MetricLike]] = None,
        metric_params: Optional[Dict[str, Any]] = None,
    ) -> MetricLike:
        """
        Turn a metric name into a DistanceMetric; objects and functions pass through.

        Args:
            metric: Registered name, DistanceMetric, callable, or None for the default
            metric_params: Constructor parameters for named metrics

        Returns:
            DistanceMetric instance or callable

        Raises:
            InvalidConfigurationError: Unknown name or unusable metric
        """
        if metric is None:
            return get_metric(
                self.settings.metric, **self._applied_metric_params(None, metric_params)
            )

        if isinstance(metric, str):
            return get_metric(metric, **(metric_params or {}))

        if isinstance(metric, DistanceMetric):
            return metric

        if callable(metric):
            return metric

        raise InvalidConfigurationError(
            f"Distance metric must be a name or callable, got {type(metric).__name__}.",
            details={"metric_type": type(metric).__name__},
        )

    def _applied_metric_params(
        self,
        metric: Optional[Union[str, MetricLike]],
        metric_params: Optional[Dict[str, Any]],
    ) -> Dict[str, Any]:
        """Parameters that reached a named metric; objects and functions take none."""
        if metric is None:
            params = dict(self.settings.metric_params)
            params.update(metric_params or {})
            return params
        if isinstance(metric, str):
            return dict(metric_params or {})
        return {}

    def cluster(
        self,
        values: Iterable[Any],
        epsilon: Optional[float] = None,
        min_points: Optional[int] = None,
        metric: Optional[Union[str, MetricLike]] = None,
        metric_params: Optional[Dict[str, Any]] = None,
    ) -> ClusteringResult:
        """
        Perform DBSCAN clustering.

        Args:
            values: Values to cluster
            epsilon: Neighbourhood radius (settings default if None)
            min_points: Minimum neighbourhood size (settings default if None)
            metric: Metric name, object or function (settings default if None)
            metric_params: Constructor parameters for named metrics

        Returns:
            ClusteringResult with clusters, labels and statistics

        Raises:
            InvalidInputError: Input missing, empty or too small
            InvalidConfigurationError: Bad epsilon, min_points or metric
            MetricError: The distance metric failed during the run
        """
        epsilon = self.settings.epsilon if epsilon is None else epsilon
        min_points = self.settings.min_points if min_points is None else min_points
        distance_metric = self.resolve_metric(metric, metric_params)

        clusterer = DBSCANClusterer(values, min_points, epsilon, distance_metric)
        input_values = clusterer.input_values

        config = ClusteringConfig(
            epsilon=epsilon,
            min_points=min_points,
            metric_name=getattr(clusterer.metric, "name", "custom"),
            metric_params=self._applied_metric_params(metric, metric_params),
        )

        with PerformanceLogger(
            "dbscan_clustering",
            logger=get_logger(__name__),
            item_count=len(input_values),
            epsilon=epsilon,
            min_points=min_points,
            metric=config.metric_name,
        ) as perf:
            clusters = clusterer.perform_clustering()

        result = ClusteringResult(
            input_values,
            clusters,
            config=config,
            processing_time_ms=perf.elapsed_time * 1000.0,
        )

        logger.info(
            f"DBSCAN clustering complete: {result.n_clusters} clusters, "
            f"{result.noise_count} noise values, "
            f"{len(result.shared_members)} values shared between clusters"
        )

        return result

    @timed(operation="cluster_request")
    def cluster_request(self, request: ClusteringRequest) -> ClusteringSummary:
        """
        Run a schema-validated clustering request.

        Args:
            request: ClusteringRequest

        Returns:
            ClusteringSummary with statistics and clusters
        """
        with LogContext.correlation_context(request.request_id):
            result = self.cluster(
                request.values,
                epsilon=request.epsilon,
                min_points=request.min_points,
                metric=request.metric.value if request.metric else None,
                metric_params=request.metric_params or None,
            )

        return ClusteringSummary(
            request_id=request.request_id,
            metric=result.config.metric_name,
            epsilon=result.config.epsilon,
            min_points=result.config.min_points,
            total_items=len(result.input_values),
            clusters_created=result.n_clusters,
            noise=result.noise_count,
            shared_members=len(result.shared_members),
            avg_cluster_size=result.quality_metrics.get("avg_cluster_size", 0.0),
            processing_time_ms=result.processing_time_ms,
            clusters=[
                ClusterOutput(cluster_id=i, size=len(members), members=members)
                for i, members in enumerate(result.clusters)
            ],
        )

    def validate_clustering_config(
        self,
        epsilon: float,
        min_points: int,
        metric: Optional[Union[str, MetricLike]] = None,
    ) -> Dict[str, str]:
        """
        Validate clustering configuration without running anything.

        Args:
            epsilon: Neighbourhood radius
            min_points: Minimum neighbourhood size
            metric: Metric name, object or function (settings default if None)

        Returns:
            Dictionary of validation errors (empty if valid)
        """
        errors = {}

        if isinstance(epsilon, bool) or not isinstance(epsilon, numbers.Real):
            errors["epsilon"] = "Must be a number >= 0"
        elif epsilon < 0:
            errors["epsilon"] = "Must be >= 0"

        if isinstance(min_points, bool) or not isinstance(min_points, numbers.Integral):
            errors["min_points"] = "Must be an integer >= 2"
        elif min_points < 2:
            errors["min_points"] = "Must be >= 2"

        if isinstance(metric, str):
            if metric.lower() not in self.METRICS:
                errors["metric"] = f"Unsupported metric '{metric}'"
        elif metric is not None and not callable(metric):
            errors["metric"] = "Must be a metric name or callable"

        return errors
