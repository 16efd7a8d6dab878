"""
DBSCAN Clustering Engine.

Density-Based Spatial Clustering of Applications with Noise over an
arbitrary, caller-supplied distance metric. Values are clustered when they
are mutually reachable through chains of epsilon-neighbourhoods that hold
at least ``min_points`` members.

Reference:
    Ester, Kriegel, Sander, Xu (1996). A density-based algorithm for
    discovering clusters in large spatial databases with noise. KDD-96,
    pp. 226-231.

Neighbourhood queries are exhaustive scans: the metric is opaque, so no
spatial index applies.

Note on membership: while a cluster grows, a merged neighbourhood is only
de-duplicated against the cluster being built, and the visited set only
gates expansion from a value, not its inclusion. A border value reached
from two clusters therefore appears in both, and the result is not
guaranteed to partition the input.
"""

import logging
import numbers
from typing import Any, Callable, Generic, Iterable, List, Set, TypeVar, Union

from density_clustering.core.distance import DistanceMetric, FunctionMetric
from density_clustering.utils.error_handling import (
    DBSCANClusteringError,
    InvalidConfigurationError,
    InvalidInputError,
    MetricError,
)

logger = logging.getLogger(__name__)

V = TypeVar("V")

MetricLike = Union[DistanceMetric, Callable[[Any, Any], float]]


class DBSCANClusterer(Generic[V]):
    """
    DBSCAN clusterer over hashable values.

    Usage:
        clusterer = DBSCANClusterer(values, min_points=5, epsilon=2.0,
                                    metric=AbsoluteDifferenceMetric())
        clusters = clusterer.perform_clustering()

    Input values, min_points, epsilon and the metric persist across calls
    to perform_clustering(); the visited set is rebuilt on every call.
    Instances are not safe for concurrent use: use one clusterer per
    concurrent run.
    """

    def __init__(
        self,
        input_values: Iterable[V],
        min_points: int,
        epsilon: float,
        metric: MetricLike,
    ):
        """
        Create a clusterer.

        Args:
            input_values: Values to be clustered (copied)
            min_points: Minimum neighbourhood size for a cluster seed
            epsilon: Maximum distance for two values to be neighbours
            metric: DistanceMetric instance or function (a, b) -> float

        Raises:
            InvalidInputError: If input_values is None or not iterable
            InvalidConfigurationError: If metric is None or not callable
        """
        self._input_values: List[V] = []
        self._min_points = 2
        self._epsilon = 1.0
        self._metric: DistanceMetric = None
        self._visited: Set[V] = set()

        self.set_input_values(input_values)
        self.set_min_points(min_points)
        self.set_epsilon(epsilon)
        self.set_distance_metric(metric)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_input_values(self, input_values: Iterable[V]) -> None:
        """Replace the input values. The collection is copied."""
        if input_values is None:
            raise InvalidInputError("List of input values is null.")
        try:
            self._input_values = list(input_values)
        except TypeError as e:
            raise InvalidInputError(
                f"Input values must be an iterable collection, got {type(input_values).__name__}."
            ) from e

    def set_min_points(self, min_points: int) -> None:
        """Set the minimum neighbourhood size. Checked when clustering starts."""
        self._min_points = min_points

    def set_epsilon(self, epsilon: float) -> None:
        """Set the neighbourhood radius. Checked when clustering starts."""
        self._epsilon = epsilon

    def set_distance_metric(self, metric: MetricLike) -> None:
        """Set the distance metric; plain functions are wrapped."""
        if metric is None:
            raise InvalidConfigurationError("Distance metric has not been specified (null).")
        if isinstance(metric, DistanceMetric):
            self._metric = metric
        elif callable(metric):
            self._metric = FunctionMetric(metric)
        else:
            raise InvalidConfigurationError(
                f"Distance metric must be callable, got {type(metric).__name__}.",
                details={"metric_type": type(metric).__name__},
            )

    @property
    def input_values(self) -> List[V]:
        return list(self._input_values)

    @property
    def min_points(self) -> int:
        return self._min_points

    @property
    def epsilon(self) -> float:
        return self._epsilon

    @property
    def metric(self) -> DistanceMetric:
        return self._metric

    # ------------------------------------------------------------------
    # Clustering
    # ------------------------------------------------------------------

    def _validate(self) -> None:
        """Check run preconditions in order; the first violation is raised."""
        values = self._input_values

        if values is None:
            raise InvalidInputError("List of input values is null.")

        if len(values) == 0:
            raise InvalidInputError("List of input values is empty.")

        if len(values) < 2:
            raise InvalidInputError(
                "Less than two input values cannot be clustered. "
                f"Number of input values: {len(values)}",
                details={"count": len(values)},
            )

        if isinstance(self._epsilon, bool) or not isinstance(self._epsilon, numbers.Real):
            raise InvalidConfigurationError(
                "Maximum distance of input values must be a number. "
                f"Current value: {self._epsilon!r}",
                details={"epsilon": self._epsilon},
            )

        if self._epsilon < 0:
            raise InvalidConfigurationError(
                "Maximum distance of input values cannot be negative. "
                f"Current value: {self._epsilon}",
                details={"epsilon": self._epsilon},
            )

        if isinstance(self._min_points, bool) or not isinstance(self._min_points, numbers.Integral):
            raise InvalidConfigurationError(
                "Minimum number of cluster members must be an integer. "
                f"Current value: {self._min_points!r}",
                details={"min_points": self._min_points},
            )

        if self._min_points < 2:
            raise InvalidConfigurationError(
                "Clusters with less than 2 members don't make sense. "
                f"Current value: {self._min_points}",
                details={"min_points": self._min_points},
            )

        for position, value in enumerate(values):
            try:
                hash(value)
            except TypeError as e:
                raise InvalidInputError(
                    f"Input value at position {position} is not hashable "
                    f"({type(value).__name__}); use tuples for vectors.",
                    details={"position": position},
                ) from e

    def _distance(self, a: V, b: V) -> float:
        try:
            distance = self._metric(a, b)
        except DBSCANClusteringError:
            raise
        except Exception as e:
            raise MetricError(
                f"Distance computation failed for {a!r} and {b!r}: {e}",
                details={"metric": repr(self._metric)},
            ) from e

        if isinstance(distance, bool) or not isinstance(distance, numbers.Real):
            raise MetricError(
                f"Distance between {a!r} and {b!r} is not a number: {distance!r}",
                details={"metric": repr(self._metric)},
            )
        return distance

    def _get_neighbours(self, value: V) -> List[V]:
        """All input values within epsilon of value, in input order (value included)."""
        return [
            candidate
            for candidate in self._input_values
            if self._distance(value, candidate) <= self._epsilon
        ]

    @staticmethod
    def _merge_right_to_left(
        left: List[V], left_members: Set[V], right: List[V]
    ) -> None:
        """Append every element of right not already present in left."""
        for value in right:
            if value not in left_members:
                left.append(value)
                left_members.add(value)

    def perform_clustering(self) -> List[List[V]]:
        """
        Run DBSCAN over the current input values.

        Returns:
            Clusters in completion order, each a list of member values.
            Values that never reach a dense neighbourhood are omitted.

        Raises:
            InvalidInputError: Input missing, empty, smaller than 2 or unhashable
            InvalidConfigurationError: epsilon < 0 or min_points < 2
            MetricError: The distance metric failed; the run is aborted
        """
        self._validate()

        clusters: List[List[V]] = []
        self._visited.clear()

        logger.debug(
            f"Starting DBSCAN on {len(self._input_values)} values "
            f"(epsilon={self._epsilon}, min_points={self._min_points}, metric={self._metric!r})"
        )

        for p in self._input_values:
            if p in self._visited:
                continue
            self._visited.add(p)

            neighbours = self._get_neighbours(p)
            if len(neighbours) < self._min_points:
                continue

            # The working list doubles as the expansion queue; it may grow
            # past the cursor while being traversed.
            members = set(neighbours)
            cursor = 0
            while cursor < len(neighbours):
                r = neighbours[cursor]
                if r not in self._visited:
                    self._visited.add(r)
                    individual_neighbours = self._get_neighbours(r)
                    if len(individual_neighbours) >= self._min_points:
                        self._merge_right_to_left(neighbours, members, individual_neighbours)
                cursor += 1

            clusters.append(neighbours)
            logger.debug(f"Cluster {len(clusters) - 1} completed with {len(neighbours)} members")

        logger.info(
            f"DBSCAN found {len(clusters)} clusters in {len(self._input_values)} values"
        )
        return clusters
