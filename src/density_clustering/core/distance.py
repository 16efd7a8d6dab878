"""
Distance Metrics.

The engine treats the metric as an oracle: it only ever asks for the
distance between two input values and compares it against epsilon. Any
callable ``(a, b) -> float`` works; the classes below cover the common
value types (plain numbers, feature vectors, geographic coordinates).
"""

import math
import numbers
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Type

import numpy as np

from density_clustering.utils.error_handling import (
    InvalidConfigurationError,
    MetricError,
)

# Mean Earth radius
KMS_PER_RADIAN = 6371.0088


class DistanceMetric(ABC):
    """
    Abstract distance metric.

    Implementations return a non-negative dissimilarity and raise
    MetricError when the two values cannot be compared. Symmetry and the
    triangle inequality are not checked by the engine.
    """

    name: str = "custom"

    @abstractmethod
    def calculate_distance(self, a: Any, b: Any) -> float:
        """
        Compute the distance between two values.

        Args:
            a: First value
            b: Second value

        Returns:
            Non-negative distance

        Raises:
            MetricError: If the values are not distance-comparable
        """
        pass

    def __call__(self, a: Any, b: Any) -> float:
        return self.calculate_distance(a, b)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class FunctionMetric(DistanceMetric):
    """Adapts a plain function to the DistanceMetric contract."""

    def __init__(self, func: Callable[[Any, Any], float]):
        self.func = func
        self.name = getattr(func, "__name__", "function")

    def calculate_distance(self, a: Any, b: Any) -> float:
        return self.func(a, b)

    def __repr__(self) -> str:
        return f"FunctionMetric({self.name})"


class AbsoluteDifferenceMetric(DistanceMetric):
    """Absolute difference between two real numbers."""

    name = "absolute"

    def calculate_distance(self, a: Any, b: Any) -> float:
        try:
            return abs(float(a) - float(b))
        except (TypeError, ValueError) as e:
            raise MetricError(
                f"Cannot compute numeric distance between {a!r} and {b!r}",
                details={"metric": self.name},
            ) from e


def _as_vector(value: Any, metric_name: str) -> np.ndarray:
    """Convert a value to a 1-D float array or raise MetricError."""
    try:
        vector = np.asarray(value, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise MetricError(
            f"Value {value!r} is not a numeric vector",
            details={"metric": metric_name},
        ) from e
    if vector.ndim != 1:
        raise MetricError(
            f"Expected a 1-D vector, got shape {vector.shape}",
            details={"metric": metric_name},
        )
    return vector


def _as_vector_pair(a: Any, b: Any, metric_name: str):
    va = _as_vector(a, metric_name)
    vb = _as_vector(b, metric_name)
    if va.shape != vb.shape:
        raise MetricError(
            f"Vector dimensions differ: {va.shape[0]} vs {vb.shape[0]}",
            details={"metric": metric_name},
        )
    return va, vb


class MinkowskiMetric(DistanceMetric):
    """
    Minkowski distance of order p between equal-length vectors.

    ``p=math.inf`` gives the Chebyshev (maximum coordinate) distance.
    """

    name = "minkowski"

    def __init__(self, p: float = 2.0):
        if (
            isinstance(p, bool)
            or not isinstance(p, numbers.Real)
            or math.isnan(p)
            or p < 1
        ):
            raise InvalidConfigurationError(
                f"Minkowski order must be >= 1. Current value: {p}",
                details={"p": p},
            )
        self.p = p

    def calculate_distance(self, a: Any, b: Any) -> float:
        va, vb = _as_vector_pair(a, b, self.name)
        if np.isinf(self.p):
            return float(np.max(np.abs(va - vb), initial=0.0))
        return float(np.sum(np.abs(va - vb) ** self.p) ** (1.0 / self.p))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(p={self.p})"


class EuclideanMetric(MinkowskiMetric):
    """Straight-line distance between feature vectors."""

    name = "euclidean"

    def __init__(self):
        super().__init__(p=2.0)

    def calculate_distance(self, a: Any, b: Any) -> float:
        va, vb = _as_vector_pair(a, b, self.name)
        return float(np.linalg.norm(va - vb))


class ManhattanMetric(MinkowskiMetric):
    """Sum of absolute coordinate differences."""

    name = "manhattan"

    def __init__(self):
        super().__init__(p=1.0)

    def calculate_distance(self, a: Any, b: Any) -> float:
        va, vb = _as_vector_pair(a, b, self.name)
        return float(np.sum(np.abs(va - vb)))


class CosineMetric(DistanceMetric):
    """Cosine distance (1 - cosine similarity), in [0, 2]."""

    name = "cosine"

    def calculate_distance(self, a: Any, b: Any) -> float:
        va, vb = _as_vector_pair(a, b, self.name)
        norm_a = np.linalg.norm(va)
        norm_b = np.linalg.norm(vb)
        if norm_a == 0 or norm_b == 0:
            raise MetricError(
                "Cosine distance is undefined for zero vectors",
                details={"metric": self.name},
            )
        similarity = float(np.dot(va, vb) / (norm_a * norm_b))
        # Rounding can push similarity marginally outside [-1, 1]
        return 1.0 - max(-1.0, min(1.0, similarity))


class HaversineMetric(DistanceMetric):
    """
    Great-circle distance in kilometres.

    Values are ``(latitude, longitude)`` pairs in degrees.
    """

    name = "haversine"

    def __init__(self, radius_km: float = KMS_PER_RADIAN):
        self.radius_km = radius_km

    def _coordinates(self, value: Any):
        vector = _as_vector(value, self.name)
        if vector.shape != (2,):
            raise MetricError(
                f"Expected (latitude, longitude), got {value!r}",
                details={"metric": self.name},
            )
        lat, lon = vector
        if not -90.0 <= lat <= 90.0 or not -180.0 <= lon <= 180.0:
            raise MetricError(
                f"Coordinate out of range: {value!r}",
                details={"metric": self.name},
            )
        return math.radians(lat), math.radians(lon)

    def calculate_distance(self, a: Any, b: Any) -> float:
        lat1, lon1 = self._coordinates(a)
        lat2, lon2 = self._coordinates(b)

        h = (
            math.sin((lat2 - lat1) / 2) ** 2
            + math.cos(lat1) * math.cos(lat2) * math.sin((lon2 - lon1) / 2) ** 2
        )
        return 2 * self.radius_km * math.asin(min(1.0, math.sqrt(h)))

    def __repr__(self) -> str:
        return f"HaversineMetric(radius_km={self.radius_km})"


# Registry of available metrics
METRICS: Dict[str, Type[DistanceMetric]] = {
    "absolute": AbsoluteDifferenceMetric,
    "euclidean": EuclideanMetric,
    "manhattan": ManhattanMetric,
    "minkowski": MinkowskiMetric,
    "cosine": CosineMetric,
    "haversine": HaversineMetric,
}


def get_metric(name: str, **params: Any) -> DistanceMetric:
    """
    Instantiate a registered metric by name.

    Args:
        name: Metric name (case-insensitive)
        **params: Constructor parameters (e.g. p for minkowski)

    Returns:
        DistanceMetric instance

    Raises:
        InvalidConfigurationError: If the name is unknown or params are invalid
    """
    key = name.lower()
    if key not in METRICS:
        raise InvalidConfigurationError(
            f"Unsupported distance metric '{name}'. Supported: {list(METRICS.keys())}",
            details={"metric": name},
        )
    try:
        return METRICS[key](**params)
    except TypeError as e:
        raise InvalidConfigurationError(
            f"Invalid parameters for metric '{key}': {params}",
            details={"metric": key, "params": params},
        ) from e
