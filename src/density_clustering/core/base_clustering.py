"""
Clustering configuration and result containers.

ClusteringResult wraps the raw cluster lists returned by the DBSCAN
clusterer with per-position labels and summary statistics. Because a
value may belong to more than one cluster, labels report the first
cluster that contains the value.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence


@dataclass
class ClusteringConfig:
    """Configuration for a single clustering run."""

    epsilon: float
    min_points: int
    metric_name: str = "absolute"
    metric_params: Dict[str, Any] = field(default_factory=dict)


class ClusteringResult:
    """Results from clustering operation."""

    def __init__(
        self,
        input_values: Sequence[Any],
        clusters: List[List[Any]],
        config: Optional[ClusteringConfig] = None,
        processing_time_ms: float = 0.0,
    ):
        self.input_values = list(input_values)
        self.clusters = clusters
        self.config = config
        self.processing_time_ms = processing_time_ms

        self.memberships = self._build_memberships(clusters)
        self.cluster_labels = [
            self.memberships[value][0] if value in self.memberships else -1
            for value in self.input_values
        ]
        self.n_clusters = len(clusters)
        self.noise_count = self.cluster_labels.count(-1)
        self.shared_members = [
            value for value, cluster_ids in self.memberships.items()
            if len(cluster_ids) > 1
        ]
        self.quality_metrics = self._calculate_quality_metrics()

    @staticmethod
    def _build_memberships(clusters: List[List[Any]]) -> Dict[Any, List[int]]:
        """Map each clustered value to the ids of the clusters holding it."""
        memberships: Dict[Any, List[int]] = {}
        for cluster_id, members in enumerate(clusters):
            for value in members:
                cluster_ids = memberships.setdefault(value, [])
                if not cluster_ids or cluster_ids[-1] != cluster_id:
                    cluster_ids.append(cluster_id)
        return memberships

    def _calculate_quality_metrics(self) -> Dict[str, float]:
        if not self.clusters:
            return {"clustered_ratio": 0.0}

        sizes = [len(members) for members in self.clusters]
        total = len(self.input_values)
        return {
            "avg_cluster_size": float(sum(sizes) / len(sizes)),
            "max_cluster_size": float(max(sizes)),
            "min_cluster_size": float(min(sizes)),
            "clustered_ratio": float((total - self.noise_count) / total) if total else 0.0,
        }

    @property
    def labels(self) -> List[int]:
        """Alias for cluster_labels."""
        return self.cluster_labels

    @property
    def noise(self) -> List[Any]:
        """Input values that ended up in no cluster, in input order."""
        return [
            value for value, label in zip(self.input_values, self.cluster_labels)
            if label == -1
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "n_clusters": self.n_clusters,
            "noise_count": self.noise_count,
            "shared_member_count": len(self.shared_members),
            "quality_metrics": self.quality_metrics,
            "total_items": len(self.input_values),
            "processing_time_ms": self.processing_time_ms,
        }
