"""
data_models.py

Pydantic data models for the density clustering package.
Defines request/response schemas for clustering runs.

Schema Design:
- Input: values plus optional run parameters (defaults come from settings)
- Output: summary statistics plus the clusters themselves
"""

from typing import List, Dict, Any, Optional
from datetime import datetime, timezone
from enum import Enum
from pydantic import BaseModel, Field, field_validator


# =============================================================================
# ENUMS
# =============================================================================


class MetricName(str, Enum):
    """Registered distance metrics."""

    ABSOLUTE = "absolute"
    EUCLIDEAN = "euclidean"
    MANHATTAN = "manhattan"
    MINKOWSKI = "minkowski"
    COSINE = "cosine"
    HAVERSINE = "haversine"


def _freeze(value: Any) -> Any:
    """Turn JSON lists (vectors, coordinates) into hashable tuples."""
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


# =============================================================================
# REQUEST / RESPONSE MODELS
# =============================================================================


class ClusteringRequest(BaseModel):
    """Request to cluster a collection of values."""

    request_id: Optional[str] = Field(None, description="Optional id used as log correlation id")
    values: List[Any] = Field(..., description="Values to cluster (numbers, vectors or (lat, lon) pairs)")
    epsilon: Optional[float] = Field(None, description="Neighbourhood radius (defaults to settings)")
    min_points: Optional[int] = Field(None, description="Minimum neighbourhood size (defaults to settings)")
    metric: Optional[MetricName] = Field(None, description="Distance metric (defaults to settings)")
    metric_params: Dict[str, Any] = Field(default_factory=dict, description="Metric constructor parameters")

    @field_validator("values")
    @classmethod
    def freeze_values(cls, v: List[Any]) -> List[Any]:
        return [_freeze(value) for value in v]


class ClusterOutput(BaseModel):
    """A single cluster in a clustering summary."""

    cluster_id: int = Field(..., ge=0, description="Position of the cluster in completion order")
    size: int = Field(..., ge=0, description="Number of members")
    members: List[Any] = Field(default_factory=list, description="Member values in discovery order")


class ClusteringSummary(BaseModel):
    """Results of a clustering request."""

    request_id: Optional[str] = None
    metric: str
    epsilon: float
    min_points: int
    total_items: int
    clusters_created: int
    noise: int
    shared_members: int = Field(0, description="Distinct values appearing in more than one cluster")
    avg_cluster_size: float
    processing_time_ms: float
    clusters: List[ClusterOutput] = Field(default_factory=list)
    created_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="Summary creation timestamp",
    )
