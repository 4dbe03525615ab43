"""Observation layer: cached Gardener resources read by the metrics collector."""

from garden_metrics.observation.cache import ResourceCache, ResourceKind, build_caches
from garden_metrics.observation.models import (
    Condition,
    Plant,
    Project,
    Seed,
    Shoot,
)
from garden_metrics.observation.response import ResponseDurations

__all__ = [
    "Condition",
    "Plant",
    "Project",
    "ResourceCache",
    "ResourceKind",
    "ResponseDurations",
    "Seed",
    "Shoot",
    "build_caches",
]
