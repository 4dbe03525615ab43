"""Metric extraction: maps resource kinds to extractor functions."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from garden_metrics.metrics.base import Descriptor, Sample
from garden_metrics.metrics.plants import extract_plant_metrics
from garden_metrics.metrics.projects import extract_project_metrics
from garden_metrics.metrics.seeds import extract_seed_metrics
from garden_metrics.metrics.shoots import extract_shoot_metrics
from garden_metrics.metrics.collector import GardenMetricsCollector, setup_metrics_collector

ExtractorFunc = Callable[[Iterable[Any]], list[Sample]]

EXTRACTORS: dict[str, ExtractorFunc] = {
    "project": extract_project_metrics,
    "shoot": extract_shoot_metrics,
    "seed": extract_seed_metrics,
    "plant": extract_plant_metrics,
}

__all__ = [
    "Descriptor",
    "EXTRACTORS",
    "GardenMetricsCollector",
    "Sample",
    "extract_plant_metrics",
    "extract_project_metrics",
    "extract_seed_metrics",
    "extract_shoot_metrics",
    "setup_metrics_collector",
]
