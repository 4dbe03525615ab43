"""Plant metric extractors: info, conditions."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from garden_metrics.errors import MalformedObjectError
from garden_metrics.metrics.base import Sample, build_sample, derive_each
from garden_metrics.metrics.catalog import METRIC_PLANT_CONDITION, METRIC_PLANT_INFO
from garden_metrics.metrics.states import ConditionStatus
from garden_metrics.observation.models import Plant

KIND = "plant"

LABELS: dict[str, tuple[str, ...]] = {
    METRIC_PLANT_INFO: ("name", "project", "provider", "region", "version"),
    METRIC_PLANT_CONDITION: ("name", "project", "condition"),
}


def _sample(metric: str, values: tuple[str, ...], value: float) -> Sample:
    return build_sample(LABELS, metric, values, value)


def extract_plant_metrics(plants: Iterable[Any] | None) -> list[Sample]:
    metrics: list[Sample] = []
    for _, samples in derive_each(KIND, plants, Plant, _plant_samples):
        metrics.extend(samples)
    return metrics


def _plant_samples(plant: Plant) -> list[Sample]:
    info = plant.status.cluster_info
    if info is None:
        raise MalformedObjectError(f"plant {plant.name} has no cluster info")
    samples = [_sample(METRIC_PLANT_INFO, (
        plant.name,
        plant.project,
        info.cloud.type,
        info.cloud.region,
        info.kubernetes.version,
    ), 1.0)]
    for cond in plant.status.conditions:
        samples.append(_sample(
            METRIC_PLANT_CONDITION, (plant.name, plant.project, cond.type), ConditionStatus.from_status(cond.status),
        ))
    return samples
