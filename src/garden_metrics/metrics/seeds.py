"""Seed metric extractors: info, conditions."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from garden_metrics.metrics.base import Sample, bool_label, build_sample, derive_each
from garden_metrics.metrics.catalog import METRIC_SEED_CONDITION, METRIC_SEED_INFO
from garden_metrics.metrics.states import ConditionStatus
from garden_metrics.observation.models import Seed

KIND = "seed"

LABELS: dict[str, tuple[str, ...]] = {
    METRIC_SEED_INFO: ("name", "namespace", "iaas", "region", "visible", "protected"),
    METRIC_SEED_CONDITION: ("name", "condition"),
}


def _sample(metric: str, values: tuple[str, ...], value: float) -> Sample:
    return build_sample(LABELS, metric, values, value)


def extract_seed_metrics(seeds: Iterable[Any] | None) -> list[Sample]:
    metrics: list[Sample] = []
    for _, samples in derive_each(KIND, seeds, Seed, _seed_samples):
        metrics.extend(samples)
    return metrics


def _seed_samples(seed: Seed) -> list[Sample]:
    samples = [_sample(METRIC_SEED_INFO, (
        seed.name,
        seed.namespace,
        seed.spec.provider.type,
        seed.spec.provider.region,
        bool_label(seed.visible),
        bool_label(seed.protected),
    ), 1.0)]
    for cond in seed.status.conditions:
        samples.append(_sample(
            METRIC_SEED_CONDITION, (seed.name, cond.type), ConditionStatus.from_status(cond.status),
        ))
    return samples
