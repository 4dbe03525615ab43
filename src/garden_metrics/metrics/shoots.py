"""Shoot metric extractors: info, conditions, operations, nodes, response time."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from typing import Any, Protocol

from garden_metrics.errors import MalformedObjectError
from garden_metrics.metrics.base import Sample, bool_label, build_sample, derive_each
from garden_metrics.metrics.catalog import (
    METRIC_OPERATIONS_TOTAL,
    METRIC_SHOOT_CONDITION,
    METRIC_SHOOT_CREATION,
    METRIC_SHOOT_HIBERNATED,
    METRIC_SHOOT_INFO,
    METRIC_SHOOT_NODE_MAX_TOTAL,
    METRIC_SHOOT_NODE_MIN_TOTAL,
    METRIC_SHOOT_OPERATION_PROGRESS,
    METRIC_SHOOT_OPERATION_STATE,
    METRIC_SHOOT_RESPONSE_DURATION,
)
from garden_metrics.metrics.customizations import Customization
from garden_metrics.metrics.states import ConditionStatus, OperationState
from garden_metrics.observation.models import Shoot

KIND = "shoot"

LABELS: dict[str, tuple[str, ...]] = {
    METRIC_SHOOT_INFO: ("name", "project", "iaas", "version", "region", "seed", "is_seed"),
    METRIC_SHOOT_CONDITION: ("name", "project", "condition", "operation", "purpose", "is_seed", "iaas", "uid"),
    METRIC_SHOOT_CREATION: ("name", "project", "uid"),
    METRIC_SHOOT_HIBERNATED: ("name", "project", "uid"),
    METRIC_SHOOT_NODE_MAX_TOTAL: ("name", "project"),
    METRIC_SHOOT_NODE_MIN_TOTAL: ("name", "project"),
    METRIC_SHOOT_OPERATION_PROGRESS: ("name", "project", "operation"),
    METRIC_SHOOT_OPERATION_STATE: ("name", "project", "operation"),
    METRIC_SHOOT_RESPONSE_DURATION: ("name", "project"),
    METRIC_OPERATIONS_TOTAL: ("operation", "state", "iaas", "seed", "version", "region"),
}

# Label values of one garden_shoot_operations_total series, in LABELS order
OperationKey = tuple[str, str, str, str, str, str]


class DurationProvider(Protocol):
    def get(self, project: str, name: str) -> float | None: ...


def _sample(metric: str, values: Iterable[str], value: float) -> Sample:
    return build_sample(LABELS, metric, values, value)


def extract_shoot_metrics(
    shoots: Iterable[Any] | None,
    durations: DurationProvider | None = None,
    customizations: Iterable[Customization] = (),
) -> list[Sample]:
    """Derive per-Shoot samples plus the aggregated operations count.

    Shoots acting as Seed get all per-Shoot samples but are left out of
    ``garden_shoot_operations_total``.
    """
    customizations = list(customizations)
    metrics: list[Sample] = []
    operations: Counter[OperationKey] = Counter()

    def derive(shoot: Shoot) -> list[Sample]:
        samples = _shoot_samples(shoot, durations)
        for c in customizations:
            samples.extend(c.samples(shoot))
        return samples

    for shoot, samples in derive_each(KIND, shoots, Shoot, derive):
        metrics.extend(samples)
        key = _operation_key(shoot)
        if key is not None:
            operations[key] += 1

    for key in sorted(operations):
        metrics.append(_sample(METRIC_OPERATIONS_TOTAL, key, operations[key]))
    return metrics


def _operation_key(shoot: Shoot) -> OperationKey | None:
    op = shoot.operation
    if op is None or shoot.is_seed:
        return None
    return (
        op.type,
        op.state,
        shoot.spec.provider.type,
        shoot.spec.seed_name or "",
        shoot.spec.kubernetes.version,
        shoot.spec.region,
    )


def _shoot_samples(shoot: Shoot, durations: DurationProvider | None) -> list[Sample]:
    if shoot.metadata.creation_timestamp is None:
        raise MalformedObjectError(f"shoot {shoot.name} has no creation timestamp")

    name, project, uid = shoot.name, shoot.project, shoot.uid
    iaas = shoot.spec.provider.type
    is_seed = bool_label(shoot.is_seed)
    op = shoot.operation

    samples = [
        _sample(METRIC_SHOOT_INFO, (
            name,
            project,
            iaas,
            shoot.spec.kubernetes.version,
            shoot.spec.region,
            shoot.spec.seed_name or "",
            is_seed,
        ), 1.0),
        _sample(METRIC_SHOOT_CREATION, (name, project, uid), shoot.metadata.creation_timestamp.timestamp()),
        _sample(METRIC_SHOOT_HIBERNATED, (name, project, uid), 1.0 if shoot.hibernated else 0.0),
    ]

    for cond in shoot.status.conditions:
        samples.append(_sample(METRIC_SHOOT_CONDITION, (
            name,
            project,
            cond.type,
            op.type if op else "",
            shoot.spec.purpose or "",
            is_seed,
            iaas,
            uid,
        ), ConditionStatus.from_status(cond.status)))

    workers = shoot.spec.provider.workers
    if workers:
        samples.append(_sample(METRIC_SHOOT_NODE_MAX_TOTAL, (name, project), sum(w.maximum for w in workers)))
        samples.append(_sample(METRIC_SHOOT_NODE_MIN_TOTAL, (name, project), sum(w.minimum for w in workers)))

    if op is not None:
        samples.append(_sample(METRIC_SHOOT_OPERATION_PROGRESS, (name, project, op.type), op.progress))
        samples.append(_sample(
            METRIC_SHOOT_OPERATION_STATE, (name, project, op.type), OperationState.from_state(op.state),
        ))

    if durations is not None:
        duration = durations.get(project, name)
        if duration is not None:
            samples.append(_sample(METRIC_SHOOT_RESPONSE_DURATION, (name, project), duration))

    return samples
