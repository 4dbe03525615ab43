"""Project metric extractors: status, users."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from typing import Any

from garden_metrics.errors import MalformedObjectError
from garden_metrics.metrics.base import Sample, build_sample, derive_each
from garden_metrics.metrics.catalog import METRIC_PROJECTS_STATUS, METRIC_USERS_SUM
from garden_metrics.metrics.states import ProjectPhase
from garden_metrics.observation.models import Project

KIND = "project"

LABELS: dict[str, tuple[str, ...]] = {
    METRIC_PROJECTS_STATUS: ("name", "cluster", "phase"),
    METRIC_USERS_SUM: ("kind",),
}


def _sample(metric: str, values: tuple[str, ...], value: float) -> Sample:
    return build_sample(LABELS, metric, values, value)


def extract_project_metrics(projects: Iterable[Any] | None) -> list[Sample]:
    metrics: list[Sample] = []
    users: dict[str, set[str]] = defaultdict(set)

    for project, samples in derive_each(KIND, projects, Project, _project_samples):
        metrics.extend(samples)
        for user in project.users:
            users[user.kind].add(user.name)

    for kind in sorted(users):
        metrics.append(_sample(METRIC_USERS_SUM, (kind,), len(users[kind])))
    return metrics


def _project_samples(project: Project) -> list[Sample]:
    if not project.spec.namespace:
        raise MalformedObjectError(f"project {project.name} has no namespace")
    phase = project.status.phase
    return [_sample(
        METRIC_PROJECTS_STATUS, (project.name, project.spec.namespace, phase), ProjectPhase.from_phase(phase),
    )]
