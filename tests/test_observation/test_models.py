"""Tests for resource models and the response duration store."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from garden_metrics.observation import Plant, ResponseDurations, Seed, Shoot
from garden_metrics.observation.models import project_from_namespace


@pytest.mark.parametrize("namespace, project", [
    ("garden-core", "core"),
    ("garden-my-team", "my-team"),
    ("garden", "garden"),
    ("custom", "custom"),
])
def test_project_from_namespace(namespace, project):
    assert project_from_namespace(namespace) == project


def test_shoot_parses_camel_case(make_shoot):
    shoot = Shoot.from_object(make_shoot("dev", operation=("Create", "Processing", 10)))
    assert shoot.project == "core"
    assert shoot.spec.seed_name == "aws-eu1"
    assert shoot.operation is not None and shoot.operation.type == "Create"
    assert shoot.metadata.creation_timestamp is not None
    assert Shoot.from_object(shoot) is shoot


def test_shoot_without_operation_type_has_no_operation(make_shoot):
    raw = make_shoot("dev")
    raw["status"]["lastOperation"] = {"type": "", "state": "Succeeded", "progress": 100}
    assert Shoot.from_object(raw).operation is None


@pytest.mark.parametrize("namespace, annotation, expected", [
    ("garden", "true", True),
    ("garden", "true,protected,invisible", True),
    ("garden", "false", False),
    ("garden", None, False),
    ("garden-core", "true", False),
])
def test_shoot_is_seed(make_shoot, namespace, annotation, expected):
    raw = make_shoot("s", namespace)
    if annotation is not None:
        raw["metadata"]["annotations"]["shoot.gardener.cloud/use-as-seed"] = annotation
    assert Shoot.from_object(raw).is_seed is expected


def test_seed_defaults(make_seed):
    seed = Seed.from_object(make_seed(secret_namespace=None))
    assert seed.visible and not seed.protected
    assert seed.namespace == ""


def test_plant_requires_name():
    with pytest.raises(ValidationError):
        Plant.from_object({"metadata": {"namespace": "garden-core"}})


def test_from_object_rejects_other_types():
    with pytest.raises(TypeError):
        Shoot.from_object(42)


def test_response_durations():
    durations = ResponseDurations()
    assert durations.get("core", "dev") is None

    durations.observe("core", "dev", 120)
    assert durations.get("core", "dev") == 120.0
    assert len(durations) == 1

    durations.forget("core", "dev")
    assert durations.get("core", "dev") is None

    with pytest.raises(ValueError):
        durations.observe("core", "dev", -1)


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_response_durations_expire():
    clock = _Clock()
    durations = ResponseDurations(max_age_seconds=60, clock=clock)
    durations.observe("core", "dev", 80)

    clock.now += 60
    assert durations.get("core", "dev") == 80.0

    clock.now += 1
    assert durations.get("core", "dev") is None
    assert len(durations) == 0

    durations.observe("core", "dev", 90)
    assert durations.get("core", "dev") == 90.0


def test_response_durations_reject_non_positive_max_age():
    with pytest.raises(ValueError):
        ResponseDurations(max_age_seconds=0)


def test_forget_shoot_uses_project_of_namespace(make_shoot):
    durations = ResponseDurations()
    durations.observe("core", "dev", 10)
    durations.forget_shoot(make_shoot("dev", namespace="garden-core"))
    assert len(durations) == 0


def test_condition_with_null_status_parses(make_shoot):
    obj = make_shoot("dev", conditions={"APIServerAvailable": "True"})
    obj["status"]["conditions"].append({"type": "EveryNodeReady", "status": None})
    shoot = Shoot.model_validate(obj)
    statuses = {c.type: c.status for c in shoot.status.conditions}
    assert statuses == {"APIServerAvailable": "True", "EveryNodeReady": None}
