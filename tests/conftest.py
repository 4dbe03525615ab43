"""Shared test fixtures."""

from __future__ import annotations

from typing import Any, Callable

import pytest
from prometheus_client import CollectorRegistry

from garden_metrics.observation import ResourceCache, ResourceKind


def _conditions(conditions: dict[str, str] | None) -> list[dict[str, str]]:
    return [{"type": t, "status": s} for t, s in (conditions or {}).items()]


def shoot_object(
    name: str = "dev",
    namespace: str = "garden-core",
    *,
    iaas: str = "aws",
    region: str = "eu-west-1",
    version: str = "1.29.3",
    seed: str | None = "aws-eu1",
    workers: list[tuple[int, int]] | None = None,
    conditions: dict[str, str] | None = None,
    operation: tuple[str, str, int] | None = None,
    hibernated: bool = False,
    purpose: str | None = "development",
    use_as_seed: bool = False,
    extensions: list[str] | None = None,
    uid: str | None = None,
) -> dict[str, Any]:
    spec: dict[str, Any] = {
        "provider": {
            "type": iaas,
            "workers": [
                {"name": f"pool-{i}", "minimum": lo, "maximum": hi}
                for i, (lo, hi) in enumerate(workers if workers is not None else [(1, 3)])
            ],
        },
        "region": region,
        "kubernetes": {"version": version},
        "hibernation": {"enabled": hibernated},
        "extensions": [{"type": t} for t in extensions or []],
    }
    if seed is not None:
        spec["seedName"] = seed
    if purpose is not None:
        spec["purpose"] = purpose
    status: dict[str, Any] = {"conditions": _conditions(conditions)}
    if operation is not None:
        op_type, state, progress = operation
        status["lastOperation"] = {"type": op_type, "state": state, "progress": progress}
    annotations = {"shoot.gardener.cloud/use-as-seed": "true,protected"} if use_as_seed else {}
    return {
        "apiVersion": "core.gardener.cloud/v1beta1",
        "kind": "Shoot",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "uid": uid or f"uid-{namespace}-{name}",
            "creationTimestamp": "2024-03-01T12:00:00Z",
            "annotations": annotations,
        },
        "spec": spec,
        "status": status,
    }


def seed_object(
    name: str = "aws-eu1",
    *,
    iaas: str = "aws",
    region: str = "eu-west-1",
    secret_namespace: str | None = "garden",
    taints: list[str] | None = None,
    visible: bool | None = None,
    conditions: dict[str, str] | None = None,
) -> dict[str, Any]:
    spec: dict[str, Any] = {
        "provider": {"type": iaas, "region": region},
        "taints": [{"key": k} for k in taints or []],
    }
    if secret_namespace is not None:
        spec["secretRef"] = {"name": f"seed-{name}", "namespace": secret_namespace}
    if visible is not None:
        spec["settings"] = {"scheduling": {"visible": visible}}
    return {
        "metadata": {"name": name},
        "spec": spec,
        "status": {"conditions": _conditions(conditions)},
    }


def project_object(
    name: str = "core",
    *,
    namespace: str | None = "garden-core",
    phase: str = "Ready",
    owner: str | None = "alice@example.com",
    members: list[tuple[str, str]] | None = None,
) -> dict[str, Any]:
    spec: dict[str, Any] = {
        "members": [{"kind": kind, "name": member} for kind, member in members or []],
    }
    if namespace is not None:
        spec["namespace"] = namespace
    if owner is not None:
        spec["owner"] = {"apiGroup": "rbac.authorization.k8s.io", "kind": "User", "name": owner}
    return {"metadata": {"name": name}, "spec": spec, "status": {"phase": phase}}


def plant_object(
    name: str = "onprem",
    namespace: str = "garden-core",
    *,
    provider: str = "openstack",
    region: str = "dc1",
    version: str = "1.28.0",
    conditions: dict[str, str] | None = None,
) -> dict[str, Any]:
    return {
        "metadata": {"name": name, "namespace": namespace},
        "status": {
            "conditions": _conditions(conditions),
            "clusterInfo": {
                "cloud": {"type": provider, "region": region},
                "kubernetes": {"version": version},
            },
        },
    }


@pytest.fixture
def make_shoot() -> Callable[..., dict[str, Any]]:
    return shoot_object


@pytest.fixture
def make_seed() -> Callable[..., dict[str, Any]]:
    return seed_object


@pytest.fixture
def make_project() -> Callable[..., dict[str, Any]]:
    return project_object


@pytest.fixture
def make_plant() -> Callable[..., dict[str, Any]]:
    return plant_object


@pytest.fixture
def caches() -> dict[ResourceKind, ResourceCache]:
    """One empty cache per resource kind, without an API client."""
    return {kind: ResourceCache(kind) for kind in ResourceKind}


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()
