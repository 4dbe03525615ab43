"""Structured models for the Gardener resources the exporter reads."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field

GARDEN_NAMESPACE = "garden"
PROJECT_NAMESPACE_PREFIX = "garden-"

ANNOTATION_USE_AS_SEED = "shoot.gardener.cloud/use-as-seed"
TAINT_SEED_PROTECTED = "seed.gardener.cloud/protected"
TAINT_SEED_INVISIBLE = "seed.gardener.cloud/invisible"

M = TypeVar("M", bound="Resource")


def project_from_namespace(namespace: str) -> str:
    """Return the project name owning a namespace (garden-<project> -> <project>)."""
    if namespace.startswith(PROJECT_NAMESPACE_PREFIX):
        return namespace[len(PROJECT_NAMESPACE_PREFIX):]
    return namespace


class _Model(BaseModel):
    """Base for models parsed from camelCase Kubernetes JSON."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ObjectMeta(_Model):
    name: str
    namespace: str = ""
    uid: str = ""
    creation_timestamp: datetime | None = Field(default=None, alias="creationTimestamp")
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)


class Condition(_Model):
    """Named health dimension of a Shoot, Seed or Plant."""

    type: str
    status: str | None = "Unknown"
    reason: str | None = None
    message: str | None = None
    last_transition_time: datetime | None = Field(default=None, alias="lastTransitionTime")


class Resource(_Model):
    """Common base of the four resource kinds."""

    metadata: ObjectMeta

    @property
    def name(self) -> str:
        return self.metadata.name

    @classmethod
    def from_object(cls: type[M], obj: Any) -> M:
        """Build the model from a cached object (raw mapping or model instance)."""
        if isinstance(obj, cls):
            return obj
        if isinstance(obj, Mapping):
            return cls.model_validate(obj)
        raise TypeError(f"cannot build {cls.__name__} from {type(obj).__name__}")


# Shoot

class Worker(_Model):
    name: str = ""
    minimum: int = 0
    maximum: int = 0


class ShootProvider(_Model):
    type: str
    workers: list[Worker] = Field(default_factory=list)


class KubernetesSettings(_Model):
    version: str = ""


class Hibernation(_Model):
    enabled: bool = False


class Extension(_Model):
    type: str


class ShootSpec(_Model):
    provider: ShootProvider
    region: str = ""
    kubernetes: KubernetesSettings = Field(default_factory=KubernetesSettings)
    seed_name: str | None = Field(default=None, alias="seedName")
    hibernation: Hibernation | None = None
    purpose: str | None = None
    extensions: list[Extension] = Field(default_factory=list)


class LastOperation(_Model):
    """Ongoing or last completed lifecycle action of a Shoot."""

    type: str = ""
    state: str = ""
    progress: int = 0
    description: str = ""


class ShootStatus(_Model):
    conditions: list[Condition] = Field(default_factory=list)
    last_operation: LastOperation | None = Field(default=None, alias="lastOperation")


class Shoot(Resource):
    """A managed Kubernetes cluster."""

    spec: ShootSpec
    status: ShootStatus = Field(default_factory=ShootStatus)

    @property
    def project(self) -> str:
        return project_from_namespace(self.metadata.namespace)

    @property
    def uid(self) -> str:
        return self.metadata.uid

    @property
    def is_seed(self) -> bool:
        """True if the Shoot is registered as a Seed itself."""
        if self.metadata.namespace != GARDEN_NAMESPACE:
            return False
        value = self.metadata.annotations.get(ANNOTATION_USE_AS_SEED)
        if value is None:
            return False
        return not value.strip().lower().startswith("false")

    @property
    def hibernated(self) -> bool:
        return bool(self.spec.hibernation and self.spec.hibernation.enabled)

    @property
    def operation(self) -> LastOperation | None:
        """Last operation, or None when the Shoot has none recorded."""
        op = self.status.last_operation
        if op is None or not op.type:
            return None
        return op


# Seed

class SeedProvider(_Model):
    type: str
    region: str


class SecretReference(_Model):
    name: str = ""
    namespace: str = ""


class Taint(_Model):
    key: str
    value: str | None = None


class SeedScheduling(_Model):
    visible: bool = True


class SeedSettings(_Model):
    scheduling: SeedScheduling | None = None


class SeedSpec(_Model):
    provider: SeedProvider
    secret_ref: SecretReference | None = Field(default=None, alias="secretRef")
    taints: list[Taint] = Field(default_factory=list)
    settings: SeedSettings | None = None


class SeedStatus(_Model):
    conditions: list[Condition] = Field(default_factory=list)


class Seed(Resource):
    """A cluster hosting Shoot control planes."""

    spec: SeedSpec
    status: SeedStatus = Field(default_factory=SeedStatus)

    @property
    def namespace(self) -> str:
        return self.spec.secret_ref.namespace if self.spec.secret_ref else ""

    def has_taint(self, key: str) -> bool:
        return any(t.key == key for t in self.spec.taints)

    @property
    def protected(self) -> bool:
        return self.has_taint(TAINT_SEED_PROTECTED)

    @property
    def visible(self) -> bool:
        if self.has_taint(TAINT_SEED_INVISIBLE):
            return False
        scheduling = self.spec.settings.scheduling if self.spec.settings else None
        return scheduling.visible if scheduling else True


# Project

class ProjectMember(_Model):
    kind: str
    name: str
    api_group: str = Field(default="", alias="apiGroup")


class ProjectSpec(_Model):
    namespace: str | None = None
    owner: ProjectMember | None = None
    members: list[ProjectMember] = Field(default_factory=list)


class ProjectStatus(_Model):
    phase: str = ""


class Project(Resource):
    """A tenant grouping owning Shoots."""

    spec: ProjectSpec = Field(default_factory=ProjectSpec)
    status: ProjectStatus = Field(default_factory=ProjectStatus)

    @property
    def users(self) -> list[ProjectMember]:
        """Owner and members of the project."""
        users = list(self.spec.members)
        if self.spec.owner is not None:
            users.append(self.spec.owner)
        return users


# Plant

class CloudInfo(_Model):
    type: str
    region: str = ""


class ClusterInfo(_Model):
    cloud: CloudInfo
    kubernetes: KubernetesSettings = Field(default_factory=KubernetesSettings)


class PlantStatus(_Model):
    conditions: list[Condition] = Field(default_factory=list)
    cluster_info: ClusterInfo | None = Field(default=None, alias="clusterInfo")


class Plant(Resource):
    """An externally managed cluster registered for observability."""

    status: PlantStatus = Field(default_factory=PlantStatus)

    @property
    def project(self) -> str:
        return project_from_namespace(self.metadata.namespace)
