"""Metric catalog: name, help text and label schema of every exported metric.

Metrics ending in ``_info`` are label carriers. Their value is always 1 and
carries no meaning; the labels hold the descriptive attributes of a resource.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from functools import lru_cache
from types import MappingProxyType

from garden_metrics.errors import SchemaError
from garden_metrics.metrics.base import Descriptor

METRIC_PROJECTS_STATUS = "garden_projects_status"
METRIC_USERS_SUM = "garden_users_total"

# Seed metrics
METRIC_SEED_INFO = "garden_seed_info"
METRIC_SEED_CONDITION = "garden_seed_condition"

# Plant metrics
METRIC_PLANT_INFO = "garden_plant_info"
METRIC_PLANT_CONDITION = "garden_plant_condition"

# Shoot metrics (available also for Shoots which act as Seed)
METRIC_SHOOT_CONDITION = "garden_shoot_condition"
METRIC_SHOOT_CREATION = "garden_shoot_creation_timestamp"
METRIC_SHOOT_HIBERNATED = "garden_shoot_hibernated"
METRIC_SHOOT_INFO = "garden_shoot_info"
METRIC_SHOOT_NODE_MAX_TOTAL = "garden_shoot_node_max_total"
METRIC_SHOOT_NODE_MIN_TOTAL = "garden_shoot_node_min_total"
METRIC_SHOOT_OPERATION_PROGRESS = "garden_shoot_operation_progress_percent"
METRIC_SHOOT_OPERATION_STATE = "garden_shoot_operation_states"
METRIC_SHOOT_RESPONSE_DURATION = "garden_shoot_response_duration_milliseconds"

# Aggregated Shoot metrics (exclude Shoots which act as Seed)
METRIC_OPERATIONS_TOTAL = "garden_shoot_operations_total"

_NAME_RE = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")
_LABEL_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

_DEFINITIONS = (
    Descriptor(
        METRIC_OPERATIONS_TOTAL,
        "Count of ongoing operations.",
        ("operation", "state", "iaas", "seed", "version", "region"),
    ),
    Descriptor(
        METRIC_PLANT_CONDITION,
        "Condition state of a Plant. Possible values: -1=Unknown|0=Unhealthy|1=Healthy|2=Progressing",
        ("name", "project", "condition"),
    ),
    Descriptor(
        METRIC_PLANT_INFO,
        "Information about a Plant. The value is always 1.",
        ("name", "project", "provider", "region", "version"),
    ),
    Descriptor(
        METRIC_PROJECTS_STATUS,
        "Status of projects. Possible values: -1=Failed|0=Ready|1=Pending|2=Terminating",
        ("name", "cluster", "phase"),
    ),
    Descriptor(
        METRIC_SEED_CONDITION,
        "Condition state of a Seed. Possible values: -1=Unknown|0=Unhealthy|1=Healthy|2=Progressing",
        ("name", "condition"),
    ),
    Descriptor(
        METRIC_SEED_INFO,
        "Information about a Seed. The value is always 1.",
        ("name", "namespace", "iaas", "region", "visible", "protected"),
    ),
    Descriptor(
        METRIC_SHOOT_CONDITION,
        "Condition state of a Shoot. Possible values: -1=Unknown|0=Unhealthy|1=Healthy|2=Progressing",
        ("name", "project", "condition", "operation", "purpose", "is_seed", "iaas", "uid"),
    ),
    Descriptor(
        METRIC_SHOOT_CREATION,
        "Timestamp of the shoot creation.",
        ("name", "project", "uid"),
    ),
    Descriptor(
        METRIC_SHOOT_HIBERNATED,
        "Hibernation status of a shoot.",
        ("name", "project", "uid"),
    ),
    Descriptor(
        METRIC_SHOOT_INFO,
        "Information about a Shoot. The value is always 1.",
        ("name", "project", "iaas", "version", "region", "seed", "is_seed"),
    ),
    Descriptor(
        METRIC_SHOOT_NODE_MAX_TOTAL,
        "Max node count of a Shoot.",
        ("name", "project"),
    ),
    Descriptor(
        METRIC_SHOOT_NODE_MIN_TOTAL,
        "Min node count of a Shoot.",
        ("name", "project"),
    ),
    Descriptor(
        METRIC_SHOOT_OPERATION_PROGRESS,
        "Operation progress percent of a Shoot.",
        ("name", "project", "operation"),
    ),
    Descriptor(
        METRIC_SHOOT_OPERATION_STATE,
        "Operation state of a Shoot. Possible values: "
        "-1=Unknown|1=Succeeded|2=Processing|3=Pending|4=Aborted|5=Error|6=Failed",
        ("name", "project", "operation"),
    ),
    Descriptor(
        METRIC_SHOOT_RESPONSE_DURATION,
        "Response time of the Shoot API server. Not provided when not reachable.",
        ("name", "project"),
    ),
    Descriptor(
        METRIC_USERS_SUM,
        "Count of users.",
        ("kind",),
    ),
)


def validate_descriptor(desc: Descriptor) -> None:
    """Raise SchemaError if a descriptor has an invalid name or label set."""
    if not _NAME_RE.match(desc.name):
        raise SchemaError(f"invalid metric name {desc.name!r}")
    for label in desc.labels:
        if not _LABEL_RE.match(label) or label.startswith("__"):
            raise SchemaError(f"invalid label name {label!r} on {desc.name}")
    if len(set(desc.labels)) != len(desc.labels):
        raise SchemaError(f"duplicate label names on {desc.name}: {desc.labels}")


@lru_cache(maxsize=None)
def definitions() -> Mapping[str, Descriptor]:
    """Return the immutable catalog of all core metrics, keyed by metric name."""
    defs: dict[str, Descriptor] = {}
    for desc in _DEFINITIONS:
        validate_descriptor(desc)
        if desc.name in defs:
            raise SchemaError(f"metric {desc.name} defined twice")
        defs[desc.name] = desc
    return MappingProxyType(defs)


def validate_schema(
    descs: Mapping[str, Descriptor],
    supplied: Mapping[str, tuple[str, ...]],
) -> None:
    """Check that every extractor supplies exactly the labels its metrics declare.

    ``supplied`` maps metric names to the label names an extractor fills in.
    """
    for name, labels in supplied.items():
        desc = descs.get(name)
        if desc is None:
            raise SchemaError(f"extractor emits undefined metric {name}")
        if set(labels) != set(desc.labels) or len(labels) != len(desc.labels):
            raise SchemaError(
                f"label mismatch for {name}: descriptor has {desc.labels}, extractor supplies {tuple(labels)}"
            )
