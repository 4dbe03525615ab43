"""Shared types and helpers for metric extraction."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

from pydantic import ValidationError

from garden_metrics.errors import MalformedObjectError, SchemaError
from garden_metrics.metrics.failures import record_failure
from garden_metrics.observation.models import Resource

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Resource)

# Data errors a single malformed object can raise during derivation
DERIVATION_ERRORS = (ValueError, KeyError, TypeError, AttributeError, SchemaError)


@dataclass(frozen=True)
class Descriptor:
    """Name, help text and ordered label names of a metric."""
    name: str
    help: str
    labels: tuple[str, ...]


@dataclass(frozen=True)
class Sample:
    """A single labeled value emitted during a scrape."""
    metric: str
    labels: dict[str, str] = field(default_factory=dict, hash=False)
    value: float = 0.0


def bool_label(value: bool) -> str:
    return "true" if value else "false"


def build_sample(
    schema: Mapping[str, tuple[str, ...]],
    metric: str,
    values: Iterable[str],
    value: float,
) -> Sample:
    """Build a sample whose label names come from ``schema[metric]``, paired with ``values`` in order."""
    names = schema[metric]
    values = tuple(values)
    if len(values) != len(names):
        raise SchemaError(f"{metric} expects {len(names)} label values {names}, got {len(values)}")
    return Sample(metric, dict(zip(names, values)), float(value))


def failure_reason(exc: BaseException) -> str:
    """Map a derivation error to a low-cardinality reason label."""
    if isinstance(exc, SchemaError):
        return "schema"
    if isinstance(exc, ValidationError):
        return "invalid_object"
    if isinstance(exc, (MalformedObjectError, KeyError, AttributeError)):
        return "missing_field"
    return "bad_value"


def derive_each(
    kind: str,
    objects: Iterable[Any] | None,
    model: type[R],
    derive: Callable[[R], Iterable[Sample]],
) -> Iterator[tuple[R, list[Sample]]]:
    """Yield each object with its samples, skipping objects whose derivation fails.

    Failed objects are counted on the scrape failure counter and contribute
    no samples at all.
    """
    for obj in objects or ():
        try:
            item = model.from_object(obj)
            samples = list(derive(item))
        except DERIVATION_ERRORS as exc:
            reason = failure_reason(exc)
            record_failure(kind, reason)
            logger.warning("Skipping %s %s: %s (%s)", kind, _describe(obj), reason, exc)
            continue
        yield item, samples


def _describe(obj: Any) -> str:
    if isinstance(obj, Resource):
        return f"{obj.metadata.namespace}/{obj.name}".lstrip("/")
    meta = obj.get("metadata") if isinstance(obj, dict) else None
    if isinstance(meta, dict):
        return f"{meta.get('namespace') or ''}/{meta.get('name') or '?'}".lstrip("/")
    return repr(obj)[:80]
