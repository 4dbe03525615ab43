"""Deployment-specific extra Shoot metrics registered next to the core catalog."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass

from garden_metrics.errors import SchemaError
from garden_metrics.metrics.base import Descriptor, Sample, build_sample
from garden_metrics.metrics.catalog import definitions, validate_descriptor
from garden_metrics.observation.models import Shoot

METRIC_SHOOT_CUSTOM_EXTENSIONS = "garden_shoot_custom_extensions"


@dataclass(frozen=True)
class Customization:
    """An extra metric derived per Shoot.

    ``derive`` yields ``(label_values, value)`` pairs with label values ordered
    like ``descriptor.labels``.
    """
    descriptor: Descriptor
    derive: Callable[[Shoot], Iterable[tuple[tuple[str, ...], float]]]

    def samples(self, shoot: Shoot) -> list[Sample]:
        schema = {self.descriptor.name: self.descriptor.labels}
        return [
            build_sample(schema, self.descriptor.name, values, value)
            for values, value in self.derive(shoot)
        ]


class CustomizationRegistry:
    """Ordered, append-only set of customizations."""

    def __init__(self, customizations: Iterable[Customization] = ()) -> None:
        self._lock = threading.Lock()
        self._items: dict[str, Customization] = {}
        for c in customizations:
            self.register(c)

    def register(self, customization: Customization) -> None:
        desc = customization.descriptor
        validate_descriptor(desc)
        with self._lock:
            if desc.name in definitions() or desc.name in self._items:
                raise SchemaError(f"customization metric {desc.name} is already defined")
            self._items[desc.name] = customization

    def descriptors(self) -> list[Descriptor]:
        with self._lock:
            return [c.descriptor for c in self._items.values()]

    def __iter__(self) -> Iterator[Customization]:
        with self._lock:
            return iter(list(self._items.values()))

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


def _shoot_extensions(shoot: Shoot) -> list[tuple[tuple[str, ...], float]]:
    return [((shoot.name, shoot.project, ext.type), 1.0) for ext in shoot.spec.extensions]


SHOOT_EXTENSIONS = Customization(
    Descriptor(
        METRIC_SHOOT_CUSTOM_EXTENSIONS,
        "Extensions configured for a Shoot. The value is always 1.",
        ("name", "project", "extension"),
    ),
    _shoot_extensions,
)


def default_customizations() -> CustomizationRegistry:
    return CustomizationRegistry([SHOOT_EXTENSIONS])
