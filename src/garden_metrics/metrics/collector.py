"""Prometheus collector turning the cached Gardener resources into metrics."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Protocol

from prometheus_client import REGISTRY, CollectorRegistry
from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

from garden_metrics.errors import RegistrationError
from garden_metrics.metrics import plants, projects, seeds, shoots
from garden_metrics.metrics.base import Descriptor, Sample
from garden_metrics.metrics.catalog import definitions, validate_schema
from garden_metrics.metrics.customizations import CustomizationRegistry
from garden_metrics.metrics.failures import SCRAPE_FAILURES
from garden_metrics.metrics.shoots import DurationProvider

logger = logging.getLogger(__name__)


class SnapshotReader(Protocol):
    """Read access to the cached objects of one resource kind."""

    def list(self) -> Iterable[Any] | None: ...


class GardenMetricsCollector(Collector):
    """Derives all garden metrics from the resource caches on every scrape."""

    def __init__(
        self,
        shoot_reader: SnapshotReader,
        seed_reader: SnapshotReader,
        project_reader: SnapshotReader,
        plant_reader: SnapshotReader,
        durations: DurationProvider | None = None,
        customizations: CustomizationRegistry | None = None,
        parallel: bool = False,
    ) -> None:
        self.shoot_reader = shoot_reader
        self.seed_reader = seed_reader
        self.project_reader = project_reader
        self.plant_reader = plant_reader
        self.durations = durations
        self.customizations = customizations if customizations is not None else CustomizationRegistry()
        self.parallel = parallel
        self.descs: dict[str, Descriptor] = dict(definitions())
        for desc in self.customizations.descriptors():
            self.descs[desc.name] = desc

        supplied: dict[str, tuple[str, ...]] = {}
        for module in (projects, shoots, seeds, plants):
            supplied.update(module.LABELS)
        validate_schema(self.descs, supplied)

    def _extractors(self) -> list[Callable[[], list[Sample]]]:
        # Fixed order: Project, Shoot, Seed, Plant
        return [
            lambda: projects.extract_project_metrics(self.project_reader.list()),
            lambda: shoots.extract_shoot_metrics(
                self.shoot_reader.list(),
                durations=self.durations,
                customizations=self.customizations,
            ),
            lambda: seeds.extract_seed_metrics(self.seed_reader.list()),
            lambda: plants.extract_plant_metrics(self.plant_reader.list()),
        ]

    def samples(self) -> list[Sample]:
        """Run all extractors and return their samples in collection order."""
        extractors = self._extractors()
        if not self.parallel:
            results = [extract() for extract in extractors]
        else:
            with ThreadPoolExecutor(max_workers=len(extractors), thread_name_prefix="extract") as pool:
                futures = [pool.submit(extract) for extract in extractors]
                results = [f.result() for f in futures]
        return [s for batch in results for s in batch]

    def describe(self) -> list[GaugeMetricFamily]:
        """Return an empty family per known metric."""
        return [
            GaugeMetricFamily(desc.name, desc.help, labels=list(desc.labels))
            for desc in self.descs.values()
        ]

    def collect(self) -> Iterator[GaugeMetricFamily]:
        families: dict[str, GaugeMetricFamily] = {}
        for sample in self.samples():
            # Label names come from the schema checked in __init__
            desc = self.descs[sample.metric]
            family = families.get(desc.name)
            if family is None:
                family = families[desc.name] = GaugeMetricFamily(desc.name, desc.help, labels=list(desc.labels))
            family.add_metric([sample.labels[label] for label in desc.labels], sample.value)
        yield from families.values()


def setup_metrics_collector(
    shoot_reader: SnapshotReader,
    seed_reader: SnapshotReader,
    project_reader: SnapshotReader,
    plant_reader: SnapshotReader,
    durations: DurationProvider | None = None,
    customizations: CustomizationRegistry | None = None,
    parallel: bool = False,
    registry: CollectorRegistry = REGISTRY,
) -> GardenMetricsCollector:
    """Create the collector and register it together with the scrape failure counter.

    Raises RegistrationError when called a second time for the same registry.
    """
    collector = GardenMetricsCollector(
        shoot_reader,
        seed_reader,
        project_reader,
        plant_reader,
        durations=durations,
        customizations=customizations,
        parallel=parallel,
    )
    try:
        registry.register(collector)
    except ValueError as e:
        raise RegistrationError(f"garden metrics collector is already registered: {e}") from e
    try:
        registry.register(SCRAPE_FAILURES)
    except ValueError as e:
        registry.unregister(collector)
        raise RegistrationError(f"scrape failure counter is already registered: {e}") from e
    logger.info("Registered garden metrics collector with %d metrics", len(collector.descs))
    return collector
