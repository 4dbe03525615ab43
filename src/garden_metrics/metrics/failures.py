"""Process-wide counter of objects the extractors could not process."""

from __future__ import annotations

from prometheus_client import Counter

METRIC_SCRAPE_FAILURES = "garden_scrape_failure_total"

# Not registered on import; setup_metrics_collector registers it with the collector.
SCRAPE_FAILURES = Counter(
    METRIC_SCRAPE_FAILURES,
    "Total count of scraping failures, grouped by resource kind and reason.",
    ["kind", "reason"],
    registry=None,
)


def record_failure(kind: str, reason: str) -> None:
    SCRAPE_FAILURES.labels(kind=kind, reason=reason).inc()


def failure_count(kind: str, reason: str | None = None) -> float:
    """Current failure count for a kind, optionally restricted to one reason."""
    total = 0.0
    for family in SCRAPE_FAILURES.collect():
        for sample in family.samples:
            if not sample.name.endswith("_total"):
                continue
            if sample.labels.get("kind") != kind:
                continue
            if reason is not None and sample.labels.get("reason") != reason:
                continue
            total += sample.value
    return total
