"""Exception types raised by the exporter."""

from __future__ import annotations


class GardenMetricsError(Exception):
    """Base class for exporter errors."""


class SchemaError(GardenMetricsError):
    """Label schema of a metric does not match what its extractor supplies."""


class RegistrationError(GardenMetricsError):
    """The collector was registered more than once on the same registry."""


class MalformedObjectError(GardenMetricsError, ValueError):
    """A cached resource object lacks data needed to derive its metrics."""
