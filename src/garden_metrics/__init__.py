"""Prometheus exporter for Gardener Shoots, Seeds, Projects and Plants."""

__version__ = "0.1.0"
