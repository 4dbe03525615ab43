"""CLI entrypoint for the garden metrics exporter."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from pathlib import Path

from prometheus_client import start_http_server
from rich.logging import RichHandler

from garden_metrics import __version__
from garden_metrics.config import Settings, get_settings
from garden_metrics.metrics import setup_metrics_collector
from garden_metrics.metrics.customizations import default_customizations
from garden_metrics.observation import ResourceKind, ResponseDurations, build_caches

logger = logging.getLogger("garden_metrics")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Export metrics about Gardener Shoots, Seeds, Projects and Plants to Prometheus.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--kubeconfig",
        type=Path,
        default=None,
        help="Path to the garden kubeconfig (default: in-cluster, KUBECONFIG env or ~/.kube/config)",
    )
    parser.add_argument(
        "--context",
        default=None,
        help="Kubernetes context to use",
    )
    parser.add_argument(
        "--bind-address",
        default=None,
        help="Address the metrics endpoint listens on (default: from env or 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=None,
        help="Port the metrics endpoint listens on (default: from env or 2718)",
    )
    parser.add_argument(
        "--parallel",
        action="store_true",
        help="Run the per-kind extractors concurrently on each scrape",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser.parse_args(argv)


def apply_args(settings: Settings, args: argparse.Namespace) -> Settings:
    """Override settings with the command line flags that were given."""
    if args.kubeconfig:
        settings.kubeconfig = args.kubeconfig
    if args.context:
        settings.context = args.context
    if args.bind_address:
        settings.bind_address = args.bind_address
    if args.port:
        settings.port = args.port
    if args.parallel:
        settings.parallel_collect = True
    return settings


def serve(settings: Settings, stop: threading.Event) -> None:
    """Start the caches, register the collector and serve metrics until ``stop`` is set."""
    caches = build_caches(
        kubeconfig=str(settings.kubeconfig) if settings.kubeconfig else None,
        context=settings.context,
        group=settings.api_group,
        version=settings.api_version,
        watch_timeout_seconds=settings.watch_timeout_seconds,
        relist_backoff_seconds=settings.relist_backoff_seconds,
    )
    for cache in caches.values():
        cache.start(stop)
    for kind, cache in caches.items():
        if not cache.wait_for_sync(settings.sync_timeout_seconds):
            logger.warning("Cache for %s not synced after %.0fs; serving it empty", kind.value, settings.sync_timeout_seconds)

    durations = ResponseDurations(max_age_seconds=settings.response_max_age_seconds)
    caches[ResourceKind.SHOOT].add_delete_handler(durations.forget_shoot)

    setup_metrics_collector(
        caches[ResourceKind.SHOOT],
        caches[ResourceKind.SEED],
        caches[ResourceKind.PROJECT],
        caches[ResourceKind.PLANT],
        durations=durations,
        customizations=default_customizations(),
        parallel=settings.parallel_collect,
    )
    start_http_server(settings.port, addr=settings.bind_address)
    logger.info("Serving metrics on %s:%d", settings.bind_address, settings.port)
    stop.wait()
    logger.info("Shutting down")


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for garden-metrics CLI."""
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )

    stop = threading.Event()

    def _handle_signal(signum: int, _frame: object) -> None:
        logger.info("Received signal %d", signum)
        stop.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    try:
        serve(apply_args(get_settings(), args), stop)
        return 0
    except Exception as e:
        logging.exception("Exporter failed")
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
