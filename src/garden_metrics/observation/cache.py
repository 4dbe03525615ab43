"""Watch-backed local caches of the Gardener resources in the garden cluster."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import Enum
from typing import Any

from kubernetes import client, config, watch
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

logger = logging.getLogger(__name__)

# Status code of a watch whose resource version is too old to resume from
HTTP_GONE = 410


class ResourceKind(str, Enum):
    """Resource kinds cached by the exporter, valued by their plural name."""

    SHOOT = "shoots"
    SEED = "seeds"
    PROJECT = "projects"
    PLANT = "plants"


def load_kube_config(kubeconfig_path: str | None, context: str | None) -> client.Configuration:
    """Load in-cluster or kubeconfig-based configuration."""
    try:
        config.load_incluster_config()
        return client.Configuration.get_default_copy()
    except config.ConfigException:
        pass
    kwargs: dict[str, Any] = {}
    if kubeconfig_path:
        kwargs["config_file"] = str(kubeconfig_path)
    if context:
        kwargs["context"] = context
    config.load_kube_config(**kwargs)
    return client.Configuration.get_default_copy()


def _object_key(obj: dict[str, Any]) -> tuple[str, str]:
    meta = obj.get("metadata") or {}
    return meta.get("namespace") or "", meta.get("name") or ""


class ResourceCache:
    """Local store of one resource kind, kept fresh by list + watch.

    ``list()`` never touches the network; it returns whatever the last sync
    and the watch events since then produced, or nothing before the first sync.
    """

    def __init__(
        self,
        kind: ResourceKind,
        api: client.CustomObjectsApi | None = None,
        group: str = "core.gardener.cloud",
        version: str = "v1beta1",
        watch_timeout_seconds: int = 300,
        relist_backoff_seconds: float = 5.0,
    ) -> None:
        self.kind = kind
        self.group = group
        self.version = version
        self.watch_timeout_seconds = watch_timeout_seconds
        self.relist_backoff_seconds = relist_backoff_seconds
        self._api = api
        self._lock = threading.Lock()
        self._objects: dict[tuple[str, str], dict[str, Any]] = {}
        self._resource_version: str | None = None
        self._synced = threading.Event()
        self._delete_handlers: list[Callable[[dict[str, Any]], None]] = []

    def add_delete_handler(self, handler: Callable[[dict[str, Any]], None]) -> None:
        """Call ``handler`` with every object removed by a DELETED event."""
        self._delete_handlers.append(handler)

    @property
    def has_synced(self) -> bool:
        return self._synced.is_set()

    def wait_for_sync(self, timeout: float | None = None) -> bool:
        return self._synced.wait(timeout)

    def list(self) -> list[dict[str, Any]]:
        """Return all currently cached objects."""
        with self._lock:
            return list(self._objects.values())

    def replace(self, objects: list[dict[str, Any]], resource_version: str | None = None) -> None:
        """Replace the whole store with the result of a full list."""
        store = {_object_key(obj): obj for obj in objects}
        with self._lock:
            self._objects = store
            self._resource_version = resource_version
        self._synced.set()
        logger.debug("Synced %d %s (resourceVersion=%s)", len(store), self.kind.value, resource_version)

    def apply(self, event: dict[str, Any]) -> bool:
        """Apply a single watch event. Returns False if the cache must relist."""
        event_type = event.get("type")
        obj = event.get("object") or {}
        if event_type == "ERROR":
            code = obj.get("code")
            logger.info("Watch on %s returned error %s: %s", self.kind.value, code, obj.get("message", ""))
            return code != HTTP_GONE
        key = _object_key(obj)
        version = (obj.get("metadata") or {}).get("resourceVersion")
        with self._lock:
            if event_type in ("ADDED", "MODIFIED"):
                self._objects[key] = obj
            elif event_type == "DELETED":
                self._objects.pop(key, None)
            else:
                logger.debug("Ignoring %s event for %s/%s", event_type, *key)
            if version:
                self._resource_version = version
        if event_type == "DELETED":
            for handler in self._delete_handlers:
                handler(obj)
        return True

    def sync(self) -> None:
        """List all objects of the kind from the API server."""
        result = self._api.list_cluster_custom_object(
            group=self.group,
            version=self.version,
            plural=self.kind.value,
        )
        self.replace(
            result.get("items") or [],
            (result.get("metadata") or {}).get("resourceVersion"),
        )

    def _watch(self, stop: threading.Event) -> None:
        w = watch.Watch()
        try:
            for event in w.stream(
                self._api.list_cluster_custom_object,
                group=self.group,
                version=self.version,
                plural=self.kind.value,
                resource_version=self._resource_version,
                timeout_seconds=self.watch_timeout_seconds,
            ):
                if stop.is_set():
                    break
                if not self.apply(event):
                    self._resource_version = None
                    break
        finally:
            w.stop()

    def run(self, stop: threading.Event) -> None:
        """List and watch until ``stop`` is set."""
        if self._api is None:
            raise RuntimeError(f"cache for {self.kind.value} has no API client")
        while not stop.is_set():
            try:
                if self._resource_version is None:
                    self.sync()
                self._watch(stop)
            except ApiException as e:
                logger.warning("List/watch of %s failed: %s", self.kind.value, e.reason)
                self._resource_version = None
                stop.wait(self.relist_backoff_seconds)
            except (HTTPError, OSError) as e:
                logger.warning("Connection to API server lost while watching %s: %s", self.kind.value, e)
                self._resource_version = None
                stop.wait(self.relist_backoff_seconds)

    def start(self, stop: threading.Event) -> threading.Thread:
        """Run the cache in a daemon thread."""
        thread = threading.Thread(target=self.run, args=(stop,), name=f"cache-{self.kind.value}", daemon=True)
        thread.start()
        return thread


def build_caches(
    kubeconfig: str | None = None,
    context: str | None = None,
    group: str = "core.gardener.cloud",
    version: str = "v1beta1",
    watch_timeout_seconds: int = 300,
    relist_backoff_seconds: float = 5.0,
) -> dict[ResourceKind, ResourceCache]:
    """Create one cache per resource kind sharing a single API client."""
    cfg = load_kube_config(kubeconfig, context)
    api = client.CustomObjectsApi(client.ApiClient(cfg))
    return {
        kind: ResourceCache(
            kind,
            api=api,
            group=group,
            version=version,
            watch_timeout_seconds=watch_timeout_seconds,
            relist_backoff_seconds=relist_backoff_seconds,
        )
        for kind in ResourceKind
    }
