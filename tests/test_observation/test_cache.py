"""Tests for the watch-backed resource caches."""

from __future__ import annotations

import threading
from unittest.mock import MagicMock, patch

from kubernetes.client.rest import ApiException
from urllib3.exceptions import ProtocolError

from garden_metrics.observation import ResourceCache, ResourceKind, ResponseDurations


def _obj(name: str, namespace: str = "garden-core", version: str = "1") -> dict:
    return {"metadata": {"name": name, "namespace": namespace, "resourceVersion": version}}


def test_empty_before_sync():
    cache = ResourceCache(ResourceKind.SHOOT)
    assert cache.list() == []
    assert not cache.has_synced
    assert not cache.wait_for_sync(timeout=0)


def test_replace_and_events():
    cache = ResourceCache(ResourceKind.SHOOT)
    cache.replace([_obj("a"), _obj("b"), _obj("a", namespace="garden-other")], resource_version="10")
    assert cache.has_synced
    assert len(cache.list()) == 3

    assert cache.apply({"type": "ADDED", "object": _obj("c", version="11")})
    assert cache.apply({"type": "MODIFIED", "object": {**_obj("a", version="12"), "spec": {"x": 1}}})
    assert cache.apply({"type": "DELETED", "object": _obj("b", version="13")})
    assert cache.apply({"type": "BOOKMARK", "object": _obj("", version="14")})

    names = sorted((o["metadata"]["namespace"], o["metadata"]["name"]) for o in cache.list())
    assert names == [("garden-core", "a"), ("garden-core", "c"), ("garden-other", "a")]
    modified = [o for o in cache.list() if o["metadata"]["name"] == "a" and o["metadata"]["namespace"] == "garden-core"]
    assert modified[0]["spec"] == {"x": 1}


def test_list_returns_a_copy():
    cache = ResourceCache(ResourceKind.SEED)
    cache.replace([_obj("s1", namespace="")])
    snapshot = cache.list()
    cache.apply({"type": "DELETED", "object": _obj("s1", namespace="")})
    assert len(snapshot) == 1
    assert cache.list() == []


def test_expired_watch_requests_relist():
    cache = ResourceCache(ResourceKind.PLANT)
    assert not cache.apply({"type": "ERROR", "object": {"code": 410, "message": "too old resource version"}})
    assert cache.apply({"type": "ERROR", "object": {"code": 500, "message": "internal"}})


def test_sync_lists_cluster_objects():
    api = MagicMock()
    api.list_cluster_custom_object.return_value = {
        "metadata": {"resourceVersion": "42"},
        "items": [_obj("p1", namespace=""), _obj("p2", namespace="")],
    }
    cache = ResourceCache(ResourceKind.PROJECT, api=api, group="core.gardener.cloud", version="v1beta1")
    cache.sync()

    api.list_cluster_custom_object.assert_called_once_with(
        group="core.gardener.cloud", version="v1beta1", plural="projects",
    )
    assert len(cache.list()) == 2
    assert cache.has_synced


def test_run_lists_then_watches_until_stopped():
    api = MagicMock()
    api.list_cluster_custom_object.return_value = {"metadata": {"resourceVersion": "1"}, "items": [_obj("a")]}
    cache = ResourceCache(ResourceKind.SHOOT, api=api, relist_backoff_seconds=0)
    stop = threading.Event()

    def stream(*_args, **kwargs):
        assert kwargs["resource_version"] == "1"
        yield {"type": "ADDED", "object": _obj("b", version="2")}
        stop.set()
        yield {"type": "ADDED", "object": _obj("c", version="3")}

    with patch("garden_metrics.observation.cache.watch.Watch") as watch_cls:
        watch_cls.return_value.stream.side_effect = stream
        cache.run(stop)

    assert sorted(o["metadata"]["name"] for o in cache.list()) == ["a", "b"]


def test_run_backs_off_and_relists_on_api_error():
    api = MagicMock()
    stop = threading.Event()
    calls = []

    def list_objects(**_kwargs):
        calls.append(1)
        if len(calls) == 1:
            raise ApiException(status=503, reason="Service Unavailable")
        stop.set()
        return {"metadata": {"resourceVersion": "5"}, "items": [_obj("a")]}

    api.list_cluster_custom_object.side_effect = list_objects
    cache = ResourceCache(ResourceKind.SEED, api=api, relist_backoff_seconds=0)

    with patch("garden_metrics.observation.cache.watch.Watch") as watch_cls:
        watch_cls.return_value.stream.return_value = iter(())
        cache.run(stop)

    assert len(calls) == 2
    assert cache.has_synced


def test_run_survives_broken_connection():
    api = MagicMock()
    stop = threading.Event()
    calls = []

    def list_objects(**_kwargs):
        calls.append(1)
        if len(calls) == 1:
            raise ProtocolError("Connection broken")
        stop.set()
        return {"metadata": {"resourceVersion": "7"}, "items": [_obj("a")]}

    api.list_cluster_custom_object.side_effect = list_objects
    cache = ResourceCache(ResourceKind.SHOOT, api=api, relist_backoff_seconds=0)

    with patch("garden_metrics.observation.cache.watch.Watch") as watch_cls:
        watch_cls.return_value.stream.return_value = iter(())
        cache.run(stop)

    assert len(calls) == 2
    assert cache.has_synced
    assert [o["metadata"]["name"] for o in cache.list()] == ["a"]


def test_run_relists_after_watch_stream_drops():
    api = MagicMock()
    api.list_cluster_custom_object.return_value = {"metadata": {"resourceVersion": "1"}, "items": [_obj("a")]}
    cache = ResourceCache(ResourceKind.SEED, api=api, relist_backoff_seconds=0)
    stop = threading.Event()
    streams = []

    def stream(*_args, **_kwargs):
        streams.append(1)
        if len(streams) == 1:
            raise ConnectionResetError("reset by peer")
        stop.set()
        return iter(())

    with patch("garden_metrics.observation.cache.watch.Watch") as watch_cls:
        watch_cls.return_value.stream.side_effect = stream
        cache.run(stop)

    assert len(streams) == 2
    assert api.list_cluster_custom_object.call_count == 2


def test_delete_handlers_see_deleted_objects():
    cache = ResourceCache(ResourceKind.SHOOT)
    deleted = []
    cache.add_delete_handler(deleted.append)
    cache.replace([_obj("a"), _obj("b")])

    cache.apply({"type": "MODIFIED", "object": _obj("a", version="2")})
    cache.apply({"type": "DELETED", "object": _obj("b", version="3")})

    assert [o["metadata"]["name"] for o in deleted] == ["b"]


def test_deleted_shoot_drops_its_response_duration():
    cache = ResourceCache(ResourceKind.SHOOT)
    durations = ResponseDurations()
    cache.add_delete_handler(durations.forget_shoot)
    cache.replace([_obj("dev"), _obj("prod")])
    durations.observe("core", "dev", 40.0)
    durations.observe("core", "prod", 55.0)

    cache.apply({"type": "DELETED", "object": _obj("dev", version="2")})

    assert durations.get("core", "dev") is None
    assert durations.get("core", "prod") == 55.0
