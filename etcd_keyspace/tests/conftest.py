"""Shared fixtures: an in-memory etcd v2 keys API behind httpx.MockTransport."""

from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qs

import httpx
import pytest

from etcd_keyspace import EtcdKeyClient

BASE_URL = "http://etcd.test:2379"
KEYS_PREFIX = "/v2/keys"


class FakeEtcd:
    """Just enough of etcd's v2 keys semantics to exercise the client."""

    def __init__(self) -> None:
        self.index = 0
        self.entries: Dict[str, Dict[str, Any]] = {"/": {"dir": True}}
        self.requests: List[httpx.Request] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if not path.startswith(KEYS_PREFIX):
            return httpx.Response(404, text="404 page not found\n")
        key = "/" + path[len(KEYS_PREFIX):].strip("/")
        params = dict(request.url.params)
        form = {
            name: values[0]
            for name, values in parse_qs(
                request.content.decode(), keep_blank_values=True
            ).items()
        }
        handler = getattr(self, "_" + request.method.lower())
        status, body = handler(key, params, form)
        return httpx.Response(status, json=body)

    # helpers

    def _error(self, code: int, message: str, key: str, status: int) -> Tuple[int, Dict[str, Any]]:
        return status, {
            "errorCode": code,
            "message": message,
            "cause": key,
            "index": self.index,
        }

    @staticmethod
    def _parent(key: str) -> str:
        return key.rsplit("/", 1)[0] or "/"

    def _parents(self, key: str) -> List[str]:
        parents = []
        while key != "/":
            key = self._parent(key)
            if key != "/":
                parents.append(key)
        return list(reversed(parents))

    def _children(self, key: str) -> List[str]:
        return [k for k in self.entries if k != "/" and k != key and self._parent(k) == key]

    def _render(self, key: str, expand: bool, recursive: bool) -> Dict[str, Any]:
        entry = self.entries[key]
        data: Dict[str, Any] = {"key": key}
        if entry.get("dir"):
            data["dir"] = True
        else:
            data["value"] = entry["value"]
        if entry.get("ttl"):
            data["ttl"] = entry["ttl"]
        if key != "/":
            data["modifiedIndex"] = entry["modified"]
            data["createdIndex"] = entry["created"]
        if entry.get("dir") and expand:
            children = [
                self._render(child, recursive, recursive) for child in self._children(key)
            ]
            if children:
                data["nodes"] = children
        return data

    # verbs

    def _get(self, key: str, params: Dict[str, str], form: Dict[str, str]):
        if key not in self.entries:
            return self._error(100, "Key not found", key, 404)
        recursive = params.get("recursive") == "true"
        return 200, {"action": "get", "node": self._render(key, True, recursive)}

    def _put(self, key: str, params: Dict[str, str], form: Dict[str, str], action: Optional[str] = None):
        exists = key in self.entries
        prev_exist = params.get("prevExist")
        if key == "/":
            return self._error(107, "Root is read only", key, 403)
        if prev_exist == "false" and exists:
            return self._error(105, "Key already exists", key, 412)
        if prev_exist == "true" and not exists:
            return self._error(100, "Key not found", key, 404)
        if "prevValue" in params or "prevIndex" in params:
            if not exists:
                return self._error(100, "Key not found", key, 404)
            entry = self.entries[key]
            if "prevValue" in params and entry.get("value") != params["prevValue"]:
                return self._error(101, "Compare failed", key, 412)
            if "prevIndex" in params and str(entry["modified"]) != params["prevIndex"]:
                return self._error(101, "Compare failed", key, 412)

        is_dir = form.get("dir") == "true" or params.get("dir") == "true"
        if exists:
            if is_dir and not self.entries[key].get("dir"):
                return self._error(104, "Not a directory", key, 403)
            if "value" in form and self.entries[key].get("dir"):
                return self._error(102, "Not a file", key, 403)
        for parent in self._parents(key):
            if parent in self.entries and not self.entries[parent].get("dir"):
                return self._error(104, "Not a directory", parent, 403)

        prev = self._render(key, False, False) if exists else None
        self.index += 1
        for parent in self._parents(key):
            self.entries.setdefault(
                parent, {"dir": True, "created": self.index, "modified": self.index}
            )
        entry = self.entries.get(key) or {"created": self.index}
        entry["modified"] = self.index
        if is_dir:
            entry["dir"] = True
        else:
            entry["value"] = form.get("value", "")
        if form.get("ttl"):
            entry["ttl"] = int(form["ttl"])
        else:
            entry.pop("ttl", None)
        self.entries[key] = entry

        if action is None:
            if prev_exist == "false":
                action = "create"
            elif prev_exist == "true":
                action = "update"
            elif "prevValue" in params or "prevIndex" in params:
                action = "compareAndSwap"
            else:
                action = "set"
        body: Dict[str, Any] = {"action": action, "node": self._render(key, False, False)}
        if prev is not None:
            body["prevNode"] = prev
        return (200 if exists else 201), body

    def _post(self, key: str, params: Dict[str, str], form: Dict[str, str]):
        if key in self.entries and not self.entries[key].get("dir"):
            return self._error(104, "Not a directory", key, 403)
        child = "{}/{:020d}".format(key.rstrip("/"), self.index + 1)
        return self._put(child, {}, form, action="create")

    def _delete(self, key: str, params: Dict[str, str], form: Dict[str, str]):
        if key == "/":
            return self._error(107, "Root is read only", key, 403)
        if key not in self.entries:
            return self._error(100, "Key not found", key, 404)
        recursive = params.get("recursive") == "true"
        if self.entries[key].get("dir"):
            if params.get("dir") != "true" and not recursive:
                return self._error(102, "Not a file", key, 403)
            if self._children(key) and not recursive:
                return self._error(108, "Directory not empty", key, 403)
        prev = self._render(key, False, False)
        self.index += 1
        for name in [k for k in self.entries if k == key or k.startswith(key + "/")]:
            del self.entries[name]
        node = {"key": key, "modifiedIndex": self.index, "createdIndex": prev.get("createdIndex")}
        if prev.get("dir"):
            node["dir"] = True
        return 200, {"action": "delete", "node": node, "prevNode": prev}


@pytest.fixture
def fake_etcd() -> FakeEtcd:
    return FakeEtcd()


@pytest.fixture
def http_client(fake_etcd):
    with httpx.Client(base_url=BASE_URL, transport=httpx.MockTransport(fake_etcd.handle)) as http:
        yield http


@pytest.fixture
def client(http_client) -> EtcdKeyClient:
    return EtcdKeyClient(http_client)


@pytest.fixture
def tree_client(client) -> EtcdKeyClient:
    """Client over a store holding ``/a = 1`` and ``/b/c = 2``."""
    client.set("/a", "1")
    client.set("/b/c", "2")
    return client
