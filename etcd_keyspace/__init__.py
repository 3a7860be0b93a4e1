"""Etcd Keyspace - a Python client for the etcd v2 HTTP keys API."""

from typing import Any

__version__ = "0.1.0"

from .core.client import EtcdKeyClient, get_default_client
from .core.exceptions import EtcdError, KeyExistsError, KeyNotFoundError
from .core.logging import setup_logging
from .core.nodes import Directory, Leaf, Node
from .core.paths import build_key_uri, normalize_root
from .core.request_builder import EtcdRequest, RequestBuilder
from .core.settings import EtcdSettings
from .core.tree import FlattenedTree, flatten


def __getattr__(name: str) -> Any:
    # ``etcd_client`` reads the environment and TLS files, so build it on first access.
    if name == "etcd_client":
        return get_default_client()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "Directory",
    "EtcdError",
    "EtcdKeyClient",
    "EtcdRequest",
    "EtcdSettings",
    "FlattenedTree",
    "KeyExistsError",
    "KeyNotFoundError",
    "Leaf",
    "Node",
    "RequestBuilder",
    "build_key_uri",
    "etcd_client",
    "flatten",
    "get_default_client",
    "normalize_root",
    "setup_logging",
]
