"""Core components for etcd key and directory operations."""

from typing import Any

from .client import EtcdKeyClient, get_default_client
from .exceptions import EtcdError, KeyExistsError, KeyNotFoundError
from .logging import setup_logging
from .settings import EtcdSettings


def __getattr__(name: str) -> Any:
    if name == "etcd_client":
        return get_default_client()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "EtcdError",
    "EtcdKeyClient",
    "EtcdSettings",
    "KeyExistsError",
    "KeyNotFoundError",
    "etcd_client",
    "get_default_client",
    "setup_logging",
]
