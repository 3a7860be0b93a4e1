"""Decoding of etcd keys API responses."""

import json
import logging
from typing import Any, Dict, Mapping, Type, Union

from .exceptions import EtcdError
from .nodes import Directory, Leaf, Node

_logger = logging.getLogger("etcd_keyspace.responses")


def decode_body(raw: Union[bytes, str]) -> Dict[str, Any]:
    """Decode a response body into a mapping.

    etcd signals errors through ``errorCode`` in the body rather than the
    HTTP status, so every body is decoded the same way.
    """
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        if not raw.strip():
            return {}
        body = json.loads(raw)
    except ValueError as e:  # UnicodeDecodeError included
        _logger.error(
            "etcd_response_decode_failed",
            extra={
                "event": {"category": ["etcd"], "action": "decode_failed"},
                "error": {"message": str(e), "type": type(e).__name__},
            },
        )
        raise EtcdError(f"Invalid JSON response: {e}") from e
    if not isinstance(body, dict):
        raise EtcdError(f"Unexpected response body: {body!r}")
    return body


def raise_for_error(body: Mapping[str, Any], error_class: Type[EtcdError] = EtcdError) -> None:
    """Raise ``error_class`` when the body carries an ``errorCode``."""
    if "errorCode" not in body:
        return
    error = error_class(
        body.get("message", ""),
        body["errorCode"],
        cause=body.get("cause"),
        index=body.get("index"),
    )
    _logger.warning(
        "etcd_service_error",
        extra={
            "event": {"category": ["etcd"], "action": "service_error"},
            "etcd": {
                "error_code": error.error_code,
                "cause": error.cause,
                "error_type": error_class.__name__,
            },
        },
    )
    raise error


def parse_node(data: Mapping[str, Any]) -> Node:
    """Build a :class:`Leaf` or :class:`Directory` from a node mapping."""
    meta = {
        "key": data.get("key", "/"),
        "ttl": data.get("ttl"),
        "expiration": data.get("expiration"),
        "created_index": data.get("createdIndex"),
        "modified_index": data.get("modifiedIndex"),
    }
    if data.get("dir"):
        children = [parse_node(child) for child in data.get("nodes") or []]
        return Directory(nodes=children, **meta)
    return Leaf(value=data.get("value"), **meta)


def unwrap_node(body: Mapping[str, Any]) -> Node:
    """Return the ``node`` field of a successful response as a :class:`Node`."""
    return parse_node(body["node"])


__all__ = ["decode_body", "parse_node", "raise_for_error", "unwrap_node"]
