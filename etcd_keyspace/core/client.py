"""Etcd v2 keys API client."""

import logging
import threading
from typing import Any, Dict, List, Mapping, Optional, Union

import httpx

from .exceptions import EtcdError, KeyExistsError, KeyNotFoundError
from .nodes import Leaf, Node
from .paths import DEFAULT_API_VERSION, DEFAULT_ROOT
from .request_builder import EtcdRequest, RequestBuilder
from .responses import decode_body, raise_for_error, unwrap_node
from .settings import DEFAULT_SERVER, EtcdSettings
from .tree import FlattenedTree, flatten

BASE_URI_MISSING_CODE = 205


class EtcdKeyClient:
    """Key and directory operations over the etcd v2 HTTP API.

    The HTTP transport is an injected ``httpx.Client`` that must carry a
    ``base_url``. etcd reports failures in the response body, so the client
    does not raise on non-2xx statuses; the body's ``errorCode`` is turned
    into :class:`KeyNotFoundError`, :class:`KeyExistsError` or
    :class:`EtcdError` depending on the operation. ``set`` is the exception:
    it returns the decoded body as-is, error fields included.

    Example::

        client = EtcdKeyClient.connect("http://127.0.0.1:2379", root="/app")
        client.mk("feature/enabled", "true")
        client.get_keys_value("/", recursive=True)
        # {'/app/feature/enabled': 'true'}
    """

    def __init__(
        self,
        http_client: httpx.Client,
        version: Optional[str] = DEFAULT_API_VERSION,
        root: Optional[str] = DEFAULT_ROOT,
    ):
        """Initialize the client.

        Args:
            http_client: httpx client with ``base_url`` pointing at etcd
            version: API version segment (defaults to ``v2``)
            root: namespace every key is resolved under (defaults to none)

        Raises:
            EtcdError: if ``http_client`` has no base URL (code 205)
        """
        self._logger = logging.getLogger("etcd_keyspace.client")

        if http_client is None or not http_client.base_url.host:
            self._logger.error(
                "etcd_base_uri_not_configured",
                extra={
                    "event": {"category": ["config"], "action": "validation_failed"},
                    "etcd": {"endpoint_configured": False},
                },
            )
            raise EtcdError("Base URI not set at HTTP client", BASE_URI_MISSING_CODE)

        self._http = http_client
        self._owns_http = False
        self._builder = RequestBuilder(version, root)

        self._logger.debug(
            "etcd_client_initialized",
            extra={
                "etcd": {
                    "endpoint": str(http_client.base_url),
                    "version": self._builder.version,
                    "root": self._builder.root,
                },
            },
        )

    @classmethod
    def connect(
        cls,
        server: Optional[str] = None,
        version: Optional[str] = None,
        root: Optional[str] = None,
        **options: Any,
    ) -> "EtcdKeyClient":
        """Create a client with its own ``httpx.Client`` for ``server``.

        Args:
            server: etcd base address (defaults to ``http://127.0.0.1:2379``)
            version: API version segment (defaults to ``v2``)
            root: root namespace (defaults to none)
            **options: passed to ``httpx.Client`` (``timeout``, ``headers``, ``verify``...)

        Returns:
            A client that closes its HTTP client on :meth:`close`
        """
        server = (server or DEFAULT_SERVER).rstrip("/")
        http_client = httpx.Client(**{**options, "base_url": server})
        client = cls(http_client, version, root)
        client._owns_http = True
        return client

    @classmethod
    def from_settings(cls, settings: Optional[EtcdSettings] = None) -> "EtcdKeyClient":
        """Create a client from :class:`EtcdSettings` (the environment by default)."""
        if settings is None:
            settings = EtcdSettings()
        http_client = httpx.Client(**settings.http_options())
        client = cls(http_client, settings.api_version, settings.root_key)
        client._owns_http = True
        return client

    @property
    def root(self) -> str:
        return self._builder.root

    @root.setter
    def root(self, root: Optional[str]) -> None:
        self._builder.root = root

    def set_root(self, root: Optional[str]) -> "EtcdKeyClient":
        """Resolve later keys under ``root``; ``set_root("/app")`` puts ``key1`` at ``/app/key1``."""
        self._builder.root = root
        return self

    @property
    def version(self) -> str:
        return self._builder.version

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "EtcdKeyClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _send(self, request: EtcdRequest) -> Dict[str, Any]:
        self._logger.debug(
            "etcd_request",
            extra={
                "etcd": {
                    "method": request.method,
                    "path": request.path,
                    "params": request.params,
                }
            },
        )
        response = self._http.request(
            request.method,
            request.path,
            params=request.params or None,
            data=request.data,
            headers=request.headers or None,
        )
        return decode_body(response.content)

    def do_request(self, uri: str) -> str:
        """GET ``uri`` relative to the base URL and return the raw body."""
        response = self._http.request("GET", uri)
        return response.text

    def get_node(self, key: str, flags: Optional[Mapping[str, Any]] = None) -> Node:
        """Fetch the node stored at ``key``; ``flags`` are extra query params."""
        body = self._send(self._builder.get(key, flags))
        raise_for_error(body, KeyNotFoundError)
        return unwrap_node(body)

    def get(self, key: str, flags: Optional[Mapping[str, Any]] = None) -> Optional[str]:
        """Fetch the value of ``key``; a directory has no value and yields ``None``."""
        node = self.get_node(key, flags)
        if isinstance(node, Leaf):
            return node.value
        return None

    def set(
        self,
        key: str,
        value: str,
        ttl: Optional[int] = None,
        condition: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Write ``value`` at ``key``.

        Unlike the other writes this never raises on a service error: the
        decoded body is returned and may contain ``errorCode``. Existing
        callers rely on that, so check the body when using ``set`` directly.
        """
        return self._send(self._builder.set(key, value, ttl, condition))

    def mk(self, key: str, value: str, ttl: Optional[int] = None) -> Dict[str, Any]:
        """Create ``key``; raises :class:`KeyExistsError` if it is already there."""
        body = self._send(self._builder.mk(key, value, ttl))
        raise_for_error(body, KeyExistsError)
        return body

    def update(
        self,
        key: str,
        value: str,
        ttl: Optional[int] = None,
        condition: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Overwrite an existing key.

        ``condition`` may add ``prevValue`` or ``prevIndex``; ``prevExist`` is
        always ``true``. Raises :class:`KeyNotFoundError` when the key is
        missing or the condition does not hold.
        """
        body = self._send(self._builder.update(key, value, ttl, condition))
        raise_for_error(body, KeyNotFoundError)
        return body

    def mkdir(self, key: str, ttl: Optional[int] = None) -> Dict[str, Any]:
        """Create a directory.

        Args:
            key: directory key, relative to the client root
            ttl: seconds until the directory expires; falsy means never

        Returns:
            The decoded response body

        Raises:
            KeyExistsError: if ``key`` already exists
        """
        body = self._send(self._builder.mkdir(key, ttl))
        raise_for_error(body, KeyExistsError)
        return body

    def update_dir(self, key: str, ttl: Optional[int]) -> Dict[str, Any]:
        """Refresh a directory's TTL. A falsy ``ttl`` fails before any request."""
        body = self._send(self._builder.update_dir(key, ttl))
        raise_for_error(body)
        return body

    def rm(self, key: str) -> Dict[str, Any]:
        """Remove a key.

        Args:
            key: key to delete, relative to the client root

        Returns:
            The decoded response body, with the old value in ``prevNode``

        Raises:
            EtcdError: on any service error
        """
        body = self._send(self._builder.rm(key))
        raise_for_error(body)
        return body

    def rmdir(self, key: str, recursive: bool = False) -> Dict[str, Any]:
        """Remove a directory, with its contents when ``recursive``.

        Args:
            key: directory key, relative to the client root
            recursive: also delete everything below ``key``

        Returns:
            The decoded response body

        Raises:
            EtcdError: on any service error, e.g. a non-empty directory
        """
        body = self._send(self._builder.rmdir(key, recursive))
        raise_for_error(body)
        return body

    def list_dir(self, key: str = "/", recursive: bool = False) -> Node:
        """Fetch a directory node, with its whole subtree when ``recursive``."""
        body = self._send(self._builder.list_dir(key, recursive))
        raise_for_error(body, KeyNotFoundError)
        return unwrap_node(body)

    def _flatten_dir(self, key: str, recursive: bool) -> FlattenedTree:
        return flatten(self.list_dir(key, recursive))

    def ls(self, key: str = "/", recursive: bool = False) -> List[str]:
        """List the key paths below ``key`` in traversal order."""
        return self._flatten_dir(key, recursive).dirs

    def get_keys_value(
        self,
        root: str = "/",
        recursive: bool = True,
        key: Optional[str] = None,
    ) -> Union[str, Dict[str, str]]:
        """Map every leaf key under ``root`` to its value.

        Args:
            root: directory to list, relative to the client root
            recursive: whether to expand nested directories
            key: absolute key whose value to return on its own

        Returns:
            The value of ``key`` when it is one of the listed leaves,
            otherwise the whole ``{key: value}`` mapping
        """
        values = self._flatten_dir(root, recursive).values
        if key is not None and key in values:
            return values[key]
        return values

    def mkdir_with_in_order_key(self, directory: str, ttl: Optional[int] = None) -> Dict[str, Any]:
        """Create a directory under ``directory`` with a server-generated name."""
        body = self._send(self._builder.mkdir_with_in_order_key(directory, ttl))
        raise_for_error(body)
        return body

    def set_with_in_order_key(
        self,
        directory: str,
        value: str,
        ttl: Optional[int] = None,
        condition: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Append ``value`` to ``directory`` under a server-generated key."""
        body = self._send(self._builder.set_with_in_order_key(directory, value, ttl, condition))
        raise_for_error(body)


_default_client: Optional[EtcdKeyClient] = None
_default_lock = threading.Lock()


def get_default_client() -> EtcdKeyClient:
    """Return the shared client configured from the EtcdSettings__* variables.

    The client and its TLS context are created on first use, not at import.
    """
    global _default_client
    with _default_lock:
        if _default_client is None:
            _default_client = EtcdKeyClient.from_settings()
        return _default_client


def __getattr__(name: str) -> Any:
    if name == "etcd_client":
        return get_default_client()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["BASE_URI_MISSING_CODE", "EtcdKeyClient", "etcd_client", "get_default_client"]
