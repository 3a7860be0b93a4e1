"""Request descriptors for the etcd v2 keys API."""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .exceptions import EtcdError
from .paths import DEFAULT_API_VERSION, DEFAULT_ROOT, build_key_uri, normalize_root

HEADER_CONTENT_TYPE = "Content-Type"
CONTENT_TYPE_FORM_URLENCODED = "application/x-www-form-urlencoded"

# Local error codes, kept apart from the codes etcd itself reports.
TTL_REQUIRED_CODE = 204


@dataclass(frozen=True)
class EtcdRequest:
    """Everything needed to issue one HTTP call against etcd."""

    method: str
    path: str
    params: Dict[str, Any] = field(default_factory=dict)
    data: Optional[Dict[str, Any]] = None

    @property
    def headers(self) -> Dict[str, str]:
        if self.data is None:
            return {}
        return {HEADER_CONTENT_TYPE: CONTENT_TYPE_FORM_URLENCODED}


def _wire(value: Any) -> Any:
    """etcd expects booleans as lowercase strings."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def _query(condition: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    return {name: _wire(value) for name, value in (condition or {}).items()}


def _with_ttl(data: Dict[str, Any], ttl: Optional[int]) -> Dict[str, Any]:
    # A falsy TTL is left out entirely; sending ttl= would clear an existing one.
    if ttl:
        data["ttl"] = ttl
    return data


class RequestBuilder:
    """Turns key operations into :class:`EtcdRequest` descriptors.

    Every key is resolved relative to ``root``, which may be changed between
    calls but is not meant to be mutated while requests are in flight.
    """

    def __init__(
        self,
        version: Optional[str] = DEFAULT_API_VERSION,
        root: Optional[str] = DEFAULT_ROOT,
    ):
        """Initialize the builder.

        Args:
            version: API version segment; ``None`` means ``v2``
            root: namespace prefix, normalized to have no outer slashes
        """
        self.version = (version or DEFAULT_API_VERSION).strip("/")
        self.root = root

    @property
    def root(self) -> str:
        return self._root

    @root.setter
    def root(self, root: Optional[str]) -> None:
        self._root = normalize_root(root)

    def uri(self, key: Optional[str]) -> str:
        return build_key_uri(key, self._root, self.version)

    def get(self, key: str, flags: Optional[Mapping[str, Any]] = None) -> EtcdRequest:
        """GET ``key``; ``flags`` become query parameters."""
        return EtcdRequest("GET", self.uri(key), params=_query(flags))

    def list_dir(self, key: str = "/", recursive: bool = False) -> EtcdRequest:
        """GET a directory, adding ``recursive=true`` only when asked."""
        params = {"recursive": "true"} if recursive is True else {}
        return EtcdRequest("GET", self.uri(key), params=params)

    def set(
        self,
        key: str,
        value: str,
        ttl: Optional[int] = None,
        condition: Optional[Mapping[str, Any]] = None,
    ) -> EtcdRequest:
        """PUT ``value`` with an optional TTL; ``condition`` goes in the query."""
        return EtcdRequest(
            "PUT",
            self.uri(key),
            params=_query(condition),
            data=_with_ttl({"value": value}, ttl),
        )

    def mk(self, key: str, value: str, ttl: Optional[int] = None) -> EtcdRequest:
        """Create-only ``set`` (``prevExist=false``)."""
        return self.set(key, value, ttl, {"prevExist": False})

    def update(
        self,
        key: str,
        value: str,
        ttl: Optional[int] = None,
        condition: Optional[Mapping[str, Any]] = None,
    ) -> EtcdRequest:
        """Update-only ``set``; ``prevExist=true`` wins over the caller's condition."""
        merged = dict(condition or {})
        merged["prevExist"] = True
        return self.set(key, value, ttl, merged)

    def mkdir(self, key: str, ttl: Optional[int] = None) -> EtcdRequest:
        """PUT a new directory (``prevExist=false``)."""
        return EtcdRequest(
            "PUT",
            self.uri(key),
            params={"prevExist": "false"},
            data=_with_ttl({"dir": "true"}, ttl),
        )

    def update_dir(self, key: str, ttl: Optional[int]) -> EtcdRequest:
        """Refresh a directory's TTL; raises :class:`EtcdError` when ``ttl`` is falsy."""
        if not ttl:
            raise EtcdError("TTL is required", TTL_REQUIRED_CODE)
        return EtcdRequest(
            "PUT",
            self.uri(key),
            params={"dir": "true", "prevExist": "true"},
            data={"ttl": int(ttl)},
        )

    def rm(self, key: str) -> EtcdRequest:
        """DELETE a key."""
        return EtcdRequest("DELETE", self.uri(key))

    def rmdir(self, key: str, recursive: bool = False) -> EtcdRequest:
        """DELETE a directory, with its contents when ``recursive``."""
        params = {"dir": "true"}
        if recursive is True:
            params["recursive"] = "true"
        return EtcdRequest("DELETE", self.uri(key), params=params)

    def mkdir_with_in_order_key(self, directory: str, ttl: Optional[int] = None) -> EtcdRequest:
        """POST a directory under ``directory`` with a server-generated key."""
        return EtcdRequest("POST", self.uri(directory), data=_with_ttl({"dir": "true"}, ttl))

    def set_with_in_order_key(
        self,
        directory: str,
        value: str,
        ttl: Optional[int] = None,
        condition: Optional[Mapping[str, Any]] = None,
    ) -> EtcdRequest:
        """POST ``value`` under ``directory`` with a server-generated key."""
        return EtcdRequest(
            "POST",
            self.uri(directory),
            params=_query(condition),
            data=_with_ttl({"value": value}, ttl),
        )


__all__ = [
    "CONTENT_TYPE_FORM_URLENCODED",
    "EtcdRequest",
    "HEADER_CONTENT_TYPE",
    "RequestBuilder",
    "TTL_REQUIRED_CODE",
]
