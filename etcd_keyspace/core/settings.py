"""Connection settings for the etcd keyspace client."""

import logging
import os
import ssl
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlparse

from .paths import DEFAULT_API_VERSION, DEFAULT_ROOT, normalize_root

DEFAULT_SERVER = "http://127.0.0.1:2379"
DEFAULT_TIMEOUT = 5.0


class EtcdSettings:
    """Server address, API version, root namespace and transport options.

    Explicit arguments win; anything left unset is read from the
    ``EtcdSettings__*`` environment variables, then from the defaults.
    """

    def __init__(
        self,
        endpoint: Optional[str] = None,
        api_version: Optional[str] = None,
        root_key: Optional[str] = None,
        ca_cert_path: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self._logger = logging.getLogger("etcd_keyspace.settings")

        self.endpoint = (
            endpoint or os.getenv("EtcdSettings__HostName") or DEFAULT_SERVER
        ).rstrip("/")
        if "://" not in self.endpoint:
            self.endpoint = f"http://{self.endpoint}"
        self.api_version = (
            api_version or os.getenv("EtcdSettings__ApiVersion") or DEFAULT_API_VERSION
        ).strip("/")
        self.root_key = normalize_root(
            root_key if root_key is not None else os.getenv("EtcdSettings__RootKey", DEFAULT_ROOT)
        )
        self.ca_cert_path = ca_cert_path or os.getenv("EtcdSettings__CaCertPath")

        if timeout is not None:
            self.timeout = float(timeout)
        else:
            raw_timeout = os.getenv("EtcdSettings__Timeout")
            try:
                self.timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
            except ValueError:
                self._logger.warning(
                    "etcd_timeout_invalid",
                    extra={
                        "event": {"category": ["config"], "action": "validation_failed"},
                        "etcd": {"timeout": raw_timeout, "fallback": DEFAULT_TIMEOUT},
                    },
                )
                self.timeout = DEFAULT_TIMEOUT

    @staticmethod
    def parse_host_port(endpoint: str) -> Tuple[str, int, str]:
        """Parse host, port, and scheme from endpoint URL."""
        parsed = urlparse(str(endpoint))
        host = parsed.hostname or "127.0.0.1"
        port = parsed.port or 2379
        scheme = parsed.scheme or "http"
        return host, int(port), scheme

    def http_options(self) -> Dict[str, Any]:
        """Keyword arguments for building an ``httpx.Client``."""
        options: Dict[str, Any] = {"base_url": self.endpoint, "timeout": self.timeout}
        _, _, scheme = self.parse_host_port(self.endpoint)
        if scheme == "https" and self.ca_cert_path:
            options["verify"] = ssl.create_default_context(cafile=self.ca_cert_path)
            self._logger.info(
                "Using TLS for etcd connection",
                extra={"etcd": {"ca_cert_path": self.ca_cert_path}},
            )
        return options

    def __repr__(self) -> str:
        return (
            f"EtcdSettings(endpoint={self.endpoint!r}, api_version={self.api_version!r}, "
            f"root_key={self.root_key!r}, timeout={self.timeout!r})"
        )


__all__ = ["DEFAULT_SERVER", "DEFAULT_TIMEOUT", "EtcdSettings"]
