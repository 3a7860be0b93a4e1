"""Key path resolution for the etcd v2 keys API."""

import re
from typing import Optional

DEFAULT_ROOT = ""
DEFAULT_API_VERSION = "v2"

_DOUBLE_SLASH = re.compile(r"/{2,}")


def normalize_root(root: Optional[str]) -> str:
    """Strip leading and trailing slashes from a root namespace.

    ``"/"`` and ``"//"`` both become ``""``, ``"/test/"`` becomes ``"test"``.
    """
    return (root or "").strip("/")


def build_key_uri(
    key: Optional[str],
    root: Optional[str] = DEFAULT_ROOT,
    version: str = DEFAULT_API_VERSION,
) -> str:
    """Build the request path for ``key`` under ``root``.

    The result always starts with ``/<version>/keys/`` and never contains
    a doubled slash. An empty or ``/`` key addresses the root directory.
    """
    uri = "/{}/keys/{}/{}".format(
        version.strip("/"),
        normalize_root(root),
        (key or "").strip("/"),
    )
    return _DOUBLE_SLASH.sub("/", uri)


__all__ = ["DEFAULT_API_VERSION", "DEFAULT_ROOT", "build_key_uri", "normalize_root"]
