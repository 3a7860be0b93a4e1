"""Exceptions raised by the etcd keyspace client."""

from typing import Optional


class EtcdError(Exception):
    """Error reported by etcd, or detected locally before a request is sent.

    Carries the service message and numeric ``errorCode`` so callers can
    tell failures apart without parsing text.
    """

    def __init__(
        self,
        message: str,
        error_code: int = 0,
        cause: Optional[str] = None,
        index: Optional[int] = None,
    ):
        super().__init__(message, error_code)
        self.message = message
        self.error_code = error_code
        self.cause = cause
        self.index = index

    def __str__(self) -> str:
        text = f"[{self.error_code}] {self.message}"
        if self.cause:
            text = f"{text} ({self.cause})"
        return text


class KeyNotFoundError(EtcdError):
    """The key or directory targeted by a read, update or listing is absent."""


class KeyExistsError(EtcdError):
    """A create-only write hit a key or directory that already exists."""


__all__ = ["EtcdError", "KeyNotFoundError", "KeyExistsError"]
