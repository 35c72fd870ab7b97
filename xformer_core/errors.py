"""
Exception hierarchy for a transformer run.

Everything raised here is fatal: the run stops before any output is written.
Tolerant lookups (unknown location, track or list item ids) never raise.
"""
from typing import Mapping, Optional


class XformerError(Exception):
    """Base class for every failure the CLI reports."""


class ConfigError(XformerError):
    pass


class FetchError(XformerError):
    """A Guidebook request failed; carries the status and response body."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class RateLimitError(FetchError):
    """A 429 arrived without a usable Retry-After header."""

    def __init__(self, message: str, headers: Optional[Mapping[str, str]] = None, body: str = ""):
        super().__init__(message, status=429, body=body)
        self.headers = dict(headers or {})


class DecodeError(XformerError):
    """JSON from Guidebook could not be decoded; keeps the raw payload for diagnosis."""

    def __init__(self, message: str, payload: bytes = b""):
        super().__init__(message)
        self.payload = payload


class SnapshotError(XformerError):
    pass


class TransformError(XformerError):
    pass


def error_chain(exc: BaseException) -> str:
    """Render an exception and its causes as one line, outermost first."""
    parts = []
    current: Optional[BaseException] = exc
    while current is not None:
        parts.append(str(current))
        current = current.__cause__
    return ": ".join(p for p in parts if p)


def find_cause(exc: BaseException, kind: type) -> Optional[BaseException]:
    """First exception of `kind` in the __cause__ chain of `exc`, itself included."""
    current: Optional[BaseException] = exc
    while current is not None:
        if isinstance(current, kind):
            return current
        current = current.__cause__
    return None
