"""
Upstream error taxonomy.

Every failure raised by the upstream XRPC clients is translated into an
UpstreamError before it leaves the client, so request handlers never inspect
raw httpx errors or response bodies.
"""

from enum import Enum
from typing import Optional


class UpstreamErrorKind(str, Enum):
    """Classification of an upstream failure."""
    VALIDATION = "validation"
    AUTH = "auth"
    RATE_LIMITED = "rate_limited"
    UNEXPECTED = "unexpected"


class UpstreamError(Exception):
    """
    Error raised by an upstream call.

    Attributes:
        kind: Classification used to pick the local status code
        message: Upstream message (never returned verbatim for UNEXPECTED)
        status: HTTP status received from upstream, None for network failures
        error_code: XRPC error name, e.g. "ExpiredToken"
    """

    def __init__(
        self,
        kind: UpstreamErrorKind,
        message: str,
        status: Optional[int] = None,
        error_code: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status = status
        self.error_code = error_code

    @classmethod
    def from_status(
        cls,
        status: int,
        message: str,
        error_code: Optional[str] = None,
    ) -> "UpstreamError":
        """Classify a non-2xx upstream response."""
        if status == 401 or error_code in ("AuthenticationRequired", "InvalidToken"):
            kind = UpstreamErrorKind.AUTH
        elif status == 429:
            kind = UpstreamErrorKind.RATE_LIMITED
        elif status == 400:
            kind = UpstreamErrorKind.VALIDATION
        else:
            kind = UpstreamErrorKind.UNEXPECTED
        return cls(kind, message, status=status, error_code=error_code)

    @property
    def is_expired_token(self) -> bool:
        return self.error_code == "ExpiredToken"

    def __repr__(self) -> str:
        return (
            f"UpstreamError(kind={self.kind.value!r}, status={self.status!r}, "
            f"error_code={self.error_code!r}, message={self.message!r})"
        )
