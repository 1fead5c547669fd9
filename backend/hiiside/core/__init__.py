"""Core module - session registry, error taxonomy and logging setup."""

from .errors import UpstreamError, UpstreamErrorKind
from .session_registry import SessionRegistry

__all__ = ['UpstreamError', 'UpstreamErrorKind', 'SessionRegistry']
