"""Middleware module."""

from .cors import CORSMiddleware
from .error_middleware import UnhandledErrorMiddleware
from .logging_middleware import RequestLoggingMiddleware

__all__ = ['CORSMiddleware', 'RequestLoggingMiddleware', 'UnhandledErrorMiddleware']
