"""API module."""

from .chat import router as chat_router
from .emoji import router as emoji_router
from .pages import router as pages_router
from .errors import register_exception_handlers

__all__ = ['chat_router', 'emoji_router', 'pages_router', 'register_exception_handlers']
