"""Services module - upstream clients, metadata and static file serving."""

from .bluesky import BlueskyAgent, ChatClient, PublicApiClient
from .metadata import MetadataResolver
from .static_files import IndexTemplate

__all__ = ['BlueskyAgent', 'ChatClient', 'PublicApiClient', 'MetadataResolver', 'IndexTemplate']
