"""
Link-preview metadata for SPA routes.

Routes are matched in priority order: post, profile, hashtag, default.
Upstream lookups are best effort; whenever data is missing the page falls
back to the default metadata so the shell always renders.
"""

import logging
import re
from typing import Any, Dict, Optional
from urllib.parse import unquote

from ..config import Settings
from ..models import PageMeta
from .bluesky import PublicApiClient

logger = logging.getLogger(__name__)

DESCRIPTION_MAX_LENGTH = 200

DEFAULT_TITLE = "HiiSide - Decentralized Social Platform"
DEFAULT_DESCRIPTION = (
    "HiiSide is a decentralized social platform built on the AT Protocol. "
    "Own your data, build community, and connect through an open, federated network."
)

POST_ROUTE = re.compile(r"^/profile/([^/]+)/post/([^/]+)/?$")
PROFILE_ROUTE = re.compile(r"^/profile/([^/]+)/?$")
HASHTAG_ROUTE = re.compile(r"^/hashtag/([^/]+)/?$")


def truncate_text(text: str, max_length: int = DESCRIPTION_MAX_LENGTH) -> str:
    """Cut text to max_length characters, the last three being '...'."""
    if len(text) <= max_length:
        return text
    return f"{text[:max(0, max_length - 3)]}..."


def get_embed_image(embed: Optional[Dict[str, Any]]) -> Optional[str]:
    """First preview image of a post embed view, if any."""
    if not embed:
        return None
    embed_type = embed.get("$type")
    if embed_type == "app.bsky.embed.images#view":
        images = embed.get("images") or []
        if images:
            return images[0].get("fullsize") or images[0].get("thumb")
        return None
    if embed_type == "app.bsky.embed.external#view":
        return (embed.get("external") or {}).get("thumb")
    if embed_type == "app.bsky.embed.video#view":
        return embed.get("thumbnail")
    if embed_type == "app.bsky.embed.recordWithMedia#view":
        return get_embed_image(embed.get("media"))
    return None


class MetadataResolver:
    """Builds PageMeta for a request path."""

    def __init__(self, settings: Settings, public_client: PublicApiClient):
        self.settings = settings
        self.public_client = public_client

    def _canonical_url(self, pathname: str) -> str:
        return f"{self.settings.site_base_url}{pathname}"

    async def resolve(self, pathname: str) -> PageMeta:
        match = POST_ROUTE.match(pathname)
        if match:
            return await self.build_post_meta(unquote(match.group(1)), unquote(match.group(2)), pathname)

        match = PROFILE_ROUTE.match(pathname)
        if match:
            return await self.build_profile_meta(unquote(match.group(1)), pathname)

        match = HASHTAG_ROUTE.match(pathname)
        if match:
            return self.build_hashtag_meta(unquote(match.group(1)), pathname)

        return self.build_default_meta(pathname)

    def build_default_meta(self, pathname: str) -> PageMeta:
        return PageMeta(
            title=DEFAULT_TITLE,
            description=DEFAULT_DESCRIPTION,
            url=self._canonical_url(pathname),
            image=self.settings.default_og_image_url,
            type="website",
            twitter_card="summary_large_image",
        )

    def build_hashtag_meta(self, tag: str, pathname: str) -> PageMeta:
        site = self.settings.site_name
        return PageMeta(
            title=f"#{tag} on {site}",
            description=f"Latest posts tagged #{tag} on {site}.",
            url=self._canonical_url(pathname),
            image=self.settings.default_og_image_url,
            type="website",
            twitter_card="summary_large_image",
        )

    async def build_profile_meta(self, handle: str, pathname: str) -> PageMeta:
        cleaned_handle = handle.lstrip("@")
        profile = await self.public_client.get_profile(cleaned_handle) or {}
        shown_handle = profile.get("handle") or cleaned_handle

        bio = profile.get("description")
        avatar = profile.get("avatar")
        return PageMeta(
            title=profile.get("displayName") or f"@{shown_handle}",
            description=truncate_text(bio) if bio else f"@{shown_handle} on {self.settings.site_name}.",
            url=self._canonical_url(pathname),
            image=avatar or self.settings.default_og_image_url,
            type="profile",
            twitter_card="summary" if avatar else "summary_large_image",
        )

    async def build_post_meta(self, handle: str, post_id: str, pathname: str) -> PageMeta:
        cleaned_handle = handle.lstrip("@")
        did = await self.public_client.resolve_handle(cleaned_handle)
        if not did:
            logger.debug(f"Handle {cleaned_handle} did not resolve, using default metadata")
            return self.build_default_meta(pathname)

        uri = f"at://{did}/app.bsky.feed.post/{post_id}"
        thread_data = await self.public_client.get_post_thread(uri, depth=0, parent_height=0) or {}
        post = (thread_data.get("thread") or {}).get("post") or thread_data.get("post")
        if not post:
            return self.build_default_meta(pathname)

        author = post.get("author") or {}
        author_handle = author.get("handle") or cleaned_handle
        author_name = author.get("displayName") or f"@{author_handle}"
        text = (post.get("record") or {}).get("text")

        image = (
            get_embed_image(post.get("embed"))
            or author.get("avatar")
            or self.settings.default_og_image_url
        )
        return PageMeta(
            title=f"Post by {author_name}",
            description=truncate_text(str(text)) if text else f"Post by @{author_handle} on {self.settings.site_name}.",
            url=self._canonical_url(pathname),
            image=image or None,
            type="article",
            twitter_card="summary_large_image" if image else "summary",
        )
