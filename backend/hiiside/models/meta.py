"""
Page metadata model used for link previews.
"""

from typing import Literal, Optional
from pydantic import BaseModel


class PageMeta(BaseModel):
    """Preview card data injected into the SPA shell for one request."""
    title: str
    description: str
    url: str  # canonical URL
    image: Optional[str] = None
    type: Literal["website", "article", "profile"] = "website"
    twitter_card: Literal["summary", "summary_large_image"] = "summary_large_image"
