"""
Textual head-tag rewriting for the SPA shell.

Each tag is upserted: an existing tag with the same attribute signature is
replaced as a whole, otherwise a new tag is inserted before </head>. Running
apply_meta twice with the same PageMeta yields the same document.
"""

import html as html_lib
import re
from typing import Pattern

from ..models import PageMeta

HEAD_CLOSE = "</head>"
TITLE_PATTERN = re.compile(r"<title[^>]*>.*?</title>", re.IGNORECASE | re.DOTALL)


def escape_html(value: str) -> str:
    """Escape &, <, >, " and ' for use in text and attribute values."""
    return html_lib.escape(value, quote=True)


def upsert_tag(document: str, pattern: Pattern[str], tag: str) -> str:
    """Replace the first tag matching pattern, or insert tag before </head>."""
    if pattern.search(document):
        return pattern.sub(lambda _: tag, document, count=1)
    return document.replace(HEAD_CLOSE, f"  {tag}\n{HEAD_CLOSE}", 1)


def upsert_title(document: str, title: str) -> str:
    return upsert_tag(document, TITLE_PATTERN, f"<title>{escape_html(title)}</title>")


def upsert_meta(document: str, attr: str, content: str) -> str:
    """
    Upsert a <meta> tag identified by one attribute.

    Args:
        document: HTML text
        attr: Identifying attribute, e.g. 'property="og:title"'
        content: Unescaped content value
    """
    pattern = re.compile(rf"<meta\s+[^>]*{re.escape(attr)}[^>]*>", re.IGNORECASE)
    return upsert_tag(document, pattern, f'<meta {attr} content="{escape_html(content)}" />')


def upsert_link(document: str, rel: str, href: str) -> str:
    pattern = re.compile(rf"""<link\s+[^>]*rel=["']{re.escape(rel)}["'][^>]*>""", re.IGNORECASE)
    return upsert_tag(document, pattern, f'<link rel="{rel}" href="{escape_html(href)}" />')


def apply_meta(document: str, meta: PageMeta, site_name: str) -> str:
    """
    Rewrite the head of the SPA shell for one page.

    Args:
        document: Template HTML
        meta: Resolved page metadata
        site_name: Value of og:site_name

    Returns:
        str: HTML with title, description, canonical, Open Graph and Twitter tags set
    """
    result = upsert_title(document, meta.title)
    result = upsert_meta(result, 'name="description"', meta.description)
    result = upsert_link(result, "canonical", meta.url)
    result = upsert_meta(result, 'property="og:title"', meta.title)
    result = upsert_meta(result, 'property="og:description"', meta.description)
    result = upsert_meta(result, 'property="og:url"', meta.url)
    result = upsert_meta(result, 'property="og:type"', meta.type)
    result = upsert_meta(result, 'property="og:site_name"', site_name)
    result = upsert_meta(result, 'name="twitter:title"', meta.title)
    result = upsert_meta(result, 'name="twitter:description"', meta.description)
    result = upsert_meta(result, 'name="twitter:card"', meta.twitter_card)
    if meta.image:
        result = upsert_meta(result, 'property="og:image"', meta.image)
        result = upsert_meta(result, 'name="twitter:image"', meta.image)
    return result
