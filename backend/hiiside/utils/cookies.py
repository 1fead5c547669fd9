"""
Session cookie parsing and serialization.
"""

from typing import Dict, Optional
from urllib.parse import quote, unquote

SESSION_COOKIE_NAME = "session-token"


def parse_cookies(header: Optional[str]) -> Dict[str, str]:
    """
    Parse a Cookie header.

    Pairs without "=" or with an empty name are skipped. When a name repeats,
    the first occurrence wins.

    Args:
        header: Raw Cookie header value

    Returns:
        Dict[str, str]: Cookie name to URL-decoded value
    """
    cookies: Dict[str, str] = {}
    if not header:
        return cookies

    for part in header.split(";"):
        part = part.strip()
        if "=" not in part:
            continue
        key, value = part.split("=", 1)
        key = key.strip()
        if not key or key in cookies:
            continue
        cookies[key] = unquote(value.strip())
    return cookies


def _attributes(domain: str, is_production: bool) -> list:
    parts = ["HttpOnly", "Path=/", "SameSite=Lax"]
    if domain:
        parts.append(f"Domain={domain if domain.startswith('.') else '.' + domain}")
    if is_production:
        parts.append("Secure")
    return parts


def serialize_session_cookie(token: str, domain: str = "", is_production: bool = False) -> str:
    """
    Build the Set-Cookie value carrying a session token.

    Args:
        token: Session token
        domain: Cookie domain; omitted when empty, prefixed with "." when needed
        is_production: Adds the Secure attribute

    Returns:
        str: Set-Cookie header value
    """
    return "; ".join([f"{SESSION_COOKIE_NAME}={quote(token, safe='')}"] + _attributes(domain, is_production))


def serialize_cleared_cookie(domain: str = "", is_production: bool = False) -> str:
    """Set-Cookie value that makes the browser drop the session cookie."""
    return "; ".join([f"{SESSION_COOKIE_NAME}=", "Max-Age=0"] + _attributes(domain, is_production))
