"""Product URL and media path helpers."""
import re
from typing import Any

_NON_SLUG_CHARS = re.compile(r"[^\w-]+")
_ABSOLUTE_URL = re.compile(r"^https?://", re.IGNORECASE)


def create_slug(name: Any) -> str:
    """Lowercase, hyphenate spaces and drop anything but word chars and '-'."""
    if not name:
        return "product"
    return _NON_SLUG_CHARS.sub("", str(name).lower().replace(" ", "-"))


def create_product_url(product_id: Any, name: Any) -> str:
    return f"/product/{create_slug(name)}-{product_id}"


def resolve_media_url(path: Any, media_base: str = "") -> str:
    """
    Qualify a relative media path against the media base.

    Absolute http(s) URLs are returned unchanged; an empty path gives "".
    """
    if not path:
        return ""
    path = str(path)
    if _ABSOLUTE_URL.match(path) or not media_base:
        return path
    base = media_base.rstrip("/")
    return f"{base}{'' if path.startswith('/') else '/'}{path}"
