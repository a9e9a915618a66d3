# Utilities Module
from .slug import create_slug, create_product_url, resolve_media_url

__all__ = [
    "create_slug",
    "create_product_url",
    "resolve_media_url",
]
