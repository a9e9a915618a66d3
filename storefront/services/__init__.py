"""Storefront services: money helpers, cart totals and checkout."""
