"""Run summary output."""

from .card import Card, browse_links, write_card

__all__ = ["Card", "browse_links", "write_card"]
