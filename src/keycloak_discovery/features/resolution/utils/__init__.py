"""Resolution utilities."""

from .validation import is_routable, order_candidates, parse_address, select_address

__all__ = ["is_routable", "order_candidates", "parse_address", "select_address"]
