"""Resolution services."""

from .address_resolver import AddressResolver

__all__ = ["AddressResolver"]
