"""Resolution entities and protocols."""

from .protocols import NameResolver
from .resolved_address import ResolvedAddress

__all__ = ["NameResolver", "ResolvedAddress"]
