"""Name resolver backends."""

from .dns_name_resolver import DnsNameResolver
from .static_name_resolver import StaticNameResolver

__all__ = ["DnsNameResolver", "StaticNameResolver"]
