"""Address resolution feature.

Feature-First layout:
- entities/: resolved address and the NameResolver protocol
- adapters/: DNS and static name resolver backends
- services/: AddressResolver with fixed-interval retries
- utils/: candidate validation and deterministic selection
"""

from .adapters import DnsNameResolver, StaticNameResolver
from .entities import NameResolver, ResolvedAddress
from .services import AddressResolver

__all__ = [
    "AddressResolver",
    "DnsNameResolver",
    "NameResolver",
    "ResolvedAddress",
    "StaticNameResolver",
]
