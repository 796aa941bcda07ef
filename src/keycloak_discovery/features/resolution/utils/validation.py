"""Candidate address validation and deterministic selection."""

import ipaddress
from typing import Iterable, List, Optional, Union

from ....core.exceptions import UnroutableAddressError


def parse_address(address: str) -> Optional[Union[ipaddress.IPv4Address, ipaddress.IPv6Address]]:
    """Parse an IP literal, ignoring an IPv6 zone suffix. Returns None if invalid."""
    try:
        return ipaddress.ip_address(address.split("%", 1)[0])
    except ValueError:
        return None


def is_routable(address: str, allow_loopback: bool = False) -> bool:
    """Whether peers inside the cluster can reach ``address``."""
    ip = parse_address(address)
    if ip is None:
        return False
    if ip.is_unspecified or ip.is_multicast or ip.is_link_local:
        return False
    if ip.is_loopback:
        return allow_loopback
    return True


def order_candidates(candidates: Iterable[str]) -> List[str]:
    """De-duplicate and sort candidates: IPv4 first, then numeric order.

    Invalid literals are dropped.
    """
    parsed = {}
    for candidate in candidates:
        ip = parse_address(candidate)
        if ip is not None and ip not in parsed:
            parsed[ip] = str(ip)
    return [parsed[ip] for ip in sorted(parsed, key=lambda ip: (ip.version, int(ip)))]


def select_address(name: str, candidates: Iterable[str], allow_loopback: bool = False) -> str:
    """Pick the first routable candidate in a stable order.

    Raises:
        UnroutableAddressError: If no candidate is routable.
    """
    candidates = list(candidates)
    routable = [c for c in order_candidates(candidates) if is_routable(c, allow_loopback)]
    if not routable:
        raise UnroutableAddressError(name, candidates)
    return routable[0]
