"""DNS-backed name resolver."""

import asyncio
import logging
import socket
from typing import List

from ....core.exceptions import NameLookupError

logger = logging.getLogger(__name__)


class DnsNameResolver:
    """Resolves names through the system resolver (A/AAAA via getaddrinfo)."""

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout

    async def lookup(self, name: str) -> List[str]:
        """Return the unique addresses getaddrinfo reports for ``name``."""
        loop = asyncio.get_running_loop()
        try:
            results = await asyncio.wait_for(
                loop.getaddrinfo(
                    name,
                    None,
                    family=socket.AF_UNSPEC,
                    type=socket.SOCK_STREAM,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise NameLookupError(name, f"timed out after {self.timeout}s") from e
        except OSError as e:
            raise NameLookupError(name, str(e)) from e

        addresses: List[str] = []
        seen = set()
        for _family, _type, _proto, _canonname, sockaddr in results:
            # sockaddr is (host, port) for IPv4, (host, port, flow, scope) for IPv6
            address = sockaddr[0]
            if address not in seen:
                seen.add(address)
                addresses.append(address)

        logger.debug(f"Lookup of {name} returned {addresses}")
        return addresses
