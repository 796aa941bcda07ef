"""Static name resolver for local development and tests."""

from typing import Dict, Iterable, List, Optional

from ....core.exceptions import NameLookupError


class StaticNameResolver:
    """Resolves names from a fixed mapping."""

    def __init__(self, hosts: Optional[Dict[str, Iterable[str]]] = None):
        self._hosts: Dict[str, List[str]] = {
            name: list(addresses) for name, addresses in (hosts or {}).items()
        }

    def set(self, name: str, *addresses: str) -> None:
        self._hosts[name] = list(addresses)

    def remove(self, name: str) -> None:
        self._hosts.pop(name, None)

    async def lookup(self, name: str) -> List[str]:
        if name not in self._hosts:
            raise NameLookupError(name, "unknown host")
        return list(self._hosts[name])
