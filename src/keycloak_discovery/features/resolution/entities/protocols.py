"""Name resolution protocols."""

from abc import abstractmethod
from typing import List, Protocol, runtime_checkable


@runtime_checkable
class NameResolver(Protocol):
    """Maps a logical node name to zero or more candidate addresses."""

    @abstractmethod
    async def lookup(self, name: str) -> List[str]:
        """Return candidate addresses for ``name``.

        Raises:
            NameLookupError: If the backend could not answer.
        """
        ...
