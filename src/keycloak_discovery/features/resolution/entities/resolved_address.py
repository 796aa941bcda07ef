"""Resolved address entity."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Tuple

from ....utils.datetime import utc_now


@dataclass(frozen=True)
class ResolvedAddress:
    """Outcome of a successful resolution of a node's logical name."""

    name: str
    address: str
    candidates: Tuple[str, ...] = ()
    attempts: int = 1
    resolved_at: datetime = field(default_factory=utc_now)

    @property
    def is_ipv6(self) -> bool:
        return ":" in self.address
