"""Self-address resolution with fixed-interval retries.

The resolution target typically becomes available within a bounded startup
window, so attempts are spaced at a fixed interval and capped in number;
exhausting them is fatal for the node.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from ....config.constants import ResolutionDefaults
from ....core.exceptions import AddressResolutionExhaustedError, ResolutionError
from ....utils.retry import RetryPolicy
from ..adapters.dns_name_resolver import DnsNameResolver
from ..entities.protocols import NameResolver
from ..entities.resolved_address import ResolvedAddress
from ..utils.validation import order_candidates, select_address

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class AddressResolver:
    """Resolves a node's logical name to a routable address."""

    def __init__(
        self,
        name_resolver: NameResolver,
        retry_policy: Optional[RetryPolicy] = None,
        allow_loopback: bool = False,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.name_resolver = name_resolver
        self.retry_policy = retry_policy or RetryPolicy.fixed(
            ResolutionDefaults.MAX_RETRIES, ResolutionDefaults.RETRY_INTERVAL_SECONDS
        )
        self.allow_loopback = allow_loopback
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings,
        name_resolver: Optional[NameResolver] = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> "AddressResolver":
        return cls(
            name_resolver or DnsNameResolver(timeout=settings.resolve_timeout),
            RetryPolicy.fixed(settings.max_resolve_retries, settings.resolve_retry_interval),
            allow_loopback=settings.allow_loopback,
            sleep=sleep,
        )

    async def resolve(self, logical_name: str) -> ResolvedAddress:
        """Resolve ``logical_name``, retrying until the policy is exhausted.

        ``max_retries`` counts attempts, and there is no pause after the last
        one. The worst case before giving up is therefore
        ``(max_retries - 1) * interval`` plus the lookup time of every
        attempt: 29 pauses of 5s, 145s, with the defaults.

        Raises:
            AddressResolutionExhaustedError: Every attempt failed.
        """
        policy = self.retry_policy
        last_error: Optional[ResolutionError] = None
        attempt = 0

        while True:
            attempt += 1
            try:
                candidates = await self.name_resolver.lookup(logical_name)
                address = select_address(logical_name, candidates, self.allow_loopback)
            except ResolutionError as e:
                last_error = e
            else:
                if attempt > 1:
                    logger.info(f"Resolved {logical_name} to {address} after {attempt} attempts")
                else:
                    logger.info(f"Resolved {logical_name} to {address}")
                return ResolvedAddress(
                    name=logical_name,
                    address=address,
                    candidates=tuple(order_candidates(candidates)),
                    attempts=attempt,
                )

            if not policy.should_retry(attempt):
                break

            delay = policy.calculate_delay(attempt)
            logger.warning(
                f"Resolution of {logical_name} not ready (attempt {attempt}/{policy.max_retries}): "
                f"{last_error.message}; retrying in {delay:g}s"
            )
            await self._sleep(delay)

        logger.critical(
            f"Giving up resolving {logical_name} after {attempt} attempts: {last_error.message}"
        )
        raise AddressResolutionExhaustedError(logical_name, attempt, last_error)
