"""Per-node membership control loop.

States: INIT -> RESOLVING -> REGISTERING -> ACTIVE <-> REFRESHING, with
FAILED reachable from RESOLVING when the node cannot learn its own address
and STOPPED on clean shutdown.

Directory errors never fail the agent. Registration is retried with
exponential backoff; refresh, scan and prune failures are retried on the
next cycle while the node stays ACTIVE with a possibly stale own entry.
"""

import asyncio
import inspect
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from ....config.constants import MembershipDefaults, MembershipState
from ....core.exceptions import (
    AddressResolutionExhaustedError,
    AgentStateError,
    ConfigurationError,
    DirectoryError,
)
from ....utils.retry import RetryPolicy
from ...directory.entities.directory_entry import DirectoryEntry
from ...directory.entities.protocols import DirectoryStore
from ...resolution.entities.protocols import NameResolver
from ...resolution.entities.resolved_address import ResolvedAddress
from ...resolution.services.address_resolver import AddressResolver
from ..entities.local_view import LocalView
from ..entities.merge_result import MergeResult
from ..entities.node_identity import NodeIdentity
from .view_merger import ViewMerger

logger = logging.getLogger(__name__)

ViewListener = Callable[[LocalView], Union[None, Awaitable[None]]]
StoreFailures = List[Tuple[str, DirectoryError]]


class MembershipAgent:
    """Registers this node in the directory and maintains its LocalView."""

    def __init__(
        self,
        identity: NodeIdentity,
        resolver: AddressResolver,
        store: DirectoryStore,
        merger: Optional[ViewMerger] = None,
        *,
        refresh_period: float = MembershipDefaults.REFRESH_PERIOD,
        staleness_window: float = MembershipDefaults.STALENESS_WINDOW,
        prune_incarnation_grace: float = MembershipDefaults.PRUNE_INCARNATION_GRACE,
        stability_cycles: int = MembershipDefaults.STABILITY_CYCLES,
        prune_every_cycles: int = MembershipDefaults.PRUNE_EVERY_CYCLES,
        store_retry_policy: Optional[RetryPolicy] = None,
        deregister_on_shutdown: bool = True,
        view_file: Optional[str] = None,
    ):
        self.identity = identity
        self.merger = merger or ViewMerger(
            identity.node_id,
            staleness_window=staleness_window,
            prune_incarnation_grace=prune_incarnation_grace,
            stability_cycles=stability_cycles,
        )
        self.staleness_window = self.merger.staleness_window
        self.refresh_period = refresh_period

        if refresh_period <= 0 or refresh_period >= self.staleness_window:
            raise ConfigurationError(
                f"refresh_period ({refresh_period}s) must be positive and shorter than "
                f"staleness_window ({self.staleness_window}s)"
            )
        if prune_every_cycles < 1:
            raise ConfigurationError("prune_every_cycles must be >= 1")
        if refresh_period * 3 > self.staleness_window:
            logger.warning(
                f"refresh_period {refresh_period}s exceeds a third of staleness_window "
                f"{self.staleness_window}s; a single missed refresh may get node "
                f"{identity.node_id} pruned"
            )

        self.prune_every_cycles = prune_every_cycles
        self.deregister_on_shutdown = deregister_on_shutdown
        self.view_file = view_file

        self._resolver = resolver
        self._store = store
        self._store_retry_policy = store_retry_policy or RetryPolicy.exponential(
            initial_delay=min(MembershipDefaults.STORE_RETRY_INITIAL_DELAY, refresh_period),
            max_delay=refresh_period,
        )

        self._state = MembershipState.INIT
        self._resolved: Optional[ResolvedAddress] = None
        self._incarnation: Optional[int] = identity.incarnation
        self._entry: Optional[DirectoryEntry] = None
        self._view = LocalView.empty(identity.node_id)
        self._stable = False
        self._cycle = 0
        self._consecutive_store_failures = 0
        self._last_refresh_at: Optional[datetime] = None
        self._last_error: Optional[str] = None
        self._listeners: List[ViewListener] = []

        self._stop_event = asyncio.Event()
        self._active_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @classmethod
    def from_settings(
        cls,
        settings,
        store: DirectoryStore,
        name_resolver: Optional[NameResolver] = None,
        identity: Optional[NodeIdentity] = None,
    ) -> "MembershipAgent":
        """Build an agent, its resolver and its merger from settings."""
        return cls(
            identity or NodeIdentity.from_settings(settings),
            AddressResolver.from_settings(settings, name_resolver=name_resolver),
            store,
            refresh_period=settings.refresh_period,
            staleness_window=settings.staleness_window,
            prune_incarnation_grace=settings.prune_incarnation_grace,
            stability_cycles=settings.stability_cycles,
            prune_every_cycles=settings.prune_every_cycles,
            store_retry_policy=RetryPolicy.exponential(
                initial_delay=min(settings.store_retry_initial_delay, settings.refresh_period),
                max_delay=settings.refresh_period,
            ),
            deregister_on_shutdown=settings.deregister_on_shutdown,
            view_file=settings.view_file,
        )

    # Observability

    @property
    def state(self) -> MembershipState:
        return self._state

    @property
    def address(self) -> Optional[str]:
        return self._resolved.address if self._resolved else None

    @property
    def incarnation(self) -> Optional[int]:
        return self._incarnation

    @property
    def entry(self) -> Optional[DirectoryEntry]:
        return self._entry

    @property
    def view(self) -> LocalView:
        return self._view

    @property
    def is_stable(self) -> bool:
        return self._stable

    @property
    def consecutive_store_failures(self) -> int:
        return self._consecutive_store_failures

    def status(self) -> Dict[str, Any]:
        """Snapshot of the agent for health checks and logs."""
        return {
            "node_id": self.identity.node_id,
            "state": self._state.value,
            "address": self.address,
            "port": self.identity.port,
            "incarnation": self._incarnation,
            "consecutive_store_failures": self._consecutive_store_failures,
            "last_refresh_at": self._last_refresh_at.isoformat() if self._last_refresh_at else None,
            "last_error": self._last_error,
            "stable": self._stable,
            "cycle": self._cycle,
            "members": [e.to_dict() for e in self._view],
            "initial_hosts": self._view.as_initial_hosts(),
        }

    def add_view_listener(self, listener: ViewListener) -> None:
        """Register a callback invoked with the new LocalView when membership changes."""
        self._listeners.append(listener)

    def remove_view_listener(self, listener: ViewListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # Lifecycle

    def start(self) -> asyncio.Task:
        """Run the agent in a background task."""
        if self._task is not None and not self._task.done():
            return self._task
        if self._state != MembershipState.INIT:
            raise AgentStateError("start", self._state.value)
        self._task = asyncio.create_task(self.run(), name=f"membership-{self.identity.node_id}")
        return self._task

    async def stop(self, timeout: float = MembershipDefaults.STOP_TIMEOUT) -> None:
        """Stop the control loop, deregistering if configured."""
        self._stop_event.set()
        task = self._task

        if task is None:
            # Driven manually through join()/run_once()
            if not self._state.is_terminal:
                await self._shutdown()
            return
        if task.done():
            return

        # Resolution waits are not tied to the stop event
        if self._state in (MembershipState.INIT, MembershipState.RESOLVING):
            task.cancel()

        done, _ = await asyncio.wait({task}, timeout=timeout)
        if not done:
            logger.warning(f"Membership loop for {self.identity.node_id} did not stop in {timeout}s, cancelling")
            task.cancel()
            await asyncio.wait({task})

    async def wait(self) -> None:
        """Wait for the background task; re-raises a fatal resolution failure."""
        if self._task is None:
            raise AgentStateError("wait", self._state.value)
        try:
            await self._task
        except asyncio.CancelledError:
            if not self._stop_event.is_set():
                raise

    async def wait_until_active(self, timeout: Optional[float] = None) -> bool:
        try:
            await asyncio.wait_for(self._active_event.wait(), timeout=timeout)
            return True
        except asyncio.TimeoutError:
            return False

    async def run(self) -> None:
        """Join the cluster, then refresh every refresh_period until stopped.

        Raises:
            AddressResolutionExhaustedError: The node could not resolve its
                own address; the process is expected to exit non-zero.
        """
        try:
            if await self.join():
                while not await self._wait(self.refresh_period):
                    await self.run_once()
        finally:
            await self._shutdown()

    async def join(self) -> bool:
        """Resolve, register and build the first view.

        Returns False if stopped before registration succeeded.
        """
        if self._state != MembershipState.INIT:
            raise AgentStateError("join", self._state.value)

        self._transition(MembershipState.RESOLVING)
        try:
            self._resolved = await self._resolver.resolve(self.identity.resolve_target)
        except AddressResolutionExhaustedError as e:
            self._last_error = e.message
            self._transition(MembershipState.FAILED)
            logger.critical(
                f"Node {self.identity.node_id} cannot determine its routable address; "
                f"refusing to join the cluster"
            )
            raise

        self._transition(MembershipState.REGISTERING)
        if not await self._register():
            return False

        self._transition(MembershipState.ACTIVE)
        failures: StoreFailures = []
        await self._reconcile(failures)
        self._finish_cycle(failures)
        return True

    async def run_once(self) -> Optional[MergeResult]:
        """One ACTIVE -> REFRESHING -> ACTIVE cycle.

        Returns the merge result, or None if the scan failed (the previous
        view is kept).
        """
        if self._state != MembershipState.ACTIVE:
            raise AgentStateError("refresh", self._state.value)

        self._transition(MembershipState.REFRESHING)
        failures: StoreFailures = []
        try:
            await self._refresh_entry(failures)
            result = await self._reconcile(failures)
        finally:
            self._transition(MembershipState.ACTIVE)
        self._finish_cycle(failures)
        return result

    # Steps

    async def _register(self) -> bool:
        node_id = self.identity.node_id
        attempt = 0
        while not self._stop_event.is_set():
            attempt += 1
            try:
                if self._incarnation is None:
                    self._incarnation = await self._store.next_incarnation(node_id)
                entry = DirectoryEntry(
                    node_id=node_id,
                    incarnation=self._incarnation,
                    address=self._resolved.address,
                    port=self.identity.port,
                )
                self._entry = await self._store.upsert(entry)
            except DirectoryError as e:
                self._consecutive_store_failures += 1
                self._last_error = e.message
                delay = self._store_retry_policy.calculate_delay(attempt)
                logger.warning(
                    f"Degraded membership for {node_id}: registration failed "
                    f"(attempt {attempt}): {e.message}; retrying in {delay:.1f}s"
                )
                if await self._wait(delay):
                    return False
                continue

            self._consecutive_store_failures = 0
            self._last_error = None
            self._last_refresh_at = self._entry.last_seen_at
            logger.info(f"Registered {node_id}@{self._incarnation} at {self._entry.endpoint}")
            return True
        return False

    async def _refresh_entry(self, failures: StoreFailures) -> None:
        try:
            stored = await self._store.upsert(self._entry.refreshed())
        except DirectoryError as e:
            failures.append(("refresh", e))
            return
        self._entry = stored
        self._last_refresh_at = stored.last_seen_at

    async def _reconcile(self, failures: StoreFailures) -> Optional[MergeResult]:
        self._cycle += 1
        try:
            entries = await self._store.scan_live(self.staleness_window)
        except DirectoryError as e:
            failures.append(("scan", e))
            return None

        result = self.merger.merge(entries)
        await self._apply_view(result)

        if self._cycle % self.prune_every_cycles == 0:
            try:
                await self.merger.prune(self._store, result.superseded)
            except DirectoryError as e:
                failures.append(("prune", e))
        return result

    async def _apply_view(self, result: MergeResult) -> None:
        previous = self._view
        view = result.view
        self._view = view
        self._stable = result.stable

        own = view.get(self.identity.node_id)
        if own is not None and self._incarnation is not None and own.incarnation > self._incarnation:
            logger.error(
                f"Node id {self.identity.node_id} is held by newer incarnation {own.incarnation}; "
                f"this process (incarnation {self._incarnation}) is a leftover"
            )

        if view.same_members(previous):
            return

        logger.info(
            f"Cluster view of {self.identity.node_id} changed: {len(view)} members "
            f"[{', '.join(f'{e.node_id}@{e.incarnation}' for e in view)}]"
        )
        self._write_view_file(view)
        for listener in list(self._listeners):
            try:
                outcome = listener(view)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception:
                logger.exception(f"View listener {listener!r} failed")

    def _write_view_file(self, view: LocalView) -> None:
        if not self.view_file:
            return
        path = Path(self.view_file)
        tmp = path.with_name(path.name + ".tmp")
        try:
            tmp.write_text(view.as_initial_hosts() + "\n", encoding="utf-8")
            os.replace(tmp, path)
        except OSError as e:
            logger.warning(f"Could not write view file {path}: {e}")

    def _finish_cycle(self, failures: StoreFailures) -> None:
        node_id = self.identity.node_id
        if failures:
            self._consecutive_store_failures += 1
            self._last_error = failures[-1][1].message
            operations = ", ".join(op for op, _ in failures)
            logger.warning(
                f"Degraded membership for {node_id}: {operations} failed "
                f"({self._consecutive_store_failures} consecutive cycles): {failures[0][1].message}"
            )
            return

        if self._consecutive_store_failures:
            logger.info(
                f"Directory reachable again for {node_id} after "
                f"{self._consecutive_store_failures} failed cycles"
            )
        self._consecutive_store_failures = 0
        self._last_error = None

    async def _shutdown(self) -> None:
        if self._state.is_terminal:
            return
        if self._entry is not None and self.deregister_on_shutdown:
            try:
                await asyncio.wait_for(
                    self._store.delete_entry(self._entry.node_id, self._entry.incarnation),
                    timeout=MembershipDefaults.STOP_TIMEOUT,
                )
                logger.info(f"Deregistered {self._entry.node_id}@{self._entry.incarnation}")
            except (DirectoryError, asyncio.TimeoutError) as e:
                logger.warning(f"Self-deregistration failed, entry will age out: {e}")
        self._transition(MembershipState.STOPPED)

    # Helpers

    async def _wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout``; True if a stop was requested."""
        if self._stop_event.is_set():
            return True
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=timeout)
            return True
        except asyncio.TimeoutError:
            return False

    def _transition(self, new_state: MembershipState) -> None:
        old_state = self._state
        if old_state == new_state:
            return
        self._state = new_state

        routine = {old_state, new_state} <= {MembershipState.ACTIVE, MembershipState.REFRESHING}
        logger.log(
            logging.DEBUG if routine else logging.INFO,
            f"Membership {self.identity.node_id}: {old_state.value} -> {new_state.value}",
        )
        if new_state == MembershipState.ACTIVE:
            self._active_event.set()
