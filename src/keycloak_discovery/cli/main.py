"""Command-line interface for keycloak-discovery.

``run`` drives the membership agent for one node; the other commands are
operator tools acting directly on the shared directory table.
"""

import asyncio
import signal
from typing import Any, Optional, Tuple

import click
import uvicorn
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..api.app import create_status_app
from ..config.settings import MembershipSettings
from ..core.exceptions import (
    AddressResolutionExhaustedError,
    ConfigurationError,
    DirectoryError,
    DiscoveryError,
)
from ..features.directory.entities.protocols import DirectoryStore
from ..features.directory.repositories.in_memory_directory_store import InMemoryDirectoryStore
from ..features.directory.repositories.postgres_directory_store import PostgresDirectoryStore
from ..features.membership.services.membership_agent import MembershipAgent
from ..features.membership.services.view_merger import ViewMerger
from ..features.resolution.adapters.dns_name_resolver import DnsNameResolver
from ..features.resolution.services.address_resolver import AddressResolver
from ..utils.datetime import format_age, utc_now
from ..utils.retry import RetryPolicy

console = Console()

STORE_BACKENDS = ("postgres", "memory")


def _load_settings(**overrides: Any) -> MembershipSettings:
    """Settings from the environment, with non-empty CLI overrides applied."""
    return MembershipSettings(**{k: v for k, v in overrides.items() if v is not None})


def _build_store(settings: MembershipSettings, backend: str = "postgres") -> DirectoryStore:
    if backend == "memory":
        return InMemoryDirectoryStore()
    return PostgresDirectoryStore.from_settings(settings)


def _prepare(ctx, **overrides: Any) -> Tuple[MembershipSettings, DirectoryStore]:
    """Load settings and build the store, exiting with status 2 when invalid."""
    try:
        settings = _load_settings(**overrides)
        return settings, _build_store(settings, ctx.obj["backend"])
    except (ValidationError, DiscoveryError) as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        ctx.exit(2)


async def _run_agent(agent: MembershipAgent, store: DirectoryStore, settings: MembershipSettings) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, lambda: asyncio.ensure_future(agent.stop()))
        except NotImplementedError:
            pass

    server: Optional[uvicorn.Server] = None
    server_task: Optional[asyncio.Task] = None
    if settings.status_port:
        server = uvicorn.Server(
            uvicorn.Config(
                create_status_app(agent),
                host=settings.status_host,
                port=settings.status_port,
                log_config=None,
            )
        )
        server_task = asyncio.create_task(server.serve())
        # The status server owning the signals must not leave the agent running
        server_task.add_done_callback(lambda _: asyncio.ensure_future(agent.stop()))

    agent.start()
    try:
        await agent.wait()
    finally:
        if server is not None:
            server.should_exit = True
            await asyncio.wait({server_task})
        await store.close()


def _print_entries(entries, title: str) -> None:
    now = utc_now()
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Node", style="cyan")
    table.add_column("Incarnation", justify="right")
    table.add_column("Endpoint")
    table.add_column("Last seen", justify="right")

    for entry in entries:
        table.add_row(
            entry.node_id,
            str(entry.incarnation),
            entry.endpoint,
            format_age(entry.age(now).total_seconds()),
        )
    console.print(table)


@click.group()
@click.option('--store', 'backend', type=click.Choice(STORE_BACKENDS), default="postgres",
              envvar='KC_DISCOVERY_STORE', show_default=True, help='Directory backend')
@click.pass_context
def cli(ctx, backend):
    """Keycloak cluster discovery through a shared directory table"""
    ctx.ensure_object(dict)
    ctx.obj['backend'] = backend


@cli.command()
@click.option('--node-name', default=None, help='Logical node name (KC_DISCOVERY_NODE_NAME)')
@click.option('--port', 'node_port', type=int, default=None, help='Assigned port (KC_DISCOVERY_NODE_PORT)')
@click.option('--view-file', default=None, help='File receiving the initial_hosts list')
@click.option('--status-port', type=int, default=None, help='Serve /membership endpoints on this port')
@click.pass_context
def run(ctx, node_name, node_port, view_file, status_port):
    """Join the cluster and keep this node's membership fresh"""
    settings, store = _prepare(
        ctx,
        node_name=node_name,
        node_port=node_port,
        view_file=view_file,
        status_port=status_port,
    )
    try:
        agent = MembershipAgent.from_settings(settings, store)
    except DiscoveryError as e:
        console.print(f"[red]Invalid configuration: {e.message}[/red]")
        ctx.exit(2)

    console.print(Panel.fit(
        f"Node {agent.identity.node_id} joining via {ctx.obj['backend']} directory",
        style="bold blue",
    ))
    try:
        asyncio.run(_run_agent(agent, store, settings))
    except AddressResolutionExhaustedError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        ctx.exit(1)
    except ConfigurationError as e:
        console.print(f"[red]Invalid configuration: {e.message}[/red]")
        ctx.exit(2)

    console.print(f"[green]Node {agent.identity.node_id} stopped[/green]")


@cli.command('init-schema')
@click.pass_context
def init_schema(ctx):
    """Create the directory table if it does not exist"""
    settings, store = _prepare(ctx)

    async def _init() -> None:
        try:
            await store.initialize()
        finally:
            await store.close()

    _run_store_command(ctx, _init())
    console.print("[green]✅ Directory table ready[/green]")


@cli.command('list')
@click.option('--all', 'show_all', is_flag=True, help='Include stale entries')
@click.pass_context
def list_entries(ctx, show_all):
    """Show directory entries"""
    settings, store = _prepare(ctx)

    async def _list():
        try:
            if show_all:
                return await store.scan_all()
            return await store.scan_live(settings.staleness_window)
        finally:
            await store.close()

    entries = _run_store_command(ctx, _list())
    if not entries:
        console.print("[yellow]No entries in the directory[/yellow]")
        return
    _print_entries(entries, "All entries" if show_all else f"Live entries (< {settings.staleness_window:g}s)")


@cli.command()
@click.pass_context
def prune(ctx):
    """Delete stale entries and quiet superseded incarnations"""
    settings, store = _prepare(ctx)
    merger = ViewMerger(
        settings.node_name or "operator",
        staleness_window=settings.staleness_window,
        prune_incarnation_grace=settings.prune_incarnation_grace,
    )

    async def _prune():
        try:
            result = merger.merge(await store.scan_live(settings.staleness_window))
            return await merger.prune(store, result.superseded)
        finally:
            await store.close()

    report = _run_store_command(ctx, _prune())
    console.print(
        f"[green]Pruned {report.stale_deleted} stale and "
        f"{report.superseded_deleted} superseded entries[/green]"
    )


@cli.command()
@click.confirmation_option(prompt='Delete every entry in the directory?')
@click.pass_context
def reset(ctx):
    """Delete every entry (cluster-wide restart)"""
    settings, store = _prepare(ctx)

    async def _reset() -> int:
        try:
            return await store.reset()
        finally:
            await store.close()

    removed = _run_store_command(ctx, _reset())
    console.print(f"[yellow]Removed {removed} entries[/yellow]")


@cli.command()
@click.argument('name')
@click.option('--retries', type=int, default=1, show_default=True, help='Attempts before giving up')
@click.option('--interval', type=float, default=1.0, show_default=True, help='Seconds between attempts')
@click.option('--allow-loopback', is_flag=True, help='Accept loopback addresses')
@click.pass_context
def resolve(ctx, name, retries, interval, allow_loopback):
    """Resolve NAME the way a joining node would"""
    try:
        settings = _load_settings(allow_loopback=allow_loopback or None)
    except ValidationError as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        ctx.exit(2)
    resolver = AddressResolver(
        DnsNameResolver(timeout=settings.resolve_timeout),
        RetryPolicy.fixed(retries, interval),
        allow_loopback=settings.allow_loopback,
    )

    try:
        resolved = asyncio.run(resolver.resolve(name))
    except AddressResolutionExhaustedError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        ctx.exit(1)

    table = Table(title=f"Candidates for {name}", show_header=True, header_style="bold magenta")
    table.add_column("Address")
    table.add_column("Selected", justify="center")
    for candidate in resolved.candidates:
        table.add_row(candidate, "✅" if candidate == resolved.address else "")
    console.print(table)
    console.print(f"[green]{name} -> {resolved.address} (attempts: {resolved.attempts})[/green]")


def _run_store_command(ctx, coro) -> Any:
    try:
        return asyncio.run(coro)
    except DirectoryError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        ctx.exit(1)
    except ConfigurationError as e:
        console.print(f"[red]Invalid configuration: {e.message}[/red]")
        ctx.exit(2)


def main() -> None:
    cli(obj={})


if __name__ == '__main__':
    main()
