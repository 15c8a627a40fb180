"""Main CLI interface for the photo studio backend."""

import asyncio
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..core.config import Config, get_config, set_config
from ..core.exceptions import StudioError
from ..core.logger import get_logger, setup_logging
from ..database.engine import get_database_engine
from ..database.session import get_async_db_session
from ..services import CatalogService, FinanceService, GalleryService, InstagramSync
from ..services.auth import create_admin

console = Console()
logger = get_logger(__name__)


def _run(coro):
    """Run a coroutine and turn domain errors into a CLI error."""
    async def runner():
        try:
            return await coro
        finally:
            await get_database_engine().close()

    try:
        return asyncio.run(runner())
    except StudioError as e:
        raise click.ClickException(e.message)


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--config-file', type=click.Path(exists=True), help='Path to configuration file')
@click.pass_context
def main(ctx: click.Context, debug: bool, config_file: Optional[str]):
    """Photo Studio CLI - manage the studio database, accounts and integrations.

    \b
    Quick Start:
    1. Initialize: photo-studio init
    2. Create an admin: photo-studio create-admin admin@studio.tn
    3. Start the API: photo-studio serve

    \b
    Examples:
    photo-studio seed-packs
    photo-studio instagram-sync --posts
    photo-studio finances --month 2025-06
    """
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug

    try:
        if config_file:
            config = Config.load_from_file(Path(config_file))
            set_config(config)
        else:
            config = get_config()
        ctx.obj['config'] = config
    except Exception as e:
        console.print(f"[red]Failed to load configuration: {e}[/red]")
        ctx.exit(1)

    log_level = "DEBUG" if debug else config.log_level
    setup_logging(log_level, log_dir=config.log_dir)


@main.command()
@click.option('--reset', is_flag=True, help='Drop all tables first (WARNING: destroys all data)')
@click.pass_context
def init(ctx: click.Context, reset: bool):
    """Create the database schema.

    \b
    Safety:
    The --reset flag permanently deletes bookings, galleries, invoices and
    every other record. Use with caution.
    """
    if reset and not click.confirm("This will delete all data. Continue?"):
        return

    async def init_db():
        db_engine = get_database_engine()
        if reset:
            console.print("[yellow]Resetting database...[/yellow]")
            await db_engine.drop_all_tables()
        await db_engine.create_all_tables()
        return await db_engine.get_table_names()

    tables = _run(init_db())
    console.print(f"[green]Database initialized with {len(tables)} tables[/green]")


@main.command('create-admin')
@click.argument('email')
@click.option('--name', help='Display name')
@click.option('--role', default='admin', help='Admin role')
@click.password_option(help='Admin password')
def create_admin_command(email: str, name: Optional[str], role: str, password: str):
    """Create a CMS administrator account."""
    async def create():
        async with get_async_db_session() as session:
            return await create_admin(session, email, password, name=name, role=role)

    admin = _run(create())
    console.print(f"[green]Created admin {admin.email}[/green] ({admin.id})")


@main.command('create-client')
@click.argument('name')
@click.argument('email')
@click.option('--phone', help='Client phone number')
@click.password_option(help='Client portal password')
@click.pass_context
def create_client_command(ctx: click.Context, name: str, email: str, phone: Optional[str], password: str):
    """Create a client portal account."""
    async def create():
        async with get_async_db_session() as session:
            return await GalleryService(ctx.obj['config']).create_client(
                session, name=name, email=email, password=password, phone=phone
            )

    client = _run(create())
    console.print(f"[green]Created client {client.name} <{client.email}>[/green] ({client.id})")


@main.command('seed-packs')
@click.pass_context
def seed_packs(ctx: click.Context):
    """Create the default packs on an empty catalogue."""
    async def seed():
        async with get_async_db_session() as session:
            return await CatalogService(ctx.obj['config']).seed_default_packs(session)

    packs = _run(seed())

    table = Table(title="Seeded Packs")
    table.add_column("Name", style="cyan")
    table.add_column("Price", style="green", justify="right")
    table.add_column("Duration", style="white")
    for pack in packs:
        table.add_row(pack.name, f"{pack.price:g}", pack.duration or "-")
    console.print(table)


@main.command('instagram-sync')
@click.option('--posts', is_flag=True, help='Also sync feed posts')
@click.pass_context
def instagram_sync(ctx: click.Context, posts: bool):
    """Mirror Instagram highlights (and optionally posts) into the database."""
    sync = InstagramSync(config=ctx.obj['config'])

    async def run_sync():
        async with get_async_db_session() as session:
            highlights = await sync.sync_highlights(session)
            feed = await sync.sync_posts(session) if posts else None
            return highlights, feed

    with console.status("[blue]Syncing Instagram...[/blue]"):
        highlights, feed = _run(run_sync())

    console.print(
        f"[green]Synced {highlights['highlights']} highlights "
        f"with {highlights['stories']} stories[/green]"
    )
    if feed:
        console.print(
            f"[green]Posts: {feed['created']} new, {feed['updated']} updated "
            f"({feed['total']} fetched)[/green]"
        )


@main.command()
@click.option('--month', help='Month as YYYY-MM (default: current month)')
@click.option('--year', help='Year as YYYY')
@click.pass_context
def finances(ctx: click.Context, month: Optional[str], year: Optional[str]):
    """Show revenue, expenses, salaries and profit for a period."""
    async def load():
        async with get_async_db_session() as session:
            return await FinanceService(ctx.obj['config']).financial_stats(session, month=month, year=year)

    stats = _run(load())
    currency = ctx.obj['config'].studio.currency

    table = Table(title=f"Finances - {stats['period']['label']}")
    table.add_column("Metric", style="cyan")
    table.add_column(f"Amount ({currency})", style="green", justify="right")

    revenue = stats['revenue']
    table.add_row("Revenue (invoiced)", f"{revenue['total']:,.2f}")
    table.add_row("Revenue (paid)", f"{revenue['paid']:,.2f}")
    table.add_row("Pending", f"{revenue['pending']:,.2f}")
    table.add_row("Expenses", f"{stats['expenses']['total']:,.2f}")
    table.add_row("Salaries", f"{stats['salaries']['total']:,.2f}")
    table.add_row("Profit", f"{stats['profit']['amount']:,.2f}")
    table.add_row("Margin", f"{stats['profit']['margin']:.1f}%")
    table.add_row("Growth", f"{revenue['growth']:+.1f}%")
    console.print(table)

    if stats['insights']:
        console.print(Panel("\n".join(f"• {line}" for line in stats['insights']), title="Insights"))


@main.command()
@click.pass_context
def status(ctx: click.Context):
    """Display database, CDN and Instagram status."""
    config = ctx.obj['config']

    async def show_status():
        db_engine = get_database_engine()
        tables = await db_engine.get_table_names()
        async with get_async_db_session() as session:
            counts = await CatalogService(config).dashboard_stats(session) if tables else {}
            instagram = await InstagramSync(config=config).sync_status(session) if tables else {}
        return tables, counts, instagram

    try:
        tables, counts, instagram = _run(show_status())
    except Exception as e:
        console.print(f"[red]Failed to get status: {e}[/red]")
        return

    table = Table(title="Photo Studio Status")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Details", style="white")

    table.add_row(
        "Database",
        "✓ Ready" if tables else "⚠ Not initialized",
        f"{config.database.type}, {len(tables)} tables",
    )
    table.add_row(
        "CDN",
        "✓ Configured" if config.cdn.is_configured else "✗ Missing credentials",
        config.cdn.cloud_name or "-",
    )
    table.add_row(
        "Instagram",
        "✓ Connected" if instagram.get('connected') else "✗ Not connected",
        f"last sync: {instagram.get('lastSync') or 'never'}",
    )
    console.print(table)

    if counts:
        summary = Table(title="Content")
        summary.add_column("Item", style="cyan")
        summary.add_column("Count", style="green", justify="right")
        for key, value in counts.items():
            summary.add_row(key, str(value))
        console.print(summary)


@main.command()
@click.option('--host', help='Host to bind to (default: from configuration)')
@click.option('--port', type=int, help='Port to bind to (default: from configuration)')
@click.option('--reload', is_flag=True, help='Enable auto-reload for development')
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int], reload: bool):
    """Start the web API."""
    import uvicorn

    config = ctx.obj['config']
    host = host or config.web.host
    port = port or config.web.port

    console.print("[green]Starting Photo Studio web server...[/green]")
    console.print(f"[cyan]API Documentation: http://{host}:{port}/docs[/cyan]")
    console.print(f"[cyan]Health Check: http://{host}:{port}/health[/cyan]")
    console.print("[yellow]Press Ctrl+C to stop the server[/yellow]")

    try:
        uvicorn.run(
            "photo_studio.web.app:app",
            host=host,
            port=port,
            reload=reload,
            log_level="debug" if ctx.obj['debug'] else "info",
            access_log=True,
        )
    except KeyboardInterrupt:
        console.print("[yellow]Server stopped by user[/yellow]")


if __name__ == '__main__':
    main()
