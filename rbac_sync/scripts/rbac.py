"""
RBAC sync commands.

Usage:
    python -m rbac_sync.scripts.rbac import
    python -m rbac_sync.scripts.rbac export
    python -m rbac_sync.scripts.rbac export --system
    python -m rbac_sync.scripts.rbac init-db

Exit status is 0 on success and 1 on failure.
"""

import asyncio
import sys

import click

from rbac_sync.core.config import get_settings
from rbac_sync.core.exceptions import ImportFailedError
from rbac_sync.core.logging import configure_logging, get_logger
from rbac_sync.database import dispose_engine, get_session_factory, init_db
from rbac_sync.integrations.document_store import DocumentStore
from rbac_sync.services.sync_service import ExportReport, SyncService

logger = get_logger(__name__)


def _sync_service() -> SyncService:
    settings = get_settings()
    return SyncService(get_session_factory(), DocumentStore.from_settings(settings), settings)


async def run_import() -> None:
    service = _sync_service()
    try:
        click.echo("Importing roles...")
        roles = await service.import_roles()
        if roles.skipped:
            click.echo("  → No roles document")
        else:
            click.echo(f"  ✓ Upserted {roles.upserted} roles")

        click.echo("Importing permissions...")
        results = await service.import_collections()
        for collection, result in sorted(results.items()):
            click.echo(
                f"  ✓ {collection}: {result.created} created, "
                f"{result.updated} updated, {result.deleted} deleted"
            )
    finally:
        await dispose_engine()


async def run_export(include_system: bool) -> list:
    """Export everything; returns the names of documents that failed."""
    service = _sync_service()
    try:
        click.echo("Exporting permissions...")
        permissions = await service.export_collections(include_system=include_system)
        for collection, result in sorted(permissions.items()):
            click.echo(f"  {collection}: {result.value.lower()}")

        click.echo("Exporting roles...")
        roles = await service.export_roles()
        click.echo(f"  roles: {roles.value.lower()}")

        return ExportReport(roles=roles, permissions=permissions).failed
    finally:
        await dispose_engine()


async def run_init_db() -> None:
    try:
        await init_db()
    finally:
        await dispose_engine()


@click.group()
def cli():
    """Sync roles and permissions between the database and YAML files."""
    configure_logging()


@cli.command("import")
def import_command():
    """Sync configured roles and permissions from files to database."""
    settings = get_settings()
    if settings.imports_on_start:
        logger.warning(
            "manual_import_skipped",
            reason="RBAC sync imports automatically",
            mode=settings.rbac_sync_mode.value,
        )
        click.echo(
            "✗ RBAC sync is configured to import roles and permissions automatically. "
            "Skipping manual import.",
            err=True,
        )
        sys.exit(1)

    try:
        asyncio.run(run_import())
    except ImportFailedError as e:
        for collection, error in sorted(e.failures.items()):
            click.echo(f"✗ {collection}: {str(error) or type(error).__name__}", err=True)
        click.echo("✗ RBAC import failed", err=True)
        sys.exit(1)
    except Exception as e:
        logger.error("rbac_import_failed", error=str(e))
        click.echo(f"✗ RBAC import failed: {e}", err=True)
        sys.exit(1)

    click.echo("✓ RBAC imported!")
    sys.exit(0)


@cli.command("export")
@click.option(
    "--system",
    "include_system",
    is_flag=True,
    help="Include system collections",
)
def export_command(include_system: bool):
    """Sync roles and permissions from database to files."""
    try:
        failed = asyncio.run(run_export(include_system))
    except Exception as e:
        logger.error("rbac_export_failed", error=str(e))
        click.echo(f"✗ RBAC export failed: {e}", err=True)
        sys.exit(1)

    if failed:
        click.echo(f"✗ Failed to write: {', '.join(sorted(failed))}", err=True)
        sys.exit(1)

    click.echo("✓ RBAC exported!")
    sys.exit(0)


@cli.command("init-db")
def init_db_command():
    """Create the roles and permissions tables if they are missing."""
    try:
        asyncio.run(run_init_db())
    except Exception as e:
        click.echo(f"✗ Error creating tables: {e}", err=True)
        sys.exit(1)

    click.echo("✓ Tables created")


if __name__ == "__main__":
    cli()
