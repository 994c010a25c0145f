"""
Command-line interface for tablesync.
"""

import asyncio
import sys
from functools import wraps
from pathlib import Path
from typing import List, Sequence

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import TablesyncConfig
from .database.connection import ConnectionConfig, ConnectionPool
from .exceptions import StatementExecutionError, TablesyncError
from .loader import load_models
from .schema.models import TableSpec
from .schema.reconciler import SchemaReconciler, SyncPlan, SyncResult


console = Console()


def handle_errors(func):
    """Decorator to handle errors gracefully in CLI commands."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except StatementExecutionError as e:
            console.print(f"[red]Error:[/red] {e}")
            if e.applied:
                console.print(
                    f"[yellow]{len(e.applied)} statement(s) were applied before the failure "
                    f"and have not been rolled back[/yellow]"
                )
            sys.exit(1)
        except TablesyncError as e:
            console.print(f"[red]Error:[/red] {e}")
            sys.exit(1)
        except KeyboardInterrupt:
            console.print("\n[yellow]Interrupted by user[/yellow]")
            sys.exit(1)
    return wrapper


def _load_specs(config: TablesyncConfig, models: Sequence[str]) -> List[TableSpec]:
    paths = list(models) or config.models
    if not paths:
        raise click.UsageError("No model files given and none configured")
    return load_models(paths)


def _display_statements(table: str, statements) -> None:
    output = Table(title=f"Table {table}")
    output.add_column("#", justify="right")
    output.add_column("Kind", style="cyan")
    output.add_column("SQL")
    for index, statement in enumerate(statements):
        style = "red" if statement.is_destructive else None
        output.add_row(str(index), statement.kind.value, statement.sql, style=style)
    console.print(output)


async def _run_plan(db_config: ConnectionConfig, specs: List[TableSpec], drop_columns: bool) -> List[SyncPlan]:
    async with ConnectionPool(db_config) as pool:
        reconciler = SchemaReconciler(pool, drop_columns=drop_columns)
        return [await reconciler.plan(spec) for spec in specs]


async def _run_sync(
    db_config: ConnectionConfig, specs: List[TableSpec], drop_columns: bool, dry_run: bool
) -> List[SyncResult]:
    async with ConnectionPool(db_config) as pool:
        reconciler = SchemaReconciler(pool, drop_columns=drop_columns, dry_run=dry_run)
        return await reconciler.sync_all(specs)


@click.group()
@click.version_option(__version__)
@click.option(
    "--debug", is_flag=True, help="Enable debug logging"
)
@click.pass_context
def main(ctx, debug):
    """tablesync: Declarative MySQL table synchronizer."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


def _load_config(ctx, config: str) -> TablesyncConfig:
    tablesync_config = TablesyncConfig.from_yaml(config)
    if ctx.obj.get("debug"):
        tablesync_config.logging.level = "DEBUG"
    tablesync_config.logging.apply()
    return tablesync_config


@main.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default="tablesync.yaml",
    help="Output configuration file path",
)
@handle_errors
def init(output: str):
    """Write a starter configuration file."""
    if Path(output).exists():
        if not click.confirm(f"Configuration file {output} already exists. Overwrite?"):
            return

    config = TablesyncConfig(
        database=ConnectionConfig(database="app", user="root", password="${MYSQL_PASSWORD}"),
        models=["models"],
    )
    config.to_yaml(output)
    console.print(f"[green]✓[/green] Configuration file created: {output}")


@main.command("validate-config")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    required=True,
    help="Configuration file path",
)
@click.pass_context
@handle_errors
def validate_config(ctx, config: str):
    """Validate configuration file."""
    tablesync_config = _load_config(ctx, config)
    db = tablesync_config.database
    console.print("[green]✓[/green] Configuration is valid")
    console.print(f"  Database: {db.user}@{db.host}:{db.port}/{db.database}")
    console.print(f"  Models: {', '.join(tablesync_config.models) or '-'}")


@main.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    required=True,
    help="Configuration file path",
)
@click.argument("models", nargs=-1, type=click.Path(exists=True))
@click.pass_context
@handle_errors
def validate(ctx, config: str, models):
    """Load and validate model files without touching the database."""
    tablesync_config = _load_config(ctx, config)
    specs = _load_specs(tablesync_config, models)

    # Validation needs no connection
    for spec in specs:
        SchemaReconciler.validate(spec)
        console.print(f"[green]✓[/green] {spec.name} ({len(spec.columns)} columns)")


@main.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    required=True,
    help="Configuration file path",
)
@click.option(
    "--keep-columns",
    is_flag=True,
    help="Don't drop live columns that are not declared",
)
@click.argument("models", nargs=-1, type=click.Path(exists=True))
@click.pass_context
@handle_errors
def plan(ctx, config: str, keep_columns: bool, models):
    """Show the statements a sync would issue."""
    tablesync_config = _load_config(ctx, config)
    specs = _load_specs(tablesync_config, models)
    drop_columns = tablesync_config.sync.drop_columns and not keep_columns

    plans = asyncio.run(_run_plan(tablesync_config.database, specs, drop_columns))

    for sync_plan in plans:
        _display_statements(sync_plan.table, sync_plan.statements)


@main.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    required=True,
    help="Configuration file path",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Log statements without executing them",
)
@click.option(
    "--keep-columns",
    is_flag=True,
    help="Don't drop live columns that are not declared",
)
@click.argument("models", nargs=-1, type=click.Path(exists=True))
@click.pass_context
@handle_errors
def sync(ctx, config: str, dry_run: bool, keep_columns: bool, models):
    """Synchronize the live tables with the model files."""
    tablesync_config = _load_config(ctx, config)
    specs = _load_specs(tablesync_config, models)
    drop_columns = tablesync_config.sync.drop_columns and not keep_columns
    dry_run = dry_run or tablesync_config.sync.dry_run

    results = asyncio.run(
        _run_sync(tablesync_config.database, specs, drop_columns, dry_run)
    )

    for result in results:
        action = "created" if result.created else "altered"
        if result.dry_run:
            console.print(f"[yellow]DRY RUN[/yellow] {result.table}: would be {action}")
            _display_statements(result.table, result.statements)
        else:
            console.print(
                f"[green]✓[/green] {result.table} {action} "
                f"({result.executed_count} statements, {result.execution_time_ms:.1f}ms)"
            )


if __name__ == "__main__":
    main()
