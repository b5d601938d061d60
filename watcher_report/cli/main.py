#!/usr/bin/env python3
"""Command line entry point for Watcher Report using Typer.

Runs a single report action outside of the host watcher, which is handy
for checking credentials, selectors and mail settings.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
import yaml
from typing_extensions import Annotated

from ..config.loader import ConfigLoadError, ReportSettings, load_report_settings
from ..mail.client import SMTPMailClient
from ..models.report import ReportAction, WatcherTask
from ..orchestrator import ReportOrchestrator
from ..persistence.database import DatabaseConfig
from ..persistence.history import SQLHistoryStore


app = typer.Typer(
    name="watcher-report",
    help="Capture dashboard reports in a headless browser and mail them",
    add_completion=False,
)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_settings(config: Optional[Path], env: Optional[str]) -> ReportSettings:
    try:
        return load_report_settings(config, environment=env)
    except ConfigLoadError as e:
        typer.echo(f"❌ Configuration error: {e}", err=True)
        raise typer.Exit(code=2)


def _database_config(settings: ReportSettings) -> DatabaseConfig:
    return DatabaseConfig(url=settings.database.url, echo=settings.database.echo)


@app.command()
def run(
    action_file: Annotated[
        Path,
        typer.Argument(help="YAML file with the report action definition")
    ],
    action_name: Annotated[
        str,
        typer.Option("--action-name", "-n", help="Name of the action within the watcher")
    ] = "report",
    task_id: Annotated[
        str,
        typer.Option("--task-id", help="Watcher identifier")
    ] = "manual",
    task_title: Annotated[
        str,
        typer.Option("--task-title", help="Watcher title stored in history")
    ] = "manual report",
    payload_file: Annotated[
        Optional[Path],
        typer.Option("--payload", "-p", help="JSON file with the watcher payload")
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Settings YAML (default: config/report.yaml)")
    ] = None,
    env: Annotated[
        Optional[str],
        typer.Option("--env", "-e", help="Environment override section to apply")
    ] = None,
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Logging level")
    ] = "INFO",
):
    """Run one report action and print its result."""
    _configure_logging(log_level)
    settings = _load_settings(config, env)

    if settings.smtp is None:
        typer.echo("❌ Configuration error: 'smtp' section is required to send reports", err=True)
        raise typer.Exit(code=2)

    if not action_file.exists():
        typer.echo(f"❌ Action file not found: {action_file}", err=True)
        raise typer.Exit(code=2)

    try:
        action = ReportAction(**yaml.safe_load(action_file.read_text()))
        payload = json.loads(payload_file.read_text()) if payload_file else {}
    except Exception as e:
        typer.echo(f"❌ Invalid input: {e}", err=True)
        raise typer.Exit(code=2)

    mail_client = SMTPMailClient(settings.smtp)
    logging.getLogger(__name__).debug(f"Mail transport: {mail_client.describe()}")

    db_config = _database_config(settings)
    orchestrator = ReportOrchestrator(settings, mail_client, SQLHistoryStore(db_config))
    task = WatcherTask(id=task_id, title=task_title)

    async def _execute():
        try:
            await db_config.create_tables()
            return await orchestrator.run(task, action, action_name, payload)
        finally:
            await db_config.close()

    result = asyncio.run(_execute())
    if result is None:
        typer.echo("❌ Report failed, see log for details", err=True)
        raise typer.Exit(code=1)

    typer.echo(result.model_dump_json(exclude_none=True))


@app.command(name="init-db")
def init_db(
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Settings YAML (default: config/report.yaml)")
    ] = None,
    env: Annotated[
        Optional[str],
        typer.Option("--env", "-e", help="Environment override section to apply")
    ] = None,
):
    """Create the report history tables."""
    settings = _load_settings(config, env)
    db_config = _database_config(settings)

    async def _create():
        try:
            await db_config.create_tables()
        finally:
            await db_config.close()

    asyncio.run(_create())
    typer.echo(f"✅ History tables ready at {db_config.url}")


if __name__ == "__main__":
    app()
