"""
Command-line interface for record webhooks.

Provides operational commands for creating a configuration file and
sending a one-off notification to the configured subscribers.
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import click
import structlog

from .config.settings import load_config
from .service import RecordWebhooksService
from .utils.logging import setup_logging
from .webhooks.errors import WebhookError
from .webhooks.events import ActionKind


@click.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option("--collection", required=True, help="Collection the record belongs to")
@click.option(
    "--action",
    type=click.Choice([a.value for a in ActionKind]),
    default=ActionKind.CREATE.value,
    show_default=True,
    help="Committed action to announce",
)
@click.option("--record", "record_json", required=True, help="Record snapshot as JSON")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Set logging level",
)
def send(
    collection: str,
    action: str,
    record_json: str,
    config: Optional[Path] = None,
    log_level: Optional[str] = None,
) -> None:
    """Send a notification for one record to the configured subscribers."""
    try:
        record = json.loads(record_json)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"Invalid JSON: {e}", param_hint="--record")
    if not isinstance(record, dict):
        raise click.BadParameter("Record must be a JSON object", param_hint="--record")
    if not collection:
        raise click.BadParameter("Collection must not be empty", param_hint="--collection")

    logger = structlog.get_logger()

    try:
        config_data = load_config(config_path=config)
    except Exception as e:
        logger.error("Startup failed", error=str(e))
        sys.exit(1)

    if log_level:
        config_data.server.log_level = log_level.upper()

    setup_logging(config_data.server.log_level, config_data.server.log_format)

    if not config_data.webhooks.enabled:
        click.echo("Webhook notifications disabled")
        return

    service = RecordWebhooksService(config_data)

    async def _send():
        await service.start()
        return await service.notifier.notify(action, collection, record)

    try:
        outcomes = asyncio.run(_send())
    except WebhookError as e:
        logger.error("Notification failed", error=e.message, code=e.code)
        sys.exit(1)
    except ValueError as e:
        # Seeding the store rejects duplicate subscriber ids
        logger.error("Startup failed", error=str(e))
        sys.exit(1)

    if not outcomes:
        click.echo(f"No subscribers for collection: {collection}")
        return

    for outcome in outcomes:
        line = f"{outcome.status.value}\t{outcome.subscriber.name}\t{outcome.subscriber.destination}"
        if outcome.error:
            line += f"\t{outcome.error.message}"
        click.echo(line)

    if not all(outcome.is_successful for outcome in outcomes):
        sys.exit(2)


@click.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(path_type=Path),
    help="Path to save configuration file",
)
def init_config(config: Optional[Path] = None) -> None:
    """Initialize a configuration file with default settings."""
    from .config.settings import create_default_config

    config_path = config or Path("config.json")

    if config_path.exists():
        click.echo(f"Configuration file already exists: {config_path}")
        if not click.confirm("Overwrite?"):
            return

    try:
        create_default_config(config_path)
        click.echo(f"Created configuration file: {config_path}")
    except OSError as e:
        click.echo(f"Failed to create configuration file: {e}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(package_name="record-webhooks")
def cli() -> None:
    """Record webhooks CLI."""
    pass


cli.add_command(send, name="send")
cli.add_command(init_config, name="init")


if __name__ == "__main__":
    cli()
