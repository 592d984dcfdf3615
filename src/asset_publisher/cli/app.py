"""Typer CLI root application."""

import typer

from asset_publisher.core.config import get_settings
from asset_publisher.core.logging import setup_logging

app = typer.Typer(name="asset-publisher", help="Publish built static assets to S3-compatible object storage")


@app.callback()
def _main_callback() -> None:
    """Initialize logging for all CLI commands."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir, json_logs=settings.log_json)


def _register_subcommands() -> None:
    """Register all CLI commands."""
    from asset_publisher.cli.publish_cmd import publish_command, purge_cache_command

    app.command("publish")(publish_command)
    app.command("purge-cache")(purge_cache_command)


_register_subcommands()
