"""
Command-line interface for the Mock Interviewer platform.

This module provides commands to run the API server and inspect the
active configuration.
"""
import logging
from typing import Optional

import click
import uvicorn

from mock_interviewer.utils.config import get_server_config, log_config

logger = logging.getLogger(__name__)


@click.group()
def cli():
    """Mock Interviewer - Voice Mock Interview Platform"""
    pass


@cli.command()
@click.option('--host', default=None, help='Interface to bind (defaults to SERVER_HOST)')
@click.option('--port', default=None, type=int, help='Port to listen on (defaults to SERVER_PORT)')
@click.option('--reload', is_flag=True, help='Reload on code changes')
def serve(host: Optional[str] = None, port: Optional[int] = None, reload: bool = False) -> None:
    """
    Run the API server.
    """
    server_config = get_server_config()
    host = host or server_config["host"]
    port = port or server_config["port"]
    logger.info(f"Starting server on {host}:{port}")
    uvicorn.run("mock_interviewer.server:app", host=host, port=port, reload=reload)


@cli.command(name="show-config")
def show_config() -> None:
    """Log the active configuration (secrets are never shown)."""
    log_config()


if __name__ == "__main__":
    cli()
