"""Command-line interface for SchemaProxy.

This module provides the CLI commands for running the proxy and preparing
its resources directory.
"""

import os

import click

from schemaproxy import __version__
from schemaproxy.core.config import get_settings
from schemaproxy.core.logging import configure_logging, get_logger
from schemaproxy.infrastructure.storage import DescriptorStore


@click.group()
@click.version_option(version=__version__, prog_name="SchemaProxy")
def cli() -> None:
    """SchemaProxy - schema-synchronizing proxy for a document backend.

    Keeps per-collection schema descriptors on disk in step with the
    backend's live schema and forwards document writes.
    """


@cli.command()
@click.option("--host", type=str, default=None, help="Host to bind to (overrides config)")
@click.option("--port", type=int, default=None, help="Port to bind to (overrides config)")
@click.option(
    "--resources-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Resources root holding one folder per collection (overrides config)",
)
@click.option("--backend-url", type=str, default=None, help="Backend base URL (overrides config)")
@click.option("--reload", is_flag=True, default=False, help="Enable auto-reload for development")
def serve(
    host: str | None,
    port: int | None,
    resources_dir: str | None,
    backend_url: str | None,
    reload: bool,
) -> None:
    """Start the proxy server."""
    import uvicorn

    overrides = {
        key: value
        for key, value in {
            "host": host,
            "port": port,
            "resources_directory": resources_dir,
            "backend_url": backend_url,
        }.items()
        if value is not None
    }
    # Overrides go through the environment so the factory (possibly in a
    # reloader subprocess) sees them
    for key, value in overrides.items():
        os.environ[f"SCHEMAPROXY_{key.upper()}"] = str(value)
    get_settings.cache_clear()
    settings = get_settings()

    configure_logging(settings)
    logger = get_logger(__name__)
    logger.info(
        "Starting SchemaProxy server",
        host=settings.host,
        port=settings.port,
        resources_directory=settings.resources_directory,
        backend_url=settings.backend_url,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "schemaproxy.infrastructure.api.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command()
@click.option(
    "--resources-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Resources root to create (overrides config)",
)
def init(resources_dir: str | None) -> None:
    """Create the resources directory."""
    settings = get_settings()
    configure_logging(settings)

    store = DescriptorStore(
        resources_dir or settings.resources_directory, settings.descriptor_filename
    )
    store.ensure_root()
    click.echo(f"Resources directory ready at {store.root.resolve()}")


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
