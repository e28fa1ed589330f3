#!/usr/bin/env python3
"""Command Line Interface for the Recipe App services.

Usage:
    cd src
    python cli.py serve --variant user   # Bootstrap and serve one service
    python cli.py check --variant recipe # Bootstrap without serving
    python cli.py seed                   # Run User service seeding
    python cli.py info                   # Show configuration
"""
from __future__ import annotations

from typing import Optional

import typer
import uvicorn

from core.config import get_settings
from core.exceptions import ConfigurationError
from core.logging_config import get_logger, setup_logging
from core.variants import Capabilities, get_variant

LOGGER = get_logger(__name__)

app = typer.Typer(help="Recipe App services CLI")


def _resolve_variant(name: Optional[str]) -> Capabilities:
    try:
        return get_variant(name or get_settings().service_variant)
    except ConfigurationError as exc:
        typer.secho(f"✗ {exc}", fg="red")
        raise typer.Exit(2)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """Recipe App - Recipe and User service bootstrap and tooling."""
    try:
        settings = get_settings()
    except ConfigurationError as e:
        typer.secho(f"✗ Configuration invalid: {e}", fg="red")
        raise typer.Exit(1)
    log_level = "DEBUG" if verbose else settings.log_level
    setup_logging(level=log_level, json_format=settings.log_format == "json")


# =============================================================================
# Server Commands
# =============================================================================


@app.command("serve")
def serve(
    variant: Optional[str] = typer.Option(None, help="Service variant: recipe or user"),
    host: str = typer.Option("0.0.0.0", help="Host to bind to"),
    port: int = typer.Option(8000, help="Port to bind to"),
) -> None:
    """Bootstrap a service and start the API server."""
    from api.app import create_app

    capabilities = _resolve_variant(variant)
    try:
        application = create_app(capabilities)
    except ConfigurationError as e:
        typer.secho(f"✗ Configuration invalid: {e}", fg="red")
        raise typer.Exit(1)
    except Exception as e:
        LOGGER.critical("Startup failed: %s", e, exc_info=True)
        typer.secho(f"✗ Startup failed: {e}", fg="red")
        raise typer.Exit(1)

    typer.echo(f"Starting {capabilities.name} service on {host}:{port}...")
    uvicorn.run(application, host=host, port=port)


# =============================================================================
# Utility Commands
# =============================================================================


@app.command("check")
def check(
    variant: Optional[str] = typer.Option(None, help="Service variant: recipe or user"),
) -> None:
    """Run the bootstrap sequence without serving and report the outcome."""
    from core.bootstrap import bootstrap

    capabilities = _resolve_variant(variant)
    try:
        result = bootstrap(capabilities)
    except Exception as e:
        typer.secho(f"✗ {capabilities.name}: FATAL - {e}", fg="red")
        raise typer.Exit(1)

    outcome = result.outcome
    result.registry.database.dispose()
    if outcome.is_degraded:
        typer.secho(f"! {capabilities.name}: DEGRADED - {outcome.reason}", fg="yellow")
    else:
        typer.secho(f"✓ {capabilities.name}: READY", fg="green")
    if outcome.seed_report is not None:
        report = outcome.seed_report
        typer.echo(f"  Roles created: {', '.join(report.roles_created) or 'none'}")
        typer.echo(f"  Admin created: {report.admin_created}")


@app.command("seed")
def seed() -> None:
    """Create the User service schema and seed baseline data."""
    from core.policies import select_policies
    from core.registry import register_services
    from core.validation import validate_configuration
    from core.variants import USER

    try:
        config = validate_configuration(get_settings(), USER)
        registry = register_services(config, USER, select_policies(config, USER))
        registry.database.ensure_schema()
        report = registry.seeder.seed_if_empty()
    except Exception as e:
        typer.secho(f"✗ Seeding failed: {e}", fg="red")
        raise typer.Exit(1)

    registry.database.dispose()
    if report.changed:
        typer.secho("✓ Seed data inserted", fg="green")
    else:
        typer.echo("Seed data already present")


@app.command("info")
def show_info() -> None:
    """Show non-secret configuration."""
    settings = get_settings()
    typer.echo("Recipe App Configuration:")
    typer.echo(f"  Environment: {settings.environment}")
    typer.echo(f"  Variant: {settings.service_variant}")
    typer.echo(f"  Log Level: {settings.log_level}")
    typer.echo(f"  Database Configured: {bool(settings.database_url)}")
    typer.echo(f"  JWT Configured: {settings.has_jwt_settings()}")
    typer.echo(f"  Production CORS Policy: {settings.cors_production_policy}")
    typer.echo(f"  Frontend Origins: {', '.join(settings.frontend_origins)}")
    typer.echo(f"  Enforce HTTPS: {settings.enforce_https}")


if __name__ == "__main__":
    app()
