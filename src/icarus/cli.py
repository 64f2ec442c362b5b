"""CLI entry point for the platform."""

from __future__ import annotations

import json

import click


@click.group()
def main() -> None:
    """Icarus platform core."""


@main.command()
@click.option("--config", default="configs/default.toml", help="Config file path")
@click.option("--email", default="jane@example.com", help="Email of the user to create")
@click.option("--name", default="Jane Doe", help="Name of the user to create")
@click.option("--request-id", default="req-123", help="Request ID for correlation")
@click.option("--log-format", type=click.Choice(["json", "console"]), default=None)
def demo(config: str, email: str, name: str, request_id: str, log_format: str | None) -> None:
    """Run one request through the user and order modules."""
    import asyncio

    from .main import run

    overrides: dict = {}
    if log_format:
        overrides["observability"] = {"log_format": log_format}

    request = {
        "id": request_id,
        "method": "POST",
        "path": "/users",
        "email": email,
        "name": name,
        "items": [
            {"product_id": "sku-1", "quantity": 2, "price": "9.99"},
            {"product_id": "sku-2", "quantity": 1, "price": "24.50"},
        ],
    }
    result = asyncio.run(run(request, config_path=config, overrides=overrides))
    click.echo(json.dumps(result, indent=2))
