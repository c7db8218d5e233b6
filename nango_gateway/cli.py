"""nango-cli — command-line interface for the Nango integrations API.

Flags take precedence over NANGO_API_KEY / NANGO_BASE_URL / TIMEOUT from the
environment. Results are printed to stdout as indented JSON; errors go to
stderr and exit with status 1.
"""

import asyncio
import json
import sys
from typing import NoReturn

import click
import typer
from typer.core import TyperCommand

from nango_gateway.client.client import NangoClient
from nango_gateway.client.models import ClientConfig, Integration
from nango_gateway.config.settings import load_client_settings
from nango_gateway.errors import NangoError, ValidationError
from nango_gateway.logging.audit import get_audit_logger, setup_logging

API_KEY_REQUIRED = (
    "API key is required. Set NANGO_API_KEY environment variable or use -api-key flag."
)

EPILOG = """\
Environment variables: NANGO_API_KEY (required), NANGO_BASE_URL (default https://api.nango.dev).

Examples: nango-cli -command list | nango-cli -command get -id 123 |
nango-cli -api-key your-key -base-url https://custom.api.com -command list
"""


class UsageErrorExitsOne(TyperCommand):
    """Report bad flags like any other user error: message on stderr, exit 1."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            typer.echo(f"Error: {e.format_message()}", err=True)
            ctx.exit(1)


app = typer.Typer(
    name="nango-cli",
    help="Command-line interface for Nango APIs.",
    epilog=EPILOG,
    add_completion=False,
    context_settings={"help_option_names": ["-help", "--help", "-h"]},
)


def make_client(config: ClientConfig) -> NangoClient:
    return NangoClient(config)


def _fail(message: str) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=1)


def _to_json(integration: Integration) -> str:
    return json.dumps(integration.to_dict(), indent=2)


def resolve_config(api_key: str | None, base_url: str | None, timeout: str | None) -> ClientConfig:
    """Merge flag values over the environment into the client configuration."""
    overrides = {}
    if api_key:
        overrides["nango_api_key"] = api_key
    if base_url:
        overrides["nango_base_url"] = base_url
    if timeout:
        overrides["timeout"] = timeout

    try:
        settings = load_client_settings(**overrides)
    except ValidationError as e:
        if "nango_api_key" in e.fields:
            raise ValidationError(API_KEY_REQUIRED, fields=e.fields) from e
        raise
    return settings.client_config()


async def list_integrations(client: NangoClient) -> None:
    async with client:
        integrations = await client.list_integrations()

    if not integrations:
        typer.echo("No integrations found.")
        return

    typer.echo(f"Found {len(integrations)} integration(s):\n")
    for integration in integrations:
        typer.echo(_to_json(integration))
        typer.echo()


async def get_integration(client: NangoClient, integration_id: str) -> None:
    async with client:
        integration = await client.get_integration(integration_id)
    typer.echo(_to_json(integration))


@app.command(cls=UsageErrorExitsOne)
def run(
    command: str = typer.Option("list", "--command", "-command", help="Command to execute (list, get)."),
    integration_id: str | None = typer.Option(
        None, "--id", "-id", help="Integration ID (required for 'get' command)."
    ),
    api_key: str | None = typer.Option(
        None, "--api-key", "-api-key", help="Nango API key (overrides NANGO_API_KEY env var)."
    ),
    base_url: str | None = typer.Option(
        None, "--base-url", "-base-url", help="Nango base URL (overrides NANGO_BASE_URL env var)."
    ),
    timeout: str | None = typer.Option(
        None, "--timeout", "-timeout", help="Request timeout, e.g. 30s or 1m (default 30s)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-verbose", "-v", help="Verbose logs on stderr."),
):
    """List integrations, or get one by ID."""
    try:
        config = resolve_config(api_key, base_url, timeout)
    except ValidationError as e:
        _fail(str(e))

    setup_logging("debug" if verbose else "warn", stream=sys.stderr)
    logger = get_audit_logger()

    if command == "list":
        action, label = list_integrations(make_client(config)), "listing integrations"
    elif command == "get":
        if not integration_id:
            _fail("Integration ID is required for 'get' command. Use -id flag.")
        action, label = get_integration(make_client(config), integration_id), "getting integration"
    else:
        _fail(f"Unknown command '{command}'. Use -help for available commands.")

    logger.debug("Running command", extra={"audit_data": {"command": command, "base_url": config.base_url}})
    try:
        asyncio.run(action)
    except NangoError as e:
        typer.echo(f"Error {label}: {e}", err=True)
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
