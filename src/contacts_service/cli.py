"""CLI entry point for the contacts service."""

from __future__ import annotations

import asyncio
import json
import sys

import click

from .core.errors import ContactsError, PatternError


def _overrides(host: str | None = None, port: int | None = None) -> dict:
    http: dict = {}
    if host:
        http["host"] = host
    if port:
        http["port"] = port
    return {"http": http} if http else {}


@click.group()
def main() -> None:
    """Contacts service."""


@main.command()
@click.option("--config", default="configs/contacts.toml", help="Config file path")
@click.option("--host", default=None, help="Bind address override")
@click.option("--port", default=None, type=int, help="Port override")
def serve(config: str, host: str | None, port: int | None) -> None:
    """Run the HTTP service."""
    from .main import run

    asyncio.run(run(config_path=config, overrides=_overrides(host, port)))


@main.command("init-db")
@click.option("--config", default="configs/contacts.toml", help="Config file path")
def init_db(config: str) -> None:
    """Create the contacts table if it does not exist."""
    from .storage.sql import create_all, engine_from_config

    settings = _settings_or_exit(config)

    async def _run() -> None:
        engine = engine_from_config(settings.database, use_null_pool=True)
        try:
            await create_all(engine)
        finally:
            await engine.dispose()

    asyncio.run(_run())
    click.echo("contacts table ready")


@main.command()
@click.argument("name")
@click.option("--config", default="configs/contacts.toml", help="Config file path")
def create(name: str, config: str) -> None:
    """Create one contact and print it as JSON."""
    if not name.strip():
        raise click.BadParameter("Contact name cannot be empty", param_hint="NAME")

    contact = _run_with_service(config, lambda service: service.create_contact(name))
    click.echo(json.dumps(contact.to_dict()))


@main.command("list")
@click.argument("pattern")
@click.option("--config", default="configs/contacts.toml", help="Config file path")
def list_contacts(pattern: str, config: str) -> None:
    """Print contacts whose name does NOT match PATTERN."""
    if not pattern.strip():
        raise click.BadParameter(
            "The 'nameFilter' parameter is mandatory and cannot be empty.",
            param_hint="PATTERN",
        )

    result = _run_with_service(
        config, lambda service: service.list_contacts_excluding(pattern)
    )
    if isinstance(result, PatternError):
        click.echo(f"invalid regular expression: {result.detail}", err=True)
        sys.exit(2)
    click.echo(json.dumps({"contacts": [c.to_dict() for c in result]}))


@main.command()
@click.option("--config", default="configs/contacts.toml", help="Config file path")
def count(config: str) -> None:
    """Print the number of stored contacts."""
    total = _run_with_service(config, lambda service: service.count_contacts())
    click.echo(json.dumps({"count": total}))


def _settings_or_exit(config: str):
    from .main import prepare_settings

    try:
        return prepare_settings(config)
    except ContactsError as exc:
        raise click.ClickException(str(exc)) from exc


def _run_with_service(config: str, operation):
    """Start a short-lived container, run *operation*, always stop it."""
    from .app import build_container

    settings = _settings_or_exit(config)

    async def _run():
        container = build_container(settings, use_null_pool=True)
        await container.start()
        try:
            return await operation(container.service)
        finally:
            await container.stop()

    try:
        return asyncio.run(_run())
    except ContactsError as exc:
        raise click.ClickException(str(exc)) from exc
