"""CLI: gcm-ccs config show|set"""

import json

import click
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from gcm_ccs.config import CcsSettings, load_settings, save_settings

console = Console()


def _mask(value: str) -> str:
    if len(value) <= 4:
        return "*" * len(value)
    return "*" * (len(value) - 4) + value[-4:]


@click.group()
def config():
    """Stored connection settings."""


@config.command("show")
@click.option("--json-output", "--json", is_flag=True)
def config_show(json_output):
    """Show settings (API key masked)."""
    settings = load_settings()
    values = settings.model_dump()
    values["api_key"] = _mask(values["api_key"])
    if json_output:
        click.echo(json.dumps(values, indent=2))
        return
    table = Table(title="CCS settings")
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for key, value in values.items():
        table.add_row(key, "" if value is None else str(value))
    console.print(table)


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key, value):
    """Set one setting."""
    if key not in CcsSettings.model_fields:
        raise click.BadParameter(f"unknown setting {key!r}", param_hint="KEY")
    settings = load_settings()
    try:
        updated = CcsSettings.model_validate({**settings.model_dump(), key: value})
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint="VALUE")
    path = save_settings(updated)
    console.print(f"[green]Saved {key} to {path}[/green]")
