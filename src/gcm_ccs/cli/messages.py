"""CLI: gcm-ccs message, gcm-ccs inspect"""

from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from gcm_ccs.codec import MessageCodec
from gcm_ccs.errors import DecodeError, EncodeError
from gcm_ccs.models.messages import DownstreamMessage, UpstreamMessage
from gcm_ccs.session import default_message_id

console = Console()


def _parse_data(pairs: tuple[str, ...]) -> dict[str, str]:
    data: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="--data")
        data[key] = value
    return data


@click.command("message")
@click.argument("to")
@click.option("-d", "--data", "data_pairs", multiple=True, help="Payload entry as KEY=VALUE.")
@click.option("--collapse-key", default=None)
@click.option("--ttl", "time_to_live", default=None, type=int, help="time_to_live in seconds.")
@click.option("--delay-while-idle", is_flag=True)
@click.option("--message-id", default=None)
def message_cmd(to: str, data_pairs, collapse_key: Optional[str], time_to_live: Optional[int],
                delay_while_idle: bool, message_id: Optional[str]):
    """Encode a downstream message addressed to TO."""
    try:
        envelope = DownstreamMessage(
            to=to,
            message_id=message_id or default_message_id(),
            data=_parse_data(data_pairs),
            collapse_key=collapse_key,
            time_to_live=time_to_live,
            delay_while_idle=delay_while_idle or None,
        )
        click.echo(MessageCodec().encode_downstream(envelope))
    except (ValidationError, EncodeError) as e:
        raise click.ClickException(str(e))


@click.command("inspect")
@click.argument("payload")
def inspect_cmd(payload: str):
    """Decode a CCS JSON PAYLOAD and show what kind of message it is."""
    codec = MessageCodec()
    try:
        message = codec.parse_message(codec.decode(payload))
    except DecodeError as e:
        console.print(f"[red]Decode error:[/red] {e}")
        raise SystemExit(1)

    kind = "upstream" if isinstance(message, UpstreamMessage) else message.message_type
    table = Table(title=f"{type(message).__name__} ({kind})")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for field, value in message.model_dump(by_alias=True).items():
        if value is not None:
            table.add_row(field, str(value))
    console.print(table)
