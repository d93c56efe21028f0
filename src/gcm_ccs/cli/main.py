"""
gcm-ccs CLI — `gcm-ccs` command.

Commands:
  gcm-ccs config show          Print stored settings
  gcm-ccs config set KEY VAL   Update one setting
  gcm-ccs message TO           Encode a downstream message
  gcm-ccs inspect JSON         Decode and classify a CCS payload
"""

import logging

try:
    import click
    from rich.console import Console
except ImportError:
    raise SystemExit("CLI requires extras: pip install gcm-ccs[cli]")

console = Console()


@click.group()
@click.version_option("0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """GCM Cloud Connection Server tools."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s")


# Register subcommands from separate modules
from gcm_ccs.cli.config import config
from gcm_ccs.cli.messages import inspect_cmd, message_cmd

main.add_command(config)
main.add_command(message_cmd)
main.add_command(inspect_cmd)


if __name__ == "__main__":
    main()
