import click

from timelock.cli.commands import message, rps
from timelock.cli.painting import echo_logging_root_path, echo_version


@click.group()
@click.option('--version', help="Echo the CLI version",
              is_flag=True, callback=echo_version, expose_value=False, is_eager=True)
@click.option('--logging-path', help="Echo the logging root directory path",
              is_flag=True, callback=echo_logging_root_path, expose_value=False, is_eager=True)
def timelock_cli():
    """Top level command for time-locked commitments."""


#
# CLI Entry Points
#

ENTRY_POINTS = (
    message.message,
    rps.rps,
    # add more entry points here
)

for entry_point in ENTRY_POINTS:
    timelock_cli.add_command(entry_point)
