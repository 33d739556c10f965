"""Timed wait command."""

import sys

import click

from spaces_backup.errors import InvalidArgument
from spaces_backup.waiter import Waiter, DEFAULT_MINUTES, DEFAULT_INTERVAL_SECONDS


def register_commands(cli):
    """Register wait commands with main CLI."""

    # Negative numbers must reach the validator instead of being parsed as options
    @cli.command('wait', context_settings={'ignore_unknown_options': True})
    @click.argument('minutes', required=False)
    @click.argument('interval', required=False)
    def wait(minutes, interval):
        """Wait MINUTES minutes (default 5), reporting progress every INTERVAL seconds (default 15).

        Examples:
            pg-spaces-backup wait
            pg-spaces-backup wait 10 30
        """
        try:
            elapsed = Waiter().wait(
                DEFAULT_MINUTES if minutes is None else minutes,
                DEFAULT_INTERVAL_SECONDS if interval is None else interval
            )
        except InvalidArgument as e:
            click.echo(f"❌ {e}", err=True)
            sys.exit(1)

        click.echo(f"🎯 Task finished with success status ({elapsed / 60:.1f} minute(s) elapsed)")
