"""List commands for backups stored in the bucket."""

import click

from cli import utils
from cli.utils import handle_error
from config import load_store_config
from spaces_backup.errors import ConfigInvalid
from spaces_backup.lister import render_listing


def register_commands(cli):
    """Register list commands with main CLI."""

    @cli.command('list')
    @click.pass_context
    def list_backups(ctx):
        """List existing backups, newest first.

        Always a live query of the bucket under BACKUP_PREFIX. Store errors
        are reported but do not change the exit status.

        Examples:
            pg-spaces-backup list
        """
        verbose = ctx.obj['verbose']
        try:
            store_config = load_store_config()
        except ConfigInvalid as e:
            handle_error(e, verbose, prefix="❌ Configuration error")

        report = utils.make_lister(store_config).list()

        if not report.success:
            click.echo(f"❌ Failed to list backups: {report.error}", err=True)
            return

        if not report.entries:
            click.echo("No backups found")
            return

        click.echo(f"Found {len(report.entries)} backup(s):")
        for line in render_listing(report.entries):
            click.echo(line)
