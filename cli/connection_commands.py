"""Database connection test command."""

import click

from cli import utils
from cli.utils import handle_error
from config import load_database_config
from spaces_backup.errors import ConfigInvalid
from spaces_backup.probe import short_version


def register_commands(cli):
    """Register connection commands with main CLI."""

    @cli.command('test')
    @click.pass_context
    def test_connection(ctx):
        """Test the database connection.

        Runs SELECT version() through a throwaway connection. The result is
        reported, not reflected in the exit status.

        Examples:
            pg-spaces-backup test
        """
        verbose = ctx.obj['verbose']
        try:
            db_config = load_database_config()
        except ConfigInvalid as e:
            handle_error(e, verbose, prefix="❌ Configuration error")

        probe = utils.make_probe(db_config)
        if probe.test():
            click.echo(f"✓ Connected to {db_config.host}:{db_config.port}/{db_config.name} "
                       f"({short_version(probe.server_version)})")
        else:
            click.echo(f"✗ Could not connect to {db_config.host}:{db_config.port}/{db_config.name}")
