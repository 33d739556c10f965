"""Main CLI entry point - Root command group with global options."""

import click

from config import DEFAULT_ENV_FILE, load_env_file
from cli.utils import setup_logging_from_context
from version import __version__


@click.group(invoke_without_command=True)
@click.option('--env-file', default=DEFAULT_ENV_FILE, show_default=True,
              help='Environment file to load (real environment variables win)')
@click.option('--verbose', '-v', is_flag=True, help='Show debug logging on console')
@click.version_option(version=__version__, prog_name='pg-spaces-backup')
@click.pass_context
def cli(ctx, env_file, verbose):
    """PostgreSQL backup to DigitalOcean Spaces (or any S3-compatible store).

    Dumps one database with pg_dump, uploads the dump to the bucket and
    removes the local file. Without a command, runs a backup.

    Commands:
        backup, backup-with-test, test, list, wait, validate, help

    Examples:
        # Check configuration and pg_dump
        pg-spaces-backup validate

        # Test the database connection
        pg-spaces-backup test

        # Create a backup
        pg-spaces-backup backup

        # List backups, newest first
        pg-spaces-backup list
    """
    ctx.ensure_object(dict)
    ctx.obj['env_file'] = env_file
    ctx.obj['verbose'] = verbose

    load_env_file(env_file)
    setup_logging_from_context(ctx)

    if ctx.invoked_subcommand is None:
        ctx.invoke(cli.get_command(ctx, 'backup'))


@cli.command('help')
@click.pass_context
def help_command(ctx):
    """Show this help message."""
    click.echo(ctx.parent.get_help())


def register_all_commands():
    """Register all command modules with the main CLI."""
    # Import all command modules
    from cli import (
        backup_commands,
        connection_commands,
        list_commands,
        wait_commands,
        config_commands,
    )

    # Register commands from each module
    backup_commands.register_commands(cli)
    connection_commands.register_commands(cli)
    list_commands.register_commands(cli)
    wait_commands.register_commands(cli)
    config_commands.register_commands(cli)


# Register all commands when module is imported
register_all_commands()
