"""Backup commands: full pipeline, optionally guarded by a connection test."""

import sys

import click

from cli import utils
from cli.utils import handle_error, format_size, format_time
from config import load_backup_settings, load_database_config, load_store_config
from spaces_backup.errors import BackupError, ConfigInvalid


def register_commands(cli):
    """Register backup commands with main CLI."""

    @cli.command('backup')
    @click.pass_context
    def backup(ctx):
        """Create a new database backup (default command).

        Dumps the database with pg_dump, uploads the file to the bucket
        under BACKUP_PREFIX and removes the local copy. Exits 1 on failure.

        Examples:
            pg-spaces-backup backup
            pg-spaces-backup            # same thing
        """
        verbose = ctx.obj['verbose']
        db_config, store_config, settings = _load_backup_config(verbose)
        _run_backup(db_config, store_config, settings, verbose)

    @cli.command('backup-with-test')
    @click.pass_context
    def backup_with_test(ctx):
        """Test the database connection, then back up only if it succeeds.

        Examples:
            pg-spaces-backup backup-with-test
        """
        verbose = ctx.obj['verbose']
        db_config, store_config, settings = _load_backup_config(verbose)

        probe = utils.make_probe(db_config)
        if not probe.test():
            click.echo("❌ Cannot proceed with backup due to connection failure", err=True)
            sys.exit(1)

        _run_backup(db_config, store_config, settings, verbose)


def _load_backup_config(verbose):
    """Load every section a backup needs, exiting on invalid configuration."""
    try:
        return load_database_config(), load_store_config(), load_backup_settings()
    except ConfigInvalid as e:
        handle_error(e, verbose, prefix="❌ Configuration error")


def _run_backup(db_config, store_config, settings, verbose):
    """Run one backup attempt and display the outcome.

    Args:
        db_config: Database connection settings
        store_config: Bucket settings
        settings: Local runtime settings
        verbose: Verbose output flag
    """
    orchestrator = utils.make_orchestrator(db_config, store_config, settings)
    try:
        result = orchestrator.run()
    except BackupError as e:
        handle_error(e, verbose, prefix="❌ Backup failed")

    _display_backup_result(result)


def _display_backup_result(result):
    """Display backup summary.

    Args:
        result: BackupResult from the orchestrator
    """
    click.echo()
    click.echo("=" * 70)
    click.echo("BACKUP SUMMARY")
    click.echo("=" * 70)
    click.echo(f"Artifact:        {result.attempt.artifact_name}")
    click.echo(f"Dump size:       {format_size(result.dump_size)}")
    click.echo(f"Dump time:       {format_time(result.dump_time)}")
    click.echo(f"Upload time:     {format_time(result.upload.upload_time)}")
    click.echo(f"Location:        s3://{result.upload.bucket}/{result.upload.key}")
    click.echo(f"URL:             {result.upload.location}")
    click.echo("=" * 70)
    click.echo("✅ Backup completed successfully!")
