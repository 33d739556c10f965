"""Configuration validation command."""

import os
import sys

import click
from tabulate import tabulate

from config import OPTIONAL_VARS
from spaces_backup.preflight import run_preflight


def register_commands(cli):
    """Register config commands with main CLI."""

    @cli.command('validate')
    @click.pass_context
    def validate(ctx):
        """Validate configuration and prerequisites.

        Checks:
        - Required and optional environment variables
        - The .env file
        - pg_dump availability

        Exits 1 if anything required is missing.

        Examples:
            pg-spaces-backup validate
            pg-spaces-backup --env-file prod.env validate
        """
        env_file = ctx.obj.get('env_file')
        pg_dump_path = os.environ.get('PG_DUMP_PATH') or OPTIONAL_VARS['PG_DUMP_PATH']

        report = run_preflight(os.environ, env_file, pg_dump_path)

        click.echo("🔍 Validating Configuration...")
        click.echo("\n📋 Required Environment Variables:")
        click.echo(tabulate(
            [(name, '✓' if status == 'set' else '✗ missing', shown) for name, status, shown in report.required],
            headers=['Variable', 'Status', 'Value'],
            tablefmt='simple'
        ))

        click.echo("\n📋 Optional Environment Variables:")
        click.echo(tabulate(
            [(name, '✓' if status == 'set' else 'default', shown) for name, status, shown in report.optional],
            headers=['Variable', 'Status', 'Value'],
            tablefmt='simple'
        ))

        click.echo("\n📁 Configuration Files:")
        if report.env_file_exists:
            click.echo(f"  ✓ {report.env_file} exists")
        else:
            click.echo(f"  ⚠️  {report.env_file or '.env'} not found (using process environment only)")
            click.echo("     Copy env.example to .env and configure it")

        click.echo("\n🗄️  PostgreSQL Client:")
        if report.pg_dump.available:
            click.echo(f"  ✓ {report.pg_dump.version}")
        else:
            click.echo(f"  ✗ {report.pg_dump.path} is not available: {report.pg_dump.error}")
            click.echo("     On Ubuntu/Debian: sudo apt-get install postgresql-client")
            click.echo("     On macOS: brew install postgresql")

        click.echo("\n" + "=" * 60)
        if report.ready:
            click.echo("🎉 Everything is ready!")
            click.echo("  1. Test database connection: pg-spaces-backup test")
            click.echo("  2. Create your first backup: pg-spaces-backup backup")
            click.echo("  3. List existing backups:    pg-spaces-backup list")
            return

        click.echo("⚠️  Some issues need to be resolved")
        if report.missing:
            click.echo(f"  - Missing variables: {', '.join(report.missing)}")
        if not report.pg_dump.available:
            click.echo("  - Install PostgreSQL client tools")
        sys.exit(1)
