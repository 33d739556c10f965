#!/usr/bin/env python3
"""PostgreSQL -> DigitalOcean Spaces backup tool.

Examples:
    # Get help
    python -m main --help

    # Validate configuration and pg_dump
    python -m main validate

    # Typical cron job
    python -m main backup-with-test

    # Inspect the bucket
    python -m main list

    # Pause a pipeline for 10 minutes, reporting every 30 seconds
    python -m main wait 10 30
"""

from cli.main import cli

if __name__ == '__main__':
    cli()
