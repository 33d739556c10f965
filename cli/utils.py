"""Shared utilities for CLI commands."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import click

from config import (
    BackupSettings,
    DatabaseConfig,
    LoggingConfig,
    ObjectStoreConfig,
    load_logging_config,
)
from spaces_backup.dump import DumpRunner
from spaces_backup.errors import ConfigInvalid
from spaces_backup.lister import BackupLister
from spaces_backup.orchestrator import BackupOrchestrator
from spaces_backup.probe import ConnectionProbe
from spaces_backup.storage import create_s3_client
from spaces_backup.uploader import ObjectStoreUploader

QUIET_LOGGERS = ('boto3', 'botocore', 's3transfer', 'urllib3', 'sqlalchemy')


def setup_logging_from_context(ctx: click.Context):
    """Configure logging from Click context.

    Args:
        ctx: Click context containing the verbose flag
    """
    verbose = ctx.obj.get('verbose', False)
    try:
        logging_config = load_logging_config()
    except ConfigInvalid as e:
        # Fall back to defaults so the error itself can still be reported
        logging_config = LoggingConfig()
        setup_logging(logging_config, verbose)
        logging.getLogger(__name__).warning(f"Ignoring invalid logging settings: {e}")
        return
    setup_logging(logging_config, verbose)


def setup_logging(logging_config: LoggingConfig, verbose: bool = False):
    """Console logging for the operator, plus an optional rotating log file.

    Args:
        logging_config: Logging settings
        verbose: Whether to show debug output on the console
    """
    root_logger = logging.getLogger()
    root_logger.handlers = []

    console_level = logging.DEBUG if verbose else getattr(logging, logging_config.level)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
    root_logger.addHandler(console_handler)

    if logging_config.file:
        log_file = Path(logging_config.file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=logging_config.max_bytes,
            backupCount=logging_config.backup_count
        )
        file_handler.setLevel(logging.WARNING)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        root_logger.addHandler(file_handler)

    root_logger.setLevel(logging.DEBUG)

    # Quiet all libraries
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def handle_error(error: Exception, verbose: bool = False, prefix: str = "Error"):
    """Handle and display errors consistently, then exit with status 1.

    Args:
        error: Exception to handle
        verbose: Whether to show full traceback
        prefix: Text shown before the error message
    """
    click.echo(f"{prefix}: {error}", err=True)
    if verbose:
        import traceback
        click.echo(traceback.format_exc(), err=True)
    sys.exit(1)


def make_orchestrator(db_config: DatabaseConfig, store_config: ObjectStoreConfig,
                      settings: BackupSettings) -> BackupOrchestrator:
    """Wire the dump runner, uploader and orchestrator from configuration."""
    uploader = ObjectStoreUploader(create_s3_client(store_config), store_config, settings.retry)
    return BackupOrchestrator(
        db_config,
        store_config,
        DumpRunner(settings.pg_dump_path),
        uploader,
        settings.temp_dir
    )


def make_probe(db_config: DatabaseConfig) -> ConnectionProbe:
    return ConnectionProbe(db_config)


def make_lister(store_config: ObjectStoreConfig) -> BackupLister:
    return BackupLister(create_s3_client(store_config), store_config)


def format_size(bytes_size: int) -> str:
    """Format bytes as human-readable size.

    Args:
        bytes_size: Size in bytes

    Returns:
        Formatted string (e.g., "1.50 GB")
    """
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if bytes_size < 1024.0:
            return f"{bytes_size:.2f} {unit}"
        bytes_size /= 1024.0
    return f"{bytes_size:.2f} PB"


def format_time(seconds: float) -> str:
    """Format seconds as human-readable duration.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string (e.g., "2h 30m 45s")
    """
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        minutes = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{minutes}m {secs}s"
    else:
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        secs = int(seconds % 60)
        return f"{hours}h {minutes}m {secs}s"
