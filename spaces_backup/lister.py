"""List backups stored under the configured prefix."""

import logging
from datetime import datetime
from typing import List

from boto3.exceptions import Boto3Error
from botocore.exceptions import BotoCoreError, ClientError

from config import ObjectStoreConfig
from spaces_backup.errors import ListingFailed
from spaces_backup.models import BackupListing, ListingReport
from spaces_backup.storage import describe_error

logger = logging.getLogger(__name__)


class BackupLister:
    """Live query of backup objects, newest first."""

    def __init__(self, s3_client, store_config: ObjectStoreConfig):
        self.s3_client = s3_client
        self.store_config = store_config

    def fetch(self) -> List[BackupListing]:
        """Return every object under the prefix, sorted by last-modified descending.

        Raises:
            ListingFailed: If the store query fails
        """
        entries = []
        try:
            paginator = self.s3_client.get_paginator('list_objects_v2')
            for page in paginator.paginate(
                Bucket=self.store_config.bucket,
                Prefix=self.store_config.prefix
            ):
                for obj in page.get('Contents', []):
                    entries.append(BackupListing(
                        key=obj['Key'],
                        size=obj.get('Size', 0),
                        last_modified=obj['LastModified']
                    ))
        except (ClientError, BotoCoreError, Boto3Error) as e:
            raise ListingFailed(describe_error(e)) from e

        # Stable sort; ties keep the store's order
        entries.sort(key=lambda entry: entry.last_modified, reverse=True)
        return entries

    def list(self) -> ListingReport:
        """List backups, converting store errors into a failed report."""
        logger.info("📋 Listing existing backups...")
        try:
            entries = self.fetch()
        except ListingFailed as e:
            logger.error(f"✗ Failed to list backups: {e}")
            return ListingReport(success=False, error=str(e))

        if not entries:
            logger.info("No backups found")
        else:
            logger.info(f"Found {len(entries)} backup(s)")
        return ListingReport(success=True, entries=entries)


def format_last_modified(value: datetime) -> str:
    """Render a timestamp in local time."""
    if value.tzinfo is not None:
        value = value.astimezone()
    return value.strftime('%Y-%m-%d %H:%M:%S')


def render_listing(entries: List[BackupListing]) -> List[str]:
    """Render entries as numbered lines: ``1. key (1.23 MB) - 2024-01-01 10:00:00``."""
    return [
        f"{index}. {entry.key} ({entry.size_mb:.2f} MB) - {format_last_modified(entry.last_modified)}"
        for index, entry in enumerate(entries, start=1)
    ]
