"""PostgreSQL backup to S3-compatible object storage.

Dumps one database with pg_dump, uploads the file to a bucket (DigitalOcean
Spaces by default) and removes the local copy. Components live in their own
modules (``dump``, ``uploader``, ``lister``, ``probe``, ``orchestrator``,
``waiter``); only the error types and value objects are re-exported here
because ``config`` depends on them.
"""

from .errors import (
    BackupError,
    ConfigInvalid,
    DumpFailed,
    UploadFailed,
    ConnectionFailed,
    ListingFailed,
    InvalidArgument,
)
from .models import BackupAttempt, UploadDescriptor, UploadResult, BackupResult, BackupListing

__version__ = '1.0.0'
__all__ = [
    'BackupError',
    'ConfigInvalid',
    'DumpFailed',
    'UploadFailed',
    'ConnectionFailed',
    'ListingFailed',
    'InvalidArgument',
    'BackupAttempt',
    'UploadDescriptor',
    'UploadResult',
    'BackupResult',
    'BackupListing',
]
