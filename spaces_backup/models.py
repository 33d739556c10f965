"""Value objects shared by the backup pipeline."""

import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

TIMESTAMP_FORMAT = '%Y-%m-%d_%H-%M-%S'
ARTIFACT_PATTERN = re.compile(r'^backup_\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2}\.sql$')
CONTENT_TYPE = 'application/sql'
BACKUP_TYPE = 'postgresql'


def artifact_name_for(timestamp: str) -> str:
    """Return the artifact file name for a backup timestamp."""
    return f"backup_{timestamp}.sql"


@dataclass(frozen=True)
class BackupAttempt:
    """One backup invocation, pinned to the moment it started."""
    timestamp: str
    work_dir: Path

    @classmethod
    def create(cls, work_dir: Path, now: Optional[datetime] = None) -> 'BackupAttempt':
        now = now or datetime.now()
        return cls(timestamp=now.strftime(TIMESTAMP_FORMAT), work_dir=Path(work_dir))

    @property
    def artifact_name(self) -> str:
        return artifact_name_for(self.timestamp)

    @property
    def local_path(self) -> Path:
        return self.work_dir / self.artifact_name


@dataclass(frozen=True)
class UploadDescriptor:
    """Where and how one artifact is stored in the bucket."""
    key: str
    metadata: Dict[str, str]
    content_type: str = CONTENT_TYPE

    @classmethod
    def for_attempt(cls, attempt: BackupAttempt, prefix: str,
                    database_name: str, database_host: str) -> 'UploadDescriptor':
        """Build the descriptor for an attempt's artifact.

        Args:
            attempt: Backup attempt whose artifact is uploaded
            prefix: Key prefix inside the bucket
            database_name: Name of the dumped database
            database_host: Host the dump was taken from

        Returns:
            UploadDescriptor with key ``<prefix>/<artifact>`` and metadata
        """
        prefix = prefix.strip('/')
        key = f"{prefix}/{attempt.artifact_name}" if prefix else attempt.artifact_name
        return cls(
            key=key,
            metadata={
                'backup-timestamp': attempt.timestamp,
                'database-name': database_name,
                'database-host': database_host,
                'backup-type': BACKUP_TYPE,
            }
        )


@dataclass
class UploadResult:
    """Result of a completed upload."""
    bucket: str
    key: str
    location: str
    size: int = 0
    attempts: int = 1
    upload_time: float = 0.0


@dataclass
class BackupResult:
    """Result of a successful backup run."""
    attempt: BackupAttempt
    upload: UploadResult
    dump_time: float = 0.0
    dump_size: int = 0


@dataclass(frozen=True)
class BackupListing:
    """One backup object as reported by the store."""
    key: str
    size: int
    last_modified: datetime

    @property
    def size_mb(self) -> float:
        return round(self.size / 1024 / 1024, 2)


@dataclass
class ListingReport:
    """Outcome of a listing query."""
    success: bool
    entries: List[BackupListing] = field(default_factory=list)
    error: Optional[str] = None
