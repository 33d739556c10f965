"""Backup orchestration: dump, upload, clean up."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from config import DatabaseConfig, ObjectStoreConfig
from spaces_backup.dump import DumpRunner
from spaces_backup.errors import BackupError, DumpFailed
from spaces_backup.models import BackupAttempt, BackupResult, UploadDescriptor
from spaces_backup.uploader import ObjectStoreUploader

logger = logging.getLogger(__name__)


class BackupOrchestrator:
    """Run exactly one backup attempt and always remove the local artifact.

    The pipeline is strictly ordered: the upload starts only after the dump
    succeeded, and the local file is deleted once on every exit path. No step
    is retried here.
    """

    def __init__(self, db_config: DatabaseConfig, store_config: ObjectStoreConfig,
                 dump_runner: DumpRunner, uploader: ObjectStoreUploader,
                 work_dir: Path, now: Optional[Callable[[], datetime]] = None):
        self.db_config = db_config
        self.store_config = store_config
        self.dump_runner = dump_runner
        self.uploader = uploader
        self.work_dir = Path(work_dir)
        self._now = now or datetime.now
        self.last_attempt: Optional[BackupAttempt] = None

    def run(self) -> BackupResult:
        """Dump, upload and clean up.

        Returns:
            BackupResult for the completed attempt

        Raises:
            DumpFailed: pg_dump could not produce the file
            UploadFailed: the store rejected the upload
        """
        attempt = BackupAttempt.create(self.work_dir, self._now())
        self.last_attempt = attempt

        logger.info("🚀 Starting PostgreSQL database backup...")
        logger.info(f"📅 Timestamp: {attempt.timestamp}")
        logger.info(f"🗄️  Database: {self.db_config.name}")
        logger.info(f"🏠 Host: {self.db_config.host}:{self.db_config.port}")

        phase = 'Dump'
        try:
            self._prepare_work_dir()

            dump_start = datetime.now()
            self.dump_runner.dump(self.db_config, attempt.local_path)
            dump_time = (datetime.now() - dump_start).total_seconds()
            dump_size = attempt.local_path.stat().st_size if attempt.local_path.exists() else 0

            phase = 'Upload'
            descriptor = UploadDescriptor.for_attempt(
                attempt,
                prefix=self.store_config.prefix,
                database_name=self.db_config.name,
                database_host=self.db_config.host
            )
            upload = self.uploader.upload(attempt.local_path, descriptor)

        except BackupError as e:
            logger.error(f"✗ Backup failed ({phase.lower()}): {e}")
            raise
        finally:
            self.cleanup(attempt)

        logger.info("✓ Backup completed successfully!")
        return BackupResult(attempt=attempt, upload=upload, dump_time=dump_time, dump_size=dump_size)

    def _prepare_work_dir(self):
        try:
            self.work_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DumpFailed(f"Cannot create temp directory {self.work_dir}: {e}") from e

    def cleanup(self, attempt: BackupAttempt) -> bool:
        """Delete the attempt's local file if it exists. Never raises."""
        path = attempt.local_path
        try:
            if not path.exists():
                logger.debug(f"Already deleted or missing: {path}")
                return False
            path.unlink()
            logger.info("🧹 Local backup file cleaned up")
            return True
        except OSError as e:
            logger.warning(f"⚠️ Failed to delete {path}: {e}")
            return False
