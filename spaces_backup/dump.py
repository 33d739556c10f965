"""Run pg_dump against the configured database."""

import logging
import os
import subprocess
from pathlib import Path
from typing import Callable, List, Optional

from config import DatabaseConfig
from spaces_backup.errors import DumpFailed

logger = logging.getLogger(__name__)


class DumpRunner:
    """Produce a plain SQL dump of one database with an external pg_dump."""

    def __init__(self, pg_dump_path: str = 'pg_dump', run: Optional[Callable] = None):
        """Initialize the runner.

        Args:
            pg_dump_path: pg_dump executable name or absolute path
            run: Replacement for subprocess.run (used by tests)
        """
        self.pg_dump_path = pg_dump_path
        self._run = run or subprocess.run

    def build_command(self, config: DatabaseConfig, destination: Path) -> List[str]:
        """Build the pg_dump argument list. The password is never included."""
        return [
            self.pg_dump_path,
            '-h', config.host,
            '-p', str(config.port),
            '-U', config.user,
            '-d', config.name,
            '-f', str(destination),
            '--verbose',
            '--no-password',
        ]

    def build_env(self, config: DatabaseConfig) -> dict:
        env = dict(os.environ)
        env['PGPASSWORD'] = config.password.get_secret_value()
        # An operator-set PGSSLMODE (e.g. verify-full) wins over DB_SSL
        env.setdefault('PGSSLMODE', config.sslmode)
        return env

    def dump(self, config: DatabaseConfig, destination: Path) -> subprocess.CompletedProcess:
        """Dump the database to ``destination``.

        Blocks until pg_dump exits. A partial file left behind on failure is
        not removed here.

        Args:
            config: Database connection settings
            destination: Output path for the SQL file

        Returns:
            The completed process with captured stdout/stderr

        Raises:
            DumpFailed: If pg_dump could not be started or exited non-zero
        """
        destination = Path(destination)
        cmd = self.build_command(config, destination)

        logger.info("📦 Creating database dump...")
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            result = self._run(
                cmd,
                env=self.build_env(config),
                capture_output=True,
                text=True,
                errors='replace',
            )
        except OSError as e:
            raise DumpFailed(f"Failed to start {self.pg_dump_path}: {e}") from e

        # pg_dump --verbose reports progress on stderr
        for line in (result.stderr or '').splitlines():
            logger.debug(f"pg_dump: {line}")

        if result.returncode != 0:
            raise DumpFailed(
                f"pg_dump failed with code {result.returncode}",
                stderr=result.stderr or '',
                returncode=result.returncode
            )

        logger.info(f"✓ Database dump created: {destination}")
        return result
