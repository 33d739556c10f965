"""Database reachability check."""

import logging
import os
from typing import Callable, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError

from config import DatabaseConfig
from spaces_backup.errors import ConnectionFailed

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT_SECONDS = 10


def build_url(config: DatabaseConfig) -> URL:
    return URL.create(
        'postgresql+psycopg2',
        username=config.user,
        password=config.password.get_secret_value(),
        host=config.host,
        port=config.port,
        database=config.name,
    )


class ConnectionProbe:
    """Open a throwaway connection and ask the server for its version."""

    def __init__(self, config: DatabaseConfig, engine_factory: Optional[Callable] = None):
        self.config = config
        self._engine_factory = engine_factory or create_engine
        self.server_version: Optional[str] = None

    def check(self) -> str:
        """Connect and return the server version string.

        The engine is disposed on every path.

        Raises:
            ConnectionFailed: If the connection or query fails
        """
        engine = None
        try:
            engine = self._engine_factory(
                build_url(self.config),
                connect_args={
                    'sslmode': os.environ.get('PGSSLMODE', self.config.sslmode),
                    'connect_timeout': CONNECT_TIMEOUT_SECONDS,
                },
                pool_pre_ping=False,
            )
            with engine.connect() as conn:
                return conn.execute(text("SELECT version()")).scalar()
        # A missing driver or a malformed parameter surfaces as ImportError or ValueError
        except (SQLAlchemyError, OSError, ImportError, ValueError) as e:
            raise ConnectionFailed(str(e).splitlines()[0] if str(e) else repr(e)) from e
        finally:
            if engine is not None:
                engine.dispose()

    def test(self) -> bool:
        """Return True if the database is reachable with the configured credentials."""
        logger.info("🔍 Testing database connection...")
        try:
            version = self.check()
        except ConnectionFailed as e:
            logger.error(f"✗ Database connection failed: {e}")
            return False

        self.server_version = version
        logger.info("✓ Database connection successful")
        logger.info(f"📊 PostgreSQL version: {short_version(version)}")
        return True


def short_version(version: Optional[str]) -> str:
    """'PostgreSQL 16.2 on x86_64-pc-linux-gnu, ...' -> 'PostgreSQL 16.2'."""
    if not version:
        return 'unknown'
    return ' '.join(version.split()[:2])
