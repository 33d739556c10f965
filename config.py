"""Configuration management for the PostgreSQL Spaces backup tool.

Settings come from environment variables, optionally seeded from a ``.env``
file. Each command loads only the sections it needs so that, for example,
``list`` works without database credentials.
"""

import os
import tempfile
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, SecretStr, ValidationError, validator

from spaces_backup.errors import ConfigInvalid

DEFAULT_ENV_FILE = '.env'

DATABASE_REQUIRED = ('DB_HOST', 'DB_NAME', 'DB_USER', 'DB_PASSWORD')
STORE_REQUIRED = ('SPACES_ACCESS_KEY_ID', 'SPACES_SECRET_ACCESS_KEY', 'SPACES_BUCKET_NAME')
REQUIRED_VARS = DATABASE_REQUIRED + STORE_REQUIRED

# Optional variable -> default shown to the operator
OPTIONAL_VARS: Dict[str, str] = {
    'DB_PORT': '5432',
    'DB_SSL': 'false',
    'SPACES_ENDPOINT': 'nyc3.digitaloceanspaces.com',
    'SPACES_REGION': 'nyc3',
    'BACKUP_PREFIX': 'postgres-backups',
    'BACKUP_TEMP_DIR': tempfile.gettempdir(),
    'PG_DUMP_PATH': 'pg_dump',
    'UPLOAD_MAX_RETRIES': '0',
    'UPLOAD_INITIAL_BACKOFF_SECONDS': '2',
    'UPLOAD_MAX_BACKOFF_SECONDS': '60',
    'UPLOAD_BACKOFF_MULTIPLIER': '2',
    'LOG_LEVEL': 'INFO',
    'LOG_FILE': '',
}

SECRET_VARS = ('DB_PASSWORD', 'SPACES_SECRET_ACCESS_KEY')


class DatabaseConfig(BaseModel):
    """PostgreSQL connection settings."""
    host: str
    port: int = 5432
    name: str
    user: str
    password: SecretStr
    ssl: bool = False

    class Config:
        frozen = True

    @validator('ssl', pre=True)
    def parse_ssl(cls, v):
        """Only the literal string 'true' enables TLS."""
        if isinstance(v, str):
            return v.strip().lower() == 'true'
        return v

    @validator('port')
    def check_port(cls, v):
        if not 0 < v < 65536:
            raise ValueError(f"port out of range: {v}")
        return v

    @property
    def sslmode(self) -> str:
        # Encrypted without certificate verification, matching relaxed TLS
        return 'require' if self.ssl else 'disable'


class ObjectStoreConfig(BaseModel):
    """S3-compatible bucket settings (DigitalOcean Spaces by default)."""
    endpoint: str = 'nyc3.digitaloceanspaces.com'
    region: str = 'nyc3'
    bucket: str
    access_key_id: str
    secret_access_key: SecretStr
    prefix: str = 'postgres-backups'

    class Config:
        frozen = True

    @validator('prefix')
    def strip_prefix(cls, v):
        return v.strip('/')

    @property
    def endpoint_url(self) -> str:
        if self.endpoint.startswith(('http://', 'https://')):
            return self.endpoint
        return f"https://{self.endpoint}"

    @property
    def endpoint_host(self) -> str:
        return self.endpoint_url.split('://', 1)[1].rstrip('/')

    def public_url(self, key: str) -> str:
        """Virtual-hosted style URL for an object key."""
        return f"https://{self.bucket}.{self.endpoint_host}/{key}"


class RetrySettings(BaseModel):
    """Upload retry policy. Zero retries means a single attempt."""
    max_retries: int = 0
    initial_backoff_seconds: float = 2
    max_backoff_seconds: float = 60
    backoff_multiplier: float = 2

    class Config:
        frozen = True

    @validator('max_retries')
    def check_retries(cls, v):
        if v < 0:
            raise ValueError("must not be negative")
        return v

    @validator('initial_backoff_seconds', 'max_backoff_seconds', 'backoff_multiplier')
    def check_positive(cls, v):
        if v <= 0:
            raise ValueError("must be positive")
        return v

    def backoff(self, retry_number: int) -> float:
        """Delay before retry ``retry_number`` (1-based)."""
        delay = self.initial_backoff_seconds * (self.backoff_multiplier ** (retry_number - 1))
        return min(delay, self.max_backoff_seconds)


class BackupSettings(BaseModel):
    """Local runtime settings for a backup run."""
    temp_dir: Path = Path(tempfile.gettempdir())
    pg_dump_path: str = 'pg_dump'
    retry: RetrySettings = RetrySettings()

    @validator('temp_dir', pre=True)
    def expand_temp_dir(cls, v):
        """Expand environment variables and user home directory."""
        return Path(os.path.expanduser(os.path.expandvars(str(v))))


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    file: Optional[str] = None
    max_bytes: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5

    @validator('level', pre=True)
    def normalize_level(cls, v):
        v = str(v).upper()
        if v not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f"unknown log level: {v}")
        return v

    @validator('file', pre=True)
    def empty_file_is_none(cls, v):
        return v or None


def load_env_file(env_file: Optional[str] = DEFAULT_ENV_FILE) -> bool:
    """Load a ``.env`` file without overriding the real environment.

    Returns:
        True if the file existed and was loaded
    """
    if not env_file or not Path(env_file).exists():
        return False
    return load_dotenv(env_file, override=False)


def _environ(environ: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return os.environ if environ is None else environ


def missing_variables(names, environ: Optional[Mapping[str, str]] = None) -> List[str]:
    env = _environ(environ)
    return [name for name in names if not env.get(name)]


def _optional(env: Mapping[str, str], name: str) -> Optional[str]:
    value = env.get(name)
    return value if value else None


def _build(model, values: dict, field_vars: Dict[str, str]):
    """Instantiate a config model, mapping validation errors back to variables."""
    try:
        return model(**{k: v for k, v in values.items() if v is not None})
    except ValidationError as e:
        bad = []
        for error in e.errors():
            field_name = str(error['loc'][0]) if error.get('loc') else ''
            bad.append(field_vars.get(field_name, field_name))
        raise ConfigInvalid("Invalid configuration values", bad) from e


def load_database_config(environ: Optional[Mapping[str, str]] = None) -> DatabaseConfig:
    """Build the database section from the environment.

    Raises:
        ConfigInvalid: If a required variable is missing or a value is malformed
    """
    env = _environ(environ)
    missing = missing_variables(DATABASE_REQUIRED, env)
    if missing:
        raise ConfigInvalid("Missing required environment variables", missing)

    return _build(DatabaseConfig, {
        'host': env['DB_HOST'],
        'port': _optional(env, 'DB_PORT'),
        'name': env['DB_NAME'],
        'user': env['DB_USER'],
        'password': env['DB_PASSWORD'],
        'ssl': _optional(env, 'DB_SSL'),
    }, {'host': 'DB_HOST', 'port': 'DB_PORT', 'name': 'DB_NAME', 'user': 'DB_USER',
        'password': 'DB_PASSWORD', 'ssl': 'DB_SSL'})


def load_store_config(environ: Optional[Mapping[str, str]] = None) -> ObjectStoreConfig:
    """Build the object-store section from the environment.

    Raises:
        ConfigInvalid: If a required variable is missing or a value is malformed
    """
    env = _environ(environ)
    missing = missing_variables(STORE_REQUIRED, env)
    if missing:
        raise ConfigInvalid("Missing required environment variables", missing)

    return _build(ObjectStoreConfig, {
        'endpoint': _optional(env, 'SPACES_ENDPOINT'),
        'region': _optional(env, 'SPACES_REGION'),
        'bucket': env['SPACES_BUCKET_NAME'],
        'access_key_id': env['SPACES_ACCESS_KEY_ID'],
        'secret_access_key': env['SPACES_SECRET_ACCESS_KEY'],
        'prefix': _optional(env, 'BACKUP_PREFIX'),
    }, {'endpoint': 'SPACES_ENDPOINT', 'region': 'SPACES_REGION', 'bucket': 'SPACES_BUCKET_NAME',
        'access_key_id': 'SPACES_ACCESS_KEY_ID', 'secret_access_key': 'SPACES_SECRET_ACCESS_KEY',
        'prefix': 'BACKUP_PREFIX'})


def load_backup_settings(environ: Optional[Mapping[str, str]] = None) -> BackupSettings:
    """Build local runtime settings (temp dir, pg_dump path, retry policy)."""
    env = _environ(environ)
    retry = _build(RetrySettings, {
        'max_retries': _optional(env, 'UPLOAD_MAX_RETRIES'),
        'initial_backoff_seconds': _optional(env, 'UPLOAD_INITIAL_BACKOFF_SECONDS'),
        'max_backoff_seconds': _optional(env, 'UPLOAD_MAX_BACKOFF_SECONDS'),
        'backoff_multiplier': _optional(env, 'UPLOAD_BACKOFF_MULTIPLIER'),
    }, {'max_retries': 'UPLOAD_MAX_RETRIES',
        'initial_backoff_seconds': 'UPLOAD_INITIAL_BACKOFF_SECONDS',
        'max_backoff_seconds': 'UPLOAD_MAX_BACKOFF_SECONDS',
        'backoff_multiplier': 'UPLOAD_BACKOFF_MULTIPLIER'})

    return _build(BackupSettings, {
        'temp_dir': _optional(env, 'BACKUP_TEMP_DIR'),
        'pg_dump_path': _optional(env, 'PG_DUMP_PATH'),
        'retry': retry,
    }, {'temp_dir': 'BACKUP_TEMP_DIR', 'pg_dump_path': 'PG_DUMP_PATH'})


def load_logging_config(environ: Optional[Mapping[str, str]] = None) -> LoggingConfig:
    env = _environ(environ)
    return _build(LoggingConfig, {
        'level': _optional(env, 'LOG_LEVEL'),
        'file': _optional(env, 'LOG_FILE'),
    }, {'level': 'LOG_LEVEL', 'file': 'LOG_FILE'})


def describe_environment(environ: Optional[Mapping[str, str]] = None) -> Tuple[List[tuple], List[tuple]]:
    """Summarize required and optional variables for display.

    Secrets are masked.

    Returns:
        Tuple of (required_rows, optional_rows); each row is
        (name, status, shown_value)
    """
    env = _environ(environ)
    required_rows = []
    for name in REQUIRED_VARS:
        value = env.get(name)
        if value:
            shown = '***' if name in SECRET_VARS else value
            required_rows.append((name, 'set', shown))
        else:
            required_rows.append((name, 'missing', ''))

    optional_rows = []
    for name, default in OPTIONAL_VARS.items():
        value = env.get(name)
        if value:
            optional_rows.append((name, 'set', value))
        else:
            optional_rows.append((name, 'default', default or '(none)'))

    return required_rows, optional_rows
