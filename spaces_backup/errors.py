"""Exception types raised by the backup pipeline."""

from typing import Iterable, Optional


class BackupError(Exception):
    """Base class for all backup tool errors."""


class ConfigInvalid(BackupError):
    """Required configuration is missing or malformed."""

    def __init__(self, message: str, variables: Iterable[str] = ()):
        self.variables = list(variables)
        if self.variables:
            message = f"{message}: {', '.join(self.variables)}"
        super().__init__(message)


class DumpFailed(BackupError):
    """pg_dump exited non-zero or could not be started."""

    def __init__(self, message: str, stderr: str = '', returncode: Optional[int] = None):
        self.stderr = stderr
        self.returncode = returncode
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)


class UploadFailed(BackupError):
    """The object store rejected the upload or the transport failed."""

    def __init__(self, key: str, cause: str, attempts: int = 1):
        self.key = key
        self.cause = cause
        self.attempts = attempts
        super().__init__(f"Failed to upload {key}: {cause}")


class ConnectionFailed(BackupError):
    """The database could not be reached or refused the credentials."""


class ListingFailed(BackupError):
    """The object store could not be queried for existing backups."""


class InvalidArgument(BackupError):
    """A command line argument was malformed or out of range."""
