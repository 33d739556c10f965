"""Pre-flight checks: environment variables, .env file and pg_dump availability."""

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Mapping, Optional

from config import describe_environment

logger = logging.getLogger(__name__)


@dataclass
class ToolCheck:
    """Result of probing for an external executable."""
    available: bool
    path: str
    version: Optional[str] = None
    error: Optional[str] = None


@dataclass
class PreflightReport:
    """Everything the ``validate`` command shows."""
    required: List[tuple] = field(default_factory=list)
    optional: List[tuple] = field(default_factory=list)
    env_file: Optional[Path] = None
    env_file_exists: bool = False
    pg_dump: Optional[ToolCheck] = None

    @property
    def missing(self) -> List[str]:
        return [name for name, status, _ in self.required if status == 'missing']

    @property
    def config_valid(self) -> bool:
        return not self.missing

    @property
    def ready(self) -> bool:
        return self.config_valid and bool(self.pg_dump and self.pg_dump.available)


def check_dump_tool(pg_dump_path: str = 'pg_dump', run: Optional[Callable] = None) -> ToolCheck:
    """Run ``pg_dump --version``. Never raises."""
    run = run or subprocess.run
    try:
        result = run([pg_dump_path, '--version'], capture_output=True, text=True)
    except OSError as e:
        logger.debug(f"pg_dump not available: {e}")
        return ToolCheck(available=False, path=pg_dump_path, error=str(e))

    if result.returncode != 0:
        return ToolCheck(available=False, path=pg_dump_path,
                         error=(result.stderr or '').strip() or f"exit code {result.returncode}")
    return ToolCheck(available=True, path=pg_dump_path, version=(result.stdout or '').strip())


def run_preflight(environ: Mapping[str, str], env_file: Optional[str] = None,
                  pg_dump_path: str = 'pg_dump', run: Optional[Callable] = None) -> PreflightReport:
    """Collect the full pre-flight report."""
    required, optional = describe_environment(environ)
    env_path = Path(env_file) if env_file else None
    return PreflightReport(
        required=required,
        optional=optional,
        env_file=env_path,
        env_file_exists=bool(env_path and env_path.exists()),
        pg_dump=check_dump_tool(pg_dump_path, run)
    )
