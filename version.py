import subprocess
import logging
from pathlib import Path

from spaces_backup import __version__ as PACKAGE_VERSION

logger = logging.getLogger(__name__)

REPO_DIR = Path(__file__).parent


def _git(*args) -> str:
    return subprocess.check_output(
        ['git', *args],
        cwd=REPO_DIR,
        stderr=subprocess.DEVNULL,
        text=True
    ).strip()


def get_version():
    """Get version from git tags and commit status, falling back to the package version."""
    try:
        # Get latest tag
        tag = _git('describe', '--tags', '--abbrev=0')

        # Get current commit short hash
        commit = _git('rev-parse', '--short', 'HEAD')

        # Check if we're at the tag
        tag_commit = _git('rev-list', '-n', '1', tag)[:7]

        # Check for uncommitted changes
        has_changes = subprocess.call(
            ['git', 'diff-index', '--quiet', 'HEAD', '--'],
            cwd=REPO_DIR,
            stderr=subprocess.DEVNULL
        ) != 0

        # Build version string
        if commit == tag_commit:
            if has_changes:
                return f"{tag}-dev"
            return tag
        else:
            if has_changes:
                return f"{tag}-{commit}-dev"
            return f"{tag}-{commit}"

    except (subprocess.CalledProcessError, FileNotFoundError):
        logger.debug("Could not determine version from git, using package version")
        return PACKAGE_VERSION


__version__ = get_version()
