"""Path utilities for locating the project root and its baseline file."""

import os
from pathlib import Path

SETTINGS_FILE_NAME = 'dupguard.toml'
LOCK_FILE_NAME = 'Cargo.lock'
DEFAULT_BASELINE_PATH = 'expected-duplicate-deps.txt'


def find_ancestor_containing(target_path: Path, marker: str) -> Path | None:
    """Find the nearest directory at or above target_path containing marker.

    Args:
        target_path: Directory to start searching from
        marker: Name of the file that identifies the directory

    Returns:
        The directory holding the marker file, or None if the filesystem root is
        reached without finding one
    """
    # os.path.normpath() removes . and .. without following symlinks
    target_path = target_path if target_path.is_absolute() else Path.cwd() / target_path
    current = Path(os.path.normpath(str(target_path)))

    while True:
        if (current / marker).is_file():
            return current

        parent = current.parent
        if parent == current:
            return None
        current = parent


def find_project_root(start: Path) -> Path:
    """Find the root of the project being audited.

    The nearest ancestor holding dupguard.toml wins. Otherwise the nearest
    ancestor holding Cargo.lock, which Cargo only writes at the workspace root.
    Falls back to start itself.
    """
    for marker in (SETTINGS_FILE_NAME, LOCK_FILE_NAME):
        root = find_ancestor_containing(start, marker)
        if root is not None:
            return root
    return Path(os.path.normpath(str(start if start.is_absolute() else Path.cwd() / start)))


def resolve_baseline_path(project_root: Path, configured: str | os.PathLike | None = None) -> Path:
    """Resolve the baseline file path.

    Args:
        project_root: Root directory of the audited project
        configured: Path from the command line or settings. Relative paths are
                    taken relative to project_root. None selects the default.

    Returns:
        Path to the baseline file (which may not exist)
    """
    path = Path(configured) if configured is not None else Path(DEFAULT_BASELINE_PATH)
    if path.is_absolute():
        return path
    return project_root / path
