"""
File system infrastructure for tfbump.

Provides discovery and persistence of Terraform files:
- Recursive discovery with directory pruning
- Reads that preserve line endings exactly
- Atomic whole-file writes (write to temp, then rename)
"""

import os
import tempfile
import logging
from pathlib import Path
from typing import Iterable, List, Union

logger = logging.getLogger(__name__)

# Version-control metadata and Terraform's local module cache
DEFAULT_EXCLUDE_DIRS = ('.git', '.terraform')

DEFAULT_EXTENSION = '.tf'

PathLike = Union[str, Path]


def find_files(
    root: PathLike,
    extension: str = DEFAULT_EXTENSION,
    exclude_directories: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
    skip_hidden: bool = True
) -> List[Path]:
    """
    Recursively find regular files ending in ``extension``.

    Args:
        root: Directory to search
        extension: Required file suffix (e.g., ".tf")
        exclude_directories: Directory names never descended into
        skip_hidden: Also skip directories and files starting with "."

    Returns:
        Sorted list of file paths
    """
    root = Path(root).expanduser()
    excluded = set(exclude_directories)
    found = []

    for dirpath, dirnames, filenames in os.walk(root):
        # Prune in place so os.walk never enters excluded directories
        dirnames[:] = [
            d for d in dirnames
            if d not in excluded and not (skip_hidden and d.startswith('.'))
        ]
        for filename in filenames:
            if not filename.endswith(extension):
                continue
            if skip_hidden and filename.startswith('.'):
                continue
            path = Path(dirpath) / filename
            if path.is_file():
                found.append(path)

    return sorted(found)


def read_text(path: PathLike) -> str:
    """Read a file as UTF-8 without translating line endings."""
    with open(path, 'r', encoding='utf-8', newline='') as f:
        return f.read()


def write_text(path: PathLike, content: str) -> None:
    """
    Overwrite a file atomically.

    The new content is written to a temp file in the same directory and
    renamed over the original, keeping the original's permission bits.
    """
    path = Path(path)
    fd, temp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp"
    )

    try:
        with os.fdopen(fd, 'w', encoding='utf-8', newline='') as f:
            f.write(content)
        if path.exists():
            os.chmod(temp_path, path.stat().st_mode & 0o7777)
        os.replace(temp_path, path)
    except Exception:
        # Clean up temp file on error
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise

    logger.debug(f"Wrote {path}")
