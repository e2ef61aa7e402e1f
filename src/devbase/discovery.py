"""Filesystem walker that finds Git working copies."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Iterable

from .errors import ScanError
from .models import DiscoveredRepo

logger = logging.getLogger(__name__)

DEFAULT_SKIP_DIRS: tuple[str, ...] = (
    "node_modules",
    "target",
    "vendor",
    ".cargo",
    "__pycache__",
    ".venv",
    "venv",
    ".tox",
    "dist",
    "build",
)

Describe = Callable[[str], DiscoveredRepo]


def is_git_repo(path: Path) -> bool:
    """Return ``True`` if ``path`` contains a ``.git`` directory."""

    return (path / ".git").is_dir()


class RepositoryFinder:
    """Walks a root and describes every repository found under it.

    The walk never follows symlinks and stops descending once a repository
    is found, so nested repositories and submodules are not reported.
    """

    def __init__(self, describe: Describe, skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS) -> None:
        self._describe = describe
        self._skip_dirs = frozenset(skip_dirs)

    def discover(self, root: str, max_depth: int) -> list[DiscoveredRepo]:
        base = Path(root)
        logger.info("Starting repository scan of %s (max depth %d)", base, max_depth)

        if not base.exists():
            raise ScanError(root, "path does not exist")
        if not base.is_dir():
            raise ScanError(root, "path is not a directory")
        if not os.access(base, os.R_OK | os.X_OK):
            raise ScanError(root, "permission denied")

        repos: list[DiscoveredRepo] = []
        for path in self._iter_repo_dirs(base, max_depth):
            try:
                repos.append(self._describe(str(path)))
            except Exception as exc:  # noqa: BLE001
                logger.warning("Failed to read repository info for %s: %s", path, exc)
                continue
            logger.debug("Found repository %s", path)

        logger.info("Scan of %s complete: %d repositories", base, len(repos))
        return repos

    def _iter_repo_dirs(self, base: Path, max_depth: int) -> Iterable[Path]:
        def on_error(exc: OSError) -> None:
            if exc.filename and Path(exc.filename) == base:
                raise ScanError(str(base), exc.strerror or str(exc))
            logger.debug("Skipping unreadable directory %s: %s", exc.filename, exc.strerror)

        for dirpath, dirnames, _filenames in os.walk(base, onerror=on_error, followlinks=False):
            current = Path(dirpath)
            depth = len(current.relative_to(base).parts)

            if ".git" in dirnames and is_git_repo(current):
                dirnames.clear()
                yield current
                continue

            if depth + 1 >= max_depth:
                dirnames.clear()
                continue

            skipped = [name for name in dirnames if name in self._skip_dirs]
            for name in skipped:
                logger.debug("Skipping %s", current / name)
            dirnames[:] = sorted(name for name in dirnames if name not in self._skip_dirs)
