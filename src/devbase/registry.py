"""Configured scan roots and their lifecycle."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import replace
from typing import Iterable

from .errors import DuplicatePath, InvalidDepth, InvalidPath, NotFound
from .models import ScanPath

logger = logging.getLogger(__name__)


def normalize_path(raw: str | os.PathLike[str]) -> str:
    """Return the canonical string form used to key scan roots.

    Expands ``~``, strips surrounding whitespace and trailing separators.
    Symlinks are not resolved and case is preserved.
    """

    text = str(raw).strip()
    if not text:
        raise InvalidPath(text, "path is empty")
    if "\0" in text:
        raise InvalidPath(text, "path contains a NUL byte")
    expanded = os.path.expanduser(text)
    if not os.path.isabs(expanded):
        raise InvalidPath(text)
    return os.path.normpath(expanded)


def validate_depth(depth: object) -> int:
    if isinstance(depth, bool) or not isinstance(depth, int) or depth < 1:
        raise InvalidDepth(depth)
    return depth


class ScanPathRegistry:
    """Tracks scan roots in insertion order."""

    def __init__(self, entries: Iterable[ScanPath] = ()) -> None:
        self._lock = threading.Lock()
        self._entries: dict[int, ScanPath] = {}
        for entry in entries:
            self._entries[entry.id] = entry
        self._next_id = max(self._entries, default=0) + 1

    def add(self, path: str | os.PathLike[str], max_depth: int) -> ScanPath:
        normalized = normalize_path(path)
        depth = validate_depth(max_depth)

        with self._lock:
            if any(entry.path == normalized for entry in self._entries.values()):
                raise DuplicatePath(normalized)
            entry = ScanPath(id=self._next_id, path=normalized, max_depth=depth)
            self._entries[entry.id] = entry
            self._next_id += 1

        logger.info("Added scan path %s (id=%d, depth=%d)", normalized, entry.id, depth)
        return entry

    def remove(self, scan_path_id: int) -> None:
        with self._lock:
            if scan_path_id not in self._entries:
                raise NotFound("scan path", scan_path_id)
            removed = self._entries.pop(scan_path_id)
        logger.info("Removed scan path %s (id=%d)", removed.path, scan_path_id)

    def set_enabled(self, scan_path_id: int, enabled: bool) -> ScanPath:
        return self._update(scan_path_id, enabled=bool(enabled))

    def set_max_depth(self, scan_path_id: int, max_depth: int) -> ScanPath:
        depth = validate_depth(max_depth)
        return self._update(scan_path_id, max_depth=depth)

    def get(self, scan_path_id: int) -> ScanPath:
        try:
            return self._entries[scan_path_id]
        except KeyError as exc:
            raise NotFound("scan path", scan_path_id) from exc

    def list(self) -> list[ScanPath]:
        return list(self._entries.values())

    def list_enabled(self) -> list[ScanPath]:
        return [entry for entry in self._entries.values() if entry.enabled]

    def _update(self, scan_path_id: int, **changes: object) -> ScanPath:
        with self._lock:
            if scan_path_id not in self._entries:
                raise NotFound("scan path", scan_path_id)
            updated = replace(self._entries[scan_path_id], **changes)
            self._entries[scan_path_id] = updated
        return updated
