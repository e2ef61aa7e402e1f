"""High level orchestration for devbase operations."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Sequence

from .catalog import HealthReader, RepositoryCatalog
from .config import Config
from .discovery import RepositoryFinder
from .models import (
    DEFAULT_HISTORY_LIMIT,
    CommitLogEntry,
    RefreshReport,
    RepositoryInfo,
    RepositoryStatus,
    ScanPath,
    ScanReport,
    Tag,
)
from .orchestrator import Discover, ScanOrchestrator
from .query import RepositoryQuery, filter_repositories
from .registry import ScanPathRegistry
from .state import StateFile
from .tags import DEFAULT_TAG_COLOR, TagRegistry

logger = logging.getLogger(__name__)

HistoryReader = Callable[[str, int], Sequence[CommitLogEntry]]


class DevbaseManager:
    """Owns the registry, tags and catalog and persists them after writes.

    ``discover``, ``read_health`` and ``read_history`` default to the
    GitPython backed collaborators; pass replacements to run without
    touching Git.
    """

    def __init__(
        self,
        config: Config,
        *,
        discover: Discover | None = None,
        read_health: HealthReader | None = None,
        read_history: HistoryReader | None = None,
    ) -> None:
        self.config = config
        settings = config.settings

        if discover is None or read_health is None or read_history is None:
            from . import gitfacts

            if discover is None:
                finder = RepositoryFinder(gitfacts.describe_repository, skip_dirs=settings.skip_dirs)
                discover = finder.discover
            if read_health is None:
                read_health = gitfacts.read_health
            if read_history is None:
                read_history = gitfacts.read_history

        self._read_history = read_history

        self.state = StateFile(settings.state_path)
        stored = self.state.load()

        self.registry = ScanPathRegistry(stored.scan_paths)
        self.tags = TagRegistry(stored.tags)
        self.catalog = RepositoryCatalog(read_health, stored.repositories, workers=settings.workers)
        self.orchestrator = ScanOrchestrator(self.registry, self.catalog, discover, workers=settings.workers)

    # ------------------------------------------------------------------
    # Scan paths

    def scan_paths(self) -> list[ScanPath]:
        return self.registry.list()

    def add_scan_path(self, path: str, max_depth: int | None = None) -> ScanPath:
        depth = self.config.settings.default_max_depth if max_depth is None else max_depth
        entry = self.registry.add(path, depth)
        self.save()
        return entry

    def remove_scan_path(self, scan_path_id: int) -> None:
        self.registry.remove(scan_path_id)
        self.save()

    def set_scan_path_enabled(self, scan_path_id: int, enabled: bool) -> ScanPath:
        entry = self.registry.set_enabled(scan_path_id, enabled)
        self.save()
        return entry

    def set_scan_path_depth(self, scan_path_id: int, max_depth: int) -> ScanPath:
        entry = self.registry.set_max_depth(scan_path_id, max_depth)
        self.save()
        return entry

    # ------------------------------------------------------------------
    # Scanning and refresh

    def scan(self) -> ScanReport:
        report = self.orchestrator.scan_all()
        self.save()
        return report

    def scan_path(self, path: str, max_depth: int | None = None) -> ScanReport:
        depth = self.config.settings.default_max_depth if max_depth is None else max_depth
        report = self.orchestrator.scan_one(path, depth)
        self.save()
        return report

    def refresh(self, repo_id: int) -> RepositoryInfo:
        entry = self.catalog.refresh_one(repo_id)
        self.save()
        return entry

    def refresh_all(self) -> RefreshReport:
        report = self.catalog.refresh_all()
        self.save()
        return report

    # ------------------------------------------------------------------
    # Repositories

    def repositories(
        self,
        search: str = "",
        status: RepositoryStatus | None = None,
        tags: Iterable[str] = (),
    ) -> list[RepositoryInfo]:
        query = RepositoryQuery(search=search, status=status, tags=frozenset(tags))
        return filter_repositories(self.catalog.list(), query)

    def repository(self, repo_id: int) -> RepositoryInfo:
        return self.catalog.get(repo_id)

    def history(self, repo_id: int, limit: int = DEFAULT_HISTORY_LIMIT) -> list[CommitLogEntry]:
        """Return recent commits for a tracked repository, newest first."""

        entry = self.catalog.get(repo_id)
        return list(self._read_history(entry.path, limit))

    def forget(self, repo_id: int) -> RepositoryInfo:
        entry = self.catalog.remove(repo_id)
        self.save()
        return entry

    # ------------------------------------------------------------------
    # Tags

    def list_tags(self) -> list[Tag]:
        return self.tags.list()

    def create_tag(self, name: str, color: str = DEFAULT_TAG_COLOR) -> Tag:
        tag = self.tags.create(name, color)
        self.save()
        return tag

    def delete_tag(self, tag_id: int) -> Tag:
        tag = self.tags.delete(tag_id)
        stripped = self.catalog.strip_tag(tag.name)
        logger.info("Deleted tag %s (removed from %d repositories)", tag.name, stripped)
        self.save()
        return tag

    def assign_tag(self, repo_id: int, tag_id: int) -> RepositoryInfo:
        tag = self.tags.get(tag_id)
        entry = self.catalog.assign_tag(repo_id, tag.name)
        self.save()
        return entry

    def remove_tag(self, repo_id: int, tag_id: int) -> RepositoryInfo:
        tag = self.tags.get(tag_id)
        entry = self.catalog.remove_tag(repo_id, tag.name)
        self.save()
        return entry

    def save(self) -> None:
        self.state.save(
            scan_paths=self.registry.list(),
            tags=self.tags.list(),
            repositories=self.catalog.list(),
        )
