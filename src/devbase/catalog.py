"""Authoritative in-memory set of tracked repositories."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Sequence

from .errors import HealthUnavailable, NotFound
from .health import classify
from .models import DiscoveredRepo, RefreshReport, RepositoryHealth, RepositoryInfo

logger = logging.getLogger(__name__)

HealthReader = Callable[[str], RepositoryHealth]


@dataclass(frozen=True, slots=True)
class ReconcileOutcome:
    """Entries touched by a single reconciliation pass."""

    added: tuple[RepositoryInfo, ...]
    updated: tuple[RepositoryInfo, ...]
    health_errors: tuple[HealthUnavailable, ...]


class RepositoryCatalog:
    """Stores repositories keyed by id and reconciles discovery results.

    Writers serialize on a lock and publish a fresh mapping when they are
    done, so readers always see the last committed state without blocking.
    """

    def __init__(
        self,
        read_health: HealthReader,
        entries: Iterable[RepositoryInfo] = (),
        *,
        workers: int = 4,
    ) -> None:
        self._read_health = read_health
        self._workers = max(1, workers)
        self._write_lock = threading.Lock()
        self._entries: dict[int, RepositoryInfo] = {entry.id: entry for entry in entries}
        self._next_id = max(self._entries, default=0) + 1

    def __len__(self) -> int:
        return len(self._entries)

    def list(self) -> tuple[RepositoryInfo, ...]:
        return tuple(self._entries.values())

    def get(self, repo_id: int) -> RepositoryInfo:
        try:
            return self._entries[repo_id]
        except KeyError as exc:
            raise NotFound("repository", repo_id) from exc

    def find_by_path(self, path: str) -> RepositoryInfo | None:
        for entry in self._entries.values():
            if entry.path == path:
                return entry
        return None

    # ------------------------------------------------------------------
    # Reconciliation

    def reconcile(self, candidates: Iterable[DiscoveredRepo]) -> ReconcileOutcome:
        """Merge discovered candidates into the catalog.

        Known paths keep their id, tags and health counts; only descriptive
        fields and the checked out branch change. Unknown paths become new
        entries with health read up front. Entries missing from
        ``candidates`` are left alone.
        """

        latest: dict[str, DiscoveredRepo] = {}
        for candidate in candidates:
            latest[candidate.path] = candidate

        known_paths = {entry.path for entry in self._entries.values()}
        fresh_paths = [path for path in latest if path not in known_paths]
        healths, health_errors = self._read_many(fresh_paths)

        added: list[RepositoryInfo] = []
        updated: list[RepositoryInfo] = []

        with self._write_lock:
            entries = dict(self._entries)
            ids_by_path = {entry.path: entry.id for entry in entries.values()}

            for path, candidate in latest.items():
                existing_id = ids_by_path.get(path)
                if existing_id is not None:
                    entry = self._with_branch(
                        replace(
                            entries[existing_id],
                            name=candidate.name,
                            remote_url=candidate.remote_url,
                            default_branch=candidate.default_branch,
                        ),
                        candidate.current_branch,
                    )
                    entries[existing_id] = entry
                    updated.append(entry)
                    continue

                health = healths.get(path)
                if health is None:
                    logger.warning("Tracking %s with provisional status until its health can be read", path)
                    health = RepositoryHealth()
                entry = RepositoryInfo(
                    id=self._next_id,
                    path=path,
                    name=candidate.name,
                    health=health,
                    status=classify(health),
                    remote_url=candidate.remote_url,
                    default_branch=candidate.default_branch,
                    current_branch=candidate.current_branch or health.current_branch,
                )
                self._next_id += 1
                entries[entry.id] = entry
                ids_by_path[path] = entry.id
                added.append(entry)

            self._entries = entries

        logger.info("Reconciled %d candidates: %d added, %d updated", len(latest), len(added), len(updated))
        return ReconcileOutcome(added=tuple(added), updated=tuple(updated), health_errors=tuple(health_errors))

    # ------------------------------------------------------------------
    # Refresh

    def refresh_one(self, repo_id: int) -> RepositoryInfo:
        entry = self.get(repo_id)
        health = self._fetch(entry.path)

        with self._write_lock:
            if repo_id not in self._entries:
                raise NotFound("repository", repo_id)
            entries = dict(self._entries)
            refreshed = self._with_health(entries[repo_id], health)
            entries[repo_id] = refreshed
            self._entries = entries

        logger.debug("Refreshed %s: %s", refreshed.path, refreshed.status.value)
        return refreshed

    def refresh_all(self) -> RefreshReport:
        snapshot = self.list()
        healths, errors = self._read_many([entry.path for entry in snapshot])

        refreshed: list[RepositoryInfo] = []
        with self._write_lock:
            entries = dict(self._entries)
            for entry in snapshot:
                health = healths.get(entry.path)
                if health is None or entry.id not in entries:
                    continue
                updated = self._with_health(entries[entry.id], health)
                entries[entry.id] = updated
                refreshed.append(updated)
            self._entries = entries

        logger.info("Refreshed %d repositories, %d failed", len(refreshed), len(errors))
        return RefreshReport(refreshed=tuple(refreshed), errors=tuple(errors))

    # ------------------------------------------------------------------
    # Tags and removal

    def assign_tag(self, repo_id: int, tag_name: str) -> RepositoryInfo:
        with self._write_lock:
            entry = self.get(repo_id)
            if tag_name in entry.tags:
                return entry
            return self._store(replace(entry, tags=entry.tags | {tag_name}))

    def remove_tag(self, repo_id: int, tag_name: str) -> RepositoryInfo:
        with self._write_lock:
            entry = self.get(repo_id)
            if tag_name not in entry.tags:
                return entry
            return self._store(replace(entry, tags=entry.tags - {tag_name}))

    def strip_tag(self, tag_name: str) -> int:
        """Drop ``tag_name`` from every entry, returning how many changed."""

        with self._write_lock:
            entries = dict(self._entries)
            changed = 0
            for repo_id, entry in entries.items():
                if tag_name in entry.tags:
                    entries[repo_id] = replace(entry, tags=entry.tags - {tag_name})
                    changed += 1
            self._entries = entries
        return changed

    def remove(self, repo_id: int) -> RepositoryInfo:
        with self._write_lock:
            entry = self.get(repo_id)
            entries = dict(self._entries)
            del entries[repo_id]
            self._entries = entries
        logger.info("Removed repository %s from catalog", entry.path)
        return entry

    # ------------------------------------------------------------------
    # Internal helpers

    def _store(self, entry: RepositoryInfo) -> RepositoryInfo:
        entries = dict(self._entries)
        entries[entry.id] = entry
        self._entries = entries
        return entry

    @staticmethod
    def _with_health(entry: RepositoryInfo, health: RepositoryHealth) -> RepositoryInfo:
        return replace(
            entry,
            health=health,
            status=classify(health),
            current_branch=health.current_branch,
        )

    @staticmethod
    def _with_branch(entry: RepositoryInfo, current_branch: str | None) -> RepositoryInfo:
        # discovery reports no branch only for a detached HEAD
        health = replace(entry.health, current_branch=current_branch, is_detached=current_branch is None)
        return replace(entry, current_branch=current_branch, health=health)

    def _fetch(self, path: str) -> RepositoryHealth:
        try:
            return self._read_health(path)
        except HealthUnavailable:
            raise
        except OSError as exc:
            raise HealthUnavailable(path, str(exc)) from exc

    def _read_many(self, paths: Sequence[str]) -> tuple[dict[str, RepositoryHealth], list[HealthUnavailable]]:
        healths: dict[str, RepositoryHealth] = {}
        errors: list[HealthUnavailable] = []
        if not paths:
            return healths, errors

        def attempt(path: str) -> RepositoryHealth | HealthUnavailable:
            try:
                return self._fetch(path)
            except HealthUnavailable as exc:
                return exc

        with ThreadPoolExecutor(max_workers=min(self._workers, len(paths))) as pool:
            for path, outcome in zip(paths, pool.map(attempt, paths)):
                if isinstance(outcome, HealthUnavailable):
                    logger.warning("%s", outcome)
                    errors.append(outcome)
                else:
                    healths[path] = outcome
        return healths, errors
