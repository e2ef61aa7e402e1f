"""Shared models and enums for devbase."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .errors import HealthUnavailable, ScanError

DEFAULT_HISTORY_LIMIT = 50


class RepositoryStatus(str, Enum):
    """Summary state reported for a tracked repository."""

    CLEAN = "clean"
    DIRTY = "dirty"
    AHEAD = "ahead"
    BEHIND = "behind"
    DIVERGED = "diverged"


@dataclass(frozen=True, slots=True)
class ScanPath:
    """A configured root under which repositories are discovered."""

    id: int
    path: str
    max_depth: int
    enabled: bool = True


@dataclass(frozen=True, slots=True)
class RepositoryHealth:
    """Raw Git facts read from a working copy."""

    is_dirty: bool = False
    uncommitted_count: int = 0
    staged_count: int = 0
    commits_ahead: int = 0
    commits_behind: int = 0
    stash_count: int = 0
    current_branch: str | None = None
    is_detached: bool = False

    def __post_init__(self) -> None:
        for name in ("uncommitted_count", "staged_count", "commits_ahead", "commits_behind", "stash_count"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")


@dataclass(frozen=True, slots=True)
class DiscoveredRepo:
    """Candidate repository reported by discovery."""

    path: str
    name: str
    remote_url: str | None = None
    default_branch: str | None = None
    current_branch: str | None = None


@dataclass(frozen=True, slots=True)
class RepositoryInfo:
    """A tracked repository together with its last-known health."""

    id: int
    path: str
    name: str
    health: RepositoryHealth
    status: RepositoryStatus
    remote_url: str | None = None
    default_branch: str | None = None
    current_branch: str | None = None
    tags: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True, slots=True)
class Tag:
    """A user-defined label that can be attached to repositories."""

    id: int
    name: str
    color: str = "#808080"


@dataclass(frozen=True, slots=True)
class CommitLogEntry:
    """One commit from a repository's history, newest first."""

    oid: str
    short_oid: str
    summary: str
    author_name: str
    author_email: str
    timestamp: int
    parents: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ScanReport:
    """Outcome of a scan pass, including per-root failures."""

    succeeded_roots: tuple[str, ...] = ()
    errors: tuple[ScanError, ...] = ()
    added: tuple[RepositoryInfo, ...] = ()
    updated: tuple[RepositoryInfo, ...] = ()
    health_errors: tuple[HealthUnavailable, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors and not self.health_errors


@dataclass(frozen=True, slots=True)
class RefreshReport:
    """Outcome of refreshing every tracked repository."""

    refreshed: tuple[RepositoryInfo, ...] = ()
    errors: tuple[HealthUnavailable, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors
