"""Search and filter semantics for the repository list."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .models import RepositoryInfo, RepositoryStatus


@dataclass(frozen=True, slots=True)
class RepositoryQuery:
    """Search text, optional status and required tags.

    An empty search, a missing status and an empty tag set each match every
    repository. All three must match for an entry to be selected.
    """

    search: str = ""
    status: RepositoryStatus | None = None
    tags: frozenset[str] = field(default_factory=frozenset)

    def matches(self, entry: RepositoryInfo) -> bool:
        if self.search:
            needle = self.search.lower()
            if needle not in entry.name.lower() and needle not in entry.path.lower():
                return False
        if self.status is not None and entry.status != self.status:
            return False
        return self.tags <= entry.tags


def filter_repositories(entries: Iterable[RepositoryInfo], query: RepositoryQuery) -> list[RepositoryInfo]:
    """Return entries matching ``query`` in their original order."""

    return [entry for entry in entries if query.matches(entry)]
