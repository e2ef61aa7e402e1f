"""Status classification for repository health."""

from __future__ import annotations

from .models import RepositoryHealth, RepositoryStatus


def classify(health: RepositoryHealth) -> RepositoryStatus:
    """Map raw Git facts to a single ``RepositoryStatus``.

    Local changes win over remote-tracking state, and divergence wins over a
    one-sided ahead or behind count. ``is_dirty`` is recomputed from the
    counts rather than read from the producer. Stash count and detached HEAD
    are annotations only.
    """

    if health.uncommitted_count > 0 or health.staged_count > 0:
        return RepositoryStatus.DIRTY
    if health.commits_ahead > 0 and health.commits_behind > 0:
        return RepositoryStatus.DIVERGED
    if health.commits_behind > 0:
        return RepositoryStatus.BEHIND
    if health.commits_ahead > 0:
        return RepositoryStatus.AHEAD
    return RepositoryStatus.CLEAN
