"""Git metadata and health facts read through GitPython."""

from __future__ import annotations

from pathlib import Path

from git import Commit, Repo
from git.exc import GitCommandError, GitError, InvalidGitRepositoryError, NoSuchPathError

from .errors import HealthUnavailable
from .models import DEFAULT_HISTORY_LIMIT, CommitLogEntry, DiscoveredRepo, RepositoryHealth

FALLBACK_DEFAULT_BRANCHES = ("main", "master")


def describe_repository(path: str) -> DiscoveredRepo:
    """Return descriptive metadata for the working copy at ``path``."""

    with Repo(path) as repo:
        name = Path(path).name or "unknown"
        return DiscoveredRepo(
            path=path,
            name=name,
            remote_url=_remote_url(repo),
            default_branch=_default_branch(repo),
            current_branch=_current_branch(repo),
        )


def read_health(path: str) -> RepositoryHealth:
    """Collect health facts for ``path``.

    Raises:
        HealthUnavailable: the path is missing or is not a readable repository.
    """

    try:
        with Repo(path) as repo:
            return _collect_health(repo)
    except (InvalidGitRepositoryError, NoSuchPathError) as exc:
        raise HealthUnavailable(path, "not a git repository") from exc
    except (GitError, OSError, ValueError) as exc:
        raise HealthUnavailable(path, str(exc)) from exc


def read_history(path: str, limit: int = DEFAULT_HISTORY_LIMIT) -> list[CommitLogEntry]:
    """Return up to ``limit`` commits reachable from ``HEAD``.

    Commits come back in topological order, children before parents. A
    repository without commits yields an empty list.

    Raises:
        HealthUnavailable: the path is missing or is not a readable repository.
    """

    try:
        with Repo(path) as repo:
            if limit < 1 or not repo.head.is_valid():
                return []
            commits = repo.iter_commits("HEAD", topo_order=True, max_count=limit)
            return [_log_entry(commit) for commit in commits]
    except (InvalidGitRepositoryError, NoSuchPathError) as exc:
        raise HealthUnavailable(path, "not a git repository") from exc
    except (GitError, OSError, ValueError) as exc:
        raise HealthUnavailable(path, str(exc)) from exc


def _log_entry(commit: Commit) -> CommitLogEntry:
    summary = commit.summary
    if isinstance(summary, bytes):
        summary = summary.decode("utf-8", "replace")
    return CommitLogEntry(
        oid=commit.hexsha,
        short_oid=commit.hexsha[:7],
        summary=summary,
        author_name=commit.author.name or "Unknown",
        author_email=commit.author.email or "",
        timestamp=commit.committed_date,
        parents=tuple(parent.hexsha for parent in commit.parents),
    )


def _collect_health(repo: Repo) -> RepositoryHealth:
    is_detached = repo.head.is_detached
    current_branch = None if is_detached else _current_branch(repo)
    has_commits = repo.head.is_valid()

    if has_commits:
        staged = len(repo.index.diff("HEAD"))
    else:
        staged = len(repo.index.entries)
    uncommitted = len(repo.index.diff(None)) + len(repo.untracked_files)

    ahead, behind = (0, 0)
    if has_commits and not is_detached:
        ahead, behind = _ahead_behind(repo)

    return RepositoryHealth(
        is_dirty=uncommitted > 0 or staged > 0,
        uncommitted_count=uncommitted,
        staged_count=staged,
        commits_ahead=ahead,
        commits_behind=behind,
        stash_count=_stash_count(repo),
        current_branch=current_branch,
        is_detached=is_detached,
    )


def _ahead_behind(repo: Repo) -> tuple[int, int]:
    branch = repo.active_branch
    upstream = branch.tracking_branch()
    if upstream is None or not upstream.is_valid():
        return 0, 0
    ahead = sum(1 for _ in repo.iter_commits(f"{upstream.path}..{branch.path}"))
    behind = sum(1 for _ in repo.iter_commits(f"{branch.path}..{upstream.path}"))
    return ahead, behind


def _stash_count(repo: Repo) -> int:
    try:
        output = repo.git.stash("list")
    except GitCommandError:
        return 0
    return len([line for line in output.splitlines() if line.strip()])


def _remote_url(repo: Repo) -> str | None:
    for remote in repo.remotes:
        if remote.name == "origin":
            return remote.url
    return None


def _current_branch(repo: Repo) -> str | None:
    try:
        return repo.active_branch.name
    except TypeError:
        # detached HEAD
        return None


def _default_branch(repo: Repo) -> str | None:
    current = _current_branch(repo)
    if current is not None:
        return current
    names = {head.name for head in repo.heads}
    for candidate in FALLBACK_DEFAULT_BRANCHES:
        if candidate in names:
            return candidate
    return None
