from __future__ import annotations

from pathlib import Path

import pytest

from devbase.errors import HealthUnavailable, ScanError
from devbase.models import CommitLogEntry, DiscoveredRepo, RepositoryHealth


class FakeGit:
    """In-memory stand-in for the discovery and Git-facts collaborators."""

    def __init__(self) -> None:
        self.roots: dict[str, list[DiscoveredRepo]] = {}
        self.broken_roots: dict[str, str] = {}
        self.healths: dict[str, RepositoryHealth] = {}
        self.unreadable: set[str] = set()
        self.discover_calls: list[tuple[str, int]] = []
        self.histories: dict[str, list[CommitLogEntry]] = {}

    def add_repo(self, root: str, name: str, health: RepositoryHealth | None = None, **fields: str) -> str:
        path = f"{root}/{name}"
        self.roots.setdefault(root, []).append(DiscoveredRepo(path=path, name=name, **fields))
        self.healths[path] = health or RepositoryHealth()
        return path

    def discover(self, root: str, max_depth: int) -> list[DiscoveredRepo]:
        self.discover_calls.append((root, max_depth))
        if root in self.broken_roots:
            raise ScanError(root, self.broken_roots[root])
        return list(self.roots.get(root, []))

    def read_health(self, path: str) -> RepositoryHealth:
        if path in self.unreadable or path not in self.healths:
            raise HealthUnavailable(path, "not a git repository")
        return self.healths[path]

    def read_history(self, path: str, limit: int) -> list[CommitLogEntry]:
        if path in self.unreadable or path not in self.healths:
            raise HealthUnavailable(path, "not a git repository")
        return self.histories.get(path, [])[:limit]


@pytest.fixture
def fake_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    return home


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "devbase.toml"
    path.write_text(
        f"""
[settings]
state_path = "{tmp_path / 'state' / 'state.toml'}"
default_max_depth = 3
workers = 2
"""
    )
    return path
