"""State file persistence for devbase."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

from tomli_w import dump as toml_dump

from .health import classify
from .models import RepositoryHealth, RepositoryInfo, ScanPath, Tag


@dataclass(slots=True)
class StoredState:
    """Everything devbase remembers between runs."""

    scan_paths: list[ScanPath] = field(default_factory=list)
    tags: list[Tag] = field(default_factory=list)
    repositories: list[RepositoryInfo] = field(default_factory=list)


class StateFile:
    """Reads and writes the TOML state file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> StoredState:
        if not self.path.exists():
            return StoredState()

        with self.path.open("rb") as handle:
            data = tomllib.load(handle)

        return StoredState(
            scan_paths=[
                ScanPath(
                    id=item["id"],
                    path=item["path"],
                    max_depth=item["max_depth"],
                    enabled=item.get("enabled", True),
                )
                for item in data.get("scan_paths", [])
            ],
            tags=[Tag(id=item["id"], name=item["name"], color=item["color"]) for item in data.get("tags", [])],
            repositories=[self._repository_from_dict(item) for item in data.get("repositories", [])],
        )

    def save(
        self,
        *,
        scan_paths: Iterable[ScanPath],
        tags: Iterable[Tag],
        repositories: Iterable[RepositoryInfo],
    ) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "scan_paths": [
                {"id": item.id, "path": item.path, "enabled": item.enabled, "max_depth": item.max_depth}
                for item in scan_paths
            ],
            "tags": [{"id": tag.id, "name": tag.name, "color": tag.color} for tag in tags],
            "repositories": [self._repository_to_dict(repo) for repo in repositories],
        }
        temp_path = self.path.with_name(f".{self.path.name}.tmp")
        with temp_path.open("wb") as handle:
            toml_dump(payload, handle)
        temp_path.replace(self.path)

    @staticmethod
    def _repository_from_dict(item: Mapping[str, Any]) -> RepositoryInfo:
        health = RepositoryHealth(**item.get("health", {}))
        return RepositoryInfo(
            id=item["id"],
            path=item["path"],
            name=item["name"],
            health=health,
            status=classify(health),
            remote_url=item.get("remote_url"),
            default_branch=item.get("default_branch"),
            current_branch=item.get("current_branch"),
            tags=frozenset(item.get("tags", [])),
        )

    @staticmethod
    def _repository_to_dict(repo: RepositoryInfo) -> dict[str, object]:
        health = repo.health
        health_payload: dict[str, object] = {
            "is_dirty": health.is_dirty,
            "uncommitted_count": health.uncommitted_count,
            "staged_count": health.staged_count,
            "commits_ahead": health.commits_ahead,
            "commits_behind": health.commits_behind,
            "stash_count": health.stash_count,
            "is_detached": health.is_detached,
        }
        if health.current_branch is not None:
            health_payload["current_branch"] = health.current_branch

        payload: dict[str, object] = {
            "id": repo.id,
            "path": repo.path,
            "name": repo.name,
            "tags": sorted(repo.tags),
        }
        if repo.remote_url is not None:
            payload["remote_url"] = repo.remote_url
        if repo.default_branch is not None:
            payload["default_branch"] = repo.default_branch
        if repo.current_branch is not None:
            payload["current_branch"] = repo.current_branch
        payload["health"] = health_payload
        return payload
