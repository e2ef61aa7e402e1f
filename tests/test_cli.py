from __future__ import annotations

import tomllib
from pathlib import Path

import pytest
from typer.testing import CliRunner

from devbase.cli import app
from devbase.config import load_config
from devbase.manager import DevbaseManager
from devbase.models import CommitLogEntry, RepositoryHealth

from conftest import FakeGit

runner = CliRunner()


@pytest.fixture(autouse=True)
def fake_manager(monkeypatch: pytest.MonkeyPatch, fake_git: FakeGit) -> None:
    monkeypatch.setattr(
        "devbase.cli.DevbaseManager",
        lambda config: DevbaseManager(
            config,
            discover=fake_git.discover,
            read_health=fake_git.read_health,
            read_history=fake_git.read_history,
        ),
    )


def _invoke(config_path: Path, *args: str):  # noqa: ANN202
    return runner.invoke(app, [*args, "--config", str(config_path)])


def test_init_writes_config_and_registers_scan_paths(tmp_path: Path, fake_home: Path, fake_git: FakeGit) -> None:
    config_path = tmp_path / "conf" / "devbase.toml"
    code_dir = tmp_path / "code"

    result = runner.invoke(
        app,
        ["init", "--config", str(config_path), "--state-path", "./state.toml", "--scan", str(code_dir)],
    )

    assert result.exit_code == 0
    data = tomllib.loads(config_path.read_text())
    assert data["settings"]["state_path"] == "./state.toml"
    assert data["settings"]["default_max_depth"] == 5

    manager = DevbaseManager(
        load_config(config_path),
        discover=fake_git.discover,
        read_health=fake_git.read_health,
        read_history=fake_git.read_history,
    )
    scan_paths = manager.scan_paths()
    assert [entry.path for entry in scan_paths] == [str(code_dir)]

    again = runner.invoke(app, ["init", "--config", str(config_path)])
    assert again.exit_code == 1
    assert "already exists" in again.stdout


def test_missing_config_suggests_init(tmp_path: Path) -> None:
    result = runner.invoke(app, ["list", "--config", str(tmp_path / "nope.toml")])

    assert result.exit_code == 1
    assert "devbase init" in result.stdout


def test_scan_list_and_filters(config_path: Path, fake_git: FakeGit) -> None:
    fake_git.add_repo("/work", "api", RepositoryHealth(uncommitted_count=1))
    fake_git.add_repo("/work", "web")

    assert _invoke(config_path, "paths", "add", "/work").exit_code == 0

    scan_result = _invoke(config_path, "scan")
    assert scan_result.exit_code == 0
    assert "2 added" in scan_result.stdout

    dirty = _invoke(config_path, "list", "--status", "dirty")
    assert dirty.exit_code == 0
    assert "api" in dirty.stdout
    assert "web" not in dirty.stdout

    search = _invoke(config_path, "list", "--search", "WEB")
    assert "web" in search.stdout
    assert "api" not in search.stdout


def test_scan_with_failing_root_exits_nonzero(config_path: Path, fake_git: FakeGit) -> None:
    fake_git.add_repo("/work", "api")
    fake_git.broken_roots["/gone"] = "path does not exist"
    _invoke(config_path, "paths", "add", "/gone")
    _invoke(config_path, "paths", "add", "/work")

    result = _invoke(config_path, "scan")

    assert result.exit_code == 1
    assert "path does not exist" in result.stdout
    assert "api" in _invoke(config_path, "list").stdout


def test_paths_commands(config_path: Path) -> None:
    _invoke(config_path, "paths", "add", "/work", "--depth", "2")

    disabled = _invoke(config_path, "paths", "disable", "1")
    assert disabled.exit_code == 0
    assert "no" in disabled.stdout

    depth = _invoke(config_path, "paths", "depth", "1", "9")
    assert depth.exit_code == 0
    assert "9" in depth.stdout

    bad_depth = _invoke(config_path, "paths", "depth", "1", "0")
    assert bad_depth.exit_code == 1
    assert "positive integer" in bad_depth.stdout

    duplicate = _invoke(config_path, "paths", "add", "/work/")
    assert duplicate.exit_code == 1
    assert "already configured" in duplicate.stdout

    assert _invoke(config_path, "paths", "remove", "1").exit_code == 0
    missing = _invoke(config_path, "paths", "remove", "1")
    assert missing.exit_code == 1
    assert "No scan path" in missing.stdout


def test_tags_and_show(config_path: Path, fake_git: FakeGit) -> None:
    fake_git.add_repo("/work", "api", remote_url="git@github.com:octo/api.git")
    _invoke(config_path, "paths", "add", "/work")
    _invoke(config_path, "scan")

    created = _invoke(config_path, "tags", "create", "work")
    assert created.exit_code == 0

    assigned = _invoke(config_path, "tags", "assign", "1", "1")
    assert assigned.exit_code == 0

    tagged = _invoke(config_path, "list", "--tag", "work")
    assert "api" in tagged.stdout

    shown = _invoke(config_path, "show", "1")
    assert shown.exit_code == 0
    assert "github.com" in shown.stdout
    assert "octo" in shown.stdout

    assert _invoke(config_path, "tags", "delete", "1").exit_code == 0
    assert "api" not in _invoke(config_path, "list", "--tag", "work").stdout

    unknown = _invoke(config_path, "tags", "assign", "1", "42")
    assert unknown.exit_code == 1
    assert "No tag" in unknown.stdout


def test_refresh_reports_failures(config_path: Path, fake_git: FakeGit) -> None:
    api = fake_git.add_repo("/work", "api")
    fake_git.add_repo("/work", "web")
    _invoke(config_path, "paths", "add", "/work")
    _invoke(config_path, "scan")

    single = _invoke(config_path, "refresh", "1")
    assert single.exit_code == 0

    fake_git.unreadable.add(api)
    failed_single = _invoke(config_path, "refresh", "1")
    assert failed_single.exit_code == 1
    assert "Health unavailable" in failed_single.stdout

    everything = _invoke(config_path, "refresh")
    assert everything.exit_code == 1
    assert "web" in everything.stdout
    assert "not a git repository" in everything.stdout


def test_log_shows_recent_commits(config_path: Path, fake_git: FakeGit) -> None:
    api = fake_git.add_repo("/work", "api")
    fake_git.histories[api] = [
        CommitLogEntry("c" * 40, "ccccccc", "Merge feature", "Ada", "ada@example.com", 300, ("b" * 40, "a" * 40)),
        CommitLogEntry("b" * 40, "bbbbbbb", "Add parser", "Ada", "ada@example.com", 200, ("a" * 40,)),
        CommitLogEntry("a" * 40, "aaaaaaa", "Initial import", "Ada", "ada@example.com", 100),
    ]
    _invoke(config_path, "paths", "add", "/work")
    _invoke(config_path, "scan")

    result = _invoke(config_path, "log", "1", "--limit", "2")

    assert result.exit_code == 0
    assert "ccccccc*" in result.stdout
    assert "Add parser" in result.stdout
    assert "Initial import" not in result.stdout

    missing = _invoke(config_path, "log", "42")
    assert missing.exit_code == 1
    assert "No repository" in missing.stdout


def test_forget(config_path: Path, fake_git: FakeGit) -> None:
    fake_git.add_repo("/work", "api")
    _invoke(config_path, "paths", "add", "/work")
    _invoke(config_path, "scan")

    result = _invoke(config_path, "forget", "1")

    assert result.exit_code == 0
    assert "api" not in _invoke(config_path, "list").stdout


def test_handles_permission_error(monkeypatch: pytest.MonkeyPatch) -> None:
    class DummyManager:
        def scan(self):  # noqa: ANN201
            raise PermissionError("mocked")

    monkeypatch.setattr("devbase.cli._load_manager", lambda _config: DummyManager())

    result = runner.invoke(app, ["scan"])
    assert result.exit_code == 1
    assert "Permission denied" in result.stdout


def test_version() -> None:
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "0.1.0" in result.stdout
