from __future__ import annotations

import shutil
from pathlib import Path

import pytest
from typer.testing import CliRunner

git = pytest.importorskip("git")

from devbase.cli import app  # noqa: E402

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")

runner = CliRunner()


def _make_repo(path: Path, *, dirty: bool = False) -> None:
    repo = git.Repo.init(path)
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "devbase tests")
        writer.set_value("user", "email", "tests@example.com")
    (path / "README.md").write_text("hello\n")
    repo.index.add(["README.md"])
    repo.index.commit("initial")
    if dirty:
        (path / "README.md").write_text("changed\n")


def _write_config(project: Path) -> Path:
    config_path = project / "devbase.toml"
    config_path.write_text(
        """
[settings]
state_path = "./state.toml"
default_max_depth = 3
"""
    )
    return config_path


def test_cli_full_cycle(tmp_path: Path, fake_home: Path) -> None:
    project = tmp_path / "project"
    project.mkdir()
    code = tmp_path / "code"
    _make_repo(code / "alpha")
    _make_repo(code / "group" / "beta", dirty=True)
    _make_repo(code / "node_modules" / "ignored")
    config_path = _write_config(project)

    add_result = runner.invoke(app, ["paths", "add", str(code), "--config", str(config_path)])
    assert add_result.exit_code == 0

    scan_result = runner.invoke(app, ["scan", "--config", str(config_path)])
    assert scan_result.exit_code == 0
    assert "2 added" in scan_result.stdout

    dirty = runner.invoke(app, ["list", "--status", "dirty", "--config", str(config_path)])
    assert "beta" in dirty.stdout
    assert "alpha" not in dirty.stdout

    clean = runner.invoke(app, ["list", "--status", "clean", "--config", str(config_path)])
    assert "alpha" in clean.stdout
    assert "ignored" not in clean.stdout


def test_cli_refresh_after_changes_and_missing_repo(tmp_path: Path, fake_home: Path) -> None:
    project = tmp_path / "project"
    project.mkdir()
    code = tmp_path / "code"
    _make_repo(code / "alpha")
    _make_repo(code / "gone")
    config_path = _write_config(project)

    runner.invoke(app, ["paths", "add", str(code), "--config", str(config_path)])
    runner.invoke(app, ["scan", "--config", str(config_path)])

    (code / "alpha" / "README.md").write_text("edited\n")
    shutil.rmtree(code / "gone")

    refresh_result = runner.invoke(app, ["refresh", "--config", str(config_path)])
    assert refresh_result.exit_code == 1
    assert "not a git repository" in " ".join(refresh_result.stdout.split())

    dirty = runner.invoke(app, ["list", "--status", "dirty", "--config", str(config_path)])
    assert "alpha" in dirty.stdout

    rescan = runner.invoke(app, ["scan", "--config", str(config_path)])
    assert rescan.exit_code == 0
    listing = runner.invoke(app, ["list", "--config", str(config_path)])
    assert "gone" in listing.stdout
