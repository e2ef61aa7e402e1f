"""Command-line interface for devbase."""

from __future__ import annotations

import io
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Iterable

import tomli_w
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .config import DEFAULT_CONFIG_FILENAME, DEFAULT_STATE_PATH, ConfigError, load_config
from .errors import DevbaseError
from .manager import DevbaseManager
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
from .remotes import remote_host, remote_owner

app = typer.Typer(help="Local repository command center")
paths_app = typer.Typer(help="Manage scan paths")
tags_app = typer.Typer(help="Manage tags")
app.add_typer(paths_app, name="paths")
app.add_typer(tags_app, name="tags")

console = Console()
err_console = Console(stderr=True)

_options = {"verbose": False}

STATUS_STYLES = {
    RepositoryStatus.CLEAN: "green",
    RepositoryStatus.DIRTY: "red",
    RepositoryStatus.AHEAD: "cyan",
    RepositoryStatus.BEHIND: "yellow",
    RepositoryStatus.DIVERGED: "magenta",
}


def _configure_logging(level: str) -> None:
    logger = logging.getLogger("devbase")
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        logger.addHandler(RichHandler(console=err_console, show_path=False))
    logger.setLevel("DEBUG" if _options["verbose"] else level)


def _load_manager(config: Path | None) -> DevbaseManager:
    config_obj = load_config(config)
    _configure_logging(config_obj.settings.log_level)
    return DevbaseManager(config_obj)


def _absolute(path: str) -> str:
    return os.path.abspath(os.path.expanduser(path))


def _handle_error(exc: Exception) -> None:
    if isinstance(exc, PermissionError):
        console.print("[red]Permission denied.[/red] Check access to the state file and scan paths.")
        raise typer.Exit(code=1)
    if isinstance(exc, ConfigError):
        message = str(exc)
        console.print(f"[red]{message}[/red]")
        if "does not exist" in message:
            console.print("[yellow]Use 'devbase init --config <path>' to create a configuration file.[/yellow]")
        elif "Expected to find" in message:
            console.print(
                "[yellow]Make sure you pointed to the directory containing the config file, or to the file itself.[/yellow]"
            )
        raise typer.Exit(code=1)
    if isinstance(exc, DevbaseError):
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    raise exc


def _status_cell(status: RepositoryStatus) -> str:
    style = STATUS_STYLES.get(status, "white")
    return f"[{style}]{status.value}[/{style}]"


def _format_repositories(entries: Iterable[RepositoryInfo]) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Status")
    table.add_column("Branch")
    table.add_column("Ahead/Behind", justify="center")
    table.add_column("Changes", justify="right")
    table.add_column("Tags")
    table.add_column("Path", overflow="fold")

    for entry in entries:
        health = entry.health
        table.add_row(
            str(entry.id),
            entry.name,
            _status_cell(entry.status),
            entry.current_branch or ("(detached)" if health.is_detached else ""),
            f"{health.commits_ahead}/{health.commits_behind}",
            str(health.uncommitted_count + health.staged_count),
            ", ".join(sorted(entry.tags)),
            entry.path,
        )

    console.print(table)


def _format_scan_paths(entries: Iterable[ScanPath]) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", justify="right")
    table.add_column("Path", overflow="fold")
    table.add_column("Enabled")
    table.add_column("Max depth", justify="right")

    for entry in entries:
        enabled = "[green]yes[/green]" if entry.enabled else "[yellow]no[/yellow]"
        table.add_row(str(entry.id), entry.path, enabled, str(entry.max_depth))

    console.print(table)


def _format_tags(tags: Iterable[Tag]) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Color")

    for tag in tags:
        table.add_row(str(tag.id), tag.name, tag.color)

    console.print(table)


def _format_history(entries: Iterable[CommitLogEntry]) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Commit", style="yellow")
    table.add_column("Date")
    table.add_column("Author")
    table.add_column("Summary", overflow="fold")

    for entry in entries:
        date = datetime.fromtimestamp(entry.timestamp).strftime("%Y-%m-%d %H:%M")
        short_oid = f"{entry.short_oid}*" if len(entry.parents) > 1 else entry.short_oid
        table.add_row(short_oid, date, entry.author_name, entry.summary)

    console.print(table)


def _format_scan_report(report: ScanReport) -> None:
    console.print(
        f"[green]Scanned {len(report.succeeded_roots)} root(s): "
        f"{len(report.added)} added, {len(report.updated)} updated.[/green]"
    )
    if report.added:
        _format_repositories(report.added)
    for error in report.errors:
        console.print(f"[red]{error.root}[/red]: {error.reason}")
    for error in report.health_errors:
        console.print(f"[yellow]{error.path}[/yellow]: {error.reason}")


def _format_refresh_report(report: RefreshReport) -> None:
    _format_repositories(report.refreshed)
    for error in report.errors:
        console.print(f"[red]{error.path}[/red]: {error.reason}")


def _render_init_config(*, state_path: str, default_max_depth: int) -> str:
    data = {
        "settings": {
            "state_path": state_path,
            "default_max_depth": default_max_depth,
            "workers": 4,
            "log_level": "WARNING",
        }
    }
    buffer = io.StringIO()
    buffer.write("# devbase configuration\n\n")
    buffer.write(tomli_w.dumps(data))
    return buffer.getvalue()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    _options["verbose"] = verbose


@app.command()
def init(
    config: Path = typer.Option(
        Path(DEFAULT_CONFIG_FILENAME),
        "--config",
        "-c",
        help="Path to write the configuration file",
        dir_okay=False,
        writable=True,
    ),
    state_path: str = typer.Option(DEFAULT_STATE_PATH, "--state-path", help="Where devbase keeps its state"),
    depth: int = typer.Option(5, "--depth", min=1, help="Default max depth for new scan paths"),
    scan: list[str] = typer.Option(None, "--scan", help="Scan path to register right away (repeatable)"),
    force: bool = typer.Option(False, "--force", help="Overwrite existing config if present"),
) -> None:
    """Create a starter devbase configuration file."""

    config_path = config
    if config_path.exists() and not force:
        console.print(f"[red]Configuration '{config_path}' already exists. Use --force to overwrite.[/red]")
        raise typer.Exit(code=1)

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(_render_init_config(state_path=state_path, default_max_depth=depth))
    console.print(f"[green]Created '{config_path}'.[/green]")

    if scan:
        try:
            manager = _load_manager(config_path)
            for raw in scan:
                entry = manager.add_scan_path(_absolute(raw))
                console.print(f"[green]Added scan path '{entry.path}'.[/green]")
        except Exception as exc:  # noqa: BLE001
            _handle_error(exc)


@app.command()
def version() -> None:
    """Print the devbase version."""

    console.print(__version__)


@app.command()
def scan(
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to devbase.toml"),
    path: str | None = typer.Option(None, "--path", "-p", help="Scan a single directory instead of all scan paths"),
    depth: int | None = typer.Option(None, "--depth", help="Max depth for --path"),
) -> None:
    """Discover repositories under the enabled scan paths."""

    try:
        manager = _load_manager(config)
        if path is not None:
            report = manager.scan_path(_absolute(path), depth)
        else:
            report = manager.scan()
        _format_scan_report(report)
        if not report.ok:
            raise typer.Exit(code=1)
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@app.command("list")
def list_repositories(
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to devbase.toml"),
    search: str = typer.Option("", "--search", "-s", help="Match name or path (case-insensitive)"),
    status: RepositoryStatus | None = typer.Option(None, "--status", help="Only show repositories in this state"),
    tag: list[str] = typer.Option(None, "--tag", "-t", help="Require tag (repeatable, all must match)"),
) -> None:
    """List tracked repositories."""

    try:
        manager = _load_manager(config)
        entries = manager.repositories(search=search, status=status, tags=tag or ())
        _format_repositories(entries)
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@app.command()
def show(
    repo_id: int = typer.Argument(..., help="Repository id"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to devbase.toml"),
) -> None:
    """Show details for a single repository."""

    try:
        manager = _load_manager(config)
        entry = manager.repository(repo_id)
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)
        return

    health = entry.health
    table = Table(show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value", overflow="fold")
    table.add_row("Name", entry.name)
    table.add_row("Path", entry.path)
    table.add_row("Status", _status_cell(entry.status))
    table.add_row("Remote", entry.remote_url or "")
    table.add_row("Host", remote_host(entry.remote_url) or "")
    table.add_row("Owner", remote_owner(entry.remote_url) or "")
    table.add_row("Default branch", entry.default_branch or "")
    table.add_row("Current branch", entry.current_branch or "")
    table.add_row("Detached HEAD", "yes" if health.is_detached else "no")
    table.add_row("Uncommitted", str(health.uncommitted_count))
    table.add_row("Staged", str(health.staged_count))
    table.add_row("Ahead/Behind", f"{health.commits_ahead}/{health.commits_behind}")
    table.add_row("Stashes", str(health.stash_count))
    table.add_row("Tags", ", ".join(sorted(entry.tags)))
    console.print(table)


@app.command()
def log(
    repo_id: int = typer.Argument(..., help="Repository id"),
    limit: int = typer.Option(DEFAULT_HISTORY_LIMIT, "--limit", "-n", min=1, help="Maximum commits to show"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to devbase.toml"),
) -> None:
    """Show recent commits for a repository. Merge commits are marked with '*'."""

    try:
        manager = _load_manager(config)
        entries = manager.history(repo_id, limit)
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)
        return

    _format_history(entries)


@app.command()
def refresh(
    repo_id: int | None = typer.Argument(None, help="Repository id; refreshes everything when omitted"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to devbase.toml"),
) -> None:
    """Re-read Git health for one or all repositories."""

    try:
        manager = _load_manager(config)
        if repo_id is not None:
            _format_repositories([manager.refresh(repo_id)])
            return
        report = manager.refresh_all()
        _format_refresh_report(report)
        if not report.ok:
            raise typer.Exit(code=1)
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@app.command()
def forget(
    repo_id: int = typer.Argument(..., help="Repository id"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to devbase.toml"),
) -> None:
    """Stop tracking a repository. Files on disk are not touched."""

    try:
        manager = _load_manager(config)
        entry = manager.forget(repo_id)
        console.print(f"[green]Forgot '{entry.path}'.[/green]")
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@paths_app.command("list")
def paths_list(config: Path | None = typer.Option(None, "--config", "-c", help="Path to devbase.toml")) -> None:
    """Show configured scan paths."""

    try:
        _format_scan_paths(_load_manager(config).scan_paths())
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@paths_app.command("add")
def paths_add(
    path: str = typer.Argument(..., help="Directory to scan"),
    depth: int | None = typer.Option(None, "--depth", help="Max traversal depth"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to devbase.toml"),
) -> None:
    """Register a scan path."""

    try:
        entry = _load_manager(config).add_scan_path(_absolute(path), depth)
        _format_scan_paths([entry])
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@paths_app.command("remove")
def paths_remove(
    scan_path_id: int = typer.Argument(..., help="Scan path id"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to devbase.toml"),
) -> None:
    """Remove a scan path. Repositories already discovered stay tracked."""

    try:
        _load_manager(config).remove_scan_path(scan_path_id)
        console.print(f"[green]Removed scan path {scan_path_id}.[/green]")
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@paths_app.command("enable")
def paths_enable(
    scan_path_id: int = typer.Argument(..., help="Scan path id"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to devbase.toml"),
) -> None:
    """Include a scan path in future scans."""

    try:
        _format_scan_paths([_load_manager(config).set_scan_path_enabled(scan_path_id, True)])
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@paths_app.command("disable")
def paths_disable(
    scan_path_id: int = typer.Argument(..., help="Scan path id"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to devbase.toml"),
) -> None:
    """Exclude a scan path from future scans."""

    try:
        _format_scan_paths([_load_manager(config).set_scan_path_enabled(scan_path_id, False)])
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@paths_app.command("depth")
def paths_depth(
    scan_path_id: int = typer.Argument(..., help="Scan path id"),
    depth: int = typer.Argument(..., help="New max traversal depth"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to devbase.toml"),
) -> None:
    """Change how deep a scan path is walked."""

    try:
        _format_scan_paths([_load_manager(config).set_scan_path_depth(scan_path_id, depth)])
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@tags_app.command("list")
def tags_list(config: Path | None = typer.Option(None, "--config", "-c", help="Path to devbase.toml")) -> None:
    """Show all tags."""

    try:
        _format_tags(_load_manager(config).list_tags())
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@tags_app.command("create")
def tags_create(
    name: str = typer.Argument(..., help="Tag name"),
    color: str = typer.Option("#808080", "--color", help="Display color"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to devbase.toml"),
) -> None:
    """Create a tag."""

    try:
        _format_tags([_load_manager(config).create_tag(name, color)])
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@tags_app.command("delete")
def tags_delete(
    tag_id: int = typer.Argument(..., help="Tag id"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to devbase.toml"),
) -> None:
    """Delete a tag and detach it from every repository."""

    try:
        tag = _load_manager(config).delete_tag(tag_id)
        console.print(f"[green]Deleted tag '{tag.name}'.[/green]")
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@tags_app.command("assign")
def tags_assign(
    repo_id: int = typer.Argument(..., help="Repository id"),
    tag_id: int = typer.Argument(..., help="Tag id"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to devbase.toml"),
) -> None:
    """Attach a tag to a repository."""

    try:
        _format_repositories([_load_manager(config).assign_tag(repo_id, tag_id)])
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@tags_app.command("unassign")
def tags_unassign(
    repo_id: int = typer.Argument(..., help="Repository id"),
    tag_id: int = typer.Argument(..., help="Tag id"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to devbase.toml"),
) -> None:
    """Detach a tag from a repository."""

    try:
        _format_repositories([_load_manager(config).remove_tag(repo_id, tag_id)])
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


def run() -> None:
    """Entry point used for console_script bindings."""

    app()
