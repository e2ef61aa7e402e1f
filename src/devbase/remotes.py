"""Helpers for interpreting remote URLs."""

from __future__ import annotations

from urllib.parse import urlparse


def _is_scp_style(url: str) -> bool:
    return url.startswith("git@") and ":" in url


def remote_host(url: str | None) -> str | None:
    """Return the host of an SSH (``git@host:owner/repo``) or HTTP(S) remote."""

    if not url:
        return None
    if _is_scp_style(url):
        return url.split("@", 1)[1].split(":", 1)[0] or None
    if url.startswith("http"):
        return urlparse(url).hostname
    return None


def remote_owner(url: str | None) -> str | None:
    """Return the first path segment (organization or user) of a remote URL."""

    if not url:
        return None
    if _is_scp_style(url):
        path = url.split(":", 1)[1]
    elif url.startswith("http"):
        path = urlparse(url).path
    else:
        return None
    segments = [segment for segment in path.split("/") if segment]
    return segments[0] if segments else None
