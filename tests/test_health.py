from __future__ import annotations

import itertools

import pytest

from devbase.health import classify
from devbase.models import RepositoryHealth, RepositoryStatus


def test_dirty_dominates_divergence() -> None:
    health = RepositoryHealth(uncommitted_count=2, staged_count=0, commits_ahead=1, commits_behind=1)
    assert classify(health) is RepositoryStatus.DIRTY


def test_staged_only_counts_as_dirty() -> None:
    assert classify(RepositoryHealth(staged_count=1)) is RepositoryStatus.DIRTY


def test_behind() -> None:
    assert classify(RepositoryHealth(commits_behind=3)) is RepositoryStatus.BEHIND


def test_ahead() -> None:
    assert classify(RepositoryHealth(commits_ahead=2)) is RepositoryStatus.AHEAD


def test_diverged() -> None:
    assert classify(RepositoryHealth(commits_ahead=2, commits_behind=5)) is RepositoryStatus.DIVERGED


def test_no_tracking_branch_is_clean() -> None:
    health = RepositoryHealth(current_branch="feature", commits_ahead=0, commits_behind=0)
    assert classify(health) is RepositoryStatus.CLEAN


def test_producer_dirty_flag_is_not_trusted() -> None:
    assert classify(RepositoryHealth(is_dirty=True)) is RepositoryStatus.CLEAN
    assert classify(RepositoryHealth(is_dirty=False, uncommitted_count=1)) is RepositoryStatus.DIRTY


def test_annotations_do_not_change_status() -> None:
    base = RepositoryHealth(commits_ahead=1)
    annotated = RepositoryHealth(commits_ahead=1, stash_count=4, is_detached=True)
    assert classify(base) is classify(annotated) is RepositoryStatus.AHEAD


def test_classify_is_total_and_deterministic() -> None:
    for uncommitted, staged, ahead, behind in itertools.product(range(3), repeat=4):
        health = RepositoryHealth(
            uncommitted_count=uncommitted,
            staged_count=staged,
            commits_ahead=ahead,
            commits_behind=behind,
        )
        first = classify(health)
        assert isinstance(first, RepositoryStatus)
        assert classify(health) is first


def test_negative_counts_rejected() -> None:
    with pytest.raises(ValueError):
        RepositoryHealth(commits_behind=-1)
