"""Scan passes across configured roots."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Sequence

from .catalog import RepositoryCatalog
from .errors import ScanError
from .models import DiscoveredRepo, ScanPath, ScanReport
from .registry import ScanPathRegistry, normalize_path, validate_depth

logger = logging.getLogger(__name__)

Discover = Callable[[str, int], Sequence[DiscoveredRepo]]


class ScanOrchestrator:
    """Runs discovery over scan roots and reconciles the results."""

    def __init__(
        self,
        registry: ScanPathRegistry,
        catalog: RepositoryCatalog,
        discover: Discover,
        *,
        workers: int = 4,
    ) -> None:
        self.registry = registry
        self.catalog = catalog
        self._discover = discover
        self._workers = max(1, workers)

    def scan_all(self) -> ScanReport:
        roots = self.registry.list_enabled()
        if not roots:
            logger.info("No enabled scan paths; nothing to scan")
            return ScanReport()

        logger.info("Scanning %d root(s)", len(roots))
        with ThreadPoolExecutor(max_workers=min(self._workers, len(roots))) as pool:
            outcomes = list(pool.map(self._attempt, roots))

        candidates: list[DiscoveredRepo] = []
        succeeded: list[str] = []
        errors: list[ScanError] = []
        for root, outcome in zip(roots, outcomes):
            if isinstance(outcome, ScanError):
                logger.warning("%s", outcome)
                errors.append(outcome)
                continue
            succeeded.append(root.path)
            candidates.extend(outcome)

        outcome = self.catalog.reconcile(candidates)
        return ScanReport(
            succeeded_roots=tuple(succeeded),
            errors=tuple(errors),
            added=outcome.added,
            updated=outcome.updated,
            health_errors=outcome.health_errors,
        )

    def scan_one(self, path: str, max_depth: int) -> ScanReport:
        """Scan a single ad hoc root, raising ``ScanError`` if discovery fails."""

        root = normalize_path(path)
        depth = validate_depth(max_depth)
        candidates = self._run_discovery(root, depth)
        outcome = self.catalog.reconcile(candidates)
        return ScanReport(
            succeeded_roots=(root,),
            added=outcome.added,
            updated=outcome.updated,
            health_errors=outcome.health_errors,
        )

    def _attempt(self, root: ScanPath) -> Sequence[DiscoveredRepo] | ScanError:
        try:
            return self._run_discovery(root.path, root.max_depth)
        except ScanError as exc:
            return exc

    def _run_discovery(self, root: str, max_depth: int) -> Sequence[DiscoveredRepo]:
        try:
            found = list(self._discover(root, max_depth))
        except ScanError:
            raise
        except OSError as exc:
            raise ScanError(root, exc.strerror or str(exc)) from exc
        logger.debug("Discovered %d repositories under %s", len(found), root)
        return found
