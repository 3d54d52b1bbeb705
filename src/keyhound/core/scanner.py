"""Core scanner module for keyhound.

This module provides the RepositoryScanner class which drives a complete
scan: branches are processed one at a time in ref order, each through
tip-snapshot mode and then history-diff mode. Every content unit goes
through token extraction and, when it holds both kinds of candidates,
through concurrent validation. Findings from all branches and both modes
are deduplicated once at the end.
"""

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Callable, Literal

from keyhound.core.aggregator import FindingAggregator
from keyhound.core.coordinator import ValidationCoordinator
from keyhound.core.exceptions import ScanError, TraversalError
from keyhound.core.models import ContentUnit, ScanDiagnostic, ScanResult, ValidationOutcome
from keyhound.detectors.token_extractor import TokenExtractor
from keyhound.scanners.git import BranchRef, CommitInfo, GitRepository
from keyhound.scanners.traverser import RepositoryTraverser
from keyhound.validators import BaseValidator

logger = logging.getLogger(__name__)

HistoryScope = Literal["head", "branch"]

# Called with (branch name, units scanned so far, findings so far)
ProgressCallback = Callable[[str, int, int], None]


class RepositoryScanner:
    """Scans a git repository for live AWS access key pairs.

    Attributes:
        repo_path: Path to the local git repository.
        validator: Validator used to probe candidate pairs.
        include_snapshots: Whether to scan branch tip snapshots.
        include_history: Whether to scan commit history diffs.
        history_scope: ``head`` lists the history reachable from HEAD once and
            replays it for every branch; ``branch`` lists history from each
            branch tip.
        branches: Only scan these branches (empty for all).
        concurrency: Maximum number of probes in flight.
        timeout: Per-probe timeout in seconds.
    """

    def __init__(
        self,
        repo_path: str | Path,
        validator: BaseValidator,
        include_snapshots: bool = True,
        include_history: bool = True,
        history_scope: HistoryScope = "head",
        branches: list[str] | None = None,
        concurrency: int = ValidationCoordinator.DEFAULT_CONCURRENCY,
        timeout: float | None = ValidationCoordinator.DEFAULT_TIMEOUT,
        extractor: TokenExtractor | None = None,
        progress_callback: ProgressCallback | None = None,
    ):
        if history_scope not in ("head", "branch"):
            raise ValueError(f"Unknown history scope: {history_scope}")
        self.repo_path = Path(repo_path)
        self.validator = validator
        self.include_snapshots = include_snapshots
        self.include_history = include_history
        self.history_scope = history_scope
        self.branches = branches or []
        self.concurrency = concurrency
        self.timeout = timeout
        self.extractor = extractor or TokenExtractor()
        self.progress_callback = progress_callback

        self.repository = GitRepository(self.repo_path)
        self._cancel_event = asyncio.Event()
        self._reset()

    def _reset(self) -> None:
        """Reset the scanner state for a new scan."""
        self._cancel_event.clear()
        self._units_scanned = 0
        self._units_with_candidates = 0
        self._branches_scanned: list[str] = []
        self._branches_failed: list[str] = []
        self._diagnostics: list[ScanDiagnostic] = []

    @property
    def is_cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def cancel(self) -> None:
        """Request cancellation; the scan stops after the current unit."""
        self._cancel_event.set()
        logger.info("Scan cancellation requested")

    def _report_progress(self, branch: str, aggregator: FindingAggregator) -> None:
        if self.progress_callback is not None:
            try:
                self.progress_callback(branch, self._units_scanned, len(aggregator))
            except Exception as e:
                logger.debug(f"Progress callback error: {e}")

    async def _select_branches(self) -> list[BranchRef]:
        try:
            branches = await self.repository.list_branches()
        except TraversalError as e:
            raise ScanError(
                f"Cannot list branches: {e.message}",
                path=str(self.repo_path),
                context=dict(e.context),
            ) from e

        if self.branches:
            wanted = set(self.branches)
            missing = wanted - {b.name for b in branches}
            for name in sorted(missing):
                self._record(
                    TraversalError(f"Branch not found: {name}", branch=name), branch=name
                )
            branches = [b for b in branches if b.name in wanted]
        return branches

    async def _global_history(self, traverser: RepositoryTraverser) -> list[CommitInfo]:
        try:
            return await traverser.load_history("HEAD")
        except TraversalError as e:
            raise ScanError(
                f"Cannot list commit history: {e.message}",
                path=str(self.repo_path),
                context=dict(e.context),
            ) from e

    def _record(self, error: TraversalError, branch: str) -> None:
        logger.warning(f"Skipping rest of branch {branch}: {error}")
        self._diagnostics.append(
            ScanDiagnostic(
                stage="traversal",
                message=error.message,
                branch=branch,
                context={k: str(v) for k, v in error.context.items()},
            )
        )

    async def _process_units(
        self,
        units: AsyncIterator[ContentUnit],
        coordinator: ValidationCoordinator,
        branch: str,
    ) -> None:
        async for unit in units:
            if self.is_cancelled:
                break
            self._units_scanned += 1
            tokens = self.extractor.extract(unit.text)
            if tokens:
                self._units_with_candidates += 1
                await coordinator.validate_unit(unit, tokens)
            self._report_progress(branch, coordinator.aggregator)

    async def _scan_branch(
        self,
        branch: BranchRef,
        traverser: RepositoryTraverser,
        coordinator: ValidationCoordinator,
        shared_history: list[CommitInfo] | None,
    ) -> None:
        if self.include_snapshots:
            await self._process_units(traverser.snapshot_units(branch), coordinator, branch.name)

        if self.include_history and not self.is_cancelled:
            if shared_history is None:
                history = await traverser.load_history(branch.commit, branch=branch.name)
            else:
                history = shared_history
            await self._process_units(
                traverser.history_units(branch.name, history), coordinator, branch.name
            )

    async def scan(self) -> ScanResult:
        """Execute the scan operation.

        Returns:
            ScanResult with the deduplicated findings, diagnostics for every
            branch that could not be fully traversed, and statistics.

        Raises:
            ScanError: If the repository is unusable, its branches cannot be
                listed, or (with ``head`` history scope) its history cannot
                be listed.
        """
        self._reset()
        start_time = time.time()

        await self.repository.validate()

        aggregator = FindingAggregator()
        coordinator = ValidationCoordinator(
            self.validator,
            aggregator,
            concurrency=self.concurrency,
            timeout=self.timeout,
        )
        traverser = RepositoryTraverser(self.repository)

        branches = await self._select_branches()
        logger.info(f"Scanning {len(branches)} branches of {self.repo_path}")

        shared_history = None
        if self.include_history and self.history_scope == "head" and branches:
            shared_history = await self._global_history(traverser)

        for branch in branches:
            if self.is_cancelled:
                break
            logger.info(f"Scanning branch {branch.name}")
            try:
                await self._scan_branch(branch, traverser, coordinator, shared_history)
            except TraversalError as e:
                self._branches_failed.append(branch.name)
                self._record(e, branch.name)
                continue
            self._branches_scanned.append(branch.name)

        findings = aggregator.finalize()
        scan_duration = time.time() - start_time
        logger.info(
            f"Scan complete: {len(self._branches_scanned)} branches, "
            f"{self._units_scanned} units, {coordinator.pairs_validated} pairs validated, "
            f"{len(findings)} findings"
            + (" (cancelled)" if self.is_cancelled else "")
        )

        return ScanResult(
            target_path=str(self.repo_path),
            findings=findings,
            diagnostics=list(self._diagnostics),
            scan_duration=scan_duration,
            stats={
                "branches_scanned": list(self._branches_scanned),
                "branches_failed": list(self._branches_failed),
                "units_scanned": self._units_scanned,
                "units_with_candidates": self._units_with_candidates,
                "commits_diffed": traverser.commits_diffed,
                "pairs_validated": coordinator.pairs_validated,
                "outcomes": {
                    outcome.value: coordinator.outcome_counts.get(outcome, 0)
                    for outcome in ValidationOutcome
                },
                "live_pairs": sum(
                    count for outcome, count in coordinator.outcome_counts.items() if outcome.is_live
                ),
                "cancelled": self.is_cancelled,
            },
        )

