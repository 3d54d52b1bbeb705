"""Validation coordination for keyhound.

This module provides the ValidationCoordinator, which validates every
candidate pair of a content unit concurrently. Extraction cannot tell which
identifier and secret sat next to each other, so every identifier is tried
with every secret. The cross product grows quadratically and every pair
costs one remote call, so the fan-out is bounded by a semaphore.
"""

import asyncio
import logging
from collections import Counter
from itertools import product

from keyhound.core.aggregator import FindingAggregator
from keyhound.core.logging import mask
from keyhound.core.models import CandidatePair, ContentUnit, Finding, ValidationOutcome
from keyhound.detectors.token_extractor import ExtractedTokens
from keyhound.validators import BaseValidator

logger = logging.getLogger(__name__)


def make_pairs(unit: ContentUnit, tokens: ExtractedTokens) -> list[CandidatePair]:
    """Form the identifier x secret cross product for one unit."""
    return [
        CandidatePair(identifier=identifier, secret=secret, provenance=unit.provenance)
        for identifier, secret in product(tokens.identifiers, tokens.secrets)
    ]


class ValidationCoordinator:
    """Validates candidate pairs and records the live ones.

    The coordinator runs the blocking validator in worker threads, with at
    most ``concurrency`` probes in flight and a per-probe timeout. A probe
    that times out is reported as inconclusive at once, but its thread
    keeps a slot until it returns, so the bound covers abandoned probes too.
    All pairs of a unit are joined before ``validate_unit`` returns.

    Attributes:
        validator: Performs one remote probe per pair.
        aggregator: Receives every finding; the only shared mutable state.
        concurrency: Maximum number of probes in flight.
        timeout: Seconds to wait for a single probe (None for no limit).
    """

    DEFAULT_CONCURRENCY = 8
    DEFAULT_TIMEOUT = 15.0

    def __init__(
        self,
        validator: BaseValidator,
        aggregator: FindingAggregator,
        concurrency: int = DEFAULT_CONCURRENCY,
        timeout: float | None = DEFAULT_TIMEOUT,
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.validator = validator
        self.aggregator = aggregator
        self.concurrency = concurrency
        self.timeout = timeout

        self._semaphore = asyncio.Semaphore(concurrency)
        self.outcome_counts: Counter[ValidationOutcome] = Counter()
        self.pairs_validated = 0

    def _release_slot(self, call: "asyncio.Future[ValidationOutcome]") -> None:
        self._semaphore.release()
        if not call.cancelled() and call.exception() is not None:
            logger.debug(f"Validator thread ended with {call.exception()!r}")

    async def _probe(self, pair: CandidatePair) -> ValidationOutcome:
        # The slot is freed when the worker thread ends, not when we stop waiting.
        await self._semaphore.acquire()
        call = asyncio.ensure_future(
            asyncio.to_thread(self.validator.validate, pair.identifier, pair.secret)
        )
        call.add_done_callback(self._release_slot)
        try:
            if self.timeout:
                return await asyncio.wait_for(asyncio.shield(call), timeout=self.timeout)
            return await call
        except asyncio.TimeoutError:
            logger.debug(f"Probe for {mask(pair.identifier)} timed out after {self.timeout}s")
            return ValidationOutcome.INCONCLUSIVE
        except Exception as e:
            logger.warning(
                f"Validator {self.validator.name} failed on {mask(pair.identifier)}: {e}"
            )
            return ValidationOutcome.INCONCLUSIVE

    async def _validate_pair(self, pair: CandidatePair) -> Finding | None:
        outcome = await self._probe(pair)
        self.pairs_validated += 1
        self.outcome_counts[outcome] += 1

        if not outcome.is_live:
            return None

        finding = pair.to_finding()
        await self.aggregator.add(finding)
        logger.info(
            f"Live key {mask(pair.identifier)} ({outcome.value}) in "
            f"{pair.provenance.file_path} at {pair.provenance.commit_hash[:8]}"
        )
        return finding

    async def validate_unit(self, unit: ContentUnit, tokens: ExtractedTokens) -> list[Finding]:
        """Validate every candidate pair of one content unit.

        Args:
            unit: The unit the tokens were extracted from.
            tokens: Identifier and secret candidates of the unit.

        Returns:
            Findings for the pairs that proved live, in no particular order.
        """
        pairs = make_pairs(unit, tokens)
        if not pairs:
            return []

        logger.debug(f"Validating {len(pairs)} pairs from {unit.provenance.file_path}")
        results = await asyncio.gather(*(self._validate_pair(pair) for pair in pairs))
        return [finding for finding in results if finding is not None]
