"""Tests for ValidationCoordinator.

Every identifier must be tried with every secret exactly once, only the two
live outcomes may produce findings, and the number of probes in flight must
stay within the configured bound.
"""

from __future__ import annotations

import asyncio

import pytest

from conftest import (
    ACCESS_KEY_ID,
    OTHER_ACCESS_KEY_ID,
    OTHER_SECRET_ACCESS_KEY,
    SECRET_ACCESS_KEY,
    ScriptedValidator,
)
from keyhound.core.aggregator import FindingAggregator
from keyhound.core.coordinator import ValidationCoordinator, make_pairs
from keyhound.core.models import ContentUnit, Provenance, ValidationOutcome
from keyhound.detectors import ExtractedTokens


def _unit() -> ContentUnit:
    return ContentUnit(
        content=b"",
        provenance=Provenance(
            file_path="settings.ini",
            commit_hash="c" * 40,
            branch="main",
            author="Test User <test@example.com>",
            message="Add settings",
        ),
    )


def _coordinator(validator: ScriptedValidator, **kwargs) -> ValidationCoordinator:
    return ValidationCoordinator(validator, FindingAggregator(), **kwargs)


class TestMakePairs:
    """Tests for cross product pairing."""

    def test_every_combination_once(self) -> None:
        """Test that m identifiers and n secrets form m x n pairs."""
        tokens = ExtractedTokens(
            identifiers=[ACCESS_KEY_ID, OTHER_ACCESS_KEY_ID],
            secrets=[SECRET_ACCESS_KEY, OTHER_SECRET_ACCESS_KEY, "s" * 40],
        )
        pairs = make_pairs(_unit(), tokens)

        combos = [(p.identifier, p.secret) for p in pairs]
        assert len(combos) == 6
        assert len(set(combos)) == 6
        assert all(p.provenance == _unit().provenance for p in pairs)

    def test_no_pairs_without_both_kinds(self) -> None:
        """Test that one-sided tokens form no pairs."""
        assert make_pairs(_unit(), ExtractedTokens(identifiers=[ACCESS_KEY_ID])) == []


class TestValidateUnit:
    """Tests for validating the pairs of one unit."""

    @pytest.mark.asyncio
    async def test_each_pair_probed_once(self) -> None:
        """Test that the validator sees every pair exactly once."""
        validator = ScriptedValidator()
        tokens = ExtractedTokens(
            identifiers=[ACCESS_KEY_ID, OTHER_ACCESS_KEY_ID],
            secrets=[SECRET_ACCESS_KEY, OTHER_SECRET_ACCESS_KEY],
        )
        coordinator = _coordinator(validator)

        await coordinator.validate_unit(_unit(), tokens)

        assert sorted(validator.calls) == sorted(
            [
                (ACCESS_KEY_ID, SECRET_ACCESS_KEY),
                (ACCESS_KEY_ID, OTHER_SECRET_ACCESS_KEY),
                (OTHER_ACCESS_KEY_ID, SECRET_ACCESS_KEY),
                (OTHER_ACCESS_KEY_ID, OTHER_SECRET_ACCESS_KEY),
            ]
        )
        assert coordinator.pairs_validated == 4

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "outcome,reported",
        [
            (ValidationOutcome.CONFIRMED, True),
            (ValidationOutcome.AUTHENTICATED_NO_PERMISSION, True),
            (ValidationOutcome.INVALID_IDENTIFIER, False),
            (ValidationOutcome.MISMATCHED_SECRET, False),
            (ValidationOutcome.INCONCLUSIVE, False),
        ],
    )
    async def test_only_live_outcomes_become_findings(
        self, outcome: ValidationOutcome, reported: bool
    ) -> None:
        """Test the classification to finding mapping."""
        validator = ScriptedValidator({(ACCESS_KEY_ID, SECRET_ACCESS_KEY): outcome})
        coordinator = _coordinator(validator)
        tokens = ExtractedTokens(identifiers=[ACCESS_KEY_ID], secrets=[SECRET_ACCESS_KEY])

        findings = await coordinator.validate_unit(_unit(), tokens)

        assert (len(findings) == 1) is reported
        assert len(coordinator.aggregator) == (1 if reported else 0)
        assert coordinator.outcome_counts[outcome] == 1
        if reported:
            finding = findings[0]
            assert finding.identifier == ACCESS_KEY_ID
            assert finding.secret == SECRET_ACCESS_KEY
            assert finding.file_path == "settings.ini"
            assert finding.branch == "main"

    @pytest.mark.asyncio
    async def test_validator_exception_is_inconclusive(self) -> None:
        """Test that a crashing validator never aborts the unit."""
        validator = ScriptedValidator(error=RuntimeError("boom"))
        coordinator = _coordinator(validator)
        tokens = ExtractedTokens(identifiers=[ACCESS_KEY_ID], secrets=[SECRET_ACCESS_KEY])

        findings = await coordinator.validate_unit(_unit(), tokens)

        assert findings == []
        assert coordinator.outcome_counts[ValidationOutcome.INCONCLUSIVE] == 1

    @pytest.mark.asyncio
    async def test_timeout_is_inconclusive(self) -> None:
        """Test that a probe exceeding the timeout counts as inconclusive."""
        validator = ScriptedValidator(
            {(ACCESS_KEY_ID, SECRET_ACCESS_KEY): ValidationOutcome.CONFIRMED}, delay=0.5
        )
        coordinator = _coordinator(validator, timeout=0.05)
        tokens = ExtractedTokens(identifiers=[ACCESS_KEY_ID], secrets=[SECRET_ACCESS_KEY])

        findings = await coordinator.validate_unit(_unit(), tokens)

        assert findings == []
        assert coordinator.outcome_counts[ValidationOutcome.INCONCLUSIVE] == 1

    @pytest.mark.asyncio
    async def test_concurrency_never_exceeds_bound(self) -> None:
        """Test that at most ``concurrency`` probes run at the same time."""
        validator = ScriptedValidator(delay=0.02)
        coordinator = _coordinator(validator, concurrency=3)
        tokens = ExtractedTokens(
            identifiers=[f"{i:020d}" for i in range(4)],
            secrets=[f"{i:040d}" for i in range(4)],
        )

        await coordinator.validate_unit(_unit(), tokens)

        assert len(validator.calls) == 16
        assert 1 <= validator.max_in_flight <= 3

    @pytest.mark.asyncio
    async def test_timed_out_call_keeps_its_slot(self) -> None:
        """Test that a call abandoned on timeout still counts against the bound."""
        validator = ScriptedValidator(delay=0.3)
        coordinator = _coordinator(validator, concurrency=1, timeout=0.05)
        tokens = ExtractedTokens(
            identifiers=[ACCESS_KEY_ID, OTHER_ACCESS_KEY_ID], secrets=[SECRET_ACCESS_KEY]
        )

        await coordinator.validate_unit(_unit(), tokens)
        await asyncio.sleep(0.4)

        assert len(validator.calls) == 2
        assert validator.max_in_flight == 1
        assert coordinator.outcome_counts[ValidationOutcome.INCONCLUSIVE] == 2

    @pytest.mark.asyncio
    async def test_probes_run_concurrently(self) -> None:
        """Test that pairs of one unit are validated in parallel."""
        validator = ScriptedValidator(delay=0.1)
        coordinator = _coordinator(validator, concurrency=4)
        tokens = ExtractedTokens(
            identifiers=[ACCESS_KEY_ID, OTHER_ACCESS_KEY_ID],
            secrets=[SECRET_ACCESS_KEY, OTHER_SECRET_ACCESS_KEY],
        )

        loop = asyncio.get_running_loop()
        start = loop.time()
        await coordinator.validate_unit(_unit(), tokens)
        elapsed = loop.time() - start

        assert validator.max_in_flight > 1
        assert elapsed < 0.4

    def test_concurrency_must_be_positive(self) -> None:
        """Test that a zero bound is rejected."""
        with pytest.raises(ValueError):
            _coordinator(ScriptedValidator(), concurrency=0)
