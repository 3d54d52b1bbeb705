"""Finding aggregation for keyhound.

The same literal pair is routinely observed more than once: in a tip
snapshot and again in the diff that introduced it, or on several branches
sharing history. Findings are values, so collapsing them is a set union.
"""

import asyncio
from collections.abc import Iterable

from keyhound.core.exceptions import ScanError
from keyhound.core.models import Finding


def aggregate(findings: Iterable[Finding]) -> list[Finding]:
    """Deduplicate findings by full value identity.

    The result is sorted by ``Finding.sort_key`` so reports are stable;
    aggregating an already aggregated list returns an equal list.
    """
    return sorted(set(findings), key=Finding.sort_key)


class FindingAggregator:
    """Collects the findings of one scan.

    Validation tasks only ever append through ``add``, which is serialized
    by a lock. ``finalize`` deduplicates once and freezes the collection.
    """

    def __init__(self) -> None:
        self._findings: list[Finding] = []
        self._lock = asyncio.Lock()
        self._final: list[Finding] | None = None

    @property
    def is_finalized(self) -> bool:
        return self._final is not None

    async def add(self, finding: Finding) -> None:
        """Append a finding.

        Raises:
            ScanError: If the aggregator has already been finalized.
        """
        async with self._lock:
            if self._final is not None:
                raise ScanError("Cannot add findings after the report was finalized")
            self._findings.append(finding)

    def finalize(self) -> list[Finding]:
        """Deduplicate the collected findings and freeze the aggregator.

        Returns:
            The deduplicated findings; repeated calls return the same list
            contents.
        """
        if self._final is None:
            self._final = aggregate(self._findings)
            self._findings = []
        return list(self._final)

    def __len__(self) -> int:
        """Number of findings collected so far, duplicates included."""
        if self._final is not None:
            return len(self._final)
        return len(self._findings)
