"""Core data models for keyhound.

This module defines the Pydantic models used to report findings and scan
results, plus the small transient records that flow between the traversal,
extraction and validation stages of a scan.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SourceType(str, Enum):
    """How a piece of content was observed in the repository."""

    SNAPSHOT = "snapshot"
    HISTORY = "history"


class ValidationOutcome(str, Enum):
    """Result of probing a single identifier/secret pair."""

    CONFIRMED = "confirmed"
    AUTHENTICATED_NO_PERMISSION = "authenticated_no_permission"
    INVALID_IDENTIFIER = "invalid_identifier"
    MISMATCHED_SECRET = "mismatched_secret"
    INCONCLUSIVE = "inconclusive"

    @property
    def is_live(self) -> bool:
        """Whether this outcome proves the pair is a working credential."""
        return self in (
            ValidationOutcome.CONFIRMED,
            ValidationOutcome.AUTHENTICATED_NO_PERMISSION,
        )


class Finding(BaseModel):
    """A confirmed-live credential pair and where it was observed.

    Findings are immutable values: two findings are equal (and hash equal)
    exactly when all seven fields are equal, which is what deduplication
    relies on. The commit message is the full message with trailing
    newlines removed.
    """

    model_config = ConfigDict(frozen=True)

    file_path: str = Field(..., description="Path of the file where the pair was observed")
    commit_hash: str = Field(..., description="Commit whose content produced the observation")
    branch: str = Field(..., description="Short name of the branch being scanned")
    author: str = Field(..., description="Commit author formatted as 'Name <email>'")
    message: str = Field(..., description="Full commit message, trailing newlines removed")
    identifier: str = Field(..., description="Access key identifier")
    secret: str = Field(..., description="Secret access key")

    def sort_key(self) -> tuple[str, ...]:
        """Key giving reports a stable order."""
        return (
            self.branch,
            self.file_path,
            self.commit_hash,
            self.identifier,
            self.secret,
            self.author,
            self.message,
        )


@dataclass(frozen=True)
class Provenance:
    """Where a piece of content came from."""

    file_path: str
    commit_hash: str
    branch: str
    author: str
    message: str

    def finding(self, identifier: str, secret: str) -> Finding:
        return Finding(
            file_path=self.file_path,
            commit_hash=self.commit_hash,
            branch=self.branch,
            author=self.author,
            message=self.message,
            identifier=identifier,
            secret=secret,
        )


@dataclass(frozen=True)
class ContentUnit:
    """A blob or diff chunk handed to the token extractor.

    Attributes:
        content: Raw bytes of the file or of the added diff lines.
        provenance: File, commit, branch, author and message of the content.
        source: Whether the content is a full tip snapshot or a diff chunk.
    """

    content: bytes
    provenance: Provenance
    source: SourceType = SourceType.SNAPSHOT

    @property
    def text(self) -> str:
        try:
            return self.content.decode("utf-8")
        except UnicodeDecodeError:
            # latin-1 maps every byte, so it cannot fail
            return self.content.decode("latin-1")


@dataclass(frozen=True)
class CandidatePair:
    """One identifier/secret combination awaiting validation."""

    identifier: str
    secret: str
    provenance: Provenance

    def to_finding(self) -> Finding:
        return self.provenance.finding(self.identifier, self.secret)


class ScanDiagnostic(BaseModel):
    """A non-fatal problem encountered during a scan.

    Diagnostics are reported separately from findings so that a scan which
    hit errors still delivers every finding it confirmed.
    """

    stage: str = Field(..., description="Pipeline stage that failed (traversal, validation)")
    message: str = Field(..., description="Human-readable description of the problem")
    branch: str | None = Field(default=None, description="Branch being scanned, if any")
    context: dict[str, Any] = Field(default_factory=dict, description="Additional error context")


class ScanResult(BaseModel):
    """Represents the complete result of a repository scan.

    Contains the deduplicated findings, the diagnostics collected along the
    way, and statistics and timing information.
    """

    target_path: str = Field(..., description="The repository that was scanned")
    findings: list[Finding] = Field(default_factory=list, description="Deduplicated findings")
    diagnostics: list[ScanDiagnostic] = Field(
        default_factory=list,
        description="Traversal and validation problems that did not stop the scan",
    )
    scan_duration: float = Field(default=0.0, description="Duration of the scan in seconds")
    stats: dict[str, Any] = Field(
        default_factory=dict,
        description="Statistics about the scan (branches, units, validations)",
    )
