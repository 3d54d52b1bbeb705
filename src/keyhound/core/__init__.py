# Core module for keyhound

from keyhound.core.exceptions import (
    ConfigError,
    GitCommandError,
    KeyhoundError,
    OutputError,
    ScanError,
    TraversalError,
    ValidationInconclusive,
)
from keyhound.core.models import (
    CandidatePair,
    ContentUnit,
    Finding,
    Provenance,
    ScanDiagnostic,
    ScanResult,
    SourceType,
    ValidationOutcome,
)

__all__ = [
    "CandidatePair",
    "ConfigError",
    "ContentUnit",
    "Finding",
    "GitCommandError",
    "KeyhoundError",
    "OutputError",
    "Provenance",
    "ScanDiagnostic",
    "ScanError",
    "ScanResult",
    "SourceType",
    "TraversalError",
    "ValidationInconclusive",
    "ValidationOutcome",
]
