"""Plain text output formatter for keyhound.

Renders one block per finding:

    Branch: main
    File: config/settings.py
    Commit Hash: 3f2c...
    Author: Jane Doe <jane@example.com>
    Message: add settings
    Access Key: AKIA...
    Secret Key: ...

Each block is followed by a blank line. Secrets are printed in full.
"""

from keyhound.core.models import Finding, ScanResult
from keyhound.outputs import BaseOutput


def format_finding(finding: Finding) -> str:
    """Render a single finding as a text block (without the trailing blank line)."""
    return "\n".join(
        [
            f"Branch: {finding.branch}",
            f"File: {finding.file_path}",
            f"Commit Hash: {finding.commit_hash}",
            f"Author: {finding.author}",
            f"Message: {finding.message}",
            f"Access Key: {finding.identifier}",
            f"Secret Key: {finding.secret}",
        ]
    )


class TextOutput(BaseOutput):
    """Output formatter that renders findings as plain text blocks."""

    @property
    def name(self) -> str:
        return "text"

    def format(self, result: ScanResult) -> str:
        return "".join(f"{format_finding(finding)}\n\n" for finding in result.findings)
