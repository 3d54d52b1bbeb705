"""JSON output formatter for keyhound.

Serializes the whole scan result, findings, diagnostics and statistics
included, using Pydantic's model serialization.
"""

from keyhound.core.models import ScanResult
from keyhound.outputs import BaseOutput


class JsonOutput(BaseOutput):
    """Output formatter that serializes ScanResult to formatted JSON.

    Example:
        formatter = JsonOutput()
        print(formatter.format(scan_result))
    """

    @property
    def name(self) -> str:
        """Return the formatter name."""
        return "json"

    def format(self, result: ScanResult) -> str:
        """Format a scan result as indented JSON."""
        return result.model_dump_json(indent=2)
