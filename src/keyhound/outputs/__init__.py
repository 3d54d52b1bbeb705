"""Output formatter classes for keyhound.

This module provides the base output interface and registry for managing
output formatters that render scan results in different formats.
"""

from abc import ABC, abstractmethod

from keyhound.core.models import ScanResult


class BaseOutput(ABC):
    """Abstract base class for all output formatters.

    Subclasses must implement the `name` property and `format` method
    to provide specific formatting logic for different output types.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique name of this output formatter (e.g., 'json')."""
        pass

    @abstractmethod
    def format(self, result: ScanResult) -> str:
        """Format a scan result for output.

        Args:
            result: The ScanResult to format.

        Returns:
            A formatted string representation of the scan result.
        """
        pass


class OutputRegistry:
    """Registry for retrieving output formatter instances by name."""

    def __init__(self) -> None:
        self._outputs: dict[str, BaseOutput] = {}

    def register(self, output: BaseOutput) -> None:
        """Register an output formatter instance.

        Raises:
            ValueError: If a formatter with the same name is already registered.
        """
        if output.name in self._outputs:
            raise ValueError(f"Output formatter '{output.name}' is already registered")
        self._outputs[output.name] = output

    def get(self, name: str) -> BaseOutput:
        """Retrieve an output formatter by name.

        Raises:
            KeyError: If no formatter with the given name is registered.
        """
        if name not in self._outputs:
            raise KeyError(f"Output formatter '{name}' is not registered")
        return self._outputs[name]

    def list_names(self) -> list[str]:
        return list(self._outputs.keys())

    def __len__(self) -> int:
        return len(self._outputs)

    def __contains__(self, name: str) -> bool:
        return name in self._outputs


def _build_default_registry() -> OutputRegistry:
    from keyhound.outputs.json_output import JsonOutput
    from keyhound.outputs.table_output import TableOutput
    from keyhound.outputs.text_output import TextOutput

    registry = OutputRegistry()
    for output in (TextOutput(), JsonOutput(), TableOutput()):
        registry.register(output)
    return registry


def get_formatter(name: str) -> BaseOutput:
    """Return the built-in formatter registered under ``name``.

    Raises:
        KeyError: If ``name`` is not one of the built-in formats.
    """
    return _build_default_registry().get(name)


__all__ = ["BaseOutput", "OutputRegistry", "get_formatter"]
