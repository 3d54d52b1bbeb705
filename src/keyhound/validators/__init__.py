"""Validator classes for keyhound.

A validator answers one question: is this (identifier, secret) pair a
working credential right now? It does so with exactly one remote probe and
reports a ValidationOutcome.
"""

from abc import ABC, abstractmethod

from keyhound.core.models import ValidationOutcome


class BaseValidator(ABC):
    """Abstract base class for all validators.

    Subclasses must implement the `name` property and `validate` method.
    ``validate`` is a blocking call; the coordinator runs it in a worker
    thread and must be able to call it concurrently.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique name of this validator (e.g., 'iam')."""

    @abstractmethod
    def validate(self, identifier: str, secret: str) -> ValidationOutcome:
        """Probe the remote service once with the given pair.

        Args:
            identifier: Access key identifier candidate.
            secret: Secret key candidate.

        Returns:
            The classified outcome of the probe. Implementations never raise
            for remote failures; those map to ``ValidationOutcome.INCONCLUSIVE``.
        """


from keyhound.validators.iam import ERROR_CODE_OUTCOMES, IamValidator, classify_error_code

__all__ = [
    "BaseValidator",
    "ERROR_CODE_OUTCOMES",
    "IamValidator",
    "classify_error_code",
]
