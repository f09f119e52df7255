"""Exceptions raised by the evaluation harness.

Classes:
    EvalKitError: Base exception for all harness errors.
    ScriptingError: A scenario's segments are ordered incorrectly.
    CriterionResultNotFoundError: A criterion has no result in a run.
    AdapterError: An adapter could not produce a usable response.
    UnsupportedModelError: A model identifier matches no provider.

Note:
    Exceptions raised by agents, judges and synthetic users are never
    wrapped; they propagate to the caller of ``evaluate`` unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from src.evalkit.criteria.criterion import Criterion


class EvalKitError(Exception):
    """Base exception for evaluation harness errors."""

    pass


class ScriptingError(EvalKitError):
    """Raised when a scenario's segments are scripted in an invalid order.

    Attributes:
        segment: Name of the offending segment kind (e.g. ``"ai_eval"``).
        criterion_name: Name of the criterion involved, if any.
    """

    def __init__(
        self,
        segment: str,
        message: str,
        criterion_name: str | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            segment: Name of the offending segment kind.
            message: Human-readable error description.
            criterion_name: Name of the criterion involved, if any.
        """
        detail = f"{segment}: {message}"
        if criterion_name is not None:
            detail = f"{segment}('{criterion_name}'): {message}"
        super().__init__(detail)
        self.segment = segment
        self.criterion_name = criterion_name


class CriterionResultNotFoundError(EvalKitError, LookupError):
    """Raised when looking up a criterion that produced no result in a run.

    Attributes:
        criterion: The criterion instance that was looked up.
    """

    def __init__(self, criterion: Criterion) -> None:
        """Initialize the error.

        Args:
            criterion: The criterion instance that was looked up.
        """
        super().__init__(f"Cannot find results for criterion '{criterion.name}'")
        self.criterion = criterion


class AdapterError(EvalKitError):
    """Raised when an adapter cannot turn a model response into a message."""

    pass


class UnsupportedModelError(EvalKitError):
    """Raised when a model identifier matches no known provider.

    Attributes:
        model: The unrecognized model identifier.
        supported_prefixes: Prefixes that would have been recognized.
    """

    def __init__(self, model: str, supported_prefixes: list[str]) -> None:
        """Initialize the error.

        Args:
            model: The unrecognized model identifier.
            supported_prefixes: Prefixes that would have been recognized.
        """
        self.model = model
        self.supported_prefixes = supported_prefixes
        super().__init__(
            f"Unsupported model identifier: '{model}'. "
            f"Supported prefixes: {', '.join(supported_prefixes)}"
        )
