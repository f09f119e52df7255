"""Structured output schemas for judge-backed criteria.

These Pydantic models are handed to a Judge, which fills them in from a
transcript (with LangChain, through ``.with_structured_output()``).

Classes:
    AssertionVerdict: Truth value of an assertion about a conversation.
    FaithfulnessClaim: A single claim and whether the context supports it.
    FaithfulnessVerdict: Every claim extracted from a response.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


# =============================================================================
# Assertion
# =============================================================================


class AssertionVerdict(BaseModel):
    """Structured verdict on an assertion about a conversation.

    Attributes:
        verdict: True if the assertion holds for the conversation.
        reason: Why the assertion fails. Null when it holds.

    Example:
        >>> AssertionVerdict(verdict=False, reason="The assistant never greeted.")
    """

    verdict: bool = Field(
        ...,
        description="True if the assertion is correct, false otherwise",
    )
    reason: str | None = Field(
        default=None,
        description=(
            "If false, explain why the assertion fails. "
            "Null if the assertion passes."
        ),
    )


# =============================================================================
# Faithfulness
# =============================================================================


class FaithfulnessClaim(BaseModel):
    """A factual claim made in a response."""

    claim: str = Field(..., description="A single factual claim, stated on its own")
    supported: bool = Field(
        ...,
        description="True if the claim is supported by the provided context",
    )


class FaithfulnessVerdict(BaseModel):
    """Every factual claim extracted from a response.

    Attributes:
        results: The claims, in the order they appear in the response.
    """

    results: list[FaithfulnessClaim] = Field(
        default_factory=list,
        description="Every factual claim made in the response",
    )

    @property
    def score(self) -> float:
        """Return the fraction of supported claims.

        Returns:
            1.0 when there are no claims, otherwise supported / total.
        """
        if not self.results:
            return 1.0
        return sum(1 for r in self.results if r.supported) / len(self.results)
