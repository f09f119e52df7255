"""Criteria: named judgments over a transcript.

This package contains the Criterion contract, its combinators, and the
built-in criteria.

Modules:
    criterion: Criterion base class, CriterionResult, combinators
    assertion: Judge-backed natural-language assertions
    faithfulness: Judge-backed claim support checking
    tools_called: Checks over the tool calls an agent made
    scorer: Threshold wrapper around numeric scorers
    mock: Fixed-result criterion for tests
    models: Structured output schemas for judges
    prompts: Judge prompt templates
"""

from src.evalkit.criteria.assertion import AssertionCriterion, ai_assertion
from src.evalkit.criteria.criterion import (
    Criterion,
    CriterionResult,
    CriterionStatus,
    and_,
    negate,
    pipe,
)
from src.evalkit.criteria.faithfulness import (
    FaithfulnessCriterion,
    faithfulness_criterion,
)
from src.evalkit.criteria.mock import MockCriterion
from src.evalkit.criteria.models import (
    AssertionVerdict,
    FaithfulnessClaim,
    FaithfulnessVerdict,
)
from src.evalkit.criteria.scorer import Score, ScorerCriterion
from src.evalkit.criteria.tools_called import (
    ToolCallAssertion,
    ToolCallsCriterion,
    ToolsCalledCriterion,
    ToolsCalledOutput,
    ai_tool_calls,
    ai_tools_called,
    extract_tool_calls,
)

__all__ = [
    # Contract
    "Criterion",
    "CriterionResult",
    "CriterionStatus",
    "and_",
    "negate",
    "pipe",
    # Assertion
    "AssertionCriterion",
    "ai_assertion",
    # Faithfulness
    "FaithfulnessCriterion",
    "faithfulness_criterion",
    # Tool calls
    "ToolCallAssertion",
    "ToolCallsCriterion",
    "ToolsCalledCriterion",
    "ToolsCalledOutput",
    "ai_tool_calls",
    "ai_tools_called",
    "extract_tool_calls",
    # Scorers
    "Score",
    "ScorerCriterion",
    # Testing
    "MockCriterion",
    # Judge schemas
    "AssertionVerdict",
    "FaithfulnessClaim",
    "FaithfulnessVerdict",
]
