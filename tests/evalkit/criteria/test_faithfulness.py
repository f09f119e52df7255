"""Tests for the judge-backed faithfulness criterion.

Tests cover:
- Score computation and threshold handling
- Context selection (prompt used, tool calls, history)
- Transcripts without an assistant response
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from src.evalkit.criteria.faithfulness import (
    NO_RESPONSE_REASON,
    FaithfulnessCriterion,
    faithfulness_criterion,
)
from src.evalkit.criteria.models import FaithfulnessClaim, FaithfulnessVerdict
from src.evalkit.interfaces import JudgeResult
from src.evalkit.messages import (
    AgentResponseGenerationContext,
    AIMessage,
    SystemMessage,
    ToolCall,
    UserMessage,
)


# =============================================================================
# Fixtures
# =============================================================================


def make_judge(*claims: tuple[str, bool]) -> AsyncMock:
    """Create a judge mock returning the given (claim, supported) pairs."""
    judge = AsyncMock()
    judge.invoke.return_value = JudgeResult(
        output=FaithfulnessVerdict(
            results=[FaithfulnessClaim(claim=c, supported=s) for c, s in claims]
        )
    )
    return judge


def judge_prompt(judge: AsyncMock) -> str:
    messages, _schema = judge.invoke.await_args.args
    return messages[0].content


@pytest.fixture
def conversation() -> list:
    return [
        SystemMessage(content="Our store opens at 9am."),
        UserMessage(content="When do you open?"),
        AIMessage(content="We open at 9am and close at 5pm."),
    ]


# =============================================================================
# FaithfulnessVerdict
# =============================================================================


class TestFaithfulnessVerdict:
    """Tests for FaithfulnessVerdict.score."""

    def test_no_claims_scores_one(self) -> None:
        assert FaithfulnessVerdict().score == 1.0

    def test_fraction_supported(self) -> None:
        verdict = FaithfulnessVerdict(
            results=[
                FaithfulnessClaim(claim="a", supported=True),
                FaithfulnessClaim(claim="b", supported=False),
                FaithfulnessClaim(claim="c", supported=True),
                FaithfulnessClaim(claim="d", supported=True),
            ]
        )
        assert verdict.score == 0.75


# =============================================================================
# FaithfulnessCriterion
# =============================================================================


class TestFaithfulnessCriterion:
    """Tests for faithfulness_criterion()."""

    @pytest.mark.asyncio
    async def test_fully_supported(self, conversation: list) -> None:
        criterion = faithfulness_criterion(judge=make_judge(("Opens at 9am", True)))
        result = await criterion.evaluate(conversation)

        assert criterion.name == "faithfulness"
        assert result.status == "success"
        assert result.reason is None
        assert result.output.score == 1.0

    @pytest.mark.asyncio
    async def test_unsupported_claim_fails_default_threshold(self, conversation: list) -> None:
        """Test that a single unsupported claim fails the default threshold."""
        judge = make_judge(("Opens at 9am", True), ("Closes at 5pm", False))
        result = await faithfulness_criterion(judge=judge).evaluate(conversation)

        assert result.status == "failure"
        assert result.output.score == 0.5
        assert result.reason == "Unsupported claims: Closes at 5pm"

    @pytest.mark.asyncio
    async def test_threshold_is_inclusive(self, conversation: list) -> None:
        judge = make_judge(("Opens at 9am", True), ("Closes at 5pm", False))
        result = await faithfulness_criterion(judge=judge, score_threshold=0.5).evaluate(
            conversation
        )
        assert result.status == "success"

    @pytest.mark.asyncio
    async def test_no_claims_succeeds(self, conversation: list) -> None:
        result = await faithfulness_criterion(judge=make_judge()).evaluate(conversation)
        assert result.status == "success"
        assert result.output.results == []

    @pytest.mark.parametrize("threshold", [-0.1, 1.5])
    def test_threshold_out_of_range(self, threshold: float) -> None:
        with pytest.raises(ValueError, match="between 0 and 1"):
            FaithfulnessCriterion(judge=make_judge(), score_threshold=threshold)

    @pytest.mark.asyncio
    async def test_uses_history_as_context(self, conversation: list) -> None:
        """Test that the conversation before the response is the context."""
        judge = make_judge()
        await faithfulness_criterion(judge=judge).evaluate(conversation)

        prompt = judge_prompt(judge)
        assert "<system>Our store opens at 9am.</system>" in prompt
        assert "<user>When do you open?</user>" in prompt
        assert "<response>\nWe open at 9am and close at 5pm.\n</response>" in prompt

    @pytest.mark.asyncio
    async def test_prefers_reported_prompt_and_tool_results(self) -> None:
        """Test that the agent's reported prompt and tool results form the context."""
        response = AIMessage(
            content="It is 21 degrees in Paris.",
            context=AgentResponseGenerationContext(
                prompt_used=[UserMessage(content="Weather in Paris?")],
                tool_calls=[
                    ToolCall(
                        id="c1",
                        name="get_weather",
                        args={"city": "Paris"},
                        result={"celsius": 21},
                    )
                ],
            ),
        )
        judge = make_judge(("21 degrees in Paris", True))
        await faithfulness_criterion(judge=judge).evaluate(
            [UserMessage(content="Hidden history"), response]
        )

        prompt = judge_prompt(judge)
        assert "<user>Weather in Paris?</user>" in prompt
        assert "Hidden history" not in prompt
        assert '<tool-call name="get_weather">' in prompt
        assert 'result: {"celsius": 21}' in prompt

    @pytest.mark.asyncio
    async def test_judges_last_response(self) -> None:
        """Test that trailing user messages are skipped when finding the response."""
        judge = make_judge()
        await faithfulness_criterion(judge=judge).evaluate(
            [
                UserMessage(content="Q1"),
                AIMessage(content="first answer"),
                UserMessage(content="Q2"),
                AIMessage(content="second answer"),
                UserMessage(content="thanks"),
            ]
        )

        prompt = judge_prompt(judge)
        assert "<response>\nsecond answer\n</response>" in prompt
        assert "<assistant>first answer</assistant>" in prompt

    @pytest.mark.asyncio
    async def test_no_assistant_response_is_failure(self) -> None:
        """Test that a transcript without a response fails without consulting the judge."""
        judge = make_judge()
        result = await faithfulness_criterion(judge=judge).evaluate([UserMessage(content="Hi")])

        assert result.status == "failure"
        assert result.reason == NO_RESPONSE_REASON
        assert result.output == FaithfulnessVerdict()
        judge.invoke.assert_not_awaited()
