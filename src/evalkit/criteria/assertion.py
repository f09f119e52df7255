"""Judge-backed assertion criterion.

Asks a Judge whether a natural-language assertion about the conversation
holds, e.g. "The assistant greeted the user".
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from src.evalkit.criteria.criterion import Criterion, CriterionResult
from src.evalkit.criteria.models import AssertionVerdict
from src.evalkit.criteria.prompts import ASSERTION_PROMPT_TEMPLATE, format_conversation
from src.evalkit.interfaces import Judge
from src.evalkit.messages import Message, SystemMessage


logger = logging.getLogger(__name__)


class AssertionCriterion(Criterion[bool]):
    """Checks a natural-language assertion about the conversation.

    The criterion's name is the assertion prompt itself. Its output is the
    judge's verdict, and the status follows the verdict.

    Attributes:
        prompt: The assertion to check.
        judge: Judge used to extract the verdict.
    """

    def __init__(self, prompt: str, judge: Judge) -> None:
        """Initialize the criterion.

        Args:
            prompt: The assertion to check.
            judge: Judge used to extract the verdict.
        """
        super().__init__(prompt)
        self.prompt = prompt
        self.judge = judge

    async def evaluate(self, messages: Sequence[Message]) -> CriterionResult[bool]:
        """Ask the judge whether the assertion holds for ``messages``.

        Args:
            messages: The conversation to judge.

        Returns:
            CriterionResult with the boolean verdict as output. A blank
            reason is dropped.
        """
        judge_prompt = ASSERTION_PROMPT_TEMPLATE.format(
            assertion=self.prompt,
            conversation=format_conversation(messages),
        )
        response = await self.judge.invoke(
            [SystemMessage(content=judge_prompt)],
            AssertionVerdict,
        )
        verdict: AssertionVerdict = response.output

        logger.debug("Assertion '%s' judged %s", self.prompt, verdict.verdict)

        reason = verdict.reason.strip() if verdict.reason else None
        return CriterionResult(
            output=verdict.verdict,
            reason=reason or None,
            status="success" if verdict.verdict else "failure",
        )


def ai_assertion(prompt: str, judge: Judge) -> Criterion[bool]:
    """Create a criterion checking ``prompt`` against the conversation.

    Args:
        prompt: A statement about the conversation.
        judge: Judge used to extract the verdict.

    Returns:
        The assertion criterion.
    """
    return AssertionCriterion(prompt=prompt, judge=judge)
