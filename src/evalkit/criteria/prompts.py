"""Prompt templates for judge-backed criteria.

The judge receives a single system message built from one of these
templates, with the conversation rendered as role-tagged blocks.

Constants:
    ASSERTION_PROMPT_TEMPLATE: Judge prompt for assertion checks.
    FAITHFULNESS_PROMPT_TEMPLATE: Judge prompt for claim extraction.

Functions:
    format_conversation: Render messages as role-tagged blocks.
    format_tool_calls: Render tool calls and their results.
"""

from __future__ import annotations

import json
from collections.abc import Sequence

from src.evalkit.messages import Message, ToolCall, message_text


# =============================================================================
# Assertion Prompt
# =============================================================================

ASSERTION_PROMPT_TEMPLATE = """You are a judge.

You evaluate the truth value of an assertion based on a given prompt.
The prompt is a statement about a conversation between the AI assistant and the user.

You need to determine if the conversation satisfies the assertion.

Assertion prompt:
<assertion-prompt>
{assertion}
</assertion-prompt>

Conversation between AI and user:
<conversation>
{conversation}
</conversation>"""


# =============================================================================
# Faithfulness Prompt
# =============================================================================

FAITHFULNESS_PROMPT_TEMPLATE = """You are a judge checking an AI assistant's response for faithfulness.

1. Break the response down into individual factual claims.
2. For each claim, decide whether it is supported by the context below.
   A claim is supported only if the context states or directly implies it.
   Do not use outside knowledge.

If the response makes no factual claims, return an empty list.

Context:
<context>
{context}
</context>

Response:
<response>
{response}
</response>"""


# =============================================================================
# Formatting Helpers
# =============================================================================


def format_conversation(messages: Sequence[Message]) -> str:
    """Render messages as ``<role>content</role>`` blocks.

    Args:
        messages: The messages to render.

    Returns:
        The rendered conversation, blocks separated by blank lines.
    """
    return "\n\n".join(
        f"<{m.role}>{message_text(m)}</{m.role}>" for m in messages
    )


def format_tool_calls(tool_calls: Sequence[ToolCall]) -> str:
    """Render tool calls and their results for a judge prompt.

    Args:
        tool_calls: The tool calls to render.

    Returns:
        One ``<tool-call>`` block per call, or an empty string.
    """
    blocks = []
    for call in tool_calls:
        result = json.dumps(call.result, default=str) if call.result is not None else "unknown"
        blocks.append(
            f'<tool-call name="{call.name}">\n'
            f"args: {json.dumps(call.args, default=str)}\n"
            f"result: {result}\n"
            f"</tool-call>"
        )
    return "\n\n".join(blocks)
