"""Scenario-driven evaluation harness for conversational AI agents.

A scenario is an ordered list of segments. Running it against an agent
replays the scripted messages, substitutes the agent's real responses,
simulates users where asked, and evaluates criteria over the resulting
transcript.

Subpackages:
    criteria: Criterion contract, combinators and built-in criteria
    adapters: LangChain-backed agents, judges and synthetic users
    core: Settings, logging setup and chat model factory

Modules:
    messages: Transcript message models
    interfaces: Agent, Judge and SyntheticUser protocols
    segments: Segment kinds and their events
    runner: The evaluation engine
    exceptions: Exception hierarchy

Example:
    >>> from src.evalkit import (
    ...     UserMessage, agent_response, ai_eval, evaluate, message, MockCriterion,
    ... )
    >>> run = await evaluate(
    ...     agent=my_agent,
    ...     segments=[
    ...         message(UserMessage(content="Hi")),
    ...         agent_response(),
    ...         ai_eval(politeness),
    ...     ],
    ... )
    >>> run.success
    True
"""

from src.evalkit.criteria import (
    Criterion,
    CriterionResult,
    CriterionStatus,
    MockCriterion,
    Score,
    ScorerCriterion,
    ToolCallAssertion,
    ai_assertion,
    ai_tool_calls,
    ai_tools_called,
    and_,
    extract_tool_calls,
    faithfulness_criterion,
    negate,
    pipe,
)
from src.evalkit.exceptions import (
    AdapterError,
    CriterionResultNotFoundError,
    EvalKitError,
    ScriptingError,
    UnsupportedModelError,
)
from src.evalkit.interfaces import (
    Agent,
    AgentFactory,
    AgentInvocationResult,
    Judge,
    JudgeResult,
    SyntheticUser,
)
from src.evalkit.messages import (
    AgentResponseGenerationContext,
    AIMessage,
    Message,
    SystemMessage,
    ToolCall,
    ToolResultMessage,
    UserMessage,
    parse_message,
)
from src.evalkit.runner import EvaluatedSegment, EvaluationRunResult, evaluate
from src.evalkit.segments import (
    DEFAULT_MAX_TURNS,
    EvalEvent,
    MessageEvent,
    PendingEvalEvent,
    Segment,
    agent_response,
    ai_eval,
    message,
    user_simulation,
)

__all__ = [
    # Engine
    "evaluate",
    "EvaluationRunResult",
    "EvaluatedSegment",
    # Segments
    "Segment",
    "message",
    "agent_response",
    "ai_eval",
    "user_simulation",
    "DEFAULT_MAX_TURNS",
    "MessageEvent",
    "PendingEvalEvent",
    "EvalEvent",
    # Messages
    "Message",
    "SystemMessage",
    "UserMessage",
    "AIMessage",
    "ToolResultMessage",
    "ToolCall",
    "AgentResponseGenerationContext",
    "parse_message",
    # Collaborators
    "Agent",
    "AgentFactory",
    "AgentInvocationResult",
    "Judge",
    "JudgeResult",
    "SyntheticUser",
    # Criteria
    "Criterion",
    "CriterionResult",
    "CriterionStatus",
    "MockCriterion",
    "Score",
    "ScorerCriterion",
    "ToolCallAssertion",
    "ai_assertion",
    "ai_tool_calls",
    "ai_tools_called",
    "extract_tool_calls",
    "faithfulness_criterion",
    "and_",
    "negate",
    "pipe",
    # Exceptions
    "EvalKitError",
    "ScriptingError",
    "CriterionResultNotFoundError",
    "AdapterError",
    "UnsupportedModelError",
]
