"""Adapters connecting model runtimes to the harness protocols.

Modules:
    langchain: LangChain-backed Agent, Judge and SyntheticUser
"""

from src.evalkit.adapters.langchain import (
    LangChainAgent,
    LangChainJudge,
    LangChainSyntheticUser,
    from_langchain_message,
    judge_from_settings,
    synthetic_user_from_settings,
    to_langchain_message,
)

__all__ = [
    "LangChainAgent",
    "LangChainJudge",
    "LangChainSyntheticUser",
    "from_langchain_message",
    "to_langchain_message",
    "judge_from_settings",
    "synthetic_user_from_settings",
]
