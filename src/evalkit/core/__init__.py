"""Core infrastructure shared by the harness.

Modules:
    config: pydantic-settings configuration and logging setup
    llm_config: Chat model factory for judges and synthetic users
"""

from src.evalkit.core.config import LOG_FORMAT, EvalKitSettings, configure_logging
from src.evalkit.core.llm_config import ChatModelConfig, ChatModelFactory, LLMProvider

__all__ = [
    # Settings
    "EvalKitSettings",
    "LOG_FORMAT",
    "configure_logging",
    # Chat models
    "ChatModelConfig",
    "ChatModelFactory",
    "LLMProvider",
]
