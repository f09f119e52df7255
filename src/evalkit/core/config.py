"""Harness settings.

Settings are loaded with pydantic-settings from, in order of precedence:
explicit constructor arguments, ``EVALKIT_``-prefixed environment
variables, then defaults.

Environment Variables:
    EVALKIT_JUDGE_MODEL=gpt-4.1-mini
    EVALKIT_JUDGE_TEMPERATURE=0.0
    EVALKIT_USER_MODEL=gpt-4.1-mini
    EVALKIT_USER_TEMPERATURE=0.7
    EVALKIT_LOG_LEVEL=DEBUG

Example:
    >>> settings = EvalKitSettings(judge_model="claude-3-5-haiku-latest")
    >>> settings.judge_model_config().temperature
    0.0
    >>> configure_logging(settings)
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.evalkit.core.llm_config import ChatModelConfig


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class EvalKitSettings(BaseSettings):
    """Settings for judges, synthetic users and logging.

    Attributes:
        judge_model: Model identifier of the judge LLM.
        judge_temperature: Sampling temperature of the judge.
        user_model: Model identifier of the synthetic user LLM.
        user_temperature: Sampling temperature of the synthetic user.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """

    model_config = SettingsConfigDict(
        env_prefix="EVALKIT_",
        case_sensitive=False,
        extra="ignore",
    )

    judge_model: str = Field(
        default="gpt-4.1-mini",
        min_length=1,
        description="Model identifier of the judge LLM",
    )
    judge_temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=2.0,
        description="Sampling temperature of the judge",
    )
    user_model: str = Field(
        default="gpt-4.1-mini",
        min_length=1,
        description="Model identifier of the synthetic user LLM",
    )
    user_temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature of the synthetic user",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        """Normalize log level to uppercase."""
        if isinstance(v, str):
            return v.upper()
        return v

    def judge_model_config(self) -> ChatModelConfig:
        """Return the chat model configuration of the judge."""
        return ChatModelConfig(model=self.judge_model, temperature=self.judge_temperature)

    def user_model_config(self) -> ChatModelConfig:
        """Return the chat model configuration of the synthetic user."""
        return ChatModelConfig(model=self.user_model, temperature=self.user_temperature)


def configure_logging(settings: EvalKitSettings) -> None:
    """Configure root logging for an application running evaluations.

    The library itself never installs handlers; call this from scripts or
    test sessions that want log output.

    Args:
        settings: Settings providing the log level.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format=LOG_FORMAT,
    )
