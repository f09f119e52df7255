"""Chat model construction for judges and synthetic users.

Judges and synthetic users are LangChain chat models. This module maps a
model identifier to its provider and builds the matching LangChain class,
so scenarios can name models with plain strings.

Key Classes:
    LLMProvider: Enum of supported providers.
    ChatModelConfig: Immutable parameters for one chat model.
    ChatModelFactory: Builds chat models from identifiers or configs.

Supported Model Prefixes:
    - OpenAI: ``gpt-*``, ``o1*``, ``o3*``, ``o4*``, ``chatgpt-*``
    - Anthropic: ``claude-*``
    - Google: ``gemini-*``
    - Ollama: ``ollama/*`` (e.g., ``ollama/llama3.2``)

Example:
    >>> judge_llm = ChatModelFactory.create("gpt-4.1-mini", temperature=0.0)
    >>> user_llm = ChatModelFactory.create_from_config(
    ...     ChatModelConfig(model="claude-3-5-haiku-latest", temperature=0.7)
    ... )
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_ollama import ChatOllama
from langchain_openai import ChatOpenAI

from src.evalkit.exceptions import UnsupportedModelError


logger = logging.getLogger(__name__)


class LLMProvider(Enum):
    """Supported chat model providers."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"
    OLLAMA = "ollama"


# OpenAI reasoning model families reject a temperature parameter
_REASONING_FAMILIES = ("o1", "o3", "o4")

_OLLAMA_PREFIX = "ollama/"


def _is_reasoning_model(model: str) -> bool:
    """Return True for OpenAI reasoning models (``o1``, ``o3-mini``, ...)."""
    lowered = model.lower()
    return any(
        lowered == family or lowered.startswith(f"{family}-")
        for family in _REASONING_FAMILIES
    )


@dataclass(frozen=True)
class ChatModelConfig:
    """Parameters for building one chat model.

    Attributes:
        model: Model identifier (e.g., "gpt-4.1-mini", "ollama/llama3.2").
        temperature: Sampling temperature. Judges should use 0.0.
        seed: Optional seed, honored by OpenAI only.
        base_url: Optional endpoint override (OpenAI-compatible servers,
            remote Ollama).
        extra_kwargs: Provider-specific constructor arguments.
    """

    model: str
    temperature: float = 0.0
    seed: int | None = None
    base_url: str | None = None
    extra_kwargs: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.model:
            raise ValueError("Model identifier cannot be empty")
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError(
                f"Temperature must be between 0.0 and 2.0, got {self.temperature}"
            )


class ChatModelFactory:
    """Builds LangChain chat models from model identifiers.

    Provider detection is by prefix; see the module docstring for the list.
    Parameters a provider does not support (seed, base URL) are dropped
    with a debug log rather than an error.
    """

    _PREFIX_TO_PROVIDER: dict[str, LLMProvider] = {
        "gpt-": LLMProvider.OPENAI,
        "chatgpt-": LLMProvider.OPENAI,
        "o1": LLMProvider.OPENAI,
        "o3": LLMProvider.OPENAI,
        "o4": LLMProvider.OPENAI,
        "claude-": LLMProvider.ANTHROPIC,
        "gemini-": LLMProvider.GOOGLE,
        _OLLAMA_PREFIX: LLMProvider.OLLAMA,
    }

    @classmethod
    def supported_prefixes(cls) -> list[str]:
        """Return every recognized model prefix."""
        return list(cls._PREFIX_TO_PROVIDER)

    @classmethod
    def detect_provider(cls, model: str) -> LLMProvider:
        """Detect the provider of a model identifier.

        Args:
            model: Model identifier.

        Returns:
            The detected provider.

        Raises:
            UnsupportedModelError: If no known prefix matches.
        """
        lowered = model.lower()
        for prefix, provider in cls._PREFIX_TO_PROVIDER.items():
            if not lowered.startswith(prefix):
                continue
            # Bare families like "o1" must not swallow e.g. "o1x-model"
            if prefix in _REASONING_FAMILIES and not _is_reasoning_model(lowered):
                continue
            return provider
        raise UnsupportedModelError(model, cls.supported_prefixes())

    @classmethod
    def create(
        cls,
        model: str,
        temperature: float = 0.0,
        seed: int | None = None,
        base_url: str | None = None,
        **extra_kwargs: Any,
    ) -> BaseChatModel:
        """Build a chat model from parameters.

        Args:
            model: Model identifier.
            temperature: Sampling temperature.
            seed: Optional seed (OpenAI only).
            base_url: Optional endpoint override.
            **extra_kwargs: Provider-specific constructor arguments.

        Returns:
            The chat model.

        Raises:
            UnsupportedModelError: If the model identifier is not recognized.
            ValueError: If a parameter is invalid.
        """
        return cls.create_from_config(
            ChatModelConfig(
                model=model,
                temperature=temperature,
                seed=seed,
                base_url=base_url,
                extra_kwargs=extra_kwargs,
            )
        )

    @classmethod
    def create_from_config(cls, config: ChatModelConfig) -> BaseChatModel:
        """Build a chat model from a configuration object.

        Args:
            config: The model configuration.

        Returns:
            The chat model.

        Raises:
            UnsupportedModelError: If the model identifier is not recognized.
        """
        provider = cls.detect_provider(config.model)
        builders: dict[LLMProvider, Callable[[ChatModelConfig], BaseChatModel]] = {
            LLMProvider.OPENAI: cls._build_openai,
            LLMProvider.ANTHROPIC: cls._build_anthropic,
            LLMProvider.GOOGLE: cls._build_google,
            LLMProvider.OLLAMA: cls._build_ollama,
        }
        logger.debug("Building %s chat model '%s'", provider.value, config.model)
        return builders[provider](config)

    @staticmethod
    def _drop_unsupported(config: ChatModelConfig, *, seed: bool, base_url: bool) -> None:
        if seed and config.seed is not None:
            logger.debug("Seed ignored for model '%s'", config.model)
        if base_url and config.base_url is not None:
            logger.debug("Base URL ignored for model '%s'", config.model)

    @classmethod
    def _build_openai(cls, config: ChatModelConfig) -> BaseChatModel:
        kwargs: dict[str, Any] = {"model": config.model, **config.extra_kwargs}
        if _is_reasoning_model(config.model):
            if config.temperature != 0.0:
                logger.warning(
                    "Model '%s' does not support temperature; ignoring %.2f",
                    config.model,
                    config.temperature,
                )
        else:
            kwargs["temperature"] = config.temperature
        if config.seed is not None:
            kwargs["seed"] = config.seed
        if config.base_url is not None:
            kwargs["base_url"] = config.base_url
        return ChatOpenAI(**kwargs)

    @classmethod
    def _build_anthropic(cls, config: ChatModelConfig) -> BaseChatModel:
        cls._drop_unsupported(config, seed=True, base_url=False)
        kwargs: dict[str, Any] = {
            "model": config.model,
            "temperature": config.temperature,
            **config.extra_kwargs,
        }
        if config.base_url is not None:
            kwargs["base_url"] = config.base_url
        return ChatAnthropic(**kwargs)

    @classmethod
    def _build_google(cls, config: ChatModelConfig) -> BaseChatModel:
        cls._drop_unsupported(config, seed=True, base_url=True)
        return ChatGoogleGenerativeAI(
            model=config.model,
            temperature=config.temperature,
            **config.extra_kwargs,
        )

    @classmethod
    def _build_ollama(cls, config: ChatModelConfig) -> BaseChatModel:
        cls._drop_unsupported(config, seed=True, base_url=False)
        kwargs: dict[str, Any] = {
            "model": config.model[len(_OLLAMA_PREFIX):],
            "temperature": config.temperature,
            **config.extra_kwargs,
        }
        if config.base_url is not None:
            kwargs["base_url"] = config.base_url
        return ChatOllama(**kwargs)
