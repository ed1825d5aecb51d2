"""Language model providers, tried in order until one initialises."""

from typing import Protocol

from pydantic_ai.models import Model
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider

from src.utils.logging import get_logger

from .config import VideoQAConfig
from .errors import LLMUnavailable, NoFallbackConfigured

logger = get_logger(__name__)


class ModelProvider(Protocol):
    """Something that can build a pydantic-ai model."""

    name: str

    def create_model(self) -> Model:
        """Build the model.

        Raises:
            LLMUnavailable: If the model cannot be initialised.
        """
        ...


class OpenAICompatibleProvider:
    """Provider for OpenAI or any OpenAI-compatible endpoint (TogetherAI, Ollama)."""

    def __init__(self, name: str, model_name: str, base_url: str, api_key: str):
        self.name = name
        self.model_name = model_name
        self.base_url = base_url
        self.api_key = api_key

    def create_model(self) -> Model:
        if not self.api_key:
            raise LLMUnavailable(f"No API key configured for the {self.name} model")

        try:
            return OpenAIChatModel(
                self.model_name,
                provider=OpenAIProvider(base_url=self.base_url, api_key=self.api_key),
            )
        except Exception as e:
            raise LLMUnavailable(
                f"Could not initialise {self.name} model {self.model_name}: {e}"
            ) from e


def get_model_providers(config: VideoQAConfig) -> list[ModelProvider]:
    """Build the provider chain from configuration.

    The primary model always comes first. A fallback is appended only when
    FALLBACK_LLM_CHOICE is set.

    Args:
        config: Configuration object with LLM settings.

    Returns:
        Providers in the order they should be tried.
    """
    providers: list[ModelProvider] = [
        OpenAICompatibleProvider(
            "primary",
            config.llm_choice,
            config.llm_base_url or "https://api.openai.com/v1",
            config.llm_api_key,
        )
    ]

    if config.fallback_llm_choice:
        providers.append(
            OpenAICompatibleProvider(
                "fallback",
                config.fallback_llm_choice,
                config.fallback_llm_base_url or config.llm_base_url,
                config.fallback_llm_api_key,
            )
        )

    return providers


def resolve_model(providers: list[ModelProvider]) -> Model:
    """Return the model of the first provider that initialises.

    Args:
        providers: Providers in priority order.

    Returns:
        The first successfully created model.

    Raises:
        NoFallbackConfigured: If the only configured provider failed.
        LLMUnavailable: If every provider in a longer chain failed.
    """
    if not providers:
        raise NoFallbackConfigured("No language model provider configured.")

    last_error: LLMUnavailable | None = None
    for provider in providers:
        try:
            model = provider.create_model()
        except LLMUnavailable as e:
            logger.warning(
                "model_provider_failed",
                provider=provider.name,
                error=str(e),
            )
            last_error = e
            continue

        logger.info("model_provider_selected", provider=provider.name)
        return model

    if len(providers) == 1:
        raise NoFallbackConfigured(
            f"Primary LLM failed and no fallback configured: {last_error}"
        ) from last_error

    raise LLMUnavailable(
        f"All {len(providers)} language model providers failed: {last_error}"
    ) from last_error
