"""
LLM Factory - Factory Pattern Implementation
Centralized factory for creating LLM instances with different providers.
"""
from typing import Optional
from langchain_core.language_models.chat_models import BaseChatModel

from core.llm_providers import (
    LLMProvider,
    GeminiProvider,
    OpenAIProvider,
)


class LLMFactory:
    """
    Factory class for creating LLM instances.
    The configured provider name selects the implementation.
    """

    # Registry of available providers
    _providers: dict[str, type[LLMProvider]] = {
        "gemini": GeminiProvider,
        "openai": OpenAIProvider,
    }

    @classmethod
    def create(
        cls,
        provider_name: str,
        model: Optional[str] = None,
        temperature: float = 0.0,
        response_schema: Optional[dict] = None,
        **provider_kwargs
    ) -> BaseChatModel:
        """
        Create an LLM instance using the specified provider.

        Args:
            provider_name: Name of the provider ("gemini", "openai")
            model: Optional model name (uses provider default if None)
            temperature: Temperature setting (0.0 - 1.0)
            response_schema: Optional JSON schema enforcing a JSON reply
            **provider_kwargs: Provider constructor arguments (api_key, timeout)

        Returns:
            Configured LLM instance

        Raises:
            ValueError: If provider is not registered
            RuntimeError: If provider configuration is invalid

        Examples:
            >>> llm = LLMFactory.create("gemini", api_key="...")
            >>> llm = LLMFactory.create("openai", api_key="...", model="gpt-4o")
        """
        provider_name = provider_name.lower()

        if provider_name not in cls._providers:
            available = ", ".join(cls._providers.keys())
            raise ValueError(
                f"Unknown provider: '{provider_name}'. "
                f"Available providers: {available}"
            )

        # Instantiate provider and create LLM
        provider_class = cls._providers[provider_name]
        provider = provider_class(**provider_kwargs)

        return provider.create_llm(
            model=model,
            temperature=temperature,
            response_schema=response_schema,
        )
