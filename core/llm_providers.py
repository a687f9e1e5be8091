"""
LLM Providers - Strategy Pattern Implementation
Each provider is a separate class following the Strategy Pattern.

Providers receive their credential at construction time; nothing here reads
process-wide configuration, so a provider (or the chat model it builds) can
be swapped for a test double.
"""
from abc import ABC, abstractmethod
from typing import Optional
from langchain_openai import ChatOpenAI
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_core.language_models.chat_models import BaseChatModel


class LLMProvider(ABC):
    """
    Abstract Base Class for LLM Providers (Strategy Pattern).
    All providers must implement this interface.
    """

    @abstractmethod
    def create_llm(
        self,
        model: Optional[str] = None,
        temperature: float = 0.0,
        response_schema: Optional[dict] = None,
    ) -> BaseChatModel:
        """
        Create and return an LLM instance.

        Args:
            model: Model identifier (uses default if None)
            temperature: Temperature setting
            response_schema: JSON schema the reply must follow (JSON mode if set)

        Returns:
            Configured LLM instance
        """
        pass

    @abstractmethod
    def validate_configuration(self) -> None:
        """Validate that provider configuration is complete."""
        pass

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Return the default model for this provider."""
        pass


class GeminiProvider(LLMProvider):
    """Google Gemini LLM Provider Implementation."""

    def __init__(self, api_key: Optional[str] = None, timeout: Optional[float] = None):
        """
        Initialize Gemini provider.

        Args:
            api_key: GEMINI_API_KEY credential
            timeout: Request timeout in seconds (None waits indefinitely)
        """
        self.api_key = api_key
        self.timeout = timeout
        self.validate_configuration()

    @property
    def default_model(self) -> str:
        return "gemini-3.1-pro-preview"

    def validate_configuration(self) -> None:
        """Validate Gemini configuration."""
        if not self.api_key:
            raise RuntimeError(
                "Gemini configuration incomplete. "
                "Set GEMINI_API_KEY in your .env file."
            )

    def create_llm(
        self,
        model: Optional[str] = None,
        temperature: float = 0.0,
        response_schema: Optional[dict] = None,
    ) -> BaseChatModel:
        """
        Create Gemini LLM instance.

        With a response schema the model runs in JSON mode and generation is
        constrained to the schema. Single attempt, no retries.
        """
        json_mode = {}
        if response_schema is not None:
            json_mode = {
                "response_mime_type": "application/json",
                "response_schema": response_schema,
            }
        return ChatGoogleGenerativeAI(
            google_api_key=self.api_key,
            model=model or self.default_model,
            temperature=temperature,
            timeout=self.timeout,
            max_retries=0,
            **json_mode,
        )


class OpenAIProvider(LLMProvider):
    """OpenAI LLM Provider Implementation."""

    def __init__(self, api_key: Optional[str] = None, timeout: Optional[float] = None):
        """
        Initialize OpenAI provider.

        Args:
            api_key: OPENAI_API_KEY credential
            timeout: Request timeout in seconds (None waits indefinitely)
        """
        self.api_key = api_key
        self.timeout = timeout
        self.validate_configuration()

    @property
    def default_model(self) -> str:
        return "gpt-5.1"

    def validate_configuration(self) -> None:
        """Validate OpenAI configuration."""
        if not self.api_key:
            raise RuntimeError(
                "OpenAI configuration incomplete. "
                "Set OPENAI_API_KEY in your .env file."
            )

    def create_llm(
        self,
        model: Optional[str] = None,
        temperature: float = 0.0,
        response_schema: Optional[dict] = None,
    ) -> BaseChatModel:
        """
        Create OpenAI LLM instance.

        OpenAI only gets JSON-object mode; the schema itself travels in the
        prompt. Single attempt, no retries.
        """
        model_kwargs = {}
        if response_schema is not None:
            model_kwargs["response_format"] = {"type": "json_object"}
        return ChatOpenAI(
            api_key=self.api_key,
            model=model or self.default_model,
            temperature=temperature,
            timeout=self.timeout,
            max_retries=0,
            model_kwargs=model_kwargs,
        )
