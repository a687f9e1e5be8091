"""
Application settings and configuration.
"""
from pydantic_settings import BaseSettings
from pydantic import Field, ConfigDict
from dotenv import load_dotenv

# Load .env file explicitly
load_dotenv()

class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ========== Gradio Settings ==========
    APP_NAME: str = "Layout Reverse Engineering"
    APP_DESCRIPTION: str = "Dental Implant Industry"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 7860
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Upload hint shown in the UI (not enforced)
    MAX_UPLOAD_MB: int = 10

    # ========== LLM Settings ==========
    ANALYSIS_PROVIDER: str = "gemini"
    MODEL_NAME: str | None = None
    TEMPERATURE: float = 0.0
    # None means no client-side timeout
    REQUEST_TIMEOUT: float | None = None

    # Gemini LLM Configuration
    GEMINI_API_KEY: str | None = Field(None, validation_alias="GEMINI_API_KEY")

    # OpenAI LLM Configuration
    OPENAI_API_KEY: str | None = Field(None, validation_alias="OPENAI_API_KEY")

    model_config = ConfigDict(
            env_file=".env",
            env_file_encoding="utf-8",
            case_sensitive=False
        )

    def api_key_for(self, provider_name: str) -> str | None:
        """Return the credential configured for a provider."""
        keys = {
            "gemini": self.GEMINI_API_KEY,
            "openai": self.OPENAI_API_KEY,
        }
        return keys.get(provider_name.lower())

# Create settings instance
settings = Settings()
