"""BiasScope configuration — loaded from environment / .env file."""

from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # --- Hosted bias classifiers ---------------------------------------
    huggingface_token: str = ""
    huggingface_inference_base_url: str = "https://router.huggingface.co/hf-inference/models"
    bias_detector_model: str = "himel7/bias-detector"
    bias_type_model: str = "maximuspowers/bias-type-classifier"

    # Full endpoint overrides; empty → "{base_url}/{model}"
    bias_detector_url: str = ""
    bias_type_url: str = ""

    inference_timeout: float = 30.0
    max_concurrent_classifications: int = 4

    # --- Chat proxy ----------------------------------------------------
    chat_provider: str = "gateway"  # "gateway" | "openai" | "local"

    # OpenAI-compatible AI gateway (routes "vendor/model" ids)
    ai_gateway_api_key: str = ""
    ai_gateway_base_url: str = "https://ai-gateway.vercel.sh/v1"

    # OpenAI
    openai_api_key: str = ""

    # Local / Ollama
    local_llm_base_url: str = "http://localhost:11434/v1"

    default_chat_model: str = "openai/gpt-5"
    chat_models: str = "openai/gpt-5,anthropic/claude-3.5-sonnet"  # comma-separated, one per panel
    default_chat_temperature: float = 0.7
    chat_timeout: float = 60.0

    # --- Server ---------------------------------------------------------
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "info"
    allowed_origins: str = "*"  # comma-separated origins, e.g. "http://localhost:3000,https://app.example.com"

    @field_validator("huggingface_inference_base_url", "ai_gateway_base_url", "local_llm_base_url")
    @classmethod
    def _strip_trailing_slashes(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def chat_model_list(self) -> list[str]:
        return [m.strip() for m in self.chat_models.split(",") if m.strip()]

    @property
    def origin_list(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Build the process-wide settings once; injected via ``Depends(get_settings)``."""
    return Settings()
