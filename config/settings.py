"""
Configurações da aplicação
"""

from typing import Optional
from functools import lru_cache

from pydantic_settings import BaseSettings
from pydantic import Field, ConfigDict


class Settings(BaseSettings):
    """Configurações da aplicação"""

    app_name: str = Field(default="ExpenseTracker AI")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    log_dir: str = Field(default="logs")

    openrouter_api_key: Optional[str] = Field(default=None, description="Chave da API OpenRouter")
    openai_api_key: Optional[str] = Field(default=None, description="Chave secundária (OpenAI)")
    openai_base_url: str = Field(default="https://openrouter.ai/api/v1")
    openai_model: str = Field(default="deepseek/deepseek-chat-v3-0324:free")

    app_url: str = Field(default="http://localhost:3000", description="Enviado como HTTP-Referer")
    app_title: str = Field(default="ExpenseTracker AI", description="Enviado como X-Title")

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def api_key(self) -> Optional[str]:
        """Credencial efetiva: OpenRouter primeiro, OpenAI como fallback"""
        return self.openrouter_api_key or self.openai_api_key


@lru_cache()
def get_settings() -> Settings:
    """Obter configurações (cached)"""
    return Settings()
