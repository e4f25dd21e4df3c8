"""
Cliente de chat completion (OpenRouter via SDK OpenAI) com erros tipados
"""

import json
from enum import Enum
from typing import Any, Dict, List, Optional

import openai
from openai import AsyncOpenAI
from loguru import logger

from config.settings import Settings, get_settings


RATE_LIMIT_STATUS = 429


class AIErrorKind(str, Enum):
    """Classificação das falhas da chamada remota"""
    RATE_LIMITED = "rate_limited"
    UNAVAILABLE = "unavailable"
    PARSE_FAILURE = "parse_failure"


class AIServiceError(Exception):
    """Falha da IA já classificada"""

    def __init__(self, kind: AIErrorKind, message: str):
        super().__init__(message)
        self.kind = kind


def _is_rate_limit_status(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value == RATE_LIMIT_STATUS
    if isinstance(value, str):
        return value.strip() == str(RATE_LIMIT_STATUS)
    return False


def classify_error(error: BaseException) -> AIErrorKind:
    """Classificar qualquer exceção em rate limit, indisponibilidade ou parse"""
    if isinstance(error, AIServiceError):
        return error.kind

    if isinstance(error, openai.RateLimitError):
        return AIErrorKind.RATE_LIMITED

    for attr in ("status_code", "status", "code"):
        if _is_rate_limit_status(getattr(error, attr, None)):
            return AIErrorKind.RATE_LIMITED

    if isinstance(error, (json.JSONDecodeError, ValueError, KeyError, TypeError)):
        return AIErrorKind.PARSE_FAILURE

    return AIErrorKind.UNAVAILABLE


def create_openai_client(settings: Settings) -> AsyncOpenAI:
    """Criar AsyncOpenAI apontando para o OpenRouter"""
    if not settings.api_key:
        logger.warning("⚠️ Nenhuma chave de API configurada (OPENROUTER_API_KEY / OPENAI_API_KEY)")

    return AsyncOpenAI(
        base_url=settings.openai_base_url,
        # chave vazia: as chamadas falham com 401 e caem no fallback
        api_key=settings.api_key or "",
        default_headers={
            "HTTP-Referer": settings.app_url,
            "X-Title": settings.app_title,
        },
    )


class ChatCompletionClient:
    """Transporte para o endpoint de chat completion"""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[AsyncOpenAI] = None):
        self.settings = settings or get_settings()
        self.model = self.settings.openai_model
        self.client = client if client is not None else create_openai_client(self.settings)

    async def complete(
        self,
        messages: List[Dict[str, str]],
        temperature: float,
        max_tokens: int,
        allow_empty: bool = False
    ) -> str:
        """Enviar mensagens e retornar o conteúdo da primeira escolha"""
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens
            )
        except Exception as e:
            kind = classify_error(e)
            if kind is AIErrorKind.PARSE_FAILURE:
                kind = AIErrorKind.UNAVAILABLE
            raise AIServiceError(kind, f"Falha na chamada ao modelo {self.model}: {e}") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise AIServiceError(AIErrorKind.PARSE_FAILURE, f"Resposta sem escolhas: {e}") from e

        if not content or not content.strip():
            if allow_empty:
                return ""
            raise AIServiceError(AIErrorKind.PARSE_FAILURE, "No response from AI")

        return content
