"""
Política única de fallback para as chamadas de IA

Toda falha é classificada em rate limit (429) ou falha genérica, e a
resposta degradada correspondente é devolvida em vez da exceção.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, List, TypeVar

from loguru import logger

from models.schemas import AIInsight, InsightType
from services.ai_client import AIErrorKind, classify_error


T = TypeVar("T")


RATE_LIMITED_ANSWER = (
    "The AI service is currently rate limited. Your question will be answered once "
    "the service is available again. Please try again in a few minutes."
)

UNAVAILABLE_ANSWER = (
    "I'm unable to provide a detailed answer at the moment. Please try refreshing "
    "the insights or check your connection."
)


def rate_limited_insights() -> List[AIInsight]:
    return [
        AIInsight(
            id="fallback-rate-limit",
            type=InsightType.WARNING,
            title="AI Analysis Rate Limited",
            message=(
                "AI service is temporarily rate limited. Your expenses are still being "
                "tracked normally. Try refreshing in a few minutes."
            ),
            action="Try again later",
            confidence=0.7,
        )
    ]


def unavailable_insights() -> List[AIInsight]:
    return [
        AIInsight(
            id="fallback-1",
            type=InsightType.INFO,
            title="AI Analysis Unavailable",
            message="Unable to generate personalized insights at this time. Please try again later.",
            action="Refresh insights",
            confidence=0.5,
        )
    ]


@dataclass(frozen=True)
class FallbackPolicy(Generic[T]):
    """Respostas degradadas para cada tipo de falha"""
    on_rate_limited: Callable[[], T]
    on_failure: Callable[[], T]

    def resolve(self, kind: AIErrorKind) -> T:
        if kind is AIErrorKind.RATE_LIMITED:
            return self.on_rate_limited()
        return self.on_failure()


async def run_with_fallback(label: str, operation: Awaitable[T], policy: FallbackPolicy[T]) -> T:
    """Aguardar a operação; qualquer exceção vira o fallback da política"""
    try:
        return await operation
    except Exception as e:
        kind = classify_error(e)
        logger.error(f"❌ Erro em {label} ({kind.value}): {e}")

        if kind is AIErrorKind.RATE_LIMITED:
            logger.info(f"🔄 Rate limit atingido em {label}, usando fallback")
        else:
            logger.info(f"🔄 IA indisponível em {label}, usando fallback")

        return policy.resolve(kind)
