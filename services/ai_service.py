"""
Serviço de IA: insights de gastos, categorização e perguntas livres
"""

import time
from functools import lru_cache, partial
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from config.settings import Settings, get_settings
from models.schemas import (
    AIInsight,
    CategorySuggestion,
    ExpenseCategory,
    ExpenseRecord,
    InsightType,
)
from services.ai_client import AIErrorKind, AIServiceError, ChatCompletionClient
from services.fallbacks import (
    RATE_LIMITED_ANSWER,
    UNAVAILABLE_ANSWER,
    FallbackPolicy,
    rate_limited_insights,
    run_with_fallback,
    unavailable_insights,
)
from services.keyword_classifier import classify_expense
from utils.helpers import extract_json_payload, to_json


INSIGHTS_SYSTEM_PROMPT = (
    "You are a financial advisor AI that analyzes spending patterns and provides "
    "actionable insights. Always respond with valid JSON only."
)

CATEGORIZE_SYSTEM_PROMPT = (
    "You are an expense categorization AI. Categorize expenses into one of these "
    "categories: {categories}. Respond with only the category name."
)

ANSWER_SYSTEM_PROMPT = (
    "You are a helpful financial advisor AI that provides specific, actionable answers "
    "based on expense data. Be concise but thorough."
)

DEFAULT_INSIGHT_TITLE = "AI Insight"
DEFAULT_INSIGHT_MESSAGE = "Analysis complete"
DEFAULT_INSIGHT_CONFIDENCE = 0.8

MIN_DESCRIPTION_LENGTH = 2


class AIService:
    """Serviço para processamento de IA"""

    def __init__(self, settings: Optional[Settings] = None, completion_client: Optional[ChatCompletionClient] = None):
        self.settings = settings or get_settings()
        self.completion_client = completion_client or ChatCompletionClient(self.settings)

    @property
    def model(self) -> str:
        return self.completion_client.model

    async def generate_expense_insights(self, expenses: Sequence[ExpenseRecord]) -> List[AIInsight]:
        """Gerar 3-4 insights acionáveis sobre os gastos"""
        return await run_with_fallback(
            "insights",
            self._request_insights(expenses),
            FallbackPolicy(on_rate_limited=rate_limited_insights, on_failure=unavailable_insights),
        )

    async def categorize_expense(self, description: str) -> ExpenseCategory:
        """Categorizar gasto pela IA; em falha usa as palavras-chave locais"""
        local = partial(classify_expense, description)
        return await run_with_fallback(
            "categorização",
            self._request_category(description),
            FallbackPolicy(on_rate_limited=local, on_failure=local),
        )

    async def generate_ai_answer(self, question: str, expenses: Sequence[ExpenseRecord]) -> str:
        """Responder pergunta livre com base nos gastos"""
        return await run_with_fallback(
            "resposta",
            self._request_answer(question, expenses),
            FallbackPolicy(
                on_rate_limited=lambda: RATE_LIMITED_ANSWER,
                on_failure=lambda: UNAVAILABLE_ANSWER,
            ),
        )

    async def suggest_category(self, description: Optional[str]) -> CategorySuggestion:
        """Sugerir categoria para o formulário de gasto"""
        text = (description or "").strip()
        if len(text) < MIN_DESCRIPTION_LENGTH:
            return CategorySuggestion(
                category=ExpenseCategory.OTHER,
                error="Description too short for analysis",
            )

        category = await self.categorize_expense(text)
        return CategorySuggestion(category=category)

    async def _request_insights(self, expenses: Sequence[ExpenseRecord]) -> List[AIInsight]:
        prompt = self._create_insights_prompt(expenses)

        logger.info(f"🧠 Gerando insights para {len(expenses)} gastos com {self.model}")
        response = await self.completion_client.complete(
            [
                {"role": "system", "content": INSIGHTS_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=0.7,
            max_tokens=1000,
        )

        insights = self._parse_insights(response)
        logger.info(f"✅ {len(insights)} insights gerados")
        return insights

    async def _request_category(self, description: str) -> ExpenseCategory:
        categories = ", ".join(cat.value for cat in ExpenseCategory)

        response = await self.completion_client.complete(
            [
                {"role": "system", "content": CATEGORIZE_SYSTEM_PROMPT.format(categories=categories)},
                {"role": "user", "content": f'Categorize this expense: "{description}"'},
            ],
            temperature=0.1,
            max_tokens=20,
            allow_empty=True,
        )

        answer = response.strip()
        category = ExpenseCategory.coerce(answer)
        if category is ExpenseCategory.OTHER and answer != ExpenseCategory.OTHER.value:
            logger.warning(f"🚨 Categoria inválida '{answer}', usando 'Other'")

        return category

    async def _request_answer(self, question: str, expenses: Sequence[ExpenseRecord]) -> str:
        prompt = self._create_answer_prompt(question, expenses)

        response = await self.completion_client.complete(
            [
                {"role": "system", "content": ANSWER_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=0.7,
            max_tokens=200,
        )

        return response.strip()

    def _summarize_expenses(self, expenses: Sequence[ExpenseRecord]) -> str:
        """Projeção dos gastos (valor, categoria, descrição, data) em JSON"""
        return to_json([expense.to_prompt_dict() for expense in expenses])

    def _create_insights_prompt(self, expenses: Sequence[ExpenseRecord]) -> str:
        """Criar prompt para geração de insights"""
        return f"""Analyze the following expense data and provide 3-4 actionable financial insights.
Return a JSON array of insights with this structure:
{{
  "type": "warning|info|success|tip",
  "title": "Brief title",
  "message": "Detailed insight message with specific numbers when possible",
  "action": "Actionable suggestion",
  "confidence": 0.8
}}

Expense Data:
{self._summarize_expenses(expenses)}

Focus on:
1. Spending patterns (day of week, categories)
2. Budget alerts (high spending areas)
3. Money-saving opportunities
4. Positive reinforcement for good habits

Return only valid JSON array, no additional text."""

    def _create_answer_prompt(self, question: str, expenses: Sequence[ExpenseRecord]) -> str:
        """Criar prompt para resposta a pergunta livre"""
        return f"""Based on the following expense data, provide a detailed and actionable answer to this question: "{question}"

Expense Data:
{self._summarize_expenses(expenses)}

Provide a comprehensive answer that:
1. Addresses the specific question directly
2. Uses concrete data from the expenses when possible
3. Offers actionable advice
4. Keeps the response concise but informative (2-3 sentences)

Return only the answer text, no additional formatting."""

    def _parse_insights(self, ai_response: str) -> List[AIInsight]:
        """Parsear resposta da IA em lista de insights com valores padrão"""
        data = extract_json_payload(ai_response)

        if isinstance(data, dict):
            data = data["insights"] if isinstance(data.get("insights"), list) else [data]
        if not isinstance(data, list):
            raise AIServiceError(AIErrorKind.PARSE_FAILURE, f"Esperado array JSON, recebido {type(data).__name__}")

        timestamp = int(time.time() * 1000)
        insights = []
        for index, raw in enumerate(data):
            if not isinstance(raw, dict):
                logger.warning(f"🚨 Insight ignorado (não é objeto): {raw!r}")
                continue
            insights.append(self._build_insight(raw, f"ai-{timestamp}-{index}"))

        return insights

    @staticmethod
    def _build_insight(raw: Dict[str, Any], insight_id: str) -> AIInsight:
        try:
            insight_type = InsightType(raw.get("type"))
        except ValueError:
            insight_type = InsightType.INFO

        confidence = raw.get("confidence")
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)) or not confidence:
            confidence = DEFAULT_INSIGHT_CONFIDENCE

        action = raw.get("action")

        return AIInsight(
            id=insight_id,
            type=insight_type,
            title=str(raw.get("title") or DEFAULT_INSIGHT_TITLE),
            message=str(raw.get("message") or DEFAULT_INSIGHT_MESSAGE),
            action=str(action) if action else None,
            confidence=min(max(float(confidence), 0.0), 1.0),
        )


@lru_cache()
def get_ai_service() -> AIService:
    """Obter serviço de IA (cached)"""
    return AIService()
