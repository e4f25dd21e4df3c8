"""
Testes de integração: serviço de IA, fallbacks e API HTTP
"""

import httpx
import openai
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from fastapi.testclient import TestClient

from config.settings import Settings
from models.schemas import ExpenseCategory, ExpenseRecord, InsightType
from services.ai_service import AIService, get_ai_service
from services.fallbacks import RATE_LIMITED_ANSWER, UNAVAILABLE_ANSWER


def make_rate_limit_error() -> openai.RateLimitError:
    request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
    response = httpx.Response(429, request=request)
    return openai.RateLimitError("Rate limit exceeded", response=response, body=None)


def make_response(content):
    mock_response = MagicMock()
    mock_response.choices[0].message.content = content
    return mock_response


SAMPLE_EXPENSES = [
    ExpenseRecord(id="1", amount=12.5, category="Food", description="Latte at Starbucks", date="2025-10-15"),
    ExpenseRecord(id="2", amount=40, category="Transportation", description="Uber to work", date="2025-10-16"),
    ExpenseRecord(id="3", amount=120, category="Bills", description="Electricity bill", date="2025-10-17"),
]

INSIGHTS_JSON = """[
  {"type": "warning", "title": "High bills", "message": "Bills are 70% of spending", "action": "Review your plan", "confidence": 0.9},
  {"type": "tip", "title": "Coffee", "message": "Brew at home", "action": "Buy a grinder"}
]"""

BACKTICK_JSON = '[{"type": "tip", "title": "Code", "message": "Run ```budget``` weekly", "confidence": 0.9}]'


class CodedError(Exception):
    """Erro com código numérico, como os de clientes HTTP sem SDK"""

    def __init__(self, code):
        super().__init__(f"request failed with code {code}")
        self.code = code


@pytest.fixture
def ai_service():
    """Fixture para o serviço de IA com chave de teste"""
    return AIService(settings=Settings(openrouter_api_key="test-key"))


def mock_create(service):
    return patch.object(service.completion_client.client.chat.completions, 'create', new_callable=AsyncMock)


def without_ids(insights):
    return [insight.model_dump(exclude={"id"}) for insight in insights]


class TestInsightsGeneration:
    """Testes para geração de insights"""

    @pytest.mark.asyncio
    async def test_insights_parsing_and_defaults(self, ai_service):
        """Testar parsing e preenchimento de campos ausentes"""
        with mock_create(ai_service) as create:
            create.return_value = make_response(INSIGHTS_JSON)

            insights = await ai_service.generate_expense_insights(SAMPLE_EXPENSES)

            assert len(insights) == 2
            assert insights[0].type == InsightType.WARNING
            assert insights[0].confidence == 0.9
            assert insights[1].confidence == 0.8
            assert insights[1].action == "Buy a grinder"
            assert all(insight.id.startswith("ai-") for insight in insights)
            assert len({insight.id for insight in insights}) == 2

            kwargs = create.call_args.kwargs
            assert kwargs["temperature"] == 0.7
            assert kwargs["max_tokens"] == 1000
            assert kwargs["model"] == "deepseek/deepseek-chat-v3-0324:free"
            assert "Latte at Starbucks" in kwargs["messages"][1]["content"]
            assert '"amount": 12.5' in kwargs["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_fenced_response_matches_plain(self, ai_service):
        """Testar resposta com bloco ```json igual à resposta sem bloco"""
        with mock_create(ai_service) as create:
            create.return_value = make_response(INSIGHTS_JSON)
            plain = await ai_service.generate_expense_insights(SAMPLE_EXPENSES)

            create.return_value = make_response(f"```json\n{INSIGHTS_JSON}\n```")
            fenced = await ai_service.generate_expense_insights(SAMPLE_EXPENSES)

        assert without_ids(plain) == without_ids(fenced)

    @pytest.mark.asyncio
    async def test_backticks_inside_message(self, ai_service):
        """Crases triplas dentro do texto não truncam o JSON (com e sem bloco)"""
        with mock_create(ai_service) as create:
            for content in (BACKTICK_JSON, f"```json\n{BACKTICK_JSON}\n```"):
                create.return_value = make_response(content)

                insights = await ai_service.generate_expense_insights(SAMPLE_EXPENSES)

                assert len(insights) == 1
                assert insights[0].title == "Code"
                assert insights[0].message == "Run ```budget``` weekly"
                assert insights[0].type == InsightType.TIP
                assert insights[0].confidence == 0.9

    @pytest.mark.asyncio
    async def test_missing_fields_defaults(self, ai_service):
        """Testar valores padrão para elementos incompletos"""
        with mock_create(ai_service) as create:
            create.return_value = make_response('[{}, {"type": "alert", "confidence": "high"}, "junk"]')

            insights = await ai_service.generate_expense_insights(SAMPLE_EXPENSES)

            assert len(insights) == 2
            for insight in insights:
                assert insight.type == InsightType.INFO
                assert insight.title == "AI Insight"
                assert insight.message == "Analysis complete"
                assert insight.action is None
                assert insight.confidence == 0.8

    @pytest.mark.asyncio
    async def test_rate_limit_fallback(self, ai_service):
        """Testar insight de rate limit"""
        with mock_create(ai_service) as create:
            create.side_effect = make_rate_limit_error()

            insights = await ai_service.generate_expense_insights(SAMPLE_EXPENSES)

            assert len(insights) == 1
            assert insights[0].id == "fallback-rate-limit"
            assert insights[0].type == InsightType.WARNING
            assert insights[0].confidence == 0.7

    @pytest.mark.asyncio
    async def test_rate_limit_by_error_code(self, ai_service):
        """Erro com code=429 (sem RateLimitError) também é rate limit"""
        with mock_create(ai_service) as create:
            create.side_effect = CodedError(429)

            insights = await ai_service.generate_expense_insights(SAMPLE_EXPENSES)

            assert [insight.id for insight in insights] == ["fallback-rate-limit"]

    @pytest.mark.asyncio
    async def test_generic_failure_fallback(self, ai_service):
        """Testar insight genérico para falhas de rede e de parsing"""
        with mock_create(ai_service) as create:
            create.side_effect = ConnectionError("network down")
            network = await ai_service.generate_expense_insights(SAMPLE_EXPENSES)

            create.side_effect = None
            create.return_value = make_response("Sorry, I cannot help with that.")
            unparsable = await ai_service.generate_expense_insights(SAMPLE_EXPENSES)

            create.return_value = make_response(None)
            empty = await ai_service.generate_expense_insights(SAMPLE_EXPENSES)

        for insights in (network, unparsable, empty):
            assert len(insights) == 1
            assert insights[0].id == "fallback-1"
            assert insights[0].type == InsightType.INFO
            assert insights[0].confidence == 0.5


class TestCategorization:
    """Testes para categorização de gastos"""

    @pytest.mark.asyncio
    async def test_valid_category(self, ai_service):
        with mock_create(ai_service) as create:
            create.return_value = make_response(" Food \n")

            result = await ai_service.categorize_expense("Dinner at a restaurant")

            assert result == ExpenseCategory.FOOD
            kwargs = create.call_args.kwargs
            assert kwargs["temperature"] == 0.1
            assert kwargs["max_tokens"] == 20

    @pytest.mark.asyncio
    async def test_invalid_or_empty_category(self, ai_service):
        """Respostas fora do conjunto (ou vazias) viram Other"""
        with mock_create(ai_service) as create:
            for content in ("Groceries", "food", "", None):
                create.return_value = make_response(content)

                result = await ai_service.categorize_expense("Dinner at a restaurant")

                assert result == ExpenseCategory.OTHER

    @pytest.mark.asyncio
    async def test_rate_limit_uses_keyword_fallback(self, ai_service):
        """Fallback delega para as palavras-chave locais"""
        with mock_create(ai_service) as create:
            create.side_effect = make_rate_limit_error()

            result = await ai_service.categorize_expense("Dinner at a restaurant")

            assert result == ExpenseCategory.FOOD

    @pytest.mark.asyncio
    async def test_generic_error_uses_keyword_fallback(self, ai_service):
        with mock_create(ai_service) as create:
            create.side_effect = RuntimeError("unexpected")

            assert await ai_service.categorize_expense("Monthly rent") == ExpenseCategory.BILLS
            assert await ai_service.categorize_expense("mystery") == ExpenseCategory.OTHER

    @pytest.mark.asyncio
    async def test_suggest_category_too_short(self, ai_service):
        with mock_create(ai_service) as create:
            suggestion = await ai_service.suggest_category(" a ")

            assert suggestion.category == ExpenseCategory.OTHER
            assert suggestion.error == "Description too short for analysis"
            create.assert_not_called()

    @pytest.mark.asyncio
    async def test_suggest_category_trims_description(self, ai_service):
        with mock_create(ai_service) as create:
            create.return_value = make_response("Healthcare")

            suggestion = await ai_service.suggest_category("  Pharmacy run  ")

            assert suggestion.category == ExpenseCategory.HEALTHCARE
            assert suggestion.error is None
            assert '"Pharmacy run"' in create.call_args.kwargs["messages"][1]["content"]


class TestQuestionAnswering:
    """Testes para perguntas livres"""

    @pytest.mark.asyncio
    async def test_answer(self, ai_service):
        with mock_create(ai_service) as create:
            create.return_value = make_response("  You spent most on bills.  ")

            answer = await ai_service.generate_ai_answer("Where does my money go?", SAMPLE_EXPENSES)

            assert answer == "You spent most on bills."
            kwargs = create.call_args.kwargs
            assert kwargs["max_tokens"] == 200
            assert "Where does my money go?" in kwargs["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_answer_fallbacks(self, ai_service):
        with mock_create(ai_service) as create:
            create.side_effect = make_rate_limit_error()
            assert await ai_service.generate_ai_answer("Why?", SAMPLE_EXPENSES) == RATE_LIMITED_ANSWER

            create.side_effect = TimeoutError("timeout")
            assert await ai_service.generate_ai_answer("Why?", SAMPLE_EXPENSES) == UNAVAILABLE_ANSWER


class TestClientConfiguration:
    """Testes da configuração do cliente OpenRouter"""

    def test_application_headers(self):
        settings = Settings(
            openrouter_api_key="test-key",
            app_url="https://expenses.example.com",
            app_title="ExpenseTracker AI"
        )
        service = AIService(settings=settings)

        headers = service.completion_client.client.default_headers
        assert headers["HTTP-Referer"] == "https://expenses.example.com"
        assert headers["X-Title"] == "ExpenseTracker AI"

    def test_base_url_and_primary_key(self, ai_service):
        client = ai_service.completion_client.client

        assert client.api_key == "test-key"
        assert str(client.base_url).startswith("https://openrouter.ai/api/v1")

    def test_secondary_api_key(self):
        """Sem chave OpenRouter, a chave OpenAI é usada"""
        settings = Settings(openrouter_api_key=None, openai_api_key="sk-secondary")
        service = AIService(settings=settings)

        assert service.completion_client.client.api_key == "sk-secondary"


class TestHTTPEndpoints:
    """Testes da API FastAPI"""

    @pytest.fixture
    def client(self, ai_service):
        from main import app

        app.dependency_overrides[get_ai_service] = lambda: ai_service
        with TestClient(app) as test_client:
            yield test_client
        app.dependency_overrides.clear()

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_categorize_endpoint_fallback(self, client, ai_service):
        with mock_create(ai_service) as create:
            create.side_effect = make_rate_limit_error()

            response = client.post("/categorize", json={"description": "Netflix subscription"})

        assert response.status_code == 200
        assert response.json() == {"category": "Entertainment", "error": None}

    def test_insights_endpoint(self, client, ai_service):
        with mock_create(ai_service) as create:
            create.return_value = make_response(INSIGHTS_JSON)

            response = client.post("/insights", json={
                "expenses": [e.model_dump(mode="json") for e in SAMPLE_EXPENSES]
            })

        assert response.status_code == 200
        body = response.json()
        assert [i["title"] for i in body["insights"]] == ["High bills", "Coffee"]

    def test_ask_endpoint_validation(self, client):
        response = client.post("/ask", json={"question": "", "expenses": []})

        assert response.status_code == 422

    def test_ask_endpoint(self, client, ai_service):
        with mock_create(ai_service) as create:
            create.side_effect = ConnectionError("down")

            response = client.post("/ask", json={"question": "How am I doing?", "expenses": []})

        assert response.status_code == 200
        assert response.json() == {"answer": UNAVAILABLE_ANSWER}
