"""
API de insights de gastos com IA (OpenRouter) e fallback local
"""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from loguru import logger
import uvicorn

from config.settings import get_settings
from config.logging_config import setup_logging
from models.schemas import (
    AnswerResponse,
    CategorizeRequest,
    CategorySuggestion,
    InsightsRequest,
    InsightsResponse,
    QuestionRequest,
)
from services.ai_service import AIService, get_ai_service


setup_logging()

APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Gerenciar lifecycle da aplicação"""
    settings = get_settings()
    logger.info(f"🔄 Iniciando {settings.app_name} (modelo: {settings.openai_model})")
    if not settings.api_key:
        logger.warning("⚠️ Sem chave de API: todas as respostas usarão fallback")

    yield

    logger.info("👋🏻 Aplicação finalizada")


settings = get_settings()
app = FastAPI(
    title=settings.app_name,
    description="Insights de gastos e sugestão de categorias com IA",
    version=APP_VERSION,
    lifespan=lifespan
)


@app.get("/")
async def root():
    """Endpoint de health check"""
    return {
        "message": f"{settings.app_name} está funcionando!",
        "version": APP_VERSION,
        "status": "healthy"
    }


@app.get("/health")
async def health_check():
    """Health check detalhado"""
    current = get_settings()
    return {
        "status": "healthy",
        "model": current.openai_model,
        "api_key_configured": bool(current.api_key)
    }


@app.post("/insights", response_model=InsightsResponse)
async def expense_insights(request: InsightsRequest, service: AIService = Depends(get_ai_service)):
    """Gerar insights para a lista de gastos"""
    try:
        insights = await service.generate_expense_insights(request.expenses)
        return InsightsResponse(insights=insights)
    except Exception as e:
        logger.error(f"Erro no endpoint de insights: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/categorize", response_model=CategorySuggestion)
async def suggest_category(request: CategorizeRequest, service: AIService = Depends(get_ai_service)):
    """Sugerir categoria para a descrição do gasto"""
    try:
        return await service.suggest_category(request.description)
    except Exception as e:
        logger.error(f"Erro no endpoint de categorização: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/ask", response_model=AnswerResponse)
async def ask_question(request: QuestionRequest, service: AIService = Depends(get_ai_service)):
    """Responder pergunta sobre os gastos"""
    try:
        answer = await service.generate_ai_answer(request.question, request.expenses)
        return AnswerResponse(answer=answer)
    except Exception as e:
        logger.error(f"Erro no endpoint de perguntas: {e}")
        raise HTTPException(status_code=500, detail=str(e))


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level="info"
    )
