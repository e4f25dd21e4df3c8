"""
Schemas Pydantic para validação de dados
"""

from typing import Optional, List, Any
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator
from enum import Enum


class ExpenseCategory(str, Enum):
    """Categorias de gastos"""
    FOOD = "Food"
    TRANSPORTATION = "Transportation"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    BILLS = "Bills"
    HEALTHCARE = "Healthcare"
    OTHER = "Other"

    @classmethod
    def coerce(cls, value: Any) -> "ExpenseCategory":
        """Converter valor para categoria; qualquer valor fora do conjunto vira Other"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for category in cls:
                if category.value == value:
                    return category
        return cls.OTHER


class InsightType(str, Enum):
    """Tipos de insight"""
    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"
    TIP = "tip"


class ExpenseRecord(BaseModel):
    """Gasto registrado pelo usuário (entrada da análise)"""
    id: str = Field(..., description="ID do gasto")
    amount: Decimal = Field(..., description="Valor do gasto")
    category: str = Field(default=ExpenseCategory.OTHER.value, description="Categoria do gasto")
    description: str = Field(default="", description="Descrição livre")
    date: str = Field(..., description="Data do gasto (ISO)")

    @field_validator('id', mode='before')
    def validate_id(cls, v):
        if isinstance(v, int):
            return str(v)
        return v

    def to_prompt_dict(self) -> dict:
        """Projeção enviada ao modelo (sem o ID)"""
        return {
            "amount": self.amount,
            "category": self.category,
            "description": self.description,
            "date": self.date,
        }


class AIInsight(BaseModel):
    """Insight financeiro gerado pela IA"""
    id: str
    type: InsightType = Field(default=InsightType.INFO)
    title: str
    message: str
    action: Optional[str] = None
    confidence: float = Field(..., ge=0.0, le=1.0, description="Nível de confiança do insight")


class CategorySuggestion(BaseModel):
    """Sugestão de categoria com descrição opcional do erro"""
    category: ExpenseCategory
    error: Optional[str] = None


class InsightsRequest(BaseModel):
    expenses: List[ExpenseRecord] = Field(default_factory=list)


class InsightsResponse(BaseModel):
    insights: List[AIInsight]


class CategorizeRequest(BaseModel):
    description: str = Field(default="")


class QuestionRequest(BaseModel):
    question: str = Field(..., min_length=1, description="Pergunta do usuário")
    expenses: List[ExpenseRecord] = Field(default_factory=list)


class AnswerResponse(BaseModel):
    answer: str
