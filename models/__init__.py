"""
Models package - Pydantic schemas and data models
"""

from .schemas import (
    ExpenseCategory,
    InsightType,
    ExpenseRecord,
    AIInsight,
    CategorySuggestion,
    InsightsRequest,
    InsightsResponse,
    CategorizeRequest,
    QuestionRequest,
    AnswerResponse
)

__all__ = [
    'ExpenseCategory',
    'InsightType',
    'ExpenseRecord',
    'AIInsight',
    'CategorySuggestion',
    'InsightsRequest',
    'InsightsResponse',
    'CategorizeRequest',
    'QuestionRequest',
    'AnswerResponse'
]
