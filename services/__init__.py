"""
Services package - AI integration, fallbacks and local categorization
"""

from .ai_client import AIErrorKind, AIServiceError, ChatCompletionClient, classify_error
from .ai_service import AIService, get_ai_service
from .fallbacks import FallbackPolicy, run_with_fallback
from .keyword_classifier import classify_expense

__all__ = [
    'AIErrorKind',
    'AIServiceError',
    'ChatCompletionClient',
    'classify_error',
    'AIService',
    'get_ai_service',
    'FallbackPolicy',
    'run_with_fallback',
    'classify_expense'
]
