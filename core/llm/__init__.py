"""LLM Module - model invocation interfaces and services."""
from core.llm.interfaces import LLMProvider, ModelInvocationError, ModelResponseError
from core.llm.openai_service import OpenAIService

__all__ = ['LLMProvider', 'ModelInvocationError', 'ModelResponseError', 'OpenAIService']
