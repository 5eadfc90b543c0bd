"""
LLM Provider Interface - Abstract base for the model invocation collaborator.

The extraction pipeline only ever asks for raw completion text; parsing and
repairing that text is the pipeline's job, not the provider's.
"""
from abc import ABC, abstractmethod
from typing import Optional

from core.config_loader import LlmConfig


class ModelInvocationError(Exception):
    """Raised when the model could not be invoked or returned nothing usable."""
    pass


class ModelResponseError(ModelInvocationError):
    """Raised when the provider answered but the response carried no content."""
    pass


class LLMProvider(ABC):
    """
    Abstract Interface for AI Service Providers (OpenAI, OpenRouter, Gemini, Ollama, etc.).
    """

    @abstractmethod
    def complete(
        self,
        prompt: str,
        system_prompt: str,
        llm_config: Optional[LlmConfig] = None
    ) -> str:
        """
        Send one prompt/system-prompt pair to the model and return its raw text.

        Args:
            prompt: User message
            system_prompt: System message
            llm_config: Provider/model selection for this call. When None the
                provider's own default configuration is used.
        """
        pass
