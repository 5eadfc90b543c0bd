import yaml
import os
from typing import Optional, Dict, Literal
from pydantic import BaseModel, Field

ProviderName = Literal["openai", "openrouter", "gemini", "requesty", "ollama"]

# OpenAI-compatible endpoints for each supported provider.
PROVIDER_BASE_URLS: Dict[str, Optional[str]] = {
    "openai": None,
    "openrouter": "https://openrouter.ai/api/v1",
    "gemini": "https://generativelanguage.googleapis.com/v1beta/openai/",
    "requesty": "https://router.requesty.ai/v1",
    "ollama": "http://localhost:11434/v1",
}

PROVIDER_API_KEY_ENV: Dict[str, Optional[str]] = {
    "openai": "OPENAI_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "requesty": "REQUESTY_API_KEY",
    "ollama": None,
}


class LlmConfig(BaseModel):
    """Provider/model selection handed to the model collaborator on every call."""
    provider: ProviderName = "openai"
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    model: str = "gpt-4o-mini"
    temperature: float = 0.2  # Low temperature keeps the JSON layout stable
    max_tokens: int = 4000

    def resolved_base_url(self) -> Optional[str]:
        return self.base_url or PROVIDER_BASE_URLS.get(self.provider)

    def resolved_api_key(self) -> Optional[str]:
        if self.api_key:
            return self.api_key
        env_name = PROVIDER_API_KEY_ENV.get(self.provider)
        if env_name:
            return os.environ.get(env_name)
        # Local servers accept any key, the openai client only needs one to be set
        return "ollama"


class ExtractionConfig(BaseModel):
    """Thresholds for the section-based extraction pipeline."""
    # Documents longer than this (or with more sections than segment_count_threshold)
    # are extracted section by section.
    segment_char_threshold: int = 15000
    segment_count_threshold: int = 3

    # Sections after the first one that are shorter than this are skipped.
    min_section_chars: int = 100

    # Model responses above this size get targeted per-field extraction
    # when everything cheaper has failed.
    large_payload_threshold: int = 10000

    max_fallback_skills: int = 15
    max_fallback_education: int = 3

    # Log previews of raw model output at DEBUG level.
    log_raw_responses: bool = False


class AppConfig(BaseModel):
    llm: LlmConfig = Field(default_factory=LlmConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)


def load_config(config_path: str = "config.yaml") -> AppConfig:
    # If not found at relative path (e.g. running from another directory), try the project root
    if not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    data = {}
    if os.path.exists(config_path):
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping, got {type(data).__name__}")

    # Allow env var overrides for the model selection
    env_overrides = {
        "provider": os.environ.get("LLM_PROVIDER"),
        "base_url": os.environ.get("LLM_BASE_URL"),
        "api_key": os.environ.get("LLM_API_KEY"),
        "model": os.environ.get("LLM_MODEL"),
    }
    for key, value in env_overrides.items():
        if value:
            if data.get('llm') is None:
                data['llm'] = {}
            data['llm'][key] = value

    return AppConfig(**data)
