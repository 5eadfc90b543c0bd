from typing import List, Optional, Union
import logging

from pydantic import ValidationError

from core.config_loader import AppConfig, LlmConfig
from core.llm.interfaces import LLMProvider, ModelInvocationError
from etl.fallback import (
    extract_job_description_fields,
    extract_resume_fields,
    suggest_titles_from_resume,
)
from etl.merger import merge
from etl.prompt_builder import (
    PromptPair,
    build_job_description_prompt,
    build_job_titles_prompt,
    build_resume_prompt,
)
from etl.recovery import RecoveryError, ResponseRecoveryEngine, ResponseShape
from etl.schema_models import (
    FULL_DOCUMENT,
    DocumentSection,
    SectionType,
    StructuredJobDescription,
    StructuredResume,
)
from etl.sections import segment_document

logger = logging.getLogger(__name__)


class ExtractionOrchestrator:
    """Top-level coordinator for résumé and job description extraction.

    Decides between one whole-document model call and per-section calls,
    runs every model response through the recovery cascade, falls back to
    regex extraction where the model path fails, and merges partial records.

    The public extract_* methods never raise. Failures only show up as
    sparser records.

    Usage:
        orchestrator = ExtractionOrchestrator(OpenAIService(), load_config())
        resume = orchestrator.extract_resume(text)
    """

    def __init__(
        self,
        ai_service: LLMProvider,
        config: Optional[AppConfig] = None,
        engine: Optional[ResponseRecoveryEngine] = None,
    ):
        self.ai = ai_service
        self.config = config or AppConfig()
        self.engine = engine or ResponseRecoveryEngine(
            large_payload_threshold=self.config.extraction.large_payload_threshold
        )

    # ------------------------------------------------------------------
    # Résumés
    # ------------------------------------------------------------------

    def should_segment(self, text: str, sections: List[DocumentSection]) -> bool:
        settings = self.config.extraction
        large = len(text) > settings.segment_char_threshold or len(sections) > settings.segment_count_threshold
        return large and len(sections) > 1

    def extract_resume(self, text: str) -> StructuredResume:
        """Extract a structured résumé from document text.

        Args:
            text: Full document text

        Returns:
            StructuredResume (never raises)
        """
        text = text or ""
        # One configuration snapshot for the whole document
        llm_config = self.config.llm.model_copy(deep=True)
        try:
            sections = segment_document(text)
            if self.should_segment(text, sections):
                logger.info(f"Processing résumé in {len(sections)} sections ({len(text)} chars)")
                resume = self._extract_segmented(sections, llm_config)
            else:
                logger.info(f"Processing résumé as a single document ({len(text)} chars)")
                resume = self._extract_resume_section(text, FULL_DOCUMENT, llm_config)
        except Exception as e:
            logger.error(f"Résumé extraction failed, using fallback extraction: {e}", exc_info=True)
            resume = self._fallback_resume(text)

        logger.info(f"Extracted résumé: {resume.counts()}")
        return resume

    def _extract_segmented(self, sections: List[DocumentSection], llm_config: LlmConfig) -> StructuredResume:
        settings = self.config.extraction
        first, rest = sections[0], sections[1:]

        # The first section carries the contact block and seeds the record
        resume = self._extract_resume_section(first.content, SectionType.CONTACT, llm_config)

        for section in rest:
            if len(section.content.strip()) < settings.min_section_chars:
                logger.debug(f"Skipping short section '{section.title}' ({len(section.content)} chars)")
                continue
            logger.info(f"Extracting section '{section.title}' as {section.section_type.value}")
            partial = self._extract_resume_section(
                section.content, section.section_type, llm_config, section_title=section.title
            )
            resume = merge(resume, partial)
        return resume

    def _extract_resume_section(
        self,
        text: str,
        section_type: Union[SectionType, str],
        llm_config: LlmConfig,
        section_title: str = "",
    ) -> StructuredResume:
        """Model path for one section, downgraded to fallback extraction on failure."""
        label = section_type.value if isinstance(section_type, SectionType) else section_type
        try:
            value = self._invoke_and_recover(build_resume_prompt(text, section_type), ResponseShape.RESUME, llm_config)
            return StructuredResume.model_validate(value)
        except (ModelInvocationError, RecoveryError, ValidationError) as e:
            logger.warning(f"Model path unavailable for '{label}' section, using fallback extraction: {e}")
            return self._fallback_resume(text, section_type, section_title)

    def _fallback_resume(
        self,
        text: str,
        section_type: Union[SectionType, str] = FULL_DOCUMENT,
        section_title: str = "",
    ) -> StructuredResume:
        settings = self.config.extraction
        return extract_resume_fields(
            text,
            max_skills=settings.max_fallback_skills,
            max_education=settings.max_fallback_education,
            section_title=section_title,
            # Contact details only come from the contact block or the whole document
            include_contact=section_type in (SectionType.CONTACT, FULL_DOCUMENT),
        )

    # ------------------------------------------------------------------
    # Job descriptions and title suggestions
    # ------------------------------------------------------------------

    def extract_job_description(self, text: str) -> StructuredJobDescription:
        """Extract a structured job description (never raises)."""
        text = text or ""
        llm_config = self.config.llm.model_copy(deep=True)
        try:
            value = self._invoke_and_recover(
                build_job_description_prompt(text), ResponseShape.JOB_DESCRIPTION, llm_config
            )
            job = StructuredJobDescription.model_validate(value)
        except Exception as e:
            logger.warning(f"Job description extraction failed, using fallback extraction: {e}")
            job = extract_job_description_fields(text, self.config.extraction.max_fallback_skills)

        logger.info(f"Extracted job description: '{job.job_title}' at '{job.company}'")
        return job

    def suggest_job_titles(self, resume: StructuredResume) -> List[str]:
        """Suggest job titles that fit a résumé (never raises).

        Falls back to the résumé's own experience titles.
        """
        llm_config = self.config.llm.model_copy(deep=True)
        try:
            value = self._invoke_and_recover(build_job_titles_prompt(resume), ResponseShape.STRING_LIST, llm_config)
            titles, seen = [], set()
            for item in value:
                title = str(item).strip() if item is not None else ""
                if title and title.lower() not in seen:
                    seen.add(title.lower())
                    titles.append(title)
            if titles:
                return titles
            logger.warning("Model returned no job titles, using fallback suggestions")
        except Exception as e:
            logger.warning(f"Job title suggestion failed, using fallback suggestions: {e}")
        return suggest_titles_from_resume(resume)

    # ------------------------------------------------------------------

    def _invoke_and_recover(self, prompt: PromptPair, shape: ResponseShape, llm_config: LlmConfig):
        """One model call, then the recovery cascade.

        Raises:
            ModelInvocationError: If the model call failed
            RecoveryError: If no recovery strategy produced the expected shape
        """
        try:
            raw = self.ai.complete(prompt.prompt, prompt.system_prompt, llm_config=llm_config)
        except ModelInvocationError:
            raise
        except Exception as e:
            raise ModelInvocationError(f"Model invocation failed: {e}") from e

        if self.config.extraction.log_raw_responses:
            logger.debug(f"Raw {shape.value} response ({len(raw or '')} chars): {(raw or '')[:500]}")
        return self.engine.recover(raw or "", shape)
