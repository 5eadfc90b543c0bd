"""
Prompt Builder - extraction prompts for résumé sections, job descriptions and
job-title suggestions.

Every résumé prompt embeds the complete target schema, whatever the section,
so per-section results always share one structure and merge cleanly. Input
text is passed through untouched; truncation for token budgets is the model
collaborator's concern.
"""
import json
from dataclasses import dataclass
from typing import Dict, Union

from core.llm.system_prompts import (
    ARRAY_FORMATTING_RULES,
    JOB_DESCRIPTION_SYSTEM_PROMPT,
    JOB_TITLES_SYSTEM_PROMPT,
    OBJECT_FORMATTING_RULES,
    RESUME_EXTRACTION_SYSTEM_PROMPT,
)
from etl.schema_models import (
    FULL_DOCUMENT,
    JOB_DESCRIPTION_TARGET_SCHEMA,
    RESUME_TARGET_SCHEMA,
    SectionType,
    StructuredResume,
)


@dataclass(frozen=True)
class PromptPair:
    """User prompt plus the system prompt it must be sent with."""
    prompt: str
    system_prompt: str


FOCUS_INSTRUCTIONS: Dict[str, str] = {
    SectionType.CONTACT.value: (
        "Focus on extracting contact information like name, email, phone, location and LinkedIn. "
        "This section is likely at the beginning of the resume."
    ),
    SectionType.SUMMARY.value: (
        "Focus on extracting the professional summary or objective statement. "
        "This provides an overview of the candidate's profile."
    ),
    SectionType.EXPERIENCE.value: (
        "Focus on extracting detailed work experience entries. Look for job titles, companies, "
        "dates, and bullet points of responsibilities/achievements."
    ),
    SectionType.EDUCATION.value: (
        "Focus on extracting education details like institutions, degrees, fields of study, "
        "and graduation dates."
    ),
    SectionType.SKILLS.value: (
        "Focus on extracting skills, which may be presented in lists or categories. "
        "Capture both technical and soft skills."
    ),
    SectionType.CERTIFICATIONS.value: (
        "Focus on extracting certifications, licenses, trainings, courses, achievements, awards, "
        "or other professional credentials."
    ),
    SectionType.PROJECTS.value: (
        "Focus on extracting project information, including project names, descriptions, "
        "technologies used, and outcomes."
    ),
    SectionType.REFERENCES.value: (
        "Focus on extracting reference information, including names, titles, companies, "
        "and contact details."
    ),
}

_RESUME_SCHEMA_TEXT = json.dumps(RESUME_TARGET_SCHEMA, indent=2)
_JOB_SCHEMA_TEXT = json.dumps(JOB_DESCRIPTION_TARGET_SCHEMA, indent=2)


def focus_instructions(section_type: Union[SectionType, str]) -> str:
    """Type-specific instruction; empty for 'full', 'other' and unknown types."""
    key = section_type.value if isinstance(section_type, SectionType) else section_type
    return FOCUS_INSTRUCTIONS.get(key, "")


def build_resume_prompt(section_text: str, section_type: Union[SectionType, str] = FULL_DOCUMENT) -> PromptPair:
    """Build the extraction prompt for one résumé section (or the whole document).

    Args:
        section_text: Raw text of the section
        section_type: Classified section type, or "full" for the whole document

    Returns:
        PromptPair with the user prompt and the résumé system prompt
    """
    focus = focus_instructions(section_type)
    if section_type == FULL_DOCUMENT:
        scope = (
            "You are parsing a complete resume that has been extracted from a PDF or Word document."
        )
        partial_note = ""
    else:
        scope = "You are parsing a specific section of a resume that has been extracted from a PDF or Word document."
        partial_note = (
            "IMPORTANT: You are only examining one section of the resume, so most fields may be empty.\n"
            "Still return every key of the structure, using \"\" and [] where nothing is available."
        )

    prompt = "\n\n".join(part for part in (
        scope,
        "Extract structured information and return ONLY a JSON object with the following structure "
        "- no explanations, no preamble, no markdown formatting:",
        _RESUME_SCHEMA_TEXT,
        focus,
        partial_note,
        f"Section text:\n{section_text}",
        OBJECT_FORMATTING_RULES.strip(),
    ) if part)

    return PromptPair(prompt=prompt, system_prompt=RESUME_EXTRACTION_SYSTEM_PROMPT.strip())


def build_job_description_prompt(job_text: str) -> PromptPair:
    """Build the extraction prompt for a job posting."""
    prompt = "\n\n".join((
        "Extract structured information from the following job description and return ONLY a JSON "
        "object with the following structure:",
        _JOB_SCHEMA_TEXT,
        "Extract the most important ATS keywords that would be used to filter candidates. "
        "These should include technical skills, soft skills, experience levels, certifications, etc.",
        f"Job description:\n{job_text}",
        OBJECT_FORMATTING_RULES.strip(),
    ))
    return PromptPair(prompt=prompt, system_prompt=JOB_DESCRIPTION_SYSTEM_PROMPT.strip())


def build_job_titles_prompt(resume: StructuredResume) -> PromptPair:
    """Build the prompt asking for 5-10 job titles that fit a résumé."""
    data = resume.to_dict()
    prompt = "\n\n".join((
        "Based on the following resume information, suggest 5-10 potential job titles that this person "
        "would be qualified for. Return only an array of strings with the job titles.",
        f"Experience:\n{json.dumps(data['experience'], ensure_ascii=False)}",
        f"Skills:\n{json.dumps(data['skills'], ensure_ascii=False)}",
        f"Education:\n{json.dumps(data['education'], ensure_ascii=False)}",
        ARRAY_FORMATTING_RULES.strip(),
    ))
    return PromptPair(prompt=prompt, system_prompt=JOB_TITLES_SYSTEM_PROMPT.strip())
