"""
Pydantic models for the records produced by document extraction.

This module provides:
1. Type-safe Python models for résumé and job description records
2. Lenient input coercion so partially-wrong model output still validates
3. Dedup keys used when partial per-section records are merged

Records serialize with camelCase aliases (contactInfo, fullName, startDate, ...),
which is also the JSON shape the extraction prompts request.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, List, Tuple, Type, get_args, get_origin

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SectionType(str, Enum):
    """Closed set of semantic section categories."""
    CONTACT = "contact"
    SUMMARY = "summary"
    EXPERIENCE = "experience"
    EDUCATION = "education"
    SKILLS = "skills"
    CERTIFICATIONS = "certifications"
    PROJECTS = "projects"
    REFERENCES = "references"
    OTHER = "other"


# Pseudo section type for whole-document (single call) extraction.
FULL_DOCUMENT = "full"


@dataclass(frozen=True)
class DocumentSection:
    """A contiguous span of source text associated with one section type.

    Attributes:
        title: Header text (including any absorbed qualifier line)
        section_type: Classified type of the header
        content: Text between this header and the next one
        position: Ordinal position of the section in the document
    """
    title: str
    section_type: SectionType
    content: str
    position: int


# ============================================================================
# COERCION HELPERS
# ============================================================================

def _as_text(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        return "\n".join(t for t in (_as_text(v) for v in value) if t)
    if isinstance(value, dict):
        return ", ".join(t for t in (_as_text(v) for v in value.values()) if t)
    return str(value).strip()


def _as_text_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [line.strip() for line in value.splitlines() if line.strip()]
    if isinstance(value, dict):
        # Grouped lists, e.g. {"technical": [...], "soft": [...]}
        flattened: List[str] = []
        for group in value.values():
            flattened.extend(_as_text_list(group))
        return flattened
    if isinstance(value, list):
        items = []
        for item in value:
            if isinstance(item, dict):
                text = _as_text(item.get("name")) or _as_text(item)
            else:
                text = _as_text(item)
            if text:
                items.append(text)
        return items
    text = _as_text(value)
    return [text] if text else []


def _as_object_list(model: Type["_Record"], value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, dict):
        value = [value]
    if not isinstance(value, list):
        return []
    items = []
    for item in value:
        if isinstance(item, (dict, BaseModel)):
            items.append(item)
        elif isinstance(item, str) and item.strip():
            items.append({model.PRIMARY_FIELD: item.strip()})
    return items


def _coerce(annotation: Any, value: Any) -> Any:
    if annotation is str:
        return _as_text(value)
    if get_origin(annotation) in (list, List):
        (item_type,) = get_args(annotation)
        if item_type is str:
            return _as_text_list(value)
        if isinstance(item_type, type) and issubclass(item_type, _Record):
            return _as_object_list(item_type, value)
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return value if isinstance(value, (dict, BaseModel)) else {}
    return value


class _Record(BaseModel):
    """Base for every extracted record: camelCase aliases, unknown keys ignored."""
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    PRIMARY_FIELD: ClassVar[str] = "name"
    DEDUP_FIELDS: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode='before')
    @classmethod
    def _coerce_loose_values(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        coerced = cls._normalize_keys(dict(data))
        for name, field in cls.model_fields.items():
            for key in {name, field.alias or name}:
                if key in coerced:
                    coerced[key] = _coerce(field.annotation, coerced[key])
        return coerced

    @classmethod
    def _normalize_keys(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return data

    def dedup_key(self) -> Tuple[str, ...]:
        """Case-insensitive key used to detect duplicate list entries."""
        return tuple(str(getattr(self, f, "") or "").strip().lower() for f in self.DEDUP_FIELDS)

    def is_blank(self) -> bool:
        return not any(self.model_dump().values())

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


# ============================================================================
# RESUME MODELS
# ============================================================================

class ContactInfo(_Record):
    full_name: str = Field(default="", alias="fullName")
    email: str = ""
    phone: str = ""
    location: str = ""
    linkedin: str = ""


class ExperienceItem(_Record):
    PRIMARY_FIELD: ClassVar[str] = "title"
    DEDUP_FIELDS: ClassVar[Tuple[str, ...]] = ("title", "company")

    title: str = ""
    company: str = ""
    location: str = ""
    start_date: str = Field(default="", alias="startDate")
    end_date: str = Field(default="", alias="endDate")
    description: List[str] = Field(default_factory=list)


class EducationItem(_Record):
    PRIMARY_FIELD: ClassVar[str] = "institution"
    DEDUP_FIELDS: ClassVar[Tuple[str, ...]] = ("institution", "degree")

    institution: str = ""
    degree: str = ""
    field: str = ""
    graduation_date: str = Field(default="", alias="graduationDate")


class ProjectItem(_Record):
    DEDUP_FIELDS: ClassVar[Tuple[str, ...]] = ("name",)

    name: str = ""
    description: str = ""


class CertificationItem(_Record):
    DEDUP_FIELDS: ClassVar[Tuple[str, ...]] = ("name", "issuer")

    name: str = ""
    issuer: str = ""
    date: str = ""
    valid_until: str = Field(default="", alias="validUntil")


class TrainingItem(_Record):
    DEDUP_FIELDS: ClassVar[Tuple[str, ...]] = ("name", "provider")

    name: str = ""
    provider: str = ""
    date: str = ""
    duration: str = ""
    description: str = ""


class ReferenceItem(_Record):
    DEDUP_FIELDS: ClassVar[Tuple[str, ...]] = ("name", "company")

    name: str = ""
    title: str = ""
    company: str = ""
    phone: str = ""
    email: str = ""
    relationship: str = ""


class StructuredResume(_Record):
    """Complete résumé record. Every list field is always present."""
    contact_info: ContactInfo = Field(default_factory=ContactInfo, alias="contactInfo")
    summary: str = ""
    experience: List[ExperienceItem] = Field(default_factory=list)
    education: List[EducationItem] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    projects: List[ProjectItem] = Field(default_factory=list)
    certifications: List[CertificationItem] = Field(default_factory=list)
    trainings: List[TrainingItem] = Field(default_factory=list)
    references: List[ReferenceItem] = Field(default_factory=list)

    @classmethod
    def _normalize_keys(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        # Older prompts asked for a singular "training" list
        if "training" in data and "trainings" not in data:
            data["trainings"] = data.pop("training")
        return data

    def counts(self) -> Dict[str, int]:
        """Entry counts per list field, for logging."""
        return {
            "experience": len(self.experience),
            "education": len(self.education),
            "skills": len(self.skills),
            "projects": len(self.projects),
            "certifications": len(self.certifications),
            "trainings": len(self.trainings),
            "references": len(self.references),
        }


# ============================================================================
# JOB DESCRIPTION MODELS
# ============================================================================

class StructuredJobDescription(_Record):
    """Structured job posting. Every list field is always present."""
    job_title: str = Field(default="", alias="jobTitle")
    company: str = ""
    location: str = ""
    requirements: List[str] = Field(default_factory=list)
    responsibilities: List[str] = Field(default_factory=list)
    qualifications: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    company_culture: List[str] = Field(default_factory=list)


# ============================================================================
# TARGET SCHEMA DESCRIPTIONS (embedded verbatim in prompts)
# ============================================================================

RESUME_TARGET_SCHEMA = {
    "contactInfo": {
        "fullName": "Full name of the person",
        "email": "Email address",
        "phone": "Phone number",
        "location": "City, State/Country",
        "linkedin": "LinkedIn URL if present"
    },
    "summary": "Professional summary or objective",
    "experience": [
        {
            "title": "Job title",
            "company": "Company name",
            "location": "Job location",
            "startDate": "Start date (MM/YYYY)",
            "endDate": "End date (MM/YYYY) or 'Present'",
            "description": ["Bullet point 1", "Bullet point 2"]
        }
    ],
    "education": [
        {
            "institution": "University or school name",
            "degree": "Degree type (e.g., Bachelor's, Master's)",
            "field": "Field of study",
            "graduationDate": "Graduation date (YYYY)"
        }
    ],
    "skills": ["Skill 1", "Skill 2"],
    "projects": [
        {
            "name": "Project name",
            "description": "Project description"
        }
    ],
    "certifications": [
        {
            "name": "Certification name",
            "issuer": "Issuing organization",
            "date": "Date obtained (MM/YYYY)",
            "validUntil": "Expiration date if applicable"
        }
    ],
    "trainings": [
        {
            "name": "Course or training name",
            "provider": "Training provider or institution",
            "date": "Completion date",
            "duration": "Duration of the training",
            "description": "Description of the training"
        }
    ],
    "references": [
        {
            "name": "Reference name",
            "title": "Reference's job title",
            "company": "Reference's company",
            "phone": "Reference's phone",
            "email": "Reference's email",
            "relationship": "Relationship to reference"
        }
    ]
}

JOB_DESCRIPTION_TARGET_SCHEMA = {
    "jobTitle": "Job title",
    "company": "Company name",
    "location": "Job location",
    "requirements": ["Requirement 1", "Requirement 2"],
    "responsibilities": ["Responsibility 1", "Responsibility 2"],
    "qualifications": ["Qualification 1", "Qualification 2"],
    "keywords": ["Keyword 1", "Keyword 2"],
    "company_culture": ["Culture point 1", "Culture point 2"]
}
