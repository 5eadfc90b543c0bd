"""
Section Classifier - map a header string to a semantic section type.
"""
from typing import List, Tuple

from etl.schema_models import SectionType

# Checked in order; the first group whose keyword appears in the header wins.
SECTION_KEYWORDS: List[Tuple[SectionType, Tuple[str, ...]]] = [
    (SectionType.EXPERIENCE, ("EXPERIENCE", "EMPLOYMENT", "WORK")),
    (SectionType.EDUCATION, ("EDUCATION", "ACADEMIC")),
    (SectionType.SKILLS, ("SKILL", "COMPETENCIES", "EXPERTISE")),
    (SectionType.CERTIFICATIONS, ("CERTIFICATION", "ACHIEVEMENT", "AWARD", "LICENSE", "TRAINING", "COURSE")),
    (SectionType.PROJECTS, ("PROJECT",)),
    (SectionType.SUMMARY, ("SUMMARY", "PROFILE", "OBJECTIVE")),
    (SectionType.CONTACT, ("CONTACT", "PERSONAL")),
    (SectionType.REFERENCES, ("REFERENCE",)),
]


def classify_section(header: str) -> SectionType:
    """Classify a section header by case-insensitive keyword containment.

    Unrecognized headers map to SectionType.OTHER.
    """
    title = (header or "").upper()
    for section_type, keywords in SECTION_KEYWORDS:
        if any(keyword in title for keyword in keywords):
            return section_type
    return SectionType.OTHER
