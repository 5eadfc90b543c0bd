#!/usr/bin/env python3
"""
Section Segmenter - split raw document text into ordered sections.

A line is treated as a header when it is short and either fully upper-case or
contains one of the canonical section names. Content between consecutive
headers becomes one section. Headers in title case or decorative styles are
not detected; such documents come back as a single section.
"""
import logging
from dataclasses import dataclass
from typing import List

from etl.schema_models import DocumentSection, SectionType
from etl.sections.classifier import classify_section

logger = logging.getLogger(__name__)

MAX_HEADER_LENGTH = 50

# A header this far down means the lines above it are the contact block.
CONTACT_BLOCK_MIN_LINES = 5

CANONICAL_SECTION_NAMES = (
    "EXPERIENCE", "WORK EXPERIENCE", "PROFESSIONAL EXPERIENCE", "EMPLOYMENT",
    "EDUCATION", "ACADEMIC BACKGROUND", "ACADEMIC HISTORY",
    "SKILLS", "TECHNICAL SKILLS", "CORE COMPETENCIES", "PROFESSIONAL SKILLS",
    "CERTIFICATIONS", "ACHIEVEMENTS", "AWARDS", "HONORS",
    "PROJECTS", "PROFESSIONAL PROJECTS", "PERSONAL PROJECTS",
    "SUMMARY", "PROFESSIONAL SUMMARY", "OBJECTIVE", "CAREER OBJECTIVE",
    "REFERENCES", "PROFESSIONAL REFERENCES",
    "INTERESTS", "ACTIVITIES", "VOLUNTEER EXPERIENCE", "LANGUAGES",
)

WHOLE_DOCUMENT_TITLE = "Resume"
CONTACT_SECTION_TITLE = "Contact Information"


@dataclass
class SectionHeader:
    index: int
    text: str


def is_header_line(line: str) -> bool:
    """Return True if a (stripped) line looks like a section header."""
    line = line.strip()
    if not line or len(line) >= MAX_HEADER_LENGTH:
        return False
    if line.isupper():
        return True
    upper = line.upper()
    return any(name in upper for name in CANONICAL_SECTION_NAMES)


def _is_header_qualifier(line: str) -> bool:
    return (
        bool(line)
        and not line.isupper()
        and len(line) < MAX_HEADER_LENGTH
        and not line[0].isdigit()
    )


def find_section_headers(lines: List[str]) -> List[SectionHeader]:
    """Locate header lines; a short mixed-case line right after a header is
    appended to that header's text as a qualifier."""
    headers: List[SectionHeader] = []
    for i, line in enumerate(lines):
        if not is_header_line(line):
            continue
        header = SectionHeader(index=i, text=line)
        if i + 1 < len(lines) and _is_header_qualifier(lines[i + 1]):
            header.text = f"{line} {lines[i + 1]}"
        headers.append(header)
    return headers


def segment_document(text: str) -> List[DocumentSection]:
    """Split document text into ordered, classified sections.

    Each section spans from the line after its header up to (not including)
    the next header line. With no headers the whole document is one section.
    If the first header sits below line CONTACT_BLOCK_MIN_LINES, the lines
    above it become a leading "Contact Information" section.

    Args:
        text: Full document text

    Returns:
        Sections in document order, positions numbered from 0
    """
    lines = [line.strip() for line in (text or "").split("\n")]
    headers = find_section_headers(lines)

    if not headers:
        logger.debug("No section headers found, treating document as one section")
        return [DocumentSection(
            title=WHOLE_DOCUMENT_TITLE,
            section_type=SectionType.OTHER,
            content=text or "",
            position=0,
        )]

    spans = []
    if headers[0].index > CONTACT_BLOCK_MIN_LINES:
        spans.append((CONTACT_SECTION_TITLE, "\n".join(lines[:headers[0].index])))

    for i, header in enumerate(headers):
        end = headers[i + 1].index if i + 1 < len(headers) else len(lines)
        spans.append((header.text, "\n".join(lines[header.index + 1:end])))

    sections = [
        DocumentSection(
            title=title,
            section_type=classify_section(title),
            content=content,
            position=position,
        )
        for position, (title, content) in enumerate(spans)
    ]

    logger.info(
        f"Document segmented into {len(sections)} sections: "
        f"{', '.join(s.title for s in sections)}"
    )
    return sections
