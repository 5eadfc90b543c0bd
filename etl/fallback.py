"""
Field-level fallback extraction - regex and keyword heuristics run directly on
source document text, with no model involved.

Used when the model path is unavailable for a section or a whole document.
Entry points never raise; on any internal error they log and return an empty
record of the right structure.
"""
import logging
import re
from typing import Dict, List, Optional, Sequence

from etl.schema_models import (
    CertificationItem,
    ContactInfo,
    EducationItem,
    ReferenceItem,
    StructuredJobDescription,
    StructuredResume,
    TrainingItem,
)
from etl.sections.segmenter import MAX_HEADER_LENGTH, is_header_line

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"([a-zA-Z0-9._-]+@[a-zA-Z0-9._-]+\.[a-zA-Z0-9._-]+)")
PHONE_PATTERN = re.compile(r"(\+?1?\s*\(?[0-9]{3}\)?[-. ][0-9]{3}[-. ][0-9]{4})")
DATE_LINE_PATTERN = re.compile(
    r"\b(?:19|20)\d{2}\b|\bpresent\b|\bcurrent\b"
    r"|\b(?:jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*\.?\s+\d{2,4}\b",
    re.I,
)
BULLET_PREFIX = re.compile(r"^\s*(?:[-*•▪◦]|\d+[.)])\s*")

SKILL_VOCABULARY = (
    'JavaScript', 'Python', 'Java', 'C++', 'Ruby', 'PHP', 'HTML', 'CSS', 'SQL',
    'React', 'Angular', 'Vue', 'Node.js', 'Express', 'Django', 'Flask',
    'AWS', 'Azure', 'GCP', 'Docker', 'Kubernetes', 'CI/CD', 'Git',
    'Leadership', 'Project Management', 'Agile', 'Scrum', 'Communication',
    'Microsoft Office', 'Excel', 'Word', 'PowerPoint', 'Outlook',
    'Analytics', 'Data Analysis', 'Marketing', 'Sales', 'Customer Service',
    'Network', 'Cisco', 'CCNA', 'CCNP', 'Routing', 'Switching', 'Firewall',
    'Security', 'VPN', 'LAN', 'WAN', 'Wireless', 'TCP/IP',
)

INSTITUTION_KEYWORDS = ("University", "College", "Institute", "School", "Academy", "Polytechnic")
DEGREE_PATTERN = re.compile(
    r"\b(Bachelor(?:'s)?|Master(?:'s)?|Associate(?:'s)?|Doctor(?:ate)?|Ph\.?D\.?|MBA|B\.?Sc?\.?|M\.?Sc?\.?|B\.?A\.?|M\.?A\.?|Diploma)\b"
)

CERTIFICATION_HEADER_KEYWORDS = ("CERTIFICATION", "LICENSE", "ACHIEVEMENT", "AWARD")
TRAINING_HEADER_KEYWORDS = ("TRAINING", "COURSE")
REFERENCE_HEADER_KEYWORDS = ("REFERENCE",)

# Job posting headings -> StructuredJobDescription list field
JOB_HEADING_KEYWORDS = (
    ("responsibilities", ("RESPONSIBILIT", "DUTIES", "WHAT YOU WILL DO", "WHAT YOU'LL DO", "THE ROLE")),
    ("qualifications", ("QUALIFICATION", "PREFERRED", "NICE TO HAVE", "BONUS")),
    ("requirements", ("REQUIREMENT", "MUST HAVE", "WHAT YOU BRING", "WHAT WE'RE LOOKING FOR", "SKILLS")),
    ("company_culture", ("CULTURE", "ABOUT US", "WHY JOIN", "BENEFITS", "WHAT WE OFFER", "VALUES")),
)
LOCATION_PATTERN = re.compile(r"^\s*location\s*[:\-]\s*(.+)$", re.I | re.M)
COMPANY_PATTERN = re.compile(r"^\s*company\s*[:\-]\s*(.+)$", re.I | re.M)


def _clean_lines(text: str) -> List[str]:
    return [line.strip() for line in (text or "").split("\n")]


def find_email(text: str) -> str:
    match = EMAIL_PATTERN.search(text or "")
    return match.group(1) if match else ""


def find_phone(text: str) -> str:
    match = PHONE_PATTERN.search(text or "")
    return match.group(1).strip() if match else ""


def find_name(text: str) -> str:
    """First non-empty line under the header length cap that is not contact detail."""
    for line in _clean_lines(text):
        if not line:
            continue
        if len(line) < MAX_HEADER_LENGTH and not EMAIL_PATTERN.search(line) and not PHONE_PATTERN.search(line):
            return line
        return ""
    return ""


def find_skills(text: str, limit: int = 15) -> List[str]:
    """Vocabulary terms that appear verbatim (case-sensitive) in the text."""
    text = text or ""
    return [skill for skill in SKILL_VOCABULARY if skill in text][:limit]


def find_education(text: str, limit: int = 3) -> List[EducationItem]:
    entries: List[EducationItem] = []
    for line in _clean_lines(text):
        if not any(keyword in line for keyword in INSTITUTION_KEYWORDS):
            continue
        degree = DEGREE_PATTERN.search(line)
        year = re.search(r"\b(?:19|20)\d{2}\b", line)
        entries.append(EducationItem(
            institution=line,
            degree=degree.group(1) if degree else "",
            graduation_date=year.group() if year else "",
        ))
        if len(entries) >= limit:
            break
    return entries


def _header_matches(line: str, keywords: Sequence[str]) -> bool:
    upper = line.upper()
    return is_header_line(line) and any(keyword in upper for keyword in keywords)


def scan_blocks(text: str, header_keywords: Sequence[str]) -> List[List[str]]:
    """
    Group the lines under matching headers into entries.

    After a header whose text contains one of header_keywords, consecutive
    non-blank lines form one entry; a single blank line starts the next
    entry. The block ends at the next header or at a run of blank lines.
    """
    lines = _clean_lines(text)
    entries: List[List[str]] = []
    i = 0
    while i < len(lines):
        if not _header_matches(lines[i], header_keywords):
            i += 1
            continue
        i += 1
        current: List[str] = []
        blank_run = 0
        while i < len(lines):
            line = lines[i]
            if not line:
                blank_run += 1
                if current:
                    entries.append(current)
                    current = []
                if blank_run >= 2:
                    break
                i += 1
                continue
            if is_header_line(line):
                break
            blank_run = 0
            current.append(BULLET_PREFIX.sub("", line))
            i += 1
        if current:
            entries.append(current)
    return entries


def _slot_entry(lines: List[str]) -> Dict[str, str]:
    """Assign an entry's lines to name / organization / date slots."""
    slots = {"name": "", "organization": "", "date": ""}
    for line in lines:
        if not slots["date"] and DATE_LINE_PATTERN.search(line) and slots["name"]:
            slots["date"] = line
        elif not slots["name"]:
            slots["name"] = line
        elif not slots["organization"]:
            slots["organization"] = line
    return slots


def find_certifications(text: str) -> List[CertificationItem]:
    items = []
    for entry in scan_blocks(text, CERTIFICATION_HEADER_KEYWORDS):
        slots = _slot_entry(entry)
        items.append(CertificationItem(name=slots["name"], issuer=slots["organization"], date=slots["date"]))
    return items


def find_trainings(text: str) -> List[TrainingItem]:
    items = []
    for entry in scan_blocks(text, TRAINING_HEADER_KEYWORDS):
        slots = _slot_entry(entry)
        items.append(TrainingItem(name=slots["name"], provider=slots["organization"], date=slots["date"]))
    return items


def find_references(text: str) -> List[ReferenceItem]:
    items = []
    for entry in scan_blocks(text, REFERENCE_HEADER_KEYWORDS):
        joined = "\n".join(entry)
        rest = [line for line in entry if not EMAIL_PATTERN.search(line) and not PHONE_PATTERN.search(line)]
        if not rest:
            continue
        # "Available upon request" style lines are not references
        if "request" in rest[0].lower():
            continue
        items.append(ReferenceItem(
            name=rest[0],
            title=rest[1] if len(rest) > 1 else "",
            company=rest[2] if len(rest) > 2 else "",
            email=find_email(joined),
            phone=find_phone(joined),
        ))
    return items


def _with_header(section_title: str, text: str) -> str:
    """Put a section header back in front of its content. A first content line
    that the segmenter also appended to the title is dropped from the header."""
    if not section_title:
        return text
    header = section_title
    first = text.split("\n", 1)[0].strip()
    if first and header.endswith(" " + first):
        header = header[:-len(first) - 1]
    return f"{header}\n{text}"


def extract_resume_fields(
    text: str,
    max_skills: int = 15,
    max_education: int = 3,
    section_title: str = "",
    include_contact: bool = True,
) -> StructuredResume:
    """
    Build a résumé record from source text with regex/keyword heuristics.

    Args:
        text: Whole document, or the content of one section
        section_title: Header of the section text belongs to. Block scanners
            need it to find certification, training and reference entries.
        include_contact: Fill contactInfo. Off for sections other than the
            contact block, where the first line is not a name.

    Never raises. Empty or unreadable input yields an all-empty record.
    """
    try:
        text = text or ""
        block_text = _with_header(section_title, text)
        contact = ContactInfo()
        if include_contact:
            contact = ContactInfo(full_name=find_name(text), email=find_email(text), phone=find_phone(text))
        resume = StructuredResume(
            contact_info=contact,
            skills=find_skills(text, max_skills),
            education=find_education(text, max_education),
            certifications=find_certifications(block_text),
            trainings=find_trainings(block_text),
            references=find_references(block_text),
        )
        logger.info(f"Fallback extraction recovered {resume.counts()} from {len(text)} chars")
        return resume
    except Exception as e:
        logger.error(f"Fallback résumé extraction failed: {e}", exc_info=True)
        return StructuredResume()


def _job_heading_field(line: str) -> Optional[str]:
    if not line or len(line) >= MAX_HEADER_LENGTH or BULLET_PREFIX.match(line):
        return None
    upper = line.upper().rstrip(":")
    for field, keywords in JOB_HEADING_KEYWORDS:
        if any(keyword in upper for keyword in keywords):
            return field
    return None


def extract_job_description_fields(text: str, max_keywords: int = 15) -> StructuredJobDescription:
    """
    Build a job description record from posting text.

    The first non-empty line is taken as the title; lines under recognized
    headings are collected into the matching list field.
    Never raises.
    """
    try:
        text = text or ""
        lines = _clean_lines(text)
        buckets: Dict[str, List[str]] = {field: [] for field, _ in JOB_HEADING_KEYWORDS}
        title = ""
        current: Optional[str] = None
        for line in lines:
            if not line:
                continue
            if not title:
                title = line if len(line) < 100 else ""
                if title:
                    continue
            heading = _job_heading_field(line)
            if heading:
                current = heading
                continue
            if current:
                item = BULLET_PREFIX.sub("", line).strip()
                if item:
                    buckets[current].append(item)

        company = COMPANY_PATTERN.search(text)
        location = LOCATION_PATTERN.search(text)
        job = StructuredJobDescription(
            job_title=title,
            company=company.group(1).strip() if company else "",
            location=location.group(1).strip() if location else "",
            keywords=find_skills(text, max_keywords),
            **buckets,
        )
        logger.info(
            f"Fallback job extraction: title='{job.job_title}', "
            f"{len(job.requirements)} requirements, {len(job.responsibilities)} responsibilities"
        )
        return job
    except Exception as e:
        logger.error(f"Fallback job description extraction failed: {e}", exc_info=True)
        return StructuredJobDescription()


def suggest_titles_from_resume(resume: StructuredResume) -> List[str]:
    """Distinct experience titles, in order of appearance."""
    try:
        titles: List[str] = []
        seen = set()
        for item in resume.experience:
            key = item.title.strip().lower()
            if key and key not in seen:
                seen.add(key)
                titles.append(item.title.strip())
        return titles
    except Exception as e:
        logger.error(f"Fallback title suggestion failed: {e}", exc_info=True)
        return []
