"""
Recovery strategies - ordered, increasingly aggressive ways of turning model
output into JSON of the expected shape.

Each strategy is a callable ``(text, shape) -> value`` that raises (ValueError,
json.JSONDecodeError, ...) when it cannot produce a value of the right shape.
"""
import logging
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from etl.recovery.repair import (
    close_truncated,
    extract_bracketed,
    fix_commas,
    loads,
    repair_structure,
    sanitize_characters,
    slice_from_opener,
    strip_fences,
)
from etl.recovery.shapes import ResponseShape
from etl.schema_models import StructuredJobDescription, StructuredResume

logger = logging.getLogger(__name__)

RecoveryStrategy = Callable[[str, ResponseShape], Any]

EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
LIST_ITEM_PREFIX = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s*")

MAX_SALVAGED_SUMMARY = 500


def _expect(shape: ResponseShape, value: Any) -> Any:
    if not shape.matches(value):
        raise ValueError(f"Parsed {type(value).__name__}, expected {'array' if shape.is_array else 'object'}")
    return value


# ---------------------------------------------------------------------------
# Stages 1-5: whole-payload parsing
# ---------------------------------------------------------------------------

def parse_direct(text: str, shape: ResponseShape) -> Any:
    """Stage 1: the trimmed text is already valid JSON."""
    return _expect(shape, loads(text.strip()))


def parse_without_fences(text: str, shape: ResponseShape) -> Any:
    """Stage 2: drop ``` fences (with or without a language tag)."""
    unfenced = strip_fences(text)
    if unfenced == text.strip():
        raise ValueError("No fence markers")
    return _expect(shape, loads(unfenced))


def parse_bracketed(text: str, shape: ResponseShape) -> Any:
    """Stage 3: parse the span from the first opener to the last closer."""
    return _expect(shape, loads(extract_bracketed(text, *shape.brackets)))


def parse_sanitized(text: str, shape: ResponseShape) -> Any:
    """Stage 4: normalize quotes and fence remnants, then re-extract the span."""
    cleaned = sanitize_characters(text)
    return _expect(shape, loads(extract_bracketed(cleaned, *shape.brackets)))


def parse_repaired(text: str, shape: ResponseShape) -> Any:
    """Stage 5: structural repair, including closing a truncated structure."""
    cleaned = sanitize_characters(text)
    opener, closer = shape.brackets

    # Opener-to-end keeps the most of a truncated payload; opener-to-last-closer
    # handles complete payloads followed by prose.
    candidates = [slice_from_opener(cleaned, opener)]
    try:
        candidates.append(extract_bracketed(cleaned, opener, closer))
    except ValueError:
        pass

    last_error: Optional[Exception] = None
    for candidate in candidates:
        repaired = repair_structure(candidate)
        try:
            return _expect(shape, loads(repaired))
        except ValueError as e:
            last_error = e
        try:
            return _expect(shape, loads(close_truncated(repaired)))
        except ValueError as e:
            last_error = e
    raise ValueError(f"Structural repair failed: {last_error}")


# ---------------------------------------------------------------------------
# Stage 6: targeted per-field extraction for large payloads
# ---------------------------------------------------------------------------

_OBJECT = r"\{[^{}]*\}"
_FLAT_ARRAY = r"\[[^\[\]]*\]"
_STRING = r'"(?:\\.|[^"\\])*"'


def _field_pattern(key: str, value_pattern: str) -> re.Pattern:
    return re.compile(r'"' + re.escape(key) + r'"\s*:\s*(' + value_pattern + ")", re.S)


def _bounded_objects_pattern(key: str, count: int) -> re.Pattern:
    objects = _OBJECT + (r"\s*,?\s*" + _OBJECT) * (count - 1)
    return re.compile(r'"' + re.escape(key) + r'"\s*:\s*\[\s*(' + objects + ")", re.S)


# (key, patterns tried in order, wrap captured text in [ ])
FieldSpec = Tuple[str, List[re.Pattern], bool]

LARGE_PAYLOAD_FIELDS: Dict[ResponseShape, List[FieldSpec]] = {
    ResponseShape.RESUME: [
        ("contactInfo", [_field_pattern("contactInfo", _OBJECT)], False),
        ("summary", [_field_pattern("summary", _STRING)], False),
        ("experience", [_bounded_objects_pattern("experience", n) for n in (3, 2, 1)], True),
        ("education", [_field_pattern("education", _FLAT_ARRAY)], False),
        ("skills", [_field_pattern("skills", _FLAT_ARRAY)], False),
        ("certifications", [_field_pattern("certifications", _FLAT_ARRAY)], False),
    ],
    ResponseShape.JOB_DESCRIPTION: [
        ("jobTitle", [_field_pattern("jobTitle", _STRING)], False),
        ("company", [_field_pattern("company", _STRING)], False),
        ("location", [_field_pattern("location", _STRING)], False),
        ("requirements", [_field_pattern("requirements", _FLAT_ARRAY)], False),
        ("responsibilities", [_field_pattern("responsibilities", _FLAT_ARRAY)], False),
        ("qualifications", [_field_pattern("qualifications", _FLAT_ARRAY)], False),
        ("keywords", [_field_pattern("keywords", _FLAT_ARRAY)], False),
        ("company_culture", [_field_pattern("company_culture", _FLAT_ARRAY)], False),
    ],
}

DISTINGUISHING_KEYS: Dict[ResponseShape, Tuple[str, ...]] = {
    ResponseShape.RESUME: ('"contactInfo"', '"fullName"'),
    ResponseShape.JOB_DESCRIPTION: ('"jobTitle"',),
}


def _extract_field(text: str, patterns: List[re.Pattern], wrap: bool) -> Any:
    for pattern in patterns:
        match = pattern.search(text)
        if not match:
            continue
        fragment = f"[{match.group(1)}]" if wrap else match.group(1)
        try:
            return loads(fix_commas(fragment))
        except ValueError:
            continue
    raise ValueError("No parseable fragment")


class LargePayloadExtraction:
    """Stage 6: for oversized object payloads, pull each top-level field out
    independently and reassemble a smaller object from what parses."""

    __name__ = "parse_large_payload"

    def __init__(self, threshold: int = 10000):
        self.threshold = threshold

    def __call__(self, text: str, shape: ResponseShape) -> Any:
        if shape.is_array or len(text) <= self.threshold:
            raise ValueError("Payload not eligible for field-level extraction")
        cleaned = sanitize_characters(text)
        if not any(key in cleaned for key in DISTINGUISHING_KEYS[shape]):
            raise ValueError("Payload has no recognizable distinguishing key")

        composite: Dict[str, Any] = {}
        for key, patterns, wrap in LARGE_PAYLOAD_FIELDS[shape]:
            try:
                composite[key] = _extract_field(cleaned, patterns, wrap)
            except ValueError:
                logger.debug(f"Large payload: field '{key}' not recoverable")

        if not composite:
            raise ValueError("No top-level field could be extracted")
        logger.info(f"Large payload ({len(text)} chars) reassembled from fields: {', '.join(composite)}")
        return composite


# ---------------------------------------------------------------------------
# Stage 7: minimal viable salvage
# ---------------------------------------------------------------------------

def _string_value(text: str, key: str, max_length: Optional[int] = None) -> str:
    match = re.search(r'"' + re.escape(key) + r'"\s*:\s*"((?:\\.|[^"\\])*)', text)
    if not match:
        return ""
    value = match.group(1).replace('\\"', '"').replace("\\n", "\n").strip()
    return value[:max_length] if max_length else value


def _tokenize_list(text: str) -> List[str]:
    body = strip_fences(text)
    if "[" in body:
        body = body[body.find("[") + 1:]
        if "]" in body:
            body = body[:body.rfind("]")]
    lines = [line for line in body.splitlines() if line.strip()]
    raw_items = lines if len(lines) > 1 else body.split(",")
    items = []
    for item in raw_items:
        item = LIST_ITEM_PREFIX.sub("", item).strip().strip(",").strip().strip("\"'").strip()
        # Lead-in lines such as "Here are some titles:"
        if item and not item.endswith(":"):
            items.append(item)
    return items


def salvage_minimal(text: str, shape: ResponseShape) -> Any:
    """Stage 7: regex out only the highest-value scalars and synthesize the
    smallest value of the expected shape."""
    cleaned = sanitize_characters(text)

    if shape is ResponseShape.STRING_LIST:
        items = _tokenize_list(cleaned)
        if not items:
            raise ValueError("No list items found")
        return items

    if shape is ResponseShape.JOB_DESCRIPTION:
        record = StructuredJobDescription().to_dict()
        for key in ("jobTitle", "company", "location"):
            record[key] = _string_value(cleaned, key)
        if not any(record[key] for key in ("jobTitle", "company", "location")):
            raise ValueError("No job description scalars found")
        return record

    record = StructuredResume().to_dict()
    contact = record["contactInfo"]
    contact["fullName"] = _string_value(cleaned, "fullName")
    contact["email"] = _string_value(cleaned, "email")
    if not contact["email"]:
        email = EMAIL_PATTERN.search(cleaned)
        contact["email"] = email.group() if email else ""
    contact["phone"] = _string_value(cleaned, "phone")
    record["summary"] = _string_value(cleaned, "summary", MAX_SALVAGED_SUMMARY)

    if not (contact["fullName"] or contact["email"] or contact["phone"] or record["summary"]):
        raise ValueError("No résumé scalars found")
    return record


def default_strategies(large_payload_threshold: int = 10000) -> List[RecoveryStrategy]:
    return [
        parse_direct,
        parse_without_fences,
        parse_bracketed,
        parse_sanitized,
        parse_repaired,
        LargePayloadExtraction(large_payload_threshold),
        salvage_minimal,
    ]
