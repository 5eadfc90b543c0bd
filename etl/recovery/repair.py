"""
Text-level repairs applied to model output before JSON parsing.

All helpers are pure string transforms. They either return repaired text or
raise ValueError when there is nothing to work with.
"""
import json
import re
from typing import Any, Callable, List, Tuple

FENCE_BLOCK = re.compile(r"```[ \t]*[A-Za-z0-9_+-]*[ \t]*\r?\n?(.*?)```", re.S)
LEADING_FENCE = re.compile(r"^```[ \t]*[A-Za-z0-9_+-]*[ \t]*\r?\n?")
TRAILING_FENCE = re.compile(r"\r?\n?```[ \t]*$")
STRAY_FENCE = re.compile(r"```[ \t]*(?:json|JSON|javascript|js)?")

STRING_LITERAL = re.compile(r'"(?:\\.|[^"\\])*"', re.S)
TRAILING_COMMA = re.compile(r",\s*([}\]])")
ADJACENT_CONTAINERS = re.compile(r"([}\]])(\s*)([{\[])")
BARE_KEY = re.compile(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_\-]*)(\s*):")
NEWLINE_GAP = re.compile(r"[ \t]*\r?\n\s*")
VALUE_THEN_NEWLINE = re.compile(r"(\d|true|false|null|[}\]])([ \t]*\r?\n\s*)$")
ESCAPED_STRUCTURE = re.compile(r'[{\[,:]\s*\\"')
DANGLING_TAIL = re.compile(r"[\s,:]+$")

SMART_QUOTES = str.maketrans({
    "\u201c": '"', "\u201d": '"', "\u201e": '"', "\u201f": '"', "\u2033": '"',
    "\u2018": "'", "\u2019": "'", "\u201a": "'", "\u201b": "'", "\u2032": "'",
    "\u00a0": " ", "\ufeff": None, "\u200b": None,
})

MAX_TRUNCATION_STEPS = 50


def loads(text: str) -> Any:
    """json.loads that tolerates raw control characters (newlines) inside strings."""
    return json.loads(text, strict=False)


def strip_fences(text: str) -> str:
    """Return the inside of the first fenced block, or the text with leading and
    trailing fence markers removed (unbalanced fences included)."""
    text = text.strip()
    block = FENCE_BLOCK.search(text)
    if block:
        return block.group(1).strip()
    return TRAILING_FENCE.sub("", LEADING_FENCE.sub("", text)).strip()


def extract_bracketed(text: str, opener: str, closer: str) -> str:
    """Substring from the first opener to the last closer, inclusive."""
    start = text.find(opener)
    end = text.rfind(closer)
    if start == -1 or end <= start:
        raise ValueError(f"No {opener}...{closer} span in text")
    return text[start:end + 1]


def slice_from_opener(text: str, opener: str) -> str:
    start = text.find(opener)
    if start == -1:
        raise ValueError(f"No {opener} in text")
    return text[start:]


def sanitize_characters(text: str) -> str:
    """Normalize curly quotes and invisible characters, unescape quotes when the
    whole structure arrived escaped, and drop stray fence markers."""
    cleaned = text.translate(SMART_QUOTES)
    if ESCAPED_STRUCTURE.search(cleaned):
        cleaned = cleaned.replace('\\"', '"')
    return STRAY_FENCE.sub("", cleaned)


def _map_outside_strings(text: str, fn: Callable[[str], str]) -> str:
    parts: List[str] = []
    pos = 0
    for match in STRING_LITERAL.finditer(text):
        parts.append(fn(text[pos:match.start()]))
        parts.append(match.group())
        pos = match.end()
    parts.append(fn(text[pos:]))
    return "".join(parts)


def _repair_segment(segment: str) -> str:
    segment = TRAILING_COMMA.sub(r"\1", segment)
    segment = ADJACENT_CONTAINERS.sub(r"\1,\2\3", segment)
    return BARE_KEY.sub(r'\1"\2"\3:', segment)


def _comma_before_strings(text: str) -> str:
    """Insert the comma missing between a value and a string that starts on the
    next line. Only the text between string literals is edited."""
    parts: List[str] = []
    pos = 0
    for match in STRING_LITERAL.finditer(text):
        gap = text[pos:match.start()]
        if pos > 0 and NEWLINE_GAP.fullmatch(gap):
            # Previous token is a string literal
            gap = "," + gap
        else:
            gap = VALUE_THEN_NEWLINE.sub(r"\1,\2", gap)
        parts.append(gap)
        parts.append(match.group())
        pos = match.end()
    parts.append(text[pos:])
    return "".join(parts)


def fix_commas(text: str) -> str:
    """Drop trailing commas and insert missing ones between adjacent values."""
    text = _map_outside_strings(text, lambda s: ADJACENT_CONTAINERS.sub(r"\1,\2\3", TRAILING_COMMA.sub(r"\1", s)))
    return _comma_before_strings(text)


def repair_structure(text: str) -> str:
    """Fix trailing/missing commas and quote bare property names."""
    return _comma_before_strings(_map_outside_strings(text, _repair_segment))


def _scan(text: str) -> Tuple[List[str], bool, int]:
    """Walk the text tracking string state.

    Returns the closers still owed (innermost last), whether the text ends
    inside a string, and the index of the last comma outside strings.
    """
    stack: List[str] = []
    in_string = False
    escaped = False
    last_comma = -1
    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            stack.append("}")
        elif ch == "[":
            stack.append("]")
        elif ch in "}]":
            if stack and stack[-1] == ch:
                stack.pop()
        elif ch == ",":
            last_comma = i
    return stack, in_string, last_comma


def close_truncated(text: str) -> str:
    """Close a structure cut off mid-way.

    Terminates an open string, drops a dangling comma/colon and appends the
    missing closers. When that still does not parse, the incomplete trailing
    element (everything after the last comma) is dropped and the step repeats.
    """
    candidate = text.rstrip()
    for _ in range(MAX_TRUNCATION_STEPS):
        stack, in_string, last_comma = _scan(candidate)
        if not stack and not in_string:
            return candidate
        body = candidate + ('"' if in_string else "")
        closed = DANGLING_TAIL.sub("", body) + "".join(reversed(stack))
        try:
            loads(closed)
            return closed
        except ValueError:
            pass
        if last_comma <= 0:
            break
        candidate = candidate[:last_comma].rstrip()
    raise ValueError("Truncated structure could not be closed")
