"""
Result Merger - combine partial extraction records into one.

merge() is pure: neither input is mutated and the result shares no mutable
state with them.

Rules:
- contactInfo and other scalars: fill-missing (a non-empty base value is kept)
- summary: the longer text wins once it reaches MIN_SUMMARY_LENGTH
- object lists: base entries first, then incoming entries, keeping the first
  entry per dedup key (case-insensitive key tuple per record type); blank
  entries are dropped
- string lists (skills, keywords, ...): case-sensitive set, base order first

Both sides go through the same dedup, so merge(x, empty) and merge(empty, x)
are equal, and equal x whenever x itself has no duplicate keys.
"""
import logging
from typing import List, Optional, TypeVar, Union, get_args

from pydantic import BaseModel

from etl.schema_models import StructuredJobDescription, StructuredResume, _Record

logger = logging.getLogger(__name__)

MIN_SUMMARY_LENGTH = 10

R = TypeVar("R", bound=_Record)
MergeableRecord = Union[StructuredResume, StructuredJobDescription]


def _is_empty(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _fill_missing(base: R, incoming: Optional[R]) -> R:
    if incoming is None:
        return base.model_copy(deep=True)
    updates = {
        name: getattr(incoming, name)
        for name in type(base).model_fields
        if _is_empty(getattr(base, name)) and not _is_empty(getattr(incoming, name))
    }
    return base.model_copy(update=updates, deep=True)


def merge_summary(base: str, incoming: str) -> str:
    base = base or ""
    incoming = incoming or ""
    if not base.strip():
        return incoming
    if len(incoming) > len(base) and len(incoming) >= MIN_SUMMARY_LENGTH:
        return incoming
    return base


def _entry_key(item: _Record):
    key = item.dedup_key()
    if any(key):
        return key
    # Keyless entries only collapse when they are identical
    return ("",) + tuple(sorted((k, repr(v)) for k, v in item.model_dump().items()))


def merge_records(base: List[R], incoming: List[R]) -> List[R]:
    """First non-blank entry per dedup key, base entries before incoming ones."""
    merged: List[R] = []
    seen = set()
    for item in list(base) + list(incoming):
        if item.is_blank():
            continue
        key = _entry_key(item)
        if key in seen:
            continue
        seen.add(key)
        merged.append(item.model_copy(deep=True))
    return merged


def merge_strings(base: List[str], incoming: List[str]) -> List[str]:
    merged: List[str] = []
    seen = set()
    for item in list(base) + list(incoming):
        if item and item not in seen:
            seen.add(item)
            merged.append(item)
    return merged


def merge(base: Optional[MergeableRecord], incoming: Optional[MergeableRecord]) -> MergeableRecord:
    """
    Merge two résumé (or two job description) records.

    Either side may be None, which merges like an empty record.

    Raises:
        TypeError: If the records are of different types
    """
    if base is None and incoming is None:
        raise TypeError("merge() needs at least one record")
    if base is None:
        base = type(incoming)()
    if incoming is None:
        incoming = type(base)()
    if type(base) is not type(incoming):
        raise TypeError(f"Cannot merge {type(incoming).__name__} into {type(base).__name__}")

    values = {}
    for name, field in type(base).model_fields.items():
        left = getattr(base, name)
        right = getattr(incoming, name)
        if name == "summary":
            values[name] = merge_summary(left, right)
        elif isinstance(left, BaseModel):
            values[name] = _fill_missing(left, right)
        elif get_args(field.annotation) == (str,):
            values[name] = merge_strings(left, right)
        elif isinstance(left, list):
            values[name] = merge_records(left, right)
        else:
            values[name] = right if _is_empty(left) and not _is_empty(right) else left

    return type(base)(**values)


def merge_all(records: List[MergeableRecord]) -> Optional[MergeableRecord]:
    """Left fold of merge() over records."""
    result: Optional[MergeableRecord] = None
    for record in records:
        result = merge(result, record)
    return result
