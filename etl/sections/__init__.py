"""Section detection - split documents into classified sections."""
from etl.sections.classifier import classify_section
from etl.sections.segmenter import segment_document, is_header_line

__all__ = [
    'classify_section',
    'segment_document',
    'is_header_line',
]
