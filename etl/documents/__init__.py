"""Document text reading for PDF, DOCX and plain text files."""
from etl.documents.reader import DocumentReader, DocumentReadError, SourceDocument, clean_extracted_text

__all__ = [
    'DocumentReader',
    'DocumentReadError',
    'SourceDocument',
    'clean_extracted_text',
]
