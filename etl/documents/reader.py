"""
Document Reader - extract plain text from résumé and job posting files.

Supports:
- PDF (.pdf): text of every page, pages separated by a blank line
- Word Documents (.docx): paragraphs in order (empty paragraphs kept as blank
  lines), then table rows
- Plain Text / Markdown (.txt, .md)

PDF text extraction sometimes leaves "(cid:NN)" glyph placeholders for
characters the font could not map; these are removed.
"""
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from docx import Document
from pypdf import PdfReader

logger = logging.getLogger(__name__)

CID_ARTIFACT = re.compile(r"\(cid:\d+\)")


class DocumentReadError(ValueError):
    """Raised when a document cannot be read or has an unsupported format."""


@dataclass
class SourceDocument:
    """Text read from a document file.

    Attributes:
        text: Extracted text
        format: File format ('pdf', 'docx', 'txt', 'md')
        source_path: Original file path
    """
    text: str
    format: str
    source_path: str


def clean_extracted_text(text: str) -> str:
    """Remove glyph artifacts and trailing whitespace, normalize line endings."""
    text = CID_ARTIFACT.sub("", text or "")
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return "\n".join(line.rstrip() for line in text.split("\n")).strip()


class DocumentReader:
    """Read text from document files, routing on the file extension."""

    SUPPORTED_FORMATS = {
        '.pdf', '.docx', '.txt', '.md'
    }

    def read(self, file_path: str) -> SourceDocument:
        """Read a document and return its text.

        Args:
            file_path: Path to the document

        Returns:
            SourceDocument with cleaned text

        Raises:
            FileNotFoundError: If file doesn't exist
            DocumentReadError: If format is unsupported or reading fails
        """
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"Document not found: {file_path}")

        ext = path.suffix.lower()
        if ext not in self.SUPPORTED_FORMATS:
            supported = ', '.join(sorted(self.SUPPORTED_FORMATS))
            raise DocumentReadError(
                f"Unsupported document format: {ext}. "
                f"Supported formats: {supported}"
            )

        logger.info(f"Reading document {file_path} (format: {ext})")

        if ext == '.pdf':
            text = self._read_pdf(path)
        elif ext == '.docx':
            text = self._read_docx(path)
        else:
            text = self._read_text(path)

        text = clean_extracted_text(text)
        if not text:
            logger.warning(f"No text extracted from {path}")

        return SourceDocument(text=text, format=ext.lstrip('.'), source_path=str(path))

    def _read_text(self, path: Path) -> str:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return f.read()
        except UnicodeDecodeError as e:
            raise DocumentReadError(
                f"File encoding issue in {path}: {e}. "
                f"Ensure file is UTF-8 encoded."
            )

    def _read_docx(self, path: Path) -> str:
        """Paragraph text followed by table rows (cells joined by spaces)."""
        try:
            doc = Document(str(path))
        except Exception as e:
            raise DocumentReadError(f"Failed to read DOCX file {path}: {e}")

        lines = [para.text.strip() for para in doc.paragraphs]

        for table in doc.tables:
            for row in table.rows:
                row_texts = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if row_texts:
                    lines.append(' '.join(row_texts))

        logger.debug(f"Read DOCX {path} ({len(doc.paragraphs)} paragraphs, {len(doc.tables)} tables)")
        return '\n'.join(lines)

    def _read_pdf(self, path: Path) -> str:
        try:
            reader = PdfReader(path)
        except Exception as e:
            raise DocumentReadError(f"Failed to read PDF file {path}: {e}")

        if len(reader.pages) == 0:
            raise DocumentReadError(f"PDF file has no pages: {path}")

        pages_text = []
        for i, page in enumerate(reader.pages):
            try:
                page_text = page.extract_text()
                if page_text and page_text.strip():
                    pages_text.append(page_text.strip())
            except Exception as e:
                logger.warning(f"Failed to extract text from page {i + 1}: {e}")

        if not pages_text:
            logger.warning(
                f"No text extracted from PDF {path}. "
                f"The PDF may be scanned images or have text extraction disabled."
            )

        logger.debug(f"Read PDF {path} ({len(reader.pages)} pages)")
        return '\n\n'.join(pages_text)

    def is_supported(self, file_path: str) -> bool:
        return Path(file_path).suffix.lower() in self.SUPPORTED_FORMATS
