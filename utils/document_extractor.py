"""
Utility to extract résumé text from uploaded documents.
Supports: .pdf, .docx, .txt, .md
"""
import io
from pathlib import Path
from typing import Union

import PyPDF2
from docx import Document

SUPPORTED_EXTENSIONS = (".pdf", ".docx", ".txt", ".md")


class UnsupportedDocumentError(ValueError):
    """File extension is not one of SUPPORTED_EXTENSIONS."""


class DocumentExtractor:
    """Extract text content from résumé documents"""

    @staticmethod
    def is_supported(filename: str) -> bool:
        return Path(filename or "").suffix.lower() in SUPPORTED_EXTENSIONS

    @staticmethod
    def extract_text_from_path(path: Union[str, Path], filename: str = None) -> str:
        """
        Extract text from a file on disk.

        Args:
            path: Location of the (temporary) file
            filename: Original upload name; its extension picks the parser
        """
        path = Path(path)
        return DocumentExtractor.extract_text(path.read_bytes(), filename or path.name)

    @staticmethod
    def extract_text(file_content: bytes, filename: str) -> str:
        """
        Extract text from a file based on its extension.

        Args:
            file_content: Raw bytes of the file
            filename: Name of the file (used to determine extension)

        Returns:
            Extracted text, stripped of surrounding whitespace

        Raises:
            UnsupportedDocumentError: If file format is not supported
        """
        extension = Path(filename or "").suffix.lower()

        if extension in ('.md', '.txt'):
            text = DocumentExtractor._extract_text_plain(file_content)
        elif extension == '.docx':
            text = DocumentExtractor._extract_text_docx(file_content)
        elif extension == '.pdf':
            text = DocumentExtractor._extract_text_pdf(file_content)
        else:
            raise UnsupportedDocumentError(f"Unsupported file format: {extension or '(none)'}")

        return text.strip()

    @staticmethod
    def _extract_text_plain(file_content: bytes) -> str:
        try:
            return file_content.decode('utf-8')
        except UnicodeDecodeError:
            return file_content.decode('latin-1')

    @staticmethod
    def _extract_text_docx(file_content: bytes) -> str:
        doc = Document(io.BytesIO(file_content))
        return '\n'.join(paragraph.text for paragraph in doc.paragraphs)

    @staticmethod
    def _extract_text_pdf(file_content: bytes) -> str:
        pdf_reader = PyPDF2.PdfReader(io.BytesIO(file_content))
        # Image-only pages yield None
        return '\n'.join(page.extract_text() or "" for page in pdf_reader.pages)
