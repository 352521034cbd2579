"""
Text Input Handler Module.

The pre-accounting core never reads PDFs or images itself: OCR and text-layer
extraction live in external extractors that hand back raw text plus basic
metadata. This module defines that seam and ships one concrete extractor for
plain-text OCR dumps, which is what the command line uses.

Usage:
    from preaccounting.input_handler import PlainTextExtractor

    extractor = PlainTextExtractor()
    document = await extractor.extract_text("scans/facture_0042.pdf.txt")
    print(document.document_type)   # DocumentType.PDF

Classes:
    DocumentType: Origin format of a document
    RawDocumentText: Text handed to the core by an extractor
    TextExtractor: Interface for external text extractors
    PlainTextExtractor: Reads UTF-8 text files
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from preaccounting.utils.logger import get_logger
from preaccounting.utils.helpers import get_file_extension, validate_file_exists
from preaccounting.utils.exceptions import (
    InputError,
    UnsupportedDocumentTypeError,
    DocumentNotFoundError,
    TextExtractionError
)


logger = get_logger(__name__)


class DocumentType(str, Enum):
    """Origin format of a document."""
    PDF = "pdf"
    IMAGE = "image"
    DOCX = "docx"
    TEXT = "text"
    UNKNOWN = "unknown"


# Extension to document type, mirrors the formats the OCR side accepts
EXTENSION_TYPES = {
    '.pdf': DocumentType.PDF,
    '.jpg': DocumentType.IMAGE,
    '.jpeg': DocumentType.IMAGE,
    '.png': DocumentType.IMAGE,
    '.tiff': DocumentType.IMAGE,
    '.gif': DocumentType.IMAGE,
    '.bmp': DocumentType.IMAGE,
    '.doc': DocumentType.DOCX,
    '.docx': DocumentType.DOCX,
    '.txt': DocumentType.TEXT,
    '.text': DocumentType.TEXT,
}


def detect_document_type(filepath: Union[str, Path]) -> DocumentType:
    """
    Detect the origin format of a document from its extension.

    A text dump named after its source (``scan.pdf.txt``) reports the
    source format.

    Example:
        >>> detect_document_type("facture.png")
        <DocumentType.IMAGE: 'image'>
        >>> detect_document_type("facture.pdf.txt")
        <DocumentType.PDF: 'pdf'>
    """
    path = Path(filepath)
    document_type = EXTENSION_TYPES.get(get_file_extension(path), DocumentType.UNKNOWN)

    if document_type == DocumentType.TEXT:
        inner = EXTENSION_TYPES.get(get_file_extension(path.stem))
        if inner is not None and inner != DocumentType.TEXT:
            document_type = inner

    return document_type


@dataclass
class RawDocumentText:
    """
    Text handed in by an upstream extractor.

    Attributes:
        text: Raw recovered text, line breaks preserved
        document_type: Origin format of the document
        metadata: Extractor-specific metadata (pages, OCR engine, ...)
        file_path: Source path, if the document came from a file
    """
    text: str
    document_type: DocumentType = DocumentType.UNKNOWN
    metadata: Dict[str, Any] = field(default_factory=dict)
    file_path: Optional[str] = None

    def __repr__(self) -> str:
        return (
            f"RawDocumentText(file='{self.file_path}', "
            f"type='{self.document_type.value}', "
            f"chars={len(self.text)})"
        )


class TextExtractor(ABC):
    """
    Interface for the format-specific text extractors.

    Implementations may be slow (OCR) and are awaited by the orchestrator.
    They raise an InputError subclass when the document cannot be read.
    """

    @abstractmethod
    async def extract_text(self, source: Any) -> RawDocumentText:
        """
        Recover the text of a document.

        Args:
            source: Document reference (usually a path).

        Returns:
            RawDocumentText for the document.
        """
        pass


class PlainTextExtractor(TextExtractor):
    """
    Extractor for plain-text OCR dumps.

    Attributes:
        supported_extensions: Set of accepted file extensions
        encoding: Text encoding used to read files

    Example:
        >>> extractor = PlainTextExtractor()
        >>> files = extractor.collect_files("./ocr_dumps/")
        >>> document = await extractor.extract_text(files[0])
    """

    SUPPORTED_EXTENSIONS = {'.txt', '.text'}

    def __init__(self, encoding: str = "utf-8") -> None:
        self.supported_extensions = set(self.SUPPORTED_EXTENSIONS)
        self.encoding = encoding
        logger.debug(f"PlainTextExtractor initialized with extensions: {self.supported_extensions}")

    def validate_file(self, filepath: Union[str, Path]) -> Path:
        """
        Validate that a file exists and has a supported extension.

        Raises:
            DocumentNotFoundError: If file doesn't exist.
            UnsupportedDocumentTypeError: If file type is not supported.
        """
        path = Path(filepath)

        if not path.exists():
            raise DocumentNotFoundError(str(filepath))

        if not validate_file_exists(path):
            raise InputError(f"Path is not a file: {filepath}")

        extension = get_file_extension(path)
        if extension not in self.supported_extensions:
            raise UnsupportedDocumentTypeError(extension, sorted(self.supported_extensions))

        return path

    async def extract_text(self, source: Any) -> RawDocumentText:
        """
        Read a text dump from disk.

        Args:
            source: Path to the text file.

        Returns:
            RawDocumentText with the file contents.

        Raises:
            DocumentNotFoundError, UnsupportedDocumentTypeError,
            TextExtractionError: If the file cannot be read.
        """
        path = self.validate_file(source)
        logger.info(f"Extracting text from: {path.name}")

        try:
            text = await asyncio.to_thread(path.read_text, encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise TextExtractionError(str(path), str(e)) from e

        document = RawDocumentText(
            text=text,
            document_type=detect_document_type(path),
            metadata={
                'filename': path.name,
                'size_bytes': path.stat().st_size,
                'encoding': self.encoding,
            },
            file_path=str(path)
        )

        logger.debug(f"Text extraction completed: {document}")
        return document

    def collect_files(
        self,
        directory: Union[str, Path],
        recursive: bool = False
    ) -> List[Path]:
        """
        Collect all supported files in a directory, sorted by path.

        Raises:
            DocumentNotFoundError: If the directory doesn't exist.
        """
        directory = Path(directory)

        if not directory.exists():
            raise DocumentNotFoundError(str(directory))

        if not directory.is_dir():
            raise InputError(f"Path is not a directory: {directory}")

        files = []
        pattern = "**/*" if recursive else "*"

        for ext in self.supported_extensions:
            files.extend(directory.glob(f"{pattern}{ext}"))
            files.extend(directory.glob(f"{pattern}{ext.upper()}"))

        files = sorted(set(files))
        logger.info(f"Found {len(files)} text files in {directory}")
        return files
