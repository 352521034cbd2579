"""
Input Handler Module for the Pre-Accounting Core.

This module provides the seam towards the external text extractors:
    - Document type detection
    - The RawDocumentText container
    - The TextExtractor interface and a plain-text implementation
"""

from .handler import (
    DocumentType,
    RawDocumentText,
    TextExtractor,
    PlainTextExtractor,
    detect_document_type,
)

__all__ = [
    'DocumentType',
    'RawDocumentText',
    'TextExtractor',
    'PlainTextExtractor',
    'detect_document_type',
]
