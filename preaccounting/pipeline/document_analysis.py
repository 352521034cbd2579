"""
Document Analysis Data Classes.

This module defines the per-document record assembled by the
orchestrator and the result of a batch run.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from preaccounting.classification.classifier import ClassificationResult
from preaccounting.currency.detector import CurrencyAnalysis, CurrencyMention
from preaccounting.extraction.financial_data import FinancialData


@dataclass
class DocumentAnalysis:
    """
    Final financial record of one document.

    Attributes:
        file_path: Source path, if any
        document_type: Origin format (pdf, image, docx, text, unknown)
        classification: Direction verdict
        financial_data: Extracted fields
        currencies: Currency mentions with MAD conversions
        currency_analysis: Primary currency summary
        has_foreign_currency: Whether any non-MAD mention was found
        total_mad: Sum of the MAD equivalents of all mentions
        confidence: Fraction of the six target fields populated
        processing_time: Wall time of the analysis, in seconds
        processed_at: ISO timestamp of the analysis
        metadata: Extractor metadata plus rate information
        warnings: Validation warnings
        error: Error message when the analysis failed

    Example:
        >>> analysis = await orchestrator.process_document_text(text, "pdf")
        >>> analysis.success, analysis.classification.type
        (True, <Direction.INCOMING: 'incoming'>)
    """
    file_path: Optional[str] = None
    document_type: str = "unknown"
    classification: ClassificationResult = field(default_factory=ClassificationResult)
    financial_data: FinancialData = field(default_factory=FinancialData)
    currencies: List[CurrencyMention] = field(default_factory=list)
    currency_analysis: CurrencyAnalysis = field(default_factory=CurrencyAnalysis)
    has_foreign_currency: bool = False
    total_mad: float = 0.0
    confidence: float = 0.0
    processing_time: float = 0.0
    processed_at: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    error: Optional[str] = None

    def __post_init__(self):
        """Initialize timestamp if not provided."""
        if self.processed_at is None:
            self.processed_at = datetime.now().isoformat()

    @property
    def success(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary format.

        Returns:
            Dictionary representation of the analysis.
        """
        return {
            'file_path': self.file_path,
            'document_type': self.document_type,
            'classification': self.classification.to_dict(),
            'financial_data': self.financial_data.to_dict(),
            'currencies': [mention.to_dict() for mention in self.currencies],
            'currency_analysis': self.currency_analysis.to_dict(),
            'has_foreign_currency': self.has_foreign_currency,
            'total_mad': self.total_mad,
            'confidence': self.confidence,
            'processing_time': self.processing_time,
            'processed_at': self.processed_at,
            'metadata': self.metadata,
            'warnings': self.warnings,
            'error': self.error,
            'success': self.success,
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False, default=str)


@dataclass
class BatchError:
    """A batch item that could not be analyzed."""
    item: Any
    error: str

    def to_dict(self) -> Dict[str, Any]:
        item = getattr(self.item, 'file_path', None) or self.item
        return {'item': str(item), 'error': self.error}


@dataclass
class BatchResult:
    """
    Outcome of a batch run, in input order.

    Attributes:
        results: Analyses of the documents that were processed
        errors: Items that failed, with their error message
        cancelled: Whether the run stopped early on request
    """
    results: List[DocumentAnalysis] = field(default_factory=list)
    errors: List[BatchError] = field(default_factory=list)
    cancelled: bool = False

    @property
    def total(self) -> int:
        return len(self.results) + len(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'results': [analysis.to_dict() for analysis in self.results],
            'errors': [error.to_dict() for error in self.errors],
            'cancelled': self.cancelled,
        }
