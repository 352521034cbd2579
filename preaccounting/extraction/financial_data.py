"""
Financial Data Classes.

This module defines the structured record produced for one document by
the FinancialExtractor.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Direction(str, Enum):
    """Transaction direction of a document, from the bookkeeper's side."""
    INCOMING = "incoming"   # expense: a supplier bills us
    OUTGOING = "outgoing"   # revenue: we bill a client
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class VATInfo:
    """VAT rate (fraction, e.g. 0.2) and VAT amount of a document."""
    rate: float = 0.0
    amount: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {'rate': self.rate, 'amount': self.amount}


@dataclass(frozen=True)
class CompanyInfo:
    """Counterparty names and tax identifiers (ICE, IF, RC...) found in a document."""
    names: Tuple[str, ...] = ()
    tax_ids: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {'names': list(self.names), 'tax_ids': list(self.tax_ids)}


@dataclass(frozen=True)
class FinancialData:
    """
    Fields extracted from one document.

    Instances are immutable; the extractor builds them once per document.

    Attributes:
        amount: Document total, 0 when none was found
        vat_info: VAT rate and amount
        date: Document date as ISO ``YYYY-MM-DD``, or None
        invoice_number: First invoice reference found, or None
        direction: Direction voted from the legacy term lists
        companies: Company names and tax identifiers
        confidence: Fraction of the six target fields populated
        keywords: Canonical financial keywords present in the text
        document_kind: First document-kind keyword (facture, avoir, devis...)
        payment_terms: First payment terms line, or None
        bank_details: Bank account identifiers (RIB, IBAN...)

    Example:
        >>> data = FinancialData(amount=1200.0, vat_info=VATInfo(0.2, 200.0))
        >>> data.populated_fields()
        2
    """
    amount: float = 0.0
    vat_info: VATInfo = field(default_factory=VATInfo)
    date: Optional[str] = None
    invoice_number: Optional[str] = None
    direction: Direction = Direction.UNKNOWN
    companies: CompanyInfo = field(default_factory=CompanyInfo)
    confidence: float = 0.0
    keywords: Tuple[str, ...] = ()
    document_kind: Optional[str] = None
    payment_terms: Optional[str] = None
    bank_details: Tuple[str, ...] = ()

    def populated_fields(self, direction: Optional[Direction] = None) -> int:
        """
        Count the six target fields that carry a value.

        Args:
            direction: Direction to score instead of ``self.direction``
                (the orchestrator scores the final classification).

        Returns:
            Number of populated fields, 0 to 6.
        """
        if direction is None:
            direction = self.direction

        return sum([
            self.amount > 0,
            self.vat_info.amount > 0,
            bool(self.date),
            bool(self.invoice_number),
            len(self.companies.names) > 0,
            Direction(direction) != Direction.UNKNOWN,
        ])

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary format.

        Returns:
            Dictionary representation with snake_case keys.
        """
        return {
            'amount': self.amount,
            'vat_info': self.vat_info.to_dict(),
            'date': self.date,
            'invoice_number': self.invoice_number,
            'direction': self.direction.value,
            'companies': self.companies.to_dict(),
            'confidence': self.confidence,
            'keywords': list(self.keywords),
            'document_kind': self.document_kind,
            'payment_terms': self.payment_terms,
            'bank_details': list(self.bank_details),
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


TARGET_FIELD_COUNT = 6
