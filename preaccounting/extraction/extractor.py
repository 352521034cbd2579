"""
Financial Field Extractor Module.

This module applies the field pattern catalog to document text and
decides which of several matches becomes the field value.

Usage:
    from preaccounting.extraction import FinancialExtractor

    extractor = FinancialExtractor()
    data = extractor.extract(raw_text, document_type="pdf")
    print(data.amount, data.vat_info.rate, data.direction)

Classes:
    FinancialExtractor: Builds a FinancialData record from raw text
"""

import re
from dataclasses import replace
from typing import List, Optional, Tuple

from preaccounting.utils.logger import get_logger
from .financial_data import (
    CompanyInfo,
    Direction,
    FinancialData,
    TARGET_FIELD_COUNT,
    VATInfo,
)
from .normalizers import DateNormalizer, normalize_amount
from .patterns import find_all
from .text_normalizer import TextNormalizer
from .vat import VATResolver

logger = get_logger(__name__)


# Unweighted vote lists for the direction found at extraction time
INCOMING_TERMS = (
    'fournisseur', 'supplier', 'nous avons acheté', 'we purchased',
    'achat', 'purchase', 'bon de commande', 'order', 'bon de reception',
)
OUTGOING_TERMS = (
    'client', 'customer', 'nous avons vendu', 'we sold', 'vente',
    'sale', 'prestation', 'service provided', 'bon de livraison',
)

# (reported keyword, pattern); the French term is the canonical name
KEYWORD_PATTERNS: Tuple[Tuple[str, re.Pattern], ...] = tuple(
    (source.split('|')[0], re.compile(source, re.IGNORECASE))
    for source in (
        'facture|invoice',
        'avoir|credit note',
        'devis|quote',
        'commande|order',
        'paiement|payment',
        'livraison|delivery',
        'total',
        'tva|vat',
        'remise|discount',
        'achat|purchase',
        'vente|sale',
        'client|customer',
        'fournisseur|supplier',
        'montant|amount',
    )
)


class FinancialExtractor:
    """
    Extracts financial fields from document text.

    Every ``find_*`` method expects text already passed through the
    TextNormalizer; ``extract`` does the normalization itself.

    Attributes:
        text_normalizer: TextNormalizer applied before matching
        vat_resolver: VATResolver for rate and amount
        date_normalizer: DateNormalizer for the document date

    Example:
        >>> extractor = FinancialExtractor()
        >>> data = extractor.extract("Facture N° FA-2024-001 Total TTC : 1 200,00 DH")
        >>> data.amount
        1200.0
        >>> data.invoice_number
        'FA-2024-001'
    """

    def __init__(
        self,
        text_normalizer: Optional[TextNormalizer] = None,
        vat_resolver: Optional[VATResolver] = None,
        date_normalizer: Optional[DateNormalizer] = None
    ) -> None:
        self.text_normalizer = text_normalizer or TextNormalizer()
        self.vat_resolver = vat_resolver or VATResolver()
        self.date_normalizer = date_normalizer or DateNormalizer()

        logger.debug("FinancialExtractor initialized")

    def find_total_amount(self, text: str) -> float:
        """
        Find the document total.

        The largest total-keyword-tagged amount wins. Without any tagged
        amount, the largest amount-like token of the whole text is used,
        which can pick up identifiers or years.

        Args:
            text: Normalized document text.

        Returns:
            Total amount, 0.0 if nothing numeric was found.
        """
        tagged = [normalize_amount(m.value) for m in find_all(text, 'total_amount')]
        if tagged:
            return max(tagged)

        amounts = [normalize_amount(m.value) for m in find_all(text, 'amount')]
        if amounts:
            logger.debug("No tagged total, using the largest amount in the text")
            return max(amounts)

        return 0.0

    def find_document_date(self, text: str) -> Optional[str]:
        """Parse the first date of the text to ISO format, or None."""
        matches = find_all(text, 'date')
        if not matches:
            return None
        return self.date_normalizer.normalize(matches[0].value)

    def find_vat_info(self, text: str) -> VATInfo:
        """Resolve VAT rate and amount."""
        return self.vat_resolver.resolve(text)

    def find_invoice_number(self, text: str) -> Optional[str]:
        """Return the first invoice reference, or None."""
        matches = find_all(text, 'invoice_number')
        return matches[0].value if matches else None

    def extract_companies(self, text: str) -> CompanyInfo:
        """Collect every company name and tax identifier match."""
        return CompanyInfo(
            names=tuple(m.value for m in find_all(text, 'company_name')),
            tax_ids=tuple(m.value for m in find_all(text, 'tax_id'))
        )

    def find_document_direction(self, text: str) -> Direction:
        """
        Vote on the document direction with unweighted term lists.

        Each term present counts one point for its side; a tie gives
        ``Direction.UNKNOWN``.

        Args:
            text: Document text.

        Returns:
            Direction with the most distinct terms present.
        """
        lowered = (text or '').lower()
        incoming = sum(1 for term in INCOMING_TERMS if term in lowered)
        outgoing = sum(1 for term in OUTGOING_TERMS if term in lowered)

        if incoming == outgoing:
            return Direction.UNKNOWN
        return Direction.INCOMING if incoming > outgoing else Direction.OUTGOING

    def extract_keywords(self, text: str) -> List[str]:
        """Return the canonical financial keywords present in the text."""
        return [name for name, pattern in KEYWORD_PATTERNS if pattern.search(text or '')]

    def find_document_kind(self, text: str) -> Optional[str]:
        """Return the first document-kind keyword, lowercased, or None."""
        matches = find_all(text, 'document_kind')
        return matches[0].value.lower() if matches else None

    def find_payment_terms(self, text: str) -> Optional[str]:
        """Return the first payment terms fragment, or None."""
        matches = find_all(text, 'payment_terms')
        return matches[0].value if matches else None

    def find_bank_details(self, text: str) -> List[str]:
        """Return every bank account identifier."""
        return [m.value for m in find_all(text, 'bank_details')]

    def extract(self, text: Optional[str], document_type: str = "unknown") -> FinancialData:
        """
        Extract all financial fields from raw document text.

        Args:
            text: Raw document text.
            document_type: Origin format, used for logging only.

        Returns:
            FinancialData; an empty record if extraction fails.
        """
        logger.debug(
            f"Extracting financial data ({document_type}, {len(text or '')} chars)"
        )

        try:
            cleaned = self.text_normalizer.normalize(text)

            data = FinancialData(
                amount=self.find_total_amount(cleaned),
                vat_info=self.find_vat_info(cleaned),
                date=self.find_document_date(cleaned),
                invoice_number=self.find_invoice_number(cleaned),
                direction=self.find_document_direction(cleaned),
                companies=self.extract_companies(cleaned),
                keywords=tuple(self.extract_keywords(cleaned)),
                document_kind=self.find_document_kind(cleaned),
                payment_terms=self.find_payment_terms(cleaned),
                bank_details=tuple(self.find_bank_details(cleaned)),
            )
            data = _with_confidence(data)

            logger.info(
                f"Financial data extracted: amount={data.amount}, "
                f"confidence={data.confidence:.2f}"
            )
            return data

        except Exception as e:
            logger.error(f"Financial data extraction failed: {e}")
            return FinancialData()


def _with_confidence(data: FinancialData) -> FinancialData:
    """Return a copy of data scored by its populated target fields."""
    return replace(data, confidence=data.populated_fields() / TARGET_FIELD_COUNT)


def extract_financial_data(text: Optional[str], document_type: str = "unknown") -> FinancialData:
    """Extract financial data with a default-configured extractor."""
    return FinancialExtractor().extract(text, document_type)


__all__ = [
    'FinancialExtractor',
    'extract_financial_data',
    'INCOMING_TERMS',
    'OUTGOING_TERMS',
    'KEYWORD_PATTERNS',
]
