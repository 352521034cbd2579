"""
Extraction Module for the Pre-Accounting Core.

This module turns raw document text into a FinancialData record:
    - Text normalization
    - Amount and date normalization
    - Field pattern catalog and match policies
    - VAT resolution
    - Record validation
"""

from .text_normalizer import TextNormalizer, normalize_text
from .normalizers import AmountNormalizer, DateNormalizer, normalize_amount
from .patterns import PATTERNS, FieldMatch, iter_matches, find_all
from .financial_data import Direction, VATInfo, CompanyInfo, FinancialData
from .vat import VATResolver
from .extractor import FinancialExtractor, extract_financial_data
from .validators import FinancialDataValidator, ValidationResult

__all__ = [
    'TextNormalizer',
    'normalize_text',
    'AmountNormalizer',
    'DateNormalizer',
    'normalize_amount',
    'PATTERNS',
    'FieldMatch',
    'iter_matches',
    'find_all',
    'Direction',
    'VATInfo',
    'CompanyInfo',
    'FinancialData',
    'VATResolver',
    'FinancialExtractor',
    'extract_financial_data',
    'FinancialDataValidator',
    'ValidationResult',
]
