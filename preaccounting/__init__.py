"""
Financial Pre-Accounting Core - Source Package.

This package turns text recovered from Moroccan invoices and receipts
into confidence-scored financial records. Each module has a single
responsibility.

Modules:
    - input_handler: Text extractor seam and plain-text input
    - extraction: Normalization, field patterns, VAT and validation
    - classification: Incoming/outgoing direction
    - currency: Currency detection, exchange rates and conversion
    - pipeline: Per-document analysis and batch runs

Architecture:
    Raw Text → Extraction → Classification → Currency → DocumentAnalysis
"""

__version__ = "1.0.0"

__all__ = [
    'input_handler',
    'extraction',
    'classification',
    'currency',
    'pipeline',
    'utils'
]
