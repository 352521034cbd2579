"""
Pipeline Module for the Pre-Accounting Core.

This module composes extraction, classification and currency handling
into per-document analyses and sequential batch runs.
"""

from .document_analysis import BatchError, BatchResult, DocumentAnalysis
from .orchestrator import DocumentAnalysisOrchestrator

__all__ = [
    'BatchError',
    'BatchResult',
    'DocumentAnalysis',
    'DocumentAnalysisOrchestrator',
]
