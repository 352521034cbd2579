"""
Classification Module for the Pre-Accounting Core.

This module decides whether a document is an expense (incoming) or a
revenue (outgoing) document.
"""

from .classifier import ClassificationResult, DirectionClassifier, classify_document
from .keywords import DEFAULT_KEYWORDS, TIER_WEIGHTS, load_keywords

__all__ = [
    'ClassificationResult',
    'DirectionClassifier',
    'classify_document',
    'DEFAULT_KEYWORDS',
    'TIER_WEIGHTS',
    'load_keywords',
]
