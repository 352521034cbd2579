"""
Utility Module for the Pre-Accounting Core.

This module provides common utilities used across all other modules:
    - Logging configuration
    - Exception hierarchy
    - File and dictionary helpers
"""

from .logger import setup_logger, get_logger
from .helpers import (
    ensure_directory,
    get_file_extension,
    merge_dicts,
    clamp_confidence,
)

__all__ = [
    'setup_logger',
    'get_logger',
    'ensure_directory',
    'get_file_extension',
    'merge_dicts',
    'clamp_confidence',
]
