"""
Custom Exceptions Module.

This module defines the exceptions raised inside the pre-accounting core.
Most of them never reach callers of the pipeline: the extractor, the
classifier and the orchestrator convert them into default-valued results.
They still matter at the seams (text extractors, rate providers) where a
failure has to be told apart from an empty result.

Exception Hierarchy:
    PreAccountingError (base)
    ├── InputError
    │   ├── UnsupportedDocumentTypeError
    │   ├── DocumentNotFoundError
    │   └── TextExtractionError
    ├── CurrencyError
    │   ├── UnsupportedCurrencyError
    │   └── ExchangeRateError
    └── ConfigurationError
"""


class PreAccountingError(Exception):
    """
    Base exception for all pre-accounting errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(PreAccountingError):
    """Base exception for document input errors."""
    pass


class UnsupportedDocumentTypeError(InputError):
    """
    Raised when a text extractor cannot handle a file type.

    Example:
        >>> raise UnsupportedDocumentTypeError(".xls", [".txt"])
    """

    def __init__(self, file_type: str, supported_types: list):
        message = f"Unsupported document type: '{file_type}'"
        details = {"file_type": file_type, "supported_types": supported_types}
        super().__init__(message, details)


class DocumentNotFoundError(InputError):
    """Raised when an input document cannot be found."""

    def __init__(self, filepath: str):
        message = f"Document not found: {filepath}"
        details = {"filepath": filepath}
        super().__init__(message, details)


class TextExtractionError(InputError):
    """Raised when the text of a document cannot be recovered."""

    def __init__(self, source: str, reason: str = None):
        message = f"Text extraction failed for: {source}"
        details = {"source": source, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# CURRENCY ERRORS
# =============================================================================

class CurrencyError(PreAccountingError):
    """Base exception for currency detection and conversion errors."""
    pass


class UnsupportedCurrencyError(CurrencyError):
    """Raised when a currency code is outside the supported catalog."""

    def __init__(self, code: str, supported_codes: list):
        message = f"Unsupported currency: '{code}'"
        details = {"code": code, "supported_codes": supported_codes}
        super().__init__(message, details)


class ExchangeRateError(CurrencyError):
    """Raised when exchange rates cannot be obtained from the provider."""

    def __init__(self, provider: str, reason: str = None, date: str = None):
        message = f"Exchange rate lookup failed: {provider}"
        details = {"provider": provider, "reason": reason, "date": date}
        super().__init__(message, details)


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(PreAccountingError):
    """Raised when a configuration value is present but invalid."""

    def __init__(self, key: str, value, reason: str = None):
        message = f"Invalid configuration value for '{key}'"
        details = {"key": key, "value": value, "reason": reason}
        super().__init__(message, details)


__all__ = [
    'PreAccountingError',
    'InputError',
    'UnsupportedDocumentTypeError',
    'DocumentNotFoundError',
    'TextExtractionError',
    'CurrencyError',
    'UnsupportedCurrencyError',
    'ExchangeRateError',
    'ConfigurationError',
]
