"""
Financial Data Validators Module.

This module provides sanity checks for extracted records:
    - Date fields
    - Amount and VAT fields
    - Cross-field consistency (VAT amount against total)

Validation never rejects a record; findings are attached to the
document analysis as warnings.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from config import get_config
from preaccounting.utils.logger import get_logger
from .financial_data import FinancialData

logger = get_logger(__name__)


class DateValidator:
    """
    Validates ISO date fields.

    Example:
        >>> validator = DateValidator()
        >>> validator.validate("2024-03-15")
        (True, 'Valid date')
        >>> validator.validate("1899-01-01")
        (False, 'Year 1899 is too old')
    """

    def __init__(self) -> None:
        self.date_format = get_config("extraction.date.output_format", "%Y-%m-%d")
        self.min_year = get_config("extraction.validation.min_year", 2000)
        self.max_year = get_config("extraction.validation.max_year", 2100)

    def validate(self, date_str: Optional[str]) -> Tuple[bool, str]:
        """
        Validate a date string with detailed feedback.

        Args:
            date_str: Date string to validate.

        Returns:
            Tuple of (is_valid, message).
        """
        if not date_str:
            return False, "Date is empty"

        try:
            parsed = datetime.strptime(date_str, self.date_format)
        except ValueError as e:
            return False, f"Invalid date format: {str(e)}"

        if parsed.year < self.min_year:
            return False, f"Year {parsed.year} is too old"
        if parsed.year > self.max_year:
            return False, f"Year {parsed.year} is too far in future"

        return True, "Valid date"

    def is_future_date(self, date_str: str) -> bool:
        """Check if date is in the future."""
        try:
            parsed = datetime.strptime(date_str, self.date_format)
            return parsed > datetime.now()
        except ValueError:
            return False


class AmountValidator:
    """
    Validates amount fields.

    Example:
        >>> AmountValidator().validate(-5)
        (False, 'Amount cannot be negative')
    """

    MIN_AMOUNT = 0.0

    def __init__(self) -> None:
        self.max_amount = float(get_config("extraction.validation.max_amount", 1e9))

    def validate(self, amount: float) -> Tuple[bool, str]:
        """
        Validate an amount with detailed feedback.

        Args:
            amount: Amount value.

        Returns:
            Tuple of (is_valid, message).
        """
        if amount < self.MIN_AMOUNT:
            return False, "Amount cannot be negative"

        if amount > self.max_amount:
            return False, f"Amount {amount} exceeds maximum"

        return True, "Valid amount"


class ValidationResult:
    """
    Contains the result of validation checks.

    Attributes:
        is_valid: Overall validation result
        errors: List of error messages
        warnings: List of warning messages
        field_results: Per-field validation results
    """

    def __init__(self):
        self.is_valid = True
        self.errors: List[str] = []
        self.warnings: List[str] = []
        self.field_results: Dict[str, Tuple[bool, str]] = {}

    def add_error(self, message: str) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(message)

    def add_field_result(self, field: str, is_valid: bool, message: str) -> None:
        """Add a field-level validation result."""
        self.field_results[field] = (is_valid, message)
        if not is_valid:
            self.add_error(f"{field}: {message}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'is_valid': self.is_valid,
            'errors': self.errors,
            'warnings': self.warnings,
            'field_results': {
                field: {'valid': valid, 'message': message}
                for field, (valid, message) in self.field_results.items()
            }
        }


class FinancialDataValidator:
    """
    Checks an extracted record for implausible values.

    Only populated fields are checked; missing fields are reported as
    warnings. A VAT amount larger than the total is flagged.

    Example:
        >>> result = FinancialDataValidator().validate(data)
        >>> result.is_valid, result.warnings
    """

    def __init__(self) -> None:
        self.date_validator = DateValidator()
        self.amount_validator = AmountValidator()
        logger.debug("FinancialDataValidator initialized")

    def validate(self, data: FinancialData) -> ValidationResult:
        """
        Validate one record.

        Args:
            data: Extracted financial data.

        Returns:
            ValidationResult with field results and warnings.
        """
        result = ValidationResult()

        if data.amount > 0:
            result.add_field_result('amount', *self.amount_validator.validate(data.amount))
        else:
            result.add_warning("No total amount found")

        if data.vat_info.amount > 0:
            result.add_field_result(
                'vat_amount', *self.amount_validator.validate(data.vat_info.amount)
            )
            if data.amount > 0 and data.vat_info.amount > data.amount:
                result.add_warning(
                    f"VAT amount {data.vat_info.amount} exceeds total {data.amount}"
                )

        if not 0 <= data.vat_info.rate < 1:
            result.add_field_result('vat_rate', False, f"Rate {data.vat_info.rate} out of range")

        if data.date:
            result.add_field_result('date', *self.date_validator.validate(data.date))
            if self.date_validator.is_future_date(data.date):
                result.add_warning(f"Document date {data.date} is in the future")
        else:
            result.add_warning("No document date found")

        if not data.invoice_number:
            result.add_warning("No invoice number found")

        if result.errors:
            logger.warning(f"Validation found {len(result.errors)} error(s): {result.errors}")

        return result
