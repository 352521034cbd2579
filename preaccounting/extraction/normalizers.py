"""
Data Normalizers Module.

This module provides normalization functions for:
    - Amounts written with ambiguous decimal/thousands separators
    - Dates in the day-first French and English formats of Moroccan invoices
"""

import re
from datetime import datetime
from typing import Optional

from dateutil import parser as date_parser

from config import get_config
from preaccounting.utils.logger import get_logger

logger = get_logger(__name__)


class AmountNormalizer:
    """
    Resolves amount strings with ambiguous separators into floats.

    This is a best-effort heuristic, not a locale-aware parser. Only the
    positions of the last '.' and the last ',' are inspected:

        - comma after the dot and among the last three characters:
          European format, dots are thousands separators
        - dot after the comma under the same rule: US format
        - commas only: every comma is a decimal point

    Whatever remains is read like a leading-float parse, so trailing
    garbage after the first number is ignored. Failures give 0.0.

    Example:
        >>> normalizer = AmountNormalizer()
        >>> normalizer.normalize("1.234,56 DH")
        1234.56
        >>> normalizer.normalize("$1,234.56")
        1234.56
        >>> normalizer.normalize("1 200,00")
        1200.0
    """

    NON_NUMERIC = re.compile(r'[^\d.,]')
    LEADING_FLOAT = re.compile(r'\d+(?:\.\d*)?|\.\d+')

    def normalize(self, amount_str: Optional[str]) -> float:
        """
        Normalize an amount string to a float.

        Args:
            amount_str: Input amount string (e.g., "1.234,56 MAD").

        Returns:
            Parsed amount, or 0.0 if nothing numeric can be read.
        """
        if not amount_str:
            return 0.0

        cleaned = self.NON_NUMERIC.sub('', str(amount_str))
        cleaned = self._standardize_separators(cleaned)

        match = self.LEADING_FLOAT.match(cleaned)
        if not match:
            logger.debug(f"Could not parse amount: {amount_str!r}")
            return 0.0

        try:
            return float(match.group(0))
        except ValueError:
            logger.debug(f"Could not parse amount: {amount_str!r}")
            return 0.0

    def _standardize_separators(self, cleaned: str) -> str:
        """
        Rewrite separators to the US convention (1234.56).

        Args:
            cleaned: Amount string holding only digits, '.' and ','.

        Returns:
            Amount string with '.' as the only separator.
        """
        last_dot = cleaned.rfind('.')
        last_comma = cleaned.rfind(',')
        tail_limit = len(cleaned) - 4

        if last_comma > last_dot and last_comma > tail_limit:
            # European: 1.234,56
            integer_part = cleaned[:last_comma].replace('.', '').replace(',', '')
            return f"{integer_part}.{cleaned[last_comma + 1:]}"

        if last_dot > last_comma and last_dot > tail_limit:
            # US: 1,234.56
            return cleaned.replace(',', '')

        if last_comma > -1 and last_dot == -1:
            return cleaned.replace(',', '.')

        return cleaned

    def is_valid_amount(self, amount_str: str) -> bool:
        """Check if a string holds a positive amount."""
        return self.normalize(amount_str) > 0


def normalize_amount(amount_str: Optional[str]) -> float:
    """
    Convenience wrapper around AmountNormalizer.normalize.

    Example:
        >>> normalize_amount("1.234,56")
        1234.56
    """
    return _AMOUNT_NORMALIZER.normalize(amount_str)


_AMOUNT_NORMALIZER = AmountNormalizer()


class BilingualParserInfo(date_parser.parserinfo):
    """dateutil parser vocabulary extended with French month names."""

    MONTHS = [
        ("Jan", "January", "janvier", "janv"),
        ("Feb", "February", "février", "fevrier", "fév", "fev", "févr"),
        ("Mar", "March", "mars"),
        ("Apr", "April", "avril", "avr"),
        ("May", "mai"),
        ("Jun", "June", "juin"),
        ("Jul", "July", "juillet", "juil"),
        ("Aug", "August", "août", "aout", "aoû"),
        ("Sep", "Sept", "September", "septembre"),
        ("Oct", "October", "octobre"),
        ("Nov", "November", "novembre"),
        ("Dec", "December", "décembre", "decembre", "déc"),
    ]


class DateNormalizer:
    """
    Normalizes date strings to a standard format.

    Moroccan documents write dates day-first ("15/03/2024",
    "15 mars 2024"), so explicit day-first formats are tried before
    falling back to dateutil with a French-aware vocabulary.

    Attributes:
        output_format: Target date format string
        input_formats: Explicit strptime formats tried first
        dayfirst: Whether ambiguous numeric dates are read day-first

    Example:
        >>> normalizer = DateNormalizer()
        >>> normalizer.normalize("15/03/2024")
        "2024-03-15"
        >>> normalizer.normalize("5 février 2024")
        "2024-02-05"
    """

    def __init__(self) -> None:
        """Initialize the date normalizer with configuration."""
        self.output_format = get_config("extraction.date.output_format", "%Y-%m-%d")
        self.dayfirst = get_config("extraction.date.dayfirst", True)
        self.input_formats = [
            "%d/%m/%Y",
            "%d-%m-%Y",
            "%d/%m/%y",
            "%d-%m-%y",
            "%Y-%m-%d",
        ]
        self.parser_info = BilingualParserInfo(dayfirst=self.dayfirst)

        logger.debug(f"DateNormalizer initialized (output: {self.output_format})")

    def normalize(self, date_str: Optional[str]) -> Optional[str]:
        """
        Normalize a date string to the configured output format.

        Args:
            date_str: Input date string in any recognized format.

        Returns:
            Normalized date string, or None if parsing fails.
        """
        if not date_str:
            return None

        date_str = ' '.join(date_str.split())

        parsed_date = self._try_explicit_formats(date_str)
        if parsed_date is None:
            parsed_date = self._try_dateutil_parser(date_str)

        if parsed_date is None:
            logger.debug(f"Could not parse date: {date_str}")
            return None

        return parsed_date.strftime(self.output_format)

    def _try_explicit_formats(self, date_str: str) -> Optional[datetime]:
        """Try to parse date using explicit format strings."""
        for fmt in self.input_formats:
            try:
                return datetime.strptime(date_str, fmt)
            except ValueError:
                continue
        return None

    def _try_dateutil_parser(self, date_str: str) -> Optional[datetime]:
        """Try to parse date using dateutil with the bilingual vocabulary."""
        try:
            return date_parser.parse(date_str.lower(), parserinfo=self.parser_info)
        except (ValueError, OverflowError):
            return None
