"""
Text Normalization Module.

Prepares raw OCR text for the field pattern catalog: whitespace runs
collapse to one space, line breaks become a ``" \\n "`` token so that
single-line patterns keep scanning across them, and characters outside
the allowed scripts are blanked out.
"""

import re
from typing import Optional

from config import get_config
from preaccounting.utils.logger import get_logger

logger = get_logger(__name__)


# Basic Latin, Latin-1 Supplement and Latin Extended-A cover French
# accents plus the °, £ and ¥ signs; the euro sign and the Arabic block
# keep currency and tax-id labels intact.
EXTENDED_DISALLOWED = re.compile(
    r'[^\t\n\r\x20-\x7E\u00A0-\u017F\u20AC\u0600-\u06FF]'
)
ASCII_DISALLOWED = re.compile(r'[^\t\n\r\x20-\x7E]')

LINE_BREAKS = re.compile(r'\s*[\r\n]+\s*')
HORIZONTAL_SPACE = re.compile(r'[^\S\n]+')

LINE_BREAK_TOKEN = " \n "


class TextNormalizer:
    """
    Normalizes raw document text before pattern matching.

    Attributes:
        strict_ascii: Strip everything outside printable ASCII

    Example:
        >>> TextNormalizer().normalize("Total :\\t1 200,00   DH\\r\\n\\r\\nMerci")
        'Total : 1 200,00 DH \\n Merci'
    """

    def __init__(self, strict_ascii: Optional[bool] = None) -> None:
        if strict_ascii is None:
            strict_ascii = get_config("extraction.normalizer.strict_ascii", False)
        self.strict_ascii = bool(strict_ascii)
        self._disallowed = ASCII_DISALLOWED if self.strict_ascii else EXTENDED_DISALLOWED

    def normalize(self, text: Optional[str]) -> str:
        """
        Normalize text for single-line regex scanning.

        Args:
            text: Raw text, may be None.

        Returns:
            Normalized text; empty string for empty input.
        """
        if not text:
            return ''

        cleaned = self._disallowed.sub(' ', text)
        cleaned = LINE_BREAKS.sub('\n', cleaned)
        cleaned = HORIZONTAL_SPACE.sub(' ', cleaned)
        cleaned = cleaned.strip().replace('\n', LINE_BREAK_TOKEN)

        logger.debug(f"Normalized text: {len(text)} -> {len(cleaned)} chars")
        return cleaned


def normalize_text(text: Optional[str]) -> str:
    """Normalize text with the configured settings."""
    return TextNormalizer().normalize(text)
