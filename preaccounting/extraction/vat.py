"""
VAT Resolution Module.

Derives the VAT rate and VAT amount of a document from the pattern
catalog, falling back to the Moroccan standard rate.
"""

from typing import Optional

from config import get_config
from preaccounting.utils.logger import get_logger
from .financial_data import VATInfo
from .normalizers import normalize_amount
from .patterns import PATTERNS, iter_matches

logger = get_logger(__name__)


class VATResolver:
    """
    Resolves VAT rate and amount from normalized text.

    The rate is the first explicit ``TVA|VAT`` percentage found, as a
    fraction; without one the configured default applies (0.20). The
    amount is the first VAT-tagged figure, 0 when there is none.

    Attributes:
        default_rate: Rate used when the document states none

    Example:
        >>> resolver = VATResolver()
        >>> resolver.resolve("Total HT 1 000,00 TVA 20% : 200,00")
        VATInfo(rate=0.2, amount=200.0)
        >>> resolver.resolve("Montant 500,00").rate
        0.2
    """

    def __init__(self, default_rate: Optional[float] = None) -> None:
        if default_rate is None:
            default_rate = get_config("extraction.default_vat_rate", 0.20)
        self.default_rate = float(default_rate)

    def resolve(self, text: str) -> VATInfo:
        """
        Resolve VAT information.

        Args:
            text: Normalized document text.

        Returns:
            VATInfo with rate in [0, 1) and non-negative amount.
        """
        return VATInfo(rate=self.find_rate(text), amount=self.find_amount(text))

    def find_rate(self, text: str) -> float:
        """Return the first explicit VAT percentage as a fraction, or the default."""
        for match in iter_matches(text or '', PATTERNS['vat_rate']):
            try:
                rate = float(match.value.replace(',', '.')) / 100
            except ValueError:
                logger.debug(f"Ignoring unreadable VAT rate: {match.value!r}")
                continue
            logger.debug(f"VAT rate found: {rate}")
            return rate
        return self.default_rate

    def find_amount(self, text: str) -> float:
        """Return the first VAT-tagged amount, or 0."""
        for match in iter_matches(text or '', PATTERNS['vat_amount']):
            return normalize_amount(match.value)
        return 0.0
