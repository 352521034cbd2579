"""
Currency Detection Module.

Finds amounts written with a currency symbol, code or name and scores
each finding. Every catalog currency has four ranked patterns:

    rank 0: amount then symbol     "1 200,00 DH"
    rank 1: symbol then amount     "$500.00"
    rank 2: amount then word       "300 dirhams"
    rank 3: word then amount       "euros 45"

Lower ranks are stricter and start from a higher base confidence.

Usage:
    from preaccounting.currency import CurrencyDetector, analyze_currencies

    detector = CurrencyDetector()
    mentions = detector.detect(raw_text)
    analysis = analyze_currencies(mentions)
    print(analysis.primary_currency, analysis.reliable)
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from config import get_config
from preaccounting.extraction.normalizers import normalize_amount
from preaccounting.utils.exceptions import ConfigurationError
from preaccounting.utils.helpers import clamp_confidence
from preaccounting.utils.logger import get_logger
from .catalog import BASE_CURRENCY, CURRENCIES, Currency

logger = get_logger(__name__)


# Grouped ("1 234,56", "1,234.56") or plain ("500.00") amount
CURRENCY_AMOUNT = r'(\d{1,3}(?:[ .,]\d{3})+(?:[.,]\d{1,2})?|\d+(?:[.,]\d+)?)'
LETTER = r'[^\W\d_]'

COUNTRY_HINTS: Dict[str, re.Pattern] = {
    'MAD': re.compile(r'\bmorocco\b|\bmaroc\w*|المغرب', re.IGNORECASE),
    'USD': re.compile(r'\busa\b|\bunited states\b|\bamerica\b', re.IGNORECASE),
    'EUR': re.compile(r'\beurope\w*|\beu\b', re.IGNORECASE),
    'GBP': re.compile(r'\buk\b|\bunited kingdom\b|\bbritain\b', re.IGNORECASE),
    'AED': re.compile(r'\buae\b|\bemirates\b|الإمارات', re.IGNORECASE),
}
DOCUMENT_HINT = re.compile(r'\binvoice\b|\bfacture\b|فاتورة|\bpayment\b|\bpaiement\b|دفع', re.IGNORECASE)
TAX_ID_HINT = re.compile(r'\btax\s*id\b|\btax\s*number\b|\bvat\s*number\b|\bice\b|\brc\b|\bif\b', re.IGNORECASE)

COUNTRY_BONUS = 0.2
DOCUMENT_BONUS = 0.05
TAX_ID_BONUS = 0.05
SYMBOL_BONUS = 0.1
RELIABLE_PRIMARY_CONFIDENCE = 0.7
MAD_BIAS_RATIO = 0.8


def _token(text: str) -> str:
    """Escape a symbol; alphabetic ends may not touch other letters."""
    pattern = re.escape(text)
    if text[0].isalpha():
        pattern = rf'(?<!{LETTER}){pattern}'
    if text[-1].isalpha():
        pattern = rf'{pattern}(?!{LETTER})'
    return pattern


def _alternation(tokens: Tuple[str, ...]) -> str:
    ordered = sorted(set(tokens), key=len, reverse=True)
    return '(?:' + '|'.join(_token(token) for token in ordered) + ')'


def build_currency_patterns(currency: Currency) -> List[re.Pattern]:
    """
    Build the four ranked patterns of a currency.

    Returns:
        Compiled patterns indexed by rank; group 1 is the amount.
    """
    symbols = _alternation(currency.symbols)
    words = _alternation(currency.words)
    sources = [
        rf'(?<![\d.,]){CURRENCY_AMOUNT}\s*{symbols}',
        rf'{symbols}\s*{CURRENCY_AMOUNT}',
        rf'(?<![\d.,]){CURRENCY_AMOUNT}\s*{words}',
        rf'{words}\s*{CURRENCY_AMOUNT}',
    ]
    return [re.compile(source, re.IGNORECASE) for source in sources]


@dataclass
class CurrencyMention:
    """
    One currency occurrence in a document.

    The detector fills the detection fields; the conversion fields are
    filled in by the orchestrator once MAD rates are known.

    Attributes:
        code: Currency code
        original_amount: Amount as written
        position: Offset of the match in the text
        match_length: Length of the matched span
        full_match: Matched text
        symbol: Primary symbol of the currency
        name: Currency name
        confidence: Detection confidence in [0, 1]
        is_reliable: Whether confidence reaches the currency threshold
        mad_equivalent: Amount converted to MAD
        conversion_rate: Rate applied for the conversion
        conversion_date: Date of the rates used
        formatted_original: Display form of the original amount
        formatted_mad: Display form of the MAD amount
        used_fallback: Whether the static default rates were used
    """
    code: str
    original_amount: float
    position: int
    match_length: int
    full_match: str
    symbol: str
    name: str
    confidence: float
    is_reliable: bool
    mad_equivalent: Optional[float] = None
    conversion_rate: Optional[float] = None
    conversion_date: Optional[str] = None
    formatted_original: Optional[str] = None
    formatted_mad: Optional[str] = None
    used_fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'code': self.code,
            'original_amount': self.original_amount,
            'position': self.position,
            'match_length': self.match_length,
            'full_match': self.full_match,
            'symbol': self.symbol,
            'name': self.name,
            'confidence': self.confidence,
            'is_reliable': self.is_reliable,
            'mad_equivalent': self.mad_equivalent,
            'conversion_rate': self.conversion_rate,
            'conversion_date': self.conversion_date,
            'formatted_original': self.formatted_original,
            'formatted_mad': self.formatted_mad,
            'used_fallback': self.used_fallback,
        }


@dataclass
class CurrencyAnalysis:
    """Document-level currency summary."""
    primary_currency: str = BASE_CURRENCY
    reliable: bool = True
    currencies_found: List[str] = field(default_factory=list)
    most_frequent: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'primary_currency': self.primary_currency,
            'reliable': self.reliable,
            'currencies_found': list(self.currencies_found),
            'most_frequent': [dict(entry) for entry in self.most_frequent],
        }


class CurrencyDetector:
    """
    Detects and scores currency mentions.

    Attributes:
        thresholds: Reliability threshold per currency code
        patterns: Ranked compiled patterns per currency code

    Example:
        >>> detector = CurrencyDetector()
        >>> [m.code for m in detector.detect("Total $500.00, soit 5 000,00 DH")]
        ['USD', 'MAD']
    """

    def __init__(self, thresholds: Optional[Dict[str, float]] = None) -> None:
        self.thresholds = {code: currency.confidence_threshold for code, currency in CURRENCIES.items()}

        overrides = thresholds
        if overrides is None:
            overrides = get_config("currency.confidence_thresholds", {}) or {}
        for code, threshold in overrides.items():
            if code not in CURRENCIES:
                raise ConfigurationError("currency.confidence_thresholds", code, "unknown currency code")
            if not 0 <= float(threshold) <= 1:
                raise ConfigurationError("currency.confidence_thresholds", threshold, "must be within [0, 1]")
            self.thresholds[code] = float(threshold)

        self.patterns = {code: build_currency_patterns(currency) for code, currency in CURRENCIES.items()}
        logger.debug(f"CurrencyDetector initialized with {len(self.patterns)} currencies")

    def detect(self, text: Optional[str]) -> List[CurrencyMention]:
        """
        Find all currency mentions in a text.

        Each pattern is scanned once; matches of one pattern never
        overlap, matches of different patterns may.

        Args:
            text: Raw document text.

        Returns:
            Mentions sorted by position.
        """
        if not text or not isinstance(text, str):
            return []

        context = self._context_bonus_table(text)
        mentions = []

        for code, patterns in self.patterns.items():
            currency = CURRENCIES[code]
            for rank, pattern in enumerate(patterns):
                for match in pattern.finditer(text):
                    amount = normalize_amount(match.group(1))
                    confidence = self.score(currency, match.group(0), rank, context)
                    mentions.append(CurrencyMention(
                        code=code,
                        original_amount=amount,
                        position=match.start(),
                        match_length=len(match.group(0)),
                        full_match=match.group(0),
                        symbol=currency.symbol,
                        name=currency.name,
                        confidence=confidence,
                        is_reliable=confidence >= self.thresholds[code]
                    ))

        mentions.sort(key=lambda mention: mention.position)
        logger.debug(f"Detected {len(mentions)} currency mention(s)")
        return mentions

    def score(self, currency: Currency, matched: str, rank: int, context: Dict[str, float]) -> float:
        """
        Confidence of one match.

        Args:
            currency: Matched currency.
            matched: Matched text.
            rank: Index of the pattern that matched.
            context: Per-code context bonus from the document text.

        Returns:
            Confidence capped at 1.0.
        """
        base = 0.7 + 0.1 * (4 - min(rank, 3))

        has_symbol = any(symbol in matched for symbol in currency.alt_symbols + (currency.symbol,))
        symbol_bonus = SYMBOL_BONUS if has_symbol else 0.0

        return clamp_confidence(base + context[currency.code] + symbol_bonus)

    def _context_bonus_table(self, text: str) -> Dict[str, float]:
        """Context bonus per currency code for a document."""
        shared = 0.0
        if DOCUMENT_HINT.search(text):
            shared += DOCUMENT_BONUS
        if TAX_ID_HINT.search(text):
            shared += TAX_ID_BONUS

        table = {}
        for code in CURRENCIES:
            hint = COUNTRY_HINTS.get(code)
            country = COUNTRY_BONUS if hint is not None and hint.search(text) else 0.0
            table[code] = country + shared
        return table


def analyze_currencies(mentions: Optional[List[CurrencyMention]]) -> CurrencyAnalysis:
    """
    Summarize the currency mentions of a document.

    The leader is the currency with the most mentions, ties broken by
    average confidence. MAD is preferred whenever its score
    (count x average confidence) reaches 80% of the leader's.

    Args:
        mentions: Detected mentions.

    Returns:
        CurrencyAnalysis; MAD and reliable when nothing was detected.

    Example:
        >>> analyze_currencies([]).primary_currency
        'MAD'
    """
    if not mentions:
        return CurrencyAnalysis(primary_currency=BASE_CURRENCY, reliable=True)

    counts: Dict[str, int] = {}
    totals: Dict[str, float] = {}
    for mention in mentions:
        counts[mention.code] = counts.get(mention.code, 0) + 1
        totals[mention.code] = totals.get(mention.code, 0.0) + mention.confidence

    def average(code: str) -> float:
        return totals[code] / counts[code]

    primary = None
    for code in counts:
        if primary is None or (counts[code], average(code)) > (counts[primary], average(primary)):
            primary = code

    if BASE_CURRENCY in counts and primary != BASE_CURRENCY:
        leader_score = counts[primary] * average(primary)
        mad_score = counts[BASE_CURRENCY] * average(BASE_CURRENCY)
        if mad_score >= MAD_BIAS_RATIO * leader_score:
            logger.debug(f"Preferring MAD over {primary} ({mad_score:.2f} vs {leader_score:.2f})")
            primary = BASE_CURRENCY

    reliable = all(
        mention.confidence > RELIABLE_PRIMARY_CONFIDENCE
        for mention in mentions if mention.code == primary
    )

    return CurrencyAnalysis(
        primary_currency=primary,
        reliable=reliable,
        currencies_found=list(counts),
        most_frequent=[
            {'code': code, 'count': count}
            for code, count in sorted(counts.items(), key=lambda item: item[1], reverse=True)
        ]
    )


def detect_currencies(text: Optional[str]) -> List[CurrencyMention]:
    """Detect currency mentions with a default-configured detector."""
    return CurrencyDetector().detect(text)
