"""
Document Direction Classifier Module.

Classifies a document as incoming (expense) or outgoing (revenue) from
its extracted financial data and raw text.

Rules, in precedence order:
    1. A direction already found by the extractor is adopted (confidence
       capped at 0.7).
    2. Weighted keyword tiers are scored for both sides and normalized;
       a difference below the tie margin gives ``unknown``.
    3. Invoice form fields and seller/buyer ICE order override the
       keyword verdict.
    4. Closing phrases confirm (+0.1) or settle an ``unknown`` verdict.

Usage:
    from preaccounting.classification import DirectionClassifier

    classifier = DirectionClassifier()
    result = classifier.classify(financial_data, raw_text)
    print(result.type, result.confidence, result.method)
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from config import get_config
from preaccounting.extraction.financial_data import Direction, FinancialData
from preaccounting.utils.exceptions import ConfigurationError
from preaccounting.utils.logger import get_logger
from .keywords import (
    CLIENT_FIELD,
    ICE_BUYER,
    ICE_SELLER,
    INCOMING_PHRASES,
    INVOICE_MARKERS,
    OUTGOING_PHRASES,
    SUPPLIER_FIELD,
    TIER_WEIGHTS,
    load_keywords,
)

logger = get_logger(__name__)

FINANCIAL_DATA_CAP = 0.7
FORM_STRUCTURE_FLOOR = 0.8
ICE_STRUCTURE_FLOOR = 0.85
PHRASE_BOOST = 0.1
PHRASE_CONFIDENCE = 0.7
MAX_CONFIDENCE = 0.95


@dataclass
class ClassificationResult:
    """
    Direction verdict for one document.

    Attributes:
        type: Direction decided
        confidence: Score in [0, 0.95]
        method: Rule that produced the verdict (financial_data, keywords,
            form_structure, ice_structure, phrasing or error)
    """
    type: Direction = Direction.UNKNOWN
    confidence: float = 0.0
    method: str = "keywords"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type.value,
            'confidence': self.confidence,
            'method': self.method,
        }


class DirectionClassifier:
    """
    Rule-based incoming/outgoing classifier.

    The classifier holds no per-document state; ``classify`` is a pure
    function of its arguments and the keyword tables loaded at
    construction.

    Attributes:
        keywords: Keyword tiers per side
        tie_margin: Minimum normalized score gap for a keyword verdict

    Example:
        >>> classifier = DirectionClassifier()
        >>> classifier.classify(FinancialData(), "Bon de commande fournisseur").type
        <Direction.INCOMING: 'incoming'>
    """

    def __init__(
        self,
        keywords: Optional[Dict[str, Dict[str, List[str]]]] = None,
        tie_margin: Optional[float] = None
    ) -> None:
        self.keywords = keywords if keywords is not None else load_keywords()

        if tie_margin is None:
            tie_margin = get_config("classification.tie_margin", 0.1)
        if not 0 <= float(tie_margin) <= 1:
            raise ConfigurationError("classification.tie_margin", tie_margin, "must be within [0, 1]")
        self.tie_margin = float(tie_margin)

        logger.debug(f"DirectionClassifier initialized (tie margin: {self.tie_margin})")

    def classify(self, financial_data: Optional[FinancialData], text: Optional[str]) -> ClassificationResult:
        """
        Classify a document.

        Args:
            financial_data: Record from the FinancialExtractor.
            text: Raw document text.

        Returns:
            ClassificationResult; ``unknown``/0/``error`` if anything fails.
        """
        try:
            if financial_data is not None and financial_data.direction != Direction.UNKNOWN:
                logger.debug(f"Using direction from financial data: {financial_data.direction.value}")
                return ClassificationResult(
                    type=Direction(financial_data.direction),
                    confidence=min(FINANCIAL_DATA_CAP, financial_data.confidence),
                    method="financial_data"
                )

            lowered = (text or '').lower()
            incoming_score, outgoing_score = self.keyword_scores(lowered)
            direction, confidence = self._keyword_verdict(incoming_score, outgoing_score)

            result = self._apply_heuristics(direction, confidence, lowered)

            logger.info(
                f"Document classified as {result.type.value} "
                f"({result.confidence:.2f}, {result.method})"
            )
            return result

        except Exception as e:
            logger.error(f"Document classification failed: {e}")
            return ClassificationResult(type=Direction.UNKNOWN, confidence=0.0, method="error")

    def keyword_scores(self, lowered: str) -> Tuple[int, int]:
        """
        Score both vocabularies against lowercased text.

        Each keyword present counts its tier weight once.

        Returns:
            Tuple of (incoming_score, outgoing_score).
        """
        scores = []
        for side in ('incoming', 'outgoing'):
            score = 0
            for tier, weight in TIER_WEIGHTS.items():
                score += weight * sum(1 for keyword in self.keywords[side][tier] if keyword in lowered)
            scores.append(score)

        logger.debug(f"Keyword scores: incoming={scores[0]}, outgoing={scores[1]}")
        return scores[0], scores[1]

    def _keyword_verdict(self, incoming_score: int, outgoing_score: int) -> Tuple[Direction, float]:
        """Turn raw keyword scores into a direction and confidence."""
        total = incoming_score + outgoing_score
        incoming = incoming_score / total if total else 0.0
        outgoing = outgoing_score / total if total else 0.0

        if abs(incoming - outgoing) < self.tie_margin:
            return Direction.UNKNOWN, max(incoming, outgoing)
        if incoming > outgoing:
            return Direction.INCOMING, incoming
        return Direction.OUTGOING, outgoing

    def _apply_heuristics(self, direction: Direction, confidence: float, lowered: str) -> ClassificationResult:
        """Apply form, ICE and phrasing rules on top of the keyword verdict."""
        method = "keywords"

        # Invoice header fields
        if any(marker in lowered for marker in INVOICE_MARKERS):
            has_client = CLIENT_FIELD.search(lowered) is not None
            has_supplier = SUPPLIER_FIELD.search(lowered) is not None

            if has_client and not has_supplier:
                direction = Direction.OUTGOING
                confidence = max(confidence, FORM_STRUCTURE_FLOOR)
                method = "form_structure"
            elif has_supplier and not has_client:
                direction = Direction.INCOMING
                confidence = max(confidence, FORM_STRUCTURE_FLOOR)
                method = "form_structure"

        # The issuer lists its own ICE first
        seller = ICE_SELLER.search(lowered)
        buyer = ICE_BUYER.search(lowered)
        if seller and buyer:
            direction = Direction.OUTGOING if seller.start() < buyer.start() else Direction.INCOMING
            confidence = max(confidence, ICE_STRUCTURE_FLOOR)
            method = "ice_structure"

        for phrases, phrase_direction in (
            (INCOMING_PHRASES, Direction.INCOMING),
            (OUTGOING_PHRASES, Direction.OUTGOING),
        ):
            if not any(phrase in lowered for phrase in phrases):
                continue
            if direction == phrase_direction:
                confidence += PHRASE_BOOST
            elif direction == Direction.UNKNOWN:
                direction = phrase_direction
                confidence = PHRASE_CONFIDENCE
                method = "phrasing"

        confidence = max(0.0, min(confidence, MAX_CONFIDENCE))
        return ClassificationResult(type=direction, confidence=confidence, method=method)


def classify_document(financial_data: Optional[FinancialData], text: Optional[str]) -> ClassificationResult:
    """Classify a document with a default-configured classifier."""
    return DirectionClassifier().classify(financial_data, text)
