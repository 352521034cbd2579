"""Tests for the incoming/outgoing direction classifier."""

import pytest

from preaccounting.classification import DirectionClassifier, classify_document, load_keywords
from preaccounting.extraction import Direction, FinancialData
from preaccounting.utils.exceptions import ConfigurationError

# Small vocabulary so scores are easy to reason about
TEST_KEYWORDS = {
    'incoming': {'strong': ['alpha'], 'medium': [], 'weak': []},
    'outgoing': {'strong': [], 'medium': ['beta'], 'weak': ['gamma']},
}


@pytest.fixture
def classifier():
    return DirectionClassifier()


class TestFinancialDataShortcut:
    """Tests for adopting the extractor's direction."""

    def test_adopts_known_direction(self, classifier):
        """Should keep the extractor direction with confidence capped at 0.7."""
        data = FinancialData(direction=Direction.OUTGOING, confidence=0.9)
        result = classifier.classify(data, "fournisseur fournisseur")

        assert result.type == Direction.OUTGOING
        assert result.confidence == pytest.approx(0.7)
        assert result.method == "financial_data"

    def test_keeps_lower_confidence(self, classifier):
        """Should not raise a confidence below the cap."""
        data = FinancialData(direction=Direction.INCOMING, confidence=0.5)
        assert classifier.classify(data, "").confidence == pytest.approx(0.5)


class TestKeywordScoring:
    """Tests for weighted keyword tiers."""

    def test_tier_weights(self):
        """Should weight strong, medium and weak hits 3, 2 and 1."""
        classifier = DirectionClassifier(keywords=TEST_KEYWORDS)
        assert classifier.keyword_scores("alpha beta gamma") == (3, 3)

    def test_clear_winner(self):
        """Should pick the side with the larger normalized score."""
        result = DirectionClassifier(keywords=TEST_KEYWORDS).classify(FinancialData(), "alpha beta")

        assert result.type == Direction.INCOMING
        assert result.confidence == pytest.approx(0.6)
        assert result.method == "keywords"

    def test_tie_is_unknown(self):
        """Should return unknown for equal scores."""
        result = DirectionClassifier(keywords=TEST_KEYWORDS).classify(FinancialData(), "alpha beta gamma")
        assert result.type == Direction.UNKNOWN
        assert result.confidence == pytest.approx(0.5)

    def test_gap_below_margin_is_unknown(self):
        """Should return unknown when the gap is under the tie margin."""
        classifier = DirectionClassifier(keywords=TEST_KEYWORDS, tie_margin=0.25)
        assert classifier.classify(FinancialData(), "alpha beta").type == Direction.UNKNOWN

    def test_no_keywords(self, classifier):
        """Should return unknown with zero confidence for empty text."""
        result = classifier.classify(None, "")
        assert result.type == Direction.UNKNOWN
        assert result.confidence == 0.0

    def test_default_vocabulary(self, classifier):
        """Should classify purchase orders as incoming."""
        result = classifier.classify(FinancialData(), "Bon de commande fournisseur")
        assert result.type == Direction.INCOMING
        assert result.confidence == pytest.approx(0.95)

    def test_classify_document(self):
        """Should classify with a default-configured classifier."""
        result = classify_document(FinancialData(), "Bon de commande fournisseur")
        assert result.type == Direction.INCOMING
        assert result.confidence == pytest.approx(0.95)


class TestStructuralHeuristics:
    """Tests for form fields, ICE order and closing phrases."""

    def test_supplier_field_overrides_keywords(self, classifier):
        """Should trust a supplier header over outgoing keywords."""
        text = "Facture\nFournisseur: Atlas SARL\nvente vendu"
        result = classifier.classify(FinancialData(), text)

        assert result.type == Direction.INCOMING
        assert result.confidence == pytest.approx(0.8)
        assert result.method == "form_structure"

    def test_client_field(self, classifier):
        """Should classify an invoice with a client header as outgoing."""
        result = classifier.classify(FinancialData(), "Facture\nClient: Société Alpha\nTotal 100")
        assert result.type == Direction.OUTGOING
        assert result.method == "form_structure"

    def test_both_form_fields_are_ignored(self):
        """Should not apply the form rule when both headers are present."""
        classifier = DirectionClassifier(keywords=TEST_KEYWORDS)
        result = classifier.classify(FinancialData(), "facture client: abc fournisseur: xyz alpha")
        assert result.method == "keywords"

    @pytest.mark.parametrize("text, direction", [
        ("ICE vendeur: 001525479000017\nICE acheteur: 002233445000019", Direction.OUTGOING),
        ("ICE acheteur: 002233445000019\nICE vendeur: 001525479000017", Direction.INCOMING),
    ])
    def test_ice_order(self, classifier, text, direction):
        """Should treat the issuer's ICE, listed first, as ours."""
        result = classifier.classify(FinancialData(), text)

        assert result.type == direction
        assert result.confidence == pytest.approx(0.85)
        assert result.method == "ice_structure"

    def test_phrase_settles_unknown(self, classifier):
        """Should use a closing phrase when keywords are silent."""
        result = classifier.classify(FinancialData(), "Thank you for your business")

        assert result.type == Direction.OUTGOING
        assert result.confidence == pytest.approx(0.7)
        assert result.method == "phrasing"

    def test_phrase_boosts_matching_verdict(self):
        """Should add 0.1 when the phrase agrees with the verdict."""
        classifier = DirectionClassifier(keywords=TEST_KEYWORDS)
        result = classifier.classify(FinancialData(), "alpha beta. Thank you for your order")

        assert result.type == Direction.INCOMING
        assert result.confidence == pytest.approx(0.7)
        assert result.method == "keywords"

    def test_confidence_is_capped(self, classifier):
        """Should never exceed 0.95."""
        result = classifier.classify(FinancialData(), "vente\nthank you for your business")
        assert result.confidence == pytest.approx(0.95)


class TestClassifierErrors:
    """Tests for failure handling and configuration."""

    def test_failure_gives_error_result(self):
        """Should return unknown/0/error instead of raising."""
        result = DirectionClassifier(keywords={}).classify(FinancialData(), "client")

        assert result.type == Direction.UNKNOWN
        assert result.confidence == 0.0
        assert result.method == "error"

    def test_invalid_tie_margin(self):
        """Should reject a tie margin outside [0, 1]."""
        with pytest.raises(ConfigurationError):
            DirectionClassifier(tie_margin=1.5)

    def test_keyword_override_from_configuration(self, custom_config):
        """Should replace a configured tier and keep the others."""
        custom_config({'classification': {'keywords': {'incoming': {'strong': ['Alpha']}}}})
        keywords = load_keywords()

        assert keywords['incoming']['strong'] == ['alpha']
        assert 'reçu' in keywords['incoming']['weak']

    def test_tie_margin_from_configuration(self, custom_config):
        custom_config({'classification': {'tie_margin': 0.3}})
        assert DirectionClassifier().tie_margin == pytest.approx(0.3)

    def test_to_dict(self, classifier):
        payload = classifier.classify(FinancialData(), "Thank you for your business").to_dict()
        assert payload == {'type': 'outgoing', 'confidence': 0.7, 'method': 'phrasing'}
