"""Tests for currency detection, scoring and document-level analysis."""

import pytest

from preaccounting.currency import (
    CurrencyDetector,
    CurrencyMention,
    analyze_currencies,
    detect_currencies,
    format_currency,
)
from preaccounting.utils.exceptions import ConfigurationError


def make_mention(code: str, confidence: float, position: int = 0) -> CurrencyMention:
    return CurrencyMention(
        code=code,
        original_amount=100.0,
        position=position,
        match_length=6,
        full_match="100 " + code,
        symbol=code,
        name=code,
        confidence=confidence,
        is_reliable=True,
    )


@pytest.fixture
def detector():
    return CurrencyDetector()


class TestCurrencyDetector:
    """Tests for mention detection."""

    def test_symbols_before_and_after_amount(self, detector):
        """Should find prefixed and suffixed symbols in text order."""
        mentions = detector.detect("Total $500.00, soit 5 000,00 DH")

        assert [m.code for m in mentions] == ["USD", "MAD"]
        assert mentions[0].original_amount == pytest.approx(500.0)
        assert mentions[0].full_match == "$500.00"
        assert mentions[1].original_amount == pytest.approx(5000.0)
        assert mentions[0].confidence == pytest.approx(1.0)

    def test_spelled_out_currency(self, detector):
        """Should score a currency word lower than a symbol."""
        mentions = detector.detect("Montant: 300 dirhams")

        assert len(mentions) == 1
        assert mentions[0].code == "MAD"
        assert mentions[0].original_amount == pytest.approx(300.0)
        assert mentions[0].confidence == pytest.approx(0.9)
        assert mentions[0].is_reliable is False

    def test_context_bonus(self, detector):
        """Should raise confidence for country and document hints."""
        mentions = detector.detect("Facture Maroc: 300 dirhams")
        assert mentions[0].confidence == pytest.approx(1.0)
        assert mentions[0].is_reliable is True

    def test_symbol_inside_word_is_ignored(self, detector):
        """Should not read 'Fr' in 'Frais' as Swiss francs."""
        assert detector.detect("Frais de port 100") == []

    def test_grouped_amount_is_one_mention(self, detector):
        """Should capture a space-grouped amount whole."""
        mentions = detector.detect("Total: 1 200,00 MAD")
        assert len(mentions) == 1
        assert mentions[0].original_amount == pytest.approx(1200.0)

    def test_arabic_symbol(self, detector):
        """Should recognize the dirham sign in Arabic script."""
        mentions = detector.detect("المبلغ 250 درهم")
        assert [(m.code, m.original_amount) for m in mentions] == [("MAD", 250.0)]

    @pytest.mark.parametrize("text", [None, "", "Merci pour votre visite"])
    def test_nothing_to_detect(self, detector, text):
        assert detector.detect(text) == []

    def test_threshold_override(self):
        """Should apply injected reliability thresholds."""
        mentions = CurrencyDetector(thresholds={"MAD": 0.85}).detect("Montant: 300 dirhams")
        assert mentions[0].is_reliable is True

    @pytest.mark.parametrize("thresholds", [{"XYZ": 0.5}, {"USD": 1.5}])
    def test_invalid_thresholds(self, thresholds):
        """Should reject unknown codes and out-of-range thresholds."""
        with pytest.raises(ConfigurationError):
            CurrencyDetector(thresholds=thresholds)

    def test_thresholds_from_configuration(self, custom_config):
        custom_config({'currency': {'confidence_thresholds': {'MAD': 0.85}}})
        assert CurrencyDetector().thresholds["MAD"] == pytest.approx(0.85)

    @pytest.mark.parametrize("text, confidence", [
        ("dollars 100", 0.8),
        ("Dollars 100", 0.9),
    ])
    def test_symbol_bonus_is_case_sensitive(self, detector, text, confidence):
        """Should only add the symbol bonus for an exact-case symbol."""
        mentions = detector.detect(text)
        assert [(m.code, m.confidence) for m in mentions] == [("USD", pytest.approx(confidence))]

    def test_lowercase_name_below_threshold(self, detector):
        """Should leave a lowercase Canadian dollar mention unreliable."""
        cad = [m for m in detector.detect("Canadian dollars 100") if m.code == "CAD"]

        assert len(cad) == 1
        assert cad[0].confidence == pytest.approx(0.8)
        assert cad[0].is_reliable is False

    def test_confidence_bounds_and_reliability(self, detector):
        """Should keep every confidence in [0, 1] and reliability tied to the threshold."""
        text = (
            "Facture Maroc ICE 001525479000017: Total $1,500.00, soit 15 000,00 DH, "
            "1 200 €, 200 dollars, Canadian dollars 100, £75, 300 dirhams, CHF 40"
        )
        mentions = detector.detect(text)

        assert {m.code for m in mentions} >= {"USD", "MAD", "EUR", "GBP", "CAD", "CHF"}
        for mention in mentions:
            assert 0.0 <= mention.confidence <= 1.0
            assert mention.is_reliable == (mention.confidence >= detector.thresholds[mention.code])

    def test_detect_currencies(self):
        """Should detect with a default-configured detector."""
        mentions = detect_currencies("Total: 1 200,00 MAD")
        assert [(m.code, m.original_amount) for m in mentions] == [("MAD", 1200.0)]


class TestAnalyzeCurrencies:
    """Tests for primary currency selection."""

    def test_no_mentions_defaults_to_mad(self):
        """Should report MAD as a reliable primary currency."""
        analysis = analyze_currencies([])
        assert analysis.primary_currency == "MAD"
        assert analysis.reliable is True
        assert analysis.currencies_found == []

    def test_mad_bias(self):
        """Should prefer MAD when its score reaches 80% of the leader's."""
        mentions = [
            make_mention("USD", 0.9), make_mention("USD", 0.9),
            make_mention("MAD", 0.8), make_mention("MAD", 0.8),
        ]
        analysis = analyze_currencies(mentions)

        assert analysis.primary_currency == "MAD"
        assert analysis.reliable is True

    def test_clear_foreign_leader(self):
        """Should keep a foreign currency that clearly dominates."""
        mentions = [make_mention("USD", 0.9) for _ in range(3)] + [make_mention("MAD", 0.9)]
        analysis = analyze_currencies(mentions)

        assert analysis.primary_currency == "USD"
        assert analysis.currencies_found == ["USD", "MAD"]
        assert analysis.most_frequent == [{"code": "USD", "count": 3}, {"code": "MAD", "count": 1}]

    def test_low_confidence_primary_is_unreliable(self):
        """Should mark the analysis unreliable for weak primary mentions."""
        analysis = analyze_currencies([make_mention("EUR", 0.6)])
        assert analysis.primary_currency == "EUR"
        assert analysis.reliable is False


class TestFormatCurrency:
    """Tests for display formatting."""

    @pytest.mark.parametrize("amount, code, expected", [
        (1234.5, "MAD", "1 234,50 د.م."),
        (1234.5, "USD", "$1,234.50"),
        (1234.5, "EUR", "1 234,50 €"),
        (1234.5, "GBP", "£1,234.50"),
        (1234.5, "JPY", "¥1,235"),
        (2.5, "JPY", "¥3"),
        (1234.5, "XOF", "1,234.50 XOF"),
    ])
    def test_format(self, amount, code, expected):
        assert format_currency(amount, code) == expected
