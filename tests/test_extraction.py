"""Tests for the field pattern catalog, VAT resolution and the extractor."""

import pytest

from preaccounting.extraction import (
    CompanyInfo,
    Direction,
    FinancialData,
    FinancialDataValidator,
    FinancialExtractor,
    VATInfo,
    VATResolver,
    extract_financial_data,
    find_all,
)

INVOICE_TEXT = """Société: Atlas Trading SARL
ICE: 001525479000017
Facture N° FA-2024-001
Date: 15/03/2024
Fournisseur: Atlas Trading
Total HT: 1 000,00 MAD
TVA 20%: 200,00 MAD
Total TTC: 1 200,00 MAD
RIB: 011780000012345678901234
"""


class FailingNormalizer:
    def normalize(self, text):
        raise RuntimeError("normalizer exploded")


class TestPatternCatalog:
    """Tests for individual field patterns."""

    def test_tax_id(self):
        """Should capture ICE digits."""
        assert [m.value for m in find_all("ICE: 001525479000017", "tax_id")] == ["001525479000017"]

    def test_invoice_number_after_facture_label(self):
        """Should capture the reference after 'Facture N°'."""
        matches = find_all("Facture N° FA-2024-001", "invoice_number")
        assert matches[0].value == "FA-2024-001"

    def test_invoice_number_after_hash(self):
        """Should capture the reference after '#'."""
        assert find_all("Order #INV4521", "invoice_number")[0].value == "INV4521"

    def test_date_formats(self):
        """Should find numeric and month-name dates in order."""
        text = "Emise le 15/03/2024, échéance 15 avril 2024"
        assert [m.value for m in find_all(text, "date")] == ["15/03/2024", "15 avril 2024"]

    def test_matches_are_non_overlapping_and_ordered(self):
        """Should return every tagged total in text order."""
        matches = find_all("Montant HT 1 000,00 Total TTC 1 200,00", "total_amount")
        assert [m.value for m in matches] == ["1 000,00", "1 200,00"]
        assert matches[0].position < matches[1].position

    def test_bank_details(self):
        """Should capture the account identifier after RIB."""
        assert find_all("RIB: 011780000012345678901234", "bank_details")[0].value == "011780000012345678901234"

    def test_payment_terms(self):
        """Should capture the text after a payment label."""
        assert find_all("Paiement: 30 jours fin de mois", "payment_terms")[0].value == "30 jours fin de mois"

    def test_scan_is_repeatable(self):
        """Should give the same result on a second scan."""
        text = "TVA 20% : 200,00"
        assert find_all(text, "vat_amount") == find_all(text, "vat_amount")


class TestVATResolver:
    """Tests for VAT rate and amount."""

    def test_rate_and_amount(self):
        """Should read the explicit percentage and the tagged amount."""
        assert VATResolver().resolve("Total HT 1 000,00 TVA 20% : 200,00") == VATInfo(rate=0.2, amount=200.0)

    @pytest.mark.parametrize("text, rate", [
        ("TVA 7 %", 0.07),
        ("T.V.A. 14%", 0.14),
        ("TVA 5,5%", 0.055),
        ("VAT at 10%", 0.10),
    ])
    def test_explicit_rates(self, text, rate):
        """Should convert the first percentage to a fraction."""
        assert VATResolver().find_rate(text) == pytest.approx(rate)

    def test_default_rate_without_percentage(self):
        """Should fall back to the Moroccan standard rate."""
        info = VATResolver().resolve("Montant 500,00")
        assert info.rate == pytest.approx(0.20)
        assert info.amount == 0.0

    def test_custom_default_rate(self):
        """Should use the injected default rate."""
        assert VATResolver(default_rate=0.1).resolve("").rate == pytest.approx(0.1)

    def test_percentage_is_not_an_amount(self):
        """Should not read the rate itself as the VAT amount."""
        assert VATResolver().find_amount("TVA 20%") == 0.0


class TestFinancialExtractor:
    """Tests for full record extraction."""

    def test_complete_invoice(self):
        """Should populate all six target fields."""
        data = FinancialExtractor().extract(INVOICE_TEXT, "pdf")

        assert data.amount == pytest.approx(1200.0)
        assert data.vat_info.rate == pytest.approx(0.2)
        assert data.vat_info.amount == pytest.approx(200.0)
        assert data.date == "2024-03-15"
        assert data.invoice_number == "FA-2024-001"
        assert data.direction == Direction.INCOMING
        assert data.companies == CompanyInfo(names=("Atlas Trading SARL",), tax_ids=("001525479000017",))
        assert data.bank_details == ("011780000012345678901234",)
        assert data.document_kind == "facture"
        assert data.confidence == pytest.approx(1.0)

    def test_largest_tagged_total_wins(self):
        """Should keep the largest total-tagged amount."""
        extractor = FinancialExtractor()
        assert extractor.find_total_amount("Montant HT 1 000,00 Total TTC 1 200,00") == pytest.approx(1200.0)

    def test_untagged_amounts_fall_back_to_largest(self):
        """Should use the largest amount-like token without a total label."""
        extractor = FinancialExtractor()
        assert extractor.find_total_amount("Reçu 350,00 et 1 250,50") == pytest.approx(1250.5)

    def test_no_amount(self):
        """Should return 0 when nothing numeric is present."""
        assert FinancialExtractor().find_total_amount("Merci") == 0.0

    @pytest.mark.parametrize("text, direction", [
        ("bon de commande fournisseur", Direction.INCOMING),
        ("prestation client", Direction.OUTGOING),
        ("fournisseur et client", Direction.UNKNOWN),
        ("", Direction.UNKNOWN),
    ])
    def test_direction_vote(self, text, direction):
        """Should vote with unweighted term lists; a tie is unknown."""
        assert FinancialExtractor().find_document_direction(text) == direction

    def test_keywords(self):
        """Should report canonical keyword names in catalog order."""
        assert FinancialExtractor().extract_keywords("Facture client, total TVA") == [
            "facture", "total", "tva", "client"
        ]

    def test_empty_text(self):
        """Should return an empty record for empty text."""
        data = FinancialExtractor().extract(None)
        assert data.amount == 0.0
        assert data.invoice_number is None
        assert data.confidence == 0.0

    def test_failure_returns_default_record(self):
        """Should swallow extraction failures into a default record."""
        data = FinancialExtractor(text_normalizer=FailingNormalizer()).extract("Total 100")
        assert data == FinancialData()

    def test_to_dict(self):
        """Should serialize enums and tuples to plain values."""
        payload = FinancialExtractor().extract(INVOICE_TEXT).to_dict()
        assert payload["direction"] == "incoming"
        assert payload["companies"]["tax_ids"] == ["001525479000017"]
        assert payload["vat_info"] == {"rate": 0.2, "amount": 200.0}

    def test_extract_financial_data(self):
        """Should extract with a default-configured extractor."""
        data = extract_financial_data(INVOICE_TEXT, "pdf")
        assert data == FinancialExtractor().extract(INVOICE_TEXT, "pdf")
        assert data.amount == pytest.approx(1200.0)


class TestFinancialData:
    """Tests for the field count used as confidence."""

    def test_populated_fields(self):
        data = FinancialData(amount=1200.0, vat_info=VATInfo(0.2, 200.0))
        assert data.populated_fields() == 2
        assert data.populated_fields(Direction.OUTGOING) == 3


class TestFinancialDataValidator:
    """Tests for record sanity checks."""

    def test_clean_record(self):
        """Should raise no finding for a complete invoice."""
        result = FinancialDataValidator().validate(FinancialExtractor().extract(INVOICE_TEXT))
        assert result.is_valid
        assert result.warnings == []

    def test_missing_fields_are_warnings(self):
        """Should warn, not fail, on missing fields."""
        result = FinancialDataValidator().validate(FinancialData())
        assert result.is_valid
        assert "No total amount found" in result.warnings
        assert "No invoice number found" in result.warnings

    def test_vat_above_total(self):
        """Should flag a VAT amount larger than the total."""
        data = FinancialData(amount=100.0, vat_info=VATInfo(0.2, 200.0), date="2024-01-01", invoice_number="FA-1")
        result = FinancialDataValidator().validate(data)
        assert any("exceeds total" in warning for warning in result.warnings)

    def test_rate_out_of_range(self):
        """Should report an impossible VAT rate as an error."""
        result = FinancialDataValidator().validate(FinancialData(vat_info=VATInfo(rate=1.5)))
        assert not result.is_valid
        assert "vat_rate" in result.field_results
