"""
Field Pattern Catalog.

Regular expressions for the fields of Moroccan invoices and receipts,
written against normalized text (see text_normalizer). All patterns are
case-insensitive; where a pattern has a capture group, group 1 holds the
field value.

Amounts accept '.', ',' and space as grouping characters so that
"1 234,56", "1.234,56" and "1,234.56" are captured whole; the
AmountNormalizer decides which separator is the decimal one.
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterator, List

# Grouped amount ("1 234,56") or plain amount ("1234.56")
AMOUNT_FRAGMENT = (
    r'\b\d{1,3}(?:[ .,]\d{3})*(?:[ .,]\d{2})?\b'
    r'|\b\d+(?:[ .,]\d{2})?\b'
)

VAT_LABEL = r'(?:\bTVA\b|\bVAT\b|\bT\.V\.A\.?|ض\.ق\.م\.?)'

MONTH_NAMES = (
    r'janvier|février|fevrier|mars|avril|mai|juin|juillet|août|aout|septembre|octobre|novembre|décembre|decembre'
    r'|january|february|march|april|may|june|july|august|september|october|november|december'
    r'|janv|jan|févr|fév|fev|feb|mar|avr|apr|juil|jun|jul|aoû|aug|sept|sep|oct|nov|déc|dec'
)

PATTERN_SOURCES: Dict[str, str] = {
    # Any amount, optionally followed by a currency marker
    'amount': (
        rf'({AMOUNT_FRAGMENT})'
        r'(?:\s*(?:MAD|DHS|DH|د\.م\.|\$|USD|EUR|€))?'
    ),

    # "TVA 20% : 200,00" -> 200,00 ; a percentage is never read as the amount
    'vat_amount': (
        rf'{VAT_LABEL}\s*(?:\d{{1,2}}(?:[,.]\d{{1,2}})?\s*%)?(?:\s*:)?\s*'
        rf'({AMOUNT_FRAGMENT})(?!\s*%)'
    ),

    # "TVA 20%", "VAT at 5.5 %"
    'vat_rate': (
        rf'{VAT_LABEL}\s*(?:à|a|at|de|of)?\s*(\d{{1,2}}(?:[,.]\d{{1,2}})?)\s*%'
    ),

    # 15/03/2024, 15-03-24, 2024-03-15, 15 mars 2024
    'date': (
        r'\b(\d{1,2}[/-]\d{1,2}[/-]\d{2,4}'
        r'|\d{4}-\d{2}-\d{2}'
        rf'|\d{{1,2}}\s+(?:{MONTH_NAMES})\.?\s+\d{{2,4}})(?!\w)'
    ),

    # A bare 'N' label also matches inside words ("fourNisseur"), kept for
    # compatibility with existing extraction results
    'invoice_number': (
        r'(?:(?:\bN°|\bNo\b\.?|\bNr\b\.?|#|\bR[ée]f[ée]rence\b|\bRef\b\.?|N\.?)\s*:?\s*'
        r'|\bfacture(?:\s+n°|\s+no\b\.?|\s*:)\s*)'
        r'([A-Z0-9][-A-Z0-9/]{3,25})'
    ),

    # ICE, IF, RC, patente, taxe professionnelle
    'tax_id': (
        r'(?:\bICE|\bIF|\bRC|\bPATENTE|\bTP|\bI\.F\.|\bidentifiant\s+fiscal)(?![A-Za-z])'
        r'(?:\s+(?:vendeur|acheteur|client|fournisseur))?'
        r'\.?\s*:?\s*([0-9]{1,15})'
    ),

    'company_name': (
        r'(?:\bsoci[ée]t[ée]|\bcompany|\bentreprise|\bs\.a\.r\.l\.?|\bsarl|\bs\.a\.?(?=\s)|\bsa)(?:\s*:\s*|\s+)'
        r"([A-Za-zÀ-ÿ0-9][A-Za-zÀ-ÿ0-9 &'-]{2,49})"
    ),

    'document_kind': (
        r'\b(?:facture|invoice|credit note|debit note|delivery note|bon de livraison'
        r'|avoir|note de débit|devis|quotation|pro\s*forma)\b'
    ),

    # "Total TTC : 1 200,00", "Montant HT 1 000,00"
    'total_amount': (
        r'\b(?:total|montant|amount|somme)(?:\s+(?:ht|ttc|tva incluse|net))?\s*(?::)?\s*'
        rf'({AMOUNT_FRAGMENT})'
    ),

    'payment_terms': (
        r'\b(?:payment|paiement)(?:\s+(?:terms|conditions|délai))?\s*(?::)?\s*([^\n]{5,50})'
    ),

    'bank_details': (
        r'\b(?:rib|iban|account|compte)\b(?:\s+(?:number|bancaire|banque))?\s*(?::)?\s*([A-Z0-9]{10,30})'
    ),
}


def compile_patterns(sources: Dict[str, str]) -> Dict[str, re.Pattern]:
    """Compile a pattern source table, case-insensitively."""
    return {name: re.compile(source, re.IGNORECASE) for name, source in sources.items()}


PATTERNS: Dict[str, re.Pattern] = compile_patterns(PATTERN_SOURCES)


@dataclass(frozen=True)
class FieldMatch:
    """
    One regex hit for a field pattern.

    Attributes:
        raw: Full matched text
        value: Captured group 1, or the full match for group-less patterns
        position: Offset of the match in the scanned text
        pattern_index: Position of the pattern within its field's pattern list
    """
    raw: str
    value: str
    position: int
    pattern_index: int = 0


def iter_matches(text: str, pattern: re.Pattern, pattern_index: int = 0) -> Iterator[FieldMatch]:
    """
    Yield every non-overlapping match of a pattern in a single pass.

    Args:
        text: Text to scan.
        pattern: Compiled pattern.
        pattern_index: Index recorded on each FieldMatch.

    Yields:
        FieldMatch per hit, in text order.
    """
    for match in pattern.finditer(text):
        value = match.group(1) if pattern.groups and match.group(1) else match.group(0)
        yield FieldMatch(
            raw=match.group(0),
            value=value.strip(),
            position=match.start(),
            pattern_index=pattern_index
        )


def find_all(text: str, field_name: str) -> List[FieldMatch]:
    """
    Collect all matches of a catalog field.

    Example:
        >>> [m.value for m in find_all("ICE: 001525479000017", "tax_id")]
        ['001525479000017']
    """
    return list(iter_matches(text, PATTERNS[field_name]))
