"""
Classification Vocabulary.

Keyword tiers and structural patterns used by the DirectionClassifier.
The tables are plain data: a deployment can replace or extend any tier
through the ``classification.keywords`` configuration key without
touching the scoring code.
"""

import re
from typing import Dict, List

from config import get_config
from preaccounting.utils.helpers import merge_dicts

# Points per keyword hit
TIER_WEIGHTS: Dict[str, int] = {
    'strong': 3,
    'medium': 2,
    'weak': 1,
}

# incoming = expense documents (supplier bills), outgoing = revenue (client bills)
DEFAULT_KEYWORDS: Dict[str, Dict[str, List[str]]] = {
    'incoming': {
        'strong': [
            'fournisseur', 'supplier', 'achat', 'purchase',
            'bon de commande', 'purchase order', 'nous vous devons',
            'we owe you', 'achats', 'purchases', 'bon de reception',
            'à payer', 'to pay', 'créditeur', 'creditor',
        ],
        'medium': [
            'livré par', 'delivered by', 'réception', 'receipt',
            'charge', 'expense', 'dépense', 'acheteur', 'buyer',
            'note de frais', 'expense report', 'paiement au fournisseur',
            'supplier payment',
        ],
        'weak': [
            'reçu', 'received', 'entrée', 'input', 'imported',
            'importation',
        ],
    },
    'outgoing': {
        'strong': [
            'client', 'customer', 'vente', 'sale', 'vendu', 'sold',
            'bon de livraison', 'delivery note', 'nous vous facturons',
            'we invoice you', 'vous nous devez', 'you owe us',
            'à recevoir', 'to receive', 'débiteur', 'debtor',
        ],
        'medium': [
            'livré à', 'delivered to', 'prestation', 'service provided',
            'revenu', 'revenue', 'vendeur', 'seller', 'export',
            'exportation', 'client payment', 'paiement client',
        ],
        'weak': [
            'envoyé', 'sent', 'sortie', 'output', 'exported',
        ],
    },
}

# Form fields of an invoice header
INVOICE_MARKERS = ('facture', 'invoice')
CLIENT_FIELD = re.compile(r'(?:client|customer)\s*:\s*([^\n]{3,40})', re.IGNORECASE)
SUPPLIER_FIELD = re.compile(r'(?:fournisseur|supplier)\s*:\s*([^\n]{3,40})', re.IGNORECASE)

# Seller and buyer ICE (15 digits)
ICE_SELLER = re.compile(r'ice\s+vendeur\s*:\s*([0-9]{15})', re.IGNORECASE)
ICE_BUYER = re.compile(r'ice\s+acheteur\s*:\s*([0-9]{15})', re.IGNORECASE)

# Closing phrases
INCOMING_PHRASES = (
    'nous vous remercions pour votre commande',
    'thank you for your order',
    'bon de reception de marchandise',
)
OUTGOING_PHRASES = (
    'nous vous remercions pour votre confiance',
    'thank you for your business',
    'bon de livraison',
)


def load_keywords() -> Dict[str, Dict[str, List[str]]]:
    """
    Return the keyword tiers with configuration overrides applied.

    Overrides replace a whole tier; tiers not mentioned keep their
    defaults. Keywords are lowercased for substring matching.

    Example:
        >>> load_keywords()['incoming']['strong'][0]
        'fournisseur'
    """
    overrides = get_config("classification.keywords", {}) or {}
    merged = merge_dicts(DEFAULT_KEYWORDS, overrides)

    return {
        side: {tier: [keyword.lower() for keyword in merged.get(side, {}).get(tier, [])]
               for tier in TIER_WEIGHTS}
        for side in ('incoming', 'outgoing')
    }
