"""
Currency Matrix

A currency matrix maps each base currency an exchange trades to the ordered
list of quote currencies available against it:

    {BTC: [USD, EUR], ETH: [USD]}

Invariants kept by every builder in this module:
    - keys are unique and keep first-seen order
    - quote lists are deduplicated and keep first-seen order
    - no key maps to an empty list
    - an exchange without tradable pairs yields None, never an empty dict
"""

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from core.currency import BITCOIN_CODES, Currency, currency_for_code
from core.logging import get_logger

logger = get_logger(__name__)

CurrencyMatrix = Dict[Currency, List[Currency]]


def build_currency_matrix(pairs: Iterable[Tuple[Currency, Currency]]) -> Optional[CurrencyMatrix]:
    """
    Build a matrix from (base, quote) pairs.

    Pairs quoting a currency against itself are ignored.

    Returns:
        CurrencyMatrix, or None when no usable pair was given
    """
    matrix: CurrencyMatrix = {}
    for base, quote in pairs:
        if base == quote:
            continue
        quotes = matrix.setdefault(base, [])
        if quote not in quotes:
            quotes.append(quote)
    return matrix or None


def matrix_from_codes(pairs: Iterable[Tuple[str, str]]) -> Optional[CurrencyMatrix]:
    """
    Build a matrix from ticker-code pairs such as ("BTC", "USD").

    Codes missing from the currency catalog are skipped.
    """
    resolved = []
    for base_code, quote_code in pairs:
        base = currency_for_code(base_code)
        quote = currency_for_code(quote_code)
        if base is None or quote is None:
            logger.debug(f"Skipping pair with unknown currency: {base_code}/{quote_code}")
            continue
        resolved.append((base, quote))
    return build_currency_matrix(resolved)


def normalize_currency_matrix(
    mapping: Optional[Mapping[Currency, Sequence[Currency]]]
) -> Optional[CurrencyMatrix]:
    """Re-apply the matrix invariants to an arbitrary mapping."""
    if not mapping:
        return None
    return build_currency_matrix(
        (base, quote) for base, quotes in mapping.items() for quote in quotes
    )


def sort_base_currencies(currencies: Iterable[Currency]) -> List[Currency]:
    """
    Order base currencies for selection and display.

    Bitcoin (BTC, then its XBT alias) always comes first; everything else
    follows by display name, ties broken by code.
    """
    return sorted(
        currencies,
        key=lambda c: (c.code not in BITCOIN_CODES, c.display_name, c.code)
    )
