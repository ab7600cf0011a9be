"""
Conversion des montants: décimal (affichage, base) <-> unités mineures entières (Stripe).
Tout montant envoyé à Stripe passe par to_minor_units; from_minor_units ne sert qu'à l'affichage.
"""
from decimal import Decimal, InvalidOperation
from typing import Union

Amount = Union[Decimal, str, int, float]

CURRENCY_SYMBOLS = {"gbp": "£", "eur": "€", "usd": "$"}

_TWO_PLACES = Decimal("0.01")

def _to_decimal(amount: Amount) -> Decimal:
    # float -> str d'abord, sinon 49.99 devient 49.9899999...
    try:
        value = Decimal(str(amount)) if isinstance(amount, float) else Decimal(amount)
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError(f"Montant invalide: {amount!r}")
    if not value.is_finite():
        raise ValueError(f"Montant invalide: {amount!r}")
    return value

def to_minor_units(amount: Amount) -> int:
    """
    49.99 -> 4999. Refuse les montants négatifs et ceux à plus de 2 décimales
    (aucun arrondi silencieux).
    """
    value = _to_decimal(amount)
    if value < 0:
        raise ValueError(f"Montant négatif: {amount!r}")
    if value != value.quantize(_TWO_PLACES):
        raise ValueError(f"Plus de 2 décimales: {amount!r}")
    return int(value * 100)

def from_minor_units(minor: int) -> Decimal:
    """4999 -> Decimal('49.99')."""
    return (Decimal(int(minor)) / 100).quantize(_TWO_PLACES)

def format_amount(amount: Amount, currency: str = "gbp") -> str:
    """Affichage: format_amount(89) -> '£89.00'; devise inconnue -> '89.00 CHF'."""
    value = _to_decimal(amount).quantize(_TWO_PLACES)
    symbol = CURRENCY_SYMBOLS.get((currency or "").lower())
    if symbol:
        return f"{symbol}{value:,.2f}"
    return f"{value:,.2f} {(currency or '').upper()}".strip()
