"""
Messages utilisateur pour les erreurs Stripe.
Le détail renvoyé par Stripe n'est jamais affiché tel quel: seul le code est traduit.
"""
from typing import Optional

STRIPE_ERROR_MESSAGES = {
    "card_declined": "Your card was declined. Please try a different payment method.",
    "expired_card": "Your card has expired. Please use a different card.",
    "incorrect_cvc": "Your card's security code is incorrect.",
    "processing_error": "An error occurred while processing your card. Please try again.",
    "incorrect_number": "Your card number is incorrect.",
    "incomplete_number": "Your card number is incomplete.",
    "incomplete_cvc": "Your card's security code is incomplete.",
    "incomplete_expiry": "Your card's expiration date is incomplete.",
}

GENERIC_PAYMENT_ERROR = "payment session failed"

def user_message(exc: BaseException) -> str:
    """Message sûr pour une exception Stripe (code connu) sinon message générique."""
    code: Optional[str] = getattr(exc, "code", None)
    return STRIPE_ERROR_MESSAGES.get(code or "", GENERIC_PAYMENT_ERROR)
