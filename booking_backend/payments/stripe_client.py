"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.
Les gateways (payments.gateway) passent leur clé secrète; aucune lecture d'environnement ici.
"""
import stripe
from typing import Any, Dict, List, Optional

# module booking_backend.payments.stripe_client
def require_stripe(api_key: str):
    """
    Prépare et retourne le module stripe prêt à l'emploi.
    - En absence de clé, lève RuntimeError plutôt que de laisser le SDK échouer plus tard.
    """
    if not api_key:
        raise RuntimeError("STRIPE_SECRET_KEY manquant")
    stripe.api_key = api_key
    return stripe

def as_dict(obj: Any) -> Dict[str, Any]:
    """StripeObject -> dict (selon la version du SDK, StripeObject n'hérite plus de dict)."""
    if obj is None:
        return {}
    if isinstance(obj, dict):
        return obj
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return dict(obj)

def create_session(
    *,
    api_key: str,
    line_items: List[Dict[str, Any]],
    success_url: str,
    cancel_url: str,
    metadata: Dict[str, str],
    customer_email: Optional[str] = None,
    client_reference_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Crée une session Stripe Checkout (mode "payment").
    Retour: dict session (ex: {"id": "cs_test_...", "url": "https://checkout.stripe.com/..."})
    """
    require_stripe(api_key)
    params: Dict[str, Any] = {
        "line_items": line_items,
        "mode": "payment",
        "success_url": success_url,
        "cancel_url": cancel_url,
        "metadata": metadata,
        "payment_method_types": ["card"],
    }
    if customer_email:
        params["customer_email"] = customer_email
    if client_reference_id:
        params["client_reference_id"] = client_reference_id
    return as_dict(stripe.checkout.Session.create(**params))

def get_session(api_key: str, session_id: str) -> Dict[str, Any]:
    """Session Checkout par id: inclut "payment_status", "metadata", etc."""
    require_stripe(api_key)
    return as_dict(stripe.checkout.Session.retrieve(session_id))

def create_payment_intent(
    *,
    api_key: str,
    amount: int,
    currency: str,
    metadata: Dict[str, str],
    receipt_email: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Crée un PaymentIntent (amount en unités mineures).
    Retour: dict incluant "id", "client_secret", "status".
    """
    require_stripe(api_key)
    params: Dict[str, Any] = {
        "amount": amount,
        "currency": currency,
        "metadata": metadata,
        "automatic_payment_methods": {"enabled": True},
    }
    if receipt_email:
        params["receipt_email"] = receipt_email
    return as_dict(stripe.PaymentIntent.create(**params))

def get_payment_intent(api_key: str, intent_id: str) -> Dict[str, Any]:
    require_stripe(api_key)
    return as_dict(stripe.PaymentIntent.retrieve(intent_id))

def parse_event(payload: bytes, sig_header: Optional[str], webhook_secret: str) -> Dict[str, Any]:
    """
    Parse et valide un événement Stripe signé (webhook).
    - Valide la signature via Webhook.construct_event (STRIPE_WEBHOOK_SECRET)
    - Lève ValueError (payload) ou stripe.SignatureVerificationError (signature)
    """
    if not webhook_secret:
        raise RuntimeError("STRIPE_WEBHOOK_SECRET manquant")
    event = stripe.Webhook.construct_event(payload, sig_header or "", webhook_secret)
    return as_dict(event)
