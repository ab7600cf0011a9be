"""
Gateways de paiement: une interface, deux stratégies exclusives choisies par déploiement (PAYMENT_STRATEGY).
- HostedCheckoutGateway ("checkout"): session Stripe Checkout hébergée, retour via success_url?session_id=...
- PaymentIntentGateway ("payment_intent"): PaymentIntent + Payment Element embarqué, confirmé côté client.
La confirmation d'une réservation passe toujours par bookings.service.confirm_from_callback,
qui interroge is_paid() de la stratégie active (point d'arbitrage unique).
"""
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
import logging

import stripe

from booking_backend.config import Settings, get_settings
from booking_backend.bookings.errors import ExternalServiceError
from booking_backend.bookings.models import Booking
from . import stripe_client
from .amounts import to_minor_units
from .messages import user_message
from .metadata import make_metadata

logger = logging.getLogger(__name__)

# PaymentIntent encore confirmable par le Payment Element
RESUMABLE_INTENT_STATUSES = {"requires_payment_method", "requires_confirmation", "requires_action"}


@dataclass(frozen=True)
class PaymentStart:
    """Résultat de l'ouverture d'un paiement: référence Stripe + cible front."""
    reference: str
    redirect_url: Optional[str] = None
    client_secret: Optional[str] = None


class PaymentGateway:
    strategy = ""

    def __init__(self, settings: Settings):
        self.settings = settings

    def start(self, booking: Booking) -> PaymentStart:
        raise NotImplementedError

    def is_paid(self, reference: str) -> bool:
        raise NotImplementedError

    def resume(self, reference: str) -> Optional[PaymentStart]:
        """Paiement encore ouvert pour cette référence (même session/intent), sinon None."""
        raise NotImplementedError

    def _fail(self, action: str, booking_or_ref: str, exc: Exception) -> ExternalServiceError:
        logger.exception("payments.gateway.%s %s failed ref=%s", self.strategy, action, booking_or_ref)
        return ExternalServiceError(user_message(exc), cause=exc)


class HostedCheckoutGateway(PaymentGateway):
    strategy = "checkout"

    def start(self, booking: Booking) -> PaymentStart:
        """
        Crée la session Checkout pour la réservation.
        - une ligne price_data (unit_amount en unités mineures)
        - metadata.booking_id + client_reference_id pour relier session et réservation
        """
        unit_amount = to_minor_units(booking.service_price)
        try:
            session = stripe_client.create_session(
                api_key=self.settings.stripe_secret_key,
                line_items=[{
                    "quantity": 1,
                    "price_data": {
                        "currency": self.settings.currency,
                        "unit_amount": unit_amount,
                        "product_data": {"name": booking.service_name},
                    },
                }],
                success_url=self.settings.success_url,
                cancel_url=self.settings.cancel_url(booking.id),
                metadata=make_metadata(booking.id, booking.service_name, booking.customer_email),
                customer_email=booking.customer_email,
                client_reference_id=booking.id,
            )
        except (stripe.StripeError, RuntimeError) as e:
            raise self._fail("start", booking.id, e) from e
        url = session.get("url")
        session_id = session.get("id")
        if not url or not session_id:
            raise ExternalServiceError("payment session failed")
        return PaymentStart(reference=session_id, redirect_url=url)

    def is_paid(self, reference: str) -> bool:
        try:
            session = stripe_client.get_session(self.settings.stripe_secret_key, reference)
        except (stripe.StripeError, RuntimeError) as e:
            raise self._fail("is_paid", reference, e) from e
        return (session.get("payment_status") or "") == "paid"

    def resume(self, reference: str) -> Optional[PaymentStart]:
        try:
            session = stripe_client.get_session(self.settings.stripe_secret_key, reference)
        except (stripe.StripeError, RuntimeError) as e:
            raise self._fail("resume", reference, e) from e
        url = session.get("url")
        if session.get("status") != "open" or not url:
            return None
        return PaymentStart(reference=reference, redirect_url=url)


class PaymentIntentGateway(PaymentGateway):
    strategy = "payment_intent"

    def start(self, booking: Booking) -> PaymentStart:
        """Crée le PaymentIntent; le front confirme avec client_secret via le Payment Element."""
        amount = to_minor_units(booking.service_price)
        try:
            intent = stripe_client.create_payment_intent(
                api_key=self.settings.stripe_secret_key,
                amount=amount,
                currency=self.settings.currency,
                metadata=make_metadata(booking.id, booking.service_name, booking.customer_email),
                receipt_email=booking.customer_email,
            )
        except (stripe.StripeError, RuntimeError) as e:
            raise self._fail("start", booking.id, e) from e
        client_secret = intent.get("client_secret")
        intent_id = intent.get("id")
        if not client_secret or not intent_id:
            raise ExternalServiceError("payment session failed")
        return PaymentStart(reference=intent_id, client_secret=client_secret)

    def is_paid(self, reference: str) -> bool:
        try:
            intent = stripe_client.get_payment_intent(self.settings.stripe_secret_key, reference)
        except (stripe.StripeError, RuntimeError) as e:
            raise self._fail("is_paid", reference, e) from e
        return (intent.get("status") or "") == "succeeded"

    def resume(self, reference: str) -> Optional[PaymentStart]:
        try:
            intent = stripe_client.get_payment_intent(self.settings.stripe_secret_key, reference)
        except (stripe.StripeError, RuntimeError) as e:
            raise self._fail("resume", reference, e) from e
        client_secret = intent.get("client_secret")
        if intent.get("status") not in RESUMABLE_INTENT_STATUSES or not client_secret:
            return None
        return PaymentStart(reference=reference, client_secret=client_secret)


GATEWAYS = {
    HostedCheckoutGateway.strategy: HostedCheckoutGateway,
    PaymentIntentGateway.strategy: PaymentIntentGateway,
}

def build_gateway(settings: Settings) -> PaymentGateway:
    """Instancie la stratégie configurée; une stratégie inconnue est une erreur de configuration."""
    try:
        cls = GATEWAYS[settings.payment_strategy]
    except KeyError:
        raise RuntimeError(f"PAYMENT_STRATEGY inconnu: {settings.payment_strategy!r} (attendu: {', '.join(GATEWAYS)})")
    return cls(settings)

@lru_cache(maxsize=1)
def get_payment_gateway() -> PaymentGateway:
    """Dépendance FastAPI: gateway unique du process (surchargée dans les tests)."""
    return build_gateway(get_settings())
