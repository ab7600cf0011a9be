import logging

import stripe
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from booking_backend.bookings import service as bookings_service
from booking_backend.payments import stripe_client
from booking_backend.payments.gateway import PaymentGateway, get_payment_gateway

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])

# module booking_backend.payments.views
@router.get("/config")
def payments_config(gateway: PaymentGateway = Depends(get_payment_gateway)):
    """
    Configuration publique pour le front: clé publiable Stripe, stratégie active et devise.
    - La clé secrète et le secret webhook ne sortent jamais du backend.
    """
    settings = gateway.settings
    return {
        "publishable_key": settings.stripe_publishable_key,
        "strategy": gateway.strategy,
        "currency": settings.currency,
        "time_slots": list(settings.time_slots),
    }

@router.post("/webhook", include_in_schema=False)
async def webhook_stripe(request: Request, gateway: PaymentGateway = Depends(get_payment_gateway)):
    """
    Webhook Stripe: confirme ou annule la réservation liée à l'événement.
    - Signature: Stripe-Signature + STRIPE_WEBHOOK_SECRET (400 si invalide)
    - Traitement: bookings_service.handle_provider_event (stratégie active uniquement)
    - Réponses: {"status": "ok"|"ignored"|"pending", ...}; 502 si Supabase/Stripe échoue (Stripe rejoue)
    """
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")
    try:
        event = stripe_client.parse_event(payload, sig_header, gateway.settings.stripe_webhook_secret)
    except (ValueError, stripe.SignatureVerificationError, RuntimeError):
        logger.exception("Erreur webhook_stripe signature/payload")
        raise HTTPException(status_code=400, detail="Invalid Stripe webhook payload")
    result = bookings_service.handle_provider_event(event, gateway)
    logger.info("payments.webhook type=%s result=%s", event.get("type"), result.get("status"))
    return JSONResponse(result)
