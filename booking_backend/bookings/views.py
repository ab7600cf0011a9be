# module booking_backend.bookings.views

"""Endpoints de l'user story Réservation.
- POST /api/v1/bookings: formulaire -> réservation 'pending' + ouverture du paiement (rate-limité).
- GET /api/v1/bookings/confirm: retour de paiement (session_id Checkout ou payment_intent).
- POST /api/v1/bookings/{booking_id}/cancel: checkout abandonné (email du client requis).
- GET /api/v1/bookings?email=...: réservations d'un client (back-office, X-Admin-Key).
Les BookingError sont rendues par app_setup.exceptions ({"error", "detail", "errors"}).
"""
from typing import Optional
import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from booking_backend.bookings import service as bookings_service
from booking_backend.bookings.errors import ValidationError
from booking_backend.bookings.models import BookingRequest, CancelRequest
from booking_backend.payments.gateway import PaymentGateway, get_payment_gateway
from booking_backend.utils.rate_limit import optional_rate_limit
from booking_backend.utils.security import require_admin_key

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/bookings", tags=["Bookings API"])


@router.post("", status_code=201, dependencies=[Depends(optional_rate_limit(times=5, seconds=60))])
def create_booking(form: BookingRequest, gateway: PaymentGateway = Depends(get_payment_gateway)):
    """Crée la réservation et renvoie {booking, reference, url, client_secret}.
    - Stratégie checkout: le front redirige vers `url` (Stripe Checkout hébergé).
    - Stratégie payment_intent: le front monte le Payment Element avec `client_secret`.
    - 422 par champ invalide, 409 si la même soumission est déjà en cours, 502 si Supabase/Stripe échoue.
    """
    result = bookings_service.submit_booking(form, gateway)
    return JSONResponse(result.to_public(), status_code=201)


@router.get("/confirm")
def confirm_booking(
    session_id: Optional[str] = None,
    payment_intent: Optional[str] = None,
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """Retour de paiement: confirme la réservation liée à la référence Stripe.
    - Appelé par la page de succès avec ?session_id=cs_... (Checkout) ou ?payment_intent=pi_...
    - Idempotent: rappeler avec la même référence renvoie la réservation confirmée.
    """
    reference = (session_id or payment_intent or "").strip()
    if not reference:
        raise HTTPException(status_code=400, detail="session_id manquant")
    booking = bookings_service.confirm_from_callback(reference, gateway)
    return {"booking": booking.to_public()}


@router.post("/{booking_id}/cancel", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def cancel_booking(booking_id: str, body: CancelRequest):
    """Annule une réservation 'pending' (page d'annulation du checkout).
    - customer_email requis; 404 s'il ne correspond pas (même réponse qu'un id inconnu).
    """
    if not body.customer_email.strip():
        raise ValidationError({"customer_email": "Email is required"})
    booking = bookings_service.cancel_booking(booking_id, customer_email=body.customer_email)
    return {"booking": booking.to_public()}


@router.get("", dependencies=[Depends(require_admin_key)])
def list_bookings(email: str):
    """Réservations d'un client, les plus récentes d'abord."""
    bookings = bookings_service.list_customer_bookings(email)
    return {"items": [b.to_public() for b in bookings]}
