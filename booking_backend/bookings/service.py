"""
Cas d'usage 'bookings': orchestre validation, catalogue, repository et gateway de paiement.
Rôles:
- submit_booking: valider le formulaire, créer la réservation 'pending', ouvrir le paiement.
- confirm_from_callback: retour Stripe (success_url / confirmation Payment Element) -> 'confirmed'.
- cancel_booking: checkout abandonné -> 'cancelled'.
- handle_provider_event: webhooks Stripe, routés vers les deux opérations précédentes.
Le gateway est toujours passé par l'appelant (vue/dépendance), jamais construit ici.
"""
from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, List, Optional
import logging
import threading

from booking_backend.catalog import repository as catalog_repository
from booking_backend.payments.gateway import PaymentGateway, PaymentStart
from booking_backend.payments.metadata import extract_booking_ref
from . import repository
from .errors import (
    DuplicateSubmissionError,
    ExternalServiceError,
    NotFoundError,
    PaymentNotCompletedError,
    StatusTransitionError,
    ValidationError,
)
from .models import Booking, BookingRequest, BookingStatus, CheckoutResult, can_transition
from .validation import EMAIL_RE, validate_booking_form

logger = logging.getLogger(__name__)

# Clés d'idempotence des soumissions en cours dans ce process
_inflight: set = set()
_inflight_lock = threading.Lock()

CONFIRM_EVENTS = {
    "checkout.session.completed": "checkout",
    "payment_intent.succeeded": "payment_intent",
}
CANCEL_EVENTS = {
    "checkout.session.expired": "checkout",
    "payment_intent.canceled": "payment_intent",
}


@contextmanager
def submission_guard(key: Optional[str]):
    """
    Verrou anti double-clic: une seule soumission à la fois par clé d'idempotence.
    Sans clé, pas de verrou (le front doit alors désactiver le bouton pendant l'envoi).
    """
    if not key:
        yield
        return
    with _inflight_lock:
        if key in _inflight:
            raise DuplicateSubmissionError()
        _inflight.add(key)
    try:
        yield
    finally:
        with _inflight_lock:
            _inflight.discard(key)

# module booking_backend.bookings.service
def submit_booking(
    form: BookingRequest,
    gateway: PaymentGateway,
    today: Optional[date] = None,
) -> CheckoutResult:
    """
    Crée une réservation 'pending' puis ouvre le paiement Stripe associé.
    Étapes:
      1) Validation pure du formulaire (ValidationError, aucun appel distant)
      2) Lecture de la prestation (prix côté serveur)
      3) Insertion 'pending' (ou réutilisation si la clé d'idempotence a déjà servi)
      4) gateway.start(booking): redirection Checkout ou client_secret
         (paiement encore ouvert réutilisé si la réservation existait déjà)
      5) Rattachement de la référence Stripe à la réservation
    """
    errors = validate_booking_form(form, gateway.settings.time_slots, today=today)
    if not form.service_id.strip():
        errors["service_id"] = "Please select a service"
    if errors:
        raise ValidationError(errors)

    service = catalog_repository.get_service(form.service_id.strip())
    if not service:
        raise ValidationError({"service_id": "Please select a service"})

    key = (form.idempotency_key or "").strip() or None
    with submission_guard(key):
        booking = _existing_submission(key) if key else None
        if booking is None:
            data: Dict[str, Any] = {
                "service_name": service.name,
                "service_price": f"{service.price:.2f}",
                "customer_name": form.customer_name.strip(),
                "customer_email": form.customer_email.strip().lower(),
                "customer_phone": form.customer_phone.strip(),
                "preferred_date": form.preferred_date.strip(),
                "preferred_time": form.preferred_time.strip(),
                "status": BookingStatus.PENDING.value,
            }
            if key:
                data["idempotency_key"] = key
            booking = repository.insert_booking(data)
            logger.info("bookings.submit created id=%s service=%s", booking.id, service.name)

        start = _resume_payment(booking, gateway) if booking.stripe_session_id else None
        if start is None:
            start = gateway.start(booking)
            booking = repository.update_status(booking.id, BookingStatus.PENDING, start.reference)

    return CheckoutResult(
        booking=booking,
        reference=start.reference,
        redirect_url=start.redirect_url,
        client_secret=start.client_secret,
    )

def _existing_submission(key: str) -> Optional[Booking]:
    """Réservation déjà créée pour ce formulaire: réutilisée tant qu'elle est 'pending'."""
    booking = repository.find_by_idempotency_key(key)
    if booking and booking.status != BookingStatus.PENDING:
        raise DuplicateSubmissionError("This booking has already been completed")
    return booking

def _resume_payment(booking: Booking, gateway: PaymentGateway) -> Optional[PaymentStart]:
    """
    Soumission rejouée d'une réservation qui a déjà une référence Stripe:
    - session/intent encore ouvert: on le renvoie (une seule référence payable par réservation)
    - déjà payé: la réservation est confirmée et la soumission refusée
    - expiré/annulé: None, un nouveau paiement sera ouvert
    """
    reference = booking.stripe_session_id
    start = gateway.resume(reference)
    if start is not None:
        logger.info("bookings.submit resumed id=%s ref=%s", booking.id, reference)
        return start
    if gateway.is_paid(reference):
        _confirm(booking, reference, gateway)
        raise DuplicateSubmissionError("This booking has already been completed")
    return None

def confirm_from_callback(reference: str, gateway: PaymentGateway) -> Booking:
    """
    Retour de paiement: reference = session_id (Checkout) ou payment_intent (Payment Element).
    - NotFoundError si aucune réservation ne porte cette référence (aucune mutation).
    - Idempotent: une réservation déjà 'confirmed' est renvoyée telle quelle.
    """
    booking = repository.find_by_session_ref(reference)
    return _confirm(booking, reference, gateway)

def _booking_for_event(booking_id: Optional[str], reference: str) -> Booking:
    """
    Réservation visée par un webhook: par référence Stripe, à défaut par metadata.booking_id
    (cas d'une soumission rejouée dont la référence a été remplacée).
    """
    try:
        return repository.find_by_session_ref(reference)
    except NotFoundError:
        if not booking_id:
            raise
        return repository.find_by_id(booking_id)

def _confirm(booking: Booking, reference: str, gateway: PaymentGateway) -> Booking:
    if booking.status == BookingStatus.CONFIRMED:
        logger.info("bookings.confirm already confirmed id=%s ref=%s", booking.id, reference)
        return booking
    if not can_transition(booking.status, BookingStatus.CONFIRMED):
        logger.error("bookings.confirm refused id=%s status=%s ref=%s", booking.id, booking.status.value, reference)
        raise StatusTransitionError()
    if not gateway.is_paid(reference):
        raise PaymentNotCompletedError()
    try:
        confirmed = repository.update_status(booking.id, BookingStatus.CONFIRMED, reference)
    except ExternalServiceError:
        # Paiement encaissé mais statut non écrit: on affiche quand même la réservation
        logger.warning("bookings.confirm status update failed id=%s ref=%s", booking.id, reference)
        return booking
    logger.info("bookings.confirm confirmed id=%s ref=%s", confirmed.id, reference)
    return confirmed

def cancel_booking(booking_id: str, customer_email: Optional[str] = None) -> Booking:
    """
    Checkout abandonné: pending -> cancelled.
    - customer_email (page d'annulation): doit être celui de la réservation, sinon NotFoundError
      (même réponse qu'un id inconnu). None uniquement pour les webhooks Stripe, déjà authentifiés.
    - déjà 'cancelled': renvoyée telle quelle; 'confirmed': StatusTransitionError.
    """
    booking = repository.find_by_id(booking_id)
    if customer_email is not None and customer_email.strip().lower() != booking.customer_email.lower():
        logger.warning("bookings.cancel email mismatch id=%s", booking_id)
        raise NotFoundError()
    if booking.status == BookingStatus.CANCELLED:
        return booking
    if not can_transition(booking.status, BookingStatus.CANCELLED):
        raise StatusTransitionError()
    cancelled = repository.update_status(booking.id, BookingStatus.CANCELLED)
    logger.info("bookings.cancel cancelled id=%s", cancelled.id)
    return cancelled

def list_customer_bookings(email: str) -> List[Booking]:
    email = (email or "").strip().lower()
    if not EMAIL_RE.match(email):
        raise ValidationError({"email": "Please enter a valid email address"})
    return repository.list_by_customer_email(email)

def handle_provider_event(event: Dict[str, Any], gateway: PaymentGateway) -> Dict[str, Any]:
    """
    Webhook Stripe. Seuls les événements de la stratégie active sont traités,
    afin qu'une seule source puisse écrire le statut d'une réservation.
    - *.completed / *.succeeded: confirm_from_callback (repli sur metadata.booking_id)
    - *.expired / *.canceled: cancel_booking
    - autres: {"status": "ignored"}
    """
    event_type = (event or {}).get("type") or ""
    booking_id, reference = extract_booking_ref(event)

    if CONFIRM_EVENTS.get(event_type) == gateway.strategy and reference:
        try:
            booking = _confirm(_booking_for_event(booking_id, reference), reference, gateway)
        except NotFoundError:
            logger.warning("bookings.webhook unknown booking id=%s ref=%s type=%s", booking_id, reference, event_type)
            return {"status": "ignored"}
        except PaymentNotCompletedError:
            return {"status": "pending"}
        except StatusTransitionError:
            # Paiement reçu sur une réservation annulée: remboursement manuel
            logger.error("bookings.webhook paid after cancel id=%s ref=%s", booking_id, reference)
            return {"status": "ignored"}
        return {"status": "ok", "booking_id": booking.id, "booking_status": booking.status.value}

    if CANCEL_EVENTS.get(event_type) == gateway.strategy and booking_id:
        try:
            booking = cancel_booking(booking_id)
        except (NotFoundError, StatusTransitionError):
            logger.info("bookings.webhook cancel ignored id=%s type=%s", booking_id, event_type)
            return {"status": "ignored"}
        return {"status": "ok", "booking_id": booking.id, "booking_status": booking.status.value}

    return {"status": "ignored"}
