"""
Erreurs typées de la feature 'bookings'.
Chaque erreur porte un `kind` stable (rendu JSON) et un message sûr pour l'utilisateur final;
la cause technique (Supabase, Stripe) reste chaînée via __cause__ et n'est jamais renvoyée telle quelle.
"""
from typing import Dict, Optional


class BookingError(Exception):
    kind = "booking_error"
    status_code = 400
    message = "Booking request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)


class ValidationError(BookingError):
    """Erreurs de saisie par champ (ex: {"customer_email": "Please enter a valid email address"})."""
    kind = "validation"
    status_code = 422
    message = "Please fix the errors below"

    def __init__(self, errors: Dict[str, str], message: Optional[str] = None):
        self.errors = dict(errors)
        super().__init__(message)


class NotFoundError(BookingError):
    kind = "not_found"
    status_code = 404
    message = "Booking not found"


class ExternalServiceError(BookingError):
    """Échec d'un appel Supabase ou Stripe (réseau, réponse non-2xx, timeout)."""
    kind = "external_service"
    status_code = 502
    message = "Service temporarily unavailable, please try again"

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class IntegrityError(BookingError):
    """Plusieurs réservations pour une même référence de session Stripe."""
    kind = "integrity"
    status_code = 500
    message = "Booking data is inconsistent"


class DuplicateSubmissionError(BookingError):
    kind = "duplicate_submission"
    status_code = 409
    message = "This booking is already being processed"


class StatusTransitionError(BookingError):
    kind = "invalid_transition"
    status_code = 409
    message = "This booking can no longer be changed"


class PaymentNotCompletedError(BookingError):
    kind = "payment_not_completed"
    status_code = 400
    message = "Payment has not been completed"
