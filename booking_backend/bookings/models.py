# module booking_backend.bookings.models
"""Modèles de la feature 'bookings'.
- BookingStatus: pending -> confirmed | cancelled (transitions dans TRANSITIONS).
- Booking: copie transitoire d'une ligne de la table 'bookings' (Supabase reste la source de vérité).
- BookingRequest: corps JSON du formulaire de réservation (validé par bookings.validation).
- CheckoutResult: ce que renvoie submit_booking au front (redirection ou client_secret).
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


# confirmed -> confirmed autorisé: la confirmation est idempotente
TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.CONFIRMED},
    BookingStatus.CANCELLED: set(),
}


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in TRANSITIONS.get(current, set())


class Booking(BaseModel):
    model_config = ConfigDict(use_enum_values=False, extra="ignore")

    id: str
    service_name: str
    service_price: Decimal
    customer_name: str
    customer_email: str
    customer_phone: str
    preferred_date: str
    preferred_time: str
    status: BookingStatus = BookingStatus.PENDING
    stripe_session_id: Optional[str] = None
    idempotency_key: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Booking":
        """Construit un Booking depuis une ligne PostgREST (numeric parfois renvoyé en float)."""
        data = dict(row or {})
        data["id"] = str(data.get("id") or "")
        price = data.get("service_price")
        if isinstance(price, float):
            data["service_price"] = Decimal(str(price))
        return cls.model_validate(data)

    def to_public(self) -> Dict[str, Any]:
        """Vue JSON renvoyée au front (prix en chaîne 2 décimales, pas de clé d'idempotence)."""
        return {
            "id": self.id,
            "service_name": self.service_name,
            "service_price": f"{self.service_price:.2f}",
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "customer_phone": self.customer_phone,
            "preferred_date": self.preferred_date,
            "preferred_time": self.preferred_time,
            "status": self.status.value,
            "stripe_session_id": self.stripe_session_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class BookingRequest(BaseModel):
    """
    Formulaire brut: tous les champs sont des chaînes, la validation métier
    (format email/téléphone, date passée, créneau) est faite par validate_booking_form
    pour produire une erreur par champ au lieu du 422 générique de FastAPI.
    """
    service_id: str = ""
    customer_name: str = ""
    customer_email: str = ""
    customer_phone: str = ""
    preferred_date: str = ""
    preferred_time: str = ""
    idempotency_key: Optional[str] = None


class CancelRequest(BaseModel):
    """Corps de l'annulation depuis la page de checkout abandonné: email saisi à la réservation."""
    customer_email: str = ""


class CheckoutResult(BaseModel):
    booking: Booking
    reference: str
    redirect_url: Optional[str] = None
    client_secret: Optional[str] = None

    def to_public(self) -> Dict[str, Any]:
        return {
            "booking": self.booking.to_public(),
            "reference": self.reference,
            "url": self.redirect_url,
            "client_secret": self.client_secret,
        }
