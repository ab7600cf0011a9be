"""
Validation pure du formulaire de réservation (pas de Supabase, pas de Stripe).
Retourne un dict {champ: message}; vide si le formulaire est valide.
"""
import re
from datetime import date
from typing import Dict, Iterable, Optional

from .models import BookingRequest

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\+?[0-9\s\-()]{10,}$")

# module booking_backend.bookings.validation
def validate_booking_form(
    form: BookingRequest,
    time_slots: Iterable[str],
    today: Optional[date] = None,
) -> Dict[str, str]:
    """
    Valide les champs requis du formulaire.
    - customer_name: non vide
    - customer_email: format x@y.z
    - customer_phone: au moins 10 caractères parmi chiffres, espaces, -, (, ), + initial
    - preferred_date: date ISO (YYYY-MM-DD), pas dans le passé (aujourd'hui accepté)
    - preferred_time: un des créneaux proposés
    """
    today = today or date.today()
    errors: Dict[str, str] = {}

    if not form.customer_name.strip():
        errors["customer_name"] = "Name is required"

    email = form.customer_email.strip()
    if not email:
        errors["customer_email"] = "Email is required"
    elif not EMAIL_RE.match(email):
        errors["customer_email"] = "Please enter a valid email address"

    phone = form.customer_phone.strip()
    if not phone:
        errors["customer_phone"] = "Phone number is required"
    elif not PHONE_RE.match(phone):
        errors["customer_phone"] = "Please enter a valid phone number"

    raw_date = form.preferred_date.strip()
    if not raw_date:
        errors["preferred_date"] = "Preferred date is required"
    else:
        try:
            selected = date.fromisoformat(raw_date)
        except ValueError:
            errors["preferred_date"] = "Please enter a valid date"
        else:
            if selected < today:
                errors["preferred_date"] = "Date cannot be in the past"

    slot = form.preferred_time.strip()
    if not slot:
        errors["preferred_time"] = "Preferred time is required"
    elif slot not in set(time_slots):
        errors["preferred_time"] = "Please select one of the available times"

    return errors
