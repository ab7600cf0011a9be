from datetime import date

import pytest

from booking_backend.bookings.models import BookingRequest
from booking_backend.bookings.validation import validate_booking_form
from booking_backend.config import Settings

SLOTS = Settings().time_slots
TODAY = date(2026, 3, 10)


def _form(**overrides):
    data = dict(
        service_id="boiler-repair",
        customer_name="Jane Doe",
        customer_email="jane@x.com",
        customer_phone="07700123456",
        preferred_date="2026-03-11",
        preferred_time="10:00",
    )
    data.update(overrides)
    return BookingRequest(**data)


def test_valid_form_has_no_errors():
    assert validate_booking_form(_form(), SLOTS, today=TODAY) == {}

def test_empty_form_reports_one_error_per_field():
    errors = validate_booking_form(BookingRequest(), SLOTS, today=TODAY)
    assert errors == {
        "customer_name": "Name is required",
        "customer_email": "Email is required",
        "customer_phone": "Phone number is required",
        "preferred_date": "Preferred date is required",
        "preferred_time": "Preferred time is required",
    }

def test_blank_name_is_required():
    assert validate_booking_form(_form(customer_name="   "), SLOTS, today=TODAY) == {"customer_name": "Name is required"}

@pytest.mark.parametrize("email", ["jane", "jane@x", "jane @x.com", "@x.com"])
def test_invalid_email(email):
    errors = validate_booking_form(_form(customer_email=email), SLOTS, today=TODAY)
    assert errors == {"customer_email": "Please enter a valid email address"}

@pytest.mark.parametrize("phone", ["12345", "0770-abc-1234", "++447700123456"])
def test_invalid_phone(phone):
    errors = validate_booking_form(_form(customer_phone=phone), SLOTS, today=TODAY)
    assert errors == {"customer_phone": "Please enter a valid phone number"}

@pytest.mark.parametrize("phone", ["07700123456", "+44 7700 123456", "(0161) 496-0000"])
def test_accepted_phone_formats(phone):
    assert validate_booking_form(_form(customer_phone=phone), SLOTS, today=TODAY) == {}

def test_past_date_rejected_today_accepted():
    assert validate_booking_form(_form(preferred_date="2026-03-09"), SLOTS, today=TODAY) == {
        "preferred_date": "Date cannot be in the past"
    }
    assert validate_booking_form(_form(preferred_date="2026-03-10"), SLOTS, today=TODAY) == {}

def test_unparseable_date():
    errors = validate_booking_form(_form(preferred_date="10/03/2026"), SLOTS, today=TODAY)
    assert errors == {"preferred_date": "Please enter a valid date"}

def test_time_outside_slots():
    errors = validate_booking_form(_form(preferred_time="18:00"), SLOTS, today=TODAY)
    assert errors == {"preferred_time": "Please select one of the available times"}
    assert "17:00" in SLOTS and "09:00" in SLOTS
