from types import SimpleNamespace

import pytest

from booking_backend.payments import stripe_client
from booking_backend.payments.messages import GENERIC_PAYMENT_ERROR, user_message
from booking_backend.payments.metadata import extract_booking_ref, make_metadata


def test_require_stripe_without_key():
    with pytest.raises(RuntimeError):
        stripe_client.require_stripe("")

def test_create_session_params(monkeypatch):
    captured = {}
    def fake_create(**params):
        captured.update(params)
        return {"id": "cs_test_1", "url": "https://checkout.stripe.com/x"}
    monkeypatch.setattr(stripe_client.stripe.checkout.Session, "create", fake_create)

    out = stripe_client.create_session(
        api_key="sk_test_x",
        line_items=[{"quantity": 1}],
        success_url="https://s",
        cancel_url="https://c",
        metadata={"booking_id": "b1"},
        customer_email="jane@x.com",
        client_reference_id="b1",
    )
    assert out["id"] == "cs_test_1"
    assert captured["mode"] == "payment"
    assert captured["customer_email"] == "jane@x.com"
    assert captured["client_reference_id"] == "b1"

def test_as_dict_uses_to_dict():
    obj = SimpleNamespace(to_dict=lambda: {"id": "pi_1"})
    assert stripe_client.as_dict(obj) == {"id": "pi_1"}
    assert stripe_client.as_dict(None) == {}

def test_parse_event_requires_secret():
    with pytest.raises(RuntimeError):
        stripe_client.parse_event(b"{}", "sig", "")

def test_make_metadata_truncates():
    meta = make_metadata("b1", "x" * 600, "jane@x.com")
    assert meta["booking_id"] == "b1"
    assert len(meta["service_name"]) == 500

def test_extract_booking_ref():
    event = {"type": "checkout.session.completed", "data": {"object": {"id": "cs_1", "metadata": {"booking_id": "b1"}}}}
    assert extract_booking_ref(event) == ("b1", "cs_1")
    assert extract_booking_ref({}) == (None, None)

def test_user_message():
    assert user_message(SimpleNamespace(code="expired_card")) == "Your card has expired. Please use a different card."
    assert user_message(RuntimeError("boom")) == GENERIC_PAYMENT_ERROR
