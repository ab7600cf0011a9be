from decimal import Decimal
from unittest.mock import MagicMock

import pytest

import booking_backend.catalog.repository as catalog
from booking_backend.bookings.errors import ExternalServiceError

# Références capturées avant le patch autouse du catalogue (conftest)
real_get_service = catalog.get_service
real_list_services = catalog.list_services

class _Resp:
    def __init__(self, data=None):
        self.data = data

def _client(data=None, exc=None):
    client = MagicMock()
    select = client.table.return_value.select.return_value
    for chain in (select.order.return_value, select.eq.return_value.limit.return_value):
        if exc is not None:
            chain.execute.side_effect = exc
        else:
            chain.execute.return_value = _Resp(data)
    return client

def test_list_services_skips_invalid_rows(monkeypatch):
    rows = [
        {"id": "boiler-repair", "name": "Boiler Repair", "price": 89.0, "category": "heating"},
        {"id": "free", "name": "Free", "price": 0},
        {"id": "broken", "name": "Broken", "price": None},
    ]
    monkeypatch.setattr(catalog, "get_client", lambda: _client(rows))
    out = real_list_services()
    assert [o.id for o in out] == ["boiler-repair"]
    assert out[0].price == Decimal("89.0")

@pytest.mark.parametrize("price", ["NaN", "Infinity", "89.005"])
def test_list_services_skips_unbillable_price(monkeypatch, price):
    rows = [
        {"id": "bad", "name": "Bad Price", "price": price},
        {"id": "boiler-repair", "name": "Boiler Repair", "price": "89.00"},
    ]
    monkeypatch.setattr(catalog, "get_client", lambda: _client(rows))
    assert [o.id for o in real_list_services()] == ["boiler-repair"]

def test_get_service_with_three_decimals_is_unknown(monkeypatch):
    monkeypatch.setattr(catalog, "get_client", lambda: _client([{"id": "s1", "name": "Odd", "price": "89.005"}]))
    assert real_get_service("s1") is None

def test_get_service(monkeypatch):
    monkeypatch.setattr(catalog, "get_client", lambda: _client([{"id": "s1", "name": "Gas Safety Check", "price": "65.50"}]))
    assert real_get_service("s1").price == Decimal("65.50")
    monkeypatch.setattr(catalog, "get_client", lambda: _client([]))
    assert real_get_service("s1") is None
    assert real_get_service("") is None

def test_catalog_failure_is_external(monkeypatch):
    monkeypatch.setattr(catalog, "get_client", lambda: _client(exc=ConnectionError("down")))
    with pytest.raises(ExternalServiceError):
        real_get_service("s1")
