import itertools
import os
import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, Generator, List, Optional
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

# Pas de Redis pendant les tests (doit précéder l'import de l'app)
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

from booking_backend.app import app as fastapi_app
from booking_backend.bookings.errors import ExternalServiceError, IntegrityError, NotFoundError
from booking_backend.bookings.models import Booking, BookingRequest, BookingStatus
from booking_backend.catalog.repository import ServiceOption
from booking_backend.config import Settings
from booking_backend.payments.gateway import PaymentGateway, PaymentStart, get_payment_gateway

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


BOILER_REPAIR = ServiceOption(
    id="boiler-repair",
    name="Boiler Repair",
    price=Decimal("89.00"),
    description="Diagnosis and repair of domestic boilers",
    category="heating",
)


class FakeGateway(PaymentGateway):
    """Gateway de test: pas d'appel Stripe, références cs_test_<n>."""
    strategy = "checkout"

    def __init__(self, settings: Optional[Settings] = None, paid: bool = True):
        super().__init__(settings or Settings(stripe_secret_key="sk_test_fake", admin_api_key="admin-secret"))
        self.paid = paid
        self.fail_start = False
        self.started: List[str] = []
        self.checked: List[str] = []
        # références encore payables (session ouverte)
        self.open_refs: set = set()

    def start(self, booking: Booking) -> PaymentStart:
        if self.fail_start:
            raise ExternalServiceError("payment session failed")
        self.started.append(booking.id)
        ref = f"cs_test_{len(self.started)}"
        self.open_refs.add(ref)
        return PaymentStart(reference=ref, redirect_url=f"https://checkout.stripe.com/c/pay/{ref}")

    def is_paid(self, reference: str) -> bool:
        self.checked.append(reference)
        return self.paid

    def resume(self, reference: str) -> Optional[PaymentStart]:
        if reference not in self.open_refs:
            return None
        return PaymentStart(reference=reference, redirect_url=f"https://checkout.stripe.com/c/pay/{reference}")


class FakeBookingStore:
    """
    Remplace booking_backend.bookings.repository en mémoire (mêmes signatures, mêmes erreurs).
    - calls: journal des opérations (pour vérifier l'absence d'appel)
    - fail: noms d'opérations qui lèvent ExternalServiceError
    """

    def __init__(self):
        self.rows: Dict[str, dict] = {}
        self.calls: List[str] = []
        self.fail: set = set()
        self._clock = itertools.count(1)
        self._t0 = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)

    def _now(self) -> str:
        return (self._t0 + timedelta(seconds=next(self._clock))).isoformat()

    def _enter(self, op: str):
        self.calls.append(op)
        if op in self.fail:
            raise ExternalServiceError("persistence failed", cause=RuntimeError("store down"))

    def insert_booking(self, data):
        self._enter("insert_booking")
        now = self._now()
        row = {**data, "id": str(uuid.uuid4()), "created_at": now, "updated_at": now}
        self.rows[row["id"]] = row
        return Booking.from_row(row)

    def update_status(self, booking_id, status, session_ref=None):
        self._enter("update_status")
        row = self.rows.get(booking_id)
        if row is None:
            raise NotFoundError()
        row["status"] = BookingStatus(status).value
        row["updated_at"] = self._now()
        if session_ref:
            row["stripe_session_id"] = session_ref
        return Booking.from_row(row)

    def find_by_session_ref(self, session_ref):
        self._enter("find_by_session_ref")
        rows = [r for r in self.rows.values() if r.get("stripe_session_id") == session_ref]
        if not rows:
            raise NotFoundError()
        if len(rows) > 1:
            raise IntegrityError()
        return Booking.from_row(rows[0])

    def find_by_id(self, booking_id):
        self._enter("find_by_id")
        if booking_id not in self.rows:
            raise NotFoundError()
        return Booking.from_row(self.rows[booking_id])

    def find_by_idempotency_key(self, key):
        self._enter("find_by_idempotency_key")
        for r in self.rows.values():
            if r.get("idempotency_key") == key:
                return Booking.from_row(r)
        return None

    def list_by_customer_email(self, email):
        self._enter("list_by_customer_email")
        rows = [r for r in self.rows.values() if r.get("customer_email") == email]
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return [Booking.from_row(r) for r in rows]

    def add(self, **fields) -> Booking:
        """Insère directement une ligne (sans journaliser d'appel)."""
        now = self._now()
        row = {
            "id": str(uuid.uuid4()),
            "service_name": "Boiler Repair",
            "service_price": "89.00",
            "customer_name": "Jane Doe",
            "customer_email": "jane@x.com",
            "customer_phone": "07700123456",
            "preferred_date": (date.today() + timedelta(days=1)).isoformat(),
            "preferred_time": "10:00",
            "status": "pending",
            "created_at": now,
            "updated_at": now,
        }
        row.update(fields)
        self.rows[row["id"]] = row
        return Booking.from_row(row)


@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

@pytest.fixture
def fake_gateway(app):
    gateway = FakeGateway()
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    yield gateway
    app.dependency_overrides.pop(get_payment_gateway, None)

@pytest.fixture
def booking_store(monkeypatch):
    store = FakeBookingStore()
    for name in (
        "insert_booking",
        "update_status",
        "find_by_session_ref",
        "find_by_id",
        "find_by_idempotency_key",
        "list_by_customer_email",
    ):
        monkeypatch.setattr(f"booking_backend.bookings.repository.{name}", getattr(store, name))
    return store

@pytest.fixture
def valid_form() -> BookingRequest:
    return BookingRequest(
        service_id="boiler-repair",
        customer_name="Jane Doe",
        customer_email="jane@x.com",
        customer_phone="07700123456",
        preferred_date=(date.today() + timedelta(days=1)).isoformat(),
        preferred_time="10:00",
    )

# Catalogue + accès Supabase neutralisés pour tous les tests
@pytest.fixture(scope="function", autouse=True)
def mock_db_dependency(monkeypatch):
    monkeypatch.setattr("booking_backend.infra.supabase_client.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("booking_backend.infra.supabase_client.get_service_supabase", lambda: MagicMock())
    monkeypatch.setattr(
        "booking_backend.catalog.repository.get_service",
        lambda service_id: BOILER_REPAIR if service_id == BOILER_REPAIR.id else None,
    )
    monkeypatch.setattr("booking_backend.catalog.repository.list_services", lambda: [BOILER_REPAIR])
