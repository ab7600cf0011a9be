"""
Registre central des routers (API v1, health).
"""
from fastapi import FastAPI
from booking_backend.bookings import views as bookings_views
from booking_backend.catalog import views as catalog_views
from booking_backend.payments import views as payments_views
from booking_backend.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    # API v1
    app.include_router(catalog_views.router)
    app.include_router(bookings_views.router)
    app.include_router(payments_views.router)
    # Health & monitoring
    app.include_router(health_router)
