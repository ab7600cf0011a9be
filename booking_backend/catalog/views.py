from fastapi import APIRouter

from booking_backend.catalog import repository as catalog_repository

router = APIRouter(prefix="/api/v1/services", tags=["Services API"])

@router.get("")
def list_services():
    """Catalogue public des prestations {id, name, price, description, category}."""
    items = [
        {**o.model_dump(), "price": f"{o.price:.2f}"}
        for o in catalog_repository.list_services()
    ]
    return {"items": items}
