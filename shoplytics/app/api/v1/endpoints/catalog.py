"""Pass-through reads for the POS product and customer selectors."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from shoplytics.app.api.deps import get_backend_client, require_role
from shoplytics.app.core.config import settings
from shoplytics.app.core.security import TokenUser
from shoplytics.app.schemas.catalog import CatalogProduct, CustomerCreate, CustomerOut
from shoplytics.app.services.backend_client import BackendApiError, BackendClient

router = APIRouter()

pos_user = require_role(*settings.POS_ROLES)


def _backend_http_error(exc: BackendApiError) -> HTTPException:
    code = exc.status_code if 400 <= exc.status_code < 500 else status.HTTP_502_BAD_GATEWAY
    return HTTPException(status_code=code, detail={"code": exc.error_code, "message": str(exc)})


@router.get("/products", response_model=list[CatalogProduct])
async def list_products(
    search: str | None = None,
    category: str | None = None,
    client: BackendClient = Depends(get_backend_client),
    _current_user: TokenUser = Depends(pos_user),
) -> list[CatalogProduct]:
    try:
        return await client.list_products(search=search, category=category)
    except BackendApiError as e:
        raise _backend_http_error(e)


@router.get("/customers", response_model=list[CustomerOut])
async def list_customers(
    search: str | None = None,
    client: BackendClient = Depends(get_backend_client),
    _current_user: TokenUser = Depends(pos_user),
) -> list[CustomerOut]:
    try:
        return await client.list_customers(search=search)
    except BackendApiError as e:
        raise _backend_http_error(e)


@router.post("/customers", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
async def create_customer(
    payload: CustomerCreate,
    client: BackendClient = Depends(get_backend_client),
    _current_user: TokenUser = Depends(pos_user),
) -> CustomerOut:
    try:
        return await client.create_customer(payload)
    except BackendApiError as e:
        raise _backend_http_error(e)
