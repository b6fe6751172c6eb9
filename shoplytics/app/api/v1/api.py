from fastapi import APIRouter

from shoplytics.app.api.v1.endpoints import catalog, checkout

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(checkout.router, prefix="/checkout", tags=["checkout"])
api_router.include_router(catalog.router, prefix="/catalog", tags=["catalog"])
