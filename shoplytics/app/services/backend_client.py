"""HTTP client for the REST backend: catalog, customers and transactions."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from shoplytics.app.core.config import settings
from shoplytics.app.schemas.catalog import CatalogProduct, CustomerCreate, CustomerOut
from shoplytics.app.schemas.checkout import TransactionRequest

logger = logging.getLogger(__name__)

PRODUCT_PAGE_LIMIT = 100


class BackendApiError(Exception):
    """Structured error from the backend (non-2xx or ``success: false``)."""

    def __init__(self, status_code: int, error_code: str, message: str) -> None:
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(message)


class TransactionSubmitFailed(BackendApiError):
    """The transaction service did not accept the bill. The cart is untouched."""


class BackendClient:
    """Async client; one short-lived ``httpx.AsyncClient`` per call."""

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.BACKEND_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.BACKEND_TIMEOUT_SECONDS
        self.token = token
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=self._headers(),
            transport=self._transport,
        )

    @staticmethod
    def _handle_response(resp: httpx.Response) -> Any:
        """Unwrap ``{"success": true, "data": ...}``; raise on anything else."""
        try:
            body: Any = resp.json()
        except ValueError:
            raise BackendApiError(
                status_code=resp.status_code,
                error_code="INVALID_RESPONSE",
                message=resp.text[:200] if resp.text else f"HTTP {resp.status_code} (empty body)",
            )

        if resp.status_code >= 400 or not isinstance(body, dict) or not body.get("success", False):
            error = body.get("error") if isinstance(body, dict) else None
            if isinstance(error, dict):
                code = error.get("code", "UNKNOWN")
                msg = error.get("message", str(body))
            else:
                code = "UNKNOWN"
                msg = body.get("message", str(body)) if isinstance(body, dict) else str(body)
            raise BackendApiError(status_code=resp.status_code, error_code=code, message=msg)

        return body.get("data")

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        async with self._client() as client:
            try:
                resp = await client.get(path, params=params)
            except httpx.HTTPError as exc:
                raise BackendApiError(status_code=503, error_code="UNREACHABLE", message=str(exc)) from exc
            return self._handle_response(resp)

    # ── Catalog ──────────────────────────────────────────────────────────

    async def list_products(
        self,
        search: str | None = None,
        category: str | None = None,
        page: int = 1,
        limit: int = PRODUCT_PAGE_LIMIT,
    ) -> list[CatalogProduct]:
        params: dict[str, Any] = {"page": page, "limit": limit}
        if search:
            params["search"] = search
        if category:
            params["category"] = category
        data = await self._get("/products", params=params)
        return [CatalogProduct.model_validate(p) for p in data or []]

    async def get_product(self, product_id: str) -> CatalogProduct:
        data = await self._get(f"/products/{product_id}")
        return CatalogProduct.model_validate(data)

    # ── Customers ────────────────────────────────────────────────────────

    async def list_customers(self, search: str | None = None) -> list[CustomerOut]:
        params = {"search": search} if search else None
        data = await self._get("/customers", params=params)
        return [CustomerOut.model_validate(c) for c in data or []]

    async def get_customer(self, customer_id: str) -> CustomerOut:
        data = await self._get(f"/customers/{customer_id}")
        return CustomerOut.model_validate(data)

    async def create_customer(self, payload: CustomerCreate) -> CustomerOut:
        async with self._client() as client:
            try:
                resp = await client.post(
                    "/customers",
                    json=payload.model_dump(mode="json", by_alias=True, exclude_none=True),
                )
            except httpx.HTTPError as exc:
                raise BackendApiError(status_code=503, error_code="UNREACHABLE", message=str(exc)) from exc
            return CustomerOut.model_validate(self._handle_response(resp))

    # ── Transactions ─────────────────────────────────────────────────────

    async def create_transaction(self, request: TransactionRequest) -> dict[str, Any]:
        """Submit a finalized bill; the single write path for a sale.

        Any failure (transport, HTTP status, or ``success: false``) is raised
        as ``TransactionSubmitFailed``.
        """
        async with self._client() as client:
            try:
                resp = await client.post("/transactions", json=request.to_payload())
            except httpx.HTTPError as exc:
                logger.exception("Transaction submission did not reach %s", self.base_url)
                raise TransactionSubmitFailed(
                    status_code=503,
                    error_code="UNREACHABLE",
                    message=f"Transaction service unreachable: {exc}",
                ) from exc

            try:
                data = self._handle_response(resp)
            except BackendApiError as exc:
                logger.warning(
                    "Transaction rejected (%s %s): %s", exc.status_code, exc.error_code, exc
                )
                raise TransactionSubmitFailed(
                    status_code=exc.status_code,
                    error_code=exc.error_code,
                    message=str(exc),
                ) from exc

        if not isinstance(data, dict) or "id" not in data:
            raise TransactionSubmitFailed(
                status_code=resp.status_code,
                error_code="INVALID_RESPONSE",
                message="Transaction service response did not include an id",
            )
        logger.info("Transaction %s created", data["id"])
        return data
