from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from shoplytics.app.api.deps import (
    get_backend_client,
    get_checkout_session,
    require_role,
)
from shoplytics.app.core.config import settings
from shoplytics.app.core.database import get_db
from shoplytics.app.core.security import TokenUser
from shoplytics.app.schemas.checkout import (
    AddItemRequest,
    CartOut,
    CustomerRefRequest,
    DiscountRequest,
    DraftOut,
    PaymentMethodRequest,
    ReceiptOut,
    SetQuantityRequest,
)
from shoplytics.app.services.backend_client import (
    BackendApiError,
    BackendClient,
    TransactionSubmitFailed,
)
from shoplytics.app.services.checkout import CheckoutSession, cart_to_out, submit_sale
from shoplytics.app.services.drafts import DraftStore
from shoplytics.app.services.errors import (
    CheckoutError,
    DraftNotFound,
    InsufficientStock,
    OutOfStock,
    SaleInProgress,
    StockExceeded,
)
from shoplytics.app.services.money import InvalidAmount

router = APIRouter()

pos_user = require_role(*settings.POS_ROLES)

_CONFLICT_ERRORS = (OutOfStock, StockExceeded, InsufficientStock, SaleInProgress)


def _checkout_http_error(exc: CheckoutError) -> HTTPException:
    if isinstance(exc, _CONFLICT_ERRORS):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, DraftNotFound):
        code = status.HTTP_404_NOT_FOUND
    else:
        code = status.HTTP_400_BAD_REQUEST
    detail: dict[str, object] = {"code": exc.code, "message": str(exc)}
    product_id = getattr(exc, "product_id", None)
    if product_id is not None:
        detail["product_id"] = product_id
    return HTTPException(status_code=code, detail=detail)


def _backend_http_error(exc: BackendApiError) -> HTTPException:
    if isinstance(exc, TransactionSubmitFailed) or exc.status_code != 404:
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_404_NOT_FOUND
    return HTTPException(
        status_code=code,
        detail={"code": exc.error_code, "message": str(exc)},
    )


# ─── Cart ────────────────────────────────────────────────────────────────────


@router.get("", response_model=CartOut)
async def view_cart(
    session: CheckoutSession = Depends(get_checkout_session),
    _current_user: TokenUser = Depends(pos_user),
) -> CartOut:
    return cart_to_out(session.cart)


@router.post("/items", response_model=CartOut)
async def add_item(
    payload: AddItemRequest,
    session: CheckoutSession = Depends(get_checkout_session),
    client: BackendClient = Depends(get_backend_client),
    _current_user: TokenUser = Depends(pos_user),
) -> CartOut:
    try:
        product = await client.get_product(payload.product_id)
    except BackendApiError as e:
        raise _backend_http_error(e)
    try:
        session.add_product(product)
    except CheckoutError as e:
        raise _checkout_http_error(e)
    except InvalidAmount as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"code": "INVALID_PRICE", "message": str(e)},
        )
    return cart_to_out(session.cart)


@router.patch("/items/{product_id}", response_model=CartOut)
async def set_item_quantity(
    product_id: str,
    payload: SetQuantityRequest,
    session: CheckoutSession = Depends(get_checkout_session),
    _current_user: TokenUser = Depends(pos_user),
) -> CartOut:
    try:
        session.cart.set_quantity(product_id, payload.quantity)
    except CheckoutError as e:
        raise _checkout_http_error(e)
    return cart_to_out(session.cart)


@router.delete("/items/{product_id}", response_model=CartOut)
async def remove_item(
    product_id: str,
    session: CheckoutSession = Depends(get_checkout_session),
    _current_user: TokenUser = Depends(pos_user),
) -> CartOut:
    session.cart.remove_item(product_id)
    return cart_to_out(session.cart)


@router.post("/clear", response_model=CartOut)
async def clear_cart(
    session: CheckoutSession = Depends(get_checkout_session),
    _current_user: TokenUser = Depends(pos_user),
) -> CartOut:
    session.cart.clear()
    return cart_to_out(session.cart)


# ─── Sale settings ───────────────────────────────────────────────────────────


@router.put("/discount", response_model=CartOut)
async def set_discount(
    payload: DiscountRequest,
    session: CheckoutSession = Depends(get_checkout_session),
    _current_user: TokenUser = Depends(pos_user),
) -> CartOut:
    try:
        session.cart.set_discount(payload.amount, payload.kind)
    except CheckoutError as e:
        raise _checkout_http_error(e)
    return cart_to_out(session.cart)


@router.put("/customer", response_model=CartOut)
async def set_customer(
    payload: CustomerRefRequest,
    session: CheckoutSession = Depends(get_checkout_session),
    _current_user: TokenUser = Depends(pos_user),
) -> CartOut:
    session.cart.set_customer(payload.customer_ref)
    return cart_to_out(session.cart)


@router.put("/payment-method", response_model=CartOut)
async def set_payment_method(
    payload: PaymentMethodRequest,
    session: CheckoutSession = Depends(get_checkout_session),
    _current_user: TokenUser = Depends(pos_user),
) -> CartOut:
    session.cart.set_payment_method(payload.method)
    return cart_to_out(session.cart)


# ─── Drafts ──────────────────────────────────────────────────────────────────


@router.post("/draft", response_model=DraftOut, status_code=status.HTTP_201_CREATED)
async def save_draft(
    session: CheckoutSession = Depends(get_checkout_session),
    db: Session = Depends(get_db),
    _current_user: TokenUser = Depends(pos_user),
) -> DraftOut:
    if session.cart.is_empty:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "EMPTY_CART", "message": "No items to save"},
        )
    draft = DraftStore(db).save(session.cart)
    return DraftOut(saved_at=draft.saved_at.isoformat(), cart=cart_to_out(draft.cart))


@router.post("/draft/load", response_model=DraftOut)
async def load_draft(
    session: CheckoutSession = Depends(get_checkout_session),
    db: Session = Depends(get_db),
    _current_user: TokenUser = Depends(pos_user),
) -> DraftOut:
    try:
        draft = DraftStore(db).load()
    except CheckoutError as e:
        raise _checkout_http_error(e)
    session.replace_cart(draft.cart)
    return DraftOut(saved_at=draft.saved_at.isoformat(), cart=cart_to_out(session.cart))


# ─── Finalize ────────────────────────────────────────────────────────────────


@router.post("/finalize", response_model=ReceiptOut, status_code=status.HTTP_201_CREATED)
async def finalize_sale(
    session: CheckoutSession = Depends(get_checkout_session),
    client: BackendClient = Depends(get_backend_client),
    _current_user: TokenUser = Depends(pos_user),
) -> ReceiptOut:
    try:
        return await submit_sale(session, client)
    except CheckoutError as e:
        raise _checkout_http_error(e)
    except BackendApiError as e:
        raise _backend_http_error(e)
