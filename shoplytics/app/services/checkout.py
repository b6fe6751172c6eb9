"""Checkout session for one terminal: cart ownership, submission, receipts."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from pydantic import ValidationError

from shoplytics.app.core.config import settings
from shoplytics.app.schemas.catalog import CatalogProduct, CustomerOut
from shoplytics.app.schemas.checkout import (
    CartOut,
    DiscountOut,
    LineItemOut,
    PricingOut,
    ReceiptOut,
)
from shoplytics.app.services.backend_client import BackendApiError, BackendClient
from shoplytics.app.services.cart import Cart, LineItem
from shoplytics.app.services.errors import SaleInProgress
from shoplytics.app.services.finalize import finalize
from shoplytics.app.services.money import Money
from shoplytics.app.services.pricing import PricingSnapshot, price
from shoplytics.app.services.stock import fetch_stock_ledger

logger = logging.getLogger(__name__)


class CheckoutSession:
    """Owns the cart of a single terminal.

    Mutations are expected from one sequential caller (the terminal UI).
    ``submitting`` is set while a sale is in flight so an overlapping
    finalize is refused instead of posting the same bill twice.
    """

    def __init__(self) -> None:
        self.cart = Cart()
        self.submitting = False

    def add_product(self, product: CatalogProduct) -> LineItem:
        """Add one unit of a catalog product, using its quantity as the stock snapshot."""
        return self.cart.add_item(
            product_id=product.id,
            name=product.name,
            unit_price=Money.from_major(product.selling_price),
            available_stock=product.quantity,
        )

    def replace_cart(self, cart: Cart) -> None:
        self.cart = cart

    def pricing(self) -> PricingSnapshot:
        return price(self.cart)


# ─── Serialization ───────────────────────────────────────────────────────────


def pricing_to_out(snapshot: PricingSnapshot) -> PricingOut:
    return PricingOut(
        subtotal=str(snapshot.subtotal),
        discount_amount=str(snapshot.discount_amount),
        taxable_base=str(snapshot.taxable_base),
        tax=str(snapshot.tax),
        total=str(snapshot.total),
        formatted_total=snapshot.total.format(settings.CURRENCY_SYMBOL),
    )


def cart_to_out(cart: Cart) -> CartOut:
    return CartOut(
        state=cart.state.value,
        items=[
            LineItemOut(
                product_id=item.product_id,
                name=item.name,
                unit_price=str(item.unit_price),
                quantity=item.quantity,
                available_stock=item.available_stock,
                line_total=str(item.line_total),
            )
            for item in cart.items
        ],
        customer_ref=cart.customer_ref,
        discount=DiscountOut(amount=str(cart.discount.amount), kind=cart.discount.kind),
        payment_method=cart.payment_method,
        pricing=pricing_to_out(price(cart)),
    )


# ─── Submission ──────────────────────────────────────────────────────────────


async def submit_sale(session: CheckoutSession, client: BackendClient) -> ReceiptOut:
    """Finalize the session's cart against live stock and submit it.

    The cart is cleared as soon as the transaction service accepts the bill.
    Any failure before that (stale stock, rejected or unreachable
    transaction service) propagates with the cart left exactly as it was,
    ready for a retry. Only one submission per session runs at a time.
    """
    if session.submitting:
        raise SaleInProgress()
    session.submitting = True
    try:
        cart = session.cart
        live_stock = await fetch_stock_ledger(client, [item.product_id for item in cart.items])
        request = finalize(cart, live_stock)
        snapshot = price(cart)

        created = await client.create_transaction(request)
        cart.clear()
    finally:
        session.submitting = False

    now = datetime.now(timezone.utc)
    logger.info(
        "Sale %s submitted: %d item(s), total %s, %s",
        created["id"],
        len(request.items),
        request.total,
        request.payment_mode,
    )

    customer: CustomerOut | None = None
    if request.customer_id is not None:
        try:
            customer = await client.get_customer(request.customer_id)
        except (BackendApiError, ValidationError) as exc:
            # The sale is already recorded; print the receipt without customer details
            logger.warning("Could not load customer %s for receipt: %s", request.customer_id, exc)

    return ReceiptOut(
        transaction_id=str(created["id"]),
        timestamp=now.isoformat(timespec="seconds"),
        transaction=request,
        pricing=pricing_to_out(snapshot),
        customer=customer,
    )
