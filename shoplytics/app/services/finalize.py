from __future__ import annotations

from shoplytics.app.schemas.checkout import TransactionItem, TransactionRequest, TransactionStatus
from shoplytics.app.services.cart import Cart
from shoplytics.app.services.errors import EmptyCart, InsufficientStock
from shoplytics.app.services.pricing import price
from shoplytics.app.services.stock import StockLedger


def finalize(cart: Cart, live_stock: StockLedger) -> TransactionRequest:
    """Turn ``cart`` into the payload for the transaction service.

    Stock is re-checked against ``live_stock`` because the figures captured
    when items were added may be stale. The cart is never mutated, so on
    failure the cashier can adjust and retry, and clearing it after a
    successful submission is left to the caller.
    """
    if cart.is_empty:
        raise EmptyCart()

    for item in cart.items:
        available = live_stock.available_stock(item.product_id)
        if available < item.quantity:
            raise InsufficientStock(item.product_id, item.quantity, available)

    snapshot = price(cart)

    return TransactionRequest(
        customer_id=None if cart.is_walk_in else cart.customer_ref,
        items=tuple(
            TransactionItem(
                product_id=item.product_id,
                quantity=item.quantity,
                unit_price=item.unit_price.to_major(),
                subtotal=item.line_total.to_major(),
            )
            for item in cart.items
        ),
        subtotal=snapshot.subtotal.to_major(),
        discount=snapshot.discount_amount.to_major(),
        tax=snapshot.tax.to_major(),
        total=snapshot.total.to_major(),
        payment_mode=cart.payment_method.value.upper(),
        status=TransactionStatus.COMPLETED,
    )
