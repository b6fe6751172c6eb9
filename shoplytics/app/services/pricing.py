"""Single pricing path for cart display, receipts and the finalize payload."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from shoplytics.app.services.cart import Cart, DiscountKind
from shoplytics.app.services.money import Money

TAX_RATE = Decimal("18")  # GST, charged on the discounted amount


@dataclass(frozen=True)
class PricingSnapshot:
    subtotal: Money
    discount_amount: Money
    taxable_base: Money
    tax: Money
    total: Money


def price(cart: Cart) -> PricingSnapshot:
    """Derive the totals for ``cart``. Pure: never stored, never mutates.

        subtotal       = sum(unit_price * quantity)
        discount       = subtotal * pct (half-up)  |  min(fixed, subtotal)
        taxable_base   = max(0, subtotal - discount)
        tax            = taxable_base * 18% (half-up)
        total          = taxable_base + tax
    """
    subtotal = Money.zero()
    for item in cart.items:
        subtotal = subtotal + item.line_total

    discount = cart.discount
    if discount.kind == DiscountKind.PERCENTAGE:
        discount_amount = subtotal.apply_rate(discount.amount)
    else:
        discount_amount = min(Money.from_major(discount.amount), subtotal)

    taxable_base = max(Money.zero(), subtotal - discount_amount)
    tax = taxable_base.apply_rate(TAX_RATE)

    return PricingSnapshot(
        subtotal=subtotal,
        discount_amount=discount_amount,
        taxable_base=taxable_base,
        tax=tax,
        total=taxable_base + tax,
    )
