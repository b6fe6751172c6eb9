from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation

from shoplytics.app.services.errors import (
    InvalidDiscount,
    InvalidQuantity,
    OutOfStock,
    StockExceeded,
)
from shoplytics.app.services.money import InvalidAmount, Money

WALK_IN = "walk-in"
MAX_PERCENTAGE = Decimal("100")
ZERO = Decimal("0")


class DiscountKind(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"


class CartState(str, enum.Enum):
    EMPTY = "EMPTY"
    HAS_ITEMS = "HAS_ITEMS"


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class LineItem:
    product_id: str
    name: str
    unit_price: Money
    quantity: int
    available_stock: int

    @property
    def line_total(self) -> Money:
        return self.unit_price.times(self.quantity)


@dataclass(frozen=True)
class Discount:
    amount: Decimal = ZERO
    kind: DiscountKind = DiscountKind.PERCENTAGE


class Cart:
    """Line items, customer, discount and payment method of one sale in progress.

    Mutations either succeed completely or raise a ``CheckoutError`` leaving
    the cart exactly as it was. Line items are immutable; a mutation swaps
    in a new ``LineItem``.
    """

    def __init__(self) -> None:
        self._items: dict[str, LineItem] = {}
        self.customer_ref: str | None = None
        self.discount = Discount()
        self.payment_method = PaymentMethod.CASH

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def items(self) -> tuple[LineItem, ...]:
        return tuple(self._items.values())

    @property
    def state(self) -> CartState:
        return CartState.HAS_ITEMS if self._items else CartState.EMPTY

    @property
    def is_empty(self) -> bool:
        return not self._items

    @property
    def is_walk_in(self) -> bool:
        return self.customer_ref is None or self.customer_ref == WALK_IN

    def get(self, product_id: str) -> LineItem | None:
        return self._items.get(product_id)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cart):
            return NotImplemented
        return (
            self.items == other.items
            and self.customer_ref == other.customer_ref
            and self.discount == other.discount
            and self.payment_method == other.payment_method
        )

    def __repr__(self) -> str:
        return (
            f"Cart(items={list(self.items)!r}, customer_ref={self.customer_ref!r}, "
            f"discount={self.discount!r}, payment_method={self.payment_method.value!r})"
        )

    # ── Line items ───────────────────────────────────────────────────────

    def add_item(
        self,
        product_id: str,
        name: str,
        unit_price: Money,
        available_stock: int,
    ) -> LineItem:
        """Add one unit of a product.

        An existing line is incremented; ``available_stock`` is the current
        snapshot and replaces the one captured earlier.
        """
        if not isinstance(unit_price, Money):
            raise TypeError(f"Unit price must be Money, got {type(unit_price).__name__}")
        if unit_price.minor < 0:
            raise InvalidAmount(f"Negative unit price for {product_id}")
        if not _is_int(available_stock):
            raise TypeError(f"Available stock must be an int, got {available_stock!r}")

        product_id = str(product_id)
        existing = self._items.get(product_id)

        if existing is not None:
            requested = existing.quantity + 1
            if requested > available_stock:
                raise StockExceeded(product_id, requested, available_stock)
            item = replace(existing, quantity=requested, available_stock=available_stock)
        else:
            if available_stock < 1:
                raise OutOfStock(product_id)
            item = LineItem(
                product_id=product_id,
                name=name,
                unit_price=unit_price,
                quantity=1,
                available_stock=available_stock,
            )

        self._items[product_id] = item
        return item

    def set_quantity(self, product_id: str, new_quantity: int) -> LineItem | None:
        """Replace a line's quantity; zero or less removes the line.

        Returns the updated line, or None when the line was removed or never
        existed.
        """
        if not _is_int(new_quantity):
            raise InvalidQuantity(f"Quantity must be a whole number, got {new_quantity!r}")
        if new_quantity <= 0:
            self.remove_item(product_id)
            return None

        existing = self._items.get(product_id)
        if existing is None:
            return None
        if new_quantity > existing.available_stock:
            raise StockExceeded(product_id, new_quantity, existing.available_stock)

        item = replace(existing, quantity=new_quantity)
        self._items[product_id] = item
        return item

    def remove_item(self, product_id: str) -> None:
        self._items.pop(product_id, None)

    # ── Sale settings ────────────────────────────────────────────────────

    def set_discount(self, amount: Decimal | int | str, kind: DiscountKind) -> Discount:
        """Validate and store the discount.

        Percentages above 100 are clamped to 100. Fixed amounts are kept as
        entered and capped at the subtotal when the cart is priced, so the
        cap follows later item changes.
        """
        kind = DiscountKind(kind)
        try:
            value = Decimal(str(amount))
        except (InvalidOperation, ValueError) as exc:
            raise InvalidDiscount(f"Invalid discount amount: {amount!r}") from exc
        if not value.is_finite():
            raise InvalidDiscount("Discount must be a finite number")
        if value < 0:
            raise InvalidDiscount("Discount cannot be negative")

        if kind == DiscountKind.PERCENTAGE:
            value = min(value, MAX_PERCENTAGE)
        else:
            try:
                Money.from_major(value)
            except InvalidAmount as exc:
                raise InvalidDiscount(str(exc)) from exc

        self.discount = Discount(amount=value, kind=kind)
        return self.discount

    def set_customer(self, ref: str | None) -> None:
        self.customer_ref = ref

    def set_payment_method(self, method: PaymentMethod | str) -> None:
        self.payment_method = PaymentMethod(method)

    def clear(self) -> None:
        self._items.clear()
        self.customer_ref = None
        self.discount = Discount()
        self.payment_method = PaymentMethod.CASH

    # ── Restore ──────────────────────────────────────────────────────────

    @classmethod
    def restore(
        cls,
        items: list[LineItem],
        customer_ref: str | None,
        discount: Discount,
        payment_method: PaymentMethod,
    ) -> Cart:
        """Build a cart from persisted parts, checking every cart invariant.

        Raises ``ValueError`` on the first violation; nothing is returned
        half-built.
        """
        cart = cls()
        for item in items:
            if item.product_id in cart._items:
                raise ValueError(f"Duplicate line item for product {item.product_id}")
            if item.quantity < 1:
                raise ValueError(f"Quantity must be at least 1 for {item.product_id}")
            if item.available_stock < 0 or item.quantity > item.available_stock:
                raise ValueError(f"Quantity exceeds captured stock for {item.product_id}")
            if item.unit_price.minor < 0:
                raise ValueError(f"Negative unit price for {item.product_id}")
            cart._items[item.product_id] = item
        cart.set_discount(discount.amount, discount.kind)
        if cart.discount != discount:
            raise ValueError("Discount outside the allowed range")
        cart.customer_ref = customer_ref
        cart.payment_method = PaymentMethod(payment_method)
        return cart
