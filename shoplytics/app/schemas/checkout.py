from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from shoplytics.app.schemas.catalog import CustomerOut
from shoplytics.app.services.cart import DiscountKind, PaymentMethod


class TransactionStatus(str, Enum):
    COMPLETED = "COMPLETED"


# ─── Transaction request (sent to the transaction service) ───────────────────


class TransactionItem(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    product_id: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


class TransactionRequest(BaseModel):
    """Finalized bill. Field names on the wire must stay exactly as aliased."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    customer_id: str | None
    items: tuple[TransactionItem, ...]
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal
    payment_mode: str
    status: TransactionStatus = TransactionStatus.COMPLETED

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ─── Draft (terminal-local key-value slot) ───────────────────────────────────


class DraftLineItem(BaseModel):
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int
    available_stock: int


class DraftDiscount(BaseModel):
    amount: Decimal = Decimal("0")
    kind: DiscountKind = DiscountKind.PERCENTAGE


class DraftPayload(BaseModel):
    items: list[DraftLineItem] = []
    customer_ref: str | None = None
    discount: DraftDiscount = DraftDiscount()
    payment_method: PaymentMethod = PaymentMethod.CASH
    saved_at: datetime


# ─── Terminal API requests ───────────────────────────────────────────────────


class AddItemRequest(BaseModel):
    product_id: str


class SetQuantityRequest(BaseModel):
    quantity: int


class DiscountRequest(BaseModel):
    amount: Decimal
    kind: DiscountKind = DiscountKind.PERCENTAGE

    @field_validator("amount")
    @classmethod
    def amount_finite(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError("Discount must be a finite number")
        return v


class CustomerRefRequest(BaseModel):
    customer_ref: str | None = None


class PaymentMethodRequest(BaseModel):
    method: PaymentMethod


# ─── Terminal API responses ──────────────────────────────────────────────────


class LineItemOut(BaseModel):
    product_id: str
    name: str
    unit_price: str
    quantity: int
    available_stock: int
    line_total: str


class PricingOut(BaseModel):
    subtotal: str
    discount_amount: str
    taxable_base: str
    tax: str
    total: str
    formatted_total: str


class DiscountOut(BaseModel):
    amount: str
    kind: DiscountKind


class CartOut(BaseModel):
    state: str
    items: list[LineItemOut]
    customer_ref: str | None
    discount: DiscountOut
    payment_method: PaymentMethod
    pricing: PricingOut


class DraftOut(BaseModel):
    saved_at: str
    cart: CartOut


class ReceiptOut(BaseModel):
    transaction_id: str
    timestamp: str
    transaction: TransactionRequest
    pricing: PricingOut
    customer: CustomerOut | None = None
