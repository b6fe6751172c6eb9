"""Persist and restore the in-progress sale.

There is exactly one draft slot per terminal; saving overwrites it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from pydantic import ValidationError
from sqlalchemy.orm import Session

from shoplytics.app.core.config import settings
from shoplytics.app.models.kv_store import KeyValueEntry
from shoplytics.app.schemas.checkout import DraftDiscount, DraftLineItem, DraftPayload
from shoplytics.app.services.cart import Cart, Discount, LineItem
from shoplytics.app.services.errors import DraftNotFound
from shoplytics.app.services.money import Money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Draft:
    cart: Cart
    saved_at: datetime


def cart_to_payload(cart: Cart, saved_at: datetime) -> DraftPayload:
    return DraftPayload(
        items=[
            DraftLineItem(
                product_id=item.product_id,
                name=item.name,
                unit_price=item.unit_price.to_major(),
                quantity=item.quantity,
                available_stock=item.available_stock,
            )
            for item in cart.items
        ],
        customer_ref=cart.customer_ref,
        discount=DraftDiscount(amount=cart.discount.amount, kind=cart.discount.kind),
        payment_method=cart.payment_method,
        saved_at=saved_at,
    )


def payload_to_cart(payload: DraftPayload) -> Cart:
    return Cart.restore(
        items=[
            LineItem(
                product_id=item.product_id,
                name=item.name,
                unit_price=Money.from_major(item.unit_price),
                quantity=item.quantity,
                available_stock=item.available_stock,
            )
            for item in payload.items
        ],
        customer_ref=payload.customer_ref,
        discount=Discount(amount=payload.discount.amount, kind=payload.discount.kind),
        payment_method=payload.payment_method,
    )


class DraftStore:
    def __init__(self, db: Session, key: str | None = None) -> None:
        self.db = db
        self.key = key or settings.DRAFT_KEY

    def save(self, cart: Cart, now: datetime | None = None) -> Draft:
        """Write ``cart`` to the draft slot, replacing any earlier draft."""
        saved_at = now or datetime.now(timezone.utc)
        blob = cart_to_payload(cart, saved_at).model_dump_json()

        entry = self.db.get(KeyValueEntry, self.key)
        if entry is None:
            self.db.add(KeyValueEntry(key=self.key, value=blob))
        else:
            entry.value = blob
        self.db.commit()

        logger.info("Draft saved under %r with %d item(s)", self.key, len(cart))
        return Draft(cart=self._reload(blob), saved_at=saved_at)

    def load(self) -> Draft:
        """Return the saved draft; ``DraftNotFound`` if missing or unreadable."""
        entry = self.db.get(KeyValueEntry, self.key)
        if entry is None:
            raise DraftNotFound()

        try:
            payload = DraftPayload.model_validate_json(entry.value)
            cart = payload_to_cart(payload)
        except (ValidationError, ValueError) as exc:
            logger.warning("Draft under %r is unreadable: %s", self.key, exc)
            raise DraftNotFound("Saved draft is corrupt") from exc

        logger.info("Draft loaded from %r with %d item(s)", self.key, len(cart))
        return Draft(cart=cart, saved_at=payload.saved_at)

    @staticmethod
    def _reload(blob: str) -> Cart:
        return payload_to_cart(DraftPayload.model_validate_json(blob))
