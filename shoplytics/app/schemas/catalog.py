from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _BackendModel(BaseModel):
    """Models exchanged with the REST backend, which speaks camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# ─── Catalog ─────────────────────────────────────────────────────────────────


class CatalogProduct(_BackendModel):
    id: str
    name: str
    selling_price: Decimal
    category: str | None = None
    quantity: int = 0

    @field_validator("id", mode="before")
    @classmethod
    def id_as_str(cls, v: object) -> object:
        return str(v) if isinstance(v, int) else v

    @field_validator("selling_price")
    @classmethod
    def price_non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Selling price must be non-negative")
        return v


# ─── Customers ───────────────────────────────────────────────────────────────


class CustomerOut(_BackendModel):
    id: str
    name: str
    email: str | None = None
    phone: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def id_as_str(cls, v: object) -> object:
        return str(v) if isinstance(v, int) else v


class CustomerCreate(_BackendModel):
    name: str = Field(min_length=1)
    email: str | None = None
    phone: str | None = None
