from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from shoplytics.app.services.backend_client import BackendApiError

if TYPE_CHECKING:
    from shoplytics.app.schemas.catalog import CatalogProduct
    from shoplytics.app.services.backend_client import BackendClient


class StockLedger:
    """Read-only snapshot of per-product available stock.

    A snapshot, not a lock: figures can be stale by the time a sale is
    finalized, which is why finalize re-reads stock from the catalog.
    """

    def __init__(self, levels: Mapping[str, int] | None = None) -> None:
        self._levels: dict[str, int] = {
            str(k): max(0, int(v)) for k, v in (levels or {}).items()
        }

    @classmethod
    def from_products(cls, products: Iterable[CatalogProduct]) -> StockLedger:
        return cls({p.id: p.quantity for p in products})

    def available_stock(self, product_id: str) -> int:
        """Last-known stock; products the ledger has never seen report 0."""
        return self._levels.get(str(product_id), 0)

    def __contains__(self, product_id: object) -> bool:
        return str(product_id) in self._levels

    def __len__(self) -> int:
        return len(self._levels)


async def fetch_stock_ledger(client: BackendClient, product_ids: Iterable[str]) -> StockLedger:
    """Read current stock for each product straight from the catalog.

    Products the catalog no longer knows are left out, so they report 0.
    """
    levels: dict[str, int] = {}
    for pid in product_ids:
        try:
            product = await client.get_product(pid)
        except BackendApiError as exc:
            if exc.status_code != 404:
                raise
            continue
        levels[product.id] = product.quantity
    return StockLedger(levels)
