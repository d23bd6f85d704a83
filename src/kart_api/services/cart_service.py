"""
kart_api.services.cart_service

Cart state aggregator.

Responsibilities:
- Run `add` / `update` / `read` for a principal against a `CartStore`.
- Make every mutation a compare-and-swap on the cart version, retrying on
  conflict, so concurrent `add` calls never lose increments.

Concurrency semantics:
- `add` is an increment: N concurrent adds always yield +N.
- `update` is an absolute overwrite: concurrent updates of the same
  (item, size) are last-write-wins. They never clobber changes to other keys
  because the write is still version-checked.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from kart_api.errors import StorageError
from kart_api.observability.logging import get_logger
from kart_api.services.cart_state import (
    CartItems,
    CartStore,
    apply_add,
    apply_update,
)

log = get_logger(__name__)


class CartAggregator:
    def __init__(self, store: CartStore, *, max_attempts: int = 8) -> None:
        self._store = store
        self._max_attempts = max_attempts

    async def read(self, principal_id: str) -> CartItems:
        snapshot = await self._store.load_cart(principal_id)
        return snapshot.items

    async def add(self, principal_id: str, item_id: str, size: str) -> CartItems:
        return await self._mutate(
            principal_id, "add", lambda items: apply_add(items, item_id, size)
        )

    async def update(
        self, principal_id: str, item_id: str, size: str, quantity: Any
    ) -> CartItems:
        return await self._mutate(
            principal_id,
            "update",
            lambda items: apply_update(items, item_id, size, quantity),
        )

    async def _mutate(
        self,
        principal_id: str,
        op: str,
        transition: Callable[[CartItems], CartItems],
    ) -> CartItems:
        for attempt in range(1, self._max_attempts + 1):
            snapshot = await self._store.load_cart(principal_id)
            # Validation / NotFound errors surface here, before any write.
            updated = transition(snapshot.items)
            saved = await self._store.save_cart(
                principal_id, updated, expected_version=snapshot.version
            )
            if saved:
                return updated
            log.debug("cart_write_conflict", op=op, attempt=attempt)

        log.warning("cart_write_conflicts_exhausted", op=op, attempts=self._max_attempts)
        raise StorageError("cart is being modified concurrently, try again")


# --- Module Notes -----------------------------------------------------------
# Clearing a cart (e.g. after checkout) is owned by the order flow, not here.
