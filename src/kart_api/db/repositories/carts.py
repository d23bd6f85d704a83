"""
kart_api.db.repositories.carts

Versioned cart document store (implements `CartStore`).

Responsibilities:
- Load a principal's cart with its version (missing -> empty, version 0).
- Write a cart only if the stored version is unchanged (compare-and-swap).
- Translate SQLAlchemy failures into `StorageError`.
"""

from __future__ import annotations

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kart_api.db.models import Cart
from kart_api.errors import StorageError
from kart_api.services.cart_state import CartItems, CartSnapshot


class SqlCartStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        # Each operation runs in its own short transaction so a failed CAS
        # never leaves stale rows in a request-scoped identity map.
        self._sessions = session_factory

    async def load_cart(self, principal_id: str) -> CartSnapshot:
        stmt = select(Cart.items, Cart.version).where(Cart.principal_id == principal_id)
        try:
            async with self._sessions() as session:
                row = (await session.execute(stmt)).one_or_none()
        except SQLAlchemyError as e:
            raise StorageError(f"failed to load cart: {e}") from e
        if row is None:
            return CartSnapshot()
        return CartSnapshot(items=_normalize(row.items), version=row.version)

    async def save_cart(
        self, principal_id: str, items: CartItems, *, expected_version: int
    ) -> bool:
        try:
            async with self._sessions() as session, session.begin():
                if expected_version == 0:
                    await session.execute(
                        insert(Cart).values(principal_id=principal_id, items=items, version=1)
                    )
                    return True
                stmt = (
                    update(Cart)
                    .where(Cart.principal_id == principal_id, Cart.version == expected_version)
                    .values(items=items, version=expected_version + 1)
                    .execution_options(synchronize_session=False)
                )
                result = await session.execute(stmt)
                return result.rowcount == 1
        except IntegrityError as e:
            if expected_version == 0:
                # Another writer created the cart first; caller reloads and retries.
                return False
            raise StorageError(f"failed to save cart: {e}") from e
        except SQLAlchemyError as e:
            raise StorageError(f"failed to save cart: {e}") from e


def _normalize(raw: object) -> CartItems:
    if not isinstance(raw, dict):
        return {}
    return {
        str(item_id): {str(size): int(qty) for size, qty in sizes.items()}
        for item_id, sizes in raw.items()
        if isinstance(sizes, dict)
    }


# --- Module Notes -----------------------------------------------------------
# `version` is bumped on every successful write, so two writers that loaded the
# same snapshot can never both succeed.
