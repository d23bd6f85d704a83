"""
tests.test_cart_service

Cart aggregator behaviour and concurrency, against in-memory stores and the
SQL store.
"""

from __future__ import annotations

import asyncio

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from kart_api.db.init_db import init_db
from kart_api.db.repositories.carts import SqlCartStore
from kart_api.db.session import create_engine, create_sessionmaker
from kart_api.errors import NotFoundError, StorageError
from kart_api.services.cart_service import CartAggregator
from kart_api.services.cart_state import CartItems, CartSnapshot, copy_items
from kart_api.settings import Settings


class VersionedMemoryStore:
    """Compare-and-swap store; yields between load and save to force interleaving."""

    def __init__(self) -> None:
        self.docs: dict[str, CartSnapshot] = {}
        self.saves = 0

    async def load_cart(self, principal_id: str) -> CartSnapshot:
        snapshot = self.docs.get(principal_id, CartSnapshot())
        await asyncio.sleep(0)
        return CartSnapshot(copy_items(snapshot.items), snapshot.version)

    async def save_cart(
        self, principal_id: str, items: CartItems, *, expected_version: int
    ) -> bool:
        current = self.docs.get(principal_id, CartSnapshot())
        if current.version != expected_version:
            return False
        self.docs[principal_id] = CartSnapshot(copy_items(items), expected_version + 1)
        self.saves += 1
        return True


class NaiveMemoryStore(VersionedMemoryStore):
    """Plain read-modify-write: every save wins. Known to lose updates."""

    async def save_cart(
        self, principal_id: str, items: CartItems, *, expected_version: int
    ) -> bool:
        current = self.docs.get(principal_id, CartSnapshot())
        self.docs[principal_id] = CartSnapshot(copy_items(items), current.version + 1)
        return True


class AlwaysConflictingStore(VersionedMemoryStore):
    async def save_cart(
        self, principal_id: str, items: CartItems, *, expected_version: int
    ) -> bool:
        return False


@pytest.fixture
def store() -> VersionedMemoryStore:
    return VersionedMemoryStore()


@pytest.fixture
def cart(store: VersionedMemoryStore) -> CartAggregator:
    return CartAggregator(store)


@pytest.mark.asyncio
async def test_read_of_missing_cart_is_empty(cart: CartAggregator) -> None:
    assert await cart.read("nobody") == {}


@pytest.mark.asyncio
async def test_add_once_then_twice(cart: CartAggregator) -> None:
    assert await cart.add("p", "shoe1", "M") == {"shoe1": {"M": 1}}
    assert await cart.add("p", "shoe1", "M") == {"shoe1": {"M": 2}}
    assert await cart.read("p") == {"shoe1": {"M": 2}}


@pytest.mark.asyncio
async def test_update_then_missing_size(cart: CartAggregator) -> None:
    await cart.add("p", "shoe1", "M")
    await cart.add("p", "shoe1", "M")

    assert await cart.update("p", "shoe1", "M", 5) == {"shoe1": {"M": 5}}
    with pytest.raises(NotFoundError):
        await cart.update("p", "shoe1", "L", 1)
    assert await cart.read("p") == {"shoe1": {"M": 5}}


@pytest.mark.asyncio
async def test_carts_are_isolated_per_principal(cart: CartAggregator) -> None:
    await cart.add("alice", "shoe1", "M")
    await cart.add("bob", "hat", "L")

    assert await cart.read("alice") == {"shoe1": {"M": 1}}
    assert await cart.read("bob") == {"hat": {"L": 1}}


@pytest.mark.asyncio
async def test_failed_validation_does_not_write(
    cart: CartAggregator, store: VersionedMemoryStore
) -> None:
    await cart.add("p", "shoe1", "M")
    saves = store.saves
    with pytest.raises(NotFoundError):
        await cart.update("p", "nope", "M", 1)
    assert store.saves == saves


@pytest.mark.asyncio
async def test_concurrent_adds_never_lose_increments(cart: CartAggregator) -> None:
    await asyncio.gather(cart.add("p", "shoe1", "M"), cart.add("p", "shoe1", "M"))
    assert await cart.read("p") == {"shoe1": {"M": 2}}

    await asyncio.gather(*(cart.add("p", "shoe1", "M") for _ in range(5)))
    assert await cart.read("p") == {"shoe1": {"M": 7}}


@pytest.mark.asyncio
async def test_concurrent_update_does_not_clobber_other_items(cart: CartAggregator) -> None:
    await cart.add("p", "shoe1", "M")
    await asyncio.gather(cart.update("p", "shoe1", "M", 4), cart.add("p", "hat", "L"))
    assert await cart.read("p") == {"shoe1": {"M": 4}, "hat": {"L": 1}}


@pytest.mark.asyncio
async def test_naive_read_modify_write_loses_updates() -> None:
    # Known-racy: without a version check both writers commit the same snapshot + 1.
    naive = CartAggregator(NaiveMemoryStore())
    await asyncio.gather(naive.add("p", "shoe1", "M"), naive.add("p", "shoe1", "M"))
    assert await naive.read("p") == {"shoe1": {"M": 1}}


@pytest.mark.asyncio
async def test_persistent_conflicts_raise_storage_error() -> None:
    cart = CartAggregator(AlwaysConflictingStore(), max_attempts=3)
    with pytest.raises(StorageError):
        await cart.add("p", "shoe1", "M")


# --- SQL store ---------------------------------------------------------------


@pytest_asyncio.fixture
async def sql_sessions(settings: Settings):
    engine: AsyncEngine = create_engine(settings)
    await init_db(engine)
    try:
        yield create_sessionmaker(engine)
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_sql_store_compare_and_swap(
    sql_sessions: async_sessionmaker[AsyncSession],
) -> None:
    store = SqlCartStore(sql_sessions)

    assert await store.load_cart("p") == CartSnapshot({}, 0)
    assert await store.save_cart("p", {"shoe1": {"M": 1}}, expected_version=0) is True
    # A second creator loses.
    assert await store.save_cart("p", {"hat": {"L": 1}}, expected_version=0) is False

    snapshot = await store.load_cart("p")
    assert snapshot == CartSnapshot({"shoe1": {"M": 1}}, 1)

    assert await store.save_cart("p", {"shoe1": {"M": 2}}, expected_version=1) is True
    # Stale writer loses.
    assert await store.save_cart("p", {"shoe1": {"M": 9}}, expected_version=1) is False
    assert await store.load_cart("p") == CartSnapshot({"shoe1": {"M": 2}}, 2)


@pytest.mark.asyncio
async def test_sql_backed_concurrent_adds(
    sql_sessions: async_sessionmaker[AsyncSession],
) -> None:
    cart = CartAggregator(SqlCartStore(sql_sessions), max_attempts=20)
    await asyncio.gather(*(cart.add("p", "shoe1", "M") for _ in range(5)))
    assert await cart.read("p") == {"shoe1": {"M": 5}}
