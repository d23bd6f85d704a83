"""
kart_api.services.cart_state

Cart document types and pure state transitions.

Responsibilities:
- Define the cart shape (itemId -> size -> quantity) and the store contract the
  aggregator relies on.
- Apply `add` / `update` to a cart value without touching storage.

Invariants:
- Quantities are non-negative ints; (itemId, size) keys are unique by
  construction of the nested mapping.
- A missing cart is the empty mapping.
- A zero quantity is logically absent: `update` refuses to target it, but an
  `update` to 0 leaves the zero entry in place rather than removing it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from kart_api.errors import NotFoundError, ValidationError

CartItems = dict[str, dict[str, int]]


@dataclass(frozen=True, slots=True)
class CartSnapshot:
    items: CartItems = field(default_factory=dict)
    # 0 means "no stored cart yet".
    version: int = 0


class CartStore(Protocol):
    async def load_cart(self, principal_id: str) -> CartSnapshot: ...

    async def save_cart(
        self, principal_id: str, items: CartItems, *, expected_version: int
    ) -> bool:
        """Write `items` iff the stored version still equals `expected_version`."""
        ...


def check_quantity(value: Any) -> int:
    # bool is an int subclass; JSON `true` is not a quantity.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("quantity must be a non-negative integer")
    if value < 0:
        raise ValidationError("quantity must be a non-negative integer")
    return value


def _require_key(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value:
        raise ValidationError(f"{name} is required")
    return value


def copy_items(items: CartItems) -> CartItems:
    return {item_id: dict(sizes) for item_id, sizes in items.items()}


def get_or_insert(items: CartItems, item_id: str) -> dict[str, int]:
    sizes = items.get(item_id)
    if sizes is None:
        sizes = items[item_id] = {}
    return sizes


def quantity_of(items: CartItems, item_id: str, size: str) -> int:
    return items.get(item_id, {}).get(size, 0)


def apply_add(items: CartItems, item_id: str, size: str) -> CartItems:
    """Return a new cart with one more unit of (item_id, size)."""
    item_id = _require_key(item_id, "itemId")
    size = _require_key(size, "size")

    updated = copy_items(items)
    sizes = get_or_insert(updated, item_id)
    sizes[size] = sizes.get(size, 0) + 1
    return updated


def apply_update(items: CartItems, item_id: str, size: str, quantity: Any) -> CartItems:
    """Return a new cart with (item_id, size) overwritten to `quantity`."""
    item_id = _require_key(item_id, "itemId")
    size = _require_key(size, "size")
    checked = check_quantity(quantity)

    if quantity_of(items, item_id, size) <= 0:
        raise NotFoundError("Item or size not found in cart")

    updated = copy_items(items)
    updated[item_id][size] = checked
    return updated
