"""
tests.test_cart_state

Pure cart transitions.
"""

from __future__ import annotations

import pytest

from kart_api.errors import NotFoundError, ValidationError
from kart_api.services.cart_state import apply_add, apply_update, check_quantity


def test_add_creates_nested_entries() -> None:
    assert apply_add({}, "shoe1", "M") == {"shoe1": {"M": 1}}


def test_add_increments_and_keeps_other_sizes() -> None:
    cart = {"shoe1": {"M": 1, "L": 3}}
    assert apply_add(cart, "shoe1", "M") == {"shoe1": {"M": 2, "L": 3}}
    assert apply_add(cart, "shoe2", "S") == {"shoe1": {"M": 1, "L": 3}, "shoe2": {"S": 1}}


def test_transitions_do_not_mutate_input() -> None:
    cart = {"shoe1": {"M": 1}}
    apply_add(cart, "shoe1", "M")
    apply_update(cart, "shoe1", "M", 9)
    assert cart == {"shoe1": {"M": 1}}


def test_update_overwrites_quantity() -> None:
    assert apply_update({"shoe1": {"M": 2}}, "shoe1", "M", 5) == {"shoe1": {"M": 5}}


def test_update_to_zero_keeps_entry() -> None:
    assert apply_update({"shoe1": {"M": 2}}, "shoe1", "M", 0) == {"shoe1": {"M": 0}}


@pytest.mark.parametrize(
    ("item_id", "size"),
    [("shoe1", "L"), ("shoe2", "M")],
)
def test_update_requires_existing_item_and_size(item_id: str, size: str) -> None:
    with pytest.raises(NotFoundError):
        apply_update({"shoe1": {"M": 2}}, item_id, size, 1)


def test_update_of_zero_entry_is_not_found() -> None:
    # Zero quantity is logically absent.
    with pytest.raises(NotFoundError):
        apply_update({"shoe1": {"M": 0}}, "shoe1", "M", 1)


@pytest.mark.parametrize("quantity", [-1, 1.5, "3", True, None])
def test_quantity_must_be_non_negative_int(quantity: object) -> None:
    with pytest.raises(ValidationError):
        check_quantity(quantity)
    with pytest.raises(ValidationError):
        apply_update({"shoe1": {"M": 2}}, "shoe1", "M", quantity)


@pytest.mark.parametrize(("item_id", "size"), [("", "M"), ("shoe1", "")])
def test_add_requires_item_and_size(item_id: str, size: str) -> None:
    with pytest.raises(ValidationError):
        apply_add({}, item_id, size)
