"""
List-move helpers for drag-and-drop reordering (0-based indexes).
"""

from __future__ import annotations

from typing import TypeVar

T = TypeVar("T")


def _check_index(name: str, index: int, size: int) -> None:
    if not 0 <= index < size:
        raise IndexError(f"{name} {index} out of range for {size} entries")


def move_item(items: list[T], old_index: int, new_index: int) -> list[T]:
    """Return a copy of ``items`` with one element moved.

    Raises:
        IndexError: If either index is out of range.
    """
    _check_index("old_index", old_index, len(items))
    _check_index("new_index", new_index, len(items))
    moved = list(items)
    moved.insert(new_index, moved.pop(old_index))
    return moved


def translate_index(active: int, old_index: int, new_index: int) -> int:
    """Where an element at ``active`` ends up after moving old -> new.

    The moved element follows the move; elements between the two
    positions shift by one toward the hole that closed.
    """
    if active == old_index:
        return new_index
    if old_index < active <= new_index:
        return active - 1
    if new_index <= active < old_index:
        return active + 1
    return active
