"""Order planning for session elements.

Element ``order`` values are stored on each row so a single element can be
read and compared without loading its whole session. Writes that touch the
sequence are not atomic as a group, so gaps and duplicates can appear. The
functions here work on an in-memory snapshot and return the patches needed
to restore a dense ``0..n-1`` sequence; the actions apply them.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Literal

Direction = Literal["up", "down"]

DIRECTIONS: tuple[str, ...] = ("up", "down")


@dataclass(frozen=True)
class OrderedRow:
    pk: int
    order: int


def sort_rows(rows: Iterable[OrderedRow]) -> list[OrderedRow]:
    """Sort by stored order, breaking ties on primary key."""
    return sorted(rows, key=lambda row: (row.order, row.pk))


def plan_order_repair(rows: Iterable[OrderedRow]) -> list[tuple[int, int]]:
    """Return ``(pk, new_order)`` for every row whose order differs from its index.

    Empty when the sequence is already dense.
    """
    return [
        (row.pk, index)
        for index, row in enumerate(sort_rows(rows))
        if row.order != index
    ]


def next_order(orders: Iterable[int]) -> int:
    """Order for an appended element: one past the current maximum, or 0."""
    return max(orders, default=-1) + 1


def plan_step_move(
    rows: Sequence[OrderedRow], pk: int, direction: str
) -> tuple[int, int, int, int] | None:
    """Plan swapping ``pk`` with its neighbour in a dense, sorted snapshot.

    Returns ``(pk, new_order, neighbour_pk, neighbour_new_order)`` or None when
    the element already sits at the boundary in that direction.
    """
    if direction not in DIRECTIONS:
        raise ValueError(
            f"Invalid direction '{direction}'. Must be one of: {set(DIRECTIONS)}"
        )
    position = next(
        (index for index, row in enumerate(rows) if row.pk == pk), None
    )
    if position is None:
        raise ValueError(f"Element {pk} is not part of this sequence.")

    neighbour_position = position - 1 if direction == "up" else position + 1
    if neighbour_position < 0 or neighbour_position >= len(rows):
        return None

    current = rows[position]
    neighbour = rows[neighbour_position]
    return (current.pk, neighbour.order, neighbour.pk, current.order)


def is_dense(orders: Iterable[int]) -> bool:
    values = sorted(orders)
    return values == list(range(len(values)))
