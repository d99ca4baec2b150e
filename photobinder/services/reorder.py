"""
Drag-to-reorder for binder cards.

A drag moves through three states::

    Idle --start_drag(i)--> Dragging(i) --drag_over(j)--> DragOver(i, j)
      ^                                                        |
      +-------------------- drop(j) / cancel() ----------------+

Indexes are local to the page being shown; ``page_offset`` converts them to
positions in the binder's full card list. Dropping a card on itself changes
nothing and persists nothing.

Persistence sends the complete new order of card ids. The new order is
applied locally before the backend answers. By default a failed save keeps
the optimistic order and reports the error; ``rollback_on_failure`` restores
the previous order instead.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Generic, Protocol, TypeVar

from photobinder.models.binder import Photocard
from photobinder.models.failure import KnownError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Idle:
    pass


@dataclass(frozen=True, slots=True)
class Dragging:
    source_index: int


@dataclass(frozen=True, slots=True)
class DragOver:
    source_index: int
    target_index: int


DragState = Idle | Dragging | DragOver


def move_item(items: Sequence[T], source: int, target: int) -> list[T]:
    """
    Move one item to a new index.

    Raises:
        IndexError: If either index is outside the sequence
    """
    size = len(items)
    if not 0 <= source < size or not 0 <= target < size:
        raise IndexError(f"move {source} -> {target} outside 0..{size - 1}")
    reordered = list(items)
    moved = reordered.pop(source)
    reordered.insert(target, moved)
    return reordered


class DragReorder(Generic[T]):
    """Drag state machine over one page of a card list."""

    def __init__(self, cards: Sequence[T], page_offset: int = 0) -> None:
        self.cards = list(cards)
        self.page_offset = page_offset
        self.state: DragState = Idle()

    def start_drag(self, source_index: int) -> None:
        self.state = Dragging(source_index)

    def drag_over(self, target_index: int) -> None:
        if isinstance(self.state, Idle):
            return
        self.state = DragOver(self.state.source_index, target_index)

    def cancel(self) -> None:
        self.state = Idle()

    def drop(self, target_index: int) -> list[T] | None:
        """
        Finish the drag on ``target_index``.

        Returns the new full card order, or None when nothing moved.
        The state is Idle afterwards in every case.
        """
        state = self.state
        self.state = Idle()
        if isinstance(state, Idle) or state.source_index == target_index:
            return None

        self.cards = move_item(
            self.cards,
            self.page_offset + state.source_index,
            self.page_offset + target_index,
        )
        return self.cards


class ReorderBackend(Protocol):
    async def reorder_cards(self, binder_id: str, new_order: list[str]) -> None: ...


@dataclass
class ReorderOutcome:
    """Result of a drop, including the order the user now sees."""

    cards: list[Photocard]
    changed: bool
    persisted: bool
    rolled_back: bool = False
    error: KnownError | None = field(default=None)


async def reorder_cards(
    binder_id: str,
    cards: Sequence[Photocard],
    page_offset: int,
    source_index: int,
    target_index: int,
    backend: ReorderBackend,
    rollback_on_failure: bool = False,
) -> ReorderOutcome:
    """
    Apply a drag from ``source_index`` to ``target_index`` and save it.

    Raises:
        IndexError: If an index falls outside the binder
    """
    previous = list(cards)
    drag = DragReorder(previous, page_offset)
    drag.start_drag(source_index)
    drag.drag_over(target_index)
    new_order = drag.drop(target_index)

    if new_order is None:
        return ReorderOutcome(cards=previous, changed=False, persisted=False)

    try:
        await backend.reorder_cards(binder_id, [card.id for card in new_order])
    except KnownError as e:
        logger.warning("Failed to save new card order for binder %s: %s", binder_id, e)
        if rollback_on_failure:
            return ReorderOutcome(
                cards=previous, changed=False, persisted=False, rolled_back=True, error=e
            )
        return ReorderOutcome(cards=new_order, changed=True, persisted=False, error=e)

    return ReorderOutcome(cards=new_order, changed=True, persisted=True)
