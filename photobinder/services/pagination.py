"""
Binder pagination.

Pages are derived purely from each card's index in the binder's ordered card
list: page ``p`` holds ``cards[p * cards_per_page : (p + 1) * cards_per_page]``.
The stored ``position`` on each card plays no part.

Navigation never raises on out-of-range requests; it clamps to the nearest
valid page. The only state carried between calls is the current page.
"""

import math
from collections.abc import Sequence
from typing import Generic, TypeVar

T = TypeVar("T")

DEFAULT_CARDS_PER_PAGE = 9


def total_pages(card_count: int, cards_per_page: int) -> int:
    """Number of pages needed, never less than one."""
    _check_capacity(cards_per_page)
    return max(1, math.ceil(card_count / cards_per_page))


def clamp_page(page: int, page_count: int) -> int:
    return max(0, min(page, page_count - 1))


def page_slice(cards: Sequence[T], page: int, cards_per_page: int) -> list[T]:
    start = page * cards_per_page
    return list(cards[start : start + cards_per_page])


def paginate(cards: Sequence[T], cards_per_page: int) -> list[list[T]]:
    """
    Split cards into consecutive pages.

    An empty collection yields a single empty page.
    """
    count = total_pages(len(cards), cards_per_page)
    return [page_slice(cards, page, cards_per_page) for page in range(count)]


def _check_capacity(cards_per_page: int) -> None:
    if cards_per_page < 1:
        raise ValueError(f"cards_per_page must be at least 1, got {cards_per_page}")


class BinderPagination(Generic[T]):
    """Page cursor over an ordered card list."""

    def __init__(
        self,
        cards: Sequence[T],
        cards_per_page: int = DEFAULT_CARDS_PER_PAGE,
        current_page: int = 0,
    ) -> None:
        _check_capacity(cards_per_page)
        self._cards = list(cards)
        self._cards_per_page = cards_per_page
        self._current_page = current_page

    @property
    def cards(self) -> list[T]:
        return self._cards

    @property
    def cards_per_page(self) -> int:
        return self._cards_per_page

    @property
    def total_pages(self) -> int:
        return total_pages(len(self._cards), self._cards_per_page)

    @property
    def current_page(self) -> int:
        # Clamped on read so a shrinking card list or growing page size
        # never leaves the cursor past the end
        return clamp_page(self._current_page, self.total_pages)

    @property
    def page_offset(self) -> int:
        return self.current_page * self._cards_per_page

    @property
    def current_cards(self) -> list[T]:
        return page_slice(self._cards, self.current_page, self._cards_per_page)

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages - 1

    @property
    def has_prev(self) -> bool:
        return self.current_page > 0

    def go_to_page(self, page: int) -> int:
        self._current_page = clamp_page(page, self.total_pages)
        return self._current_page

    def next_page(self) -> int:
        return self.go_to_page(self.current_page + 1)

    def prev_page(self) -> int:
        return self.go_to_page(self.current_page - 1)

    def set_cards(self, cards: Sequence[T]) -> None:
        self._cards = list(cards)
        self._current_page = self.current_page

    def set_cards_per_page(self, cards_per_page: int) -> None:
        _check_capacity(cards_per_page)
        self._cards_per_page = cards_per_page
        self._current_page = self.current_page

    def pages(self) -> list[list[T]]:
        return paginate(self._cards, self._cards_per_page)
