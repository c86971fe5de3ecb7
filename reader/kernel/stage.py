"""
Stage state for one level of the reader cascade.

A stage holds the items fetched for its parent, the current selection,
and the loading/error flags. The selection never points at an item that
is not in `items` once items are populated.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from reader.kernel.types import StageSnapshot, StageStatus

DefaultSelector = Callable[[Sequence[Any]], str | None]


# ---------------------------------------------------------------------------
# Default selection policies
# ---------------------------------------------------------------------------


def first_item(items: Sequence[Any]) -> str | None:
    """Select items[0], or nothing when the list is empty."""
    return items[0].id if items else None


def prefer_id(preferred: str) -> DefaultSelector:
    """Select the item whose id is `preferred`, else items[0], else nothing."""

    def select(items: Sequence[Any]) -> str | None:
        for item in items:
            if item.id == preferred:
                return item.id
        return first_item(items)

    select.__name__ = f"prefer_{preferred}"
    return select


# ---------------------------------------------------------------------------
# StageState
# ---------------------------------------------------------------------------


class StageState:
    """Fetch and selection state for one cascade level."""

    def __init__(self, name: str):
        self.name = name
        self.items: list[Any] = []
        self.selected_id: str | None = None
        self.loading = False
        self.error: str | None = None
        self.status = StageStatus.IDLE
        self.parent_id: str | None = None

    def __repr__(self) -> str:
        return (
            f"StageState({self.name!r}, status={self.status.value}, "
            f"items={len(self.items)}, selected_id={self.selected_id!r})"
        )

    # -- transitions ---------------------------------------------------------

    def set_loading(self) -> None:
        self.loading = True
        self.error = None
        self.status = StageStatus.LOADING

    def set_items(self, items: Sequence[Any], default_selector: DefaultSelector = first_item) -> None:
        """
        Replace items and reconcile the selection.

        The current selection survives only if it is still present;
        otherwise the default selector picks a new one. A selector that
        returns an id outside `items` is treated as returning None.
        """
        self.items = list(items)
        self.loading = False
        self.error = None
        self.status = StageStatus.POPULATED

        if self.selected_id is not None and self.contains(self.selected_id):
            return

        candidate = default_selector(self.items)
        self.selected_id = candidate if candidate is not None and self.contains(candidate) else None

    def set_error(self, message: str) -> None:
        """
        Record a failed fetch and drop the items.

        The selected id stays as a preference, like reset(keep_selection=True),
        so reloading the same parent returns to the same place.
        """
        self.loading = False
        self.error = message
        self.items = []
        self.status = StageStatus.ERRORED

    def select(self, item_id: str) -> bool:
        """Select `item_id` if present. Returns False (and changes nothing) otherwise."""
        if not self.contains(item_id):
            return False
        self.selected_id = item_id
        return True

    def reset(self, keep_selection: bool = False) -> None:
        """
        Return to IDLE with no items.

        keep_selection retains the selected id as a preference for the next
        set_items call; with no items the selection cannot dangle.
        """
        self.items = []
        self.loading = False
        self.error = None
        self.status = StageStatus.IDLE
        if not keep_selection:
            self.selected_id = None

    # -- queries -------------------------------------------------------------

    def contains(self, item_id: str) -> bool:
        return self.index_of(item_id) is not None

    def index_of(self, item_id: str | None) -> int | None:
        if item_id is None:
            return None
        for i, item in enumerate(self.items):
            if item.id == item_id:
                return i
        return None

    @property
    def selected(self) -> Any | None:
        idx = self.index_of(self.selected_id)
        return self.items[idx] if idx is not None else None

    def snapshot(self) -> StageSnapshot:
        return StageSnapshot(
            name=self.name,
            status=self.status,
            items=tuple(self.items),
            selected_id=self.selected_id,
            loading=self.loading,
            error=self.error,
            parent_id=self.parent_id,
        )
