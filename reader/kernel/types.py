"""
Leitor Kernel — Shared Types

Data classes used across the stage, cascade, gateway, and presentation
modules. These are the contracts that bind the kernel together.

Three levels of the reader cascade:
- CollectionItem    — a book, fetched for a version (the context)
- SubCollectionItem — a chapter, fetched for a book
- LeafContent       — chapter content, fetched for a chapter
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Union

# ---------------------------------------------------------------------------
# Stage identifiers
# ---------------------------------------------------------------------------


class StageIndex(IntEnum):
    COLLECTION = 0
    SUB_COLLECTION = 1
    LEAF = 2


class StageStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    POPULATED = "populated"
    ERRORED = "errored"


class Direction(str, Enum):
    PREV = "prev"
    NEXT = "next"


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CollectionItem:
    id: str
    display_name: str
    parent_id: str | None = None
    abbreviation: str | None = None
    testament: str | None = None
    chapter_count: int = 0


@dataclass(frozen=True)
class SubCollectionItem:
    id: str
    ordinal: int
    parent_id: str


@dataclass(frozen=True)
class LeafContent:
    id: str
    body: str
    reference: str
    attribution: str = ""


@dataclass(frozen=True)
class Version:
    """A Bible version offered by the functions service."""

    id: str
    name: str
    abbreviation: str = ""
    # None when the service does not say.
    imported: bool | None = None


@dataclass(frozen=True)
class VerseMatch:
    """A verse found by reference or by words."""

    version_id: str
    book_id: str
    book_name: str
    chapter: int
    verse: int
    text: str

    @property
    def reference(self) -> str:
        return f"{self.book_name} {self.chapter}:{self.verse}"

    @property
    def chapter_id(self) -> str:
        return f"{self.book_id}.{self.chapter}"


Item = Union[CollectionItem, SubCollectionItem, LeafContent]


def item_label(item: Item) -> str:
    """Short human label for an item of any stage."""
    if isinstance(item, CollectionItem):
        return item.display_name
    if isinstance(item, SubCollectionItem):
        return str(item.ordinal)
    return item.reference


# ---------------------------------------------------------------------------
# Snapshots (immutable views handed to the presentation layer)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StageSnapshot:
    name: str
    status: StageStatus
    items: tuple[Any, ...] = ()
    selected_id: str | None = None
    loading: bool = False
    error: str | None = None
    parent_id: str | None = None

    @property
    def selected(self) -> Any | None:
        for item in self.items:
            if item.id == self.selected_id:
                return item
        return None


@dataclass(frozen=True)
class CascadeSnapshot:
    context: str | None
    stages: tuple[StageSnapshot, ...] = field(default_factory=tuple)

    @property
    def collection(self) -> StageSnapshot:
        return self.stages[StageIndex.COLLECTION]

    @property
    def sub_collection(self) -> StageSnapshot:
        return self.stages[StageIndex.SUB_COLLECTION]

    @property
    def leaf(self) -> StageSnapshot:
        return self.stages[StageIndex.LEAF]
