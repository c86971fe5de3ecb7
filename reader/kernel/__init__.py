"""
Leitor Kernel — the reader cascade.

Four components:
  stage         — fetch/selection state for one level (books, chapters, content)
  cascade       — dependent fetches with supersession of stale results
  gateway       — the remote content boundary (abstract + in-memory)
  presentation  — snapshot → text, placeholders, copy/share
"""

from reader.kernel.cascade import CascadeController
from reader.kernel.gateway import ContentGateway, GatewayError, MemoryGateway
from reader.kernel.presentation import ReadingPreferences, leaf_view, render_reader
from reader.kernel.stage import StageState, first_item, prefer_id
from reader.kernel.types import (
    CascadeSnapshot,
    CollectionItem,
    Direction,
    LeafContent,
    StageIndex,
    StageStatus,
    SubCollectionItem,
    VerseMatch,
    Version,
)

__all__ = [
    "CascadeController",
    "ContentGateway",
    "GatewayError",
    "MemoryGateway",
    "StageState",
    "first_item",
    "prefer_id",
    "ReadingPreferences",
    "leaf_view",
    "render_reader",
    "CascadeSnapshot",
    "CollectionItem",
    "SubCollectionItem",
    "LeafContent",
    "Version",
    "VerseMatch",
    "Direction",
    "StageIndex",
    "StageStatus",
]
