"""
Leitor Kernel — Cascade Controller

Coordinates the three dependent fetches of the reader:

    context (version) → books → chapters → chapter content

A committed selection at stage N issues exactly one fetch for stage N+1.
Each fetch is tagged with the stage, context, parent id and a per-stage
generation; a result whose tag no longer matches is dropped without
touching state. That is the only ordering guarantee the reader needs:
a slow response for a previous parent can never overwrite the current one.

Cancellation is logical. The superseded network call runs to completion
and its result is discarded.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from reader.kernel.gateway import ContentGateway, GatewayError
from reader.kernel.stage import DefaultSelector, StageState, first_item, prefer_id
from reader.kernel.types import CascadeSnapshot, Direction, StageIndex, StageStatus

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION_ID = "genesis"


@dataclass(frozen=True)
class FetchTag:
    """Identifies one issued fetch."""

    stage_index: StageIndex
    context: str | None
    parent_id: str | None
    generation: int


class CascadeController:
    """Owns the collection, sub-collection and leaf stages of one reader."""

    def __init__(
        self,
        gateway: ContentGateway,
        *,
        default_selectors: Sequence[DefaultSelector] | None = None,
        fetch_timeout: float | None = None,
    ):
        """
        Args:
            gateway: Transport for all remote reads
            default_selectors: One selector per stage. Defaults to
                prefer "genesis" for books, first item elsewhere.
            fetch_timeout: Optional seconds before a fetch fails with GatewayError
        """
        self.gateway = gateway
        self.context: str | None = None
        self.stages = (
            StageState("collection"),
            StageState("sub_collection"),
            StageState("leaf"),
        )
        self.default_selectors = tuple(
            default_selectors or (prefer_id(DEFAULT_COLLECTION_ID), first_item, first_item)
        )
        if len(self.default_selectors) != len(self.stages):
            raise ValueError("default_selectors needs one selector per stage")
        self.fetch_timeout = fetch_timeout
        self._generations = [0 for _ in self.stages]
        self._last_failure: FetchTag | None = None

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    async def set_context(self, context: str) -> None:
        """
        Switch the context (version) and reload the collection stage.

        Dependent stages keep their selection as a preference, so a version
        switch stays on the same book and chapter when they still exist.
        """
        self.context = context
        await self._load(StageIndex.COLLECTION, context)

    async def select_parent(self, stage_index: int, item_id: str) -> bool:
        """
        Commit a selection at `stage_index` and load the dependent stage.

        Returns False when the id is unknown or nothing needed fetching.
        """
        index = StageIndex(stage_index)
        if index == StageIndex.LEAF:
            raise ValueError("The leaf stage has no dependent stage to load")

        stage = self.stages[index]
        previous = stage.selected_id
        if not stage.select(item_id):
            logger.warning("cascade: %s has no item %r", stage.name, item_id)
            return False

        dependent = self.stages[index + 1]
        already_loaded = dependent.parent_id == item_id and dependent.status != StageStatus.IDLE
        if item_id == previous and already_loaded:
            return False

        await self._load(StageIndex(index + 1), item_id)
        return True

    async def navigate_sibling(self, direction: Direction | str) -> bool:
        """Move to the previous/next chapter. Clamped at both ends."""
        step = -1 if Direction(direction) == Direction.PREV else 1
        chapters = self.stages[StageIndex.SUB_COLLECTION]
        current = chapters.index_of(chapters.selected_id)
        if current is None:
            return False

        target = current + step
        if target < 0 or target >= len(chapters.items):
            return False
        return await self.select_parent(StageIndex.SUB_COLLECTION, chapters.items[target].id)

    async def retry(self) -> bool:
        """Re-issue the most recent failed fetch, unless something newer replaced it."""
        tag = self._last_failure
        if tag is None:
            return False
        self._last_failure = None
        if self._is_stale(tag):
            return False
        await self._load(tag.stage_index, tag.parent_id)
        return True

    def snapshot(self) -> CascadeSnapshot:
        return CascadeSnapshot(context=self.context, stages=tuple(s.snapshot() for s in self.stages))

    @property
    def last_failure(self) -> FetchTag | None:
        return self._last_failure

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def _load(self, index: StageIndex, parent_id: str | None) -> None:
        stage = self.stages[index]
        # The collection's parent is the context; its selection survives a context switch.
        keep = index == StageIndex.COLLECTION or stage.parent_id == parent_id
        stage.reset(keep_selection=keep)
        stage.parent_id = parent_id
        stage.set_loading()
        tag = self._issue(index, parent_id)

        # Everything below this stage now depends on a fetch that has not resolved.
        for later in range(index + 1, len(self.stages)):
            self.stages[later].reset(keep_selection=True)
            self._generations[later] += 1

        try:
            items = await self._fetch(tag)
        except GatewayError as e:
            if self._is_stale(tag):
                logger.debug("cascade: dropping stale failure for %s (%s)", stage.name, tag)
                return
            logger.warning("cascade: %s fetch failed for %r: %s", stage.name, parent_id, e.message)
            stage.set_error(e.message)
            self._last_failure = tag
            return

        if self._is_stale(tag):
            logger.debug("cascade: dropping stale result for %s (%s)", stage.name, tag)
            return

        stage.set_items(items, self.default_selectors[index])
        if self._last_failure is not None and self._last_failure.stage_index == index:
            self._last_failure = None

        if index < StageIndex.LEAF and stage.selected_id is not None:
            await self._load(StageIndex(index + 1), stage.selected_id)

    def _issue(self, index: StageIndex, parent_id: str | None) -> FetchTag:
        self._generations[index] += 1
        return FetchTag(
            stage_index=index,
            context=self.context,
            parent_id=parent_id,
            generation=self._generations[index],
        )

    def _is_stale(self, tag: FetchTag) -> bool:
        return (
            tag.generation != self._generations[tag.stage_index]
            or tag.context != self.context
            or tag.parent_id != self.stages[tag.stage_index].parent_id
        )

    async def _fetch(self, tag: FetchTag) -> list[Any]:
        if tag.context is None:
            raise GatewayError("No version selected.")

        if tag.stage_index == StageIndex.COLLECTION:
            call = self.gateway.get_collection_items(tag.context)
        elif tag.stage_index == StageIndex.SUB_COLLECTION:
            call = self.gateway.get_sub_collection_items(tag.context, tag.parent_id)
        else:
            call = self.gateway.get_leaf_content(tag.context, tag.parent_id)

        if self.fetch_timeout is None:
            return await call
        try:
            return await asyncio.wait_for(call, timeout=self.fetch_timeout)
        except asyncio.TimeoutError as e:
            raise GatewayError(f"Request timed out after {self.fetch_timeout:g}s.") from e
