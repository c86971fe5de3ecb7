"""
Leitor Kernel — Presentation

Turns a CascadeSnapshot into what a reader sees. Pure: no IO, no state.

The leaf is never rendered blank. A failed or empty content fetch shows a
placeholder carrying the reason in place of the chapter text.
"""

from __future__ import annotations

import html
import textwrap
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from bs4 import BeautifulSoup

from reader.kernel.types import (
    CascadeSnapshot,
    CollectionItem,
    LeafContent,
    StageSnapshot,
    StageStatus,
    item_label,
)

LOADING_TEXT = "Loading…"
EMPTY_TEXT = "Nothing available."
CONTENT_UNAVAILABLE = "Content not available for this chapter."
ERROR_REFERENCE = "Error"

WIDTHS: dict[str, int] = {"narrow": 60, "normal": 80, "wide": 100}

# Stage name → what the reader calls it.
STAGE_LABELS: dict[str, str] = {"collection": "books", "sub_collection": "chapters", "leaf": "content"}


@dataclass
class ReadingPreferences:
    verse_by_verse: bool = False
    width: str = "normal"

    @property
    def columns(self) -> int:
        return WIDTHS.get(self.width, WIDTHS["normal"])

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ReadingPreferences:
        data = data or {}
        width = data.get("width", "normal")
        return cls(
            verse_by_verse=bool(data.get("verse_by_verse", False)),
            width=width if width in WIDTHS else "normal",
        )

    def to_dict(self) -> dict[str, Any]:
        return {"verse_by_verse": self.verse_by_verse, "width": self.width}


# ---------------------------------------------------------------------------
# Leaf
# ---------------------------------------------------------------------------


def placeholder_content(content_id: str | None, message: str, reference: str = ERROR_REFERENCE) -> LeafContent:
    return LeafContent(
        id=content_id or "",
        body=f"<p>{html.escape(message or CONTENT_UNAVAILABLE)}</p>",
        reference=reference,
    )


def leaf_view(stage: StageSnapshot) -> LeafContent | None:
    """
    What the content area shows for the leaf stage.

    None means "show a skeleton" (loading or nothing requested yet).
    """
    if stage.status == StageStatus.ERRORED:
        return placeholder_content(stage.parent_id, stage.error or CONTENT_UNAVAILABLE)
    if stage.status == StageStatus.POPULATED:
        content = stage.selected
        if content is None:
            return placeholder_content(stage.parent_id, CONTENT_UNAVAILABLE, reference="Chapter not found")
        return content
    return None


def markup_to_text(body: str, verse_by_verse: bool = False) -> str:
    """
    Strip markup from chapter content.

    Verse-number spans (<span class="v">N</span>) become "N " inline, or
    start a new line when verse_by_verse is set.
    """
    soup = BeautifulSoup(body or "", "html.parser")
    for span in soup.select("span.v"):
        number = span.get_text(strip=True)
        span.replace_with(f"\n{number} " if verse_by_verse else f"{number} ")
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for block in soup.find_all(["p", "div"]):
        block.insert_before("\n")
        block.insert_after("\n")

    lines = (" ".join(line.split()) for line in soup.get_text().splitlines())
    return "\n".join(line for line in lines if line)


def verse_text(body: str, number: int) -> str | None:
    """Text of one verse from chapter markup, or None when it is not marked."""
    prefix = f"{number} "
    for line in markup_to_text(body, verse_by_verse=True).splitlines():
        if line.startswith(prefix):
            return line[len(prefix) :]
    return None


def copy_text(content: LeafContent) -> str:
    """Reference, text and attribution, ready for the clipboard."""
    parts = [content.reference, markup_to_text(content.body), content.attribution]
    return "\n\n".join(p for p in parts if p)


def share_text(content: LeafContent, url: str | None = None) -> str:
    # No native share target in a terminal; falls back to the copy text.
    text = copy_text(content)
    return f"{text}\n\n{url}" if url else text


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


def stage_status_line(stage: StageSnapshot) -> str:
    if stage.status == StageStatus.LOADING:
        return LOADING_TEXT
    if stage.status == StageStatus.ERRORED:
        return f"Error: {stage.error}"
    if stage.status == StageStatus.POPULATED and not stage.items:
        return EMPTY_TEXT
    selected = stage.selected
    return item_label(selected) if selected is not None else ""


def filter_items(items: Iterable[CollectionItem], term: str) -> list[CollectionItem]:
    """Case-insensitive match on display name or abbreviation."""
    needle = term.strip().lower()
    if not needle:
        return list(items)
    return [
        item
        for item in items
        if needle in item.display_name.lower() or needle in (item.abbreviation or "").lower()
    ]


def find_item(items: Sequence[Any], term: str) -> Any | None:
    """Resolve user input to an item: exact id, abbreviation, name, then ordinal."""
    needle = term.strip().lower()
    for item in items:
        if item.id.lower() == needle:
            return item
    for item in items:
        if isinstance(item, CollectionItem) and needle in (
            (item.abbreviation or "").lower(),
            item.display_name.lower(),
        ):
            return item
    if needle.isdigit():
        for item in items:
            if getattr(item, "ordinal", None) == int(needle):
                return item
    return None


# ---------------------------------------------------------------------------
# Whole screen
# ---------------------------------------------------------------------------


def render_header(snapshot: CascadeSnapshot) -> str:
    book = snapshot.collection.selected
    chapter = snapshot.sub_collection.selected
    title = " ".join(
        part
        for part in (
            (book.abbreviation or book.display_name) if book else "",
            str(chapter.ordinal) if chapter else "",
        )
        if part
    )
    version = (snapshot.context or "").upper()
    return f"{title or '—'}  ·  {version}" if version else title or "—"


def render_reader(snapshot: CascadeSnapshot, preferences: ReadingPreferences | None = None) -> str:
    prefs = preferences or ReadingPreferences()
    lines = [render_header(snapshot), ""]

    for stage in (snapshot.collection, snapshot.sub_collection):
        if stage.status in (StageStatus.LOADING, StageStatus.ERRORED) or (
            stage.status == StageStatus.POPULATED and not stage.items
        ):
            lines.append(f"{STAGE_LABELS.get(stage.name, stage.name)}: {stage_status_line(stage)}")

    content = leaf_view(snapshot.leaf)
    if content is None:
        if snapshot.leaf.status == StageStatus.LOADING:
            lines.append(LOADING_TEXT)
        return "\n".join(lines).rstrip()

    lines.append(content.reference)
    lines.append("")
    for paragraph in markup_to_text(content.body, prefs.verse_by_verse).splitlines():
        lines.append(textwrap.fill(paragraph, width=prefs.columns))
    if content.attribution:
        lines.append("")
        lines.append(content.attribution)
    return "\n".join(lines).rstrip()
