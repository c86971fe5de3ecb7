"""REPL for the Leitor CLI."""

from __future__ import annotations

import asyncio
import re
from collections.abc import Awaitable, Callable

from leitor_cli.config import Config
from reader.kernel.cascade import CascadeController
from reader.kernel.gateway import ContentGateway, GatewayError
from reader.kernel.presentation import (
    WIDTHS,
    copy_text,
    filter_items,
    find_item,
    leaf_view,
    render_header,
    render_reader,
    share_text,
    stage_status_line,
    verse_text,
)
from reader.kernel.types import Direction, StageIndex, StageStatus

ReadLine = Callable[[str], Awaitable[str]]

_CHAPTER_VERSE = re.compile(r"^(\d+):(\d+)$")

HELP = """
  <book> [chapter]     Go to a book and chapter, e.g. "gn 3", "1 joão 2"
  <book> <ch>:<verse>  Show one verse, e.g. "jo 3:16"
  <chapter>            Go to a chapter of the current book
  /find <query>        Find verses by reference or words, e.g. "/find amou o mundo"
  /remote <bible> <ch> Read a chapter from the scripture API, e.g. "/remote de4e12af7f28f599-02 GEN.1"
  /versions            List versions
  /version <id>        Switch version (stays on the same chapter)
  /books [filter]      List books, optionally filtered by name
  /chapters            List chapters of the current book
  /next, /prev         Next or previous chapter
  /retry               Retry the last failed load
  /read                Show the current chapter again
  /copy                Print the chapter as plain text for copying
  /share [url]         Print the chapter with a link
  /layout [verse|paragraph]
  /width [narrow|normal|wide]
  /help                Show this help
  /quit                Exit
"""


async def _input(prompt: str) -> str:
    return await asyncio.to_thread(input, prompt)


class Repl:
    """Interactive reader driving a CascadeController."""

    def __init__(
        self,
        config: Config,
        gateway: ContentGateway,
        controller: CascadeController | None = None,
        read_line: ReadLine | None = None,
    ):
        self.config = config
        self.gateway = gateway
        self.controller = controller or CascadeController(gateway, fetch_timeout=30.0)
        self.preferences = config.preferences
        self.running = True
        self._read_line = read_line or _input

    async def start(self, version: str | None = None):
        """Load the starting version and run until /quit or EOF."""
        print(f"leitor > {self.config.api_url}")
        await self.controller.set_context(version or self.config.default_version)
        self.show()

        while self.running:
            try:
                line = (await self._read_line(self._prompt())).strip()
            except (EOFError, KeyboardInterrupt):
                print()
                break

            if not line:
                continue
            try:
                if line.startswith("/"):
                    await self.handle_command(line)
                else:
                    await self.goto(line)
            except GatewayError as e:
                print(f"  Error: {e.message}")
            except Exception as e:
                print(f"Error: {e}")

    def _prompt(self) -> str:
        return f"{render_header(self.controller.snapshot())} > "

    def show(self):
        print(render_reader(self.controller.snapshot(), self.preferences))

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def goto(self, text: str):
        """
        Jump to "<book> <chapter>", "<book>" or "<chapter>".

        A trailing number is the chapter; a lone number stays in the
        current book. "<chapter>:<verse>" shows just that verse.
        """
        tokens = text.split()
        chapter = verse = None
        match = _CHAPTER_VERSE.match(tokens[-1]) if tokens else None
        if match:
            tokens.pop()
            chapter, verse = match.group(1), int(match.group(2))
        elif len(tokens) > 1 and tokens[-1].isdigit():
            chapter = tokens.pop()
        elif len(tokens) == 1 and tokens[0].isdigit():
            chapter = tokens.pop()

        if tokens and not await self._select_book(" ".join(tokens)):
            return
        if chapter is not None and not await self._select_chapter(chapter):
            return
        if verse is not None:
            self._show_verse(verse)
        else:
            self.show()

    def _show_verse(self, number: int):
        content = leaf_view(self.controller.snapshot().leaf)
        text = verse_text(content.body, number) if content else None
        if text is None:
            reference = content.reference if content else "this chapter"
            print(f"  Verse {number} not found in {reference}.")
            return
        print(f"  {content.reference}:{number}  {text}")

    async def _select_book(self, term: str) -> bool:
        books = self.controller.stages[StageIndex.COLLECTION]
        item = find_item(books.items, term)
        if item is None:
            print(f"  No book matching '{term}'. Try /books {term}")
            return False
        await self.controller.select_parent(StageIndex.COLLECTION, item.id)
        return True

    async def _select_chapter(self, term: str) -> bool:
        chapters = self.controller.stages[StageIndex.SUB_COLLECTION]
        item = find_item(chapters.items, term)
        if item is None:
            print(f"  No chapter {term} in this book.")
            return False
        await self.controller.select_parent(StageIndex.SUB_COLLECTION, item.id)
        return True

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def handle_command(self, line: str):
        parts = line.split(maxsplit=1)
        cmd = parts[0].lower()
        arg = parts[1].strip() if len(parts) > 1 else None

        if cmd == "/quit":
            self.running = False
            print("Goodbye.")
        elif cmd == "/versions":
            await self._list_versions()
        elif cmd == "/version":
            if arg:
                await self._switch_version(arg.lower())
            else:
                print("Usage: /version <id>")
        elif cmd == "/find":
            if arg:
                await self._find(arg)
            else:
                print("Usage: /find <reference or words>")
        elif cmd == "/remote":
            ids = (arg or "").split()
            if len(ids) == 2:
                await self._read_remote(*ids)
            else:
                print("Usage: /remote <bibleId> <chapterId>")
        elif cmd == "/books":
            self._list_books(arg or "")
        elif cmd == "/chapters":
            self._list_chapters()
        elif cmd in ("/next", "/prev"):
            await self._step(Direction.NEXT if cmd == "/next" else Direction.PREV)
        elif cmd == "/retry":
            if await self.controller.retry():
                self.show()
            else:
                print("  Nothing to retry.")
        elif cmd == "/read":
            self.show()
        elif cmd == "/copy":
            self._print_content(copy_text)
        elif cmd == "/share":
            self._print_content(lambda content: share_text(content, arg))
        elif cmd == "/layout":
            self._set_layout(arg)
        elif cmd == "/width":
            self._set_width(arg)
        elif cmd == "/help":
            print(HELP)
        else:
            print(f"Unknown command: {cmd}")
            print("Type /help for available commands.")

    async def _list_versions(self):
        versions = await self.gateway.get_versions()
        if not versions:
            print("  No versions available.")
            return
        for v in versions:
            marker = "*" if v.id == self.controller.context else " "
            status = ""
            if v.imported is not None:
                status = "  (imported)" if v.imported else "  (not imported)"
            print(f"  {marker} {v.id:<6} {v.name}{status}")

    async def _find(self, query: str):
        matches = await self.gateway.search_verses(self.controller.context or self.config.default_version, query)
        if not matches:
            print(f"  No verses found for '{query}'.")
            return
        for m in matches:
            print(f"  {m.reference:<18} {m.text}")

    async def _read_remote(self, bible_id: str, chapter_id: str):
        content = await self.gateway.get_remote_chapter(bible_id, chapter_id)
        print(copy_text(content))

    async def _switch_version(self, version_id: str):
        await self.controller.set_context(version_id)
        if self.controller.stages[StageIndex.COLLECTION].status == StageStatus.POPULATED:
            self.config.default_version = version_id
        self.show()

    def _list_books(self, term: str):
        stage = self.controller.snapshot().collection
        if stage.status != StageStatus.POPULATED or not stage.items:
            print(f"  {stage_status_line(stage)}")
            return

        books = filter_items(stage.items, term)
        if not books:
            print(f"  No book matching '{term}'.")
            return
        testament = None
        for book in books:
            if book.testament != testament:
                testament = book.testament
                print(f"  {testament or ''}")
            marker = "*" if book.id == stage.selected_id else " "
            print(f"  {marker} {book.abbreviation or '':<4} {book.display_name}")

    def _list_chapters(self):
        stage = self.controller.snapshot().sub_collection
        if stage.status != StageStatus.POPULATED or not stage.items:
            print(f"  {stage_status_line(stage)}")
            return
        labels = [f"[{c.ordinal}]" if c.id == stage.selected_id else str(c.ordinal) for c in stage.items]
        print("  " + " ".join(labels))

    async def _step(self, direction: Direction):
        if await self.controller.navigate_sibling(direction):
            self.show()
        elif direction == Direction.NEXT:
            print("  Already at the last chapter.")
        else:
            print("  Already at the first chapter.")

    def _print_content(self, fmt):
        content = leaf_view(self.controller.snapshot().leaf)
        if content is None:
            print("  Nothing loaded yet.")
            return
        print(fmt(content))

    def _set_layout(self, arg: str | None):
        if arg not in (None, "verse", "paragraph"):
            print("Usage: /layout [verse|paragraph]")
            return
        verse_by_verse = not self.preferences.verse_by_verse if arg is None else arg == "verse"
        self.preferences.verse_by_verse = verse_by_verse
        self.config.preferences = self.preferences
        print(f"  Layout: {'verse by verse' if verse_by_verse else 'paragraph'}")
        self.show()

    def _set_width(self, arg: str | None):
        if arg not in WIDTHS:
            print(f"Usage: /width [{'|'.join(WIDTHS)}]  (now {self.preferences.width})")
            return
        self.preferences.width = arg
        self.config.preferences = self.preferences
        self.show()
