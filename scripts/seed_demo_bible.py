#!/usr/bin/env python3
"""
Seed a small demo Bible and print an anon key for the CLI.

Usage:
    python scripts/seed_demo_bible.py

Registers the four Portuguese versions, imports a handful of verses
into NVI and ARA, and derives their book structure.
"""

import asyncio
import sys

# Add project root to path
sys.path.insert(0, ".")

from backend.auth import create_jwt
from backend.db import close_pool, init_pool
from backend.repos.bible_repo import BibleRepo
from backend.services.bible_content import BibleService

DEMO_VERSES = {
    "nvi": [
        ("genesis", 1, 1, "No princípio Deus criou os céus e a terra."),
        ("genesis", 1, 2, "Era a terra sem forma e vazia; trevas cobriam a face do abismo."),
        ("genesis", 1, 3, 'Disse Deus: "Haja luz", e houve luz.'),
        ("genesis", 2, 1, "Assim foram concluídos os céus e a terra, e tudo o que neles há."),
        ("exodus", 1, 1, "São estes os nomes dos filhos de Israel que entraram no Egito com Jacó."),
        ("john", 3, 16, "Porque Deus tanto amou o mundo que deu o seu Filho Unigênito."),
        ("john", 3, 17, "Pois Deus enviou o seu Filho ao mundo, não para condenar o mundo."),
    ],
    "ara": [
        ("genesis", 1, 1, "No princípio, criou Deus os céus e a terra."),
        ("genesis", 1, 2, "A terra, porém, estava sem forma e vazia."),
        ("john", 3, 16, "Porque Deus amou ao mundo de tal maneira que deu o seu Filho unigênito."),
    ],
}


async def main():
    await init_pool()
    repo = BibleRepo()
    service = BibleService(repo)

    try:
        result = await service.sync_versions()
        print(f"Versions: {result['message']}")

        for version_id, verses in DEMO_VERSES.items():
            await repo.insert_verses(version_id, verses)
            synced = await service.sync_books(version_id)
            print(f"{version_id}: {len(verses)} verses, {synced['synced_books']} new books")
    finally:
        await close_pool()

    print()
    print("Anon key (leitor login):")
    print(create_jwt("anon"))


if __name__ == "__main__":
    asyncio.run(main())
