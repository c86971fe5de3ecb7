"""Fixtures for CLI tests. Config lives in a temp dir; no network."""

from __future__ import annotations

import pytest

from leitor_cli.config import Config
from reader.kernel.gateway import MemoryGateway

LIBRARY = {
    "nvi": {
        "name": "Nova Versão Internacional",
        "books": [
            {
                "id": "genesis",
                "nome": "Gênesis",
                "abreviacao": "Gn",
                "testamento": "AT",
                "chapters": {
                    1: '<span class="v">1</span>No princípio criou Deus os céus e a terra.',
                    2: '<span class="v">1</span>Assim foram concluídos os céus e a terra.',
                },
            },
            {
                "id": "john",
                "nome": "João",
                "abreviacao": "Jo",
                "testamento": "NT",
                "chapters": {1: "<p>No princípio era o Verbo</p>", 3: "<p>Porque Deus tanto amou o mundo</p>"},
            },
        ],
    },
    "ara": {
        "name": "Almeida Revista e Atualizada",
        "books": [
            {
                "id": "john",
                "nome": "João",
                "abreviacao": "Jo",
                "testamento": "NT",
                "chapters": {3: "<p>ARA João 3</p>"},
            },
        ],
    },
}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("LEITOR_API_URL", raising=False)
    monkeypatch.delenv("LEITOR_API_KEY", raising=False)


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(config_dir=tmp_path / ".leitor")


@pytest.fixture
def gateway() -> MemoryGateway:
    return MemoryGateway(LIBRARY)


@pytest.fixture
def scripted_input():
    """Build a read_line that replays `lines`, then ends with EOF."""

    def build(*lines: str):
        pending = list(lines)

        async def read_line(prompt: str) -> str:
            if not pending:
                raise EOFError
            return pending.pop(0)

        return read_line

    return build
