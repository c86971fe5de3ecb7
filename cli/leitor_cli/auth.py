"""Key management for the Leitor CLI."""

from __future__ import annotations

import asyncio
import getpass

import httpx

from leitor_cli.client import HttpGateway
from leitor_cli.config import Config
from reader.kernel.gateway import GatewayError


async def check_key(api_url: str, api_key: str, transport: httpx.AsyncBaseTransport | None = None) -> dict:
    """Call diagnostics with `api_key`. Raises GatewayError if the server refuses it."""
    async with HttpGateway(api_url, api_key, transport=transport) as gateway:
        return await gateway.diagnostics()


def login(config: Config, api_key: str | None = None, transport: httpx.AsyncBaseTransport | None = None) -> bool:
    """
    Store an API key for the current environment after checking it.

    Prompts for the key when none is given. Returns True on success.
    """
    key = (api_key or getpass.getpass(f"API key for {config.api_url}: ")).strip()
    if not key:
        print("No key given.")
        return False

    try:
        result = asyncio.run(check_key(config.api_url, key, transport))
    except GatewayError as e:
        print(f"Login failed: {e.message}")
        return False

    config.api_key = key
    # The most recent login becomes the default environment.
    config.default_url = config.api_url
    print(f"Connected to {config.api_url}: {result.get('message', 'ok')}")
    print(f"Key saved to {config.config_file}")
    return True


def logout(config: Config, logout_all: bool = False) -> bool:
    """
    Forget stored keys.

    Args:
        config: Config instance
        logout_all: If True, clear all environments. If False, only current.
    """
    if logout_all:
        envs = config.list_environments()
        if not envs:
            print("No saved keys.")
            return True
        for env in envs:
            print(f"  Forgetting key for {env['url']}")
        config.clear_all()
        print("Logged out of all environments.")
        return True

    if not config.is_authenticated:
        print(f"Not logged in to {config.api_url}")
        return False

    config.clear_environment()
    print(f"Logged out of {config.api_url}")
    return True
