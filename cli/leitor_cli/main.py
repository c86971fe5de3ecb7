"""Main entry point for the Leitor CLI."""

from __future__ import annotations

import asyncio
import sys

from leitor_cli import __version__
from leitor_cli.auth import login, logout
from leitor_cli.client import HttpGateway
from leitor_cli.config import Config
from leitor_cli.repl import Repl


def print_help():
    """Print help message."""
    print(f"""
Leitor CLI v{__version__}

Usage:
  leitor [options] [command]

Commands:
  login             Save an API key for the current server
  logout            Forget the saved key

Options:
  --api-url URL     Override API endpoint (default: http://localhost:8000)
  --bible ID        Start with this version (default: last used, or nvi)
  --all             With logout: forget keys for every server
  -h, --help        Show this help
  -v, --version     Show version

Environment:
  LEITOR_API_URL    Override API endpoint (same as --api-url)
  LEITOR_API_KEY    Use this key instead of the saved one

Examples:
  leitor login --api-url http://localhost:8000
  leitor --bible ara
  leitor logout --all

Type /help inside the reader for its commands.
""")


def parse_args(args: list[str]) -> dict:
    """
    Parse command line arguments.

    Returns dict with:
        command: str | None (login, logout, None for the reader)
        api_url: str | None
        version_id: str | None
        logout_all: bool
        show_help: bool
        show_version: bool
    """
    result = {
        "command": None,
        "api_url": None,
        "version_id": None,
        "logout_all": False,
        "show_help": False,
        "show_version": False,
    }

    i = 0
    while i < len(args):
        arg = args[i]

        if arg in ("login", "logout"):
            result["command"] = arg
        elif arg in ("--api-url", "--bible"):
            if i + 1 >= len(args):
                print(f"Error: {arg} requires a value")
                sys.exit(1)
            result["api_url" if arg == "--api-url" else "version_id"] = args[i + 1]
            i += 1
        elif arg == "--all":
            result["logout_all"] = True
        elif arg in ("--help", "-h"):
            result["show_help"] = True
        elif arg in ("--version", "-v"):
            result["show_version"] = True
        elif arg.startswith("-"):
            print(f"Unknown option: {arg}")
            print("Run 'leitor --help' for usage.")
            sys.exit(1)
        else:
            print(f"Unknown command: {arg}")
            print("Run 'leitor --help' for usage.")
            sys.exit(1)

        i += 1

    return result


async def run_reader(config: Config, version_id: str | None = None):
    async with HttpGateway(config.api_url, config.api_key) as gateway:
        await Repl(config, gateway).start(version_id)


def main():
    """Main entry point."""
    args = parse_args(sys.argv[1:])

    if args["show_help"]:
        print_help()
        return

    if args["show_version"]:
        print(f"leitor-cli {__version__}")
        return

    config = Config(api_url_override=args["api_url"])

    if args["command"] == "login":
        sys.exit(0 if login(config) else 1)

    elif args["command"] == "logout":
        sys.exit(0 if logout(config, logout_all=args["logout_all"]) else 1)

    else:
        if not config.is_authenticated:
            print(f"No API key for {config.api_url}")
            print("Run 'leitor login' first.")
            sys.exit(1)

        try:
            asyncio.run(run_reader(config, args["version_id"]))
        except KeyboardInterrupt:
            print()


if __name__ == "__main__":
    main()
