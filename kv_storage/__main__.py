"""Interface for ``python -m kv_storage``."""

from __future__ import annotations

import asyncio
from argparse import ArgumentParser
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Sequence

from ._version import version
from .config import Settings, load_settings
from .logger import configure, get_logger
from .storage import Storage


__all__ = ["main"]

logger = get_logger(__name__)


async def _ping(settings: Settings, key: str) -> bool:
    storage = Storage.from_settings(settings)
    try:
        return await storage.exists(key)
    finally:
        await storage.close()


def main(args: Sequence[str] | None = None) -> None:
    """Argument parser for the CLI."""
    parser = ArgumentParser(prog="kv_storage")
    _ = parser.add_argument("-v", "--version", action="version", version=version)
    _ = parser.add_argument("-c", "--config", help="YAML settings file; environment variables are used otherwise")
    _ = parser.add_argument("--show-settings", action="store_true", help="print the resolved settings as JSON")
    _ = parser.add_argument("--ping", metavar="KEY", help="connect and report whether KEY exists")
    options = parser.parse_args(args)

    settings = load_settings(options.config)
    configure(settings.service.name, settings.service.log_level)

    if options.show_settings:
        print(settings.model_dump_json(indent=2))

    if options.ping is not None:
        found = asyncio.run(_ping(settings, options.ping))
        logger.info("ping", key=options.ping, exists=found)
        print("true" if found else "false")


if __name__ == "__main__":
    main()
