"""Minimal example for Storage against a Redis-compatible server."""

import asyncio

from kv_storage.config import load_settings
from kv_storage.logger import configure
from kv_storage.storage import Storage


async def run() -> None:
    """Run a basic save/read, list, hash and expiry flow."""
    settings = load_settings("examples/settings.yaml")
    configure(settings.service.name, settings.service.log_level)
    storage = Storage.from_settings(settings)
    try:
        await storage.save("user", {"alice": {"age": 30}})
        print("user:", await storage.read("user"))

        await storage.rpush("jobs", {"id": 1})
        await storage.rpush("jobs", {"id": 2})
        print("jobs:", await storage.lrange("jobs", 0, -1))
        print("next job:", await storage.blpop("jobs", timeout=1))

        await storage.hsave("profile", {"name": "alice", "tags": ["admin"]})
        print("profile:", await storage.hread("profile"))

        await storage.expire("user", 1)
        await asyncio.sleep(1.5)
        print("user exists after expiry:", await storage.exists("user"))
    finally:
        await storage.close()


if __name__ == "__main__":
    asyncio.run(run())
