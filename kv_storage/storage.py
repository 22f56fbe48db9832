"""Redis-backed storage adapter.

Each public coroutine forwards exactly one command to the store: the key gets the
configured prefix, non-string values are JSON-encoded, and store errors are
logged and raised as :class:`~kv_storage.errors.StoreError`.
"""

from __future__ import annotations

from inspect import isawaitable
from typing import TYPE_CHECKING, Any, NoReturn, TypedDict

import redis.asyncio as redis_async
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from .errors import InvalidArgument, NotConnected, StoreError
from .logger import get_logger
from .serialization import normalize_result, parse_hash, prepare_hash, prepare_string


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from .config import Settings, StorageSettings


__all__ = ["Storage", "StorageOptions"]

logger = get_logger(__name__)

BRPOP_DEFAULT_TIMEOUT = 0
BLPOP_DEFAULT_TIMEOUT = 1


def _describe(error: Exception) -> str:
    return f"{type(error).__name__}: {error}"


class StorageOptions(TypedDict, total=False):
    """Per-call options accepted as keyword arguments."""

    key_prefix: str
    timeout: float


class Storage:
    """Data source over one Redis connection."""

    prepare_string = staticmethod(prepare_string)
    prepare_hash = staticmethod(prepare_hash)
    parse_hash = staticmethod(parse_hash)

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        key_prefix: str = "",
        *,
        client: Any | None = None,
    ) -> None:
        """Create the adapter and its connection handle.

        Parameters
        ----------
        host, port
            Address of the store, used when ``client`` is not provided.
        key_prefix
            Default prefix put in front of every key.
        client
            Optional injected client exposing the ``redis.asyncio`` command API.
        """
        super().__init__()
        self.key_prefix = key_prefix
        self._error_handler: Callable[[Exception], None] | None = None
        if client is None:
            client = redis_async.Redis(host=host, port=port, decode_responses=True)
        self._client: Any | None = client
        self.set_up(client)

    @classmethod
    def from_settings(cls, settings: Settings | StorageSettings) -> Storage:
        """Create an adapter from application or storage settings."""
        storage = getattr(settings, "storage", settings)
        return cls(host=storage.host, port=storage.port, key_prefix=storage.key_prefix)

    @property
    def connected(self) -> bool:
        return self._client is not None

    async def close(self) -> None:
        """Close the connection and drop the handle.

        Commands already in flight are neither awaited nor cancelled.
        """
        client, self._client = self._client, None
        if client is None:
            return

        close_method = getattr(client, "aclose", None)
        if close_method is None:
            close_method = getattr(client, "close", None)
        if close_method is None:
            return

        maybe_awaitable = close_method()
        if isawaitable(maybe_awaitable):
            await maybe_awaitable

    destruct = close

    def hash_key(self, key: Any, prefix: str | None = "") -> str:
        """Return ``key`` with the per-call prefix, else the instance prefix."""
        return f"{prefix or self.key_prefix or ''}{key}"

    def set_up(self, client: Any | None = None, handler: Callable[[Exception], None] | None = None) -> None:
        """Register the observer for connection-level errors of ``client``.

        ``redis.asyncio`` raises connection and timeout errors from the awaited
        command, so the observer is called from there. Defaults to :meth:`on_error`.
        """
        if client is not None and client is not self._client:
            msg = "can only observe the adapter's own connection handle"
            raise ValueError(msg)
        self._error_handler = handler or self.on_error

    def on_error(self, error: Exception) -> NoReturn:
        """Log a connection-level error and raise it again."""
        logger.warning("[ redis_data_source ][ on error ]", error=_describe(error))
        raise error

    def _key(self, key: Any, key_prefix: str | None) -> str:
        if key is None:
            raise InvalidArgument
        if self._client is None:
            raise NotConnected
        return self.hash_key(key, key_prefix)

    async def _run(self, command: str, call: Callable[[Any], Awaitable[Any]]) -> Any:
        client = self._client
        if client is None:
            raise NotConnected

        try:
            result = await call(client)
        except (RedisConnectionError, RedisTimeoutError) as error:
            if self._error_handler is not None:
                self._error_handler(error)
            raise
        except RedisError as error:
            result = None
            logger.debug(f"[ REDIS ][ {command} ][ ERROR ] {_describe(error)}")
            logger.debug(f"[ REDIS ][ {command} ][ RESULT ] {result!r}")
            logger.debug(f"[ REDIS ][ {command} ][ TYPEOF RESULT ] {type(result).__name__}")
            raise StoreError(error, command) from error

        return normalize_result(result)

    async def exists(self, key: Any, *, key_prefix: str | None = None) -> bool:
        """Return whether the key is present."""
        hash_key = self._key(key, key_prefix)
        return bool(await self._run("EXISTS", lambda client: client.exists(hash_key)))

    async def rpush(self, key: Any, value: Any, *, key_prefix: str | None = None) -> int:
        """Append ``value`` to the list at ``key``, creating the list if needed.

        Returns the length of the list after the push.
        """
        hash_key = self._key(key, key_prefix)
        data = prepare_string(value)
        return await self._run("RPUSH", lambda client: client.rpush(hash_key, data))

    async def lpush(self, key: Any, value: Any, *, key_prefix: str | None = None) -> int:
        """Prepend ``value`` to the list at ``key``, creating the list if needed.

        Returns the length of the list after the push.
        """
        logger.debug(f"[ REDIS ][ lpush ] {{ {key}: {value!r} }}")
        hash_key = self._key(key, key_prefix)
        data = prepare_string(value)
        return await self._run("LPUSH", lambda client: client.lpush(hash_key, data))

    async def brpop(
        self,
        key: Any,
        *,
        key_prefix: str | None = None,
        timeout: float | None = None,
    ) -> list[str] | None:
        """Pop from the tail of the list, blocking until an element arrives.

        A timeout of 0 (the default) blocks indefinitely. Returns ``[key, value]``,
        or None when the timeout elapsed.
        """
        hash_key = self._key(key, key_prefix)
        wait = timeout or BRPOP_DEFAULT_TIMEOUT
        return await self._run("BRPOP", lambda client: client.brpop(hash_key, timeout=wait))

    async def blpop(
        self,
        key: Any,
        *,
        key_prefix: str | None = None,
        timeout: float | None = None,
    ) -> list[str] | None:
        """Pop from the head of the list, blocking for up to ``timeout`` seconds.

        The timeout defaults to one second. Returns ``[key, value]``, or None when
        the timeout elapsed.
        """
        hash_key = self._key(key, key_prefix)
        wait = timeout or BLPOP_DEFAULT_TIMEOUT
        return await self._run("BLPOP", lambda client: client.blpop(hash_key, timeout=wait))

    async def lpop(self, key: Any, *, key_prefix: str | None = None) -> str | None:
        hash_key = self._key(key, key_prefix)
        return await self._run("LPOP", lambda client: client.lpop(hash_key))

    async def llen(self, key: Any, *, key_prefix: str | None = None) -> int:
        hash_key = self._key(key, key_prefix)
        return await self._run("LLEN", lambda client: client.llen(hash_key))

    async def lrange(self, key: Any, start: int, stop: int, *, key_prefix: str | None = None) -> list[str]:
        """Return list elements from ``start`` to ``stop``, both inclusive."""
        hash_key = self._key(key, key_prefix)
        return await self._run("LRANGE", lambda client: client.lrange(hash_key, start, stop))

    async def save(self, key: Any, value: Any, *, key_prefix: str | None = None) -> Any:
        """Set ``key`` to ``value``."""
        hash_key = self._key(key, key_prefix)
        data = prepare_string(value)
        return await self._run("SET", lambda client: client.set(hash_key, data))

    async def savenx(self, key: Any, value: Any, *, key_prefix: str | None = None) -> bool:
        """Set ``key`` to ``value`` only when the key does not exist yet."""
        hash_key = self._key(key, key_prefix)
        data = prepare_string(value)
        return bool(await self._run("SETNX", lambda client: client.setnx(hash_key, data)))

    async def saveex(self, key: Any, timeout: int, value: Any, *, key_prefix: str | None = None) -> Any:
        """Set ``key`` to ``value`` with a time to live of ``timeout`` seconds."""
        hash_key = self._key(key, key_prefix)
        data = prepare_string(value)
        return await self._run("SETEX", lambda client: client.setex(hash_key, timeout, data))

    async def read(self, key: Any, *, key_prefix: str | None = None) -> str | None:
        """Return the value stored at ``key``, or None when it does not exist."""
        hash_key = self._key(key, key_prefix)
        return await self._run("GET", lambda client: client.get(hash_key))

    async def remove(self, key: Any, *, key_prefix: str | None = None) -> int:
        """Delete ``key`` and return the number of removed keys."""
        hash_key = self._key(key, key_prefix)
        return await self._run("DEL", lambda client: client.delete(hash_key))

    async def expire(self, key: Any, timeout: int, *, key_prefix: str | None = None) -> bool:
        """Set a time to live of ``timeout`` seconds on an existing key."""
        hash_key = self._key(key, key_prefix)
        return bool(await self._run("EXPIRE", lambda client: client.expire(hash_key, timeout)))

    async def hsave(self, key: Any, data: Any, *, key_prefix: str | None = None) -> int:
        """Store a mapping (or a list) as hash fields, see :func:`prepare_hash`."""
        hash_key = self._key(key, key_prefix)
        fields = prepare_hash(data)
        if not isinstance(fields, dict):
            msg = "hash data must be a mapping or a list"
            raise InvalidArgument(msg)
        return await self._run("HSET", lambda client: client.hset(hash_key, mapping=fields))

    async def hread(self, key: Any, *, key_prefix: str | None = None) -> dict[str, Any]:
        """Return all hash fields decoded with :func:`parse_hash`."""
        hash_key = self._key(key, key_prefix)
        return parse_hash(await self._run("HGETALL", lambda client: client.hgetall(hash_key)))
