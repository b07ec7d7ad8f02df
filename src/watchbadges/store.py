"""Shared document store — hierarchical JSON documents kept in Redis.

Paths are ``/``-separated. The first two segments name a document (for
example ``badgeCounters/<user_id>``) which is stored as one JSON value under
a single Redis key; deeper segments address nodes inside that document.
Transactions use optimistic locking (WATCH/MULTI/EXEC) on the document key
and are retried on conflict, so callers never do a local read-then-write.
"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Callable
from typing import Any, Protocol

import redis.asyncio as aioredis
from redis.exceptions import RedisError, WatchError

logger = logging.getLogger(__name__)

UpdateFn = Callable[[Any], Any]


class StoreError(Exception):
    """A store read or write failed."""


class StoreTransactionError(StoreError):
    """A transaction kept conflicting with concurrent writers."""


class KeyValueStore(Protocol):
    """The store operations the badge engine depends on."""

    async def get(self, path: str) -> Any: ...

    async def set(self, path: str, value: Any) -> None: ...

    async def transaction(self, path: str, update: UpdateFn) -> Any: ...

    async def delete(self, path: str) -> None: ...


def split_path(path: str) -> tuple[str, list[str]]:
    """Split ``a/b/c/d`` into the document path ``a/b`` and node path ``[c, d]``."""
    parts = [p for p in path.strip("/").split("/") if p]
    if len(parts) < 2:
        msg = f"Path must address at least a document: {path!r}"
        raise ValueError(msg)
    return "/".join(parts[:2]), parts[2:]


def validate_user_id(user_id: str) -> str:
    """A user id must be one non-empty path segment."""
    if not isinstance(user_id, str) or not user_id or "/" in user_id:
        msg = f"Invalid user id: {user_id!r}"
        raise ValueError(msg)
    return user_id


def user_path(root: str, user_id: str, *parts: str) -> str:
    """Path of a per-user document, ``<root>/<user_id>/...``."""
    validate_user_id(user_id)
    return "/".join((root, user_id, *parts))


def get_node(doc: Any, parts: list[str]) -> Any:
    """Walk ``parts`` into ``doc``. Missing or non-mapping steps yield None."""
    node = doc
    for part in parts:
        if not isinstance(node, dict):
            return None
        node = node.get(part)
    return node


def prune(node: Any) -> Any:
    """Drop None values and empty mappings, recursively. Empty roots become None."""
    if not isinstance(node, dict):
        return node
    cleaned = {}
    for key, value in node.items():
        value = prune(value)
        if value is not None:
            cleaned[key] = value
    return cleaned or None


def set_node(doc: Any, parts: list[str], value: Any) -> Any:
    """Return ``doc`` with the node at ``parts`` replaced by ``value`` (None removes it)."""
    if not parts:
        return prune(value)
    root = doc if isinstance(doc, dict) else {}
    node = root
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value
    return prune(root)


class RedisDocumentStore:
    """KeyValueStore backed by one Redis string key per JSON document."""

    def __init__(
        self,
        redis: aioredis.Redis,
        key_prefix: str = "wb:",
        max_retries: int = 25,
    ) -> None:
        self.redis = redis
        self.key_prefix = key_prefix
        self.max_retries = max_retries

    def key_for(self, doc_path: str) -> str:
        return self.key_prefix + doc_path.replace("/", ":")

    @staticmethod
    def _decode(raw: Any, path: str) -> Any:
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as exc:
            msg = f"Undecodable document at {path}"
            raise StoreError(msg) from exc

    @staticmethod
    def _encode(doc: Any) -> str:
        return json.dumps(doc, separators=(",", ":"))

    async def get(self, path: str) -> Any:
        """Point read. Returns None when nothing is stored at ``path``."""
        doc_path, parts = split_path(path)
        try:
            raw = await self.redis.get(self.key_for(doc_path))
        except RedisError as exc:
            msg = f"Read failed for {path}"
            raise StoreError(msg) from exc
        return get_node(self._decode(raw, path), parts)

    async def set(self, path: str, value: Any) -> None:
        """Point write. Writing None removes the node."""
        doc_path, parts = split_path(path)
        if parts:
            await self.transaction(path, lambda _current: value)
            return

        key = self.key_for(doc_path)
        doc = prune(value)
        try:
            if doc is None:
                await self.redis.delete(key)
            else:
                await self.redis.set(key, self._encode(doc))
        except RedisError as exc:
            msg = f"Write failed for {path}"
            raise StoreError(msg) from exc

    async def delete(self, path: str) -> None:
        await self.set(path, None)

    async def transaction(self, path: str, update: UpdateFn) -> Any:
        """Atomically replace the node at ``path`` with ``update(current)``.

        ``update`` receives a private copy of the current value (None if
        absent) and may be called several times when other writers touch the
        same document concurrently. Returns the value stored after commit.
        """
        doc_path, parts = split_path(path)
        key = self.key_for(doc_path)

        for attempt in range(1, self.max_retries + 1):
            try:
                async with self.redis.pipeline(transaction=True) as pipe:
                    await pipe.watch(key)
                    doc = self._decode(await pipe.get(key), path)
                    current = get_node(doc, parts)
                    new_value = update(copy.deepcopy(current))
                    if new_value == current:
                        return current

                    new_doc = set_node(doc, parts, new_value)
                    pipe.multi()
                    if new_doc is None:
                        pipe.delete(key)
                    else:
                        pipe.set(key, self._encode(new_doc))
                    await pipe.execute()
                    return get_node(new_doc, parts)
            except WatchError:
                logger.debug("Transaction conflict on %s (attempt %d)", path, attempt)
                continue
            except RedisError as exc:
                msg = f"Transaction failed for {path}"
                raise StoreError(msg) from exc

        msg = f"Transaction on {path} gave up after {self.max_retries} conflicts"
        raise StoreTransactionError(msg)

    async def ping(self) -> bool:
        return bool(await self.redis.ping())
