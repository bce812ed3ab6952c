"""SQLAlchemy-backed document store with optional Redis change fan-out.

Writes run in one database transaction per commit. Optimistic concurrency is
enforced twice: the stored version is compared before writing, and updates
are issued as ``UPDATE ... WHERE version = :read_version`` so a writer that
slipped in between still turns into a LostUpdate.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Sequence
from datetime import datetime, timezone

import redis.asyncio as aioredis
import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tycoon.db.models import StoredDocument
from tycoon.errors import LostUpdate
from tycoon.store.base import MUST_NOT_EXIST, Document, DocumentStore, Write, is_direct_child

logger = structlog.get_logger()

CHANNEL_PREFIX = "store:"


class SqlDocumentStore(DocumentStore):
    """Documents in the ``documents`` table; changes published on ``store:{key}``."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        redis_client: aioredis.Redis | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._redis = redis_client

    async def get(self, key: str) -> Document | None:
        async with self._session_factory() as session:
            row = await session.get(StoredDocument, key)
            if row is None:
                return None
            return Document(row.key, row.value, row.version)

    async def commit(self, writes: Sequence[Write]) -> dict[str, int]:
        versions: dict[str, int] = {}
        changed: list[Document] = []
        now = datetime.now(timezone.utc)
        try:
            async with self._session_factory() as session, session.begin():
                for write in writes:
                    result = await session.execute(
                        select(StoredDocument.version).where(StoredDocument.key == write.key)
                    )
                    current = result.scalar_one_or_none()
                    actual = current if current is not None else MUST_NOT_EXIST
                    if write.expected_version is not None and write.expected_version != actual:
                        raise LostUpdate(write.key, write.expected_version, actual)

                    new_version = actual + 1
                    if write.value is None:
                        if current is not None:
                            await session.execute(
                                delete(StoredDocument).where(
                                    StoredDocument.key == write.key,
                                    StoredDocument.version == current,
                                )
                            )
                    elif current is None:
                        session.add(StoredDocument(
                            key=write.key, value=write.value, version=new_version, updated_at=now,
                        ))
                        await session.flush()
                    else:
                        res = await session.execute(
                            update(StoredDocument)
                            .where(StoredDocument.key == write.key, StoredDocument.version == current)
                            .values(value=write.value, version=new_version, updated_at=now)
                        )
                        if res.rowcount != 1:
                            raise LostUpdate(write.key, current, None)

                    versions[write.key] = new_version
                    changed.append(Document(write.key, write.value, new_version))
        except IntegrityError as exc:
            # Two writers created the same key concurrently
            key = writes[0].key if len(writes) == 1 else "<batch>"
            raise LostUpdate(key, MUST_NOT_EXIST, None) from exc

        await self._publish(changed)
        return versions

    async def children(self, prefix: str) -> list[Document]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(StoredDocument)
                .where(StoredDocument.key.startswith(prefix, autoescape=True))
                .order_by(StoredDocument.key.asc())
            )
            return [
                Document(row.key, row.value, row.version)
                for row in result.scalars().all()
                if is_direct_child(prefix, row.key)
            ]

    async def _publish(self, changed: list[Document]) -> None:
        if self._redis is None:
            return
        for doc in changed:
            try:
                await self._redis.publish(
                    f"{CHANNEL_PREFIX}{doc.key}",
                    json.dumps({"key": doc.key, "value": doc.value, "version": doc.version}),
                )
            except Exception:
                logger.warning("store_publish_failed", key=doc.key, exc_info=True)

    async def subscribe(self, prefix: str) -> AsyncIterator[Document]:
        if self._redis is None:
            msg = "Subscriptions need a Redis client"
            raise RuntimeError(msg)
        pubsub = self._redis.pubsub()
        await pubsub.psubscribe(f"{CHANNEL_PREFIX}{prefix}*")
        try:
            while True:
                message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
                if message is None:
                    continue
                data = message.get("data", "")
                if isinstance(data, bytes):
                    data = data.decode()
                try:
                    payload = json.loads(data)
                except (json.JSONDecodeError, UnicodeDecodeError):
                    logger.warning("store_invalid_message", channel=message.get("channel"))
                    continue
                yield Document(payload["key"], payload.get("value"), int(payload["version"]))
        finally:
            await pubsub.punsubscribe()
            await pubsub.aclose()
