import logging
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, MetaData, String, Table, Text, delete, select, text
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from cargo_check_i18n.errors import CacheError
from cargo_check_i18n.models import CacheEntry

logger = logging.getLogger(__name__)

_metadata = MetaData()

translations_table = Table(
    "translations",
    _metadata,
    Column("fingerprint", String(64), primary_key=True),
    Column("translated", Text, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
)


async def _ensure_translations_table(engine: AsyncEngine) -> None:
    ddl = (
        "CREATE TABLE IF NOT EXISTS translations ("
        " fingerprint VARCHAR(64) NOT NULL PRIMARY KEY,"
        " translated TEXT NOT NULL,"
        " created_at DATETIME NOT NULL"
        ")"
    )
    async with engine.begin() as conn:
        await conn.execute(text(ddl))


class SqliteCacheStore:
    """Persistent translation cache backed by a SQLite file.

    Failures on ``lookup`` and ``store`` are logged and absorbed so a broken cache
    only costs the speed-up.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._schema_ready = False

    async def lookup(self, fingerprint: str) -> str | None:
        entry = await self.lookup_entry(fingerprint)
        return entry.translated if entry else None

    async def lookup_entry(self, fingerprint: str) -> CacheEntry | None:
        stmt = select(translations_table).where(translations_table.c.fingerprint == fingerprint)
        try:
            await self._ensure_schema()
            async with self._engine.connect() as conn:
                row = (await conn.execute(stmt)).first()
        except (SQLAlchemyError, OSError) as exc:
            logger.warning("Cache lookup failed, treating as a miss: %s", exc)
            return None
        if row is None:
            return None
        return CacheEntry(fingerprint=row.fingerprint, translated=row.translated, created_at=row.created_at)

    async def store(self, fingerprint: str, translated: str) -> None:
        stmt = (
            sqlite_insert(translations_table)
            .values(fingerprint=fingerprint, translated=translated, created_at=datetime.now(timezone.utc))
            .on_conflict_do_nothing(index_elements=["fingerprint"])
        )
        try:
            await self._ensure_schema()
            async with self._engine.begin() as conn:
                await conn.execute(stmt)
        except (SQLAlchemyError, OSError) as exc:
            logger.warning("Cache store failed, translation not persisted: %s", exc)

    async def clear(self) -> int:
        try:
            await self._ensure_schema()
            async with self._engine.begin() as conn:
                result = await conn.execute(delete(translations_table))
        except (SQLAlchemyError, OSError) as exc:
            raise CacheError(str(exc)) from exc
        return result.rowcount

    async def dispose(self) -> None:
        await self._engine.dispose()

    async def _ensure_schema(self) -> None:
        if not self._schema_ready:
            await _ensure_translations_table(self._engine)
            self._schema_ready = True
