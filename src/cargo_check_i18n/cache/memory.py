from datetime import datetime, timezone

from cargo_check_i18n.models import CacheEntry


class InMemoryCacheStore:
    """Process-local cache used by tests and ``--no-cache`` runs."""

    def __init__(self) -> None:
        self.entries: dict[str, CacheEntry] = {}

    async def lookup(self, fingerprint: str) -> str | None:
        entry = self.entries.get(fingerprint)
        return entry.translated if entry else None

    async def lookup_entry(self, fingerprint: str) -> CacheEntry | None:
        return self.entries.get(fingerprint)

    async def store(self, fingerprint: str, translated: str) -> None:
        if fingerprint in self.entries:
            return
        self.entries[fingerprint] = CacheEntry(
            fingerprint=fingerprint,
            translated=translated,
            created_at=datetime.now(timezone.utc),
        )

    async def clear(self) -> int:
        count = len(self.entries)
        self.entries.clear()
        return count

    async def dispose(self) -> None:
        pass
