from typing import Protocol


class TranslationCache(Protocol):
    async def lookup(self, fingerprint: str) -> str | None: ...

    async def store(self, fingerprint: str, translated: str) -> None: ...

    async def clear(self) -> int: ...

    async def dispose(self) -> None: ...
