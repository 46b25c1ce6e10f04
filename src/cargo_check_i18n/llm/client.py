from __future__ import annotations

import asyncio
import json
import logging

import httpx

from cargo_check_i18n.cache.helpers import compute_fingerprint
from cargo_check_i18n.config import Settings
from cargo_check_i18n.core.ports.cache import TranslationCache
from cargo_check_i18n.core.template import extract_response_value, render_request
from cargo_check_i18n.errors import ExtractionError, TemplateError, TranslationError
from cargo_check_i18n.llm.limiter import RateLimiter

logger = logging.getLogger(__name__)


def _json_escape(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)[1:-1]


def _normalize(original: str, translated: str) -> str:
    translated = translated.strip()
    if "\n" not in original:
        translated = " ".join(line.strip() for line in translated.splitlines() if line.strip())
    return translated


class TranslationClient:
    """Translate text through the configured chat-completion style HTTP API.

    Results are looked up in and written to *cache*; network calls are bounded by
    *limiter*. Identical requests that are in flight at the same time share a single
    HTTP call.
    """

    def __init__(
        self,
        settings: Settings,
        cache: TranslationCache,
        limiter: RateLimiter | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._cache = cache
        self._limiter = limiter or RateLimiter(settings.rate_limit)
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=settings.timeout)
        self._pending: dict[str, asyncio.Task[str]] = {}
        self._waiters: dict[asyncio.Task[str], int] = {}

    async def translate(self, text: str, target_language: str) -> str:
        fingerprint = compute_fingerprint(text, target_language, self._settings.model)
        cached = await self._cache.lookup(fingerprint)
        if cached is not None:
            logger.debug("Cache hit for %s", fingerprint[:12])
            return cached

        task = self._pending.get(fingerprint)
        if task is None:
            task = asyncio.create_task(self._fetch(fingerprint, text, target_language))
            self._pending[fingerprint] = task
            task.add_done_callback(lambda done: self._forget(fingerprint, done))

        # the shared request is cancelled only when its last waiter is
        self._waiters[task] = self._waiters.get(task, 0) + 1
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if self._waiters[task] == 1:
                task.cancel()
            raise
        finally:
            self._waiters[task] -= 1
            if not self._waiters[task]:
                del self._waiters[task]

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    def _forget(self, fingerprint: str, task: asyncio.Task[str]) -> None:
        if self._pending.get(fingerprint) is task:
            del self._pending[fingerprint]

    async def _fetch(self, fingerprint: str, text: str, target_language: str) -> str:
        async with self._limiter:
            translated = await self._request(text, target_language)
        await self._cache.store(fingerprint, translated)
        return translated

    def _build_body(self, text: str, target_language: str) -> str:
        settings = self._settings
        prompt = settings.prompt.replace("{language}", target_language).replace("{text}", text)
        try:
            body = render_request(
                settings.request_body_template,
                model=_json_escape(settings.model),
                prompt=_json_escape(prompt),
                temperature=settings.temperature,
            )
            json.loads(body)
        except TemplateError as exc:
            raise TranslationError(text, str(exc)) from exc
        except json.JSONDecodeError as exc:
            raise TranslationError(text, f"rendered request body is not valid JSON: {exc.msg}") from exc
        return body

    async def _request(self, text: str, target_language: str) -> str:
        settings = self._settings
        body = self._build_body(text, target_language)

        headers = {"Content-Type": "application/json"}
        if settings.api_key:
            headers["Authorization"] = f"Bearer {settings.api_key}"

        logger.debug("POST %s (%d bytes)", settings.api_url, len(body))
        try:
            response = await self._http.post(
                settings.api_url,
                content=body.encode("utf-8"),
                headers=headers,
                timeout=settings.timeout,
            )
        except httpx.TimeoutException as exc:
            raise TranslationError(text, f"request timed out after {settings.timeout}s") from exc
        except httpx.HTTPError as exc:
            raise TranslationError(text, f"request failed: {exc}") from exc

        if not response.is_success:
            raise TranslationError(text, f"API request failed: HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise TranslationError(text, "response body is not valid JSON") from exc

        try:
            translated = extract_response_value(payload, settings.response_path)
        except ExtractionError as exc:
            raise TranslationError(text, str(exc)) from exc

        translated = _normalize(text, translated)
        if not translated:
            raise TranslationError(text, "API returned an empty translation")
        return translated
