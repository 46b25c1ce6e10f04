from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterable, AsyncIterator

from pydantic import ValidationError

from cargo_check_i18n.errors import DecodeWarning
from cargo_check_i18n.models import Diagnostic

logger = logging.getLogger(__name__)

_COMPILER_MESSAGE = "compiler-message"


class DiagnosticStreamReader:
    """Decode a stream of JSON lines from ``cargo check --message-format=json``.

    Iterating the reader yields one ``Diagnostic`` per well-formed record. Lines that
    cannot be decoded are skipped and recorded in ``warnings``. The reader is
    single-use: it consumes the underlying stream.
    """

    def __init__(self, lines: AsyncIterable[bytes | str]) -> None:
        self._lines = lines
        self.warnings: list[DecodeWarning] = []

    def __aiter__(self) -> AsyncIterator[Diagnostic]:
        return self._read()

    async def _read(self) -> AsyncIterator[Diagnostic]:
        line_number = 0
        lines = aiter(self._lines)
        while True:
            try:
                raw = await anext(lines)
            except StopAsyncIteration:
                break
            except (ValueError, asyncio.LimitOverrunError) as exc:
                # StreamReader drops an over-long line before raising, so reading can go on
                line_number += 1
                self._warn(line_number, f"line too long: {exc}")
                continue
            line_number += 1
            text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
            text = text.strip()
            if not text:
                continue
            try:
                diagnostic = self._decode(text)
            except ValueError as exc:
                self._warn(line_number, str(exc))
                continue
            if diagnostic is not None:
                yield diagnostic

    def _decode(self, text: str) -> Diagnostic | None:
        try:
            record = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"invalid JSON: {exc.msg}") from None

        if not isinstance(record, dict):
            raise ValueError(f"expected a JSON object, got {type(record).__name__}")

        if "reason" in record:
            if record["reason"] != _COMPILER_MESSAGE:
                return None
            record = record.get("message")
            if not isinstance(record, dict):
                raise ValueError("compiler-message without a message object")

        try:
            return Diagnostic.model_validate(record)
        except ValidationError as exc:
            raise ValueError(f"not a diagnostic ({exc.error_count()} validation errors)") from None

    def _warn(self, line_number: int, reason: str) -> None:
        warning = DecodeWarning(line_number=line_number, reason=reason)
        self.warnings.append(warning)
        logger.warning("Skipping diagnostic line %d: %s", line_number, reason)
