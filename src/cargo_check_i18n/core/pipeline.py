from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import AsyncIterable, Awaitable, Callable
from dataclasses import dataclass, field

from cargo_check_i18n.core.messages import extract_text_fields, rebuild_diagnostic
from cargo_check_i18n.core.ports.translator import Translator
from cargo_check_i18n.errors import TranslationError
from cargo_check_i18n.models import Diagnostic, FieldPath, TextField

logger = logging.getLogger(__name__)

Emit = Callable[[Diagnostic], Awaitable[None] | None]


@dataclass
class PipelineStats:
    diagnostics: int = 0
    fields: int = 0
    translated: int = 0
    untranslated: int = 0
    # diagnostic index -> paths whose translation was unavailable
    failures: dict[int, list[FieldPath]] = field(default_factory=dict)


@dataclass(frozen=True)
class TranslatedDiagnostic:
    diagnostic: Diagnostic
    field_count: int
    untranslated: list[FieldPath] = field(default_factory=list)


async def _translate_field(translator: Translator, text_field: TextField, language: str) -> str | None:
    try:
        return await translator.translate(text_field.original, language)
    except TranslationError as exc:
        logger.warning("Translation unavailable for %s: %s", "/".join(map(str, text_field.path)), exc.reason)
        return None


async def translate_diagnostic(
    diagnostic: Diagnostic,
    translator: Translator,
    language: str,
) -> TranslatedDiagnostic:
    """Translate every text field of *diagnostic* concurrently and rebuild it.

    Fields whose translation fails keep their original text and are listed in
    ``untranslated``.
    """
    fields = extract_text_fields(diagnostic)
    if not fields:
        return TranslatedDiagnostic(diagnostic=diagnostic, field_count=0)

    # cancelling the gather cancels every outstanding field task
    results = await asyncio.gather(*(_translate_field(translator, f, language) for f in fields))

    translations: dict[FieldPath, str] = {}
    untranslated: list[FieldPath] = []
    for text_field, result in zip(fields, results, strict=True):
        if result is None:
            untranslated.append(text_field.path)
        else:
            translations[text_field.path] = result

    return TranslatedDiagnostic(
        diagnostic=rebuild_diagnostic(diagnostic, translations),
        field_count=len(fields),
        untranslated=untranslated,
    )


async def run_pipeline(
    diagnostics: AsyncIterable[Diagnostic],
    translator: Translator,
    language: str,
    emit: Emit,
) -> PipelineStats:
    """Translate and emit *diagnostics* one at a time, in arrival order."""
    stats = PipelineStats()
    async for diagnostic in diagnostics:
        outcome = await translate_diagnostic(diagnostic, translator, language)

        if outcome.untranslated:
            stats.failures[stats.diagnostics] = outcome.untranslated
        stats.diagnostics += 1
        stats.fields += outcome.field_count
        stats.translated += outcome.field_count - len(outcome.untranslated)
        stats.untranslated += len(outcome.untranslated)

        result = emit(outcome.diagnostic)
        if inspect.isawaitable(result):
            await result

    logger.info(
        "Processed %d diagnostic(s): %d field(s) translated, %d unavailable",
        stats.diagnostics,
        stats.translated,
        stats.untranslated,
    )
    return stats
