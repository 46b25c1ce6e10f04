"""Run the check flow against a stand-in ``cargo`` executable."""

from __future__ import annotations

import json
import os
import stat
import sys
from pathlib import Path
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from conftest import chat_response, compiler_message, prompt_of, rustc_diagnostic, rustc_span

from cargo_check_i18n.cache import InMemoryCacheStore, SqliteCacheStore, default_cache_path, get_engine
from cargo_check_i18n.cli.check import run_check
from cargo_check_i18n.config import Settings
from cargo_check_i18n.errors import CargoLaunchError
from cargo_check_i18n.models import Diagnostic

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="uses a POSIX shell script as cargo")


def _fake_cargo(tmp_path: Path, records: list[dict[str, object]], exit_code: int) -> Path:
    output = tmp_path / "cargo-output.jsonl"
    output.write_text("".join(json.dumps(r) + "\n" for r in records) + "not json\n", encoding="utf-8")
    script = tmp_path / "fake-cargo"
    script.write_text(
        f'#!/bin/sh\necho "$@" > "{tmp_path}/cargo-args"\ncat "{output}"\nexit {exit_code}\n',
        encoding="utf-8",
    )
    script.chmod(script.stat().st_mode | stat.S_IEXEC)
    return script


@pytest.mark.asyncio
async def test_run_check_translates_cargo_output(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    records = [
        {"reason": "compiler-artifact", "package_id": "dep 1.0.0"},
        compiler_message(
            rustc_diagnostic(
                "unused variable: `x`",
                level="warning",
                spans=[rustc_span("src/main.rs", 2, 9, "help: if this is intentional, prefix it with an underscore")],
            )
        ),
        compiler_message(rustc_diagnostic("mismatched types", code="E0308")),
        {"reason": "build-finished", "success": False},
    ]
    monkeypatch.setenv("CARGO", str(_fake_cargo(tmp_path, records, exit_code=101)))

    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        if "mismatched types" in prompt_of(request):
            return httpx.Response(502)
        return chat_response("翻訳済み")

    settings = Settings(api_key="k", language="ja")
    emitted: list[Diagnostic] = []

    cache = SqliteCacheStore(get_engine(default_cache_path(tmp_path)))
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        exit_code, stats = await run_check(
            tmp_path, settings, cache, emitted.append, ["--all-targets"], http_client=http
        )

    assert exit_code == 101
    assert (tmp_path / "cargo-args").read_text().split() == ["check", "--message-format=json", "--all-targets"]
    assert [d.message for d in emitted] == ["翻訳済み", "mismatched types"]
    assert emitted[0].spans[0].label == "翻訳済み"
    assert emitted[1].code == "E0308"
    assert stats.untranslated == 1
    assert calls == 3

    # a second run is served from the persisted cache, except for the failed field
    cache = SqliteCacheStore(get_engine(default_cache_path(tmp_path)))
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        await run_check(tmp_path, settings, cache, lambda d: None, http_client=http)
    assert calls == 4


@pytest.mark.asyncio
async def test_missing_cargo_raises_launch_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CARGO", os.fspath(tmp_path / "no-such-cargo"))
    cache = InMemoryCacheStore()
    with patch.object(cache, "dispose", AsyncMock()) as dispose, pytest.raises(CargoLaunchError):
        await run_check(tmp_path, Settings(api_key="k"), cache, print)
    dispose.assert_awaited_once()
