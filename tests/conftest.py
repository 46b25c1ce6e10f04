"""Shared fixtures and helpers for tests."""

import json
from collections.abc import AsyncIterator, Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from cargo_check_i18n.cache import InMemoryCacheStore
from cargo_check_i18n.config import Settings
from cargo_check_i18n.models import Diagnostic

_REPO_ROOT = Path(__file__).parent.parent

API_URL = "https://llm.test/v1/chat/completions"


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def chat_response(content: str, status_code: int = 200) -> httpx.Response:
    """Build an OpenAI-style chat completion response."""
    return httpx.Response(status_code, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


def prompt_of(request: httpx.Request) -> str:
    """Return the user prompt sent in a rendered chat completion request."""
    body = json.loads(request.content)
    content: str = body["messages"][0]["content"]
    return content


async def lines_of(*records: dict[str, Any] | str) -> AsyncIterator[bytes]:
    """Async stream of JSON lines, as produced by ``cargo check --message-format=json``."""
    for record in records:
        text = record if isinstance(record, str) else json.dumps(record)
        yield (text + "\n").encode("utf-8")


def rustc_diagnostic(
    message: str,
    level: str = "error",
    code: str | None = None,
    spans: list[dict[str, Any]] | None = None,
    children: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Build a diagnostic object shaped like rustc's JSON output."""
    return {
        "$message_type": "diagnostic",
        "message": message,
        "code": {"code": code, "explanation": None} if code else None,
        "level": level,
        "spans": spans or [],
        "children": children or [],
        "rendered": f"{level}: {message}\n",
    }


def rustc_span(file_name: str, line: int, column: int, label: str | None = None) -> dict[str, Any]:
    return {
        "file_name": file_name,
        "byte_start": 0,
        "byte_end": 1,
        "line_start": line,
        "line_end": line,
        "column_start": column,
        "column_end": column + 1,
        "is_primary": True,
        "text": [],
        "label": label,
        "suggested_replacement": None,
        "expansion": None,
    }


def compiler_message(diagnostic: dict[str, Any]) -> dict[str, Any]:
    """Wrap a diagnostic in cargo's ``compiler-message`` envelope."""
    return {
        "reason": "compiler-message",
        "package_id": "demo 0.1.0 (path+file:///tmp/demo)",
        "target": {"name": "demo", "kind": ["bin"]},
        "message": diagnostic,
    }


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(api_key="test-key", api_url=API_URL, language="ja", rate_limit=4, timeout=5.0)


@pytest.fixture
def memory_cache() -> InMemoryCacheStore:
    return InMemoryCacheStore()


@pytest.fixture
def nested_diagnostic() -> Diagnostic:
    return Diagnostic.model_validate(
        rustc_diagnostic(
            "unused variable: `x`",
            level="warning",
            code="unused_variables",
            spans=[rustc_span("src/main.rs", 2, 9, "help: prefix with underscore"), rustc_span("src/main.rs", 3, 1)],
            children=[
                rustc_diagnostic("`#[warn(unused_variables)]` on by default", level="note"),
                rustc_diagnostic(
                    "if this is intentional, prefix it with an underscore",
                    level="help",
                    spans=[rustc_span("src/main.rs", 2, 9, "   ")],
                ),
            ],
        )
    )


@pytest.fixture
def make_http_client() -> Callable[[Callable[[httpx.Request], Any]], httpx.AsyncClient]:
    def _make(handler: Callable[[httpx.Request], Any]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make
