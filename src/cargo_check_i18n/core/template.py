"""Request body rendering and response-path extraction for the translation API."""

from typing import Any

from cargo_check_i18n.errors import ExtractionError, TemplateError

_PLACEHOLDERS = ("{{model}}", "{{prompt}}", "{{temperature}}")

DEFAULT_REQUEST_BODY_TEMPLATE = (
    '{"model": "{{model}}", '
    '"messages": [{"role": "user", "content": "{{prompt}}"}], '
    '"temperature": {{temperature}}}'
)
DEFAULT_RESPONSE_PATH = "choices.0.message.content"


def render_request(template: str, *, model: str, prompt: str, temperature: float) -> str:
    """Substitute ``{{model}}``, ``{{prompt}}`` and ``{{temperature}}`` in *template*.

    Values are injected verbatim; escaping them for the transport encoding is up to
    the caller.
    """
    if not any(p in template for p in _PLACEHOLDERS):
        raise TemplateError("Request body template references none of " + ", ".join(_PLACEHOLDERS))
    return (
        template.replace("{{model}}", model)
        .replace("{{prompt}}", prompt)
        .replace("{{temperature}}", repr(float(temperature)))
    )


def extract_response_value(value: Any, path: str) -> str:
    """Navigate *value* along the dot-separated *path* and return the string found there."""
    if not path:
        raise ExtractionError(path, "", "empty response path")

    current = value
    for segment in path.split("."):
        if isinstance(current, dict):
            if segment not in current:
                raise ExtractionError(path, segment, "key not found")
            current = current[segment]
        elif isinstance(current, list):
            if not (segment.isascii() and segment.isdigit()):
                raise ExtractionError(path, segment, "expected an array index")
            index = int(segment)
            if index >= len(current):
                raise ExtractionError(path, segment, f"index out of range (length {len(current)})")
            current = current[index]
        else:
            raise ExtractionError(path, segment, f"cannot descend into {type(current).__name__}")

    if not isinstance(current, str):
        raise ExtractionError(path, path.rsplit(".", 1)[-1], f"expected a string, got {type(current).__name__}")
    return current
