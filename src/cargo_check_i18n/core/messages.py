from collections.abc import Mapping

from cargo_check_i18n.models import Diagnostic, FieldPath, Span, TextField


def _is_translatable(text: str | None) -> bool:
    return text is not None and text.strip() != ""


def extract_text_fields(diagnostic: Diagnostic) -> list[TextField]:
    """Return the translatable text fields of *diagnostic* in canonical order.

    A diagnostic's own message comes first, then its span labels in stored order,
    then each child depth first. Empty or whitespace-only text is skipped.
    """
    fields: list[TextField] = []

    def _walk(node: Diagnostic, prefix: FieldPath) -> None:
        if _is_translatable(node.message):
            fields.append(TextField(path=(*prefix, "message"), original=node.message))
        for i, span in enumerate(node.spans):
            if span.label is not None and _is_translatable(span.label):
                fields.append(TextField(path=(*prefix, "spans", i, "label"), original=span.label))
        for i, child in enumerate(node.children):
            _walk(child, (*prefix, "children", i))

    _walk(diagnostic, ())
    return fields


def rebuild_diagnostic(diagnostic: Diagnostic, translations: Mapping[FieldPath, str]) -> Diagnostic:
    """Return a copy of *diagnostic* with the addressed text fields replaced.

    Paths missing from *translations* keep their original text. Spans and children
    keep their order; the input tree is left untouched.
    """

    def _rebuild(node: Diagnostic, prefix: FieldPath) -> Diagnostic:
        update: dict[str, object] = {}

        message_path = (*prefix, "message")
        if message_path in translations:
            update["message"] = translations[message_path]

        spans: list[Span] = []
        spans_changed = False
        for i, span in enumerate(node.spans):
            label_path = (*prefix, "spans", i, "label")
            if label_path in translations:
                span = span.model_copy(update={"label": translations[label_path]})
                spans_changed = True
            spans.append(span)
        if spans_changed:
            update["spans"] = tuple(spans)

        if node.children:
            update["children"] = tuple(
                _rebuild(child, (*prefix, "children", i)) for i, child in enumerate(node.children)
            )

        return node.model_copy(update=update) if update else node

    return _rebuild(diagnostic, ())
