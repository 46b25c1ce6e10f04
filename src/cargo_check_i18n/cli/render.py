from rich.console import Console
from rich.text import Text

from cargo_check_i18n.models import Diagnostic, Level

_LEVEL_STYLES = {
    Level.ERROR: "bold red",
    Level.WARNING: "bold yellow",
    Level.NOTE: "bold green",
    Level.HELP: "bold cyan",
}


def format_diagnostic(diagnostic: Diagnostic) -> list[Text]:
    """Lay out *diagnostic* the way rustc prints its short human-readable form."""
    lines: list[Text] = []

    head = Text()
    head.append(diagnostic.level.value, style=_LEVEL_STYLES[diagnostic.level])
    if diagnostic.code:
        head.append(f"[{diagnostic.code}]", style=_LEVEL_STYLES[diagnostic.level])
    head.append(": ", style="bold")
    head.append(diagnostic.message, style="bold")
    lines.append(head)

    for span in diagnostic.spans:
        lines.append(Text.assemble(("  --> ", "bold blue"), f"{span.file}:{span.line}:{span.column}"))
        if span.label:
            lines.append(Text.assemble(("   |  ", "bold blue"), (span.label, _LEVEL_STYLES[diagnostic.level])))

    for child in diagnostic.children:
        lines.append(
            Text.assemble(
                ("   = ", "bold blue"),
                (f"{child.level.value}: ", "bold"),
                child.message,
            )
        )
        for span in child.spans:
            location = Text.assemble(("     --> ", "bold blue"), f"{span.file}:{span.line}:{span.column}")
            if span.label:
                location.append(f"  {span.label}", style=_LEVEL_STYLES[child.level])
            lines.append(location)
        for grandchild in child.children:
            lines.extend(Text.assemble("    ", line) for line in format_diagnostic(grandchild))

    return lines


class DiagnosticRenderer:
    """Print translated diagnostics to the terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(highlight=False)
        self.count = 0

    def __call__(self, diagnostic: Diagnostic) -> None:
        for line in format_diagnostic(diagnostic):
            self._console.print(line)
        self._console.print()
        self.count += 1
