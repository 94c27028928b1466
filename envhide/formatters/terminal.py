"""Rich terminal formatters for document views."""

from __future__ import annotations

from io import StringIO
from typing import Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from ..models import LineKind
from ..parser import parse_lines

# Line kind → Rich style
_KIND_STYLE: dict[LineKind, str] = {
    LineKind.ASSIGNMENT: "bold",
    LineKind.COMMENT: "dim",
    LineKind.BLANK: "dim",
    LineKind.UNPARSED: "yellow",
}


def format_text(lines: Sequence[str]) -> str:
    """Return the lines as file content."""
    return "".join(f"{line}\n" for line in lines)


def format_table(lines: Sequence[str], *, name: str = "", hidden: bool = True) -> str:
    """Render the parsed lines as a Rich table and return the string output."""
    state = "hidden" if hidden else "shown"
    table = Table(
        title=escape(f"{name or '[No Name]'}  [{state}]"),
        show_header=True,
        header_style="bold cyan",
        expand=False,
        box=None,
        show_edge=True,
        padding=(0, 1),
    )

    table.add_column("#", justify="right", style="dim", no_wrap=True)
    table.add_column("Kind", no_wrap=True)
    table.add_column("Key", style="bold", no_wrap=True)
    table.add_column("Value", no_wrap=False)

    parsed = parse_lines(lines)
    for number, line in enumerate(parsed, start=1):
        style = _KIND_STYLE[line.kind]
        if line.is_assignment:
            key = Text(line.key, style="bold green" if line.is_exported else "bold")
            value = Text(line.value or "—", style="magenta" if hidden and line.value else "")
        else:
            key = Text("")
            value = Text(line.raw.strip(), style=style)
        table.add_row(str(number), Text(line.kind.value, style=style), key, value)

    buf = StringIO()
    console = Console(file=buf, highlight=False, no_color=False)
    console.print(table)

    assignments = sum(1 for line in parsed if line.is_assignment)
    console.print(f"  [bold]{assignments}[/] assignment(s), {len(lines)} line(s)")

    return buf.getvalue()
