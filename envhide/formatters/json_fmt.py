"""JSON formatter for machine-readable document views."""

from __future__ import annotations

import json
from typing import Sequence

from ..models import LineKind
from ..parser import parse_lines


def format_json(lines: Sequence[str], *, name: str = "", hidden: bool = True) -> str:
    """Render the parsed lines as a JSON string.

    Schema::

        {
          "name": ".env",
          "hidden": true,
          "summary": {"assignment": 2, "comment": 1, "blank": 0, "unparsed": 0},
          "lines": [
            {"line": 1, "kind": "comment", "raw": "# database"},
            {
              "line": 2,
              "kind": "assignment",
              "key": "DB_PASS",
              "value": "*********",
              "quote": "\\"",
              "export": true
            },
            ...
          ]
        }
    """
    parsed = parse_lines(lines)
    lines_out = []
    for number, line in enumerate(parsed, start=1):
        if line.is_assignment:
            lines_out.append(
                {
                    "line": number,
                    "kind": line.kind.value,
                    "key": line.key,
                    "value": line.value,
                    "quote": line.quote.value,
                    "export": line.is_exported,
                }
            )
        else:
            lines_out.append({"line": number, "kind": line.kind.value, "raw": line.raw})

    summary = {kind.value: sum(1 for p in parsed if p.kind == kind) for kind in LineKind}

    output = {
        "name": name,
        "hidden": hidden,
        "summary": summary,
        "lines": lines_out,
    }

    return json.dumps(output, indent=2, ensure_ascii=False)
