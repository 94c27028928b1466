"""Mask assignment values and map masked lines back to their originals."""

from __future__ import annotations

import difflib
from typing import Iterable, Optional, Sequence

from .errors import AmbiguousEdit, PlaceholderInValue
from .models import DocumentSnapshot, EnvLine
from .parser import parse_line

DEFAULT_HIDE_CHAR = "*"
DEFAULT_MIN_HIDE_LENGTH = 8


def mask_value(
    value: str,
    hide_char: str = DEFAULT_HIDE_CHAR,
    min_hide_length: int = DEFAULT_MIN_HIDE_LENGTH,
) -> str:
    """Return the placeholder for *value*.

    The placeholder is never shorter than *min_hide_length*, so short
    secrets do not give away their length.  Empty values stay empty.
    """
    if not value:
        return ""
    return hide_char * max(len(value), min_hide_length)


def render_line(line: EnvLine, value: str) -> str:
    """Rebuild *line* with *value* in place of its own value.

    Quoting and the text around the key are kept as parsed.  Lines that are
    not assignments render as their raw text.
    """
    if not line.is_assignment:
        return line.raw
    quote = line.quote.value
    return f"{line.prefix}{line.key}{line.separator}{quote}{value}{quote}{line.eol}"


def rebuild_line(line: EnvLine) -> str:
    """Reassemble a parsed line from its parts (equals ``line.raw``)."""
    return render_line(line, line.value)


def mask_line(
    raw: str,
    hide_char: str = DEFAULT_HIDE_CHAR,
    min_hide_length: int = DEFAULT_MIN_HIDE_LENGTH,
) -> str:
    line = parse_line(raw)
    if not line.maskable:
        return raw
    return render_line(line, mask_value(line.value, hide_char, min_hide_length))


def mask_lines(
    lines: Iterable[str],
    hide_char: str = DEFAULT_HIDE_CHAR,
    min_hide_length: int = DEFAULT_MIN_HIDE_LENGTH,
) -> list[str]:
    """Mask every assignment with a non-empty value; keep all other lines."""
    return [mask_line(raw, hide_char, min_hide_length) for raw in lines]


def _is_placeholder(value: str, hide_char: str) -> bool:
    """True for a non-empty value made of hide characters only."""
    return bool(value) and not value.strip(hide_char)


def _recover(edited: str, original: str, hide_char: str) -> str:
    """Map an edited masked line back onto the original it replaced.

    If the edited value is still nothing but hide characters (a renamed
    key, or a placeholder that lost or gained a few characters), the
    original value is put back.  Otherwise the edited text is the new
    content.
    """
    new = parse_line(edited)
    old = parse_line(original)
    if new.is_assignment and old.maskable and _is_placeholder(new.value, hide_char):
        return render_line(new, old.value)
    return edited


def _slides(masked: Sequence[str], originals: Sequence[str], i1: int, i2: int) -> bool:
    """True if deleting ``masked[i1:i2]`` one line earlier or later reads the
    same on screen but keeps a different original."""
    if i1 > 0 and masked[i1 - 1] == masked[i2 - 1] and originals[i1 - 1] != originals[i2 - 1]:
        return True
    if i2 < len(masked) and masked[i1] == masked[i2] and originals[i1] != originals[i2]:
        return True
    return False


def _has_duplicates(masked: Sequence[str], originals: Sequence[str]) -> bool:
    seen: dict[str, str] = {}
    for m, o in zip(masked, originals):
        if seen.setdefault(m, o) != o:
            return True
    return False


def unmask_lines(
    displayed: Sequence[str],
    snapshot: DocumentSnapshot,
    hide_char: str = DEFAULT_HIDE_CHAR,
    min_hide_length: int = DEFAULT_MIN_HIDE_LENGTH,
) -> list[str]:
    """Return the true content behind a (possibly edited) masked display.

    Unedited lines come back as their originals.  Lines the user inserted
    or changed while values were hidden are taken as new content, except
    that a copy of a masked line, or an edit that left only hide
    characters in the value, resolves to the original value.

    Raises :class:`~envhide.errors.PlaceholderInValue` when an edited value
    still mixes hide characters with typed text, and
    :class:`~envhide.errors.AmbiguousEdit` when identical masked lines stand
    for different originals and the edit does not say which one is meant.
    """
    originals = list(snapshot.original_lines)
    masked = list(snapshot.masked_lines) or mask_lines(
        originals, hide_char, min_hide_length
    )
    displayed = list(displayed)
    if displayed == masked:
        return originals

    # Masked text → every original it stands for, for pasted copies.
    by_masked: dict[str, set[str]] = {}
    for m, o in zip(masked, originals):
        if m != o:
            by_masked.setdefault(m, set()).add(o)
    known = set(originals)
    leaked: list[str] = []

    def resolve_copy(line: str) -> Optional[str]:
        choices = by_masked.get(line)
        if not choices:
            return None
        if len(choices) > 1:
            raise AmbiguousEdit(line)
        return next(iter(choices))

    def typed(line: str) -> str:
        parsed = parse_line(line)
        if line not in known and parsed.is_assignment and hide_char in parsed.value:
            leaked.append(parsed.key)
        return line

    result: list[str] = []
    matcher = difflib.SequenceMatcher(a=masked, b=displayed, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            result.extend(originals[i1:i2])
        elif tag == "replace":
            uneven = i2 - i1 != j2 - j1 and _has_duplicates(masked[i1:i2], originals[i1:i2])
            for offset, line in enumerate(displayed[j1:j2]):
                i = i1 + offset
                copy = resolve_copy(line)
                if copy is not None:
                    result.append(copy)
                elif i < i2:
                    recovered = _recover(line, originals[i], hide_char)
                    if recovered != line and uneven:
                        raise AmbiguousEdit(masked[i])
                    result.append(recovered if recovered != line else typed(line))
                else:
                    result.append(typed(line))
        elif tag == "insert":
            for line in displayed[j1:j2]:
                copy = resolve_copy(line)
                result.append(copy if copy is not None else typed(line))
        elif _slides(masked, originals, i1, i2):
            raise AmbiguousEdit(masked[i1])
        # otherwise "delete": the user removed those lines
    if leaked:
        raise PlaceholderInValue(leaked)
    return result
