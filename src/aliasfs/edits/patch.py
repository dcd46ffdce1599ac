"""Find/replace edits with whitespace-tolerant fallback matching.

Edits apply in order, each one against the text produced by the edits before
it. An edit first looks for its ``old_text`` verbatim; failing that, it looks
for a run of lines that equals ``old_text`` line by line once leading and
trailing whitespace is ignored, and splices the replacement in using the
indentation found in the file. Either every edit applies or the file is left
alone.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from aliasfs.core.errors import EditNotFound, InvalidArgument, IOFailure
from aliasfs.edits.diff import unified_diff

_logger = logging.getLogger(__name__)

_LEADING_WS_RE = re.compile(r"^\s*")


@dataclass(frozen=True)
class Edit:
    old_text: str
    new_text: str

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> Edit:
        return cls(old_text=data["oldText"], new_text=data["newText"])


@dataclass(frozen=True)
class FuzzyMatch:
    index: int
    length: int
    replacement: list[str]


def normalize_line_endings(text: str) -> str:
    return text.replace("\r\n", "\n")


def _leading_whitespace(line: str) -> str:
    match = _LEADING_WS_RE.match(line)
    return match.group(0) if match else ""


def find_fuzzy_match(
    content_lines: Sequence[str],
    old_lines: Sequence[str],
    new_lines: Sequence[str],
) -> FuzzyMatch | None:
    """Return the first window matching ``old_lines`` modulo surrounding whitespace."""
    window = len(old_lines)
    for i in range(len(content_lines) - window + 1):
        candidate = content_lines[i : i + window]
        if all(
            old.strip() == line.strip() for old, line in zip(old_lines, candidate)
        ):
            return FuzzyMatch(
                index=i,
                length=window,
                replacement=reindent(content_lines[i], old_lines, new_lines),
            )
    return None


def reindent(
    anchor_line: str, old_lines: Sequence[str], new_lines: Sequence[str]
) -> list[str]:
    original_indent = _leading_whitespace(anchor_line)
    replacement: list[str] = []
    for j, line in enumerate(new_lines):
        if j == 0:
            replacement.append(original_indent + line.lstrip())
            continue
        old_indent = _leading_whitespace(old_lines[j]) if j < len(old_lines) else ""
        new_indent = _leading_whitespace(line)
        if old_indent and new_indent:
            delta = max(0, len(new_indent) - len(old_indent))
            replacement.append(original_indent + " " * delta + line.lstrip())
        else:
            replacement.append(line)
    return replacement


def apply_edit(content: str, edit: Edit, index: int = 1) -> str:
    old = normalize_line_endings(edit.old_text)
    new = normalize_line_endings(edit.new_text)
    if not old:
        raise InvalidArgument(f"Edit #{index} has an empty oldText")

    if old in content:
        return content.replace(old, new, 1)

    content_lines = content.split("\n")
    match = find_fuzzy_match(content_lines, old.split("\n"), new.split("\n"))
    if match is None:
        raise EditNotFound(index, edit.old_text)
    _logger.debug(
        "Edit #%d matched ignoring whitespace at line %d", index, match.index + 1
    )
    content_lines[match.index : match.index + match.length] = match.replacement
    return "\n".join(content_lines)


def apply_edits(content: str, edits: Iterable[Edit]) -> str:
    modified = normalize_line_endings(content)
    for index, edit in enumerate(edits, start=1):
        modified = apply_edit(modified, edit, index)
    return modified


def fence_diff(diff: str) -> str:
    ticks = 3
    while "`" * ticks in diff:
        ticks += 1
    fence = "`" * ticks
    return f"{fence}diff\n{diff}{fence}\n\n"


def apply_file_edits(
    path: Path,
    edits: Sequence[Edit],
    dry_run: bool = False,
    label: str | None = None,
) -> str:
    try:
        original = normalize_line_endings(path.read_bytes().decode("utf-8"))
    except OSError as exc:
        raise IOFailure.from_os_error("read file", exc) from exc
    except UnicodeDecodeError as exc:
        raise InvalidArgument("File is not valid UTF-8 text") from exc

    modified = apply_edits(original, edits)
    diff = unified_diff(original, modified, label or path.name)

    if not dry_run:
        try:
            path.write_text(modified, encoding="utf-8", newline="")
        except OSError as exc:
            raise IOFailure.from_os_error("write file", exc) from exc
        _logger.info("Applied %d edit(s) to %s", len(edits), label or path.name)
    return fence_diff(diff)
