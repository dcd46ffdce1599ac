"""Line-level unified diff rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

LineKind = Literal["context", "added", "removed"]

CONTEXT_LINES = 3

_PREFIX: dict[LineKind, str] = {"context": " ", "added": "+", "removed": "-"}


@dataclass(frozen=True)
class DiffLine:
    kind: LineKind
    text: str

    def render(self) -> str:
        return f"{_PREFIX[self.kind]}{self.text}"


@dataclass
class DiffBlock:
    start_line: int
    lines: list[DiffLine] = field(default_factory=list)

    @property
    def content_changed_line_count(self) -> int:
        return sum(1 for line in self.lines if line.kind != "context")

    @property
    def old_count(self) -> int:
        return sum(1 for line in self.lines if line.kind != "added")

    @property
    def new_count(self) -> int:
        return sum(1 for line in self.lines if line.kind != "removed")

    def header(self) -> str:
        return (
            f"@@ -{self.start_line},{self.old_count} "
            f"+{self.start_line},{self.new_count} @@"
        )

    def render(self) -> str:
        return "\n".join([self.header(), *(line.render() for line in self.lines)])


def split_lines(old: str, new: str) -> tuple[list[str], list[str]]:
    old_lines = old.split("\n")
    new_lines = new.split("\n")
    # A newline terminating both texts is not a line of its own.
    if old.endswith("\n") and new.endswith("\n"):
        old_lines.pop()
        new_lines.pop()
    return old_lines, new_lines


def diff_blocks(old: str, new: str, context: int = CONTEXT_LINES) -> list[DiffBlock]:
    """Walk both texts in lockstep by line index and collect change blocks."""
    old_lines, new_lines = split_lines(old, new)
    total = max(len(old_lines), len(new_lines))
    blocks: list[DiffBlock] = []
    block: DiffBlock | None = None
    trailing = 0
    emitted_until = 0

    for i in range(total):
        old_line = old_lines[i] if i < len(old_lines) else None
        new_line = new_lines[i] if i < len(new_lines) else None

        if old_line == new_line:
            if block is None:
                continue
            block.lines.append(DiffLine("context", old_line or ""))
            trailing += 1
            if trailing >= context:
                blocks.append(block)
                block = None
                emitted_until = i + 1
            continue

        if block is None:
            lead_start = max(emitted_until, i - context)
            block = DiffBlock(start_line=lead_start + 1)
            for j in range(lead_start, i):
                block.lines.append(DiffLine("context", old_lines[j]))
        trailing = 0
        if old_line is not None:
            block.lines.append(DiffLine("removed", old_line))
        if new_line is not None:
            block.lines.append(DiffLine("added", new_line))

    if block is not None:
        blocks.append(block)
    return blocks


def unified_diff(old: str, new: str, label: str) -> str:
    output = f"--- {label}\n+++ {label}\n"
    for block in diff_blocks(old, new):
        output += block.render() + "\n"
    return output
