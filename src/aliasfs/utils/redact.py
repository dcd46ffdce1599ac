"""Scrub real filesystem roots from caller-visible text."""

from __future__ import annotations

from aliasfs.core.aliases import AliasRegistry


def redact_text(text: str, registry: AliasRegistry) -> str:
    # Longest roots first so nested roots map to the closest alias.
    aliases = sorted(
        registry.list_aliases(),
        key=lambda alias: len(str(alias.real_root)),
        reverse=True,
    )
    for alias in aliases:
        text = text.replace(str(alias.real_root), alias.name)
    return text
