from __future__ import annotations

from pathlib import Path

import pytest

from aliasfs.core.aliases import AliasRegistry
from aliasfs.core.paths import PathResolver


@pytest.fixture
def roots(tmp_path) -> dict[str, Path]:
    docs = tmp_path / "docs"
    src = tmp_path / "src"
    outside = tmp_path / "outside"
    for path in (docs, src, outside):
        path.mkdir()
    return {
        "docs": docs.resolve(),
        "src": src.resolve(),
        "outside": outside.resolve(),
    }


@pytest.fixture
def aliases(roots) -> AliasRegistry:
    registry = AliasRegistry()
    registry.register("docs", roots["docs"])
    registry.register("src", roots["src"])
    registry.freeze()
    return registry


@pytest.fixture
def resolver(aliases) -> PathResolver:
    return PathResolver(aliases)
