from __future__ import annotations

import pytest
from typer.testing import CliRunner

from aliasfs.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("ALIASFS_ALIASES", raising=False)
    monkeypatch.delenv("ALIASFS_READ_ONLY", raising=False)


def test_check_lists_aliases(roots) -> None:
    result = runner.invoke(app, ["check", f"docs:{roots['docs']}"])
    assert result.exit_code == 0
    assert "docs" in result.output


def test_check_rejects_duplicates(roots) -> None:
    result = runner.invoke(
        app, ["check", f"docs:{roots['docs']}", f"docs:{roots['src']}"]
    )
    assert result.exit_code == 1
    assert "Duplicate alias - docs" in result.output


def test_check_requires_aliases() -> None:
    result = runner.invoke(app, ["check"])
    assert result.exit_code == 1
    assert "Usage" in result.output


def test_check_reads_aliases_from_environment(monkeypatch, roots) -> None:
    monkeypatch.setenv("ALIASFS_ALIASES", f"src:{roots['src']}")
    result = runner.invoke(app, ["check"])
    assert result.exit_code == 0
    assert "src" in result.output


def test_tools_list() -> None:
    result = runner.invoke(app, ["tools", "list"])
    assert result.exit_code == 0
    assert "editFile (mutating) caps=fs_write" in result.output
    assert "searchFilesAndFolders (read) caps=fs_read" in result.output


def test_config_show(monkeypatch) -> None:
    monkeypatch.setenv("ALIASFS_READ_ONLY", "true")
    result = runner.invoke(app, ["config", "show"])
    assert result.exit_code == 0
    assert "read_only=True" in result.output
