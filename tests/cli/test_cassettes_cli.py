from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from turnledger.cassette.store import CassetteStore
from turnledger.cli import app
from turnledger.models import ProviderResult, ToolCall

runner = CliRunner()

_FIRST = "1" * 64
_SECOND = "2" * 64


def _populate(directory: Path) -> CassetteStore:
    store = CassetteStore(directory)
    store.save(
        _FIRST,
        {"messages": [{"role": "user", "content": "hi"}]},
        ProviderResult(content="Hello there"),
        {"source": "fixture", "model": "gpt-4o"},
    )
    store.save(
        _SECOND,
        {},
        ProviderResult(tool_calls=(ToolCall("c1", "search", {"query": "python"}),)),
        {"source": "judge", "model": "gpt-4o-mini"},
    )
    return store


def test_list_shows_each_cassette(tmp_path: Path) -> None:
    _populate(tmp_path)

    result = runner.invoke(app, ["cassettes", "list", "--dir", str(tmp_path)])

    assert result.exit_code == 0
    assert _FIRST[:12] in result.output
    assert _SECOND[:12] in result.output
    assert "fixture" in result.output
    assert "judge" in result.output


def test_list_empty_directory(tmp_path: Path) -> None:
    result = runner.invoke(app, ["cassettes", "list", "--dir", str(tmp_path)])

    assert result.exit_code == 0
    assert "No cassettes found" in result.output


def test_show_accepts_unique_prefix(tmp_path: Path) -> None:
    _populate(tmp_path)

    result = runner.invoke(app, ["cassettes", "show", "1111", "--dir", str(tmp_path)])

    assert result.exit_code == 0
    document = json.loads(result.output)
    assert document["response"]["content"] == "Hello there"
    assert document["meta"]["source"] == "fixture"


def test_show_missing_fingerprint_fails(tmp_path: Path) -> None:
    result = runner.invoke(app, ["cassettes", "show", "deadbeef", "--dir", str(tmp_path)])

    assert result.exit_code == 1


def test_verify_passes_for_valid_cassettes(tmp_path: Path) -> None:
    _populate(tmp_path)

    result = runner.invoke(app, ["cassettes", "verify", "--dir", str(tmp_path)])

    assert result.exit_code == 0
    assert "2 cassette(s) verified" in result.output


def test_verify_reports_corrupt_cassettes(tmp_path: Path) -> None:
    store = _populate(tmp_path)
    store.path("3" * 64).write_text("{broken", encoding="utf-8")

    result = runner.invoke(app, ["cassettes", "verify", "--dir", str(tmp_path)])

    assert result.exit_code == 1
    assert "CORRUPT" in result.output
    assert "1 of 3 cassette(s) are corrupt" in result.output
