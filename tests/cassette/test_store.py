from __future__ import annotations

import json
from pathlib import Path

import pytest

from turnledger.cassette.store import CassetteStore
from turnledger.errors import CassetteCorruptError, CassetteMissingError, InvalidResponseError
from turnledger.models import ProviderResult, ToolCall

_FP = "a" * 64


def test_save_then_load_round_trips(tmp_path: Path) -> None:
    store = CassetteStore(tmp_path / "cassettes")
    result = ProviderResult(
        content="Привет ✓",
        tool_calls=(ToolCall("call_1", "search", {"query": "φ", "limit": 3}),),
    )

    store.save(_FP, {"messages": []}, result, {"source": "fixture"})
    loaded = store.load(_FP)

    assert loaded.result.content == result.content
    assert loaded.result.tool_calls == result.tool_calls
    assert loaded.meta == {"source": "fixture"}


def test_saved_document_layout(tmp_path: Path) -> None:
    store = CassetteStore(tmp_path)
    store.save(_FP, {"b": 1, "a": 2}, ProviderResult(content="ok"), {"model": "gpt-4o"})

    raw = store.path(_FP).read_text(encoding="utf-8")
    document = json.loads(raw)

    assert list(document) == ["request", "response", "meta"]
    assert list(document["request"]) == ["a", "b"]
    assert document["response"] == {"content": "ok", "tool_calls": []}
    assert raw.endswith("\n")
    assert '\n  "request"' in raw


def test_save_redacts_request_snapshot(tmp_path: Path) -> None:
    store = CassetteStore(tmp_path)
    store.save(_FP, {"headers": {"api_key": "secret"}}, ProviderResult(content="ok"))

    assert store.load(_FP).request == {"headers": {"api_key": "[REDACTED]"}}


def test_non_ascii_is_written_verbatim(tmp_path: Path) -> None:
    store = CassetteStore(tmp_path)
    store.save(_FP, {}, ProviderResult(content="日本語"))

    assert "日本語" in store.path(_FP).read_text(encoding="utf-8")


def test_missing_cassette_is_distinct_from_corrupt(tmp_path: Path) -> None:
    store = CassetteStore(tmp_path)

    assert store.exists(_FP) is False
    with pytest.raises(CassetteMissingError):
        store.load(_FP)


def test_invalid_json_is_corrupt(tmp_path: Path) -> None:
    store = CassetteStore(tmp_path)
    store.path(_FP).write_text("{not json", encoding="utf-8")

    with pytest.raises(CassetteCorruptError):
        store.load(_FP)


def test_missing_response_key_is_corrupt(tmp_path: Path) -> None:
    store = CassetteStore(tmp_path)
    store.path(_FP).write_text(json.dumps({"request": {}, "meta": {}}), encoding="utf-8")

    with pytest.raises(InvalidResponseError):
        store.load(_FP)


def test_bad_tool_call_is_corrupt(tmp_path: Path) -> None:
    store = CassetteStore(tmp_path)
    store.path(_FP).write_text(
        json.dumps({"response": {"content": "", "tool_calls": [{"id": 1}]}}),
        encoding="utf-8",
    )

    with pytest.raises(CassetteCorruptError):
        store.load(_FP)


def test_iter_fingerprints_is_sorted(tmp_path: Path) -> None:
    store = CassetteStore(tmp_path)
    for fingerprint in ("c" * 64, "a" * 64, "b" * 64):
        store.save(fingerprint, {}, ProviderResult(content=fingerprint[0]))

    assert list(store.iter_fingerprints()) == ["a" * 64, "b" * 64, "c" * 64]
    assert list(CassetteStore(tmp_path / "absent").iter_fingerprints()) == []


def test_rerecording_replaces_the_whole_file(tmp_path: Path) -> None:
    store = CassetteStore(tmp_path)
    store.save(_FP, {}, ProviderResult(content="a much longer first answer than the second"))
    store.save(_FP, {}, ProviderResult(content="short"))

    assert store.load(_FP).result.content == "short"
    assert sorted(path.name for path in tmp_path.iterdir()) == [f"{_FP}.json"]


def test_failed_write_keeps_previous_cassette(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    store = CassetteStore(tmp_path)
    store.save(_FP, {}, ProviderResult(content="first"))

    def _fail(src: object, dst: object) -> None:
        raise OSError("disk full")

    monkeypatch.setattr("turnledger.cassette.writer.os.replace", _fail)
    with pytest.raises(OSError, match="disk full"):
        store.save(_FP, {}, ProviderResult(content="second"))

    assert store.load(_FP).result.content == "first"
    assert sorted(path.name for path in tmp_path.iterdir()) == [f"{_FP}.json"]
