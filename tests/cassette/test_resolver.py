from __future__ import annotations

from pathlib import Path

import pytest

from turnledger.cassette.resolver import CassetteResolver
from turnledger.cassette.store import CassetteStore
from turnledger.errors import ProviderError
from turnledger.models import ProviderResult

_FP = "f" * 64


class _CountingProvider:
    def __init__(self, result: ProviderResult | None = None, error: Exception | None = None) -> None:
        self.result = result or ProviderResult(content="live")
        self.error = error
        self.calls = 0

    def __call__(self) -> ProviderResult:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


def _request() -> dict[str, object]:
    return {"messages": [{"role": "user", "content": "hi"}]}


def test_hit_never_calls_provider(tmp_path: Path) -> None:
    store = CassetteStore(tmp_path)
    store.save(_FP, _request(), ProviderResult(content="stored"))
    provider = _CountingProvider()

    for record in (False, True):
        result = CassetteResolver(store, record=record).resolve(_FP, provider, _request)
        assert result.content == "stored"

    assert provider.calls == 0


def test_miss_with_record_writes_cassette(tmp_path: Path) -> None:
    store = CassetteStore(tmp_path)
    provider = _CountingProvider()

    result = CassetteResolver(store, record=True).resolve(_FP, provider, _request, {"source": "fixture"})

    assert result.content == "live"
    assert provider.calls == 1
    assert store.load(_FP).result.content == "live"
    assert store.load(_FP).meta == {"source": "fixture"}


def test_miss_without_record_writes_nothing(tmp_path: Path) -> None:
    store = CassetteStore(tmp_path)
    provider = _CountingProvider()

    result = CassetteResolver(store, record=False).resolve(_FP, provider, _request)

    assert result.content == "live"
    assert provider.calls == 1
    assert store.exists(_FP) is False


def test_provider_failure_writes_nothing(tmp_path: Path) -> None:
    store = CassetteStore(tmp_path)
    provider = _CountingProvider(error=ProviderError("boom", provider="OpenAI", status_code=500))

    with pytest.raises(ProviderError):
        CassetteResolver(store, record=True).resolve(_FP, provider, _request)

    assert store.exists(_FP) is False
    assert list(tmp_path.iterdir()) == []


def test_request_snapshot_is_built_only_when_recording(tmp_path: Path) -> None:
    store = CassetteStore(tmp_path)
    built: list[int] = []

    def build() -> dict[str, object]:
        built.append(1)
        return _request()

    CassetteResolver(store, record=False).resolve(_FP, _CountingProvider(), build)
    assert built == []

    CassetteResolver(store, record=True).resolve(_FP, _CountingProvider(), build)
    assert built == [1]
