from __future__ import annotations

import math

import pytest

from turnledger.util.canonical_json import canonical_dumps, sha256_hex


def test_canonical_dumps_sorts_nested_keys() -> None:
    assert canonical_dumps({"b": 1, "a": {"d": 2, "c": [3, {"f": 4, "e": 5}]}}) == (
        '{"a":{"c":[3,{"e":5,"f":4}],"d":2},"b":1}'
    )


def test_canonical_dumps_keeps_unicode_and_list_order() -> None:
    assert canonical_dumps({"text": "héllo ✓", "items": [3, 1, 2]}) == (
        '{"items":[3,1,2],"text":"héllo ✓"}'
    )


def test_tuples_hash_like_lists() -> None:
    assert sha256_hex({"items": (1, 2)}) == sha256_hex({"items": [1, 2]})


def test_nan_is_rejected() -> None:
    with pytest.raises(ValueError):
        canonical_dumps({"temperature": math.nan})
