from __future__ import annotations

import pytest

from contracts.jsoncanon import canonical_digest, canonical_dump, digest_without


def test_canonical_order_and_tuples():
    payload_a = {"b": (1, 2), "a": "x"}
    payload_b = {"a": "x", "b": [1, 2]}
    assert canonical_dump(payload_a) == b'{"a":"x","b":[1,2]}'
    assert canonical_digest(payload_a) == canonical_digest(payload_b)
    assert canonical_digest(payload_a).startswith("sha256-")


def test_rejects_floats():
    with pytest.raises(TypeError):
        canonical_dump({"value": 1.5})


def test_digest_without_ignores_the_named_key():
    payload = {"a": 1, "report_id": "whatever"}
    assert digest_without(payload, "report_id") == canonical_digest({"a": 1})
