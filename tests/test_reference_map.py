import uuid

import pytest

from Teskilat.simulation import ReferenceMap, UnresolvedReferenceError


def test_bind_and_resolve():
    refs = ReferenceMap()
    ids = [uuid.uuid4(), uuid.uuid4()]
    refs.bind(["p1", "p2"], ids)

    assert len(refs) == 2
    assert "p1" in refs
    assert refs.resolve("p1") == ids[0]
    assert refs.resolve("p2") == ids[1]


def test_resolve_unknown_ref_raises():
    refs = ReferenceMap()
    with pytest.raises(UnresolvedReferenceError):
        refs.resolve("ghost")


def test_bind_rejects_length_mismatch():
    refs = ReferenceMap()
    with pytest.raises(UnresolvedReferenceError):
        refs.bind(["p1", "p2"], [uuid.uuid4()])
    assert len(refs) == 0


def test_bind_is_write_once():
    refs = ReferenceMap()
    first = uuid.uuid4()
    refs.bind(["p1"], [first])
    with pytest.raises(ValueError):
        refs.bind(["p1"], [uuid.uuid4()])
    assert refs.resolve("p1") == first
