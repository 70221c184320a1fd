import pytest

from services.passwords import hash_password, verify_password


def test_hash_and_verify():
    stored = hash_password("correct horse battery")
    assert verify_password("correct horse battery", stored)
    assert not verify_password("Correct horse battery", stored)


def test_hash_is_salted():
    first = hash_password("same-password")
    second = hash_password("same-password")
    assert first != second
    assert first.split(":")[0] != second.split(":")[0]
    assert "same-password" not in first


@pytest.mark.parametrize("stored", [None, "", "no-separator", "zz:zz", "abcd:"])
def test_malformed_hash_never_matches(stored):
    assert not verify_password("anything", stored)
