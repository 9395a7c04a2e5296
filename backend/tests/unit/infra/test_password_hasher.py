import pytest

from vidstream.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher
from vidstream.services._shared.errors import InternalError


def test_hash_is_salted_and_verifies(hasher):
    first = hasher.hash("s3cret")
    second = hasher.hash("s3cret")

    assert first != second
    assert "s3cret" not in first
    assert hasher.verify("s3cret", first)
    assert hasher.verify("s3cret", second)
    assert not hasher.verify("S3cret", first)


@pytest.mark.parametrize("value", ["", None])
def test_hash_rejects_empty_input(hasher, value):
    with pytest.raises(ValueError):
        hasher.hash(value)


def test_verify_tolerates_bad_input(hasher):
    hashed = hasher.hash("s3cret")

    assert not hasher.verify("", hashed)
    assert not hasher.verify("s3cret", "")
    assert not hasher.verify("s3cret", "not-a-werkzeug-hash")


def test_unknown_method_is_an_internal_error():
    with pytest.raises(InternalError):
        WerkzeugPasswordHasher(method="rot13").hash("s3cret")
