"""Tests for password hashing and JWT helpers."""

from jose import jwt

from condo_parcels.api.utils import create_access_token, verify_token
from condo_parcels.crypt.encrypt_decrypt import EncryptionDec
from condo_parcels.database.config.config import settings


def test_hash_and_check():
    enc = EncryptionDec()
    hashed = enc.hash_password(text="s3cret")
    assert hashed != "s3cret"
    assert enc.is_hashed(hashed)
    assert enc.check_passwords("s3cret", hashed)
    assert not enc.check_passwords("wrong", hashed)


def test_legacy_plaintext_and_empty():
    enc = EncryptionDec()
    assert not enc.is_hashed("plain")
    assert enc.check_passwords("plain", "plain")
    assert not enc.check_passwords("plain", "Plain")
    assert not enc.check_passwords("anything", "")


def test_token_round_trip_carries_identity():
    token = create_access_token({"sub": "42", "role": "TENANT"})
    claims = verify_token(token)
    assert claims["sub"] == "42"
    assert claims["role"] == "TENANT"
    assert "exp" in claims


def test_token_signed_with_another_key_is_rejected():
    forged = jwt.encode({"sub": "1", "role": "ADMIN"}, "not-the-key", algorithm=settings.ALGORITHM)
    assert verify_token(forged) is None
