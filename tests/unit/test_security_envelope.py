"""Unit tests for envelope encode/decode and the identity lifecycle helpers."""

import random
from unittest.mock import patch

import pytest
from sesam.core.exceptions import EnvelopeDecryptionError, EnvelopeError
from sesam.security.constants import (
    AES_BLOCK_SIZE,
    CRYPT_DATA_SIZE,
    FORMAT_AES256_ENCRYPTED_MASTERKEY,
    KGK_SIZE,
    MIN_ENVELOPE_SIZE,
    SALT_SIZE,
)
from sesam.security.envelope import (
    decode,
    encode,
    parse_header,
    rewrap,
    seal,
    update_payload,
)
from sesam.security.kdf import derive_key_and_iv, generate_kgk
from sesam.security.secure import SecureBytes


class SeededRandomSource:
    """Deterministic entropy for reproducible envelopes in tests."""

    def __init__(self, seed: int = 0):
        self._rng = random.Random(seed)

    def random_bytes(self, size: int) -> bytes:
        return bytes(self._rng.getrandbits(8) for _ in range(size))


# ==============================================================================
# Fixtures
# ==============================================================================

@pytest.fixture
def kgk():
    return SecureBytes(bytes(range(KGK_SIZE)))


@pytest.fixture
def outer():
    """Caller-side outer salt with its derived key and IV."""
    salt = b"\x5a" * SALT_SIZE
    key, iv = derive_key_and_iv("correct horse battery staple", salt)
    return salt, key, iv


# ==============================================================================
# Tests: Round trip
# ==============================================================================

@pytest.mark.parametrize("compress", [False, True])
@pytest.mark.parametrize("payload", [b"", b"x", b"{\"domains\": []}", bytes(range(256)) * 40])
def test_seal_decode_roundtrip(kgk, payload, compress):
    blob = seal("correct horse battery staple", kgk, payload, compress)

    out_payload, out_kgk = decode("correct horse battery staple", blob, compress)

    assert out_payload == payload
    assert out_kgk == kgk
    assert (out_payload, out_kgk) == (payload, kgk)


def test_encode_with_caller_supplied_key_and_iv(kgk, outer):
    salt, key, iv = outer
    blob = encode(key, iv, salt, kgk, b"payload")

    assert decode("correct horse battery staple", blob) == (b"payload", kgk)


def test_decode_returns_secure_kgk(kgk):
    blob = seal(b"pw", kgk, b"data")
    _, out_kgk = decode(b"pw", blob)
    assert isinstance(out_kgk, SecureBytes)


def test_str_and_bytes_passwords_open_the_same_envelope(kgk):
    blob = seal("pässword", kgk, b"data")
    assert decode("pässword".encode("utf-8"), blob)[0] == b"data"


# ==============================================================================
# Tests: Layout
# ==============================================================================

def test_empty_payload_envelope_length(kgk, outer):
    """Empty input still produces one padded block after the fixed header."""
    salt, key, iv = outer
    blob = encode(key, iv, salt, kgk, b"", random_source=SeededRandomSource())

    assert len(blob) == 1 + 32 + 112 + 16
    payload, out_kgk = decode("correct horse battery staple", blob)
    assert payload == b""
    assert out_kgk == bytes(range(KGK_SIZE))


def test_layout_fields(kgk, outer):
    salt, key, iv = outer
    blob = encode(key, iv, salt, kgk, b"a" * 33)

    assert blob[0] == FORMAT_AES256_ENCRYPTED_MASTERKEY
    assert blob[1:33] == salt
    header = parse_header(blob)
    assert header.salt == salt
    assert len(header.encrypted_kgk) == CRYPT_DATA_SIZE == 112
    assert len(header.ciphertext) == 48
    assert header.size == len(blob)


@pytest.mark.parametrize("seed", range(5))
def test_wrapped_kgk_is_always_112_bytes(seed, outer):
    salt, key, iv = outer
    source = SeededRandomSource(seed)
    blob = encode(key, iv, salt, source.random_bytes(KGK_SIZE), b"", random_source=source)
    assert len(parse_header(blob).encrypted_kgk) == 112


def test_encode_is_reproducible_with_injected_randomness(kgk, outer):
    salt, key, iv = outer
    first = encode(key, iv, salt, kgk, b"data", random_source=SeededRandomSource(7))
    second = encode(key, iv, salt, kgk, b"data", random_source=SeededRandomSource(7))
    third = encode(key, iv, salt, kgk, b"data", random_source=SeededRandomSource(8))

    assert first == second
    assert first != third


def test_each_seal_uses_fresh_salts(kgk):
    first = parse_header(seal(b"pw", kgk, b"data"))
    second = parse_header(seal(b"pw", kgk, b"data"))

    assert first.salt != second.salt
    assert first.encrypted_kgk != second.encrypted_kgk
    assert first.ciphertext != second.ciphertext


def test_compressed_payload_shrinks(kgk):
    payload = b"a" * 4096
    plain = seal(b"pw", kgk, payload)
    packed = seal(b"pw", kgk, payload, compress=True, compression_level=9)
    assert len(packed) < len(plain)


# ==============================================================================
# Tests: Wrong password
# ==============================================================================

def test_wrong_password_fails_with_compression(kgk):
    blob = seal(b"right", kgk, b"secret payload", compress=True)

    with pytest.raises(EnvelopeDecryptionError, match="cannot open envelope"):
        decode(b"wrong", blob, uncompress=True)


def test_wrong_password_never_yields_the_kgk(kgk):
    """Without a MAC a wrong password may pass padding, but never recovers the KGK."""
    blob = seal(b"right", kgk, b"secret payload")

    try:
        payload, out_kgk = decode(b"wrong", blob)
    except EnvelopeDecryptionError:
        return
    assert out_kgk != kgk
    assert payload != b"secret payload"


def test_failure_messages_are_uniform(kgk):
    blob = seal(b"right", kgk, b"payload", compress=True)
    truncated = blob[:-1]

    with pytest.raises(EnvelopeError) as wrong:
        decode(b"wrong", blob, uncompress=True)
    with pytest.raises(EnvelopeError) as broken:
        decode(b"right", truncated, uncompress=True)

    assert str(wrong.value) == str(broken.value) == "cannot open envelope"
    assert wrong.value.__cause__ is None


# ==============================================================================
# Tests: Lifecycle helpers
# ==============================================================================

def test_rewrap_changes_password_and_keeps_payload_ciphertext(kgk):
    blob = seal(b"old", kgk, b"site list", compress=True)

    new_blob = rewrap(b"old", b"new", blob, uncompress=True)

    old_header, new_header = parse_header(blob), parse_header(new_blob)
    assert new_header.ciphertext == old_header.ciphertext
    assert new_header.salt != old_header.salt
    assert len(new_blob) == len(blob)
    assert decode(b"new", new_blob, uncompress=True) == (b"site list", kgk)
    with pytest.raises(EnvelopeDecryptionError):
        decode(b"old", new_blob, uncompress=True)


def test_rewrap_with_wrong_password_fails(kgk):
    blob = seal(b"old", kgk, b"site list", compress=True)
    with pytest.raises(EnvelopeDecryptionError):
        rewrap(b"typo", b"new", blob, uncompress=True)


def test_update_payload_keeps_kgk(kgk):
    blob = seal(b"pw", kgk, b"v1")

    updated = update_payload(b"pw", blob, b"version two", compress=True)

    assert parse_header(updated).salt != parse_header(blob).salt
    assert decode(b"pw", updated, uncompress=True) == (b"version two", kgk)


def test_update_payload_refuses_wrong_password_on_compressed_envelope(kgk):
    blob = seal(b"pw", kgk, b"v1 site list", compress=True)

    with pytest.raises(EnvelopeDecryptionError):
        update_payload(b"typo", blob, b"v2", compress=True, uncompress=True)


def test_update_payload_opens_old_payload_with_uncompress(kgk):
    """The current payload is fully opened, decompression included, before resealing."""
    blob = seal(b"pw", kgk, b"v1", compress=True)

    with patch("sesam.security.envelope.decode", wraps=decode) as spy:
        updated = update_payload(b"pw", blob, b"v2", compress=True, uncompress=True)

    spy.assert_called_once_with(b"pw", blob, True)
    assert decode(b"pw", updated, uncompress=True) == (b"v2", kgk)


def test_fresh_identity_roundtrip():
    with generate_kgk() as new_kgk:
        blob = seal(b"pw", new_kgk, b"")
        _, out = decode(b"pw", blob)
        assert out == new_kgk
    assert len(blob) == MIN_ENVELOPE_SIZE + AES_BLOCK_SIZE
