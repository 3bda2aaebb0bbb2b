"""Unit tests for the AES-256-CBC primitive."""

import pytest
from sesam.core.exceptions import CipherError, PaddingInvalidError
from sesam.security.cipher import Padding, decrypt, encrypt
from sesam.security.secure import SecureBytes

# NIST SP 800-38A, F.2.5 CBC-AES256.Encrypt
NIST_KEY = bytes.fromhex("603deb1015ca71be2b73aef0857d77811f352c073b6108d72d9810a30914dff4")
NIST_IV = bytes.fromhex("000102030405060708090a0b0c0d0e0f")
NIST_PLAIN = bytes.fromhex(
    "6bc1bee22e409f96e93d7e117393172a"
    "ae2d8a571e03ac9c9eb76fac45af8e51"
)
NIST_CIPHER = bytes.fromhex(
    "f58c4c04d6e5f1ba779eabfb5f7bfbd6"
    "9cfc4e967edb808d679f777bc6702c7d"
)

KEY = b"k" * 32
IV = b"i" * 16


def test_unpadded_encrypt_matches_nist_vector():
    assert encrypt(NIST_KEY, NIST_IV, NIST_PLAIN, Padding.NONE) == NIST_CIPHER


def test_unpadded_decrypt_matches_nist_vector():
    plain = decrypt(NIST_KEY, NIST_IV, NIST_CIPHER, Padding.NONE)
    assert isinstance(plain, SecureBytes)
    assert plain == NIST_PLAIN


def test_unpadded_rejects_unaligned_input():
    with pytest.raises(CipherError, match="multiple of the block size"):
        encrypt(KEY, IV, b"x" * 17, Padding.NONE)


@pytest.mark.parametrize("size", [0, 1, 15, 16, 17, 100])
def test_pkcs7_roundtrip_sizes(size):
    plain = bytes(range(size))
    ct = encrypt(KEY, IV, plain, Padding.PKCS7)

    # always padded up to the next block boundary
    assert len(ct) == (size // 16 + 1) * 16
    assert decrypt(KEY, IV, ct, Padding.PKCS7) == plain


def test_pkcs7_bad_padding_raises():
    # a full block of zeros is never valid PKCS#7 padding
    ct = encrypt(KEY, IV, b"\x00" * 16, Padding.NONE)
    with pytest.raises(PaddingInvalidError):
        decrypt(KEY, IV, ct, Padding.PKCS7)


def test_pkcs7_empty_ciphertext_raises():
    with pytest.raises(PaddingInvalidError):
        decrypt(KEY, IV, b"", Padding.PKCS7)


def test_decrypt_unaligned_ciphertext_raises():
    with pytest.raises(CipherError):
        decrypt(KEY, IV, b"x" * 20, Padding.PKCS7)


def test_secure_bytes_inputs_accepted():
    ct = encrypt(SecureBytes(KEY), SecureBytes(IV), SecureBytes(b"secret"), Padding.PKCS7)
    assert decrypt(KEY, IV, ct, Padding.PKCS7) == b"secret"


def test_wrong_key_size_rejected():
    with pytest.raises(ValueError, match="32 bytes"):
        encrypt(b"short", IV, b"", Padding.PKCS7)


def test_wrong_iv_size_rejected():
    with pytest.raises(ValueError, match="16 bytes"):
        encrypt(KEY, b"short", b"", Padding.PKCS7)
