"""AES-256-CBC with an explicit padding policy per call.

``Padding.NONE`` is only used for the fixed-size KGK bundle, whose length is a
multiple of the block size by construction. ``Padding.PKCS7`` is used for the
payload, whose length is arbitrary.
"""
from __future__ import annotations

import enum

from cryptography.hazmat.primitives import padding as sym_padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from sesam.core.exceptions import CipherError, PaddingInvalidError

from .constants import AES_BLOCK_SIZE, AES_KEY_SIZE
from .secure import SecureBytes


class Padding(enum.Enum):
    NONE = "none"
    PKCS7 = "pkcs7"


def _buffer(value):
    return value.raw if isinstance(value, SecureBytes) else value


def _cipher(key, iv) -> Cipher:
    key, iv = _buffer(key), _buffer(iv)
    if len(key) != AES_KEY_SIZE:
        raise ValueError(f"AES-256 key must be {AES_KEY_SIZE} bytes")
    if len(iv) != AES_BLOCK_SIZE:
        raise ValueError(f"IV must be {AES_BLOCK_SIZE} bytes")
    return Cipher(algorithms.AES(key), modes.CBC(iv))


def encrypt(key, iv, plain, padding: Padding) -> bytes:
    plain = _buffer(plain)
    encryptor = _cipher(key, iv).encryptor()

    if padding is Padding.PKCS7:
        padder = sym_padding.PKCS7(AES_BLOCK_SIZE * 8).padder()
        with SecureBytes(padder.update(plain) + padder.finalize()) as padded:
            return encryptor.update(padded.raw) + encryptor.finalize()

    if len(plain) % AES_BLOCK_SIZE:
        raise CipherError("unpadded input must be a multiple of the block size")
    return encryptor.update(plain) + encryptor.finalize()


def decrypt(key, iv, data, padding: Padding) -> SecureBytes:
    data = _buffer(data)
    if len(data) % AES_BLOCK_SIZE:
        raise CipherError("ciphertext must be a multiple of the block size")

    decryptor = _cipher(key, iv).decryptor()
    plain = SecureBytes(decryptor.update(data) + decryptor.finalize())
    if padding is Padding.NONE:
        return plain

    with plain:
        if not len(plain):
            raise PaddingInvalidError("invalid padding")
        unpadder = sym_padding.PKCS7(AES_BLOCK_SIZE * 8).unpadder()
        try:
            return SecureBytes(unpadder.update(plain.raw) + unpadder.finalize())
        except ValueError:
            raise PaddingInvalidError("invalid padding") from None
