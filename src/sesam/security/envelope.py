"""Double envelope encryption of the key generation key (KGK) and a payload.

Envelope layout (raw bytes, no length fields):
- 1 byte: format flag (0x01 = AES-256 encrypted masterkey, version 1)
- 32 bytes: outer salt, cleartext
- 112 bytes: KGK bundle (inner salt 32 || inner IV 16 || KGK 64),
  AES-256-CBC without padding under key/IV derived from the master password
- n bytes: payload, optionally compressed, AES-256-CBC with PKCS#7 padding
  under a blob key derived from the KGK and the inner salt

Changing the master password only re-encrypts the 112-byte bundle; the
payload ciphertext is untouched.

There is no MAC. A foreign or corrupted envelope, or a wrong password, is
only caught when padding or decompression happens to fail, so a successful
``decode`` is not proof that the password was right.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from sesam.core import compression
from sesam.core.exceptions import (
    CipherError,
    CompressionError,
    EnvelopeDecryptionError,
    FormatMismatchError,
    MalformedEnvelopeError,
)

from . import cipher
from .cipher import Padding
from .constants import (
    AES_BLOCK_SIZE,
    DEFAULT_COMPRESSION_LEVEL,
    FORMAT_AES256_ENCRYPTED_MASTERKEY,
    HEADER_SIZE,
    KGK_SIZE,
    MIN_ENVELOPE_SIZE,
    SALT_SIZE,
)
from .kdf import derive_blob_key, derive_key_and_iv, generate_salt
from .random_source import EntropySource, random_bytes
from .secure import SecureBytes

logger = logging.getLogger(__name__)

_CANNOT_OPEN = "cannot open envelope"


@dataclass(frozen=True)
class EnvelopeHeader:
    """Cleartext view of an envelope; nothing in here is decrypted."""

    format_flag: int
    salt: bytes
    encrypted_kgk: bytes
    ciphertext: bytes

    @property
    def size(self) -> int:
        return HEADER_SIZE + len(self.encrypted_kgk) + len(self.ciphertext)


def parse_header(blob: bytes) -> EnvelopeHeader:
    """Split ``blob`` into its fields after checking flag and minimum size."""
    blob = bytes(blob)
    if not blob:
        raise MalformedEnvelopeError("empty envelope")
    if blob[0] != FORMAT_AES256_ENCRYPTED_MASTERKEY:
        raise FormatMismatchError(f"unsupported envelope format flag 0x{blob[0]:02x}")
    if len(blob) < MIN_ENVELOPE_SIZE:
        raise MalformedEnvelopeError(
            f"envelope too short: {len(blob)} bytes (minimum {MIN_ENVELOPE_SIZE})"
        )
    return EnvelopeHeader(
        format_flag=blob[0],
        salt=blob[1:HEADER_SIZE],
        encrypted_kgk=blob[HEADER_SIZE:MIN_ENVELOPE_SIZE],
        ciphertext=blob[MIN_ENVELOPE_SIZE:],
    )


def encode(
    key,
    iv,
    salt: bytes,
    kgk,
    data,
    compress: bool = False,
    *,
    compression_level: int = DEFAULT_COMPRESSION_LEVEL,
    random_source: Optional[EntropySource] = None,
) -> bytes:
    """
    Build an envelope from an already derived outer key/IV.

    ``key`` and ``iv`` must come from :func:`derive_key_and_iv` over the
    master password and ``salt``; ``salt`` is stored in cleartext so that
    :func:`decode` can derive them again. Fresh inner salt and IV are drawn
    from ``random_source`` (the process-wide source by default).
    """
    if len(salt) != SALT_SIZE:
        raise ValueError(f"salt must be {SALT_SIZE} bytes")
    if len(kgk) != KGK_SIZE:
        raise ValueError(f"KGK must be {KGK_SIZE} bytes")

    inner_salt = random_bytes(SALT_SIZE, random_source)
    inner_iv = random_bytes(AES_BLOCK_SIZE, random_source)

    with SecureBytes(inner_salt) + inner_iv + SecureBytes(kgk) as bundle:
        encrypted_kgk = cipher.encrypt(key, iv, bundle, Padding.NONE)

    with derive_blob_key(kgk, inner_salt) as blob_key:
        if compress:
            with SecureBytes(compression.compress(data, compression_level)) as packed:
                ciphertext = cipher.encrypt(blob_key, inner_iv, packed, Padding.PKCS7)
        else:
            ciphertext = cipher.encrypt(blob_key, inner_iv, data, Padding.PKCS7)

    logger.debug("encoded envelope with %d byte payload ciphertext", len(ciphertext))
    return bytes([FORMAT_AES256_ENCRYPTED_MASTERKEY]) + bytes(salt) + encrypted_kgk + ciphertext


def _open_bundle(master_password, header: EnvelopeHeader) -> SecureBytes:
    key, iv = derive_key_and_iv(master_password, header.salt)
    with key, iv:
        return cipher.decrypt(key, iv, header.encrypted_kgk, Padding.NONE)


def _open_payload(bundle: SecureBytes, header: EnvelopeHeader, uncompress: bool) -> Tuple[bytes, SecureBytes]:
    inner_salt = bytes(bundle.raw[:SALT_SIZE])
    kgk = bundle[SALT_SIZE + AES_BLOCK_SIZE:]
    try:
        with bundle[SALT_SIZE:SALT_SIZE + AES_BLOCK_SIZE] as inner_iv, \
                derive_blob_key(kgk, inner_salt) as blob_key:
            plain = cipher.decrypt(blob_key, inner_iv, header.ciphertext, Padding.PKCS7)
        with plain:
            payload = compression.uncompress(plain.raw) if uncompress else bytes(plain.raw)
    except BaseException:
        kgk.wipe()
        raise
    return payload, kgk


def decode(master_password, blob: bytes, uncompress: bool = False) -> Tuple[bytes, SecureBytes]:
    """
    Open an envelope and return ``(payload, kgk)``.

    Raises :class:`FormatMismatchError` or :class:`MalformedEnvelopeError`
    before any key derivation, and :class:`EnvelopeDecryptionError` for every
    failure that depends on the password or ciphertext.
    """
    header = parse_header(blob)
    try:
        with _open_bundle(master_password, header) as bundle:
            return _open_payload(bundle, header, uncompress)
    except (CipherError, CompressionError):
        logger.debug("envelope could not be opened")
        raise EnvelopeDecryptionError(_CANNOT_OPEN) from None


def seal(
    master_password,
    kgk,
    data,
    compress: bool = False,
    *,
    compression_level: int = DEFAULT_COMPRESSION_LEVEL,
    random_source: Optional[EntropySource] = None,
) -> bytes:
    """Derive outer key/IV from ``master_password`` under a fresh salt and encode."""
    salt = generate_salt(random_source=random_source)
    key, iv = derive_key_and_iv(master_password, salt)
    with key, iv:
        return encode(
            key,
            iv,
            salt,
            kgk,
            data,
            compress,
            compression_level=compression_level,
            random_source=random_source,
        )


def rewrap(
    old_password,
    new_password,
    blob: bytes,
    uncompress: bool = False,
    *,
    random_source: Optional[EntropySource] = None,
) -> bytes:
    """
    Re-encrypt the KGK bundle under ``new_password``.

    The payload is decrypted once with the old password so that a mistyped
    password fails here rather than destroying the KGK; the payload
    ciphertext itself is copied over byte for byte.
    """
    header = parse_header(blob)
    try:
        with _open_bundle(old_password, header) as bundle:
            payload, kgk = _open_payload(bundle, header, uncompress)
            kgk.wipe()
            del payload

            salt = generate_salt(random_source=random_source)
            key, iv = derive_key_and_iv(new_password, salt)
            with key, iv:
                encrypted_kgk = cipher.encrypt(key, iv, bundle, Padding.NONE)
    except (CipherError, CompressionError):
        logger.debug("envelope could not be opened for rewrapping")
        raise EnvelopeDecryptionError(_CANNOT_OPEN) from None

    logger.info("master password changed; payload ciphertext kept (%d bytes)", len(header.ciphertext))
    return bytes([FORMAT_AES256_ENCRYPTED_MASTERKEY]) + salt + encrypted_kgk + header.ciphertext


def update_payload(
    master_password,
    blob: bytes,
    data,
    compress: bool = False,
    *,
    uncompress: bool = False,
    compression_level: int = DEFAULT_COMPRESSION_LEVEL,
    random_source: Optional[EntropySource] = None,
) -> bytes:
    """
    Replace the payload of an envelope, keeping its KGK.

    ``uncompress`` must match how the current payload was sealed; the old
    payload is fully opened so a mistyped password is refused before the KGK
    is sealed again.
    """
    _, kgk = decode(master_password, blob, uncompress)
    with kgk:
        return seal(
            master_password,
            kgk,
            data,
            compress,
            compression_level=compression_level,
            random_source=random_source,
        )
