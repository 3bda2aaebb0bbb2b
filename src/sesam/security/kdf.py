from typing import Optional, Tuple

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .constants import (
    AES_BLOCK_SIZE,
    AES_KEY_SIZE,
    DOMAIN_ITERATIONS,
    KGK_ITERATIONS,
    KGK_SIZE,
    SALT_SIZE,
)
from .random_source import EntropySource, random_bytes
from .secure import SecureBytes


def generate_salt(length: int = SALT_SIZE, random_source: Optional[EntropySource] = None) -> bytes:
    """Return a fresh random salt."""
    return random_bytes(length, random_source)


def generate_kgk(random_source: Optional[EntropySource] = None) -> SecureBytes:
    """Create the key generation key for a new identity."""
    return SecureBytes(random_bytes(KGK_SIZE, random_source))


def _pbkdf2(secret, salt: bytes, iterations: int, algorithm: hashes.HashAlgorithm, length: int) -> SecureBytes:
    if iterations <= 0:
        raise ValueError("iteration count must be positive")
    if not salt:
        raise ValueError("salt must not be empty")

    kdf = PBKDF2HMAC(
        algorithm=algorithm,
        length=length,
        salt=bytes(salt),
        iterations=iterations,
    )
    with SecureBytes.from_secret(secret) as material:
        return SecureBytes(kdf.derive(material.raw))


def derive_blob_key(secret, salt: bytes, iterations: int = KGK_ITERATIONS) -> SecureBytes:
    """
    Derive the payload ("blob") key from the KGK using PBKDF2-HMAC-SHA256.

    The KGK is already high-entropy so a light work factor is enough here.
    Returns a 32-byte AES key.
    """
    return _pbkdf2(secret, salt, iterations, hashes.SHA256(), AES_KEY_SIZE)


def derive_key_and_iv(
    secret,
    salt: bytes,
    iterations: int = DOMAIN_ITERATIONS,
) -> Tuple[SecureBytes, SecureBytes]:
    """
    Derive the outer AES key and IV from the master password.

    PBKDF2-HMAC-SHA384 yields 48 bytes: the first 32 are the key, the next 16
    the IV. ``secret`` may be ``str`` (encoded as UTF-8), bytes-like or
    :class:`SecureBytes`.
    """
    with _pbkdf2(secret, salt, iterations, hashes.SHA384(), AES_KEY_SIZE + AES_BLOCK_SIZE) as hash_:
        key = hash_[:AES_KEY_SIZE]
        iv = hash_[AES_KEY_SIZE:AES_KEY_SIZE + AES_BLOCK_SIZE]
    return key, iv


def kdf_params_to_dict(salt: bytes) -> dict:
    return {
        "algo": "pbkdf2",
        "salt": bytes(salt).hex(),
        "outer": {"hash": "sha384", "iterations": DOMAIN_ITERATIONS},
        "inner": {"hash": "sha256", "iterations": KGK_ITERATIONS},
    }
