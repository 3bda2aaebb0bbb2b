"""Security helpers: key derivation and envelope encryption for SESAM.

This package provides:
- PBKDF2 derivation of the outer key/IV (master password) and blob key (KGK)
- AES-256-CBC with selectable padding
- the versioned double-envelope format that keeps the KGK at rest
- an injectable entropy source and zero-on-release secret buffers
"""

from .kdf import generate_salt, generate_kgk, derive_blob_key, derive_key_and_iv
from .cipher import Padding
from .envelope import (
    EnvelopeHeader,
    encode,
    decode,
    seal,
    rewrap,
    update_payload,
    parse_header,
)
from .random_source import RandomSource, get_random_source
from .secure import SecureBytes

__all__ = [
    "generate_salt",
    "generate_kgk",
    "derive_blob_key",
    "derive_key_and_iv",
    "Padding",
    "EnvelopeHeader",
    "encode",
    "decode",
    "seal",
    "rewrap",
    "update_payload",
    "parse_header",
    "RandomSource",
    "get_random_source",
    "SecureBytes",
]
