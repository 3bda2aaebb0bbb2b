"""
Exceptions for the SESAM envelope core
Everything derives from SesamError so callers have a single catch-all
"""


class SesamError(Exception):
    # general container for errors
    pass


class CipherError(SesamError):
    # raised when the block cipher is fed unaligned input
    pass


class PaddingInvalidError(CipherError):
    # raised when PKCS#7 padding does not validate after decryption
    pass


class CompressionError(SesamError):
    # raised on truncated or corrupt compressed frames
    pass


class EnvelopeError(SesamError):
    # raised when an envelope cannot be opened
    pass


class FormatMismatchError(EnvelopeError):
    # raised when the leading format flag is not a known version
    pass


class MalformedEnvelopeError(EnvelopeError):
    # raised when the envelope is too short for header + KGK block
    pass


class EnvelopeDecryptionError(EnvelopeError):
    # wrong password, wrong salt or corrupted ciphertext; never more specific
    pass
