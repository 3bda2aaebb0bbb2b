"""Fixed sizes, iteration counts and the format flag of the envelope layout."""

SALT_SIZE = 32
AES_KEY_SIZE = 256 // 8
AES_BLOCK_SIZE = 16
KGK_SIZE = 64

# PBKDF2 work factors
DOMAIN_ITERATIONS = 32768
KGK_ITERATIONS = 1024

# inner salt || inner IV || KGK
CRYPT_DATA_SIZE = SALT_SIZE + AES_BLOCK_SIZE + KGK_SIZE

FORMAT_AES256_ENCRYPTED_MASTERKEY = 0x01
FORMAT_FLAG_SIZE = 1

HEADER_SIZE = FORMAT_FLAG_SIZE + SALT_SIZE
MIN_ENVELOPE_SIZE = HEADER_SIZE + CRYPT_DATA_SIZE

DEFAULT_COMPRESSION_LEVEL = 9


def _check_invariants() -> None:
    if CRYPT_DATA_SIZE != 112:
        raise AssertionError("KGK bundle must be 112 bytes")
    if CRYPT_DATA_SIZE % AES_BLOCK_SIZE:
        raise AssertionError("KGK bundle must be block aligned for unpadded CBC")
    if AES_KEY_SIZE != 32:
        raise AssertionError("AES-256 needs a 32 byte key")
    if MIN_ENVELOPE_SIZE != 145:
        raise AssertionError("payload ciphertext must start at offset 145")


_check_invariants()
