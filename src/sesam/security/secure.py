"""Owned secret buffers that are overwritten with zeros when released.

Python gives no hard guarantee about copies made by the interpreter or by
C extensions, so this is best-effort: the buffer we own is a ``bytearray``
and it is zeroed on ``wipe()``, on context-manager exit and on garbage
collection. Callers should pass ``SecureBytes`` (or its ``raw`` buffer)
around instead of converting to ``bytes``.
"""
from __future__ import annotations

import hmac
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]


class SecureBytes:
    """A mutable secret buffer with deterministic zeroization."""

    __slots__ = ("_buf", "_wiped")

    def __init__(self, data: BytesLike | "SecureBytes" = b""):
        if isinstance(data, SecureBytes):
            data = data.raw
        self._buf = bytearray(data)
        self._wiped = False

    @classmethod
    def from_secret(cls, secret: str | BytesLike | "SecureBytes") -> "SecureBytes":
        """Wrap a password or key, encoding ``str`` input as UTF-8."""
        if isinstance(secret, str):
            return cls(secret.encode("utf-8"))
        return cls(secret)

    @property
    def raw(self) -> bytearray:
        """The backing buffer. Do not keep references to it."""
        if self._wiped:
            raise ValueError("secret buffer has been wiped")
        return self._buf

    @property
    def wiped(self) -> bool:
        return self._wiped

    def wipe(self) -> None:
        """Overwrite the backing memory with zeros."""
        buf = self._buf
        for i in range(len(buf)):
            buf[i] = 0
        self._wiped = True

    def __enter__(self) -> "SecureBytes":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __del__(self):
        # interpreter shutdown may already have torn down the slots
        try:
            self.wipe()
        except AttributeError:
            pass

    def __len__(self) -> int:
        return len(self._buf)

    def __bytes__(self) -> bytes:
        return bytes(self.raw)

    def __getitem__(self, item: slice) -> "SecureBytes":
        if not isinstance(item, slice):
            raise TypeError("SecureBytes only supports slicing")
        out = SecureBytes()
        out._buf = self.raw[item]
        return out

    def __add__(self, other: BytesLike | "SecureBytes") -> "SecureBytes":
        if isinstance(other, SecureBytes):
            other = other.raw
        head = self.raw
        # allocate once so no intermediate buffer is left behind unwiped
        buf = bytearray(len(head) + len(other))
        buf[: len(head)] = head
        buf[len(head):] = other
        out = SecureBytes()
        out._buf = buf
        return out

    def __eq__(self, other) -> bool:
        if isinstance(other, SecureBytes):
            other = other.raw
        if not isinstance(other, (bytes, bytearray, memoryview)):
            return NotImplemented
        return hmac.compare_digest(self.raw, other)

    __hash__ = None

    def __repr__(self) -> str:
        state = "wiped" if self._wiped else f"{len(self._buf)} bytes"
        return f"<SecureBytes {state}>"
