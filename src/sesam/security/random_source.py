"""Entropy provider for salts, IVs and new KGKs.

``RandomSource`` reads from ``os.urandom``. On a host without an OS entropy
source it falls back to a seeded ``random.Random`` sequence, logs a warning
and reports ``degraded = True``; envelopes produced in that mode should not be
trusted. Envelope functions take an explicit ``random_source`` so tests can
substitute a deterministic one; ``get_random_source()`` returns the lazily
built process-wide default.
"""
from __future__ import annotations

import logging
import os
import random
import threading
import time
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class EntropySource(Protocol):
    def random_bytes(self, size: int) -> bytes:
        ...


class RandomSource:
    def __init__(self, urandom: Callable[[int], bytes] = os.urandom):
        self._urandom = urandom
        self._fallback: Optional[random.Random] = None
        self._lock = threading.Lock()

    @property
    def degraded(self) -> bool:
        """True once the deterministic fallback generator is in use."""
        return self._fallback is not None

    def random_bytes(self, size: int) -> bytes:
        """Return ``size`` uniformly distributed bytes."""
        if size < 0:
            raise ValueError("size must be non-negative")
        if size == 0:
            return b""
        if self._fallback is None:
            try:
                return self._urandom(size)
            except NotImplementedError:
                self._enter_fallback()
        with self._lock:
            return bytes(self._fallback.getrandbits(8) for _ in range(size))

    def _enter_fallback(self) -> None:
        with self._lock:
            if self._fallback is not None:
                return
            logger.warning(
                "no OS entropy source available; falling back to a "
                "pseudo-random generator, generated salts and keys are predictable"
            )
            self._fallback = random.Random(time.time_ns() ^ (os.getpid() << 32))


_default_source: Optional[RandomSource] = None
_default_lock = threading.Lock()


def get_random_source() -> RandomSource:
    global _default_source
    if _default_source is None:
        with _default_lock:
            if _default_source is None:
                _default_source = RandomSource()
    return _default_source


def random_bytes(size: int, random_source: Optional[EntropySource] = None) -> bytes:
    source = random_source if random_source is not None else get_random_source()
    return source.random_bytes(size)
