"""Environment-driven settings for the command line front end."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from sesam.security.constants import DEFAULT_COMPRESSION_LEVEL


@dataclass(frozen=True)
class Settings:
    compression_level: int = DEFAULT_COMPRESSION_LEVEL
    log_level: int = logging.WARNING

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from ``SESAM_COMPRESSION_LEVEL`` and ``SESAM_LOG_LEVEL``.

        Unset variables keep their defaults; malformed values raise
        ``ValueError``.
        """
        env = os.environ if environ is None else environ

        level = DEFAULT_COMPRESSION_LEVEL
        raw = env.get("SESAM_COMPRESSION_LEVEL")
        if raw:
            try:
                level = int(raw)
            except ValueError:
                raise ValueError(f"SESAM_COMPRESSION_LEVEL must be an integer, got {raw!r}") from None
            if not -1 <= level <= 9:
                raise ValueError("SESAM_COMPRESSION_LEVEL must be between -1 and 9")

        log_level = logging.WARNING
        raw = env.get("SESAM_LOG_LEVEL")
        if raw:
            resolved = logging.getLevelName(raw.upper())
            if not isinstance(resolved, int):
                raise ValueError(f"unknown SESAM_LOG_LEVEL {raw!r}")
            log_level = resolved

        return cls(compression_level=level, log_level=log_level)
