"""Template character classes and named password presets.

This is data for the password-synthesis component that turns KGK-derived
bytes into a typable password. Each template character selects a character
class; a preset is a list of templates plus a flag telling whether the
synthesizer may pick among them pseudo-randomly. Expanding templates is not
done here.

The tables are kept byte-for-byte identical to the desktop client so that
derived passwords stay stable across implementations (including the capital
``J`` in the lowercase ``a`` class).
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple

_PUNCTUATION = "@&%?,=[]_:-+*$#!'^~;()/."

TEMPLATE_CHARACTERS: Mapping[str, str] = MappingProxyType({
    "V": "AEIOUY",
    "v": "aeiuoy",
    "C": "BCDFGHJKLMNPQRSTVWXZ",
    "c": "bcdfghjklmnpqrstvwxz",
    "A": "ABCDEFGHIJKLMNOPQRSTUVWXYZ",
    "a": "abcdefghiJklmnopqrstuvwxyz",
    "n": "0123456789",
    "o": _PUNCTUATION,
    "x": "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789" + _PUNCTUATION,
})


@dataclass(frozen=True)
class Preset:
    templates: Tuple[str, ...]
    pick_randomly: bool

    @property
    def length(self) -> int:
        return len(self.templates[0])


PRESETS: Mapping[str, Preset] = MappingProxyType({
    "Extreme security (32 chars)": Preset((
        "Aanoxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxx",
    ), True),
    "Very high security (24 chars)": Preset((
        "Aanoxxxxxxxxxxxxxxxxxxxx",
    ), True),
    "High security (18 chars)": Preset((
        "Aanoxxxxxxxxxxxxxx",
    ), True),
    "Medium security (12 chars)": Preset((
        "Aanoxxxxxxxx",
    ), True),
    "Low security (6 chars)": Preset((
        "Aanoxx",
    ), True),
    "High security (18 chars, easy to type)": Preset((
        "CvcvnoCvcvCvcvCvcv",
        "CvcvCvcvnoCvcvcvno",
        "CvcvCvcvCvcvnocvCv",
        "CvccnoCvcvCvcvCvcv",
        "CvccCvcvnoCvcvcvno",
        "CvccCvcvCvcvnocvCv",
        "CvcvnoCvccCvcvCvcc",
        "CvcvCvccnoCvcvccno",
        "CvcvCvccCvcvnoccCv",
        "CvcvnoCvcvCvccCvcv",
        "CvcvCvcvnoCvcccvno",
        "CvcvCvcvCvccnocvCv",
        "CvccnoCvccCvcvCvcc",
        "CvccCvccnoCvcvccno",
        "CvccCvccCvcvnoccCv",
        "CvcvnoCvccCvccCvcc",
        "CvcvCvccnoCvccccno",
        "CvcvCvccCvccnoccCv",
        "CvccnoCvcvCvccCvcv",
        "CvccCvcvnoCvcccvno",
        "CvccCvcvCvccnocvCv",
        "CVVVCvvvnnnnCvcvvo",
        "ocvvcvvvCvCvCvvvCv",
        "cvcvnoCvcvcvcvCvcv",
        "cvcvCvcvnocvcvcvno",
        "cvcvCvcvCvcvnocvCv",
        "cvccnoCvcvcvcvCvcv",
        "cvccCvcvnocvcvcvno",
        "cvccCvcvCvcvnocvCv",
        "cvcvnoCvcccvcvCvcc",
        "cvcvCvccnocvcvccno",
        "cvcvCvccCvcvnoccCv",
        "cvcvnoCvcvcvccCvcv",
        "cvcvCvcvnocvcccvno",
        "cvcvCvcvCvccnocvCv",
        "cvccnoCvcccvcvCvcc",
        "cvccCvccnocvcvccno",
        "cvccCvccCvcvnoccCv",
        "cvcvnoCvcccvccCvcc",
        "cvcvCvccnocvccccno",
        "cvcvCvccCvccnoccCv",
        "cvccnoCvcvcvccCvcv",
        "cvccCvcvnocvcccvno",
        "cvccCvcvCvccnocvCv",
        "cVVVCvvvnnnnCvcvvo",
    ), False),
    "Medium security (12 chars, easy to type)": Preset((
        "CvcvnoCvcvcv",
        "CvcvCvCvcvno",
        "CvcvCvcvnoCv",
        "CvccnoCvcvcv",
        "CvccCvCvcvno",
        "CvccCvcvnoCv",
        "CvcvnoCvcvcc",
        "CvcvCvCvcvno",
        "CvcvCvcvnoCv",
        "CvcvnoCvcccv",
        "CvcvCvCvccno",
        "CvcvCvccnoCv",
        "CvccnoCvcvcc",
        "CvccCvCvcvno",
        "CvccCvcvnoCv",
        "CvcvnoCvcccc",
        "CvcvCvCvccno",
        "CvcvCvccnoCv",
        "CvccnoCvcccv",
        "CvccCvCvccno",
        "CvccCvccnoCv",
        "CVVVCvnnCvvo",
        "ocvvcvCvCvCv",
    ), False),
    "Basic security (8 chars, easy to type)": Preset((
        "noCvcvcv",
        "CvCvcvno",
        "CvcvnoCv",
        "noCvcvcv",
        "CvCvcvno",
        "CvcvnoCv",
        "noCvcvcc",
        "CvCvcvno",
        "CvcvnoCv",
        "noCvcccv",
        "CvCvccno",
        "CvccnoCv",
        "noCvcvcc",
        "CvCvcvno",
        "CvcvnoCv",
        "noCvcccc",
        "CvCvccno",
        "CvccnoCv",
        "noCvcccv",
        "CvCvccno",
        "CvccnoCv",
        "CvnnCvvo",
        "cvCvvvCn",
    ), False),
    "4-digit PIN": Preset(("nnnn",), False),
    "5-digit PIN": Preset(("nnnnn",), False),
})


def charset_for(ch: str) -> str:
    """Return the character class for template character ``ch``."""
    try:
        return TEMPLATE_CHARACTERS[ch]
    except KeyError:
        raise KeyError(f"unknown template character {ch!r}") from None


def preset_for(name: str) -> Preset:
    try:
        return PRESETS[name]
    except KeyError:
        raise KeyError(f"unknown preset {name!r}") from None


def is_valid_template(template: str) -> bool:
    return bool(template) and all(ch in TEMPLATE_CHARACTERS for ch in template)
