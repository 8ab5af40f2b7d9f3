"""Property-list value graph: one frozen dataclass per variant."""

import math
from dataclasses import dataclass
from typing import Union

from ipa_meta.errors import PlistKeyError
from ipa_meta.util.text import decode_text


@dataclass(frozen=True)
class PlistNull:
    pass


@dataclass(frozen=True)
class PlistBool:
    value: bool


@dataclass(frozen=True)
class PlistInteger:
    value: int


@dataclass(frozen=True)
class PlistReal:
    value: float


@dataclass(frozen=True)
class PlistBytes:
    value: bytes


@dataclass(frozen=True)
class PlistText:
    value: str


@dataclass(frozen=True)
class PlistArray:
    items: tuple["PlistValue", ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)


@dataclass(frozen=True)
class PlistDict:
    """
    Dictionary as an ordered tuple of (key, value) pairs.

    Keys are kept as parsed so a non-text key does not fail parsing; it only
    fails when the dictionary is turned into a mapping with to_mapping().
    """

    entries: tuple[tuple["PlistValue", "PlistValue"], ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, key: str, default: "PlistValue | None" = None) -> "PlistValue | None":
        """Look up a text key; when a key repeats, the last value wins."""
        for entry_key, value in reversed(self.entries):
            if isinstance(entry_key, PlistText) and entry_key.value == key:
                return value
        return default

    def keys(self) -> list[str]:
        return list(dict.fromkeys(k.value for k, _ in self.entries if isinstance(k, PlistText)))

    def to_mapping(self) -> dict[str, "PlistValue"]:
        """
        Return the entries as a dict keyed by text.

        Raises:
            PlistKeyError: If any key is not text
        """
        out: dict[str, PlistValue] = {}
        for key, value in self.entries:
            if not isinstance(key, PlistText):
                raise PlistKeyError(f"Dictionary key is not text: {key!r}")
            out[key.value] = value
        return out


PlistValue = Union[
    PlistNull, PlistBool, PlistInteger, PlistReal, PlistBytes, PlistText, PlistArray, PlistDict
]


def _format_real(value: float) -> str:
    if math.isfinite(value) and value == int(value) and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def as_string(value: PlistValue | None) -> str:
    """
    Coerce a plist value to a string for metadata fields.

    Text is returned as is, numbers are formatted, true becomes "true" and
    false becomes "", data is decoded as text and everything else is "".
    """
    if isinstance(value, PlistText):
        return value.value
    if isinstance(value, PlistBool):
        return "true" if value.value else ""
    if isinstance(value, PlistInteger):
        return str(value.value)
    if isinstance(value, PlistReal):
        return _format_real(value.value)
    if isinstance(value, PlistBytes):
        return decode_text(value.value)
    return ""

