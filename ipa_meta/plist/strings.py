"""Reader for localized .strings resources."""

import re

from ipa_meta.plist.reader import parse_plist
from ipa_meta.plist.values import PlistDict, PlistText, as_string
from ipa_meta.util.text import decode_text

_PAIR_RE = re.compile(r'"((?:[^"\\]|\\.)+)"\s*=\s*"((?:[^"\\]|\\.)*)"\s*;', re.DOTALL)
_ESCAPE_RE = re.compile(r"\\([\\nrt\"'])")
_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", '"': '"', "'": "'", "\\": "\\"}


def unescape_strings_token(token: str) -> str:
    r"""Resolve the \\ \n \r \t \" and \' escapes; other backslashes are left alone."""
    return _ESCAPE_RE.sub(lambda m: _ESCAPES[m.group(1)], token)


def parse_strings_or_plist(data: bytes | memoryview) -> dict[str, str]:
    """
    Parse a .strings resource into a flat string table.

    Some producers ship .strings files as property lists, so a non-empty
    dictionary plist is used directly (non-text keys are skipped, values are
    coerced with as_string). Otherwise the bytes are decoded as text and every
    "KEY" = "VALUE"; pair is collected; anything else in the file is ignored.

    Args:
        data: Raw file contents

    Returns:
        Mapping of key to value (empty when nothing usable is found)
    """
    plist = parse_plist(data)
    if isinstance(plist, PlistDict) and len(plist):
        return {
            key.value: as_string(value)
            for key, value in plist.entries
            if isinstance(key, PlistText)
        }

    text = decode_text(data)
    table: dict[str, str] = {}
    for match in _PAIR_RE.finditer(text):
        table[unescape_strings_token(match.group(1))] = unescape_strings_token(match.group(2))
    return table
