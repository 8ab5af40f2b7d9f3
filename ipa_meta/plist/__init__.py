"""Property list parsing."""

from .binary import parse_binary
from .reader import parse_plist
from .strings import parse_strings_or_plist
from .values import (
    PlistArray,
    PlistBool,
    PlistBytes,
    PlistDict,
    PlistInteger,
    PlistNull,
    PlistReal,
    PlistText,
    PlistValue,
    as_string,
)
from .xmlplist import parse_xml

__all__ = [
    "PlistArray",
    "PlistBool",
    "PlistBytes",
    "PlistDict",
    "PlistInteger",
    "PlistNull",
    "PlistReal",
    "PlistText",
    "PlistValue",
    "as_string",
    "parse_binary",
    "parse_plist",
    "parse_strings_or_plist",
    "parse_xml",
]
