"""
Tolerant reader for XML property lists.

A small recursive-descent scanner over the plist element subset. It never
raises on malformed input: unknown elements are skipped, unterminated ones end
the scan, a key without a value is dropped, and a value without a key is
ignored.
"""

import base64
import binascii
import re
from dataclasses import dataclass

from ipa_meta.plist.values import (
    PlistArray,
    PlistBool,
    PlistBytes,
    PlistDict,
    PlistInteger,
    PlistNull,
    PlistReal,
    PlistText,
    PlistValue,
)

MAX_DEPTH = 256

_TAG_RE = re.compile(r"<(/?)([A-Za-z_][\w.:-]*)([^>]*?)(/?)>")
_ENTITY_RE = re.compile(r"&(lt|gt|amp|quot|apos|#[0-9]+|#[xX][0-9a-fA-F]+);")
_NAMED_ENTITIES = {"lt": "<", "gt": ">", "amp": "&", "quot": '"', "apos": "'"}
_LEAF_ELEMENTS = {"string", "integer", "real", "data", "date"}


def _replace_entity(match: re.Match) -> str:
    ref = match.group(1)
    if ref in _NAMED_ENTITIES:
        return _NAMED_ENTITIES[ref]
    try:
        code = int(ref[2:], 16) if ref[1] in "xX" else int(ref[1:], 10)
        return chr(code)
    except (ValueError, OverflowError):
        return match.group(0)


def decode_entities(text: str) -> str:
    """Decode the five predefined XML entities and numeric character references."""
    return _ENTITY_RE.sub(_replace_entity, text)


@dataclass(frozen=True)
class _Tag:
    name: str
    closing: bool
    empty: bool
    start: int


class _Scanner:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def next_tag(self) -> _Tag | None:
        text = self.text
        while True:
            start = text.find("<", self.pos)
            if start < 0:
                self.pos = len(text)
                return None
            if text.startswith("<!--", start):
                end = text.find("-->", start + 4)
                self.pos = len(text) if end < 0 else end + 3
                continue
            if text.startswith("<?", start) or text.startswith("<!", start):
                end = text.find(">", start)
                self.pos = len(text) if end < 0 else end + 1
                continue
            match = _TAG_RE.match(text, start)
            if not match:
                self.pos = start + 1
                continue
            self.pos = match.end()
            return _Tag(
                name=match.group(2).lower(),
                closing=bool(match.group(1)),
                empty=bool(match.group(4)),
                start=start,
            )

    def read_text(self, name: str) -> str | None:
        """Return the raw text up to the closing tag of name, or None if it never closes."""
        close = re.compile(r"</\s*%s\s*>" % re.escape(name), re.IGNORECASE)
        match = close.search(self.text, self.pos)
        if not match:
            self.pos = len(self.text)
            return None
        inner = self.text[self.pos:match.start()]
        self.pos = match.end()
        return inner

    def skip(self, tag: _Tag) -> None:
        """Skip past the element opened by tag, including nested elements of the same name."""
        if tag.empty:
            return
        depth = 1
        while depth:
            nxt = self.next_tag()
            if nxt is None:
                return
            if nxt.name != tag.name or nxt.empty:
                continue
            depth += -1 if nxt.closing else 1

    def value(self, tag: _Tag, depth: int) -> PlistValue | None:
        if tag.closing:
            return None
        if depth > MAX_DEPTH:
            self.skip(tag)
            return None

        name = tag.name
        if name == "dict":
            return PlistDict() if tag.empty else self.dict_body(depth)
        if name == "array":
            return PlistArray() if tag.empty else self.array_body(depth)
        if name in ("true", "false"):
            self.skip(tag)
            return PlistBool(name == "true")

        if name not in _LEAF_ELEMENTS:
            self.skip(tag)
            return None

        text = "" if tag.empty else self.read_text(name)
        if text is None:
            return None
        if name == "string":
            return PlistText(decode_entities(text))
        if name == "integer":
            raw = text.strip()
            try:
                if raw.lower().lstrip("+-").startswith("0x"):
                    return PlistInteger(int(raw, 16))
                return PlistInteger(int(raw, 10))
            except ValueError:
                return None
        if name == "real":
            try:
                return PlistReal(float(text.strip()))
            except ValueError:
                return None
        if name == "data":
            try:
                return PlistBytes(base64.b64decode("".join(text.split()), validate=True))
            except (binascii.Error, ValueError):
                return None
        # date
        return PlistNull()

    def dict_body(self, depth: int) -> PlistDict:
        entries: list[tuple[PlistValue, PlistValue]] = []
        key: str | None = None
        while True:
            tag = self.next_tag()
            if tag is None:
                break
            if tag.closing:
                if tag.name == "dict":
                    break
                continue
            if tag.name == "key":
                raw = "" if tag.empty else self.read_text("key")
                if raw is None:
                    break
                key = decode_entities(raw.strip())
                continue
            item = self.value(tag, depth + 1)
            if key is not None and item is not None:
                entries.append((PlistText(key), item))
            key = None
        return PlistDict(tuple(entries))

    def array_body(self, depth: int) -> PlistArray:
        items: list[PlistValue] = []
        while True:
            tag = self.next_tag()
            if tag is None:
                break
            if tag.closing:
                if tag.name == "array":
                    break
                continue
            item = self.value(tag, depth + 1)
            if item is not None:
                items.append(item)
        return PlistArray(tuple(items))


def parse_xml(text: str) -> PlistValue | None:
    """
    Parse an XML property list.

    The first value element inside <plist> (or at the top of the document) is
    returned. A document that starts directly with <key> elements is read as
    the body of an implicit dictionary.

    Args:
        text: Decoded XML text

    Returns:
        The root value, or None if the text holds no plist value element
    """
    scanner = _Scanner(text)
    while True:
        tag = scanner.next_tag()
        if tag is None:
            return None
        if tag.closing or tag.name == "plist":
            continue
        if tag.name == "key":
            scanner.pos = tag.start
            return scanner.dict_body(0)
        result = scanner.value(tag, 0)
        if result is not None:
            return result
