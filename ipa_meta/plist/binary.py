"""
Parser for Apple's binary property list format (bplist00).

Layout of a binary plist:

    header   8 bytes, "bplist" followed by a 2-character version
    objects  each starting with a one-byte marker
    offsets  object_count big-endian integers, offset_size bytes each
    trailer  last 32 bytes

Trailer fields used here (byte offsets within the trailer):

    6       offset_size      width of each offset-table entry
    7       ref_size         width of each object reference
    8..15   object_count
    16..23  top_object       index of the root object
    24..31  offset_table     start of the offset table

Object references inside arrays and dictionaries are indexes into the offset
table. Dates, UIDs, sets and unknown markers decode to PlistNull.
"""

from ipa_meta.errors import PlistFormatError
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
from ipa_meta.util.byteorder import read_float_be, read_int_be, read_uint_be

MAGIC = b"bplist"
TRAILER_SIZE = 32

# Marker high nibbles
_NULL_BOOL = 0x0
_INT = 0x1
_REAL = 0x2
_DATA = 0x4
_ASCII = 0x5
_UTF16 = 0x6
_ARRAY = 0xA
_DICT = 0xD


class _BinaryPlist:
    """Decoding state for one buffer: the trailer geometry and the offset table."""

    def __init__(self, buf: bytes | memoryview):
        self.buf = buf
        trailer = len(buf) - TRAILER_SIZE
        self.offset_size = buf[trailer + 6]
        self.ref_size = buf[trailer + 7]
        self.object_count = read_uint_be(buf, trailer + 8, 8)
        self.top_object = read_uint_be(buf, trailer + 16, 8)
        offset_table = read_uint_be(buf, trailer + 24, 8)

        if not 1 <= self.offset_size <= 8 or not 1 <= self.ref_size <= 8:
            raise PlistFormatError(
                f"Invalid trailer sizes: offset={self.offset_size} ref={self.ref_size}"
            )
        if self.top_object >= self.object_count:
            raise PlistFormatError(
                f"Top object {self.top_object} out of range ({self.object_count} objects)"
            )
        if offset_table + self.object_count * self.offset_size > trailer:
            raise PlistFormatError("Offset table overlaps the trailer")

        self.offsets = [
            read_uint_be(buf, offset_table + i * self.offset_size, self.offset_size)
            for i in range(self.object_count)
        ]
        # Indexes currently being decoded, to reject reference cycles
        self._active: set[int] = set()

    def root(self) -> PlistValue:
        return self.read_object(self.top_object)

    def _read_length(self, offset: int, info: int) -> tuple[int, int]:
        """Return (length, position of the payload) for a marker at offset."""
        if info != 0xF:
            return info, offset + 1
        marker = self.buf[offset + 1]
        if marker >> 4 != _INT:
            raise PlistFormatError(f"Extended length at {offset} is not an integer")
        width = 1 << (marker & 0xF)
        return read_uint_be(self.buf, offset + 2, width), offset + 2 + width

    def _read_refs(self, position: int, count: int) -> list[int]:
        return [
            read_uint_be(self.buf, position + i * self.ref_size, self.ref_size)
            for i in range(count)
        ]

    def read_object(self, index: int) -> PlistValue:
        if index >= len(self.offsets):
            raise PlistFormatError(f"Object reference {index} out of range")
        if index in self._active:
            raise PlistFormatError(f"Reference cycle through object {index}")
        self._active.add(index)
        try:
            return self._decode(self.offsets[index])
        finally:
            self._active.discard(index)

    def _decode(self, offset: int) -> PlistValue:
        buf = self.buf
        if offset >= len(buf):
            raise PlistFormatError(f"Object offset {offset} past end of data")
        marker = buf[offset]
        kind, info = marker >> 4, marker & 0xF

        if kind == _NULL_BOOL:
            if info == 0x8:
                return PlistBool(False)
            if info == 0x9:
                return PlistBool(True)
            return PlistNull()

        if kind == _INT:
            width = 1 << info
            if width >= 8:
                # 8-byte integers are signed; 16-byte ones keep their value in the low 8 bytes
                return PlistInteger(read_int_be(buf, offset + 1 + width - 8, 8))
            return PlistInteger(read_uint_be(buf, offset + 1, width))

        if kind == _REAL:
            width = 1 << info
            if width not in (4, 8):
                return PlistNull()
            return PlistReal(read_float_be(buf, offset + 1, width))

        if kind in (_DATA, _ASCII):
            length, start = self._read_length(offset, info)
            if start + length > len(buf):
                raise PlistFormatError(f"Object at {offset} runs past end of data")
            raw = bytes(buf[start:start + length])
            if kind == _DATA:
                return PlistBytes(raw)
            return PlistText(raw.decode("utf-8", errors="replace"))

        if kind == _UTF16:
            length, start = self._read_length(offset, info)
            if start + length * 2 > len(buf):
                raise PlistFormatError(f"Object at {offset} runs past end of data")
            raw = bytes(buf[start:start + length * 2])
            return PlistText(raw.decode("utf-16-be", errors="replace"))

        if kind == _ARRAY:
            length, start = self._read_length(offset, info)
            refs = self._read_refs(start, length)
            return PlistArray(tuple(self.read_object(ref) for ref in refs))

        if kind == _DICT:
            length, start = self._read_length(offset, info)
            key_refs = self._read_refs(start, length)
            value_refs = self._read_refs(start + length * self.ref_size, length)
            return PlistDict(tuple(
                (self.read_object(k), self.read_object(v))
                for k, v in zip(key_refs, value_refs)
            ))

        return PlistNull()


def parse_binary(buf: bytes | memoryview) -> PlistValue | None:
    """
    Parse a binary property list.

    Args:
        buf: Raw plist bytes

    Returns:
        The root object, or None if the buffer does not start with the
        bplist magic or is too short to hold a trailer

    Raises:
        PlistFormatError: If the buffer has the magic but its structure is broken
    """
    if len(buf) < TRAILER_SIZE or bytes(buf[:len(MAGIC)]) != MAGIC:
        return None
    try:
        return _BinaryPlist(buf).root()
    except IndexError as e:
        raise PlistFormatError(f"Truncated binary plist: {e}") from e
    except RecursionError as e:
        raise PlistFormatError("Binary plist nested too deeply") from e
