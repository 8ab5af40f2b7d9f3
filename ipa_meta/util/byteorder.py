"""Endianness-aware integer and float reads over a byte buffer."""

import struct

from ipa_meta.errors import TruncatedDataError

# Fixed widths with a matching struct format character
_UINT_FORMATS = {1: "B", 2: "H", 4: "I", 8: "Q"}


def _check_bounds(buf: bytes | memoryview, offset: int, width: int) -> None:
    if offset < 0 or width < 0 or offset + width > len(buf):
        raise TruncatedDataError(
            f"Cannot read {width} bytes at offset {offset} (buffer is {len(buf)} bytes)"
        )


def read_uint(buf: bytes | memoryview, offset: int, width: int, byteorder: str = "little") -> int:
    """
    Read an unsigned integer of arbitrary width.

    Args:
        buf: Buffer to read from (borrowed, never copied)
        offset: Byte offset of the first byte
        width: Number of bytes; 1, 2, 4 and 8 use struct, other widths are summed byte by byte
        byteorder: "little" or "big"

    Returns:
        The decoded integer

    Raises:
        TruncatedDataError: If the read extends past the end of the buffer
    """
    _check_bounds(buf, offset, width)
    fmt = _UINT_FORMATS.get(width)
    if fmt:
        prefix = "<" if byteorder == "little" else ">"
        return struct.unpack_from(prefix + fmt, buf, offset)[0]
    return int.from_bytes(bytes(buf[offset:offset + width]), byteorder)


def read_u16le(buf: bytes | memoryview, offset: int) -> int:
    return read_uint(buf, offset, 2, "little")


def read_u32le(buf: bytes | memoryview, offset: int) -> int:
    return read_uint(buf, offset, 4, "little")


def read_uint_be(buf: bytes | memoryview, offset: int, width: int) -> int:
    return read_uint(buf, offset, width, "big")


def read_int_be(buf: bytes | memoryview, offset: int, width: int) -> int:
    """Read a two's-complement big-endian integer."""
    _check_bounds(buf, offset, width)
    return int.from_bytes(bytes(buf[offset:offset + width]), "big", signed=True)


def read_float_be(buf: bytes | memoryview, offset: int, width: int) -> float:
    """Read a big-endian IEEE-754 float (width 4) or double (width 8)."""
    if width not in (4, 8):
        raise ValueError(f"Unsupported float width: {width}")
    _check_bounds(buf, offset, width)
    return struct.unpack_from(">f" if width == 4 else ">d", buf, offset)[0]
