"""
Minimal ZIP central-directory reader.

Only what is needed to pull single files out of an in-memory archive:
the End-Of-Central-Directory record, the central directory and local file
headers. Stored and raw-DEFLATE entries are supported; writing, encryption,
multi-disk and ZIP64 archives are not.
"""

import logging
import re
import zlib
from dataclasses import dataclass
from enum import IntEnum

from ipa_meta.errors import (
    CorruptEntryData,
    LocalHeaderMismatch,
    NoEndOfCentralDirectory,
    TruncatedDataError,
    UnsupportedCompression,
)
from ipa_meta.util.byteorder import read_u16le, read_u32le

logger = logging.getLogger(__name__)

EOCD_SIGNATURE = 0x06054B50
CENTRAL_HEADER_SIGNATURE = 0x02014B50
LOCAL_HEADER_SIGNATURE = 0x04034B50

EOCD_SIZE = 22
CENTRAL_HEADER_SIZE = 46
LOCAL_HEADER_SIZE = 30

# 22-byte EOCD record plus the largest possible trailing comment
MAX_EOCD_SEARCH = EOCD_SIZE + 0xFFFF


class CompressionMethod(IntEnum):
    """ZIP compression methods this reader understands."""

    STORED = 0
    DEFLATED = 8


@dataclass(frozen=True)
class ZipEntry:
    """One file listed in the central directory."""

    name: str
    compression_method: int
    compressed_size: int
    local_header_offset: int


def normalize_path(path: str) -> str:
    """Lowercase a path, turn backslashes into slashes and collapse repeated slashes."""
    return re.sub(r"/+", "/", path.replace("\\", "/")).lower()


def _find_eocd(buf: bytes | memoryview) -> int:
    """
    Find the End-Of-Central-Directory record by scanning backwards.

    Returns:
        Offset of the EOCD signature, or -1 if not found
    """
    lowest = max(0, len(buf) - MAX_EOCD_SEARCH)
    for offset in range(len(buf) - EOCD_SIZE, lowest - 1, -1):
        if read_u32le(buf, offset) == EOCD_SIGNATURE:
            return offset
    return -1


def list_entries(buf: bytes | memoryview) -> list[ZipEntry]:
    """
    List the entries of a ZIP archive in central-directory order.

    A central header with a bad signature, or one that runs past the recorded
    end of the directory, ends the walk; the entries read so far are returned.

    Args:
        buf: The complete archive

    Returns:
        List of ZipEntry

    Raises:
        NoEndOfCentralDirectory: If no EOCD record is found in the last 65,557 bytes
    """
    eocd = _find_eocd(buf)
    if eocd < 0:
        raise NoEndOfCentralDirectory()

    entry_count = read_u16le(buf, eocd + 10)
    cd_size = read_u32le(buf, eocd + 12)
    cd_offset = read_u32le(buf, eocd + 16)
    logger.debug(
        "EOCD at %d: %d entries, central directory %d bytes at %d",
        eocd, entry_count, cd_size, cd_offset,
    )

    entries: list[ZipEntry] = []
    ptr = cd_offset
    end = min(cd_offset + cd_size, len(buf))
    for _ in range(entry_count):
        if ptr + CENTRAL_HEADER_SIZE > end:
            break
        if read_u32le(buf, ptr) != CENTRAL_HEADER_SIGNATURE:
            logger.debug("Central directory walk stopped at offset %d: bad signature", ptr)
            break

        method = read_u16le(buf, ptr + 10)
        compressed_size = read_u32le(buf, ptr + 20)
        name_len = read_u16le(buf, ptr + 28)
        extra_len = read_u16le(buf, ptr + 30)
        comment_len = read_u16le(buf, ptr + 32)
        local_offset = read_u32le(buf, ptr + 42)

        name_start = ptr + CENTRAL_HEADER_SIZE
        name = bytes(buf[name_start:name_start + name_len]).decode("utf-8", errors="replace")
        entries.append(ZipEntry(
            name=name,
            compression_method=method,
            compressed_size=compressed_size,
            local_header_offset=local_offset,
        ))
        ptr = name_start + name_len + extra_len + comment_len

    if len(entries) < entry_count:
        logger.debug("Central directory declared %d entries, read %d", entry_count, len(entries))
    return entries


def inflate_raw(data: bytes | memoryview) -> bytes:
    """
    Inflate a raw DEFLATE stream (no zlib header or checksum).

    Raises:
        zlib.error: If the stream is corrupt or ends before its final block
    """
    decompressor = zlib.decompressobj(-zlib.MAX_WBITS)
    out = decompressor.decompress(bytes(data)) + decompressor.flush()
    if not decompressor.eof:
        raise zlib.error("incomplete or truncated stream")
    return out


def read_entry(buf: bytes | memoryview, entry: ZipEntry) -> bytes:
    """
    Read and decompress one entry.

    Args:
        buf: The complete archive
        entry: An entry returned by list_entries for the same buffer

    Returns:
        The entry's uncompressed bytes (always a copy)

    Raises:
        LocalHeaderMismatch: If no local file header sits at the recorded offset
        UnsupportedCompression: If the entry is neither stored nor deflated
        CorruptEntryData: If a deflated entry is corrupt or truncated
    """
    offset = entry.local_header_offset
    try:
        signature = read_u32le(buf, offset)
        name_len = read_u16le(buf, offset + 26)
        extra_len = read_u16le(buf, offset + 28)
    except TruncatedDataError as e:
        raise LocalHeaderMismatch(entry.name, offset) from e
    if signature != LOCAL_HEADER_SIGNATURE:
        raise LocalHeaderMismatch(entry.name, offset)

    data_start = offset + LOCAL_HEADER_SIZE + name_len + extra_len
    compressed = buf[data_start:data_start + entry.compressed_size]

    if entry.compression_method == CompressionMethod.STORED:
        return bytes(compressed)
    if entry.compression_method == CompressionMethod.DEFLATED:
        try:
            return inflate_raw(compressed)
        except zlib.error as e:
            raise CorruptEntryData(entry.name, str(e)) from e
    raise UnsupportedCompression(entry.compression_method)
