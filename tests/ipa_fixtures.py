"""Helpers that build in-memory .ipa archives for tests."""

import io
import plistlib
import struct
import zipfile

from ipa_meta.plist.values import PlistArray, PlistDict, PlistNull


def build_zip(files: dict[str, bytes], compression: int = zipfile.ZIP_STORED, comment: bytes = b"") -> bytes:
    """Build a ZIP archive holding files, in insertion order."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression) as zf:
        for name, data in files.items():
            zf.writestr(name, data)
        zf.comment = comment
    return buf.getvalue()


def build_ipa(
    info: dict,
    app: str = "X",
    fmt=plistlib.FMT_BINARY,
    compression: int = zipfile.ZIP_STORED,
    extra: dict[str, bytes] | None = None,
) -> bytes:
    """Build an .ipa with Payload/<app>.app/Info.plist and optional extra files."""
    files = {f"Payload/{app}.app/Info.plist": plistlib.dumps(info, fmt=fmt)}
    files.update(extra or {})
    return build_zip(files, compression=compression)


def central_header_offsets(data: bytes) -> list[int]:
    """Offsets of every central directory header signature in data."""
    offsets = []
    start = data.find(b"PK\x01\x02")
    while start >= 0:
        offsets.append(start)
        start = data.find(b"PK\x01\x02", start + 1)
    return offsets


def set_compression_method(data: bytes, method: int) -> bytes:
    """Rewrite the compression method of every local and central header."""
    out = bytearray(data)
    for offset in central_header_offsets(data):
        struct.pack_into("<H", out, offset + 10, method)
    start = data.find(b"PK\x03\x04")
    while start >= 0:
        struct.pack_into("<H", out, start + 8, method)
        start = data.find(b"PK\x03\x04", start + 1)
    return bytes(out)


def bplist(
    objects: list[bytes],
    top: int = 0,
    offset_size: int = 1,
    ref_size: int = 1,
) -> bytes:
    """
    Assemble a binary plist from already-encoded objects.

    Each element of objects is the full encoding of one object (marker byte
    included); references inside them must use ref_size.
    """
    body = bytearray(b"bplist00")
    offsets = []
    for obj in objects:
        offsets.append(len(body))
        body += obj
    table_offset = len(body)
    for offset in offsets:
        body += offset.to_bytes(offset_size, "big")
    body += bytes(6) + bytes([offset_size, ref_size])
    body += struct.pack(">QQQ", len(objects), top, table_offset)
    return bytes(body)


def ascii_obj(text: str) -> bytes:
    raw = text.encode("ascii")
    assert len(raw) < 15
    return bytes([0x50 | len(raw)]) + raw


def plain(value):
    """Convert a parsed value graph to the objects plistlib would return."""
    if isinstance(value, PlistNull):
        return None
    if isinstance(value, PlistArray):
        return [plain(item) for item in value.items]
    if isinstance(value, PlistDict):
        return {key: plain(item) for key, item in value.to_mapping().items()}
    return value.value


def truncate_compressed_size(data: bytes, index: int, size: int) -> bytes:
    """Rewrite one central-directory entry's compressed size."""
    out = bytearray(data)
    struct.pack_into("<I", out, central_header_offsets(data)[index] + 20, size)
    return bytes(out)
