"""Tests for the ZIP central-directory reader."""

import struct
import unittest
import zipfile

from ipa_fixtures import build_zip, central_header_offsets, set_compression_method, truncate_compressed_size

from ipa_meta.archive.zipreader import (
    CompressionMethod,
    ZipEntry,
    inflate_raw,
    list_entries,
    normalize_path,
    read_entry,
)
from ipa_meta.errors import (
    ArchiveError,
    CorruptEntryData,
    LocalHeaderMismatch,
    NoEndOfCentralDirectory,
    UnsupportedCompression,
)


FILES = {
    "Payload/": b"",
    "Payload/Demo.app/Info.plist": b"<plist>" + b"x" * 500 + b"</plist>",
    "Payload/Demo.app/en.lproj/InfoPlist.strings": '"CFBundleName" = "Demo";'.encode(),
}


class TestListEntries(unittest.TestCase):
    """Test central directory walking."""

    def test_lists_entries_in_order(self):
        entries = list_entries(build_zip(FILES))
        self.assertEqual([e.name for e in entries], list(FILES))
        self.assertTrue(all(e.compression_method == CompressionMethod.STORED for e in entries))
        self.assertEqual(entries[1].compressed_size, len(FILES["Payload/Demo.app/Info.plist"]))

    def test_deflated_entries_report_method_8(self):
        entries = list_entries(build_zip(FILES, compression=zipfile.ZIP_DEFLATED))
        info = entries[1]
        self.assertEqual(info.compression_method, 8)
        self.assertLess(info.compressed_size, len(FILES["Payload/Demo.app/Info.plist"]))

    def test_archive_comment_is_skipped(self):
        data = build_zip(FILES, comment=b"c" * 1000)
        self.assertEqual(len(list_entries(data)), 3)

    def test_memoryview_input(self):
        entries = list_entries(memoryview(build_zip(FILES)))
        self.assertEqual(len(entries), 3)

    def test_not_a_zip(self):
        with self.assertRaises(NoEndOfCentralDirectory):
            list_entries(b"this is not a zip archive at all, just text")

    def test_tiny_buffer(self):
        with self.assertRaises(NoEndOfCentralDirectory):
            list_entries(b"PK")

    def test_eocd_outside_search_window(self):
        """EOCD further than 65,557 bytes from the end is not found."""
        data = build_zip(FILES) + bytes(70000)
        with self.assertRaises(NoEndOfCentralDirectory):
            list_entries(data)

    def test_bad_central_signature_stops_walk(self):
        data = bytearray(build_zip(FILES))
        second = central_header_offsets(bytes(data))[1]
        data[second:second + 4] = b"XXXX"
        entries = list_entries(bytes(data))
        self.assertEqual([e.name for e in entries], ["Payload/"])

    def test_archive_errors_share_base(self):
        self.assertTrue(issubclass(NoEndOfCentralDirectory, ArchiveError))


class TestReadEntry(unittest.TestCase):
    """Test reading single entries."""

    def test_stored_entry(self):
        data = build_zip(FILES)
        entry = list_entries(data)[2]
        self.assertEqual(read_entry(data, entry), FILES[entry.name])

    def test_deflated_entry_matches_stored(self):
        stored = build_zip(FILES)
        deflated = build_zip(FILES, compression=zipfile.ZIP_DEFLATED)
        for a, b in zip(list_entries(stored), list_entries(deflated)):
            self.assertEqual(read_entry(stored, a), read_entry(deflated, b))

    def test_stored_result_is_a_copy(self):
        data = build_zip(FILES)
        entry = list_entries(data)[2]
        result = read_entry(memoryview(data), entry)
        self.assertIsInstance(result, bytes)

    def test_local_header_mismatch(self):
        data = bytearray(build_zip(FILES))
        entry = list_entries(bytes(data))[1]
        data[entry.local_header_offset + 3] = 0x00
        with self.assertRaises(LocalHeaderMismatch):
            read_entry(bytes(data), entry)

    def test_local_header_past_end(self):
        data = build_zip(FILES)
        entry = ZipEntry(name="ghost", compression_method=0, compressed_size=4, local_header_offset=len(data) - 2)
        with self.assertRaises(LocalHeaderMismatch):
            read_entry(data, entry)

    def test_unsupported_compression(self):
        data = set_compression_method(build_zip({"a.txt": b"hello"}), 12)
        entry = list_entries(data)[0]
        self.assertEqual(entry.compression_method, 12)
        with self.assertRaises(UnsupportedCompression) as ctx:
            read_entry(data, entry)
        self.assertEqual(ctx.exception.method, 12)

    def test_corrupt_deflate_stream(self):
        data = set_compression_method(build_zip({"a.txt": b"\xff" * 20}), 8)
        entry = list_entries(data)[0]
        with self.assertRaises(CorruptEntryData):
            read_entry(data, entry)

    def test_truncated_deflate_stream(self):
        """A compressed size shorter than the stream is rejected, not inflated partway."""
        payload = b"".join(f"<key>K{i}</key><string>{i * 7919}</string>".encode() for i in range(60))
        data = build_zip({"a.plist": payload}, compression=zipfile.ZIP_DEFLATED)
        entry = list_entries(data)[0]
        short = truncate_compressed_size(data, 0, entry.compressed_size // 2)
        with self.assertRaises(CorruptEntryData):
            read_entry(short, list_entries(short)[0])

    def test_local_extra_field_is_skipped(self):
        """Data starts after the local header's own name and extra lengths."""
        data = bytearray(build_zip({"a.txt": b"payload"}))
        entry = list_entries(bytes(data))[0]
        # Grow the local extra field by 4 bytes and shift everything after it
        offset = entry.local_header_offset
        name_len, extra_len = struct.unpack_from("<HH", data, offset + 26)
        insert_at = offset + 30 + name_len + extra_len
        data[insert_at:insert_at] = b"\x00\x00\x00\x00"
        struct.pack_into("<H", data, offset + 28, extra_len + 4)
        # Central directory moved by 4 bytes
        eocd = bytes(data).rfind(b"PK\x05\x06")
        cd_offset = struct.unpack_from("<I", data, eocd + 16)[0]
        struct.pack_into("<I", data, eocd + 16, cd_offset + 4)
        shifted = list_entries(bytes(data))[0]
        self.assertEqual(read_entry(bytes(data), shifted), b"payload")


class TestHelpers(unittest.TestCase):

    def test_inflate_raw(self):
        import zlib

        compressor = zlib.compressobj(9, zlib.DEFLATED, -zlib.MAX_WBITS)
        raw = compressor.compress(b"abc" * 100) + compressor.flush()
        self.assertEqual(inflate_raw(raw), b"abc" * 100)
        with self.assertRaises(zlib.error):
            inflate_raw(raw[:-1])

    def test_normalize_path(self):
        self.assertEqual(normalize_path("Payload\\My.app//EN.lproj/InfoPlist.strings"),
                         "payload/my.app/en.lproj/infoplist.strings")
