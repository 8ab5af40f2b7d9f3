"""ZIP container reading."""

from .zipreader import CompressionMethod, ZipEntry, list_entries, normalize_path, read_entry

__all__ = ["CompressionMethod", "ZipEntry", "list_entries", "normalize_path", "read_entry"]
