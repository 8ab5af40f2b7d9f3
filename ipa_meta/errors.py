"""Exception types raised by ipa-meta."""


class IpaMetaError(Exception):
    """Base exception."""


class TruncatedDataError(IpaMetaError, IndexError):
    """A read ran past the end of the buffer."""


class ArchiveError(IpaMetaError):
    """The ZIP container could not be read."""


class NoEndOfCentralDirectory(ArchiveError):
    """No End-Of-Central-Directory record in the scanned tail of the buffer."""

    def __init__(self) -> None:
        super().__init__("ZIP end of central directory not found")


class LocalHeaderMismatch(ArchiveError):
    """The local file header signature at the recorded offset is wrong."""

    def __init__(self, name: str, offset: int) -> None:
        self.name = name
        self.offset = offset
        super().__init__(f"ZIP local header mismatch for {name!r} at offset {offset}")


class UnsupportedCompression(ArchiveError):
    """An entry uses a compression method other than stored or deflate."""

    def __init__(self, method: int) -> None:
        self.method = method
        super().__init__(f"Unsupported ZIP compression method: {method}")


class CorruptEntryData(ArchiveError):
    """A deflated entry could not be inflated."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        super().__init__(f"Failed to inflate {name!r}: {reason}")


class InfoPlistNotFound(IpaMetaError):
    """No Payload/*.app/Info.plist entry in the archive."""

    def __init__(self) -> None:
        super().__init__("Info.plist not found")


class InfoPlistUnparsable(IpaMetaError):
    """Info.plist is neither a binary nor an XML property list."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Info.plist parse failed: {name}")


class PlistFormatError(IpaMetaError):
    """A binary property list is structurally broken."""


class PlistKeyError(IpaMetaError, KeyError):
    """A dictionary key that is not text was used as a map key."""


class FetchError(IpaMetaError):
    """Archive bytes could not be retrieved."""
