"""Metadata extraction from .ipa archives."""

import logging
import re
from typing import Iterable

from ipa_meta.archive.zipreader import ZipEntry, list_entries, normalize_path, read_entry
from ipa_meta.config import DEFAULT_PLACEHOLDER_PATTERN, Config
from ipa_meta.errors import ArchiveError, InfoPlistNotFound, InfoPlistUnparsable
from ipa_meta.models import IpaMeta
from ipa_meta.plist.reader import parse_plist
from ipa_meta.plist.strings import parse_strings_or_plist
from ipa_meta.plist.values import PlistDict, as_string

logger = logging.getLogger(__name__)

# Searched in normalize_path() output, so lowercase with forward slashes
_INFO_PLIST_RE = re.compile(r"payload/[^/]+\.app/info\.plist$")

NAME_KEYS = ("CFBundleDisplayName", "CFBundleName", "CFBundleExecutable")


def find_info_plist(entries: list[ZipEntry]) -> ZipEntry | None:
    """Return the first Payload/<name>.app/Info.plist entry, matched case-insensitively."""
    for entry in entries:
        if _INFO_PLIST_RE.search(normalize_path(entry.name)):
            return entry
    return None


def is_placeholder(name: str, pattern: str = DEFAULT_PLACEHOLDER_PATTERN) -> bool:
    """Check whether a display name is empty or looks like an unresolved build variable."""
    return not name or re.search(pattern, name) is not None


def _first_non_empty(values: Iterable[str]) -> str:
    for value in values:
        value = value.strip()
        if value:
            return value
    return ""


def _localized_name(
    buf: bytes | memoryview,
    entries: list[ZipEntry],
    info_entry: ZipEntry,
    dev_region: str,
) -> str:
    """
    Look up the display name in the app's InfoPlist.strings files.

    <dev_region>.lproj is tried before Base.lproj. A candidate that cannot be
    read is logged and skipped.

    Returns:
        The first usable name, or "" if no candidate provides one
    """
    by_path = {normalize_path(entry.name): entry for entry in entries}
    app_dir = info_entry.name[: info_entry.name.rfind("/") + 1]

    candidates = [
        normalize_path(f"{app_dir}{dev_region}.lproj/InfoPlist.strings"),
        normalize_path(f"{app_dir}Base.lproj/InfoPlist.strings"),
    ]
    for path in dict.fromkeys(candidates):
        entry = by_path.get(path)
        if entry is None:
            logger.debug("No localized strings at %s", path)
            continue
        try:
            table = parse_strings_or_plist(read_entry(buf, entry))
        except ArchiveError as e:
            logger.warning("Skipping unreadable localized strings %s: %s", entry.name, e)
            continue
        name = _first_non_empty(table.get(key, "") for key in NAME_KEYS)
        if name:
            logger.debug("Display name %r resolved from %s", name, entry.name)
            return name
    return ""


def extract_meta(data: bytes | memoryview, config: Config | None = None) -> IpaMeta:
    """
    Extract bundle identifier, version and display name from .ipa bytes.

    The display name comes from CFBundleDisplayName, CFBundleName or
    CFBundleExecutable. When it is empty or looks like a placeholder such as
    $(PRODUCT_NAME), the development region's and Base's InfoPlist.strings are
    consulted; if they do not help, the best value found so far is kept.

    Args:
        data: Complete archive contents
        config: Extraction settings (defaults when None)

    Returns:
        IpaMeta; missing fields are empty strings

    Raises:
        ArchiveError: If the ZIP container or the Info.plist entry cannot be read
        InfoPlistNotFound: If there is no Payload/*.app/Info.plist
        InfoPlistUnparsable: If Info.plist is not a property-list dictionary

    Example:
        >>> meta = extract_meta(open("App.ipa", "rb").read())
        >>> meta.bundle_id
        'com.example.app'
    """
    config = config or Config()

    entries = list_entries(data)
    info_entry = find_info_plist(entries)
    if info_entry is None:
        raise InfoPlistNotFound()
    logger.debug("Info.plist at %s", info_entry.name)

    info = parse_plist(read_entry(data, info_entry))
    if not isinstance(info, PlistDict):
        raise InfoPlistUnparsable(info_entry.name)

    bundle_id = as_string(info.get("CFBundleIdentifier"))
    version = as_string(info.get("CFBundleShortVersionString")) or as_string(
        info.get("CFBundleVersion")
    )
    display_name = _first_non_empty(as_string(info.get(key)) for key in NAME_KEYS)

    if is_placeholder(display_name, config.placeholder_pattern):
        logger.debug("Display name %r needs localized lookup", display_name)
        dev_region = as_string(info.get("CFBundleDevelopmentRegion")) or config.default_region
        localized = _localized_name(data, entries, info_entry, dev_region)
        if localized:
            display_name = localized

    return IpaMeta(bundle_id=bundle_id, version=version, display_name=display_name)
