"""Metadata extraction for iOS application archives."""

__version__ = "0.1.0"

from ipa_meta.errors import (
    ArchiveError,
    InfoPlistNotFound,
    InfoPlistUnparsable,
    IpaMetaError,
)
from ipa_meta.extractor import extract_meta
from ipa_meta.models import IpaMeta

__all__ = [
    "ArchiveError",
    "InfoPlistNotFound",
    "InfoPlistUnparsable",
    "IpaMeta",
    "IpaMetaError",
    "extract_meta",
]
