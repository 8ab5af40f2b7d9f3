"""Binary-or-XML property list dispatch."""

import logging

from ipa_meta.errors import PlistFormatError
from ipa_meta.plist.binary import parse_binary
from ipa_meta.plist.values import PlistValue
from ipa_meta.plist.xmlplist import parse_xml
from ipa_meta.util.text import decode_text

logger = logging.getLogger(__name__)


def parse_plist(data: bytes | memoryview) -> PlistValue | None:
    """
    Parse property-list bytes in either serialization.

    Binary is tried first; without the bplist magic the bytes are decoded as
    text and read as XML. A buffer that carries the magic but is corrupt is not
    retried as XML.

    Returns:
        The root value, or None if neither format yields one
    """
    try:
        value = parse_binary(data)
    except PlistFormatError as e:
        logger.debug("Corrupt binary plist: %s", e)
        return None
    if value is not None:
        return value

    text = decode_text(data)
    if not text.strip():
        return None
    return parse_xml(text)
