"""Byte-order-mark aware text decoding."""

_BOMS = (
    # 2-byte UTF-16 marks are checked before the UTF-8 one
    (b"\xff\xfe", "utf-16-le"),
    (b"\xfe\xff", "utf-16-be"),
    (b"\xef\xbb\xbf", "utf-8"),
)


def decode_text(data: bytes | memoryview) -> str:
    """
    Decode bytes into text, choosing the encoding from a leading byte-order mark.

    FF FE selects UTF-16LE, FE FF selects UTF-16BE, EF BB BF selects UTF-8 and
    anything else is read as UTF-8 without a mark. The mark itself is dropped.
    Undecodable sequences become U+FFFD rather than failing.

    Args:
        data: Raw bytes

    Returns:
        Decoded text (empty string for empty input)

    Example:
        >>> decode_text(b"\\xff\\xfeh\\x00i\\x00")
        'hi'
    """
    raw = bytes(data)
    if not raw:
        return ""
    for bom, encoding in _BOMS:
        if raw.startswith(bom):
            return raw[len(bom):].decode(encoding, errors="replace")
    return raw.decode("utf-8", errors="replace")
