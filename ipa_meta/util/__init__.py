"""Utility module for ipa-meta."""

from .byteorder import read_u16le, read_u32le, read_uint, read_uint_be
from .text import decode_text

__all__ = ["read_u16le", "read_u32le", "read_uint", "read_uint_be", "decode_text"]
