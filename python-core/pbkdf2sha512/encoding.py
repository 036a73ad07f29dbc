"""
Text encodings for salts and derived keys.

Converts between bytes and text for the encodings a digester can be
configured with. ``"none"`` is the raw sentinel: values stay bytes.

Every text rendering decodes back to the exact bytes it came from.
Bytes that are not valid utf8 or ascii are carried as lone surrogates
(U+DC80..U+DCFF, Python's ``surrogateescape`` convention).
"""

import base64
import binascii
from typing import Tuple

RAW = "none"

# The first entry is the default encoding
ENCODINGS: Tuple[str, ...] = ("base64", "utf8", "latin1", "binary", "ascii", "hex", RAW)

_URLSAFE = str.maketrans("-_", "+/")
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def _is_escaped_byte(c: str) -> bool:
    return "\udc80" <= c <= "\udcff"


def _latin1_bytes(text: str) -> bytes:
    return bytes(ord(c) - 0xDC00 if _is_escaped_byte(c) else ord(c) & 0xFF for c in text)


def _base64_bytes(text: str) -> bytes:
    chars = "".join(text.split()).translate(_URLSAFE).rstrip("=")
    if len(chars) % 4 == 1:
        chars = chars[:-1]
    return base64.b64decode(chars + "=" * (-len(chars) % 4))


def _hex_bytes(text: str) -> bytes:
    # decoding stops at the first pair that is not two hex digits
    out = bytearray()
    for i in range(0, len(text) - 1, 2):
        pair = text[i:i + 2]
        if not _HEX_DIGITS.issuperset(pair):
            break
        out.append(int(pair, 16))
    return bytes(out)


def utf8_bytes(text: str) -> bytes:
    """UTF-8 encode user text, replacing lone surrogates with U+FFFD."""
    return text.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "replace").encode("utf-8")


def to_bytes(text: str, encoding: str) -> bytes:
    """
    Decode ``text`` into bytes according to ``encoding``.

    Hex decoding keeps the valid prefix: it stops at the first pair that
    is not two hex digits, and a trailing odd nibble is dropped.

    Raises:
        ValueError: If ``text`` is not valid base64, holds lone surrogates
            outside the escaped-byte range (utf8), or the encoding is
            unknown or the raw sentinel
    """
    if encoding == "base64":
        try:
            return _base64_bytes(text)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 text: {e}")
    if encoding == "utf8":
        return text.encode("utf-8", "surrogateescape")
    if encoding in ("latin1", "binary", "ascii"):
        return _latin1_bytes(text)
    if encoding == "hex":
        return _hex_bytes(text)
    raise ValueError(f"Cannot decode text with encoding: {encoding}")


def to_text(data: bytes, encoding: str) -> str:
    """
    Render ``data`` as text according to ``encoding``.

    Raises:
        ValueError: If the encoding is unknown or the raw sentinel
    """
    if encoding == "base64":
        return base64.b64encode(data).decode("ascii")
    if encoding == "utf8":
        return data.decode("utf-8", "surrogateescape")
    if encoding in ("latin1", "binary"):
        return data.decode("latin-1")
    if encoding == "ascii":
        return data.decode("ascii", "surrogateescape")
    if encoding == "hex":
        return data.hex()
    raise ValueError(f"Cannot render bytes with encoding: {encoding}")
