from __future__ import annotations

"""
Payload Codec.

Turns raw file bytes into a transport-safe text payload and back:
gzip (deflate) at maximum level, standard padded base64, then cosmetic
re-wrapping into fixed-width lines. Decoding ignores all whitespace, so
the wrapped and unwrapped forms restore the same bytes.
"""

import base64
import binascii
import gzip
import zlib
from typing import List

from embedres.runtime.errors import DecodeError

DEFAULT_CHUNK_WIDTH = 76
COMPRESS_LEVEL = 9

# -----------------------------------------------------------------------------
# ENCODING
# -----------------------------------------------------------------------------

def compress(data: bytes) -> bytes:
    """
    Compress bytes with gzip at maximum level.

    The header timestamp is zeroed so identical input always produces
    identical output.
    """
    return gzip.compress(data, compresslevel=COMPRESS_LEVEL, mtime=0)


def wrap(text: str, width: int = DEFAULT_CHUNK_WIDTH) -> str:
    """
    Split an encoded string into newline-separated chunks of `width` chars.

    Strings that fit on one line are returned unchanged. Wrapped output
    starts and ends with a newline, ready to sit inside a triple-quoted
    literal.

    Args:
        text: Encoded payload.
        width: Maximum characters per line (>= 1).

    Returns:
        str: The wrapped payload.

    Raises:
        ValueError: If width is lower than 1.
    """
    if width < 1:
        raise ValueError(f"Chunk width must be >= 1, got {width}")
    if len(text) <= width:
        return text

    chunks: List[str] = [text[i:i + width] for i in range(0, len(text), width)]
    return "\n" + "\n".join(chunks) + "\n"


def encode(data: bytes, chunk_width: int = DEFAULT_CHUNK_WIDTH) -> str:
    """
    Compress and base64-encode bytes into a wrapped text payload.

    Empty input yields an empty payload: a zero-length file has nothing
    to store.

    Args:
        data: Raw file content.
        chunk_width: Line width of the wrapped output.

    Returns:
        str: The transport-safe payload.
    """
    if not data:
        return ""
    encoded = base64.b64encode(compress(data)).decode("ascii")
    return wrap(encoded, chunk_width)

# -----------------------------------------------------------------------------
# DECODING
# -----------------------------------------------------------------------------

def unwrap(payload: str) -> str:
    """Strip every whitespace character (chunk separators, indentation)."""
    return "".join(payload.split())


def decode(payload: str) -> bytes:
    """
    Restore the original bytes from a (possibly wrapped) payload.

    Args:
        payload: Text produced by `encode`.

    Returns:
        bytes: The decompressed content.

    Raises:
        DecodeError: If the base64 text or the gzip stream is corrupt.
    """
    compact = unwrap(payload)
    if not compact:
        return b""

    try:
        raw = base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64 payload: {e}") from e

    try:
        return gzip.decompress(raw)
    except (OSError, EOFError, zlib.error) as e:
        raise DecodeError(f"Invalid gzip stream: {e}") from e
