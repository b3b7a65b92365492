from __future__ import annotations

"""
Unit tests for the payload codec.

Verifies:
1. Round-trip of arbitrary bytes, including empty input.
2. Chunk wrapping never changes the decoded value.
3. Corrupt base64 or gzip data raises DecodeError.
"""

import base64
import gzip

import pytest

from embedres.runtime.codec import (
    DEFAULT_CHUNK_WIDTH,
    compress,
    decode,
    encode,
    unwrap,
    wrap,
)
from embedres.runtime.errors import DecodeError


@pytest.mark.parametrize("data", [
    b"",
    b"hi",
    bytes(range(256)),
    b"x" * 10_000,
    "ñandú 🐍".encode("utf-8"),
])
def test_round_trip(data: bytes) -> None:
    assert decode(encode(data)) == data


def test_empty_input_has_empty_payload() -> None:
    assert encode(b"") == ""
    assert decode("") == b""


@pytest.mark.parametrize("width", [1, 7, 64, 90])
def test_chunking_is_transparent(width: int) -> None:
    data = b"The quick brown fox jumps over the lazy dog. " * 20
    unwrapped = base64.b64encode(compress(data)).decode("ascii")

    wrapped = encode(data, chunk_width=width)

    assert unwrap(wrapped) == unwrapped
    assert decode(wrapped) == decode(unwrapped) == data


def test_wrap_line_lengths() -> None:
    text = "A" * 200
    wrapped = wrap(text, 76)

    assert wrapped.startswith("\n") and wrapped.endswith("\n")
    lines = wrapped.strip("\n").split("\n")
    assert [len(line) for line in lines] == [76, 76, 48]


def test_wrap_short_text_unchanged() -> None:
    assert wrap("abc", DEFAULT_CHUNK_WIDTH) == "abc"
    assert wrap("abcd", 4) == "abcd"


def test_wrap_rejects_zero_width() -> None:
    with pytest.raises(ValueError):
        wrap("abc", 0)


def test_decode_accepts_indentation_and_crlf() -> None:
    payload = encode(b"hello world", chunk_width=8)
    messy = payload.replace("\n", "\r\n    ")
    assert decode(messy) == b"hello world"


def test_compress_is_deterministic() -> None:
    assert compress(b"same input") == compress(b"same input")
    assert gzip.decompress(compress(b"abc")) == b"abc"


def test_decode_invalid_base64() -> None:
    with pytest.raises(DecodeError, match="base64"):
        decode("not*valid*base64!")


def test_decode_invalid_gzip() -> None:
    bogus = base64.b64encode(b"definitely not gzip").decode("ascii")
    with pytest.raises(DecodeError, match="gzip"):
        decode(bogus)


def test_decode_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        decode("@@@@")
