import base64
import binascii
import codecs

DEFAULT_ENCODING = "utf-8"

BINARY_TO_TEXT = ("hex", "base64")
"""
Encodings that are not text codecs in Python but are commonly used to carry
binary payloads as text. A `str` written with one of these is decoded into
the original bytes; chunks emitted with one of these are rendered as text.
"""


def check_encoding(encoding: str) -> str:
    """
    Return the canonical name of `encoding`.

    Raise LookupError if the codec is unknown or does not map bytes to text
    (rot13, zlib, base64_codec...), so that bad encodings fail when they are
    configured rather than when the first chunk is emitted.
    """
    name = encoding.lower()
    if name in BINARY_TO_TEXT:
        return name

    info = codecs.lookup(encoding)
    if not getattr(info, "_is_text_encoding", True):
        raise LookupError(f"'{encoding}' is not a text encoding")
    return info.name


def to_chunk(data: str | bytes | bytearray | memoryview, encoding: str | None = None) -> bytes:
    """
    Turn a write payload into an immutable chunk owned by the caller.

    `str` is encoded with `encoding` (UTF-8 when omitted). Bytes-like values
    are copied so later mutation by the producer cannot affect queued data.
    """
    if isinstance(data, str):
        name = check_encoding(encoding or DEFAULT_ENCODING)
        if name == "hex":
            return bytes.fromhex(data)
        if name == "base64":
            return base64.b64decode(data)
        return data.encode(name)

    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)

    raise TypeError(
        f"Chunk must be str or bytes-like, got {type(data).__name__}"
    )


class ChunkDecoder:
    """
    Renders emitted chunks as text for a stream in text mode.

    Text codecs are decoded incrementally: a multi-byte character split
    across two chunks is held back and emitted whole with the next chunk.
    Malformed input is replaced with U+FFFD rather than raising inside a
    scheduled drain step.
    """

    def __init__(self, encoding: str) -> None:
        self.encoding = check_encoding(encoding)
        self._decoder: codecs.IncrementalDecoder | None = None
        if self.encoding not in BINARY_TO_TEXT:
            self._decoder = codecs.getincrementaldecoder(self.encoding)(errors="replace")

    def decode(self, chunk: bytes) -> str:
        if self._decoder is not None:
            return self._decoder.decode(chunk)
        if self.encoding == "hex":
            return chunk.hex()
        return binascii.b2a_base64(chunk, newline=False).decode("ascii")

    def finish(self) -> str:
        """Return whatever is left of a trailing partial character."""
        if self._decoder is None:
            return ""
        return self._decoder.decode(b"", final=True)
