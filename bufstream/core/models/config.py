from dataclasses import dataclass


@dataclass
class StreamConfig:
    """
    Static configuration for a BufferedStream and the readers feeding it.

    Built by the bootstrap layer from validated settings; the core never reads
    settings files or environment variables itself.
    """
    max_size: int | None = None
    """
    Soft capacity in bytes. Writes that leave more than `max_size` bytes
    queued return False. None or a negative value disables the limit.
    """

    encoding: str | None = None
    """
    When set, emitted chunks are decoded to text with this encoding.
    When None, raw bytes are emitted.
    """

    source_encoding: str = "utf-8"
    """
    Encoding used to turn text written into the stream into bytes.
    """

    read_size: int = 64 * 1024
    """
    Maximum number of bytes a reader source pulls per read.
    """
