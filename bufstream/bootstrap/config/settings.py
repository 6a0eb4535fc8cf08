from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, YamlConfigSettingsSource

from bufstream.core.helpers.codec import check_encoding
from bufstream.core.models.config import StreamConfig


class StreamSettings(BaseModel):
    max_size: Annotated[
        int | None,
        Field(
            description=(
                "Soft capacity of the buffer, in bytes.\n"
                "Writes that leave more than this many bytes queued report\n"
                "backpressure to the producer. Nothing is ever rejected.\n"
                "Leave unset (or negative) for an unlimited buffer."
            ),
            default=None
        )
    ]

    encoding: Annotated[
        str | None,
        Field(
            description=(
                "Decode emitted chunks to text with this encoding.\n"
                "Leave unset to emit raw bytes."
            ),
            default=None
        )
    ]

    source_encoding: Annotated[
        str,
        Field(
            description="Encoding used for text written into the buffer.",
            default="utf-8"
        )
    ]

    @field_validator("encoding", "source_encoding")
    @classmethod
    def validate_encoding(cls, v: str | None) -> str | None:
        if v is None:
            return v
        try:
            return check_encoding(v)
        except LookupError:
            raise ValueError(f"Unknown encoding '{v}'")


class ReaderSettings(BaseModel):
    read_size: Annotated[
        int,
        Field(
            description="Maximum number of bytes pulled from the input per read.",
            default=64 * 1024,
            ge=1
        )
    ]


class BufstreamConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BUFSTREAM_",
        env_nested_delimiter="__",
        extra="ignore"
    )

    stream: Annotated[
        StreamSettings,
        Field(
            description="Buffering behavior: capacity and text modes.",
            default_factory=StreamSettings
        )
    ]

    reader: Annotated[
        ReaderSettings,
        Field(
            description="How input is pulled before it is buffered.",
            default_factory=ReaderSettings
        )
    ]

    @classmethod
    def load(cls, configfile: Path | None = None) -> "BufstreamConfig":
        """
        Build the configuration from environment variables, with values from
        `configfile` taking precedence when a file is given.
        """
        if configfile is None:
            return cls()

        data = YamlConfigSettingsSource(cls, yaml_file=configfile)()
        return cls(**data)

    def to_stream_config(self) -> StreamConfig:
        return StreamConfig(
            max_size=self.stream.max_size,
            encoding=self.stream.encoding,
            source_encoding=self.stream.source_encoding,
            read_size=self.reader.read_size,
        )
