from __future__ import annotations

import dataclasses
import datetime
import decimal
import enum
import io
import json
import logging
import typing
import uuid

from ._uri import serialize_param
from ._urlparse import URL, quote_param

if typing.TYPE_CHECKING:
    from ._encoders import ContentEncoder

__all__ = [
    "BytesContent",
    "Content",
    "FormContent",
    "JsonContent",
    "write_content",
]

logger = logging.getLogger("tinyclient.content")


@typing.runtime_checkable
class Content(typing.Protocol):
    """
    A request body that can write itself to a binary sink.

    `host` is the URL of the target host, for payloads that need to emit
    absolute links.
    """

    def write_to(self, stream: typing.BinaryIO, host: URL) -> None: ...


def _json_default(value: typing.Any) -> typing.Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (uuid.UUID, decimal.Decimal)):
        return str(value)
    if isinstance(value, (set, frozenset)):
        return list(value)
    if hasattr(value, "__dict__"):
        return vars(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JsonContent:
    content_type = "application/json"

    def __init__(self, value: typing.Any) -> None:
        self.value = value

    def write_to(self, stream: typing.BinaryIO, host: URL) -> None:
        text = json.dumps(
            self.value,
            default=_json_default,
            ensure_ascii=False,
            separators=(",", ":"),
            allow_nan=False,
        )
        stream.write(text.encode("utf-8"))

    def __repr__(self) -> str:
        return f"JsonContent({self.value!r})"


class BytesContent:
    def __init__(
        self, data: bytes, content_type: str = "application/octet-stream"
    ) -> None:
        self.data = bytes(data)
        self.content_type = content_type

    def write_to(self, stream: typing.BinaryIO, host: URL) -> None:
        stream.write(self.data)

    def __repr__(self) -> str:
        return f"BytesContent(<{len(self.data)} bytes>, {self.content_type!r})"


class FormContent:
    """
    An ``application/x-www-form-urlencoded`` body. Values are serialized the
    same way as query parameters; a list value repeats its key.
    """

    content_type = "application/x-www-form-urlencoded"

    def __init__(self, fields: typing.Mapping[str, typing.Any]) -> None:
        self.fields = dict(fields)

    def _pairs(self) -> typing.Iterator[tuple[str, str]]:
        for key, value in self.fields.items():
            values = value if isinstance(value, (list, tuple)) else [value]
            for item in values:
                yield key, serialize_param(item)

    def write_to(self, stream: typing.BinaryIO, host: URL) -> None:
        body = "&".join(
            f"{quote_param(key)}={quote_param(value)}" for key, value in self._pairs()
        )
        stream.write(body.encode("ascii"))

    def __repr__(self) -> str:
        return f"FormContent({self.fields!r})"


def write_content(
    content: Content, encoder: ContentEncoder | None, host: URL
) -> bytes:
    """
    Render `content` to bytes, passing it through `encoder` when one is set.

    The encoding stream is closed before the buffer is read, on every exit
    path. Errors from the content or the encoder propagate unchanged.
    """
    buffer = io.BytesIO()
    if encoder is not None:
        with encoder.get_encoding_stream(buffer) as stream:
            content.write_to(stream, host)
    else:
        content.write_to(buffer, host)
    data = buffer.getvalue()
    logger.debug(
        "Serialized %s as %d bytes (encoding=%s)",
        type(content).__name__,
        len(data),
        getattr(encoder, "name", None),
    )
    return data
