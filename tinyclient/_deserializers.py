from __future__ import annotations

import codecs
import json
import typing

from ._exceptions import ResponseDeserializationError

__all__ = [
    "AutoResponseDeserializer",
    "BytesResponseDeserializer",
    "JsonResponseDeserializer",
    "ResponseDeserializer",
    "TextResponseDeserializer",
]

TEXT_TYPES = (
    "text/",
    "application/xml",
    "application/javascript",
    "application/ecmascript",
    "application/x-www-form-urlencoded",
)


@typing.runtime_checkable
class ResponseDeserializer(typing.Protocol):
    """
    Turns a response body into a Python value. Used by transports once the
    response has arrived.
    """

    def deserialize(self, content: bytes, content_type: str | None) -> typing.Any: ...


def parse_content_type(content_type: str | None) -> tuple[str, dict[str, str]]:
    """
    Split a Content-Type header into its lower-cased media type and
    parameters.

    parse_content_type("text/html; charset=ISO-8859-1")
        == ("text/html", {"charset": "ISO-8859-1"})
    """
    if not content_type:
        return "", {}
    media_type, *raw_params = content_type.split(";")
    params: dict[str, str] = {}
    for raw in raw_params:
        key, sep, value = raw.partition("=")
        if sep:
            params[key.strip().lower()] = value.strip().strip('"')
    return media_type.strip().lower(), params


def is_json_content_type(media_type: str) -> bool:
    return media_type == "application/json" or media_type.endswith("+json")


def is_text_content_type(media_type: str) -> bool:
    return media_type.startswith(TEXT_TYPES) or media_type.endswith("+xml")


def _decode_text(content: bytes, encoding: str) -> str:
    try:
        codecs.lookup(encoding)
    except LookupError:
        encoding = "utf-8"
    try:
        return content.decode(encoding)
    except UnicodeDecodeError as exc:
        raise ResponseDeserializationError(
            f"Response body is not valid {encoding} text."
        ) from exc


class JsonResponseDeserializer:
    def deserialize(self, content: bytes, content_type: str | None) -> typing.Any:
        if not content.strip():
            return None
        try:
            return json.loads(content)
        except ValueError as exc:
            raise ResponseDeserializationError(
                "Response body is not valid JSON."
            ) from exc


class TextResponseDeserializer:
    """
    Decodes the body as text. An explicit `encoding` wins over the charset
    announced by the response, which wins over UTF-8.
    """

    def __init__(self, encoding: str | None = None) -> None:
        self.encoding = encoding

    def deserialize(self, content: bytes, content_type: str | None) -> str:
        _, params = parse_content_type(content_type)
        encoding = self.encoding or params.get("charset") or "utf-8"
        return _decode_text(content, encoding)


class BytesResponseDeserializer:
    def deserialize(self, content: bytes, content_type: str | None) -> bytes:
        return bytes(content)


class AutoResponseDeserializer:
    """
    Picks a strategy from the response Content-Type: JSON media types are
    parsed, text-like media types are decoded, anything else is returned as
    raw bytes.
    """

    def deserialize(self, content: bytes, content_type: str | None) -> typing.Any:
        media_type, _ = parse_content_type(content_type)
        if is_json_content_type(media_type):
            return JsonResponseDeserializer().deserialize(content, content_type)
        if is_text_content_type(media_type):
            return TextResponseDeserializer().deserialize(content, content_type)
        return BytesResponseDeserializer().deserialize(content, content_type)

    def __repr__(self) -> str:
        return "AutoResponseDeserializer()"
