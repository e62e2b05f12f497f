from __future__ import annotations

import datetime
import decimal
import enum
import typing
import uuid

from ._urlparse import (
    PATH_SAFE,
    QUERY_SAFE,
    URL,
    parse_host,
    quote,
    quote_param,
)

__all__ = ["compose_absolute_path", "compose_uri", "serialize_param"]


def serialize_param(value: typing.Any) -> str:
    """
    Coerce a query parameter value into its string form.

    The result never depends on the process locale: floats always use "."
    and dates are rendered as ISO 8601.

    serialize_param(True) == "true"
    serialize_param(1.5) == "1.5"
    serialize_param(datetime.date(2024, 1, 31)) == "2024-01-31"
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, enum.Enum):
        return serialize_param(value.value)
    if isinstance(value, int):
        return str(int(value))
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, decimal.Decimal):
        return str(value)
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    return str(value)


def _merge_query(query: str | None, params: typing.Mapping[str, str]) -> str | None:
    parts = [query] if query else []
    parts.extend(
        f"{quote_param(key)}={quote_param(value)}" for key, value in params.items()
    )
    return "&".join(parts) if parts else None


def _split(base_path: str) -> tuple[str, str | None]:
    path, sep, query = base_path.partition("?")
    path = "/" + path.lstrip("/")
    return quote(path, safe=PATH_SAFE), (quote(query, safe=QUERY_SAFE) if sep else None)


def compose_absolute_path(
    base_path: str, params: typing.Mapping[str, str] | None = None
) -> str:
    """
    Merge a literal path, which may already carry a "?query", with extra
    query parameters. The result always starts with "/".

    compose_absolute_path("search?lang=en", {"text": "hi"})
        == "/search?lang=en&text=hi"
    """
    path, query = _split(base_path or "")
    query = _merge_query(query, params or {})
    return path if query is None else f"{path}?{query}"


def compose_uri(
    host: str | URL,
    base_path: str,
    params: typing.Mapping[str, str] | None = None,
) -> URL:
    """
    Compose the full target URL for `base_path` and `params` on `host`.

    A path prefix on the host is kept, joined without doubling the "/":

    str(compose_uri("https://api.example.com/v1/", "users", {"id": "42"}))
        == "https://api.example.com/v1/users?id=42"
    """
    base = host if isinstance(host, URL) else parse_host(host)
    path, query = _split(base_path or "")
    query = _merge_query(query, params or {})
    prefix = base.path.rstrip("/")
    return URL(
        scheme=base.scheme,
        userinfo=base.userinfo,
        host=base.host,
        port=base.port,
        path=prefix + path,
        query=query,
        fragment=None,
    )
