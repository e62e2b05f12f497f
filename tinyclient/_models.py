from __future__ import annotations

import datetime
import enum
import typing

from ._content import Content, JsonContent, write_content
from ._deserializers import AutoResponseDeserializer, ResponseDeserializer
from ._encoders import ContentEncoder
from ._exceptions import (
    AlreadySetError,
    DuplicateHeaderError,
    InvalidArgumentError,
    RequestSerializationError,
)
from ._uri import compose_absolute_path, compose_uri, serialize_param
from ._urlparse import URL, parse_host

__all__ = ["HttpMethod", "KeepAliveMode", "Request"]

_UNSET: typing.Any = object()


class HttpMethod(str, enum.Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    def __str__(self) -> str:
        return self.value


class KeepAliveMode(enum.Enum):
    TRUE = "true"
    FALSE = "false"
    UP_TO_CLIENT = "up-to-client"


MethodTypes = typing.Union[HttpMethod, str]
TimeoutTypes = typing.Union[float, int, datetime.timedelta]


def _coerce_method(method: MethodTypes) -> HttpMethod:
    if isinstance(method, HttpMethod):
        return method
    try:
        return HttpMethod(method.upper())
    except (AttributeError, ValueError):
        raise InvalidArgumentError(f"Unsupported HTTP method: {method!r}") from None


def _json_args(
    path_or_content: typing.Any, content: typing.Any
) -> tuple[str, typing.Any]:
    if content is _UNSET:
        return "", path_or_content
    return path_or_content, content


class Request:
    """
    Describes one outbound HTTP request: method, path, query parameters,
    headers, body and the transforms a transport should apply.

    Every mutator returns the request itself so calls can be chained:

    >>> request = (
    ...     Request.create_get("users")
    ...     .add_uri_param("id", 42)
    ...     .add_header("Accept", "application/json")
    ... )
    >>> request.absolute_path
    '/users?id=42'

    A request is built once and then handed to a transport, which reads it
    but never modifies it. Use `copy_for` to reuse the configuration against
    another path.
    """

    def __init__(self, method: MethodTypes, path: str = "") -> None:
        self._method = _coerce_method(method)
        self._path = path or ""
        self._headers: dict[str, str] = {}
        self._params: dict[str, str] = {}
        self._content: Content | None = None
        self._encoder: ContentEncoder | None = None
        self._decoder: ContentEncoder | None = None
        self._deserializer: ResponseDeserializer = AutoResponseDeserializer()
        self._keep_alive = KeepAliveMode.UP_TO_CLIENT
        self._timeout: float | None = None

    # Factories

    @classmethod
    def create(cls, method: MethodTypes, path: str = "") -> Request:
        return cls(method, path)

    @classmethod
    def create_get(cls, path: str = "") -> Request:
        return cls.create(HttpMethod.GET, path)

    @classmethod
    def create_post(cls, path: str = "") -> Request:
        return cls.create(HttpMethod.POST, path)

    @classmethod
    def create_put(cls, path: str = "") -> Request:
        return cls.create(HttpMethod.PUT, path)

    @classmethod
    def create_delete(cls, path: str = "") -> Request:
        return cls.create(HttpMethod.DELETE, path)

    @classmethod
    def create_json_post(
        cls, path_or_content: typing.Any, content: typing.Any = _UNSET
    ) -> Request:
        """
        A POST with a JSON body. Called with a single argument, that argument
        is the body and the path is empty.
        """
        path, value = _json_args(path_or_content, content)
        return cls.create_post(path).set_content(JsonContent(value))

    @classmethod
    def create_json_put(
        cls, path_or_content: typing.Any, content: typing.Any = _UNSET
    ) -> Request:
        path, value = _json_args(path_or_content, content)
        return cls.create_put(path).set_content(JsonContent(value))

    @classmethod
    def create_json_delete(
        cls, path_or_content: typing.Any, content: typing.Any = _UNSET
    ) -> Request:
        path, value = _json_args(path_or_content, content)
        return cls.create_delete(path).set_content(JsonContent(value))

    # Read-only view for transports

    @property
    def method(self) -> HttpMethod:
        return self._method

    @property
    def path(self) -> str:
        return self._path

    @property
    def headers(self) -> list[tuple[str, str]]:
        return list(self._headers.items())

    @property
    def params(self) -> dict[str, str]:
        return dict(self._params)

    @property
    def content(self) -> Content | None:
        return self._content

    @property
    def encoder(self) -> ContentEncoder | None:
        return self._encoder

    @property
    def decoder(self) -> ContentEncoder | None:
        return self._decoder

    @property
    def deserializer(self) -> ResponseDeserializer:
        return self._deserializer

    @property
    def keep_alive(self) -> KeepAliveMode:
        return self._keep_alive

    @property
    def timeout(self) -> float | None:
        return self._timeout

    @property
    def absolute_path(self) -> str:
        """
        The path and query string without the host. Always starts with "/".

        Example: "/search?text=hi"
        """
        return compose_absolute_path(self._path, self._params)

    def get_uri_for(self, host: str | URL) -> URL:
        return compose_uri(host, self._path, self._params)

    # Mutators

    def add_header(self, key: str, value: str) -> Request:
        """
        Add a header, replacing any existing value for `key`.
        """
        self._headers[key] = value
        return self

    def add_header_or_fail(self, key: str, value: str) -> Request:
        """
        Add a header.

        Raises:
            DuplicateHeaderError: `key` is already set.
        """
        if key in self._headers:
            raise DuplicateHeaderError(key)
        self._headers[key] = value
        return self

    def set_decoder(self, decoder: ContentEncoder) -> Request:
        if self._decoder is not None:
            raise AlreadySetError("The decoder can only be set once.")
        self._decoder = decoder
        return self

    def set_encoder(self, encoder: ContentEncoder) -> Request:
        if self._encoder is not None:
            raise AlreadySetError("The encoder can only be set once.")
        self._encoder = encoder
        return self

    def set_keep_alive(self, keep_alive: bool) -> Request:
        self._keep_alive = KeepAliveMode.TRUE if keep_alive else KeepAliveMode.FALSE
        return self

    def set_deserializer(self, deserializer: ResponseDeserializer) -> Request:
        self._deserializer = deserializer
        return self

    def set_content(self, content: Content | None) -> Request:
        self._content = content
        return self

    def set_timeout(self, timeout: TimeoutTypes) -> Request:
        if isinstance(timeout, datetime.timedelta):
            self._timeout = timeout.total_seconds()
        else:
            self._timeout = float(timeout)
        return self

    def add_uri_param(self, name: str, value: typing.Any) -> Request:
        """
        Add a query parameter, replacing any existing value for `name`.

        Raises:
            InvalidArgumentError: `name` is empty or `value` is None.
        """
        if not name:
            raise InvalidArgumentError("Parameter name must not be empty.")
        if value is None:
            raise InvalidArgumentError(
                f"Value of parameter {name!r} must not be None."
            )
        self._params[name] = serialize_param(value)
        return self

    # Body

    def get_data(self, host: str | URL) -> bytes:
        """
        Render the request body for `host`, applying the encoder if one is
        set. Returns b"" when there is no content.

        Raises:
            InvalidURL: `host` is not an absolute URL.
            RequestSerializationError: the content or the encoder failed.
                The original exception is chained as ``__cause__``.
        """
        if self._content is None:
            return b""
        target = host if isinstance(host, URL) else parse_host(host)
        try:
            return write_content(self._content, self._encoder, target)
        except Exception as exc:
            raise RequestSerializationError(
                "Request serialization error.", request=self
            ) from exc

    def copy_for(self, path: str) -> Request:
        """
        A new request with the same configuration, targeting `path`.

        Headers and parameters are copied, content, deserializer and encoder
        are shared. The decoder is not carried over.
        """
        copy = type(self)(self._method, path)
        copy._content = self._content
        copy._deserializer = self._deserializer
        copy._encoder = self._encoder
        copy._keep_alive = self._keep_alive
        copy._timeout = self._timeout
        copy._headers = dict(self._headers)
        copy._params = dict(self._params)
        return copy

    def __repr__(self) -> str:
        return f"<Request({self._method.value!r}, {self.absolute_path!r})>"
