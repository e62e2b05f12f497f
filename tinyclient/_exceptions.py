"""
Exception hierarchy:

* TinyClientError
  + DuplicateHeaderError
  + AlreadySetError
  + InvalidArgumentError
    - InvalidURL
  + RequestSerializationError
  + ResponseDeserializationError
"""

from __future__ import annotations

import typing

if typing.TYPE_CHECKING:
    from ._models import Request

__all__ = [
    "AlreadySetError",
    "DuplicateHeaderError",
    "InvalidArgumentError",
    "InvalidURL",
    "RequestSerializationError",
    "ResponseDeserializationError",
    "TinyClientError",
]


class TinyClientError(Exception):
    """
    Base class for every error raised by tinyclient.
    """


class DuplicateHeaderError(TinyClientError, ValueError):
    """
    A header was added with `add_header_or_fail` while already present.
    """

    def __init__(self, key: str) -> None:
        super().__init__(f"Header {key!r} is already set.")
        self.key = key


class AlreadySetError(TinyClientError, RuntimeError):
    """
    A write-once slot (encoder or decoder) was assigned a second time.
    """


class InvalidArgumentError(TinyClientError, ValueError):
    """
    An argument was empty or missing.
    """


class InvalidURL(InvalidArgumentError):
    """
    A host or URL could not be parsed or encoded.
    """


class RequestSerializationError(TinyClientError):
    """
    Writing the request body failed.

    The underlying exception is always available as ``__cause__``.
    """

    def __init__(self, message: str, *, request: Request | None = None) -> None:
        super().__init__(message)
        self._request = request

    @property
    def request(self) -> Request:
        if self._request is None:
            raise RuntimeError("The .request property has not been set.")
        return self._request

    @request.setter
    def request(self, request: Request) -> None:
        self._request = request


class ResponseDeserializationError(TinyClientError):
    """
    A response body could not be parsed by the selected deserializer.
    """
