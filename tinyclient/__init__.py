# ruff: noqa: I001
from .__version__ import __description__, __title__, __version__
from ._content import BytesContent, Content, FormContent, JsonContent, write_content
from ._deserializers import (
    AutoResponseDeserializer,
    BytesResponseDeserializer,
    JsonResponseDeserializer,
    ResponseDeserializer,
    TextResponseDeserializer,
)
from ._encoders import ContentEncoder, DeflateEncoder, GzipEncoder
from ._exceptions import (
    AlreadySetError,
    DuplicateHeaderError,
    InvalidArgumentError,
    InvalidURL,
    RequestSerializationError,
    ResponseDeserializationError,
    TinyClientError,
)
from ._models import HttpMethod, KeepAliveMode, Request
from ._uri import compose_absolute_path, compose_uri, serialize_param
from ._urlparse import URL

try:
    from .cli import main
except ImportError:

    def main() -> None:  # type: ignore[misc]
        import sys

        print(
            'The "tinyclient" command requires the CLI extra. '
            'Install it with: pip install "tinyclient[cli]"',
            file=sys.stderr,
        )
        sys.exit(1)


_EXCLUDED_FROM_ALL = {"cli", "main"}

__all__ = sorted(
    (
        member
        for member in list(vars().keys())
        if (
            not member.startswith("_")
            or member in ["__description__", "__title__", "__version__"]
        )
        and member not in _EXCLUDED_FROM_ALL
    ),
    key=str.casefold,
)
