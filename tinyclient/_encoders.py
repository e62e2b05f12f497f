from __future__ import annotations

import gzip
import io
import typing
import zlib

__all__ = ["ContentEncoder", "DeflateEncoder", "GzipEncoder"]


@typing.runtime_checkable
class ContentEncoder(typing.Protocol):
    """
    A byte transform applied to request bodies (as an encoder) or response
    bodies (as a decoder).

    `name` is the HTTP content-coding token, e.g. ``"gzip"``. Closing an
    encoding stream finalizes it but must leave the wrapped stream open.
    """

    name: str

    def get_encoding_stream(self, stream: typing.BinaryIO) -> typing.BinaryIO: ...

    def get_decoding_stream(self, stream: typing.BinaryIO) -> typing.BinaryIO: ...


class GzipEncoder:
    name = "gzip"

    def __init__(self, compresslevel: int = 9) -> None:
        self.compresslevel = compresslevel

    def get_encoding_stream(self, stream: typing.BinaryIO) -> typing.BinaryIO:
        # mtime=0 keeps the output identical across retries.
        return gzip.GzipFile(  # type: ignore[return-value]
            fileobj=stream, mode="wb", compresslevel=self.compresslevel, mtime=0
        )

    def get_decoding_stream(self, stream: typing.BinaryIO) -> typing.BinaryIO:
        return gzip.GzipFile(fileobj=stream, mode="rb")  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"GzipEncoder(compresslevel={self.compresslevel})"


class _ZlibWriter(io.RawIOBase):
    def __init__(self, sink: typing.BinaryIO, level: int) -> None:
        self._sink = sink
        self._compressor = zlib.compressobj(level)

    def writable(self) -> bool:
        return True

    def write(self, data: typing.Any) -> int:
        chunk = bytes(data)
        compressed = self._compressor.compress(chunk)
        if compressed:
            self._sink.write(compressed)
        return len(chunk)

    def close(self) -> None:
        if self.closed:
            return
        try:
            self._sink.write(self._compressor.flush())
        finally:
            super().close()


class _ZlibReader(io.RawIOBase):
    def __init__(self, source: typing.BinaryIO, chunk_size: int = 65536) -> None:
        self._source = source
        self._chunk_size = chunk_size
        self._decompressor = zlib.decompressobj()
        self._pending = b""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: typing.Any) -> int:
        while not self._pending and not self._decompressor.eof:
            chunk = self._source.read(self._chunk_size)
            if not chunk:
                self._pending = self._decompressor.flush()
                break
            self._pending = self._decompressor.decompress(chunk)

        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size


class DeflateEncoder:
    """
    The HTTP "deflate" coding: a zlib (RFC 1950) wrapped deflate stream.
    """

    name = "deflate"

    def __init__(self, level: int = -1) -> None:
        self.level = level

    def get_encoding_stream(self, stream: typing.BinaryIO) -> typing.BinaryIO:
        return _ZlibWriter(stream, self.level)  # type: ignore[return-value]

    def get_decoding_stream(self, stream: typing.BinaryIO) -> typing.BinaryIO:
        return _ZlibReader(stream)  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"DeflateEncoder(level={self.level})"
