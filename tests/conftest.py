import io
import os

import pytest

ENVIRONMENT_VARIABLES = {
    "TINYCLIENT_HOST",
}


@pytest.fixture(scope="function", autouse=True)
def clean_environ():
    """Keeps os.environ clean for every test without having to mock os.environ"""
    original_environ = os.environ.copy()
    os.environ.clear()
    os.environ.update(
        {
            k: v
            for k, v in original_environ.items()
            if k not in ENVIRONMENT_VARIABLES and k.upper() not in ENVIRONMENT_VARIABLES
        }
    )
    yield
    os.environ.clear()
    os.environ.update(original_environ)


@pytest.fixture
def host() -> str:
    return "https://api.example.com"


class UpperCaseStream(io.RawIOBase):
    """Upper-cases everything written through it into the wrapped sink."""

    def __init__(self, sink):
        self._sink = sink

    def writable(self):
        return True

    def write(self, data):
        chunk = bytes(data)
        self._sink.write(chunk.upper())
        return len(chunk)


class RecordingEncoder:
    name = "upper"

    def __init__(self):
        self.streams = []

    def get_encoding_stream(self, stream):
        wrapper = UpperCaseStream(stream)
        self.streams.append(wrapper)
        return wrapper

    def get_decoding_stream(self, stream):
        return stream


class BrokenEncoder:
    name = "broken"

    def get_encoding_stream(self, stream):
        raise OSError("encoder unavailable")

    def get_decoding_stream(self, stream):
        raise OSError("encoder unavailable")


class TextContent:
    def __init__(self, text):
        self.text = text

    def write_to(self, stream, host):
        stream.write(self.text.encode("utf-8"))


class FailingContent:
    def __init__(self, exc=None):
        self.exc = exc or ValueError("boom")

    def write_to(self, stream, host):
        stream.write(b"partial")
        raise self.exc


class HostEchoContent:
    def write_to(self, stream, host):
        stream.write(str(host).encode("ascii"))


@pytest.fixture
def recording_encoder() -> RecordingEncoder:
    return RecordingEncoder()
