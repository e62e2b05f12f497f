from __future__ import annotations

import datetime
import gzip
import json

import pytest
from conftest import (
    BrokenEncoder,
    FailingContent,
    HostEchoContent,
    RecordingEncoder,
    TextContent,
)

import tinyclient
from tinyclient import HttpMethod, KeepAliveMode, Request


class TestFactories:
    def test_create_defaults(self) -> None:
        request = Request.create(HttpMethod.GET)

        assert request.method is HttpMethod.GET
        assert request.path == ""
        assert request.headers == []
        assert request.params == {}
        assert request.content is None
        assert request.encoder is None
        assert request.decoder is None
        assert isinstance(request.deserializer, tinyclient.AutoResponseDeserializer)
        assert request.keep_alive is KeepAliveMode.UP_TO_CLIENT
        assert request.timeout is None

    @pytest.mark.parametrize(
        "factory, method",
        [
            (Request.create_get, HttpMethod.GET),
            (Request.create_post, HttpMethod.POST),
            (Request.create_put, HttpMethod.PUT),
            (Request.create_delete, HttpMethod.DELETE),
        ],
    )
    def test_method_factories(self, factory, method) -> None:
        request = factory("items")
        assert request.method is method
        assert request.path == "items"
        assert request.content is None

    def test_method_factories_without_path(self) -> None:
        assert Request.create_get().path == ""
        assert Request.create_get().absolute_path == "/"

    def test_create_accepts_method_name(self) -> None:
        assert Request.create("post", "x").method is HttpMethod.POST
        assert Request("DELETE").method is HttpMethod.DELETE

    def test_create_rejects_unknown_method(self) -> None:
        with pytest.raises(tinyclient.InvalidArgumentError):
            Request.create("PATCH")

    @pytest.mark.parametrize(
        "factory, method",
        [
            (Request.create_json_post, HttpMethod.POST),
            (Request.create_json_put, HttpMethod.PUT),
            (Request.create_json_delete, HttpMethod.DELETE),
        ],
    )
    def test_json_factories(self, factory, method, host) -> None:
        request = factory("items", {"name": "a"})

        assert request.method is method
        assert request.path == "items"
        assert isinstance(request.content, tinyclient.JsonContent)
        assert json.loads(request.get_data(host)) == {"name": "a"}

    def test_json_factory_without_path(self, host) -> None:
        request = Request.create_json_post({"name": "a"})

        assert request.method is HttpMethod.POST
        assert request.path == ""
        assert json.loads(request.get_data(host)) == {"name": "a"}

    def test_json_factory_with_string_body(self, host) -> None:
        request = Request.create_json_put("notes/1", "just text")
        assert json.loads(request.get_data(host)) == "just text"


class TestHeaders:
    def test_mutators_return_self(self) -> None:
        request = Request.create_get("x")

        assert request.add_header("A", "1") is request
        assert request.add_header_or_fail("B", "2") is request
        assert request.add_uri_param("c", 3) is request
        assert request.set_keep_alive(True) is request
        assert request.set_timeout(1) is request
        assert request.set_content(None) is request
        assert request.set_encoder(RecordingEncoder()) is request
        assert request.set_decoder(RecordingEncoder()) is request
        assert request.set_deserializer(tinyclient.JsonResponseDeserializer()) is request

    def test_add_header_last_write_wins(self) -> None:
        request = Request.create_get("x").add_header("X-Token", "a")
        request.add_header("X-Token", "b")

        assert request.headers == [("X-Token", "b")]

    def test_header_names_are_case_sensitive(self) -> None:
        request = Request.create_get("x").add_header("X-Token", "a")
        request.add_header("x-token", "b")

        assert sorted(request.headers) == [("X-Token", "a"), ("x-token", "b")]

    def test_add_header_or_fail(self) -> None:
        request = Request.create_get("x").add_header_or_fail("X-Token", "a")

        with pytest.raises(tinyclient.DuplicateHeaderError) as exc_info:
            request.add_header_or_fail("X-Token", "b")

        assert exc_info.value.key == "X-Token"
        assert request.headers == [("X-Token", "a")]

    def test_add_header_or_fail_after_upsert(self) -> None:
        request = Request.create_get("x").add_header("Accept", "text/plain")

        with pytest.raises(tinyclient.DuplicateHeaderError):
            request.add_header_or_fail("Accept", "application/json")

    def test_headers_view_is_a_copy(self) -> None:
        request = Request.create_get("x").add_header("A", "1")
        request.headers.append(("B", "2"))

        assert request.headers == [("A", "1")]


class TestWriteOnceSlots:
    def test_encoder_can_only_be_set_once(self) -> None:
        first, second = RecordingEncoder(), RecordingEncoder()
        request = Request.create_post("x").set_encoder(first)

        with pytest.raises(tinyclient.AlreadySetError):
            request.set_encoder(second)

        assert request.encoder is first

    def test_decoder_can_only_be_set_once(self) -> None:
        first, second = tinyclient.GzipEncoder(), tinyclient.DeflateEncoder()
        request = Request.create_get("x").set_decoder(first)

        with pytest.raises(tinyclient.AlreadySetError):
            request.set_decoder(second)

        assert request.decoder is first

    def test_encoder_and_decoder_are_independent(self) -> None:
        gzip_encoder = tinyclient.GzipEncoder()
        request = (
            Request.create_post("x").set_encoder(gzip_encoder).set_decoder(gzip_encoder)
        )

        assert request.encoder is gzip_encoder
        assert request.decoder is gzip_encoder


class TestOptions:
    def test_keep_alive(self) -> None:
        request = Request.create_get("x")

        assert request.set_keep_alive(True).keep_alive is KeepAliveMode.TRUE
        assert request.set_keep_alive(False).keep_alive is KeepAliveMode.FALSE

    def test_timeout_in_seconds(self) -> None:
        request = Request.create_get("x").set_timeout(5)
        assert request.timeout == 5.0

    def test_timeout_from_timedelta(self) -> None:
        request = Request.create_get("x").set_timeout(
            datetime.timedelta(milliseconds=1500)
        )
        assert request.timeout == 1.5

    def test_timeout_is_replaced(self) -> None:
        request = Request.create_get("x").set_timeout(5).set_timeout(10)
        assert request.timeout == 10.0

    def test_deserializer_is_replaced(self) -> None:
        text = tinyclient.TextResponseDeserializer()
        raw = tinyclient.BytesResponseDeserializer()
        request = Request.create_get("x").set_deserializer(text).set_deserializer(raw)

        assert request.deserializer is raw

    def test_content_is_replaced(self) -> None:
        first, second = TextContent("a"), TextContent("b")
        request = Request.create_post("x").set_content(first).set_content(second)

        assert request.content is second


class TestUriParams:
    def test_absolute_path(self) -> None:
        request = Request.create_get("search").add_uri_param("text", "hi")
        assert request.absolute_path == "/search?text=hi"

    def test_int_param(self) -> None:
        request = Request.create_get("users").add_uri_param("id", 42)
        assert request.absolute_path == "/users?id=42"

    def test_param_values_are_serialized(self) -> None:
        request = (
            Request.create_get("events")
            .add_uri_param("active", True)
            .add_uri_param("ratio", 0.25)
            .add_uri_param("since", datetime.date(2024, 1, 31))
        )

        assert request.params == {
            "active": "true",
            "ratio": "0.25",
            "since": "2024-01-31",
        }

    def test_param_last_write_wins(self) -> None:
        request = Request.create_get("users").add_uri_param("id", 1)
        request.add_uri_param("id", 2)

        assert request.params == {"id": "2"}
        assert request.absolute_path == "/users?id=2"

    def test_params_merge_with_literal_query(self) -> None:
        request = Request.create_get("search?lang=en").add_uri_param("text", "hi")
        assert request.absolute_path == "/search?lang=en&text=hi"

    @pytest.mark.parametrize(
        "name, value",
        [("", "x"), (None, "x"), ("k", None)],
    )
    def test_invalid_param(self, name, value) -> None:
        request = Request.create_get("users").add_uri_param("id", 1)

        with pytest.raises(tinyclient.InvalidArgumentError):
            request.add_uri_param(name, value)

        assert request.params == {"id": "1"}

    def test_falsy_values_are_accepted(self) -> None:
        request = (
            Request.create_get("x")
            .add_uri_param("zero", 0)
            .add_uri_param("empty", "")
            .add_uri_param("no", False)
        )
        assert request.absolute_path == "/x?zero=0&empty=&no=false"

    def test_params_view_is_a_copy(self) -> None:
        request = Request.create_get("x").add_uri_param("a", 1)
        request.params["b"] = "2"

        assert request.params == {"a": "1"}

    def test_get_uri_for(self, host) -> None:
        request = Request.create_get("users").add_uri_param("id", 42)
        url = request.get_uri_for(host)

        assert isinstance(url, tinyclient.URL)
        assert str(url) == "https://api.example.com/users?id=42"
        assert url.raw_path == request.absolute_path

    def test_get_uri_for_invalid_host(self) -> None:
        request = Request.create_get("users")

        with pytest.raises(tinyclient.InvalidURL):
            request.get_uri_for("api.example.com")


class TestGetData:
    def test_no_content_returns_empty_bytes(self, host, recording_encoder) -> None:
        request = Request.create_post("x").set_encoder(recording_encoder)

        assert request.get_data(host) == b""
        assert recording_encoder.streams == []

    def test_no_content_ignores_host(self) -> None:
        assert Request.create_get("x").get_data("") == b""

    def test_content_without_encoder(self, host) -> None:
        request = Request.create_post("x").set_content(TextContent("hello"))
        assert request.get_data(host) == b"hello"

    def test_content_through_encoder(self, host, recording_encoder) -> None:
        request = (
            Request.create_post("x")
            .set_content(TextContent("hello"))
            .set_encoder(recording_encoder)
        )

        assert request.get_data(host) == b"HELLO"
        assert len(recording_encoder.streams) == 1
        assert recording_encoder.streams[0].closed

    def test_json_post_end_to_end(self, host) -> None:
        data = Request.create_json_post("items", {"name": "a"}).get_data(host)

        assert data
        assert json.loads(data.decode("utf-8")) == {"name": "a"}

    def test_json_post_with_gzip(self, host) -> None:
        request = Request.create_json_post("items", {"name": "a"}).set_encoder(
            tinyclient.GzipEncoder()
        )

        data = request.get_data(host)

        assert json.loads(gzip.decompress(data)) == {"name": "a"}

    def test_content_receives_host(self, host) -> None:
        request = Request.create_post("x").set_content(HostEchoContent())
        assert request.get_data(host) == b"https://api.example.com"

    def test_content_receives_host_url(self, host) -> None:
        request = Request.create_post("x").set_content(HostEchoContent())
        url = request.get_uri_for(host)

        assert request.get_data(url) == b"https://api.example.com/x"

    def test_content_failure_is_wrapped(self, host) -> None:
        cause = ValueError("boom")
        request = Request.create_post("x").set_content(FailingContent(cause))

        with pytest.raises(tinyclient.RequestSerializationError) as exc_info:
            request.get_data(host)

        assert exc_info.value.__cause__ is cause
        assert exc_info.value.request is request
        assert str(exc_info.value) == "Request serialization error."

    def test_encoder_failure_is_wrapped(self, host) -> None:
        request = (
            Request.create_post("x")
            .set_content(TextContent("hello"))
            .set_encoder(BrokenEncoder())
        )

        with pytest.raises(tinyclient.RequestSerializationError) as exc_info:
            request.get_data(host)

        assert isinstance(exc_info.value.__cause__, OSError)

    def test_encoding_stream_is_closed_on_failure(
        self, host, recording_encoder
    ) -> None:
        request = (
            Request.create_post("x")
            .set_content(FailingContent())
            .set_encoder(recording_encoder)
        )

        with pytest.raises(tinyclient.RequestSerializationError):
            request.get_data(host)

        assert recording_encoder.streams[0].closed

    def test_request_is_reusable_after_failure(self, host) -> None:
        request = Request.create_post("x").set_content(FailingContent())

        with pytest.raises(tinyclient.RequestSerializationError):
            request.get_data(host)

        request.set_content(TextContent("ok"))
        assert request.get_data(host) == b"ok"

    def test_unserializable_json_is_wrapped(self, host) -> None:
        request = Request.create_json_post("x", {"value": float("nan")})

        with pytest.raises(tinyclient.RequestSerializationError) as exc_info:
            request.get_data(host)

        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_get_data_is_repeatable(self, host) -> None:
        request = Request.create_json_post("x", [1, 2, 3]).set_encoder(
            tinyclient.GzipEncoder()
        )
        assert request.get_data(host) == request.get_data(host)

    def test_debug_logging(self, host, caplog) -> None:
        request = Request.create_json_post("x", {"name": "a"})

        with caplog.at_level("DEBUG", logger="tinyclient.content"):
            request.get_data(host)

        assert "Serialized JsonContent as 12 bytes" in caplog.text


class TestCopyFor:
    def _configured(self) -> Request:
        return (
            Request.create_json_put("items/1", {"name": "a"})
            .add_header("X-Token", "secret")
            .add_uri_param("dry_run", True)
            .set_encoder(tinyclient.GzipEncoder())
            .set_decoder(tinyclient.GzipEncoder())
            .set_deserializer(tinyclient.JsonResponseDeserializer())
            .set_keep_alive(False)
            .set_timeout(3)
        )

    def test_copy_for(self) -> None:
        original = self._configured()
        copy = original.copy_for("items/2")

        assert copy is not original
        assert copy.path == "items/2"
        assert copy.method is original.method
        assert copy.headers == original.headers
        assert copy.params == original.params
        assert copy.content is original.content
        assert copy.deserializer is original.deserializer
        assert copy.encoder is original.encoder
        assert copy.keep_alive is KeepAliveMode.FALSE
        assert copy.timeout == 3.0
        assert copy.absolute_path == "/items/2?dry_run=true"

    def test_copy_does_not_carry_decoder(self) -> None:
        copy = self._configured().copy_for("items/2")
        assert copy.decoder is None

    def test_copy_has_independent_maps(self) -> None:
        original = self._configured()
        copy = original.copy_for("items/2")

        copy.add_header("X-Token", "other").add_header("X-Extra", "1")
        copy.add_uri_param("page", 2)
        original.add_header("X-Original", "1")

        assert original.headers == [("X-Token", "secret"), ("X-Original", "1")]
        assert original.params == {"dry_run": "true"}
        assert copy.headers == [("X-Token", "other"), ("X-Extra", "1")]
        assert copy.params == {"dry_run": "true", "page": "2"}

    def test_copy_keeps_encoder_guard(self) -> None:
        copy = self._configured().copy_for("items/2")

        with pytest.raises(tinyclient.AlreadySetError):
            copy.set_encoder(tinyclient.DeflateEncoder())

    def test_copy_produces_same_body(self, host) -> None:
        original = self._configured()
        copy = original.copy_for("items/2")

        assert copy.get_data(host) == original.get_data(host)


def test_repr() -> None:
    request = Request.create_get("users").add_uri_param("id", 42)
    assert repr(request) == "<Request('GET', '/users?id=42')>"


def test_http_method_str() -> None:
    assert str(HttpMethod.POST) == "POST"
    assert f"{HttpMethod.PUT}" == "PUT"
