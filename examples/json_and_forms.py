"""
JSON, Form Data, and Compressed Bodies
======================================

Sending structured data in different encodings.
"""

import gzip
import json

import tinyclient

HOST = "https://api.example.com"


def main() -> None:
    # ── JSON body ────────────────────────────────────────────────────────
    request = tinyclient.Request.create_json_post(
        "items",
        {
            "name": "tinyclient",
            "version": tinyclient.__version__,
        },
    )
    body = request.get_data(HOST)
    print("JSON POST:")
    print(f"  Content-Type: {request.content.content_type}")
    print(f"  Body:         {body.decode()}")
    print()

    # ── URL-encoded form data ────────────────────────────────────────────
    request = tinyclient.Request.create_post("login").set_content(
        tinyclient.FormContent({"username": "admin", "password": "s3cret"})
    )
    print("Form POST:")
    print(f"  Body: {request.get_data(HOST).decode()}")
    print()

    # ── Gzip compressed JSON ─────────────────────────────────────────────
    request = (
        tinyclient.Request.create_json_put("items/1", {"tags": ["a", "b"] * 50})
        .set_encoder(tinyclient.GzipEncoder())
        .set_decoder(tinyclient.GzipEncoder())
    )
    body = request.get_data(HOST)
    print("Gzip PUT:")
    print(f"  Content-Encoding: {request.encoder.name}")
    print(f"  Accept-Encoding:  {request.decoder.name}")
    print(f"  {len(body)} bytes on the wire")
    print(f"  Decoded: {json.loads(gzip.decompress(body))['tags'][:4]}")
    print()

    # ── Serialization failures surface as one error type ─────────────────
    request = tinyclient.Request.create_json_post("items", {"value": float("nan")})
    try:
        request.get_data(HOST)
    except tinyclient.RequestSerializationError as exc:
        print(f"Serialization failed: {exc} (cause: {exc.__cause__!r})")
    print()

    # ── Parsing the response body ────────────────────────────────────────
    deserializer = request.deserializer
    parsed = deserializer.deserialize(b'{"ok": true}', "application/json")
    text = deserializer.deserialize(b"plain text", "text/plain")
    print("Auto deserializer:")
    print(f"  {parsed}")
    print(f"  {text!r}")


if __name__ == "__main__":
    main()
