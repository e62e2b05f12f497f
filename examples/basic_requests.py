"""
Basic Requests
==============

Builds requests with the factory methods and inspects what a transport
would send: method, target URL, headers and body bytes.
"""

import tinyclient

HOST = "https://api.example.com/v1"


def main() -> None:
    # ── GET with query parameters ────────────────────────────────────────
    request = (
        tinyclient.Request.create_get("users")
        .add_uri_param("id", 42)
        .add_uri_param("active", True)
        .add_header("Accept", "application/json")
    )
    print(f"GET    → {request.absolute_path}")
    print(f"  URL:     {request.get_uri_for(HOST)}")
    print(f"  Headers: {request.headers}")
    print()

    # ── Literal query fragments merge with parameters ────────────────────
    request = tinyclient.Request.create_get("search?lang=en")
    request.add_uri_param("text", "hi")
    print(f"GET    → {request.absolute_path}")
    print()

    # ── DELETE with connection and timeout hints ─────────────────────────
    request = (
        tinyclient.Request.create_delete("users/42")
        .set_keep_alive(False)
        .set_timeout(2.5)
    )
    print(f"DELETE → {request.absolute_path}")
    print(f"  Keep-alive: {request.keep_alive.name}")
    print(f"  Timeout:    {request.timeout}s")
    print(f"  Body:       {request.get_data(HOST)!r}")
    print()

    # ── Reusing a configured request against another path ────────────────
    page_one = (
        tinyclient.Request.create_get("reports")
        .add_header("Authorization", "Bearer token")
        .add_uri_param("page", 1)
    )
    page_two = page_one.copy_for("reports/archive")
    print(f"Copy   → {page_two.absolute_path}")
    print(f"  Same headers: {page_two.headers == page_one.headers}")


if __name__ == "__main__":
    main()
