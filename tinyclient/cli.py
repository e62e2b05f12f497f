from __future__ import annotations

import json
import logging
import sys
import typing

import click

from ._content import BytesContent, JsonContent
from ._encoders import DeflateEncoder, GzipEncoder
from ._exceptions import TinyClientError
from ._models import HttpMethod, KeepAliveMode, Request
from ._urlparse import URL

# ---------------------------------------------------------------------------
# Rich output helpers (graceful fallback when rich is not installed)
# ---------------------------------------------------------------------------

try:
    from rich.console import Console
    from rich.syntax import Syntax
    from rich.text import Text

    HAS_RICH = True
except ImportError:  # pragma: no cover
    HAS_RICH = False

logger = logging.getLogger("tinyclient.cli")

_METHOD_COLORS = {
    HttpMethod.GET: "green",
    HttpMethod.POST: "yellow",
    HttpMethod.PUT: "blue",
    HttpMethod.DELETE: "red",
}


def is_binary_content(content: bytes) -> bool:
    return b"\0" in content


def is_binary_content_type(content_type: str) -> bool:
    text_types = (
        "text/",
        "application/json",
        "application/xml",
        "application/javascript",
        "application/x-www-form-urlencoded",
    )
    ct = content_type.lower().split(";")[0].strip()
    return not any(ct.startswith(t) for t in text_types) and ct != ""


# ---------------------------------------------------------------------------
# Wire-form rendering
# ---------------------------------------------------------------------------


def request_headers(
    request: Request, url: URL, body: bytes
) -> list[tuple[str, str]]:
    """The headers a transport would send for `request`, in wire order."""
    headers = [("Host", url.netloc)]
    headers.extend(request.headers)
    names = {key.lower() for key, _ in headers}

    def add(key: str, value: str) -> None:
        if key.lower() not in names:
            headers.append((key, value))
            names.add(key.lower())

    content_type = getattr(request.content, "content_type", None)
    if content_type:
        add("Content-Type", content_type)
    if request.encoder is not None:
        add("Content-Encoding", request.encoder.name)
    if request.decoder is not None:
        add("Accept-Encoding", request.decoder.name)
    if request.keep_alive is KeepAliveMode.TRUE:
        add("Connection", "keep-alive")
    elif request.keep_alive is KeepAliveMode.FALSE:
        add("Connection", "close")
    if body or request.method in (HttpMethod.POST, HttpMethod.PUT):
        add("Content-Length", str(len(body)))
    return headers


def _content_type_of(headers: list[tuple[str, str]]) -> str:
    for key, value in headers:
        if key.lower() == "content-type":
            return value
    return ""


def _body_text(request: Request, body: bytes, content_type: str) -> str | None:
    if request.encoder is not None:
        return None
    if is_binary_content_type(content_type) or is_binary_content(body):
        return None
    return body.decode("utf-8", errors="replace")


def format_request_plain(request: Request, url: URL, body: bytes) -> str:
    headers = request_headers(request, url, body)
    lines: list[str] = [f"{request.method} {url.raw_path} HTTP/1.1"]

    for key, value in headers:
        lines.append(f"{key}: {value}")

    lines.append("")

    if body:
        content_type = _content_type_of(headers)
        text = _body_text(request, body, content_type)
        if text is None:
            lines.append(f"<{len(body)} bytes of binary data>")
        elif "application/json" in content_type:
            try:
                data = json.loads(text)
                lines.append(json.dumps(data, indent=4, ensure_ascii=False))
            except (json.JSONDecodeError, TypeError):
                lines.append(text)
        else:
            lines.append(text)

    return "\n".join(lines)


def print_request_rich(
    console: Console, request: Request, url: URL, body: bytes
) -> None:
    """Pretty-print a request using rich."""
    color = _METHOD_COLORS.get(request.method, "cyan")

    request_line = Text()
    request_line.append(f"{request.method} ", style=f"bold {color}")
    request_line.append(url.raw_path, style="bold")
    request_line.append(" HTTP/1.1", style="dim")
    console.print(request_line)

    headers = request_headers(request, url, body)
    for key, value in headers:
        header_text = Text()
        header_text.append(f"{key}", style="dim cyan")
        header_text.append(": ", style="dim")
        header_text.append(value)
        console.print(header_text)

    console.print()

    if body:
        content_type = _content_type_of(headers)
        text = _body_text(request, body, content_type)
        if text is None:
            console.print(f"[dim]<{len(body)} bytes of binary data>[/dim]")
        elif "application/json" in content_type:
            try:
                data = json.loads(text)
                formatted = json.dumps(data, indent=4, ensure_ascii=False)
                console.print(Syntax(formatted, "json", theme="monokai"))
            except (json.JSONDecodeError, TypeError):
                console.print(text)
        else:
            console.print(text)


# ---------------------------------------------------------------------------
# Option parsing helpers (curl-style -H "Key: Value", -p name=value)
# ---------------------------------------------------------------------------


def parse_header(header: str) -> tuple[str, str]:
    """Parse a 'Key: Value' header string."""
    if ":" not in header:
        raise click.BadParameter(
            f"Invalid header format: '{header}'. Expected 'Key: Value'."
        )
    key, _, value = header.partition(":")
    return key.strip(), value.strip()


def parse_param(param: str) -> tuple[str, str]:
    """Parse a 'name=value' query parameter string."""
    if "=" not in param:
        raise click.BadParameter(
            f"Invalid parameter format: '{param}'. Expected 'name=value'."
        )
    name, _, value = param.partition("=")
    return name, value


def build_request(
    method: str,
    path: str,
    *,
    params: typing.Sequence[str] = (),
    headers: typing.Sequence[str] = (),
    json_body: str | None = None,
    content: str | None = None,
    gzip: bool = False,
    deflate: bool = False,
    accept_gzip: bool = False,
    timeout: float | None = None,
    keep_alive: bool | None = None,
) -> Request:
    request = Request.create(method, path)

    for p in params:
        name, value = parse_param(p)
        request.add_uri_param(name, value)

    for h in headers:
        key, value = parse_header(h)
        request.add_header(key, value)

    if json_body is not None:
        try:
            request.set_content(JsonContent(json.loads(json_body)))
        except json.JSONDecodeError as exc:
            raise click.BadParameter(f"Invalid JSON: {exc}") from exc
    elif content is not None:
        request.set_content(
            BytesContent(content.encode("utf-8"), "text/plain; charset=utf-8")
        )

    if gzip:
        request.set_encoder(GzipEncoder())
    if deflate:
        request.set_encoder(DeflateEncoder())
    if accept_gzip:
        request.set_decoder(GzipEncoder())
    if timeout is not None:
        request.set_timeout(timeout)
    if keep_alive is not None:
        request.set_keep_alive(keep_alive)
    return request


# ---------------------------------------------------------------------------
# CLI command
# ---------------------------------------------------------------------------


@click.command(help="Build an HTTP request and print it in wire form.")
@click.argument("path", default="")
@click.option(
    "--host",
    envvar="TINYCLIENT_HOST",
    required=True,
    help="Target host, e.g. https://api.example.com. [env: TINYCLIENT_HOST]",
)
@click.option(
    "-m",
    "--method",
    default="GET",
    type=click.Choice([m.value for m in HttpMethod], case_sensitive=False),
    help="HTTP method.",
)
@click.option(
    "-p",
    "--param",
    "params",
    multiple=True,
    help='Add a query parameter, e.g. -p "id=42".',
)
@click.option(
    "-H",
    "--header",
    "headers",
    multiple=True,
    help='Add a header, e.g. -H "Authorization: Bearer token".',
)
@click.option(
    "-j", "--json-data", "json_body", default=None, help="JSON data to send."
)
@click.option(
    "-c", "--content", default=None, help="Content to send in the request body."
)
@click.option("--gzip", is_flag=True, default=False, help="Gzip the request body.")
@click.option(
    "--deflate", is_flag=True, default=False, help="Deflate the request body."
)
@click.option(
    "--accept-gzip",
    is_flag=True,
    default=False,
    help="Ask for a gzip encoded response.",
)
@click.option("--timeout", type=float, default=None, help="Timeout in seconds.")
@click.option(
    "--keep-alive/--no-keep-alive",
    default=None,
    help="Force connection reuse on or off.",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Debug logging.")
@click.option(
    "--no-color", is_flag=True, default=False, help="Disable colored output."
)
def main(
    path: str,
    host: str,
    method: str,
    params: tuple[str, ...],
    headers: tuple[str, ...],
    json_body: str | None,
    content: str | None,
    gzip: bool,
    deflate: bool,
    accept_gzip: bool,
    timeout: float | None,
    keep_alive: bool | None,
    verbose: bool,
    no_color: bool,
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    use_rich = HAS_RICH and not no_color and sys.stdout.isatty()

    try:
        request = build_request(
            method,
            path,
            params=params,
            headers=headers,
            json_body=json_body,
            content=content,
            gzip=gzip,
            deflate=deflate,
            accept_gzip=accept_gzip,
            timeout=timeout,
            keep_alive=keep_alive,
        )
        url = request.get_uri_for(host)
        body = request.get_data(host)
        logger.debug("Built %r for %s", request, url)

        if use_rich:
            console = Console()
            print_request_rich(console, request, url, body)
            if request.timeout is not None:
                console.print()
                console.print(f"[dim]⏱  Timeout: {request.timeout:g}s[/dim]")
        else:
            click.echo(format_request_plain(request, url, body))
            if request.timeout is not None:
                click.echo()
                click.echo(f"Timeout: {request.timeout:g}s")

    except TinyClientError as exc:
        if use_rich:
            console = Console(stderr=True)
            console.print(f"[bold red]{type(exc).__name__}[/bold red]: {exc}")
        else:
            click.echo(f"{type(exc).__name__}: {exc}", err=True)
        sys.exit(1)
