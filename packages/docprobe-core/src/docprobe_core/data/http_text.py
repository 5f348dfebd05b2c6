"""Parser for raw HTTP text as written in documentation code blocks.

Only the message layout is handled: start line, header lines, blank line,
body. Chunked encoding, continuation lines and the like are not supported.
"""

from docprobe_core.models.http import HttpRequest, HttpResponse

_HTTP_METHODS = {"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"}


def _split_message(text: str) -> tuple[str, list[tuple[str, str]], str]:
    normalized = text.replace("\r\n", "\n").lstrip("\n")
    if not normalized.strip():
        raise ValueError("HTTP message is empty")
    head, _, body = normalized.partition("\n\n")
    lines = head.split("\n")
    headers = []
    for line in lines[1:]:
        if not line.strip():
            continue
        name, colon, value = line.partition(":")
        if not colon or not name.strip():
            raise ValueError(f"malformed header line: {line!r}")
        headers.append((name.strip(), value.strip()))
    return lines[0].strip(), headers, body.strip()


def parse_http_request(text: str) -> HttpRequest:
    """Parse ``GET /path HTTP/1.1`` style text; the HTTP version is optional."""
    start, headers, body = _split_message(text)
    parts = start.split()
    if len(parts) < 2 or parts[0].upper() not in _HTTP_METHODS:
        raise ValueError(f"malformed request line: {start!r}")
    version = parts[2] if len(parts) > 2 else "HTTP/1.1"
    return HttpRequest(method=parts[0].upper(), url=parts[1], http_version=version, headers=headers, body=body)


def parse_http_response(text: str) -> HttpResponse:
    """Parse ``HTTP/1.1 200 OK`` style text."""
    start, headers, body = _split_message(text)
    parts = start.split(" ", 2)
    if len(parts) < 2 or not parts[0].upper().startswith("HTTP/"):
        raise ValueError(f"malformed status line: {start!r}")
    try:
        status = int(parts[1])
    except ValueError as e:
        raise ValueError(f"malformed status code in {start!r}") from e
    reason = parts[2] if len(parts) > 2 else ""
    return HttpResponse(status_code=status, reason=reason, http_version=parts[0], headers=headers, body=body)
