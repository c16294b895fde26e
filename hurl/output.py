"""hurl output - render a response for the terminal."""

import json


def title_case_header(name: str) -> str:
    """content-type -> Content-Type"""
    return "-".join(part.capitalize() for part in name.split("-"))


def format_headers(result) -> list[str]:
    headers = {title_case_header(k): v for k, v in (result.headers or {}).items()}
    if "Content-Length" not in headers:
        headers["Content-Length"] = str(len((result.raw_text or "").encode("utf-8")))
    return sorted(f"{k}: {v}" for k, v in headers.items())


def format_body(result) -> str:
    body = result.body
    if isinstance(body, dict | list):
        return json.dumps(body, indent=2, sort_keys=True)
    return str(body) if body is not None else ""


def format_output(result, raw: bool = False) -> str:
    """Format the request result for CLI output.

    Default output is the status line, the sorted response headers, a
    blank line and the body (pretty JSON when it parses). raw returns only
    the body.
    """
    if raw:
        return format_body(result)

    lines = [f"HTTP/{result.http_version} {result.status_code} {result.reason}".rstrip()]
    lines.extend(format_headers(result))
    lines.append("")
    lines.append(format_body(result))
    return "\n".join(lines)
