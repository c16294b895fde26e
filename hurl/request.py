"""hurl request assembly - turn parsed parameters into one outbound request."""

import json
import mimetypes
import os
from dataclasses import dataclass, field
from urllib.parse import urlencode, urlsplit, urlunsplit

from requests.structures import CaseInsensitiveDict

from hurl.errors import (
    ClientSerialization,
    IoError,
    JsonError,
    NotFormButHasFormFile,
    UrlParseError,
)
from hurl.params import (
    Data,
    DataFile,
    FormFile,
    Header,
    Parameter,
    Query,
    RawJsonData,
    RawJsonDataFile,
    has_data,
)

METHODS = ("HEAD", "GET", "PUT", "POST", "PATCH", "DELETE")

BODY_NONE = "none"
BODY_JSON = "json"
BODY_FORM = "form"
BODY_MULTIPART = "multipart"

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"


@dataclass(frozen=True)
class AppRequestConfig:
    """Merged settings for one invocation, after precedence resolution."""

    url: str
    method: str | None = None
    form: bool = False
    secure: bool = False
    read_only: bool = False
    auth: str | None = None
    token: str | None = None
    parameters: tuple[Parameter, ...] = ()
    timeout: float = 30


@dataclass
class RequestDescriptor:
    """A fully specified request, ready for the transport.

    body holds the encoded text for json/form bodies and the ordered
    (name, value) text parts for multipart bodies; files holds the
    multipart file parts as (name, (filename, content, mime_type)).
    """

    method: str
    url: str
    headers: list[tuple[str, str]] = field(default_factory=list)
    body_kind: str = BODY_NONE
    body: str | list[tuple[str, str]] | None = None
    files: list[tuple[str, tuple[str, bytes, str]]] = field(default_factory=list)

    def header(self, name: str) -> str | None:
        for key, value in self.headers:
            if key.lower() == name.lower():
                return value
        return None


# ── URL ──────────────────────────────────────────────────────────────────


def with_scheme(url: str, secure: bool = False) -> str:
    """Prefix a scheme-less URL with http:// (https:// when secure)."""
    if "://" in url:
        return url
    return ("https://" if secure else "http://") + url


def url_host(url: str, secure: bool = False) -> str:
    """Return host[:port] the request will go to (used to key sessions).

    Userinfo is dropped so credentials never reach a session path.
    """
    parts = _split_url(with_scheme(url, secure))
    host = parts.hostname
    if not host or host in (".", ".."):
        raise UrlParseError(f"invalid host in {url!r}")
    if parts.port is not None:
        return f"{host}:{parts.port}"
    return host


def _split_url(url: str):
    try:
        parts = urlsplit(url)
        parts.port  # noqa: B018 - validates the port
    except ValueError as e:
        raise UrlParseError(str(e)) from e
    if not parts.netloc:
        raise UrlParseError(f"no host in {url!r}")
    return parts


def build_url(url: str, secure: bool, queries: list[Query]) -> str:
    """Add the scheme if missing and append query parameters."""
    url = with_scheme(url, secure)
    parts = _split_url(url)
    if not queries:
        return url
    encoded = urlencode([(q.key, q.value) for q in queries])
    query = f"{parts.query}&{encoded}" if parts.query else encoded
    return urlunsplit(parts._replace(query=query))


# ── Files and JSON ───────────────────────────────────────────────────────


def _read_bytes(filename: str) -> bytes:
    try:
        with open(os.path.expanduser(filename), "rb") as f:
            return f.read()
    except OSError as e:
        raise IoError.from_os_error(e) from e


def _read_text(filename: str) -> str:
    try:
        return _read_bytes(filename).decode("utf-8")
    except UnicodeDecodeError as e:
        raise IoError("InvalidData") from e


def _parse_json(text: str):
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise JsonError.from_decode_error(e) from e


def data_value(p: Parameter):
    """Resolve a data-bearing parameter to its body value."""
    if isinstance(p, Data):
        return p.value
    if isinstance(p, DataFile):
        return _read_text(p.filename)
    if isinstance(p, RawJsonData):
        return _parse_json(p.value)
    if isinstance(p, RawJsonDataFile):
        return _parse_json(_read_text(p.filename))
    raise TypeError(p)


def _form_value(p: Parameter) -> str:
    """Form fields are text; raw JSON values are sent as compact JSON text."""
    value = data_value(p)
    if isinstance(p, (RawJsonData, RawJsonDataFile)):
        return _dump_json(value)
    return value


def _dump_json(obj) -> str:
    try:
        return json.dumps(obj, sort_keys=True, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as e:
        raise ClientSerialization() from e


def _file_part(p: FormFile) -> tuple[str, tuple[str, bytes, str]]:
    content = _read_bytes(p.filename)
    mime = mimetypes.guess_type(p.filename)[0] or "application/octet-stream"
    return (p.key, (os.path.basename(p.filename), content, mime))


# ── Assembly ─────────────────────────────────────────────────────────────


def infer_method(explicit: str | None, parameters: list[Parameter]) -> str:
    """Explicit method wins; otherwise POST when there is a body, else GET."""
    if explicit:
        return explicit.upper()
    return "POST" if has_data(parameters) else "GET"


def assemble(
    config: AppRequestConfig,
    parameters: list[Parameter],
    auth=None,
    session=None,
) -> RequestDescriptor:
    """Build the request descriptor for one invocation.

    Reads any files named by file parameters; nothing else is touched.
    """
    parameters = list(parameters)
    form_files = [p for p in parameters if isinstance(p, FormFile)]
    if form_files and not config.form:
        raise NotFormButHasFormFile()

    queries = [p for p in parameters if isinstance(p, Query)]
    header_params = [p for p in parameters if isinstance(p, Header)]
    data_params = [p for p in parameters if p.is_data]

    url = build_url(config.url, config.secure, queries)
    method = infer_method(config.method, parameters)

    headers: CaseInsensitiveDict = CaseInsensitiveDict()
    if session is not None:
        headers.update(session.headers)
    for p in header_params:
        headers[p.key] = p.value

    descriptor = RequestDescriptor(method=method, url=url)

    if form_files:
        descriptor.body_kind = BODY_MULTIPART
        descriptor.body = [(p.key, _form_value(p)) for p in data_params]
        descriptor.files = [_file_part(p) for p in form_files]
    elif config.form and any(isinstance(p, (Data, DataFile)) for p in data_params):
        descriptor.body_kind = BODY_FORM
        descriptor.body = urlencode([(p.key, _form_value(p)) for p in data_params])
        if "Content-Type" not in headers:
            headers["Content-Type"] = FORM_CONTENT_TYPE
    elif data_params:
        body = {}
        for p in data_params:
            body[p.key] = data_value(p)
        descriptor.body_kind = BODY_JSON
        descriptor.body = _dump_json(body)
        if "Content-Type" not in headers:
            headers["Content-Type"] = JSON_CONTENT_TYPE
        if "Accept" not in headers:
            headers["Accept"] = JSON_CONTENT_TYPE

    if auth is not None:
        name, value = auth.header()
        headers[name] = value

    cookie = session.cookie_header() if session is not None else None
    if cookie:
        existing = headers.get("Cookie")
        headers["Cookie"] = f"{existing}; {cookie}" if existing else cookie

    descriptor.headers = list(headers.items())
    return descriptor
