"""hurl errors - the error kinds surfaced to the CLI layer."""


class HurlError(Exception):
    """Base class for every error hurl reports to the user."""

    message = "hurl error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)

    def __str__(self) -> str:
        return self.args[0]


class ParameterMissingSeparator(HurlError):
    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"Missing separator when parsing parameter: {raw}")


class MissingUrlAndCommand(HurlError):
    message = "Must specify a URL or a method subcommand"


class NotFormButHasFormFile(HurlError):
    message = "Cannot have a file parameter (key@filename) without --form"


class ClientSerialization(HurlError):
    message = "Serializing the request body failed"


class ClientTimeout(HurlError):
    message = "Timeout during request"


class ClientWithStatus(HurlError):
    def __init__(self, status: int):
        self.status = status
        super().__init__(f"Got status code: {status}")


class ClientOther(HurlError):
    message = "Unknown client error"


JSON_CATEGORIES = ("syntax", "data", "eof", "io")


class JsonError(HurlError):
    """JSON handling failed; only the coarse category is kept."""

    def __init__(self, category: str):
        if category not in JSON_CATEGORIES:
            raise ValueError(f"Unknown JSON error category: {category}")
        self.category = category
        super().__init__(f"JSON error: {category}")

    @classmethod
    def from_decode_error(cls, err) -> "JsonError":
        # Running out of input is reported apart from malformed input
        if err.pos >= len(err.doc.rstrip()):
            return cls("eof")
        return cls("syntax")


class IoError(HurlError):
    """A local file could not be read or written."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"IO error: {kind}")

    @classmethod
    def from_os_error(cls, err: OSError) -> "IoError":
        return cls(type(err).__name__)


class UrlParseError(HurlError):
    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"URL parsing error: {detail}")


class ConfigError(HurlError):
    """A config file default has a value of the wrong type."""

    def __init__(self, key: str, value):
        self.key = key
        self.value = value
        super().__init__(f"Invalid config value for {key!r}: {value!r}")
