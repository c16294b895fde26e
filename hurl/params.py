"""hurl params - the key/separator/value request item mini-language.

Every positional argument after the URL is one item:

  Header           key:value        X-API-TOKEN:abc123
  Query            key==value       foo==bar
  Data             key=value        name=hurl
  RawJsonData      key:=value       meta:=[1,2,3]
  FormFile         key@filename     avatar@me.png     (requires --form)
  DataFile         key=@filename    bio=@bio.txt
  RawJsonDataFile  key:=@filename   meta:=@meta.json

A backslash before a separator character makes it literal: a\\:b=c is the
data field "a:b" with value "c".
"""

from dataclasses import dataclass
from typing import ClassVar

from hurl.errors import ParameterMissingSeparator

SEP_HEADER = ":"
SEP_QUERY = "=="
SEP_DATA = "="
SEP_RAW_JSON = ":="
SEP_FORM_FILE = "@"
SEP_DATA_FILE = "=@"
SEP_RAW_JSON_FILE = ":=@"

# Longest first: at any position the longest matching separator wins.
SEPARATORS = sorted(
    [
        SEP_HEADER,
        SEP_QUERY,
        SEP_DATA,
        SEP_RAW_JSON,
        SEP_FORM_FILE,
        SEP_DATA_FILE,
        SEP_RAW_JSON_FILE,
    ],
    key=len,
    reverse=True,
)

ESCAPE = "\\"
SEPARATOR_CHARS = frozenset("".join(SEPARATORS))


@dataclass(frozen=True)
class Parameter:
    key: str
    value: str

    sep: ClassVar[str] = ""
    is_data: ClassVar[bool] = False
    is_file: ClassVar[bool] = False

    def __str__(self) -> str:
        return f"{self.key}{self.sep}{self.value}"


@dataclass(frozen=True)
class Header(Parameter):
    sep: ClassVar[str] = SEP_HEADER


@dataclass(frozen=True)
class Query(Parameter):
    sep: ClassVar[str] = SEP_QUERY


@dataclass(frozen=True)
class Data(Parameter):
    sep: ClassVar[str] = SEP_DATA
    is_data: ClassVar[bool] = True


@dataclass(frozen=True)
class RawJsonData(Parameter):
    sep: ClassVar[str] = SEP_RAW_JSON
    is_data: ClassVar[bool] = True


@dataclass(frozen=True)
class FormFile(Parameter):
    sep: ClassVar[str] = SEP_FORM_FILE
    is_file: ClassVar[bool] = True

    @property
    def filename(self) -> str:
        return self.value


@dataclass(frozen=True)
class DataFile(Parameter):
    sep: ClassVar[str] = SEP_DATA_FILE
    is_data: ClassVar[bool] = True
    is_file: ClassVar[bool] = True

    @property
    def filename(self) -> str:
        return self.value


@dataclass(frozen=True)
class RawJsonDataFile(Parameter):
    sep: ClassVar[str] = SEP_RAW_JSON_FILE
    is_data: ClassVar[bool] = True
    is_file: ClassVar[bool] = True

    @property
    def filename(self) -> str:
        return self.value


PARAMETER_TYPES: dict[str, type[Parameter]] = {
    cls.sep: cls
    for cls in (Header, Query, Data, RawJsonData, FormFile, DataFile, RawJsonDataFile)
}


def _tokenize(raw: str) -> list[tuple[str, bool]]:
    """Split raw into (char, escaped) pairs.

    Only separator characters can be escaped; any other backslash is kept
    as a literal character.
    """
    tokens: list[tuple[str, bool]] = []
    i = 0
    while i < len(raw):
        c = raw[i]
        if c == ESCAPE and i + 1 < len(raw) and raw[i + 1] in SEPARATOR_CHARS:
            tokens.append((raw[i + 1], True))
            i += 2
        else:
            tokens.append((c, False))
            i += 1
    return tokens


def _match_at(tokens: list[tuple[str, bool]], pos: int) -> str | None:
    """Return the longest separator starting at pos, if any."""
    for sep in SEPARATORS:
        window = tokens[pos : pos + len(sep)]
        if len(window) != len(sep):
            continue
        if all(not escaped and c == s for (c, escaped), s in zip(window, sep)):
            return sep
    return None


def parse_param(raw: str) -> Parameter:
    """Parse one raw command-line item into its Parameter variant.

    The earliest unescaped separator decides the split; at that position
    the longest separator wins, so ``x:=@f.json`` is a RawJsonDataFile and
    not RawJsonData with the value ``@f.json``.
    """
    tokens = _tokenize(raw)
    for pos in range(len(tokens)):
        sep = _match_at(tokens, pos)
        if sep is None:
            continue
        key = "".join(c for c, _ in tokens[:pos])
        value = "".join(c for c, _ in tokens[pos + len(sep) :])
        return PARAMETER_TYPES[sep](key=key, value=value)
    raise ParameterMissingSeparator(raw)


def parse_params(raws: tuple[str, ...] | list[str]) -> list[Parameter]:
    """Parse items in order, failing on the first malformed one."""
    return [parse_param(raw) for raw in raws]


def has_data(parameters: list[Parameter]) -> bool:
    """True when any parameter contributes to the request body."""
    return any(p.is_data for p in parameters)
