"""hurl auth - resolve which credential a request is sent with."""

import base64
from collections.abc import Callable

import click

BASIC = "basic"
BEARER = "bearer"

SEP_CREDENTIALS = ":"


class ResolvedAuth:
    """The credential actually used for a request."""

    def __init__(self, kind: str, value: str):
        self.kind = kind
        self.value = value

    def __eq__(self, other):
        return isinstance(other, ResolvedAuth) and (self.kind, self.value) == (
            other.kind,
            other.value,
        )

    def __repr__(self):
        return f"ResolvedAuth({self.kind!r}, {self.value!r})"

    def header(self) -> tuple[str, str]:
        if self.kind == BEARER:
            return ("Authorization", f"Bearer {self.value}")
        credentials = base64.b64encode(self.value.encode()).decode()
        return ("Authorization", f"Basic {credentials}")


def prompt_password(username: str) -> str:
    return click.prompt(
        f"hurl: password for {username}",
        hide_input=True,
        default="",
        show_default=False,
        err=True,
    )


def complete_basic(
    credentials: str,
    prompt: Callable[[str], str] = prompt_password,
) -> str:
    """Return ``username:password``, prompting when no password was given.

    ``username:`` is an explicit empty password and is returned untouched.
    """
    if SEP_CREDENTIALS in credentials:
        return credentials
    return f"{credentials}{SEP_CREDENTIALS}{prompt(credentials)}"


def resolve_auth(
    explicit_auth: str | None,
    explicit_token: str | None,
    session=None,
    config_auth: str | None = None,
    config_token: str | None = None,
    prompt: Callable[[str], str] = prompt_password,
) -> ResolvedAuth | None:
    """Pick the credential for this request.

    Priority, highest first:
      1. --token flag
      2. --auth flag
      3. bearer token stored in the session
      4. basic credentials stored in the session
      5. token from the config file
      6. basic credentials from the config file
    """
    candidates = [
        (BEARER, explicit_token),
        (BASIC, explicit_auth),
        (BEARER, session.token if session else None),
        (BASIC, session.auth if session else None),
        (BEARER, config_token),
        (BASIC, config_auth),
    ]
    for kind, value in candidates:
        if not value:
            continue
        if kind == BASIC:
            value = complete_basic(value, prompt)
        return ResolvedAuth(kind, value)
    return None
