"""hurl sessions - named auth/header/cookie state persisted per host."""

import json
import re
from pathlib import Path

from hurl.auth import BASIC, BEARER
from hurl.errors import IoError, JsonError
from hurl.params import Header

VALID_SESSION_NAME = re.compile(r"^[a-zA-Z0-9_.-]+$")

AUTH_FAILURE_STATUS = 401

SESSION_IGNORED_HEADER_PREFIXES = ("content-", "if-")


class Session:
    """Persisted state for one (name, host) pair."""

    def __init__(
        self,
        path: Path,
        name: str,
        host: str,
        auth: str | None = None,
        token: str | None = None,
        headers: dict[str, str] | None = None,
        cookies: list[tuple[str, str]] | None = None,
    ):
        self.path = Path(path)
        self.name = name
        self.host = host
        self.auth = auth
        self.token = token
        self.headers: dict[str, str] = dict(headers or {})
        self.cookies: list[tuple[str, str]] = list(cookies or [])

    def __eq__(self, other):
        return isinstance(other, Session) and self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Session(name={self.name!r}, host={self.host!r}, path={str(self.path)!r})"

    def to_dict(self) -> dict:
        return {
            "path": str(self.path),
            "name": self.name,
            "host": self.host,
            "auth": self.auth,
            "token": self.token,
            "headers": dict(self.headers),
            "cookies": [[name, value] for name, value in self.cookies],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Session":
        try:
            return cls(
                path=Path(data["path"]),
                name=data["name"],
                host=data["host"],
                auth=data.get("auth"),
                token=data.get("token"),
                headers=dict(data.get("headers") or {}),
                cookies=[(str(n), str(v)) for n, v in data.get("cookies") or []],
            )
        except (KeyError, TypeError, ValueError) as e:
            raise JsonError("data") from e

    def set_cookie(self, name: str, value: str) -> None:
        """Replace the cookie called name in place, or append it."""
        for i, (existing, _) in enumerate(self.cookies):
            if existing == name:
                self.cookies[i] = (name, value)
                return
        self.cookies.append((name, value))

    def cookie_header(self) -> str | None:
        if not self.cookies:
            return None
        return "; ".join(f"{name}={value}" for name, value in self.cookies)

    def remember_auth(self, auth) -> None:
        """Store the credential that was used; it replaces the other kind."""
        if auth is None:
            return
        if auth.kind == BEARER:
            self.token = auth.value
            self.auth = None
        elif auth.kind == BASIC:
            self.auth = auth.value
            self.token = None


def host_dir_name(host: str) -> str:
    """Filesystem-safe directory name for a URL netloc."""
    return host.replace(":", "_")


class SessionStore:
    """Loads and saves sessions under a sessions directory."""

    def __init__(self, sessions_dir: Path):
        self.sessions_dir = Path(sessions_dir)

    def path_for(self, name: str, host: str) -> Path:
        return self.sessions_dir / host_dir_name(host) / f"{name}.json"

    def get_or_create(self, name: str, host: str) -> Session:
        """Load the session for name+host, or return a fresh unsaved one."""
        path = self.path_for(name, host)
        if not path.exists():
            return Session(path=path, name=name, host=host)
        try:
            with open(path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise JsonError.from_decode_error(e) from e
        except OSError as e:
            raise IoError.from_os_error(e) from e
        if not isinstance(data, dict):
            raise JsonError("data")
        session = Session.from_dict(data)
        session.path = path
        return session

    def save(self, session: Session) -> Path:
        try:
            session.path.parent.mkdir(parents=True, exist_ok=True)
            with open(session.path, "w") as f:
                json.dump(session.to_dict(), f, indent=2)
        except OSError as e:
            raise IoError.from_os_error(e) from e
        return session.path

    def update_with_response(self, session: Session, result, auth=None) -> None:
        """Merge response cookies and keep the credential unless it was rejected."""
        for name, value in result.cookies:
            session.set_cookie(name, value)
        if result.status_code != AUTH_FAILURE_STATUS:
            session.remember_auth(auth)

    def update_with_parameters(self, session: Session, parameters) -> None:
        """Remember explicitly given headers for later requests.

        Request-specific headers (Content-*, If-*) are not stored.
        """
        for p in parameters:
            if not isinstance(p, Header):
                continue
            if p.key.lower().startswith(SESSION_IGNORED_HEADER_PREFIXES):
                continue
            for existing in [k for k in session.headers if k.lower() == p.key.lower()]:
                del session.headers[existing]
            session.headers[p.key] = p.value


def reconcile(
    store: SessionStore,
    session: Session | None,
    result,
    auth=None,
    parameters=(),
    read_only: bool = False,
) -> Path | None:
    """Feed a response back into the session and persist it.

    Read-only invocations leave the session file untouched.
    Returns the saved path, or None when nothing was written.
    """
    if session is None or read_only:
        return None
    store.update_with_parameters(session, parameters)
    store.update_with_response(session, result, auth)
    return store.save(session)
