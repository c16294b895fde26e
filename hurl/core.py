"""hurl core - config loading, setting precedence, session directory."""

import os
import re
from pathlib import Path

import yaml
from dotenv import dotenv_values

from hurl.errors import ConfigError
from hurl.params import Parameter
from hurl.request import AppRequestConfig

GLOBAL_DIR = Path.home() / ".hurl"
GLOBAL_CONFIG = GLOBAL_DIR / "config.yaml"
GLOBAL_SESSIONS_DIR = GLOBAL_DIR / "sessions"

CWD_CONFIG_CANDIDATES = [
    ".hurl.yaml",
    ".hurl.yml",
    "hurl.yaml",
    "hurl.yml",
]

DEFAULT_TIMEOUT = 30


def resolve_path(
    candidates: list[Path],
    default: Path | None = None,
) -> Path | None:
    """Return the first existing path from candidates, else default.

    Used for the config file lookup; the sessions directory is never
    searched for, it is created on the first session save.
    """
    for p in candidates:
        if p.exists():
            return p.resolve()
    return default


def resolve_config_path(config_file: str | None) -> Path | None:
    """Find the hurl config file to use.

    Resolution order:
      1. -c/--config flag (hard, no fallthrough if missing)
      2. .hurl.yaml / .hurl.yml / hurl.yaml / hurl.yml in CWD
      3. ~/.hurl/config.yaml

    Returns None when there is no config; every setting then falls back
    to its built-in default.
    """
    if config_file:
        return resolve_path([Path(config_file)])
    return resolve_path([Path(c) for c in CWD_CONFIG_CANDIDATES] + [GLOBAL_CONFIG])


def load_config(config_path: str | Path | None) -> dict:
    """Read the ``defaults:`` section of a hurl YAML config.

    Only ``defaults`` is read; it may set verbose, form, secure, auth,
    token, timeout, sessions_dir and env_file. '_config_dir' is stored
    so sessions_dir and env_file resolve against the config file rather
    than the CWD.
    """
    if config_path is None:
        return {"defaults": {}, "_config_dir": None}
    path = Path(config_path)
    if not path.exists():
        return {"defaults": {}, "_config_dir": None}
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    defaults = data.get("defaults") if isinstance(data, dict) else None
    if defaults is not None and not isinstance(defaults, dict):
        raise ConfigError("defaults", defaults)
    return {
        "defaults": defaults or {},
        "_config_dir": path.resolve().parent,
    }


def load_env(env_file: str | None, base_dir: str | Path | None = ".") -> dict[str, str]:
    """Build the variables config values are expanded with.

    os.environ overlaid by the config's env_file (a .env file, relative
    to the config directory), so a token can live in .env instead of
    the YAML file.
    """
    env = dict(os.environ)
    if env_file:
        dotenv_path = Path(base_dir or ".") / env_file
        if dotenv_path.exists():
            dotenv_vars = dotenv_values(str(dotenv_path))
            env.update({k: v for k, v in dotenv_vars.items() if v is not None})
    return env


def resolve_value(value, env: dict[str, str]):
    """Expand $VAR and ${VAR} in one config default, e.g. ``token: ${API_TOKEN}``.

    Unknown variables are left as written; non-strings pass through and
    are type-checked by check_defaults afterwards.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value

    def _replace(m: re.Match) -> str:
        var_name = m.group(1) or m.group(2)
        return env.get(var_name, os.environ.get(var_name, m.group(0)))

    return re.sub(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)", _replace, value)


STRING_DEFAULTS = ("auth", "token", "sessions_dir", "env_file")
FLAG_DEFAULTS = ("form", "secure")


def check_defaults(defaults: dict) -> dict:
    """Validate config defaults, converting numeric strings.

    Values may arrive as strings after $VAR expansion, so "30" is a
    valid timeout. Raises ConfigError for anything else of the wrong type.
    """
    checked = dict(defaults)
    for key in STRING_DEFAULTS:
        value = checked.get(key)
        if value is not None and not isinstance(value, str):
            raise ConfigError(key, value)
    for key in FLAG_DEFAULTS:
        value = checked.get(key)
        if value is not None and not isinstance(value, (bool, str)):
            raise ConfigError(key, value)
    if checked.get("timeout") is not None:
        checked["timeout"] = _as_number(
            "timeout", checked["timeout"], float, lambda t: t > 0
        )
    if checked.get("verbose") is not None:
        checked["verbose"] = _as_number(
            "verbose", checked["verbose"], int, lambda v: v >= 0
        )
    return checked


def _as_number(key: str, value, kind, valid):
    if isinstance(value, bool):
        raise ConfigError(key, value)
    try:
        number = kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(key, value) from e
    if not valid(number):
        raise ConfigError(key, value)
    return number


def load_defaults(config_file: str | None) -> dict:
    """Resolve, load, env-expand and type-check the config defaults."""
    config = load_config(resolve_config_path(config_file))
    defaults = config["defaults"]
    env_file = defaults.get("env_file")
    if env_file is not None and not isinstance(env_file, str):
        raise ConfigError("env_file", env_file)
    env = load_env(env_file, config["_config_dir"])
    resolved = check_defaults({k: resolve_value(v, env) for k, v in defaults.items()})
    resolved["_config_dir"] = config["_config_dir"]
    return resolved


# ── Setting precedence: CLI > session > config file > built-in ──────────


def resolve_flag(cli_value: bool, config_value) -> bool:
    """A boolean flag is on when set on the command line or in config."""
    return bool(cli_value) or _as_bool(config_value)


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def resolve_form(cli_form: bool, defaults: dict) -> bool:
    return resolve_flag(cli_form, defaults.get("form"))


def resolve_secure(cli_secure: bool, defaults: dict) -> bool:
    return resolve_flag(cli_secure, defaults.get("secure"))


def resolve_timeout(*sources, default=DEFAULT_TIMEOUT):
    """Return the first truthy timeout from sources, or default."""
    for t in sources:
        if t:
            return float(t)
    return default


def resolve_verbosity(cli_verbose: int, defaults: dict) -> int:
    if cli_verbose:
        return cli_verbose
    try:
        return int(defaults.get("verbose") or 0)
    except (TypeError, ValueError):
        return 0


def resolve_sessions_dir(cli_override: str | None, defaults: dict) -> Path:
    """Find the directory session files live in.

    Resolution order:
      1. --sessions-dir CLI flag (absolute or relative to CWD)
      2. sessions_dir from config (relative to the config file)
      3. ~/.hurl/sessions/
    """
    if cli_override:
        p = Path(cli_override)
        return p if p.is_absolute() else Path.cwd() / p
    config_value = defaults.get("sessions_dir")
    if config_value:
        p = Path(config_value).expanduser()
        config_dir = defaults.get("_config_dir")
        if not p.is_absolute() and config_dir:
            p = Path(config_dir) / p
        return p
    return GLOBAL_SESSIONS_DIR


def build_request_config(
    url: str,
    method: str | None,
    parameters: list[Parameter],
    defaults: dict,
    form: bool = False,
    secure: bool = False,
    read_only: bool = False,
    auth: str | None = None,
    token: str | None = None,
    timeout: float | None = None,
) -> AppRequestConfig:
    """Merge CLI values with config defaults into one request config.

    Credentials stay as given on the command line here; the session and
    config fallbacks for them are applied by resolve_auth.
    """
    return AppRequestConfig(
        url=url,
        method=method.upper() if method else None,
        form=resolve_form(form, defaults),
        secure=resolve_secure(secure, defaults),
        read_only=read_only,
        auth=auth,
        token=token,
        parameters=tuple(parameters),
        timeout=resolve_timeout(timeout, defaults.get("timeout")),
    )
