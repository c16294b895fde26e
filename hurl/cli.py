"""hurl CLI - a command line HTTP client."""

import logging
import sys

import click

from hurl.errors import ClientTimeout, ClientWithStatus, HurlError, MissingUrlAndCommand
from hurl.request import METHODS

logger = logging.getLogger(__name__)

EXIT_ERROR = 1
EXIT_TIMEOUT = 2
EXIT_4XX = 4
EXIT_5XX = 5

TOOL_HELP = """\
hurl — a command line HTTP client.

\b
USAGE
─────
  hurl [OPTIONS] [METHOD] URL [PARAMETERS]...

  METHOD is one of HEAD, GET, PUT, POST, PATCH, DELETE. Without it hurl
  sends POST when any data parameter is given, GET otherwise.

  A URL without a scheme gets http:// (https:// with --secure):
    hurl example.com/items

\b
PARAMETERS
──────────
  Each parameter is key<separator>value; the separator picks the type.
  \b
  key:value          Header            X-API-TOKEN:abc123
  key==value         Query parameter   foo==bar
  key=value          Data field        name=hurl
  key:=value         Raw JSON field    meta:=[1,2,3]
  key@filename       File upload       avatar@me.png   (requires --form)
  key=@filename      Field from file   bio=@bio.txt
  key:=@filename     JSON from file    meta:=@meta.json

  Escape a separator character with a backslash: 'a\\:b=c' is the field
  "a:b" with value "c".

  Data fields are sent as a JSON object unless --form is given, then as
  a URL-encoded form (multipart when a file upload is present).

\b
AUTH
────
  -a user:password   Basic auth. With only "user" you are prompted for the
                     password; "user:" means an empty password.
  -t TOKEN           Bearer token.

\b
SESSIONS
────────
  --session NAME keeps auth, headers and cookies per host between runs:
    hurl --session api -a alice:secret example.com/login
    hurl --session api example.com/me
  --read-only uses a session without updating it.
  Sessions are stored under ~/.hurl/sessions/<host>/<name>.json.

\b
CONFIG FILE (.hurl.yaml)
────────────────────────
  Resolution order:
    1. -c/--config flag (explicit path)
    2. .hurl.yaml / .hurl.yml / hurl.yaml / hurl.yml in CWD
    3. ~/.hurl/config.yaml (global)

  \b
  defaults:
    verbose: 1
    form: false
    secure: true
    token: ${API_TOKEN}           # env var resolved at runtime
    env_file: .env
    timeout: 30
    sessions_dir: sessions

  Command line flags win over session values, which win over the config.

\b
EXIT CODES
──────────
  1 on any error, 2 on timeout. With --check-status, 4 for a 4xx and 5
  for a 5xx response.
"""


def _validate_session_name(ctx, param, value):
    from hurl.session import VALID_SESSION_NAME

    if value is not None and not VALID_SESSION_NAME.match(value):
        raise click.BadParameter(
            "session name may contain only letters, digits, '_', '-' and '.'",
        )
    return value


@click.command(
    cls=click.Command,
    help=TOOL_HELP,
    context_settings={"max_content_width": 88},
)
@click.argument("args", nargs=-1)
@click.option("-q", "--quiet", is_flag=True, default=False, help="Quiet mode. Overrides -v.")
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Verbose logging (-v, -vv, -vvv).",
)
@click.option(
    "-f",
    "--form",
    is_flag=True,
    default=False,
    help="Send data fields as a form instead of JSON.",
)
@click.option(
    "-a",
    "--auth",
    default=None,
    help="Basic auth as 'username:password'. Prompts when the password is omitted.",
)
@click.option("-t", "--token", default=None, help="Bearer token for the Authorization header.")
@click.option(
    "-s",
    "--secure",
    is_flag=True,
    default=False,
    help="Use https:// for URLs given without a scheme.",
)
@click.option(
    "--session",
    "session_name",
    default=None,
    callback=_validate_session_name,
    help="Named session to load and update for the URL's host.",
)
@click.option(
    "--read-only",
    is_flag=True,
    default=False,
    help="Use the session without saving any changes to it.",
)
@click.option(
    "-c",
    "--config",
    "config_file",
    default=None,
    help="Config file path. Default: .hurl.yaml in CWD, then ~/.hurl/config.yaml.",
)
@click.option(
    "--sessions-dir",
    "sessions_dir_override",
    default=None,
    help="Override the sessions directory.",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Request timeout in seconds. Default: 30.",
)
@click.option(
    "--check-status",
    is_flag=True,
    default=False,
    help="Exit with an error for 4xx and 5xx responses.",
)
@click.option(
    "--raw",
    is_flag=True,
    default=False,
    help="Output the response body only. Useful for piping.",
)
def main(
    args,
    quiet,
    verbose,
    form,
    auth,
    token,
    secure,
    session_name,
    read_only,
    config_file,
    sessions_dir_override,
    timeout,
    check_status,
    raw,
):
    """Send one HTTP request built from command line parameters."""
    from hurl.core import load_defaults, resolve_verbosity
    from hurl.log import setup_logging

    try:
        defaults = load_defaults(config_file)
        setup_logging(resolve_verbosity(verbose, defaults), quiet)
        _cmd_request(
            args,
            defaults,
            form=form,
            auth=auth,
            token=token,
            secure=secure,
            session_name=session_name,
            read_only=read_only,
            sessions_dir_override=sessions_dir_override,
            timeout=timeout,
            check_status=check_status,
            raw=raw,
        )
    except ClientTimeout as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(EXIT_TIMEOUT)
    except ClientWithStatus as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(EXIT_5XX if e.status >= 500 else EXIT_4XX)
    except HurlError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(EXIT_ERROR)


def split_args(args) -> tuple[str | None, str, list[str]]:
    """Split positional args into (method, url, raw parameters)."""
    args = list(args)
    method = None
    if args and args[0].upper() in METHODS:
        method = args.pop(0).upper()
    if not args:
        raise MissingUrlAndCommand()
    return method, args[0], args[1:]


def _cmd_request(
    args,
    defaults,
    form,
    auth,
    token,
    secure,
    session_name,
    read_only,
    sessions_dir_override,
    timeout,
    check_status,
    raw,
):
    from hurl import executor
    from hurl.auth import resolve_auth
    from hurl.core import build_request_config, resolve_sessions_dir
    from hurl.output import format_output
    from hurl.params import parse_params
    from hurl.request import assemble, url_host
    from hurl.session import SessionStore, reconcile

    method, url, raw_params = split_args(args)
    parameters = parse_params(raw_params)
    config = build_request_config(
        url,
        method,
        parameters,
        defaults,
        form=form,
        secure=secure,
        read_only=read_only,
        auth=auth,
        token=token,
        timeout=timeout,
    )
    if defaults.get("_config_dir"):
        logger.debug("config loaded from %s", defaults["_config_dir"])

    store = None
    session = None
    if session_name:
        store = SessionStore(resolve_sessions_dir(sessions_dir_override, defaults))
        session = store.get_or_create(session_name, url_host(config.url, config.secure))
        logger.debug("using session %s", session.path)

    resolved_auth = resolve_auth(
        config.auth,
        config.token,
        session,
        config_auth=defaults.get("auth"),
        config_token=defaults.get("token"),
    )
    descriptor = assemble(config, config.parameters, resolved_auth, session)

    result = executor.execute_request(
        descriptor,
        timeout=config.timeout,
        check_status=check_status,
    )
    click.echo(format_output(result, raw=raw))

    saved = reconcile(
        store,
        session,
        result,
        auth=resolved_auth,
        parameters=config.parameters,
        read_only=config.read_only,
    )
    if saved:
        logger.debug("session saved to %s", saved)
