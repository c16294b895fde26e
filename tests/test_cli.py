"""Scenario tests for the hurl command line."""

import json
from unittest.mock import patch

import yaml

from hurl.cli import main, split_args
from hurl.errors import ClientTimeout, ClientWithStatus, MissingUrlAndCommand
from tests.conftest import make_request_result


def _descriptor(mock_exec):
    args, kwargs = mock_exec.call_args
    return args[0] if args else kwargs["descriptor"]


# ── Argument splitting ──────────────────────────────────────────────────


class TestSplitArgs:
    def test_method_optional(self):
        assert split_args(("example.com", "a=1")) == (None, "example.com", ["a=1"])

    def test_method_case_insensitive(self):
        assert split_args(("put", "example.com")) == ("PUT", "example.com", [])

    def test_missing_url(self):
        for args in ((), ("GET",)):
            try:
                split_args(args)
            except MissingUrlAndCommand:
                continue
            raise AssertionError(f"no error for {args}")


# ── Request building ─────────────────────────────────────────────────────


class TestRequest:
    @patch("hurl.executor.execute_request")
    def test_items_example(self, mock_exec, runner, tmp_project, global_hurl_dir):
        mock_exec.return_value = make_request_result(body={"id": 1})
        result = runner.invoke(
            main,
            ["example.com/items", "X-API-TOKEN:abc123", "foo==bar", "name=hurl", "meta:=[1,2,3]"],
        )
        assert result.exit_code == 0, result.output
        req = _descriptor(mock_exec)
        assert req.method == "POST"
        assert req.url == "http://example.com/items?foo=bar"
        assert req.header("X-API-TOKEN") == "abc123"
        assert req.body == '{"meta":[1,2,3],"name":"hurl"}'
        assert mock_exec.call_args[1]["timeout"] == 30
        assert "HTTP/1.1 200 OK" in result.output
        assert '"id": 1' in result.output

    @patch("hurl.executor.execute_request")
    def test_explicit_method_and_secure(self, mock_exec, runner, tmp_project, global_hurl_dir):
        mock_exec.return_value = make_request_result()
        result = runner.invoke(main, ["-s", "delete", "example.com/items/1"])
        assert result.exit_code == 0, result.output
        req = _descriptor(mock_exec)
        assert req.method == "DELETE"
        assert req.url == "https://example.com/items/1"

    @patch("hurl.executor.execute_request")
    def test_bearer_token_flag(self, mock_exec, runner, tmp_project, global_hurl_dir):
        mock_exec.return_value = make_request_result()
        runner.invoke(main, ["-t", "tok", "example.com"])
        assert _descriptor(mock_exec).header("Authorization") == "Bearer tok"

    @patch("hurl.executor.execute_request")
    def test_password_prompted(self, mock_exec, runner, tmp_project, global_hurl_dir):
        mock_exec.return_value = make_request_result()
        result = runner.invoke(main, ["-a", "alice", "example.com"], input="secret\n")
        assert result.exit_code == 0, result.output
        assert "secret" not in result.output
        assert _descriptor(mock_exec).header("Authorization") == "Basic YWxpY2U6c2VjcmV0"

    @patch("hurl.executor.execute_request")
    def test_raw_output(self, mock_exec, runner, tmp_project, global_hurl_dir):
        mock_exec.return_value = make_request_result(body={"id": 1})
        result = runner.invoke(main, ["--raw", "example.com"])
        assert result.output.strip() == '{\n  "id": 1\n}'

    @patch("hurl.executor.execute_request")
    def test_config_defaults(self, mock_exec, runner, tmp_project, global_hurl_dir):
        (tmp_project / ".hurl.yaml").write_text(
            yaml.dump({"defaults": {"secure": True, "form": True, "timeout": 5, "token": "cfg"}}),
        )
        mock_exec.return_value = make_request_result()
        result = runner.invoke(main, ["example.com", "a=1"])
        assert result.exit_code == 0, result.output
        req = _descriptor(mock_exec)
        assert req.url == "https://example.com"
        assert req.body == "a=1"
        assert req.header("Authorization") == "Bearer cfg"
        assert mock_exec.call_args[1]["timeout"] == 5

    @patch("hurl.executor.execute_request")
    def test_cli_timeout_beats_config(self, mock_exec, runner, tmp_project, global_hurl_dir):
        (tmp_project / ".hurl.yaml").write_text(yaml.dump({"defaults": {"timeout": 5}}))
        mock_exec.return_value = make_request_result()
        runner.invoke(main, ["--timeout", "2.5", "example.com"])
        assert mock_exec.call_args[1]["timeout"] == 2.5


# ── Errors ───────────────────────────────────────────────────────────────


class TestErrors:
    def test_no_url(self, runner, tmp_project, global_hurl_dir):
        result = runner.invoke(main, [])
        assert result.exit_code == 1
        assert "ERROR: Must specify a URL" in result.output

    def test_missing_separator(self, runner, tmp_project, global_hurl_dir):
        result = runner.invoke(main, ["example.com", "oops"])
        assert result.exit_code == 1
        assert "Missing separator when parsing parameter: oops" in result.output

    def test_form_file_without_form(self, runner, tmp_project, global_hurl_dir):
        (tmp_project / "me.png").write_bytes(b"\x89PNG")
        result = runner.invoke(main, ["example.com", "avatar@me.png"])
        assert result.exit_code == 1
        assert "without --form" in result.output

    def test_bad_json(self, runner, tmp_project, global_hurl_dir):
        result = runner.invoke(main, ["example.com", "a:=[1,}"])
        assert result.exit_code == 1
        assert "ERROR: JSON error: syntax" in result.output

    @patch("hurl.executor.execute_request")
    def test_timeout_exit_code(self, mock_exec, runner, tmp_project, global_hurl_dir):
        mock_exec.side_effect = ClientTimeout()
        result = runner.invoke(main, ["example.com"])
        assert result.exit_code == 2
        assert "ERROR: Timeout during request" in result.output

    @patch("hurl.executor.execute_request")
    def test_status_exit_codes(self, mock_exec, runner, tmp_project, global_hurl_dir):
        mock_exec.side_effect = ClientWithStatus(404)
        assert runner.invoke(main, ["--check-status", "example.com"]).exit_code == 4
        mock_exec.side_effect = ClientWithStatus(503)
        assert runner.invoke(main, ["--check-status", "example.com"]).exit_code == 5
        assert mock_exec.call_args[1]["check_status"] is True

    def test_bad_session_name(self, runner, tmp_project, global_hurl_dir):
        result = runner.invoke(main, ["--session", "../etc", "example.com"])
        assert result.exit_code == 2
        assert "session name" in result.output

    def test_bad_config_timeout(self, runner, tmp_project, global_hurl_dir):
        (tmp_project / ".hurl.yaml").write_text(yaml.dump({"defaults": {"timeout": "30s"}}))
        result = runner.invoke(main, ["example.com"])
        assert result.exit_code == 1
        assert "ERROR: Invalid config value for 'timeout': '30s'" in result.output

    def test_bad_config_auth(self, runner, tmp_project, global_hurl_dir):
        (tmp_project / ".hurl.yaml").write_text(yaml.dump({"defaults": {"auth": 1234}}))
        result = runner.invoke(main, ["example.com"])
        assert result.exit_code == 1
        assert "ERROR: Invalid config value for 'auth': 1234" in result.output


# ── Sessions ─────────────────────────────────────────────────────────────


def _session_file(root, host="example.com", name="api"):
    return root / host / f"{name}.json"


class TestSessions:
    @patch("hurl.executor.execute_request")
    def test_explicit_auth_stored_for_reuse(self, mock_exec, runner, tmp_project, global_hurl_dir):
        sessions = tmp_project / "sessions"
        path = _session_file(sessions)
        path.parent.mkdir(parents=True)
        path.write_text(
            json.dumps(
                {
                    "path": str(path),
                    "name": "api",
                    "host": "example.com",
                    "auth": None,
                    "token": "stale",
                    "headers": {},
                    "cookies": [],
                },
            ),
        )
        mock_exec.return_value = make_request_result(cookies=[("sid", "1")])
        args = ["--sessions-dir", str(sessions), "--session", "api"]
        result = runner.invoke(main, [*args, "-a", "alice:secret", "example.com/login"])
        assert result.exit_code == 0, result.output
        assert _descriptor(mock_exec).header("Authorization") == "Basic YWxpY2U6c2VjcmV0"

        stored = json.loads(path.read_text())
        assert stored["auth"] == "alice:secret"
        assert stored["token"] is None
        assert stored["cookies"] == [["sid", "1"]]

        # The next run reuses the stored credential and cookie
        runner.invoke(main, [*args, "example.com/me"])
        req = _descriptor(mock_exec)
        assert req.header("Authorization") == "Basic YWxpY2U6c2VjcmV0"
        assert req.header("Cookie") == "sid=1"

    @patch("hurl.executor.execute_request")
    def test_session_headers_remembered(self, mock_exec, runner, tmp_project, global_hurl_dir):
        mock_exec.return_value = make_request_result()
        runner.invoke(main, ["--session", "api", "example.com", "X-Team:core"])
        runner.invoke(main, ["--session", "api", "example.com"])
        assert _descriptor(mock_exec).header("X-Team") == "core"
        assert _session_file(global_hurl_dir / "sessions").exists()

    @patch("hurl.executor.execute_request")
    def test_read_only_session_not_written(self, mock_exec, runner, tmp_project, global_hurl_dir):
        mock_exec.return_value = make_request_result(cookies=[("sid", "1")])
        result = runner.invoke(
            main,
            ["--session", "api", "--read-only", "-t", "tok", "example.com"],
        )
        assert result.exit_code == 0, result.output
        assert not _session_file(global_hurl_dir / "sessions").exists()

    @patch("hurl.executor.execute_request")
    def test_session_per_host_with_port(self, mock_exec, runner, tmp_project, global_hurl_dir):
        mock_exec.return_value = make_request_result()
        runner.invoke(main, ["--session", "api", "localhost:8080/x"])
        assert _session_file(global_hurl_dir / "sessions", host="localhost_8080").exists()

    @patch("hurl.executor.execute_request")
    def test_failed_auth_not_stored(self, mock_exec, runner, tmp_project, global_hurl_dir):
        mock_exec.return_value = make_request_result(status_code=401, reason="Unauthorized")
        runner.invoke(main, ["--session", "api", "-a", "alice:wrong", "example.com"])
        stored = json.loads(_session_file(global_hurl_dir / "sessions").read_text())
        assert stored["auth"] is None
