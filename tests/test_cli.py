"""CLI scenario tests: locate, resolve, send."""

import json
from unittest.mock import patch

import yaml

from kuiper.cli import main
from tests.conftest import make_request_result, write_request


def _root_args(root):
    return ["--root", str(root)]


# ── help / listing ──────────────────────────────────────────────────────


class TestHelpAndList:
    def test_no_name_shows_help(self, runner, tmp_project, global_kuiper_dir):
        result = runner.invoke(main, [])
        assert result.exit_code == 1
        assert "HEADER INHERITANCE" in result.output

    def test_list_requests(self, runner, tmp_project, global_kuiper_dir, requests_tree):
        result = runner.invoke(main, [*_root_args(requests_tree), "--list"])
        assert result.exit_code == 0
        assert f"Requests from: {requests_tree.resolve()}" in result.output
        assert "2 available" in result.output
        assert "  request_in_root.kuiper" in result.output
        assert "  subdir/request_in_subdir.kuiper" in result.output

    def test_list_empty_root(self, runner, tmp_project, global_kuiper_dir):
        result = runner.invoke(main, ["--list"])
        assert "No .kuiper files found" in result.output


# ── locating ────────────────────────────────────────────────────────────


class TestLocate:
    def test_exact_path_dry_run(self, runner, tmp_project, global_kuiper_dir, requests_tree):
        result = runner.invoke(
            main,
            [*_root_args(requests_tree), "subdir/request_in_subdir.kuiper", "--dry-run"],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["uri"] == "http://localhost/api/user/1"
        assert data["headers"]["root_header_2"] == "subdir_value_2"
        assert data["headers"]["request_specific_header_1"] == "request_specific_header_value_1"

    def test_search_fallback(self, runner, tmp_project, global_kuiper_dir, requests_tree):
        result = runner.invoke(main, [*_root_args(requests_tree), "in_subdir", "--dry-run"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["uri"] == "http://localhost/api/user/1"

    def test_ambiguous_lists_candidates(self, runner, tmp_project, global_kuiper_dir, requests_tree):
        result = runner.invoke(main, [*_root_args(requests_tree), "request_in"])
        assert result.exit_code == 1
        assert "ambiguous" in result.output
        assert "  - request_in_root.kuiper" in result.output
        assert "  - subdir/request_in_subdir.kuiper" in result.output

    def test_not_found(self, runner, tmp_project, global_kuiper_dir, requests_tree):
        result = runner.invoke(main, [*_root_args(requests_tree), "ghost"])
        assert result.exit_code == 1
        assert "ERROR: request not found: 'ghost'" in result.output

    def test_root_from_config(self, runner, tmp_project, global_kuiper_dir):
        write_request(tmp_project / "api" / "ping.kuiper", uri="http://localhost/ping")
        (tmp_project / ".kuiper.yaml").write_text(yaml.dump({"defaults": {"root": "api"}}))
        result = runner.invoke(main, ["ping", "--dry-run"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["uri"] == "http://localhost/ping"


# ── interpolation through the CLI ───────────────────────────────────────


class TestInterpolation:
    def test_env_file_values(self, runner, tmp_project, global_kuiper_dir):
        write_request(tmp_project / "r.kuiper", uri="http://localhost/{{env:ROUTE}}")
        (tmp_project / "example.env").write_text("ROUTE=route_value\n")
        result = runner.invoke(main, ["r.kuiper", "-e", "example.env", "--dry-run"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["uri"] == "http://localhost/route_value"

    def test_missing_env_file_flag_is_error(self, runner, tmp_project, global_kuiper_dir):
        write_request(tmp_project / "r.kuiper")
        result = runner.invoke(main, ["r.kuiper", "-e", "does_not_exist.env", "--dry-run"])
        assert result.exit_code == 1
        assert "ERROR: env file not found: does_not_exist.env" in result.output

    def test_missing_env_var(self, runner, tmp_project, global_kuiper_dir, monkeypatch):
        monkeypatch.delenv("KUIPER_UNSET_VAR", raising=False)
        write_request(tmp_project / "r.kuiper", uri="http://{{env:KUIPER_UNSET_VAR}}")
        result = runner.invoke(main, ["r.kuiper"])
        assert result.exit_code == 1
        assert "missing env var: 'KUIPER_UNSET_VAR'" in result.output

    def test_params_interpolation_flag(self, runner, tmp_project, global_kuiper_dir):
        write_request(tmp_project / "r.kuiper", params={"id": "{{expr:uuid}}"})
        result = runner.invoke(main, ["r.kuiper", "--no-interpolate-params", "--dry-run"])
        assert json.loads(result.output)["params"] == {"id": "{{expr:uuid}}"}

    def test_params_interpolation_from_config(self, runner, tmp_project, global_kuiper_dir):
        write_request(tmp_project / "r.kuiper", params={"id": "{{expr:uuid}}"})
        (tmp_project / ".kuiper.yaml").write_text(
            yaml.dump({"defaults": {"interpolate_params": False}}),
        )
        result = runner.invoke(main, ["r.kuiper", "--dry-run"])
        assert json.loads(result.output)["params"] == {"id": "{{expr:uuid}}"}

    def test_malformed_request(self, runner, tmp_project, global_kuiper_dir):
        (tmp_project / "bad.kuiper").write_text("{")
        result = runner.invoke(main, ["bad.kuiper"])
        assert result.exit_code == 1
        assert "malformed file" in result.output


# ── sending ─────────────────────────────────────────────────────────────


class TestSend:
    @patch("kuiper.executor.execute_request")
    def test_sends_resolved_request(
        self, mock_exec, runner, tmp_project, global_kuiper_dir, requests_tree
    ):
        mock_exec.return_value = make_request_result(status_code=200, body={"id": 1})
        result = runner.invoke(main, [*_root_args(requests_tree), "in_root", "--timeout", "7"])
        assert result.exit_code == 0, result.output
        assert "STATUS: 200" in result.output
        assert '"id": 1' in result.output

        request = mock_exec.call_args[0][0]
        assert request.uri == "http://www.example.com"
        assert request.headers["root_header_3"] is None
        assert mock_exec.call_args[1]["timeout"] == 7

    @patch("kuiper.executor.execute_request")
    def test_timeout_from_config(self, mock_exec, runner, tmp_project, global_kuiper_dir):
        write_request(tmp_project / "r.kuiper")
        (tmp_project / ".kuiper.yaml").write_text(yaml.dump({"defaults": {"timeout": 3}}))
        mock_exec.return_value = make_request_result()
        runner.invoke(main, ["r.kuiper"])
        assert mock_exec.call_args[1]["timeout"] == 3

    @patch("kuiper.executor.execute_request")
    def test_transport_error_exits_1(self, mock_exec, runner, tmp_project, global_kuiper_dir):
        write_request(tmp_project / "r.kuiper")
        mock_exec.return_value = make_request_result(error="Connection error: refused")
        result = runner.invoke(main, ["r.kuiper"])
        assert result.exit_code == 1
        assert "ERROR: Connection error: refused" in result.output

    @patch("kuiper.executor.execute_request")
    def test_raw_output(self, mock_exec, runner, tmp_project, global_kuiper_dir):
        write_request(tmp_project / "r.kuiper")
        mock_exec.return_value = make_request_result(body={"id": 1})
        result = runner.invoke(main, ["r.kuiper", "--raw"])
        assert json.loads(result.output) == {"id": 1}
