from reana_client import __version__

from conftest import SERVER_URL


def test_version_flag_and_command(run_cli) -> None:
    """Verify version flag and command behavior."""
    assert __version__ in run_cli("--version").output
    result = run_cli("version")
    assert result.exit_code == 0
    assert result.output.strip() == __version__


def test_help_lists_commands_by_section(run_cli) -> None:
    """Verify help lists commands by section behavior."""
    result = run_cli("--help")

    assert result.exit_code == 0
    for title in (
        "Configuration commands:",
        "Workflow management commands:",
        "Workflow execution commands:",
        "Workspace file management commands:",
        "Secret management commands:",
        "Quota commands:",
    ):
        assert title in result.output
    assert "retention-rules-list" in result.output


def test_missing_access_token_is_reported(run_cli, monkeypatch) -> None:
    """Verify missing access token is reported behavior."""
    monkeypatch.delenv("REANA_ACCESS_TOKEN")

    result = run_cli("status", "-w", "wf")

    assert result.exit_code == 1
    assert "==> ERROR: please provide your access token" in result.output


def test_missing_server_url_is_reported(run_cli, monkeypatch) -> None:
    """Verify missing server URL is reported behavior."""
    monkeypatch.delenv("REANA_SERVER_URL")

    result = run_cli("status", "-w", "wf")

    assert result.exit_code == 1
    assert "please set REANA_SERVER_URL environment variable" in result.output


def test_missing_workflow_is_reported(run_cli) -> None:
    """Verify missing workflow is reported behavior."""
    result = run_cli("status")

    assert result.exit_code == 1
    assert "workflow name must be provided" in result.output


def test_workflow_is_read_from_environment(run_cli, server, monkeypatch) -> None:
    """Verify workflow is read from environment behavior."""
    monkeypatch.setenv("REANA_WORKON", "wf.3")
    server.add("DELETE", "/api/workflows/wf.3/workspace/a.txt", json={"deleted": {"a.txt": {"size": 1}}})

    result = run_cli("rm", "a.txt")

    assert result.exit_code == 0, result.output
    assert "File a.txt was successfully deleted." in result.output


def test_invalid_loglevel_is_rejected(run_cli) -> None:
    """Verify invalid loglevel is rejected behavior."""
    result = run_cli("--loglevel", "TRACE", "version")

    assert result.exit_code == 1
    assert "invalid value for 'loglevel': 'TRACE'" in result.output


def test_debug_log_redacts_access_token(run_cli, server) -> None:
    """Verify debug log redacts access token behavior."""
    server.add("GET", "/api/you", json={"email": "jane@example.org", "reana_server_version": "0.9.3"})

    result = run_cli("--loglevel", "debug", "ping", "-t", "cmdline-token")

    assert result.exit_code == 0, result.output
    assert "cmdline-token" not in result.output


def test_ping_prints_connection_summary(run_cli, server) -> None:
    """Verify ping prints connection summary behavior."""
    server.add("GET", "/api/you", json={"email": "jane@example.org", "reana_server_version": "0.9.3"})

    result = run_cli("ping")

    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == [
        f"REANA server: {SERVER_URL}",
        "REANA server version: 0.9.3",
        f"REANA client version: {__version__}",
        "Authenticated as: <jane@example.org>",
        "Status: Connected",
    ]


def test_info_lists_advertised_items(run_cli, server) -> None:
    """Verify info lists advertised items behavior."""
    server.add(
        "GET",
        "/api/info",
        json={
            "compute_backends": {"title": "List of supported compute backends", "value": ["kubernetes", "slurm"]},
            "default_workspace": {"title": "Default workspace", "value": "/usr/share"},
            "maximum_workspace_retention_period": {"title": "Maximum retention period in days for workspace files", "value": None},
        },
    )

    result = run_cli("info")

    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == [
        "List of supported compute backends: kubernetes, slurm",
        "Default workspace: /usr/share",
        "Maximum retention period in days for workspace files: None",
    ]


def test_completion_scripts(run_cli) -> None:
    """Verify completion scripts behavior."""
    zsh = run_cli("completion", "zsh")
    powershell = run_cli("completion", "powershell")

    assert zsh.exit_code == 0
    assert "_REANA_CLIENT_COMPLETE" in zsh.output
    assert powershell.exit_code == 0
    assert "Register-ArgumentCompleter -Native -CommandName reana-client" in powershell.output
    assert run_cli("completion", "tcsh").exit_code == 2


def test_powershell_completion_protocol(run_cli, monkeypatch) -> None:
    """Verify powershell completion protocol behavior."""
    monkeypatch.setenv("COMP_WORDS", "reana-client secrets-")
    monkeypatch.setenv("COMP_CWORD", "1")

    result = run_cli(env={"_REANA_CLIENT_COMPLETE": "powershell_complete"}, prog_name="reana-client")

    lines = result.output.splitlines()
    assert "secrets-add" in lines
    assert "secrets-list" in lines
    assert "status" not in lines
