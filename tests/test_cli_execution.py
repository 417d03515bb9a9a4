import pytest

from conftest import SERVER_URL

WF = "myanalysis.42"
PARAMETERS = f"/api/workflows/{WF}/parameters"
START = f"/api/workflows/{WF}/start"
STATUS = f"/api/workflows/{WF}/status"


def _started(status="queued"):
    return {"message": "Workflow submitted.", "status": status, "workflow_name": WF}


@pytest.fixture
def spec_dir(tmp_path, monkeypatch):
    """Run from a directory holding a default ``reana.yaml``."""
    (tmp_path / "reana.yaml").write_text("workflow:\n  type: serial\n")
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# start
# ---------------------------------------------------------------------------

def test_start_without_parameters(run_cli, server) -> None:
    """Verify start without parameters behavior."""
    server.add("POST", START, json=_started())

    result = run_cli("start", "-w", WF)

    assert result.exit_code == 0, result.output
    assert f"==> SUCCESS: {WF} has been queued" in result.output
    assert server.calls_to("GET", PARAMETERS) == []
    assert server.calls_to("POST", START)[0].json == {
        "input_parameters": {},
        "operational_options": {},
    }


def test_start_drops_unknown_parameters(run_cli, server) -> None:
    """Verify start drops unknown parameters behavior."""
    server.add("GET", PARAMETERS, json={"type": "serial", "parameters": {"sleeptime": 2}})
    server.add("POST", START, json=_started())

    result = run_cli(
        "start", "-w", WF, "-p", "sleeptime=10", "-p", "colour=red", "-o", "CACHE=off"
    )

    assert result.exit_code == 0, result.output
    assert "given parameter - colour, is not in reana.yaml" in result.output
    assert server.calls_to("POST", START)[0].json == {
        "input_parameters": {"sleeptime": "10"},
        "operational_options": {"CACHE": "off"},
    }


def test_start_translates_options_for_engine(run_cli, server) -> None:
    """Verify start translates options for engine behavior."""
    server.add("GET", PARAMETERS, json={"type": "cwl", "parameters": {}})
    server.add("POST", START, json=_started("pending"))

    result = run_cli("start", "-w", WF, "-o", "TARGET=gendata")

    assert result.exit_code == 0, result.output
    assert server.calls_to("POST", START)[0].json["operational_options"] == {"--target": "gendata"}


def test_start_unknown_option_sends_nothing(run_cli, server) -> None:
    """Verify start unknown option sends nothing behavior."""
    server.add("GET", PARAMETERS, json={"type": "serial", "parameters": {}})

    result = run_cli("start", "-w", WF, "-o", "TURBO=on")

    assert result.exit_code == 1
    assert "operational option 'TURBO' not supported" in result.output
    assert server.calls_to("POST", START) == []


def test_start_malformed_parameter(run_cli, server) -> None:
    """Verify start malformed parameter behavior."""
    result = run_cli("start", "-w", WF, "-p", "sleeptime")

    assert result.exit_code == 2
    assert server.calls == []


def test_start_follow_lists_outputs(run_cli, server, no_sleep) -> None:
    """Verify start follow lists outputs behavior."""
    server.add("POST", START, json=_started())
    server.add("GET", STATUS, json={"name": WF, "status": "running"})
    server.add("GET", STATUS, json={"name": WF, "status": "finished"})
    server.add("GET", f"/api/workflows/{WF}/workspace", json={"items": [{"name": "plot.png"}]})

    result = run_cli("start", "-w", WF, "--follow")

    assert result.exit_code == 0, result.output
    assert f"{WF} is running" in result.output
    assert "==> Listing workflow output files..." in result.output
    assert result.output.splitlines()[-1] == f"{SERVER_URL}/api/workflows/{WF}/workspace/plot.png"
    assert no_sleep == [5, 5]


def test_start_follow_failed_run(run_cli, server, no_sleep) -> None:
    """Verify start follow failed run behavior."""
    server.add("POST", START, json=_started())
    server.add("GET", STATUS, json={"name": WF, "status": "failed"})

    result = run_cli("start", "-w", WF, "--follow")

    assert result.exit_code == 1
    assert f"{WF} has failed" in result.output
    assert "the workflow did not finish" in result.output


# ---------------------------------------------------------------------------
# restart / stop
# ---------------------------------------------------------------------------

def test_restart_sends_restart_flag(run_cli, server, spec_dir) -> None:
    """Verify restart sends restart flag behavior."""
    server.add("POST", START, json=_started())

    result = run_cli("restart", "-w", WF)

    assert result.exit_code == 0, result.output
    assert server.calls_to("POST", START)[0].json["restart"] is True


def test_restart_rejected_by_server(run_cli, server, spec_dir) -> None:
    """Verify restart rejected by server behavior."""
    server.add("POST", START, json=_started("finished"))

    result = run_cli("restart", "-w", WF)

    assert result.exit_code == 1
    assert f"==> ERROR: {WF} has finished" in result.output


def test_restart_checks_explicit_file(run_cli, server, tmp_path) -> None:
    """Verify restart checks explicit file behavior."""
    result = run_cli("restart", "-w", WF, "-f", str(tmp_path / "missing.yaml"))

    assert result.exit_code == 1
    assert "invalid value for '--file': file" in result.output
    assert server.calls == []


def test_restart_checks_default_file(run_cli, server, tmp_path, monkeypatch) -> None:
    """Verify restart checks default file behavior."""
    monkeypatch.chdir(tmp_path)

    result = run_cli("restart", "-w", WF)

    assert result.exit_code == 1
    assert "invalid value for '--file': file 'reana.yaml' does not exist" in result.output
    assert server.calls == []


def test_stop_requires_force(run_cli, server) -> None:
    """Verify stop requires force behavior."""
    result = run_cli("stop", "-w", WF)

    assert result.exit_code == 1
    assert "graceful stop not implemented yet" in result.output
    assert server.calls == []


def test_stop_force(run_cli, server) -> None:
    """Verify stop force behavior."""
    server.add("PUT", STATUS, json={"status": "stopped"})

    result = run_cli("stop", "-w", WF, "--force")

    assert result.exit_code == 0, result.output
    call = server.calls[0]
    assert call.params["status"] == "stop"
    assert f"{WF} has been stopped" in result.output


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------

def test_delete_single_run(run_cli, server) -> None:
    """Verify delete single run behavior."""
    server.add("PUT", STATUS, json={"status": "deleted"})

    result = run_cli("delete", "-w", WF)

    assert result.exit_code == 0, result.output
    assert server.calls[0].params["status"] == "deleted"
    assert server.calls[0].json == {"all_runs": False, "workspace": True}
    assert f"{WF} has been deleted" in result.output


def test_delete_all_runs(run_cli, server) -> None:
    """Verify delete all runs behavior."""
    server.add("PUT", STATUS, json={"status": "deleted"})

    result = run_cli("delete", "-w", WF, "--include-all-runs", "--no-include-workspace")

    assert server.calls[0].json == {"all_runs": True, "workspace": False}
    assert "All workflows named 'myanalysis' have been deleted" in result.output
