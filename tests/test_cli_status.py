import json

STATUS = {
    "id": "a1b2",
    "name": "myanalysis.42",
    "status": "running",
    "user": "u-1",
    "created": "2022-08-10T17:14:12",
    "progress": {
        "run_started_at": "2022-08-10T17:15:00",
        "total": {"total": 3},
        "finished": {"total": 1},
        "current_command": 'bash -c "cd /var/reana/users/x; python fit.py "',
        "current_step_name": "fit",
    },
}


def test_status_table(run_cli, server) -> None:
    """Verify status table behavior."""
    server.add("GET", "/api/workflows/myanalysis.42/status", json=STATUS)

    result = run_cli("status", "-w", "myanalysis.42")

    assert result.exit_code == 0, result.output
    header, row = [line.split() for line in result.output.strip().splitlines()]
    assert header == ["NAME", "RUN_NUMBER", "CREATED", "STARTED", "STATUS", "PROGRESS"]
    assert row == ["myanalysis", "42", "2022-08-10T17:14:12", "2022-08-10T17:15:00", "running", "1/3"]


def test_status_verbose_json(run_cli, server) -> None:
    """Verify status verbose json behavior."""
    server.add("GET", "/api/workflows/myanalysis.42/status", json=STATUS)

    result = run_cli("status", "-w", "myanalysis.42", "-v", "--json", "--format", "id,user,command")

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == [{"id": "a1b2", "user": "u-1", "command": "python fit.py"}]


def test_status_created_run_has_no_start(run_cli, server) -> None:
    """Verify status created run has no start behavior."""
    server.add(
        "GET",
        "/api/workflows/wf/status",
        json={"name": "wf.1", "status": "created", "created": "2022-08-10T17:14:12"},
    )

    result = run_cli("status", "-w", "wf", "--json")

    assert json.loads(result.output) == [
        {"name": "wf", "run_number": "1", "created": "2022-08-10T17:14:12", "status": "created"}
    ]


def test_status_format_ignores_values(run_cli, server) -> None:
    """Verify status format ignores values behavior."""
    server.add("GET", "/api/workflows/myanalysis.42/status", json=STATUS)

    result = run_cli("status", "-w", "myanalysis.42", "--format", "status=finished")

    assert result.exit_code == 0, result.output
    assert result.output.split() == ["STATUS", "running"]


def test_status_not_found(run_cli, server) -> None:
    """Verify status not found behavior."""
    server.add("GET", "/api/workflows/nope/status", status=404, json={"message": "REANA_WORKON is set to nope, but that workflow does not exist."})

    result = run_cli("status", "-w", "nope")

    assert result.exit_code == 1
    assert "==> ERROR: REANA_WORKON is set to nope, but that workflow does not exist." in result.output
