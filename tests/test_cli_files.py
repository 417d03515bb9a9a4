import io
import json
import zipfile

from conftest import SERVER_URL

WF = "myanalysis.42"
WORKSPACE = f"/api/workflows/{WF}/workspace"

LISTING = {
    "items": [
        {"name": "data/names.txt", "size": {"raw": 20, "human_readable": "20 Bytes"}, "last-modified": "2022-08-10T17:14:12"},
        {"name": ".git/config", "size": {"raw": 5, "human_readable": "5 Bytes"}, "last-modified": "2022-08-10T17:14:12"},
        {"name": "plot.png", "size": {"raw": 2048, "human_readable": "2 KiB"}, "last-modified": "2022-08-10T18:00:00"},
    ],
    "total": 3,
}


# ---------------------------------------------------------------------------
# ls / du
# ---------------------------------------------------------------------------

def test_ls_json_hides_blacklisted(run_cli, server) -> None:
    """Verify ls json hides blacklisted behavior."""
    server.add("GET", WORKSPACE, json=LISTING)

    result = run_cli("ls", "-w", WF, "--json")

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == [
        {"name": "data/names.txt", "size": 20, "last-modified": "2022-08-10T17:14:12"},
        {"name": "plot.png", "size": 2048, "last-modified": "2022-08-10T18:00:00"},
    ]


def test_ls_sends_pattern_and_search(run_cli, server) -> None:
    """Verify ls sends pattern and search behavior."""
    server.add("GET", WORKSPACE, json=LISTING)

    run_cli("ls", "-w", WF, "--filter", "name=plot", "data/*")

    call = server.calls[0]
    assert call.params["file_name"] == "data/*"
    assert json.loads(call.params["search"]) == {"name": ["plot"]}
    assert call.params["page"] == "1"


def test_ls_human_readable_with_format(run_cli, server) -> None:
    """Verify ls human readable with format behavior."""
    server.add("GET", WORKSPACE, json=LISTING)

    result = run_cli("ls", "-w", WF, "-h", "--format", "size,name=plot.png")

    assert result.exit_code == 0, result.output
    assert [line.split() for line in result.output.strip().splitlines()] == [
        ["SIZE", "NAME"],
        ["2", "KiB", "plot.png"],
    ]


def test_ls_urls(run_cli, server) -> None:
    """Verify ls urls behavior."""
    server.add("GET", WORKSPACE, json=LISTING)

    result = run_cli("ls", "-w", WF, "--url")

    assert result.output.splitlines() == [
        f"{SERVER_URL}/api/workflows/{WF}/workspace/data/names.txt",
        f"{SERVER_URL}/api/workflows/{WF}/workspace/.git/config",
        f"{SERVER_URL}/api/workflows/{WF}/workspace/plot.png",
    ]


def test_du_table(run_cli, server) -> None:
    """Verify du table behavior."""
    server.add(
        "GET",
        f"/api/workflows/{WF}/disk_usage",
        json={"disk_usage_info": [{"name": "/data", "size": {"raw": 4096, "human_readable": "4 KiB"}}]},
    )

    plain = run_cli("du", "-w", WF)
    human = run_cli("du", "-w", WF, "-r", "-s")

    assert plain.output.split() == ["SIZE", "NAME", "4096", "./data"]
    assert human.output.split() == ["SIZE", "NAME", "4", "KiB", "./data"]
    assert server.calls[1].json == {"summarize": True}


def test_du_empty_result(run_cli, server) -> None:
    """Verify du empty result behavior."""
    server.add("GET", f"/api/workflows/{WF}/disk_usage", json={"disk_usage_info": []})

    result = run_cli("du", "-w", WF, "--filter", "name=nothing")

    assert result.exit_code == 1
    assert "no files matching filter criteria" in result.output
    assert server.calls[0].json == {"summarize": False, "search": '{"name":["nothing"]}'}


def test_du_server_error(run_cli, server) -> None:
    """Verify du server error behavior."""
    server.add("GET", f"/api/workflows/{WF}/disk_usage", status=404, json={"message": "Workflow not found"})

    result = run_cli("du", "-w", WF)

    assert result.exit_code == 1
    assert "disk usage could not be retrieved:\nWorkflow not found" in result.output


# ---------------------------------------------------------------------------
# download / upload
# ---------------------------------------------------------------------------

def test_download_to_directory(run_cli, server, tmp_path) -> None:
    """Verify download to directory behavior."""
    server.add(
        "GET",
        f"{WORKSPACE}/results/plot.png",
        content=b"PNG",
        headers={"Content-Disposition": 'attachment; filename="plot.png"'},
    )

    result = run_cli("download", "-w", WF, "-o", str(tmp_path / "out"), "results/plot.png")

    assert result.exit_code == 0, result.output
    assert (tmp_path / "out" / "plot.png").read_bytes() == b"PNG"
    assert "File plot.png was successfully downloaded." in result.output


def test_download_refuses_name_escaping_output_directory(run_cli, server, tmp_path) -> None:
    """Verify download refuses name escaping output directory behavior."""
    server.add(
        "GET",
        f"{WORKSPACE}/plot.png",
        content=b"PNG",
        headers={"Content-Disposition": 'attachment; filename="../escape.png"'},
    )

    result = run_cli("download", "-w", WF, "-o", str(tmp_path / "out"), "plot.png")

    assert result.exit_code == 1
    assert "refusing to write '../escape.png' outside" in result.output
    assert not (tmp_path / "escape.png").exists()


def test_download_defaults_to_declared_outputs(run_cli, server, tmp_path, monkeypatch) -> None:
    """Verify download defaults to declared outputs behavior."""
    monkeypatch.chdir(tmp_path)
    server.add(
        "GET",
        f"/api/workflows/{WF}/specification",
        json={"specification": {"outputs": {"files": ["plot.png"]}}},
    )
    server.add("GET", f"{WORKSPACE}/plot.png", content=b"PNG")

    result = run_cli("download", "-w", WF)

    assert result.exit_code == 0, result.output
    assert (tmp_path / "downloaded_file").read_bytes() == b"PNG"


def test_download_to_stdout_unzips(run_cli, server) -> None:
    """Verify download to stdout unzips behavior."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("data/a.txt", "first\n")
        archive.writestr("data/b.txt", "second\n")
    server.add(
        "GET",
        f"{WORKSPACE}/data",
        content=buffer.getvalue(),
        headers={"Content-Type": "application/zip", "Content-Disposition": "attachment; filename=data.zip"},
    )

    result = run_cli("download", "-w", WF, "-o", "-", "data")

    assert result.exit_code == 0, result.output
    assert result.stdout_bytes == b"first\nsecond\n"


def test_upload_sources(run_cli, server, tmp_path, monkeypatch) -> None:
    """Verify upload sources behavior."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "code").mkdir()
    (tmp_path / "code" / "fit.py").write_text("print(1)\n")
    (tmp_path / "code" / "a.py").write_text("")
    server.add("POST", WORKSPACE, json={"message": "ok"})

    result = run_cli("upload", "-w", WF, "code", "code/fit.py")

    assert result.exit_code == 0, result.output
    uploads = server.calls_to("POST", WORKSPACE)
    assert [c.params["file_name"] for c in uploads] == ["code/a.py", "code/fit.py"]
    assert uploads[1].data == b"print(1)\n"
    assert "File code/fit.py was successfully uploaded." in result.output


def test_upload_declared_inputs_checked(run_cli, server, tmp_path, monkeypatch) -> None:
    """Verify upload declared inputs checked behavior."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "data").mkdir()
    server.add(
        "GET",
        f"/api/workflows/{WF}/specification",
        json={"specification": {"inputs": {"files": ["data"]}}},
    )

    result = run_cli("upload", "-w", WF)

    assert result.exit_code == 1
    assert "found directory in `inputs.files`: data" in result.output
    assert server.calls_to("POST", WORKSPACE) == []


def test_upload_missing_source(run_cli, server, tmp_path, monkeypatch) -> None:
    """Verify upload missing source behavior."""
    monkeypatch.chdir(tmp_path)

    result = run_cli("upload", "-w", WF, "nothing.txt")

    assert result.exit_code == 1
    assert "path 'nothing.txt' does not exist" in result.output


# ---------------------------------------------------------------------------
# rm / mv / prune
# ---------------------------------------------------------------------------

def test_rm_reports_each_file(run_cli, server) -> None:
    """Verify rm reports each file behavior."""
    server.add(
        "DELETE",
        f"{WORKSPACE}/data/*",
        json={"deleted": {"data/a.txt": {"size": 10}, "data/b.txt": {"size": 5}}, "failed": {}},
    )

    result = run_cli("rm", "-w", WF, "data/*")

    assert result.exit_code == 0, result.output
    assert "File data/a.txt was successfully deleted." in result.output
    assert "15 bytes freed up." in result.output


def test_rm_unmatched_and_failed(run_cli, server) -> None:
    """Verify rm unmatched and failed behavior."""
    server.add("DELETE", f"{WORKSPACE}/missing", json={"deleted": None, "failed": None})
    server.add(
        "DELETE",
        f"{WORKSPACE}/locked.txt",
        json={"deleted": {}, "failed": {"locked.txt": {"error": "permission denied"}}},
    )

    result = run_cli("rm", "-w", WF, "missing", "locked.txt")

    assert result.exit_code == 1
    assert "missing did not match any existing file" in result.output
    assert "Something went wrong while deleting locked.txt.\npermission denied" in result.output


def test_mv(run_cli, server) -> None:
    """Verify mv behavior."""
    server.add("PUT", f"/api/workflows/{WF}/move_files", json={"message": "moved"})

    result = run_cli("mv", "-w", WF, "data/input.txt", "input/input.txt")

    assert result.exit_code == 0, result.output
    assert server.calls[0].params["source"] == "data/input.txt"
    assert "data/input.txt was successfully moved to input/input.txt" in result.output


def test_prune(run_cli, server) -> None:
    """Verify prune behavior."""
    server.add("POST", f"/api/workflows/{WF}/prune", json={"message": "The workspace has been correctly pruned."})

    result = run_cli("prune", "-w", WF, "--include-outputs")

    assert result.exit_code == 0, result.output
    assert server.calls[0].params == {
        "include_inputs": "false",
        "include_outputs": "true",
        "access_token": "secret-token",
    }
    assert "The workspace has been correctly pruned." in result.output
