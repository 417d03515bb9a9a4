import base64
import json

import pytest

from reana_client.cli.secrets import parse_secrets
from reana_client.errors import ReanaError


def _b64(text: str) -> str:
    return base64.b64encode(text.encode()).decode()


# ---------------------------------------------------------------------------
# parse_secrets
# ---------------------------------------------------------------------------

def test_parse_secrets_literal_and_file(tmp_path, monkeypatch) -> None:
    """Verify parse secrets literal and file behavior."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "pi.txt").write_text("3.14")

    secrets, names = parse_secrets(("FOO=bar",), ("./pi.txt",))

    assert secrets == {
        "FOO": {"type": "env", "value": _b64("bar")},
        "pi.txt": {"type": "file", "value": _b64("3.14")},
    }
    assert names == ["FOO", "pi.txt"]


def test_parse_secrets_value_may_contain_equals() -> None:
    """Verify parse secrets value may contain equals behavior."""
    secrets, _ = parse_secrets(("URL=a=b",), ())
    assert secrets["URL"]["value"] == _b64("a=b")


def test_parse_secrets_malformed_literal() -> None:
    """Verify parse secrets malformed literal behavior."""
    with pytest.raises(ReanaError) as excinfo:
        parse_secrets(("FOO",), ())
    assert excinfo.value.format_message() == (
        'option "FOO" is invalid:\nfor literal strings use "SECRET_NAME=VALUE" format'
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def test_secrets_add(run_cli, server, tmp_path, monkeypatch) -> None:
    """Verify secrets add behavior."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "pi.txt").write_text("3.14")
    server.add("POST", "/api/secrets", status=201, json={"message": "Secrets successfully added."})

    result = run_cli("secrets-add", "--env", "FOO=bar", "--file", "./pi.txt", "--overwrite")

    assert result.exit_code == 0, result.output
    call = server.calls[0]
    assert call.params["overwrite"] == "true"
    assert call.json["pi.txt"] == {"type": "file", "value": _b64("3.14")}
    assert "Secrets FOO, pi.txt were successfully uploaded." in result.output


def test_secrets_add_requires_a_secret(run_cli, server) -> None:
    """Verify secrets add requires a secret behavior."""
    result = run_cli("secrets-add")

    assert result.exit_code == 2
    assert "at least one of the options: 'env', 'file' is required" in result.output


def test_secrets_add_missing_file(run_cli, server, tmp_path) -> None:
    """Verify secrets add missing file behavior."""
    result = run_cli("secrets-add", "--file", str(tmp_path / "nope"))

    assert result.exit_code == 1
    assert "invalid value for '--file': file" in result.output
    assert server.calls == []


def test_secrets_add_conflict(run_cli, server) -> None:
    """Verify secrets add conflict behavior."""
    server.add("POST", "/api/secrets", status=409, json={"message": "Operation cancelled. Secret FOO already exists."})

    result = run_cli("secrets-add", "--env", "FOO=bar")

    assert result.exit_code == 1
    assert "Secret FOO already exists." in result.output


def test_secrets_list(run_cli, server) -> None:
    """Verify secrets list behavior."""
    server.add("GET", "/api/secrets", json=[{"name": "FOO", "type": "env"}, {"name": "pi.txt", "type": "file"}])

    table = run_cli("secrets-list")
    as_json = run_cli("secrets-list", "--json")

    assert [line.split() for line in table.output.strip().splitlines()] == [
        ["NAME", "TYPE"],
        ["FOO", "env"],
        ["pi.txt", "file"],
    ]
    assert json.loads(as_json.output)[1] == {"name": "pi.txt", "type": "file"}


def test_secrets_delete(run_cli, server) -> None:
    """Verify secrets delete behavior."""
    server.add("DELETE", "/api/secrets/", json=["FOO"])

    result = run_cli("secrets-delete", "FOO")

    assert result.exit_code == 0, result.output
    assert server.calls[0].json == ["FOO"]
    assert "Secrets FOO were successfully deleted." in result.output


def test_secrets_delete_missing(run_cli, server) -> None:
    """Verify secrets delete missing behavior."""
    server.add("DELETE", "/api/secrets/", status=404, json=["BAR"])

    result = run_cli("secrets-delete", "FOO", "BAR")

    assert result.exit_code == 1
    assert "secrets BAR do not exist. Nothing was deleted" in result.output
