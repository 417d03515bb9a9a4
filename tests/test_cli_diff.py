import json

import click
import pytest

from reana_client.cli.diff import line_color

DIFF = "/api/workflows/wf.1/diff/wf.2"


@pytest.mark.parametrize(
    "line, color",
    [
        ("- v0.1", "red"),
        ("+ v0.2", "green"),
        ("@@ -1 +1 @@", "cyan"),
        ("  unchanged", None),
        ("", None),
    ],
)
def test_line_color(line, color) -> None:
    """Verify line color behavior."""
    assert line_color(line) == color


def test_diff_sections_and_colors(run_cli, server) -> None:
    """Verify diff sections and colors behavior."""
    server.add(
        "GET",
        DIFF,
        json={
            "reana_specification": json.dumps(
                {"workflow": ["@@ -1 +1 @@", "- v0.1", "+ v0.2"], "inputs": [], "outputs": ["- a", "+ b"]}
            ),
            "workspace_listing": json.dumps("Only in wf.1: x.txt\n"),
        },
    )

    result = run_cli("diff", "wf.1", "wf.2", color=True)

    assert result.exit_code == 0, result.output
    styled = {click.unstyle(line): line for line in result.output.splitlines()}
    assert "\x1b[31m" in styled["- v0.1"]
    assert "\x1b[32m" in styled["+ v0.2"]
    assert "\x1b[36m" in styled["@@ -1 +1 @@"]
    text = click.unstyle(result.output)
    assert "Differences in workflow inputs" not in text
    assert text.index("Differences in workflow outputs") < text.index(
        "Differences in workflow specification"
    )
    assert "==> Differences in workflow workspace\nOnly in wf.1: x.txt" in text


def test_diff_identical_specifications(run_cli, server) -> None:
    """Verify diff identical specifications behavior."""
    server.add(
        "GET",
        DIFF,
        json={"reana_specification": json.dumps({"workflow": [], "inputs": []}), "workspace_listing": json.dumps("")},
    )

    result = run_cli("diff", "wf.1", "wf.2", "-q", "-u", "2")

    assert result.exit_code == 0, result.output
    assert result.output == "==> No differences in REANA specifications.\n\n"
    assert server.calls[0].params["brief"] == "true"
    assert server.calls[0].params["context_lines"] == "2"


def test_diff_malformed_payload(run_cli, server) -> None:
    """Verify diff malformed payload behavior."""
    server.add("GET", DIFF, json={"reana_specification": json.dumps({"workflow": "oops"})})

    result = run_cli("diff", "wf.1", "wf.2")

    assert result.exit_code == 1
    assert "expected diff to be an array" in result.output
