"""Workspace commands: ``ls``, ``du``, ``download``, ``upload``, ``rm``, ``mv`` and ``prune``."""

from __future__ import annotations

import os
from typing import Any, Optional, Sequence, Tuple

import click
import structlog

from ..api.client import ReanaClient
from ..api.models import FileItem, FileList
from ..config import DU_MULTI_FILTERS, LS_MULTI_FILTERS, STDOUT_CHAR
from ..errors import APIError, ReanaError, SilentError
from ..utils.display import ERROR, SUCCESS, display_message, display_table
from ..utils.files import (
    collect_upload_files,
    filename_from_disposition,
    is_blacklisted,
    store_file,
    validate_input_paths,
    write_zip_entries,
)
from ..utils.filters import Filters
from ..utils.formatter import emit_table, format_table, parse_format_parameters
from ..utils.table import Table
from ..utils.validator import validate_file
from .options import (
    access_token_option,
    api_command,
    filter_option,
    format_option,
    json_option,
    page_option,
    size_option,
    workflow_option,
)

log = structlog.get_logger()

__all__ = [
    "ls",
    "du",
    "download",
    "upload",
    "rm",
    "mv",
    "prune",
    "build_ls_table",
    "display_file_urls",
]

LS_HEADER = ["name", "size", "last-modified"]
DU_HEADER = ["SIZE", "NAME"]


# --------------------------------------------------------------------------- #
# ls                                                                          #
# --------------------------------------------------------------------------- #
def _ls_cell(column: str, item: FileItem, human_readable: bool) -> Any:
    if column == "name":
        return item.name
    if column == "size":
        if human_readable:
            return item.size.human_readable
        return int(item.size.raw or 0)
    return item.last_modified


def build_ls_table(payload: FileList, human_readable: bool) -> Table:
    """Tabulate the workspace listing, hiding blacklisted entries."""
    kinds = {} if human_readable else {"size": "int"}
    rows = [
        [_ls_cell(c, item, human_readable) for c in LS_HEADER]
        for item in payload.items
        if not is_blacklisted(item.name)
    ]
    return Table(LS_HEADER, rows, kinds)


def file_urls(payload: FileList, server_url: str, workflow: str):
    for item in payload.items:
        yield f"{server_url}/api/workflows/{workflow}/workspace/{item.name}"


def display_file_urls(
    client: ReanaClient,
    access_token: str,
    workflow: str,
    page: int = 1,
) -> None:
    """Print the download URL of every file in the workspace of *workflow*."""
    payload = client.get_files(access_token, workflow, page=page)
    for url in file_urls(payload, client.server_url, workflow):
        click.echo(url)


@click.command("ls", short_help="List workspace files.")
@access_token_option
@workflow_option()
@format_option(
    "Format output according to column titles or column values. Use "
    "<column_name>=<column_value> format. E.g. display files named data.txt "
    "--format name=data.txt"
)
@json_option
@click.option("--url", "display_urls", is_flag=True, help="Get URLs of output files.")
@click.option(
    "-h",
    "--human-readable",
    is_flag=True,
    help="Show disk size in human readable format.",
)
@filter_option(
    "Filter results to show only files that match certain filtering criteria "
    "such as file name, size or modification date. Use --filter "
    "<column_name>=<column_value> pairs. Available filters are 'name', 'size' "
    "and 'last-modified'."
)
@page_option
@size_option
@click.argument("file_name", required=False)
@api_command()
def ls(
    client: ReanaClient,
    access_token: str,
    workflow: str,
    format_: Tuple[str, ...],
    json_output: bool,
    display_urls: bool,
    human_readable: bool,
    filters: Tuple[str, ...],
    page: Optional[int],
    size: Optional[int],
    file_name: Optional[str],
) -> None:
    """List workspace files.

    The ``ls`` command lists workspace files of a workflow specified by the
    environment variable REANA_WORKON or provided as a command-line flag
    ``--workflow`` or ``-w``. The FILE_NAME argument is optional and specifies
    a pattern matching files and directories.

    \b
    Examples:
      $ reana-client ls --workflow myanalysis.42
      $ reana-client ls --workflow myanalysis.42 --human-readable
      $ reana-client ls --workflow myanalysis.42 'data/*root*'
      $ reana-client ls --workflow myanalysis.42 --filter name=hello
    """
    search = Filters(multi_keys=LS_MULTI_FILTERS, inputs=filters).get_json(LS_MULTI_FILTERS)
    log.info(f"Workflow {workflow} selected")

    payload = client.get_files(
        access_token,
        workflow,
        file_name=file_name,
        search=search,
        page=page or 1,
        size=size,
    )

    if display_urls:
        for url in file_urls(payload, client.server_url, workflow):
            click.echo(url)
        return

    table = format_table(
        build_ls_table(payload, human_readable),
        parse_format_parameters(format_, filter_rows=True),
    )
    emit_table(table, json_output)


# --------------------------------------------------------------------------- #
# du                                                                          #
# --------------------------------------------------------------------------- #
@click.command("du", short_help="Get workspace disk usage.")
@access_token_option
@workflow_option()
@click.option("-s", "--summarize", is_flag=True, help="Display total.")
@click.option(
    "-r",
    "--human-readable",
    is_flag=True,
    help="Show disk size in human readable format.",
)
@filter_option(
    "Filter results to show only files that match certain filtering criteria "
    "such as file name or size. Use --filter <column_name>=<column_value> "
    "pairs. Available filters are 'name' and 'size'."
)
@api_command()
def du(
    client: ReanaClient,
    access_token: str,
    workflow: str,
    summarize: bool,
    human_readable: bool,
    filters: Tuple[str, ...],
) -> None:
    """Get workspace disk usage.

    The ``du`` command allows to check the disk usage of given workspace.

    \b
    Examples:
      $ reana-client du -w myanalysis.42 -s
      $ reana-client du -w myanalysis.42 -s --human-readable
      $ reana-client du -w myanalysis.42 --filter name=data/
    """
    search = Filters(multi_keys=DU_MULTI_FILTERS, inputs=filters).get_json(DU_MULTI_FILTERS)
    try:
        payload = client.get_workflow_disk_usage(
            access_token, workflow, summarize=summarize, search=search
        )
    except APIError as exc:
        raise ReanaError(f"disk usage could not be retrieved:\n{exc.format_message()}") from exc

    if not payload.disk_usage_info:
        raise ReanaError("no files matching filter criteria")

    rows = []
    for item in payload.disk_usage_info:
        if is_blacklisted(item.name):
            continue
        size_text = item.size.human_readable if human_readable else str(int(item.size.raw or 0))
        rows.append([size_text, f".{item.name}"])
    display_table(DU_HEADER, rows)


# --------------------------------------------------------------------------- #
# download / upload                                                           #
# --------------------------------------------------------------------------- #
@click.command("download", short_help="Download workspace files.")
@access_token_option
@workflow_option()
@click.option(
    "-o",
    "--output-directory",
    default=None,
    help=(
        "Path to the directory where files will be downloaded. If \"-\" is "
        "specified as path, the files will be written to the standard output."
    ),
)
@click.argument("files", nargs=-1)
@api_command()
def download(
    client: ReanaClient,
    access_token: str,
    workflow: str,
    output_directory: Optional[str],
    files: Tuple[str, ...],
) -> None:
    """Download workspace files.

    The ``download`` command allows to download workspace files and
    directories. By default, the files specified in the workflow specification
    as outputs are downloaded. You can also specify the individual files you
    would like to download, see examples below.

    \b
    Examples:
      $ reana-client download # download all output files
      $ reana-client download mydata.tmp outputs/myplot.png
      $ reana-client download -o - data.txt # write data.txt to stdout
    """
    paths = list(files)
    if not paths:
        spec = client.get_workflow_specification(access_token, workflow)
        paths = spec.output_files() + spec.output_directories()
    log.debug(f"Download paths: {', '.join(paths)}")

    output_directory = output_directory or os.getcwd()
    for path in paths:
        resp = client.download_file(access_token, workflow, path)
        name = filename_from_disposition(resp.headers.get("Content-Disposition"))
        zipped = resp.headers.get("Content-Type") == "application/zip"

        if output_directory == STDOUT_CHAR:
            out = click.get_binary_stream("stdout")
            if zipped:
                write_zip_entries(resp.content, out)
            else:
                out.write(resp.content)
            out.flush()
            continue

        store_file(output_directory, name, resp.content)
        display_message(f"File {name} was successfully downloaded.", SUCCESS)


def _upload_sources(client: ReanaClient, access_token: str, workflow: str) -> list:
    spec = client.get_workflow_specification(access_token, workflow)
    input_files = spec.input_files()
    input_directories = spec.input_directories()
    validate_input_paths(input_files, input_directories)
    return input_files + input_directories


@click.command("upload", short_help="Upload files and directories to workspace.")
@access_token_option
@workflow_option()
@click.argument("sources", nargs=-1)
@api_command()
def upload(
    client: ReanaClient,
    access_token: str,
    workflow: str,
    sources: Tuple[str, ...],
) -> None:
    """Upload files and directories to workspace.

    The ``upload`` command allows to upload workflow input files and
    directories. The SOURCES argument can be repeated and specifies which
    files and directories are to be uploaded, see examples below. The default
    behaviour is to upload all input files and directories specified in the
    reana.yaml file.

    \b
    Examples:
      $ reana-client upload -w myanalysis.42
      $ reana-client upload -w myanalysis.42 code/mycode.py
    """
    paths = list(sources) or _upload_sources(client, access_token, workflow)

    for path in collect_upload_files(paths):
        validate_file(path)
        with open(path, "rb") as handle:
            content = handle.read()
        log.debug("uploading file", path=path, size=len(content))
        client.upload_file(access_token, workflow, path, content)
        display_message(f"File {path} was successfully uploaded.", SUCCESS)


# --------------------------------------------------------------------------- #
# rm / mv / prune                                                             #
# --------------------------------------------------------------------------- #
def delete_files(
    client: ReanaClient, access_token: str, workflow: str, patterns: Sequence[str]
) -> bool:
    """Delete every pattern and report each outcome; return ``True`` on any failure."""
    has_error = False
    for pattern in patterns:
        result = client.delete_file(access_token, workflow, pattern)
        if not result.deleted and not result.failed:
            display_message(f"{pattern} did not match any existing file", ERROR, err=True)
            has_error = True
            continue

        freed = 0
        for name, deleted in result.deleted.items():
            freed += deleted.size
            display_message(f"File {name} was successfully deleted.", SUCCESS)
        for name, failed in result.failed.items():
            display_message(
                f"Something went wrong while deleting {name}.\n{failed.error}",
                ERROR,
                err=True,
            )
            has_error = True
        if freed > 0:
            display_message(f"{freed} bytes freed up.", SUCCESS)
    return has_error


@click.command("rm", short_help="Delete files from workspace.")
@access_token_option
@workflow_option()
@click.argument("files", nargs=-1, required=True)
@api_command()
def rm(client: ReanaClient, access_token: str, workflow: str, files: Tuple[str, ...]) -> None:
    """Delete files from workspace.

    The ``rm`` command allow to delete files and directories from workspace.
    Note that you can use glob to remove similar files.

    \b
    Examples:
      $ reana-client rm -w myanalysis.42 data/mydata.csv
      $ reana-client rm -w myanalysis.42 'data/*root*'
    """
    if delete_files(client, access_token, workflow, files):
        raise SilentError()


@click.command("mv", short_help="Move files within workspace.")
@access_token_option
@workflow_option()
@click.argument("source")
@click.argument("target")
@api_command()
def mv(client: ReanaClient, access_token: str, workflow: str, source: str, target: str) -> None:
    """Move files within workspace.

    The ``mv`` command allows to move the files within workspace.

    \b
    Examples:
      $ reana-client mv data/input.txt input/input.txt
    """
    client.move_files(access_token, workflow, source, target)
    display_message(f"{source} was successfully moved to {target}", SUCCESS)


@click.command("prune", short_help="Prune workspace.")
@access_token_option
@workflow_option()
@click.option(
    "-i",
    "--include-inputs",
    is_flag=True,
    help=(
        "Delete also the input files of the workflow. Note that this includes "
        "the workflow specification file."
    ),
)
@click.option(
    "-o",
    "--include-outputs",
    is_flag=True,
    help="Delete also the output files of the workflow.",
)
@api_command()
def prune(
    client: ReanaClient,
    access_token: str,
    workflow: str,
    include_inputs: bool,
    include_outputs: bool,
) -> None:
    """Prune workspace.

    The ``prune`` command deletes all the intermediate files of a given
    workflow that are not present in the input or output section of the
    workflow specification.

    \b
    Examples:
      $ reana-client prune -w myanalysis.42
      $ reana-client prune -w myanalysis.42 --include-inputs
    """
    payload = client.prune_workspace(
        access_token,
        workflow,
        include_inputs=include_inputs,
        include_outputs=include_outputs,
    )
    display_message(payload.message or "", SUCCESS)
