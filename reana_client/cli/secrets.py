"""``secrets-add``, ``secrets-list`` and ``secrets-delete``: user secrets."""

from __future__ import annotations

import base64
import os
from typing import Dict, List, Tuple

import click
import structlog

from ..api.client import ReanaClient
from ..errors import NotFound, ReanaError, ValidationError
from ..utils.display import SUCCESS, display_message
from ..utils.filters import split_key_value
from ..utils.formatter import emit_table
from ..utils.table import Table
from ..utils.validator import validate_at_least_one, validate_file
from .options import access_token_option, api_command, json_option

log = structlog.get_logger()

__all__ = ["secrets_add", "secrets_list", "secrets_delete", "parse_secrets"]

SECRETS_HEADER = ["name", "type"]


def _encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def parse_secrets(
    env_secrets: Tuple[str, ...], file_secrets: Tuple[str, ...]
) -> Tuple[Dict[str, Dict[str, str]], List[str]]:
    """Build the upload body and the ordered list of secret names.

    Literal secrets are given as ``NAME=VALUE``; file secrets are named after
    the file's basename.  Values are base64 encoded.

    Raises:
        ReanaError: On a malformed literal or an unreadable file.
    """
    secrets: Dict[str, Dict[str, str]] = {}
    names: List[str] = []

    for literal in env_secrets:
        try:
            name, value = split_key_value(literal)
        except ValueError:
            raise ReanaError(
                f'option "{literal}" is invalid:\n'
                'for literal strings use "SECRET_NAME=VALUE" format'
            ) from None
        secrets[name] = {"type": "env", "value": _encode(value.encode())}
        names.append(name)

    for path in file_secrets:
        try:
            with open(path, "rb") as handle:
                data = handle.read()
        except OSError as exc:
            raise ReanaError(f"file {path} could not be uploaded: {exc}") from exc
        name = os.path.basename(path)
        secrets[name] = {"type": "file", "value": _encode(data)}
        names.append(name)

    return secrets, names


@click.command("secrets-add", short_help="Add secrets from literal string or from file.")
@access_token_option
@click.option("--env", "env_secrets", multiple=True,
              help="Secrets to be uploaded from literal string. e.g. PASSWORD=password123")
@click.option("--file", "file_secrets", multiple=True, help="Secrets to be uploaded from file.")
@click.option("--overwrite", is_flag=True, help="Overwrite the secret if already present.")
@api_command()
def secrets_add(
    client: ReanaClient,
    access_token: str,
    env_secrets: Tuple[str, ...],
    file_secrets: Tuple[str, ...],
    overwrite: bool,
) -> None:
    """Add secrets from literal string or from file.

    \b
    Examples:
      $ reana-client secrets-add --env RUCIO_USERNAME=ruciouser
      $ reana-client secrets-add --file userkey.pem
      $ reana-client secrets-add --env VOMSPROXY_FILE=x509up_u1000
                                 --file /tmp/x509up_u1000
    """
    try:
        validate_at_least_one({"env": env_secrets, "file": file_secrets})
    except ValidationError as exc:
        raise click.UsageError(exc.format_message()) from None
    for path in file_secrets:
        try:
            validate_file(path)
        except ValidationError as exc:
            raise ValidationError(f"invalid value for '--file': {exc.format_message()}") from None

    secrets, names = parse_secrets(env_secrets, file_secrets)
    log.debug("uploading secrets", names=names, overwrite=overwrite)
    client.add_secrets(access_token, secrets, overwrite=overwrite)
    display_message(f"Secrets {', '.join(names)} were successfully uploaded.", SUCCESS)


@click.command("secrets-list", short_help="List user secrets.")
@access_token_option
@json_option
@api_command()
def secrets_list(client: ReanaClient, access_token: str, json_output: bool) -> None:
    """List user secrets.

    \b
    Examples:
      $ reana-client secrets-list
    """
    rows = [[secret.name, secret.type] for secret in client.get_secrets(access_token)]
    emit_table(Table(SECRETS_HEADER, rows), json_output)


@click.command("secrets-delete", short_help="Delete user secrets by name.")
@access_token_option
@click.argument("secrets", nargs=-1, required=True)
@api_command()
def secrets_delete(client: ReanaClient, access_token: str, secrets: Tuple[str, ...]) -> None:
    """Delete user secrets by name.

    \b
    Examples:
      $ reana-client secrets-delete RUCIO_USERNAME
    """
    try:
        deleted = client.delete_secrets(access_token, list(secrets))
    except NotFound as exc:
        missing = exc.payload if isinstance(exc.payload, list) else list(secrets)
        raise ReanaError(
            f"secrets {', '.join(str(n) for n in missing)} do not exist. Nothing was deleted"
        ) from exc
    display_message(f"Secrets {', '.join(deleted)} were successfully deleted.", SUCCESS)
