"""``completion`` command: print a shell completion script.

Bash, Zsh and Fish scripts come from Click's shell-completion machinery.
PowerShell is added here as one more :class:`click.shell_completion.ShellComplete`
class, so the generated script talks to the same ``_REANA_CLIENT_COMPLETE``
protocol as the others.
"""

from __future__ import annotations

import os
from typing import List, Tuple

import click
from click.shell_completion import (
    CompletionItem,
    ShellComplete,
    add_completion_class,
    get_completion_class,
    split_arg_string,
)

__all__ = ["completion", "PowerShellComplete", "SHELLS", "COMPLETE_VAR"]

SHELLS = ["bash", "zsh", "fish", "powershell"]
PROG_NAME = "reana-client"
COMPLETE_VAR = "_REANA_CLIENT_COMPLETE"

_POWERSHELL_SOURCE = """\
Register-ArgumentCompleter -Native -CommandName %(prog_name)s -ScriptBlock {
    param($wordToComplete, $commandAst, $cursorPosition)
    $words = @($commandAst.CommandElements | ForEach-Object { $_.ToString() })
    $cword = $words.Count
    if ($wordToComplete -ne '') { $cword = $cword - 1 }
    $env:COMP_WORDS = $words -join ' '
    $env:COMP_CWORD = $cword
    $env:%(complete_var)s = 'powershell_complete'
    %(prog_name)s | ForEach-Object {
        [System.Management.Automation.CompletionResult]::new($_, $_, 'ParameterValue', $_)
    }
    Remove-Item Env:%(complete_var)s
    Remove-Item Env:COMP_WORDS
    Remove-Item Env:COMP_CWORD
}
"""


@add_completion_class
class PowerShellComplete(ShellComplete):
    """Completion for PowerShell's ``Register-ArgumentCompleter``."""

    name = "powershell"
    source_template = _POWERSHELL_SOURCE

    def get_completion_args(self) -> Tuple[List[str], str]:
        cwords = split_arg_string(os.environ["COMP_WORDS"])
        cword = int(os.environ["COMP_CWORD"])
        args = cwords[1:cword]
        try:
            incomplete = cwords[cword]
        except IndexError:
            incomplete = ""
        return args, incomplete

    def format_completion(self, item: CompletionItem) -> str:
        return item.value


def completion_script(root: click.Command, shell: str) -> str:
    """Return the completion script of *root* for *shell*."""
    cls = get_completion_class(shell)
    if cls is None:
        raise click.BadParameter(f"unsupported shell '{shell}'", param_hint="SHELL")
    comp = cls(root, {}, PROG_NAME, COMPLETE_VAR)
    return comp.source()


@click.command(
    "completion",
    short_help="Generate shell completion scripts.",
)
@click.argument("shell", type=click.Choice(SHELLS))
@click.pass_context
def completion(ctx: click.Context, shell: str) -> None:
    """Generate shell completion scripts for reana-client.

    \b
    To load completions:
      Bash:        source <(reana-client completion bash)
      Zsh:         source <(reana-client completion zsh)
      Fish:        reana-client completion fish | source
      PowerShell:  reana-client completion powershell | Out-String | Invoke-Expression
    """
    click.echo(completion_script(ctx.find_root().command, shell))
