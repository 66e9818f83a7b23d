"""Basic shell completion scripts for command-line tools."""

from __future__ import annotations

from enum import Enum


class Shell(Enum):
    """Shells that completion scripts can be generated for."""

    BASH = "bash"
    ZSH = "zsh"
    FISH = "fish"
    POWERSHELL = "powershell"


_ALIASES = {
    "bash": Shell.BASH,
    "zsh": Shell.ZSH,
    "fish": Shell.FISH,
    "powershell": Shell.POWERSHELL,
    "ps": Shell.POWERSHELL,
}

_TEMPLATES = {
    Shell.BASH: r"""# bash completion for {bin}
_{bin}_completions() {
    local cur prev opts
    COMPREPLY=()
    cur="${COMP_WORDS[COMP_CWORD]}"
    prev="${COMP_WORDS[COMP_CWORD-1]}"
    opts=$({bin} --help 2>/dev/null | grep -oP '^\s+\K\S+' | head -50)
    COMPREPLY=( $(compgen -W "$opts" -- "$cur") )
}
complete -F _{bin}_completions {bin}
""",
    Shell.ZSH: """#compdef {bin}
_arguments '*:filename:_files'
""",
    Shell.FISH: r"""# fish completions for {bin}
complete -c {bin} -f
complete -c {bin} -a '(command {bin} --help 2>/dev/null | string match -r "^\s+\S+")'
""",
    Shell.POWERSHELL: r"""# PowerShell completion for {bin}
Register-ArgumentCompleter -Native -CommandName '{bin}' -ScriptBlock {
    param($wordToComplete, $commandAst, $cursorPosition)
    & {bin} --help 2>$null | ForEach-Object {
        if ($_ -match '^\s+(\S+)') {
            $matches[1]
        }
    } | Where-Object { $_ -like "$wordToComplete*" } | ForEach-Object {
        [System.Management.Automation.CompletionResult]::new($_, $_, 'ParameterValue', $_)
    }
}
""",
}


def parse_shell(s: str) -> Shell | None:
    """Parse a shell name case-insensitively ("ps" means PowerShell); None if unknown."""
    return _ALIASES.get(s.lower())


def generate_completion_hint(shell: Shell, bin_name: str) -> str:
    """Return a basic completion script for ``bin_name`` in the given shell."""
    return _TEMPLATES[shell].replace("{bin}", bin_name)