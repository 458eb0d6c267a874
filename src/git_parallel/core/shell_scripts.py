"""Shell wrapper functions that let `switch` change the caller's directory.

A process cannot change its parent shell's directory, so `switch` writes the
destination into the file named by GIT_PARALLEL_RESULT and exits with
SWITCH_EXIT_CODE. The wrapper creates that file, runs the real executable and
`cd`s when it sees the code.
"""

EXECUTABLE = "git-parallel"
RESULT_FILE_ENV = "GIT_PARALLEL_RESULT"
SWITCH_EXIT_CODE = 10

SUPPORTED_SHELLS = ("bash", "zsh", "fish", "powershell")

_POSIX_TEMPLATE = """\
# git-parallel shell integration
{name}() {{
    local tmp
    tmp="$(mktemp)"
    {env}="$tmp" command {exe} "$@"
    local ret=$?
    if [ $ret -eq {code} ]; then
        if [ -s "$tmp" ]; then
            cd "$(cat "$tmp")"
        fi
        rm -f "$tmp"
        return 0
    fi
    rm -f "$tmp"
    return $ret
}}
"""

_FISH_TEMPLATE = """\
# git-parallel shell integration
function {name}
    set -l tmp (mktemp)
    {env}="$tmp" command {exe} $argv
    set -l ret $status
    if test $ret -eq {code}
        if test -s "$tmp"
            cd (cat "$tmp")
        end
        rm -f "$tmp"
        return 0
    end
    rm -f "$tmp"
    return $ret
end
"""

_POWERSHELL_TEMPLATE = """\
# git-parallel shell integration
function {name} {{
    $tmp = [System.IO.Path]::GetTempFileName()
    $env:{env} = $tmp
    try {{
        $command = Get-Command -Name "{exe}" -CommandType Application -ErrorAction Ignore |
            Select-Object -First 1
        if (-not $command) {{
            Write-Error "{exe} executable not found"
            return
        }}
        & $command @args
        if ($LASTEXITCODE -eq {code}) {{
            if (Test-Path $tmp) {{
                $target = Get-Content $tmp -Raw
                if ($target) {{
                    Set-Location $target.Trim()
                }}
            }}
        }}
    }} finally {{
        if (Test-Path $tmp) {{
            Remove-Item $tmp
        }}
        $env:{env} = $null
    }}
}}
"""

_TEMPLATES = {
    "bash": _POSIX_TEMPLATE,
    "zsh": _POSIX_TEMPLATE,
    "fish": _FISH_TEMPLATE,
    "powershell": _POWERSHELL_TEMPLATE,
}


def render_shell_wrapper(shell: str, name: str = EXECUTABLE) -> str:
    """Wrapper function source for the given shell.

    Args:
        shell: One of SUPPORTED_SHELLS (`pwsh` is accepted for powershell)
        name: Name of the shell function to define

    Raises:
        ValueError: If the shell is not supported
    """
    key = shell.lower()
    if key == "pwsh":
        key = "powershell"
    template = _TEMPLATES.get(key)
    if template is None:
        raise ValueError(f"Unsupported shell: {shell}")
    return template.format(name=name, env=RESULT_FILE_ENV, exe=EXECUTABLE, code=SWITCH_EXIT_CODE)
