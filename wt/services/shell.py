"""Shell integration: the wrapper function that applies wt's cd commands."""

import os
from typing import Optional

from wt.exceptions import WtError
from wt.logging_config import get_logger

logger = get_logger(__name__)

POSIX_INIT_SCRIPT = r"""wt() {
  local result cmdline
  result=$(command wt "$@")
  cmdline=$(echo "$result" | sed 's/\x1b\[[0-9;]*m//g' | grep -E '^(cd "|echo )' | tail -1)
  if [[ -n "$cmdline" ]]; then
    eval "$cmdline"
  elif [[ -n "$result" ]]; then
    echo "$result"
  fi
}"""

FISH_INIT_SCRIPT = r"""function wt
  set -l result (command wt $argv)
  set -l cmdline (printf '%s\n' $result | sed 's/\x1b\[[0-9;]*m//g' | grep -E '^(cd "|echo )' | tail -1)
  if test -n "$cmdline"
    eval $cmdline
  else if test -n "$result"
    printf '%s\n' $result
  end
end"""

SUPPORTED_SHELLS = ("bash", "zsh", "fish")


def shell_init_script(shell: Optional[str] = None) -> str:
    """Return the wrapper function for shell (bash/zsh by default)."""
    if shell and os.path.basename(shell) == "fish":
        return FISH_INIT_SCRIPT
    return POSIX_INIT_SCRIPT


def format_cd(path: str, title: Optional[str] = None) -> str:
    """Build the shell command that moves into path, optionally setting the tab title."""
    cmd = f'cd "{path}"'
    if title:
        return f'echo -ne "\\033]0;{title}\\007"; {cmd}'
    return cmd


def shell_config_file(shell_path: str, home: str) -> tuple[str, str]:
    """Pick the rc file and init line for a shell.

    Raises:
        WtError: If the shell is not supported
    """
    shell = os.path.basename(shell_path or "")
    if shell == "zsh":
        return os.path.join(home, ".zshrc"), 'eval "$(wt init)"'
    if shell == "bash":
        return os.path.join(home, ".bashrc"), 'eval "$(wt init)"'
    if shell == "fish":
        return os.path.join(home, ".config", "fish", "config.fish"), "wt init fish | source"
    raise WtError(f"unsupported shell: {shell_path or 'unknown'}")


def setup_shell(shell_path: Optional[str] = None, home: Optional[str] = None) -> tuple[str, bool]:
    """
    Add the init line to the user's shell config, once.

    Args:
        shell_path: Login shell, defaults to $SHELL
        home: Home directory, defaults to $HOME

    Returns:
        Tuple of (config file, whether it was changed)

    Raises:
        WtError: If the home directory or shell is unknown
    """
    shell_path = shell_path if shell_path is not None else os.environ.get("SHELL", "")
    home = home if home is not None else os.environ.get("HOME", "")
    if not home:
        raise WtError("could not determine home directory")

    config_file, init_line = shell_config_file(shell_path, home)

    content = ""
    if os.path.exists(config_file):
        with open(config_file, encoding="utf-8") as f:
            content = f.read()

    if "wt init" in content:
        logger.debug(f"wt already configured in {config_file}")
        return config_file, False

    if content and not content.endswith("\n"):
        content += "\n"
    os.makedirs(os.path.dirname(config_file), exist_ok=True)
    with open(config_file, "w", encoding="utf-8") as f:
        f.write(content + init_line + "\n")
    logger.info(f"Added wt init to {config_file}")
    return config_file, True
