"""Shared constants for wt."""

# ANSI escape sequences used by the picker and prompts
CYAN = "\x1b[36m"
GREEN = "\x1b[32m"
RED = "\x1b[31m"
DIM = "\x1b[90m"
BOLD = "\x1b[1m"
RESET = "\x1b[0m"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
CLEAR_TO_END = "\x1b[J"


# Symbol constants
SYMBOL_PROMPT = "?"
SYMBOL_POINTER = "❯"
SYMBOL_ARROW = "→"
SYMBOL_SEPARATOR = "›"


# Spinner (rich spinner name; braille "dots" frames at 80ms)
SPINNER_NAME = "dots"


# Action menu entries shown after a worktree is picked
ACTION_OPEN = "open"
ACTION_DELETE = "delete"
ACTION_LABELS = {
    ACTION_OPEN: "Open",
    ACTION_DELETE: "Delete",
}


# Directories never copied into a fresh worktree
EXCLUDED_COPY_DIRS = frozenset({
    "node_modules",
    "dist",
    "build",
    ".cache",
    ".turbo",
    ".next",
    "out",
    "coverage",
    ".git",
    ".venv",
    "venv",
    "__pycache__",
})


# Lockfile -> (package manager, install command), first match wins
LOCKFILE_INSTALLERS = [
    ("bun.lockb", "bun", ["bun", "install"]),
    ("bun.lock", "bun", ["bun", "install"]),
    ("pnpm-lock.yaml", "pnpm", ["pnpm", "install"]),
    ("yarn.lock", "yarn", ["yarn", "install"]),
    ("package-lock.json", "npm", ["npm", "install"]),
    ("uv.lock", "uv", ["uv", "sync"]),
    ("poetry.lock", "poetry", ["poetry", "install"]),
]
PACKAGE_JSON_INSTALLER = ("package.json", "npm", ["npm", "install"])


HELP_TEXT = """wt - git worktree manager

Usage:
  wt                    Interactive picker (fuzzy search)
  wt <query>            Search or create worktree
  wt <github-url>       Create worktree from GitHub issue/PR URL
  wt new <name>         Create new worktree from origin/main
  wt new <github-url>   Create worktree from GitHub issue/PR URL
  wt checkout <branch>  Checkout existing remote branch
  wt rm [name] [-y]     Remove worktree (-y skips confirmation)
  wt main               Go to main repo
  wt list               List all worktrees
  wt setup              Setup shell integration (one-time)
  wt init [shell]       Print shell function
  wt --version          Print version
"""
