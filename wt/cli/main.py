"""Entry point for the wt command"""

import sys
from typing import List, Optional

from rich.console import Console

from wt.cli.args import parse_args
from wt.config import Config
from wt.core import WorktreeManager
from wt.exceptions import NotInRepositoryError, WtError
from wt.logging_config import setup_logging
from wt.services.git.worktrees import get_repo_info
from wt.services.shell import setup_shell, shell_init_script
from wt.ui.terminal import TerminalContext

console = Console(stderr=True)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    parsed_args = parse_args(argv)
    setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)

    words = parsed_args.words
    command = words[0] if words else None

    try:
        if command == "init":
            print(shell_init_script(words[1] if len(words) > 1 else None))
            return 0

        if command == "setup":
            config_file, changed = setup_shell()
            if changed:
                console.print(f"Added wt to {config_file}")
                console.print(f"Run: source {config_file}")
            else:
                console.print(f"wt already configured in {config_file}")
            return 0

        config = Config(
            verbose=parsed_args.verbose,
            debug=parsed_args.debug,
            install_dependencies=not parsed_args.no_install,
            copy_ignored_files=not parsed_args.no_copy,
        )

        if parsed_args.debug:
            console.print("[yellow]Configuration:[/yellow]")
            for key, value in config.to_dict().items():
                if key == "github_token" and value:
                    value = "***"
                console.print(f"  {key}: {value}", markup=False)

        repo_info = get_repo_info(config=config)
        if repo_info is None:
            raise NotInRepositoryError()

        # One terminal handle for every prompt in this process
        terminal = TerminalContext.open()
        manager = WorktreeManager(repo_info, config, terminal)
        try:
            manager.run(words, yes=parsed_args.yes)
        finally:
            manager.close()
        return 0
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except WtError as e:
        console.print(f"wt: {e}", style="red", markup=False, highlight=False)
        return 1
    except Exception as e:
        console.print(f"wt: {e}", style="red", markup=False, highlight=False)
        if parsed_args.debug:
            console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
