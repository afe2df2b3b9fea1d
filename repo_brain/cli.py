import sys
import logging
import hydra
from omegaconf import DictConfig

from repo_brain import __version__
from repo_brain.commands.index import index_command
from repo_brain.commands.explain import explain_command
from repo_brain.commands.remember import remember_command
from repo_brain.utils.helpers import configure_logging

log = logging.getLogger(__name__)

COMMANDS = {
    "index": ("Scan and index the repository", "repo-brain command=index [path=<dir>]",
              lambda cfg: index_command(cfg)),
    "explain": ("Explain a symbol or code concept", "repo-brain command=explain query=<symbol>",
                lambda cfg: explain_command(cfg)),
    "remember": ("Record a project convention",
                 "repo-brain command=remember convention.type=<type> convention.description=<text>",
                 lambda cfg: remember_command(cfg)),
}


def show_help():
    lines = "\n".join(f"  {name:<12} {desc}" for name, (desc, _, _) in COMMANDS.items())
    usages = "\n".join(f"  {usage}" for _, usage, _ in COMMANDS.values())
    print(f"""
Repo Brain v{__version__}
Developer assistant for exploring and understanding codebases

USAGE:
  repo-brain command=<command> [key=value ...]

COMMANDS:
{lines}
  help         Show this help message
  version      Show version information

EXAMPLES:
{usages}
  repo-brain command=explain query=MyClass model=lmstudio
""")


def run_command(cfg: DictConfig) -> int:
    """Dispatches cfg.command; returns the process exit code."""
    command = str(cfg.get("command", None) or "help").lower()

    if command in ("help", "--help", "-h"):
        show_help()
        return 0
    if command in ("version", "--version", "-v"):
        print(f"Repo Brain v{__version__}")
        return 0

    if command not in COMMANDS:
        log.error(f"Unknown command: {command}")
        print("Run 'repo-brain command=help' for usage information.")
        return 1

    try:
        return COMMANDS[command][2](cfg)
    except Exception as e:
        log.exception(f"Command failed: {e}")
        print(f"\nCommand '{command}' failed: {e}")
        return 1


@hydra.main(version_base="1.3", config_path="configs", config_name="main")
def main(cfg: DictConfig):
    configure_logging(cfg)
    code = run_command(cfg)
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
