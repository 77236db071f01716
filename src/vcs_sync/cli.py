import argparse
import logging
import sys
from dataclasses import replace
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import registry
from .config import Config
from .constants import APP_NAME, CONFIG_FILE, LOCAL_CONFIG_NAME
from .driver import Driver
from .runner import CommandError

logger = logging.getLogger(APP_NAME)
console = Console()
err_console = Console(stderr=True)


def setup_logging(config: Config) -> None:
    """Configures the logging subsystem.

    Logs always go to stderr. When `[logging] file` is set, they are also
    written to a rotating log file bounded by `[limits] max_log_size`.

    Args:
        config (Config): The loaded configuration.
    """
    formatter = logging.Formatter(
        "[%(asctime)s] %(levelname)s: %(message)s", "%Y-%m-%d %H:%M:%S"
    )
    logger.setLevel(logging.DEBUG if config.logging.verbose else logging.INFO)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if config.logging.file:
        log_path = Path(config.logging.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=config.limits.max_log_size,
            backupCount=5,
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)


def build_driver(config: Config) -> Driver:
    """Instantiates the configured driver through the registry."""
    registry.register_builtin_drivers()
    return registry.new_driver(config.driver.vcs, config.driver_blob())


def _apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Layers command-line flags over the loaded configuration."""
    driver = config.driver
    if args.vcs:
        driver = replace(driver, vcs=args.vcs)
    if args.ref:
        driver = replace(driver, ref=args.ref)
    if args.detect_ref:
        driver = replace(driver, detect_ref=True)
    logging_conf = config.logging
    if args.verbose:
        logging_conf = replace(logging_conf, verbose=True)
    return replace(config, driver=driver, logging=logging_conf)


def show_drivers() -> None:
    """Lists the registered driver names."""
    registry.register_builtin_drivers()
    for name in registry.REGISTRY.names():
        console.print(name)


def show_config_reference(config: Config) -> None:
    """Displays the effective configuration in a table."""
    table = Table(title="vcs-sync configuration", show_lines=False)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_column("Description", style="dim")

    table.add_row("driver.vcs", config.driver.vcs, "Registered backend name")
    table.add_row(
        "driver.detect_ref",
        str(config.driver.detect_ref),
        "Ask the remote for its default branch",
    )
    table.add_row(
        "driver.ref", config.driver.ref or "(unset)", "Explicit ref to track"
    )
    table.add_row(
        "limits.max_log_size",
        str(config.limits.max_log_size),
        "Log rotation threshold in bytes",
    )
    table.add_row(
        "logging.file", config.logging.file or "(unset)", "Rotating log file path"
    )
    table.add_row("logging.verbose", str(config.logging.verbose), "Debug logging")

    console.print(table)
    console.print(
        f"[dim]Sources: {CONFIG_FILE}, ./{LOCAL_CONFIG_NAME} "
        "or \\[tool.vcs-sync] in ./pyproject.toml[/dim]"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Keep local working copies in sync with their remotes.",
    )
    parser.add_argument("--vcs", help="Driver to use (default: from config, 'git')")
    parser.add_argument("--ref", help="Ref to track (overrides detection)")
    parser.add_argument(
        "--detect-ref",
        action="store_true",
        help="Detect the remote's default branch when no ref is set",
    )
    parser.add_argument("--config", type=Path, help="Extra TOML config file")
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    clone_parser = subparsers.add_parser(
        "clone", help="Clone a remote and sync it to the target ref"
    )
    clone_parser.add_argument("directory", type=Path, help="Working copy to create")
    clone_parser.add_argument("url", help="Remote repository URL")

    pull_parser = subparsers.add_parser("pull", help="Sync an existing working copy")
    pull_parser.add_argument("directory", type=Path)

    head_parser = subparsers.add_parser("head", help="Print the checked-out revision")
    head_parser.add_argument("directory", type=Path)

    subparsers.add_parser(
        "special-files", help="List version-control metadata paths"
    )

    generated_parser = subparsers.add_parser(
        "generated", help="List patterns of files marked as generated"
    )
    generated_parser.add_argument("directory", type=Path)

    subparsers.add_parser("drivers", help="List available drivers")

    subparsers.add_parser("config", help="Show the effective configuration")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the vcs-sync CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = _apply_overrides(Config.load(Path.cwd(), args.config), args)
    setup_logging(config)

    if args.command == "drivers":
        show_drivers()
        return
    elif args.command == "config":
        show_config_reference(config)
        return

    try:
        driver = build_driver(config)

        if args.command == "clone":
            with console.status(f"Cloning {args.url}...", spinner="dots"):
                rev = driver.clone(args.directory, args.url)
            console.print(rev, highlight=False)
        elif args.command == "pull":
            with console.status(f"Syncing {args.directory}...", spinner="dots"):
                rev = driver.pull(args.directory)
            console.print(rev, highlight=False)
        elif args.command == "head":
            console.print(driver.head_rev(args.directory), highlight=False)
        elif args.command == "special-files":
            for name in driver.special_files():
                console.print(name)
        elif args.command == "generated":
            for pattern in driver.auto_generated_file_patterns(args.directory):
                console.print(pattern, markup=False, highlight=False)
    except (CommandError, ValueError) as e:
        err_console.print(f"[bold red]ERROR:[/bold red] {escape(str(e))}")
        sys.exit(1)


if __name__ == "__main__":
    main()
