"""Main CLI entry point for the yuque-sync command.

This module provides the Typer application that serves as the entry point
for the yuque-sync command-line tool. Running it performs one full sync
from the configured Yuque repos into the configured Confluence space.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from src.cli.output import OutputHandler
from src.cli.sync_command import SyncCommand

__version__ = "0.1.0"

app = typer.Typer(
    name="yuque-sync",
    help="""One-way sync from Yuque repositories into a Confluence space.

QUICK START:
  yuque-sync                              # Sync using ./yuque-sync.yaml
  yuque-sync --config path/to/sync.yaml   # Sync using another config file
  yuque-sync -v 2 --logdir ./logs         # Debug output, also written to a log file

Credentials are read from the environment (or a .env file):
  YUQUE_TOKEN, CONFLUENCE_URL, CONFLUENCE_USER, CONFLUENCE_API_TOKEN""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=False,
)

logger = logging.getLogger(__name__)


LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _add_handler(app_logger: logging.Logger, handler: logging.Handler,
                 level: int, fmt: str) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=LOG_DATE_FORMAT))
    app_logger.addHandler(handler)


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Attach stderr (and optionally file) handlers to the 'src' logger.

    Third-party loggers and the root logger keep their defaults.

    Args:
        verbosity: 0=WARNING, 1=INFO, 2 or more=DEBUG
        logdir: Directory for a yuque-sync_<timestamp>.log file, created if missing
    """
    level = LOG_LEVELS.get(verbosity, logging.DEBUG)
    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)

    _add_handler(app_logger, logging.StreamHandler(sys.stderr), level,
                 "%(asctime)s [%(levelname)8s] %(message)s")

    if not logdir:
        return

    log_dir = Path(logdir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"yuque-sync_{datetime.now():%Y%m%d_%H%M%S}.log"
    _add_handler(app_logger, logging.FileHandler(log_file, encoding="utf-8"), level,
                 "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    logger.info(f"Logging to file: {log_file}")


@app.command()
def main_command(
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to the YAML config (default: $YUQUE_SYNC_CONFIG or ./yuque-sync.yaml)",
        metavar="PATH",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
) -> None:
    """Sync Yuque repositories into a Confluence space.

    \b
    Pages removed from Yuque are renamed with a [Deprecated] prefix, never
    deleted. Prefix a page title with [Protected] to keep it untouched.
    """
    if version:
        typer.echo(f"yuque-sync version {__version__}")
        raise typer.Exit()

    _configure_logging(verbosity, logdir)
    output = OutputHandler(verbosity=verbosity, no_color=no_color)

    exit_code = SyncCommand(config_path=config, output_handler=output).run()
    raise typer.Exit(int(exit_code))


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
