"""Command-line interface for the Jira CI reporter."""

import contextlib
import logging
import signal
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import Any, Optional

import click

from ._version import __version__
from .config import ConfigLoader
from .errors import ReporterError, RunCancelled
from .integrations.atlassian.http import Deadline
from .pipeline import run_report

LOG_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def configure_logging(level_name: str) -> logging.Logger:
    """Configure package logging for the requested level.

    ``none`` silences all output; unknown names fall back to INFO.
    """
    if level_name.lower() == "none":
        logging.getLogger().setLevel(logging.CRITICAL)
        logging.getLogger("jira_ci_reporter").setLevel(logging.CRITICAL)
        return logging.getLogger(__name__)

    log_level = LOG_LEVELS.get(level_name.lower(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="[%(levelname)s] %(filename)s:%(lineno)d - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,  # Ensure reconfiguration of existing loggers
    )
    logging.getLogger("jira_ci_reporter").setLevel(log_level)

    logger = logging.getLogger(__name__)
    logger.debug(f"Logging enabled at {logging.getLevelName(log_level)} level")
    return logger


@contextlib.contextmanager
def cancel_on_signals(deadline: Deadline) -> Iterator[None]:
    """Turn SIGINT/SIGTERM into RunCancelled, aborting any in-flight call."""

    def handler(signum: int, frame: Any) -> None:
        name = signal.Signals(signum).name
        deadline.cancel(f"received {name}")
        raise RunCancelled(f"run cancelled by {name}")

    previous = {}
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            previous[signum] = signal.signal(signum, handler)
        except ValueError:
            # Not the main thread; signals cannot be installed.
            pass
    try:
        yield
    finally:
        for signum, old in previous.items():
            signal.signal(signum, old)


@click.command(name="jira-ci-reporter")
@click.version_option(version=__version__, prog_name="jira-ci-reporter")
@click.help_option("-h", "--help")
@click.option(
    "--env-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Load settings from a .env file (existing environment variables win)",
)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML file with plugin settings (existing environment variables win)",
)
@click.option(
    "--log",
    type=click.Choice(["none", "error", "warn", "info", "debug", "trace"], case_sensitive=False),
    default=None,
    help="Log level (default: PLUGIN_LOG_LEVEL or info)",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Abort the run after this many seconds (default: PLUGIN_TIMEOUT or unbounded)",
)
def cli(env_file: Optional[Path], config: Optional[Path], log: Optional[str], timeout: Optional[float]) -> None:
    """Report a CI deployment or build to the Jira issues it references.

    Settings are read from PLUGIN_* variables and the event from the CI
    runner's DRONE_* variables.
    """
    try:
        context = ConfigLoader.load(config_path=config, env_file=env_file)
    except ReporterError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)

    logger = configure_logging(log or context.log_level or "info")
    deadline = Deadline(timeout if timeout is not None else context.timeout)

    try:
        with cancel_on_signals(deadline):
            result = run_report(context, deadline=deadline)
    except ReporterError as e:
        logger.debug(f"Run failed: {type(e).__name__}")
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)

    click.echo(
        f"✅ Reported {result.payload_kind} ({result.state}) for {', '.join(result.issue_keys)}",
        err=True,
    )


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
