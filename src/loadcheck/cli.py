"""loadcheck CLI: monitoring check for high load average."""

import logging
import tomllib
from pathlib import Path

import typer
from pydantic import ValidationError

from loadcheck import __version__
from loadcheck.check import LoadChecker, format_status_line
from loadcheck.config import DEFAULT_CHECK_NAME, LoadCheckConfig, load_config
from loadcheck.logging import configure_logging
from loadcheck.models import CheckStatus

logger = logging.getLogger(__name__)

CONFIG_ERROR_EXIT_CODE = 3


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"loadcheck {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="loadcheck",
    help="Log top CPU consumers when the load average is too high",
    add_completion=False,
)


def _build_config(
    config_path: Path | None,
    threshold: float | None,
    log_file: Path | None,
    lock_file: Path | None,
) -> LoadCheckConfig:
    """Load the config file and apply command-line overrides."""
    config = load_config(config_path)
    overrides = {
        "per_core_threshold": threshold,
        "log_path": log_file,
        "lock_path": lock_file,
    }
    updates = {key: value for key, value in overrides.items() if value is not None}
    if not updates:
        return config
    return LoadCheckConfig.model_validate(config.model_dump() | updates)


@app.command()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Print diagnostic output",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="TOML configuration file",
    ),
    threshold: float | None = typer.Option(
        None,
        "--threshold",
        "-t",
        help="Load allowed per CPU before warning (default 0.08)",
    ),
    log_file: Path | None = typer.Option(
        None,
        "--log-file",
        help="Event log file (default depends on platform)",
    ),
    lock_file: Path | None = typer.Option(
        None,
        "--lock-file",
        help="Lock file (default <tmpdir>/<check name>.tmp)",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored diagnostic output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Compare the 1-minute load average to a per-CPU limit and print a check line."""
    configure_logging(verbose=verbose, no_color=no_color)
    if verbose:
        typer.echo("Verbose Mode enabled.")

    try:
        config = _build_config(config_path, threshold, log_file, lock_file)
    except (OSError, tomllib.TOMLDecodeError, ValidationError) as e:
        logger.error("Invalid configuration: %s", e)
        typer.echo(
            format_status_line(
                CheckStatus.UNKNOWN, DEFAULT_CHECK_NAME, "invalid configuration"
            )
        )
        raise typer.Exit(code=CONFIG_ERROR_EXIT_CODE) from None

    checker = LoadChecker(config)
    result = checker.run()
    typer.echo(checker.status_line(result))
    raise typer.Exit(code=result.exit_code)


if __name__ == "__main__":
    app()
