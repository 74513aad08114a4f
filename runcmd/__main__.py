"""Command-line entry point: run one command and print its output lines."""

import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

import typer

from runcmd.config import Settings
from runcmd.errors import InvalidArgumentError, RuncmdError
from runcmd.services import (
    new_local_runner,
    new_remote_key_auth_runner,
    new_remote_pass_auth_runner,
)
from runcmd.utils.console import ColorfulFormatter

logger = logging.getLogger("runcmd.cli")

app = typer.Typer(
    add_completion=False,
    help="Run a command locally or over SSH and print its output lines.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def configure_logging(settings: Settings, verbose: bool = False) -> None:
    """Attach a colorful stderr handler to the runcmd logger."""
    level = "DEBUG" if verbose else settings.log_level
    use_colors = settings.log_colors and sys.stderr.isatty()

    pkg_logger = logging.getLogger("runcmd")
    pkg_logger.setLevel(getattr(logging, level, logging.INFO))

    if not pkg_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ColorfulFormatter(use_colors=use_colors))
        pkg_logger.addHandler(handler)
        pkg_logger.propagate = False

    logging.getLogger("asyncssh").setLevel(logging.WARNING)


async def execute(
    cmd_text: str,
    settings: Settings,
    host: str | None = None,
    key: Path | None = None,
    password: str | None = None,
) -> list[str]:
    """Run cmd_text locally, or on host when given, and return its lines.

    Args:
        cmd_text: Command to run
        settings: Runtime settings
        host: ``user@host[:port]`` for remote execution
        key: Private key for remote execution
        password: Password for remote execution when no key is given

    Raises:
        RuncmdError: If the command cannot be run or fails
    """
    if host is None:
        worker = await new_local_runner(settings).command(cmd_text)
        return await worker.run()

    user, _, address = host.rpartition("@")
    if not user:
        raise InvalidArgumentError(f"--host must look like user@host[:port], got {host!r}")

    if key is not None:
        runner = await new_remote_key_auth_runner(user, address, key, settings=settings)
    elif password is not None:
        runner = await new_remote_pass_auth_runner(user, address, password, settings=settings)
    else:
        raise InvalidArgumentError("remote execution needs --key or --password-env")

    async with runner:
        worker = await runner.command(cmd_text)
        return await worker.run()


@app.command()
def main(
    command: List[str] = typer.Argument(..., help="Command and arguments to run."),
    host: Optional[str] = typer.Option(
        None, "--host", "-H", help="Run remotely on user@host[:port]."
    ),
    key: Optional[Path] = typer.Option(
        None, "--key", "-i", help="Private key file for remote authentication."
    ),
    password_env: Optional[str] = typer.Option(
        None,
        "--password-env",
        help="Name of the environment variable holding the SSH password.",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose (DEBUG) logging."
    ),
) -> None:
    """Run COMMAND and print stdout lines followed by stderr lines."""
    settings = Settings.from_env()
    configure_logging(settings, verbose)

    password = None
    if password_env:
        password = os.getenv(password_env)
        if password is None:
            typer.echo(f"Environment variable {password_env} is not set", err=True)
            raise typer.Exit(code=2)

    cmd_text = " ".join(command)
    logger.debug("Running %r on %s", cmd_text, host or "localhost")

    try:
        lines = asyncio.run(
            execute(cmd_text, settings, host=host, key=key, password=password)
        )
    except RuncmdError as e:
        logger.error("Command failed: %s", cmd_text)
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)

    for line in lines:
        typer.echo(line)


if __name__ == "__main__":
    app()
