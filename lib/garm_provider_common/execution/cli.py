"""Process entry point for provider executables.

A provider's ``__main__`` only has to supply a factory that builds its
backend from the config file and controller ID::

    from garm_provider_common.execution.cli import main

    def build(config_file: str, controller_id: str) -> MyProvider:
        return MyProvider.from_config(config_file, controller_id)

    if __name__ == "__main__":
        main(build)

The payload goes to stdout, errors go to stderr and the exit code tells the
controller what class of error happened.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from collections.abc import Callable, Mapping
from typing import IO, Any

from ..wrappers.logging_wrapper import LoggingProvider
from .commands import ENV_LOG_LEVEL
from .common import EXIT_CODE_GENERIC, ExternalProvider, resolve_error_to_exit_code
from .environment import Environment, get_environment, run
from .errors import ExecutionError

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[str, str], ExternalProvider]

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(
    environ: Mapping[str, str] | None = None, stream: IO[str] | None = None
) -> logging.Handler:
    """Send log records to stderr at the level named by GARM_PROVIDER_LOG_LEVEL."""
    environ = os.environ if environ is None else environ
    level_name = environ.get(ENV_LOG_LEVEL, "WARNING").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.WARNING
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(level)
    return handler


async def _execute(
    provider_factory: ProviderFactory, env: Environment, timeout: float | None
) -> str:
    active = env.active
    try:
        provider = provider_factory(active.provider_config_file, active.controller_id)
    except Exception as exc:
        raise ExecutionError(f"failed to create provider: {exc}") from exc
    return await run(LoggingProvider(provider), env, timeout=timeout)


def run_provider(
    provider_factory: ProviderFactory,
    *,
    environ: Mapping[str, str] | None = None,
    stdin: IO[Any] | None = None,
    stdout: IO[str] | None = None,
    stderr: IO[str] | None = None,
    timeout: float | None = None,
) -> int:
    """Resolve, validate and run one command. Returns the process exit code."""
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    try:
        env = get_environment(environ, stdin)
        result = asyncio.run(_execute(provider_factory, env, timeout))
    except (KeyboardInterrupt, asyncio.CancelledError):
        stderr.write("operation cancelled\n")
        return EXIT_CODE_GENERIC
    except Exception as exc:
        logger.debug("provider command failed", exc_info=True)
        stderr.write(f"{exc}\n")
        return resolve_error_to_exit_code(exc)

    if result:
        stdout.write(result)
        stdout.flush()
    return 0


def main(provider_factory: ProviderFactory, timeout: float | None = None) -> None:
    """Run the provider command described by the process environment and exit."""
    configure_logging()
    sys.exit(run_provider(provider_factory, timeout=timeout))
