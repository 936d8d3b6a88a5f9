"""Interface version v0.1.1 of the provider execution environment.

Adds the negotiated interface version and the pool extra specs to the
v0.1.0 descriptor, and answers ``GetVersion`` with the negotiated version.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import IO, Any

from ..params import BootstrapInstance
from .commands import (
    ENV_COMMAND,
    ENV_CONTROLLER_ID,
    ENV_INSTANCE_ID,
    ENV_INTERFACE_VERSION,
    ENV_POOL_EXTRASPECS,
    ENV_POOL_ID,
    ENV_PROVIDER_CONFIG_FILE,
    INSTANCE_COMMANDS,
    VERSION_010,
    ExecutionCommand,
)
from .common import (
    ExternalProvider,
    call_provider,
    get_bootstrap_params_from_stdin,
    marshal_instance,
    marshal_instances,
)
from .errors import (
    BootstrapParamsError,
    ConfigFileError,
    EnvironmentValidationError,
    InvalidCommandError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnvironmentV011:
    """Everything the controller passed to the provider for one invocation."""

    command: str = ""
    controller_id: str = ""
    pool_id: str = ""
    provider_config_file: str = ""
    instance_id: str = ""
    interface_version: str = ""
    extra_specs: str = ""
    bootstrap_params: BootstrapInstance = field(default_factory=BootstrapInstance)

    def validate(self) -> None:
        """Raise EnvironmentValidationError if the command cannot run.

        Command-independent checks run first and stop at the first failure,
        then exactly one command-specific branch runs.
        """
        if not self.command:
            raise EnvironmentValidationError(f"missing {ENV_COMMAND}")

        if not self.provider_config_file:
            raise EnvironmentValidationError(f"missing {ENV_PROVIDER_CONFIG_FILE}")

        try:
            os.lstat(self.provider_config_file)
        except OSError as exc:
            raise ConfigFileError(f"error accessing config file: {exc}") from exc

        if not self.controller_id:
            raise EnvironmentValidationError(f"missing {ENV_CONTROLLER_ID}")

        if self.command == ExecutionCommand.CREATE_INSTANCE:
            if not self.bootstrap_params.name:
                raise EnvironmentValidationError("missing bootstrap params")
            if not self.controller_id:
                raise EnvironmentValidationError("missing controller ID")
            if not self.pool_id:
                raise EnvironmentValidationError("missing pool ID")
        elif self.command in INSTANCE_COMMANDS:
            if not self.instance_id:
                raise EnvironmentValidationError("missing instance ID")
            if not self.pool_id:
                raise EnvironmentValidationError("missing pool ID")
        elif self.command == ExecutionCommand.LIST_INSTANCES:
            if not self.pool_id:
                raise EnvironmentValidationError("missing pool ID")
        elif self.command == ExecutionCommand.REMOVE_ALL_INSTANCES:
            if not self.controller_id:
                raise EnvironmentValidationError("missing controller ID")
        elif self.command == ExecutionCommand.GET_VERSION:
            pass
        else:
            raise EnvironmentValidationError(f"unknown {ENV_COMMAND}: {self.command}")


def get_environment(
    environ: Mapping[str, str] | None = None, stdin: IO[Any] | None = None
) -> EnvironmentV011:
    """Build and validate a v0.1.1 descriptor from the process environment.

    Bootstrap params are read from stdin only for the create command.
    """
    environ = os.environ if environ is None else environ
    command = environ.get(ENV_COMMAND, "")

    try:
        bootstrap_params = get_bootstrap_params_from_stdin(command, stdin)
    except BootstrapParamsError as exc:
        raise BootstrapParamsError(f"failed to get bootstrap params: {exc}") from exc

    env = EnvironmentV011(
        command=command,
        controller_id=environ.get(ENV_CONTROLLER_ID, ""),
        pool_id=environ.get(ENV_POOL_ID, ""),
        provider_config_file=environ.get(ENV_PROVIDER_CONFIG_FILE, ""),
        instance_id=environ.get(ENV_INSTANCE_ID, ""),
        interface_version=environ.get(ENV_INTERFACE_VERSION, ""),
        extra_specs=environ.get(ENV_POOL_EXTRASPECS, ""),
        bootstrap_params=bootstrap_params,
    )

    try:
        env.validate()
    except EnvironmentValidationError as exc:
        raise EnvironmentValidationError(
            f"failed to validate execution environment: {exc}"
        ) from exc

    return env


async def run(
    provider: ExternalProvider, env: EnvironmentV011, timeout: float | None = None
) -> str:
    """Run the descriptor's command against ``provider``.

    Returns the JSON payload for commands that produce data, the version
    string for GetVersion and an empty string otherwise.
    """
    command = env.command
    logger.debug("v0.1.1: dispatching %s", command)

    if command == ExecutionCommand.CREATE_INSTANCE:
        instance = await call_provider(
            command,
            "failed to create instance in provider",
            provider.create_instance(env.bootstrap_params),
            timeout,
        )
        return marshal_instance(instance)
    if command == ExecutionCommand.GET_INSTANCE:
        instance = await call_provider(
            command,
            "failed to get instance from provider",
            provider.get_instance(env.instance_id),
            timeout,
        )
        return marshal_instance(instance)
    if command == ExecutionCommand.LIST_INSTANCES:
        instances = await call_provider(
            command,
            "failed to list instances from provider",
            provider.list_instances(env.pool_id),
            timeout,
        )
        return marshal_instances(instances)
    if command == ExecutionCommand.DELETE_INSTANCE:
        await call_provider(
            command,
            "failed to delete instance from provider",
            provider.delete_instance(env.instance_id),
            timeout,
        )
        return ""
    if command == ExecutionCommand.REMOVE_ALL_INSTANCES:
        await call_provider(
            command,
            "failed to destroy environment",
            provider.remove_all_instances(),
            timeout,
        )
        return ""
    if command == ExecutionCommand.START_INSTANCE:
        await call_provider(
            command,
            "failed to start instance",
            provider.start(env.instance_id),
            timeout,
        )
        return ""
    if command == ExecutionCommand.STOP_INSTANCE:
        await call_provider(
            command,
            "failed to stop instance",
            provider.stop(env.instance_id, True),
            timeout,
        )
        return ""
    if command == ExecutionCommand.GET_VERSION:
        # Only GetVersion treats an empty negotiated version as the oldest one
        return env.interface_version or VERSION_010

    raise InvalidCommandError(f"invalid command: {command}")
