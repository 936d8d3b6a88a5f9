"""Command vocabulary and environment variable names of the provider protocol.

The same commands are used by every interface version. Descriptors keep the
raw ``GARM_COMMAND`` string; unknown values are only rejected when the
descriptor is validated.
"""

from __future__ import annotations

from enum import Enum


class ExecutionCommand(str, Enum):
    """Operations the controller can ask a provider to perform."""

    CREATE_INSTANCE = "CreateInstance"
    DELETE_INSTANCE = "DeleteInstance"
    GET_INSTANCE = "GetInstance"
    LIST_INSTANCES = "ListInstances"
    START_INSTANCE = "StartInstance"
    STOP_INSTANCE = "StopInstance"
    REMOVE_ALL_INSTANCES = "RemoveAllInstances"
    GET_VERSION = "GetVersion"


# Commands that target a single, already existing instance
INSTANCE_COMMANDS: tuple[str, ...] = (
    ExecutionCommand.DELETE_INSTANCE.value,
    ExecutionCommand.GET_INSTANCE.value,
    ExecutionCommand.START_INSTANCE.value,
    ExecutionCommand.STOP_INSTANCE.value,
)

ENV_COMMAND = "GARM_COMMAND"
ENV_CONTROLLER_ID = "GARM_CONTROLLER_ID"
ENV_POOL_ID = "GARM_POOL_ID"
ENV_PROVIDER_CONFIG_FILE = "GARM_PROVIDER_CONFIG_FILE"
ENV_INSTANCE_ID = "GARM_INSTANCE_ID"
ENV_INTERFACE_VERSION = "GARM_INTERFACE_VERSION"
ENV_POOL_EXTRASPECS = "GARM_POOL_EXTRASPECS"
ENV_LOG_LEVEL = "GARM_PROVIDER_LOG_LEVEL"

VERSION_010 = "v0.1.0"
VERSION_011 = "v0.1.1"

# Oldest first
SUPPORTED_VERSIONS: tuple[str, ...] = (VERSION_010, VERSION_011)
