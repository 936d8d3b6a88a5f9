"""Execution environment of the external provider protocol.

- environment: version envelope, picks the negotiated descriptor
- v0_1_0 / v0_1_1: per-version descriptors, validation and dispatch
- common: provider interface, stdin decoding, exit codes
- cli: process entry point for provider executables
"""

from .commands import SUPPORTED_VERSIONS, VERSION_010, VERSION_011, ExecutionCommand
from .common import (
    EXIT_CODE_DUPLICATE,
    EXIT_CODE_GENERIC,
    EXIT_CODE_NOT_FOUND,
    ExternalProvider,
    get_bootstrap_params_from_stdin,
    resolve_error_to_exit_code,
)
from .environment import Environment, get_environment, run
from .errors import (
    BootstrapParamsError,
    ConfigFileError,
    EnvironmentValidationError,
    ExecutionError,
    InterfaceVersionError,
    InvalidCommandError,
    ProviderOperationError,
)
from .v0_1_0 import EnvironmentV010
from .v0_1_1 import EnvironmentV011

__all__ = [
    "SUPPORTED_VERSIONS",
    "VERSION_010",
    "VERSION_011",
    "ExecutionCommand",
    "EXIT_CODE_DUPLICATE",
    "EXIT_CODE_GENERIC",
    "EXIT_CODE_NOT_FOUND",
    "ExternalProvider",
    "get_bootstrap_params_from_stdin",
    "resolve_error_to_exit_code",
    "Environment",
    "get_environment",
    "run",
    "BootstrapParamsError",
    "ConfigFileError",
    "EnvironmentValidationError",
    "ExecutionError",
    "InterfaceVersionError",
    "InvalidCommandError",
    "ProviderOperationError",
    "EnvironmentV010",
    "EnvironmentV011",
]
