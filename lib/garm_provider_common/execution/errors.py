"""Errors raised while resolving, validating and dispatching a command.

Every layer wraps the underlying cause with ``raise ... from`` so the
sentinel provider errors in :mod:`garm_provider_common.errors` can still be
found by the exit-code translator.
"""

from __future__ import annotations


class ExecutionError(Exception):
    """Base class for provider execution failures."""


class EnvironmentValidationError(ExecutionError):
    """A field required by the resolved command is missing or invalid."""


class ConfigFileError(EnvironmentValidationError):
    """The provider config file cannot be accessed."""


class BootstrapParamsError(ExecutionError):
    """The bootstrap parameters on standard input could not be decoded."""


class InterfaceVersionError(ExecutionError):
    """The negotiated interface version is malformed or unsupported."""


class InvalidCommandError(ExecutionError):
    """A command reached the dispatcher that it does not know how to run."""


class ProviderOperationError(ExecutionError):
    """A provider call failed. ``operation`` names the command that failed."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(message)
        self.operation = operation
