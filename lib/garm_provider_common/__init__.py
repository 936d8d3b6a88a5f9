"""Shared contract between GARM and external provider executables.

This package defines the types used on both sides of the process boundary:
- params: BootstrapInstance, ProviderInstance and their enums
- errors: sentinel errors that map to reserved exit codes
- execution: environment resolution, validation and command dispatch
"""

from .errors import (
    BadRequestError,
    ConflictError,
    DuplicateEntityError,
    GarmError,
    NotFoundError,
    OperationTimeoutError,
    UnauthorizedError,
)
from .params import (
    Address,
    AddressType,
    BootstrapInstance,
    InstanceStatus,
    OSArch,
    OSType,
    ProviderInstance,
    RunnerApplicationDownload,
    UserDataOptions,
)

__all__ = [
    "BadRequestError",
    "ConflictError",
    "DuplicateEntityError",
    "GarmError",
    "NotFoundError",
    "OperationTimeoutError",
    "UnauthorizedError",
    "Address",
    "AddressType",
    "BootstrapInstance",
    "InstanceStatus",
    "OSArch",
    "OSType",
    "ProviderInstance",
    "RunnerApplicationDownload",
    "UserDataOptions",
]
