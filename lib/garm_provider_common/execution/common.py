"""Pieces of the provider protocol shared by every interface version.

- ExternalProvider: the capability interface a backend adapter implements
- get_bootstrap_params_from_stdin: decodes the create payload
- call_provider: runs one provider call with timeout and error wrapping
- resolve_error_to_exit_code: maps an error to the process exit code
"""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Awaitable
from typing import IO, Any, Protocol, TypeVar, runtime_checkable

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from ..errors import (
    DuplicateEntityError,
    NotFoundError,
    OperationTimeoutError,
    is_error,
)
from ..params import BootstrapInstance, ProviderInstance
from .commands import ExecutionCommand
from .errors import BootstrapParamsError, ExecutionError, ProviderOperationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

EXIT_CODE_GENERIC = 1
EXIT_CODE_NOT_FOUND = 30
EXIT_CODE_DUPLICATE = 31

_INSTANCE = TypeAdapter(ProviderInstance)
_INSTANCE_LIST = TypeAdapter(list[ProviderInstance])


@runtime_checkable
class ExternalProvider(Protocol):
    """Operations every provider backend implements.

    Calls run inside an asyncio task; cancelling the task or exceeding the
    dispatcher timeout is how the controller's deadline reaches the backend.
    """

    async def create_instance(
        self, bootstrap_params: BootstrapInstance
    ) -> ProviderInstance:
        """Create a new instance from the controller's bootstrap parameters."""
        ...

    async def get_instance(self, instance_id: str) -> ProviderInstance:
        """Return details of one instance."""
        ...

    async def list_instances(self, pool_id: str) -> list[ProviderInstance]:
        """List all instances belonging to a pool."""
        ...

    async def delete_instance(self, instance_id: str) -> None:
        """Delete an instance. Deleting a missing instance is not an error."""
        ...

    async def remove_all_instances(self) -> None:
        """Remove every instance this provider created for the controller."""
        ...

    async def start(self, instance_id: str) -> None:
        """Boot a stopped instance."""
        ...

    async def stop(self, instance_id: str, force: bool) -> None:
        """Shut an instance down."""
        ...


def resolve_error_to_exit_code(err: BaseException | None) -> int:
    """Translate an error into the exit code the controller understands."""
    if err is None:
        return 0
    if is_error(err, NotFoundError):
        return EXIT_CODE_NOT_FOUND
    if is_error(err, DuplicateEntityError):
        return EXIT_CODE_DUPLICATE
    return EXIT_CODE_GENERIC


def get_bootstrap_params_from_stdin(
    command: str, stdin: IO[Any] | None = None
) -> BootstrapInstance:
    """Read the bootstrap payload from stdin, for the create command only.

    Any other command returns empty params and leaves stdin untouched.
    """
    if command != ExecutionCommand.CREATE_INSTANCE:
        return BootstrapInstance()

    stream = stdin if stdin is not None else sys.stdin
    try:
        data = stream.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise BootstrapParamsError(f"failed to read from stdin: {exc}") from exc
    logger.debug("read %d bytes of bootstrap params from stdin", len(data))

    try:
        return BootstrapInstance.model_validate_json(data)
    except ValidationError as exc:
        raise BootstrapParamsError(f"failed to decode instance params: {exc}") from exc


async def call_provider(
    operation: str,
    failure: str,
    call: Awaitable[T],
    timeout: float | None = None,
) -> T:
    """Await one provider call, wrapping any failure in ProviderOperationError.

    Cancellation is not an operation failure and propagates untouched.
    """
    try:
        async with asyncio.timeout(timeout):
            return await call
    except TimeoutError as exc:
        cause: BaseException = exc
        if not isinstance(exc, OperationTimeoutError):
            detail = f" after {timeout}s" if timeout is not None else ""
            cause = OperationTimeoutError(f"{operation} timed out{detail}")
            cause.__cause__ = exc
        raise ProviderOperationError(operation, f"{failure}: {cause}") from cause
    except Exception as exc:
        raise ProviderOperationError(operation, f"{failure}: {exc}") from exc


def marshal_instance(instance: ProviderInstance) -> str:
    try:
        model = _INSTANCE.validate_python(instance)
        return model.to_json()
    except (ValidationError, PydanticSerializationError) as exc:
        raise ExecutionError(f"failed to marshal response: {exc}") from exc


def marshal_instances(instances: list[ProviderInstance]) -> str:
    try:
        models = _INSTANCE_LIST.validate_python(list(instances))
        return _INSTANCE_LIST.dump_json(
            models, by_alias=True, exclude_none=True
        ).decode()
    except (ValidationError, PydanticSerializationError, TypeError) as exc:
        raise ExecutionError(f"failed to marshal response: {exc}") from exc
