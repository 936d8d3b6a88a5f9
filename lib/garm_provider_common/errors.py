"""Sentinel errors shared between GARM and external providers.

Providers raise these (or wrap them with ``raise ... from``) to tell the
controller what kind of failure happened. Classification never looks at
messages: :func:`find_in_chain` walks the ``__cause__`` chain and matches
on type, so any number of wrapping layers is fine.
"""

from __future__ import annotations


class GarmError(Exception):
    """Base class for all provider-facing sentinel errors."""

    default_message = "garm error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class NotFoundError(GarmError):
    default_message = "not found"


class DuplicateEntityError(GarmError):
    default_message = "duplicate entity"


class BadRequestError(GarmError):
    default_message = "invalid request"


class UnauthorizedError(GarmError):
    default_message = "not authorized"


class ConflictError(GarmError):
    default_message = "conflict"


class OperationTimeoutError(GarmError, TimeoutError):
    default_message = "operation timed out"


def iter_chain(err: BaseException | None):
    """Yield ``err`` and every exception it was raised from, outermost first.

    Only ``__cause__`` (explicit ``raise ... from``) is followed; an error
    raised while handling another is not wrapping it. Cycles are cut.
    """
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        yield err
        err = err.__cause__


def find_in_chain(
    err: BaseException | None, kind: type[BaseException]
) -> BaseException | None:
    """Return the first exception in ``err``'s chain that is a ``kind``."""
    for item in iter_chain(err):
        if isinstance(item, kind):
            return item
    return None


def is_error(err: BaseException | None, kind: type[BaseException]) -> bool:
    """Check whether ``err`` is, or was raised from, a ``kind``."""
    return find_in_chain(err, kind) is not None
