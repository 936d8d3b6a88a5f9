"""Version envelope: one descriptor per supported interface version.

The controller negotiates an interface version out of band and passes it in
``GARM_INTERFACE_VERSION``. Only the descriptor for that version is resolved;
the others stay zero-valued.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import IO, Any

from packaging.version import InvalidVersion, Version

from . import v0_1_0, v0_1_1
from .commands import ENV_INTERFACE_VERSION, SUPPORTED_VERSIONS, VERSION_010, VERSION_011
from .common import ExternalProvider
from .errors import InterfaceVersionError

logger = logging.getLogger(__name__)

V010 = Version(VERSION_010)
V011 = Version(VERSION_011)


@dataclass(frozen=True)
class Environment:
    """Resolved execution environment for a single provider invocation."""

    environment_v010: v0_1_0.EnvironmentV010 = field(
        default_factory=v0_1_0.EnvironmentV010
    )
    environment_v011: v0_1_1.EnvironmentV011 = field(
        default_factory=v0_1_1.EnvironmentV011
    )
    interface_version: Version = V010

    @property
    def active(self) -> v0_1_0.EnvironmentV010 | v0_1_1.EnvironmentV011:
        """The descriptor that is authoritative for this invocation."""
        if self.interface_version == V011:
            return self.environment_v011
        return self.environment_v010


def parse_interface_version(value: str) -> Version:
    """Parse a negotiated version tag such as ``v0.1.1``.

    An empty value means the controller predates version negotiation and
    speaks v0.1.0. Versions this library does not implement are rejected.
    """
    if not value:
        return V010
    try:
        version = Version(value)
    except InvalidVersion as exc:
        raise InterfaceVersionError(
            f"invalid {ENV_INTERFACE_VERSION}: {value!r}"
        ) from exc
    if version not in (V010, V011):
        raise InterfaceVersionError(
            f"unsupported interface version {value}, "
            f"supported: {', '.join(SUPPORTED_VERSIONS)}"
        )
    return version


def get_environment(
    environ: Mapping[str, str] | None = None, stdin: IO[Any] | None = None
) -> Environment:
    """Resolve the descriptor for the negotiated interface version."""
    environ = os.environ if environ is None else environ
    version = parse_interface_version(environ.get(ENV_INTERFACE_VERSION, ""))
    logger.debug("resolving execution environment for interface %s", version)

    if version == V011:
        return Environment(
            environment_v011=v0_1_1.get_environment(environ, stdin),
            interface_version=version,
        )
    return Environment(
        environment_v010=v0_1_0.get_environment(environ, stdin),
        interface_version=version,
    )


async def run(
    provider: ExternalProvider, env: Environment, timeout: float | None = None
) -> str:
    """Dispatch using the descriptor that matches the negotiated version."""
    if env.interface_version == V011:
        return await v0_1_1.run(provider, env.environment_v011, timeout=timeout)
    if env.interface_version == V010:
        return await v0_1_0.run(provider, env.environment_v010, timeout=timeout)
    raise InterfaceVersionError(
        f"unsupported interface version {env.interface_version}"
    )
