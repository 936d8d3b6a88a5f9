"""LoggingProvider — composable logging for external providers.

Wraps any ExternalProvider, logging operations as they pass through.
Records go to the ``garm.provider`` logger, which the process entry point
routes to stderr so stdout stays reserved for the protocol payload.
"""

from __future__ import annotations

import logging
import time

from ..execution.common import ExternalProvider
from ..params import BootstrapInstance, ProviderInstance


class LoggingProvider:
    """Logs provider calls and delegates them to the inner provider.

    Read operations log at debug level, mutating operations at info level.
    Failures are logged with their duration and re-raised unchanged.
    """

    def __init__(
        self, inner: ExternalProvider, logger_name: str = "garm.provider"
    ) -> None:
        self._inner = inner
        self._logger = logging.getLogger(logger_name)

    def _done(self, level: int, op: str, target: str, t0: float) -> None:
        duration_ms = int((time.monotonic() - t0) * 1000)
        self._logger.log(level, "provider: %s %s → ok in %dms", op, target, duration_ms)

    def _failed(self, op: str, target: str, t0: float, exc: Exception) -> None:
        duration_ms = int((time.monotonic() - t0) * 1000)
        self._logger.warning(
            "provider: %s %s → failed in %dms: %s", op, target, duration_ms, exc
        )

    async def create_instance(
        self, bootstrap_params: BootstrapInstance
    ) -> ProviderInstance:
        name = bootstrap_params.name
        self._logger.info("provider: create %s (pool %s)", name, bootstrap_params.pool_id)
        t0 = time.monotonic()
        try:
            instance = await self._inner.create_instance(bootstrap_params)
        except Exception as exc:
            self._failed("create", name, t0, exc)
            raise
        self._done(logging.INFO, "create", name, t0)
        return instance

    async def get_instance(self, instance_id: str) -> ProviderInstance:
        self._logger.debug("provider: get %s", instance_id)
        t0 = time.monotonic()
        try:
            instance = await self._inner.get_instance(instance_id)
        except Exception as exc:
            self._failed("get", instance_id, t0, exc)
            raise
        self._done(logging.DEBUG, "get", instance_id, t0)
        return instance

    async def list_instances(self, pool_id: str) -> list[ProviderInstance]:
        self._logger.debug("provider: list pool %s", pool_id)
        t0 = time.monotonic()
        try:
            instances = await self._inner.list_instances(pool_id)
        except Exception as exc:
            self._failed("list", pool_id, t0, exc)
            raise
        self._done(logging.DEBUG, "list", pool_id, t0)
        return instances

    async def delete_instance(self, instance_id: str) -> None:
        self._logger.info("provider: delete %s", instance_id)
        t0 = time.monotonic()
        try:
            await self._inner.delete_instance(instance_id)
        except Exception as exc:
            self._failed("delete", instance_id, t0, exc)
            raise
        self._done(logging.INFO, "delete", instance_id, t0)

    async def remove_all_instances(self) -> None:
        self._logger.info("provider: remove all instances")
        t0 = time.monotonic()
        try:
            await self._inner.remove_all_instances()
        except Exception as exc:
            self._failed("remove-all", "", t0, exc)
            raise
        self._done(logging.INFO, "remove-all", "", t0)

    async def start(self, instance_id: str) -> None:
        self._logger.info("provider: start %s", instance_id)
        t0 = time.monotonic()
        try:
            await self._inner.start(instance_id)
        except Exception as exc:
            self._failed("start", instance_id, t0, exc)
            raise
        self._done(logging.INFO, "start", instance_id, t0)

    async def stop(self, instance_id: str, force: bool) -> None:
        self._logger.info("provider: stop %s (force=%s)", instance_id, force)
        t0 = time.monotonic()
        try:
            await self._inner.stop(instance_id, force)
        except Exception as exc:
            self._failed("stop", instance_id, t0, exc)
            raise
        self._done(logging.INFO, "stop", instance_id, t0)
