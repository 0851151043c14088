"""Gateway lifecycle supervisor.

The gateway is either STOPPED or RUNNING. Every transition goes through
one :class:`GatewayLifecycle` guarded by a single asyncio lock, so at
most one start/stop is in flight and observers never see a half-bound
listener.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from kernex_core.errors import IOFailureError, LifecycleError
from kernex_core.settings.store import (
    GATEWAY_ENABLED,
    GATEWAY_EXTERNAL_ADDRESS,
    SettingsStore,
)

logger = logging.getLogger(__name__)


class GatewayState(str, Enum):
    """Lifecycle states."""

    STOPPED = "stopped"
    RUNNING = "running"


@dataclass(frozen=True)
class GatewayStatus:
    """Snapshot of the gateway state."""

    running: bool
    state: GatewayState
    port: int
    passive_ports: tuple[int, int] | None
    external_address: str | None = None
    last_error: str | None = None


class Listener(Protocol):
    """A bindable transport listener."""

    passive_ports: Sequence[int] | None

    @property
    def address(self) -> tuple[str, int] | None: ...

    def start(self) -> None: ...

    def close(self) -> None: ...


ListenerFactory = Callable[[str | None], Listener]


class GatewayLifecycle:
    """Owns the gateway listener and its state machine.

    Args:
        settings_store: Source of ``gateway_enabled`` and
            ``gateway_external_address``.
        listener_factory: Builds an unbound listener for an external
            address (or None).
        port: Configured control port.
        passive_ports: Configured passive port range, reported while
            stopped. A running listener reports its own range, None when
            the OS picks passive ports.
    """

    def __init__(
        self,
        settings_store: SettingsStore,
        listener_factory: ListenerFactory,
        port: int = 2121,
        passive_ports: Sequence[int] | None = range(30000, 30101),
    ) -> None:
        self._settings = settings_store
        self._listener_factory = listener_factory
        self._port = port
        self._passive_ports = passive_ports
        self._lock = asyncio.Lock()
        self._state = GatewayState.STOPPED
        self._listener: Listener | None = None
        self._external_address: str | None = None
        self._last_error: str | None = None

    @property
    def state(self) -> GatewayState:
        return self._state

    def status(self) -> GatewayStatus:
        """Return a snapshot of the current state."""
        port = self._port
        passive_ports: Sequence[int] | None = self._passive_ports
        if self._listener is not None:
            if self._listener.address is not None:
                port = self._listener.address[1]
            passive_ports = self._listener.passive_ports
        return GatewayStatus(
            running=self._state is GatewayState.RUNNING,
            state=self._state,
            port=port,
            passive_ports=(min(passive_ports), max(passive_ports)) if passive_ports else None,
            external_address=self._external_address,
            last_error=self._last_error,
        )

    async def reconcile(self, force_restart: bool = False) -> GatewayStatus:
        """Bring the running state in line with the persisted enabled flag.

        Start failures are logged and recorded in ``last_error``; they
        leave the gateway STOPPED and are not raised.

        Args:
            force_restart: Restart the listener if it is already running.

        Returns:
            The resulting status.
        """
        async with self._lock:
            try:
                enabled = bool(await self._settings.get_setting(GATEWAY_ENABLED, False))
            except IOFailureError as e:
                logger.error(f"Gateway reconcile skipped, settings unavailable: {e}")
                self._last_error = "Settings unavailable"
                return self.status()

            running = self._state is GatewayState.RUNNING
            if not enabled:
                if running:
                    await self._stop_locked()
                return self.status()

            if running and not force_restart:
                return self.status()
            if running:
                await self._stop_locked()

            try:
                await self._start_locked()
            except LifecycleError:
                pass  # recorded in last_error by _start_locked
            return self.status()

    async def start(self) -> GatewayStatus:
        """Bind the listener.

        Raises:
            LifecycleError: If already running or the port cannot be bound.
        """
        async with self._lock:
            if self._state is GatewayState.RUNNING:
                raise LifecycleError("Gateway already running")
            await self._start_locked()
            return self.status()

    async def stop(self) -> GatewayStatus:
        """Close the listener and drop every session. No-op when stopped."""
        async with self._lock:
            await self._stop_locked()
            return self.status()

    async def restart(self) -> GatewayStatus:
        """Stop (if running) and start again under one lock acquisition.

        Raises:
            LifecycleError: If the listener cannot be bound.
        """
        async with self._lock:
            await self._stop_locked()
            await self._start_locked()
            return self.status()

    async def _start_locked(self) -> None:
        try:
            external_address = await self._settings.get_setting(GATEWAY_EXTERNAL_ADDRESS)
        except IOFailureError as e:
            self._last_error = "Settings unavailable"
            logger.error(f"Gateway start failed: {e}")
            raise LifecycleError(self._last_error) from e

        listener = self._listener_factory(external_address or None)
        try:
            await asyncio.to_thread(listener.start)
        except (LifecycleError, OSError) as e:
            self._last_error = str(e)
            logger.error(f"Gateway start failed: {e}")
            if isinstance(e, LifecycleError):
                raise
            raise LifecycleError(str(e)) from e

        self._listener = listener
        self._external_address = external_address or None
        self._state = GatewayState.RUNNING
        self._last_error = None
        logger.info(f"Gateway started on port {self.status().port}")

    async def _stop_locked(self) -> None:
        if self._state is GatewayState.STOPPED:
            return
        listener = self._listener
        try:
            if listener is not None:
                await asyncio.to_thread(listener.close)
        except (LifecycleError, OSError) as e:
            logger.error(f"Error while stopping gateway: {e}")
        finally:
            self._listener = None
            self._external_address = None
            self._state = GatewayState.STOPPED
        logger.info("Gateway stopped")
