"""
Scoville dispatcher.

Public entry points read the configuration store, build a payload and hand it
to the network client as an independent unit of work on the coordination loop.
Outcomes only ever reach a log line and, where one is given, a completion
callback. No entry point raises.
"""

import asyncio
import concurrent.futures
import functools
import logging
import threading
from typing import Any, Awaitable, Callable, Coroutine, Optional

from pydantic import ValidationError

from scoville.app_info import AppInfo, current_app_info
from scoville.config import Configuration, ConfigurationStore, ScovilleSettings
from scoville.errors import NotConfiguredError, ScovilleError
from scoville.events import EventLike, as_event_name
from scoville.logger import LogCategory, ScovilleLogger, get_logger
from scoville.network import ScovilleNetwork
from scoville.payloads import DevicePayload, EventPayload
from scoville.result import Result
from scoville.storage import DeviceStorage
from scoville.tasks import AnyFuture, BackgroundLoop, WorkHandle

logger = logging.getLogger(__name__)

Completion = Callable[[Result[None]], None]

TRACK_ENDPOINT = "/v2/analytics/track"
REGISTER_DEVICE_ENDPOINT = "/v2/devices/register"
HEARTBEAT_ENDPOINT = "/v2/heartbeat"


class Scoville:
    """Analytics client: configuration, event tracking, device registration and heartbeat."""

    def __init__(
        self,
        settings: Optional[ScovilleSettings] = None,
        *,
        store: Optional[ConfigurationStore] = None,
        network: Optional[ScovilleNetwork] = None,
        storage: Optional[DeviceStorage] = None,
        app_info_provider: Optional[Callable[[], AppInfo]] = None,
        log: Optional[ScovilleLogger] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        """
        Initialize the client.

        Args:
            settings: Client settings (defaults are read from SCOVILLE_* env vars)
            store: Configuration store owned by this client
            network: HTTP client; built from settings.api when omitted
            storage: Device identifier store; keyring-backed when omitted
            app_info_provider: Callable returning the host AppInfo
            log: Categorized logger
            loop: Coordination loop. When omitted, the loop running at first use
                is bound, or a background loop thread is started.
        """
        self.settings = settings or ScovilleSettings()
        self.log = log or get_logger()
        self.store = store or ConfigurationStore()
        self.network = network or ScovilleNetwork(
            base_url=self.settings.api.url,
            timeout=self.settings.api.timeout,
        )
        self.storage = storage or DeviceStorage(
            service_name=self.settings.storage.service_name,
            key=self.settings.storage.key,
            log=self.log,
        )
        self.app_info_provider = app_info_provider or (lambda: current_app_info(self.settings.app))

        self._loop = loop
        self._loop_lock = threading.Lock()
        self._background: Optional[BackgroundLoop] = None
        self._pending_lock = threading.Lock()
        self._pending: set[AnyFuture] = set()

    # MARK: - Configuration

    @property
    def configuration(self) -> Optional[Configuration]:
        return self.store.get()

    @property
    def is_configured(self) -> bool:
        return self.store.is_configured

    def configure(self, api_key: str) -> None:
        """Capture app identity and device UUID, and store a fresh Configuration."""
        if not api_key:
            self.log.warning(LogCategory.CONFIGURATION, "configure(api_key) called with an empty API key - ignored.")
            return

        info = self.app_info_provider()
        device_uuid = self.storage.ensure_uuid()

        self.store.set(
            Configuration(
                api_key=api_key,
                bundle_id=info.bundle_id,
                version=info.version,
                build=info.build,
                device_uuid=device_uuid,
            )
        )

        self.log.success(
            LogCategory.CONFIGURATION,
            f"Configured for {info.bundle_id} - version {info.version} ({info.build})",
        )

    def configure_api(self, url: str) -> None:
        """Point subsequent requests at a different API base URL."""
        self.network.configure_base_url(url)
        self.log.log(LogCategory.NETWORK, f"Custom API base URL set to {url}")

    def reset(self) -> None:
        """Forget the active configuration. Work already spawned is unaffected."""
        self.store.clear()
        self.log.log(LogCategory.CONFIGURATION, "Configuration cleared")

    # MARK: - Event Tracking

    def track(self, event: EventLike, parameters: Optional[dict[str, Any]] = None) -> None:
        """
        Send an analytics event. Fire-and-forget: no result, no retry.

        Args:
            event: Typed event name or plain string
            parameters: JSON-serializable event parameters
        """
        event_name = as_event_name(event).raw_value

        config = self.store.get()
        if config is None:
            self.log.warning(
                LogCategory.CONFIGURATION,
                f"Scoville not configured yet - call configure(api_key) first. Tried logging: {event_name}",
            )
            return

        try:
            payload = EventPayload.build_for(config, event_name, parameters)
        except ValidationError as e:
            self.log.error(
                LogCategory.ANALYTICS,
                f"Failed to track '{event_name}' - parameters are not JSON-serializable: {e}",
            )
            return

        self._spawn(functools.partial(self._send_event, config.api_key, self.network.base_url, payload))

    async def _send_event(self, api_key: str, base_url: str, payload: EventPayload) -> None:
        event_name = payload.event_name
        self.log.log(LogCategory.ANALYTICS, f"Attempting to track event: {event_name}")

        result = await self.network.post(TRACK_ENDPOINT, api_key, payload.to_body(), base_url=base_url)

        if result.ok:
            self.log.success(LogCategory.ANALYTICS, f"Event '{event_name}' tracked successfully")
        else:
            self.log.error(
                LogCategory.ANALYTICS,
                f"Failed to track '{event_name}'\n"
                f"├─ URL: {self.network.build_url(TRACK_ENDPOINT, base_url)}\n"
                f"├─ Error: {result.error}\n"
                f"└─ Payload: {payload.to_body()}",
            )

    # MARK: - Device Registration

    def register_device(
        self,
        token: Optional[str],
        is_production: bool = True,
        notifications_enabled: bool = False,
        completion: Optional[Completion] = None,
    ) -> None:
        """
        Register this installation with the backend.

        Args:
            token: Push token, or None when push is unavailable
            is_production: Whether the token belongs to the production push environment
            notifications_enabled: Whether the user allowed notifications
            completion: Called exactly once with the outcome, on the coordination loop
        """
        config = self.store.get()
        if config is None:
            self.log.warning(
                LogCategory.CONFIGURATION,
                "Scoville not configured yet - call configure(api_key) first. Device registration failed.",
            )
            self._complete(LogCategory.DEVICE, completion, Result.failure(NotConfiguredError()))
            return

        try:
            payload = DevicePayload.build_for(
                config,
                token=token,
                platform=self.settings.app.platform,
                production=is_production,
                notifications_enabled=notifications_enabled,
            )
        except ValidationError as e:
            self.log.error(LogCategory.DEVICE, f"Device registration failed - invalid arguments: {e}")
            self._complete(
                LogCategory.DEVICE,
                completion,
                Result.failure(ScovilleError(f"Invalid device registration arguments: {e}")),
            )
            return

        handle = self._spawn(
            functools.partial(self._register, config.api_key, self.network.base_url, payload, completion)
        )
        if handle is None:
            self._complete(
                LogCategory.DEVICE,
                completion,
                Result.failure(ScovilleError("Device registration could not be started")),
            )

    async def _register(
        self,
        api_key: str,
        base_url: str,
        payload: DevicePayload,
        completion: Optional[Completion],
    ) -> None:
        result = await self.network.post(REGISTER_DEVICE_ENDPOINT, api_key, payload.to_body(), base_url=base_url)

        if result.ok:
            self.log.success(LogCategory.DEVICE, "Device registered successfully")
        else:
            self.log.error(LogCategory.DEVICE, f"Device registration failed: {result.error}")
        self._complete(LogCategory.DEVICE, completion, result)

    # MARK: - Debug

    def debug_print_status(self) -> None:
        """Log a snapshot of the active configuration. No network call."""
        config = self.store.get()
        if config is None:
            self.log.warning(
                LogCategory.CONFIGURATION,
                "Not configured - call Scoville.configure(api_key) first.",
            )
            return

        self.log.log(
            LogCategory.LIFECYCLE,
            "Status Report\n"
            f"├─ App: {config.bundle_id}\n"
            f"├─ Version: {config.version} ({config.build})\n"
            f"├─ UUID: {config.device_uuid}\n"
            f"└─ API Base URL: {self.network.get_current_base_url()}",
        )

    # MARK: - Diagnostics

    def test_heartbeat(self, completion: Completion) -> WorkHandle:
        """
        Check API key and connectivity against GET /v2/heartbeat.

        Returns:
            Handle of the in-flight request; a finished no-op handle when unconfigured
        """
        config = self.store.get()
        if config is None:
            self.log.warning(LogCategory.CONFIGURATION, "Cannot send heartbeat - not configured.")
            self._complete(
                LogCategory.NETWORK,
                completion,
                Result.failure(NotConfiguredError("ScovilleKit not configured")),
            )
            return WorkHandle.noop()

        handle = self._spawn(functools.partial(self._heartbeat, config.api_key, self.network.base_url, completion))
        if handle is None:
            self._complete(
                LogCategory.NETWORK,
                completion,
                Result.failure(ScovilleError("Heartbeat could not be started")),
            )
            return WorkHandle.noop()
        return handle

    async def _heartbeat(self, api_key: str, base_url: str, completion: Completion) -> None:
        self.log.log(LogCategory.NETWORK, f"Sending heartbeat to {HEARTBEAT_ENDPOINT} …")

        result = await self.network.get(HEARTBEAT_ENDPOINT, api_key, base_url=base_url)

        if result.ok:
            self.log.success(LogCategory.NETWORK, "Heartbeat successful - configuration and network OK")
            body = result.value or b""
            self.log.log(LogCategory.NETWORK, f"Response: {body.decode('utf-8', errors='replace')}")
            self._complete(LogCategory.NETWORK, completion, Result.success())
        else:
            self.log.error(LogCategory.NETWORK, f"Heartbeat failed: {result.error}")
            self._complete(LogCategory.NETWORK, completion, Result.failure(result.error))

    # MARK: - Units of work

    def _complete(
        self,
        category: LogCategory,
        completion: Optional[Completion],
        result: Result[None],
    ) -> None:
        if completion is None:
            return
        try:
            completion(result)
        except Exception as e:
            self.log.error(category, f"Completion handler raised {type(e).__name__}: {e}")

    def _coordination_loop(self) -> asyncio.AbstractEventLoop:
        with self._loop_lock:
            if self._loop is not None and not self._loop.is_closed():
                return self._loop

            try:
                self._loop = asyncio.get_running_loop()
            except RuntimeError:
                self._background = BackgroundLoop()
                self._background.start()
                self._loop = self._background.loop
            return self._loop

    @staticmethod
    def _on_loop(loop: asyncio.AbstractEventLoop) -> bool:
        try:
            return asyncio.get_running_loop() is loop
        except RuntimeError:
            return False

    def _track(self, future: AnyFuture) -> None:
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._untrack)

    def _untrack(self, future: AnyFuture) -> None:
        with self._pending_lock:
            self._pending.discard(future)

    def _spawn(self, work: Callable[[], Awaitable[None]]) -> Optional[WorkHandle]:
        """Start work() as an independent unit of work on the coordination loop."""
        handle = WorkHandle()
        unit = self._run_unit(handle, work)
        try:
            loop = self._coordination_loop()
            if self._on_loop(loop):
                future: AnyFuture = loop.create_task(unit)
            else:
                future = asyncio.run_coroutine_threadsafe(unit, loop)
        except RuntimeError as e:
            unit.close()
            self.log.error(LogCategory.LIFECYCLE, f"Cannot start background work: {e}")
            return None

        handle.bind(future)
        self._track(future)
        return handle

    @staticmethod
    async def _run_unit(handle: WorkHandle, work: Callable[[], Awaitable[None]]) -> None:
        # Cancelled before start: the body never runs
        if handle.start():
            await work()

    @property
    def pending_count(self) -> int:
        with self._pending_lock:
            return len(self._pending)

    async def _wait_pending(self, timeout: Optional[float]) -> None:
        with self._pending_lock:
            pending = list(self._pending)
        if pending:
            await asyncio.wait(
                [f if isinstance(f, asyncio.Future) else asyncio.wrap_future(f) for f in pending],
                timeout=timeout,
            )

    async def _on_coordination_loop(self, coro: Coroutine[Any, Any, None]) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            coro.close()
            return
        if self._on_loop(loop):
            await coro
        else:
            await asyncio.wrap_future(asyncio.run_coroutine_threadsafe(coro, loop))

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for in-flight units of work. Nothing is retried or reordered."""
        await self._on_coordination_loop(self._wait_pending(timeout))

    async def _shutdown(self) -> None:
        await self._wait_pending(None)
        await self.network.aclose()

    async def aclose(self) -> None:
        """Wait for in-flight work, close the HTTP client and stop an owned background loop."""
        if self._loop is None:
            await self.network.aclose()
        else:
            await self._on_coordination_loop(self._shutdown())
        self._stop_background()

    def close(self, timeout: float = 5.0) -> None:
        """
        Synchronous shutdown for hosts without their own event loop.

        Hosts that run the coordination loop themselves should await aclose().
        """
        if self._background is None:
            logger.debug("close() without an owned background loop - use aclose()")
            return
        future = asyncio.run_coroutine_threadsafe(self._shutdown(), self._background.loop)
        try:
            future.result(timeout)
        except concurrent.futures.TimeoutError:
            self.log.warning(
                LogCategory.LIFECYCLE,
                f"Shutdown timed out after {timeout}s - {self.pending_count} request(s) abandoned",
            )
        self._stop_background()

    def _stop_background(self) -> None:
        with self._loop_lock:
            if self._background is not None:
                self._background.stop()
                self._background = None
                self._loop = None
