"""Tuya OpenAPI client and device hub."""
import asyncio
import json
import logging
import random
import ssl
import time
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Tuple

import aiohttp
import certifi
from aiohttp import ClientSession

from .catalog import CapabilityCatalog, parse_specification, serialize_domains
from .commands import Command, CommandTranslator, LevelChangeRepeater
from .const import (
    COMMAND_FAILURE_RECONNECT_DELAY,
    OFFLINE_INDICATOR,
    PAGE_DELAY,
    REQUEST_TIMEOUT,
)
from .errors import AuthError, TransportError
from .helpers import Scheduler
from .iot_client import TuyaIoTClient
from .models import (
    DeviceStatusBatch,
    HubState,
    LifecycleEvent,
    NormalizedEvent,
    RealtimeEnvelope,
    StatusEvent,
    TuyaDevice,
)
from .session import TuyaSession, retry_delay
from .signing import build_headers, encode_body
from .status import StatusTranslator

_LOGGER = logging.getLogger(__name__)

_API_LOGIN = "/v1.0/iot-01/associated-users/actions/authorized-login"
_API_DEVICES = "/v1.0/iot-01/associated-users/devices"
_API_SPECIFICATIONS = "/v1.0/devices/{}/specifications"
_API_STATUS = "/v1.0/devices/{}/status"
_API_COMMANDS = "/v1.0/devices/{}/commands"
_API_HUB_CONFIG = "/v1.0/iot-03/open-hub/access-config"

DeviceListener = Callable[[TuyaDevice, List[NormalizedEvent]], None]
StateListener = Callable[[HubState, str], None]


class TuyaClient:
    def __init__(
        self,
        session: TuyaSession,
        scheduler: Optional[Scheduler] = None,
        *,
        catalog: Optional[CapabilityCatalog] = None,
        rng: Optional[random.Random] = None,
    ):
        self._auth = session
        self._scheduler = scheduler or Scheduler()
        self._rng = rng
        self._catalog = catalog or CapabilityCatalog()
        self._commands = CommandTranslator(self._catalog)
        self._status = StatusTranslator(self._catalog)
        self._level_changes = LevelChangeRepeater(self._scheduler, self._step_level)
        self._devices: Dict[str, TuyaDevice] = {}
        self._session: aiohttp.ClientSession | None = None
        self._ssl_context: ssl.SSLContext | None = None
        self._iot: TuyaIoTClient | None = None
        self._state = HubState.DISCONNECTED
        self._state_description = ""
        self.device_count = 0
        self._listeners: List[DeviceListener] = []
        self._state_listeners: List[StateListener] = []
        self._auth_handle = None
        # Pending vibration clear per device
        self._deferred: Dict[str, Any] = {}

    @classmethod
    async def create(cls, session: TuyaSession, hass=None, scheduler: Optional[Scheduler] = None):
        """Async-safe constructor."""
        if scheduler is None:
            scheduler = Scheduler(hass.loop, hass) if hass is not None else Scheduler()
        self = cls(session, scheduler)

        if hass is not None:
            def _make_ssl():
                return ssl.create_default_context(cafile=certifi.where())
            self._ssl_context = await hass.async_add_executor_job(_make_ssl)
        else:
            self._ssl_context = ssl.create_default_context(cafile=certifi.where())

        await self._init_session()
        return self

    async def _init_session(self):
        """Initialize aiohttp session with SSL context."""
        if self._session and not self._session.closed:
            await self._session.close()

        connector = aiohttp.TCPConnector(ssl=self._ssl_context)
        self._session = ClientSession(connector=connector)

    async def close(self):
        if self._auth_handle is not None:
            self._auth_handle.cancel()
            self._auth_handle = None
        for handle in self._deferred.values():
            handle.cancel()
        self._deferred.clear()
        self._level_changes.cancel_all()
        if self._iot is not None:
            await self._iot.stop()
            self._iot = None
        if self._session and not self._session.closed:
            await self._session.close()

    @property
    def session(self) -> TuyaSession:
        return self._auth

    @property
    def catalog(self) -> CapabilityCatalog:
        return self._catalog

    @property
    def devices(self) -> Dict[str, TuyaDevice]:
        return self._devices

    @property
    def state(self) -> HubState:
        return self._state

    @property
    def state_description(self) -> str:
        return self._state_description

    @property
    def iot(self) -> Optional[TuyaIoTClient]:
        return self._iot

    def add_listener(self, listener: DeviceListener) -> Callable[[], None]:
        """Register for normalized device events; returns an unsubscribe callable."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def add_state_listener(self, listener: StateListener) -> Callable[[], None]:
        self._state_listeners.append(listener)
        return lambda: self._state_listeners.remove(listener)

    def set_state(self, state: HubState, description: str = "") -> None:
        self._state = state
        self._state_description = description
        _LOGGER.debug("Hub state %s: %s", state.value, description)
        self._publish_state()

    def _publish_state(self) -> None:
        for listener in list(self._state_listeners):
            listener(self._state, self._state_description)

    def _notify(self, device: TuyaDevice, events: List[NormalizedEvent]) -> None:
        if not events:
            return
        for listener in list(self._listeners):
            listener(device, events)

    # ------------------------------------------------------------------
    # Request pipeline

    async def _request(
        self,
        method: str,
        path: str,
        query: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
        sensitive: bool = False,
    ) -> Dict[str, Any]:
        """Send one signed request and return the decoded JSON body.

        Raises TransportError on client errors, timeouts, non-200 status or
        an unsuccessful API response; the hub state moves to error first.
        """
        if self._session is None or self._session.closed:
            await self._init_session()
        auth = self._auth
        headers = build_headers(
            method,
            path,
            query,
            body,
            client_id=auth.access_id,
            client_secret=auth.access_key,
            access_token=auth.access_token,
            timestamp=int(time.time() * 1000),
            nonce=auth.link_id,
            lang=auth.lang,
        )
        data = encode_body(body) if body is not None else None
        url = auth.endpoint.rstrip("/") + path
        _LOGGER.debug("API %s %s query=%s body=%s", method.upper(), path, query, "***" if sensitive else data)
        try:
            async with self._session.request(
                method.upper(),
                url,
                params=query,
                data=data,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT),
            ) as resp:
                status = resp.status
                text = await resp.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as ex:
            message = str(ex) or type(ex).__name__
            _LOGGER.error("Cloud request error %s", message)
            self.set_state(HubState.ERROR, message)
            raise TransportError(message) from ex

        if status != 200:
            _LOGGER.error("Cloud request returned HTTP status %s", status)
            self.set_state(HubState.ERROR, f"Cloud HTTP response {status}")
            raise TransportError(f"Cloud HTTP response {status}", status)

        try:
            payload = json.loads(text)
        except ValueError:
            payload = None
        if not isinstance(payload, dict) or payload.get("success") is not True:
            _LOGGER.error("Cloud API request failed: %s", text)
            self.set_state(HubState.ERROR, text)
            code = payload.get("code") if isinstance(payload, dict) else None
            msg = payload.get("msg") if isinstance(payload, dict) else None
            raise TransportError(msg or "Cloud API request failed", code)

        _LOGGER.debug("API response %s", "***" if sensitive else payload)
        return payload

    async def _get(self, path: str, query: Optional[Dict[str, Any]] = None) -> Any:
        payload = await self._request("get", path, query=query)
        return payload.get("result")

    async def _post(self, path: str, body: Dict[str, Any], sensitive: bool = False) -> Any:
        payload = await self._request("post", path, body=body, sensitive=sensitive)
        return payload.get("result")

    # ------------------------------------------------------------------
    # Authentication

    async def authenticate(self) -> bool:
        """Log in and arm the next authentication; never raises."""
        if self._auth_handle is not None:
            self._auth_handle.cancel()
            self._auth_handle = None
        auth = self._auth
        try:
            body = auth.login_body()
        except AuthError as ex:
            self.set_state(HubState.NOT_CONFIGURED, "Driver not configured")
            _LOGGER.error("Must be configured before authentication is possible: %s", ex)
            return False

        _LOGGER.info("Starting Tuya cloud authentication for %s", auth.username)
        auth.clear_token()
        self.set_state(HubState.AUTHENTICATING, "Authenticating to Tuya")
        try:
            result = await self._login(body)
        except AuthError as ex:
            delay = retry_delay(self._rng)
            _LOGGER.error("Tuya authentication failed: %s; retrying in %ss", ex, delay)
            auth.clear_token()
            self.set_state(HubState.ERROR, "Error authenticating to Tuya (check credentials and country)")
            self._auth_handle = self._scheduler.run_after(delay, self.authenticate)
            return False

        delay = auth.store_token(result)
        _LOGGER.info("Received Tuya access token (valid for %ss)", result.get("expire_time"))
        self.set_state(HubState.AUTHENTICATED, "Authenticated to Tuya")
        self._auth_handle = self._scheduler.run_after(delay, self.authenticate)

        if self._iot is None:
            self._iot = TuyaIoTClient(self, self._scheduler, ssl_context=self._ssl_context, rng=self._rng)
        await self._iot.connect()
        return True

    async def _login(self, body: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return await self._post(_API_LOGIN, body, sensitive=True) or {}
        except TransportError as ex:
            raise AuthError(f"login rejected: {ex}") from ex

    async def get_hub_config(self) -> Optional[Dict[str, Any]]:
        _LOGGER.info("Requesting Tuya MQTT configuration")
        body = {
            "uid": self._auth.uid,
            "link_id": self._auth.link_id,
            "link_type": "mqtt",
            "topics": "device",
            "msg_encrypted_version": "1.0",
        }
        try:
            return await self._post(_API_HUB_CONFIG, body, sensitive=True)
        except TransportError as ex:
            _LOGGER.error("Could not get Tuya MQTT configuration: %s", ex)
            return None

    # ------------------------------------------------------------------
    # Devices

    async def _iter_device_pages(self) -> AsyncIterator[List[Dict[str, Any]]]:
        """Yield raw device pages, following last_row_key until has_more is false."""
        last_row_key = ""
        while True:
            _LOGGER.info("Requesting cloud devices batch")
            result = await self._get(_API_DEVICES, {"last_row_key": last_row_key}) or {}
            devices = result.get("devices") or []
            _LOGGER.info("Received %s cloud devices (has_more: %s)", len(devices), result.get("has_more"))
            yield devices
            if not result.get("has_more"):
                return
            last_row_key = result.get("last_row_key") or ""
            await asyncio.sleep(PAGE_DELAY)

    async def get_devices(self) -> Tuple[List[TuyaDevice], Optional[str]]:
        """Full refresh: list every device and load its specification and status."""
        if len(self._catalog):
            _LOGGER.info("Clearing capability cache")
            self._catalog.invalidate()

        raw_devices: List[Dict[str, Any]] = []
        try:
            async for page in self._iter_device_pages():
                raw_devices.extend(page)
        except TransportError as ex:
            return list(self._devices.values()), str(ex)

        self.device_count = len(raw_devices)
        self._publish_state()
        loaded: Dict[str, TuyaDevice] = {}
        for raw in raw_devices:
            device = await self._load_device(raw)
            if device is not None:
                loaded[device.id] = device

        # Devices that vanished or failed to load are dropped with their timers
        for device_id in set(self._devices) - set(loaded):
            handle = self._deferred.pop(device_id, None)
            if handle is not None:
                handle.cancel()
            self._level_changes.stop(device_id)
        self._devices = loaded
        return list(loaded.values()), None

    async def refresh(self) -> None:
        _LOGGER.info("Refreshing devices")
        _, err = await self.get_devices()
        if err:
            _LOGGER.warning("Could not refresh Tuya devices: %s", err)

    async def get_device_specification(self, device_id: str) -> Dict[str, Any]:
        _LOGGER.info("Requesting cloud device specifications for %s", device_id)
        return await self._get(_API_SPECIFICATIONS.format(device_id)) or {}

    async def _load_device(self, raw: Dict[str, Any]) -> Optional[TuyaDevice]:
        device_id = raw.get("id")
        if not device_id:
            return None
        try:
            spec = await self.get_device_specification(device_id)
        except TransportError as ex:
            _LOGGER.warning("Could not load specification for %s: %s", device_id, ex)
            return None

        category, functions, status_set = parse_specification(spec)
        device = TuyaDevice(
            id=device_id,
            name=raw.get("name") or device_id,
            category=category or raw.get("category") or "",
            product_id=raw.get("product_id") or "",
            product_name=raw.get("product_name") or "",
            online=bool(raw.get("online")),
            functions_json=serialize_domains(functions),
            status_json=serialize_domains(status_set),
        )
        statuses = [StatusEvent.from_dict(s) for s in raw.get("status") or [] if isinstance(s, dict)]
        self._apply_status(device, DeviceStatusBatch(device_id, statuses, device.product_id))

        if self._state is not HubState.READY:
            self.set_state(HubState.READY, "Received device data from Tuya")
        return device

    async def get_device_state(self, device_id: str) -> Tuple[bool, Optional[str]]:
        _LOGGER.debug("Requesting device %s state", device_id)
        try:
            result = await self._get(_API_STATUS.format(device_id))
        except TransportError as ex:
            return False, str(ex)
        statuses = [StatusEvent.from_dict(s) for s in result or [] if isinstance(s, dict)]
        self.update_device_status(DeviceStatusBatch(device_id, statuses))
        return True, None

    async def refresh_device(self, device_id: str) -> Tuple[bool, Optional[str]]:
        device = self._devices.get(device_id)
        if device is None:
            return False, f"Unknown device {device_id}"
        _LOGGER.info("Refreshing %s (%s)", device.name, device_id)
        return await self.get_device_state(device_id)

    def update_device_status(self, batch: DeviceStatusBatch) -> List[NormalizedEvent]:
        device = self._devices.get(batch.device_id)
        if device is None:
            _LOGGER.error("Unable to find device for %s", batch.device_id)
            return []
        return self._apply_status(device, batch)

    def _apply_status(self, device: TuyaDevice, batch: DeviceStatusBatch) -> List[NormalizedEvent]:
        result = self._status.translate(device, batch.statuses, batch.product_key or device.product_id)
        for event in result.events:
            device.state[event.name] = event.value
        for delay, statuses in result.deferred:
            previous = self._deferred.pop(device.id, None)
            if previous is not None:
                previous.cancel()
            replay = DeviceStatusBatch(device.id, statuses, batch.product_key)
            self._deferred[device.id] = self._scheduler.run_after(delay, self._replay_status, replay)
        self._notify(device, result.events)
        return result.events

    def _replay_status(self, batch: DeviceStatusBatch) -> None:
        self._deferred.pop(batch.device_id, None)
        self.update_device_status(batch)

    # ------------------------------------------------------------------
    # Realtime

    def handle_envelope(self, envelope: RealtimeEnvelope) -> None:
        if isinstance(envelope, DeviceStatusBatch):
            self.update_device_status(envelope)
        elif isinstance(envelope, LifecycleEvent):
            self.handle_biz_event(envelope)

    def handle_biz_event(self, event: LifecycleEvent) -> List[NormalizedEvent]:
        _LOGGER.debug("%s %s", event.biz_code, event.biz_data)
        if event.biz_code == "bindUser":
            self._scheduler.run_after(0, self.refresh)
            return []

        device = self._devices.get(event.device_id) if event.device_id else None
        if event.biz_code not in ("nameUpdate", "online", "offline"):
            _LOGGER.warning("Unsupported business code %s", event.biz_code)
            return []
        if device is None:
            _LOGGER.warning("%s for unknown device %s", event.biz_code, event.device_id)
            return []

        events: List[NormalizedEvent] = []
        if event.biz_code == "nameUpdate":
            device.name = event.biz_data.get("name") or device.name
        elif event.biz_code == "online":
            device.online = True
            if device.name.endswith(OFFLINE_INDICATOR):
                device.name = device.name[: -len(OFFLINE_INDICATOR)]
            events.append(NormalizedEvent("online", True, description="device is online"))
        else:
            device.online = False
            if not device.name.endswith(OFFLINE_INDICATOR):
                device.name += OFFLINE_INDICATOR
            events.append(NormalizedEvent("online", False, description="device is offline"))
        events.insert(0, NormalizedEvent("label", device.name, description=f"label is {device.name}"))
        self._notify(device, events)
        return events

    # ------------------------------------------------------------------
    # Commands

    async def send_commands(self, device_id: str, commands: List[Command]) -> Tuple[bool, Optional[str]]:
        if not commands:
            return True, None
        _LOGGER.debug("Device %s command %s", device_id, commands)
        if not self._auth.has_token:
            _LOGGER.error("Cannot send commands: access token is not set")
            self.set_state(HubState.ERROR, "Access token not set (failed login?)")
            return False, "Access token not set"
        try:
            await self._post(_API_COMMANDS.format(device_id), {"commands": commands})
        except TransportError as ex:
            self.set_state(HubState.ERROR, "Error sending device command")
            if self._iot is not None:
                self._iot.reconnect_after(COMMAND_FAILURE_RECONNECT_DELAY)
            return False, str(ex)
        return True, None

    async def _run(self, device_id: str, build: Callable[[TuyaDevice], List[Command]], action: str):
        device = self._devices.get(device_id)
        if device is None:
            _LOGGER.warning("Unknown device %s", device_id)
            return False, f"Unknown device {device_id}"
        try:
            commands = build(device)
        except (ValueError, TypeError, KeyError) as ex:
            _LOGGER.warning("%s: cannot build command for %s: %s", device.name, action, ex)
            return False, str(ex)
        if not commands:
            _LOGGER.debug("%s does not support %s", device.name, action)
            return True, None
        _LOGGER.info("%s %s", action, device.name)
        return await self.send_commands(device.id, commands)

    async def turn_on(self, device_id: str):
        return await self._run(device_id, self._commands.turn_on, "Turning on")

    async def turn_off(self, device_id: str):
        return await self._run(device_id, self._commands.turn_off, "Turning off")

    async def open_device(self, device_id: str):
        return await self._run(device_id, self._commands.open, "Opening")

    async def close_device(self, device_id: str):
        return await self._run(device_id, self._commands.close, "Closing")

    async def stop_position_change(self, device_id: str):
        return await self._run(device_id, self._commands.stop_position_change, "Stopping")

    async def start_position_change(self, device_id: str, direction: str):
        return await self._run(
            device_id, lambda d: self._commands.start_position_change(d, direction), f"Moving {direction}"
        )

    async def set_position(self, device_id: str, position: float):
        return await self._run(
            device_id, lambda d: self._commands.set_position(d, position), f"Setting position to {position} on"
        )

    async def set_heating_setpoint(self, device_id: str, temperature: float):
        return await self._run(
            device_id,
            lambda d: self._commands.set_heating_setpoint(d, temperature),
            f"Setting heating set point to {temperature} on",
        )

    async def set_color(self, device_id: str, hue: float, saturation: float, level: float):
        return await self._run(
            device_id,
            lambda d: self._commands.set_color(d, hue, saturation, level),
            f"Setting color h:{hue} s:{saturation} l:{level} on",
        )

    async def set_hue(self, device_id: str, hue: float):
        return await self._run(device_id, lambda d: self._commands.set_hue(d, hue), f"Setting hue to {hue} on")

    async def set_saturation(self, device_id: str, saturation: float):
        return await self._run(
            device_id, lambda d: self._commands.set_saturation(d, saturation), f"Setting saturation to {saturation} on"
        )

    async def set_color_temperature(self, device_id: str, kelvin: float, level: Optional[float] = None):
        ok, err = await self._run(
            device_id,
            lambda d: self._commands.set_color_temperature(d, kelvin),
            f"Setting color temperature to {kelvin}K on",
        )
        device = self._devices.get(device_id)
        if ok and level is not None and device is not None and device.state.get("level") != level:
            return await self.set_level(device_id, level)
        return ok, err

    async def set_level(self, device_id: str, level: float):
        return await self._run(device_id, lambda d: self._commands.set_level(d, level), f"Setting level to {level}% on")

    async def _step_level(self, device: TuyaDevice, level: int) -> None:
        await self.set_level(device.id, level)

    async def set_speed(self, device_id: str, speed: str):
        return await self._run(device_id, lambda d: self._commands.set_speed(d, speed), f"Setting speed to {speed} on")

    async def cycle_speed(self, device_id: str):
        return await self._run(device_id, self._commands.cycle_speed, "Cycling speed on")

    def start_level_change(self, device_id: str, direction: str) -> None:
        device = self._devices.get(device_id)
        if device is None:
            _LOGGER.warning("Unknown device %s", device_id)
            return
        self._level_changes.start(device, direction)

    def stop_level_change(self, device_id: str) -> None:
        self._level_changes.stop(device_id)
