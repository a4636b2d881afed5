"""Tuya open hub (MQTT) realtime client for pushed device updates."""
from __future__ import annotations

import asyncio
import base64
import json
import logging
import random
import ssl
from enum import Enum
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlsplit

import paho.mqtt.client as mqtt
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .const import SUBSCRIBE_DELAY
from .errors import RealtimeError
from .helpers import Scheduler
from .models import DeviceStatusBatch, HubState, LifecycleEvent, RealtimeEnvelope, StatusEvent
from .session import reconnect_delay

_LOGGER = logging.getLogger(__name__)

_DEFAULT_PORT = 8883
_TLS_SCHEMES = ("ssl", "tls", "mqtts")


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    SUBSCRIBED = "subscribed"


def envelope_key(password: str) -> bytes:
    """AES key: the 16 characters at offset 8 of the hub password."""
    return password[8:24].encode("utf-8")


def decrypt_envelope(payload: bytes | str, key: bytes) -> Dict[str, Any]:
    """Decrypt an open hub message into its JSON body.

    The outer message is JSON whose ``data`` field is base64 of the
    AES-ECB/PKCS#7 encrypted body.
    """
    try:
        if isinstance(payload, bytes):
            payload = payload.decode("utf-8")
        outer = json.loads(payload)
        data = base64.b64decode(outer["data"])
        decryptor = Cipher(algorithms.AES(key), modes.ECB()).decryptor()
        padded = decryptor.update(data) + decryptor.finalize()
        unpadder = padding.PKCS7(128).unpadder()
        plain = unpadder.update(padded) + unpadder.finalize()
        result = json.loads(plain.decode("utf-8"))
    except (ValueError, TypeError, KeyError) as ex:
        raise RealtimeError(f"could not decrypt realtime message: {ex}") from ex
    if not isinstance(result, dict):
        raise RealtimeError("realtime message is not a JSON object")
    return result


def parse_envelope(result: Dict[str, Any]) -> Optional[RealtimeEnvelope]:
    """Classify a decrypted body; None when it is neither status nor lifecycle.

    Bodies whose fields have the wrong shape are treated as unsupported.
    """
    device_id = result.get("devId") or result.get("id")
    if result.get("status") and device_id:
        if not isinstance(result["status"], list) or not isinstance(device_id, str):
            return None
        return DeviceStatusBatch(
            device_id=device_id,
            statuses=[StatusEvent.from_dict(s) for s in result["status"] if isinstance(s, dict)],
            product_key=result.get("productKey") if isinstance(result.get("productKey"), str) else None,
        )
    if result.get("bizCode") and result.get("bizData"):
        if not isinstance(result["bizData"], dict):
            return None
        return LifecycleEvent(biz_code=result["bizCode"], biz_data=dict(result["bizData"]))
    return None


def _make_mqtt_client(client_id: str) -> mqtt.Client:
    return mqtt.Client(
        callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
        client_id=client_id,
        reconnect_on_failure=False,
    )


def _rc(reason_code: Any) -> int:
    return reason_code.value if hasattr(reason_code, "value") else int(reason_code or 0)


class TuyaIoTClient:
    """Keeps one subscription to the open hub alive.

    DISCONNECTED -> CONNECTING -> CONNECTED -> SUBSCRIBED. Any failure
    drops back to DISCONNECTED and schedules a fresh attempt (hub config
    re-fetched) after 15..60 s, with no cap on attempts.
    """

    def __init__(
        self,
        hub,
        scheduler: Scheduler,
        *,
        ssl_context: Optional[ssl.SSLContext] = None,
        rng: Optional[random.Random] = None,
        client_factory: Callable[[str], Any] = _make_mqtt_client,
    ):
        self._hub = hub
        self._scheduler = scheduler
        self._ssl_context = ssl_context
        self._rng = rng
        self._client_factory = client_factory
        self._mqtt: Any = None
        self._config: Optional[Dict[str, Any]] = None
        self._key: bytes = b""
        self._state = ConnectionState.DISCONNECTED
        self._subscribe_handle = None
        self._reconnect_handle = None
        self._closing = False

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def config(self) -> Optional[Dict[str, Any]]:
        return self._config

    async def connect(self) -> None:
        """Fetch the hub config and open a new connection."""
        self._cancel(reconnect=True)
        self._closing = False
        config = await self._hub.get_hub_config()
        if not config:
            self._connection_lost("hub config unavailable")
            return
        self._config = config
        self._open()

    async def reconnect(self) -> None:
        """Reopen with the current config, fetching one if there is none."""
        if self._config is None:
            await self.connect()
            return
        self._cancel(reconnect=True)
        self._closing = False
        self._open()

    def reconnect_after(self, delay: float) -> None:
        self._cancel(reconnect=True)
        self._reconnect_handle = self._scheduler.run_after(delay, self.reconnect)

    async def stop(self) -> None:
        self._closing = True
        self._cancel(reconnect=True)
        self._teardown()
        self._state = ConnectionState.DISCONNECTED

    def _cancel(self, reconnect: bool = False) -> None:
        if self._subscribe_handle is not None:
            self._subscribe_handle.cancel()
            self._subscribe_handle = None
        if reconnect and self._reconnect_handle is not None:
            self._reconnect_handle.cancel()
            self._reconnect_handle = None

    def _teardown(self) -> None:
        client, self._mqtt = self._mqtt, None
        if client is None:
            return
        # The network thread exits once disconnect() is seen; joining it here
        # would block the event loop while a connect attempt is in flight.
        try:
            client.disconnect()
        except Exception as ex:  # pylint: disable=broad-except
            _LOGGER.debug("MQTT teardown failed: %s", ex)

    def _open(self) -> None:
        self._teardown()
        config = self._config or {}
        url = urlsplit(config.get("url") or "")
        host = url.hostname
        port = url.port or _DEFAULT_PORT
        self._key = envelope_key(config.get("password") or "")
        self._state = ConnectionState.CONNECTING
        _LOGGER.info("Connecting to Tuya MQTT hub at %s:%s", host, port)
        try:
            if not host:
                raise RealtimeError(f"invalid hub url {config.get('url')!r}")
            client = self._client_factory(config.get("client_id") or "")
            client.username_pw_set(config.get("username"), config.get("password"))
            if url.scheme in _TLS_SCHEMES:
                client.tls_set_context(self._ssl_context or ssl.create_default_context())
            self._bind(client)
            self._mqtt = client
            client.connect_async(host, port, keepalive=60)
            client.loop_start()
        except Exception as ex:  # pylint: disable=broad-except
            _LOGGER.error("MQTT connection error: %s", ex)
            self._connection_lost(str(ex))

    def _bind(self, client) -> None:
        """Route paho thread callbacks onto the event loop."""
        loop = self._scheduler.loop

        def on_connect(_client, _userdata, _flags, reason_code, _properties=None):
            rc = _rc(reason_code)
            if rc != 0:
                loop.call_soon_threadsafe(self._on_disconnected, client, f"connect refused rc={rc}")
            else:
                loop.call_soon_threadsafe(self._on_connected, client)

        def on_disconnect(_client, _userdata, _flags, reason_code, _properties=None):
            loop.call_soon_threadsafe(self._on_disconnected, client, f"disconnected rc={_rc(reason_code)}")

        def on_connect_fail(_client, _userdata):
            loop.call_soon_threadsafe(self._on_disconnected, client, "connect failed")

        def on_message(_client, _userdata, msg):
            loop.call_soon_threadsafe(self._on_message, client, msg.payload)

        client.on_connect = on_connect
        client.on_disconnect = on_disconnect
        client.on_connect_fail = on_connect_fail
        client.on_message = on_message

    def _on_connected(self, client) -> None:
        if client is not self._mqtt:
            return
        self._state = ConnectionState.CONNECTED
        self._hub.set_state(HubState.CONNECTED, "Connected to Tuya MQTT hub")
        self._cancel()
        self._subscribe_handle = self._scheduler.run_after(SUBSCRIBE_DELAY, self._subscribe)

    async def _subscribe(self) -> None:
        self._subscribe_handle = None
        client = self._mqtt
        if client is None or self._state is not ConnectionState.CONNECTED:
            return
        for name, topic in ((self._config or {}).get("source_topic") or {}).items():
            _LOGGER.info("Subscribing to Tuya MQTT hub %s topic", name)
            client.subscribe(topic)
        self._state = ConnectionState.SUBSCRIBED
        await self._hub.refresh()

    def _on_disconnected(self, client, reason: str) -> None:
        if client is not self._mqtt:
            return
        self._connection_lost(reason)

    def _on_message(self, client, payload: bytes) -> None:
        if client is not self._mqtt:
            return
        _LOGGER.debug("RAW MQTT message: %s", payload)
        try:
            result = decrypt_envelope(payload, self._key)
        except RealtimeError as ex:
            _LOGGER.warning("%s", ex)
            self._connection_lost("decode failure")
            return
        envelope = parse_envelope(result)
        if envelope is None:
            _LOGGER.warning("Unsupported MQTT packet: %s", result)
            return
        self._hub.handle_envelope(envelope)

    def _connection_lost(self, reason: str) -> None:
        if self._closing:
            return
        self._cancel(reconnect=True)
        self._teardown()
        self._state = ConnectionState.DISCONNECTED
        _LOGGER.error("MQTT connection error: %s", reason)
        self._hub.set_state(HubState.DISCONNECTED, "Disconnected from Tuya MQTT hub")
        delay = reconnect_delay(self._rng)
        _LOGGER.info("Reconnecting to Tuya MQTT hub in %ss", delay)
        self._reconnect_handle = self._scheduler.run_after(delay, self.connect)
