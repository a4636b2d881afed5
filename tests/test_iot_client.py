import base64
import json
import random

import pytest
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from custom_components.tuya_cloud.errors import RealtimeError
from custom_components.tuya_cloud.iot_client import (
    ConnectionState,
    TuyaIoTClient,
    decrypt_envelope,
    envelope_key,
    parse_envelope,
)
from custom_components.tuya_cloud.models import DeviceStatusBatch, HubState, LifecycleEvent, StatusEvent

PASSWORD = "0123456789abcdefghijklmnop"

HUB_CONFIG = {
    "url": "ssl://m1.tuyaus.com:8285/",
    "client_id": "cloud_abc",
    "username": "cloud_abc",
    "password": PASSWORD,
    "source_topic": {"device": "cloud/token/in/abc"},
}


def _encrypt(body, password=PASSWORD) -> bytes:
    padder = padding.PKCS7(128).padder()
    padded = padder.update(json.dumps(body).encode("utf-8")) + padder.finalize()
    encryptor = Cipher(algorithms.AES(envelope_key(password)), modes.ECB()).encryptor()
    data = encryptor.update(padded) + encryptor.finalize()
    return json.dumps({"protocol": 4, "data": base64.b64encode(data).decode("ascii")}).encode("utf-8")


class FakeMqtt:
    def __init__(self, client_id):
        self.client_id = client_id
        self.credentials = None
        self.tls_context = None
        self.connected_to = None
        self.started = False
        self.stopped = False
        self.disconnected = False
        self.topics = []

    def username_pw_set(self, username, password):
        self.credentials = (username, password)

    def tls_set_context(self, context):
        self.tls_context = context

    def connect_async(self, host, port, keepalive=60):
        self.connected_to = (host, port, keepalive)

    def loop_start(self):
        self.started = True

    def loop_stop(self):
        self.stopped = True

    def disconnect(self):
        self.disconnected = True

    def subscribe(self, topic):
        self.topics.append(topic)


class FakeHub:
    def __init__(self, config=HUB_CONFIG):
        self.config = config
        self.states = []
        self.refreshes = 0
        self.envelopes = []

    async def get_hub_config(self):
        return self.config

    def set_state(self, state, description=""):
        self.states.append(state)

    async def refresh(self):
        self.refreshes += 1

    def handle_envelope(self, envelope):
        self.envelopes.append(envelope)


@pytest.fixture
def clients():
    return []


@pytest.fixture
def hub():
    return FakeHub()


@pytest.fixture
def iot(hub, scheduler, clients):
    def _factory(client_id):
        client = FakeMqtt(client_id)
        clients.append(client)
        return client

    return TuyaIoTClient(hub, scheduler, ssl_context=object(), rng=random.Random(3), client_factory=_factory)


def test_envelope_key_is_password_slice() -> None:
    assert envelope_key(PASSWORD) == b"89abcdefghijklmn"


def test_decrypt_envelope_round_trip() -> None:
    body = {"devId": "dev1", "status": [{"code": "switch_led", "value": True}]}

    assert decrypt_envelope(_encrypt(body), envelope_key(PASSWORD)) == body


def test_decrypt_envelope_rejects_wrong_key() -> None:
    payload = _encrypt({"devId": "dev1", "status": []})

    with pytest.raises(RealtimeError):
        decrypt_envelope(payload, b"ffffffffffffffff")


def test_decrypt_envelope_rejects_garbage() -> None:
    with pytest.raises(RealtimeError):
        decrypt_envelope(b"not json", envelope_key(PASSWORD))
    with pytest.raises(RealtimeError):
        decrypt_envelope(b'{"protocol": 4}', envelope_key(PASSWORD))


def test_parse_envelope_variants() -> None:
    batch = parse_envelope(
        {"devId": "dev1", "productKey": "vp6clf9d", "status": [{"code": "switch1_value", "value": "click", "t": 1}]}
    )
    assert batch == DeviceStatusBatch("dev1", [StatusEvent("switch1_value", "click")], "vp6clf9d")

    lifecycle = parse_envelope({"bizCode": "online", "bizData": {"devId": "dev1"}})
    assert isinstance(lifecycle, LifecycleEvent)
    assert lifecycle.device_id == "dev1"

    assert parse_envelope({"devId": "dev1"}) is None
    assert parse_envelope({"bizCode": "online"}) is None


@pytest.mark.asyncio
async def test_connect_subscribes_after_delay_and_refreshes(iot, hub, scheduler, clients) -> None:
    await iot.connect()

    [client] = clients
    assert iot.state is ConnectionState.CONNECTING
    assert client.client_id == "cloud_abc"
    assert client.credentials == ("cloud_abc", PASSWORD)
    assert client.tls_context is not None
    assert client.connected_to == ("m1.tuyaus.com", 8285, 60)
    assert client.started

    iot._on_connected(client)
    assert iot.state is ConnectionState.CONNECTED
    assert hub.states == [HubState.CONNECTED]
    assert scheduler.last.delay == 1.0

    await scheduler.fire(scheduler.last)
    assert client.topics == ["cloud/token/in/abc"]
    assert iot.state is ConnectionState.SUBSCRIBED
    assert hub.refreshes == 1


@pytest.mark.asyncio
async def test_plain_mqtt_url_skips_tls(hub, iot, clients) -> None:
    hub.config = dict(HUB_CONFIG, url="tcp://m1.tuyaus.com")

    await iot.connect()

    assert clients[0].tls_context is None
    assert clients[0].connected_to == ("m1.tuyaus.com", 8883, 60)


@pytest.mark.asyncio
async def test_disconnect_schedules_fresh_connect(iot, hub, scheduler, clients) -> None:
    await iot.connect()
    client = clients[0]
    iot._on_connected(client)

    iot._on_disconnected(client, "rc=7")

    assert iot.state is ConnectionState.DISCONNECTED
    assert hub.states[-1] is HubState.DISCONNECTED
    assert client.disconnected
    # The network thread is left to exit on its own, never joined on the loop
    assert not client.stopped
    retry = scheduler.last
    assert 15 <= retry.delay <= 60
    assert retry.callback == iot.connect

    await scheduler.fire(retry)
    assert len(clients) == 2
    assert iot.state is ConnectionState.CONNECTING


@pytest.mark.asyncio
async def test_callbacks_from_replaced_client_are_ignored(iot, hub, scheduler, clients) -> None:
    await iot.connect()
    stale = clients[0]
    await iot.reconnect()
    assert len(clients) == 2

    iot._on_connected(stale)
    iot._on_disconnected(stale, "late")
    iot._on_message(stale, _encrypt({"devId": "dev1", "status": [{"code": "switch", "value": True}]}))

    assert hub.states == []
    assert hub.envelopes == []
    assert scheduler.calls == []


@pytest.mark.asyncio
async def test_message_is_decoded_and_forwarded(iot, hub, clients) -> None:
    await iot.connect()
    client = clients[0]

    iot._on_message(client, _encrypt({"devId": "dev1", "status": [{"code": "switch", "value": True}]}))
    iot._on_message(client, _encrypt({"something": "else"}))

    assert hub.envelopes == [DeviceStatusBatch("dev1", [StatusEvent("switch", True)], None)]
    assert iot.state is ConnectionState.CONNECTING


@pytest.mark.asyncio
async def test_decode_failure_reconnects(iot, hub, scheduler, clients) -> None:
    await iot.connect()

    iot._on_message(clients[0], _encrypt({"devId": "dev1"}, password="XXXXXXXXzyxwvutsrqponmlkXX"))

    assert iot.state is ConnectionState.DISCONNECTED
    assert hub.envelopes == []
    assert hub.states == [HubState.DISCONNECTED]
    assert scheduler.last.callback == iot.connect


@pytest.mark.asyncio
async def test_missing_hub_config_retries_later(iot, hub, scheduler, clients) -> None:
    hub.config = None

    await iot.connect()

    assert clients == []
    assert iot.state is ConnectionState.DISCONNECTED
    assert 15 <= scheduler.last.delay <= 60


@pytest.mark.asyncio
async def test_reconnect_after_replaces_pending_attempt(iot, scheduler) -> None:
    iot.reconnect_after(5)
    first = scheduler.last
    iot.reconnect_after(5)

    assert first.handle.cancelled
    assert scheduler.last.delay == 5
    assert scheduler.last.callback == iot.reconnect


@pytest.mark.asyncio
async def test_stop_suppresses_reconnect(iot, hub, scheduler, clients) -> None:
    await iot.connect()

    await iot.stop()
    iot._connection_lost("closing")

    assert clients[0].disconnected
    assert iot.state is ConnectionState.DISCONNECTED
    assert scheduler.calls == []


def test_parse_envelope_rejects_malformed_shapes() -> None:
    assert parse_envelope({"bizCode": "online", "bizData": "oops"}) is None
    assert parse_envelope({"devId": "dev1", "status": 5}) is None
    assert parse_envelope({"devId": ["dev1"], "status": [{"code": "switch", "value": True}]}) is None

    batch = parse_envelope({"devId": "dev1", "productKey": ["x"], "status": [{"code": "switch", "value": True}]})
    assert batch.product_key is None


@pytest.mark.asyncio
async def test_malformed_body_is_dropped_without_reconnect(iot, hub, scheduler, clients) -> None:
    await iot.connect()
    client = clients[0]

    iot._on_message(client, _encrypt({"bizCode": "online", "bizData": "oops"}))
    iot._on_message(client, _encrypt({"devId": "dev1", "status": 7}))

    assert hub.envelopes == []
    assert iot.state is ConnectionState.CONNECTING
    assert scheduler.calls == []


@pytest.mark.asyncio
async def test_failed_first_connect_schedules_retry(iot, hub, scheduler, clients) -> None:
    await iot.connect()
    client = clients[0]

    iot._on_disconnected(client, "connect failed")

    assert client.disconnected
    assert not client.stopped
    assert iot.state is ConnectionState.DISCONNECTED
    assert 15 <= scheduler.last.delay <= 60
