import hashlib
import hmac

from custom_components.tuya_cloud.signing import (
    build_headers,
    calculate_signature,
    encode_body,
    sign,
    string_to_sign,
)

EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"

_BASE = dict(
    method="GET",
    path="/v1.0/iot-01/associated-users/devices",
    query={"last_row_key": ""},
    body=None,
    client_id="cid",
    client_secret="secret",
    access_token="token",
    timestamp=1700000000000,
    nonce="5d6a1f0e-2a3b-4c5d-8e9f-001122334455",
)


def _sign(**overrides) -> str:
    params = dict(_BASE)
    params.update(overrides)
    return sign(
        params.pop("method"),
        params.pop("path"),
        params.pop("query"),
        params.pop("body"),
        **params,
    )


def test_string_to_sign_sorts_query_and_hashes_empty_body() -> None:
    canonical = string_to_sign("get", "/v1.0/things", {"b": 2, "a": 1}, None, "cid")

    assert canonical == f"GET\n{EMPTY_SHA256}\nclient_id:cid\n\n/v1.0/things?a=1&b=2"


def test_string_to_sign_hashes_serialized_body() -> None:
    body = {"commands": [{"code": "switch_led", "value": True}]}
    canonical = string_to_sign("post", "/v1.0/devices/x/commands", None, body, "cid")

    digest = hashlib.sha256(encode_body(body).encode("utf-8")).hexdigest()
    assert canonical == f"POST\n{digest}\nclient_id:cid\n\n/v1.0/devices/x/commands"
    assert encode_body(body) == '{"commands":[{"code":"switch_led","value":true}]}'


def test_calculate_signature_is_uppercase_hmac_sha256() -> None:
    signature = calculate_signature("cid", "secret", "token", 42, "nonce", "canonical")

    expected = hmac.new(b"secret", b"cidtoken42noncecanonical", hashlib.sha256).hexdigest().upper()
    assert signature == expected
    assert len(signature) == 64


def test_signature_is_deterministic() -> None:
    assert _sign() == _sign()


def test_changing_any_input_changes_signature() -> None:
    reference = _sign()
    variants = [
        {"method": "POST"},
        {"path": "/v1.0/devices/abc/status"},
        {"query": {"last_row_key": "next"}},
        {"body": {"a": 1}},
        {"client_id": "other"},
        {"client_secret": "other"},
        {"access_token": "other"},
        {"timestamp": 1700000000001},
        {"nonce": "other"},
    ]
    for variant in variants:
        assert _sign(**variant) != reference, variant


def test_build_headers_carries_identity_and_signature() -> None:
    headers = build_headers(
        "GET",
        "/v1.0/devices/abc/status",
        None,
        None,
        client_id="cid",
        client_secret="secret",
        access_token="token",
        timestamp=123,
        nonce="nonce",
        lang="en",
    )

    assert headers["t"] == "123"
    assert headers["nonce"] == "nonce"
    assert headers["client_id"] == "cid"
    assert headers["Signature-Headers"] == "client_id"
    assert headers["sign_method"] == "HMAC-SHA256"
    assert headers["access_token"] == "token"
    assert headers["lang"] == "en"
    assert headers["sign"] == sign(
        "GET",
        "/v1.0/devices/abc/status",
        None,
        None,
        client_id="cid",
        client_secret="secret",
        access_token="token",
        timestamp=123,
        nonce="nonce",
    )
