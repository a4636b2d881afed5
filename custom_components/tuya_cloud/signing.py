"""Request signing for the Tuya OpenAPI.

The canonical string is::

    METHOD\\n<sha256(body) lowercase hex>\\nclient_id:<id>\\n\\n<path>[?k=v&k=v]

and the signature is the uppercase hex HMAC-SHA256 of
``client_id + access_token + t + nonce + canonical`` keyed by the client
secret.
"""
from __future__ import annotations

import hashlib
import hmac
import json
from typing import Any, Dict, Mapping, Optional

from .const import DEV_CHANNEL, DEV_LANG, DRIVER_VERSION, SIGN_METHOD


def encode_body(body: Optional[Mapping[str, Any]]) -> str:
    """Serialize a request body exactly as it is hashed and sent."""
    if body is None:
        return ""
    return json.dumps(body, separators=(",", ":"))


def string_to_sign(
    method: str,
    path: str,
    query: Optional[Mapping[str, Any]],
    body: Optional[Mapping[str, Any]],
    client_id: str,
) -> str:
    url = path
    if query:
        url = path + "?" + "&".join(f"{k}={query[k]}" for k in sorted(query))
    content_sha256 = hashlib.sha256(encode_body(body).encode("utf-8")).hexdigest().lower()
    headers = f"client_id:{client_id}\n"
    return f"{method.upper()}\n{content_sha256}\n{headers}\n{url}"


def calculate_signature(
    client_id: str,
    client_secret: str,
    access_token: str,
    timestamp: int,
    nonce: str,
    canonical: str,
) -> str:
    message = f"{client_id}{access_token}{timestamp}{nonce}{canonical}"
    digest = hmac.new(client_secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256)
    return digest.hexdigest().upper()


def sign(
    method: str,
    path: str,
    query: Optional[Mapping[str, Any]],
    body: Optional[Mapping[str, Any]],
    *,
    client_id: str,
    client_secret: str,
    access_token: str,
    timestamp: int,
    nonce: str,
) -> str:
    """Return the request signature; pure and deterministic."""
    canonical = string_to_sign(method, path, query, body, client_id)
    return calculate_signature(client_id, client_secret, access_token, timestamp, nonce, canonical)


def build_headers(
    method: str,
    path: str,
    query: Optional[Mapping[str, Any]],
    body: Optional[Mapping[str, Any]],
    *,
    client_id: str,
    client_secret: str,
    access_token: str,
    timestamp: int,
    nonce: str,
    lang: str,
) -> Dict[str, str]:
    signature = sign(
        method,
        path,
        query,
        body,
        client_id=client_id,
        client_secret=client_secret,
        access_token=access_token,
        timestamp=timestamp,
        nonce=nonce,
    )
    return {
        "t": str(timestamp),
        "nonce": nonce,
        "client_id": client_id,
        "Signature-Headers": "client_id",
        "sign": signature,
        "sign_method": SIGN_METHOD,
        "access_token": access_token,
        "lang": lang,
        "dev_lang": DEV_LANG,
        "dev_channel": DEV_CHANNEL,
        "devVersion": DRIVER_VERSION,
        "Content-Type": "application/json",
    }
