"""Capability catalog: value domains learned from device specifications."""
from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from .const import DEFAULT_DOMAINS
from .models import TuyaDevice

_LOGGER = logging.getLogger(__name__)


class ValueKind(Enum):
    INTEGER = "Integer"
    ENUM = "Enum"
    BOOLEAN = "Boolean"
    STRING = "String"
    JSON = "Json"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, raw: Any) -> "ValueKind":
        for kind in cls:
            if isinstance(raw, str) and kind.value.lower() == raw.lower():
                return kind
        return cls.UNKNOWN


@dataclass(frozen=True)
class FunctionSpec:
    code: str
    kind: ValueKind
    min: Optional[float] = None
    max: Optional[float] = None
    scale: int = 0
    step: Optional[float] = None
    unit: Optional[str] = None
    range: Tuple[str, ...] = ()
    # Colour triples carry one integer sub-domain per channel
    h: Optional["FunctionSpec"] = None
    s: Optional["FunctionSpec"] = None
    v: Optional["FunctionSpec"] = None

    @property
    def is_color(self) -> bool:
        return self.h is not None and self.s is not None and self.v is not None

    @classmethod
    def from_values(cls, code: str, values: Mapping[str, Any]) -> "FunctionSpec":
        kind = ValueKind.parse(values.get("type"))
        channels = {}
        for channel in ("h", "s", "v"):
            sub = values.get(channel)
            if isinstance(sub, Mapping):
                channels[channel] = cls.from_values(f"{code}.{channel}", {"type": "Integer", **sub})
        raw_range = values.get("range")
        return cls(
            code=code,
            kind=kind,
            min=values.get("min"),
            max=values.get("max"),
            scale=int(values.get("scale") or 0),
            step=values.get("step"),
            unit=values.get("unit") or None,
            range=tuple(raw_range) if isinstance(raw_range, (list, tuple)) else (),
            **channels,
        )


def _parse_domain_map(raw: Mapping[str, Any]) -> Dict[str, FunctionSpec]:
    return {
        code: FunctionSpec.from_values(code, values if isinstance(values, Mapping) else {})
        for code, values in raw.items()
    }


DEFAULT_SPECS: Dict[str, FunctionSpec] = _parse_domain_map(DEFAULT_DOMAINS)


def serialize_domains(raw: Mapping[str, Any]) -> str:
    """Serialize a code -> values map into its catalog key."""
    return json.dumps(raw, sort_keys=True, separators=(",", ":"))


def parse_specification(result: Mapping[str, Any]) -> Tuple[str, Dict[str, Any], Dict[str, Any]]:
    """Split a specification result into category, functions and status set.

    Each entry's ``values`` field is itself a JSON document; it is decoded
    and tagged with the entry's ``type``.
    """

    def _collect(entries: Optional[Iterable[Mapping[str, Any]]]) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for entry in entries or []:
            code = entry.get("code")
            if not code:
                continue
            raw_values = entry.get("values") or "{}"
            try:
                values = json.loads(raw_values) if isinstance(raw_values, str) else dict(raw_values)
            except ValueError:
                _LOGGER.warning("Ignoring malformed values for %s: %s", code, raw_values)
                values = {}
            if not isinstance(values, dict):
                values = {}
            values["type"] = entry.get("type")
            out[code] = values
        return out

    return result.get("category") or "", _collect(result.get("functions")), _collect(result.get("status"))


def lookup(domains: Mapping[str, FunctionSpec], code: Optional[str]) -> Optional[FunctionSpec]:
    """Domain for code from the device map, else the default table, else None."""
    if not code:
        return None
    return domains.get(code) or DEFAULT_SPECS.get(code)


def first_domain(domains: Mapping[str, FunctionSpec], codes: Iterable[str]) -> Optional[FunctionSpec]:
    for code in codes:
        if code in domains:
            return domains[code]
    return None


class CapabilityCatalog:
    """Parsed domain maps memoized by their serialized form.

    Devices with byte-identical capability documents share one parsed
    object. Parsing happens at most once per key even when callers race.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._cache: Dict[Tuple[str, str], Any] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def get_or_compute(self, kind: str, key: str, factory: Callable[[str], Any]) -> Any:
        cache_key = (kind, key)
        with self._lock:
            try:
                return self._cache[cache_key]
            except KeyError:
                pass
            value = factory(key)
            self._cache[cache_key] = value
            return value

    def invalidate(self) -> None:
        with self._lock:
            self._cache.clear()

    def _domains(self, text: Optional[str]) -> Dict[str, FunctionSpec]:
        return self.get_or_compute("domains", text or "{}", lambda k: _parse_domain_map(json.loads(k)))

    def functions(self, device: TuyaDevice) -> Dict[str, FunctionSpec]:
        return self._domains(device.functions_json)

    def status_set(self, device: TuyaDevice) -> Dict[str, FunctionSpec]:
        return self._domains(device.status_json)

    def status_domains(self, device: TuyaDevice) -> Dict[str, FunctionSpec]:
        """Domains used to interpret inbound values; functions stand in for an empty status set."""
        return self.status_set(device) or self.functions(device)

    def merged(self, device: TuyaDevice) -> Dict[str, FunctionSpec]:
        merged = dict(self.functions(device))
        merged.update(self.status_set(device))
        return merged

    def get_domain(self, device: TuyaDevice, code: str) -> Optional[FunctionSpec]:
        """FunctionSpec for code on this device; None means unsupported."""
        return lookup(self.merged(device), code)

    def parse_json(self, text: str) -> Any:
        return self.get_or_compute("json", text, json.loads)
