"""Translation of raw Tuya status codes into normalized attribute events."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .catalog import CapabilityCatalog, FunctionSpec, ValueKind, first_domain, lookup
from .categories import FunctionCategory, categories_for, codes_for
from .const import (
    MAX_MIREDS,
    MIN_MIREDS,
    SCENE_SWITCH_ACTIONS,
    SCENE_SWITCH_BUTTONS,
    SPEED_NAMES,
    VIBRATION_CLEAR_DELAY,
)
from .errors import ProtocolError
from .helpers import remap, round_half_up, translate_color_name
from .models import NormalizedEvent, StatusEvent, TuyaDevice
from .quirks import resolve_quirk

_LOGGER = logging.getLogger(__name__)

_COLOUR_MODES = ("colour", "color")
_BRIGHTNESS_CODES = codes_for(FunctionCategory.BRIGHTNESS)

_SHADE_STATES = {
    "open": "open",
    "opening": "opening",
    "close": "closed",
    "closing": "closing",
    "stop": "unknown",
}

_WORK_MODES = {
    "white": "CT",
    "light_white": "CT",
    "colour": "RGB",
    "color": "RGB",
}


@dataclass
class _Batch:
    """Everything a handler may consult besides the status itself."""

    device: TuyaDevice
    statuses: List[StatusEvent]
    domains: Dict[str, FunctionSpec]
    product_key: Optional[str]
    work_mode: Optional[str] = None
    switch: Any = None
    deferred: List[Tuple[float, List[StatusEvent]]] = field(default_factory=list)

    @property
    def colour_mode(self) -> bool:
        return self.work_mode in _COLOUR_MODES


@dataclass
class Translation:
    events: List[NormalizedEvent]
    # (delay seconds, statuses) to translate again later
    deferred: List[Tuple[float, List[StatusEvent]]]


def _event(name: str, value: Any, unit: Optional[str] = None, description: Optional[str] = None, **kwargs) -> NormalizedEvent:
    if description is None:
        description = f"{name} is {value}{unit or ''}"
    return NormalizedEvent(name=name, value=value, unit=unit, description=description, **kwargs)


class StatusTranslator:
    def __init__(self, catalog: CapabilityCatalog):
        self._catalog = catalog
        self._handlers: Dict[FunctionCategory, Callable[[_Batch, StatusEvent], Optional[List[NormalizedEvent]]]] = {
            FunctionCategory.BATTERY: self._battery,
            FunctionCategory.BRIGHTNESS: self._brightness,
            FunctionCategory.CO: self._co,
            FunctionCategory.CO2: self._co2,
            FunctionCategory.CONTROL: self._window_shade,
            FunctionCategory.WORK_STATE: self._window_shade,
            FunctionCategory.CT: self._color_temperature,
            FunctionCategory.COLOUR: self._colour,
            FunctionCategory.CONTACT: self._contact,
            FunctionCategory.FAN_SPEED: self._fan_speed,
            FunctionCategory.LIGHT: self._switch,
            FunctionCategory.POWER: self._switch,
            FunctionCategory.METERING_SWITCH: self._metering,
            FunctionCategory.OMNI_SENSOR: self._omni_sensor,
            FunctionCategory.PIR: self._pir,
            FunctionCategory.PERCENT_CONTROL: self._position,
            FunctionCategory.SCENE_SWITCH: self._scene_switch,
            FunctionCategory.SMOKE: self._smoke,
            FunctionCategory.TEMPERATURE: self._temperature,
            FunctionCategory.TEMPERATURE_SET: self._temperature_set,
            FunctionCategory.WATER: self._water,
            FunctionCategory.WORK_MODE: self._work_mode,
            FunctionCategory.UNMATCHED: self._unmatched,
        }

    def translate(
        self,
        device: TuyaDevice,
        statuses: Sequence[StatusEvent],
        product_key: Optional[str] = None,
    ) -> Translation:
        """Translate one status batch.

        Each code is tried against its categories in order; a handler
        returning None passes the code on, a list (even empty) settles it.
        Failures stay local to the code that caused them.
        """
        statuses = list(statuses)
        batch = _Batch(
            device=device,
            statuses=statuses,
            domains=self._catalog.status_domains(device),
            product_key=product_key,
        )
        for status in statuses:
            if status.code == "work_mode":
                batch.work_mode = status.value
            elif status.code == "switch":
                batch.switch = status.value

        events: List[NormalizedEvent] = []
        for status in statuses:
            _LOGGER.debug("%s status %s=%s", device.name, status.code, status.value)
            try:
                for category in categories_for(status.code, device.category):
                    result = self._handlers[category](batch, status)
                    if result is not None:
                        events.extend(result)
                        break
                else:
                    _LOGGER.debug("%s no event for %s=%s", device.name, status.code, status.value)
            except ProtocolError as ex:
                _LOGGER.warning("%s %s", device.name, ex)
            except (ValueError, TypeError, KeyError, ZeroDivisionError) as ex:
                _LOGGER.warning("%s could not translate %s=%r: %s", device.name, status.code, status.value, ex)

        for event in events:
            _LOGGER.info("%s %s", device.name, event.description)
        return Translation(events=events, deferred=batch.deferred)

    def _domain(self, batch: _Batch, code: str) -> Optional[FunctionSpec]:
        return lookup(batch.domains, code)

    def _unmatched(self, batch: _Batch, status: StatusEvent) -> List[NormalizedEvent]:
        raise ProtocolError(f"unsupported status code {status.code}")

    def _battery(self, batch: _Batch, status: StatusEvent) -> List[NormalizedEvent]:
        return [_event("battery", status.value, "%")]

    def _brightness(self, batch: _Batch, status: StatusEvent) -> Optional[List[NormalizedEvent]]:
        if batch.colour_mode:
            # Level follows the colour value while in colour mode
            return []
        bright = self._domain(batch, status.code)
        if bright is None:
            return None
        value = math.floor(remap(status.value, bright.min, bright.max, 0, 100))
        return [_event("level", value, "%")]

    def _co(self, batch: _Batch, status: StatusEvent) -> List[NormalizedEvent]:
        value = "detected" if status.value == "alarm" else "clear"
        return [_event("carbonMonoxide", value, description=f"carbon monoxide is {value}")]

    def _co2(self, batch: _Batch, status: StatusEvent) -> List[NormalizedEvent]:
        return [_event("carbonDioxide", status.value, "ppm", description=f"carbon dioxide level is {status.value}")]

    def _window_shade(self, batch: _Batch, status: StatusEvent) -> Optional[List[NormalizedEvent]]:
        value = _SHADE_STATES.get(status.value)
        if value is None:
            return None
        return [_event("windowShade", value, description=f"window shade is {value}")]

    def _color_temperature(self, batch: _Batch, status: StatusEvent) -> Optional[List[NormalizedEvent]]:
        temp = self._domain(batch, status.code)
        if temp is None:
            return None
        mireds = remap(temp.max - status.value, temp.min, temp.max, MIN_MIREDS, MAX_MIREDS)
        value = math.floor(1_000_000 / mireds)
        return [_event("colorTemperature", value, "K")]

    def _colour(self, batch: _Batch, status: StatusEvent) -> Optional[List[NormalizedEvent]]:
        colour = self._domain(batch, status.code)
        if colour is None or not colour.is_color:
            colour = lookup({}, status.code)
        if colour is None:
            return None
        bright = first_domain(batch.domains, _BRIGHTNESS_CODES) or colour.v
        raw = status.value
        if raw == "":
            value = {"h": 100, "s": 100, "v": 100}
        elif isinstance(raw, str):
            value = self._catalog.parse_json(raw)
        else:
            value = raw
        hue = math.floor(remap(value["h"], colour.h.min, colour.h.max, 0, 100))
        saturation = math.floor(remap(value["s"], colour.s.min, colour.s.max, 0, 100))
        level = math.floor(remap(value["v"], bright.min, bright.max, 0, 100))
        color_name = translate_color_name(hue, saturation)
        events = [
            _event("hue", hue),
            _event("saturation", saturation),
            _event("colorName", color_name, description=f"color name is {color_name}"),
        ]
        if batch.colour_mode:
            events.append(_event("level", level, "%"))
        return events

    def _contact(self, batch: _Batch, status: StatusEvent) -> List[NormalizedEvent]:
        value = "open" if status.value else "closed"
        return [_event("contact", value)]

    def _fan_speed(self, batch: _Batch, status: StatusEvent) -> List[NormalizedEvent]:
        if not batch.switch:
            return [_event("speed", "off")]
        speed = self._domain(batch, status.code)
        last = len(SPEED_NAMES) - 1
        if speed is not None and speed.kind is ValueKind.ENUM and speed.range:
            if status.value not in speed.range:
                raise ProtocolError(f"fan speed {status.value} outside {list(speed.range)}")
            index = remap(speed.range.index(status.value), 0, len(speed.range) - 1, 0, last)
        elif speed is not None and speed.kind is ValueKind.INTEGER:
            lo = 1 if speed.min is None else speed.min
            hi = 100 if speed.max is None else speed.max
            index = remap(int(status.value), lo, hi, 0, last)
        else:
            raise ProtocolError(f"unknown fan speed function type {speed}")
        name = SPEED_NAMES[int(round_half_up(index))]
        return [_event("speed", name)]

    def _switch(self, batch: _Batch, status: StatusEvent) -> List[NormalizedEvent]:
        value = "on" if status.value else "off"
        return [_event("switch", value)]

    def _metering(self, batch: _Batch, status: StatusEvent) -> Optional[List[NormalizedEvent]]:
        if status.code == "cur_power":
            value = status.value / 10
            return [_event("power", value, "W", description=f"power is {value} W")]
        if status.value is None:
            return None
        return [_event(status.code, status.value, "")]

    def _omni_sensor(self, batch: _Batch, status: StatusEvent) -> Optional[List[NormalizedEvent]]:
        code = status.code
        if code == "bright_value":
            return [_event("illuminance", status.value, "Lux", description=f"illuminance is {status.value} Lux")]
        if code in ("humidity_value", "va_humidity"):
            value = status.value / 10 if code == "humidity_value" else status.value
            return [_event("humidity", value, "RH%", description=f"humidity is {value} RH%")]
        if code in ("bright_sensitivity", "sensitivity"):
            return [_event("sensitivity", status.value, "%")]
        if code == "shock_state":
            # Vibration sensors never report inactive; clear the motion later
            replay = [
                StatusEvent("inactive_state", s.value) if s.code == "shock_state" else s
                for s in batch.statuses
            ]
            batch.deferred.append((VIBRATION_CLEAR_DELAY, replay))
            return [_event("motion", "active", "")]
        if code == "inactive_state":
            return [_event("motion", "inactive", "")]
        return None

    def _pir(self, batch: _Batch, status: StatusEvent) -> List[NormalizedEvent]:
        value = "active" if status.value == "pir" else "inactive"
        return [_event("motion", value)]

    def _position(self, batch: _Batch, status: StatusEvent) -> List[NormalizedEvent]:
        return [_event("position", status.value, "%")]

    def _scene_switch(self, batch: _Batch, status: StatusEvent) -> List[NormalizedEvent]:
        action = SCENE_SWITCH_ACTIONS.get(status.value)
        if action is None:
            _LOGGER.warning("%s scene switch: unknown value %s", batch.device.name, status.value)
        quirk = resolve_quirk(batch.product_key)
        button = None
        if quirk is not None:
            button = quirk.button_numbers.get(status.code)
        if button is None:
            button = SCENE_SWITCH_BUTTONS.get(status.code)
        if action is None or button is None:
            _LOGGER.warning("%s scene switch: unknown action %s or button %s", batch.device.name, action, button)
            return []
        return [_event(action, button, description=f"button {button} is {action}", state_change=True)]

    def _smoke(self, batch: _Batch, status: StatusEvent) -> List[NormalizedEvent]:
        value = "detected" if status.value == "alarm" else "clear"
        return [_event("smoke", value)]

    def _temperature(self, batch: _Batch, status: StatusEvent) -> Optional[List[NormalizedEvent]]:
        spec = self._domain(batch, status.code)
        if spec is None:
            return None
        value = status.value / (10 ** spec.scale) if spec.scale else status.value
        return [_event("temperature", value, spec.unit)]

    def _temperature_set(self, batch: _Batch, status: StatusEvent) -> List[NormalizedEvent]:
        spec = self._domain(batch, status.code)
        unit = spec.unit if spec is not None else None
        return [_event("heatingSetpoint", status.value, unit, description=f"heating set point is {status.value}{unit or ''}")]

    def _water(self, batch: _Batch, status: StatusEvent) -> List[NormalizedEvent]:
        value = "wet" if status.value == "alarm" else "dry"
        return [_event("water", value)]

    def _work_mode(self, batch: _Batch, status: StatusEvent) -> Optional[List[NormalizedEvent]]:
        mode = _WORK_MODES.get(status.value)
        if mode is None:
            return None
        return [_event("colorMode", mode)]
