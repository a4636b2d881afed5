"""Translation of capability commands into Tuya function instructions."""
from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .catalog import CapabilityCatalog, FunctionSpec, ValueKind, first_domain, lookup
from .categories import FunctionCategory, codes_for, first_code
from .const import (
    LEVEL_CHANGE_INTERVAL,
    LEVEL_CHANGE_STEP,
    MAX_MIREDS,
    MIN_MIREDS,
    SPEED_NAMES,
)
from .helpers import Scheduler, kelvin_to_mireds, remap, round_half_up
from .models import TuyaDevice

_LOGGER = logging.getLogger(__name__)

Command = Dict[str, Any]

_SWITCH_CODES = codes_for(FunctionCategory.LIGHT, FunctionCategory.POWER)
_BRIGHTNESS_CODES = codes_for(FunctionCategory.BRIGHTNESS)

# Next speed when cycling
_SPEED_CYCLE = {
    "low": "medium",
    "medium-low": "medium",
    "medium": "high",
    "medium-high": "high",
    "high": "low",
}


def _command(code: str, value: Any) -> Command:
    return {"code": code, "value": value}


class CommandTranslator:
    """Build command lists; an empty list means the device lacks the capability."""

    def __init__(self, catalog: CapabilityCatalog):
        self._catalog = catalog

    def _code(self, device: TuyaDevice, *categories: FunctionCategory) -> Optional[str]:
        return first_code(self._catalog.functions(device), codes_for(*categories))

    def turn_on(self, device: TuyaDevice) -> List[Command]:
        return self._switch(device, True)

    def turn_off(self, device: TuyaDevice) -> List[Command]:
        return self._switch(device, False)

    def _switch(self, device: TuyaDevice, on: bool) -> List[Command]:
        code = first_code(self._catalog.functions(device), _SWITCH_CODES)
        if not code:
            return []
        return [_command(code, on)]

    def _control(self, device: TuyaDevice, value: str) -> List[Command]:
        code = self._code(device, FunctionCategory.CONTROL)
        if not code:
            return []
        return [_command(code, value)]

    def open(self, device: TuyaDevice) -> List[Command]:
        return self._control(device, "open")

    def close(self, device: TuyaDevice) -> List[Command]:
        return self._control(device, "close")

    def stop_position_change(self, device: TuyaDevice) -> List[Command]:
        return self._control(device, "stop")

    def start_position_change(self, device: TuyaDevice, direction: str) -> List[Command]:
        if direction == "open":
            return self.open(device)
        if direction == "close":
            return self.close(device)
        _LOGGER.warning("Unknown position change direction %s for %s", direction, device.name)
        return []

    def set_position(self, device: TuyaDevice, position: float) -> List[Command]:
        code = self._code(device, FunctionCategory.PERCENT_CONTROL)
        if not code:
            return []
        return [_command(code, int(position))]

    def set_heating_setpoint(self, device: TuyaDevice, temperature: float) -> List[Command]:
        code = self._code(device, FunctionCategory.TEMPERATURE_SET)
        if not code:
            return []
        return [_command(code, temperature)]

    def set_color(self, device: TuyaDevice, hue: float, saturation: float, level: float) -> List[Command]:
        """Colour value in the device's h/s/v domains plus a colour work mode."""
        functions = self._catalog.functions(device)
        code = first_code(functions, codes_for(FunctionCategory.COLOUR))
        if not code:
            return []
        color = _color_domain(functions, code)
        if color is None:
            return []
        # Devices with a separate brightness code scale v like that code
        bright = first_domain(functions, _BRIGHTNESS_CODES) or color.v
        value = {
            "h": _to_int(remap(hue, 0, 100, color.h.min, color.h.max)),
            "s": _to_int(remap(saturation, 0, 100, color.s.min, color.s.max)),
            "v": _to_int(remap(level, 0, 100, bright.min, bright.max)),
        }
        return [_command(code, value), _command("work_mode", "colour")]

    def set_hue(self, device: TuyaDevice, hue: float) -> List[Command]:
        return self.set_color(
            device,
            hue,
            device.state.get("saturation", 0),
            device.state.get("level", 100),
        )

    def set_saturation(self, device: TuyaDevice, saturation: float) -> List[Command]:
        return self.set_color(
            device,
            device.state.get("hue", 0),
            saturation,
            device.state.get("level", 100),
        )

    def set_color_temperature(self, device: TuyaDevice, kelvin: float) -> List[Command]:
        # Status set entries override function entries for the domain
        domains = self._catalog.merged(device)
        code = first_code(domains, codes_for(FunctionCategory.CT))
        temp = lookup(domains, code)
        if temp is None:
            return []
        mireds = kelvin_to_mireds(kelvin)
        # Device scale runs cold to warm, mireds run warm to cold
        value = int(temp.max - math.ceil(remap(mireds, MIN_MIREDS, MAX_MIREDS, temp.min, temp.max)))
        return [_command(code, value), _command("work_mode", "white")]

    def set_level(self, device: TuyaDevice, level: float) -> List[Command]:
        color_mode = device.state.get("colorMode") or "CT"
        if color_mode != "CT":
            return self.set_color(device, device.state.get("hue", 0), device.state.get("saturation", 0), level)
        functions = self._catalog.functions(device)
        code = first_code(functions, _BRIGHTNESS_CODES)
        bright = lookup(functions, code)
        if bright is None:
            return []
        value = int(math.ceil(remap(level, 0, 100, bright.min, bright.max)))
        return [_command(code, value)]

    def set_speed(self, device: TuyaDevice, speed: str) -> List[Command]:
        functions = self._catalog.functions(device)
        code = first_code(functions, codes_for(FunctionCategory.FAN_SPEED))
        if not code:
            return []
        if speed in ("on", "off"):
            switch = first_code(functions, _SWITCH_CODES) or "switch"
            return [_command(switch, speed == "on")]
        if speed == "auto":
            _LOGGER.warning("Speed level auto is not supported")
            return []
        if speed not in SPEED_NAMES:
            _LOGGER.warning("Unknown fan speed %s for %s", speed, device.name)
            return []
        spec = lookup(functions, code)
        index = SPEED_NAMES.index(speed)
        if spec.kind is ValueKind.ENUM and spec.range:
            value = spec.range[int(remap(index, 0, len(SPEED_NAMES) - 1, 0, len(spec.range) - 1))]
        elif spec.kind is ValueKind.INTEGER:
            value = _to_int(remap(index, 0, len(SPEED_NAMES) - 1, spec.min or 1, spec.max or 100))
        else:
            _LOGGER.warning("Unknown fan speed function type %s", spec)
            return []
        return [_command(code, value)]

    def cycle_speed(self, device: TuyaDevice) -> List[Command]:
        current = device.state.get("speed")
        return self.set_speed(device, _SPEED_CYCLE.get(current, "low"))


def _color_domain(functions: Dict[str, FunctionSpec], code: str) -> Optional[FunctionSpec]:
    color = lookup(functions, code)
    if color is not None and not color.is_color:
        color = lookup({}, code)
    if color is None or not color.is_color:
        return None
    return color


def _to_int(value: float) -> int:
    return int(round_half_up(value))


@dataclass
class _LevelChange:
    delta: int
    handle: Any = None


class LevelChangeRepeater:
    """Step a device's level every interval until stopped or saturated.

    Each tick re-reads the mirrored level, clamps it and issues a new level
    command, then re-arms itself. ``stop`` cancels the pending tick.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        set_level: Callable[[TuyaDevice, int], Awaitable[Any]],
        interval: float = LEVEL_CHANGE_INTERVAL,
        step: int = LEVEL_CHANGE_STEP,
    ):
        self._scheduler = scheduler
        self._set_level = set_level
        self._interval = interval
        self._step = step
        self._lock = threading.Lock()
        self._pending: Dict[str, _LevelChange] = {}

    def is_active(self, device_id: str) -> bool:
        with self._lock:
            return device_id in self._pending

    def start(self, device: TuyaDevice, direction: str) -> None:
        entry = _LevelChange(delta=-self._step if direction == "down" else self._step)
        with self._lock:
            previous = self._pending.pop(device.id, None)
            if previous is not None and previous.handle is not None:
                previous.handle.cancel()
            self._pending[device.id] = entry
            entry.handle = self._scheduler.run_after(self._interval, self._tick, device, entry)
        _LOGGER.info("Starting level change %s for %s", direction, device.name)

    def stop(self, device_id: str) -> None:
        with self._lock:
            entry = self._pending.pop(device_id, None)
        if entry is not None:
            if entry.handle is not None:
                entry.handle.cancel()
            _LOGGER.info("Stopping level change for %s", device_id)

    def cancel_all(self) -> None:
        with self._lock:
            entries = list(self._pending.values())
            self._pending.clear()
        for entry in entries:
            if entry.handle is not None:
                entry.handle.cancel()

    async def _tick(self, device: TuyaDevice, entry: _LevelChange) -> None:
        with self._lock:
            if self._pending.get(device.id) is not entry:
                return
        level = int(device.state.get("level") or 0) + entry.delta
        level = max(0, min(100, level))
        await self._set_level(device, level)
        if level <= 0 or level >= 100:
            self.stop(device.id)
            return
        with self._lock:
            if self._pending.get(device.id) is entry:
                entry.handle = self._scheduler.run_after(self._interval, self._tick, device, entry)
