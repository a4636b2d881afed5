"""Grouping of raw Tuya codes into logical capability categories."""
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .const import SENSOR_CATEGORIES


class FunctionCategory(Enum):
    BATTERY = "battery"
    BRIGHTNESS = "brightness"
    CO = "co"
    CO2 = "co2"
    CONTROL = "control"
    WORK_STATE = "workState"
    CT = "ct"
    COLOUR = "colour"
    CONTACT = "contact"
    FAN_SPEED = "fanSpeed"
    LIGHT = "light"
    POWER = "power"
    METERING_SWITCH = "meteringSwitch"
    OMNI_SENSOR = "omniSensor"
    PIR = "pir"
    PERCENT_CONTROL = "percentControl"
    SCENE_SWITCH = "sceneSwitch"
    SMOKE = "smoke"
    TEMPERATURE = "temperature"
    TEMPERATURE_SET = "temperatureSet"
    WATER = "water"
    WORK_MODE = "workMode"
    UNMATCHED = "unmatched"


# Codes per category, in command preference order. Declaration order of the
# categories is also the order a status code is evaluated in.
CATEGORY_CODES: Dict[FunctionCategory, Tuple[str, ...]] = {
    FunctionCategory.BATTERY: ("battery_percentage", "va_battery"),
    FunctionCategory.BRIGHTNESS: ("bright_value", "bright_value_v2", "bright_value_1"),
    FunctionCategory.CO: ("co_state",),
    FunctionCategory.CO2: ("co2_value",),
    FunctionCategory.CONTROL: ("control",),
    FunctionCategory.WORK_STATE: ("work_state",),
    FunctionCategory.CT: ("temp_value", "temp_value_v2"),
    FunctionCategory.COLOUR: ("colour_data", "colour_data_v2"),
    FunctionCategory.CONTACT: ("doorcontact_state",),
    FunctionCategory.FAN_SPEED: ("fan_speed",),
    FunctionCategory.LIGHT: ("switch_led", "switch_led_1", "light"),
    FunctionCategory.POWER: (
        "Power", "power", "switch",
        "switch_1", "switch_2", "switch_3", "switch_4", "switch_5", "switch_6",
        "switch_usb1", "switch_usb2", "switch_usb3", "switch_usb4", "switch_usb5", "switch_usb6",
    ),
    FunctionCategory.METERING_SWITCH: (
        "countdown_1", "add_ele", "cur_current", "cur_power", "cur_voltage", "relay_status", "light_mode",
    ),
    FunctionCategory.OMNI_SENSOR: (
        "bright_value", "humidity_value", "va_humidity", "bright_sensitivity",
        "shock_state", "inactive_state", "sensitivity",
    ),
    FunctionCategory.PIR: ("pir",),
    FunctionCategory.PERCENT_CONTROL: ("percent_control",),
    FunctionCategory.SCENE_SWITCH: (
        "switch1_value", "switch2_value", "switch3_value", "switch4_value",
        "switch_mode2", "switch_mode3", "switch_mode4",
    ),
    FunctionCategory.SMOKE: ("smoke_sensor_status",),
    FunctionCategory.TEMPERATURE: ("temp_current", "va_temperature"),
    FunctionCategory.TEMPERATURE_SET: ("temp_set",),
    FunctionCategory.WATER: ("watersensor_state",),
    FunctionCategory.WORK_MODE: ("work_mode",),
}


def _build_index() -> Dict[str, Tuple[FunctionCategory, ...]]:
    index: Dict[str, List[FunctionCategory]] = {}
    for category, codes in CATEGORY_CODES.items():
        for code in codes:
            index.setdefault(code, []).append(category)
    return {code: tuple(categories) for code, categories in index.items()}


_CODE_INDEX = _build_index()


def categories_for(code: str, device_category: Optional[str] = None) -> Tuple[FunctionCategory, ...]:
    """Categories a status code belongs to, in evaluation order.

    Sensor devices report illuminance on ``bright_value``, so for them the
    omni-sensor reading is tried before the dimmer level.
    """
    categories = _CODE_INDEX.get(code)
    if not categories:
        return (FunctionCategory.UNMATCHED,)
    if device_category in SENSOR_CATEGORIES and FunctionCategory.OMNI_SENSOR in categories:
        rest = tuple(c for c in categories if c is not FunctionCategory.OMNI_SENSOR)
        return (FunctionCategory.OMNI_SENSOR,) + rest
    return categories


def codes_for(*categories: FunctionCategory) -> Tuple[str, ...]:
    codes: Tuple[str, ...] = ()
    for category in categories:
        codes += CATEGORY_CODES.get(category, ())
    return codes


def first_code(domains: Mapping[str, object], codes: Iterable[str]) -> Optional[str]:
    """First code of the preference list the device declares."""
    for code in codes:
        if code in domains:
            return code
    return None
