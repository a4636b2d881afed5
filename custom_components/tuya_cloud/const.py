"""Constants for the Tuya cloud integration."""

DOMAIN = "tuya_cloud"

CONF_ACCESS_ID = "access_id"
CONF_ACCESS_KEY = "access_key"
CONF_APP_SCHEMA = "app_schema"
CONF_USERNAME = "username"
CONF_PASSWORD = "password"
CONF_COUNTRY = "country"
CONF_LANGUAGE = "language"
# Persisted session correlation id (request nonce and realtime link id)
CONF_LINK_ID = "link_id"

APP_SCHEMAS = {
    "tuyaSmart": "Tuya Smart Life App",
    "smartlife": "Smart Life App",
}
DEFAULT_APP_SCHEMA = "tuyaSmart"
DEFAULT_COUNTRY = "United States"
DEFAULT_LANGUAGE = "en"
LANGUAGES = ["en", "zh"]

DEFAULT_ENDPOINT = "https://openapi.tuyaus.com"
DRIVER_VERSION = "0.2"
DEV_LANG = "python"
DEV_CHANNEL = "homeassistant"
SIGN_METHOD = "HMAC-SHA256"

# Timings (seconds)
REQUEST_TIMEOUT = 5
TOKEN_REFRESH_MARGIN = 60
AUTH_RETRY_BASE = 60
AUTH_RETRY_JITTER = 300
RECONNECT_BASE = 15
RECONNECT_JITTER = 45
SUBSCRIBE_DELAY = 1.0
PAGE_DELAY = 1.0
COMMAND_FAILURE_RECONNECT_DELAY = 5
LEVEL_CHANGE_INTERVAL = 1.0
LEVEL_CHANGE_STEP = 10
VIBRATION_CLEAR_DELAY = 5

# Color temperature bounds in mireds (6536K .. 2000K)
MIN_MIREDS = 153
MAX_MIREDS = 500

OFFLINE_INDICATOR = " [Offline]"

SPEED_NAMES = ("low", "medium-low", "medium", "medium-high", "high")

SIGNAL_DEVICE_EVENTS = f"{DOMAIN}_device_events_{{}}"
SIGNAL_HUB_STATE = f"{DOMAIN}_hub_state"

# Value domains used when a device does not document a code
DEFAULT_DOMAINS = {
    "battery_percentage": {"min": 0, "max": 100, "scale": 0, "step": 1, "unit": "%", "type": "Integer"},
    "bright_value": {"min": 0, "max": 100, "scale": 0, "step": 1, "type": "Integer"},
    "bright_value_v2": {"min": 0, "max": 100, "scale": 0, "step": 1, "type": "Integer"},
    "co2": {"min": 0, "max": 1000, "scale": 1, "step": 1, "type": "Integer"},
    "fanSpeed": {"min": 1, "max": 100, "scale": 0, "step": 1, "type": "Integer"},
    "fanSpeedPercent": {"min": 1, "max": 100, "scale": 0, "step": 1, "type": "Integer"},
    "temp_value": {"min": 0, "max": 100, "scale": 0, "step": 1, "type": "Integer"},
    "temp_value_v2": {"min": 0, "max": 100, "scale": 0, "step": 1, "type": "Integer"},
    "colour_data": {
        "type": "Json",
        "h": {"min": 1, "scale": 0, "max": 360, "step": 1, "type": "Integer"},
        "s": {"min": 1, "scale": 0, "max": 255, "step": 1, "type": "Integer"},
        "v": {"min": 1, "scale": 0, "max": 255, "step": 1, "type": "Integer"},
    },
    "colour_data_v2": {
        "type": "Json",
        "h": {"min": 1, "scale": 0, "max": 360, "step": 1, "type": "Integer"},
        "s": {"min": 1, "scale": 0, "max": 1000, "step": 1, "type": "Integer"},
        "v": {"min": 1, "scale": 0, "max": 1000, "step": 1, "type": "Integer"},
    },
    "humidity_value": {"min": 0, "max": 100, "scale": 0, "step": 1, "type": "Integer"},
    "temp_current": {"min": -400, "max": 2000, "scale": 1, "step": 1, "unit": "°C", "type": "Integer"},
    "va_humidity": {"min": 0, "max": 1000, "scale": 1, "step": 1, "type": "Integer"},
    "va_temperature": {"min": 0, "max": 1000, "scale": 1, "step": 1, "type": "Integer"},
}

# Scene switch raw action -> button event. The second "double_click"
# entry of the TS0044 layout repeats the TS004F one, so a single key remains.
SCENE_SWITCH_ACTIONS = {
    "single_click": "pushed",  # TS004F
    "double_click": "doubleTapped",
    "long_press": "held",
    "click": "pushed",  # TS0044
    "press": "held",
}

# Scene switch code -> button number (TS004F numbering, see quirks for TS0044)
SCENE_SWITCH_BUTTONS = {
    "switch_mode2": "2",
    "switch_mode3": "3",
    "switch_mode4": "4",
    "switch1_value": "4",
    "switch2_value": "3",
    "switch3_value": "1",
    "switch4_value": "2",
}

# Device categories whose bright_value reports illuminance, not a dimmer level
SENSOR_CATEGORIES = {"ldcg", "wsdcg", "zd"}
