"""The Tuya cloud integration."""
import logging
import uuid

import homeassistant.helpers.config_validation as cv  # type: ignore
from homeassistant.config_entries import ConfigEntry  # type: ignore
from homeassistant.core import HomeAssistant  # type: ignore
from homeassistant.helpers.dispatcher import async_dispatcher_send  # type: ignore

from .api import TuyaClient
from .const import (
    CONF_ACCESS_ID,
    CONF_ACCESS_KEY,
    CONF_APP_SCHEMA,
    CONF_COUNTRY,
    CONF_LANGUAGE,
    CONF_LINK_ID,
    CONF_PASSWORD,
    CONF_USERNAME,
    DEFAULT_APP_SCHEMA,
    DEFAULT_LANGUAGE,
    DOMAIN,
    SIGNAL_DEVICE_EVENTS,
    SIGNAL_HUB_STATE,
)
from .countries import resolve_country
from .models import HubState
from .session import TuyaSession

_LOGGER = logging.getLogger(__name__)

# This integration is config-entry only (no YAML options)
CONFIG_SCHEMA = cv.config_entry_only_config_schema(DOMAIN)


async def async_setup(hass: HomeAssistant, config: dict):
    """Set up the Tuya cloud integration (YAML not supported)."""
    hass.data.setdefault(DOMAIN, {})
    return True


def _session_from_entry(entry: ConfigEntry, link_id: str) -> TuyaSession:
    data = entry.data
    country = resolve_country(data.get(CONF_COUNTRY))
    session = TuyaSession(
        access_id=data.get(CONF_ACCESS_ID, ""),
        access_key=data.get(CONF_ACCESS_KEY, ""),
        username=data.get(CONF_USERNAME, ""),
        password=data.get(CONF_PASSWORD, ""),
        app_schema=data.get(CONF_APP_SCHEMA, DEFAULT_APP_SCHEMA),
        lang=entry.options.get(CONF_LANGUAGE, DEFAULT_LANGUAGE),
        link_id=link_id,
    )
    if country is not None:
        session.country_code = country.country_code
        session.endpoint = country.endpoint
    return session


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry):
    """Set up Tuya cloud from a config entry."""
    hass.data.setdefault(DOMAIN, {})

    # The correlation id must survive restarts
    link_id = entry.data.get(CONF_LINK_ID)
    if not link_id:
        link_id = str(uuid.uuid4())
        hass.config_entries.async_update_entry(entry, data={**entry.data, CONF_LINK_ID: link_id})

    session = _session_from_entry(entry, link_id)
    hub = await TuyaClient.create(session, hass)
    hass.data[DOMAIN][entry.entry_id] = {"hub": hub}

    def _device_events(device, events):
        async_dispatcher_send(hass, SIGNAL_DEVICE_EVENTS.format(device.id), device, events)

    def _hub_state(state, description):
        async_dispatcher_send(hass, SIGNAL_HUB_STATE, state, description, hub.device_count)

    entry.async_on_unload(hub.add_listener(_device_events))
    entry.async_on_unload(hub.add_state_listener(_hub_state))
    entry.async_on_unload(entry.add_update_listener(_async_update_listener))

    if session.country_code is None:
        _LOGGER.error("Country not set in configuration")
        hub.set_state(HubState.ERROR, "Country not set in configuration")
        return True

    await hub.authenticate()
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry):
    """Unload a config entry."""
    hub = hass.data.get(DOMAIN, {}).pop(entry.entry_id, {}).get("hub")
    if hub:
        await hub.close()
    return True


async def _async_update_listener(hass: HomeAssistant, entry: ConfigEntry):
    await hass.config_entries.async_reload(entry.entry_id)
