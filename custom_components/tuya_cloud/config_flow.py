"""Config flow for Tuya cloud integration."""

import logging
import voluptuous as vol  # pyright: ignore[reportMissingImports]

from homeassistant import config_entries  # type: ignore
import homeassistant.helpers.config_validation as cv  # type: ignore
from homeassistant.core import callback  # type: ignore

from .const import (
    APP_SCHEMAS,
    CONF_ACCESS_ID,
    CONF_ACCESS_KEY,
    CONF_APP_SCHEMA,
    CONF_COUNTRY,
    CONF_LANGUAGE,
    CONF_PASSWORD,
    CONF_USERNAME,
    DEFAULT_APP_SCHEMA,
    DEFAULT_COUNTRY,
    DEFAULT_LANGUAGE,
    DOMAIN,
    LANGUAGES,
)
from .countries import country_names, resolve_country

_LOGGER = logging.getLogger(__name__)


@config_entries.HANDLERS.register(DOMAIN)
class TuyaCloudFlowHandler(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Tuya cloud."""

    VERSION = 1
    CONNECTION_CLASS = config_entries.CONN_CLASS_CLOUD_PUSH

    async def async_step_user(self, user_input=None):
        """Handle the initial step."""
        errors = {}
        if user_input is not None:
            if resolve_country(user_input.get(CONF_COUNTRY)) is None:
                errors[CONF_COUNTRY] = "unknown_country"
            else:
                await self.async_set_unique_id(f"{user_input[CONF_ACCESS_ID]}:{user_input[CONF_USERNAME]}")
                self._abort_if_unique_id_configured()
                return self.async_create_entry(title=user_input[CONF_USERNAME], data=dict(user_input))

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_ACCESS_ID): cv.string,
                    vol.Required(CONF_ACCESS_KEY): cv.string,
                    vol.Required(CONF_APP_SCHEMA, default=DEFAULT_APP_SCHEMA): vol.In(APP_SCHEMAS),
                    vol.Required(CONF_USERNAME): cv.string,
                    vol.Required(CONF_PASSWORD): cv.string,
                    vol.Required(CONF_COUNTRY, default=DEFAULT_COUNTRY): vol.In(country_names()),
                }
            ),
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Get the options flow."""
        return TuyaCloudOptionsFlowHandler(config_entry)


class TuyaCloudOptionsFlowHandler(config_entries.OptionsFlow):
    """Handle options."""

    def __init__(self, config_entry):
        # Do not assign to self.config_entry (deprecated in HA 2025.12)
        self._entry = config_entry

    @property
    def entry(self):
        return getattr(self, "config_entry", self._entry)

    async def async_step_init(self, user_input=None):
        if user_input is not None:
            return self.async_create_entry(title="", data=user_input)

        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Required(
                        CONF_LANGUAGE,
                        default=self.entry.options.get(CONF_LANGUAGE, DEFAULT_LANGUAGE),
                    ): vol.In(LANGUAGES),
                }
            ),
        )
