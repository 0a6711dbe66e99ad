import logging
from typing import Any, Dict

from api_clients.base_client import GhostAdminClient
from models.site_settings import SiteSettings, DEFAULT_ACCENT_COLOR
from utils.errors import SchemaError

logger = logging.getLogger("ghost_mailer")


class SettingsClient(GhostAdminClient):

    def fetch(self) -> SiteSettings:
        """
        Reads the site settings list and keeps the few keys the email needs.
        title and description must be strings; accent_color and url fall
        back to defaults when missing or not strings.
        """
        body = self._get("/settings/")
        values = self._to_dict(body)

        for key in ("title", "description"):
            if not isinstance(values.get(key), str):
                logger.error(f"Ghost settings field '{key}' is missing or not a string: {values.get(key)!r}")
                raise SchemaError(f"Ghost settings field '{key}' is missing or not a string")

        accent_color = values.get("accent_color")
        if not isinstance(accent_color, str):
            accent_color = DEFAULT_ACCENT_COLOR

        url = values.get("url")
        if not isinstance(url, str):
            url = self.base_url

        settings = SiteSettings(
            title=values["title"],
            description=values["description"],
            accent_color=accent_color,
            url=url,
        )
        logger.debug(f"Loaded Ghost settings for site '{settings.title}'")
        return settings

    @staticmethod
    def _to_dict(body: Any) -> Dict[str, Any]:
        entries = body.get("settings") if isinstance(body, dict) else None
        if not isinstance(entries, list):
            raise SchemaError("Ghost settings response has no 'settings' list")

        values = {}
        for entry in entries:
            if not isinstance(entry, dict) or not isinstance(entry.get("key"), str):
                raise SchemaError(f"Malformed settings entry: {entry!r}")
            values[entry["key"]] = entry.get("value")
        return values
