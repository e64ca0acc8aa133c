# --- elder_lib/services/config_service.py ---
import configparser
import logging

log = logging.getLogger("elder.config")

# (section, option) -> Flask config key
OPTION_KEYS = {
    ("LLM", "api_url"): "LLM_API_URL",
    ("LLM", "api_key"): "LLM_API_KEY",
    ("LLM", "model"): "LLM_MODEL",
    ("LLM", "icon_text_model"): "LLM_ICON_TEXT_MODEL",
    ("LLM", "image_model"): "LLM_IMAGE_MODEL",
    ("LLM", "web_lookup"): "WEB_LOOKUP_ENABLED",
    ("Admin", "username"): "ADMIN_USERNAME",
    ("Admin", "password"): "ADMIN_PASSWORD",
    ("Admin", "jwt_secret"): "JWT_SECRET",
    ("Icons", "generate_on_parse"): "ICON_ON_PARSE",
    ("Reference", "csv_dir"): "REFERENCE_CSV_DIR",
}

BOOLEAN_KEYS = frozenset({"WEB_LOOKUP_ENABLED", "ICON_ON_PARSE", "RAW_LLM_RESPONSE"})


def as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


class ConfigService:
    """Manages reading from and writing to the elder.cfg file."""

    def __init__(self, config_path: str):
        self.config_path = config_path
        self.defaults = {
            "LLM": {
                "api_url": "https://api.openai.com/v1",
                "api_key": "",
                "model": "gpt-4.1-mini",
                "icon_text_model": "gpt-4.1-mini",
                "image_model": "gpt-image-1",
                "web_lookup": "true",
            },
            "Admin": {
                "username": "admin",
                "password": "",
                "jwt_secret": "",
            },
            "Icons": {
                "generate_on_parse": "false",
            },
            "Reference": {
                "csv_dir": "data",
            },
        }

    def get_settings(self) -> dict:
        """Reads settings from the config file, applying defaults if missing."""
        config = configparser.ConfigParser()
        # Apply defaults first
        for section, values in self.defaults.items():
            config[section] = values

        # Read existing file to override defaults
        if not config.read(self.config_path):
            log.info("Config file not found at %s. Creating with defaults.", self.config_path)
            self.save_settings(self._config_to_dict(config))

        return self._config_to_dict(config)

    def save_settings(self, settings: dict):
        """Saves a dictionary of settings to the config file."""
        config = configparser.ConfigParser()
        for section, values in settings.items():
            config[section] = {k: str(v) for k, v in values.items()}

        try:
            with open(self.config_path, "w") as configfile:
                config.write(configfile)
            log.info("Settings successfully saved to %s", self.config_path)
        except IOError as e:
            log.error("Failed to write settings to %s: %s", self.config_path, e)

    def to_app_config(self, settings: dict) -> dict:
        """
        Flattens INI settings into Flask config keys.
        Empty values are left out so they never mask a default.
        """
        flat = {}
        for (section, option), key in OPTION_KEYS.items():
            value = settings.get(section, {}).get(option)
            if value is None or value == "":
                continue
            flat[key] = as_bool(value) if key in BOOLEAN_KEYS else value
        log.debug("Config file provided keys: %s", ", ".join(sorted(flat)))
        return flat

    def _config_to_dict(self, config: configparser.ConfigParser) -> dict:
        """Converts a ConfigParser object to a nested dictionary."""
        return {s: dict(config.items(s)) for s in config.sections()}
