# --- elder_lib/app.py ---
import os
import logging

from flask import Flask, jsonify, request, send_from_directory

from .services.storage_service import StorageService
from .services.config_service import BOOLEAN_KEYS, ConfigService, as_bool
from .services.reference_service import ReferenceService
from .services.web_lookup_service import WebLookupService
from .services.icon_service import IconService
from .services.parse_service import SpellParseService
from .services.hydrate_service import HydrateService
from .services.ui_text_service import UiTextService

APP_DIR = os.path.join(os.path.expanduser("~"), ".elder")
ASSETS_DIR = os.path.join(APP_DIR, "assets")

# Keys that may be supplied through the environment (or a .env file).
ENV_KEYS = (
    "DATABASE",
    "ASSETS_PATH",
    "ASSETS_URL",
    "SECRET_KEY",
    "JWT_SECRET",
    "ADMIN_USERNAME",
    "ADMIN_PASSWORD",
    "LLM_API_URL",
    "LLM_API_KEY",
    "LLM_MODEL",
    "LLM_ICON_TEXT_MODEL",
    "LLM_IMAGE_MODEL",
    "ICON_ON_PARSE",
    "REFERENCE_CSV_DIR",
    "WEB_LOOKUP_ENABLED",
    "RAW_LLM_RESPONSE",
)


def _environment_config() -> dict:
    values = {}
    for key in ENV_KEYS:
        value = os.environ.get(key)
        if value is None or value == "":
            continue
        values[key] = as_bool(value) if key in BOOLEAN_KEYS else value
    return values


def create_app(config_overrides=None):
    """
    Creates and configs an instance of the Flask application.

    Settings are layered: built-in defaults, then the INI file at CONFIG_PATH,
    then environment variables, then `config_overrides`.
    """
    app = Flask(__name__, instance_relative_config=True)
    log = logging.getLogger("elder.app")
    config_overrides = config_overrides or {}

    # --- Configuration ---
    app.config.from_mapping(
        SECRET_KEY="dev",
        DATABASE=os.path.join(APP_DIR, "elder.db"),
        CONFIG_PATH=os.path.join(APP_DIR, "elder.cfg"),
        ASSETS_PATH=ASSETS_DIR,
        ASSETS_URL="/assets",
        JWT_SECRET="",
        ADMIN_USERNAME="admin",
        ADMIN_PASSWORD="",
        LLM_API_URL="https://api.openai.com/v1",
        LLM_API_KEY="",
        LLM_MODEL="gpt-4.1-mini",
        LLM_ICON_TEXT_MODEL="gpt-4.1-mini",
        LLM_IMAGE_MODEL="gpt-image-1",
        ICON_ON_PARSE=False,
        REFERENCE_CSV_DIR="data",
        WEB_LOOKUP_ENABLED=True,
        RAW_LLM_RESPONSE=False,
    )

    config_path = (
        config_overrides.get("CONFIG_PATH")
        or os.environ.get("CONFIG_PATH")
        or app.config["CONFIG_PATH"]
    )
    app.config["CONFIG_PATH"] = config_path
    os.makedirs(os.path.dirname(os.path.abspath(config_path)), exist_ok=True)
    app.config_service = ConfigService(config_path)
    app.config.update(app.config_service.to_app_config(app.config_service.get_settings()))

    env_config = _environment_config()
    if env_config:
        app.config.update(env_config)
        log.info("Applied configuration from environment: %s", ", ".join(sorted(env_config)))

    if config_overrides:
        app.config.from_mapping(config_overrides)
        log.info("Applied runtime configuration overrides.")

    # --- Initialize Services ---
    log.info("Initializing application services...")
    try:
        os.makedirs(os.path.dirname(os.path.abspath(app.config["DATABASE"])), exist_ok=True)
        app.storage = StorageService(app.config["DATABASE"])
        app.reference_service = ReferenceService(app.storage)
        app.ui_text_service = UiTextService(app.storage)
        app.web_lookup = WebLookupService(enabled=app.config["WEB_LOOKUP_ENABLED"])
        app.icon_service = IconService(
            app.config["LLM_API_URL"],
            app.config["LLM_API_KEY"],
            app.config["LLM_ICON_TEXT_MODEL"],
            app.config["LLM_IMAGE_MODEL"],
            app.config["ASSETS_PATH"],
            app.config["ASSETS_URL"],
        )
        app.parse_service = SpellParseService(
            app.reference_service,
            app.web_lookup,
            app.icon_service,
            app.config["LLM_API_URL"],
            app.config["LLM_API_KEY"],
            app.config["LLM_MODEL"],
            icon_on_parse=app.config["ICON_ON_PARSE"],
            raw_response_log=app.config["RAW_LLM_RESPONSE"],
        )
        app.hydrate_service = HydrateService(app.storage, app.parse_service, app.web_lookup)
        with app.app_context():
            app.storage.init_db()
        log.info("All services initialized successfully.")
    except Exception as e:
        log.error("Failed to initialize services: %s", e, exc_info=True)
        raise

    # --- Register Blueprints (APIs and pages) ---
    log.info("Registering blueprints...")
    from .api import health, spells, spell_import, spell_reference
    from .web import admin, public

    app.register_blueprint(health.bp, url_prefix="/api")
    app.register_blueprint(spells.bp, url_prefix="/api")
    app.register_blueprint(spell_import.bp, url_prefix="/api")
    app.register_blueprint(spell_reference.bp, url_prefix="/api")
    app.register_blueprint(public.bp)
    app.register_blueprint(admin.bp, url_prefix="/admin")
    log.info("All blueprints registered.")

    # --- Error Handlers ---
    @app.errorhandler(404)
    def handle_not_found(e):
        if request.path.startswith("/api/"):
            return jsonify(error="Not found"), 404
        return public.render_not_found()

    @app.errorhandler(405)
    def handle_method_not_allowed(e):
        response = jsonify(error="Method not allowed")
        response.status_code = 405
        if getattr(e, "valid_methods", None):
            response.headers["Allow"] = ", ".join(
                m for m in e.valid_methods if m not in ("HEAD", "OPTIONS")
            )
        return response

    @app.errorhandler(Exception)
    def handle_exception(e):
        """Catches all unhandled exceptions, logs them, and returns JSON."""
        if hasattr(e, "code") and isinstance(e.code, int) and e.code < 500:
            return jsonify(error=str(e)), e.code
        app.logger.exception("An unhandled exception occurred: %s", e)
        return jsonify(error="An internal server error occurred."), 500

    # --- Asset Serving ---
    @app.route("/assets/<path:filename>")
    def serve_assets(filename):
        """Serves generated spell icons."""
        return send_from_directory(app.config["ASSETS_PATH"], filename)

    return app
