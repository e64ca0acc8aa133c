#!/usr/bin/env python3
"""elder: Main entry point for the Elder Dungeons web server."""

import os
import logging
import sys
import argparse

from dotenv import load_dotenv

from elder_lib.app import APP_DIR, create_app
from core.log_utils import setup_logging


def main():
    """Initializes and runs the Elder Dungeons Flask application."""
    # --- Basic Setup ---
    os.makedirs(APP_DIR, exist_ok=True)
    load_dotenv()
    log = logging.getLogger("elder")

    # --- Argument Parsing ---
    parser = argparse.ArgumentParser(description="Elder Dungeons rules site and spell admin.")
    g_server = parser.add_argument_group("Server")
    g_server.add_argument("--host", default="127.0.0.1", help="Bind address. Default: 127.0.0.1")
    g_server.add_argument("--port", type=int, default=5000, help="Bind port. Default: 5000")
    g_server.add_argument(
        "--config",
        metavar="FILE",
        default=None,
        help="Settings file (INI). Default: ~/.elder/elder.cfg",
    )
    g_server.add_argument(
        "--database", metavar="FILE", default=None, help="SQLite database. Default: ~/.elder/elder.db"
    )

    g_llm = parser.add_argument_group("LLM Configuration")
    g_llm.add_argument(
        "--llm-url",
        type=str,
        default=None,
        help="OpenAI-compatible API base URL. Default: https://api.openai.com/v1",
    )
    g_llm.add_argument(
        "--llm-model", type=str, default=None, help="Spell parsing model. Default: gpt-4.1-mini"
    )

    g_log = parser.add_argument_group("Logging & Output")
    g_log.add_argument(
        "-v", "--verbose", action="store_true", help="Enable INFO logging for progress."
    )
    g_log.add_argument(
        "--color-logs", action="store_true", help="Enable colored logging output."
    )
    g_log.add_argument(
        "--log-file",
        metavar="FILE",
        default=None,
        help="Redirect all logging output to a specified file.",
    )
    g_log.add_argument(
        "-d",
        "--debug",
        dest="debug_topics",
        metavar="TOPICS",
        help="Enable DEBUG logging (all,api,app,auth,config,hydrate,icon,llm,parse,reference,storage,web).",
    )
    g_log.add_argument(
        "--raw-llm-response",
        action="store_true",
        default=None,
        help="Log the full, raw response from the LLM for debugging.",
    )
    args = parser.parse_args()

    # --- Logging Setup ---
    setup_logging(
        project_name="elder",
        level=logging.INFO if args.verbose else logging.WARNING,
        color_logs=args.color_logs,
        debug_topics=args.debug_topics,
        log_file=args.log_file,
    )

    config_overrides = {
        key: value
        for key, value in {
            "CONFIG_PATH": args.config,
            "DATABASE": args.database,
            "LLM_API_URL": args.llm_url,
            "LLM_MODEL": args.llm_model,
            "RAW_LLM_RESPONSE": args.raw_llm_response,
        }.items()
        if value is not None
    }

    # --- App Creation ---
    try:
        app = create_app(config_overrides)
        log.info("Elder Dungeons application created successfully.")
        log.info("Database is located at: %s", app.config["DATABASE"])
        log.info("Using LLM API at: %s", app.config["LLM_API_URL"])
    except Exception as e:
        log.critical("Failed to create the Elder Dungeons application: %s", e, exc_info=True)
        sys.exit(1)

    # --- Run Server ---
    try:
        log.info("Starting Elder Dungeons server at http://%s:%d...", args.host, args.port)
        log.info("Press CTRL+C to stop the server.")
        from waitress import serve

        serve(app, host=args.host, port=args.port, channel_timeout=600)
    except KeyboardInterrupt:
        log.info("\nServer stopped by user. Exiting.")
        sys.exit(0)
    except Exception as e:
        log.critical("The Flask server failed to run: %s", e, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
