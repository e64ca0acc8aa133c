#!/usr/bin/env python3
"""
elder_admin: Maintenance commands for the Elder Dungeons database.

Commands:
- sync-reference: Mirror the spell reference table from CSV files.
- check-encoding / repair-encoding: Find and re-translate Portuguese
  descriptions that carry broken characters.
- seed-ui-texts / seed-attributes / seed-races: Load the bundled content.
"""

import argparse
import json
import logging
import os
import sys

import requests
from dotenv import load_dotenv
from pydantic import ValidationError

from core.llm_utils import LLMConfigError, LLMServiceError, query_chat_llm
from core.log_utils import setup_logging
from elder_lib.app import create_app
from elder_lib.constants import PROMPT_REGISTRY
from elder_lib.schemas import CORRUPTED_CHAR
from elder_lib.seed_data import seed_attributes, seed_races, seed_ui_texts
from elder_lib.services.reference_service import ReferenceCsvError

log = logging.getLogger("elder_admin")


# --- Command Handlers ---
def handle_sync_reference(args, app) -> int:
    log_sync = logging.getLogger("elder_admin.sync")
    path = args.path or app.config["REFERENCE_CSV_DIR"]
    try:
        if os.path.isdir(path):
            result = app.reference_service.sync_reference_from_csv(csv_dir=path)
        else:
            result = app.reference_service.sync_reference_from_csv(csv_path=path)
    except (ReferenceCsvError, ValidationError, OSError) as e:
        log_sync.error("Reference sync failed: %s", e)
        return 1
    print(json.dumps(result.to_dict(), indent=2))
    return 0


def handle_check_encoding(args, app) -> int:
    rows = app.storage.find_corrupted_spells()
    report = [{"id": row["id"], "name": row["name"]} for row in rows]
    print(json.dumps(report, ensure_ascii=False, indent=2))
    return 0


def translate_to_pt_br(app, text: str) -> str:
    return query_chat_llm(
        [
            {"role": "system", "content": PROMPT_REGISTRY["TRANSLATE_PT_BR"]},
            {"role": "user", "content": text},
        ],
        app.config["LLM_API_URL"],
        app.config["LLM_API_KEY"],
        app.config["LLM_MODEL"],
        temperature=0.2,
    ).strip()


def handle_repair_encoding(args, app) -> int:
    log_enc = logging.getLogger("elder_admin.encoding")
    rows = app.storage.find_corrupted_spells()
    updated = 0
    for row in rows:
        try:
            translated = translate_to_pt_br(app, row["description_original"])
        except LLMConfigError as e:
            log_enc.error("%s", e)
            return 1
        except (LLMServiceError, requests.RequestException) as e:
            log_enc.warning("Translation failed for spell %d (%s): %s", row["id"], row["name"], e)
            continue
        if not translated or CORRUPTED_CHAR in translated:
            log_enc.warning("Translation for spell %d is still corrupted; skipped.", row["id"])
            continue
        if app.storage.update_spell_pt_br(row["id"], translated):
            updated += 1
            log_enc.info("Repaired spell %d (%s).", row["id"], row["name"])
    print(f"{updated}/{len(rows)}")
    return 0


def handle_seed_ui_texts(args, app) -> int:
    print(f"{seed_ui_texts(app.ui_text_service)} UI texts")
    return 0


def handle_seed_attributes(args, app) -> int:
    print(f"{seed_attributes(app.storage)} attributes")
    return 0


def handle_seed_races(args, app) -> int:
    print(f"{seed_races(app.storage)} races")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Elder Dungeons maintenance commands.")
    parser.add_argument(
        "--config", metavar="FILE", default=None, help="Settings file (INI). Default: ~/.elder/elder.cfg"
    )
    parser.add_argument(
        "--database", metavar="FILE", default=None, help="SQLite database. Default: ~/.elder/elder.db"
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
        help="Enable DEBUG logging (all,sync,encoding,seed).",
    )

    # --- Subparsers ---
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_sync = subparsers.add_parser(
        "sync-reference",
        help="Mirror the spell reference table from CSV.",
        description="Mirror the spell reference table from a CSV file or a directory of CSV files.",
    )
    p_sync.add_argument(
        "path", nargs="?", default=None, help="CSV file or directory. Default: REFERENCE_CSV_DIR."
    )
    p_sync.set_defaults(func=handle_sync_reference)

    p_check = subparsers.add_parser(
        "check-encoding", help="List spells whose Portuguese description is corrupted."
    )
    p_check.set_defaults(func=handle_check_encoding)

    p_repair = subparsers.add_parser(
        "repair-encoding", help="Re-translate corrupted Portuguese descriptions with the LLM."
    )
    p_repair.set_defaults(func=handle_repair_encoding)

    p_ui = subparsers.add_parser("seed-ui-texts", help="Upsert the bundled public UI strings.")
    p_ui.set_defaults(func=handle_seed_ui_texts)

    p_attr = subparsers.add_parser(
        "seed-attributes", help="Upsert the six core attributes with their translations."
    )
    p_attr.set_defaults(func=handle_seed_attributes)

    p_races = subparsers.add_parser("seed-races", help="Upsert the bundled races and abilities.")
    p_races.set_defaults(func=handle_seed_races)
    return parser


def main(argv=None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    setup_logging(
        project_name="elder_admin",
        level=logging.INFO if args.verbose else logging.WARNING,
        color_logs=args.color_logs,
        debug_topics=args.debug_topics,
        include_projects=["elder"],
        log_file=args.log_file,
    )

    config_overrides = {
        key: value
        for key, value in {"CONFIG_PATH": args.config, "DATABASE": args.database}.items()
        if value is not None
    }
    try:
        app = create_app(config_overrides)
    except Exception as e:
        log.critical("Failed to open the Elder Dungeons database: %s", e, exc_info=True)
        return 1
    return args.func(args, app)


if __name__ == "__main__":
    sys.exit(main())
