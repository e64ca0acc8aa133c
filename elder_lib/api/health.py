# --- elder_lib/api/health.py ---
import logging
import sqlite3
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

bp = Blueprint("health", __name__)
log = logging.getLogger("elder.api")


@bp.route("/health", methods=["GET"])
def health_check():
    """Reports database reachability and whether the spells schema is current."""
    storage = current_app.storage
    checks = {"database": "ok", "spellClassField": "ok"}
    details = {}

    try:
        storage.ping()
    except sqlite3.Error as e:
        checks["database"] = "error"
        details["database"] = str(e) or "Unknown database error"

    try:
        if not storage.has_spell_class_column():
            raise sqlite3.OperationalError("no such column: spell_class")
    except sqlite3.Error as e:
        checks["spellClassField"] = "error"
        details["spellClassField"] = str(e) or "Unknown spellClass runtime error"

    status = "ok" if all(value == "ok" for value in checks.values()) else "degraded"
    payload = {
        "status": status,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "checks": checks,
    }
    if details:
        log.warning("Health check degraded: %s", details)
        payload["details"] = details
    return jsonify(payload), 200 if status == "ok" else 503
