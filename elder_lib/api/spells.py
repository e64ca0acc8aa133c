# --- elder_lib/api/spells.py ---
import logging
import math
from types import SimpleNamespace

from flask import Blueprint, current_app, jsonify, request
from pydantic.alias_generators import to_camel

from ..auth import admin_or_jwt_required
from ..constants import SAVING_THROW_OUTCOMES, SPELL_LIST_PAGE_SIZE
from ..services.storage_service import spell_row_to_dict
from ..spell_rules import build_spell_dedupe_key, merge_spell_update

bp = Blueprint("spells", __name__)
log = logging.getLogger("elder.api")

HIDDEN_COLUMNS = ("dedupe_key", "created_at", "updated_at")


def spell_to_wire(row) -> dict:
    """Converts a spells row to the camelCase shape returned by the API."""
    data = spell_row_to_dict(row)
    for column in HIDDEN_COLUMNS:
        data.pop(column, None)
    data["spell_class"] = "divine" if data.get("spell_class") == "divine" else "arcane"
    if data.get("saving_throw_outcome") not in SAVING_THROW_OUTCOMES:
        data["saving_throw_outcome"] = None
    return {to_camel(key): value for key, value in data.items()}


def parse_list_filters(args) -> dict:
    """Reads the list query string; invalid values are ignored."""
    spell_class = (args.get("spellClass") or "").strip().lower()
    raw_level = (args.get("level") or "").strip()
    level = int(raw_level) if raw_level.isdecimal() and int(raw_level) <= 9 else None
    return {
        "name": (args.get("name") or "").strip(),
        "spell_class": spell_class if spell_class in ("arcane", "divine") else None,
        "group": (args.get("group") or "").strip(),
        "level": level,
    }


def parse_page(args) -> int:
    raw = (args.get("page") or "").strip()
    return int(raw) if raw.isdecimal() and int(raw) >= 1 else 1


def list_spells_page(storage, filters: dict, page: int) -> dict:
    """Runs a filtered, paginated listing; the page is clamped to the last one."""
    total = storage.count_spells(filters)
    total_pages = max(1, math.ceil(total / SPELL_LIST_PAGE_SIZE))
    safe_page = min(page, total_pages)
    rows = storage.find_spells(filters, SPELL_LIST_PAGE_SIZE, (safe_page - 1) * SPELL_LIST_PAGE_SIZE)
    items = [
        {
            "id": row["id"],
            "name": row["name"],
            "level": row["level"],
            "spellClass": "divine" if row["spell_class"] == "divine" else "arcane",
            "school": row["school"],
            "sphere": row["sphere"],
            "source": row["source"],
            "updatedAt": row["updated_at"],
        }
        for row in rows
    ]
    return {
        "items": items,
        "page": safe_page,
        "pageSize": SPELL_LIST_PAGE_SIZE,
        "total": total,
        "totalPages": total_pages,
    }


def apply_spell_update(storage, spell_id: int, body: dict):
    """
    Merges a partial update into a stored spell and writes it.
    Returns:
        bool | None: None when the spell does not exist, False on a dedupe
        key conflict, True when saved.
    """
    row = storage.get_spell(spell_id)
    if row is None:
        return None
    merged = merge_spell_update(spell_row_to_dict(row), body or {})
    merged["dedupe_key"] = build_spell_dedupe_key(SimpleNamespace(**merged))
    return storage.update_spell(spell_id, merged)


@bp.route("/spells", methods=["GET"])
@admin_or_jwt_required
def list_spells():
    """Lists stored spells with filters and pagination."""
    result = list_spells_page(
        current_app.storage, parse_list_filters(request.args), parse_page(request.args)
    )
    return jsonify(result)


@bp.route("/spells/<spell_id>", methods=["GET", "PUT"])
@admin_or_jwt_required
def spell_detail(spell_id):
    """Returns or partially updates a single spell."""
    if not spell_id.isdecimal() or int(spell_id) <= 0:
        return jsonify({"error": "Invalid spell id"}), 400
    spell_id = int(spell_id)
    storage = current_app.storage

    if request.method == "GET":
        row = storage.get_spell(spell_id)
        if row is None:
            return jsonify({"error": "Spell not found"}), 404
        prev_id, next_id = storage.get_adjacent_spell_ids(spell_id)
        return jsonify({"item": spell_to_wire(row), "prevSpellId": prev_id, "nextSpellId": next_id})

    body = request.get_json(silent=True)
    saved = apply_spell_update(storage, spell_id, body if isinstance(body, dict) else {})
    if saved is None:
        return jsonify({"error": "Spell not found"}), 404
    if not saved:
        return jsonify({"error": "Spell já existe com os mesmos dados principais"}), 409
    log.info("Updated spell id %d.", spell_id)
    return jsonify({"id": spell_id, "updated": True})
