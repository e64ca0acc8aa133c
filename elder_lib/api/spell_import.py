# --- elder_lib/api/spell_import.py ---
import logging

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from ..auth import admin_or_jwt_required
from ..schemas import IconGenerateRequest, IconPromptRequest, SpellPayload, validation_details
from ..spell_rules import build_spell_dedupe_key

bp = Blueprint("spell_import", __name__)
log = logging.getLogger("elder.api")

PARSE_INVALID_MESSAGE = "Invalid payload (entrada ou resposta de parse fora do formato esperado)"
PARSE_UNAVAILABLE_MESSAGE = "OpenAI service is currently unavailable. Please try again later."


def _json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def save_spell(storage, payload: SpellPayload) -> int:
    """Stores a validated spell, merging into an existing one with the same key."""
    return storage.upsert_spell(payload, build_spell_dedupe_key(payload))


@bp.route("/spell-parse", methods=["POST"])
def parse_spell():
    """Parses spell text or an image into a spell preview."""
    try:
        spell = current_app.parse_service.parse_spell(_json_body())
    except ValidationError as e:
        return jsonify({"error": PARSE_INVALID_MESSAGE, "details": validation_details(e)}), 400
    except Exception as e:
        log.error("Spell parse failed: %s", e, exc_info=True)
        return jsonify({"error": PARSE_UNAVAILABLE_MESSAGE}), 503
    return jsonify({"spell": spell.to_wire()})


@bp.route("/spell-save", methods=["POST"])
@admin_or_jwt_required
def save_spell_route():
    """Validates and stores a spell."""
    try:
        payload = SpellPayload.model_validate(_json_body())
        spell_id = save_spell(current_app.storage, payload)
    except ValidationError as e:
        return jsonify({"error": "Invalid payload", "details": validation_details(e)}), 400
    except Exception as e:
        log.error("Failed to save spell: %s", e, exc_info=True)
        return jsonify({"error": str(e) or "Unexpected error"}), 500
    log.info("Saved spell '%s' as id %d.", payload.name, spell_id)
    return jsonify({"id": spell_id}), 201


@bp.route("/spell-icon-prompt", methods=["POST"])
@admin_or_jwt_required
def icon_prompt():
    """Builds the image prompt for a spell icon without rendering it."""
    try:
        spell = IconPromptRequest.model_validate(_json_body())
        prompt = current_app.icon_service.generate_icon_prompt(spell)
    except ValidationError as e:
        return jsonify({"error": "Invalid payload", "details": validation_details(e)}), 400
    except Exception as e:
        log.error("Icon prompt generation failed: %s", e, exc_info=True)
        return jsonify({"error": str(e) or "Unexpected error"}), 500
    return jsonify({"iconPrompt": prompt})


@bp.route("/spell-icon-generate", methods=["POST"])
@admin_or_jwt_required
def icon_generate():
    """Renders a spell icon and stores it with the other assets."""
    try:
        spell = IconGenerateRequest.model_validate(_json_body())
        result = current_app.icon_service.generate_and_store_icon(spell, spell.icon_prompt)
    except ValidationError as e:
        return jsonify({"error": "Invalid payload", "details": validation_details(e)}), 400
    except Exception as e:
        log.error("Icon generation failed: %s", e, exc_info=True)
        return jsonify({"error": str(e) or "Unexpected error"}), 500
    return jsonify(result)
