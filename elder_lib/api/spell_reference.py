# --- elder_lib/api/spell_reference.py ---
import logging

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from ..auth import admin_or_jwt_required, bearer_required
from ..schemas import HydrateRequest, ReferenceImportRequest, validation_details
from ..services.reference_service import ReferenceCsvError

bp = Blueprint("spell_reference", __name__)
log = logging.getLogger("elder.api")


@bp.route("/spell-reference-import", methods=["POST"])
@bearer_required
def import_reference():
    """Adds reference rows from a CSV string."""
    try:
        body = ReferenceImportRequest.model_validate(request.get_json(silent=True) or {})
        imported = current_app.reference_service.import_reference_csv(body.csv)
    except ValidationError as e:
        return jsonify(
            {"error": "Invalid payload or CSV format", "details": validation_details(e)}
        ), 400
    except ReferenceCsvError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        log.error("Reference import failed: %s", e, exc_info=True)
        return jsonify({"error": str(e) or "Unexpected error"}), 500
    return jsonify({"imported": imported}), 201


@bp.route("/spell-reference-sync", methods=["POST"])
@bearer_required
def sync_reference():
    """Mirrors the reference table to the CSV files in the reference directory."""
    try:
        result = current_app.reference_service.sync_reference_from_csv(
            csv_dir=current_app.config["REFERENCE_CSV_DIR"]
        )
    except Exception as e:
        log.error("Reference sync failed: %s", e, exc_info=True)
        return jsonify({"error": str(e) or "Unexpected error"}), 500
    log.info("Reference sync: %s", result.to_dict())
    return jsonify(result.to_dict())


@bp.route("/spell-reference-hydrate", methods=["GET", "POST"])
@admin_or_jwt_required
def hydrate_reference():
    """GET lists missing reference spells; POST runs one hydration batch."""
    hydrate_service = current_app.hydrate_service
    try:
        if request.method == "GET":
            return jsonify({"missing": hydrate_service.list_missing()})
        body = HydrateRequest.model_validate(request.get_json(silent=True) or {})
        return jsonify(hydrate_service.hydrate(body))
    except ValidationError:
        return jsonify({"error": "Parâmetros inválidos para hidratação de spell."}), 400
    except Exception as e:
        log.error("Hydration failed: %s", e, exc_info=True)
        return jsonify({"error": str(e) or "Unexpected error"}), 500
