# --- elder_lib/web/admin.py ---
"""
Session-protected admin pages for curating spells: import (parse preview,
then save), list, view, edit with icon tools, and reference hydration retries.
"""
import functools
import json
import logging

from flask import (
    Blueprint,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    session,
    url_for,
)
from pydantic import ValidationError

from ..api.spell_import import save_spell
from ..api.spells import apply_spell_update, list_spells_page, parse_list_filters, parse_page
from ..api.spells import spell_to_wire
from ..auth import is_valid_admin_login
from ..schemas import HydrateRequest, IconGenerateRequest, SpellPayload, validation_details
from ..spell_rules import validate_spell_edit_form

bp = Blueprint("admin", __name__)
log = logging.getLogger("elder.web")

TEXT_FORM_FIELDS = (
    "name",
    "spellClass",
    "school",
    "sphere",
    "source",
    "rangeText",
    "target",
    "durationText",
    "castingTime",
    "components",
    "componentDesc",
    "componentCost",
    "dispelHow",
    "savingThrow",
    "savingThrowOutcome",
    "magicalResistance",
    "summaryEn",
    "summaryPtBr",
    "descriptionOriginal",
    "descriptionPtBr",
    "sourceImageUrl",
    "iconUrl",
    "iconPrompt",
)
CHECKBOX_FORM_FIELDS = ("componentConsumed", "canBeDispelled", "combat", "utility")


def login_required(view):
    @functools.wraps(view)
    def wrapped(*args, **kwargs):
        if not session.get("admin"):
            return redirect(url_for("admin.login", next=request.path))
        return view(*args, **kwargs)

    return wrapped


def _form_errors(error: ValidationError) -> list[str]:
    return [f"{'.'.join(d['loc'])}: {d['msg']}" for d in validation_details(error)]


def spell_form_values(form) -> dict:
    """Reads the edit form into the camelCase shape used by the JSON API."""
    values = {key: form.get(key, "") for key in TEXT_FORM_FIELDS}
    values.update({key: key in form for key in CHECKBOX_FORM_FIELDS})
    raw_level = (form.get("level") or "").strip()
    values["level"] = int(raw_level) if raw_level.isdecimal() else raw_level
    return values


# --- Session ---
@bp.route("/login", methods=["GET", "POST"])
def login():
    error = None
    if request.method == "POST":
        username = request.form.get("username", "")
        if is_valid_admin_login(username, request.form.get("password", "")):
            session.clear()
            session["admin"] = True
            log.info("Admin '%s' logged in.", username.strip().lower())
            target = request.args.get("next") or ""
            # Only local paths are followed after login.
            if not target.startswith("/") or target.startswith("//"):
                target = url_for("admin.spells")
            return redirect(target)
        log.warning("Rejected admin login for '%s'.", username)
        error = "Usuário ou senha inválidos."
    return render_template("admin/login.html", error=error), 401 if error else 200


@bp.route("/logout", methods=["POST"])
def logout():
    session.clear()
    return redirect(url_for("admin.login"))


@bp.route("/")
@login_required
def dashboard():
    return redirect(url_for("admin.spells"))


# --- Spells ---
@bp.route("/spells")
@login_required
def spells():
    filters = parse_list_filters(request.args)
    result = list_spells_page(current_app.storage, filters, parse_page(request.args))
    return render_template("admin/spells.html", result=result, filters=filters)


def _load_spell(spell_id: int):
    row = current_app.storage.get_spell(spell_id)
    return spell_to_wire(row) if row is not None else None


@bp.route("/spells/<int:spell_id>")
@login_required
def spell_view(spell_id):
    spell = _load_spell(spell_id)
    if spell is None:
        return render_template("admin/message.html", message="Spell não encontrada."), 404
    prev_id, next_id = current_app.storage.get_adjacent_spell_ids(spell_id)
    return render_template("admin/spell_view.html", spell=spell, prev_id=prev_id, next_id=next_id)


@bp.route("/spells/<int:spell_id>/edit", methods=["GET", "POST"])
@login_required
def spell_edit(spell_id):
    spell = _load_spell(spell_id)
    if spell is None:
        return render_template("admin/message.html", message="Spell não encontrada."), 404
    if request.method == "GET":
        return render_template("admin/spell_edit.html", spell=spell, errors=[])

    values = spell_form_values(request.form)
    action = request.form.get("action", "save")
    errors = []

    if action in ("icon-prompt", "icon-generate"):
        try:
            icon_input = IconGenerateRequest.model_validate(values)
            if action == "icon-prompt":
                values["iconPrompt"] = current_app.icon_service.generate_icon_prompt(icon_input)
            else:
                result = current_app.icon_service.generate_and_store_icon(
                    icon_input, icon_input.icon_prompt
                )
                values.update(result)
                apply_spell_update(current_app.storage, spell_id, result)
                flash("Ícone gerado e salvo.")
        except ValidationError as e:
            errors = _form_errors(e)
        except Exception as e:
            log.error("Icon action '%s' failed for spell %d: %s", action, spell_id, e, exc_info=True)
            errors = [f"Falha ao gerar ícone: {e}"]
        return render_template("admin/spell_edit.html", spell={**spell, **values}, errors=errors)

    errors = validate_spell_edit_form(values)
    if not errors:
        saved = apply_spell_update(current_app.storage, spell_id, values)
        if saved:
            log.info("Admin updated spell id %d.", spell_id)
            flash("Spell atualizada.")
            return redirect(url_for("admin.spell_view", spell_id=spell_id))
        errors = ["Spell já existe com os mesmos dados principais"]
    return render_template("admin/spell_edit.html", spell={**spell, **values}, errors=errors), 400


@bp.route("/spell-import", methods=["GET", "POST"])
@login_required
def spell_import():
    """Parses text or an image URL into a preview, then saves the reviewed JSON."""
    context = {"text": "", "image_url": "", "preview": "", "errors": []}
    if request.method == "GET":
        return render_template("admin/spell_import.html", **context)

    context["text"] = request.form.get("text", "")
    context["image_url"] = request.form.get("imageUrl", "").strip()
    context["preview"] = request.form.get("preview", "")

    if request.form.get("action") == "save":
        try:
            payload = SpellPayload.model_validate(json.loads(context["preview"] or "{}"))
            spell_id = save_spell(current_app.storage, payload)
        except json.JSONDecodeError as e:
            context["errors"] = [f"JSON inválido: {e}"]
        except ValidationError as e:
            context["errors"] = _form_errors(e)
        else:
            log.info("Imported spell '%s' as id %d.", payload.name, spell_id)
            flash(f"Spell '{payload.name}' salva.")
            return redirect(url_for("admin.spell_view", spell_id=spell_id))
        return render_template("admin/spell_import.html", **context), 400

    parse_input = {"text": context["text"] or None}
    if context["image_url"]:
        parse_input.update(imageDataUrl=context["image_url"], sourceImageUrl=context["image_url"])
    try:
        spell = current_app.parse_service.parse_spell(parse_input)
    except ValidationError as e:
        context["errors"] = _form_errors(e)
        return render_template("admin/spell_import.html", **context), 400
    except Exception as e:
        log.error("Spell parse failed: %s", e, exc_info=True)
        context["errors"] = ["Serviço de parse indisponível. Tente novamente mais tarde."]
        return render_template("admin/spell_import.html", **context), 503
    context["preview"] = json.dumps(spell.to_wire(), ensure_ascii=False, indent=2)
    return render_template("admin/spell_import.html", **context)


# --- Reference hydration ---
@bp.route("/missing-retry", methods=["GET", "POST"])
@login_required
def missing_retry():
    result = None
    errors = []
    if request.method == "POST":
        form = request.form
        raw_limit = (form.get("limit") or "1").strip()
        try:
            hydrate_request = HydrateRequest.model_validate(
                {
                    "name": (form.get("name") or "").strip() or None,
                    "spellClass": form.get("spellClass") or None,
                    "limit": int(raw_limit) if raw_limit.isdecimal() else raw_limit,
                    "retryMissing": True,
                    "retryOnlyMissing": "retryOnlyMissing" in form,
                    "retryOrder": form.get("retryOrder") or "oldest",
                }
            )
            result = current_app.hydrate_service.hydrate(hydrate_request)
        except ValidationError as e:
            errors = _form_errors(e)
    missing = result["missing"] if result and "missing" in result else (
        current_app.hydrate_service.list_missing()
    )
    return render_template("admin/missing.html", result=result, missing=missing, errors=errors)
