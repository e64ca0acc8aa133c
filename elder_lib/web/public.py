# --- elder_lib/web/public.py ---
"""
Server-rendered public pages: home, index, attributes and races.

Every page reads `?lang=` to pick the locale and loads its interface strings
from the ui_text_translations table, with the Portuguese rows as fallback.
"""
import functools
import logging

from flask import Blueprint, current_app, render_template, request, url_for

from ..constants import (
    INDEX_SECTIONS,
    PUBLIC_NAV_ITEMS,
    RACE_ADJUSTMENT_COLUMNS,
    RACE_CLASS_LIMIT_COLUMNS,
    SCORE_COLUMNS,
    SCORE_LABELS,
    SCORE_RANGE_COLUMNS,
)
from ..i18n import LOCALES, get_locale, pick_localized_text, to_slug, ui_text, with_lang

bp = Blueprint("public", __name__)
log = logging.getLogger("elder.web")

EMPTY_CELL = "—"


def _render(template: str, namespaces: list, active: str, status: int = 200, **context):
    """Renders a page inside the public shell (navigation, language switch)."""
    locale = get_locale(request.args)
    texts = current_app.ui_text_service.get_ui_texts(["public-shell", *namespaces], locale)
    t = functools.partial(ui_text, texts)

    nav = []
    for key, text_key, endpoint, fallback in PUBLIC_NAV_ITEMS:
        nav.append(
            {
                "key": key,
                "label": t("public-shell", text_key, fallback),
                "href": with_lang(url_for(endpoint), locale) if endpoint else None,
                "active": key == active,
            }
        )
    languages = [
        {"code": code, "href": with_lang(request.path, code), "active": code == locale}
        for code in LOCALES
    ]
    html = render_template(
        template,
        locale=locale,
        t=t,
        nav=nav,
        languages=languages,
        link=lambda endpoint, **values: with_lang(url_for(endpoint, **values), locale),
        **context,
    )
    return html, status


def render_not_found():
    return _render("public/not_found.html", [], active="", status=404)


def stat_text(value) -> str:
    if value is None:
        return EMPTY_CELL
    return f"+{value}" if value > 0 else str(value)


def format_score_cell(value, t) -> str:
    if value is None or value == "":
        return EMPTY_CELL
    if isinstance(value, bool):
        key, fallback = ("ui.booleanTrue", "Sim") if value else ("ui.booleanFalse", "Não")
        return t("attribute-detail", key, fallback)
    return str(value)


def build_score_table(scores: list[dict], t, locale: str) -> dict:
    """
    Lays out a sub-attribute score table, keeping only the columns that
    carry a value in at least one row.
    """
    columns = [c for c in SCORE_COLUMNS if any(row.get(c) is not None for row in scores)]
    labels = SCORE_LABELS.get(locale, SCORE_LABELS["pt"])
    fallback_explanation = t("attribute-detail", "ui.explanationFallback", "")
    return {
        "headers": [t("attribute-detail", f"label.{c}", labels.get(c, c)) for c in columns],
        "rows": [[format_score_cell(row.get(c), t) for c in columns] for row in scores],
        "explanations": [
            {
                "label": t("attribute-detail", f"label.{c}", labels.get(c, c)),
                "text": t("attribute-detail", f"explain.{c}", fallback_explanation),
            }
            for c in columns
            if c not in SCORE_RANGE_COLUMNS
        ],
    }


# --- Data loaders ---
def _load_attributes(locale: str) -> list[dict]:
    storage = current_app.storage
    attributes = storage.get_attributes()
    attribute_ids = [row["id"] for row in attributes]
    translations = storage.get_attribute_translations(attribute_ids)
    sub_rows = storage.get_sub_attributes(attribute_ids)
    sub_translations = storage.get_sub_attribute_translations([row["id"] for row in sub_rows])

    result = []
    for row in attributes:
        text = pick_localized_text(
            row["name"], row["description"], row["full_description"],
            translations.get(row["id"]), locale,
        )
        subs = []
        for sub in sub_rows:
            if sub["attribute_id"] != row["id"]:
                continue
            sub_text = pick_localized_text(
                sub["name"], sub["description"], sub["full_description"],
                sub_translations.get(sub["id"]), locale,
            )
            subs.append({"id": sub["id"], "code": sub["code"], **sub_text})
        result.append(
            {
                "id": row["id"],
                "code": row["code"],
                "slug": to_slug(row["name"] or row["code"]),
                "sub_attributes": subs,
                **text,
            }
        )
    return result


def _localize_rows(rows, translations: dict, locale: str) -> list[dict]:
    localized = []
    for row in rows:
        data = dict(row)
        data.update(
            pick_localized_text(
                row["name"], row["description"], row["full_description"],
                translations.get(row["id"]), locale,
            )
        )
        data["base_name"] = row["name"]
        data["slug"] = to_slug(row["name"])
        localized.append(data)
    return localized


def _load_races(locale: str) -> list[dict]:
    storage = current_app.storage
    races = storage.get_races()
    return _localize_rows(races, storage.get_race_translations([r["id"] for r in races]), locale)


def _load_race(slug: str, locale: str):
    """Returns the localized race with its subraces, or None for an unknown slug."""
    race = next((r for r in _load_races(locale) if r["slug"] == slug), None)
    if race is None:
        return None
    storage = current_app.storage
    sub_rows = storage.get_sub_races(race["id"])
    race["sub_races"] = _localize_rows(
        sub_rows, storage.get_sub_race_translations([r["id"] for r in sub_rows]), locale
    )
    return race


def _localize_abilities(rows, locale: str) -> list[dict]:
    translations = current_app.storage.get_race_ability_translations([r["id"] for r in rows])
    return _localize_rows(rows, translations, locale)


def _standard_order(ability: dict):
    return (ability["kind"] == "PENALTY", ability["name"].lower())


# --- Routes ---
@bp.route("/")
def home():
    return _render("public/home.html", ["home"], active="home")


@bp.route("/indice")
def index():
    sections = [
        {"key": key, "endpoint": endpoint}
        for key, endpoint in INDEX_SECTIONS
    ]
    return _render("public/index.html", ["index"], active="", sections=sections)


@bp.route("/atributos")
def attributes():
    locale = get_locale(request.args)
    return _render(
        "public/attributes.html",
        ["attributes-list"],
        active="atributos",
        attributes=_load_attributes(locale),
    )


@bp.route("/atributos/<slug>")
def attribute_detail(slug):
    locale = get_locale(request.args)
    attribute = next((a for a in _load_attributes(locale) if a["slug"] == slug), None)
    if attribute is None:
        log.debug("Unknown attribute slug '%s'.", slug)
        return render_not_found()

    texts = current_app.ui_text_service.get_ui_texts(["attribute-detail"], locale)
    t = functools.partial(ui_text, texts)
    for sub in attribute["sub_attributes"]:
        scores = current_app.storage.get_sub_attribute_scores(sub["id"])
        sub["table"] = build_score_table(scores, t, locale)
    return _render(
        "public/attribute_detail.html",
        ["attribute-detail", "attributes-list"],
        active="atributos",
        attribute=attribute,
    )


@bp.route("/racas")
def races():
    locale = get_locale(request.args)
    items = []
    for race in _load_races(locale):
        sub_rows = current_app.storage.get_sub_races(race["id"])
        race["sub_races"] = _localize_rows(
            sub_rows,
            current_app.storage.get_sub_race_translations([r["id"] for r in sub_rows]),
            locale,
        )
        items.append(race)
    return _render("public/races.html", ["races-list"], active="race", races=items)


@bp.route("/racas/<slug>")
def race_detail(slug):
    locale = get_locale(request.args)
    race = _load_race(slug, locale)
    if race is None:
        return render_not_found()
    adjustments = [(label, stat_text(race[column])) for label, column in RACE_ADJUSTMENT_COLUMNS]
    class_limits = [
        (label, race[column] or EMPTY_CELL) for label, column in RACE_CLASS_LIMIT_COLUMNS
    ]
    return _render(
        "public/race.html",
        ["races-list"],
        active="race",
        race=race,
        adjustments=adjustments,
        class_limits=class_limits,
    )


@bp.route("/racas/<slug>/subracas/<sub_slug>")
def sub_race_detail(slug, sub_slug):
    locale = get_locale(request.args)
    race = _load_race(slug, locale)
    sub_race = None
    if race is not None:
        sub_race = next((s for s in race["sub_races"] if s["slug"] == sub_slug), None)
    if sub_race is None:
        return render_not_found()
    standard = _localize_abilities(current_app.storage.get_standard_abilities(sub_race["id"]), locale)
    standard.sort(key=_standard_order)
    return _render(
        "public/sub_race.html",
        ["races-list"],
        active="race",
        race=race,
        sub_race=sub_race,
        standard_abilities=standard,
        package_cost=sum(a["cost"] for a in standard if a["kind"] != "PENALTY"),
    )


@bp.route("/racas/<slug>/custos")
def race_costs(slug):
    locale = get_locale(request.args)
    race = _load_race(slug, locale)
    if race is None:
        return render_not_found()

    storage = current_app.storage
    abilities = _localize_abilities(storage.get_race_abilities(race["id"]), locale)
    benefits = [a for a in abilities if a["kind"] != "PENALTY"]
    penalties = [a for a in abilities if a["kind"] == "PENALTY"]

    # The standard package comes from the first subrace that defines one.
    standard_race, standard = None, []
    for sub_race in race["sub_races"]:
        rows = storage.get_standard_abilities(sub_race["id"])
        if rows:
            standard_race = sub_race
            standard = _localize_abilities(rows, locale)
            break
    if standard:
        standard.sort(key=_standard_order)
    else:
        standard = sorted(benefits, key=lambda a: a["name"].lower())

    adjustments = [
        (label, stat_text(race[column]))
        for label, column in RACE_ADJUSTMENT_COLUMNS
        if race[column]
    ]
    return _render(
        "public/race_costs.html",
        ["races-list"],
        active="race",
        race=race,
        benefits=benefits,
        penalties=penalties,
        adjustments=adjustments,
        standard_name=(standard_race or race)["name"],
        standard_cost=standard_race["character_point_cost"] if standard_race else None,
        standard_abilities=standard,
    )
