# --- elder_lib/i18n.py ---
import re
import unicodedata

DEFAULT_LOCALE = "pt"
LOCALES = ("pt", "en")


def get_locale(args) -> str:
    """`lang=en` selects English; anything else is Portuguese."""
    value = args.get("lang") if args else None
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    return "en" if value == "en" else DEFAULT_LOCALE


def with_lang(path: str, locale: str) -> str:
    separator = "&" if "?" in path else "?"
    return f"{path}{separator}lang={locale}"


def ui_text(texts: dict, namespace: str, key: str, fallback: str) -> str:
    return texts.get(f"{namespace}.{key}", fallback)


def to_slug(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value or "")
    ascii_only = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).lower()
    return re.sub(r"[^a-z0-9]+", "-", ascii_only).strip("-")


def pick_localized_text(base_name, base_description, base_full, translations, locale) -> dict:
    """
    Resolves name/description/full_description for a locale, field by field:
    the exact locale first, then Portuguese, then the base record.
    Args:
        translations (list[dict]): Translation rows with a `locale` key.
    """
    by_locale = {row.get("locale"): row for row in translations or []}
    chain = [by_locale.get(locale), by_locale.get(DEFAULT_LOCALE)]
    base = {"name": base_name, "description": base_description, "full_description": base_full}

    resolved = {}
    for field_name, base_value in base.items():
        value = next(
            (row.get(field_name) for row in chain if row and row.get(field_name)),
            None,
        )
        resolved[field_name] = value if value else base_value
    return resolved
