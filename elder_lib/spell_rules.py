# --- elder_lib/spell_rules.py ---
"""
elder_lib/spell_rules.py: Pure AD&D 2e rule helpers shared by the parse
pipeline, the hydrate job and the admin forms.

This module contains:
- Classifiers: magical resistance, saving throw category/outcome, spell class.
- Group helpers: splitting and canonicalising school/sphere lists.
- Text helpers: description body extraction, level mining, HTML flattening.
- validate_spell_edit_form: Portuguese error messages for the admin editor.
- merge_spell_update: Per-field merge of a partial API update into a stored spell.
"""
import hashlib
import re
import unicodedata
from collections import Counter

from .constants import (
    CANONICAL_SAVING_THROWS_2E,
    GROUP_ALIASES,
    MAGICAL_RESISTANCE_VALUES,
    SAVING_THROW_OUTCOMES,
    SPELL_CLASSES,
    SPELL_FORM_MAX_LENGTHS,
    SPELL_FORM_REQUIRED_FIELDS,
)
from .schemas import CORRUPTED_CHAR

DIRECT_CREATURE_RE = re.compile(
    r"\b(target|targets|creature|creatures|enemy|enemies|ally|allies|humanoid|being"
    r"|person|persons|monster|victim)\b",
    re.IGNORECASE,
)
SUMMON_OR_CREATION_RE = re.compile(
    r"\b(summon|summons|summoned|conjure|conjures|conjured|calls? forth|mount|steed"
    r"|horse|phantom steed|create|creates|created)\b",
    re.IGNORECASE,
)

NO_SAVE_RE = re.compile(r"^none$|^no\s+save$", re.IGNORECASE)
OUTCOME_RULES = [
    ("NEGATES", re.compile(r"\bneg\.?\b|negates?|no\s+effect\s+on\s+save|if\s+save\s+is\s+made.*no\s+effect")),
    ("HALF", re.compile(r"1\s*/\s*2|half\s+damage|half\s+effect")),
    ("PARTIAL", re.compile(r"partial|reduced\s+effect|lesser\s+effect")),
]
CATEGORY_RULES = [
    (
        "Paralyzation, Poison, or Death Magic",
        re.compile(
            r"paraly|paralys|poison|death\s*magic|save\s+vs\s+death|slay|slain"
            r"|instantly\s+die|instant\s+death"
        ),
    ),
    ("Rod, Staff, or Wand", re.compile(r"\brod\b|\bstaff\b|\bwand\b")),
    (
        "Petrification or Polymorph",
        re.compile(r"petrif|polymorph|to\s+stone|stone\s+to\s+flesh|transform(?:ed|ation)?"),
    ),
    ("Breath Weapon", re.compile(r"breath\s*weapon|dragon\s*breath|breath\s+attack")),
]

METADATA_LINE_RE = re.compile(
    r"^(Range|Duration|Area of Effect|Components|Casting Time|Saving Throw|Target|Targets"
    r"|School|Sphere|Level|Source|Class|Group)\s*:",
    re.IGNORECASE,
)
METADATA_LINE_LOOSE_RE = re.compile(
    r"^(Spell Level|Class|School|Sphere|Details|Range|Duration|AOE|Casting Time|Save"
    r"|Requirements|Source)\b",
    re.IGNORECASE,
)
NON_NARRATIVE_LINE_RE = re.compile(
    r"^(For other .* see .*|[A-Za-z0-9'\-\s]+\(\s*[SMV, ]+\s*\))$", re.IGNORECASE
)
PARENTHESISED_LINE_RE = re.compile(r"^\(.*\)$")

LEVEL_MENTION_RES = [
    re.compile(r"\blevel\s*[:\-]?\s*([0-9])\b", re.IGNORECASE),
    re.compile(r"\b([0-9])\s*(?:st|nd|rd|th)?\s*[- ]?level\b", re.IGNORECASE),
]

HARD_SPELL_HINTS = (
    "range:",
    "duration:",
    "components:",
    "casting time:",
    "saving throw:",
    "target:",
    "school:",
    "sphere:",
    "level:",
)
SOFT_SPELL_HINTS = (
    "spell",
    "magic",
    "wizard",
    "priest",
    "caster",
    "summon",
    "damage",
    "arcane",
    "divine",
    "magia",
    "conjur",
    "dano",
    "mago",
    "clér",
)
CASUAL_HINTS = (
    "oi",
    "olá",
    "bom dia",
    "boa tarde",
    "boa noite",
    "kkkk",
    "haha",
    "teste",
    "reunião",
    "whatsapp",
    "trabalho",
)


def _strip_accents(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_spell_name(name: str) -> str:
    """Lowercase, accent-free form of a spell name used for matching."""
    value = _strip_accents(name or "").lower()
    value = re.sub(r"[^a-z0-9\s'-]", "", value)
    return re.sub(r"\s+", " ", value).strip()


def infer_magical_resistance(name, description_original, target=None, saving_throw=None) -> str:
    """Decides whether magic resistance applies from the spell's own wording."""
    text = "\n".join([name or "", description_original or "", target or "", saving_throw or ""])

    if not DIRECT_CREATURE_RE.search(text):
        return "NO"
    if SUMMON_OR_CREATION_RE.search(text) and not (target or "").strip():
        return "NO"
    return "YES"


def build_spell_dedupe_key(payload) -> str:
    """SHA-256 over the fields that identify a spell regardless of its prose."""

    def low(value):
        return (value or "").strip().lower()

    key = "|".join(
        [
            low(payload.name),
            str(payload.level),
            low(payload.school),
            low(payload.sphere),
            low(payload.source),
            low(payload.range_text),
            low(payload.target),
            low(payload.duration_text),
            low(payload.casting_time),
            low(payload.components),
            low(payload.saving_throw),
            payload.magical_resistance,
            payload.description_original.strip(),
        ]
    )
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


def infer_saving_throw(parsed_saving_throw, name, description_original, target=None):
    """
    Maps a free-form saving throw onto the 2e categories.
    Returns:
        tuple: (category, outcome). Outcome is None when no save applies.
    """
    raw = (parsed_saving_throw or "").strip()
    raw_lower = raw.lower()

    if NO_SAVE_RE.search(raw_lower):
        return "None", None

    context = "\n".join([name or "", target or "", description_original or "", raw]).lower()
    outcome = next((label for label, regex in OUTCOME_RULES if regex.search(context)), "OTHER")

    for category in CANONICAL_SAVING_THROWS_2E:
        if raw_lower == category.lower():
            return category, outcome

    for category, regex in CATEGORY_RULES:
        if regex.search(context):
            return category, outcome
    return "Spell", outcome


# --- Group helpers ---
def split_csv_like_list(value) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in re.split(r"[,/;|]+", value) if item.strip()]


def split_group_list(value) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in re.split(r"[,;|]+", value) if item.strip()]


def normalize_group_token(value: str) -> str:
    token = _strip_accents(value).lower()
    token = re.sub(r"[^a-z0-9/\s-]", " ", token)
    return re.sub(r"\s+", " ", token).strip()


def _title_case_words(value: str) -> str:
    return " ".join(word[:1].upper() + word[1:].lower() for word in value.split())


def canonicalize_group_name(value: str) -> str:
    token = normalize_group_token(value)
    for canonical, aliases in GROUP_ALIASES.items():
        if token in aliases:
            return canonical
    if "/" in token:
        return "/".join(_title_case_words(part) for part in token.split("/"))
    return _title_case_words(token)


def normalize_group_values(values) -> list[str]:
    canonical = {canonicalize_group_name(value) for value in values}
    return sorted(value for value in canonical if value)


def merge_unique_values(*lists) -> list[str]:
    return sorted({item for values in lists for item in values})


def infer_spell_class(
    parsed_spell_class=None,
    parsed_school=None,
    parsed_sphere=None,
    merged_schools=(),
    merged_spheres=(),
    reference_class_names=(),
) -> str:
    if parsed_spell_class:
        return parsed_spell_class

    has_school = bool((parsed_school or "").strip())
    has_sphere = bool((parsed_sphere or "").strip())
    if has_school and not has_sphere:
        return "arcane"
    if has_sphere and not has_school:
        return "divine"

    class_names = {value.lower() for value in reference_class_names or ()}
    has_wizard = "wizard" in class_names
    has_priest = "priest" in class_names
    if has_wizard and not has_priest:
        return "arcane"
    if has_priest and not has_wizard:
        return "divine"

    if merged_schools and not merged_spheres:
        return "arcane"
    if merged_spheres and not merged_schools:
        return "divine"
    return "divine" if has_priest else "arcane"


# --- Text helpers ---
def extract_description_body(raw_text: str) -> str:
    """Drops the title line and the stat block that follows it."""
    lines = re.split(r"\r?\n", raw_text)
    index = 0
    while index < len(lines) and not lines[index].strip():
        index += 1
    if index < len(lines):
        index += 1

    while index < len(lines):
        stripped = lines[index].strip()
        if (
            not stripped
            or PARENTHESISED_LINE_RE.match(stripped)
            or METADATA_LINE_RE.match(stripped)
            or METADATA_LINE_LOOSE_RE.match(stripped)
            or NON_NARRATIVE_LINE_RE.match(stripped)
        ):
            index += 1
            continue
        break

    body = "\n".join(lines[index:]).strip()
    return body or raw_text.strip()


def looks_like_non_spell_text(text: str) -> bool:
    """True for chatty text that clearly was not meant as a spell block."""
    normalized = re.sub(r"\s+", " ", text or "").strip().lower()
    if not normalized:
        return False

    words = normalized.split(" ")
    if len(words) < 4:
        return False
    if any(hint in normalized for hint in HARD_SPELL_HINTS):
        return False

    soft_hits = sum(1 for hint in SOFT_SPELL_HINTS if hint in normalized)
    casual_hits = sum(1 for hint in CASUAL_HINTS if hint in normalized)
    if casual_hits > 0 and soft_hits == 0:
        return True
    return soft_hits == 0 and len(words) >= 7


def is_zero_level_exception_spell(name: str) -> bool:
    return normalize_spell_name(name) in ("cantrip", "orison")


def pick_most_frequent_level(text: str):
    """Returns the single most mentioned spell level, or None on a tie."""
    counts = Counter()
    for regex in LEVEL_MENTION_RES:
        for match in regex.finditer(text or ""):
            counts[int(match.group(1))] += 1

    if not counts:
        return None
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    if len(ranked) > 1 and ranked[0][1] == ranked[1][1]:
        return None
    return ranked[0][0]


def html_to_plain_text(html: str, keep_breaks: bool = False) -> str:
    """
    Flattens an HTML document to text.
    Args:
        html (str): The markup to flatten.
        keep_breaks (bool): Turn <br> and closing block tags into newlines
            instead of collapsing everything into one line.
    """
    value = html or ""
    if keep_breaks:
        value = re.sub(r"<\s*br\s*/?\s*>", "\n", value, flags=re.IGNORECASE)
        value = re.sub(
            r"<\s*/\s*(p|div|section|article|h1|h2|h3|h4|h5|h6|li|tr|table)\s*>",
            "\n",
            value,
            flags=re.IGNORECASE,
        )
    value = re.sub(r"<script[\s\S]*?</script>", " ", value, flags=re.IGNORECASE)
    value = re.sub(r"<style[\s\S]*?</style>", " ", value, flags=re.IGNORECASE)
    value = re.sub(r"<[^>]+>", " ", value)
    value = (
        value.replace("&nbsp;", " ")
        .replace("&amp;", "&")
        .replace("&quot;", '"')
        .replace("&#39;", "'")
    )
    if not keep_breaks:
        return re.sub(r"\s+", " ", value).strip()

    value = value.replace("\r", "")
    value = re.sub(r"[ \t]+\n", "\n", value)
    value = re.sub(r"\n[ \t]+", "\n", value)
    value = re.sub(r"[ \t]{2,}", " ", value)
    value = re.sub(r"\n{3,}", "\n\n", value)
    return value.strip()


def remove_corrupted_char(text: str) -> str:
    return (text or "").replace(CORRUPTED_CHAR, "")


def title_case(value: str) -> str:
    return " ".join(part[:1].upper() + part[1:] for part in value.split())


def validate_spell_edit_form(form: dict) -> list[str]:
    """
    Checks an admin edit form and returns Portuguese error messages.
    Args:
        form (dict): camelCase form values; text fields may be missing.
    Returns:
        list[str]: Empty when the form can be saved.
    """
    errors = []

    def text(key):
        value = form.get(key)
        return "" if value is None else str(value)

    for label, key in SPELL_FORM_REQUIRED_FIELDS:
        if not text(key).strip():
            errors.append(f"{label} é obrigatório.")

    level = form.get("level")
    if isinstance(level, bool) or not isinstance(level, int) or not 0 <= level <= 9:
        errors.append("Nível deve ser um inteiro entre 0 e 9.")

    if form.get("canBeDispelled") and not text("dispelHow").strip():
        errors.append("Informe como a spell pode ser dispersada.")

    for label, key, max_length in SPELL_FORM_MAX_LENGTHS:
        if len(text(key)) > max_length:
            errors.append(f"{label} excede {max_length} caracteres.")
    return errors


# --- Partial updates ---
REQUIRED_TEXT_FIELDS = (
    "name",
    "range_text",
    "duration_text",
    "casting_time",
    "components",
    "saving_throw",
    "summary_en",
    "summary_pt_br",
    "description_original",
)
OPTIONAL_TEXT_FIELDS = (
    "school",
    "sphere",
    "source",
    "target",
    "component_desc",
    "component_cost",
    "description_pt_br",
    "source_image_url",
    "icon_url",
    "icon_prompt",
)
BOOLEAN_FIELDS = ("component_consumed", "can_be_dispelled", "combat", "utility")


def _to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def merge_spell_update(current: dict, body: dict) -> dict:
    """
    Merges a partial camelCase update into a stored spell.

    Required text keeps the stored value when missing or blank, optional text
    is trimmed (an empty string is kept as empty), booleans and enums only
    change on valid values. `savingThrowOutcome: ""` clears the outcome, and
    `dispelHow` is nulled whenever the spell ends up non-dispellable.
    Args:
        current (dict): The stored spell with snake_case keys.
        body (dict): The request body with camelCase keys.
    Returns:
        dict: Every updatable column with its new value.
    """
    merged = {}
    for field_name in REQUIRED_TEXT_FIELDS:
        value = body.get(_to_camel(field_name))
        trimmed = value.strip() if isinstance(value, str) else ""
        merged[field_name] = trimmed or current[field_name]

    for field_name in OPTIONAL_TEXT_FIELDS:
        value = body.get(_to_camel(field_name))
        merged[field_name] = value.strip() if isinstance(value, str) else current[field_name]

    for field_name in BOOLEAN_FIELDS:
        value = body.get(_to_camel(field_name))
        merged[field_name] = value if isinstance(value, bool) else bool(current[field_name])

    level = body.get("level")
    valid_level = isinstance(level, int) and not isinstance(level, bool)
    merged["level"] = level if valid_level else current["level"]

    spell_class = body.get("spellClass")
    if spell_class not in SPELL_CLASSES:
        spell_class = "divine" if current["spell_class"] == "divine" else "arcane"
    merged["spell_class"] = spell_class

    outcome = body.get("savingThrowOutcome")
    if outcome in SAVING_THROW_OUTCOMES:
        merged["saving_throw_outcome"] = outcome
    elif outcome == "":
        merged["saving_throw_outcome"] = None
    else:
        stored = current["saving_throw_outcome"]
        merged["saving_throw_outcome"] = stored if stored in SAVING_THROW_OUTCOMES else None

    resistance = body.get("magicalResistance")
    merged["magical_resistance"] = (
        resistance if resistance in MAGICAL_RESISTANCE_VALUES else current["magical_resistance"]
    )

    dispel_how = body.get("dispelHow")
    if merged["can_be_dispelled"]:
        if isinstance(dispel_how, str):
            merged["dispel_how"] = dispel_how.strip() or None
        else:
            merged["dispel_how"] = current["dispel_how"]
    else:
        merged["dispel_how"] = None
    return merged
