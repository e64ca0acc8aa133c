from types import SimpleNamespace

import pytest

from conftest import make_spell_data
from elder_lib.schemas import SpellPayload
from elder_lib.spell_rules import (
    build_spell_dedupe_key,
    canonicalize_group_name,
    extract_description_body,
    html_to_plain_text,
    infer_magical_resistance,
    infer_saving_throw,
    infer_spell_class,
    is_zero_level_exception_spell,
    looks_like_non_spell_text,
    merge_spell_update,
    merge_unique_values,
    normalize_group_values,
    normalize_spell_name,
    pick_most_frequent_level,
    remove_corrupted_char,
    split_csv_like_list,
    split_group_list,
    validate_spell_edit_form,
)


# --- Magical resistance ---
def test_magical_resistance_no_without_creature_words():
    result = infer_magical_resistance(
        "Wall of Fog", "A billowing bank of fog obscures all sight.", "", "None"
    )
    assert result == "NO"


def test_magical_resistance_yes_for_direct_creature_spell():
    result = infer_magical_resistance(
        "Charm Person", "This spell affects any single person it is cast upon.", "1 person", "Neg."
    )
    assert result == "YES"


def test_magical_resistance_summon_without_target_is_no():
    description = "This spell summons a creature that attacks the enemies of the caster."
    assert infer_magical_resistance("Call Beast", description, "", "None") == "NO"
    assert infer_magical_resistance("Call Beast", description, "Special", "None") == "YES"


# --- Saving throws ---
def test_saving_throw_none_has_no_outcome():
    assert infer_saving_throw("None", "Light", "Creates light.") == ("None", None)
    assert infer_saving_throw("No save", "Light", "Creates light.") == ("None", None)


def test_saving_throw_category_from_keywords():
    category, outcome = infer_saving_throw(
        "Neg.", "Hold Person", "The target is paralyzed for the duration."
    )
    assert category == "Paralyzation, Poison, or Death Magic"
    assert outcome == "NEGATES"


def test_saving_throw_half_defaults_to_spell_category():
    category, outcome = infer_saving_throw("1/2", "Fireball", "A burst of flame deals damage.")
    assert category == "Spell"
    assert outcome == "HALF"


def test_saving_throw_exact_canonical_category_is_kept():
    category, outcome = infer_saving_throw("Breath Weapon", "Gust", "A strong wind.")
    assert category == "Breath Weapon"
    assert outcome == "OTHER"


# --- Dedupe key ---
def test_dedupe_key_ignores_case_and_outer_whitespace_of_main_fields():
    payload = SpellPayload.model_validate(make_spell_data())
    variant = SimpleNamespace(
        **{**payload.model_dump(), "name": "  MAGIC missile ", "components": "v, s"}
    )
    assert build_spell_dedupe_key(payload) == build_spell_dedupe_key(variant)


def test_dedupe_key_keeps_description_case():
    payload = SpellPayload.model_validate(make_spell_data())
    changed = payload.model_copy(
        update={"description_original": payload.description_original.upper()}
    )
    key = build_spell_dedupe_key(payload)
    assert len(key) == 64
    assert key != build_spell_dedupe_key(changed)


# --- Group helpers ---
def test_split_helpers():
    assert split_csv_like_list("Alteration, Evocation/Invocation; Fire | Water") == [
        "Alteration",
        "Evocation",
        "Invocation",
        "Fire",
        "Water",
    ]
    assert split_group_list("Invocation/Evocation, Fire") == ["Invocation/Evocation", "Fire"]
    assert split_csv_like_list(None) == []


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("evocation", "Invocation/Evocation"),
        ("Summoning", "Conjuration/Summoning"),
        ("phantasm/illusion", "Illusion/Phantasm"),
        ("elemental fire", "Elemental Fire"),
        ("foo/bar baz", "Foo/Bar Baz"),
    ],
)
def test_canonicalize_group_name(raw, expected):
    assert canonicalize_group_name(raw) == expected


def test_normalize_group_values_is_unique_and_sorted():
    assert normalize_group_values(["evocation", "Invocation", "alteration"]) == [
        "Alteration",
        "Invocation/Evocation",
    ]
    assert merge_unique_values(["b", "a"], ["a", "c"]) == ["a", "b", "c"]


def test_infer_spell_class_precedence():
    assert infer_spell_class("divine", "Alteration") == "divine"
    assert infer_spell_class(None, "Alteration", None) == "arcane"
    assert infer_spell_class(None, None, "Healing") == "divine"
    assert infer_spell_class(None, "x", "y", reference_class_names=["priest"]) == "divine"
    assert infer_spell_class(None, None, None, [], ["Healing"]) == "divine"
    assert infer_spell_class(None, None, None, [], [], ["wizard", "priest"]) == "divine"
    assert infer_spell_class() == "arcane"


# --- Text helpers ---
def test_extract_description_body_drops_title_and_stat_block():
    raw = (
        "Fireball\n"
        "(Evocation)\n"
        "Range: 10 yds. + 10 yds./level\n"
        "Components: V, S, M\n"
        "Duration: Instantaneous\n"
        "\n"
        "A fireball is an explosive burst of flame."
    )
    assert extract_description_body(raw) == "A fireball is an explosive burst of flame."


def test_extract_description_body_falls_back_to_whole_text():
    assert extract_description_body("Just a title") == "Just a title"


def test_looks_like_non_spell_text():
    assert looks_like_non_spell_text("oi pessoal, tudo bem com vocês hoje?")
    assert not looks_like_non_spell_text("Range: 10 yards Duration: 1 round per level")
    assert not looks_like_non_spell_text("fire")
    assert not looks_like_non_spell_text("The wizard casts a powerful spell of fire today")


def test_zero_level_exceptions():
    assert is_zero_level_exception_spell("Cantrip")
    assert is_zero_level_exception_spell("Orison ")
    assert not is_zero_level_exception_spell("Light")


def test_pick_most_frequent_level():
    assert pick_most_frequent_level("A 3rd level spell. Level 3 wizard. 2nd level") == 3
    assert pick_most_frequent_level("1st level or 2nd level") is None
    assert pick_most_frequent_level("") is None


def test_html_to_plain_text():
    html = "<p>Hello&nbsp;<b>world</b></p><script>track()</script>"
    assert html_to_plain_text(html) == "Hello world"
    assert html_to_plain_text("<p>One</p><p>Two<br>Three</p>", keep_breaks=True) == "One\nTwo\nThree"


def test_remove_corrupted_char_and_normalize_name():
    assert remove_corrupted_char("a�b") == "ab"
    assert normalize_spell_name("  Bigby's   Crushing Hand! ") == "bigby's crushing hand"
    assert normalize_spell_name("Mão Élfica") == "mao elfica"


# --- Admin form validation ---
def test_validate_spell_edit_form_accepts_complete_form():
    assert validate_spell_edit_form(make_spell_data()) == []


def test_validate_spell_edit_form_reports_problems():
    errors = validate_spell_edit_form(
        make_spell_data(name="", level="x", canBeDispelled=True, dispelHow="", source="S" * 61)
    )
    assert "Nome é obrigatório." in errors
    assert "Nível deve ser um inteiro entre 0 e 9." in errors
    assert "Informe como a spell pode ser dispersada." in errors
    assert "Fonte excede 60 caracteres." in errors


def test_validate_spell_edit_form_rejects_out_of_range_level():
    assert validate_spell_edit_form(make_spell_data(level=10)) == [
        "Nível deve ser um inteiro entre 0 e 9."
    ]


# --- Partial updates ---
@pytest.fixture
def stored():
    return SpellPayload.model_validate(
        make_spell_data(savingThrowOutcome="NEGATES")
    ).model_dump()


def test_merge_keeps_required_text_and_trims_optional(stored):
    merged = merge_spell_update(stored, {"name": "   ", "school": " Alteration ", "target": 5})
    assert merged["name"] == "Magic Missile"
    assert merged["school"] == "Alteration"
    assert merged["target"] == "1-5 targets"


def test_merge_only_accepts_typed_values(stored):
    merged = merge_spell_update(
        stored,
        {"combat": "no", "level": True, "spellClass": "psionic", "magicalResistance": "MAYBE"},
    )
    assert merged["combat"] is True
    assert merged["level"] == 1
    assert merged["spell_class"] == "arcane"
    assert merged["magical_resistance"] == "YES"


def test_merge_outcome_clear_and_invalid(stored):
    assert merge_spell_update(stored, {"savingThrowOutcome": ""})["saving_throw_outcome"] is None
    assert merge_spell_update(stored, {"savingThrowOutcome": "BOGUS"})["saving_throw_outcome"] == "NEGATES"
    assert merge_spell_update(stored, {"savingThrowOutcome": "HALF"})["saving_throw_outcome"] == "HALF"


def test_merge_dispel_how_follows_dispellable_flag(stored):
    assert merge_spell_update(stored, {"dispelHow": "Dispel Magic"})["dispel_how"] is None
    merged = merge_spell_update(stored, {"canBeDispelled": True, "dispelHow": "  Dispel Magic "})
    assert merged["can_be_dispelled"] is True
    assert merged["dispel_how"] == "Dispel Magic"
