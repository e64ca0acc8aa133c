import pytest

from conftest import make_spell_data
from elder_lib.api.spell_import import save_spell
from elder_lib.schemas import CORRUPTED_CHAR, SpellPayload
from elder_lib.services.storage_service import StorageService, spell_row_to_dict


def _save(storage, **overrides) -> int:
    return save_spell(storage, SpellPayload.model_validate(make_spell_data(**overrides)))


@pytest.fixture
def library(storage):
    """Four spells with distinct identities; returns {name: id}."""
    ids = {
        "Magic Missile": _save(storage),
        "Fireball": _save(storage, name="Fireball", level=3),
        "Sleep": _save(storage, name="Sleep", school="Enchantment/Charm"),
        "Cure Light Wounds": _save(
            storage, name="Cure Light Wounds", spellClass="divine", school=None, sphere="Healing"
        ),
    }
    return ids


def test_storage_requires_a_path():
    with pytest.raises(ValueError):
        StorageService("")


def test_init_db_is_idempotent(storage):
    storage.init_db()
    assert storage.ping()
    assert storage.has_spell_class_column()


def test_upsert_spell_merges_on_dedupe_key(storage, saved_spell):
    same_id = _save(storage, summaryEn="Five darts of pure force.")

    assert same_id == saved_spell
    assert storage.count_spells({}) == 1
    assert storage.get_spell(saved_spell)["summary_en"] == "Five darts of pure force."


def test_dispel_how_is_dropped_for_non_dispellable_spells(storage):
    plain = _save(storage, name="Light", dispelHow="Dispel Magic")
    dispellable = _save(storage, name="Darkness", canBeDispelled=True, dispelHow="Dispel Magic")

    assert storage.get_spell(plain)["dispel_how"] is None
    assert storage.get_spell(dispellable)["dispel_how"] == "Dispel Magic"


def test_spell_row_to_dict_returns_booleans(storage, saved_spell):
    data = spell_row_to_dict(storage.get_spell(saved_spell))
    assert data["combat"] is True
    assert data["utility"] is False


def test_find_spells_orders_by_level_then_name(storage, library):
    names = [row["name"] for row in storage.find_spells({}, 10, 0)]
    assert names == ["Cure Light Wounds", "Magic Missile", "Sleep", "Fireball"]

    page_two = [row["name"] for row in storage.find_spells({}, 2, 2)]
    assert page_two == ["Sleep", "Fireball"]


def test_spell_filters(storage, library):
    assert storage.count_spells({"name": "MISS"}) == 1
    assert storage.count_spells({"group": "evoc"}) == 2
    assert storage.count_spells({"group": "heal"}) == 1
    assert storage.count_spells({"level": 3}) == 1
    divine = storage.find_spells({"spell_class": "divine"}, 10, 0)
    assert [row["name"] for row in divine] == ["Cure Light Wounds"]


def test_adjacent_spell_ids(storage, library):
    first, second, third = library["Magic Missile"], library["Fireball"], library["Sleep"]
    assert storage.get_adjacent_spell_ids(second) == (first, third)
    assert storage.get_adjacent_spell_ids(first) == (None, second)


def test_update_spell_refuses_duplicate_identity(storage, library):
    taken_key = storage.get_spell(library["Magic Missile"])["dedupe_key"]

    assert storage.update_spell(library["Sleep"], {"dedupe_key": taken_key}) is False
    assert storage.update_spell(library["Sleep"], {"name": "Deep Sleep", "combat": False}) is True
    assert storage.get_spell(library["Sleep"])["name"] == "Deep Sleep"
    assert storage.update_spell(9999, {"name": "Ghost"}) is False


def test_find_corrupted_spells(storage, library):
    storage.update_spell_pt_br(library["Sleep"], f"Sono m{CORRUPTED_CHAR}gico")

    rows = storage.find_corrupted_spells()

    assert [row["name"] for row in rows] == ["Sleep"]


def test_missing_reference_counts_attempts(storage):
    storage.upsert_missing_reference("haste", "Haste", "arcane", "PHB", "first")
    storage.upsert_missing_reference("haste", "Haste", "arcane", "PHB", "second", "http://x")

    rows = storage.list_missing_references()
    assert len(rows) == 1
    assert rows[0]["attempt_count"] == 2
    assert rows[0]["reason"] == "second"
    assert storage.clear_missing_reference("haste", "arcane") is True
    assert storage.clear_missing_reference("haste", "arcane") is False


def test_reference_rows_are_unique(storage):
    row = {
        "class_name": "Wizard",
        "group_name": "Alteration",
        "name": "Haste",
        "normalized_name": "haste",
        "level": 3,
        "source": "PHB",
    }
    assert storage.insert_spell_references([row]) == 1
    assert storage.insert_spell_references([row]) == 0
    assert len(storage.find_spell_references("haste")) == 1


def test_ui_texts_upsert(storage):
    storage.upsert_ui_texts([("home", "title", "pt", "Antigo"), ("home", "title", "en", "Old")])
    storage.upsert_ui_texts([("home", "title", "pt", "Novo")])

    rows = storage.get_ui_text_rows(["home"], "pt")
    assert [(r["key"], r["text"]) for r in rows] == [("title", "Novo")]
    assert storage.get_ui_text_rows([], "pt") == []


def test_translations_are_grouped_by_owner(storage):
    attribute_id = storage.upsert_attribute("STRENGTH", "Strength", "Power.", None, 1)
    storage.upsert_attribute_translation(attribute_id, "pt", {"name": "Força"})
    storage.upsert_attribute_translation(attribute_id, "pt", {"name": "Força Bruta"})

    translations = storage.get_attribute_translations([attribute_id])

    assert [row["name"] for row in translations[attribute_id]] == ["Força Bruta"]
    assert storage.upsert_attribute("STRENGTH", "Strength", "Raw power.", None, 1) == attribute_id


def test_sub_attribute_scores_round_trip_in_order(storage):
    attribute_id = storage.upsert_attribute("STRENGTH", "Strength", None, None)
    sub_id = storage.upsert_sub_attribute(attribute_id, "MUSCLE", "Muscle", None, None)
    storage.replace_sub_attribute_scores(sub_id, [{"scoreLabel": "3"}, {"scoreLabel": "4"}])
    storage.replace_sub_attribute_scores(sub_id, [{"scoreLabel": "18"}])

    assert storage.get_sub_attribute_scores(sub_id) == [{"scoreLabel": "18"}]
