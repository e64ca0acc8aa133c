import pytest

from conftest import make_spell_data
from elder_lib.constants import SPELL_NOT_FOUND_REASON
from elder_lib.schemas import HydrateRequest, SpellPayload
from elder_lib.services.hydrate_service import CandidateReference, classify_reference_class
from elder_lib.services.web_lookup_service import WebSpellText

REFERENCE_CSV = (
    "class,group,name,lvl,source\n"
    "Wizard,Alteration,Haste,3,PHB\n"
    "Wizard,Alteration,Slow,3,PHB\n"
    "Priest,Healing,Cure Light Wounds,1,PHB\n"
    "Cleric,Healing,Bless,1,PHB\n"
    "Wizard,Evocation,Magic Missile,1,PHB\n"
)
HASTE = CandidateReference("haste", "Haste", "arcane", 3, "PHB")


@pytest.fixture
def hydrate(app, mocker):
    """The app's hydrate service with its network and LLM collaborators mocked."""
    app.reference_service.import_reference_csv(REFERENCE_CSV)
    service = app.hydrate_service
    service.web_lookup = mocker.Mock()
    service.parse_service = mocker.Mock()
    return service


def _names(candidates):
    return [candidate.name for candidate in candidates]


def _parsed(**overrides) -> SpellPayload:
    values = {"name": "Haste", "level": 1, "school": "Alteration", "summaryEn": "Speeds allies."}
    values.update(overrides)
    return SpellPayload.model_validate(make_spell_data(**values))


@pytest.mark.parametrize(
    "class_name, expected",
    [("Wizard", "arcane"), ("Mage", "arcane"), ("Priest", "divine"), ("druid", "divine"), ("Cleric", None)],
)
def test_classify_reference_class(class_name, expected):
    assert classify_reference_class(class_name) == expected


def test_candidates_skip_existing_and_unusable_classes(hydrate, saved_spell):
    candidates = hydrate.get_candidate_spells(limit=10)
    assert _names(candidates) == ["Cure Light Wounds", "Haste", "Slow"]
    assert _names(hydrate.get_candidate_spells(spell_class="arcane", limit=10)) == ["Haste", "Slow"]
    assert _names(hydrate.get_candidate_spells(name=" HASTE ", limit=10)) == ["Haste"]
    assert _names(hydrate.get_candidate_spells(limit=1)) == ["Cure Light Wounds"]


def test_candidates_and_the_missing_table(hydrate, storage):
    storage.upsert_missing_reference("haste", "Haste", "arcane", "PHB", "earlier failure")

    assert _names(hydrate.get_candidate_spells(limit=10)) == ["Cure Light Wounds", "Magic Missile", "Slow"]
    assert _names(hydrate.get_candidate_spells(limit=10, retry_missing=True)) == [
        "Haste",
        "Cure Light Wounds",
        "Magic Missile",
        "Slow",
    ]
    only_missing = hydrate.get_candidate_spells(limit=10, retry_missing=True, retry_only_missing=True)
    assert _names(only_missing) == ["Haste"]


def test_not_found_is_recorded(hydrate, storage):
    hydrate.web_lookup.search_spell_text_strict.return_value = None

    result = hydrate.process_candidate(HASTE)

    assert result["status"] == "not-found"
    assert result["reason"] == SPELL_NOT_FOUND_REASON
    assert [row["spellName"] for row in hydrate.list_missing()] == ["Haste"]
    hydrate.parse_service.parse_spell.assert_not_called()


def test_found_spell_is_saved_with_reference_identity(hydrate, storage):
    storage.upsert_missing_reference("haste", "Haste", "arcane", "PHB", "earlier failure")
    hydrate.web_lookup.search_spell_text_strict.return_value = WebSpellText("Haste text", "http://wiki/Haste")
    hydrate.parse_service.parse_spell.return_value = _parsed(sphere="Time")

    result = hydrate.process_candidate(HASTE)

    assert result["status"] == "saved"
    assert result["matchedUrl"] == "http://wiki/Haste"
    row = storage.get_spell(result["spellId"])
    assert row["level"] == 3
    assert row["school"] == "Alteration, Time"
    assert row["sphere"] is None
    assert hydrate.list_missing() == []
    sent = hydrate.parse_service.parse_spell.call_args[0][0]["text"]
    assert sent.startswith("EXPECTED_NAME: Haste\nEXPECTED_CLASS: arcane\nEXPECTED_LEVEL: 3")


def test_existing_spell_is_replaced_in_place(hydrate, storage):
    hydrate.web_lookup.search_spell_text_strict.return_value = WebSpellText("Haste text", "http://wiki/Haste")
    hydrate.parse_service.parse_spell.return_value = _parsed()
    first = hydrate.process_candidate(HASTE)["spellId"]

    hydrate.parse_service.parse_spell.return_value = _parsed(summaryPtBr="Acelera aliados.")
    second = hydrate.process_candidate(HASTE)["spellId"]

    assert first == second
    assert storage.get_spell(first)["summary_pt_br"] == "Acelera aliados."
    assert storage.count_spells({}) == 1


def test_name_mismatch_is_a_failure(hydrate, storage):
    hydrate.web_lookup.search_spell_text_strict.return_value = WebSpellText("Slow text", "http://wiki/Slow")
    hydrate.parse_service.parse_spell.return_value = _parsed(name="Slow")

    result = hydrate.process_candidate(HASTE)

    assert result["status"] == "not-found"
    assert result["reason"] == "Nome divergente no parse (Slow)."
    missing = hydrate.list_missing()
    assert missing[0]["lastUrl"] == "http://wiki/Slow"
    assert storage.count_spells({}) == 0


def test_divine_without_sphere_is_a_failure(hydrate):
    hydrate.web_lookup.search_spell_text_strict.return_value = WebSpellText("text", "http://wiki/Cure")
    hydrate.parse_service.parse_spell.return_value = _parsed(name="Cure Light Wounds")

    result = hydrate.process_candidate(
        CandidateReference("cure light wounds", "Cure Light Wounds", "divine", 1, "PHB")
    )

    assert result["reason"] == "Magia divina sem esfera identificada."


def test_hydrate_without_candidates(hydrate):
    result = hydrate.hydrate(HydrateRequest.model_validate({"name": "Unknown Spell"}))
    assert result == {
        "processed": [],
        "error": "Nenhum candidate pendente para processar com os filtros informados.",
    }


def test_hydrate_processes_a_batch(hydrate):
    hydrate.web_lookup.search_spell_text_strict.return_value = None

    result = hydrate.hydrate(HydrateRequest.model_validate({"limit": 2, "spellClass": "arcane"}))

    assert [item["name"] for item in result["processed"]] == ["Haste", "Magic Missile"]
    assert len(result["missing"]) == 2
