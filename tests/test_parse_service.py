import pytest
from pydantic import ValidationError

from core.llm_utils import LLMServiceError
from elder_lib.constants import PROMPT_REGISTRY
from elder_lib.services.parse_service import (
    SpellParseError,
    SpellParseService,
    build_humorous_fallback_spell,
)
from elder_lib.services.reference_service import SpellReferenceMatch

SPELL_TEXT = "Haste\nRange: 60 yds.\nComponents: V, S, M\n\nEach affected creature moves at double speed."
CHATTY_TEXT = "oi pessoal, tudo bem com vocês hoje?"


def llm_spell(**overrides) -> dict:
    data = {
        "name": "Haste",
        "level": 3,
        "spellClass": None,
        "school": "Alteration",
        "sphere": None,
        "source": "PHB",
        "rangeText": "60 yds.",
        "target": "1 creature/level",
        "durationText": "3 rds. + 1 rd./level",
        "castingTime": "3",
        "components": "V, S, M",
        "canBeDispelled": True,
        "dispelHow": "Dispel Magic",
        "combat": True,
        "utility": False,
        "savingThrow": "None",
        "magicalResistance": None,
        "summaryEn": "Speeds up creatures.",
        "summaryPtBr": "Acelera criaturas.",
        "descriptionOriginal": "Each affected creature moves at double its normal speed.",
        "descriptionPtBr": "Cada criatura afetada se move com o dobro da velocidade normal.",
    }
    data.update(overrides)
    return data


CREATIVE = {
    "nome_magia": "Fagulha da Conversa Perdida",
    "escola_magia": "Wild Semiotics",
    "nivel": "3º círculo",
    "componentes": ["V", "S"],
    "tempo_conjuracao": "1 ação",
    "alcance": "10 metros",
    "duracao": "1 turno",
    "descricao_efeito": "Uma chuva de confete causa dano emocional aos presentes.",
    "efeito_colateral_comico": "Todos riem sem motivo.",
    "falha_critica": "O mago vira um sapo falante.",
    "nota_arquimago": "Não tente isso em casa.",
}


@pytest.fixture
def reference(mocker):
    return mocker.Mock(**{"find_spell_reference_by_name.return_value": None})


@pytest.fixture
def web_lookup(mocker):
    return mocker.Mock(**{"resolve_spell_level_from_web.return_value": None})


@pytest.fixture
def icon_service(mocker):
    return mocker.Mock()


@pytest.fixture
def service(reference, web_lookup, icon_service):
    return SpellParseService(reference, web_lookup, icon_service, "http://llm/v1", "key", "model")


def mock_llm(mocker, handler):
    """Routes query_json_llm calls by system prompt to `handler(prompt_name)`."""
    names = {text: name for name, text in PROMPT_REGISTRY.items()}

    def fake(messages, *args, **kwargs):
        result = handler(names[messages[0]["content"]])
        if isinstance(result, Exception):
            raise result
        return result

    return mocker.patch("elder_lib.services.parse_service.query_json_llm", side_effect=fake)


def test_parse_fills_inferred_fields(mocker, service):
    llm = mock_llm(mocker, lambda prompt: llm_spell())

    spell = service.parse_spell({"text": SPELL_TEXT, "sourceImageUrl": "https://img.test/haste.png"})

    assert llm.call_count == 1
    assert spell.name == "Haste"
    assert spell.level == 3
    assert spell.spell_class == "arcane"
    assert spell.school == "Alteration"
    assert spell.sphere is None
    assert spell.magical_resistance == "YES"
    assert (spell.saving_throw, spell.saving_throw_outcome) == ("None", None)
    assert spell.dispel_how == "Dispel Magic"
    assert spell.source_image_url == "https://img.test/haste.png"


def test_reference_overrides_level_and_groups(mocker, service, reference):
    reference.find_spell_reference_by_name.return_value = SpellReferenceMatch(
        levels=[2], sources=["TOM"], schools=["Evocation"], spheres=[], class_names=["wizard"]
    )
    mock_llm(mocker, lambda prompt: llm_spell())

    spell = service.parse_spell({"text": SPELL_TEXT})

    assert spell.level == 2
    assert spell.school == "Invocation/Evocation"
    assert spell.source == "PHB, TOM"


def test_missing_translations_are_requested(mocker, service):
    def handler(prompt):
        if prompt == "SPELL_PARSE":
            return llm_spell(summaryPtBr=None, descriptionPtBr=None)
        return {
            "descriptionPtBr": "Texto traduzido.",
            "summaryEn": "Speeds up allies.",
            "summaryPtBr": "Acelera aliados.",
        }

    llm = mock_llm(mocker, handler)

    spell = service.parse_spell({"text": SPELL_TEXT})

    assert llm.call_count == 2
    assert spell.description_pt_br == "Texto traduzido."
    assert spell.summary_en == "Speeds up allies."


def test_missing_level_uses_web_lookup(mocker, service, web_lookup):
    web_lookup.resolve_spell_level_from_web.return_value = 4
    mock_llm(mocker, lambda prompt: llm_spell(level=None))

    assert service.parse_spell({"text": SPELL_TEXT}).level == 4
    web_lookup.resolve_spell_level_from_web.assert_called_once_with("Haste")


def test_unresolved_level_is_an_error(mocker, service):
    mock_llm(mocker, lambda prompt: llm_spell(level=None))
    with pytest.raises(SpellParseError, match="nível"):
        service.parse_spell({"text": SPELL_TEXT})


def test_zero_level_only_for_cantrip_and_orison(mocker, service):
    mock_llm(mocker, lambda prompt: llm_spell(level=0))
    with pytest.raises(SpellParseError, match="nível 0"):
        service.parse_spell({"text": SPELL_TEXT})

    mock_llm(mocker, lambda prompt: llm_spell(name="Cantrip", level=0))
    assert service.parse_spell({"text": SPELL_TEXT}).level == 0


def test_divine_spell_needs_a_sphere(mocker, service):
    mock_llm(mocker, lambda prompt: llm_spell(spellClass="divine", school=None))
    with pytest.raises(SpellParseError, match="esfera"):
        service.parse_spell({"text": SPELL_TEXT})


def test_divine_spell_copies_schools_into_spheres(mocker, service):
    mock_llm(mocker, lambda prompt: llm_spell(spellClass="divine", school="Healing"))

    spell = service.parse_spell({"text": SPELL_TEXT})

    assert spell.spell_class == "divine"
    assert spell.sphere == "Healing"


def test_empty_request_is_rejected(service):
    with pytest.raises(ValidationError):
        service.parse_spell({"text": "   "})


def test_spell_like_text_propagates_llm_errors(mocker, service):
    mock_llm(mocker, lambda prompt: LLMServiceError("down", status=503))
    with pytest.raises(LLMServiceError):
        service.parse_spell({"text": SPELL_TEXT})


def test_chatty_text_becomes_creative_spell(mocker, service):
    def handler(prompt):
        if prompt == "SPELL_PARSE":
            return LLMServiceError("not a spell")
        return CREATIVE

    mock_llm(mocker, handler)

    spell = service.parse_spell({"text": CHATTY_TEXT})

    assert spell.name == "Fagulha da Conversa Perdida"
    assert spell.level == 3
    assert spell.components == "V, S"
    assert spell.combat is True
    assert "Archmage Note: Não tente isso em casa." in spell.description_original


def test_chatty_text_falls_back_to_humorous_spell(mocker, service):
    mock_llm(mocker, lambda prompt: LLMServiceError("down"))

    spell = service.parse_spell({"text": CHATTY_TEXT})

    assert spell.name == "Interpretação de Oi Pessoal, Tudo Bem"
    assert spell.utility is True
    assert CHATTY_TEXT in spell.description_original


def test_humorous_fallback_truncates_long_text():
    spell = build_humorous_fallback_spell("palavra " * 100)
    assert '..."' in spell.description_original


def test_icon_attached_when_enabled(mocker, reference, web_lookup, icon_service):
    icon_service.generate_and_store_icon.return_value = {
        "iconUrl": "/assets/spells/haste-1.png",
        "iconPrompt": "hourglass",
    }
    service = SpellParseService(
        reference, web_lookup, icon_service, "http://llm/v1", "key", "model", icon_on_parse=True
    )
    mock_llm(mocker, lambda prompt: llm_spell())

    spell = service.parse_spell({"text": SPELL_TEXT})

    assert spell.icon_url == "/assets/spells/haste-1.png"
    assert spell.icon_prompt == "hourglass"


def test_icon_failure_keeps_the_spell(mocker, reference, web_lookup, icon_service):
    icon_service.generate_and_store_icon.side_effect = OSError("disk full")
    service = SpellParseService(
        reference, web_lookup, icon_service, "http://llm/v1", "key", "model", icon_on_parse=True
    )
    mock_llm(mocker, lambda prompt: llm_spell())

    spell = service.parse_spell({"text": SPELL_TEXT})

    assert spell.name == "Haste"
    assert spell.icon_url is None
