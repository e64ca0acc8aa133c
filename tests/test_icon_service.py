import os

import pytest

from core.llm_utils import LLMServiceError
from elder_lib.services.icon_service import (
    IconService,
    canonicalize_icon_group,
    choose_style_rule,
    sanitize_file_name,
)

SPELL = {
    "name": "Magic Missile",
    "spellClass": "arcane",
    "school": "Evocation",
    "summaryEn": "Darts of force.",
    "descriptionOriginal": "Creates up to five missiles of magical energy.",
}


@pytest.fixture
def service(tmp_path):
    return IconService(
        "http://llm/v1", "key", "text-model", "image-model", str(tmp_path / "assets"), "/assets/"
    )


@pytest.mark.parametrize(
    "school, sphere, carving",
    [
        ("Necromancy", None, "rotting bone stone"),
        ("Evocation", None, "burned rune stone"),
        ("Alteration", "Sun", "shifting rune stone"),
        (None, "Healing", "soft glow marble stone"),
        (None, None, "neutral rune stone"),
        ("Nothing Known", None, "neutral rune stone"),
    ],
)
def test_choose_style_rule(school, sphere, carving):
    assert choose_style_rule(school, sphere)[4] == carving


def test_canonicalize_icon_group():
    assert canonicalize_icon_group("Phantasm") == "illusion/phantasm"
    assert canonicalize_icon_group("Elemental  Fire") == "elemental fire"


def test_sanitize_file_name():
    assert sanitize_file_name("Melf's Acid Arrow") == "melf-s-acid-arrow"
    assert sanitize_file_name("Fire/Ice") == "fire-ice"
    assert sanitize_file_name("") == "spell-icon"


def test_generate_icon_prompt_uses_symbol_and_style(mocker, service):
    chat = mocker.patch(
        "elder_lib.services.icon_service.query_chat_llm",
        return_value='{"symbol": "three arrows of light"}',
    )

    prompt = service.generate_icon_prompt(SPELL)

    assert "three arrows of light" in prompt
    assert "burned rune stone" in prompt
    assert chat.call_args.kwargs["json_mode"] is True


def test_unusable_symbol_falls_back(mocker, service):
    mocker.patch("elder_lib.services.icon_service.query_chat_llm", return_value='{"symbol": "x"}')

    prompt = service.generate_icon_prompt(SPELL)

    assert "arcane sigil representing Magic Missile" in prompt


def test_empty_symbol_reply_falls_back(mocker, service):
    mocker.patch(
        "elder_lib.services.icon_service.query_chat_llm",
        side_effect=LLMServiceError("LLM returned empty content"),
    )

    prompt = service.generate_icon_prompt(SPELL)

    assert "arcane sigil representing Magic Missile" in prompt
    assert "burned rune stone" in prompt


def test_generate_and_store_icon_with_prompt_override(mocker, service, tmp_path):
    chat = mocker.patch("elder_lib.services.icon_service.query_chat_llm")
    image = mocker.patch("elder_lib.services.icon_service.generate_image", return_value=b"png")

    result = service.generate_and_store_icon(SPELL, "  custom prompt ")

    chat.assert_not_called()
    image.assert_called_once_with("custom prompt", "http://llm/v1", "key", "image-model")
    assert result["iconPrompt"] == "custom prompt"
    assert result["iconUrl"].startswith("/assets/spells/magic-missile-")
    assert result["iconUrl"].endswith(".png")
    stored = tmp_path / "assets" / "spells" / os.path.basename(result["iconUrl"])
    assert stored.read_bytes() == b"png"


def test_generate_and_store_icon_builds_prompt_when_missing(mocker, service):
    mocker.patch(
        "elder_lib.services.icon_service.query_chat_llm", return_value='{"symbol": "a glowing dart"}'
    )
    mocker.patch("elder_lib.services.icon_service.generate_image", return_value=b"png")

    result = service.generate_and_store_icon(SPELL)

    assert "a glowing dart" in result["iconPrompt"]
