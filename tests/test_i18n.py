from elder_lib.i18n import get_locale, pick_localized_text, to_slug, ui_text, with_lang


def test_get_locale_defaults_to_portuguese():
    assert get_locale({"lang": "en"}) == "en"
    assert get_locale({"lang": ["en", "pt"]}) == "en"
    assert get_locale({"lang": "fr"}) == "pt"
    assert get_locale({}) == "pt"
    assert get_locale(None) == "pt"


def test_with_lang_appends_query_parameter():
    assert with_lang("/racas", "en") == "/racas?lang=en"
    assert with_lang("/admin/spells?page=2", "pt") == "/admin/spells?page=2&lang=pt"


def test_to_slug():
    assert to_slug("Anão das Colinas") == "anao-das-colinas"
    assert to_slug("Infravision, 60'") == "infravision-60"
    assert to_slug("") == ""


def test_ui_text_falls_back_when_key_is_missing():
    texts = {"home.title": "Elder Dungeons"}
    assert ui_text(texts, "home", "title", "x") == "Elder Dungeons"
    assert ui_text(texts, "home", "cta", "Começar") == "Começar"


def test_pick_localized_text_prefers_locale_then_portuguese_then_base():
    translations = [
        {"locale": "pt", "name": "Força", "description": "Poder físico.", "full_description": None},
        {"locale": "en", "name": "Strength", "description": "", "full_description": None},
    ]
    result = pick_localized_text("STRENGTH", "base desc", "base full", translations, "en")
    assert result == {
        "name": "Strength",
        "description": "Poder físico.",
        "full_description": "base full",
    }


def test_pick_localized_text_without_translations():
    result = pick_localized_text("Human", None, None, None, "pt")
    assert result == {"name": "Human", "description": None, "full_description": None}
