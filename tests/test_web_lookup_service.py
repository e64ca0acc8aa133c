from types import SimpleNamespace

import requests

from elder_lib.constants import FANDOM_BASE_URL
from elder_lib.services.web_lookup_service import (
    WebLookupService,
    cleanup_fandom_noise,
    extract_canonical_spell_text,
    extract_search_result_urls,
    is_strict_2e_spell_page,
    normalize_for_match,
    wiki_title_from_url,
)

FIREBALL_PAGE = (
    "Fireball\n"
    "A wizard spell from the Player's Handbook for AD&D 2nd edition.\n"
    "Spell Level 3\n"
    "Range: 10 yds. + 10 yds./level\n"
    "Duration: Instantaneous\n"
    "Casting Time: 3\n"
    "Components: V, S, M\n"
    "Saving Throw: 1/2\n"
    "This 3rd level spell creates an explosive burst of flame."
)
FIREBALL_NARRATIVE = "The fireball detonates with a low roar and fills the area with flame. " * 7
FIREBALL_HTML = "".join(
    f"<p>{line}</p>" for line in (FIREBALL_PAGE + "\n" + FIREBALL_NARRATIVE).split("\n")
) + "<p>Recent images</p><p>Gallery</p>"
FIREBALL = SimpleNamespace(name="Fireball", spell_class="arcane", level=3, reference_source="PHB")


def _response(mocker, status=200, json_data=None, text=""):
    response = mocker.MagicMock()
    response.status_code = status
    response.url = "http://example.test"
    response.json.return_value = json_data or {}
    response.text = text
    return response


def test_strict_page_accepts_matching_entry():
    assert is_strict_2e_spell_page(FIREBALL_PAGE, "Fireball", "arcane", 3, "PHB")
    assert is_strict_2e_spell_page(FIREBALL_PAGE, "Fireball", "arcane", 3, "XYZ")


def test_strict_page_rejects_mismatches():
    assert not is_strict_2e_spell_page(FIREBALL_PAGE, "Lightning Bolt", "arcane", 3, "PHB")
    assert not is_strict_2e_spell_page(FIREBALL_PAGE, "Fireball", "divine", 3, "PHB")
    assert not is_strict_2e_spell_page(FIREBALL_PAGE, "Fireball", "arcane", 5, "PHB")
    assert not is_strict_2e_spell_page(FIREBALL_PAGE, "Fireball", "arcane", 3, "TOM")
    assert not is_strict_2e_spell_page("Fireball wizard spell 3rd level AD&D", "Fireball", "arcane", 3, None)


def test_wiki_title_from_url():
    assert wiki_title_from_url(f"{FANDOM_BASE_URL}/wiki/Magic_Missile") == "Magic Missile"
    assert wiki_title_from_url(f"{FANDOM_BASE_URL}/wiki/Bigby%27s_Hand") == "Bigby's Hand"
    assert wiki_title_from_url("https://example.com/other") is None


def test_extract_search_result_urls_dedupes_and_drops_categories():
    html = (
        '<a href="/wiki/Fireball">x</a>'
        f'<a href="{FANDOM_BASE_URL}/wiki/Category:Spells">c</a>'
        '<a href="/wiki/Fireball#Notes">n</a>'
    )
    assert extract_search_result_urls(html) == [f"{FANDOM_BASE_URL}/wiki/Fireball"]


def test_text_helpers():
    assert cleanup_fandom_noise("ADVERTISEMENT\nThe spell text") == "The spell text"
    assert normalize_for_match("Mordenkainen's  Sword!") == "mordenkainen s sword"


def test_disabled_service_never_calls_the_network(mocker):
    get = mocker.patch("elder_lib.services.web_lookup_service.requests.get")

    service = WebLookupService(enabled=False)

    assert service.resolve_spell_level_from_web("Fireball") is None
    assert service.candidate_titles("Fireball", "arcane") == []
    assert service.search_spell_text_strict(FIREBALL) is None
    get.assert_not_called()


def test_strict_search_walks_candidates_to_the_matching_page(mocker):
    parsed_titles = []

    def fake_get(url, params=None, headers=None, timeout=None):
        params = params or {}
        if url.endswith("/api.php") and params.get("action") == "query":
            assert params["srsearch"] == "Fireball Wizard_Spell"
            return _response(
                mocker,
                json_data={"query": {"search": [{"title": "Fireball (Wizard Spell)"}, {"title": "Fire_Shield"}]}},
            )
        if url.endswith("/api.php"):
            parsed_titles.append(params["page"])
            if params["page"] == "Fireball (Wizard Spell)":
                return _response(mocker, json_data={"parse": {"title": params["page"], "text": FIREBALL_HTML}})
            return _response(mocker, json_data={"parse": {"title": params["page"], "text": "<p>Fireball stub</p>"}})
        if url.endswith("/wiki/Special:Search"):
            return _response(mocker, text='<a href="/wiki/Delayed_Blast_Fireball">d</a>')
        if url.endswith("/wiki/Category:Spells"):
            return _response(
                mocker, text='<a href="/wiki/Fireball_(Wizard_Spell)">f</a><a href="/wiki/Sleep">s</a>'
            )
        raise AssertionError(f"unexpected GET {url}")

    mocker.patch("elder_lib.services.web_lookup_service.requests.get", side_effect=fake_get)
    service = WebLookupService()

    assert service.candidate_titles("Fireball", "arcane") == [
        "Fireball",
        "Fireball (Wizard Spell)",
        "Fire Shield",
        "Delayed Blast Fireball",
    ]
    found = service.search_spell_text_strict(FIREBALL)

    assert parsed_titles == ["Fireball", "Fireball (Wizard Spell)"]
    assert found.url == f"{FANDOM_BASE_URL}/wiki/Fireball_%28Wizard_Spell%29"
    assert found.text.startswith("Fireball")
    assert "explosive burst of flame" in found.text
    assert "Recent images" not in found.text


def test_strict_search_gives_up_when_search_fails(mocker):
    mocker.patch(
        "elder_lib.services.web_lookup_service.requests.get",
        side_effect=requests.ConnectionError("offline"),
    )
    assert WebLookupService().search_spell_text_strict(FIREBALL) is None


def test_extract_canonical_spell_text_cuts_page_chrome():
    page = "SIGN IN TO EDIT\n" + FIREBALL_PAGE + "\nRecent images\nGallery"

    text = extract_canonical_spell_text(page, "Fireball")

    assert text.startswith("Fireball")
    assert "\nRange: 10 yds." in text
    assert "SIGN IN TO EDIT" not in text
    assert "Gallery" not in text


def test_level_from_instant_answer(mocker):
    mocker.patch(
        "elder_lib.services.web_lookup_service.requests.get",
        return_value=_response(
            mocker,
            json_data={"AbstractText": "Fireball is a 3rd level spell.", "RelatedTopics": []},
        ),
    )
    assert WebLookupService().resolve_spell_level_from_web("Fireball") == 3


def test_level_lookup_falls_back_after_network_error(mocker):
    mocker.patch(
        "elder_lib.services.web_lookup_service.requests.get",
        side_effect=[
            requests.ConnectionError("offline"),
            _response(mocker, text="<p>Haste is a 3rd level wizard spell</p>"),
        ],
    )
    assert WebLookupService().resolve_spell_level_from_web("Haste") == 3


def test_fetch_fandom_page(mocker):
    mocker.patch(
        "elder_lib.services.web_lookup_service.requests.get",
        return_value=_response(
            mocker, json_data={"parse": {"title": "Magic Missile", "text": "<p>Darts</p>"}}
        ),
    )
    page = WebLookupService().fetch_fandom_page("Magic Missile")

    assert page.text == "Darts"
    assert page.url == f"{FANDOM_BASE_URL}/wiki/Magic_Missile"


def test_fetch_fandom_page_http_error_returns_none(mocker):
    mocker.patch(
        "elder_lib.services.web_lookup_service.requests.get",
        return_value=_response(mocker, status=404),
    )
    assert WebLookupService().fetch_fandom_page("Nope") is None
