import pytest

from elder_lib.seed_data import seed_attributes, seed_races, seed_ui_texts


@pytest.fixture
def seeded(app):
    seed_ui_texts(app.ui_text_service)
    seed_attributes(app.storage)
    seed_races(app.storage)
    return app


def _html(response) -> str:
    return response.get_data(as_text=True)


def test_home_in_both_languages(client, seeded):
    pt = client.get("/")
    en = client.get("/?lang=en")

    assert pt.status_code == 200
    assert "Elder Dungeons" in _html(pt)
    assert "Começar por Atributos" in _html(pt)
    assert "Start with Attributes" in _html(en)
    assert 'href="/atributos?lang=en"' in _html(en)


def test_home_without_seeded_texts_uses_fallbacks(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "Começar por Atributos" in _html(response)


def test_index_page(client, seeded):
    assert client.get("/indice").status_code == 200


def test_attributes_list_and_detail(client, seeded):
    listing = client.get("/atributos")
    detail = client.get("/atributos/strength")
    detail_en = client.get("/atributos/strength?lang=en")

    assert "Força" in _html(listing)
    assert 'href="/atributos/strength?lang=pt"' in _html(listing)
    assert detail.status_code == 200
    assert "Força" in _html(detail)
    assert "<table" in _html(detail)
    assert "Strength" in _html(detail_en)


def test_races_pages(client, seeded):
    listing = client.get("/racas")
    race = client.get("/racas/dwarf")
    race_en = client.get("/racas/dwarf?lang=en")

    assert "Anão" in _html(listing)
    assert "Anão das Colinas" in _html(listing)
    assert "<h1>Anão</h1>" in _html(race)
    assert "<h1>Dwarf</h1>" in _html(race_en)
    assert "+1" in _html(race)


def test_sub_race_standard_package_cost(client, seeded):
    response = client.get("/racas/dwarf/subracas/hill-dwarf")

    assert response.status_code == 200
    assert "Anão das Colinas" in _html(response)
    assert "(40)" in _html(response)


def test_race_costs_page(client, seeded):
    response = client.get("/racas/dwarf/custos")

    assert response.status_code == 200
    assert "Hill Dwarf Water Unease" in _html(response)
    assert "Axe Bonus" in _html(response)


@pytest.mark.parametrize(
    "path",
    [
        "/atributos/luck",
        "/racas/orc",
        "/racas/dwarf/subracas/deep-dwarf",
        "/racas/orc/custos",
        "/nowhere",
    ],
)
def test_unknown_pages_render_not_found(client, seeded, path):
    response = client.get(path)
    assert response.status_code == 404
    assert "text/html" in response.content_type
