import jwt
import pytest

from elder_lib.app import ENV_KEYS, create_app
from elder_lib.auth import build_admin_basic_header
from elder_lib.schemas import SpellPayload

JWT_SECRET = "test-jwt-secret-0123456789abcdef0123"
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "s3cret-pass"


@pytest.fixture
def app(tmp_path, monkeypatch):
    for key in ENV_KEYS + ("CONFIG_PATH",):
        monkeypatch.delenv(key, raising=False)
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test",
            "DATABASE": str(tmp_path / "elder.db"),
            "CONFIG_PATH": str(tmp_path / "elder.cfg"),
            "ASSETS_PATH": str(tmp_path / "assets"),
            "JWT_SECRET": JWT_SECRET,
            "ADMIN_USERNAME": ADMIN_USERNAME,
            "ADMIN_PASSWORD": ADMIN_PASSWORD,
            "LLM_API_KEY": "test-key",
            "WEB_LOOKUP_ENABLED": False,
            "REFERENCE_CSV_DIR": str(tmp_path / "data"),
        }
    )
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def storage(app):
    return app.storage


@pytest.fixture
def bearer_header():
    token = jwt.encode({"sub": "tester"}, JWT_SECRET, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def basic_header():
    return {"Authorization": build_admin_basic_header(ADMIN_USERNAME, ADMIN_PASSWORD)}


def make_spell_data(**overrides) -> dict:
    """A complete, valid spell in wire (camelCase) form."""
    data = {
        "name": "Magic Missile",
        "level": 1,
        "spellClass": "arcane",
        "school": "Invocation/Evocation",
        "sphere": None,
        "source": "PHB",
        "rangeText": "60 yds. + 10 yds./level",
        "target": "1-5 targets",
        "durationText": "Instantaneous",
        "castingTime": "1",
        "components": "V, S",
        "componentConsumed": False,
        "canBeDispelled": False,
        "dispelHow": None,
        "combat": True,
        "utility": False,
        "savingThrow": "None",
        "savingThrowOutcome": None,
        "magicalResistance": "YES",
        "summaryEn": "Unerring bolts of force strike chosen creatures.",
        "summaryPtBr": "Projéteis de força atingem criaturas escolhidas.",
        "descriptionOriginal": "Use of the magic missile spell creates up to five missiles.",
        "descriptionPtBr": "O uso da magia cria até cinco mísseis de energia mágica.",
    }
    data.update(overrides)
    return data


@pytest.fixture
def spell_data():
    return make_spell_data()


@pytest.fixture
def saved_spell(storage):
    """Stores a spell through the regular save path and returns its id."""
    from elder_lib.api.spell_import import save_spell

    return save_spell(storage, SpellPayload.model_validate(make_spell_data()))
