import base64

import jwt

from conftest import ADMIN_PASSWORD, ADMIN_USERNAME, JWT_SECRET
from elder_lib.auth import (
    build_admin_basic_header,
    extract_basic_credentials,
    extract_bearer_token,
    is_valid_admin_login,
)


def test_extract_bearer_token():
    assert extract_bearer_token("Bearer abc.def") == "abc.def"
    assert extract_bearer_token("bearer abc") == "abc"
    assert extract_bearer_token("Bearer") is None
    assert extract_bearer_token("Basic abc") is None
    assert extract_bearer_token(None) is None


def test_extract_basic_credentials():
    assert extract_basic_credentials(build_admin_basic_header("admin", "a:b")) == ("admin", "a:b")
    no_colon = "Basic " + base64.b64encode(b"nocolon").decode("ascii")
    assert extract_basic_credentials(no_colon) is None
    assert extract_basic_credentials("Bearer token") is None
    assert extract_basic_credentials("") is None


def test_admin_login_is_case_insensitive_on_username(app):
    with app.app_context():
        assert is_valid_admin_login(f" {ADMIN_USERNAME.upper()} ", ADMIN_PASSWORD)
        assert not is_valid_admin_login(ADMIN_USERNAME, ADMIN_PASSWORD.upper())
        assert not is_valid_admin_login("someone", ADMIN_PASSWORD)


def test_admin_login_never_matches_without_configured_password(app):
    app.config["ADMIN_PASSWORD"] = ""
    with app.app_context():
        assert not is_valid_admin_login(ADMIN_USERNAME, "")


def test_admin_endpoint_requires_credentials(client):
    response = client.get("/api/spells")
    assert response.status_code == 401
    assert response.get_json() == {"error": "Missing authorization"}


def test_admin_endpoint_accepts_basic_and_bearer(client, basic_header, bearer_header):
    assert client.get("/api/spells", headers=basic_header).status_code == 200
    assert client.get("/api/spells", headers=bearer_header).status_code == 200


def test_wrong_basic_password_is_rejected(client):
    header = {"Authorization": build_admin_basic_header(ADMIN_USERNAME, "nope")}
    assert client.get("/api/spells", headers=header).status_code == 401


def test_token_with_wrong_signature_is_rejected(client):
    token = jwt.encode({"sub": "x"}, "another-secret-0123456789abcdef0123", algorithm="HS256")
    response = client.get("/api/spells", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.get_json() == {"error": "Invalid token"}


def test_bearer_only_endpoint_rejects_basic(client, basic_header):
    response = client.post("/api/spell-reference-sync", headers=basic_header)
    assert response.status_code == 401
    assert response.get_json() == {"error": "Missing Bearer token"}


def test_missing_jwt_secret_is_a_server_error(app, client):
    token = jwt.encode({"sub": "x"}, JWT_SECRET, algorithm="HS256")
    app.config["JWT_SECRET"] = ""
    response = client.get("/api/spells", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 500
    assert response.get_json() == {"error": "JWT_SECRET is not configured"}
