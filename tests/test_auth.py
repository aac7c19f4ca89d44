from fraudbase.auth.routes import MSG_INVALID_CREDENTIALS, MSG_LOGGED_OUT, MSG_MISSING_CREDENTIALS
from fraudbase.common.config import get_settings
from fraudbase.common.security import create_session_token, read_session_token
from fraudbase.common.session import Session

COOKIE = get_settings().session_cookie_name


# ============================================================================
# SESSÃO
# ============================================================================

class TestSession:
    def test_token_round_trip(self):
        token = create_session_token({"token": "abc", "userId": 1})
        assert read_session_token(token) == {"token": "abc", "userId": 1}

    def test_tampered_token_is_rejected(self):
        token = create_session_token({"token": "abc"})
        assert read_session_token(token[:-2] + "xx") is None

    def test_expired_token_is_rejected(self):
        assert read_session_token(create_session_token({"token": "abc"}, expires_minutes=-1)) is None

    def test_from_login(self):
        session = Session.from_login({"token": "t", "userId": 3, "username": "ana", "nome": "Ana", "isAdmin": 1})
        assert session.is_authenticated()
        assert session.is_admin
        assert session.user_id == 3
        assert session.get_token() == "t"

    def test_unknown_keys_are_dropped(self):
        assert Session({"token": "t", "senha": "x"}).as_dict() == {"token": "t"}

    def test_empty_session(self):
        session = Session()
        assert not session.is_authenticated()
        assert session.get_token() == ""


# ============================================================================
# GUARDA DE ROTA
# ============================================================================

def test_protected_route_redirects_to_login(client):
    for path in ("/dashboard", "/reincidencia-cpf", "/upload-relatorio", "/settings/profile"):
        response = client.get(path, follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/"


def test_tampered_cookie_is_treated_as_anonymous(client):
    client.cookies.set(COOKIE, "lixo")
    response = client.get("/dashboard", follow_redirects=False)
    assert response.headers["location"] == "/"


def test_login_page_redirects_when_authenticated(logged_client):
    response = logged_client.get("/", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"


def test_login_page(client):
    response = client.get("/")
    assert response.status_code == 200
    assert 'action="/login"' in response.text


# ============================================================================
# LOGIN / LOGOUT
# ============================================================================

def test_login_success(client, backend):
    backend.on(
        "POST",
        "/login",
        json={"token": "jwt-backend", "userId": 9, "username": "ana", "nome": "Ana", "isAdmin": False},
    )
    response = client.post("/login", data={"username": "ana", "password": "segredo"}, follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"
    session = read_session_token(response.cookies[COOKIE])
    assert session["token"] == "jwt-backend"
    assert session["userId"] == 9

    request = backend.calls("POST", "/login")[0]
    assert "Authorization" not in request.headers


def test_login_invalid_credentials(client, backend):
    backend.on("POST", "/login", status_code=401, json={"message": "Credenciais inválidas"})
    response = client.post("/login", data={"username": "ana", "password": "errada"})

    assert response.status_code == 401
    assert MSG_INVALID_CREDENTIALS in response.text
    assert COOKIE not in response.cookies


def test_login_missing_fields(client, backend):
    response = client.post("/login", data={"username": "ana", "password": ""})

    assert response.status_code == 400
    assert MSG_MISSING_CREDENTIALS in response.text
    assert backend.requests == []


def test_logout(logged_client):
    response = logged_client.get("/logout")

    assert response.url.path == "/"
    assert MSG_LOGGED_OUT in response.text
    assert logged_client.get("/dashboard", follow_redirects=False).headers["location"] == "/"
