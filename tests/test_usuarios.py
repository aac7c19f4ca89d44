import json

import pytest
from pydantic import ValidationError

from fraudbase.common.forms import form_errors
from fraudbase.main import MSG_ADMIN_ONLY
from fraudbase.usuarios.routes import MSG_PASSWORD_CHANGED, MSG_USER_CREATED, MSG_USER_DELETED
from fraudbase.usuarios.schemas import NewUserForm, PasswordChange, User, UserForm

VALID_USER = {
    "login": "ana.souza",
    "nome": "Ana Souza",
    "cpf": "123.456.789-01",
    "matricula": "12345",
    "telefone": "(11)98765-4321",
    "cidade": "São Paulo",
    "estado": "SP",
    "unidade_policial": "1º DP",
    "email": "ana@policia.sp.gov.br",
}

USERS = [
    {"id": 1, "login": "admin", "nome": "Administrador", "cpf": None, "is_admin": True},
    {"id": 2, "login": "ana.souza", "nome": "Ana Souza", "cpf": "12345678901", "is_admin": False},
]


# ============================================================================
# VALIDAÇÃO DOS FORMULÁRIOS
# ============================================================================

class TestUserForm:
    def test_valid_payload_is_normalized(self):
        payload = UserForm(**VALID_USER).to_payload(5)

        assert payload["cpf"] == "12345678901"
        assert payload["telefone"] == "11987654321"
        assert payload["id"] == 5
        assert payload["is_admin"] is False

    def test_required_fields(self):
        with pytest.raises(ValidationError) as exc:
            UserForm()
        errors = form_errors(exc.value)

        assert errors["login"] == "Login é obrigatório"
        assert errors["nome"] == "Nome é obrigatório"
        assert errors["cpf"] == "CPF é obrigatório"
        assert errors["email"] == "Email é obrigatório"

    @pytest.mark.parametrize(
        "field, value, message",
        [
            ("email", "ana@", "Email inválido"),
            ("cpf", "123.456", "CPF deve ter 11 dígitos"),
        ],
    )
    def test_invalid_fields(self, field, value, message):
        with pytest.raises(ValidationError) as exc:
            UserForm(**{**VALID_USER, field: value})
        assert form_errors(exc.value) == {field: message}


class TestPasswords:
    def test_short_password(self):
        with pytest.raises(ValidationError) as exc:
            PasswordChange(senha="123", confirmacao="123")
        assert form_errors(exc.value) == {"senha": "A senha deve ter pelo menos 6 caracteres"}

    def test_missing_password(self):
        with pytest.raises(ValidationError) as exc:
            PasswordChange()
        assert form_errors(exc.value)["senha"] == "Nova senha é obrigatória"

    def test_mismatch(self):
        with pytest.raises(ValidationError) as exc:
            PasswordChange(senha="segredo1", confirmacao="segredo2")
        assert form_errors(exc.value) == {"confirmacao": "As senhas não coincidem"}

    def test_new_user_payload_has_no_confirmation(self):
        payload = NewUserForm(**VALID_USER, senha="segredo", confirmacao="segredo").to_payload()

        assert payload["senha"] == "segredo"
        assert "confirmacao" not in payload
        assert "id" not in payload


def test_user_model_tolerates_nulls():
    user = User.model_validate(USERS[0])
    assert user.cpf == ""
    assert user.is_admin


# ============================================================================
# ROTAS DE ADMINISTRAÇÃO
# ============================================================================

class TestAdminRoutes:
    def test_non_admin_is_redirected(self, logged_client, backend):
        response = logged_client.get("/settings/users", follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/dashboard"
        assert backend.requests == []

        assert MSG_ADMIN_ONLY in logged_client.get("/settings/users").text

    def test_list(self, admin_client, backend):
        backend.on("GET", "/users", json=USERS)
        response = admin_client.get("/settings/users")

        assert response.status_code == 200
        assert "Administrador" in response.text
        assert "123.456.789-01" in response.text
        assert '<div class="modal-backdrop">' not in response.text

    def test_delete_confirmation_and_delete(self, admin_client, backend):
        backend.on("GET", "/users", json=USERS)
        backend.on("DELETE", "/users/2", json={"message": "ok"})

        confirm = admin_client.get("/settings/users?excluir=2")
        assert "Confirmar Exclusão" in confirm.text
        assert backend.calls("DELETE", "/users/2") == []

        response = admin_client.post("/settings/users/2/excluir")
        assert len(backend.calls("DELETE", "/users/2")) == 1
        assert MSG_USER_DELETED in response.text

    def test_edit_with_password(self, admin_client, backend):
        backend.on("GET", "/users", json=USERS)
        backend.on("PUT", "/users", json={})
        backend.on("PUT", "/users/password", json={})

        admin_client.post(
            "/settings/users/2",
            data={**VALID_USER, "alterar_senha": "true", "senha": "novasenha", "confirmacao": "novasenha"},
        )

        body = json.loads(backend.calls("PUT", "/users")[0].content)
        assert body["id"] == 2
        assert body["cpf"] == "12345678901"
        assert json.loads(backend.calls("PUT", "/users/password")[0].content) == {"id": 2, "password": "novasenha"}

    def test_edit_invalid_does_not_call_backend(self, admin_client, backend):
        backend.on("GET", "/users", json=USERS)
        response = admin_client.post("/settings/users/2", data={**VALID_USER, "email": "invalido"})

        assert "Email inválido" in response.text
        assert backend.calls("PUT", "/users") == []

    def test_register_password_mismatch(self, admin_client, backend):
        response = admin_client.post(
            "/settings/register",
            data={**VALID_USER, "senha": "segredo1", "confirmacao": "segredo2"},
        )

        assert response.status_code == 200
        assert "As senhas não coincidem" in response.text
        assert backend.calls("POST", "/users") == []

    def test_register_success(self, admin_client, backend):
        backend.on("POST", "/users", status_code=201, json={"id": 3})
        backend.on("GET", "/users", json=USERS)
        response = admin_client.post(
            "/settings/register",
            data={**VALID_USER, "senha": "segredo", "confirmacao": "segredo"},
        )

        body = json.loads(backend.calls("POST", "/users")[0].content)
        assert body["login"] == "ana.souza"
        assert "confirmacao" not in body
        assert MSG_USER_CREATED in response.text


# ============================================================================
# PERFIL
# ============================================================================

class TestProfile:
    def test_profile(self, logged_client, backend):
        backend.on("GET", "/users/7", json={**USERS[1], "id": 7, "telefone": "1133334444"})
        response = logged_client.get("/settings/profile")

        assert "Ana Souza" in response.text
        assert "(11)3333-4444" in response.text

    def test_change_own_password(self, logged_client, backend):
        backend.on("GET", "/users/7", json={"id": 7, "login": "maria"})
        backend.on("PUT", "/users/password", json={})
        response = logged_client.post("/settings/profile/senha", data={"senha": "segredo", "confirmacao": "segredo"})

        assert json.loads(backend.calls("PUT", "/users/password")[0].content) == {"id": 7, "password": "segredo"}
        assert MSG_PASSWORD_CHANGED in response.text

    def test_change_own_password_mismatch(self, logged_client, backend):
        backend.on("GET", "/users/7", json={"id": 7, "login": "maria"})
        response = logged_client.post("/settings/profile/senha", data={"senha": "segredo", "confirmacao": "outra"})

        assert "As senhas não coincidem" in response.text
        assert backend.calls("PUT", "/users/password") == []
