"""Unit tests for the authentication router.

Collaborators are replaced through ``app.dependency_overrides`` so each test
controls exactly what the handler's single collaborator call returns or raises.
"""

from unittest.mock import Mock, call

import pytest
from fastapi import status

from src.auth_api.api.http.app import app
from src.auth_api.api.http.deps import (
    get_authentication_manager,
    get_user_cache,
    get_user_service,
)
from src.auth_api.api.http.routers.auth import AUTH_ROUTES, ERROR_STATUS, router_auth
from src.auth_api.core.errors import (
    AuthErrorKind,
    InvalidCredentialsError,
    MailDeliveryError,
    NoSuchElementError,
    UserAlreadyExistsError,
)
from src.auth_api.core.models import UserDetails
from src.auth_api.core.services import JwtVerificationService
from src.auth_api.entities.core.user import User

_EMAIL = "alice@example.com"


@pytest.fixture
def user_service_mock(client) -> Mock:
    service = Mock()
    app.dependency_overrides[get_user_service] = lambda: service
    return service


class TestRouteTable:
    def test_every_route_is_registered(self):
        registered = {
            (method, route.path) for route in router_auth.routes for method in route.methods
        }

        for auth_route in AUTH_ROUTES:
            assert (auth_route.method, f"/auth{auth_route.path}") in registered
            assert app.url_path_for(auth_route.endpoint.__name__) == f"/auth{auth_route.path}"

    def test_every_error_kind_has_a_status(self):
        assert set(ERROR_STATUS) == set(AuthErrorKind)


class TestLocalLogin:
    def test_cache_is_invalidated_before_authentication(self, client):
        recorder = Mock()
        recorder.manager.authenticate.return_value = UserDetails(username=_EMAIL)
        app.dependency_overrides[get_user_cache] = lambda: recorder.cache
        app.dependency_overrides[get_authentication_manager] = lambda: recorder.manager

        response = client.post("/auth/signin/local", json={"email": _EMAIL, "password": "pw"})

        assert response.status_code == status.HTTP_200_OK
        assert recorder.mock_calls == [
            call.cache.remove_user_from_cache(_EMAIL),
            call.manager.authenticate(_EMAIL, "pw"),
        ]

    def test_returns_token_for_the_email(self, client):
        manager = Mock()
        app.dependency_overrides[get_authentication_manager] = lambda: manager

        response = client.post("/auth/signin/local", json={"email": _EMAIL, "password": "pw"})

        assert response.headers["content-type"].startswith("text/plain")
        claims = JwtVerificationService().verify_jwt(response.text)
        assert claims.subject == _EMAIL

    def test_bad_credentials_use_generic_message(self, client):
        manager = Mock()
        manager.authenticate.side_effect = InvalidCredentialsError("password mismatch for alice")
        app.dependency_overrides[get_authentication_manager] = lambda: manager

        response = client.post("/auth/signin/local", json={"email": _EMAIL, "password": "pw"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.text == "Invalid credentials"

    def test_bad_credentials_message_is_localized(self, client):
        manager = Mock()
        manager.authenticate.side_effect = InvalidCredentialsError("Bad credentials")
        app.dependency_overrides[get_authentication_manager] = lambda: manager

        response = client.post(
            "/auth/signin/local",
            json={"email": _EMAIL, "password": "pw"},
            headers={"Accept-Language": "es-ES,es;q=0.9"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.text == "Credenciales no válidas"

    @pytest.mark.parametrize(
        "body",
        [
            {"email": "not-an-email", "password": "pw"},
            {"email": _EMAIL, "password": "   "},
            {"email": _EMAIL},
            {},
        ],
    )
    def test_malformed_body_is_rejected_before_the_handler(self, client, body):
        manager = Mock()
        app.dependency_overrides[get_authentication_manager] = lambda: manager

        response = client.post("/auth/signin/local", json=body)

        assert response.status_code == 422
        manager.authenticate.assert_not_called()


class TestGoogleSignIn:
    def test_redirects_to_authorization_path(self, client):
        response = client.get("/auth/signin/google", follow_redirects=False)

        assert response.status_code == status.HTTP_302_FOUND
        assert response.headers["location"] == "/api/oauth2/authorization/google"


class TestSignUp:
    def test_returns_token(self, client, user_service_mock):
        response = client.post("/auth/signup", json={"email": _EMAIL, "password": "pw"})

        assert response.status_code == status.HTTP_200_OK
        user_service_mock.create_user_and_send_email.assert_called_once_with(_EMAIL, "pw")
        assert JwtVerificationService().verify_jwt(response.text).subject == _EMAIL

    def test_mail_failure_is_conflict(self, client, user_service_mock):
        user_service_mock.create_user_and_send_email.side_effect = MailDeliveryError(
            "Failed to send email to alice@example.com"
        )

        response = client.post("/auth/signup", json={"email": _EMAIL, "password": "pw"})

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.text == "Failed to send email to alice@example.com"

    def test_duplicate_is_conflict(self, client, user_service_mock):
        user_service_mock.create_user_and_send_email.side_effect = UserAlreadyExistsError(
            "User with email alice@example.com already exists"
        )

        response = client.post("/auth/signup", json={"email": _EMAIL, "password": "pw"})

        assert response.status_code == status.HTTP_409_CONFLICT


class TestVerifyEmail:
    def test_success_has_empty_body(self, client, user_service_mock):
        response = client.put("/auth/verify-email", json={"token": "abc"})

        assert response.status_code == status.HTTP_200_OK
        assert response.content == b""
        user_service_mock.update_email_verification.assert_called_once_with("abc")

    def test_unknown_token(self, client, user_service_mock):
        user_service_mock.update_email_verification.side_effect = NoSuchElementError("gone")

        response = client.put("/auth/verify-email", json={"token": "abc"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.text == "gone"


class TestCurrentUser:
    def test_requires_bearer_token(self, client, user_service_mock):
        response = client.get("/auth/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.headers["www-authenticate"] == "Bearer"
        user_service_mock.get_user_by_email.assert_not_called()

    def test_rejects_invalid_token(self, client, user_service_mock):
        response = client.get("/auth/me", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        user_service_mock.get_user_by_email.assert_not_called()

    def test_returns_user_for_token_subject(self, client, user_service_mock, auth_headers):
        user = User(email=_EMAIL, first_name="Alice", password_hash="secret-hash")
        user_service_mock.get_user_by_email.return_value = user

        response = client.get("/auth/me", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["email"] == _EMAIL
        assert body["firstName"] == "Alice"
        assert body["emailVerified"] is False
        assert "passwordHash" not in body
        user_service_mock.get_user_by_email.assert_called_once_with(_EMAIL)

    def test_deleted_user(self, client, user_service_mock, auth_headers):
        user_service_mock.get_user_by_email.return_value = None

        response = client.get("/auth/me", headers=auth_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert _EMAIL in response.text


class TestUpdatePassword:
    def test_changes_password_of_token_subject(self, client, user_service_mock, auth_headers):
        response = client.put(
            "/auth/password-update",
            json={"currentPassword": "old", "newPassword": "new"},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        user_service_mock.update_user_password.assert_called_once_with(_EMAIL, "old", "new")

    def test_requires_authentication(self, client, user_service_mock):
        response = client.put(
            "/auth/password-update",
            json={"currentPassword": "old", "newPassword": "new"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        user_service_mock.update_user_password.assert_not_called()

    def test_wrong_current_password(self, client, user_service_mock, auth_headers):
        user_service_mock.update_user_password.side_effect = InvalidCredentialsError(
            "Current password does not match"
        )

        response = client.put(
            "/auth/password-update",
            json={"currentPassword": "bad", "newPassword": "new"},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.text == "Invalid credentials"


class TestSendPasswordResetEmail:
    def test_unknown_email_names_the_address(self, client, user_service_mock):
        user_service_mock.get_user_by_email.return_value = None

        response = client.post(
            "/auth/send-password-reset-email", json={"email": "bob@example.com"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.text == "User with email bob@example.com not found"
        user_service_mock.update_user_password_reset_token_and_send_email.assert_not_called()

    def test_known_email_sends_reset(self, client, user_service_mock):
        user_service_mock.get_user_by_email.return_value = User(email=_EMAIL)

        response = client.post("/auth/send-password-reset-email", json={"email": _EMAIL})

        assert response.status_code == status.HTTP_200_OK
        user_service_mock.update_user_password_reset_token_and_send_email.assert_called_once_with(
            _EMAIL
        )

    def test_mail_failure_is_conflict(self, client, user_service_mock):
        user_service_mock.get_user_by_email.return_value = User(email=_EMAIL)
        user_service_mock.update_user_password_reset_token_and_send_email.side_effect = (
            MailDeliveryError("Failed to send email to alice@example.com")
        )

        response = client.post("/auth/send-password-reset-email", json={"email": _EMAIL})

        assert response.status_code == status.HTTP_409_CONFLICT


class TestResetPassword:
    def test_returns_updated_user(self, client, user_service_mock):
        user_service_mock.update_user_password_by_password_reset_token.return_value = User(
            email=_EMAIL
        )

        response = client.put("/auth/password-reset", json={"token": "t", "password": "new"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["email"] == _EMAIL
        user_service_mock.update_user_password_by_password_reset_token.assert_called_once_with(
            "t", "new"
        )

    def test_unknown_token(self, client, user_service_mock):
        user_service_mock.update_user_password_by_password_reset_token.side_effect = (
            NoSuchElementError("Password reset token is invalid or has expired")
        )

        response = client.put("/auth/password-reset", json={"token": "t", "password": "new"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
