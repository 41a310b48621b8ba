"""End-to-end account flows against the real services and an in-memory database."""

from fastapi import status

from src.auth_api.core.services import JwtVerificationService
from src.auth_api.entities.core.user import UserRepository


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class TestAccountLifecycle:
    def test_signup_verify_signin_me(self, client, mail_service):
        signup = client.post(
            "/auth/signup", json={"email": "dana@example.com", "password": "first-pw"}
        )
        assert signup.status_code == status.HTTP_200_OK
        assert JwtVerificationService().verify_jwt(signup.text).subject == "dana@example.com"

        me = client.get("/auth/me", headers=_bearer(signup.text))
        assert me.status_code == status.HTTP_200_OK
        assert me.json()["emailVerified"] is False

        token = mail_service.last_to("dana@example.com").token
        verify = client.put("/auth/verify-email", json={"token": token})
        assert verify.status_code == status.HTTP_200_OK

        again = client.put("/auth/verify-email", json={"token": token})
        assert again.status_code == status.HTTP_400_BAD_REQUEST

        signin = client.post(
            "/auth/signin/local", json={"email": "dana@example.com", "password": "first-pw"}
        )
        assert signin.status_code == status.HTTP_200_OK

        me = client.get("/auth/me", headers=_bearer(signin.text))
        assert me.json()["emailVerified"] is True

    def test_duplicate_signup(self, client, registered_user):
        response = client.post(
            "/auth/signup", json={"email": registered_user.email, "password": "pw"}
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert registered_user.email in response.text

    def test_signup_mail_failure_leaves_no_account(self, client, mail_service):
        mail_service.fail = True

        response = client.post(
            "/auth/signup", json={"email": "erin@example.com", "password": "pw"}
        )
        assert response.status_code == status.HTTP_409_CONFLICT

        signin = client.post(
            "/auth/signin/local", json={"email": "erin@example.com", "password": "pw"}
        )
        assert signin.status_code == status.HTTP_400_BAD_REQUEST


class TestSignIn:
    def test_wrong_password_and_unknown_email_look_the_same(self, client, registered_user):
        wrong = client.post(
            "/auth/signin/local", json={"email": registered_user.email, "password": "nope"}
        )
        unknown = client.post(
            "/auth/signin/local", json={"email": "nobody@example.com", "password": "nope"}
        )

        assert wrong.status_code == unknown.status_code == status.HTTP_400_BAD_REQUEST
        assert wrong.text == unknown.text == "Invalid credentials"

    def test_signin_sees_password_changed_elsewhere(
        self, client, registered_user, user_password, user_cache, db_service, password_hasher
    ):
        """A stale cache entry must not let the old password through."""
        first = client.post(
            "/auth/signin/local",
            json={"email": registered_user.email, "password": user_password},
        )
        assert first.status_code == status.HTTP_200_OK
        assert user_cache.get_user_from_cache(registered_user.email) is not None

        with db_service.session_scope() as db:
            repo = UserRepository(db)
            user = repo.get_by_email(registered_user.email)
            user.password_hash = password_hasher.hash("changed-directly")
            repo.update(user)

        old = client.post(
            "/auth/signin/local",
            json={"email": registered_user.email, "password": user_password},
        )
        new = client.post(
            "/auth/signin/local",
            json={"email": registered_user.email, "password": "changed-directly"},
        )

        assert old.status_code == status.HTTP_400_BAD_REQUEST
        assert new.status_code == status.HTTP_200_OK


class TestPasswords:
    def test_update_password(self, client, registered_user, user_password, auth_headers):
        response = client.put(
            "/auth/password-update",
            json={"currentPassword": user_password, "newPassword": "second-pw"},
            headers=auth_headers,
        )
        assert response.status_code == status.HTTP_200_OK

        old = client.post(
            "/auth/signin/local",
            json={"email": registered_user.email, "password": user_password},
        )
        new = client.post(
            "/auth/signin/local",
            json={"email": registered_user.email, "password": "second-pw"},
        )
        assert old.status_code == status.HTTP_400_BAD_REQUEST
        assert new.status_code == status.HTTP_200_OK

    def test_reset_password(self, client, registered_user, mail_service):
        sent = client.post(
            "/auth/send-password-reset-email", json={"email": registered_user.email}
        )
        assert sent.status_code == status.HTTP_200_OK
        token = mail_service.last_to(registered_user.email).token

        reset = client.put("/auth/password-reset", json={"token": token, "password": "third-pw"})
        assert reset.status_code == status.HTTP_200_OK
        assert reset.json()["id"] == registered_user.id

        reused = client.put("/auth/password-reset", json={"token": token, "password": "fourth-pw"})
        assert reused.status_code == status.HTTP_400_BAD_REQUEST

        signin = client.post(
            "/auth/signin/local",
            json={"email": registered_user.email, "password": "third-pw"},
        )
        assert signin.status_code == status.HTTP_200_OK

    def test_reset_for_unknown_email(self, client, mail_service):
        response = client.post(
            "/auth/send-password-reset-email",
            json={"email": "ghost@example.com"},
            headers={"Accept-Language": "de"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.text == "Benutzer mit der E-Mail ghost@example.com wurde nicht gefunden"
        assert mail_service.outbox == []
