"""Unit tests for the management CLI."""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from src.auth_api.cli import app as cli_app
from src.auth_api.entities.core.user import UserRepository

runner = CliRunner()


@pytest.fixture
def cli_db(db_service):
    with patch("src.auth_api.cli.user_commands.DbSessionService", return_value=db_service):
        yield db_service


class TestUserCommands:
    def test_add_user(self, cli_db, password_hasher):
        result = runner.invoke(
            cli_app,
            ["users", "add", "carol@example.com", "--password", "pw-123", "--verified"],
        )

        assert result.exit_code == 0, result.output
        with cli_db.session_scope() as db:
            user = UserRepository(db).get_by_email("carol@example.com")
        assert user.email_verified is True
        assert password_hasher.verify("pw-123", user.password_hash)

    def test_mixed_case_email_can_sign_in(self, cli_db, client):
        result = runner.invoke(
            cli_app,
            ["users", "add", "Bob@Example.COM", "--password", "pw-123", "--verified"],
        )
        assert result.exit_code == 0, result.output

        response = client.post(
            "/auth/signin/local", json={"email": "Bob@Example.COM", "password": "pw-123"}
        )

        assert response.status_code == 200, response.text

    def test_invalid_email_is_rejected(self, cli_db):
        result = runner.invoke(cli_app, ["users", "add", "not-an-email", "--password", "pw"])

        assert result.exit_code == 1
        assert "not a valid email" in result.output

    def test_add_duplicate_user_fails(self, cli_db, registered_user):
        with patch("src.auth_api.core.services.database.db_session.logger") as db_logger:
            result = runner.invoke(
                cli_app, ["users", "add", registered_user.email, "--password", "pw"]
            )

        assert result.exit_code == 1
        assert "already exists" in result.output
        db_logger.error.assert_not_called()

    def test_list_users(self, cli_db, registered_user):
        result = runner.invoke(cli_app, ["users", "list"])

        assert result.exit_code == 0, result.output
        assert "Found 1 users" in result.output

    def test_list_without_users(self, cli_db):
        result = runner.invoke(cli_app, ["users", "list"])

        assert result.exit_code == 0
        assert "No users found" in result.output
