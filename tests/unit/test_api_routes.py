"""
Unit tests for API v1 routes.

Tests endpoint responses and error mapping with a mocked identity service.
"""

from collections.abc import Generator
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.dependencies import get_identity_service
from src.api.v1.routes import router
from src.domain.exceptions import (
    EmailAlreadyRegistered,
    IdentifierExhausted,
    InvalidCredentials,
    MissingRequiredFields,
    NoUsersFound,
    PasswordTooLong,
    StorageError,
    UserNotFound,
)
from src.domain.identity import IdentityService
from src.domain.models import IdentityRecord, UserUpdate

ALICE = IdentityRecord(
    id="id-1", username="alice", email="a@example.com", password_hash="$2b$04$alicedigest"
)
ALICE_PUBLIC = {"id": "id-1", "username": "alice", "email": "a@example.com"}


@pytest.fixture
def mock_service() -> MagicMock:
    return MagicMock(spec=IdentityService)


@pytest.fixture
def client(mock_service: MagicMock) -> Generator[TestClient, None, None]:
    """Test client with the identity service overridden."""
    app = FastAPI()
    app.include_router(router, prefix="/v1")
    app.dependency_overrides[get_identity_service] = lambda: mock_service
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestListUsersEndpoint:
    """Tests for GET /v1/users."""

    def test_returns_users_without_digest(
        self, client: TestClient, mock_service: MagicMock
    ) -> None:
        mock_service.list_users.return_value = [ALICE]

        response = client.get("/v1/users")

        assert response.status_code == 200
        assert response.json() == {"total_user": 1, "allUsers": [ALICE_PUBLIC]}
        assert "alicedigest" not in response.text

    def test_empty_store_returns_404(self, client: TestClient, mock_service: MagicMock) -> None:
        mock_service.list_users.side_effect = NoUsersFound("empty")

        response = client.get("/v1/users")

        assert response.status_code == 404
        assert response.json() == {"detail": "No users at this time"}


class TestGetUserEndpoint:
    """Tests for GET /v1/user/{id}."""

    def test_found(self, client: TestClient, mock_service: MagicMock) -> None:
        mock_service.get_user.return_value = ALICE

        response = client.get("/v1/user/id-1")

        assert response.status_code == 200
        assert response.json() == {"user": ALICE_PUBLIC}
        mock_service.get_user.assert_called_once_with("id-1")

    def test_missing_returns_404(self, client: TestClient, mock_service: MagicMock) -> None:
        mock_service.get_user.side_effect = UserNotFound("nope")

        response = client.get("/v1/user/nope")

        assert response.status_code == 404
        assert response.json() == {"detail": "User not found"}


class TestRegisterEndpoint:
    """Tests for POST /v1/register."""

    def test_success_returns_201(self, client: TestClient, mock_service: MagicMock) -> None:
        mock_service.register.return_value = ALICE

        response = client.post(
            "/v1/register",
            json={"username": "alice", "email": "a@example.com", "password": "pw1"},
        )

        assert response.status_code == 201
        assert response.json() == {"newUser": ALICE_PUBLIC}
        mock_service.register.assert_called_once_with("alice", "a@example.com", "pw1")

    def test_duplicate_returns_409(self, client: TestClient, mock_service: MagicMock) -> None:
        mock_service.register.side_effect = EmailAlreadyRegistered("a@example.com")

        response = client.post(
            "/v1/register",
            json={"username": "bob", "email": "a@example.com", "password": "pw2"},
        )

        assert response.status_code == 409

    def test_storage_failure_returns_503(
        self, client: TestClient, mock_service: MagicMock
    ) -> None:
        mock_service.register.side_effect = StorageError("disk full")

        response = client.post(
            "/v1/register",
            json={"username": "alice", "email": "a@example.com", "password": "pw1"},
        )

        assert response.status_code == 503

    def test_core_validation_error_returns_422(
        self, client: TestClient, mock_service: MagicMock
    ) -> None:
        mock_service.register.side_effect = MissingRequiredFields(["username"])

        response = client.post(
            "/v1/register",
            json={"username": " ", "email": "a@example.com", "password": "pw1"},
        )

        assert response.status_code == 422

    def test_password_too_long_returns_422(
        self, client: TestClient, mock_service: MagicMock
    ) -> None:
        """Multi-byte passwords can pass the length check yet exceed 72 bytes."""
        mock_service.register.side_effect = PasswordTooLong(72)

        response = client.post(
            "/v1/register",
            json={"username": "alice", "email": "a@example.com", "password": "\u00e9" * 40},
        )

        assert response.status_code == 422
        assert response.json() == {"detail": "Password longer than 72 bytes"}

    def test_id_exhaustion_returns_503(
        self, client: TestClient, mock_service: MagicMock
    ) -> None:
        mock_service.register.side_effect = IdentifierExhausted("no free id")

        response = client.post(
            "/v1/register",
            json={"username": "alice", "email": "a@example.com", "password": "pw1"},
        )

        assert response.status_code == 503

    @pytest.mark.parametrize(
        "body",
        [
            {"email": "a@example.com", "password": "pw1"},
            {"username": "alice", "password": "pw1"},
            {"username": "alice", "email": "a@example.com"},
            {"username": "alice", "email": "invalid-email", "password": "pw1"},
            {"username": "", "email": "a@example.com", "password": "pw1"},
            {"username": "alice", "email": "a@example.com", "password": "p" * 80},
        ],
    )
    def test_invalid_body_returns_422(
        self, client: TestClient, mock_service: MagicMock, body: dict
    ) -> None:
        response = client.post("/v1/register", json=body)

        assert response.status_code == 422
        mock_service.register.assert_not_called()


class TestLoginEndpoint:
    """Tests for POST /v1/login."""

    def test_success(self, client: TestClient, mock_service: MagicMock) -> None:
        mock_service.authenticate.return_value = ALICE

        response = client.post("/v1/login", json={"email": "a@example.com", "password": "pw1"})

        assert response.status_code == 200
        assert response.json() == {"user": ALICE_PUBLIC}
        assert "password" not in response.json()["user"]

    def test_unknown_email_returns_404(
        self, client: TestClient, mock_service: MagicMock
    ) -> None:
        mock_service.authenticate.side_effect = UserNotFound("ghost@example.com")

        response = client.post(
            "/v1/login", json={"email": "ghost@example.com", "password": "pw1"}
        )

        assert response.status_code == 404

    def test_wrong_password_returns_401(
        self, client: TestClient, mock_service: MagicMock
    ) -> None:
        mock_service.authenticate.side_effect = InvalidCredentials("a@example.com")

        response = client.post("/v1/login", json={"email": "a@example.com", "password": "bad"})

        assert response.status_code == 401
        assert response.json() == {"detail": "Incorrect password"}


class TestUpdateEndpoint:
    """Tests for PUT /v1/user/{id}."""

    def test_partial_update_passes_absent_fields_as_none(
        self, client: TestClient, mock_service: MagicMock
    ) -> None:
        mock_service.update_user.return_value = ALICE

        response = client.put("/v1/user/id-1", json={"username": "alice"})

        assert response.status_code == 200
        assert response.json() == {"updateUser": ALICE_PUBLIC}
        mock_service.update_user.assert_called_once_with("id-1", UserUpdate(username="alice"))

    def test_missing_user_returns_404(self, client: TestClient, mock_service: MagicMock) -> None:
        mock_service.update_user.side_effect = UserNotFound("nope")

        response = client.put("/v1/user/nope", json={"username": "x"})

        assert response.status_code == 404

    def test_email_conflict_returns_409(
        self, client: TestClient, mock_service: MagicMock
    ) -> None:
        mock_service.update_user.side_effect = EmailAlreadyRegistered("b@example.com")

        response = client.put("/v1/user/id-1", json={"email": "b@example.com"})

        assert response.status_code == 409

    def test_core_validation_error_returns_422(
        self, client: TestClient, mock_service: MagicMock
    ) -> None:
        mock_service.update_user.side_effect = PasswordTooLong(72)

        response = client.put("/v1/user/id-1", json={"password": "\u00e9" * 40})

        assert response.status_code == 422

    def test_overlong_password_rejected_before_service(
        self, client: TestClient, mock_service: MagicMock
    ) -> None:
        response = client.put("/v1/user/id-1", json={"password": "p" * 73})

        assert response.status_code == 422
        mock_service.update_user.assert_not_called()


class TestDeleteEndpoint:
    """Tests for DELETE /v1/user/{id}."""

    def test_success(self, client: TestClient, mock_service: MagicMock) -> None:
        response = client.delete("/v1/user/id-1")

        assert response.status_code == 200
        assert response.json() == {"msg": "User deleted"}
        mock_service.delete_user.assert_called_once_with("id-1")

    def test_missing_returns_404(self, client: TestClient, mock_service: MagicMock) -> None:
        mock_service.delete_user.side_effect = UserNotFound("nope")

        response = client.delete("/v1/user/nope")

        assert response.status_code == 404
