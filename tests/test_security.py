from datetime import timedelta

import pytest
from jose import jwt

from app.services.auth.security import TokenService
from app.utils.exceptions import AuthenticationError

from tests.conftest import USER_EMAIL


class TestTokenService:

    def test_issue_and_verify(self, token_service):
        token = token_service.issue({"email": USER_EMAIL, "name": "Pat"})

        claims = token_service.verify(token)

        assert claims["email"] == USER_EMAIL
        assert claims["name"] == "Pat"
        assert claims["exp"] - claims["iat"] == 3600

    def test_expired_token_is_rejected(self, token_service):
        token = token_service.issue({"email": USER_EMAIL}, expires_delta=timedelta(seconds=-5))

        with pytest.raises(AuthenticationError):
            token_service.verify(token)

    def test_token_signed_with_other_secret_is_rejected(self, token_service):
        forged = TokenService("another-secret").issue({"email": USER_EMAIL})

        with pytest.raises(AuthenticationError):
            token_service.verify(forged)

    def test_token_without_email_is_rejected(self, token_service):
        token = jwt.encode({"sub": "someone"}, token_service.secret_key, algorithm="HS256")

        with pytest.raises(AuthenticationError):
            token_service.verify(token)

    @pytest.mark.parametrize("token", [None, "", "not.a.jwt"])
    def test_missing_or_garbled_token(self, token_service, token):
        with pytest.raises(AuthenticationError) as exc_info:
            token_service.verify(token)

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "unauthorized access"


class TestJwtEndpoint:

    def test_issues_token_for_claims(self, client, token_service):
        response = client.post("/jwt", json={"email": USER_EMAIL, "name": "Pat"})

        assert response.status_code == 200
        token = response.json()["data"]["token"]
        assert token_service.verify(token)["email"] == USER_EMAIL

    def test_protected_route_without_header(self, client):
        response = client.get(f"/users/role/{USER_EMAIL}")

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "unauthorized access"}

    def test_protected_route_with_bad_token(self, client):
        response = client.get(
            f"/users/role/{USER_EMAIL}",
            headers={"Authorization": "Bearer garbage"}
        )

        assert response.status_code == 401
