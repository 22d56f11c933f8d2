"""
Integration tests for the OAuth callback and sign-in routes
"""
import pytest
from unittest.mock import Mock
from main import app
from api.dependencies import get_auth_service
from api.services.auth_service import AuthService, AuthServiceException
from db.models import User


@pytest.fixture
def auth_service():
    service = Mock(spec=AuthService)
    app.dependency_overrides[get_auth_service] = lambda: service
    yield service
    app.dependency_overrides.pop(get_auth_service, None)


class TestAuthCallback:
    def test_without_code_redirects_without_exchange(self, client, auth_service):
        response = client.get("/auth/callback", follow_redirects=False)
        assert response.status_code == 307
        assert response.headers["location"] == "http://testserver/subscription"
        auth_service.exchange_code_for_session.assert_not_called()

    def test_with_code_sets_session_and_upserts_user(self, client, auth_service, make_token, session):
        access_token = make_token("user-9")
        auth_service.exchange_code_for_session.return_value = {
            "access_token": access_token,
            "refresh_token": "refresh-1",
            "expires_in": 3600,
            "user": {"id": "user-9", "user_metadata": {"full_name": "Nine", "avatar_url": "https://a.example/9.png"}},
        }
        client.cookies.set("code_verifier", "verifier-1")

        response = client.get("/auth/callback?code=abc", follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == "http://testserver/subscription"
        auth_service.exchange_code_for_session.assert_called_once_with("abc", "verifier-1")
        assert response.cookies.get("access_token") == access_token
        user = session.query(User).filter_by(id="user-9").one()
        assert user.full_name == "Nine"
        assert user.avatar_url == "https://a.example/9.png"

    def test_failed_exchange_still_redirects(self, client, auth_service, session):
        auth_service.exchange_code_for_session.side_effect = AuthServiceException("Code exchange failed")

        response = client.get("/auth/callback?code=bad", follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == "http://testserver/subscription"
        assert response.cookies.get("access_token") is None
        assert session.query(User).count() == 0


class TestSignIn:
    def test_signin_page_lists_providers(self, client):
        response = client.get("/signin")
        assert response.status_code == 200
        assert "/signin/github" in response.text

    def test_signin_with_provider_starts_pkce_flow(self, client):
        response = client.get("/signin/github", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"].startswith("https://auth.example.test/auth/v1/authorize?")
        assert "redirect_to=http%3A%2F%2Ftestserver%2Fauth%2Fcallback" in response.headers["location"]
        assert response.cookies.get("code_verifier")

    def test_signin_with_unknown_provider(self, client):
        response = client.get("/signin/myspace", follow_redirects=False)
        assert response.status_code == 400

    def test_signout_clears_session(self, auth_client):
        response = auth_client.get("/signout", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/signin"
        assert "access_token=" in response.headers.get("set-cookie", "")
