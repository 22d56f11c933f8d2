from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlencode
from fastapi import Request
import base64
import hashlib
import jwt
import logging
import os
import requests
import secrets

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"
CODE_VERIFIER_COOKIE = "code_verifier"


class AuthServiceException(Exception):
    def __init__(self, detail):
        super().__init__(detail)
        self.detail = detail

    def __str__(self):
        return str(self.detail)


@dataclass
class AuthSession:
    user_id: str
    email: Optional[str]
    access_token: str
    expires_at: Optional[datetime] = None


def create_code_verifier() -> str:
    return secrets.token_urlsafe(64)


def create_code_challenge(code_verifier: str) -> str:
    """S256 PKCE challenge for a verifier"""
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


class AuthService:
    """
    Talks to the hosted identity provider and reads the session it issues.

    The provider signs access tokens with JWT_SECRET; the token lives in the
    access_token cookie after a successful code exchange.
    """

    def __init__(self):
        self.auth_url = (os.getenv("AUTH_URL") or "").rstrip("/")
        self.anon_key = os.getenv("AUTH_ANON_KEY")
        self.SECRET_KEY = os.getenv("JWT_SECRET")
        if not self.SECRET_KEY:
            logger.warning("JWT_SECRET not found in environment, sessions cannot be read")
        self.ALGORITHM = "HS256"
        self.timeout = 10

    def decode_access_token(self, token: str) -> AuthSession:
        try:
            payload = jwt.decode(
                token,
                self.SECRET_KEY,
                algorithms=[self.ALGORITHM],
                options={"verify_aud": False},
            )
        except jwt.ExpiredSignatureError:
            logger.error("Access token has expired")
            raise AuthServiceException("Token expired")
        except jwt.PyJWTError as e:
            logger.error(f"JWT decode error: {str(e)}")
            raise AuthServiceException("Not authenticated")
        user_id = payload.get("sub")
        if not user_id:
            logger.error("No user id in token payload")
            raise AuthServiceException("Not authenticated")
        exp = payload.get("exp")
        return AuthSession(
            user_id=str(user_id),
            email=payload.get("email"),
            access_token=token,
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None,
        )

    def get_session(self, request: Request) -> Optional[AuthSession]:
        """The current session from the request cookies, or None"""
        token = request.cookies.get(ACCESS_TOKEN_COOKIE)
        if not token:
            auth = request.headers.get("Authorization")
            if auth and auth.lower().startswith("bearer "):
                token = auth.split(" ", 1)[1].strip()
        if not token:
            return None
        try:
            return self.decode_access_token(token)
        except AuthServiceException as e:
            logger.error(f"getSession error: {e}")
            return None

    def get_authorize_url(self, provider: str, redirect_to: str, code_challenge: str) -> str:
        query = urlencode(
            {
                "provider": provider,
                "redirect_to": redirect_to,
                "code_challenge": code_challenge,
                "code_challenge_method": "s256",
            }
        )
        return f"{self.auth_url}/auth/v1/authorize?{query}"

    def exchange_code_for_session(self, code: str, code_verifier: Optional[str]) -> dict:
        """
        Trade an OAuth auth code for the provider's session payload
        (access_token, refresh_token, expires_in, user).
        """
        response = requests.post(
            f"{self.auth_url}/auth/v1/token",
            params={"grant_type": "pkce"},
            json={"auth_code": code, "code_verifier": code_verifier},
            headers={"apikey": self.anon_key or ""},
            timeout=self.timeout,
        )
        if response.status_code != 200:
            logger.error(
                "Code exchange failed: %s %s", response.status_code, response.text
            )
            raise AuthServiceException("Code exchange failed")
        logger.info("Exchanged auth code for session")
        return response.json()
