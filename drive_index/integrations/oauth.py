"""drive_index/integrations/oauth.py
Google OAuth2 authorization helpers.

Its purpose is to obtain the long-lived refresh token that `GoogleDrive`
needs: build the consent link, exchange the returned code, and mint access
tokens from a refresh token. `verify_id_token` checks an id_token against
Google's published signing certificates. Stateless: no caching and no retries.
"""
from __future__ import annotations

import base64
import binascii
import json
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import aiohttp
import jwt
from cryptography import x509

from drive_index.config import settings
from drive_index.integrations.errors import AuthorizationFailure
from drive_index.integrations.models import query_params
from drive_index.monitoring.logger import log

OAUTH_URL = "https://accounts.google.com/o/oauth2"
# PEM certificates keyed by `kid`; Google rotates them periodically
CERTS_URL = "https://www.googleapis.com/oauth2/v1/certs"
GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


async def post_token_form(http: aiohttp.ClientSession, url: str, form: Dict[str, Any]) -> Dict[str, Any]:
    """POST a URL-encoded form to a token endpoint and decode the JSON reply.

    Raises:
        AuthorizationFailure: if the reply carries an `error` field.
    """
    async with http.post(
        url,
        data=query_params(form),
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    ) as resp:
        status = resp.status
        result = await resp.json(content_type=None)
    if result.get("error"):
        description = result.get("error_description") or result["error"]
        log("ERROR", "Token endpoint rejected the exchange", module="oauth", status=status, error=result["error"])
        raise AuthorizationFailure(status, description)
    return result


def _b64url_json(segment: str) -> Dict[str, Any]:
    padded = segment + "=" * (-len(segment) % 4)
    return json.loads(base64.urlsafe_b64decode(padded).decode("utf-8"))


def _verification_key(pem: str):
    if "BEGIN CERTIFICATE" in pem:
        return x509.load_pem_x509_certificate(pem.encode()).public_key()
    return pem


class GoogleOAuth:
    """OAuth2 authorization-code flow for Google accounts.

    Step 1: send the user to `build_auth_link()`.
    Step 2: exchange the `code` query parameter with `get_tokens()`.
    Step 3: keep the refresh token; `get_access_token()` mints short-lived
    access tokens from it.
    """

    TOKEN_URL = "https://www.googleapis.com/oauth2/v4/token"

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        redirect_uri: Optional[str] = None,
        scopes: Optional[List[str]] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.client_id = client_id or settings.GDRIVE_CLIENT_ID
        self.client_secret = client_secret or settings.GDRIVE_CLIENT_SECRET
        self.redirect_uri = redirect_uri or settings.GDRIVE_REDIRECT_URI
        self.scopes = scopes if scopes is not None else settings.GDRIVE_SCOPES.split()
        self._session = session

    def build_auth_link(self) -> str:
        return OAUTH_URL + "/auth?" + urlencode(query_params({
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": " ".join(self.scopes),
            "response_type": "code",
            # 'offline' is what makes Google hand out a refresh_token
            "access_type": "offline",
        }))

    async def _request(self, method: str, url: str, form: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        sess = self._session or aiohttp.ClientSession()
        created_local = self._session is None
        try:
            if method == "POST":
                return await post_token_form(sess, url, form or {})
            async with sess.get(url) as resp:
                return await resp.json(content_type=None)
        finally:
            if created_local:
                await sess.close()

    async def get_tokens(self, code: str) -> Dict[str, Any]:
        """Exchange an authorization code for {access_token, refresh_token, id_token, ...}."""
        return await self._request("POST", OAUTH_URL + "/token", {
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "grant_type": "authorization_code",
        })

    async def get_access_token(self, refresh_token: str) -> Dict[str, Any]:
        """Mint {access_token, expires_in} from a refresh token."""
        return await self._request("POST", self.TOKEN_URL, {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        })

    @staticmethod
    def decode_id_token(token: str) -> Dict[str, Any]:
        """Split an id_token (JWT) into header, payload and signature.

        The signature is not verified.
        """
        if not token:
            raise AuthorizationFailure(400, "Undefined token")
        segments = token.split(".")
        if len(segments) != 3:
            raise AuthorizationFailure(400, "Not enough or too many segments")
        try:
            return {
                "header": _b64url_json(segments[0]),
                "payload": _b64url_json(segments[1]),
                "signature": segments[2],
            }
        except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
            raise AuthorizationFailure(400, f"Malformed token: {exc}") from exc

    async def fetch_certs(self) -> Dict[str, str]:
        return await self._request("GET", CERTS_URL)

    async def verify_id_token(
        self,
        token: str,
        audience: Optional[str] = None,
        certs: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """Check the id_token's RS256 signature, issuer and audience; return its claims.

        `certs` maps key ids to PEM certificates (or public keys). When
        omitted they are fetched from CERTS_URL. The audience defaults to
        the client id.

        Raises:
            AuthorizationFailure: 400 for a malformed token, 401 when it
                does not verify.
        """
        kid = self.decode_id_token(token)["header"].get("kid")
        if certs is None:
            certs = await self.fetch_certs()
        pem = certs.get(kid) if kid else None
        if not pem:
            raise AuthorizationFailure(401, f"Unknown signing key: {kid}")

        audience = audience or self.client_id
        try:
            claims = jwt.decode(
                token,
                _verification_key(pem),
                algorithms=["RS256"],
                audience=audience,
                options={"verify_aud": bool(audience)},
            )
        except jwt.PyJWTError as exc:
            log("WARNING", "id_token verification failed", module="oauth", kid=kid, error=str(exc))
            raise AuthorizationFailure(401, f"Invalid id_token: {exc}") from exc
        if claims.get("iss") not in GOOGLE_ISSUERS:
            raise AuthorizationFailure(401, f"Invalid id_token issuer: {claims.get('iss')}")
        return claims
