"""Google OAuth2 authentication for Google Drive."""

import logging
from datetime import timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union
from urllib.parse import parse_qs, urlparse

import requests
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import AuthorizedSession, Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow

from ..config.settings import DEFAULT_TOKEN_FILE, ClientCredentials, OAuthToken
from ..exceptions import AuthenticationError

logger = logging.getLogger(__name__)

DRIVE_SCOPE = "https://www.googleapis.com/auth/drive"
DRIVE_ABOUT_URL = "https://www.googleapis.com/drive/v3/about"
DEFAULT_REDIRECT_URI = "http://localhost"

REQUIRED_CLIENT_KEYS = ("client_id", "client_secret", "auth_uri", "token_uri")


class GoogleDriveAuth:
    """Handle the OAuth2 authorization-code flow for Google Drive."""

    def __init__(self, flow: Flow, token_path: Union[str, Path] = DEFAULT_TOKEN_FILE):
        """Initialize Google Drive authentication.

        Args:
            flow: OAuth flow built from the client-secrets file
            token_path: Where the token JSON is stored
        """
        missing = [key for key in REQUIRED_CLIENT_KEYS if not flow.client_config.get(key)]
        if missing:
            raise ValueError(f"Client secrets are missing: {', '.join(missing)}")

        self.flow = flow
        self.token_path = Path(token_path)
        self.scopes = [DRIVE_SCOPE]
        self.credentials = ClientCredentials.from_client_config(flow.client_config)

        if not flow.redirect_uri:
            redirect_uris = flow.client_config.get("redirect_uris") or [DEFAULT_REDIRECT_URI]
            flow.redirect_uri = redirect_uris[0]

    @classmethod
    def from_client_secrets_file(cls, credentials_path: Union[str, Path],
                                 token_path: Union[str, Path] = DEFAULT_TOKEN_FILE) -> "GoogleDriveAuth":
        """Create authentication from a downloaded client-secrets JSON file.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If it is not a valid ``installed`` or ``web`` client
        """
        credentials_path = Path(credentials_path)
        if not credentials_path.exists():
            raise FileNotFoundError(f"Credentials file not found: {credentials_path}")

        try:
            flow = Flow.from_client_secrets_file(str(credentials_path), scopes=[DRIVE_SCOPE])
        except KeyError as e:
            raise ValueError(f"Client secrets are missing: {e}") from e
        return cls(flow, token_path=token_path)

    @classmethod
    def from_client_config(cls, client_config: Dict[str, Any],
                           token_path: Union[str, Path] = DEFAULT_TOKEN_FILE) -> "GoogleDriveAuth":
        """Create authentication from an already parsed client-secrets document."""
        try:
            flow = Flow.from_client_config(client_config, scopes=[DRIVE_SCOPE])
        except KeyError as e:
            raise ValueError(f"Client secrets are missing: {e}") from e
        return cls(flow, token_path=token_path)

    def authorization_url(self, state: str = "state-token") -> str:
        """Build the consent URL the user opens in a browser.

        Offline access is requested so the response carries a refresh token.
        """
        url, _ = self.flow.authorization_url(access_type="offline", prompt="consent", state=state)
        return url

    @staticmethod
    def parse_redirect_url(url: str) -> str:
        """Extract the authorization code from the URL the browser was redirected to.

        Raises:
            ValueError: If the URL carries no ``code`` parameter
        """
        query = parse_qs(urlparse(url.strip()).query)
        codes = query.get("code")
        if not codes or not codes[0]:
            raise ValueError("authorization code not found in redirect URL")
        return codes[0]

    def exchange_code(self, code: str) -> OAuthToken:
        """Exchange an authorization code for a token.

        Must be called on the same instance that produced the consent URL,
        since the flow keeps the PKCE verifier between the two steps.

        Raises:
            AuthenticationError: If Google rejects the exchange
        """
        try:
            self.flow.fetch_token(code=code)
        except Exception as e:
            raise AuthenticationError(f"Authentication failed: {e}") from e

        token = token_from_credentials(self.flow.credentials)
        logger.info(f"✅ Obtained new access token (expires {token.expiry})")
        return token

    def to_credentials(self, token: OAuthToken) -> Credentials:
        """Build google-auth credentials able to refresh ``token``."""
        expiry = None
        if token.expiry is not None:
            # google-auth compares against naive UTC timestamps
            expiry = token.expiry.astimezone(timezone.utc).replace(tzinfo=None)

        return Credentials(
            token=token.access_token,
            refresh_token=token.refresh_token,
            token_uri=self.flow.client_config["token_uri"],
            client_id=self.credentials.client_id,
            client_secret=self.credentials.client_secret,
            scopes=self.scopes,
            expiry=expiry,
        )

    def refresh(self, token: OAuthToken) -> OAuthToken:
        """Refresh an access token.

        Raises:
            AuthenticationError: If the token has no refresh token or refresh fails
        """
        if not token.refresh_token:
            raise AuthenticationError("Token expired and has no refresh token, run 'auth' again")

        credentials = self.to_credentials(token)
        try:
            credentials.refresh(Request())
        except GoogleAuthError as e:
            raise AuthenticationError(f"Token refresh failed: {e}") from e

        logger.info("✅ Token refreshed automatically")
        return token_from_credentials(credentials, token)

    def save_token(self, token: OAuthToken) -> Path:
        """Write the token to disk, readable by owner and group only."""
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        self.token_path.write_text(token.to_json(), encoding="utf-8")
        self.token_path.chmod(0o660)
        logger.info(f"Token saved to {self.token_path}")
        return self.token_path

    def load_token(self) -> OAuthToken:
        """Read the stored token.

        Raises:
            FileNotFoundError: If no token has been saved yet
            ValueError: If the file is not a valid token
        """
        if not self.token_path.exists():
            raise FileNotFoundError(f"Token file not found: {self.token_path} (run 'auth' first)")
        return OAuthToken.from_json(self.token_path.read_text(encoding="utf-8"))

    def load_credentials(self) -> Credentials:
        """Load the stored token as valid credentials, refreshing and re-saving it if expired."""
        token = self.load_token()
        credentials = self.to_credentials(token)
        if not credentials.valid:
            logger.info("🔄 Access token expired, refreshing automatically...")
            token = self.refresh(token)
            self.save_token(token)
            credentials = self.to_credentials(token)
        return credentials

    def get_access_token(self) -> str:
        """Get current access token, refreshing it if expired."""
        return self.load_credentials().token

    def get_user_info(self) -> Dict[str, Any]:
        """Fetch the Drive user the token belongs to.

        Returns:
            Dictionary with ``displayName`` and ``emailAddress``
        """
        session = AuthorizedSession(self.load_credentials())
        try:
            response = session.get(DRIVE_ABOUT_URL, params={"fields": "user"}, timeout=30)
            response.raise_for_status()
        except (requests.RequestException, GoogleAuthError) as e:
            raise AuthenticationError(f"unable to retrieve about info: {e}") from e

        return response.json().get("user", {})

    def test_connection(self) -> bool:
        """Test if the stored token can reach the Drive API."""
        try:
            self.get_user_info()
            return True
        except Exception as e:
            logger.debug(f"Drive connection test failed: {e}")
            return False


def token_from_credentials(credentials: Credentials, previous: Optional[OAuthToken] = None) -> OAuthToken:
    """Convert google-auth credentials into the token JSON rclone stores.

    Google usually omits the refresh token from refresh responses, in which
    case the one from ``previous`` is kept.
    """
    refresh_token = credentials.refresh_token
    if not refresh_token and previous is not None:
        refresh_token = previous.refresh_token

    return OAuthToken(
        access_token=credentials.token,
        refresh_token=refresh_token,
        expiry=credentials.expiry,
    )
