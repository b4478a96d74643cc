"""
Google Drive OAuth2 authentication module.

This module handles the installed-app OAuth2 flow for read-only Drive access,
including token storage and refresh.
"""

import asyncio
import json
from pathlib import Path
from typing import List, Optional

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from lingostat.config import Settings, get_settings
from lingostat.utils.errors import DriveAuthenticationError
from lingostat.utils.logging import get_logger

logger = get_logger(__name__)

# Google Drive API scopes
SCOPES = ["https://www.googleapis.com/auth/drive.readonly"]


class GoogleDriveAuth:
    """Handle Google Drive OAuth2 authentication."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        credentials_path: Optional[Path] = None,
        token_path: Optional[Path] = None,
        scopes: Optional[List[str]] = None,
    ) -> None:
        """
        Initialize Google Drive authentication.

        Args:
            settings: Settings providing the client config and token location
            credentials_path: Path to OAuth2 client secrets JSON file
            token_path: Path to store/load token
            scopes: OAuth2 scopes (defaults to SCOPES)
        """
        self.settings = settings or get_settings()
        self.client_config_json = self.settings.google_credentials_json
        self.credentials_path = Path(credentials_path or self.settings.drive_credentials_path)
        self.token_path = Path(token_path or self.settings.drive_token_path)
        self.scopes = scopes or SCOPES

        self._credentials: Optional[Credentials] = None

    @property
    def credentials(self) -> Optional[Credentials]:
        """Get current credentials."""
        return self._credentials

    @property
    def is_authenticated(self) -> bool:
        """Check if authenticated with valid credentials."""
        return self._credentials is not None and self._credentials.valid

    async def authenticate(self, force_reauth: bool = False) -> Credentials:
        """
        Authenticate with Google Drive.

        Args:
            force_reauth: Force re-authentication even if token exists

        Returns:
            Valid credentials

        Raises:
            DriveAuthenticationError: If authentication fails
        """
        try:
            if not force_reauth and self.token_path.exists():
                self._credentials = self._load_token()

                if self._credentials and self._credentials.expired and self._credentials.refresh_token:
                    logger.info("Refreshing expired token")
                    await asyncio.get_event_loop().run_in_executor(
                        None, lambda: self._credentials.refresh(Request())
                    )
                    self._save_token()

            if force_reauth or not self._credentials or not self._credentials.valid:
                logger.info("Running OAuth2 flow")
                self._credentials = await asyncio.get_event_loop().run_in_executor(None, self._run_oauth_flow)
                self._save_token()

            logger.info("Successfully authenticated with Google Drive")
            return self._credentials

        except DriveAuthenticationError:
            raise
        except (GoogleAuthError, OSError, ValueError) as e:
            logger.error(f"Authentication failed: {e}")
            raise DriveAuthenticationError(f"Failed to authenticate: {e}")

    def _client_flow(self) -> InstalledAppFlow:
        if self.client_config_json:
            try:
                client_config = json.loads(self.client_config_json)
            except json.JSONDecodeError as e:
                raise DriveAuthenticationError(f"GOOGLE_CREDENTIALS_JSON is not valid JSON: {e}")
            if "installed" not in client_config:
                raise DriveAuthenticationError("GOOGLE_CREDENTIALS_JSON must contain an 'installed' client")
            return InstalledAppFlow.from_client_config(client_config, self.scopes)

        if not self.credentials_path.exists():
            raise DriveAuthenticationError(
                f"Credentials file not found: {self.credentials_path}. "
                "Set GOOGLE_CREDENTIALS_JSON or download OAuth2 credentials from Google Cloud Console."
            )
        return InstalledAppFlow.from_client_secrets_file(str(self.credentials_path), self.scopes)

    def _run_oauth_flow(self) -> Credentials:
        """Run the installed-app flow with a local callback server."""
        flow = self._client_flow()
        return flow.run_local_server(
            port=0,
            authorization_prompt_message="Opening browser for Google Drive authentication...",
            success_message="Authentication successful! You can close this window.",
            open_browser=True,
        )

    def _load_token(self) -> Optional[Credentials]:
        """
        Load token from file.

        Returns:
            Credentials if a readable token exists, None otherwise
        """
        try:
            logger.debug(f"Loading token from {self.token_path}")
            return Credentials.from_authorized_user_file(str(self.token_path), self.scopes)
        except (ValueError, OSError) as e:
            logger.warning(f"Failed to load token: {e}")
            return None

    def _save_token(self) -> None:
        """Save current credentials to token file."""
        if self._credentials:
            logger.debug(f"Saving token to {self.token_path}")
            self.token_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.token_path, "w") as token_file:
                token_file.write(self._credentials.to_json())

    def revoke(self) -> None:
        """
        Forget current credentials and delete the stored token.

        Note: This doesn't revoke the token on Google's servers.
        """
        logger.info("Revoking credentials")
        self._credentials = None
        if self.token_path.exists():
            self.token_path.unlink()
            logger.info(f"Deleted token file: {self.token_path}")
