"""
Tests for Google Drive authentication, downloads and materialization.
"""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from google.auth.exceptions import RefreshError
from googleapiclient.errors import HttpError
from httplib2 import Response, ServerNotFoundError
from tenacity import wait_none

from lingostat.config import Settings
from lingostat.google_drive.auth import SCOPES, GoogleDriveAuth
from lingostat.google_drive.client import GoogleDriveClient, safe_filename
from lingostat.google_drive.materializer import DriveFileMaterializer
from lingostat.utils.errors import (
    DriveAuthenticationError,
    DriveConnectionError,
    DriveFileNotFoundError,
    DriveQuotaExceededError,
    GoogleDriveError,
    InvalidDriveLinkError,
)

INSTALLED_CLIENT = {
    "installed": {
        "client_id": "id.apps.googleusercontent.com",
        "client_secret": "secret",
        "auth_uri": "https://accounts.google.com/o/oauth2/auth",
        "token_uri": "https://oauth2.googleapis.com/token",
        "redirect_uris": ["http://localhost"],
    }
}


def http_error(status: int, headers=None) -> HttpError:
    return HttpError(Response({"status": status, **(headers or {})}), b"error")


@pytest.fixture
def drive_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        drive_credentials_path=tmp_path / "credentials.json",
        drive_token_path=tmp_path / "token.json",
    )


class TestGoogleDriveAuth:
    """Test token reuse and the installed-app flow."""

    @pytest.mark.asyncio
    async def test_uses_stored_token(self, drive_settings):
        drive_settings.drive_token_path.write_text("{}")
        creds = MagicMock(valid=True, expired=False)

        with patch("lingostat.google_drive.auth.Credentials.from_authorized_user_file", return_value=creds), patch(
            "lingostat.google_drive.auth.InstalledAppFlow"
        ) as mock_flow:
            auth = GoogleDriveAuth(drive_settings)
            result = await auth.authenticate()

        assert result is creds
        assert auth.is_authenticated
        mock_flow.from_client_config.assert_not_called()
        mock_flow.from_client_secrets_file.assert_not_called()

    @pytest.mark.asyncio
    async def test_flow_from_credentials_json(self, drive_settings):
        """GOOGLE_CREDENTIALS_JSON takes precedence and the token is saved."""
        settings = drive_settings.model_copy(update={"google_credentials_json": json.dumps(INSTALLED_CLIENT)})
        creds = MagicMock(valid=True)
        creds.to_json.return_value = '{"token": "abc"}'

        with patch("lingostat.google_drive.auth.InstalledAppFlow") as mock_flow:
            mock_flow.from_client_config.return_value.run_local_server.return_value = creds
            await GoogleDriveAuth(settings).authenticate()

        mock_flow.from_client_config.assert_called_once_with(INSTALLED_CLIENT, SCOPES)
        assert settings.drive_token_path.read_text() == '{"token": "abc"}'

    @pytest.mark.asyncio
    async def test_credentials_json_without_installed_client(self, drive_settings):
        settings = drive_settings.model_copy(update={"google_credentials_json": json.dumps({"web": {}})})

        with pytest.raises(DriveAuthenticationError, match="installed"):
            await GoogleDriveAuth(settings).authenticate()

    @pytest.mark.asyncio
    async def test_missing_credentials_file(self, drive_settings):
        with pytest.raises(DriveAuthenticationError, match="Credentials file not found"):
            await GoogleDriveAuth(drive_settings).authenticate()

    def test_revoke_deletes_token(self, drive_settings):
        drive_settings.drive_token_path.write_text("{}")
        auth = GoogleDriveAuth(drive_settings)

        auth.revoke()

        assert not drive_settings.drive_token_path.exists()
        assert auth.credentials is None


class TestGoogleDriveClient:
    """Test metadata lookups and downloads against a mocked service."""

    @pytest.fixture
    def client(self, drive_settings):
        client = GoogleDriveClient(auth_manager=MagicMock(), settings=drive_settings)
        client._service = MagicMock()
        return client

    @pytest.mark.asyncio
    async def test_download_file(self, client, tmp_path):
        client._service.files.return_value.get.return_value.execute.return_value = {"name": "lecture.pdf"}

        with patch("lingostat.google_drive.client.MediaIoBaseDownload") as mock_download:
            mock_download.return_value.next_chunk.return_value = (None, True)
            path = await client.download_file("1AbCdEfGhIjKlMnOp", tmp_path)

        assert path == tmp_path / "lecture.pdf"
        assert path.exists()

    @pytest.mark.asyncio
    async def test_download_name_fallback(self, client, tmp_path):
        client._service.files.return_value.get.return_value.execute.return_value = {}

        with patch("lingostat.google_drive.client.MediaIoBaseDownload") as mock_download:
            mock_download.return_value.next_chunk.return_value = (None, True)
            path = await client.download_file("1AbCdEfGhIjKlMnOp", tmp_path)

        assert path.name == "drive-file-1AbCdEfGhIjKlMnOp"

    @pytest.mark.asyncio
    async def test_missing_file(self, client, tmp_path):
        client._service.files.return_value.get.return_value.execute.side_effect = http_error(404)

        with pytest.raises(DriveFileNotFoundError):
            await client.download_file("1AbCdEfGhIjKlMnOp", tmp_path)

    @pytest.mark.asyncio
    async def test_quota_is_retried(self, client):
        execute = client._service.files.return_value.get.return_value.execute
        execute.side_effect = http_error(429, {"retry-after": "7"})

        with patch.object(GoogleDriveClient.get_file_metadata.retry, "wait", wait_none()):
            with pytest.raises(DriveQuotaExceededError):
                await client.get_file_metadata("1AbCdEfGhIjKlMnOp")

        assert execute.call_count == 3

    @pytest.mark.asyncio
    async def test_network_failure_is_retried(self, client):
        execute = client._service.files.return_value.get.return_value.execute
        execute.side_effect = [ServerNotFoundError("Unable to find the server"), {"name": "a.pdf"}]

        with patch.object(GoogleDriveClient.get_file_metadata.retry, "wait", wait_none()):
            metadata = await client.get_file_metadata("1AbCdEfGhIjKlMnOp")

        assert metadata == {"name": "a.pdf"}
        assert execute.call_count == 2

    @pytest.mark.asyncio
    async def test_persistent_network_failure(self, client):
        execute = client._service.files.return_value.get.return_value.execute
        execute.side_effect = ConnectionResetError("reset by peer")

        with patch.object(GoogleDriveClient.get_file_metadata.retry, "wait", wait_none()):
            with pytest.raises(DriveConnectionError):
                await client.get_file_metadata("1AbCdEfGhIjKlMnOp")

    @pytest.mark.asyncio
    async def test_token_refresh_failure_during_download(self, client, tmp_path):
        """Credentials rejected mid-download surface as an authentication error."""
        client._service.files.return_value.get.return_value.execute.return_value = {"name": "lecture.pdf"}

        with patch("lingostat.google_drive.client.MediaIoBaseDownload") as mock_download:
            mock_download.return_value.next_chunk.side_effect = RefreshError("invalid_grant")
            with pytest.raises(DriveAuthenticationError):
                await client.download_file("1AbCdEfGhIjKlMnOp", tmp_path)

    @pytest.mark.asyncio
    async def test_unwritable_destination(self, client, tmp_path):
        client._service.files.return_value.get.return_value.execute.return_value = {"name": "lecture.pdf"}

        with pytest.raises(GoogleDriveError):
            await client.download_file("1AbCdEfGhIjKlMnOp", tmp_path / "missing-dir")

    def test_safe_filename(self):
        assert safe_filename("../../etc/passwd", "fallback") == "passwd"
        assert safe_filename("", "fallback") == "fallback"
        assert safe_filename("notes: v2.pdf", "fallback") == "notes_ v2.pdf"


class TestDriveFileMaterializer:
    """Test share-link parsing and single connection."""

    @pytest.fixture
    def client(self, tmp_path):
        client = MagicMock()
        client.is_connected = False

        async def connect():
            client.is_connected = True

        client.connect = AsyncMock(side_effect=connect)
        client.download_file = AsyncMock(return_value=tmp_path / "file.pdf")
        return client

    @pytest.mark.asyncio
    async def test_invalid_link(self, client, tmp_path, drive_settings):
        materializer = DriveFileMaterializer(drive_settings, client)

        with pytest.raises(InvalidDriveLinkError):
            await materializer.materialize("https://drive.google.com/drive/my-drive", tmp_path)

        client.connect.assert_not_called()

    @pytest.mark.asyncio
    async def test_connects_once(self, client, tmp_path, drive_settings):
        materializer = DriveFileMaterializer(drive_settings, client)

        await materializer.materialize("https://drive.google.com/file/d/1AbCdEfGhIjKlMnOp/view", tmp_path)
        path = await materializer.materialize("https://drive.google.com/open?id=2ZyXwVuTsRqPoNm", tmp_path)

        assert path == tmp_path / "file.pdf"
        assert client.connect.await_count == 1
        client.download_file.assert_any_await("2ZyXwVuTsRqPoNm", Path(tmp_path))
