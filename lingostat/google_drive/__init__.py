"""
Google Drive access for materializing shared files.
"""

from lingostat.google_drive.auth import SCOPES, GoogleDriveAuth
from lingostat.google_drive.client import GoogleDriveClient
from lingostat.google_drive.materializer import DriveFileMaterializer

__all__ = ["SCOPES", "GoogleDriveAuth", "GoogleDriveClient", "DriveFileMaterializer"]
