# © 2026 Crest Advisory Group LLC. All rights reserved.
# PROPRIETARY AND CONFIDENTIAL. Unauthorized copying, distribution, or use is strictly prohibited.

"""
Google Drive service: OAuth session and text-file operations proxied to Drive v3.
The proxy depends on BaseDriveConnector only; GoogleDriveConnector is the production backend.
"""

from .base import BaseDriveConnector
from .google_connector import GoogleDriveConnector
from .proxy import DEFAULT_SCOPES, DriveProxyService
from .session import SessionStore

__all__ = ["BaseDriveConnector", "DEFAULT_SCOPES", "DriveProxyService", "GoogleDriveConnector", "SessionStore"]
