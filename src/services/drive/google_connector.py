"""
Google Drive read/write connector for the text-file proxy.

OAuth2 web-server flow against Google's token endpoint, token refresh through
google-auth, and Drive v3 / People v1 calls through googleapiclient. Every
failure leaves this module as a ProviderError.
"""

import io
import json
from datetime import datetime, timezone
from urllib.parse import urlencode

import google_auth_httplib2
import httplib2
import requests
from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from src.config.logging_config import setup_logger
from src.config.settings import config
from src.utils.retry import with_retry

from .base import BaseDriveConnector
from .errors import NOT_TEXT_REASON, ProviderError
from .models import AuthenticatedUser, FileReference

logger = setup_logger(__name__)

_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
_TOKEN_URL = "https://oauth2.googleapis.com/token"

_FILE_FIELDS = "id,name,mimeType,modifiedTime,trashed"


def _escape_query_string(s: str) -> str:
    """Escape single quotes for Drive API q parameter."""
    return s.replace("\\", "\\\\").replace("'", "\\'")


def _reason_from_body(body) -> str:
    """Short reason out of an error body (OAuth or Drive shape)."""
    if not isinstance(body, dict):
        return ""
    err = body.get("error")
    if isinstance(err, str):
        # OAuth token endpoint: {"error": "invalid_grant", "error_description": ...}
        return err
    if isinstance(err, dict):
        details = err.get("errors") or [{}]
        return details[0].get("reason", "") or err.get("status", "")
    return ""


def _http_error_reason(e: HttpError) -> str:
    try:
        body = (getattr(e, "content", None) or b"").decode("utf-8", errors="replace")
        return _reason_from_body(json.loads(body)) if body.strip() else ""
    except ValueError:
        return ""


class GoogleDriveConnector(BaseDriveConnector):
    """Google Drive connector using OAuth2 web flow."""

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._client_id = client_id if client_id is not None else config.GOOGLE_CLIENT_ID
        self._client_secret = client_secret if client_secret is not None else config.GOOGLE_CLIENT_SECRET
        self._timeout = timeout or config.PROVIDER_TIMEOUT_SECONDS
        self._drive_service = None
        self._people_service = None

    # ------------------------------------------------------------------
    # Google API plumbing
    # ------------------------------------------------------------------

    @property
    def _drive(self):
        if self._drive_service is None:
            self._drive_service = build(
                "drive", "v3", http=httplib2.Http(timeout=self._timeout), cache_discovery=False, static_discovery=True
            )
        return self._drive_service

    @property
    def _people(self):
        if self._people_service is None:
            self._people_service = build(
                "people", "v1", http=httplib2.Http(timeout=self._timeout), cache_discovery=False, static_discovery=True
            )
        return self._people_service

    def _authorized_http(self, access_token: str) -> google_auth_httplib2.AuthorizedHttp:
        # One transport per call: httplib2.Http is not thread-safe. A 401 is
        # handed back to the proxy, which owns the refresh.
        return google_auth_httplib2.AuthorizedHttp(
            Credentials(token=access_token),
            http=httplib2.Http(timeout=self._timeout),
            refresh_status_codes=(),
        )

    def _execute(self, request, access_token: str, operation: str):
        try:
            return request.execute(http=self._authorized_http(access_token))
        except HttpError as e:
            status = getattr(e.resp, "status", None)
            reason = _http_error_reason(e)
            logger.warning("Google API error: %s status=%s reason=%s", operation, status, reason)
            raise ProviderError(f"HTTP {status}", status_code=status, reason=reason) from e
        except TimeoutError as e:
            logger.warning("Google request timed out: %s", operation)
            raise ProviderError(f"Timed out after {self._timeout}s") from e
        except (httplib2.HttpLib2Error, OSError) as e:
            logger.warning("Google request failed: %s (%s)", operation, type(e).__name__)
            raise ProviderError(f"Request failed: {type(e).__name__}") from e

    # ------------------------------------------------------------------
    # OAuth
    # ------------------------------------------------------------------

    def get_auth_url(self, redirect_uri: str, scopes: list[str]) -> str:
        if not self._client_id:
            raise ValueError("Google OAuth client ID not configured")
        params = {
            "client_id": self._client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": " ".join(scopes),
            "access_type": "offline",
            "prompt": "consent",
        }
        return f"{_AUTH_URL}?{urlencode(params)}"

    def exchange_code(self, code: str, redirect_uri: str) -> dict:
        data = {
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": redirect_uri,
        }
        try:
            resp = requests.post(_TOKEN_URL, data=data, timeout=self._timeout)
        except requests.Timeout as e:
            logger.warning("Token exchange timed out")
            raise ProviderError(f"Timed out after {self._timeout}s") from e
        except requests.RequestException as e:
            logger.warning("Token exchange failed (%s)", type(e).__name__)
            raise ProviderError(f"Request failed: {type(e).__name__}") from e

        try:
            body = resp.json()
        except ValueError:
            body = None
        if resp.status_code >= 400:
            reason = _reason_from_body(body)
            logger.warning("Token exchange rejected: status=%s reason=%s", resp.status_code, reason)
            raise ProviderError(f"HTTP {resp.status_code}", status_code=resp.status_code, reason=reason)
        if not isinstance(body, dict) or "access_token" not in body:
            raise ProviderError("Token response without access_token", status_code=502)
        return {
            "access_token": body["access_token"],
            "refresh_token": body.get("refresh_token", ""),
            "expires_in": body.get("expires_in", 3600),
            "scope": body.get("scope", ""),
        }

    def refresh_access_token(self, refresh_token: str) -> dict:
        creds = Credentials(
            token=None,
            refresh_token=refresh_token,
            token_uri=_TOKEN_URL,
            client_id=self._client_id,
            client_secret=self._client_secret,
        )
        try:
            creds.refresh(Request())
        except RefreshError as e:
            details = e.args[1] if len(e.args) > 1 else None
            reason = _reason_from_body(details)
            retryable = getattr(e, "retryable", False)
            logger.warning("Token refresh rejected: reason=%s retryable=%s", reason, retryable)
            raise ProviderError("Token refresh failed", status_code=503 if retryable else 400, reason=reason) from e
        except TransportError as e:
            logger.warning("Token refresh failed (%s)", type(e).__name__)
            raise ProviderError(f"Request failed: {type(e).__name__}") from e

        expires_in = None
        if creds.expiry is not None:
            # google-auth keeps expiry as naive UTC
            now = datetime.now(timezone.utc).replace(tzinfo=None)
            expires_in = max(int((creds.expiry - now).total_seconds()), 1)
        return {
            "access_token": creds.token,
            "refresh_token": creds.refresh_token or "",
            "expires_in": expires_in,
            "scope": " ".join(getattr(creds, "granted_scopes", None) or []),
        }

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    @with_retry(retries=config.PROVIDER_RETRIES)
    def list_files(self, access_token: str, mime_type: str | None = None, page_size: int = 10) -> list[FileReference]:
        query_parts = ["trashed = false"]
        if mime_type:
            query_parts.append(f"mimeType = '{_escape_query_string(mime_type)}'")
        request = self._drive.files().list(
            q=" and ".join(query_parts),
            fields=f"files({_FILE_FIELDS})",
            pageSize=page_size,
        )
        resp = self._execute(request, access_token, "files.list")
        return [FileReference.from_api(f) for f in resp.get("files", [])]

    @with_retry(retries=config.PROVIDER_RETRIES)
    def get_file(self, access_token: str, file_id: str) -> FileReference:
        request = self._drive.files().get(fileId=file_id, fields=_FILE_FIELDS)
        return FileReference.from_api(self._execute(request, access_token, "files.get"))

    @with_retry(retries=config.PROVIDER_RETRIES)
    def download_content(self, access_token: str, file_id: str) -> str:
        request = self._drive.files().get_media(fileId=file_id)
        data = self._execute(request, access_token, "files.get_media")
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            # Editing a lossy decode would write the damage back on save.
            raise ProviderError("File is not UTF-8 text", status_code=415, reason=NOT_TEXT_REASON) from e

    @staticmethod
    def _media(content: str, mime_type: str) -> MediaIoBaseUpload:
        return MediaIoBaseUpload(io.BytesIO(content.encode("utf-8")), mimetype=mime_type, resumable=False)

    def create_file(self, access_token: str, name: str, content: str, mime_type: str) -> FileReference:
        request = self._drive.files().create(
            body={"name": name, "mimeType": mime_type},
            media_body=self._media(content, mime_type),
            fields=_FILE_FIELDS,
        )
        return FileReference.from_api(self._execute(request, access_token, "files.create"))

    def update_content(self, access_token: str, file_id: str, content: str, mime_type: str) -> None:
        request = self._drive.files().update(
            fileId=file_id,
            media_body=self._media(content, mime_type),
            fields="id",
        )
        self._execute(request, access_token, "files.update")

    def delete_file(self, access_token: str, file_id: str) -> None:
        self._execute(self._drive.files().delete(fileId=file_id), access_token, "files.delete")

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @with_retry(retries=config.PROVIDER_RETRIES)
    def get_identity(self, access_token: str) -> AuthenticatedUser:
        request = self._people.people().get(resourceName="people/me", personFields="names,emailAddresses")
        data = self._execute(request, access_token, "people.get")
        names = data.get("names") or [{}]
        emails = data.get("emailAddresses") or [{}]
        return AuthenticatedUser(
            id=data.get("resourceName", ""),
            name=names[0].get("displayName", ""),
            email=emails[0].get("value", ""),
        )
