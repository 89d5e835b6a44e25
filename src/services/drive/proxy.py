"""
Drive proxy service: the authorization and file operations the HTTP layer exposes.

Holds no provider specifics. Everything provider-side goes through a
BaseDriveConnector, and every ProviderError it raises is mapped onto the
DriveServiceError taxonomy before leaving this module.
"""

import re
from collections.abc import Callable
from typing import TypeVar

from src.config.logging_config import setup_logger
from src.config.settings import config

from .base import BaseDriveConnector
from .errors import (
    NOT_TEXT_REASON,
    AuthExchangeFailed,
    DriveServiceError,
    InvalidArgument,
    NotFound,
    ProviderError,
    ProviderUnavailable,
    Unauthorized,
)
from .models import TEXT_MIME_TYPE, Credential, FileContent, FileReference
from .session import SessionStore

logger = setup_logger(__name__)

T = TypeVar("T")

# Drive ids are URL-safe base64 style tokens.
_FILE_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")

# Files created by this app, metadata of the rest, and who is signed in.
DEFAULT_SCOPES = [
    "https://www.googleapis.com/auth/drive.file",
    "https://www.googleapis.com/auth/drive.metadata.readonly",
    "https://www.googleapis.com/auth/userinfo.profile",
    "https://www.googleapis.com/auth/userinfo.email",
]


def map_provider_error(exc: ProviderError, operation: str) -> DriveServiceError:
    """Translate a connector failure into the error a client is allowed to see."""
    if exc.reason == NOT_TEXT_REASON:
        return InvalidArgument("File is not UTF-8 text and cannot be edited here")
    if exc.retryable:
        return ProviderUnavailable(f"Drive is unavailable, try again ({operation})")
    status = exc.status_code
    if status in (401, 403):
        return Unauthorized("Drive rejected the session; sign in again")
    if status in (404, 410):
        return NotFound("File not found")
    return InvalidArgument(f"Drive rejected the request ({operation})")


class DriveProxyService:
    """Single-session proxy between the browser and the drive provider."""

    def __init__(
        self,
        connector: BaseDriveConnector,
        session: SessionStore | None = None,
        redirect_uri: str | None = None,
        scopes: list[str] | None = None,
        page_size: int | None = None,
    ) -> None:
        self._connector = connector
        self.session = session or SessionStore()
        self._redirect_uri = redirect_uri or config.REDIRECT_URI
        self._scopes = list(scopes or DEFAULT_SCOPES)
        self._page_size = page_size or config.LIST_PAGE_SIZE

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------

    def begin_auth(self) -> str:
        return self._connector.get_auth_url(self._redirect_uri, self._scopes)

    def complete_auth(self, code: str) -> None:
        """Exchange a one-time code and install the resulting session.

        A failed exchange leaves the previous session in place. Replaying a code
        that was already presented fails without contacting the provider.
        """
        code = (code or "").strip()
        if not code:
            raise InvalidArgument("Missing authorization code")
        if not self.session.claim_code(code):
            logger.warning("Rejected replayed authorization code")
            raise AuthExchangeFailed("Authorization code was already used; sign in again")

        try:
            data = self._connector.exchange_code(code, self._redirect_uri)
        except ProviderError as e:
            logger.error("Token exchange failed: status=%s reason=%s", e.status_code, e.reason)
            if e.retryable:
                raise ProviderUnavailable("Could not reach the sign-in provider") from e
            raise AuthExchangeFailed("Authorization code was rejected; sign in again") from e

        self.session.replace(Credential.from_token_response(data))
        logger.info("Authorization completed")

    def auth_status(self) -> dict:
        """Report whether a session exists and who it belongs to.

        Provider auth rejections report unauthenticated; other lookup failures
        raise so the caller can answer with a distinguished error status.
        """
        credential = self.session.get()
        if credential is None or not credential.access_token:
            return {"isAuthenticated": False, "user": None}

        user = self.session.cached_user(credential)
        if user is None:
            try:
                user, used = self._call_with_credential("identity", self._connector.get_identity)
            except Unauthorized:
                return {"isAuthenticated": False, "user": None}
            # A sign-in that landed during the lookup must not inherit this user.
            self.session.remember_user(used, user)
        return {"isAuthenticated": True, "user": user.to_dict()}

    def sign_out(self) -> None:
        self.session.clear()

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def list_files(self, mime_type: str | None = None) -> list[FileReference]:
        files = self._call(
            "list",
            lambda token: self._connector.list_files(token, mime_type=mime_type, page_size=self._page_size),
        )
        # The query already excludes trashed entries; drop any the provider still flags.
        return [f for f in files if not f.trashed]

    def get_content(self, file_id: str) -> FileContent:
        file_id = self._require_id(file_id)
        meta = self._call("get", lambda token: self._connector.get_file(token, file_id))
        if meta.trashed:
            raise NotFound("File not found")
        content = self._call("download", lambda token: self._connector.download_content(token, file_id))
        return FileContent(id=meta.id, name=meta.name, content=content)

    def create_file(self, name: str, content: str = "") -> FileReference:
        name = (name or "").strip()
        if not name:
            raise InvalidArgument("File name must not be empty")
        created = self._call(
            "create",
            lambda token: self._connector.create_file(token, name, content or "", TEXT_MIME_TYPE),
        )
        logger.info("Created file id=%s", created.id)
        return created

    def update_content(self, file_id: str, content: str) -> None:
        """Overwrite the whole body. Last writer wins; modifiedTime is not checked."""
        file_id = self._require_id(file_id)
        self._call(
            "update",
            lambda token: self._connector.update_content(token, file_id, content or "", TEXT_MIME_TYPE),
        )
        logger.info("Updated file id=%s", file_id)

    def delete_file(self, file_id: str) -> None:
        file_id = self._require_id(file_id)
        self._call("delete", lambda token: self._connector.delete_file(token, file_id))
        logger.info("Deleted file id=%s", file_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _require_id(file_id: str) -> str:
        file_id = (file_id or "").strip()
        if not file_id:
            raise InvalidArgument("File id must not be empty")
        if not _FILE_ID_RE.match(file_id):
            raise InvalidArgument("Malformed file id")
        return file_id

    def _require_credential(self) -> Credential:
        credential = self.session.get()
        if credential is None or not credential.access_token:
            raise Unauthorized("Not signed in")
        return credential

    def _refresh(self, credential: Credential) -> Credential:
        """Trade the refresh token for a new access token and swap it in."""
        try:
            data = self._connector.refresh_access_token(credential.refresh_token)
        except ProviderError as e:
            logger.warning("Token refresh failed: status=%s reason=%s", e.status_code, e.reason)
            if e.retryable:
                raise ProviderUnavailable("Could not reach the sign-in provider") from e
            raise Unauthorized("Session expired; sign in again") from e

        refreshed = Credential.from_token_response(data, previous=credential)
        if self.session.swap_if_current(credential, refreshed):
            logger.info("Access token refreshed")
            return refreshed
        # A new sign-in landed while refreshing; it wins.
        current = self.session.get()
        if current is None:
            raise Unauthorized("Not signed in")
        return current

    def _call(self, operation: str, fn: Callable[[str], T]) -> T:
        return self._call_with_credential(operation, fn)[0]

    def _call_with_credential(self, operation: str, fn: Callable[[str], T]) -> tuple[T, Credential]:
        """Run fn with the current access token, refreshing once on expiry.

        Returns the result together with the credential that produced it.
        """
        credential = self._require_credential()
        if credential.is_expired and credential.refresh_token:
            credential = self._refresh(credential)
        try:
            return fn(credential.access_token), credential
        except ProviderError as e:
            if e.status_code != 401 or not credential.refresh_token:
                logger.error("Drive %s failed: status=%s reason=%s", operation, e.status_code, e.reason)
                raise map_provider_error(e, operation) from e

        credential = self._refresh(credential)
        try:
            return fn(credential.access_token), credential
        except ProviderError as e:
            logger.error("Drive %s failed after refresh: status=%s reason=%s", operation, e.status_code, e.reason)
            raise map_provider_error(e, operation) from e
