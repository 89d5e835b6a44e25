"""
Abstract base class for cloud drive connectors.
Defines the capability interface the proxy service depends on.
"""

from abc import ABC, abstractmethod

from .models import AuthenticatedUser, FileReference


class BaseDriveConnector(ABC):
    """Interface for cloud drive read/write connectors.

    Implementations raise ProviderError for every provider-side failure.
    """

    @abstractmethod
    def get_auth_url(self, redirect_uri: str, scopes: list[str]) -> str:
        """Return the OAuth authorization URL for the user to visit.

        Args:
            redirect_uri: The callback URL after auth.
            scopes: Exact list of scopes to request.

        Returns:
            Authorization URL string.
        """

    @abstractmethod
    def exchange_code(self, code: str, redirect_uri: str) -> dict:
        """Exchange an authorization code for access/refresh tokens.

        Args:
            code: Authorization code from OAuth callback.
            redirect_uri: Must match the one used in get_auth_url.

        Returns:
            Dict with 'access_token', 'refresh_token', 'expires_in', 'scope'.
        """

    @abstractmethod
    def refresh_access_token(self, refresh_token: str) -> dict:
        """Trade a refresh token for a new access token (same dict shape as exchange_code)."""

    @abstractmethod
    def list_files(self, access_token: str, mime_type: str | None = None, page_size: int = 10) -> list[FileReference]:
        """List non-trashed files, optionally narrowed to one MIME type."""

    @abstractmethod
    def get_file(self, access_token: str, file_id: str) -> FileReference:
        """Fetch metadata for a single file."""

    @abstractmethod
    def download_content(self, access_token: str, file_id: str) -> str:
        """Download a file's body as text."""

    @abstractmethod
    def create_file(self, access_token: str, name: str, content: str, mime_type: str) -> FileReference:
        """Create a file with the given body and return its metadata."""

    @abstractmethod
    def update_content(self, access_token: str, file_id: str, content: str, mime_type: str) -> None:
        """Overwrite a file's body."""

    @abstractmethod
    def delete_file(self, access_token: str, file_id: str) -> None:
        """Permanently delete a file."""

    @abstractmethod
    def get_identity(self, access_token: str) -> AuthenticatedUser:
        """Return the account the token belongs to."""
