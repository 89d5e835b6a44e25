"""
Shared test helpers. Used across unit tests to avoid duplication.
"""

import itertools

from src.services.drive.base import BaseDriveConnector
from src.services.drive.errors import ProviderError
from src.services.drive.models import AuthenticatedUser, FileReference

TEST_USER = AuthenticatedUser(id="people/1234567890", name="Ada Lovelace", email="ada@example.com")


class FakeDriveConnector(BaseDriveConnector):
    """In-memory drive that behaves like the provider for the proxy's purposes.

    Every call is recorded in ``calls``. Codes must be issued with ``issue_code``
    and are single-use, tokens can be revoked with ``expire_token``, and
    ``fail_next[method]`` injects one ProviderError into the next call of that method.
    """

    def __init__(self, honor_trashed_query: bool = True) -> None:
        self.files: dict[str, dict] = {}
        self.calls: list[str] = []
        self.fail_next: dict[str, ProviderError] = {}
        self.identity = TEST_USER
        self.honor_trashed_query = honor_trashed_query
        self._issued_codes: set[str] = set()
        self._valid_tokens: set[str] = set()
        self._refresh_tokens: set[str] = set()
        self._ids = itertools.count(1)
        self._tokens = itertools.count(1)

    # -- test controls -------------------------------------------------

    def issue_code(self, code: str) -> str:
        self._issued_codes.add(code)
        return code

    def expire_token(self, access_token: str) -> None:
        self._valid_tokens.discard(access_token)

    def revoke_refresh(self, refresh_token: str) -> None:
        self._refresh_tokens.discard(refresh_token)

    def add_file(self, name: str, content: str = "", mime_type: str = "text/plain", trashed: bool = False) -> str:
        file_id = f"file-{next(self._ids)}"
        self.files[file_id] = {
            "name": name,
            "content": content,
            "mimeType": mime_type,
            "modifiedTime": "2024-01-01T00:00:00.000Z",
            "trashed": trashed,
        }
        return file_id

    # -- internals -----------------------------------------------------

    def _enter(self, method: str, access_token: str | None = None) -> None:
        self.calls.append(method)
        if method in self.fail_next:
            raise self.fail_next.pop(method)
        if access_token is not None and access_token not in self._valid_tokens:
            raise ProviderError("HTTP 401", status_code=401, reason="authError")

    def _lookup(self, file_id: str) -> dict:
        if file_id not in self.files:
            raise ProviderError("HTTP 404", status_code=404, reason="notFound")
        return self.files[file_id]

    def _ref(self, file_id: str) -> FileReference:
        f = self.files[file_id]
        return FileReference(
            id=file_id,
            name=f["name"],
            mime_type=f["mimeType"],
            modified_time=f["modifiedTime"],
            trashed=f["trashed"],
        )

    def _new_tokens(self, refresh_token: str = "") -> dict:
        access_token = f"access-{next(self._tokens)}"
        self._valid_tokens.add(access_token)
        if refresh_token:
            self._refresh_tokens.add(refresh_token)
        return {"access_token": access_token, "refresh_token": refresh_token, "expires_in": 3600, "scope": ""}

    # -- BaseDriveConnector --------------------------------------------

    def get_auth_url(self, redirect_uri: str, scopes: list[str]) -> str:
        self.calls.append("get_auth_url")
        return f"https://fake.example/auth?redirect_uri={redirect_uri}&scope={'+'.join(scopes)}"

    def exchange_code(self, code: str, redirect_uri: str) -> dict:
        self._enter("exchange_code")
        if code not in self._issued_codes:
            raise ProviderError("HTTP 400", status_code=400, reason="invalid_grant")
        self._issued_codes.discard(code)
        return self._new_tokens(refresh_token=f"refresh-for-{code}")

    def refresh_access_token(self, refresh_token: str) -> dict:
        self._enter("refresh_access_token")
        if refresh_token not in self._refresh_tokens:
            raise ProviderError("HTTP 400", status_code=400, reason="invalid_grant")
        tokens = self._new_tokens()
        tokens["refresh_token"] = ""
        return tokens

    def list_files(self, access_token: str, mime_type: str | None = None, page_size: int = 10) -> list[FileReference]:
        self._enter("list_files", access_token)
        refs = []
        for file_id, f in self.files.items():
            if self.honor_trashed_query and f["trashed"]:
                continue
            if mime_type and f["mimeType"] != mime_type:
                continue
            refs.append(self._ref(file_id))
        return refs[:page_size]

    def get_file(self, access_token: str, file_id: str) -> FileReference:
        self._enter("get_file", access_token)
        self._lookup(file_id)
        return self._ref(file_id)

    def download_content(self, access_token: str, file_id: str) -> str:
        self._enter("download_content", access_token)
        return self._lookup(file_id)["content"]

    def create_file(self, access_token: str, name: str, content: str, mime_type: str) -> FileReference:
        self._enter("create_file", access_token)
        file_id = self.add_file(name, content, mime_type)
        return self._ref(file_id)

    def update_content(self, access_token: str, file_id: str, content: str, mime_type: str) -> None:
        self._enter("update_content", access_token)
        self._lookup(file_id)["content"] = content

    def delete_file(self, access_token: str, file_id: str) -> None:
        self._enter("delete_file", access_token)
        self._lookup(file_id)
        del self.files[file_id]

    def get_identity(self, access_token: str) -> AuthenticatedUser:
        self._enter("get_identity", access_token)
        return self.identity


def signed_in_proxy(connector: FakeDriveConnector | None = None, code: str = "code-1"):
    """Create a DriveProxyService that already completed sign-in with ``code``."""
    from src.services.drive.proxy import DriveProxyService

    connector = connector or FakeDriveConnector()
    proxy = DriveProxyService(connector, redirect_uri="http://localhost:5000/auth/google/callback")
    proxy.complete_auth(connector.issue_code(code))
    connector.calls.clear()
    return proxy, connector
