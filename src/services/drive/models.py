# © 2026 Crest Advisory Group LLC. All rights reserved.
# PROPRIETARY AND CONFIDENTIAL. Unauthorized copying, distribution, or use is strictly prohibited.

"""
Drive Domain Models

Pure data structures with no external dependencies, shared by the connectors,
the session store and the proxy service.
"""

import time
from dataclasses import dataclass

TEXT_MIME_TYPE = "text/plain"


@dataclass(frozen=True)
class Credential:
    """Token pair issued by the provider. Immutable so it can be swapped atomically."""

    access_token: str
    refresh_token: str = ""
    expires_at: float | None = None  # unix timestamp
    scope: str = ""

    @classmethod
    def from_token_response(cls, data: dict, previous: "Credential | None" = None) -> "Credential":
        """Build from a connector's exchange/refresh result.

        Refresh responses usually omit refresh_token; the previous one is kept.
        """
        refresh_token = data.get("refresh_token") or (previous.refresh_token if previous else "")
        expires_in = data.get("expires_in")
        return cls(
            access_token=data["access_token"],
            refresh_token=refresh_token,
            expires_at=time.time() + int(expires_in) if expires_in else None,
            scope=data.get("scope", ""),
        )

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and time.time() >= self.expires_at


@dataclass
class FileReference:
    """Metadata row for a drive file. id is the only stable identity."""

    id: str
    name: str
    mime_type: str = TEXT_MIME_TYPE
    modified_time: str | None = None  # RFC 3339, as returned by the provider
    trashed: bool = False

    @classmethod
    def from_api(cls, item: dict) -> "FileReference":
        return cls(
            id=item["id"],
            name=item.get("name", ""),
            mime_type=item.get("mimeType", ""),
            modified_time=item.get("modifiedTime"),
            trashed=bool(item.get("trashed", False)),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "mimeType": self.mime_type,
            "modifiedTime": self.modified_time,
        }


@dataclass
class FileContent:
    """Text body of a file, fetched on demand for the editor."""

    id: str
    name: str
    content: str = ""

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "content": self.content}


@dataclass
class AuthenticatedUser:
    """Identity of the signed-in account (People API `people/me`)."""

    id: str
    name: str = ""
    email: str = ""

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "email": self.email}
