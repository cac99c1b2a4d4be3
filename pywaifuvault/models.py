"""Data models for WaifuVault API responses and requests.

Every response record is a frozen snapshot of what the server returned;
a follow-up request is needed to observe later server-side changes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

# =============================================================================
# Response records
# =============================================================================


@dataclass(frozen=True)
class ErrorResponse:
    """An error returned from the API."""

    status: int
    name: str
    message: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ErrorResponse:
        return cls(
            status=data.get("status", 0),
            name=data.get("name", ""),
            message=data.get("message", ""),
        )


@dataclass(frozen=True)
class GenericSuccess:
    """Success envelope used by delete, share and revoke operations."""

    success: bool
    description: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GenericSuccess:
        return cls(
            success=bool(data.get("success", False)),
            description=data.get("description", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "description": self.description}


@dataclass(frozen=True)
class VaultFileOptions:
    """Options a file was uploaded or modified with."""

    hide_filename: bool = False
    one_time_download: bool = False
    protected: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> VaultFileOptions:
        data = data or {}
        return cls(
            hide_filename=bool(data.get("hideFilename", False)),
            one_time_download=bool(data.get("oneTimeDownload", False)),
            protected=bool(data.get("protected", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "hideFilename": self.hide_filename,
            "oneTimeDownload": self.one_time_download,
            "protected": self.protected,
        }


@dataclass(frozen=True)
class VaultFile:
    """A file stored in the vault.

    ``retention_period`` is the remaining lifetime in milliseconds, or a
    human-readable string such as ``"332 days 7 hours 18 minutes"`` when
    the file info was requested with ``formatted=True``.
    """

    token: str
    url: str
    retention_period: Union[int, str]
    id: int = 0
    views: int = 0
    bucket: str | None = None
    options: VaultFileOptions = field(default_factory=VaultFileOptions)
    album: VaultAlbum | None = None

    @property
    def is_formatted(self) -> bool:
        """True if retention_period is a human-readable string."""
        return isinstance(self.retention_period, str)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VaultFile:
        album_data = data.get("album")
        return cls(
            token=data["token"],
            url=data.get("url", ""),
            retention_period=data.get("retentionPeriod", 0),
            id=data.get("id", 0),
            views=data.get("views", 0),
            bucket=data.get("bucket"),
            options=VaultFileOptions.from_dict(data.get("options")),
            album=VaultAlbum.from_dict(album_data) if album_data else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "token": self.token,
            "url": self.url,
            "retentionPeriod": self.retention_period,
            "id": self.id,
            "views": self.views,
            "bucket": self.bucket,
            "options": self.options.to_dict(),
            "album": self.album.to_dict() if self.album else None,
        }


@dataclass(frozen=True)
class VaultAlbum:
    """A named, shareable collection of files inside a bucket."""

    token: str
    bucket_token: str
    name: str
    public_token: str | None = None
    files: tuple[VaultFile, ...] = ()
    date_created: int = 0

    @property
    def is_shared(self) -> bool:
        return self.public_token is not None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VaultAlbum:
        return cls(
            token=data["token"],
            bucket_token=data.get("bucketToken", ""),
            name=data.get("name", ""),
            public_token=data.get("publicToken"),
            files=tuple(VaultFile.from_dict(f) for f in data.get("files") or []),
            date_created=data.get("dateCreated", 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "token": self.token,
            "bucketToken": self.bucket_token,
            "publicToken": self.public_token,
            "name": self.name,
            "files": [f.to_dict() for f in self.files],
            "dateCreated": self.date_created,
        }


@dataclass(frozen=True)
class AlbumStub:
    """An album as listed inside a bucket, without its files."""

    token: str
    bucket: str
    name: str
    public_token: str | None = None
    date_created: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AlbumStub:
        return cls(
            token=data["token"],
            bucket=data.get("bucket", ""),
            name=data.get("name", ""),
            public_token=data.get("publicToken"),
            date_created=data.get("dateCreated", 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "token": self.token,
            "bucket": self.bucket,
            "publicToken": self.public_token,
            "name": self.name,
            "dateCreated": self.date_created,
        }


@dataclass(frozen=True)
class VaultBucket:
    """A bucket and everything it contains."""

    token: str
    files: tuple[VaultFile, ...] = ()
    albums: tuple[AlbumStub, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VaultBucket:
        return cls(
            token=data["token"],
            files=tuple(VaultFile.from_dict(f) for f in data.get("files") or []),
            albums=tuple(AlbumStub.from_dict(a) for a in data.get("albums") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "token": self.token,
            "files": [f.to_dict() for f in self.files],
            "albums": [a.to_dict() for a in self.albums],
        }


# =============================================================================
# Request payloads
# =============================================================================


@dataclass(frozen=True, kw_only=True)
class UploadOptions:
    """Options shared by file and URL uploads.

    Attributes:
        expires: A number followed by ``m``, ``h`` or ``d`` (e.g. ``"1d"``).
            Omit to use the server's retention policy.
        hide_filename: Keep the filename out of the file URL
        password: Encrypt the file with this password
        one_time_download: Delete the file as soon as it is downloaded
        bucket_token: Upload into this bucket
        client_ip: Sent as X-Forwarded-For and X-Real-IP, unvalidated
    """

    expires: str | None = None
    hide_filename: bool | None = None
    password: str | None = None
    one_time_download: bool | None = None
    bucket_token: str | None = None
    client_ip: str | None = None

    def query_params(self) -> dict[str, Any]:
        return {
            "expires": self.expires,
            "hide_filename": self.hide_filename,
            "one_time_download": self.one_time_download,
        }


@dataclass(frozen=True, kw_only=True)
class FileUpload(UploadOptions):
    """Upload of raw bytes or of a file on disk.

    When ``file`` is a path and no filename is given, the last path
    component is used.
    """

    file: Union[bytes, bytearray, memoryview, str, Path]
    filename: str | None = None


@dataclass(frozen=True, kw_only=True)
class UrlUpload(UploadOptions):
    """Upload of a remote file the vault fetches itself."""

    url: str


Upload = Union[FileUpload, UrlUpload]


def create_upload(
    file: Union[bytes, bytearray, memoryview, str, Path, None] = None,
    url: str | None = None,
    **options: Any,
) -> Upload:
    """Build the upload variant matching the given source.

    Args:
        file: Bytes or a local path
        url: Remote URL
        **options: UploadOptions fields, plus ``filename`` for file uploads

    Returns:
        FileUpload or UrlUpload

    Raises:
        ValueError: If both or neither of file and url are given
    """
    if (file is None) == (url is None):
        raise ValueError("Exactly one of 'file' or 'url' must be given")
    if url is not None:
        if "filename" in options:
            raise ValueError("'filename' only applies to file uploads")
        return UrlUpload(url=url, **options)
    return FileUpload(file=file, **options)


@dataclass(frozen=True)
class ModifyEntryPayload:
    """Changes to apply to an existing file.

    Setting ``password`` on an unprotected file encrypts it; changing the
    password of a protected file also needs ``previous_password``.
    """

    password: str | None = None
    previous_password: str | None = None
    custom_expiry: str | None = None
    hide_filename: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.password is not None:
            data["password"] = self.password
        if self.previous_password is not None:
            data["previousPassword"] = self.previous_password
        if self.custom_expiry is not None:
            data["customExpiry"] = self.custom_expiry
        if self.hide_filename is not None:
            data["hideFilename"] = self.hide_filename
        return data


@dataclass(frozen=True)
class AlbumCreateBody:
    """Payload for creating an album in a bucket."""

    name: str
    bucket_token: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "bucketToken": self.bucket_token}
