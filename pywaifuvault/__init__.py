"""PyWaifuVault - client library and CLI for the WaifuVault file host."""

from .api import WaifuVaultClient
from .cancellation import CancelSignal
from .exceptions import (
    VaultAPIError,
    VaultCancelledError,
    VaultConfigError,
    VaultError,
    VaultPasswordError,
)
from .models import (
    AlbumCreateBody,
    AlbumStub,
    ErrorResponse,
    FileUpload,
    GenericSuccess,
    ModifyEntryPayload,
    UrlUpload,
    VaultAlbum,
    VaultBucket,
    VaultFile,
    VaultFileOptions,
    create_upload,
)
from .utils import check_error, get_url

__all__ = [
    "WaifuVaultClient",
    "CancelSignal",
    "VaultAPIError",
    "VaultCancelledError",
    "VaultConfigError",
    "VaultError",
    "VaultPasswordError",
    "AlbumCreateBody",
    "AlbumStub",
    "ErrorResponse",
    "FileUpload",
    "GenericSuccess",
    "ModifyEntryPayload",
    "UrlUpload",
    "VaultAlbum",
    "VaultBucket",
    "VaultFile",
    "VaultFileOptions",
    "create_upload",
    "check_error",
    "get_url",
]
