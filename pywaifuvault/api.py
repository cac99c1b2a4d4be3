"""API client for WaifuVault."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any

import httpx

from .cancellation import CancelSignal
from .config import config
from .exceptions import (
    VaultAPIError,
    VaultCancelledError,
    VaultPasswordError,
)
from .models import (
    AlbumCreateBody,
    FileUpload,
    GenericSuccess,
    ModifyEntryPayload,
    Upload,
    UrlUpload,
    VaultAlbum,
    VaultBucket,
    VaultFile,
)
from .utils import check_error, get_url

logger = logging.getLogger(__name__)

# FormData names an unnamed blob "blob"; the vault expects a filename part
DEFAULT_BLOB_NAME = "blob"

# Default for the client timeout: read it from the config
USE_CONFIG_TIMEOUT: Any = object()


def _read_response(client: httpx.Client, request: httpx.Request) -> httpx.Response:
    """Send a request and load its whole body, closing the response."""
    response = client.send(request, stream=True)
    try:
        response.read()
    finally:
        response.close()
    return response


class WaifuVaultClient:
    """Client for interacting with the WaifuVault API.

    Every method performs its request(s) synchronously, with no retries
    and no caching. Pass a CancelSignal as ``signal`` to be able to abort
    a call from another thread.
    """

    def __init__(
        self,
        api_url: str | None = None,
        timeout: float | None = USE_CONFIG_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize WaifuVault API client.

        Args:
            api_url: Optional vault host (uses config if not provided)
            timeout: Request timeout in seconds, or None for no timeout
                (uses config if not provided)
            transport: Optional httpx transport, e.g. httpx.MockTransport
        """
        self.api_url = (api_url or config.api_url).rstrip("/")
        self.timeout = config.timeout if timeout is USE_CONFIG_TIMEOUT else timeout
        self._transport = transport
        self._client: httpx.Client | None = None

    def __enter__(self) -> WaifuVaultClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _new_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            transport=self._transport,
        )

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = self._new_client()
        return self._client

    def close(self) -> None:
        """Close the client and release connections."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None

    def _url(
        self, query_params: dict[str, Any] | None = None, path: str | None = None
    ) -> str:
        return get_url(query_params, path, base_url=self.api_url)

    def _send(
        self,
        method: str,
        url: str,
        signal: CancelSignal | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request and read its whole body.

        The response is always closed before returning or raising. Transport
        errors propagate unchanged unless they were provoked by the signal.

        Args:
            method: HTTP method
            url: Fully qualified URL
            signal: Optional cancel signal
            **kwargs: Additional arguments passed to httpx

        Returns:
            Response with its content loaded

        Raises:
            VaultCancelledError: If the signal was cancelled
        """
        if signal is None:
            client = self._get_client()
            logger.debug("%s %s", method, url)
            return _read_response(client, client.build_request(method, url, **kwargs))

        signal.raise_if_cancelled()
        return self._send_cancellable(method, url, signal, **kwargs)

    def _send_cancellable(
        self, method: str, url: str, signal: CancelSignal, **kwargs: Any
    ) -> httpx.Response:
        """Run the request on a worker thread so cancel() returns at once.

        The request gets its own httpx client. On cancel that client is
        closed, unless the transport was supplied by the caller, which drops
        its connections and fails a blocked send or read. The worker is then
        left to finish on its own.
        """
        client = self._new_client()
        request = client.build_request(method, url, **kwargs)
        logger.debug("%s %s", method, url)

        wake = threading.Event()
        outcome: dict[str, Any] = {}

        def worker() -> None:
            try:
                outcome["response"] = _read_response(client, request)
            except Exception as e:
                outcome["error"] = e
            finally:
                if self._transport is None:
                    client.close()
                wake.set()

        signal.add_callback(wake.set)
        try:
            threading.Thread(
                target=worker, name="waifuvault-request", daemon=True
            ).start()
            wake.wait()
        finally:
            signal.remove_callback(wake.set)

        if signal.cancelled:
            logger.debug("%s %s cancelled", method, url)
            # a caller supplied transport outlives this request
            if self._transport is None:
                client.close()
            raise VaultCancelledError() from outcome.get("error")
        if "error" in outcome:
            raise outcome["error"]
        return outcome["response"]

    def _request(
        self,
        method: str,
        url: str,
        signal: CancelSignal | None = None,
        **kwargs: Any,
    ) -> Any:
        """Make an API request and decode its JSON response.

        Raises:
            VaultAPIError: On a non-2xx status or a body that is not JSON
        """
        response = self._send(method, url, signal=signal, **kwargs)
        check_error(response)
        try:
            return response.json()
        except ValueError as e:
            raise VaultAPIError(
                "Invalid JSON response from server",
                status_code=response.status_code,
                body=response.text,
            ) from e

    def _request_content(
        self,
        method: str,
        url: str,
        signal: CancelSignal | None = None,
        **kwargs: Any,
    ) -> bytes:
        """Make an API request and return its raw body."""
        response = self._send(method, url, signal=signal, **kwargs)
        check_error(response)
        return response.content

    # =========================
    # File Operations
    # =========================

    def upload_file(
        self, upload: Upload, signal: CancelSignal | None = None
    ) -> VaultFile:
        """Upload a file to the vault, from bytes, a local path or a URL.

        Args:
            upload: FileUpload for bytes or a path, UrlUpload for a remote URL
            signal: Optional cancel signal

        Returns:
            The uploaded file

        Raises:
            TypeError: If upload is neither a FileUpload nor a UrlUpload
            OSError: If a local path cannot be read
            VaultAPIError: If the upload is rejected

        Example:
            >>> client.upload_file(FileUpload(file="cat.png", expires="1d"))
            >>> client.upload_file(UrlUpload(url="https://example.com/a.jpg"))
        """
        request_kwargs: dict[str, Any] = {}

        if isinstance(upload, FileUpload):
            filename = upload.filename
            if isinstance(upload.file, (bytes, bytearray, memoryview)):
                content = bytes(upload.file)
            else:
                file_path = Path(upload.file)
                content = file_path.read_bytes()
                if not filename:
                    filename = file_path.name
            request_kwargs["files"] = {
                "file": (filename or DEFAULT_BLOB_NAME, content)
            }
            if upload.password:
                request_kwargs["data"] = {"password": upload.password}
        elif isinstance(upload, UrlUpload):
            form = {"url": upload.url}
            if upload.password:
                form["password"] = upload.password
            request_kwargs["data"] = form
        else:
            raise TypeError(
                f"upload must be FileUpload or UrlUpload, not {type(upload).__name__}"
            )

        if upload.client_ip is not None:
            request_kwargs["headers"] = {
                "X-Forwarded-For": upload.client_ip,
                "X-Real-IP": upload.client_ip,
            }

        url = self._url(upload.query_params(), upload.bucket_token)
        data = self._request("PUT", url, signal=signal, **request_kwargs)
        return VaultFile.from_dict(data)

    def file_info(
        self,
        token: str,
        formatted: bool | None = None,
        signal: CancelSignal | None = None,
    ) -> VaultFile:
        """Get the info for a file.

        Args:
            token: The file token
            formatted: If True, retention_period is a human-readable string,
                otherwise a number. Not sent at all when None.
            signal: Optional cancel signal

        Returns:
            The file, including the album it belongs to
        """
        url = self._url({"formatted": formatted}, token)
        return VaultFile.from_dict(self._request("GET", url, signal=signal))

    def delete_file(
        self, token: str, signal: CancelSignal | None = None
    ) -> GenericSuccess:
        """Delete a file.

        The server answers with a bare ``true``; it is discarded and a fixed
        success envelope is returned instead.

        Args:
            token: The token of the file to delete
            signal: Optional cancel signal
        """
        self._request_content("DELETE", self._url(None, token), signal=signal)
        return GenericSuccess(success=True, description="deleted")

    def get_file(
        self,
        token: str | None = None,
        filename: str | None = None,
        password: str | None = None,
        signal: CancelSignal | None = None,
    ) -> bytes:
        """Download the content of a file.

        Exactly one of token or filename must be given. With a token the
        file info is fetched first to find the content URL.

        Args:
            token: The file token
            filename: The upload epoch and filename, e.g. ``1710111505084/08.png``
                (files with hidden filenames only have the epoch and extension)
            password: Password of a protected file
            signal: Optional cancel signal

        Returns:
            File content as bytes

        Raises:
            ValueError: If both or neither of token and filename are given
            VaultPasswordError: If the password is missing or wrong
            VaultAPIError: If the download fails otherwise
        """
        if (token is None) == (filename is None):
            raise ValueError("Exactly one of 'token' or 'filename' must be given")

        if filename is not None:
            file_url = f"{self.api_url}/f/{filename}"
        else:
            file_url = self.file_info(token, signal=signal).url

        headers: dict[str, str] = {}
        if password:
            headers["x-password"] = password

        response = self._send("GET", file_url, signal=signal, headers=headers)
        if response.status_code == 403:
            raise VaultPasswordError(body=response.text)
        check_error(response)
        return response.content

    def modify_entry(
        self,
        token: str,
        payload: ModifyEntryPayload,
        signal: CancelSignal | None = None,
    ) -> VaultFile:
        """Change the password, expiry or filename visibility of a file.

        Args:
            token: The file token
            payload: The changes; only fields that are set are sent
            signal: Optional cancel signal

        Returns:
            The modified file
        """
        data = self._request(
            "PATCH", self._url(None, token), signal=signal, json=payload.to_dict()
        )
        return VaultFile.from_dict(data)

    # =========================
    # Bucket Operations
    # =========================

    def create_bucket(self, signal: CancelSignal | None = None) -> VaultBucket:
        """Create a new bucket.

        Buckets are bound to the caller's IP; the server allows one per IP.
        """
        data = self._request("GET", self._url(None, "bucket/create"), signal=signal)
        return VaultBucket.from_dict(data)

    def get_bucket(
        self, bucket_token: str, signal: CancelSignal | None = None
    ) -> VaultBucket:
        """Get a bucket with all the files and albums it contains."""
        data = self._request(
            "POST",
            self._url(None, "bucket/get"),
            signal=signal,
            json={"bucket_token": bucket_token},
        )
        return VaultBucket.from_dict(data)

    def delete_bucket(
        self, bucket_token: str, signal: CancelSignal | None = None
    ) -> GenericSuccess:
        """Delete a bucket and every file it contains."""
        self._request_content(
            "DELETE", self._url(None, f"bucket/{bucket_token}"), signal=signal
        )
        return GenericSuccess(success=True, description="deleted")

    # =========================
    # Album Operations
    # =========================

    def create_album(
        self, body: AlbumCreateBody, signal: CancelSignal | None = None
    ) -> VaultAlbum:
        """Create an empty album in a bucket.

        Args:
            body: Album name and the bucket to create it in
            signal: Optional cancel signal
        """
        data = self._request(
            "POST",
            self._url(None, f"album/{body.bucket_token}"),
            signal=signal,
            json=body.to_dict(),
        )
        return VaultAlbum.from_dict(data)

    def associate_files(
        self,
        album_token: str,
        file_tokens: list[str],
        signal: CancelSignal | None = None,
    ) -> VaultAlbum:
        """Add files to an album.

        The files must be in the same bucket as the album.
        """
        data = self._request(
            "POST",
            self._url(None, f"album/{album_token}/associate"),
            signal=signal,
            json={"fileTokens": file_tokens},
        )
        return VaultAlbum.from_dict(data)

    def disassociate_files(
        self,
        album_token: str,
        file_tokens: list[str],
        signal: CancelSignal | None = None,
    ) -> VaultAlbum:
        """Remove files from an album; they stay in the bucket."""
        data = self._request(
            "POST",
            self._url(None, f"album/{album_token}/disassociate"),
            signal=signal,
            json={"fileTokens": file_tokens},
        )
        return VaultAlbum.from_dict(data)

    def get_album(
        self, album_token: str, signal: CancelSignal | None = None
    ) -> VaultAlbum:
        """Get an album and its files, by private or public token."""
        data = self._request(
            "GET", self._url(None, f"album/{album_token}"), signal=signal
        )
        return VaultAlbum.from_dict(data)

    def delete_album(
        self,
        album_token: str,
        delete_files: bool = False,
        signal: CancelSignal | None = None,
    ) -> GenericSuccess:
        """Delete an album.

        Args:
            album_token: The private album token
            delete_files: If True the files are deleted from the vault too,
                otherwise they are only detached and stay in the bucket
            signal: Optional cancel signal
        """
        data = self._request(
            "DELETE",
            self._url({"deleteFiles": delete_files}, f"album/{album_token}"),
            signal=signal,
        )
        return GenericSuccess.from_dict(data)

    def share_album(self, album_token: str, signal: CancelSignal | None = None) -> str:
        """Make an album publicly viewable in read-only form.

        Returns:
            The public URL of the album
        """
        data = self._request(
            "GET", self._url(None, f"album/share/{album_token}"), signal=signal
        )
        return GenericSuccess.from_dict(data).description

    def revoke_album(
        self, album_token: str, signal: CancelSignal | None = None
    ) -> GenericSuccess:
        """Invalidate the public URL of an album and make it private again."""
        data = self._request(
            "GET", self._url(None, f"album/revoke/{album_token}"), signal=signal
        )
        return GenericSuccess.from_dict(data)

    def download_album(
        self,
        album_token: str,
        file_ids: list[int] | None = None,
        signal: CancelSignal | None = None,
    ) -> bytes:
        """Download an album, or selected files of it, as a zip archive.

        Args:
            album_token: The public or private album token
            file_ids: IDs of the files to include; empty or None for all
            signal: Optional cancel signal

        Returns:
            The zip archive as bytes
        """
        return self._request_content(
            "POST",
            self._url(None, f"album/download/{album_token}"),
            signal=signal,
            json=list(file_ids or []),
        )
