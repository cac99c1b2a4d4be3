"""CLI interface for WaifuVault."""

import logging
from pathlib import Path
from typing import Any, Optional

import click
import httpx

from .api import WaifuVaultClient
from .config import config
from .exceptions import VaultError
from .models import (
    AlbumCreateBody,
    ModifyEntryPayload,
    VaultAlbum,
    VaultBucket,
    VaultFile,
    create_upload,
)
from .output import OutputFormatter

logger = logging.getLogger(__name__)


def _get_client(ctx: Any) -> WaifuVaultClient:
    if ctx.obj["timeout"] is None:
        return WaifuVaultClient(api_url=ctx.obj["api_url"])
    return WaifuVaultClient(api_url=ctx.obj["api_url"], timeout=ctx.obj["timeout"])


def _fail(ctx: Any, out: OutputFormatter, error: Exception) -> None:
    out.error(str(error))
    ctx.exit(1)


def _show_file(out: OutputFormatter, file: VaultFile, title: str) -> None:
    if out.json_output:
        out.output_json(file.to_dict())
        return
    items = [
        ("Token", file.token),
        ("URL", file.url),
        ("Retention", str(file.retention_period)),
        ("Views", str(file.views)),
        ("Protected", "yes" if file.options.protected else "no"),
        ("Hidden filename", "yes" if file.options.hide_filename else "no"),
        ("One-time download", "yes" if file.options.one_time_download else "no"),
    ]
    if file.bucket:
        items.append(("Bucket", file.bucket))
    if file.album:
        items.append(("Album", f"{file.album.name} ({file.album.token})"))
    out.print_summary(title, items)


def _show_bucket(out: OutputFormatter, bucket: VaultBucket, title: str) -> None:
    if out.json_output:
        out.output_json(bucket.to_dict())
        return
    out.print_summary(
        title,
        [
            ("Token", bucket.token),
            ("Files", str(len(bucket.files))),
            ("Albums", str(len(bucket.albums))),
        ],
    )
    if bucket.files:
        out.print("")
        out.output_table(
            [{"id": f.id, "token": f.token, "url": f.url} for f in bucket.files],
            ["id", "token", "url"],
            {"id": "ID", "token": "Token", "url": "URL"},
        )
    if bucket.albums:
        out.print("")
        out.output_table(
            [{"token": a.token, "name": a.name} for a in bucket.albums],
            ["token", "name"],
            {"token": "Album token", "name": "Name"},
        )


def _show_album(out: OutputFormatter, album: VaultAlbum, title: str) -> None:
    if out.json_output:
        out.output_json(album.to_dict())
        return
    out.print_summary(
        title,
        [
            ("Token", album.token),
            ("Name", album.name),
            ("Bucket", album.bucket_token),
            ("Public token", album.public_token or "-"),
            ("Files", str(len(album.files))),
        ],
    )
    if album.files:
        out.print("")
        out.output_table(
            [{"id": f.id, "token": f.token, "url": f.url} for f in album.files],
            ["id", "token", "url"],
            {"id": "ID", "token": "Token", "url": "URL"},
        )


def _write_output(out: OutputFormatter, content: bytes, save_path: Path) -> None:
    save_path.write_bytes(content)
    out.success(f"✓ Saved {out.format_size(len(content))} to {save_path}")


@click.group()
@click.option("--url", "api_url", envvar="WAIFUVAULT_URL", help="WaifuVault host URL")
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Request timeout in seconds (default: WAIFUVAULT_TIMEOUT, else none)",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="pywaifuvault")
@click.pass_context
def main(
    ctx: Any,
    api_url: Optional[str],
    timeout: Optional[float],
    quiet: bool,
    json: bool,
    verbose: bool,
) -> None:
    """PyWaifuVault - Upload, share and download files on WaifuVault."""
    ctx.ensure_object(dict)
    ctx.obj["api_url"] = api_url
    ctx.obj["timeout"] = timeout
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pywaifuvault").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


# =========================
# File commands
# =========================


@main.command()
@click.argument("source")
@click.option("--filename", "-n", help="Filename to store (default: local name)")
@click.option("--password", "-p", help="Encrypt the file with a password")
@click.option("--expires", "-e", help="Expiry such as 30m, 12h or 7d")
@click.option("--hide-filename", is_flag=True, help="Keep the filename out of the URL")
@click.option(
    "--one-time-download", is_flag=True, help="Delete the file after one download"
)
@click.option("--bucket", "-b", "bucket_token", help="Upload into this bucket")
@click.option("--client-ip", help="Forward this IP as the uploader's address")
@click.pass_context
def upload(
    ctx: Any,
    source: str,
    filename: Optional[str],
    password: Optional[str],
    expires: Optional[str],
    hide_filename: bool,
    one_time_download: bool,
    bucket_token: Optional[str],
    client_ip: Optional[str],
) -> None:
    """Upload a local file or a remote URL.

    SOURCE: Path of a local file, or an http(s) URL for the vault to fetch

    Examples:
        waifuvault upload cat.png --expires 1d
        waifuvault upload https://example.com/cat.png --hide-filename
    """
    out: OutputFormatter = ctx.obj["out"]

    options: dict[str, Any] = {
        "password": password,
        "expires": expires,
        "hide_filename": hide_filename or None,
        "one_time_download": one_time_download or None,
        "bucket_token": bucket_token,
        "client_ip": client_ip,
    }
    if source.startswith(("http://", "https://")):
        if filename:
            out.error("--filename cannot be used with a URL upload")
            ctx.exit(1)
        file_upload = create_upload(url=source, **options)
    else:
        if not Path(source).is_file():
            out.error(f"File not found: {source}")
            ctx.exit(1)
        file_upload = create_upload(file=Path(source), filename=filename, **options)

    try:
        with _get_client(ctx) as client:
            result = client.upload_file(file_upload)
    except (VaultError, httpx.RequestError, OSError) as e:
        _fail(ctx, out, e)
        return

    _show_file(out, result, "Upload Complete")


@main.command()
@click.argument("token")
@click.option(
    "--formatted", "-f", is_flag=True, help="Show retention as a readable duration"
)
@click.pass_context
def info(ctx: Any, token: str, formatted: bool) -> None:
    """Show information about a file.

    TOKEN: The file token
    """
    out: OutputFormatter = ctx.obj["out"]
    try:
        with _get_client(ctx) as client:
            result = client.file_info(token, formatted=formatted or None)
    except (VaultError, httpx.RequestError) as e:
        _fail(ctx, out, e)
        return

    _show_file(out, result, "File Info")


@main.command()
@click.option("--token", "-t", help="Token of the file")
@click.option("--filename", "-f", help="Epoch/filename part of the file URL")
@click.option("--password", "-p", help="Password of a protected file")
@click.option("--output", "-o", type=click.Path(), help="Where to save the file")
@click.pass_context
def download(
    ctx: Any,
    token: Optional[str],
    filename: Optional[str],
    password: Optional[str],
    output: Optional[str],
) -> None:
    """Download a file by token or by filename.

    Examples:
        waifuvault download --token 8c3d4527-4cea-4cb8-8171-002b158693ab
        waifuvault download --filename 1710111505084/08.png -o cat.png
    """
    out: OutputFormatter = ctx.obj["out"]

    if (token is None) == (filename is None):
        out.error("Specify exactly one of --token or --filename")
        ctx.exit(1)

    try:
        with _get_client(ctx) as client:
            content = client.get_file(token=token, filename=filename, password=password)
    except (VaultError, httpx.RequestError) as e:
        _fail(ctx, out, e)
        return

    if output:
        save_path = Path(output)
    elif filename:
        save_path = Path(filename.rstrip("/").split("/")[-1])
    else:
        save_path = Path(f"waifuvault_{token}")

    try:
        _write_output(out, content, save_path)
    except OSError as e:
        _fail(ctx, out, e)


@main.command()
@click.argument("token")
@click.pass_context
def delete(ctx: Any, token: str) -> None:
    """Delete a file.

    TOKEN: The file token
    """
    out: OutputFormatter = ctx.obj["out"]
    try:
        with _get_client(ctx) as client:
            result = client.delete_file(token)
    except (VaultError, httpx.RequestError) as e:
        _fail(ctx, out, e)
        return

    if out.json_output:
        out.output_json(result.to_dict())
    else:
        out.success(f"✓ File {token} deleted")


@main.command()
@click.argument("token")
@click.option("--password", "-p", help="New password (encrypts the file)")
@click.option("--previous-password", help="Current password, when changing it")
@click.option("--expiry", "-e", help="New expiry such as 30m, 12h or 7d")
@click.option(
    "--hide-filename/--show-filename",
    default=None,
    help="Hide or show the filename in the URL",
)
@click.pass_context
def modify(
    ctx: Any,
    token: str,
    password: Optional[str],
    previous_password: Optional[str],
    expiry: Optional[str],
    hide_filename: Optional[bool],
) -> None:
    """Change the password, expiry or filename visibility of a file.

    TOKEN: The file token
    """
    out: OutputFormatter = ctx.obj["out"]
    payload = ModifyEntryPayload(
        password=password,
        previous_password=previous_password,
        custom_expiry=expiry,
        hide_filename=hide_filename,
    )
    if not payload.to_dict():
        out.error("Nothing to modify")
        ctx.exit(1)

    try:
        with _get_client(ctx) as client:
            result = client.modify_entry(token, payload)
    except (VaultError, httpx.RequestError) as e:
        _fail(ctx, out, e)
        return

    _show_file(out, result, "File Modified")


# =========================
# Bucket commands
# =========================


@main.group()
def bucket() -> None:
    """Create, inspect and delete buckets."""


@bucket.command("create")
@click.pass_context
def bucket_create(ctx: Any) -> None:
    """Create a bucket (one per IP address)."""
    out: OutputFormatter = ctx.obj["out"]
    try:
        with _get_client(ctx) as client:
            result = client.create_bucket()
    except (VaultError, httpx.RequestError) as e:
        _fail(ctx, out, e)
        return

    _show_bucket(out, result, "Bucket Created")


@bucket.command("get")
@click.argument("bucket_token")
@click.pass_context
def bucket_get(ctx: Any, bucket_token: str) -> None:
    """List the files and albums of a bucket."""
    out: OutputFormatter = ctx.obj["out"]
    try:
        with _get_client(ctx) as client:
            result = client.get_bucket(bucket_token)
    except (VaultError, httpx.RequestError) as e:
        _fail(ctx, out, e)
        return

    _show_bucket(out, result, "Bucket")


@bucket.command("delete")
@click.argument("bucket_token")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def bucket_delete(ctx: Any, bucket_token: str, yes: bool) -> None:
    """Delete a bucket and all of its files."""
    out: OutputFormatter = ctx.obj["out"]
    if not yes and not click.confirm(
        f"Delete bucket {bucket_token} and all its files?", default=False
    ):
        out.warning("Deletion cancelled.")
        return

    try:
        with _get_client(ctx) as client:
            result = client.delete_bucket(bucket_token)
    except (VaultError, httpx.RequestError) as e:
        _fail(ctx, out, e)
        return

    if out.json_output:
        out.output_json(result.to_dict())
    else:
        out.success(f"✓ Bucket {bucket_token} deleted")


# =========================
# Album commands
# =========================


@main.group()
def album() -> None:
    """Create, share and download albums."""


@album.command("create")
@click.argument("name")
@click.option("--bucket", "-b", "bucket_token", required=True, help="Bucket token")
@click.pass_context
def album_create(ctx: Any, name: str, bucket_token: str) -> None:
    """Create an empty album in a bucket."""
    out: OutputFormatter = ctx.obj["out"]
    try:
        with _get_client(ctx) as client:
            result = client.create_album(
                AlbumCreateBody(name=name, bucket_token=bucket_token)
            )
    except (VaultError, httpx.RequestError) as e:
        _fail(ctx, out, e)
        return

    _show_album(out, result, "Album Created")


@album.command("get")
@click.argument("album_token")
@click.pass_context
def album_get(ctx: Any, album_token: str) -> None:
    """Show an album and its files, by private or public token."""
    out: OutputFormatter = ctx.obj["out"]
    try:
        with _get_client(ctx) as client:
            result = client.get_album(album_token)
    except (VaultError, httpx.RequestError) as e:
        _fail(ctx, out, e)
        return

    _show_album(out, result, "Album")


@album.command("associate")
@click.argument("album_token")
@click.argument("file_tokens", nargs=-1, required=True)
@click.pass_context
def album_associate(ctx: Any, album_token: str, file_tokens: tuple[str, ...]) -> None:
    """Add files of the same bucket to an album."""
    out: OutputFormatter = ctx.obj["out"]
    try:
        with _get_client(ctx) as client:
            result = client.associate_files(album_token, list(file_tokens))
    except (VaultError, httpx.RequestError) as e:
        _fail(ctx, out, e)
        return

    _show_album(out, result, "Album Updated")


@album.command("disassociate")
@click.argument("album_token")
@click.argument("file_tokens", nargs=-1, required=True)
@click.pass_context
def album_disassociate(
    ctx: Any, album_token: str, file_tokens: tuple[str, ...]
) -> None:
    """Remove files from an album, keeping them in the bucket."""
    out: OutputFormatter = ctx.obj["out"]
    try:
        with _get_client(ctx) as client:
            result = client.disassociate_files(album_token, list(file_tokens))
    except (VaultError, httpx.RequestError) as e:
        _fail(ctx, out, e)
        return

    _show_album(out, result, "Album Updated")


@album.command("delete")
@click.argument("album_token")
@click.option(
    "--delete-files", is_flag=True, help="Also delete the files from the vault"
)
@click.pass_context
def album_delete(ctx: Any, album_token: str, delete_files: bool) -> None:
    """Delete an album."""
    out: OutputFormatter = ctx.obj["out"]
    try:
        with _get_client(ctx) as client:
            result = client.delete_album(album_token, delete_files=delete_files)
    except (VaultError, httpx.RequestError) as e:
        _fail(ctx, out, e)
        return

    if out.json_output:
        out.output_json(result.to_dict())
    elif result.success:
        out.success(f"✓ Album {album_token} deleted")
    else:
        out.warning(result.description)


@album.command("share")
@click.argument("album_token")
@click.pass_context
def album_share(ctx: Any, album_token: str) -> None:
    """Make an album publicly viewable and print its public URL."""
    out: OutputFormatter = ctx.obj["out"]
    try:
        with _get_client(ctx) as client:
            public_url = client.share_album(album_token)
    except (VaultError, httpx.RequestError) as e:
        _fail(ctx, out, e)
        return

    if out.json_output:
        out.output_json({"url": public_url})
    else:
        out.print(public_url)


@album.command("revoke")
@click.argument("album_token")
@click.pass_context
def album_revoke(ctx: Any, album_token: str) -> None:
    """Make a shared album private again."""
    out: OutputFormatter = ctx.obj["out"]
    try:
        with _get_client(ctx) as client:
            result = client.revoke_album(album_token)
    except (VaultError, httpx.RequestError) as e:
        _fail(ctx, out, e)
        return

    if out.json_output:
        out.output_json(result.to_dict())
    else:
        out.success(f"✓ {result.description}")


@album.command("download")
@click.argument("album_token")
@click.option(
    "--file-id",
    "-i",
    "file_ids",
    type=int,
    multiple=True,
    help="ID of a file to include (repeatable, default: all files)",
)
@click.option("--output", "-o", type=click.Path(), help="Where to save the zip")
@click.pass_context
def album_download(
    ctx: Any, album_token: str, file_ids: tuple[int, ...], output: Optional[str]
) -> None:
    """Download an album as a zip archive."""
    out: OutputFormatter = ctx.obj["out"]
    try:
        with _get_client(ctx) as client:
            content = client.download_album(album_token, list(file_ids))
    except (VaultError, httpx.RequestError) as e:
        _fail(ctx, out, e)
        return

    save_path = Path(output) if output else Path(f"album_{album_token}.zip")
    try:
        _write_output(out, content, save_path)
    except OSError as e:
        _fail(ctx, out, e)


# =========================
# Configuration commands
# =========================


@main.group("config")
def config_group() -> None:
    """Manage the stored configuration."""


@config_group.command("set-url")
@click.argument("api_url")
@click.pass_context
def config_set_url(ctx: Any, api_url: str) -> None:
    """Store the WaifuVault host to use by default."""
    out: OutputFormatter = ctx.obj["out"]
    try:
        config.save_api_url(api_url)
    except (VaultError, OSError) as e:
        _fail(ctx, out, e)
        return

    out.print_summary(
        "Configuration Saved",
        [("URL", api_url), ("Config file", str(config.get_config_path()))],
    )


if __name__ == "__main__":
    main()
