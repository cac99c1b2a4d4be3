"""Unit tests for the WaifuVault data models."""

from pathlib import Path

import pytest

from pywaifuvault.models import (
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
    create_upload,
)


def _file_data(**overrides):
    data = {
        "url": "https://waifuvault.moe/f/1710111505084/08.png",
        "token": "123-fake-street",
        "options": {"protected": True, "oneTimeDownload": True, "hideFilename": False},
        "retentionPeriod": 1234,
        "bucket": "bkt",
        "id": 7,
        "album": None,
        "views": 3,
    }
    data.update(overrides)
    return data


class TestVaultFile:
    """Tests for VaultFile decoding."""

    def test_from_dict(self):
        """Test decoding of a complete file record."""
        file = VaultFile.from_dict(_file_data())

        assert file.token == "123-fake-street"
        assert file.url.endswith("/08.png")
        assert file.retention_period == 1234
        assert file.bucket == "bkt"
        assert file.id == 7
        assert file.views == 3
        assert file.options.protected is True
        assert file.options.one_time_download is True
        assert file.options.hide_filename is False
        assert file.album is None

    def test_formatted_retention(self):
        """Test that a string retention period is kept as a string."""
        file = VaultFile.from_dict(_file_data(retentionPeriod="1 day 2 hours"))
        assert file.retention_period == "1 day 2 hours"
        assert file.is_formatted is True

    def test_embedded_album(self):
        """Test that an album inside a file record is decoded."""
        album = {
            "token": "alb",
            "bucketToken": "bkt",
            "publicToken": "pub",
            "name": "trip",
            "files": [],
            "dateCreated": 1,
        }
        file = VaultFile.from_dict(_file_data(album=album))

        assert isinstance(file.album, VaultAlbum)
        assert file.album.public_token == "pub"
        assert file.album.is_shared is True

    def test_missing_optional_fields(self):
        """Test decoding of a record without album, bucket or options."""
        file = VaultFile.from_dict(
            {"token": "t", "url": "u", "retentionPeriod": 5, "id": 1, "views": 0}
        )
        assert file.bucket is None
        assert file.album is None
        assert file.options.protected is False

    def test_to_dict_uses_wire_names(self):
        data = _file_data()
        assert VaultFile.from_dict(data).to_dict() == data

    def test_records_are_frozen(self):
        file = VaultFile.from_dict(_file_data())
        with pytest.raises(AttributeError):
            file.token = "other"


class TestBucketAndAlbum:
    """Tests for bucket and album decoding."""

    def test_bucket_from_dict(self):
        bucket = VaultBucket.from_dict(
            {
                "token": "bkt",
                "files": [_file_data()],
                "albums": [
                    {
                        "token": "alb",
                        "bucket": "bkt",
                        "publicToken": None,
                        "name": "trip",
                        "dateCreated": 10,
                    }
                ],
            }
        )

        assert bucket.token == "bkt"
        assert len(bucket.files) == 1
        assert bucket.albums == (
            AlbumStub(token="alb", bucket="bkt", name="trip", date_created=10),
        )

    def test_empty_bucket(self):
        bucket = VaultBucket.from_dict({"token": "bkt", "files": [], "albums": []})
        assert bucket.files == ()
        assert bucket.albums == ()

    def test_records_are_hashable(self):
        """Test that frozen records with nested files can be hashed."""
        data = {"token": "bkt", "files": [_file_data()]}
        bucket = VaultBucket.from_dict(data)
        album = VaultAlbum(token="alb", bucket_token="bkt", name="trip")

        assert hash(bucket) == hash(VaultBucket.from_dict(data))
        assert {album, album} == {album}

    def test_album_from_dict(self):
        album = VaultAlbum.from_dict(
            {
                "token": "alb",
                "bucketToken": "bkt",
                "publicToken": None,
                "name": "trip",
                "files": [_file_data()],
                "dateCreated": 1710111505084,
            }
        )

        assert album.bucket_token == "bkt"
        assert album.is_shared is False
        assert album.files[0].id == 7
        assert album.date_created == 1710111505084


class TestEnvelopes:
    """Tests for the error and success envelopes."""

    def test_error_response(self):
        error = ErrorResponse.from_dict({"status": 400, "name": "n", "message": "m"})
        assert error == ErrorResponse(status=400, name="n", message="m")

    def test_generic_success(self):
        success = GenericSuccess.from_dict({"success": True, "description": "ok"})
        assert success.to_dict() == {"success": True, "description": "ok"}


class TestUploads:
    """Tests for the upload variants."""

    def test_query_params(self):
        upload = UrlUpload(url="https://e.com", expires="1h", one_time_download=True)
        assert upload.query_params() == {
            "expires": "1h",
            "hide_filename": None,
            "one_time_download": True,
        }

    def test_create_upload_file(self):
        upload = create_upload(file=b"data", filename="a.jpg", password="pw")
        assert isinstance(upload, FileUpload)
        assert upload.filename == "a.jpg"
        assert upload.password == "pw"

    def test_create_upload_path(self):
        upload = create_upload(file=Path("/p/q/r.txt"))
        assert isinstance(upload, FileUpload)
        assert upload.filename is None

    def test_create_upload_url(self):
        upload = create_upload(url="https://e.com", hide_filename=True)
        assert isinstance(upload, UrlUpload)
        assert upload.hide_filename is True

    @pytest.mark.parametrize(
        "kwargs", [{}, {"file": b"data", "url": "https://e.com"}]
    )
    def test_create_upload_requires_exactly_one_source(self, kwargs):
        with pytest.raises(ValueError, match="Exactly one"):
            create_upload(**kwargs)

    def test_create_upload_url_rejects_filename(self):
        with pytest.raises(ValueError, match="filename"):
            create_upload(url="https://e.com", filename="a.jpg")

    def test_url_upload_requires_url(self):
        with pytest.raises(TypeError):
            UrlUpload(password="x")


class TestPayloads:
    """Tests for request payloads."""

    def test_modify_entry_payload_omits_unset_fields(self):
        assert ModifyEntryPayload().to_dict() == {}
        assert ModifyEntryPayload(hide_filename=False).to_dict() == {
            "hideFilename": False
        }

    def test_modify_entry_payload_all_fields(self):
        payload = ModifyEntryPayload(
            password="new",
            previous_password="old",
            custom_expiry="2d",
            hide_filename=True,
        )
        assert payload.to_dict() == {
            "password": "new",
            "previousPassword": "old",
            "customExpiry": "2d",
            "hideFilename": True,
        }

    def test_album_create_body(self):
        body = AlbumCreateBody(name="trip", bucket_token="bkt")
        assert body.to_dict() == {"name": "trip", "bucketToken": "bkt"}
