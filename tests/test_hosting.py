"""Tests for the bounded transfer loop and the Cloudinary uploader."""

from unittest.mock import MagicMock, patch

import pytest
import requests
from cloudinary.exceptions import Error as CloudinaryError

from imgsync.config import CloudinaryConfig
from imgsync.errors import FetchFailed, UploadFailed
from imgsync.hosting import CloudinaryUploader, Part, iter_parts
from imgsync.models import TransformRecipe, UploadTarget

SOURCE_URL = "https://raw.githubusercontent.com/octo/gallery/main/images/photo.final.png"
SECURE_URL = "https://res.cloudinary.com/demo/image/upload/v1/github-images/photo.final.webp"


class TestPart:
    """Tests for Part.content_range()."""

    def test_intermediate_part_has_unknown_total(self):
        assert Part(offset=0, data=b"abcd", last=False).content_range() == "bytes 0-3/-1"

    def test_last_part_has_total(self):
        assert Part(offset=4, data=b"ef", last=True).content_range() == "bytes 4-5/6"


class TestIterParts:
    """Tests for iter_parts()."""

    def test_regroups_into_fixed_size_parts(self):
        parts = list(iter_parts([b"ab", b"cde", b"f", b"ghij"], part_size=4))
        assert [p.data for p in parts] == [b"abcd", b"efgh", b"ij"]
        assert [p.offset for p in parts] == [0, 4, 8]
        assert [p.last for p in parts] == [False, False, True]

    def test_exact_multiple_keeps_last_part_full(self):
        parts = list(iter_parts([b"abcd", b"efgh"], part_size=4))
        assert [p.data for p in parts] == [b"abcd", b"efgh"]
        assert parts[-1].last
        assert parts[-1].content_range() == "bytes 4-7/8"

    def test_single_small_source(self):
        parts = list(iter_parts([b"xy"], part_size=4))
        assert parts == [Part(offset=0, data=b"xy", last=True)]

    def test_empty_source_yields_nothing(self):
        assert list(iter_parts([b"", b""], part_size=4)) == []

    def test_pulls_lazily(self):
        """Parts are released before the source is exhausted."""
        pulled = []

        def source():
            for chunk in (b"aaaa", b"bbbb", b"cccc"):
                pulled.append(chunk)
                yield chunk

        parts = iter_parts(source(), part_size=4)
        first = next(parts)
        assert first.data == b"aaaa"
        assert pulled == [b"aaaa", b"bbbb"]

    def test_rejects_non_positive_part_size(self):
        with pytest.raises(ValueError):
            list(iter_parts([b"a"], part_size=0))


def make_target(identifier="photo.final"):
    return UploadTarget(
        identifier=identifier,
        recipe=TransformRecipe(width=640, height=480, crop_mode="fill", output_format="webp"),
        destination_folder="github-images",
    )


def make_uploader(chunks=(b"image-bytes",), get_error=None, part_size=6_000_000):
    response = MagicMock()
    response.iter_content.return_value = iter(chunks)
    session = MagicMock()
    if get_error is not None:
        session.get.side_effect = get_error
    else:
        session.get.return_value = response
    config = CloudinaryConfig(cloud_name="demo", api_key="key", api_secret="secret")
    uploader = CloudinaryUploader(config, part_size=part_size, read_size=1024, session=session)
    return uploader, session, response


class TestCloudinaryUploader:
    """Tests for CloudinaryUploader.upload()."""

    def test_returns_secure_url(self):
        uploader, session, _ = make_uploader()
        with patch("cloudinary.uploader.upload_large_part") as upload_part:
            upload_part.return_value = {"secure_url": SECURE_URL, "public_id": "x"}
            url = uploader.upload(SOURCE_URL, make_target())

        assert url == SECURE_URL
        session.get.assert_called_once_with(SOURCE_URL, stream=True, timeout=30)

    def test_sends_fixed_transformation_and_credentials(self):
        uploader, _, _ = make_uploader()
        with patch("cloudinary.uploader.upload_large_part") as upload_part:
            upload_part.return_value = {"secure_url": SECURE_URL}
            uploader.upload(SOURCE_URL, make_target())

        args, kwargs = upload_part.call_args
        assert args[0] == ("photo.final.png", b"image-bytes")
        assert kwargs["folder"] == "github-images"
        assert kwargs["public_id"] == "photo.final"
        assert kwargs["format"] == "webp"
        assert kwargs["transformation"] == [{"width": 640, "height": 480, "crop": "fill"}]
        assert kwargs["overwrite"] is True
        assert kwargs["resource_type"] == "image"
        assert kwargs["cloud_name"] == "demo"
        assert kwargs["api_key"] == "key"
        assert kwargs["api_secret"] == "secret"
        assert kwargs["http_headers"]["Content-Range"] == "bytes 0-10/11"

    def test_large_source_sent_in_parts_with_one_upload_id(self):
        chunk = b"x" * 1_000_000
        uploader, _, _ = make_uploader(chunks=[chunk] * 13, part_size=6_000_000)
        with patch("cloudinary.uploader.upload_large_part") as upload_part:
            upload_part.side_effect = [{"done": False}, {"done": False}, {"secure_url": SECURE_URL}]
            url = uploader.upload(SOURCE_URL, make_target())

        assert url == SECURE_URL
        headers = [c.kwargs["http_headers"] for c in upload_part.call_args_list]
        assert [h["Content-Range"] for h in headers] == [
            "bytes 0-5999999/-1",
            "bytes 6000000-11999999/-1",
            "bytes 12000000-12999999/13000000",
        ]
        assert len({h["X-Unique-Upload-Id"] for h in headers}) == 1

    def test_source_http_error_is_fetch_failed(self):
        uploader, _, response = make_uploader()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("404 Not Found")
        with patch("cloudinary.uploader.upload_large_part") as upload_part:
            with pytest.raises(FetchFailed, match="404"):
                uploader.upload(SOURCE_URL, make_target())
        upload_part.assert_not_called()

    def test_source_unreachable_is_fetch_failed(self):
        uploader, _, _ = make_uploader(get_error=requests.exceptions.Timeout("timed out"))
        with patch("cloudinary.uploader.upload_large_part") as upload_part:
            with pytest.raises(FetchFailed):
                uploader.upload(SOURCE_URL, make_target())
        upload_part.assert_not_called()

    def test_source_breaking_mid_stream_is_fetch_failed(self):
        def broken():
            yield b"x" * 10
            raise requests.exceptions.ChunkedEncodingError("connection reset")

        uploader, _, response = make_uploader()
        response.iter_content.return_value = broken()
        with patch("cloudinary.uploader.upload_large_part") as upload_part:
            with pytest.raises(FetchFailed, match="connection reset"):
                uploader.upload(SOURCE_URL, make_target())
        upload_part.assert_not_called()

    def test_empty_source_is_fetch_failed(self):
        uploader, _, _ = make_uploader(chunks=[])
        with patch("cloudinary.uploader.upload_large_part") as upload_part:
            with pytest.raises(FetchFailed, match="empty"):
                uploader.upload(SOURCE_URL, make_target())
        upload_part.assert_not_called()

    def test_rejected_upload_is_upload_failed(self):
        uploader, _, _ = make_uploader()
        with patch("cloudinary.uploader.upload_large_part") as upload_part:
            upload_part.side_effect = CloudinaryError("Invalid image file")
            with pytest.raises(UploadFailed, match="Invalid image file") as exc:
                uploader.upload(SOURCE_URL, make_target())
        assert exc.value.identifier == "photo.final"

    def test_missing_secure_url_is_upload_failed(self):
        uploader, _, _ = make_uploader()
        with patch("cloudinary.uploader.upload_large_part") as upload_part:
            upload_part.return_value = {"public_id": "photo.final"}
            with pytest.raises(UploadFailed, match="secure_url"):
                uploader.upload(SOURCE_URL, make_target())

    def test_reads_file_urls_from_disk(self, tmp_path):
        path = tmp_path / "local.gif"
        path.write_bytes(b"GIF89a" + b"\x00" * 2000)
        uploader, session, _ = make_uploader()
        with patch("cloudinary.uploader.upload_large_part") as upload_part:
            upload_part.return_value = {"secure_url": SECURE_URL}
            uploader.upload(path.as_uri(), make_target("local"))

        session.get.assert_not_called()
        args, kwargs = upload_part.call_args
        assert args[0] == ("local.gif", path.read_bytes())
        assert kwargs["http_headers"]["Content-Range"] == "bytes 0-2005/2006"

    def test_missing_local_file_is_fetch_failed(self, tmp_path):
        uploader, _, _ = make_uploader()
        with pytest.raises(FetchFailed):
            uploader.upload((tmp_path / "gone.png").as_uri(), make_target("gone"))


class TestCloudinaryUploaderCleanup:
    """The source response is released however the upload ends."""

    def test_response_closed_on_http_error(self):
        uploader, _, response = make_uploader()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("500 Server Error")
        with pytest.raises(FetchFailed):
            uploader.upload(SOURCE_URL, make_target())
        response.__exit__.assert_called_once()

    def test_response_closed_when_upload_rejected_mid_stream(self):
        chunk = b"x" * 1_000_000
        uploader, _, response = make_uploader(chunks=[chunk] * 13, part_size=6_000_000)
        with patch("cloudinary.uploader.upload_large_part") as upload_part:
            upload_part.side_effect = CloudinaryError("quota exceeded")
            with pytest.raises(UploadFailed):
                uploader.upload(SOURCE_URL, make_target())

        assert upload_part.call_count == 1
        response.__exit__.assert_called_once()

    def test_filename_is_unquoted(self):
        uploader, _, _ = make_uploader()
        with patch("cloudinary.uploader.upload_large_part") as upload_part:
            upload_part.return_value = {"secure_url": SECURE_URL}
            uploader.upload(
                "https://raw.githubusercontent.com/octo/gallery/main/images/my%20photo.png",
                make_target("my photo"),
            )
        assert upload_part.call_args.args[0][0] == "my photo.png"
