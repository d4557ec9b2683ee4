"""Streaming an image from its source URL into Cloudinary with a fixed transformation."""

import logging
import uuid
from collections.abc import Iterator
from contextlib import closing
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

import cloudinary.uploader
import requests
from cloudinary.exceptions import Error as CloudinaryError

from imgsync.config import CloudinaryConfig, SyncConfig
from imgsync.errors import FetchFailed, UploadFailed
from imgsync.hosting.stream import iter_parts
from imgsync.models import UploadTarget

logger = logging.getLogger(__name__)


class CloudinaryUploader:
    """
    Thin streaming adapter over Cloudinary's chunked upload endpoint.

    Cloudinary performs the resize/crop/re-encode; this class only moves bytes
    and attaches the transformation parameters. Credentials travel with every
    request, so no global SDK configuration is touched.
    """

    def __init__(
        self,
        config: CloudinaryConfig,
        part_size: int = 6_000_000,
        read_size: int = 64 * 1024,
        timeout: int = 30,
        session: requests.Session | None = None,
    ):
        self.config = config
        self.part_size = part_size
        self.read_size = read_size
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(
        cls, config: SyncConfig, session: requests.Session | None = None
    ) -> "CloudinaryUploader":
        return cls(
            config.cloudinary,
            part_size=config.part_size,
            read_size=config.read_size,
            timeout=config.timeout,
            session=session,
        )

    def credentials(self) -> dict[str, str]:
        return {
            "cloud_name": self.config.cloud_name,
            "api_key": self.config.api_key,
            "api_secret": self.config.api_secret,
        }

    def upload_options(self, target: UploadTarget) -> dict[str, Any]:
        """Upload parameters sent with every part of one upload."""
        return {
            "folder": target.destination_folder,
            "public_id": target.identifier,
            "format": target.recipe.output_format,
            "transformation": target.recipe.transformation(),
            "overwrite": True,
            "resource_type": "image",
            "timeout": self.timeout,
            **self.credentials(),
        }

    def iter_source(self, url: str) -> Iterator[bytes]:
        """
        Yield the source's bytes in read_size chunks.

        http(s) URLs are streamed with requests; file:// URLs are read from disk.

        Raises:
            FetchFailed: If the source cannot be opened or breaks mid-stream
        """
        parsed = urlparse(url)
        if parsed.scheme == "file":
            yield from self._iter_file(url, Path(url2pathname(parsed.path)))
            return

        try:
            response = self.session.get(url, stream=True, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise FetchFailed(url, str(e)) from e

        with response:
            try:
                response.raise_for_status()
                yield from response.iter_content(chunk_size=self.read_size)
            except requests.exceptions.RequestException as e:
                raise FetchFailed(url, str(e)) from e

    def _iter_file(self, url: str, path: Path) -> Iterator[bytes]:
        try:
            f = open(path, "rb")
        except OSError as e:
            raise FetchFailed(url, str(e)) from e

        with f:
            try:
                while chunk := f.read(self.read_size):
                    yield chunk
            except OSError as e:
                raise FetchFailed(url, str(e)) from e

    def upload(self, retrieval_url: str, target: UploadTarget) -> str:
        """
        Stream one image into Cloudinary.

        Args:
            retrieval_url: Where to read the source bytes from
            target: Identifier, transformation recipe and destination folder

        Returns:
            The secure delivery URL of the uploaded image

        Raises:
            FetchFailed: Source could not be opened/read, or was empty
            UploadFailed: Cloudinary rejected a part or returned no URL
        """
        options = self.upload_options(target)
        upload_id = uuid.uuid4().hex
        filename = Path(unquote(urlparse(retrieval_url).path)).name or target.identifier
        result: dict[str, Any] | None = None

        with closing(self.iter_source(retrieval_url)) as source:
            for part in iter_parts(source, self.part_size):
                headers = {
                    "Content-Range": part.content_range(),
                    "X-Unique-Upload-Id": upload_id,
                }
                logger.debug("Sending %s for %s", headers["Content-Range"], target.identifier)
                try:
                    result = cloudinary.uploader.upload_large_part(
                        (filename, part.data), http_headers=headers, **options
                    )
                except CloudinaryError as e:
                    raise UploadFailed(target.identifier, str(e)) from e

        if result is None:
            raise FetchFailed(retrieval_url, "source is empty")

        url = result.get("secure_url")
        if not url:
            raise UploadFailed(target.identifier, "response did not include secure_url")
        return url
