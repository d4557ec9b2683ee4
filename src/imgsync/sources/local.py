"""Listing a local folder, for uploading images that are already on disk."""

import logging
from pathlib import Path

from imgsync.errors import SourceUnavailable
from imgsync.models import FileDescriptor, FileKind

logger = logging.getLogger(__name__)


class LocalLister:
    def __init__(self, folder: Path):
        self.folder = Path(folder)

    def list(self, folder_path: str | None = None) -> list[FileDescriptor]:
        """List a directory by name, with file:// retrieval URLs."""
        folder = self.folder / folder_path if folder_path else self.folder
        if not folder.is_dir():
            raise SourceUnavailable(f"Folder not found: {folder}")

        descriptors = []
        for path in sorted(folder.iterdir(), key=lambda p: p.name):
            if path.is_symlink():
                kind = FileKind.OTHER
            elif path.is_file():
                kind = FileKind.FILE
            elif path.is_dir():
                kind = FileKind.DIRECTORY
            else:
                kind = FileKind.OTHER
            descriptors.append(
                FileDescriptor(name=path.name, retrieval_url=path.resolve().as_uri(), kind=kind)
            )

        logger.info("Listed %d entries in %s", len(descriptors), folder)
        return descriptors
