"""Shared fixtures: configuration and in-memory stand-ins for GitHub and Cloudinary."""

import pytest

from imgsync.config import CloudinaryConfig, GitHubConfig, SyncConfig, TransformConfig
from imgsync.errors import SourceUnavailable, UploadFailed
from imgsync.models import FileDescriptor, FileKind


@pytest.fixture
def sync_config() -> SyncConfig:
    return SyncConfig(
        github=GitHubConfig(owner="octo", repo="gallery"),
        cloudinary=CloudinaryConfig(cloud_name="demo", api_key="key", api_secret="secret"),
        transform=TransformConfig(width=640, height=480, crop="fill", format="webp"),
    )


def image(name: str) -> FileDescriptor:
    return FileDescriptor(
        name=name,
        retrieval_url=f"https://raw.githubusercontent.com/octo/gallery/main/images/{name}",
        kind=FileKind.FILE,
    )


def directory(name: str) -> FileDescriptor:
    return FileDescriptor(name=name, retrieval_url=None, kind=FileKind.DIRECTORY)


class FakeLister:
    """Returns a fixed listing, or raises SourceUnavailable when error is set."""

    def __init__(self, descriptors=None, error: str | None = None):
        self.descriptors = descriptors or []
        self.error = error
        self.calls: list[str | None] = []

    def list(self, folder_path=None):
        self.calls.append(folder_path)
        if self.error:
            raise SourceUnavailable(self.error, status_code=404)
        return list(self.descriptors)


class FakeUploader:
    """Records every upload; names in fail_on raise UploadFailed."""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.calls = []

    def upload(self, retrieval_url, target):
        self.calls.append((retrieval_url, target))
        if target.identifier in self.fail_on:
            raise UploadFailed(target.identifier, "rejected")
        return f"https://res.cloudinary.com/demo/image/upload/{target.destination_folder}/{target.identifier}.webp"
