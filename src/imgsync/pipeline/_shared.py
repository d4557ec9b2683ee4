"""Shared types for sync pipelines."""

from typing import Protocol

from imgsync.models import FileDescriptor, UploadTarget


class Lister(Protocol):
    def list(self, folder_path: str | None = None) -> list[FileDescriptor]: ...


class Uploader(Protocol):
    def upload(self, retrieval_url: str, target: UploadTarget) -> str: ...
