"""Data types passed between the stages of a sync run."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from imgsync.config import TransformConfig


class FileKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"

    @classmethod
    def from_github(cls, value: str | None) -> FileKind:
        """Map a GitHub contents-API entry type onto a FileKind."""
        if value == "file":
            return cls.FILE
        if value == "dir":
            return cls.DIRECTORY
        return cls.OTHER


class FileDescriptor(BaseModel):
    """One entry of a listed source folder."""

    name: str
    retrieval_url: str | None = None
    kind: FileKind = FileKind.FILE

    @classmethod
    def from_github(cls, entry: dict[str, Any]) -> FileDescriptor:
        """Build from a contents-API item ({name, download_url, type, ...})."""
        return cls(
            name=entry["name"],
            retrieval_url=entry.get("download_url"),
            kind=FileKind.from_github(entry.get("type")),
        )


class TransformRecipe(BaseModel):
    width: int
    height: int
    crop_mode: str
    output_format: str

    @classmethod
    def from_config(cls, config: TransformConfig) -> TransformRecipe:
        return cls(
            width=config.width,
            height=config.height,
            crop_mode=config.crop,
            output_format=config.format,
        )

    def transformation(self) -> list[dict[str, Any]]:
        """Incoming transformation in Cloudinary's list-of-dicts form."""
        return [{"width": self.width, "height": self.height, "crop": self.crop_mode}]


class UploadTarget(BaseModel):
    """Where and how a single source file lands in the hosting service."""

    identifier: str
    recipe: TransformRecipe
    destination_folder: str


@dataclass(frozen=True)
class UploadSuccess:
    source_name: str
    public_url: str


@dataclass(frozen=True)
class UploadFailure:
    source_name: str
    error_message: str


UploadOutcome = UploadSuccess | UploadFailure


class UploadedItem(BaseModel):
    file: str
    url: str


class FailedItem(BaseModel):
    file: str
    error: str


class SyncReport(BaseModel):
    """Final report of a run. Items keep the order they were attempted in."""

    message: str = "Upload complete"
    uploaded: list[UploadedItem] = Field(default_factory=list)
    failed: list[FailedItem] = Field(default_factory=list)

    @classmethod
    def from_outcomes(cls, outcomes: list[UploadOutcome]) -> SyncReport:
        report = cls()
        for outcome in outcomes:
            if isinstance(outcome, UploadSuccess):
                report.uploaded.append(
                    UploadedItem(file=outcome.source_name, url=outcome.public_url)
                )
            else:
                report.failed.append(
                    FailedItem(file=outcome.source_name, error=outcome.error_message)
                )
        return report

    @property
    def total(self) -> int:
        return len(self.uploaded) + len(self.failed)

    @property
    def succeeded(self) -> int:
        return len(self.uploaded)

    @property
    def failed_count(self) -> int:
        return len(self.failed)


@dataclass
class SyncResponse:
    """HTTP-style result of a scheduled run."""

    status_code: int
    body: dict[str, Any]

    @property
    def ok(self) -> bool:
        return self.status_code == 200
