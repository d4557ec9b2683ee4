"""List -> filter -> upload each -> report."""

import logging

from tqdm import tqdm

from imgsync.config import SyncConfig
from imgsync.errors import FetchFailed, UploadFailed
from imgsync.images import derive_identifier, filter_eligible
from imgsync.models import (
    FileDescriptor,
    SyncReport,
    TransformRecipe,
    UploadFailure,
    UploadOutcome,
    UploadSuccess,
    UploadTarget,
)
from imgsync.pipeline._shared import Lister, Uploader

logger = logging.getLogger(__name__)


def build_target(descriptor: FileDescriptor, config: SyncConfig) -> UploadTarget:
    """Derive the destination identifier and recipe for one source file."""
    return UploadTarget(
        identifier=derive_identifier(descriptor.name),
        recipe=TransformRecipe.from_config(config.transform),
        destination_folder=config.cloudinary.folder,
    )


def list_eligible(
    lister: Lister,
    config: SyncConfig,
    folder_path: str | None = None,
) -> list[FileDescriptor]:
    """List the source folder and keep only image files. SourceUnavailable propagates."""
    descriptors = lister.list(folder_path)
    eligible = filter_eligible(descriptors, config.extensions)
    logger.info("%d of %d entries are eligible images", len(eligible), len(descriptors))
    return eligible


def upload_one(
    descriptor: FileDescriptor,
    uploader: Uploader,
    config: SyncConfig,
) -> UploadOutcome:
    """Upload a single file, converting per-item errors into a Failure outcome."""
    target = build_target(descriptor, config)
    try:
        if not descriptor.retrieval_url:
            raise FetchFailed(descriptor.name, "no retrieval URL")
        url = uploader.upload(descriptor.retrieval_url, target)
    except (FetchFailed, UploadFailed) as e:
        logger.error("Failed to upload %s: %s", descriptor.name, e)
        return UploadFailure(source_name=descriptor.name, error_message=str(e))
    except Exception as e:
        logger.exception("Failed to upload %s: unexpected error", descriptor.name)
        return UploadFailure(source_name=descriptor.name, error_message=str(e))

    logger.info("Uploaded %s -> %s", descriptor.name, url)
    return UploadSuccess(source_name=descriptor.name, public_url=url)


def run_sync(
    lister: Lister,
    uploader: Uploader,
    config: SyncConfig,
    folder_path: str | None = None,
    progress: bool = False,
) -> SyncReport:
    """
    Run one sync: list the folder, filter images, upload each, report.

    Uploads run one at a time in listing order. A failed item is recorded and
    the loop moves on; only a listing failure aborts the run.

    Args:
        lister: Source folder lister
        uploader: Transform-upload client
        config: Sync configuration (extensions, transform, destination folder)
        folder_path: Override for the listed folder
        progress: Show a tqdm progress bar over the uploads

    Returns:
        SyncReport with successes and failures in attempt order

    Raises:
        SourceUnavailable: If the folder cannot be listed (no uploads are attempted)
    """
    eligible = list_eligible(lister, config, folder_path)

    outcomes: list[UploadOutcome] = []
    for descriptor in tqdm(eligible, desc="Uploading images", disable=not progress):
        outcomes.append(upload_one(descriptor, uploader, config))

    report = SyncReport.from_outcomes(outcomes)
    logger.info(
        "Sync finished: %d uploaded, %d failed", report.succeeded, report.failed_count
    )
    return report


def preview_sync(
    lister: Lister,
    config: SyncConfig,
    folder_path: str | None = None,
) -> list[tuple[FileDescriptor, UploadTarget]]:
    """Dry run: what would be uploaded, and under which identifier."""
    return [(d, build_target(d, config)) for d in list_eligible(lister, config, folder_path)]
