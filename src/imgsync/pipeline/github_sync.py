"""Scheduled entry point: sync the configured GitHub folder into Cloudinary."""

import logging

import requests

from imgsync.config import SyncConfig
from imgsync.errors import SourceUnavailable
from imgsync.hosting import CloudinaryUploader
from imgsync.models import SyncResponse
from imgsync.pipeline._shared import Lister, Uploader
from imgsync.pipeline.sync import run_sync
from imgsync.sources import GitHubLister

logger = logging.getLogger(__name__)


def run_scheduled(
    config: SyncConfig,
    lister: Lister | None = None,
    uploader: Uploader | None = None,
    folder_path: str | None = None,
    progress: bool = False,
) -> SyncResponse:
    """
    One scheduled run, returned as an HTTP-style response.

    200 with {"message", "uploaded", "failed"} once listing succeeded (even if
    some items failed); 500 with {"error"} when the folder could not be listed.
    """
    if lister is None or uploader is None:
        session = requests.Session()
        lister = lister or GitHubLister(config.require_github(), session=session)
        uploader = uploader or CloudinaryUploader.from_config(config, session=session)

    try:
        report = run_sync(lister, uploader, config, folder_path=folder_path, progress=progress)
    except SourceUnavailable as e:
        logger.error("Sync aborted: %s", e)
        return SyncResponse(status_code=500, body={"error": str(e)})
    except Exception as e:
        logger.exception("Sync aborted by an unexpected error")
        return SyncResponse(status_code=500, body={"error": str(e)})

    return SyncResponse(status_code=200, body=report.model_dump())
