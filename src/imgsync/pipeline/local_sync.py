"""Upload pipeline for images already on local disk."""

from pathlib import Path

from imgsync.config import SyncConfig
from imgsync.models import SyncReport
from imgsync.pipeline._shared import Uploader
from imgsync.pipeline.sync import run_sync
from imgsync.sources import LocalLister


def sync_local_folder(
    folder: Path,
    uploader: Uploader,
    config: SyncConfig,
    progress: bool = False,
) -> SyncReport:
    """
    Run the sync pipeline over a local folder instead of GitHub.

    Subfolders and non-image files are skipped exactly as in a GitHub sync.

    Raises:
        SourceUnavailable: If the folder does not exist
    """
    return run_sync(LocalLister(folder), uploader, config, progress=progress)
