"""Pipelines for listing, filtering and uploading images."""

from .github_sync import run_scheduled
from .local_sync import sync_local_folder
from .sync import build_target, preview_sync, run_sync

__all__ = ["build_target", "preview_sync", "run_scheduled", "run_sync", "sync_local_folder"]
