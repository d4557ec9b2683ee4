"""Listers that enumerate a source folder as FileDescriptors."""

from imgsync.sources.github import GitHubLister
from imgsync.sources.local import LocalLister

__all__ = ["GitHubLister", "LocalLister"]
