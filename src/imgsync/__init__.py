"""Scheduled sync of GitHub-hosted images into Cloudinary."""

__version__ = "0.1.0"
