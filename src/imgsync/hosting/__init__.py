"""Streaming uploads into Cloudinary."""

from imgsync.hosting.stream import Part, iter_parts
from imgsync.hosting.uploader import CloudinaryUploader

__all__ = ["CloudinaryUploader", "Part", "iter_parts"]
