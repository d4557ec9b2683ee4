"""Selecting which listed files are images, and naming them at the destination."""

import re
from collections.abc import Iterable, Sequence
from functools import lru_cache

from imgsync.models import FileDescriptor, FileKind

IMAGE_EXTENSIONS: tuple[str, ...] = ("jpg", "jpeg", "png", "gif", "webp")

_EXTENSION = re.compile(r"\.[^/.]+$")


@lru_cache(maxsize=16)
def _extension_pattern(extensions: tuple[str, ...]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(ext.lower().lstrip(".")) for ext in extensions)
    return re.compile(rf"\.({alternatives})$", re.IGNORECASE)


def is_eligible(
    descriptor: FileDescriptor,
    extensions: Sequence[str] = IMAGE_EXTENSIONS,
) -> bool:
    """True for regular files whose name ends in an allowed extension (any case)."""
    if descriptor.kind is not FileKind.FILE:
        return False
    return _extension_pattern(tuple(extensions)).search(descriptor.name) is not None


def filter_eligible(
    descriptors: Iterable[FileDescriptor],
    extensions: Sequence[str] = IMAGE_EXTENSIONS,
) -> list[FileDescriptor]:
    """Keep eligible descriptors, preserving their original order."""
    return [d for d in descriptors if is_eligible(d, extensions)]


def derive_identifier(name: str) -> str:
    """
    Strip the final extension segment from a file name.

    >>> derive_identifier("photo.final.png")
    'photo.final'

    A name that is nothing but an extension (".png") is returned unchanged so
    the destination identifier is never empty.
    """
    identifier = _EXTENSION.sub("", name)
    return identifier or name
