"""Image eligibility and naming utilities."""

from imgsync.images.filter import (
    IMAGE_EXTENSIONS,
    derive_identifier,
    filter_eligible,
    is_eligible,
)

__all__ = ["IMAGE_EXTENSIONS", "derive_identifier", "filter_eligible", "is_eligible"]
