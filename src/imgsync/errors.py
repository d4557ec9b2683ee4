"""Exception hierarchy for sync runs."""


class SyncError(Exception):
    """Base exception for all imgsync errors."""


class ConfigError(SyncError):
    """Raised when configuration is missing or invalid."""


class SourceUnavailable(SyncError):
    """Raised when the source folder cannot be listed. Fatal to a run."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class FetchFailed(SyncError):
    """Raised when an image's bytes could not be opened or read."""

    def __init__(self, url: str, message: str):
        super().__init__(f"Could not fetch {url}: {message}")
        self.url = url
        self.message = message


class UploadFailed(SyncError):
    """Raised when the hosting service rejects an upload."""

    def __init__(self, identifier: str, message: str):
        super().__init__(f"Upload of '{identifier}' failed: {message}")
        self.identifier = identifier
        self.message = message
