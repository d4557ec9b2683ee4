"""Listing a repository folder through the GitHub contents API."""

import logging

import requests
from pydantic import ValidationError

from imgsync.config import GitHubConfig
from imgsync.errors import SourceUnavailable
from imgsync.models import FileDescriptor

logger = logging.getLogger(__name__)


class GitHubLister:
    """Lists one folder of a GitHub repository. One request per call, no pagination."""

    def __init__(self, config: GitHubConfig, session: requests.Session | None = None):
        self.config = config
        self.session = session or requests.Session()

    def headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if self.config.token:
            headers["Authorization"] = f"Bearer {self.config.token}"
        return headers

    def contents_url(self, folder_path: str) -> str:
        base = self.config.api_url.rstrip("/")
        return f"{base}/repos/{self.config.owner}/{self.config.repo}/contents/{folder_path}"

    def list(self, folder_path: str | None = None) -> list[FileDescriptor]:
        """
        List the entries of a repository folder.

        Args:
            folder_path: Folder inside the repository (defaults to config.path)

        Returns:
            FileDescriptors in the order GitHub returned them

        Raises:
            SourceUnavailable: On network errors, non-2xx responses, or when
                the path does not name a directory
        """
        path = (folder_path if folder_path is not None else self.config.path).strip("/")
        url = self.contents_url(path)
        params = {"ref": self.config.ref} if self.config.ref else None

        logger.debug("Listing %s", url)
        try:
            response = self.session.get(
                url,
                headers=self.headers(),
                params=params,
                timeout=self.config.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise SourceUnavailable(f"Could not reach GitHub: {e}") from e

        if not response.ok:
            raise SourceUnavailable(
                f"GitHub listing of '{path}' failed ({response.status_code}): "
                f"{_error_message(response)}",
                status_code=response.status_code,
            )

        try:
            entries = response.json()
        except ValueError as e:
            raise SourceUnavailable(f"GitHub returned invalid JSON for '{path}'") from e

        if not isinstance(entries, list):
            raise SourceUnavailable(f"'{path}' is not a directory")

        try:
            descriptors = [FileDescriptor.from_github(entry) for entry in entries]
        except (KeyError, TypeError, ValidationError) as e:
            raise SourceUnavailable(f"Unexpected listing entry in '{path}': {e}") from e

        logger.info(
            "Listed %d entries in %s/%s:%s",
            len(descriptors),
            self.config.owner,
            self.config.repo,
            path,
        )
        return descriptors


def _error_message(response: requests.Response) -> str:
    """GitHub puts a human-readable reason in the 'message' field."""
    try:
        body = response.json()
    except ValueError:
        return response.reason or "unknown error"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason or "unknown error"
