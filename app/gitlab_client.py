"""GitLab REST API client shared by all webhook requests."""
import logging
from urllib.parse import quote

import httpx

from .config import Settings

logger = logging.getLogger(__name__)


class GitLabClientError(Exception):
    """Raised when a GitLab API call fails or the client cannot be built."""


class GitLabClient:
    """Thin async wrapper around the GitLab REST API v4.

    One instance is built at server start and shared by every request. The
    underlying httpx.AsyncClient owns the connection pool and is safe for
    concurrent use.
    """

    def __init__(self, http_client: httpx.AsyncClient):
        """Initialize with a configured httpx client.

        Args:
            http_client: Client with base_url pointing at the API root and auth headers set
        """
        self.http = http_client

    @classmethod
    def from_settings(cls, settings: Settings) -> "GitLabClient":
        """Build the shared client from settings.

        Returns:
            Ready to use GitLabClient

        Raises:
            GitLabClientError: If the settings do not allow building a client
        """
        if not settings.GITLAB_TOKEN:
            raise GitLabClientError("GITLAB_TOKEN is not set")

        try:
            http_client = httpx.AsyncClient(
                base_url=settings.api_url(),
                headers={
                    "PRIVATE-TOKEN": settings.GITLAB_TOKEN,
                    "Accept": "application/json",
                    "User-Agent": "scm-engine/webhook",
                },
                timeout=settings.HTTP_TIMEOUT,
            )
        except (httpx.InvalidURL, ValueError) as e:
            raise GitLabClientError(f"could not create GitLab client: {e}") from e

        logger.info(f"GitLab client created for {settings.api_url()}")
        return cls(http_client)

    async def aclose(self) -> None:
        await self.http.aclose()

    async def get_remote_config(self, project: str, path: str, ref: str) -> bytes | None:
        """Fetch a config file from a project at a given commit.

        Args:
            project: Project path with namespace (e.g. 'group/project')
            path: File path inside the repository
            ref: Commit SHA the file is read at

        Returns:
            Raw file contents, or None if the file does not exist at that commit

        Raises:
            GitLabClientError: If GitLab returns an error or cannot be reached
        """
        url = (
            f"/projects/{quote(project, safe='')}"
            f"/repository/files/{quote(path, safe='')}/raw"
        )

        try:
            resp = await self.http.get(url, params={"ref": ref})
            if resp.status_code == httpx.codes.NOT_FOUND:
                logger.debug(f"Config file {path} not found in {project} at {ref}")
                return None
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise GitLabClientError(f"could not fetch {path} from {project} at {ref}: {e}") from e

        return resp.content
