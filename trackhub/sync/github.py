"""Remote store backed by the GitHub repository contents API."""

import base64
import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from .errors import NotADirectory, NotADocument, RemoteUnavailable, VersionConflict
from .models import CommitInfo, DirectoryEntry, DirectoryListing, Document
from .remote import RemoteStore

logger = logging.getLogger(__name__)

GITHUB_API_VERSION = "2022-11-28"


class GitHubStore(RemoteStore):
    """Versioned document store on top of a GitHub repository.

    The version tag of a document is its blob ``sha``. GitHub itself
    enforces the tag check on writes.
    """

    def __init__(
        self,
        owner: Optional[str],
        repo: Optional[str],
        token: Optional[str] = None,
        branch: str = "main",
        api_url: str = "https://api.github.com",
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ):
        """Initialize the store.

        Args:
            owner: Repository owner (user or organization)
            repo: Repository name
            token: Personal access token; anonymous requests when omitted
            branch: Branch used when callers pass no ``ref``
            api_url: GitHub API base URL
            timeout: Request timeout in seconds
            client: Preconfigured httpx client, mainly for tests
        """
        self.owner = owner
        self.repo = repo
        self.branch = branch
        self.api_url = api_url.rstrip("/")

        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        if client is None:
            client = httpx.Client(timeout=timeout)
        client.headers.update(headers)
        self.client = client

    def describe(self) -> str:
        return f"github:{self.owner}/{self.repo}@{self.branch}"

    def _repo_url(self, path: str) -> str:
        if not self.owner or not self.repo:
            raise RemoteUnavailable(
                "GitHub repository is not configured (GITHUB_OWNER/GITHUB_REPO)",
                path=path,
            )
        return f"{self.api_url}/repos/{self.owner}/{self.repo}"

    def _contents_url(self, path: str) -> str:
        quoted = quote(path.strip("/"), safe="/")
        return f"{self._repo_url(path)}/contents/{quoted}"

    def _request(
        self, method: str, path: str, url: Optional[str] = None, **kwargs
    ) -> httpx.Response:
        """Send a request, turning transport failures into RemoteUnavailable.

        The contents URL of ``path`` is used unless ``url`` is given.
        """
        url = url or self._contents_url(path)
        logger.debug(f"{method} {url}")
        try:
            return self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"GitHub request failed for {path}: {e}")
            raise RemoteUnavailable(
                f"GitHub request failed: {e}", path=path, cause=e
            ) from e

    def _unavailable(self, response: httpx.Response, path: str) -> RemoteUnavailable:
        message = _error_message(response)
        logger.error(f"GitHub API error for {path}: {response.status_code} {message}")
        return RemoteUnavailable(
            f"GitHub API error ({response.status_code}): {message}",
            path=path,
            status_code=response.status_code,
        )

    def get(self, path: str, ref: Optional[str] = None) -> Optional[Document]:
        response = self._request("GET", path, params={"ref": ref or self.branch})
        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise self._unavailable(response, path)

        data = response.json()
        if isinstance(data, list) or data.get("type") == "dir":
            raise NotADocument(f"Path is a directory: {path}", path=path)

        if data.get("encoding") == "base64":
            encoded = data.get("content", "")
        else:
            # files over 1 MB come back without inline content
            encoded = self._fetch_blob(data["sha"], path)

        try:
            content = base64.b64decode(encoded).decode("utf-8")
        except (ValueError, UnicodeDecodeError) as e:
            raise RemoteUnavailable(
                f"Could not decode content of {path}", path=path, cause=e
            ) from e
        return Document(
            path=data.get("path", path), content=content, version_tag=data["sha"]
        )

    def _fetch_blob(self, sha: str, path: str) -> str:
        """Base64 content of the blob ``sha`` from the git data API."""
        url = f"{self._repo_url(path)}/git/blobs/{sha}"
        response = self._request("GET", path, url=url)
        if response.status_code != 200:
            raise self._unavailable(response, path)

        blob = response.json()
        if blob.get("encoding") != "base64":
            raise RemoteUnavailable(
                f"Unsupported blob encoding for {path}: {blob.get('encoding')}",
                path=path,
            )
        return blob.get("content", "")

    def list(self, path: str, ref: Optional[str] = None) -> Optional[DirectoryListing]:
        response = self._request("GET", path, params={"ref": ref or self.branch})
        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise self._unavailable(response, path)

        data = response.json()
        if not isinstance(data, list):
            raise NotADirectory(f"Not a directory: {path}", path=path)
        return tuple(
            DirectoryEntry(
                name=item["name"], path=item["path"], version_tag=item["sha"]
            )
            for item in data
        )

    def put(
        self,
        path: str,
        content: str,
        message: str,
        expected_version_tag: Optional[str] = None,
        ref: Optional[str] = None,
    ) -> tuple[str, CommitInfo]:
        body: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "branch": ref or self.branch,
        }
        if expected_version_tag is not None:
            body["sha"] = expected_version_tag

        response = self._request("PUT", path, json=body)

        # 409: stale sha. 422 naming "sha": omitted although the file now exists.
        detail = _error_message(response)
        missing_sha = (
            response.status_code == 422
            and expected_version_tag is None
            and '"sha"' in detail
        )
        if response.status_code == 409 or missing_sha:
            logger.warning(f"Version conflict writing {path}: {detail}")
            raise VersionConflict(
                f"Version conflict writing {path}: {detail}",
                path=path,
                expected_version_tag=expected_version_tag,
            )
        if response.status_code not in (200, 201):
            raise self._unavailable(response, path)

        data = response.json()
        commit = data.get("commit") or {}
        new_tag = (data.get("content") or {}).get("sha", "")
        logger.info(f"Committed {path} ({new_tag}) to {ref or self.branch}")
        return new_tag, CommitInfo(
            sha=commit.get("sha", ""),
            message=commit.get("message", message),
            url=commit.get("html_url"),
            raw=commit,
        )

    def close(self) -> None:
        self.client.close()


def _error_message(response: httpx.Response) -> str:
    """Extract GitHub's error message from a response body."""
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return response.reason_phrase
