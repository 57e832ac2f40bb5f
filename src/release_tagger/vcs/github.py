"""GitHub REST API client.

Implements RepositoryHost on top of a requests session. Connection
errors, and 5xx responses to idempotent requests, are retried by
urllib3 a bounded number of times with exponential backoff. POST
requests are never resent after a response, so a release or ref is
not created twice. Every other error response raises GitHubError.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from release_tagger.core.commits import Commit
from release_tagger.exceptions import (
    AssetUploadConflictError,
    CommitRangeUnavailableError,
    ConfigValidationError,
    GitHubError,
)
from release_tagger.vcs.base import Release, Tag

if TYPE_CHECKING:
    from collections.abc import Iterator

    from release_tagger.config.models import GitHubConfig

logger = logging.getLogger(__name__)

API_VERSION = "2022-11-28"
PER_PAGE = 100

RETRY_STATUSES = (500, 502, 503, 504)
# Reference updates are always forced, so PATCH is safe to resend
RETRY_METHODS = Retry.DEFAULT_ALLOWED_METHODS | {"PATCH"}


class GitHubClient:
    """Client for one GitHub repository."""

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str | None = None,
        *,
        api_url: str = "https://api.github.com",
        timeout: float = 30.0,
        max_retries: int = 2,
        backoff: float = 1.0,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

        self.session = requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": API_VERSION,
            }
        )
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=backoff,
            status_forcelist=RETRY_STATUSES,
            allowed_methods=RETRY_METHODS,
            # Hand the last 5xx back so it maps to GitHubError with its status
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

    @classmethod
    def from_config(cls, config: GitHubConfig) -> GitHubClient:
        """Create a client from GitHub configuration.

        Raises:
            ConfigValidationError: If owner or repo is missing
        """
        if not config.owner or not config.repo:
            raise ConfigValidationError(
                "GitHub repository unknown. Set GITHUB_REPOSITORY or github.owner/github.repo."
            )
        return cls(
            config.owner,
            config.repo,
            config.token,
            api_url=config.api_url,
            timeout=config.timeout,
            max_retries=config.max_retries,
        )

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    # -------- HTTP helpers --------

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        if url.startswith("/"):
            url = f"{self.api_url}{url}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise GitHubError(f"{method} {url} failed: {e}") from e
        _raise_for_status(response)
        return response

    def _paginate(self, url: str, params: dict[str, Any] | None = None) -> Iterator[Any]:
        """Yield the JSON body of every page, following Link headers."""
        next_url: str | None = url
        page_params: dict[str, Any] | None = {"per_page": PER_PAGE, **(params or {})}
        while next_url:
            response = self._request("GET", next_url, params=page_params)
            yield response.json()
            next_url = response.links.get("next", {}).get("url")
            # The next link already carries the query string
            page_params = None

    # -------- Tags and refs --------

    def list_tags(self) -> list[Tag]:
        tags: list[Tag] = []
        for page in self._paginate(f"{self._repo_path}/tags"):
            for item in page:
                logger.debug("Found tag %s", item["name"])
                tags.append(Tag(name=item["name"], commit_sha=item["commit"]["sha"]))
        return tags

    def ref_exists(self, ref: str) -> bool:
        try:
            self._request("GET", f"{self._repo_path}/git/ref/{ref}")
        except GitHubError as e:
            if e.status_code == 404:
                return False
            raise
        return True

    def create_or_update_ref(self, ref: str, sha: str, *, force: bool = True) -> None:
        """Create ``refs/<ref>`` at ``sha``, moving it if it already exists."""
        try:
            self._request(
                "POST",
                f"{self._repo_path}/git/refs",
                json={"ref": f"refs/{ref}", "sha": sha},
            )
            logger.info("Created ref %s at %s", ref, sha)
        except GitHubError as e:
            if e.status_code != 422:
                raise
            logger.info("Ref %s already exists, updating it", ref)
            self._request(
                "PATCH",
                f"{self._repo_path}/git/refs/{ref}",
                json={"sha": sha, "force": force},
            )

    # -------- Commits --------

    def compare_commits(self, base: str, head: str) -> list[Commit]:
        url = f"{self._repo_path}/compare/{quote(base, safe='')}...{quote(head, safe='')}"
        try:
            return [
                _commit_from_json(item) for page in self._paginate(url) for item in page["commits"]
            ]
        except (GitHubError, KeyError) as e:
            status = e.status_code if isinstance(e, GitHubError) else None
            raise CommitRangeUnavailableError(
                f"Could not compare {base}...{head}: {e}", status_code=status
            ) from e

    # -------- Releases --------

    def get_release_by_tag(self, tag: str) -> Release | None:
        try:
            url = f"{self._repo_path}/releases/tags/{quote(tag, safe='')}"
            response = self._request("GET", url)
        except GitHubError as e:
            if e.status_code == 404:
                return None
            raise
        return _release_from_json(response.json())

    def delete_release(self, release_id: int) -> None:
        self._request("DELETE", f"{self._repo_path}/releases/{release_id}")

    def create_release(
        self,
        *,
        tag_name: str,
        body: str,
        name: str,
        prerelease: bool,
    ) -> Release:
        response = self._request(
            "POST",
            f"{self._repo_path}/releases",
            json={
                "tag_name": tag_name,
                "name": name,
                "body": body,
                "prerelease": prerelease,
            },
        )
        return _release_from_json(response.json())

    def upload_asset(self, release: Release, name: str, data: bytes) -> None:
        try:
            self._request(
                "POST",
                release.upload_url,
                params={"name": name},
                data=data,
                headers={"Content-Type": "application/octet-stream"},
            )
        except GitHubError as e:
            if e.status_code == 422:
                raise AssetUploadConflictError(
                    f"Asset {name} already exists on release {release.tag_name}",
                    status_code=422,
                ) from e
            raise


def _raise_for_status(response: requests.Response) -> None:
    if response.ok:
        return
    try:
        payload = response.json()
    except ValueError:
        payload = None
    detail = payload.get("message", "") if isinstance(payload, dict) else response.text
    raise GitHubError(
        f"{response.request.method} {response.request.path_url} returned "
        f"{response.status_code}: {detail}",
        status_code=response.status_code,
    )


def _commit_from_json(item: dict[str, Any]) -> Commit:
    author = item["commit"].get("author") or {}
    return Commit(
        sha=item["sha"],
        message=item["commit"]["message"],
        author_name=author.get("name"),
        html_url=item.get("html_url", ""),
    )


def _release_from_json(data: dict[str, Any]) -> Release:
    # upload_url is a URI template: .../assets{?name,label}
    upload_url = data.get("upload_url", "").split("{", 1)[0]
    return Release(
        id=int(data["id"]),
        tag_name=data["tag_name"],
        upload_url=upload_url,
        html_url=data.get("html_url", ""),
    )
