"""Hosting-platform client for the GitHub REST API.

This module provides:
- HostingClient: Protocol for the release/tag operations (injectable for tests)
- GitHubClient: Real implementation using urllib
- ApiError: Failure of a single API call

Every operation is a single blocking call (list operations may follow
pagination links). Nothing is retried here.
"""

from __future__ import annotations

import json
import re
import ssl
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from relup import __version__
from relup.core.result import Err, Ok, Result
from relup.core.structured import as_obj_list, as_str_dict, get_str
from relup.github.models import (
    RemoteAsset,
    RemoteRelease,
    RemoteTag,
    Repo,
    parse_asset,
    parse_release,
    parse_tag,
)

__all__ = [
    "DEFAULT_API_URL",
    "ApiError",
    "HostingClient",
    "GitHubClient",
]

DEFAULT_API_URL = "https://api.github.com"
API_VERSION = "2022-11-28"
PAGE_SIZE = 100

_NEXT_LINK_RE = re.compile(r'<([^>]+)>\s*;\s*rel="next"')


@dataclass(frozen=True, slots=True)
class ApiError:
    """Error from a failed API call.

    Attributes:
        method: HTTP method of the call
        url: The URL that failed
        status: HTTP status code (0 for network and payload errors)
        message: Human-readable error message
    """

    method: str
    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.method} {self.url})"
        return f"{self.message} ({self.method} {self.url})"


@runtime_checkable
class HostingClient(Protocol):
    """Release and tag operations the reconciler needs from the platform."""

    def list_release_assets(
        self, repo: Repo, release_id: int
    ) -> Result[list[RemoteAsset], ApiError]: ...

    def delete_release_asset(self, repo: Repo, asset_id: int) -> Result[None, ApiError]: ...

    def list_tags(self, repo: Repo) -> Result[list[RemoteTag], ApiError]: ...

    def delete_ref(self, repo: Repo, ref: str) -> Result[None, ApiError]:
        """Delete a git reference.

        Args:
            repo: Target repository
            ref: Reference without the ``refs/`` prefix (e.g. ``tags/v1``)
        """
        ...

    def create_tag(
        self,
        repo: Repo,
        *,
        tag: str,
        message: str,
        object_sha: str,
        object_type: str = "commit",
    ) -> Result[str, ApiError]:
        """Create an annotated tag object.

        Returns:
            Ok with the SHA of the new tag object, or Err with ApiError
        """
        ...

    def create_ref(self, repo: Repo, *, ref: str, sha: str) -> Result[None, ApiError]: ...

    def update_release(
        self, repo: Repo, release_id: int, fields: Mapping[str, object]
    ) -> Result[RemoteRelease, ApiError]:
        """Patch a release with exactly the given fields.

        Keys absent from ``fields`` are left unchanged on the platform.
        """
        ...

    def get_release(self, repo: Repo, release_id: int) -> Result[RemoteRelease, ApiError]: ...


@dataclass(frozen=True, slots=True)
class _Response:
    body: object
    next_url: str | None


class GitHubClient:
    """GitHub REST client using urllib.

    Handles:
    - Bearer authentication and API versioning headers
    - JSON request and response bodies
    - Link-header pagination for list endpoints
    - Timeout handling
    """

    def __init__(
        self,
        token: str,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        user_agent: str = f"relup/{__version__}",
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self._token = token
        self._ssl_context = ssl.create_default_context()

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.api_url}/{path.lstrip('/')}"

    def _request(
        self,
        method: str,
        path: str,
        *,
        payload: Mapping[str, object] | None = None,
    ) -> Result[_Response, ApiError]:
        url = self._url(path)
        headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self._token}",
            "User-Agent": self.user_agent,
            "X-GitHub-Api-Version": API_VERSION,
        }
        data: bytes | None = None
        if payload is not None:
            data = json.dumps(dict(payload)).encode("utf-8")
            headers["Content-Type"] = "application/json"

        try:
            req = urllib.request.Request(url, data=data, headers=headers, method=method)
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                raw: bytes = response.read()
                link = response.headers.get("Link")
        except urllib.error.HTTPError as e:
            return Err(
                ApiError(method=method, url=url, status=e.code, message=_http_error_message(e))
            )
        except urllib.error.URLError as e:
            return Err(ApiError(method=method, url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(ApiError(method=method, url=url, status=0, message="Request timed out"))
        except (ValueError, OSError) as e:
            return Err(ApiError(method=method, url=url, status=0, message=str(e)))

        body: object = None
        if raw.strip():
            try:
                body = json.loads(raw.decode("utf-8"))
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                return Err(
                    ApiError(method=method, url=url, status=0, message=f"JSON parse error: {e}")
                )

        return Ok(_Response(body=body, next_url=_next_link(link)))

    def _get_all_pages(self, path: str) -> Result[list[object], ApiError]:
        items: list[object] = []
        next_url: str | None = f"{path}?per_page={PAGE_SIZE}"
        while next_url is not None:
            result = self._request("GET", next_url)
            if isinstance(result, Err):
                return result
            page = as_obj_list(result.value.body)
            if page is None:
                return Err(
                    ApiError(
                        method="GET",
                        url=self._url(next_url),
                        status=0,
                        message="Expected JSON array",
                    )
                )
            items.extend(page)
            next_url = result.value.next_url
        return Ok(items)

    def list_release_assets(
        self, repo: Repo, release_id: int
    ) -> Result[list[RemoteAsset], ApiError]:
        path = f"repos/{repo.full_name}/releases/{release_id}/assets"
        result = self._get_all_pages(path)
        if isinstance(result, Err):
            return result

        assets: list[RemoteAsset] = []
        for item in result.value:
            asset = parse_asset(item)
            if asset is None:
                return Err(
                    ApiError(
                        method="GET", url=self._url(path), status=0, message="Invalid asset entry"
                    )
                )
            assets.append(asset)
        return Ok(assets)

    def delete_release_asset(self, repo: Repo, asset_id: int) -> Result[None, ApiError]:
        result = self._request("DELETE", f"repos/{repo.full_name}/releases/assets/{asset_id}")
        if isinstance(result, Err):
            return result
        return Ok(None)

    def list_tags(self, repo: Repo) -> Result[list[RemoteTag], ApiError]:
        path = f"repos/{repo.full_name}/tags"
        result = self._get_all_pages(path)
        if isinstance(result, Err):
            return result

        tags: list[RemoteTag] = []
        for item in result.value:
            tag = parse_tag(item)
            if tag is None:
                return Err(
                    ApiError(method="GET", url=self._url(path), status=0, message="Invalid tag entry")
                )
            tags.append(tag)
        return Ok(tags)

    def delete_ref(self, repo: Repo, ref: str) -> Result[None, ApiError]:
        quoted = urllib.parse.quote(ref, safe="/")
        result = self._request("DELETE", f"repos/{repo.full_name}/git/refs/{quoted}")
        if isinstance(result, Err):
            return result
        return Ok(None)

    def create_tag(
        self,
        repo: Repo,
        *,
        tag: str,
        message: str,
        object_sha: str,
        object_type: str = "commit",
    ) -> Result[str, ApiError]:
        path = f"repos/{repo.full_name}/git/tags"
        result = self._request(
            "POST",
            path,
            payload={"tag": tag, "message": message, "object": object_sha, "type": object_type},
        )
        if isinstance(result, Err):
            return result

        data = as_str_dict(result.value.body)
        sha = get_str(data, "sha") if data is not None else None
        if not sha:
            return Err(
                ApiError(method="POST", url=self._url(path), status=0, message="Missing tag sha")
            )
        return Ok(sha)

    def create_ref(self, repo: Repo, *, ref: str, sha: str) -> Result[None, ApiError]:
        result = self._request(
            "POST", f"repos/{repo.full_name}/git/refs", payload={"ref": ref, "sha": sha}
        )
        if isinstance(result, Err):
            return result
        return Ok(None)

    def update_release(
        self, repo: Repo, release_id: int, fields: Mapping[str, object]
    ) -> Result[RemoteRelease, ApiError]:
        path = f"repos/{repo.full_name}/releases/{release_id}"
        result = self._request("PATCH", path, payload=fields)
        if isinstance(result, Err):
            return result
        return self._release_from(result.value, method="PATCH", path=path)

    def get_release(self, repo: Repo, release_id: int) -> Result[RemoteRelease, ApiError]:
        path = f"repos/{repo.full_name}/releases/{release_id}"
        result = self._request("GET", path)
        if isinstance(result, Err):
            return result
        return self._release_from(result.value, method="GET", path=path)

    def _release_from(
        self, response: _Response, *, method: str, path: str
    ) -> Result[RemoteRelease, ApiError]:
        release = parse_release(response.body)
        if release is None:
            return Err(
                ApiError(
                    method=method,
                    url=self._url(path),
                    status=0,
                    message="Unexpected release payload",
                )
            )
        return Ok(release)


def _next_link(header: str | None) -> str | None:
    if not header:
        return None
    match = _NEXT_LINK_RE.search(header)
    return match.group(1) if match else None


def _http_error_message(error: urllib.error.HTTPError) -> str:
    # GitHub puts the useful part in the JSON body, not the reason phrase.
    try:
        obj: object = json.loads(error.read().decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError, OSError, AttributeError):
        return str(error.reason)
    data = as_str_dict(obj)
    message = get_str(data, "message") if data is not None else None
    return message or str(error.reason)
