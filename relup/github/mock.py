"""In-memory HostingClient for tests.

Usage:
    client = MockHostingClient(
        release=RemoteRelease(id=42, html_url="...", upload_url="..."),
        assets=[RemoteAsset(id=1, name="placeholder")],
        tags=[RemoteTag(name="rc-1")],
    )
    client.fail("delete_ref", status=422, message="Reference does not exist")
    ...
    assert client.ops() == ["list_tags", "delete_ref"]
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace

from relup.core.result import Err, Ok, Result
from relup.github.client import ApiError
from relup.github.models import RemoteAsset, RemoteRelease, RemoteTag, Repo

__all__ = ["MockCall", "MockHostingClient"]


@dataclass(frozen=True, slots=True)
class MockCall:
    op: str
    args: dict[str, object]


def _default_release() -> RemoteRelease:
    return RemoteRelease(
        id=1,
        html_url="https://github.com/example/project/releases/tag/untagged-1",
        upload_url="https://uploads.github.com/repos/example/project/releases/1/assets{?name,label}",
        target_commitish="main",
    )


@dataclass
class MockHostingClient:
    release: RemoteRelease = field(default_factory=_default_release)
    assets: list[RemoteAsset] = field(default_factory=lambda: list[RemoteAsset]())
    tags: list[RemoteTag] = field(default_factory=lambda: list[RemoteTag]())
    tag_sha: str = "0123456789abcdef0123456789abcdef01234567"
    calls: list[MockCall] = field(default_factory=lambda: list[MockCall]())
    refs: list[tuple[str, str]] = field(default_factory=lambda: list[tuple[str, str]]())
    _failures: dict[str, ApiError] = field(default_factory=lambda: dict[str, ApiError]())

    def fail(self, op: str, *, status: int = 500, message: str = "Server Error (mock)") -> None:
        """Make every later call to ``op`` return an ApiError."""
        self._failures[op] = ApiError(method="MOCK", url=op, status=status, message=message)

    def ops(self) -> list[str]:
        return [c.op for c in self.calls]

    def calls_to(self, op: str) -> list[MockCall]:
        return [c for c in self.calls if c.op == op]

    def _record(self, op: str, **args: object) -> ApiError | None:
        self.calls.append(MockCall(op=op, args=args))
        return self._failures.get(op)

    def list_release_assets(
        self, repo: Repo, release_id: int
    ) -> Result[list[RemoteAsset], ApiError]:
        error = self._record("list_release_assets", repo=repo, release_id=release_id)
        if error is not None:
            return Err(error)
        return Ok(list(self.assets))

    def delete_release_asset(self, repo: Repo, asset_id: int) -> Result[None, ApiError]:
        error = self._record("delete_release_asset", repo=repo, asset_id=asset_id)
        if error is not None:
            return Err(error)
        self.assets = [a for a in self.assets if a.id != asset_id]
        return Ok(None)

    def list_tags(self, repo: Repo) -> Result[list[RemoteTag], ApiError]:
        error = self._record("list_tags", repo=repo)
        if error is not None:
            return Err(error)
        return Ok(list(self.tags))

    def delete_ref(self, repo: Repo, ref: str) -> Result[None, ApiError]:
        error = self._record("delete_ref", repo=repo, ref=ref)
        if error is not None:
            return Err(error)
        name = ref.removeprefix("tags/")
        self.tags = [t for t in self.tags if t.name != name]
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
        error = self._record(
            "create_tag",
            repo=repo,
            tag=tag,
            message=message,
            object_sha=object_sha,
            object_type=object_type,
        )
        if error is not None:
            return Err(error)
        return Ok(self.tag_sha)

    def create_ref(self, repo: Repo, *, ref: str, sha: str) -> Result[None, ApiError]:
        error = self._record("create_ref", repo=repo, ref=ref, sha=sha)
        if error is not None:
            return Err(error)
        self.refs.append((ref, sha))
        return Ok(None)

    def update_release(
        self, repo: Repo, release_id: int, fields: Mapping[str, object]
    ) -> Result[RemoteRelease, ApiError]:
        error = self._record("update_release", repo=repo, release_id=release_id, fields=dict(fields))
        if error is not None:
            return Err(error)
        target = fields.get("target_commitish")
        if isinstance(target, str):
            self.release = replace(self.release, target_commitish=target)
        return Ok(self.release)

    def get_release(self, repo: Repo, release_id: int) -> Result[RemoteRelease, ApiError]:
        error = self._record("get_release", repo=repo, release_id=release_id)
        if error is not None:
            return Err(error)
        return Ok(self.release)
