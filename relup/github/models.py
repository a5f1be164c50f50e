from __future__ import annotations

from dataclasses import dataclass

from relup.core.structured import as_str_dict, get_int, get_str, get_table

__all__ = [
    "Repo",
    "RemoteAsset",
    "RemoteCommit",
    "RemoteTag",
    "RemoteRelease",
    "parse_repo",
    "parse_asset",
    "parse_tag",
    "parse_release",
]


@dataclass(frozen=True, slots=True)
class Repo:
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True, slots=True)
class RemoteAsset:
    id: int
    name: str


@dataclass(frozen=True, slots=True)
class RemoteCommit:
    sha: str
    url: str | None = None


@dataclass(frozen=True, slots=True)
class RemoteTag:
    name: str
    commit: RemoteCommit | None = None


@dataclass(frozen=True, slots=True)
class RemoteRelease:
    """Release resource as returned by get/update.

    Only the fields the reconciler reads are kept. URLs are None when the
    platform omits them; they are reported as-is.
    """

    id: int
    html_url: str | None
    upload_url: str | None
    target_commitish: str | None = None


def parse_repo(value: str) -> Repo | None:
    """Parse ``owner/name`` (the GITHUB_REPOSITORY format)."""
    owner, sep, name = value.strip().partition("/")
    if not sep or not owner or not name or "/" in name:
        return None
    return Repo(owner=owner, name=name)


def parse_asset(obj: object) -> RemoteAsset | None:
    data = as_str_dict(obj)
    if data is None:
        return None
    asset_id = get_int(data, "id")
    name = get_str(data, "name")
    if asset_id is None or name is None:
        return None
    return RemoteAsset(id=asset_id, name=name)


def parse_tag(obj: object) -> RemoteTag | None:
    data = as_str_dict(obj)
    if data is None:
        return None
    name = get_str(data, "name")
    if name is None:
        return None

    commit: RemoteCommit | None = None
    commit_tbl = get_table(data, "commit")
    if commit_tbl is not None:
        sha = get_str(commit_tbl, "sha")
        if sha is not None:
            commit = RemoteCommit(sha=sha, url=get_str(commit_tbl, "url"))
    return RemoteTag(name=name, commit=commit)


def parse_release(obj: object) -> RemoteRelease | None:
    data = as_str_dict(obj)
    if data is None:
        return None
    release_id = get_int(data, "id")
    if release_id is None:
        return None
    return RemoteRelease(
        id=release_id,
        html_url=get_str(data, "html_url"),
        upload_url=get_str(data, "upload_url"),
        target_commitish=get_str(data, "target_commitish"),
    )
