"""Reconciliation stages.

Each stage is a no-op when its triggering input is absent. Stages issue
their remote calls one at a time and return on the first failure; nothing
already done is rolled back.
"""

from __future__ import annotations

from collections.abc import Iterable

from relup.core.result import Err, Ok, Result
from relup.github.client import HostingClient
from relup.github.models import RemoteRelease, RemoteTag, Repo
from relup.output.console import ConsoleProtocol
from relup.reconcile.errors import ReconcileError, configuration_error, remote_error
from relup.reconcile.release_update import ReleaseUpdate
from relup.reconcile.request import ReconcileRequest, ReconcileResult

__all__ = [
    "PLACEHOLDER_ASSET",
    "prune_assets",
    "select_tags_to_delete",
    "prune_tags",
    "create_tag",
    "update_release",
    "report",
]

# Releases without real assets yet carry an asset with this name.
PLACEHOLDER_ASSET = "placeholder"


def prune_assets(
    *,
    client: HostingClient,
    repo: Repo,
    request: ReconcileRequest,
    console: ConsoleProtocol,
) -> Result[list[int], ReconcileError]:
    """Delete every non-placeholder asset of the release when requested.

    Returns:
        Ok with the ids of the deleted assets (empty when not requested)
    """
    if not request.delete_assets:
        return Ok([])

    assets = client.list_release_assets(repo, request.release_id)
    if isinstance(assets, Err):
        return assets.map_err(
            lambda e: remote_error(
                "prune_assets", f"failed to list assets of release {request.release_id}", e
            )
        )

    deleted: list[int] = []
    for asset in assets.value:
        if asset.name == PLACEHOLDER_ASSET:
            continue
        result = client.delete_release_asset(repo, asset.id)
        if isinstance(result, Err):
            return result.map_err(
                lambda e, a=asset: remote_error(
                    "prune_assets", f"failed to delete asset '{a.name}' ({a.id})", e
                )
            )
        console.info(f"Asset '{asset.name}' was successfully deleted")
        deleted.append(asset.id)
    return Ok(deleted)


def select_tags_to_delete(
    tags: Iterable[RemoteTag], *, prefix: str, protected: str | None
) -> list[RemoteTag]:
    """Tags whose name starts with ``prefix``, minus the ``protected`` one.

    The match is a literal, case-sensitive prefix. Order is preserved.
    """
    return [t for t in tags if t.name.startswith(prefix) and t.name != protected]


def prune_tags(
    *,
    client: HostingClient,
    repo: Repo,
    request: ReconcileRequest,
    console: ConsoleProtocol,
) -> Result[list[str], ReconcileError]:
    prefix = request.delete_tags_prefix
    if not prefix:
        return Ok([])

    tags = client.list_tags(repo)
    if isinstance(tags, Err):
        return tags.map_err(lambda e: remote_error("prune_tags", "failed to list tags", e))

    to_delete = select_tags_to_delete(tags.value, prefix=prefix, protected=request.new_tag)
    deleted: list[str] = []
    for tag in to_delete:
        result = client.delete_ref(repo, f"tags/{tag.name}")
        if isinstance(result, Err):
            return result.map_err(
                lambda e, t=tag: remote_error("prune_tags", f"failed to delete tag '{t.name}'", e)
            )
        console.info(f"Tag '{tag.name}' was successfully deleted")
        deleted.append(tag.name)

    console.info(f"{len(deleted)} tag(s) have been deleted")
    return Ok(deleted)


def create_tag(
    *,
    client: HostingClient,
    repo: Repo,
    request: ReconcileRequest,
    console: ConsoleProtocol,
) -> Result[str | None, ReconcileError]:
    """Create the annotated tag ``new_tag`` and its ref at ``commitish``.

    Returns:
        Ok with the tag object SHA, or Ok(None) when no tag was requested
    """
    tag = request.new_tag
    if tag is None:
        return Ok(None)
    if not request.commitish:
        return Err(
            configuration_error(
                f"cannot create tag '{tag}' without a commit",
                hint="Set GITHUB_SHA or pass --commitish.",
            )
        )

    console.info(f"Creating tag '{tag}' from commit '{request.commitish}'")
    created = client.create_tag(
        repo,
        tag=tag,
        message=f"release {tag}",
        object_sha=request.commitish,
        object_type="commit",
    )
    if isinstance(created, Err):
        return created.map_err(
            lambda e: remote_error("create_tag", f"failed to create tag object '{tag}'", e)
        )

    sha = created.value
    ref = client.create_ref(repo, ref=f"refs/tags/{tag}", sha=sha)
    if isinstance(ref, Err):
        return ref.map_err(
            lambda e: remote_error("create_tag", f"failed to create ref 'refs/tags/{tag}'", e)
        )

    console.info(f"Tag '{tag}' was successfully created")
    return Ok(sha)


def update_release(
    *,
    client: HostingClient,
    repo: Repo,
    release_id: int,
    update: ReleaseUpdate,
    console: ConsoleProtocol,
) -> Result[RemoteRelease, ReconcileError]:
    """Patch the release with the requested fields, or just fetch it."""
    if not update.has_changes:
        fetched = client.get_release(repo, release_id)
        if isinstance(fetched, Err):
            return fetched.map_err(
                lambda e: remote_error("update_release", f"failed to get release {release_id}", e)
            )
        return fetched

    updated = client.update_release(repo, release_id, update.payload())
    if isinstance(updated, Err):
        return updated.map_err(
            lambda e: remote_error("update_release", f"failed to update release {release_id}", e)
        )
    console.info(
        f"Release {release_id} was successfully updated, with the following changes:\n"
        + update.describe()
    )
    return updated


def report(release: RemoteRelease) -> ReconcileResult:
    return ReconcileResult(
        id=release.id,
        html_url=release.html_url,
        upload_url=release.upload_url,
    )
