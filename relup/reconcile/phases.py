"""Orchestration of the two lifecycle phases.

main:  prune assets -> prune tags -> create tag -> update/get release -> report
post:  set draft status (if requested) -> prune tags

The first failing stage ends the phase.
"""

from __future__ import annotations

import json

from relup.core.result import Err, Ok, Result
from relup.github.client import HostingClient
from relup.github.models import Repo
from relup.output.console import ConsoleProtocol, Style
from relup.reconcile.errors import ReconcileError, configuration_error
from relup.reconcile.release_update import ReleaseUpdate, build_release_update
from relup.reconcile.request import ReconcileRequest, ReconcileResult
from relup.reconcile.stages import create_tag, prune_assets, prune_tags, report, update_release

__all__ = ["run_main", "run_post", "validate_main", "validate_post"]


def validate_main(request: ReconcileRequest) -> Result[None, ReconcileError]:
    if request.new_tag is not None and not request.commitish:
        return Err(
            configuration_error(
                "new_tag requires the commit to tag",
                hint="Set GITHUB_SHA or pass --commitish.",
            )
        )
    return Ok(None)


def validate_post(request: ReconcileRequest) -> Result[None, ReconcileError]:
    if request.new_tag is None:
        return Err(configuration_error("Input required and not supplied: new_tag"))
    return Ok(None)


def run_main(
    *,
    client: HostingClient,
    repo: Repo,
    request: ReconcileRequest,
    console: ConsoleProtocol,
) -> Result[ReconcileResult, ReconcileError]:
    valid = validate_main(request)
    if isinstance(valid, Err):
        return valid

    console.print(f"arguments: {json.dumps(request.as_log_dict())}", Style.DIM)

    assets = prune_assets(client=client, repo=repo, request=request, console=console)
    if isinstance(assets, Err):
        return assets

    tags = prune_tags(client=client, repo=repo, request=request, console=console)
    if isinstance(tags, Err):
        return tags

    tag = create_tag(client=client, repo=repo, request=request, console=console)
    if isinstance(tag, Err):
        return tag

    release = update_release(
        client=client,
        repo=repo,
        release_id=request.release_id,
        update=build_release_update(request),
        console=console,
    )
    if isinstance(release, Err):
        return release

    return Ok(report(release.value))


def run_post(
    *,
    client: HostingClient,
    repo: Repo,
    request: ReconcileRequest,
    console: ConsoleProtocol,
) -> Result[None, ReconcileError]:
    valid = validate_post(request)
    if isinstance(valid, Err):
        return valid

    if request.new_draft_status is not None:
        updated = update_release(
            client=client,
            repo=repo,
            release_id=request.release_id,
            update=ReleaseUpdate(draft=request.new_draft_status),
            console=console,
        )
        if isinstance(updated, Err):
            return updated

    tags = prune_tags(client=client, repo=repo, request=request, console=console)
    if isinstance(tags, Err):
        return tags
    return Ok(None)
