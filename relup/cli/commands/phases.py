"""The `main` and `post` step commands.

Every option falls back to the environment variable the Actions runner sets
for the matching input (``INPUT_<NAME>``), so the same commands work from a
shell and as an action step.
"""

from __future__ import annotations

import typer

from relup.action.env import load_action_env
from relup.action.inputs import RawInputs, build_request
from relup.action.outputs import ActionOutputs
from relup.cli.commands._helpers import fail, guarded
from relup.cli.context import build_context
from relup.core.result import Err, Result
from relup.reconcile.errors import ReconcileError
from relup.reconcile.phases import run_main, run_post

_ID = typer.Option("", "--id", envvar="INPUT_ID", help="Release id (required).")
_NEW_TAG = typer.Option("", "--new-tag", envvar="INPUT_NEW_TAG", help="Tag to create and point the release at.")
_DELETE_TAGS_PREFIX = typer.Option(
    "",
    "--delete-tags-prefix",
    envvar="INPUT_DELETE_TAGS_PREFIX",
    help="Delete tags starting with this prefix (the new tag is kept).",
)
_NEW_DRAFT_STATUS = typer.Option(
    "", "--new-draft-status", envvar="INPUT_NEW_DRAFT_STATUS", help="'true' or 'false'."
)
_REPO = typer.Option("", "--repo", envvar="GITHUB_REPOSITORY", help="owner/name")
_COMMITISH = typer.Option("", "--commitish", envvar="GITHUB_SHA", help="Commit the pipeline runs on.")


def main_phase(
    release_id: str = _ID,
    new_name: str = typer.Option("", "--new-name", envvar="INPUT_NEW_NAME", help="New release name."),
    new_body: str = typer.Option("", "--new-body", envvar="INPUT_NEW_BODY", help="New release body."),
    new_tag: str = _NEW_TAG,
    delete_assets: str = typer.Option(
        "",
        "--delete-assets",
        envvar="INPUT_DELETE_ASSETS",
        help="Delete all non-placeholder assets ('true' or 'false').",
    ),
    delete_tags_prefix: str = _DELETE_TAGS_PREFIX,
    new_draft_status: str = _NEW_DRAFT_STATUS,
    repo: str = _REPO,
    commitish: str = _COMMITISH,
) -> None:
    """Reconcile the release and publish id, html_url and upload_url."""
    ctx = build_context()
    outputs = ActionOutputs(console=ctx.console)

    def run() -> Result[None, ReconcileError]:
        env = load_action_env(ctx.environ, repository=repo or None, sha=commitish or None)
        if isinstance(env, Err):
            return env
        outputs.output_path = env.value.output_path

        request = build_request(
            RawInputs(
                id=release_id,
                new_name=new_name,
                new_body=new_body,
                new_tag=new_tag,
                delete_assets=delete_assets,
                delete_tags_prefix=delete_tags_prefix,
                new_draft_status=new_draft_status,
            ),
            commitish=env.value.sha,
        )
        if isinstance(request, Err):
            return request

        client = ctx.client_factory(env.value)
        result = run_main(
            client=client, repo=env.value.repo, request=request.value, console=ctx.console
        )
        if isinstance(result, Err):
            return result
        return outputs.publish(result.value)

    result = guarded(run)
    if isinstance(result, Err):
        fail(result.error, outputs)


def post_phase(
    release_id: str = _ID,
    new_tag: str = _NEW_TAG,
    delete_tags_prefix: str = _DELETE_TAGS_PREFIX,
    new_draft_status: str = _NEW_DRAFT_STATUS,
    repo: str = _REPO,
) -> None:
    """Cleanup: set the draft status, then prune tags by prefix."""
    ctx = build_context()
    outputs = ActionOutputs(console=ctx.console)

    def run() -> Result[None, ReconcileError]:
        env = load_action_env(ctx.environ, repository=repo or None)
        if isinstance(env, Err):
            return env
        request = build_request(
            RawInputs(
                id=release_id,
                new_tag=new_tag,
                delete_tags_prefix=delete_tags_prefix,
                new_draft_status=new_draft_status,
            ),
            commitish=env.value.sha,
        )
        if isinstance(request, Err):
            return request
        client = ctx.client_factory(env.value)
        return run_post(client=client, repo=env.value.repo, request=request.value, console=ctx.console)

    result = guarded(run)
    if isinstance(result, Err):
        fail(result.error, outputs)
