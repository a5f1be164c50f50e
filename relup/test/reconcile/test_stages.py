"""Tests for relup.reconcile.stages."""

from __future__ import annotations

from relup.core.result import Err, Ok
from relup.github.mock import MockHostingClient
from relup.github.models import RemoteAsset, RemoteRelease, RemoteTag, Repo
from relup.output.console import MockConsole
from relup.reconcile.release_update import ReleaseUpdate
from relup.reconcile.request import ReconcileRequest, ReconcileResult
from relup.reconcile.stages import (
    create_tag,
    prune_assets,
    prune_tags,
    report,
    select_tags_to_delete,
    update_release,
)

REPO = Repo(owner="octo", name="project")
SHA = "a" * 40


def _tags(*names: str) -> list[RemoteTag]:
    return [RemoteTag(name=n) for n in names]


class TestPruneAssets:
    def test_not_requested_makes_no_calls(self) -> None:
        client = MockHostingClient(assets=[RemoteAsset(id=2, name="bin.tar.gz")])

        result = prune_assets(
            client=client, repo=REPO, request=ReconcileRequest(release_id=42), console=MockConsole()
        )

        assert result == Ok([])
        assert client.calls == []

    def test_keeps_placeholder(self) -> None:
        client = MockHostingClient(
            assets=[
                RemoteAsset(id=1, name="placeholder"),
                RemoteAsset(id=2, name="bin.tar.gz"),
                RemoteAsset(id=3, name="placeholder.txt"),
            ]
        )
        request = ReconcileRequest(release_id=42, delete_assets=True)

        result = prune_assets(client=client, repo=REPO, request=request, console=MockConsole())

        assert result == Ok([2, 3])
        assert [c.args["asset_id"] for c in client.calls_to("delete_release_asset")] == [2, 3]
        assert client.calls_to("list_release_assets")[0].args["release_id"] == 42
        assert [a.name for a in client.assets] == ["placeholder"]

    def test_stops_at_first_failed_delete(self) -> None:
        client = MockHostingClient(
            assets=[RemoteAsset(id=2, name="a.zip"), RemoteAsset(id=3, name="b.zip")]
        )
        client.fail("delete_release_asset", status=403, message="Forbidden")
        request = ReconcileRequest(release_id=42, delete_assets=True)

        result = prune_assets(client=client, repo=REPO, request=request, console=MockConsole())

        assert isinstance(result, Err)
        assert result.error.kind == "remote_operation"
        assert result.error.stage == "prune_assets"
        assert "a.zip" in result.error.message
        assert len(client.calls_to("delete_release_asset")) == 1


class TestSelectTagsToDelete:
    def test_prefix_minus_protected(self) -> None:
        tags = _tags("rc-1", "rc-2", "rc-5", "stable")
        selected = select_tags_to_delete(tags, prefix="rc-", protected="rc-5")
        assert [t.name for t in selected] == ["rc-1", "rc-2"]

    def test_no_protected_tag(self) -> None:
        tags = _tags("rc-1", "rc-5", "stable")
        selected = select_tags_to_delete(tags, prefix="rc-", protected=None)
        assert [t.name for t in selected] == ["rc-1", "rc-5"]

    def test_prefix_is_literal_and_case_sensitive(self) -> None:
        tags = _tags("RC-1", "rc-1", "rc.*", "xrc-1")
        assert [t.name for t in select_tags_to_delete(tags, prefix="rc-", protected=None)] == ["rc-1"]
        assert [t.name for t in select_tags_to_delete(tags, prefix="rc.", protected=None)] == ["rc.*"]


class TestPruneTags:
    def test_deletes_matching_refs_and_logs_count(self) -> None:
        client = MockHostingClient(tags=_tags("rc-1", "rc-2", "rc-5", "stable"))
        console = MockConsole()
        request = ReconcileRequest(release_id=42, new_tag="rc-5", delete_tags_prefix="rc-")

        result = prune_tags(client=client, repo=REPO, request=request, console=console)

        assert result == Ok(["rc-1", "rc-2"])
        assert [c.args["ref"] for c in client.calls_to("delete_ref")] == ["tags/rc-1", "tags/rc-2"]
        assert [t.name for t in client.tags] == ["rc-5", "stable"]
        assert console.messages[-1] == "2 tag(s) have been deleted"

    def test_no_prefix_makes_no_calls(self) -> None:
        client = MockHostingClient(tags=_tags("rc-1"))
        for prefix in (None, ""):
            request = ReconcileRequest(release_id=42, delete_tags_prefix=prefix)
            result = prune_tags(client=client, repo=REPO, request=request, console=MockConsole())
            assert result == Ok([])
        assert client.calls == []

    def test_list_failure(self) -> None:
        client = MockHostingClient()
        client.fail("list_tags")
        request = ReconcileRequest(release_id=42, delete_tags_prefix="rc-")

        result = prune_tags(client=client, repo=REPO, request=request, console=MockConsole())

        assert isinstance(result, Err)
        assert result.error.stage == "prune_tags"
        assert client.calls_to("delete_ref") == []


class TestCreateTag:
    def test_not_requested(self) -> None:
        client = MockHostingClient()
        request = ReconcileRequest(release_id=42, commitish=SHA)

        assert create_tag(client=client, repo=REPO, request=request, console=MockConsole()) == Ok(None)
        assert client.calls == []

    def test_creates_tag_object_then_ref_with_returned_sha(self) -> None:
        client = MockHostingClient(tag_sha="f" * 40)
        request = ReconcileRequest(release_id=42, new_tag="v2.0.0", commitish=SHA)

        result = create_tag(client=client, repo=REPO, request=request, console=MockConsole())

        assert result == Ok("f" * 40)
        assert client.ops() == ["create_tag", "create_ref"]
        tag_call = client.calls_to("create_tag")[0]
        assert tag_call.args["tag"] == "v2.0.0"
        assert tag_call.args["message"] == "release v2.0.0"
        assert tag_call.args["object_sha"] == SHA
        assert tag_call.args["object_type"] == "commit"
        assert client.refs == [("refs/tags/v2.0.0", "f" * 40)]

    def test_ref_not_attempted_when_tag_object_fails(self) -> None:
        client = MockHostingClient()
        client.fail("create_tag", status=422, message="Validation Failed")
        request = ReconcileRequest(release_id=42, new_tag="v2.0.0", commitish=SHA)

        result = create_tag(client=client, repo=REPO, request=request, console=MockConsole())

        assert isinstance(result, Err)
        assert result.error.stage == "create_tag"
        assert client.calls_to("create_ref") == []

    def test_requires_commitish(self) -> None:
        client = MockHostingClient()
        request = ReconcileRequest(release_id=42, new_tag="v2.0.0")

        result = create_tag(client=client, repo=REPO, request=request, console=MockConsole())

        assert isinstance(result, Err)
        assert result.error.kind == "configuration"
        assert client.calls == []


class TestUpdateRelease:
    def test_fetches_when_nothing_changes(self) -> None:
        client = MockHostingClient()

        result = update_release(
            client=client,
            repo=REPO,
            release_id=42,
            update=ReleaseUpdate(target_commitish=SHA),
            console=MockConsole(),
        )

        assert isinstance(result, Ok)
        assert client.ops() == ["get_release"]

    def test_patches_only_present_fields(self) -> None:
        client = MockHostingClient()
        console = MockConsole()

        result = update_release(
            client=client,
            repo=REPO,
            release_id=42,
            update=ReleaseUpdate(name="v2", target_commitish=SHA),
            console=console,
        )

        assert isinstance(result, Ok)
        assert result.value.target_commitish == SHA
        assert client.calls_to("update_release")[0].args["fields"] == {
            "name": "v2",
            "target_commitish": SHA,
        }
        assert console.find("Release 42 was successfully updated")

    def test_update_failure(self) -> None:
        client = MockHostingClient()
        client.fail("update_release", status=404, message="Not Found")

        result = update_release(
            client=client,
            repo=REPO,
            release_id=42,
            update=ReleaseUpdate(draft=False),
            console=MockConsole(),
        )

        assert isinstance(result, Err)
        assert result.error.stage == "update_release"
        assert result.error.hint is not None and "HTTP 404" in result.error.hint


def test_report_copies_fields_verbatim() -> None:
    release = RemoteRelease(id=42, html_url="https://h", upload_url=None, target_commitish="x")
    assert report(release) == ReconcileResult(id=42, html_url="https://h", upload_url=None)
