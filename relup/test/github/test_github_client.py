"""Tests for relup.github.client - GitHub REST client."""

from __future__ import annotations

import io
import json
import urllib.error
import urllib.request
from typing import Any

import pytest

from relup.core.result import Err, Ok
from relup.github import client as client_mod
from relup.github.client import ApiError, GitHubClient, HostingClient
from relup.github.mock import MockHostingClient
from relup.github.models import RemoteRelease, RemoteTag, Repo

REPO = Repo(owner="octo", name="project")
API = "https://api.github.test"


class _FakeResponse:
    def __init__(self, body: object, *, link: str | None = None) -> None:
        self._raw = b"" if body is None else json.dumps(body).encode("utf-8")
        self.headers: dict[str, str] = {"Link": link} if link else {}

    def read(self) -> bytes:
        return self._raw

    def __enter__(self) -> _FakeResponse:
        return self

    def __exit__(self, *exc: object) -> None:
        return None


class _FakeUrlopen:
    def __init__(self, responses: list[_FakeResponse | Exception]) -> None:
        self.responses = responses
        self.requests: list[urllib.request.Request] = []

    def __call__(self, req: urllib.request.Request, **_: Any) -> _FakeResponse:
        self.requests.append(req)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def payload(self, index: int) -> object:
        data = self.requests[index].data
        assert isinstance(data, bytes)
        return json.loads(data.decode("utf-8"))


def _install(monkeypatch: pytest.MonkeyPatch, *responses: _FakeResponse | Exception) -> _FakeUrlopen:
    fake = _FakeUrlopen(list(responses))
    monkeypatch.setattr(client_mod.urllib.request, "urlopen", fake)
    return fake


def _client() -> GitHubClient:
    return GitHubClient("secret-token", api_url=API + "/")


def _release_payload(release_id: int = 42) -> dict[str, object]:
    return {
        "id": release_id,
        "html_url": f"https://github.com/octo/project/releases/{release_id}",
        "upload_url": f"https://uploads.github.com/repos/octo/project/releases/{release_id}/assets{{?name,label}}",
        "target_commitish": "main",
    }


class TestApiError:
    def test_str_with_status(self) -> None:
        error = ApiError(method="GET", url="https://x/y", status=404, message="Not Found")
        assert str(error) == "HTTP 404: Not Found (GET https://x/y)"

    def test_str_without_status(self) -> None:
        error = ApiError(method="DELETE", url="https://x/y", status=0, message="timed out")
        assert str(error) == "timed out (DELETE https://x/y)"


class TestGitHubClient:
    def test_implements_protocol(self) -> None:
        assert isinstance(_client(), HostingClient)
        assert isinstance(MockHostingClient(), HostingClient)

    def test_get_release_sends_auth_headers(self, monkeypatch: pytest.MonkeyPatch) -> None:
        fake = _install(monkeypatch, _FakeResponse(_release_payload()))

        result = _client().get_release(REPO, 42)

        assert isinstance(result, Ok)
        assert result.value.id == 42
        req = fake.requests[0]
        assert req.get_method() == "GET"
        assert req.full_url == f"{API}/repos/octo/project/releases/42"
        assert req.get_header("Authorization") == "Bearer secret-token"
        assert req.get_header("Accept") == "application/vnd.github+json"

    def test_update_release_sends_only_given_fields(self, monkeypatch: pytest.MonkeyPatch) -> None:
        fake = _install(monkeypatch, _FakeResponse(_release_payload()))

        result = _client().update_release(REPO, 42, {"name": "v2", "target_commitish": "abc"})

        assert isinstance(result, Ok)
        assert fake.requests[0].get_method() == "PATCH"
        assert fake.payload(0) == {"name": "v2", "target_commitish": "abc"}

    def test_list_tags_follows_pagination(self, monkeypatch: pytest.MonkeyPatch) -> None:
        next_url = f"{API}/repositories/1/tags?per_page=100&page=2"
        fake = _install(
            monkeypatch,
            _FakeResponse(
                [{"name": "rc-1", "commit": {"sha": "a1", "url": "u1"}}],
                link=f'<{next_url}>; rel="next", <{next_url}>; rel="last"',
            ),
            _FakeResponse([{"name": "rc-2", "commit": {"sha": "a2", "url": "u2"}}]),
        )

        result = _client().list_tags(REPO)

        assert isinstance(result, Ok)
        assert [t.name for t in result.value] == ["rc-1", "rc-2"]
        assert fake.requests[0].full_url == f"{API}/repos/octo/project/tags?per_page=100"
        assert fake.requests[1].full_url == next_url

    def test_list_release_assets(self, monkeypatch: pytest.MonkeyPatch) -> None:
        fake = _install(
            monkeypatch,
            _FakeResponse([{"id": 1, "name": "placeholder"}, {"id": 2, "name": "bin.tar.gz"}]),
        )

        result = _client().list_release_assets(REPO, 42)

        assert isinstance(result, Ok)
        assert [a.id for a in result.value] == [1, 2]
        assert fake.requests[0].full_url == f"{API}/repos/octo/project/releases/42/assets?per_page=100"

    def test_list_rejects_non_array(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install(monkeypatch, _FakeResponse({"message": "nope"}))

        result = _client().list_tags(REPO)

        assert isinstance(result, Err)
        assert result.error.message == "Expected JSON array"

    def test_delete_ref_accepts_empty_body(self, monkeypatch: pytest.MonkeyPatch) -> None:
        fake = _install(monkeypatch, _FakeResponse(None))

        result = _client().delete_ref(REPO, "tags/release candidate")

        assert result == Ok(None)
        assert fake.requests[0].get_method() == "DELETE"
        assert fake.requests[0].full_url == (
            f"{API}/repos/octo/project/git/refs/tags/release%20candidate"
        )

    def test_delete_release_asset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        fake = _install(monkeypatch, _FakeResponse(None))

        assert _client().delete_release_asset(REPO, 7) == Ok(None)
        assert fake.requests[0].full_url == f"{API}/repos/octo/project/releases/assets/7"

    def test_create_tag_returns_tag_object_sha(self, monkeypatch: pytest.MonkeyPatch) -> None:
        fake = _install(monkeypatch, _FakeResponse({"sha": "tagsha", "tag": "v1"}))

        result = _client().create_tag(REPO, tag="v1", message="release v1", object_sha="abc")

        assert result == Ok("tagsha")
        assert fake.payload(0) == {
            "tag": "v1",
            "message": "release v1",
            "object": "abc",
            "type": "commit",
        }

    def test_create_tag_without_sha_is_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install(monkeypatch, _FakeResponse({"tag": "v1"}))

        result = _client().create_tag(REPO, tag="v1", message="release v1", object_sha="abc")

        assert isinstance(result, Err)
        assert result.error.message == "Missing tag sha"

    def test_create_ref(self, monkeypatch: pytest.MonkeyPatch) -> None:
        fake = _install(monkeypatch, _FakeResponse({"ref": "refs/tags/v1"}))

        assert _client().create_ref(REPO, ref="refs/tags/v1", sha="tagsha") == Ok(None)
        assert fake.payload(0) == {"ref": "refs/tags/v1", "sha": "tagsha"}

    def test_http_error_uses_api_message(self, monkeypatch: pytest.MonkeyPatch) -> None:
        error = urllib.error.HTTPError(
            f"{API}/repos/octo/project/git/refs",
            422,
            "Unprocessable Entity",
            hdrs=None,  # type: ignore[arg-type]
            fp=io.BytesIO(b'{"message": "Reference already exists"}'),
        )
        _install(monkeypatch, error)

        result = _client().create_ref(REPO, ref="refs/tags/v1", sha="tagsha")

        assert isinstance(result, Err)
        assert result.error.status == 422
        assert result.error.message == "Reference already exists"
        assert result.error.method == "POST"

    def test_network_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install(monkeypatch, urllib.error.URLError("connection refused"))

        result = _client().get_release(REPO, 42)

        assert isinstance(result, Err)
        assert result.error.status == 0
        assert result.error.message == "connection refused"

    def test_unexpected_release_payload(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install(monkeypatch, _FakeResponse({"html_url": "x"}))

        result = _client().get_release(REPO, 42)

        assert isinstance(result, Err)
        assert result.error.message == "Unexpected release payload"


class TestMockHostingClient:
    def test_records_calls_and_mutates_state(self) -> None:
        client = MockHostingClient(tags=[RemoteTag(name="rc-1"), RemoteTag(name="stable")])

        assert client.delete_ref(REPO, "tags/rc-1") == Ok(None)

        assert client.ops() == ["delete_ref"]
        assert [t.name for t in client.tags] == ["stable"]

    def test_injected_failure(self) -> None:
        client = MockHostingClient(
            release=RemoteRelease(id=1, html_url=None, upload_url=None),
        )
        client.fail("get_release", status=404, message="Not Found")

        result = client.get_release(REPO, 1)

        assert isinstance(result, Err)
        assert result.error.status == 404
