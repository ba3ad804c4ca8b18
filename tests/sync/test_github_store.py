"""Tests for GitHubStore against a fake contents API."""

import base64
import json
from urllib.parse import unquote

import httpx
import pytest

from trackhub.sync import (
    GitHubStore,
    InMemoryStore,
    NotADirectory,
    NotADocument,
    RemoteUnavailable,
    VersionConflict,
)

API_URL = "http://api.test"
CONTENTS_PREFIX = "/repos/octo/tracks/contents/"


class FakeGitHub:
    """Minimal GitHub contents API served from an InMemoryStore."""

    def __init__(self):
        self.backing = InMemoryStore(default_ref="main")
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = unquote(request.url.path[len(CONTENTS_PREFIX) :])

        if request.method == "GET":
            ref = request.url.params.get("ref")
            try:
                document = self.backing.get(path, ref=ref)
            except NotADocument:
                listing = self.backing.list(path, ref=ref)
                return httpx.Response(
                    200,
                    json=[
                        {"name": e.name, "path": e.path, "sha": e.version_tag}
                        for e in listing
                    ],
                )
            if document is None:
                return httpx.Response(404, json={"message": "Not Found"})
            encoded = base64.encodebytes(document.content.encode("utf-8"))
            return httpx.Response(
                200,
                json={
                    "type": "file",
                    "path": document.path,
                    "sha": document.version_tag,
                    "encoding": "base64",
                    "content": encoded.decode("ascii"),
                },
            )

        body = json.loads(request.content)
        content = base64.b64decode(body["content"]).decode("utf-8")
        sha = body.get("sha")
        try:
            tag, commit = self.backing.put(
                path,
                content,
                body["message"],
                expected_version_tag=sha,
                ref=body["branch"],
            )
        except VersionConflict:
            if sha is None:
                message = "Invalid request.\n\n\"sha\" wasn't supplied."
                return httpx.Response(422, json={"message": message})
            return httpx.Response(
                409, json={"message": f"{path} does not match {sha}"}
            )
        url = f"https://github.test/octo/tracks/commit/{commit.sha}"
        return httpx.Response(
            201 if sha is None else 200,
            json={
                "content": {"path": path, "sha": tag},
                "commit": {
                    "sha": commit.sha,
                    "message": commit.message,
                    "html_url": url,
                },
            },
        )


@pytest.fixture
def fake_github():
    return FakeGitHub()


@pytest.fixture
def github_store(fake_github):
    client = httpx.Client(transport=httpx.MockTransport(fake_github))
    store = GitHubStore(
        owner="octo",
        repo="tracks",
        token="secret-token",
        branch="main",
        api_url=API_URL,
        client=client,
    )
    yield store
    store.close()


class TestGitHubStore:
    """Tests for GitHubStore."""

    def test_get_missing_returns_none(self, github_store):
        """Test that a 404 maps to None."""
        assert github_store.get("records/missing.json") is None

    def test_put_then_get(self, github_store):
        """Test a first write followed by a read."""
        tag, commit = github_store.put("records/a.json", '{"bpm":120}', "Add a")

        document = github_store.get("records/a.json")
        assert document.content == '{"bpm":120}'
        assert document.version_tag == tag
        assert document.path == "records/a.json"
        assert commit.message == "Add a"
        assert commit.url.endswith(commit.sha)
        assert commit.raw["sha"] == commit.sha

    def test_unicode_content_round_trips(self, github_store):
        """Test that content is sent and read back as UTF-8."""
        github_store.put("notes.md", "Grüße ♫", "add")
        assert github_store.get("notes.md").content == "Grüße ♫"

    def test_request_headers_and_params(self, github_store, fake_github):
        """Test auth, API version headers and the ref parameter."""
        github_store.get("records/a.json")

        request = fake_github.requests[-1]
        assert request.headers["Authorization"] == "Bearer secret-token"
        assert request.headers["Accept"] == "application/vnd.github+json"
        assert request.headers["X-GitHub-Api-Version"] == "2022-11-28"
        assert request.url.params["ref"] == "main"
        assert request.url.path == "/repos/octo/tracks/contents/records/a.json"

    def test_put_sends_branch_and_sha(self, github_store, fake_github):
        """Test the body of a conditional write."""
        tag, _ = github_store.put("doc.txt", "v1", "create")
        github_store.put("doc.txt", "v2", "update", expected_version_tag=tag)

        body = json.loads(fake_github.requests[-1].content)
        assert body["branch"] == "main"
        assert body["sha"] == tag
        assert base64.b64decode(body["content"]) == b"v2"

    def test_first_write_omits_sha(self, github_store, fake_github):
        """Test that a first write sends no sha."""
        github_store.put("doc.txt", "v1", "create")

        body = json.loads(fake_github.requests[-1].content)
        assert "sha" not in body

    def test_path_is_quoted(self, github_store, fake_github):
        """Test that unsafe characters in paths are URL-encoded."""
        github_store.get("my docs/a b.txt")

        assert fake_github.requests[-1].url.raw_path.startswith(
            b"/repos/octo/tracks/contents/my%20docs/a%20b.txt"
        )

    def test_stale_sha_is_version_conflict(self, github_store):
        """Test that a 409 maps to VersionConflict."""
        tag_1, _ = github_store.put("doc.txt", "v1", "create")
        github_store.put("doc.txt", "v2", "update", expected_version_tag=tag_1)

        with pytest.raises(VersionConflict) as exc_info:
            github_store.put("doc.txt", "v3", "update", expected_version_tag=tag_1)

        assert exc_info.value.expected_version_tag == tag_1
        assert exc_info.value.path == "doc.txt"

    def test_missing_sha_on_existing_file_is_version_conflict(self, github_store):
        """Test that a 422 for an omitted sha maps to VersionConflict."""
        github_store.put("doc.txt", "v1", "create")

        with pytest.raises(VersionConflict):
            github_store.put("doc.txt", "v2", "blind overwrite")

    def test_list_directory(self, github_store):
        """Test listing a directory."""
        github_store.put("records/a.json", "a", "add")
        github_store.put("records/b.json", "b", "add")

        listing = github_store.list("records")

        assert [(e.name, e.path) for e in listing] == [
            ("a.json", "records/a.json"),
            ("b.json", "records/b.json"),
        ]
        assert all(e.version_tag for e in listing)

    def test_list_file_is_not_a_directory(self, github_store):
        """Test that listing a file raises NotADirectory."""
        github_store.put("records/a.json", "a", "add")

        with pytest.raises(NotADirectory):
            github_store.list("records/a.json")

    def test_list_missing_returns_none(self, github_store):
        """Test that listing a missing directory returns None."""
        assert github_store.list("nothing") is None

    def test_get_directory_is_not_a_document(self, github_store):
        """Test that reading a directory raises NotADocument."""
        github_store.put("records/a.json", "a", "add")

        with pytest.raises(NotADocument):
            github_store.get("records")

    def test_describe(self, github_store):
        """Test the human-readable identification."""
        assert github_store.describe() == "github:octo/tracks@main"


class TestGitHubStoreFailures:
    """Tests for failure translation."""

    def make_store(self, handler, **kwargs):
        client = httpx.Client(transport=httpx.MockTransport(handler))
        options = {"owner": "octo", "repo": "tracks", "api_url": API_URL}
        options.update(kwargs)
        return GitHubStore(client=client, **options)

    @pytest.mark.parametrize("status_code", [401, 403, 500, 502])
    def test_error_status_is_remote_unavailable(self, status_code):
        """Test that auth, rate-limit and server errors are RemoteUnavailable."""
        store = self.make_store(
            lambda request: httpx.Response(status_code, json={"message": "nope"})
        )

        with pytest.raises(RemoteUnavailable) as exc_info:
            store.get("doc.txt")

        assert exc_info.value.status_code == status_code
        assert "nope" in str(exc_info.value)

    def test_put_error_status_is_remote_unavailable(self):
        """Test that a failing write is RemoteUnavailable, not a conflict."""
        store = self.make_store(
            lambda request: httpx.Response(403, json={"message": "rate limited"})
        )

        with pytest.raises(RemoteUnavailable) as exc_info:
            store.put("doc.txt", "v1", "create")

        assert exc_info.value.status_code == 403

    def test_422_with_sha_is_remote_unavailable(self):
        """Test that a 422 for a request that did send a sha is not a conflict."""
        store = self.make_store(
            lambda request: httpx.Response(422, json={"message": "Invalid request"})
        )

        with pytest.raises(RemoteUnavailable):
            store.put("doc.txt", "v1", "update", expected_version_tag="abc")

    def test_transport_error_is_remote_unavailable(self):
        """Test that connection failures keep their cause."""

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        store = self.make_store(handler)

        with pytest.raises(RemoteUnavailable) as exc_info:
            store.get("doc.txt")

        assert isinstance(exc_info.value.cause, httpx.ConnectError)
        assert exc_info.value.status_code is None

    def test_unconfigured_repository(self):
        """Test that a missing owner/repo fails without any request."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={})

        store = self.make_store(handler, owner=None, repo=None)

        with pytest.raises(RemoteUnavailable):
            store.get("doc.txt")
        assert calls == []

    def test_no_token_sends_no_authorization(self):
        """Test anonymous access."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(404, json={"message": "Not Found"})

        store = self.make_store(handler)
        store.get("doc.txt")

        assert "Authorization" not in seen[0].headers

    def test_other_422_is_remote_unavailable(self):
        """Test that validation failures on a first write are not conflicts."""
        store = self.make_store(
            lambda request: httpx.Response(
                422, json={"message": "path contains a malformed path component"}
            )
        )

        with pytest.raises(RemoteUnavailable) as exc_info:
            store.put("bad//path", "x", "add")

        assert exc_info.value.status_code == 422
        assert "malformed path component" in str(exc_info.value)


class TestLargeFiles:
    """Tests for files whose content is not inlined by the contents API."""

    BLOB_PATH = "/repos/octo/tracks/git/blobs/abc"

    def make_store(self, blob_response):
        def handler(request):
            if request.url.path == self.BLOB_PATH:
                return blob_response
            return httpx.Response(
                200,
                json={
                    "type": "file",
                    "path": "big.json",
                    "sha": "abc",
                    "size": 2_000_000,
                    "encoding": "none",
                    "content": "",
                },
            )

        client = httpx.Client(transport=httpx.MockTransport(handler))
        return GitHubStore(owner="octo", repo="tracks", api_url=API_URL, client=client)

    def test_content_fetched_from_blob(self):
        """Test that a file over 1 MB is read through the git blob API."""
        content = '{"samples": "' + "x" * 2_000_000 + '"}'
        encoded = base64.b64encode(content.encode("utf-8")).decode("ascii")
        store = self.make_store(
            httpx.Response(
                200, json={"sha": "abc", "encoding": "base64", "content": encoded}
            )
        )

        document = store.get("big.json")

        assert document.content == content
        assert document.version_tag == "abc"

    def test_blob_failure_is_remote_unavailable(self):
        """Test that a failing blob lookup never yields empty content."""
        store = self.make_store(httpx.Response(500, json={"message": "boom"}))

        with pytest.raises(RemoteUnavailable) as exc_info:
            store.get("big.json")

        assert exc_info.value.status_code == 500

    def test_unsupported_blob_encoding(self):
        """Test that a blob without base64 content is rejected."""
        store = self.make_store(
            httpx.Response(200, json={"sha": "abc", "encoding": "none", "content": ""})
        )

        with pytest.raises(RemoteUnavailable):
            store.get("big.json")
