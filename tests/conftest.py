"""Shared fixtures: an in-memory fake of the GitHub REST API."""

import base64
import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from github_x.core.client import GitHubApiDriver

API_URL = "https://api.github.com"
TOKEN = "test-token"


class FakeGitHub:
    """Minimal stateful stand-in for the endpoints github-x talks to."""

    def __init__(self) -> None:
        self.token = TOKEN
        self.owner = "octo"
        self.repo = "hello"
        self.default_branch = "main"
        self.branches: Dict[str, str] = {"main": "commit0", "dev": "commit-dev"}
        self.commits: Dict[str, Dict[str, Any]] = {
            "commit0": {"sha": "commit0", "tree": {"sha": "tree0"}, "parents": []},
            "commit-dev": {"sha": "commit-dev", "tree": {"sha": "tree-dev"}, "parents": []},
        }
        self.files: Dict[Tuple[str, str], bytes] = {
            ("main", "README.md"): b"# hello\n",
            ("main", "docs/guide.md"): b"guide\n",
        }
        self.blobs: Dict[str, bytes] = {}
        self.trees: List[Dict[str, Any]] = []
        self.created_commits: List[Dict[str, Any]] = []
        self.ref_updates: List[Tuple[str, Dict[str, Any]]] = []
        self.requests: List[httpx.Request] = []
        self.branch_page_size: Optional[int] = None
        self.fail_on: Optional[Tuple[str, str]] = None

    @property
    def repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def driver(self, **kwargs: Any) -> GitHubApiDriver:
        return GitHubApiDriver(API_URL, self.token, transport=self.transport(), **kwargs)

    def calls(self, method: Optional[str] = None) -> List[str]:
        return [
            f"{r.method} {r.url.path}"
            for r in self.requests
            if method is None or r.method == method
        ]

    # Routing

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.headers.get("Authorization") != f"token {self.token}":
            return httpx.Response(401, json={"message": "Bad credentials"})

        method, path = request.method, request.url.path
        if self.fail_on and self.fail_on[0] == method and path.startswith(self.fail_on[1]):
            return httpx.Response(500, json={"message": "Server Error"})

        if method == "GET" and path == "/":
            return httpx.Response(200, json={"current_user_url": f"{API_URL}/user"})

        if not path.startswith(self.repo_path):
            return httpx.Response(404, json={"message": "Not Found"})
        sub = path[len(self.repo_path):]

        if method == "GET" and sub == "":
            return httpx.Response(200, json=self._project())
        if method == "GET" and sub == "/branches":
            return self._list_branches(request)
        if method == "GET" and sub.startswith("/branches/"):
            name = sub[len("/branches/"):]
            if name not in self.branches:
                return httpx.Response(404, json={"message": "Branch not found"})
            return httpx.Response(200, json=self._branch(name))
        if method == "GET" and sub.startswith("/contents/"):
            return self._contents(request, sub[len("/contents/"):])

        match = re.fullmatch(r"/git/commits/(\w[\w-]*)", sub)
        if method == "GET" and match:
            commit = self.commits.get(match.group(1))
            if commit is None:
                return httpx.Response(404, json={"message": "Not Found"})
            return httpx.Response(200, json=commit)

        if method == "POST" and sub == "/git/blobs":
            return self._create_blob(request)
        if method == "POST" and sub == "/git/trees":
            return self._create_tree(request)
        if method == "POST" and sub == "/git/commits":
            return self._create_commit(request)
        if method == "PATCH" and sub.startswith("/git/refs/heads/"):
            return self._update_ref(request, sub[len("/git/refs/heads/"):])

        return httpx.Response(404, json={"message": "Not Found"})

    # Handlers

    def _project(self) -> Dict[str, Any]:
        return {
            "id": 1296269,
            "name": self.repo,
            "full_name": f"{self.owner}/{self.repo}",
            "default_branch": self.default_branch,
            "private": False,
            "owner": {"login": self.owner},
        }

    def _branch(self, name: str) -> Dict[str, Any]:
        return {"name": name, "commit": {"sha": self.branches[name]}, "protected": False}

    def _list_branches(self, request: httpx.Request) -> httpx.Response:
        names = list(self.branches)
        if self.branch_page_size is None:
            return httpx.Response(200, json=[self._branch(n) for n in names])

        page = int(request.url.params.get("page", "1"))
        start = (page - 1) * self.branch_page_size
        chunk = names[start:start + self.branch_page_size]
        headers = {}
        if start + self.branch_page_size < len(names):
            next_url = f"{API_URL}{self.repo_path}/branches?per_page={self.branch_page_size}&page={page + 1}"
            headers["Link"] = f'<{next_url}>; rel="next"'
        return httpx.Response(200, json=[self._branch(n) for n in chunk], headers=headers)

    def _contents(self, request: httpx.Request, file_path: str) -> httpx.Response:
        ref = request.url.params.get("ref", self.default_branch)
        content = self.files.get((ref, file_path))
        if content is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if request.headers.get("Accept") == "application/vnd.github.v3.raw":
            return httpx.Response(200, content=content)
        return httpx.Response(200, json={
            "type": "file",
            "path": file_path,
            "content": base64.b64encode(content).decode("ascii"),
            "encoding": "base64",
        })

    def _create_blob(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        sha = f"blob{len(self.blobs) + 1}"
        assert body["encoding"] == "base64"
        self.blobs[sha] = base64.b64decode(body["content"])
        return httpx.Response(201, json={"sha": sha, "url": f"{API_URL}{self.repo_path}/git/blobs/{sha}"})

    def _create_tree(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.trees.append(body)
        sha = f"tree{len(self.trees)}"
        return httpx.Response(201, json={"sha": sha, "tree": body["tree"]})

    def _create_commit(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.created_commits.append(body)
        sha = f"commit{len(self.created_commits)}"
        self.commits[sha] = {"sha": sha, "tree": {"sha": body["tree"]}, "parents": body["parents"]}
        return httpx.Response(201, json={"sha": sha, "message": body["message"]})

    def _update_ref(self, request: httpx.Request, branch: str) -> httpx.Response:
        body = json.loads(request.content)
        if branch not in self.branches:
            return httpx.Response(422, json={"message": "Reference does not exist"})
        self.ref_updates.append((branch, body))
        self.branches[branch] = body["sha"]
        return httpx.Response(200, json={"ref": f"refs/heads/{branch}", "object": {"sha": body["sha"]}})


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch: pytest.MonkeyPatch):
    """Keep the real environment, .env files and logging config out of tests."""
    for var in ("GITHUB_AT", "GITHUB_URL", "GITHUB_X_TIMEOUT", "GITHUB_X_LOG_LEVEL",
                "GITHUB_X_VERBOSE", "GITHUB_X_JSON_OUTPUT", "GITHUB_X_ACCESS_TOKEN", "GITHUB_X_URL"):
        # set first so the variable is removed again after .env loading in a test
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)

    workdir = tmp_path / "work"
    (workdir / ".git").mkdir(parents=True)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.chdir(workdir)
    monkeypatch.setenv("HOME", str(home))

    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
