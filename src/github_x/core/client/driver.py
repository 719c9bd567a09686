"""
GitHub REST API driver.

This module provides the HTTP request layer used by the CLI: project and
branch lookup, file existence checks, raw file retrieval and the atomic
multi-file commit sequence (blob, tree, commit, ref).
"""

import logging
from typing import Any, AsyncIterator, Dict, List, Optional
from urllib.parse import quote

import httpx

from github_x import USER_AGENT
from .errors import (
    BranchNotFoundError,
    GitHubApiError,
    InvalidProjectIdentifierError,
    classify_http_error,
    is_not_found,
)
from .identifiers import normalize_base_url, resolve_project_identifier, trim_slashes
from .models import (
    BlobRequest,
    CommitActionType,
    CommitObject,
    CommitRequest,
    CommitResult,
    RefUpdateRequest,
    TreeEntry,
    TreeRequest,
)

logger = logging.getLogger(__name__)

# Appended to the base URL; empty for api.github.com style hosts
API_PATH = ""

RAW_MEDIA_TYPE = "application/vnd.github.v3.raw"
JSON_MEDIA_TYPE = "application/vnd.github+json"
BRANCHES_PER_PAGE = 100


class GitHubApiDriver:
    """Async client for the subset of the GitHub REST API used by github-x."""

    def __init__(
        self,
        base_url: str,
        access_token: str,
        verbose: bool = False,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the driver.

        Args:
            base_url: API base URL; http is upgraded to https and a missing
                scheme defaults to https
            access_token: Personal access token sent as ``token <AT>``
            verbose: Log every request at INFO instead of DEBUG
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.verbose = verbose
        self.base_url = normalize_base_url(base_url)
        self.api_url = f"{self.base_url}{API_PATH}"
        self.timeout = timeout
        self._access_token = access_token

        self._client = httpx.AsyncClient(
            headers={
                "Authorization": f"token {access_token}",
                "Accept": JSON_MEDIA_TYPE,
                "User-Agent": USER_AGENT,
            },
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def __aenter__(self) -> "GitHubApiDriver":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    # Request plumbing

    def _log_request(self, method: str, url: str) -> None:
        level = logging.INFO if self.verbose else logging.DEBUG
        logger.log(level, f"{method} > {url}")

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """Send a request and raise ``httpx.HTTPStatusError`` on non-2xx."""
        self._log_request(method, url)
        response = await self._client.request(
            method, url, params=params, json=json, headers=headers
        )
        response.raise_for_status()
        return response

    def get_project_url(self, identifier: str) -> str:
        """Map a project identifier to its ``/repos/<owner>/<repo>`` URL."""
        resolved = resolve_project_identifier(self.base_url, identifier)
        if not resolved.is_valid:
            raise InvalidProjectIdentifierError(identifier)
        return f"{self.api_url}/repos/{resolved.path}"

    def _contents_url(self, project_identifier: str, file_path: str) -> str:
        encoded_path = quote(trim_slashes(file_path), safe="/")
        return f"{self.get_project_url(project_identifier)}/contents/{encoded_path}"

    @staticmethod
    def _branch_segment(branch_name: str) -> str:
        # Branch names like feature/x keep their slash in both branch and ref URLs
        return quote(branch_name, safe="/")

    async def _resolve_branch(self, project_identifier: str, branch_name: Optional[str]) -> str:
        if branch_name:
            return branch_name
        project = await self.get_project(project_identifier)
        return project["default_branch"]

    # Read operations

    async def get_project(self, identifier: str) -> Dict[str, Any]:
        """Get the repository identified by ``identifier``."""
        url = self.get_project_url(identifier)
        try:
            response = await self._request("GET", url)
            return response.json()
        except httpx.HTTPError as e:
            raise classify_http_error(
                e, f"Error requesting project identified by '{identifier}'"
            ) from e

    async def get_branches(self, project_identifier: str) -> List[Dict[str, Any]]:
        """List all branches of a project, following pagination links."""
        url: Optional[str] = f"{self.get_project_url(project_identifier)}/branches"
        params: Optional[Dict[str, Any]] = {"per_page": BRANCHES_PER_PAGE}
        branches: List[Dict[str, Any]] = []
        try:
            while url:
                response = await self._request("GET", url, params=params)
                branches.extend(response.json())
                url = response.links.get("next", {}).get("url")
                # The next link already carries the query string
                params = None
        except httpx.HTTPError as e:
            raise classify_http_error(
                e, f"Error requesting branches for project identified by '{project_identifier}'"
            ) from e
        return branches

    async def branch_exists(self, project_identifier: str, branch_name: str) -> bool:
        """Check whether a branch exists; a 404 means it does not."""
        url = f"{self.get_project_url(project_identifier)}/branches/{self._branch_segment(branch_name)}"
        try:
            response = await self._request("GET", url)
            return response.status_code == 200
        except httpx.HTTPError as e:
            if is_not_found(e):
                return False
            raise classify_http_error(
                e,
                f"Error requesting branch '{branch_name}' for project identified by '{project_identifier}'",
            ) from e

    async def file_exists(
        self,
        project_identifier: str,
        file_path: str,
        branch_name: Optional[str] = None,
    ) -> bool:
        """Check whether a file exists on a branch (default branch if omitted)."""
        branch_name = await self._resolve_branch(project_identifier, branch_name)
        url = self._contents_url(project_identifier, file_path)
        try:
            response = await self._request("GET", url, params={"ref": branch_name})
            return response.status_code == 200
        except httpx.HTTPError as e:
            if is_not_found(e):
                return False
            raise classify_http_error(
                e,
                f"Error requesting file '{file_path}' from branch '{branch_name}' "
                f"for project identified by '{project_identifier}'",
            ) from e

    async def get_raw_file(
        self,
        project_identifier: str,
        file_path: str,
        branch_name: Optional[str] = None,
    ) -> bytes:
        """Get the raw content of a file."""
        chunks = [
            chunk async for chunk in self.iter_raw_file(project_identifier, file_path, branch_name)
        ]
        return b"".join(chunks)

    async def iter_raw_file(
        self,
        project_identifier: str,
        file_path: str,
        branch_name: Optional[str] = None,
    ) -> AsyncIterator[bytes]:
        """Stream the raw content of a file in chunks."""
        branch_name = await self._resolve_branch(project_identifier, branch_name)
        url = self._contents_url(project_identifier, file_path)
        self._log_request("GET", url)
        try:
            async with self._client.stream(
                "GET",
                url,
                params={"ref": branch_name},
                headers={"Accept": RAW_MEDIA_TYPE},
            ) as response:
                if response.is_error:
                    await response.aread()
                response.raise_for_status()
                async for chunk in response.aiter_bytes():
                    yield chunk
        except httpx.HTTPError as e:
            raise classify_http_error(
                e,
                f"Error requesting raw file '{file_path}' from branch '{branch_name}' "
                f"for project identified by '{project_identifier}'",
            ) from e

    async def get_commit(self, project_identifier: str, sha: str) -> Dict[str, Any]:
        """Get a git commit object."""
        url = f"{self.get_project_url(project_identifier)}/git/commits/{sha}"
        try:
            response = await self._request("GET", url)
            return response.json()
        except httpx.HTTPError as e:
            raise classify_http_error(
                e, f"Error requesting commit '{sha}' for project identified by '{project_identifier}'"
            ) from e

    async def get_version(self) -> Optional[Dict[str, Any]]:
        """Get the API root document."""
        url = f"{self.api_url}/"
        try:
            response = await self._request("GET", url)
            if response.status_code == 200:
                return response.json()
            return None
        except httpx.HTTPError as e:
            raise classify_http_error(e, "Error retrieving API information.") from e

    async def check_access(self) -> bool:
        """Check that the API root is reachable with the configured token."""
        try:
            await self.get_version()
        except GitHubApiError as e:
            if e.status is not None:
                logger.debug(f"API access check failed: {e}")
                return False
            raise
        return True

    # Write operations

    async def create_blob(self, project_identifier: str, content_base64: str) -> Dict[str, Any]:
        """Upload base64 content as a blob."""
        url = f"{self.get_project_url(project_identifier)}/git/blobs"
        payload = BlobRequest(content=content_base64)
        try:
            response = await self._request("POST", url, json=payload.model_dump())
            return response.json()
        except httpx.HTTPError as e:
            raise classify_http_error(
                e, f"Error creating blob for project identified by '{project_identifier}'"
            ) from e

    async def create_tree(
        self,
        project_identifier: str,
        base_tree: str,
        entries: List[TreeEntry],
    ) -> Dict[str, Any]:
        """Create a tree on top of ``base_tree``."""
        url = f"{self.get_project_url(project_identifier)}/git/trees"
        payload = TreeRequest(base_tree=base_tree, tree=entries)
        try:
            response = await self._request("POST", url, json=payload.model_dump())
            return response.json()
        except httpx.HTTPError as e:
            raise classify_http_error(
                e, f"Error creating tree for project identified by '{project_identifier}'"
            ) from e

    async def create_commit(
        self,
        project_identifier: str,
        message: str,
        tree_sha: str,
        parents: List[str],
    ) -> Dict[str, Any]:
        """Create a commit object."""
        url = f"{self.get_project_url(project_identifier)}/git/commits"
        payload = CommitRequest(message=message, tree=tree_sha, parents=parents)
        try:
            response = await self._request("POST", url, json=payload.model_dump())
            return response.json()
        except httpx.HTTPError as e:
            raise classify_http_error(
                e, f"Error creating commit for project identified by '{project_identifier}'"
            ) from e

    async def update_ref(self, project_identifier: str, branch: str, sha: str) -> Dict[str, Any]:
        """Advance ``refs/heads/<branch>`` to ``sha`` (fast-forward only)."""
        url = f"{self.get_project_url(project_identifier)}/git/refs/heads/{self._branch_segment(branch)}"
        payload = RefUpdateRequest(sha=sha)
        try:
            response = await self._request("PATCH", url, json=payload.model_dump())
            return response.json()
        except httpx.HTTPError as e:
            raise classify_http_error(
                e, f"Error updating branch '{branch}' for project identified by '{project_identifier}'"
            ) from e

    async def post_commit(self, project_identifier: str, commit_object: CommitObject) -> CommitResult:
        """
        Turn a set of file changes into one commit on a branch.

        Resolves the branch to its current commit, uploads a blob per changed
        file, builds a tree on top of the prior tree, creates a commit parented
        on the prior commit and advances the branch reference.

        Args:
            project_identifier: Project to commit to
            commit_object: Branch, message and file actions

        Returns:
            CommitResult describing the new commit

        Raises:
            BranchNotFoundError: If the target branch does not exist
            GitHubApiError: If any request of the sequence fails
        """
        branch = await self._resolve_branch(project_identifier, commit_object.branch)

        branches = await self.get_branches(project_identifier)
        match = next((b for b in branches if b.get("name") == branch), None)
        if match is None:
            raise BranchNotFoundError(branch, project_identifier)
        parent_sha = match["commit"]["sha"]

        try:
            parent_commit = await self.get_commit(project_identifier, parent_sha)
            base_tree = parent_commit["tree"]["sha"]

            entries: List[TreeEntry] = []
            for action in commit_object.actions:
                if action.action == CommitActionType.DELETE:
                    entries.append(TreeEntry(path=action.file_path, sha=None))
                    continue
                blob = await self.create_blob(project_identifier, action.content_as_base64())
                entries.append(TreeEntry(path=action.file_path, sha=blob["sha"]))

            tree = await self.create_tree(project_identifier, base_tree, entries)
            commit = await self.create_commit(
                project_identifier,
                commit_object.commit_message,
                tree["sha"],
                [parent_sha],
            )
            ref = await self.update_ref(project_identifier, branch, commit["sha"])
        except GitHubApiError as e:
            # Reclassify the underlying httpx error under the commit context
            raise classify_http_error(
                e.original_error or e,
                f"Error executing commit on project identified by '{project_identifier}'",
            ) from e

        logger.info(f"Committed {len(entries)} file(s) to '{branch}' as {commit['sha']}")
        return CommitResult(
            branch=branch,
            parent_sha=parent_sha,
            tree_sha=tree["sha"],
            commit_sha=commit["sha"],
            ref=ref.get("ref", f"refs/heads/{branch}"),
            files=[entry.path for entry in entries],
        )
