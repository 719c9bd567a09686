"""Tests for the local file commit helper."""

from pathlib import Path

import pytest

from github_x.core.client import BranchNotFoundError, CommitError
from github_x.core.client.models import CommitActionType, ContentEncoding
from github_x.core.commit import (
    build_commit_action,
    commit_files,
    commit_single_file,
    default_commit_message,
    read_local_file,
)


class TestReadLocalFile:

    def test_text_file(self, tmp_path: Path) -> None:
        local = tmp_path / "notes.md"
        local.write_text("hello\n", encoding="utf-8")

        result = read_local_file(local)
        assert result.target_path == "notes.md"
        assert result.content == "hello\n"
        assert result.encoding == ContentEncoding.TEXT

    def test_binary_file_is_base64(self, tmp_path: Path) -> None:
        local = tmp_path / "logo.png"
        local.write_bytes(b"\x89PNG\r\n\x1a\n\xff")

        result = read_local_file(local, "/assets/logo.png")
        assert result.target_path == "assets/logo.png"
        assert result.encoding == ContentEncoding.BASE64
        assert result.content == "iVBORw0KGgr/"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(CommitError):
            read_local_file(tmp_path / "nope.txt")

    @pytest.mark.parametrize("target", ["", "  ", " / "])
    def test_blank_target_rejected(self, tmp_path: Path, target: str) -> None:
        local = tmp_path / "a.txt"
        local.write_text("a")
        with pytest.raises(CommitError) as exc_info:
            read_local_file(local, target)
        assert "Invalid target path" in exc_info.value.message

    def test_target_whitespace_trimmed(self, tmp_path: Path) -> None:
        local = tmp_path / "a.txt"
        local.write_text("a")
        assert read_local_file(local, " docs/a.txt ").target_path == "docs/a.txt"


class TestCommitActions:

    def test_build_action(self, tmp_path: Path) -> None:
        local = tmp_path / "a.txt"
        local.write_text("a")
        loaded = read_local_file(local)

        assert build_commit_action(loaded, exists=True).action == CommitActionType.UPDATE
        assert build_commit_action(loaded, exists=False).action == CommitActionType.CREATE

    def test_default_messages(self, tmp_path: Path) -> None:
        local = tmp_path / "a.txt"
        local.write_text("a")
        loaded = read_local_file(local)

        update = build_commit_action(loaded, exists=True)
        create = build_commit_action(loaded, exists=False)
        assert default_commit_message([update]) == "Update a.txt via github-x"
        assert default_commit_message([create]) == "Add a.txt via github-x"
        assert default_commit_message([update, create]) == "Update 2 files via github-x"


class TestCommitSingleFile:

    @pytest.fixture
    def readme(self, tmp_path: Path) -> Path:
        local = tmp_path / "README.md"
        local.write_text("# updated\n")
        return local

    @pytest.mark.asyncio
    async def test_updates_existing_file_on_default_branch(self, fake_github, readme: Path) -> None:
        async with fake_github.driver() as api:
            result = await commit_single_file(api, readme, "octo/hello")

        assert result.branch == "main"
        assert result.files == ["README.md"]
        assert fake_github.blobs["blob1"] == b"# updated\n"
        assert fake_github.created_commits[0]["message"] == "Update README.md via github-x"
        assert fake_github.branches["main"] == result.commit_sha

    @pytest.mark.asyncio
    async def test_target_path_and_ref(self, fake_github, readme: Path) -> None:
        fake_github.files[("dev", "docs/README.md")] = b"old"
        async with fake_github.driver() as api:
            result = await commit_single_file(
                api, readme, "octo/hello", "docs/README.md", ref="dev", message="Sync docs"
            )

        assert result.branch == "dev"
        assert fake_github.trees[0]["tree"][0]["path"] == "docs/README.md"
        assert fake_github.created_commits[0] == {
            "message": "Sync docs", "tree": "tree1", "parents": ["commit-dev"],
        }

    @pytest.mark.asyncio
    async def test_new_file_requires_force(self, fake_github, readme: Path) -> None:
        async with fake_github.driver() as api:
            with pytest.raises(CommitError) as exc_info:
                await commit_single_file(api, readme, "octo/hello", "new/README.md")

        assert "does not exist on branch 'main'" in exc_info.value.message
        assert fake_github.calls("POST") == []

    @pytest.mark.asyncio
    async def test_force_creates_new_file(self, fake_github, readme: Path) -> None:
        async with fake_github.driver() as api:
            await commit_single_file(api, readme, "octo/hello", "new/README.md", force=True)

        assert fake_github.created_commits[0]["message"] == "Add new/README.md via github-x"

    @pytest.mark.asyncio
    async def test_unknown_branch(self, fake_github, readme: Path) -> None:
        async with fake_github.driver() as api:
            with pytest.raises(BranchNotFoundError):
                await commit_single_file(api, readme, "octo/hello", ref="feature")

        assert fake_github.calls("POST") == []

    @pytest.mark.asyncio
    async def test_missing_local_file_fails_before_requests(self, fake_github, tmp_path: Path) -> None:
        async with fake_github.driver() as api:
            with pytest.raises(CommitError):
                await commit_single_file(api, tmp_path / "gone.txt", "octo/hello")

        assert fake_github.requests == []


class TestCommitFiles:

    @pytest.mark.asyncio
    async def test_multiple_files_single_commit(self, fake_github, tmp_path: Path) -> None:
        readme = tmp_path / "README.md"
        readme.write_text("one")
        guide = tmp_path / "guide.md"
        guide.write_text("two")

        async with fake_github.driver() as api:
            result = await commit_files(
                api, "octo/hello", [(readme, None), (guide, "docs/guide.md")]
            )

        assert result.files == ["README.md", "docs/guide.md"]
        assert len(fake_github.created_commits) == 1
        assert fake_github.created_commits[0]["message"] == "Update 2 files via github-x"
        assert len(fake_github.ref_updates) == 1

    @pytest.mark.asyncio
    async def test_no_files(self, fake_github) -> None:
        async with fake_github.driver() as api:
            with pytest.raises(CommitError):
                await commit_files(api, "octo/hello", [])
