"""
Commit helper for github-x.

Turns local files into a CommitObject and hands it to the API driver's
atomic commit sequence.
"""

import base64
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from .. import PACKAGE_NAME
from .client.driver import GitHubApiDriver
from .client.errors import BranchNotFoundError, CommitError
from .client.identifiers import trim_slashes
from .client.models import (
    CommitAction,
    CommitActionType,
    CommitObject,
    CommitResult,
    ContentEncoding,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class LocalFile:
    """A local file read into memory, paired with its target path."""
    local_path: Path
    target_path: str
    content: str
    encoding: ContentEncoding


def read_local_file(local_file: PathLike, target_path: Optional[str] = None) -> LocalFile:
    """
    Read a local file for committing.

    UTF-8 files are sent as text; anything else is base64-encoded.

    Raises:
        CommitError: If the file does not exist or is not a regular file
    """
    path = Path(local_file)
    if not path.is_file():
        raise CommitError(f"Local file '{local_file}' does not exist or is not a file")

    target = trim_slashes(target_path.strip()) if target_path is not None else path.name
    if not target:
        raise CommitError(f"Invalid target path '{target_path}'")

    data = path.read_bytes()
    try:
        return LocalFile(path, target, data.decode("utf-8"), ContentEncoding.TEXT)
    except UnicodeDecodeError:
        return LocalFile(path, target, base64.b64encode(data).decode("ascii"), ContentEncoding.BASE64)


def build_commit_action(local: LocalFile, exists: bool) -> CommitAction:
    """Create an update action for an existing remote file, create otherwise."""
    return CommitAction(
        action=CommitActionType.UPDATE if exists else CommitActionType.CREATE,
        file_path=local.target_path,
        content=local.content,
        encoding=local.encoding,
    )


def default_commit_message(actions: Sequence[CommitAction]) -> str:
    if len(actions) == 1:
        action = actions[0]
        verb = "Add" if action.action == CommitActionType.CREATE else "Update"
        return f"{verb} {action.file_path} via {PACKAGE_NAME}"
    return f"Update {len(actions)} files via {PACKAGE_NAME}"


async def commit_files(
    api: GitHubApiDriver,
    project_identifier: str,
    files: Sequence[Tuple[PathLike, Optional[str]]],
    ref: Optional[str] = None,
    force: bool = False,
    message: Optional[str] = None,
) -> CommitResult:
    """
    Commit several local files to a branch as one commit.

    Args:
        api: API driver
        project_identifier: Target project
        files: ``(local_file, target_path)`` pairs; a None target uses the
            local file name
        ref: Target branch; the project's default branch if omitted
        force: Create target files that do not exist on the branch yet
        message: Commit message; generated if omitted

    Returns:
        CommitResult of the new commit

    Raises:
        CommitError: If a local file is missing, or a target file does not
            exist remotely and ``force`` is not set
        BranchNotFoundError: If the target branch does not exist
    """
    if not files:
        raise CommitError("No files to commit")

    # Local problems are reported before any request is made
    local_files = [read_local_file(local, target) for local, target in files]

    branch = ref or (await api.get_project(project_identifier))["default_branch"]
    if not await api.branch_exists(project_identifier, branch):
        raise BranchNotFoundError(branch, project_identifier)

    actions: List[CommitAction] = []
    for local in local_files:
        exists = await api.file_exists(project_identifier, local.target_path, branch)
        if not exists and not force:
            raise CommitError(
                f"File '{local.target_path}' does not exist on branch '{branch}' of project "
                f"'{project_identifier}'. Use --force to create it."
            )
        logger.debug(f"{'Updating' if exists else 'Creating'} '{local.target_path}' from '{local.local_path}'")
        actions.append(build_commit_action(local, exists))

    commit_object = CommitObject(
        branch=branch,
        commit_message=message or default_commit_message(actions),
        actions=actions,
    )
    return await api.post_commit(project_identifier, commit_object)


async def commit_single_file(
    api: GitHubApiDriver,
    local_file: PathLike,
    project_identifier: str,
    target_file: Optional[str] = None,
    ref: Optional[str] = None,
    force: bool = False,
    message: Optional[str] = None,
) -> CommitResult:
    """Commit one local file; see ``commit_files``."""
    return await commit_files(
        api,
        project_identifier,
        [(local_file, target_file)],
        ref=ref,
        force=force,
        message=message,
    )
