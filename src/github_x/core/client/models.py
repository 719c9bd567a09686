"""
Request and result models for the commit endpoints.

The field names follow the GitHub git data API so that payloads can be
produced with ``model_dump``.
"""

import base64
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class CommitActionType(str, Enum):
    """Kind of change a commit action applies to a file."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class ContentEncoding(str, Enum):
    """Encoding of ``CommitAction.content``."""
    TEXT = "text"
    BASE64 = "base64"


class CommitAction(BaseModel):
    """A single file change inside a commit."""
    action: CommitActionType = CommitActionType.UPDATE
    file_path: str
    content: str = ""
    encoding: ContentEncoding = ContentEncoding.TEXT

    @field_validator("file_path")
    @classmethod
    def validate_file_path(cls, v: str) -> str:
        path = v.strip().strip("/")
        if not path:
            raise ValueError("file_path must not be empty")
        return path

    def content_as_base64(self) -> str:
        """Content encoded for the blob endpoint."""
        if self.encoding == ContentEncoding.BASE64:
            return self.content
        return base64.b64encode(self.content.encode("utf-8")).decode("ascii")


class CommitObject(BaseModel):
    """A multi-file commit against one branch."""
    branch: Optional[str] = None
    commit_message: str
    actions: List[CommitAction] = Field(min_length=1)


class BlobRequest(BaseModel):
    """Payload for ``POST /git/blobs``."""
    content: str
    encoding: str = "base64"


class TreeEntry(BaseModel):
    """One entry of a ``POST /git/trees`` payload.

    ``sha`` is None for deletions; it must still be serialized as ``null``.
    """
    path: str
    mode: str = "100644"
    type: str = "blob"
    sha: Optional[str] = None


class TreeRequest(BaseModel):
    """Payload for ``POST /git/trees``."""
    base_tree: str
    tree: List[TreeEntry]


class CommitRequest(BaseModel):
    """Payload for ``POST /git/commits``."""
    message: str
    tree: str
    parents: List[str]


class RefUpdateRequest(BaseModel):
    """Payload for ``PATCH /git/refs/heads/<branch>``."""
    sha: str
    force: bool = False


class CommitResult(BaseModel):
    """Outcome of the atomic commit sequence."""
    branch: str
    parent_sha: str
    tree_sha: str
    commit_sha: str
    ref: str
    files: List[str] = Field(default_factory=list)
