"""
Project identifier resolution.

Maps the identifiers users type on the command line (``owner/repo``, web or
API URLs, SSH remotes) to the ``owner/repo`` path used by the REST API.
"""

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

_SSH_REMOTE = re.compile(r"^[\w.-]+@(?P<host>[\w.-]+):(?P<path>.+)$")
_SEGMENT = re.compile(r"^[A-Za-z0-9_.-]+$")


@dataclass(frozen=True)
class ResolvedIdentifier:
    """Result of resolving a project identifier."""
    identifier: str
    path: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.path is not None


def trim_trailing_slash(value: str) -> str:
    return value.rstrip("/")


def trim_slashes(value: str) -> str:
    return value.strip("/")


def normalize_base_url(url: str) -> str:
    """Normalize a base URL to an https URL without trailing slash."""
    base = trim_trailing_slash(url.strip())
    if base.startswith("http://"):
        base = "https://" + base[len("http://"):]
    if not base.startswith("https://"):
        base = f"https://{base}"
    return base


def _hosts_for(base_url: str) -> set:
    """Hosts that identify the same server as ``base_url``.

    ``api.github.com`` serves ``github.com``; enterprise servers use one host
    for both.
    """
    host = (urlparse(normalize_base_url(base_url)).hostname or "").lower()
    hosts = {host}
    if host.startswith("api."):
        hosts.add(host[len("api."):])
    return hosts


def _owner_repo(path: str) -> Optional[str]:
    segments = [s for s in trim_slashes(path).split("/") if s]
    # API URLs carry the path below /repos or /api/v3/repos
    if segments[:2] == ["api", "v3"]:
        segments = segments[2:]
    if segments[:1] == ["repos"] and len(segments) > 2:
        segments = segments[1:]
    if len(segments) < 2:
        return None
    owner, repo = segments[0], segments[1]
    if repo.endswith(".git"):
        repo = repo[:-len(".git")]
    if not (_SEGMENT.match(owner) and _SEGMENT.match(repo)):
        return None
    return f"{owner}/{repo}"


def resolve_project_identifier(base_url: str, identifier: str) -> ResolvedIdentifier:
    """
    Resolve a human-supplied project identifier.

    Args:
        base_url: Base URL of the API the identifier belongs to
        identifier: ``owner/repo``, an http(s) URL or an SSH remote

    Returns:
        ResolvedIdentifier whose ``path`` is None when the identifier is invalid
    """
    raw = (identifier or "").strip()
    if not raw:
        return ResolvedIdentifier(identifier=identifier)

    ssh = _SSH_REMOTE.match(raw)
    if ssh:
        if ssh.group("host").lower() not in _hosts_for(base_url):
            return ResolvedIdentifier(identifier=identifier)
        return ResolvedIdentifier(identifier=identifier, path=_owner_repo(ssh.group("path")))

    if "://" in raw:
        parsed = urlparse(raw)
        if (parsed.hostname or "").lower() not in _hosts_for(base_url):
            return ResolvedIdentifier(identifier=identifier)
        return ResolvedIdentifier(identifier=identifier, path=_owner_repo(parsed.path))

    segments = [s for s in trim_slashes(raw).split("/") if s]
    if len(segments) != 2:
        return ResolvedIdentifier(identifier=identifier)
    return ResolvedIdentifier(identifier=identifier, path=_owner_repo(raw))
