"""Repository URL parsing."""

from __future__ import annotations

import re

from ..core.exceptions import InvalidReferenceError
from ..domain.models import RepositoryRef

# <scheme://>?<host>/<owner>/<name>
_REPOSITORY_PATTERN = re.compile(
    r"(?:[A-Za-z][A-Za-z0-9+.-]*://)?"
    r"(?P<host>[^/\s?#]+)/(?P<owner>[^/\s?#]+)/(?P<name>[^/\s?#]+)"
)
_GIT_SUFFIX = ".git"


def parse_repository_url(url: str) -> RepositoryRef:
    """
    Extract the owner and repository name from a repository URL.

    Any host is accepted; a trailing ``.git`` on the name is removed.

    Args:
        url: User supplied repository URL

    Returns:
        RepositoryRef: Parsed owner/name pair

    Raises:
        InvalidReferenceError: If the URL has no ``host/owner/name`` path

    Example:
        >>> parse_repository_url("https://github.com/octo/reef.git").full_name
        'octo/reef'
    """
    match = _REPOSITORY_PATTERN.search(url or "")
    if match is None:
        raise InvalidReferenceError(
            "Invalid repository URL format. Expected: https://github.com/owner/repo",
            url=url,
        )

    name = match.group("name")
    if name.endswith(_GIT_SUFFIX):
        name = name[: -len(_GIT_SUFFIX)]
    if not name:
        raise InvalidReferenceError(
            "Invalid repository URL format. Repository name is empty", url=url
        )

    return RepositoryRef(owner=match.group("owner"), name=name)
