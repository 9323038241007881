"""Version-control backends.

This subpackage provides one interface over git and jj, with production
implementations driving the CLIs and an in-memory fake for tests.
"""

from jj_starship.core.vcs.abc import VcsBackend
from jj_starship.core.vcs.fake import FakeBackend
from jj_starship.core.vcs.real_git import RealGitBackend
from jj_starship.core.vcs.real_jj import RealJjBackend
from jj_starship.core.vcs.types import (
    AncestorMatch,
    BackendKind,
    BookmarkRef,
    ChangeCentricStatus,
    ClassicStatus,
    RepositoryHandle,
    ResolvedSet,
    ResolverResult,
    StatusFlags,
    WorkingCopyIdentity,
)

__all__ = [
    "AncestorMatch",
    "BackendKind",
    "BookmarkRef",
    "ChangeCentricStatus",
    "ClassicStatus",
    "FakeBackend",
    "RealGitBackend",
    "RealJjBackend",
    "RepositoryHandle",
    "ResolvedSet",
    "ResolverResult",
    "StatusFlags",
    "VcsBackend",
    "WorkingCopyIdentity",
]
