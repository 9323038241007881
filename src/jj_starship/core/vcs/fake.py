"""Fake in-memory backend for testing."""

from jj_starship.core.errors import RepositoryError
from jj_starship.core.vcs.abc import VcsBackend
from jj_starship.core.vcs.types import (
    AncestorMatch,
    BackendKind,
    BookmarkRef,
    ChangeCentricStatus,
    ClassicStatus,
    StatusFlags,
    WorkingCopyIdentity,
)


class FakeBackend(VcsBackend):
    """In-memory fake implementation for testing.

    The commit graph is given as a mapping of commit id to parent ids. State
    is provided via constructor; parent lookups are recorded for assertions.
    """

    def __init__(
        self,
        *,
        kind: BackendKind = BackendKind.CHANGE_CENTRIC,
        identity: WorkingCopyIdentity | None = None,
        parents: dict[str, tuple[str, ...]] | None = None,
        bookmarks: list[BookmarkRef] | None = None,
        boundaries: set[str] | None = None,
        local_status: StatusFlags | None = None,
        ahead_behind: dict[str, tuple[int, int]] | None = None,
        identity_error: str | None = None,
        bookmarks_error: str | None = None,
    ) -> None:
        """Create FakeBackend.

        Args:
            kind: Backend flavor to report
            identity: Working-copy identity (defaults to commit "wc")
            parents: Commit graph, commit id -> parent ids
            bookmarks: Local bookmarks
            boundaries: Commits the ancestry walk must not expand past
            local_status: Working-copy-local status flags
            ahead_behind: remote target -> (ahead, behind), git flavor only
            identity_error: If set, identity() raises RepositoryError with it
            bookmarks_error: If set, enumerate_bookmarks() raises RepositoryError with it
        """
        self._kind = kind
        self._identity = identity or WorkingCopyIdentity.from_full_id(
            "wc", 8, commit_id="wc"
        )
        self._parents = parents or {}
        self._bookmarks = bookmarks or []
        self._boundaries = boundaries or set()
        self._local_status = local_status
        self._ahead_behind = ahead_behind or {}
        self._identity_error = identity_error
        self._bookmarks_error = bookmarks_error
        self._parent_lookups: list[str] = []

    @property
    def parent_lookups(self) -> list[str]:
        """Commits whose parents were requested, in order, for test assertions."""
        return self._parent_lookups.copy()

    @property
    def kind(self) -> BackendKind:
        return self._kind

    def identity(self) -> WorkingCopyIdentity:
        if self._identity_error is not None:
            raise RepositoryError(self._identity_error)
        return self._identity

    def enumerate_bookmarks(self) -> list[BookmarkRef]:
        if self._bookmarks_error is not None:
            raise RepositoryError(self._bookmarks_error)
        return list(self._bookmarks)

    def parent_ids(self, commit_id: str) -> tuple[str, ...]:
        self._parent_lookups.append(commit_id)
        return self._parents.get(commit_id, ())

    def is_traversal_boundary(self, commit_id: str) -> bool:
        return commit_id in self._boundaries

    def status_flags(
        self, identity: WorkingCopyIdentity, closest: AncestorMatch | None
    ) -> StatusFlags:
        if self._kind == BackendKind.CLASSIC:
            local = self._local_status if isinstance(self._local_status, ClassicStatus) else None
            base = local or ClassicStatus(conflicted=identity.is_conflicted)
            if identity.is_unborn:
                return ClassicStatus()
            ahead, behind = 0, 0
            if closest is not None and closest.bookmark.remote_target is not None:
                ahead, behind = self._ahead_behind.get(closest.bookmark.remote_target, (0, 0))
            return ClassicStatus(
                conflicted=base.conflicted,
                staged=base.staged,
                modified=base.modified,
                untracked=base.untracked,
                deleted=base.deleted,
                ahead=ahead,
                behind=behind,
            )

        local_cc = (
            self._local_status if isinstance(self._local_status, ChangeCentricStatus) else None
        )
        base_cc = local_cc or ChangeCentricStatus(conflicted=identity.is_conflicted)
        unsynced = closest is not None and closest.bookmark.is_unsynced
        return ChangeCentricStatus(
            conflicted=base_cc.conflicted,
            empty_description=base_cc.empty_description,
            divergent=base_cc.divergent,
            unsynced=unsynced,
        )
