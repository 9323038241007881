"""Backend-agnostic types for repository state resolution."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class BackendKind(Enum):
    """Version-control backend flavor."""

    CLASSIC = "git"
    CHANGE_CENTRIC = "jj"


@dataclass(frozen=True)
class RepositoryHandle:
    """Opaque reference to an open repository of a specific backend kind.

    Owned by the orchestrator for the duration of one invocation.
    """

    root: Path
    kind: BackendKind


@dataclass(frozen=True)
class WorkingCopyIdentity:
    """Identity of the working-copy position.

    Fields:
        short_id: Display prefix of full_id (configured length, clamped)
        full_id: Commit hash (git) or reverse-hex change id (jj); empty when unborn
        is_conflicted: Whether the working copy has unresolved conflicts
        commit_id: Commit the ancestry walk starts from; empty when unborn
        unique_prefix_len: Shortest unique prefix length of short_id
    """

    short_id: str
    full_id: str
    is_conflicted: bool
    commit_id: str
    unique_prefix_len: int

    @property
    def is_unborn(self) -> bool:
        """True for a repository with no commits yet."""
        return self.commit_id == ""

    @staticmethod
    def from_full_id(
        full_id: str,
        id_length: int,
        *,
        commit_id: str,
        is_conflicted: bool = False,
        unique_prefix_len: int | None = None,
    ) -> "WorkingCopyIdentity":
        """Build an identity, deriving short_id from full_id.

        Args:
            full_id: Full identifier string
            id_length: Configured display length
            commit_id: Commit hash the ancestry walk starts from
            is_conflicted: Conflict state of the working copy
            unique_prefix_len: Shortest unique prefix length (defaults to len(short_id))

        Returns:
            WorkingCopyIdentity with short_id clamped to full_id's length
        """
        short_id = full_id[: min(id_length, len(full_id))]
        prefix_len = len(short_id) if unique_prefix_len is None else unique_prefix_len
        return WorkingCopyIdentity(
            short_id=short_id,
            full_id=full_id,
            is_conflicted=is_conflicted,
            commit_id=commit_id,
            unique_prefix_len=min(prefix_len, len(short_id)),
        )

    @staticmethod
    def unborn() -> "WorkingCopyIdentity":
        """Placeholder identity for a repository without commits."""
        return WorkingCopyIdentity(
            short_id="", full_id="", is_conflicted=False, commit_id="", unique_prefix_len=0
        )


@dataclass(frozen=True)
class BookmarkRef:
    """A named reference (git branch or jj bookmark).

    remote_target is the commit id of the remote tracking target, if any.
    """

    name: str
    target_commit: str
    has_remote_tracking: bool = False
    remote_ahead: bool = False
    remote_target: str | None = None

    @property
    def is_unsynced(self) -> bool:
        """Tracked remote points somewhere other than the local target."""
        return self.has_remote_tracking and self.remote_ahead


@dataclass(frozen=True)
class AncestorMatch:
    """A bookmark resolved against the working copy.

    distance 0 means the bookmark sits on the working-copy commit; n > 0 means
    its target is found n parent hops above it.
    """

    bookmark: BookmarkRef
    distance: int

    @property
    def name(self) -> str:
        return self.bookmark.name


ResolvedSet = tuple[AncestorMatch, ...]


@dataclass(frozen=True)
class ClassicStatus:
    """Git working-copy status."""

    conflicted: bool = False
    staged: bool = False
    modified: bool = False
    untracked: bool = False
    deleted: bool = False
    ahead: int = 0
    behind: int = 0


@dataclass(frozen=True)
class ChangeCentricStatus:
    """jj working-copy status."""

    conflicted: bool = False
    empty_description: bool = False
    divergent: bool = False
    unsynced: bool = False


StatusFlags = ClassicStatus | ChangeCentricStatus


@dataclass(frozen=True)
class ResolverResult:
    """Final, backend-agnostic structure handed to output styling."""

    backend_kind: BackendKind
    identity: WorkingCopyIdentity
    resolved: ResolvedSet
    status: StatusFlags
    rendered_bookmarks: tuple[str, ...] = field(default=())
