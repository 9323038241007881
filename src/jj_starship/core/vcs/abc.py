"""Backend capability interface.

Architecture:
- VcsBackend: Abstract base class both backends satisfy
- RealGitBackend / RealJjBackend: Production implementations using subprocess
- FakeBackend: In-memory implementation over an explicit commit graph
"""

from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Iterator

from jj_starship.core.vcs.types import (
    AncestorMatch,
    BackendKind,
    BookmarkRef,
    StatusFlags,
    WorkingCopyIdentity,
)


class VcsBackend(ABC):
    """Abstract interface for repository queries.

    All implementations (real and fake) must implement this interface.
    Every method is read-only: no implementation may mutate repository state.
    """

    @property
    @abstractmethod
    def kind(self) -> BackendKind:
        """Backend flavor of this implementation."""
        ...

    @abstractmethod
    def identity(self) -> WorkingCopyIdentity:
        """Get the identity of the working-copy position.

        An unborn repository is a valid state and returns
        WorkingCopyIdentity.unborn() instead of failing.

        Raises:
            RepositoryError: If the working copy cannot be read
        """
        ...

    @abstractmethod
    def enumerate_bookmarks(self) -> list[BookmarkRef]:
        """List all local bookmarks/branches, in no particular order.

        Raises:
            RepositoryError: If reference metadata cannot be read
        """
        ...

    @abstractmethod
    def parent_ids(self, commit_id: str) -> tuple[str, ...]:
        """Get the parent commit ids of a commit (empty for a root commit).

        Raises:
            RepositoryError: If the commit cannot be read
        """
        ...

    @abstractmethod
    def is_traversal_boundary(self, commit_id: str) -> bool:
        """Whether the ancestry walk must not expand past this commit."""
        ...

    @abstractmethod
    def status_flags(
        self, identity: WorkingCopyIdentity, closest: AncestorMatch | None
    ) -> StatusFlags:
        """Derive status flags for the working copy.

        Args:
            identity: Identity previously returned by identity()
            closest: Closest resolved bookmark, or None when nothing resolved

        Returns:
            Backend-specific StatusFlags variant
        """
        ...

    def ancestors_of(self, commit_id: str, max_depth: int) -> Iterator[tuple[str, int]]:
        """Walk ancestors breadth-first.

        Yields (commit_id, depth) for the start commit at depth 0, then each
        strict ancestor up to max_depth inclusive. Each commit is yielded at
        most once, at the smallest depth it is reachable from. Parents of
        boundary commits are not expanded.

        Args:
            commit_id: Commit to start from
            max_depth: Maximum number of parent hops

        Yields:
            (commit_id, depth) tuples in breadth order
        """
        visited: set[str] = {commit_id}
        queue: deque[tuple[str, int]] = deque([(commit_id, 0)])

        while queue:
            current, depth = queue.popleft()
            yield current, depth

            if depth >= max_depth:
                continue
            if depth > 0 and self.is_traversal_boundary(current):
                continue

            for parent in self.parent_ids(current):
                if parent in visited:
                    continue
                visited.add(parent)
                queue.append((parent, depth + 1))
