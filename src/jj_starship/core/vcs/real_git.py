"""Production git backend using subprocess.

Every command is read-only; `git status` runs with --no-optional-locks so a
prompt redraw never takes the index lock.
"""

import logging
import subprocess
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from jj_starship.core.errors import RepositoryError
from jj_starship.core.subprocess import run_subprocess_with_context
from jj_starship.core.vcs.abc import VcsBackend
from jj_starship.core.vcs.types import (
    AncestorMatch,
    BackendKind,
    BookmarkRef,
    ClassicStatus,
    StatusFlags,
    WorkingCopyIdentity,
)

logger = logging.getLogger(__name__)

CONFLICT_CODES = frozenset({"DD", "AU", "UD", "UA", "DU", "AA", "UU"})
STAGED_CODES = frozenset("MADRCT")
MODIFIED_CODES = frozenset("MT")

# Commits fetched per depth level when prefetching the ancestry graph
PREFETCH_COMMITS_PER_LEVEL = 16


@dataclass(frozen=True)
class FileStatus:
    """Working-tree file flags parsed from porcelain status."""

    conflicted: bool = False
    staged: bool = False
    modified: bool = False
    untracked: bool = False
    deleted: bool = False


def parse_porcelain_status(output: str) -> FileStatus:
    """Parse `git status --porcelain` (v1) output into file flags."""
    conflicted = staged = modified = untracked = deleted = False

    for line in output.splitlines():
        if len(line) < 2:
            continue

        status_code = line[:2]
        if status_code == "??":
            untracked = True
            continue
        if status_code == "!!":
            continue
        if status_code in CONFLICT_CODES:
            conflicted = True
            continue

        index_code, worktree_code = status_code[0], status_code[1]
        if index_code in STAGED_CODES:
            staged = True
        if worktree_code in MODIFIED_CODES:
            modified = True
        if index_code == "D" or worktree_code == "D":
            deleted = True

    return FileStatus(
        conflicted=conflicted,
        staged=staged,
        modified=modified,
        untracked=untracked,
        deleted=deleted,
    )


def parse_ref_listing(output: str) -> list[BookmarkRef]:
    """Parse NUL-separated `git for-each-ref` output into local branches.

    Each line is `refname NUL objectname NUL upstream-refname` and covers both
    refs/heads and refs/remotes, so upstream targets resolve without another
    command.
    """
    objects_by_ref: dict[str, str] = {}
    locals_: list[tuple[str, str, str]] = []

    for line in output.splitlines():
        parts = line.split("\0")
        if len(parts) != 3:
            continue
        refname, objectname, upstream = parts
        objects_by_ref[refname] = objectname
        if refname.startswith("refs/heads/"):
            locals_.append((refname.removeprefix("refs/heads/"), objectname, upstream))

    bookmarks: list[BookmarkRef] = []
    for name, target, upstream in locals_:
        remote_target = objects_by_ref.get(upstream) if upstream else None
        bookmarks.append(
            BookmarkRef(
                name=name,
                target_commit=target,
                has_remote_tracking=remote_target is not None,
                remote_ahead=remote_target is not None and remote_target != target,
                remote_target=remote_target,
            )
        )
    return bookmarks


def parse_parent_listing(output: str) -> dict[str, tuple[str, ...]]:
    """Parse `git rev-list --parents` output into commit -> parents."""
    parents: dict[str, tuple[str, ...]] = {}
    for line in output.splitlines():
        ids = line.split()
        if ids:
            parents[ids[0]] = tuple(ids[1:])
    return parents


class RealGitBackend(VcsBackend):
    """Production implementation using the git CLI."""

    def __init__(self, root: Path, *, id_length: int, timeout: float | None = None) -> None:
        """Create a backend bound to one repository.

        Args:
            root: Repository root (directory containing .git)
            id_length: Displayed commit hash length
            timeout: Per-command timeout in seconds
        """
        self._root = root
        self._id_length = id_length
        self._timeout = timeout
        self._parents: dict[str, tuple[str, ...]] = {}
        self._file_status: FileStatus | None = None

    @property
    def kind(self) -> BackendKind:
        return BackendKind.CLASSIC

    def _git(
        self, args: list[str], operation_context: str, *, check: bool = True
    ) -> subprocess.CompletedProcess[str]:
        return run_subprocess_with_context(
            ["git", *args],
            operation_context=operation_context,
            cwd=self._root,
            timeout=self._timeout,
            check=check,
        )

    def _get_file_status(self) -> FileStatus:
        if self._file_status is None:
            result = self._git(
                ["--no-optional-locks", "status", "--porcelain", "--untracked-files=normal"],
                "get file status",
            )
            self._file_status = parse_porcelain_status(result.stdout)
        return self._file_status

    def identity(self) -> WorkingCopyIdentity:
        result = self._git(
            ["rev-parse", "--verify", "--quiet", "HEAD^{commit}"],
            "resolve HEAD",
            check=False,
        )
        if result.returncode != 0:
            # --quiet exits 1 without output when HEAD has no commit yet
            if result.stderr.strip():
                raise RepositoryError(f"Failed to resolve HEAD: {result.stderr.strip()}")
            logger.debug("HEAD is unborn in %s", self._root)
            return WorkingCopyIdentity.unborn()

        head = result.stdout.strip()
        return WorkingCopyIdentity.from_full_id(
            head,
            self._id_length,
            commit_id=head,
            is_conflicted=self._get_file_status().conflicted,
        )

    def enumerate_bookmarks(self) -> list[BookmarkRef]:
        result = self._git(
            [
                "for-each-ref",
                "--format=%(refname)%00%(objectname)%00%(upstream)",
                "refs/heads",
                "refs/remotes",
            ],
            "list branches",
        )
        return parse_ref_listing(result.stdout)

    def ancestors_of(self, commit_id: str, max_depth: int) -> Iterator[tuple[str, int]]:
        """Walk ancestors breadth-first, prefetching the nearby graph first."""
        if max_depth > 0 and commit_id not in self._parents:
            window = (max_depth + 1) * PREFETCH_COMMITS_PER_LEVEL
            result = self._git(
                ["rev-list", "--parents", f"--max-count={window}", commit_id],
                "read commit graph",
            )
            self._parents.update(parse_parent_listing(result.stdout))
        yield from super().ancestors_of(commit_id, max_depth)

    def parent_ids(self, commit_id: str) -> tuple[str, ...]:
        if commit_id not in self._parents:
            result = self._git(
                ["rev-list", "--parents", "--max-count=1", commit_id],
                f"read parents of {commit_id}",
            )
            self._parents.update(parse_parent_listing(result.stdout))
        return self._parents.get(commit_id, ())

    def is_traversal_boundary(self, commit_id: str) -> bool:
        return False

    def get_ahead_behind(self, head: str, remote_target: str) -> tuple[int, int]:
        """Count commits ahead of and behind the remote tracking target."""
        result = self._git(
            ["rev-list", "--left-right", "--count", f"{remote_target}...{head}"],
            "count ahead/behind commits",
        )
        parts = result.stdout.strip().split()
        if len(parts) == 2:
            behind = int(parts[0])
            ahead = int(parts[1])
            return ahead, behind
        return 0, 0

    def status_flags(
        self, identity: WorkingCopyIdentity, closest: AncestorMatch | None
    ) -> StatusFlags:
        if identity.is_unborn:
            return ClassicStatus()

        files = self._get_file_status()
        ahead, behind = 0, 0
        if closest is not None and closest.bookmark.remote_target is not None:
            ahead, behind = self.get_ahead_behind(
                identity.commit_id, closest.bookmark.remote_target
            )

        return ClassicStatus(
            conflicted=files.conflicted,
            staged=files.staged,
            modified=files.modified,
            untracked=files.untracked,
            deleted=files.deleted,
            ahead=ahead,
            behind=behind,
        )
