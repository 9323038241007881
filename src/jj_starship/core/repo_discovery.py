"""Repository discovery functionality.

Walks up from a starting path to find the nearest directory holding `.jj`
and/or `.git` metadata.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RepoLocation:
    """A repository root and which backends are present there.

    Both flags are true for a colocated repository.
    """

    root: Path
    classic_present: bool
    change_centric_present: bool


@dataclass(frozen=True)
class NoRepoSentinel:
    """Sentinel value indicating execution outside a repository.

    Used when the prompt runs in a directory with no `.git` or `.jj` up the
    tree. Callers check for this sentinel and render nothing.
    """

    message: str = "Not inside a git or jj repository"


def discover_repo_or_sentinel(cwd: Path) -> RepoLocation | NoRepoSentinel:
    """Walk up from `cwd` to the nearest directory containing `.jj` or `.git`.

    `.git` may be a directory (normal repository) or a file (linked worktree
    or submodule pointing at its gitdir); both count as a git repository.
    The nearest match wins, so a nested git repository inside a jj workspace
    is reported on its own.

    Args:
        cwd: Directory to start search from

    Returns:
        RepoLocation if inside a repository, NoRepoSentinel otherwise
    """
    if not cwd.exists():
        return NoRepoSentinel(message=f"Start path '{cwd}' does not exist")

    cur = cwd.resolve()
    for parent in [cur, *cur.parents]:
        jj_present = (parent / ".jj").is_dir()
        git_present = (parent / ".git").exists()
        if jj_present or git_present:
            logger.debug("Found repository at %s (git=%s, jj=%s)", parent, git_present, jj_present)
            return RepoLocation(
                root=parent, classic_present=git_present, change_centric_present=jj_present
            )

    return NoRepoSentinel(message="Not inside a git or jj repository (nothing found up the tree)")


def in_repo(cwd: Path) -> bool:
    """Whether `cwd` is inside a git or jj repository."""
    return isinstance(discover_repo_or_sentinel(cwd), RepoLocation)
