"""Bounded ancestor-bookmark search.

Finds the named references nearest to the working-copy position by walking
ancestors breadth-first, up to a configured depth. The depth bound is the
latency control: a bookmark deeper than the bound is not reported.
"""

import logging
from collections.abc import Iterable

from jj_starship.core.vcs.abc import VcsBackend
from jj_starship.core.vcs.types import AncestorMatch, BookmarkRef, ResolvedSet

logger = logging.getLogger(__name__)


def order_matches(matches: Iterable[AncestorMatch]) -> ResolvedSet:
    """Sort matches by (distance, name), keeping the closest match per name."""
    closest_by_name: dict[str, AncestorMatch] = {}
    for match in matches:
        existing = closest_by_name.get(match.name)
        if existing is None or match.distance < existing.distance:
            closest_by_name[match.name] = match
    return tuple(sorted(closest_by_name.values(), key=lambda m: (m.distance, m.name)))


def resolve_ancestors(
    backend: VcsBackend,
    working_copy_commit: str,
    bookmarks: Iterable[BookmarkRef],
    max_depth: int,
) -> ResolvedSet:
    """Resolve bookmarks to their ancestor distance from the working copy.

    Args:
        backend: Backend supplying the commit graph
        working_copy_commit: Commit id of the working copy (empty when unborn)
        bookmarks: Candidate bookmarks, in any order
        max_depth: Maximum parent hops to search (0 = exact matches only)

    Returns:
        Matches ordered by distance, ties broken by bookmark name
    """
    if not working_copy_commit:
        return ()

    candidates = list(bookmarks)
    if max_depth == 0:
        return order_matches(
            AncestorMatch(bookmark=b, distance=0)
            for b in candidates
            if b.target_commit == working_copy_commit
        )

    by_target: dict[str, list[BookmarkRef]] = {}
    for bookmark in candidates:
        by_target.setdefault(bookmark.target_commit, []).append(bookmark)

    if not by_target:
        return ()

    # Stop early once every bookmark target has been seen
    depth_by_commit: dict[str, int] = {}
    found = 0
    for commit_id, depth in backend.ancestors_of(working_copy_commit, max_depth):
        depth_by_commit.setdefault(commit_id, depth)
        if commit_id in by_target:
            found += 1
            if found == len(by_target):
                break

    logger.debug(
        "Visited %d commits within depth %d for %d bookmarks",
        len(depth_by_commit),
        max_depth,
        len(candidates),
    )

    matches = [
        AncestorMatch(bookmark=bookmark, distance=depth_by_commit[target])
        for target, group in by_target.items()
        if target in depth_by_commit
        for bookmark in group
    ]
    return order_matches(matches)
