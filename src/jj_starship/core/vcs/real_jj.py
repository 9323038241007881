"""Production jj backend using the jj CLI.

Commands run with --ignore-working-copy so a prompt redraw never snapshots
the working copy or writes a new operation; the state shown is the one
recorded by the last jj command.
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
    ChangeCentricStatus,
    StatusFlags,
    WorkingCopyIdentity,
)

logger = logging.getLogger(__name__)

# The pseudo-remote jj uses to mirror git refs in colocated repositories
GIT_PSEUDO_REMOTE = "git"

FIELD_SEP = "\t"

WORKING_COPY_TEMPLATE = (
    'change_id ++ "\\t" ++ commit_id ++ "\\t" ++ change_id.shortest().prefix()'
    ' ++ "\\t" ++ if(conflict, "1", "0")'
    ' ++ "\\t" ++ if(divergent, "1", "0")'
    ' ++ "\\t" ++ if(description.trim(), "0", "1") ++ "\\n"'
)

BOOKMARK_TEMPLATE = (
    'name ++ "\\t" ++ if(remote, remote, "")'
    ' ++ "\\t" ++ if(normal_target, normal_target.commit_id(), "") ++ "\\n"'
)

GRAPH_TEMPLATE = (
    'commit_id ++ "\\t" ++ if(immutable, "1", "0")'
    ' ++ "\\t" ++ parents.map(|c| c.commit_id()).join(" ") ++ "\\n"'
)


@dataclass(frozen=True)
class WorkingCopyRecord:
    """Fields read from the working-copy commit in one jj call."""

    change_id: str
    commit_id: str
    shortest_prefix: str
    conflict: bool
    divergent: bool
    empty_description: bool


@dataclass(frozen=True)
class GraphNode:
    """One commit of the prefetched ancestry graph."""

    parents: tuple[str, ...]
    immutable: bool


def parse_working_copy(output: str) -> WorkingCopyRecord:
    """Parse WORKING_COPY_TEMPLATE output.

    Raises:
        RepositoryError: If the output does not have the expected shape
    """
    lines = [line for line in output.splitlines() if line]
    if not lines:
        raise RepositoryError("jj returned no working-copy commit")

    fields = lines[0].split(FIELD_SEP)
    if len(fields) != 6:
        raise RepositoryError(f"Unexpected working-copy output from jj: {lines[0]!r}")

    change_id, commit_id, shortest_prefix, conflict, divergent, empty_description = fields
    return WorkingCopyRecord(
        change_id=change_id,
        commit_id=commit_id,
        shortest_prefix=shortest_prefix,
        conflict=conflict == "1",
        divergent=divergent == "1",
        empty_description=empty_description == "1",
    )


def parse_bookmark_listing(output: str) -> list[BookmarkRef]:
    """Parse BOOKMARK_TEMPLATE output from `jj bookmark list --all-remotes`.

    Local rows have an empty remote. Conflicted or deleted local bookmarks
    (no single target) are skipped. A bookmark counts as synced when any
    non-git remote points at the same commit as the local bookmark.
    """
    local_targets: dict[str, str] = {}
    remote_targets: dict[str, list[str]] = {}

    for line in output.splitlines():
        fields = line.split(FIELD_SEP)
        if len(fields) != 3:
            continue
        name, remote, target = fields
        if not remote:
            if target:
                local_targets[name] = target
        elif remote != GIT_PSEUDO_REMOTE and target:
            remote_targets.setdefault(name, []).append(target)

    bookmarks: list[BookmarkRef] = []
    for name, target in local_targets.items():
        remotes = remote_targets.get(name, [])
        if not remotes:
            bookmarks.append(BookmarkRef(name=name, target_commit=target))
            continue

        synced = target in remotes
        bookmarks.append(
            BookmarkRef(
                name=name,
                target_commit=target,
                has_remote_tracking=True,
                remote_ahead=not synced,
                remote_target=target if synced else remotes[0],
            )
        )
    return bookmarks


def parse_graph(output: str) -> dict[str, GraphNode]:
    """Parse GRAPH_TEMPLATE output into commit -> GraphNode."""
    graph: dict[str, GraphNode] = {}
    for line in output.splitlines():
        fields = line.split(FIELD_SEP)
        if len(fields) != 3 or not fields[0]:
            continue
        commit_id, immutable, parents = fields
        graph[commit_id] = GraphNode(parents=tuple(parents.split()), immutable=immutable == "1")
    return graph


class RealJjBackend(VcsBackend):
    """Production implementation using the jj CLI."""

    def __init__(self, root: Path, *, id_length: int, timeout: float | None = None) -> None:
        """Create a backend bound to one workspace.

        Args:
            root: Workspace root (directory containing .jj)
            id_length: Displayed change id length
            timeout: Per-command timeout in seconds
        """
        self._root = root
        self._id_length = id_length
        self._timeout = timeout
        self._graph: dict[str, GraphNode] = {}
        self._working_copy: WorkingCopyRecord | None = None

    @property
    def kind(self) -> BackendKind:
        return BackendKind.CHANGE_CENTRIC

    def _jj(self, args: list[str], operation_context: str) -> subprocess.CompletedProcess[str]:
        return run_subprocess_with_context(
            [
                "jj",
                "--repository",
                str(self._root),
                "--ignore-working-copy",
                "--no-pager",
                "--color",
                "never",
                *args,
            ],
            operation_context=operation_context,
            cwd=self._root,
            timeout=self._timeout,
        )

    def _log(self, revset: str, template: str, operation_context: str) -> str:
        return self._jj(
            ["log", "--no-graph", "-r", revset, "-T", template], operation_context
        ).stdout

    def _get_working_copy(self) -> WorkingCopyRecord:
        if self._working_copy is None:
            output = self._log("@", WORKING_COPY_TEMPLATE, "read working-copy commit")
            self._working_copy = parse_working_copy(output)
        return self._working_copy

    def identity(self) -> WorkingCopyIdentity:
        record = self._get_working_copy()
        return WorkingCopyIdentity.from_full_id(
            record.change_id,
            self._id_length,
            commit_id=record.commit_id,
            is_conflicted=record.conflict,
            unique_prefix_len=len(record.shortest_prefix),
        )

    def enumerate_bookmarks(self) -> list[BookmarkRef]:
        result = self._jj(
            ["bookmark", "list", "--all-remotes", "-T", BOOKMARK_TEMPLATE],
            "list bookmarks",
        )
        return parse_bookmark_listing(result.stdout)

    def ancestors_of(self, commit_id: str, max_depth: int) -> Iterator[tuple[str, int]]:
        """Walk ancestors breadth-first over a graph fetched in one jj call.

        ancestors(x, n) covers exactly the commits within n - 1 hops of x.
        """
        if max_depth > 0 and commit_id not in self._graph:
            output = self._log(
                f"ancestors({commit_id}, {max_depth + 1})", GRAPH_TEMPLATE, "read commit graph"
            )
            self._graph.update(parse_graph(output))
        yield from super().ancestors_of(commit_id, max_depth)

    def _node(self, commit_id: str) -> GraphNode:
        if commit_id not in self._graph:
            output = self._log(commit_id, GRAPH_TEMPLATE, f"read commit {commit_id}")
            self._graph.update(parse_graph(output))
        node = self._graph.get(commit_id)
        if node is None:
            raise RepositoryError(f"Commit {commit_id} not found")
        return node

    def parent_ids(self, commit_id: str) -> tuple[str, ...]:
        return self._node(commit_id).parents

    def is_traversal_boundary(self, commit_id: str) -> bool:
        return self._node(commit_id).immutable

    def status_flags(
        self, identity: WorkingCopyIdentity, closest: AncestorMatch | None
    ) -> StatusFlags:
        record = self._get_working_copy()
        return ChangeCentricStatus(
            conflicted=record.conflict,
            empty_description=record.empty_description,
            divergent=record.divergent,
            unsynced=closest is not None and closest.bookmark.is_unsynced,
        )
