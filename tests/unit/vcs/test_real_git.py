"""Tests for the git backend.

Parsers are tested on literal command output; the backend itself runs with
run_subprocess_with_context patched out.
"""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from jj_starship.core.errors import RepositoryError
from jj_starship.core.vcs.real_git import (
    FileStatus,
    RealGitBackend,
    parse_parent_listing,
    parse_porcelain_status,
    parse_ref_listing,
)
from jj_starship.core.vcs.types import (
    AncestorMatch,
    BookmarkRef,
    ClassicStatus,
    WorkingCopyIdentity,
)

REPO = Path("/repo")
HEAD = "1111111111111111111111111111111111111111"
PARENT = "2222222222222222222222222222222222222222"
ORIGIN_MAIN = "3333333333333333333333333333333333333333"


def completed(
    stdout: str = "", returncode: int = 0, stderr: str = ""
) -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class ScriptedGit:
    """Stand-in for run_subprocess_with_context keyed by git subcommand."""

    def __init__(self, responses: dict[str, subprocess.CompletedProcess[str]]) -> None:
        self._responses = responses
        self.commands: list[list[str]] = []

    def __call__(self, cmd, operation_context, cwd=None, timeout=None, check=True, **kwargs):
        self.commands.append(list(cmd))
        args = [arg for arg in cmd[1:] if arg != "--no-optional-locks"]
        return self._responses[args[0]]


# Parsing


def test_parse_porcelain_clean() -> None:
    """Empty output means a clean tree."""
    assert parse_porcelain_status("") == FileStatus()


def test_parse_porcelain_all_flags() -> None:
    """Each porcelain code maps to its flag."""
    output = "\n".join(
        [
            "M  staged.py",
            " M modified.py",
            "?? new.py",
            " D gone.py",
            "UU conflict.py",
            "!! ignored.log",
        ]
    )

    status = parse_porcelain_status(output)

    assert status == FileStatus(
        conflicted=True, staged=True, modified=True, untracked=True, deleted=True
    )


def test_parse_porcelain_staged_deletion_is_staged_and_deleted() -> None:
    """'D ' is both a staged change and a deletion."""
    status = parse_porcelain_status("D  removed.py")

    assert status.staged
    assert status.deleted
    assert not status.modified


def test_parse_porcelain_ignored_only() -> None:
    """Ignored files set no flag."""
    assert parse_porcelain_status("!! build/") == FileStatus()


def test_parse_ref_listing_resolves_upstream() -> None:
    """A local branch picks up its upstream target from the same listing."""
    output = "\n".join(
        [
            f"refs/heads/main\0{HEAD}\0refs/remotes/origin/main",
            f"refs/heads/scratch\0{PARENT}\0",
            f"refs/remotes/origin/main\0{ORIGIN_MAIN}\0",
        ]
    )

    bookmarks = parse_ref_listing(output)

    assert bookmarks == [
        BookmarkRef(
            name="main",
            target_commit=HEAD,
            has_remote_tracking=True,
            remote_ahead=True,
            remote_target=ORIGIN_MAIN,
        ),
        BookmarkRef(name="scratch", target_commit=PARENT),
    ]


def test_parse_ref_listing_synced_upstream() -> None:
    """An upstream at the same commit is tracked but not ahead."""
    output = "\n".join(
        [
            f"refs/heads/main\0{HEAD}\0refs/remotes/origin/main",
            f"refs/remotes/origin/main\0{HEAD}\0",
        ]
    )

    (bookmark,) = parse_ref_listing(output)

    assert bookmark.has_remote_tracking
    assert not bookmark.remote_ahead
    assert not bookmark.is_unsynced


def test_parse_ref_listing_missing_upstream_ref() -> None:
    """An upstream whose ref is gone counts as untracked."""
    (bookmark,) = parse_ref_listing(f"refs/heads/feat\0{HEAD}\0refs/remotes/origin/feat")

    assert not bookmark.has_remote_tracking
    assert bookmark.remote_target is None


def test_parse_ref_listing_keeps_slashes_in_names() -> None:
    """Only the refs/heads/ prefix is removed."""
    (bookmark,) = parse_ref_listing(f"refs/heads/me/feat-x\0{HEAD}\0")

    assert bookmark.name == "me/feat-x"


def test_parse_parent_listing_handles_merges_and_roots() -> None:
    """Each line is a commit followed by its parents."""
    output = f"{HEAD} {PARENT} {ORIGIN_MAIN}\n{PARENT}\n"

    assert parse_parent_listing(output) == {HEAD: (PARENT, ORIGIN_MAIN), PARENT: ()}


# Backend


def test_identity_reads_head() -> None:
    """HEAD becomes the commit id and a clamped short id."""
    git = ScriptedGit({"rev-parse": completed(f"{HEAD}\n"), "status": completed("")})
    with patch("jj_starship.core.vcs.real_git.run_subprocess_with_context", git):
        backend = RealGitBackend(REPO, id_length=7)
        identity = backend.identity()

    assert identity.commit_id == HEAD
    assert identity.short_id == "1111111"
    assert not identity.is_conflicted


def test_identity_conflicted_from_status() -> None:
    """Unmerged paths mark the working copy conflicted."""
    git = ScriptedGit({"rev-parse": completed(f"{HEAD}\n"), "status": completed("UU a.py\n")})
    with patch("jj_starship.core.vcs.real_git.run_subprocess_with_context", git):
        identity = RealGitBackend(REPO, id_length=8).identity()

    assert identity.is_conflicted


def test_identity_unborn_head() -> None:
    """rev-parse failing silently means no commits yet."""
    git = ScriptedGit({"rev-parse": completed("", returncode=1)})
    with patch("jj_starship.core.vcs.real_git.run_subprocess_with_context", git):
        identity = RealGitBackend(REPO, id_length=8).identity()

    assert identity.is_unborn


def test_identity_failure_with_stderr_raises() -> None:
    """rev-parse failing with an error message is a real failure."""
    git = ScriptedGit(
        {"rev-parse": completed("", returncode=128, stderr="fatal: not a git repository")}
    )
    with patch("jj_starship.core.vcs.real_git.run_subprocess_with_context", git):
        backend = RealGitBackend(REPO, id_length=8)
        with pytest.raises(RepositoryError, match="not a git repository"):
            backend.identity()


def test_ancestors_prefetch_graph_in_one_command() -> None:
    """The walk reads the nearby graph once instead of once per commit."""
    git = ScriptedGit({"rev-list": completed(f"{HEAD} {PARENT}\n{PARENT}\n")})
    with patch("jj_starship.core.vcs.real_git.run_subprocess_with_context", git):
        backend = RealGitBackend(REPO, id_length=8)
        walked = list(backend.ancestors_of(HEAD, max_depth=3))

    assert walked == [(HEAD, 0), (PARENT, 1)]
    assert len(git.commands) == 1
    assert git.commands[0][:3] == ["git", "rev-list", "--parents"]
    assert git.commands[0][-1] == HEAD


def test_ancestors_depth_zero_runs_nothing() -> None:
    """max_depth 0 needs no graph."""
    git = ScriptedGit({})
    with patch("jj_starship.core.vcs.real_git.run_subprocess_with_context", git):
        walked = list(RealGitBackend(REPO, id_length=8).ancestors_of(HEAD, max_depth=0))

    assert walked == [(HEAD, 0)]
    assert git.commands == []


def test_status_flags_with_ahead_behind() -> None:
    """Ahead/behind come from rev-list --left-right against the remote target."""
    git = ScriptedGit(
        {
            "status": completed(" M a.py\n?? b.py\n"),
            "rev-list": completed("1\t3\n"),
        }
    )
    closest = AncestorMatch(
        bookmark=BookmarkRef(
            name="main",
            target_commit=HEAD,
            has_remote_tracking=True,
            remote_ahead=True,
            remote_target=ORIGIN_MAIN,
        ),
        distance=0,
    )
    with patch("jj_starship.core.vcs.real_git.run_subprocess_with_context", git):
        backend = RealGitBackend(REPO, id_length=8)
        identity = WorkingCopyIdentity.from_full_id(HEAD, 8, commit_id=HEAD)
        status = backend.status_flags(identity, closest)

    assert status == ClassicStatus(modified=True, untracked=True, ahead=3, behind=1)
    assert ["git", "rev-list", "--left-right", "--count", f"{ORIGIN_MAIN}...{HEAD}"] in git.commands


def test_status_runs_without_optional_locks() -> None:
    """git status never takes the index lock."""
    git = ScriptedGit({"rev-parse": completed(f"{HEAD}\n"), "status": completed("")})
    with patch("jj_starship.core.vcs.real_git.run_subprocess_with_context", git):
        RealGitBackend(REPO, id_length=8).identity()

    status_cmd = next(cmd for cmd in git.commands if "status" in cmd)
    assert status_cmd[:2] == ["git", "--no-optional-locks"]
