"""Tests for backend-agnostic value types."""

from jj_starship.core.vcs.types import BookmarkRef, WorkingCopyIdentity


def test_short_id_uses_configured_length() -> None:
    """short_id is the first id_length characters of full_id."""
    identity = WorkingCopyIdentity.from_full_id("0123456789abcdef", 8, commit_id="0123")

    assert identity.short_id == "01234567"
    assert identity.full_id == "0123456789abcdef"


def test_short_id_clamped_to_full_length() -> None:
    """A length longer than the id yields the whole id."""
    identity = WorkingCopyIdentity.from_full_id("abc", 40, commit_id="abc")

    assert identity.short_id == "abc"


def test_unique_prefix_clamped_to_short_id() -> None:
    """The highlighted prefix never exceeds what is displayed."""
    identity = WorkingCopyIdentity.from_full_id(
        "zzzzyyyy", 4, commit_id="c", unique_prefix_len=6
    )

    assert identity.unique_prefix_len == 4


def test_unique_prefix_defaults_to_short_id() -> None:
    """Without a known prefix the whole short id counts as unique."""
    identity = WorkingCopyIdentity.from_full_id("abcdef", 3, commit_id="c")

    assert identity.unique_prefix_len == 3


def test_unborn_identity() -> None:
    """An unborn identity is empty and flagged as such."""
    identity = WorkingCopyIdentity.unborn()

    assert identity.is_unborn
    assert identity.short_id == ""
    assert not identity.is_conflicted


def test_bookmark_without_remote_is_never_unsynced() -> None:
    """Only a tracked remote can make a bookmark unsynced."""
    assert not BookmarkRef(name="main", target_commit="a", remote_ahead=True).is_unsynced


def test_bookmark_with_diverged_remote_is_unsynced() -> None:
    """A tracked remote at another commit is unsynced."""
    bookmark = BookmarkRef(
        name="main",
        target_commit="a",
        has_remote_tracking=True,
        remote_ahead=True,
        remote_target="b",
    )

    assert bookmark.is_unsynced
