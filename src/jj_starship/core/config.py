"""Resolved configuration.

Built once at the CLI entry point from flags, environment variables and
defaults (click handles the flag-over-environment precedence). The core only
ever sees the resulting immutable Config.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TypeVar

from jj_starship.core.vcs.types import BackendKind

DEFAULT_ID_LENGTH = 8
DEFAULT_ANCESTOR_BOOKMARK_DEPTH = 10
DEFAULT_BOOKMARKS_DISPLAY_LIMIT = 3
DEFAULT_TRUNCATE_NAME = 0
DEFAULT_COMMAND_TIMEOUT = 2.0
DEFAULT_JJ_SYMBOL = "\U000f15c6 "
DEFAULT_GIT_SYMBOL = "\ue0a0 "


@dataclass(frozen=True)
class DisplayConfig:
    """Which prompt segments are shown for one backend."""

    show_prefix: bool = True
    show_name: bool = True
    show_id: bool = True
    show_status: bool = True
    show_color: bool = True
    show_prefix_color: bool = True

    @staticmethod
    def from_flags(
        *,
        no_prefix: bool = False,
        no_name: bool = False,
        no_id: bool = False,
        no_status: bool = False,
        no_color: bool = False,
        no_prefix_color: bool = False,
    ) -> "DisplayConfig":
        """Build from negative CLI flags."""
        return DisplayConfig(
            show_prefix=not no_prefix,
            show_name=not no_name,
            show_id=not no_id,
            show_status=not no_status,
            show_color=not no_color,
            show_prefix_color=not no_prefix_color,
        )


@dataclass(frozen=True)
class Config:
    """Immutable configuration for one invocation.

    Fields:
        max_depth: Ancestor bookmark search depth (0 = exact matches only)
        display_limit: Maximum bookmarks shown (0 = unlimited)
        truncate_length: Maximum bookmark name length (0 = unlimited)
        id_length: Displayed length of the change id / commit hash
        strip_prefixes: Prefixes removed from bookmark names
        backend_override: Force one backend instead of auto-detection
        command_timeout: Seconds allowed for each backend subprocess
        jj_symbol: Symbol shown after "on " for jj repos
        git_symbol: Symbol shown after "on " for git repos
        jj_display: Segment visibility for jj repos
        git_display: Segment visibility for git repos
    """

    max_depth: int = DEFAULT_ANCESTOR_BOOKMARK_DEPTH
    display_limit: int = DEFAULT_BOOKMARKS_DISPLAY_LIMIT
    truncate_length: int = DEFAULT_TRUNCATE_NAME
    id_length: int = DEFAULT_ID_LENGTH
    strip_prefixes: tuple[str, ...] = ()
    backend_override: BackendKind | None = None
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    jj_symbol: str = DEFAULT_JJ_SYMBOL
    git_symbol: str = DEFAULT_GIT_SYMBOL
    jj_display: DisplayConfig = DisplayConfig()
    git_display: DisplayConfig = DisplayConfig()

    @staticmethod
    def create(
        *,
        truncate_name: int | None = None,
        id_length: int | None = None,
        ancestor_bookmark_depth: int | None = None,
        bookmarks_display_limit: int | None = None,
        strip_bookmark_prefix: Iterable[str] = (),
        backend: BackendKind | None = None,
        command_timeout: float | None = None,
        jj_symbol: str | None = None,
        git_symbol: str | None = None,
        no_symbol: bool = False,
        jj_display: DisplayConfig | None = None,
        git_display: DisplayConfig | None = None,
    ) -> "Config":
        """Create config, filling unset values with defaults.

        Args:
            truncate_name: Max bookmark name length
            id_length: Displayed id length
            ancestor_bookmark_depth: Ancestor search depth
            bookmarks_display_limit: Max bookmarks shown
            strip_bookmark_prefix: Prefixes to strip from bookmark names
            backend: Forced backend, None for auto-detection
            command_timeout: Per-subprocess timeout in seconds
            jj_symbol: Symbol for jj repos
            git_symbol: Symbol for git repos
            no_symbol: Drop both symbols entirely
            jj_display: Segment visibility for jj repos
            git_display: Segment visibility for git repos

        Returns:
            Config with every field resolved
        """
        return Config(
            max_depth=_or_default(ancestor_bookmark_depth, DEFAULT_ANCESTOR_BOOKMARK_DEPTH),
            display_limit=_or_default(bookmarks_display_limit, DEFAULT_BOOKMARKS_DISPLAY_LIMIT),
            truncate_length=_or_default(truncate_name, DEFAULT_TRUNCATE_NAME),
            id_length=_or_default(id_length, DEFAULT_ID_LENGTH),
            strip_prefixes=parse_prefix_list(strip_bookmark_prefix),
            backend_override=backend,
            command_timeout=_or_default(command_timeout, DEFAULT_COMMAND_TIMEOUT),
            jj_symbol="" if no_symbol else _or_default(jj_symbol, DEFAULT_JJ_SYMBOL),
            git_symbol="" if no_symbol else _or_default(git_symbol, DEFAULT_GIT_SYMBOL),
            jj_display=jj_display or DisplayConfig(),
            git_display=git_display or DisplayConfig(),
        )


T = TypeVar("T")


def _or_default(value: T | None, default: T) -> T:
    return default if value is None else value


def parse_prefix_list(values: Iterable[str]) -> tuple[str, ...]:
    """Split comma-separated prefix values into a flat tuple, dropping blanks.

    Example:
        >>> parse_prefix_list(["me/,team/", "wip/"])
        ('me/', 'team/', 'wip/')
    """
    prefixes: list[str] = []
    for value in values:
        prefixes.extend(part.strip() for part in value.split(",") if part.strip())
    return tuple(prefixes)
