"""Prompt line rendering.

Maps a ResolverResult to the styled prompt segment:

    on {symbol}{id} ({bookmarks}) [{status}]

Colors: symbol blue, id magenta (or unique prefix bright magenta with the rest
dimmed), bookmarks green, status red.
"""

import click

from jj_starship.core.config import Config, DisplayConfig
from jj_starship.core.vcs.types import (
    BackendKind,
    ChangeCentricStatus,
    ResolverResult,
    StatusFlags,
    WorkingCopyIdentity,
)


def format_segment(text: str, color: str, show_color: bool) -> str:
    if show_color:
        return click.style(text, fg=color)
    return text


def format_change_id(identity: WorkingCopyIdentity) -> str:
    """Highlight the shortest unique prefix of the id, matching jj log style."""
    prefix = identity.short_id[: identity.unique_prefix_len]
    rest = identity.short_id[identity.unique_prefix_len :]
    if not rest:
        return click.style(prefix, fg="bright_magenta")
    return click.style(prefix, fg="bright_magenta") + click.style(rest, fg="bright_black")


def status_symbols(status: StatusFlags) -> str:
    """Render status flags as symbols.

    jj order: ! conflict, ⇔ divergent, ? empty description, ⇡ unsynced.
    git order: = conflicted, + staged, ! modified, ? untracked, ✘ deleted,
    then ⇡n ahead and ⇣n behind.
    """
    symbols: list[str] = []
    if isinstance(status, ChangeCentricStatus):
        if status.conflicted:
            symbols.append("!")
        if status.divergent:
            symbols.append("⇔")
        if status.empty_description:
            symbols.append("?")
        if status.unsynced:
            symbols.append("⇡")
        return "".join(symbols)

    if status.conflicted:
        symbols.append("=")
    if status.staged:
        symbols.append("+")
    if status.modified:
        symbols.append("!")
    if status.untracked:
        symbols.append("?")
    if status.deleted:
        symbols.append("✘")
    if status.ahead > 0:
        symbols.append(f"⇡{status.ahead}")
    if status.behind > 0:
        symbols.append(f"⇣{status.behind}")
    return "".join(symbols)


def display_for(result: ResolverResult, config: Config) -> tuple[str, DisplayConfig]:
    """Symbol and display settings for the result's backend."""
    if result.backend_kind == BackendKind.CHANGE_CENTRIC:
        return config.jj_symbol, config.jj_display
    return config.git_symbol, config.git_display


def format_prompt(result: ResolverResult, config: Config) -> str:
    """Format a resolver result as a prompt string.

    Args:
        result: Resolved repository state
        config: Configuration with symbols and display flags

    Returns:
        Prompt segment, possibly empty when every segment is hidden
    """
    symbol, display = display_for(result, config)
    out = ""

    if display.show_prefix:
        out += "on " + format_segment(symbol, "blue", display.show_color)

    if display.show_id and result.identity.short_id:
        if display.show_color and display.show_prefix_color:
            out += format_change_id(result.identity)
        else:
            out += format_segment(result.identity.short_id, "magenta", display.show_color)

    if display.show_name and result.rendered_bookmarks:
        if out:
            out += " "
        bookmarks_text = "(" + ", ".join(result.rendered_bookmarks) + ")"
        out += format_segment(bookmarks_text, "green", display.show_color)

    if display.show_status:
        status = status_symbols(result.status)
        if status:
            if out:
                out += " "
            out += format_segment(f"[{status}]", "red", display.show_color)

    return out
