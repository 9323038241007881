"""Selection and formatting policy for resolved bookmarks.

Turns a ResolvedSet into display strings: prefix stripping, truncation,
distance suffixes, a display limit, and an overflow marker. Joining and
coloring belong to the styling layer.
"""

from collections.abc import Sequence

from jj_starship.core.vcs.types import ResolvedSet

ELLIPSIS = "…"


def strip_prefix(name: str, prefixes: Sequence[str]) -> str:
    """Strip the longest matching prefix from name.

    A prefix covering the whole name is ignored, so a bookmark never renders
    as an empty string.
    """
    for prefix in sorted(prefixes, key=len, reverse=True):
        if prefix and name.startswith(prefix) and len(name) > len(prefix):
            return name[len(prefix) :]
    return name


def truncate_name(name: str, max_length: int) -> str:
    """Truncate name to max_length characters, ending with an ellipsis.

    max_length 0 means unlimited.
    """
    if max_length == 0 or len(name) <= max_length:
        return name
    return name[: max_length - 1] + ELLIPSIS


def render_match(name: str, distance: int) -> str:
    if distance == 0:
        return name
    return f"{name}~{distance}"


def select_bookmarks(
    resolved: ResolvedSet,
    display_limit: int,
    name_truncate_length: int,
    strip_prefixes: Sequence[str],
) -> tuple[str, ...]:
    """Render resolved bookmarks for display.

    Args:
        resolved: Matches already ordered by distance then name
        display_limit: Maximum matches to show (0 = all)
        name_truncate_length: Maximum name length (0 = unlimited)
        strip_prefixes: Prefixes removed from names before truncation

    Returns:
        Rendered strings, with a trailing "…+N" marker when N matches were omitted
    """
    shown = resolved if display_limit == 0 else resolved[:display_limit]
    rendered = [
        render_match(
            truncate_name(strip_prefix(match.name, strip_prefixes), name_truncate_length),
            match.distance,
        )
        for match in shown
    ]

    hidden = len(resolved) - len(shown)
    if hidden > 0:
        rendered.append(f"{ELLIPSIS}+{hidden}")

    return tuple(rendered)
