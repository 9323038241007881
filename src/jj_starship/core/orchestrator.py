"""Resolution orchestrator.

Chooses a backend from what the locator found, queries it, resolves ancestor
bookmarks and derives status. Stages run strictly in order:

    Start -> LocateBackends -> QueryIdentity -> EnumerateBookmarks
          -> ResolveAncestors -> DeriveStatus -> Done

Any fatal condition raises a single ResolutionError; nothing partial is
returned and nothing is retried.
"""

import logging
from collections.abc import Callable

from jj_starship.core.config import Config
from jj_starship.core.errors import (
    BackendFailureError,
    BackendUnavailableError,
    NotARepositoryError,
    RepositoryError,
    ResolutionStage,
)
from jj_starship.core.repo_discovery import NoRepoSentinel, RepoLocation
from jj_starship.core.resolver import resolve_ancestors
from jj_starship.core.selection import select_bookmarks
from jj_starship.core.vcs.abc import VcsBackend
from jj_starship.core.vcs.real_git import RealGitBackend
from jj_starship.core.vcs.real_jj import RealJjBackend
from jj_starship.core.vcs.types import BackendKind, RepositoryHandle, ResolverResult

logger = logging.getLogger(__name__)

BackendFactory = Callable[[RepositoryHandle, Config], VcsBackend]


def create_backend(handle: RepositoryHandle, config: Config) -> VcsBackend:
    """Open the production backend for a repository handle."""
    if handle.kind == BackendKind.CHANGE_CENTRIC:
        return RealJjBackend(
            handle.root, id_length=config.id_length, timeout=config.command_timeout
        )
    return RealGitBackend(handle.root, id_length=config.id_length, timeout=config.command_timeout)


def choose_backend(location: RepoLocation, override: BackendKind | None) -> BackendKind:
    """Pick the backend to query.

    A colocated repository (both present) uses jj, since jj wraps the git
    repository there, unless the override forces git. An override naming a
    backend that is not present fails rather than silently switching.

    Raises:
        NotARepositoryError: If neither backend is present
        BackendUnavailableError: If the override names an absent backend
    """
    available = {
        BackendKind.CLASSIC: location.classic_present,
        BackendKind.CHANGE_CENTRIC: location.change_centric_present,
    }
    if not any(available.values()):
        raise NotARepositoryError()

    if override is not None:
        if not available[override]:
            raise BackendUnavailableError(
                f"Backend '{override.value}' requested but not present at {location.root}"
            )
        return override

    if available[BackendKind.CHANGE_CENTRIC]:
        return BackendKind.CHANGE_CENTRIC
    return BackendKind.CLASSIC


def resolve_repository(
    location: RepoLocation | NoRepoSentinel,
    config: Config,
    backend_factory: BackendFactory = create_backend,
) -> ResolverResult:
    """Resolve the working-copy state of a repository.

    Args:
        location: Locator output
        config: Resolved configuration
        backend_factory: Opens a backend for the chosen handle (injectable for tests)

    Returns:
        ResolverResult for the output styling layer

    Raises:
        NotARepositoryError: If no repository was found
        BackendUnavailableError: If a forced backend is not present
        BackendFailureError: If the backend could not be read
    """
    stage = ResolutionStage.LOCATE_BACKENDS
    if isinstance(location, NoRepoSentinel):
        raise NotARepositoryError(location.message)

    kind = choose_backend(location, config.backend_override)
    handle = RepositoryHandle(root=location.root, kind=kind)
    logger.debug("Using %s backend at %s", kind.value, handle.root)

    backend = backend_factory(handle, config)
    try:
        stage = ResolutionStage.QUERY_IDENTITY
        identity = backend.identity()

        stage = ResolutionStage.ENUMERATE_BOOKMARKS
        bookmarks = backend.enumerate_bookmarks()
        logger.debug("Found %d bookmarks", len(bookmarks))

        stage = ResolutionStage.RESOLVE_ANCESTORS
        resolved = resolve_ancestors(backend, identity.commit_id, bookmarks, config.max_depth)

        stage = ResolutionStage.DERIVE_STATUS
        closest = resolved[0] if resolved else None
        status = backend.status_flags(identity, closest)
    except RepositoryError as e:
        logger.debug("Backend failure during %s: %s", stage.value, e)
        raise BackendFailureError(str(e), stage) from e

    rendered = select_bookmarks(
        resolved,
        display_limit=config.display_limit,
        name_truncate_length=config.truncate_length,
        strip_prefixes=config.strip_prefixes,
    )
    logger.debug("Resolution %s: %s", ResolutionStage.DONE.value, rendered)

    return ResolverResult(
        backend_kind=kind,
        identity=identity,
        resolved=resolved,
        status=status,
        rendered_bookmarks=rendered,
    )
