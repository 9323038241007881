"""Error taxonomy for repository state resolution.

Backends raise RepositoryError. The orchestrator turns every fatal condition
into a single ResolutionError subclass tagged with the stage it failed in, so
the prompt can fail fast and render nothing.
"""

from enum import Enum


class ResolutionStage(Enum):
    """Stages of one resolution, in order."""

    START = "start"
    LOCATE_BACKENDS = "locate-backends"
    QUERY_IDENTITY = "query-identity"
    ENUMERATE_BOOKMARKS = "enumerate-bookmarks"
    RESOLVE_ANCESTORS = "resolve-ancestors"
    DERIVE_STATUS = "derive-status"
    DONE = "done"


class RepositoryError(Exception):
    """Backend metadata could not be read."""


class ResolutionError(Exception):
    """Fatal condition that aborts a resolution."""

    def __init__(self, message: str, stage: ResolutionStage) -> None:
        super().__init__(message)
        self.stage = stage


class NotARepositoryError(ResolutionError):
    """Neither backend is present at the location."""

    def __init__(self, message: str = "Not inside a git or jj repository") -> None:
        super().__init__(message, ResolutionStage.LOCATE_BACKENDS)


class BackendUnavailableError(ResolutionError):
    """Configuration forces a backend that is not present."""

    def __init__(self, message: str) -> None:
        super().__init__(message, ResolutionStage.LOCATE_BACKENDS)


class BackendFailureError(ResolutionError):
    """A backend failed while being queried."""
