"""Application context with dependency injection."""

from dataclasses import dataclass
from pathlib import Path

from jj_starship.core.config import Config
from jj_starship.core.orchestrator import BackendFactory, create_backend, resolve_repository
from jj_starship.core.repo_discovery import NoRepoSentinel, RepoLocation, discover_repo_or_sentinel
from jj_starship.core.vcs.types import ResolverResult


@dataclass(frozen=True)
class StarshipContext:
    """Immutable context holding everything one invocation needs.

    Created at the CLI entry point and threaded through the commands. Tests
    pass their own instance (usually with a FakeBackend factory) as the click
    context object.
    """

    cwd: Path
    config: Config
    backend_factory: BackendFactory

    def locate(self) -> RepoLocation | NoRepoSentinel:
        """Find the repository containing cwd."""
        return discover_repo_or_sentinel(self.cwd)

    def resolve(self) -> ResolverResult:
        """Resolve the repository state at cwd.

        Raises:
            ResolutionError: If no repository is found or the backend fails
        """
        return resolve_repository(self.locate(), self.config, self.backend_factory)

    @staticmethod
    def for_test(
        cwd: Path,
        backend_factory: BackendFactory,
        config: Config | None = None,
    ) -> "StarshipContext":
        """Create a context for tests with a default config.

        Args:
            cwd: Directory the invocation runs in
            backend_factory: Factory returning the backend under test
            config: Optional config (defaults to Config())

        Returns:
            StarshipContext wired to the given factory
        """
        return StarshipContext(cwd=cwd, config=config or Config(), backend_factory=backend_factory)


def create_context(cwd: Path, config: Config) -> StarshipContext:
    """Create the production context."""
    return StarshipContext(cwd=cwd, config=config, backend_factory=create_backend)
