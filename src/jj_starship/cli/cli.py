import logging
import os
import shutil
from dataclasses import replace
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import click

from jj_starship.cli.json_output import emit_json, result_to_dict
from jj_starship.cli.output import machine_output
from jj_starship.cli.rendering import format_prompt
from jj_starship.core.config import Config, DisplayConfig
from jj_starship.core.context import StarshipContext, create_context
from jj_starship.core.errors import ResolutionError
from jj_starship.core.repo_discovery import in_repo
from jj_starship.core.vcs.types import BackendKind

logger = logging.getLogger(__name__)

# Enable debug logging if JJ_STARSHIP_DEBUG environment variable is set
if os.getenv("JJ_STARSHIP_DEBUG"):
    logging.basicConfig(level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s")

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags

ENV_PREFIX = "JJ_STARSHIP_"


@click.group(invoke_without_command=True, context_settings=CONTEXT_SETTINGS)
@click.option(
    "--cwd",
    type=click.Path(file_okay=False, path_type=Path),
    help="Override working directory.",
)
@click.option(
    "--truncate-name",
    type=click.IntRange(min=0),
    envvar=f"{ENV_PREFIX}TRUNCATE_NAME",
    help="Max length for branch/bookmark names (0 = unlimited).",
)
@click.option(
    "--id-length",
    type=click.IntRange(min=1),
    envvar=f"{ENV_PREFIX}ID_LENGTH",
    help="Length of change id / commit hash to display (default: 8).",
)
@click.option(
    "--ancestor-bookmark-depth",
    type=click.IntRange(min=0),
    envvar=f"{ENV_PREFIX}ANCESTOR_BOOKMARK_DEPTH",
    help="Max depth to search for ancestor bookmarks (0 = exact matches only, default: 10).",
)
@click.option(
    "--bookmarks-display-limit",
    type=click.IntRange(min=0),
    envvar=f"{ENV_PREFIX}BOOKMARKS_DISPLAY_LIMIT",
    help="Max bookmarks to display (0 = unlimited, default: 3).",
)
@click.option(
    "--strip-bookmark-prefix",
    multiple=True,
    envvar=f"{ENV_PREFIX}STRIP_BOOKMARK_PREFIX",
    help="Comma-separated prefixes to strip from bookmark names (repeatable).",
)
@click.option(
    "--backend",
    type=click.Choice([kind.value for kind in BackendKind]),
    envvar=f"{ENV_PREFIX}BACKEND",
    help="Force a backend instead of auto-detection.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    envvar=f"{ENV_PREFIX}TIMEOUT",
    help="Seconds allowed for each git/jj command (default: 2).",
)
@click.option("--jj-symbol", envvar=f"{ENV_PREFIX}JJ_SYMBOL", help="Symbol prefix for jj repos.")
@click.option(
    "--git-symbol", envvar=f"{ENV_PREFIX}GIT_SYMBOL", help="Symbol prefix for git repos."
)
@click.option("--no-symbol", is_flag=True, help="Disable symbol prefix entirely.")
@click.option("--no-color", is_flag=True, help="Disable output styling.")
@click.option(
    "--no-prefix-color", is_flag=True, help="Disable unique prefix coloring for the change id."
)
@click.option("--no-jj-prefix", is_flag=True, help='Hide "on {symbol}" prefix for jj repos.')
@click.option("--no-jj-name", is_flag=True, help="Hide bookmark names for jj repos.")
@click.option("--no-jj-id", is_flag=True, help="Hide change id for jj repos.")
@click.option("--no-jj-status", is_flag=True, help="Hide [status] for jj repos.")
@click.option("--no-git-prefix", is_flag=True, help='Hide "on {symbol}" prefix for git repos.')
@click.option("--no-git-name", is_flag=True, help="Hide branch names for git repos.")
@click.option("--no-git-id", is_flag=True, help="Hide commit hash for git repos.")
@click.option("--no-git-status", is_flag=True, help="Hide [status] for git repos.")
@click.version_option(package_name="jj-starship")
@click.pass_context
def cli(
    ctx: click.Context,
    cwd: Path | None,
    truncate_name: int | None,
    id_length: int | None,
    ancestor_bookmark_depth: int | None,
    bookmarks_display_limit: int | None,
    strip_bookmark_prefix: tuple[str, ...],
    backend: str | None,
    timeout: float | None,
    jj_symbol: str | None,
    git_symbol: str | None,
    no_symbol: bool,
    no_color: bool,
    no_prefix_color: bool,
    no_jj_prefix: bool,
    no_jj_name: bool,
    no_jj_id: bool,
    no_jj_status: bool,
    no_git_prefix: bool,
    no_git_name: bool,
    no_git_id: bool,
    no_git_status: bool,
) -> None:
    """Unified git/jj Starship prompt module."""
    config = Config.create(
        truncate_name=truncate_name,
        id_length=id_length,
        ancestor_bookmark_depth=ancestor_bookmark_depth,
        bookmarks_display_limit=bookmarks_display_limit,
        strip_bookmark_prefix=strip_bookmark_prefix,
        backend=BackendKind(backend) if backend is not None else None,
        command_timeout=timeout,
        jj_symbol=jj_symbol,
        git_symbol=git_symbol,
        no_symbol=no_symbol,
        jj_display=DisplayConfig.from_flags(
            no_prefix=no_jj_prefix,
            no_name=no_jj_name,
            no_id=no_jj_id,
            no_status=no_jj_status,
            no_color=no_color,
            no_prefix_color=no_prefix_color,
        ),
        git_display=DisplayConfig.from_flags(
            no_prefix=no_git_prefix,
            no_name=no_git_name,
            no_id=no_git_id,
            no_status=no_git_status,
            no_color=no_color,
            # git has no change ids to highlight
            no_prefix_color=True,
        ),
    )

    # Tests provide their own context (with a fake backend factory)
    if ctx.obj is None:
        ctx.obj = create_context(cwd=cwd or Path.cwd(), config=config)
    else:
        ctx.obj = replace(ctx.obj, config=config, cwd=cwd or ctx.obj.cwd)
    logger.debug("Resolved config: %s", config)

    if ctx.invoked_subcommand is None:
        ctx.invoke(prompt_cmd)


@cli.command("prompt")
@click.option("--json", "as_json", is_flag=True, help="Emit the resolved state as JSON.")
@click.pass_obj
def prompt_cmd(ctx: StarshipContext, as_json: bool = False) -> None:
    """Output prompt string (default)."""
    try:
        result = ctx.resolve()
    except ResolutionError as e:
        # Prompt output stays empty; the reason only reaches the debug log
        logger.debug("Resolution failed at %s: %s", e.stage.value, e)
        raise SystemExit(1) from e

    if as_json:
        emit_json(result_to_dict(result))
        return

    machine_output(format_prompt(result, ctx.config), nl=False)


@cli.command("detect")
@click.pass_obj
def detect_cmd(ctx: StarshipContext) -> None:
    """Exit 0 if in a repo, 1 otherwise (for starship "when" condition)."""
    if not in_repo(ctx.cwd):
        raise SystemExit(1)


@cli.command("version")
def version_cmd() -> None:
    """Print version and available backends."""
    try:
        package_version = version("jj-starship")
    except PackageNotFoundError:
        package_version = "unknown"

    machine_output(f"jj-starship {package_version}")
    backends = [kind.value for kind in BackendKind if shutil.which(kind.value) is not None]
    machine_output(f"backends: {', '.join(backends) if backends else 'none'}")


def main() -> None:
    """CLI entry point used by the `jj-starship` console script."""
    cli()
