"""Command line interface for Search Aggregator."""

import asyncio
import logging
import sys
import threading
from pathlib import Path
from typing import NoReturn, Optional

import click
from rich.console import Console

from . import __version__
from .config import ConfigManager, SearchConfig
from .errors import AggregatorError, BinaryNotFoundError
from .models import SearchRequest
from .search.binary_locator import locate_ripgrep
from .services.ignore_controller import IgnoreController
from .services.ripgrep_search import RipgrepSearchService

logger = logging.getLogger(__name__)

console = Console()
error_console = Console(stderr=True)


def run_async(coro):
    """
    Run an async coroutine, handling both new event loops and existing ones.

    Commands run under plain asyncio.run() normally, but tests and embedding
    hosts may already have a loop running on this thread; in that case the
    coroutine gets its own loop on a helper thread.

    Args:
        coro: The coroutine to run

    Returns:
        The result of the coroutine
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        # No event loop running, we can use asyncio.run()
        return asyncio.run(coro)

    result = None
    exception = None

    def run_in_new_loop():
        nonlocal result, exception
        try:
            new_loop = asyncio.new_event_loop()
            asyncio.set_event_loop(new_loop)
            try:
                result = new_loop.run_until_complete(coro)
            finally:
                new_loop.close()
        except Exception as e:
            exception = e

    thread = threading.Thread(target=run_in_new_loop)
    thread.start()
    thread.join()

    if exception:
        raise exception
    return result


def _fail(message: str) -> NoReturn:
    error_console.print(f"❌ search failed: {message}", style="red", markup=False)
    sys.exit(1)


@click.group()
@click.option("--config", "-c", type=click.Path(exists=False), help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.version_option(version=__version__, prog_name="search-aggregator")
@click.pass_context
def cli(ctx, config: Optional[str], verbose: bool):
    """Grouped ripgrep search reports for humans and LLM prompts.

    \b
    EXAMPLES:
      search-aggregator search 'TODO' src/
      search-aggregator search 'def \\w+_handler' . --glob '*.py'
      search-aggregator locate --install-root /opt/editor
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s:%(name)s:%(message)s",
    )

    if config:
        ctx.obj["config_manager"] = ConfigManager(Path(config))
    else:
        ctx.obj["config_manager"] = ConfigManager.create_with_backtrack()


def _load_config(ctx) -> SearchConfig:
    try:
        return ctx.obj["config_manager"].get_config()
    except ValueError as e:
        _fail(str(e))


@cli.command()
@click.argument("pattern")
@click.argument("path", required=False, default=".", type=click.Path(exists=True))
@click.option("--glob", "-g", "file_glob", default=None, help="Only search files matching this glob")
@click.option("--context", "-C", "context_lines", type=int, default=None, help="Context lines around each match")
@click.option("--max-results", type=int, default=None, help="Maximum match groups shown")
@click.option(
    "--install-root",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Installation root holding a bundled ripgrep",
)
@click.option("--no-ignore", is_flag=True, help="Do not apply the ignore file")
@click.pass_context
def search(
    ctx,
    pattern: str,
    path: str,
    file_glob: Optional[str],
    context_lines: Optional[int],
    max_results: Optional[int],
    install_root: Optional[str],
    no_ignore: bool,
):
    """Search PATH for PATTERN and print the grouped report."""
    config = _load_config(ctx)
    if max_results is not None:
        updates = config.model_dump()
        updates["max_results"] = max_results
        if "max_lines" not in config.model_fields_set:
            updates["max_lines"] = None
        try:
            config = SearchConfig(**updates)
        except ValueError as e:
            _fail(f"invalid --max-results: {e}")

    root = Path(path).resolve()
    request = SearchRequest(
        root_path=str(root),
        regex_pattern=pattern,
        file_glob=file_glob or config.default_file_glob,
        context_lines=config.context_lines if context_lines is None else context_lines,
    )

    predicate = None
    if not no_ignore:
        workspace = root if root.is_dir() else root.parent
        predicate = IgnoreController(workspace, config.ignore_file_name)

    try:
        binary_path = locate_ripgrep(install_root or config.install_root)
        report = run_async(
            RipgrepSearchService(config).search(request, binary_path, predicate)
        )
    except BinaryNotFoundError as e:
        _fail(f"search capability unavailable ({e})")
    except AggregatorError as e:
        _fail(str(e))

    click.echo(report.text)


@cli.command()
@click.option(
    "--install-root",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Installation root holding a bundled ripgrep",
)
@click.pass_context
def locate(ctx, install_root: Optional[str]):
    """Print the ripgrep executable that searches would use."""
    config = _load_config(ctx)
    try:
        binary_path = locate_ripgrep(install_root or config.install_root)
    except BinaryNotFoundError as e:
        if ctx.obj["verbose"]:
            for candidate in e.candidates:
                error_console.print(f"  tried {candidate}", style="dim", markup=False)
        _fail(str(e))
    click.echo(str(binary_path))


@cli.command(name="init-config")
@click.argument("path", required=False, type=click.Path(exists=True, file_okay=False))
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
@click.pass_context
def init_config(ctx, path: Optional[str], force: bool):
    """Write a default configuration file.

    With PATH, the file is created at PATH/.search-aggregator/config.json;
    otherwise at the --config or discovered location.
    """
    if path:
        manager = ConfigManager(
            Path(path) / ConfigManager.CONFIG_DIR_NAME / "config.json"
        )
    else:
        manager = ctx.obj["config_manager"]
    if manager.config_path.exists() and not force:
        console.print(
            f"⚠️  Config already exists: {manager.config_path} (use --force)",
            style="yellow",
            markup=False,
        )
        return
    manager.create_default_config()
    console.print(f"✅ Wrote {manager.config_path}", style="green", markup=False)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
