"""Main CLI entry point with lazy loading for fast startup."""

from pathlib import Path

import click

from . import __version__
from .common.cli import LazyGroup
from .common.config import get_db_path, get_log_path, load_config
from .common.debug import debug_enabled
from .common.log import setup_logging

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


@click.group(
    cls=LazyGroup,
    context_settings=CONTEXT_SETTINGS,
    lazy_subcommands={
        "list": "hitori.store.cli:list_cmd",
        "add": "hitori.store.cli:add_cmd",
        "delete": "hitori.store.cli:delete_cmd",
        "mark": "hitori.store.cli:mark_cmd",
        "invoke": "hitori.store.cli:invoke_cmd",
        "sync": "hitori.sync.cli:sync_cmd",
        "config": "hitori.common.config_cli:config_cli",
    },
)
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Database file (default: hitori.db in the app data directory)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
@click.version_option(__version__, prog_name="hitori")
@click.pass_context
def main(ctx: click.Context, db_path: Path | None, verbose: bool):
    """hitori - keep short notes on this machine, sync them when you like."""
    config = load_config()
    setup_logging(verbose or debug_enabled(), get_log_path(config))

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["db_path"] = db_path or get_db_path(config)


if __name__ == "__main__":
    main()
