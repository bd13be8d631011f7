"""CLI commands for configuration."""

import click

from .config import (
    PROVIDERS,
    get_config_file,
    get_data_dir,
    get_db_path,
    init_default_config,
    load_config,
    set_config_value,
)
from .debug import reset_debug_cache


@click.group(name="config")
def config_cli():
    """Show or change hitori settings."""
    pass


@config_cli.command(name="show")
def show_config():
    """Show current configuration and file locations."""
    config = load_config()

    click.echo(f"\n📁 Config file: {get_config_file()}")
    click.echo(f"🗄️  Database:    {get_db_path(config)}")
    click.echo(f"📂 Data dir:    {get_data_dir(config)}")
    click.echo("=" * 40)

    click.echo(f"\n☁️  Cloud provider: {config.get('cloud_provider', 'none')}")
    for name, folder in config.get("sync_folders", {}).items():
        click.echo(f"  {name}: {folder}")

    click.echo(f"\n🐛 Debug mode: {'ON' if config.get('debug') else 'OFF'}")
    click.echo("   (set HITORI_DEBUG=1 or use 'hitori config debug on')")


@config_cli.command(name="set-provider")
@click.argument("provider", type=click.Choice(PROVIDERS))
def set_provider(provider: str):
    """Choose the cloud provider used by 'hitori sync'.

    Example:
        hitori config set-provider google
    """
    set_config_value("cloud_provider", provider)
    click.echo(f"✓ Cloud provider: {provider}")


@config_cli.command(name="set-folder")
@click.argument("provider", type=click.Choice([p for p in PROVIDERS if p != "none"]))
@click.argument("folder")
def set_folder(provider: str, folder: str):
    """Set the local drive folder a provider mirrors posts into.

    Example:
        hitori config set-folder google "~/Google Drive/notes"
    """
    set_config_value(f"sync_folders.{provider}", folder)
    click.echo(f"✓ {provider} folder: {folder}")


@config_cli.command(name="debug")
@click.argument("state", type=click.Choice(["on", "off"]))
def set_debug(state: str):
    """Enable or disable debug mode.

    When enabled, every dispatched command and its result is logged to
    stderr in YAML format.

    Or use environment variable:
        HITORI_DEBUG=1 hitori invoke get_posts
    """
    set_config_value("debug", state == "on")
    reset_debug_cache()
    click.echo(f"🐛 Debug mode: {state.upper()}")


@config_cli.command(name="init")
def init_config():
    """Initialize config file with defaults."""
    path = init_default_config()
    click.echo(f"✓ Config initialized: {path}")
