"""CLI command for cloud sync."""

import click

from ..common.config import PROVIDERS, load_config
from ..store.cli import get_store
from .engine import SyncStatus, sync_posts
from .providers import get_provider

STATUS_ICONS = {
    SyncStatus.SYNCED: "✅",
    SyncStatus.SYNCING: "⏳",
    SyncStatus.ERROR: "❌",
    SyncStatus.OFFLINE: "📴",
}


@click.command(name="sync")
@click.option("--provider", "-p", type=click.Choice(PROVIDERS), help="Override the configured provider")
@click.pass_context
def sync_cmd(ctx: click.Context, provider: str | None):
    """Push unsynced posts to the cloud provider.

    Examples:
        hitori sync
        hitori sync -p google
    """
    obj = ctx.find_object(dict) or {}
    config = obj.get("config") or load_config()
    name = provider or config.get("cloud_provider", "none")

    try:
        target = get_provider(name, config)
    except ValueError as e:
        raise click.ClickException(str(e))

    click.echo(f"{STATUS_ICONS[SyncStatus.SYNCING]} Syncing with {target.describe()}...")
    result = sync_posts(get_store(ctx), target)

    if result.status is not SyncStatus.SYNCED:
        raise click.ClickException(f"{result.status.value}: {result.message}")

    icon = STATUS_ICONS[result.status]
    if result.synced_ids:
        click.echo(f"{icon} Synced {len(result.synced_ids)} post(s)")
    else:
        click.echo(f"{icon} {result.message or 'Up to date'}")
