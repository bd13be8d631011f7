"""CLI commands for reading and editing posts."""

import json
import sys

import click

from ..common.config import get_db_path
from .db import PostStore
from .models import Post


def get_store(ctx: click.Context) -> PostStore:
    """PostStore for the database chosen on the command line or in config."""
    obj = ctx.find_object(dict) or {}
    return PostStore(obj.get("db_path") or get_db_path())


def format_post(post: Post) -> str:
    icon = "☁️ " if post.is_synced else "📝"
    created = post.created_at.astimezone().strftime("%Y-%m-%d %H:%M")
    lines = post.content.splitlines() or [""]
    more = " …" if len(lines) > 1 else ""
    return f"  {icon} [{post.id}] {created}  {lines[0]}{more}"


@click.command(name="list")
@click.option("--json", "as_json", is_flag=True, help="Print posts as JSON")
@click.pass_context
def list_cmd(ctx: click.Context, as_json: bool):
    """List posts, newest first."""
    posts = get_store(ctx).list_posts()

    if as_json:
        click.echo(json.dumps([post.to_wire() for post in posts], ensure_ascii=False, indent=2))
        return

    if not posts:
        click.echo("\n(no posts)")
        return

    pending = sum(1 for post in posts if not post.is_synced)
    click.echo(f"\n📋 Posts ({len(posts)} total, {pending} not synced):")
    for post in posts:
        click.echo(format_post(post))


@click.command(name="add")
@click.argument("content")
@click.pass_context
def add_cmd(ctx: click.Context, content: str):
    """Add a post. Use '-' to read CONTENT from stdin.

    Examples:
        hitori add "Bought more coffee"
        echo "from a pipe" | hitori add -
    """
    if content == "-":
        content = sys.stdin.read().rstrip("\n")

    post = get_store(ctx).add_post(content)
    click.echo("✓ Post added:")
    click.echo(format_post(post))


@click.command(name="delete")
@click.argument("post_id")
@click.pass_context
def delete_cmd(ctx: click.Context, post_id: str):
    """Delete a post by id."""
    get_store(ctx).delete_post(post_id)
    click.echo(f"✓ [{post_id}] deleted")


@click.command(name="mark")
@click.argument("post_ids", nargs=-1, required=True)
@click.option("--unsynced", is_flag=True, help="Clear the synced flag instead of setting it")
@click.pass_context
def mark_cmd(ctx: click.Context, post_ids: tuple[str, ...], unsynced: bool):
    """Set the synced flag on one or more posts (all or nothing).

    Examples:
        hitori mark 3f2a... 9c1e...
        hitori mark 3f2a... --unsynced
    """
    is_synced = not unsynced
    get_store(ctx).update_sync_status(list(post_ids), is_synced)
    state = "synced" if is_synced else "not synced"
    click.echo(f"✓ {len(post_ids)} post(s) marked {state}")


@click.command(name="invoke")
@click.argument("command_name")
@click.argument("payload", required=False)
@click.pass_context
def invoke_cmd(ctx: click.Context, command_name: str, payload: str | None):
    """Run a shell command and print its JSON result.

    PAYLOAD is a JSON object of arguments. Exits with status 1 when the
    command fails.

    Examples:
        hitori invoke get_posts
        hitori invoke add_post '{"content": "hello"}'
        hitori invoke update_sync_status '{"ids": ["..."], "isSynced": true}'
    """
    from ..commands import dispatch

    try:
        args = json.loads(payload) if payload else {}
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON payload: {e}")
    if not isinstance(args, dict):
        raise click.ClickException("Payload must be a JSON object")

    result = dispatch(get_store(ctx), command_name, args)
    click.echo(result.to_json())
    if not result.ok:
        ctx.exit(1)
