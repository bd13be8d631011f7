"""Shared CLI utilities."""

import importlib

import click

from ..store.errors import StoreError


class LazyGroup(click.Group):
    """A Click group that imports subcommands on first use.

    Store failures raised by any subcommand are reported as a plain
    ``Error: <message>`` with exit code 1.

    Usage:
        @click.group(
            cls=LazyGroup,
            lazy_subcommands={
                "list": "hitori.store.cli:list_cmd",
            },
        )
        def main():
            pass
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._lazy_subcommands = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted(set(super().list_commands(ctx)) | set(self._lazy_subcommands))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        if cmd_name in self._lazy_subcommands:
            return self._load_command(cmd_name)
        return super().get_command(ctx, cmd_name)

    def _load_command(self, cmd_name: str) -> click.Command:
        module_path, _, attr = self._lazy_subcommands[cmd_name].partition(":")
        command = getattr(importlib.import_module(module_path), attr or cmd_name)
        if not isinstance(command, click.Command):
            raise ValueError(f"Lazy subcommand {cmd_name!r} is not a click command: {command!r}")
        return command

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except StoreError as e:
            raise click.ClickException(str(e)) from e
