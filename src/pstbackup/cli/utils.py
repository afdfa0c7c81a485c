"""Shared CLI utilities and helpers."""

import logging
import sys
from datetime import datetime

import click
from rich.console import Console
from rich.logging import RichHandler

from ..client import MailClient
from ..outlook import OutlookClient


def err(*args, **kwargs):
    """Print to stderr."""
    print(*args, file=sys.stderr, **kwargs)


def setup_logging(verbose: bool = False) -> None:
    """Route library logging to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def get_client() -> MailClient:
    """Mail client for the current invocation.

    Uses the context object when one was supplied (tests pass a
    MemoryClient), otherwise connects to Outlook once and caches it.
    """
    ctx = click.get_current_context()
    root = ctx.find_root()
    if root.obj is None:
        root.obj = OutlookClient.connect()
    return root.obj


def format_time(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%d %H:%M:%S")


# Shared options
verbose_option = click.option('-v', '--verbose', is_flag=True, help="Show debug logging")


class AliasGroup(click.Group):
    """Click Group that supports command aliases."""

    def __init__(self, *args, aliases: dict[str, str] | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.aliases = aliases or {}

    def get_command(self, ctx, cmd_name):
        cmd_name = self.aliases.get(cmd_name, cmd_name)
        return super().get_command(ctx, cmd_name)

    def resolve_command(self, ctx, args):
        _, cmd_name, args = super().resolve_command(ctx, args)
        cmd_name = self.aliases.get(cmd_name, cmd_name)
        return _, cmd_name, args

