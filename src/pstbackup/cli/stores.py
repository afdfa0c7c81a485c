"""Store commands: ls, inspect."""

import sys
from pathlib import Path

import click
import humanize
from click import argument, echo, option, style
from rich.console import Console
from rich.table import Table

from ..backup import attached_archive, folder_counts
from ..client import BackupError
from ..config import load_config
from ..stores import list_stores

from .utils import err, get_client, setup_logging, verbose_option


@click.command("ls")
@option('-a', '--all', 'show_all', is_flag=True, help="Include placeholder stores")
@verbose_option
def ls(show_all: bool, verbose: bool):
    """List mail stores available for backup.

    \b
    Examples:
      pstbackup ls
      pstbackup ls -a     # include "Outlook Data File" placeholders
    """
    setup_logging(verbose)
    config = load_config()
    try:
        client = get_client()
        stores = list_stores(client, exclude=() if show_all else config.exclude)
    except BackupError as e:
        err(str(e))
        sys.exit(1)

    if not stores:
        echo("No mail stores found.")
        return

    table = Table(title="Mail Stores")
    table.add_column("#", justify="right", style="green")
    table.add_column("Name", style="bold")
    table.add_column("Open")
    table.add_column("Path", style="cyan")
    for i, store in enumerate(stores, 1):
        table.add_row(
            str(i),
            store.name,
            "yes" if store.is_open else "no",
            str(store.path) if store.path else "",
        )
    Console().print(table)


@click.command(no_args_is_help=True)
@verbose_option
@argument('path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
def inspect(verbose: bool, path: Path):
    """Show per-folder item counts of an archive file.

    The archive is attached for reading and detached again afterwards.

    \b
    Examples:
      pstbackup inspect 2024-05-01_09-30/Backup_Sales.pst
    """
    setup_logging(verbose)
    try:
        client = get_client()
        with attached_archive(client, path.resolve()) as archive:
            counts = folder_counts(client, archive.root)
    except BackupError as e:
        err(str(e))
        sys.exit(1)

    echo(f"Archive: {path} ({humanize.naturalsize(path.stat().st_size, binary=True)})")
    for name, count in counts.items():
        echo(f"  {name:30} {count:>10,}")
    echo(style(f"  {'Total':30} {sum(counts.values()):>10,}", bold=True))
