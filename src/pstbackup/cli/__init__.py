"""CLI package for pstbackup.

This package organizes CLI commands into modules:
- stores.py: List stores, inspect an archive
- backup.py: Back up and verify stores
- misc.py: config
- utils.py: Shared utilities and helpers
"""

import click
from dotenv import load_dotenv

from .utils import AliasGroup

from .backup import backup
from .misc import config_cmd
from .stores import inspect, ls


@click.group(cls=AliasGroup, aliases={
    'b': 'backup',
    'c': 'config',
    'i': 'inspect',
    'l': 'ls',
})
def main():
    """Back up mail client stores to archive files.

    \b
    Aliases:
      b  backup
      c  config
      i  inspect
      l  ls
    """
    load_dotenv()


main.add_command(backup)
main.add_command(config_cmd)
main.add_command(inspect)
main.add_command(ls)


__all__ = [
    'main',
    'backup',
    'config_cmd',
    'inspect',
    'ls',
]
