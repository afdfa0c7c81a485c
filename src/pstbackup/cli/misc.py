"""Miscellaneous commands: config."""

import click
from click import echo, option

from ..config import BackupConfig, get_config_path, load_config, save_config


@click.command("config")
@option('-i', '--init', 'init_file', is_flag=True, help="Write a config file with default values")
def config_cmd(init_file: bool):
    """Show the effective configuration.

    \b
    Examples:
      pstbackup config
      pstbackup config --init     # create ~/.config/pstbackup/config.yaml
      PSTBACKUP_CONFIG=./backup.yaml pstbackup config
    """
    path = get_config_path()
    if init_file:
        if path.exists():
            echo(f"Config already exists: {path}")
        else:
            save_config(BackupConfig(), path)
            echo(f"Wrote {path}")

    config = load_config(path)
    source = str(path) if path.exists() else f"{path} (not found, using defaults)"
    echo(f"Config:     {source}")
    echo(f"Output dir: {config.output_dir}")
    echo(f"Prefix:     {config.prefix}")
    echo(f"Exclude:    {', '.join(config.exclude) or '-'}")
    echo(f"Keep going: {'yes' if config.keep_going else 'no'}")
