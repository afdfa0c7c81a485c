"""Backup command: export selected stores to archive files and verify them."""

import sys
from datetime import datetime
from pathlib import Path

import click
import humanize
from click import echo, option, prompt, style

from ..backup import BackupStatus
from ..client import BackupError, StoreInfo
from ..config import load_config
from ..runner import RunConfig, StoreReport, run_backups, write_summary
from ..stores import InvalidSelection, list_stores, select_stores

from .utils import err, format_time, get_client, setup_logging, verbose_option

STATUS_COLORS = {
    BackupStatus.SUCCESS: "green",
    BackupStatus.DISCREPANCY: "yellow",
    BackupStatus.FAILED: "red",
}


def print_start(store: StoreInfo, path: Path) -> None:
    echo()
    echo(f"{style(store.name, bold=True)}")
    echo(f"  Started:  {format_time(datetime.now())}")


def print_finish(report: StoreReport) -> None:
    outcome = report.outcome
    elapsed = humanize.precisedelta(report.elapsed, minimum_unit="seconds", format="%0.0f")
    echo(f"  Finished: {format_time(report.finished)} ({elapsed})")
    echo(f"  File:     {outcome.path}")
    echo(f"  Size:     {report.size_mb:.2f} MB")
    echo("  " + style(outcome.describe(), fg=STATUS_COLORS[outcome.status]))


@click.command()
@option('-k', '--keep-going', is_flag=True,
        help="Continue with the next store when one fails")
@option('-o', '--output', 'output_dir', type=click.Path(file_okay=False, path_type=Path),
        help="Directory to create the run directory in")
@option('-p', '--prefix', help="Archive file name prefix (default: Backup_)")
@option('-s', '--select', 'selection', help="Store number or 'all' (skips the prompt)")
@verbose_option
def backup(
    keep_going: bool,
    output_dir: Path | None,
    prefix: str | None,
    selection: str | None,
    verbose: bool,
):
    """Back up mail stores to archive files and verify each one.

    Each archive is reopened after copying and its item count compared with
    the source store.

    \b
    Examples:
      pstbackup backup                  # Prompt for a store
      pstbackup backup -s all           # Every store, no prompt
      pstbackup backup -s 2 -o D:/Mail  # Second listed store
      pstbackup backup -s all -k        # Don't stop at the first failure
    """
    setup_logging(verbose)
    config = load_config()
    run_config = RunConfig(
        output_root=output_dir or config.output_dir,
        prefix=config.prefix if prefix is None else prefix,
        keep_going=keep_going or config.keep_going,
    )

    try:
        client = get_client()
        stores = list_stores(client, exclude=config.exclude)
    except BackupError as e:
        err(str(e))
        sys.exit(1)

    if not stores:
        err("No mail stores found.")
        sys.exit(1)

    if selection is None:
        for i, store in enumerate(stores, 1):
            echo(f"  {style(f'[{i}]', fg='green')} {store.name}")
        selection = prompt("Store to back up (number, 'all' or Enter for all)",
                           default="", show_default=False)

    try:
        selected = select_stores(stores, selection)
    except InvalidSelection as e:
        err(str(e))
        sys.exit(2)

    echo(f"Output directory: {style(str(run_config.run_dir), fg='cyan')}")
    try:
        reports = run_backups(
            client,
            selected,
            run_config,
            on_start=print_start,
            on_finish=print_finish,
        )
    except BackupError as e:
        err(style(f"Backup aborted: {e}", fg="red"))
        sys.exit(1)
    except KeyboardInterrupt:
        err(style("Backup interrupted; check the profile for a leftover data file.", fg="yellow"))
        sys.exit(130)

    write_summary(run_config.run_dir, reports)

    counts = {status: 0 for status in BackupStatus}
    for report in reports:
        counts[report.outcome.status] += 1
    echo()
    echo(
        f"Done: {counts[BackupStatus.SUCCESS]} succeeded, "
        f"{counts[BackupStatus.DISCREPANCY]} with discrepancies, "
        f"{counts[BackupStatus.FAILED]} failed"
    )
    if counts[BackupStatus.FAILED]:
        sys.exit(1)
