"""Run a backup over a list of stores, one at a time."""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable

import yaml

from .backup import BackupOutcome, BackupStatus, export_store
from .client import BackupError, MailClient, StoreInfo
from .config import DEFAULT_PREFIX

logger = logging.getLogger(__name__)

RUN_DIR_FORMAT = "%Y-%m-%d_%H-%M"
ARCHIVE_SUFFIX = ".pst"
SUMMARY_FILE = "summary.yaml"

# Characters Windows refuses in file names, plus control characters
_ILLEGAL_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


@dataclass
class RunConfig:
    """Settings for one run, fixed when the run starts."""
    output_root: Path
    prefix: str = DEFAULT_PREFIX
    keep_going: bool = False
    started: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        # The mail client may run in another process with its own working directory
        self.output_root = Path(self.output_root).expanduser().resolve()

    @property
    def run_dir(self) -> Path:
        return self.output_root / self.started.strftime(RUN_DIR_FORMAT)


@dataclass
class StoreReport:
    """Outcome of one store plus timing and file size."""
    outcome: BackupOutcome
    started: datetime
    finished: datetime
    size: int = 0

    @property
    def elapsed(self) -> float:
        return (self.finished - self.started).total_seconds()

    @property
    def size_mb(self) -> float:
        return self.size / (1024 * 1024)


def safe_filename(name: str, placeholder: str = "_") -> str:
    """Replace characters that are illegal in file names with `placeholder`."""
    s = _ILLEGAL_CHARS.sub(placeholder, name)
    # Windows drops trailing dots and spaces
    s = s.rstrip(". ")
    return s or placeholder


def archive_path(
    run_dir: Path,
    prefix: str,
    store_name: str,
    taken: set[str] | None = None,
) -> Path:
    """Archive file for `store_name`, avoiding names in `taken` and existing files.

    Collisions get a numeric suffix: Backup_a_b.pst, Backup_a_b_2.pst, ...
    Names are compared case-insensitively, as on Windows. The chosen name is
    added to `taken`.
    """
    taken = set() if taken is None else taken
    stem = f"{prefix}{safe_filename(store_name)}"
    name = f"{stem}{ARCHIVE_SUFFIX}"
    n = 1
    while name.lower() in taken or (run_dir / name).exists():
        n += 1
        name = f"{stem}_{n}{ARCHIVE_SUFFIX}"
    taken.add(name.lower())
    return run_dir / name


def make_run_dir(config: RunConfig) -> Path:
    """Create the run directory; an existing one is left as is."""
    run_dir = config.run_dir
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def run_backups(
    client: MailClient,
    stores: list[StoreInfo],
    config: RunConfig,
    on_start: Callable[[StoreInfo, Path], None] | None = None,
    on_finish: Callable[[StoreReport], None] | None = None,
) -> list[StoreReport]:
    """Export and verify each store in order.

    Fail-fast by default: the first BackupError propagates. With
    config.keep_going, a failing store is reported as FAILED and the run
    moves on to the next store.
    """
    run_dir = make_run_dir(config)
    reports: list[StoreReport] = []
    taken: set[str] = set()

    for store in stores:
        path = archive_path(run_dir, config.prefix, store.name, taken)
        if on_start:
            on_start(store, path)
        started = datetime.now()
        try:
            outcome = export_store(client, store.name, path)
        except BackupError as e:
            if not config.keep_going:
                raise
            logger.error("Backup of '%s' failed: %s", store.name, e)
            outcome = BackupOutcome(store=store.name, path=path, error=str(e))

        report = StoreReport(
            outcome=outcome,
            started=started,
            finished=datetime.now(),
            size=path.stat().st_size if path.exists() else 0,
        )
        reports.append(report)
        if on_finish:
            on_finish(report)

    return reports


def write_summary(run_dir: Path, reports: list[StoreReport]) -> Path:
    """Write summary.yaml describing each store's result."""
    entries = []
    for report in reports:
        outcome = report.outcome
        entry = {
            "store": outcome.store,
            "file": outcome.path.name,
            "status": outcome.status.value,
            "source_items": outcome.source_count,
            "archive_items": outcome.verified_count,
            "size_bytes": report.size,
            "started": report.started.isoformat(timespec="seconds"),
            "finished": report.finished.isoformat(timespec="seconds"),
        }
        if outcome.status is BackupStatus.DISCREPANCY:
            entry["folders"] = {
                name: {
                    "source": count,
                    "archive": outcome.verified_folders.get(name, 0),
                }
                for name, count in outcome.source_folders.items()
            }
        if outcome.error:
            entry["error"] = outcome.error
        entries.append(entry)

    summary_path = run_dir / SUMMARY_FILE
    with open(summary_path, "w") as f:
        yaml.dump({"stores": entries}, f, default_flow_style=False, sort_keys=False)
    return summary_path
