"""Back up mail client stores to archive files, verified by reopening."""

from .backup import BackupOutcome, BackupStatus, export_store
from .client import (
    ArchiveError,
    BackupError,
    ClientUnavailable,
    FolderCopyError,
    IncompleteCopyError,
    MailClient,
    StoreInfo,
    StoreNotFound,
)
from .memory import MemoryClient, MemoryFolder
from .outlook import OutlookClient
from .runner import RunConfig, StoreReport, run_backups
from .stores import InvalidSelection, list_stores, select_stores

__all__ = [
    "ArchiveError",
    "BackupError",
    "BackupOutcome",
    "BackupStatus",
    "ClientUnavailable",
    "FolderCopyError",
    "IncompleteCopyError",
    "InvalidSelection",
    "MailClient",
    "MemoryClient",
    "MemoryFolder",
    "OutlookClient",
    "RunConfig",
    "StoreInfo",
    "StoreNotFound",
    "StoreReport",
    "export_store",
    "list_stores",
    "run_backups",
    "select_stores",
]
