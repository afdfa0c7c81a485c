"""Export a store to an archive file and verify it by reopening.

The protocol, per store:

1. locate the source store by display name
2. attach a new archive at the destination path, which must not exist yet
3. copy every top-level folder of the source into the archive root
4. fail if the client recorded copy errors it did not raise
5. count source items (sum over top-level folders)
6. detach the archive and attach it again from disk
7. count archive items the same way
8. detach the archive
9. compare the two counts

Every attach is paired with exactly one detach, whichever way the export ends.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterator

from .client import (
    ArchiveError,
    FolderCopyError,
    IncompleteCopyError,
    MailClient,
    StoreInfo,
    StoreNotFound,
)
from .stores import find_store, find_store_by_path

logger = logging.getLogger(__name__)


class BackupStatus(str, Enum):
    SUCCESS = "success"
    DISCREPANCY = "discrepancy"
    FAILED = "failed"


@dataclass
class BackupOutcome:
    """Result of exporting one store."""
    store: str
    path: Path
    source_count: int = 0
    verified_count: int = 0
    source_folders: dict[str, int] = field(default_factory=dict)
    verified_folders: dict[str, int] = field(default_factory=dict)
    error: str | None = None

    @property
    def status(self) -> BackupStatus:
        if self.error is not None:
            return BackupStatus.FAILED
        if self.source_count == self.verified_count:
            return BackupStatus.SUCCESS
        return BackupStatus.DISCREPANCY

    def describe(self) -> str:
        if self.status is BackupStatus.FAILED:
            return f"Failed: {self.error}"
        label = "Success" if self.status is BackupStatus.SUCCESS else "Discrepancy"
        return (
            f"{label}: {self.source_count:,} items in source, "
            f"{self.verified_count:,} items in archive"
        )


@contextmanager
def attached_archive(client: MailClient, path: Path) -> Iterator[StoreInfo]:
    """Attach the archive at `path` for the duration of the block.

    Raises ArchiveError if the store cannot be found by path after attaching.
    The store is detached on exit, including when the block raises.
    """
    client.attach_store(path)
    archive = find_store_by_path(client, path)
    if archive is None:
        raise ArchiveError(path)
    logger.debug("Attached archive %s as '%s'", path, archive.name)
    try:
        yield archive
    finally:
        client.detach_store(archive.root)
        logger.debug("Detached archive %s", path)


def folder_counts(client: MailClient, root: Any) -> dict[str, int]:
    """Item count per top-level folder under `root`."""
    counts: dict[str, int] = {}
    for folder in client.child_folders(root):
        name = client.folder_name(folder)
        counts[name] = counts.get(name, 0) + client.item_count(folder)
    return counts


def copy_folders(client: MailClient, source: StoreInfo, archive: StoreInfo) -> None:
    """Copy each top-level folder of `source` into the archive root.

    A failing folder raises FolderCopyError naming it; later folders are not
    attempted.
    """
    for folder in client.child_folders(source.root):
        name = client.folder_name(folder)
        logger.debug("Copying '%s' (%d items)", name, client.item_count(folder))
        try:
            client.copy_folder(folder, archive.root)
        except Exception as e:
            raise FolderCopyError(name, str(e)) from e


def export_store(client: MailClient, store_name: str, path: Path) -> BackupOutcome:
    """Export `store_name` to a new archive at `path` and verify it.

    Raises a BackupError subclass on fatal failures; a count mismatch is
    reported through the outcome's status instead.
    """
    path = Path(path)
    source = find_store(client, store_name)
    if source is None:
        raise StoreNotFound(store_name)

    # Attaching an existing file would mix its contents into this backup
    if path.exists():
        raise ArchiveError(path, "archive already exists")

    outcome = BackupOutcome(store=store_name, path=path)
    client.clear_errors()

    with attached_archive(client, path) as archive:
        copy_folders(client, source, archive)
        errors = client.pending_errors()
        if errors:
            raise IncompleteCopyError(errors)
        outcome.source_folders = folder_counts(client, source.root)
        outcome.source_count = sum(outcome.source_folders.values())

    # Reattach so the count comes from the file on disk, not the live store
    with attached_archive(client, path) as reopened:
        outcome.verified_folders = folder_counts(client, reopened.root)
        outcome.verified_count = sum(outcome.verified_folders.values())

    if outcome.status is BackupStatus.DISCREPANCY:
        logger.warning(
            "Item count mismatch for '%s': %d in source, %d in archive",
            store_name, outcome.source_count, outcome.verified_count,
        )
    return outcome
