"""Mail client capability interface used by the backup protocol."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, runtime_checkable


@dataclass
class StoreInfo:
    """A store (mailbox or data file) known to the mail client profile."""
    name: str
    is_open: bool
    path: Path | None
    root: Any  # opaque root-folder handle, only meaningful to the client


@runtime_checkable
class MailClient(Protocol):
    """Narrow view of a mail client's automation surface.

    Implementations:
    - OutlookClient: Outlook over COM (pywin32)
    - MemoryClient: in-memory stores, archives persisted as YAML files
    """

    def list_stores(self) -> list[StoreInfo]:
        """All stores in the active profile, in client order."""
        ...

    def attach_store(self, path: Path) -> None:
        """Attach a data file to the profile, creating it if missing."""
        ...

    def detach_store(self, root: Any) -> None:
        """Remove the store owning `root` from the profile."""
        ...

    def child_folders(self, folder: Any) -> list[Any]:
        """Direct child folders of `folder`."""
        ...

    def folder_name(self, folder: Any) -> str:
        ...

    def item_count(self, folder: Any) -> int:
        """Number of items directly in `folder`."""
        ...

    def copy_folder(self, folder: Any, dest: Any) -> None:
        """Copy `folder` (with its subtree) under `dest`."""
        ...

    def pending_errors(self) -> list[str]:
        """Failures the client recorded without raising."""
        ...

    def clear_errors(self) -> None:
        ...


class BackupError(RuntimeError):
    """Fatal error while backing up a store."""


class ClientUnavailable(BackupError):
    """The mail client cannot be reached."""


class StoreNotFound(BackupError):
    def __init__(self, name: str):
        super().__init__(f"Store not found: {name}")
        self.name = name


class ArchiveError(BackupError):
    """An archive cannot be created or accessed."""

    def __init__(self, path: Path, reason: str = "cannot create or access archive"):
        super().__init__(f"{reason.capitalize()}: {path}")
        self.path = path
        self.reason = reason


class FolderCopyError(BackupError):
    def __init__(self, folder: str, reason: str):
        super().__init__(f"Failed to copy folder '{folder}': {reason}")
        self.folder = folder
        self.reason = reason


class IncompleteCopyError(BackupError):
    """The client reported copy failures that were not raised."""

    def __init__(self, errors: list[str]):
        super().__init__(
            "One or more folders failed to copy: " + "; ".join(errors)
        )
        self.errors = errors
