"""Outlook automation over COM (Windows, pywin32)."""

import logging
from pathlib import Path
from typing import Any

from .client import ClientUnavailable, StoreInfo

logger = logging.getLogger(__name__)

# OlStoreType.olStoreUnicode
OL_STORE_UNICODE = 3


class OutlookClient:
    """MailClient over an Outlook MAPI namespace."""

    def __init__(self, namespace: Any):
        self._ns = namespace
        self._errors: list[str] = []

    @classmethod
    def connect(cls) -> "OutlookClient":
        """Connect to the running (or a new) Outlook instance."""
        try:
            import win32com.client
        except ImportError as e:
            raise ClientUnavailable(
                "pywin32 is required for Outlook automation: pip install pywin32"
            ) from e
        try:
            app = win32com.client.Dispatch("Outlook.Application")
            namespace = app.GetNamespace("MAPI")
        except Exception as e:
            raise ClientUnavailable(f"Cannot connect to Outlook: {e}") from e
        return cls(namespace)

    def list_stores(self) -> list[StoreInfo]:
        stores = self._ns.Stores
        result = []
        for i in range(1, stores.Count + 1):
            store = stores.Item(i)
            file_path = getattr(store, "FilePath", "") or ""
            result.append(StoreInfo(
                name=store.DisplayName,
                is_open=bool(getattr(store, "IsOpen", True)),
                path=Path(file_path) if file_path else None,
                root=store.GetRootFolder(),
            ))
        return result

    def attach_store(self, path: Path) -> None:
        # Outlook resolves relative paths against its own working directory
        path = Path(path).resolve()
        logger.info("Attaching data file: %s", path)
        self._ns.AddStoreEx(str(path), OL_STORE_UNICODE)
        if logger.isEnabledFor(logging.DEBUG):
            names = [f"{s.name} -> {s.path or '?'}" for s in self.list_stores()]
            logger.debug("Stores after attach: %s", names)

    def detach_store(self, root: Any) -> None:
        logger.info("Detaching store: %s", root.Name)
        self._ns.RemoveStore(root)

    def child_folders(self, folder: Any) -> list[Any]:
        folders = folder.Folders
        return [folders.Item(i) for i in range(1, folders.Count + 1)]

    def folder_name(self, folder: Any) -> str:
        return folder.Name

    def item_count(self, folder: Any) -> int:
        return folder.Items.Count

    def copy_folder(self, folder: Any, dest: Any) -> None:
        copied = folder.CopyTo(dest)
        if copied is None:
            # CopyTo can give up without raising; the exporter checks this list
            self._errors.append(f"'{folder.Name}' was not copied")

    def pending_errors(self) -> list[str]:
        return list(self._errors)

    def clear_errors(self) -> None:
        self._errors.clear()
