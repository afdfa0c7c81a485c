"""In-memory mail client.

Stores are plain folder trees. Archives attached by path are real files: a
fresh path gets an empty tree written as YAML, and detaching writes the
tree back, so reattaching reads what was actually persisted.
"""

import copy
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

import yaml

from .client import StoreInfo
from .stores import PLACEHOLDER_STORE

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class MemoryFolder:
    """A folder with a direct item count and child folders."""
    name: str
    items: int = 0
    folders: list["MemoryFolder"] = field(default_factory=list)

    def to_dict(self) -> dict:
        data: dict = {"name": self.name, "items": self.items}
        if self.folders:
            data["folders"] = [f.to_dict() for f in self.folders]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "MemoryFolder":
        return cls(
            name=data.get("name", ""),
            items=data.get("items", 0),
            folders=[cls.from_dict(f) for f in data.get("folders", [])],
        )


@dataclass
class MemoryStore:
    name: str
    root: MemoryFolder
    path: Path | None = None
    is_open: bool = True


class MemoryClient:
    """MailClient backed by in-memory folder trees.

    Fault injection:
    - fail_copy: folder names whose copy raises
    - silent_fail_copy: folder names whose copy is skipped and only recorded
      in pending_errors()
    - lose_items: folder name -> items dropped the next time an archive
      holding that folder is written to disk
    - refuse_attach: attach_store() returns normally but registers nothing
    """

    def __init__(
        self,
        stores: Iterable[MemoryStore] = (),
        fail_copy: Iterable[str] = (),
        silent_fail_copy: Iterable[str] = (),
        lose_items: dict[str, int] | None = None,
        refuse_attach: bool = False,
    ):
        self.stores: list[MemoryStore] = list(stores)
        self.fail_copy = set(fail_copy)
        self.silent_fail_copy = set(silent_fail_copy)
        self.lose_items = dict(lose_items or {})
        self.refuse_attach = refuse_attach
        self._errors: list[str] = []
        self.attach_calls = 0
        self.detach_calls = 0

    def add_store(
        self,
        name: str,
        folders: dict[str, int] | None = None,
        is_open: bool = True,
    ) -> MemoryStore:
        """Add a source store with top-level folders {name: item count}."""
        root = MemoryFolder(name)
        for folder_name, items in (folders or {}).items():
            root.folders.append(MemoryFolder(folder_name, items))
        store = MemoryStore(name=name, root=root, is_open=is_open)
        self.stores.append(store)
        return store

    # --- MailClient -----------------------------------------------------------

    def list_stores(self) -> list[StoreInfo]:
        return [
            StoreInfo(name=s.name, is_open=s.is_open, path=s.path, root=s.root)
            for s in self.stores
        ]

    def attach_store(self, path: Path) -> None:
        self.attach_calls += 1
        path = Path(path)
        if path.exists():
            root = MemoryFolder.from_dict(yaml.safe_load(path.read_text()) or {})
        else:
            root = MemoryFolder(PLACEHOLDER_STORE)
            self._write(root, path)
        if self.refuse_attach:
            logger.debug("Refusing to register %s", path)
            return
        self.stores.append(MemoryStore(name=root.name, root=root, path=path))

    def detach_store(self, root: MemoryFolder) -> None:
        self.detach_calls += 1
        for i, store in enumerate(self.stores):
            if store.root is root:
                if store.path is not None:
                    self._write(store.root, store.path)
                del self.stores[i]
                return
        raise KeyError(f"No attached store with root folder '{root.name}'")

    def child_folders(self, folder: MemoryFolder) -> list[MemoryFolder]:
        return list(folder.folders)

    def folder_name(self, folder: MemoryFolder) -> str:
        return folder.name

    def item_count(self, folder: MemoryFolder) -> int:
        return folder.items

    def copy_folder(self, folder: MemoryFolder, dest: MemoryFolder) -> None:
        if folder.name in self.fail_copy:
            raise OSError(f"copy of '{folder.name}' interrupted")
        if folder.name in self.silent_fail_copy:
            self._errors.append(f"'{folder.name}' was not copied")
            return
        dest.folders.append(copy.deepcopy(folder))

    def pending_errors(self) -> list[str]:
        return list(self._errors)

    def clear_errors(self) -> None:
        self._errors.clear()

    # --- persistence ----------------------------------------------------------

    def _write(self, root: MemoryFolder, path: Path) -> None:
        data = root.to_dict()
        for folder in data.get("folders", []):
            lost = self.lose_items.pop(folder["name"], 0)
            folder["items"] = max(0, folder["items"] - lost)
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
