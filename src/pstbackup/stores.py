"""Store enumeration, lookup and operator selection."""

import re
from pathlib import Path
from typing import Iterable

from .client import MailClient, StoreInfo

# Display name of an unconfigured data file; never offered for backup
PLACEHOLDER_STORE = "Outlook Data File"


class InvalidSelection(ValueError):
    def __init__(self, token: str, count: int):
        super().__init__(
            f"Invalid selection '{token}': enter a number from 1 to {count}, 'all', or nothing"
        )
        self.token = token
        self.count = count


def list_stores(
    client: MailClient,
    exclude: Iterable[str] = (PLACEHOLDER_STORE,),
) -> list[StoreInfo]:
    """List stores in client order, skipping placeholder entries."""
    excluded = set(exclude)
    return [s for s in client.list_stores() if s.name not in excluded]


def find_store(client: MailClient, name: str) -> StoreInfo | None:
    """Find a store by exact display name."""
    for store in client.list_stores():
        if store.name == name:
            return store
    return None


def _same_path(a: Path, b: Path) -> bool:
    return Path(a).resolve() == Path(b).resolve()


def find_store_by_path(client: MailClient, path: Path) -> StoreInfo | None:
    """Find an attached store by its data file path."""
    for store in client.list_stores():
        if store.path and _same_path(store.path, path):
            return store
    return None


def select_stores(stores: list[StoreInfo], token: str | None) -> list[StoreInfo]:
    """Resolve an operator token to the stores to back up.

    - "" / None / "all": every store, in listed order
    - "n" with 1 <= n <= len(stores): the n-th store only

    Anything else raises InvalidSelection.
    """
    choice = (token or "").strip().lower()
    if choice in ("", "all"):
        return list(stores)
    if re.fullmatch(r"[0-9]+", choice):
        n = int(choice)
        if 1 <= n <= len(stores):
            return [stores[n - 1]]
    raise InvalidSelection(token or "", len(stores))
