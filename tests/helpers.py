from __future__ import annotations

import threading
from pathlib import Path
from typing import Mapping, Optional

from cloudroot.resolver import StorageRootResolver


class FakeLocator:
    """In-memory container lookup that records every identifier it is asked about."""

    def __init__(self, roots: Mapping[Optional[str], Path] | None = None) -> None:
        self.roots = dict(roots or {})
        self.calls: list[Optional[str]] = []
        self._lock = threading.Lock()

    def resolve_container_root(self, identifier: Optional[str]) -> Optional[Path]:
        with self._lock:
            self.calls.append(identifier)
        return self.roots.get(identifier)


def make_resolver(root: Path | None, *, identifier: Optional[str] = None, max_workers: int = 2) -> tuple[StorageRootResolver, FakeLocator]:
    """Build a resolver whose container ``identifier`` maps to ``root`` (or is unavailable)."""

    locator = FakeLocator({identifier: root} if root is not None else {})
    return StorageRootResolver(locator, max_workers=max_workers), locator


def tree_snapshot(root: Path) -> set[str]:
    """Relative paths of everything under ``root``."""

    if not root.exists():
        return set()
    return {str(path.relative_to(root)) for path in root.rglob("*")}
