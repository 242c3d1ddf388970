"""Path utilities for container layout decisions."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

ICLOUD_DRIVE_DIRNAME = "com~apple~CloudDocs"


def expand_root(root: str | Path) -> Path:
    """Return the resolved absolute form of a configured root."""
    return Path(root).expanduser().resolve()


def container_dirname(identifier: str) -> str:
    """Map a ubiquity container identifier to its on-disk directory name.

    ``iCloud.com.example.app`` lives under ``iCloud~com~example~app``.
    """
    return identifier.strip().replace(".", "~")


def join_subpath(root: Path, subpath: str) -> Path:
    """Return ``root / subpath``, refusing absolute or escaping subpaths."""
    relative = PurePosixPath(subpath)
    if not relative.parts or relative.is_absolute() or ".." in relative.parts:
        raise ValueError(f"Subpath {subpath!r} must stay inside {root}.")
    return root.joinpath(*relative.parts)


__all__ = ["ICLOUD_DRIVE_DIRNAME", "container_dirname", "expand_root", "join_subpath"]
