"""Container root lookup backends.

The resolver never inspects the platform directly; it asks a locator for the
root of a container and treats ``None`` as "service unavailable".
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional, Protocol, runtime_checkable

from cloudroot.config.models import ResolverConfig
from cloudroot.util.paths import ICLOUD_DRIVE_DIRNAME, container_dirname, expand_root

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class ContainerLocator(Protocol):
    """Anything able to answer where a container's root lives."""

    def resolve_container_root(self, identifier: Optional[str]) -> Optional[Path]:
        """Return the container root, or ``None`` when it is unavailable."""
        ...


class MobileDocumentsLocator:
    """Ubiquity containers laid out under ``~/Library/Mobile Documents``.

    A container is considered available only when its directory is present;
    the sync daemon creates it once the account is signed in and the app is
    entitled, so its absence means the service cannot be used.
    """

    def __init__(self, root: str | Path, *, default_identifier: Optional[str] = None) -> None:
        self.root = expand_root(root)
        self.default_identifier = default_identifier

    def container_path(self, identifier: Optional[str]) -> Path:
        identifier = identifier or self.default_identifier
        if not identifier:
            return self.root / ICLOUD_DRIVE_DIRNAME
        return self.root / container_dirname(identifier)

    def resolve_container_root(self, identifier: Optional[str]) -> Optional[Path]:
        candidate = self.container_path(identifier)
        if not candidate.is_dir():
            LOGGER.debug("Container directory %s not present", candidate)
            return None
        return candidate


class StaticLocator:
    """Fixed identifier-to-root mapping, for simulators and tests.

    The ``None`` key, when present, answers for the default container.
    """

    def __init__(
        self,
        roots: Mapping[Optional[str], str | Path],
        *,
        default_identifier: Optional[str] = None,
    ) -> None:
        self.roots = {key: Path(value).expanduser() for key, value in roots.items()}
        self.default_identifier = default_identifier

    def resolve_container_root(self, identifier: Optional[str]) -> Optional[Path]:
        if identifier is None:
            if None in self.roots:
                return self.roots[None]
            identifier = self.default_identifier
        if identifier is None:
            return None
        return self.roots.get(identifier)


class ChainedLocator:
    """Ask each locator in turn; the first non-``None`` root wins."""

    def __init__(self, *locators: ContainerLocator) -> None:
        self.locators = locators

    def resolve_container_root(self, identifier: Optional[str]) -> Optional[Path]:
        for locator in self.locators:
            root = locator.resolve_container_root(identifier)
            if root is not None:
                return root
        return None


def locator_from_config(config: ResolverConfig) -> ContainerLocator:
    """Build the locator chain described by ``config``."""

    overrides: dict[Optional[str], Path] = dict(config.container_roots)
    if config.default_container_root is not None:
        overrides[None] = config.default_container_root

    platform = MobileDocumentsLocator(
        config.mobile_documents_root,
        default_identifier=config.default_container,
    )
    if not overrides:
        return platform

    static = StaticLocator(overrides, default_identifier=config.default_container)
    return ChainedLocator(static, platform)


__all__ = [
    "ChainedLocator",
    "ContainerLocator",
    "MobileDocumentsLocator",
    "StaticLocator",
    "locator_from_config",
]
