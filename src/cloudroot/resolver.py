"""Storage root resolution and provisioning."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Union

from cloudroot.config.models import ResolverConfig
from cloudroot.containers import ContainerLocator, locator_from_config
from cloudroot.errors import ContainerUnavailable, ProvisioningFailed
from cloudroot.util.paths import join_subpath

LOGGER = logging.getLogger(__name__)

DEFAULT_SUBPATH = "Documents"

Outcome = Union[Path, Exception]
Deliver = Callable[[Callable[[], None]], None]


def _call_now(callback: Callable[[], None]) -> None:
    callback()


class StorageRootResolver:
    """Resolve a container root and make sure a directory exists beneath it.

    Every call re-resolves and re-provisions; nothing is cached between
    calls. ``resolve`` blocks, so interactive callers should go through
    ``submit``, ``dispatch`` or ``resolve_async`` which run it on the
    resolver's worker pool.
    """

    def __init__(
        self,
        locator: ContainerLocator,
        *,
        default_subpath: str = DEFAULT_SUBPATH,
        executor: ThreadPoolExecutor | None = None,
        max_workers: int = 4,
    ) -> None:
        self.locator = locator
        self.default_subpath = default_subpath
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="cloudroot-resolve"
        )

    @classmethod
    def from_config(cls, config: ResolverConfig) -> "StorageRootResolver":
        return cls(
            locator_from_config(config),
            default_subpath=config.subpath,
            max_workers=config.max_workers,
        )

    def resolve(self, container_identifier: Optional[str] = None, subpath: Optional[str] = None) -> Path:
        """Return ``<container root>/<subpath>``, creating it if it is missing.

        Raises ``ContainerUnavailable`` when the locator has no root for the
        container and ``ProvisioningFailed`` when the directory cannot be
        verified or created. A single attempt is made.
        """

        subpath = subpath or self.default_subpath
        container_identifier = (container_identifier or "").strip() or None
        try:
            root = self.locator.resolve_container_root(container_identifier)
        except OSError as exc:
            LOGGER.warning("Container %s lookup failed: %s", container_identifier or "<default>", exc)
            raise ContainerUnavailable(str(exc)) from exc
        if root is None:
            LOGGER.warning("Container %s is not available", container_identifier or "<default>")
            raise ContainerUnavailable()

        try:
            target = join_subpath(root, subpath)
        except ValueError as exc:
            raise ProvisioningFailed(str(exc)) from exc

        try:
            if target.is_dir():
                return target
            if target.exists():
                raise ProvisioningFailed(f"{target} exists and is not a directory")
        except OSError as exc:
            LOGGER.error("Error checking iCloud directory %s: %s", target, exc)
            raise ProvisioningFailed(str(exc)) from exc

        _provision(target)
        LOGGER.info("Created iCloud directory %s", target)
        return target

    def submit(
        self, container_identifier: Optional[str] = None, subpath: Optional[str] = None
    ) -> "Future[Path]":
        """Run ``resolve`` on the worker pool."""
        return self._executor.submit(self.resolve, container_identifier, subpath)

    def dispatch(
        self,
        container_identifier: Optional[str] = None,
        subpath: Optional[str] = None,
        *,
        on_complete: Callable[[Outcome], None],
        deliver: Deliver | None = None,
    ) -> "Future[Path]":
        """Resolve in the background and hand the outcome to ``on_complete``.

        ``deliver`` schedules a zero-argument callable on the caller's
        context, e.g. ``loop.call_soon_threadsafe`` for an asyncio loop. The
        outcome is either the provisioned path or the raised exception.
        """

        schedule = deliver or _call_now
        future = self.submit(container_identifier, subpath)

        def _done(done: "Future[Path]") -> None:
            error = done.exception()
            outcome: Outcome = done.result() if error is None else error
            schedule(lambda: on_complete(outcome))

        future.add_done_callback(_done)
        return future

    async def resolve_async(
        self, container_identifier: Optional[str] = None, subpath: Optional[str] = None
    ) -> Path:
        """Await a background resolution from the running event loop."""
        return await asyncio.wrap_future(self.submit(container_identifier, subpath))

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def __enter__(self) -> "StorageRootResolver":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _provision(target: Path) -> None:
    """Create ``target`` and any missing parents, undoing partial work on failure."""

    missing: list[Path] = []
    created: list[Path] = []
    try:
        cursor = target
        while not cursor.exists():
            missing.append(cursor)
            if cursor.parent == cursor:
                break
            cursor = cursor.parent

        for segment in reversed(missing):
            try:
                segment.mkdir()
            except FileExistsError:
                # Another caller created it between the check and the mkdir.
                if not segment.is_dir():
                    raise
                continue
            created.append(segment)
    except OSError as exc:
        LOGGER.error("Error creating iCloud directory %s: %s", target, exc)
        _rollback(created)
        raise ProvisioningFailed(str(exc)) from exc


def _rollback(created: list[Path]) -> None:
    for segment in reversed(created):
        try:
            segment.rmdir()
        except OSError as exc:
            LOGGER.warning("Could not remove partially created %s: %s", segment, exc)


__all__ = ["DEFAULT_SUBPATH", "Deliver", "Outcome", "StorageRootResolver"]
