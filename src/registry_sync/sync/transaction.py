"""Reconciliation of one local image with its registry."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from ..exceptions import LocalStoreError, RefreshFailedError
from ..models import DigestRecord, ImageIdentity
from ..stats.refresh import RunStats
from ..store.base import ImageStore
from ..utils.bytesize import pretty_bytes
from ..utils.log import ItemLog, lpad

logger = logging.getLogger(__name__)

BACKUP_TAG = "backup"


class DigestSource(Protocol):
    """Registry side of a transaction."""

    async def pull_token(self, identity: ImageIdentity) -> str: ...

    async def remote_digest(self, identity: ImageIdentity, token: str) -> str: ...


class SyncState(Enum):
    INSPECTING = "inspecting"
    IN_SYNC = "in-sync"
    OUT_OF_SYNC = "out-of-sync"
    BACKING_UP = "backing-up"
    PULLING = "pulling"
    CLEANUP = "cleanup"
    VERIFYING = "verifying"
    DONE = "done"
    FAILED = "failed"


def compare_digests(digest: str, other_digest: str) -> bool:
    """Equality of two digests, never true when either probe came back empty."""
    return bool(digest) and bool(other_digest) and digest == other_digest


@dataclass
class SyncResult:
    """Outcome of a completed transaction."""

    identity: ImageIdentity
    stats: RunStats
    record: DigestRecord | None
    in_sync: bool
    states: list[SyncState] = field(default_factory=list)


class SyncTransaction:
    """Brings one local image up to date with the remote digest.

    An out-of-sync image that exists locally is tagged ``:backup`` before the
    pull and the backup tag is dropped once the pull succeeded. The pulled
    image must match the remote digest, otherwise the transaction fails with
    RefreshFailedError. In dry-run mode nothing is tagged, pulled or removed.
    """

    def __init__(
        self,
        identity: ImageIdentity,
        registry: DigestSource,
        store: ImageStore,
        dry_run: bool = False,
        log: ItemLog | None = None,
        prefix: str = "",
    ) -> None:
        self.identity = identity
        self.registry = registry
        self.store = store
        self.dry_run = dry_run
        self.log = log or ItemLog(logger)
        self.prefix = prefix
        self.states: list[SyncState] = []

    def _enter(self, state: SyncState) -> None:
        logger.debug(f"{self.identity}: {state.value}")
        self.states.append(state)

    def _step(self, message: str) -> None:
        self.log.line(f"{self.prefix} {message}" if self.prefix else message)

    async def run(self) -> SyncResult:
        try:
            return await self._run()
        except Exception:
            self._enter(SyncState.FAILED)
            raise
        finally:
            self.log.flush()

    async def _run(self) -> SyncResult:
        self._enter(SyncState.INSPECTING)
        token = await self.registry.pull_token(self.identity)
        remote = await self.registry.remote_digest(self.identity, token)
        record = await self.store.inspect(self.identity)
        local = record.digest if record else ""

        if compare_digests(remote, local):
            self._enter(SyncState.IN_SYNC)
            steady = record.size_bytes if record else 0
            self.log.partial(lpad("In Sync", 25) + " " + pretty_bytes(steady)).newline()
            self._enter(SyncState.DONE)
            return SyncResult(
                identity=self.identity,
                stats=RunStats(bytes_steady=steady),
                record=record,
                in_sync=True,
                states=self.states,
            )

        self._enter(SyncState.OUT_OF_SYNC)
        self.log.partial("Out of Sync").newline()
        removed = record.size_bytes if record else 0

        backup: ImageIdentity | None = None
        if removed:
            self._enter(SyncState.BACKING_UP)
            backup = self.identity.with_tag(BACKUP_TAG)
            self._step(f"Tagging backup image. {self.identity} -> {backup}")
            if not self.dry_run:
                await self.store.tag(self.identity, BACKUP_TAG)

        self._enter(SyncState.PULLING)
        self._step(f"Pulling new image. {self.identity}")
        self.log.flush()
        if not self.dry_run:
            await self._pull(backup)

        if backup is not None:
            self._enter(SyncState.CLEANUP)
            self._step(f"Removing old image. {backup}")
            if not self.dry_run:
                await self._remove_backup(backup)

        if self.dry_run:
            # Nothing changed on disk
            self._enter(SyncState.DONE)
            self._step(f"Dry run, {pretty_bytes(removed)} unchanged")
            return SyncResult(
                identity=self.identity,
                stats=RunStats(bytes_added=removed, bytes_removed=removed),
                record=record,
                in_sync=False,
                states=self.states,
            )

        self._enter(SyncState.VERIFYING)
        updated = await self.store.inspect(self.identity)
        added = updated.size_bytes if updated else 0
        self._step(
            f"removed: {lpad(pretty_bytes(removed), 10)} "
            f"added: {lpad(pretty_bytes(added), 10)} "
            f"delta: {pretty_bytes(added - removed)}"
        )

        # The pull must produce the digest the registry reported when the
        # transaction started
        if not compare_digests(remote, updated.digest if updated else ""):
            raise RefreshFailedError(f"Failed to refresh image: {self.identity}.")

        self._enter(SyncState.DONE)
        return SyncResult(
            identity=self.identity,
            stats=RunStats(bytes_added=added, bytes_removed=removed, images_refreshed=1),
            record=updated,
            in_sync=False,
            states=self.states,
        )

    async def _pull(self, backup: ImageIdentity | None) -> None:
        try:
            await self.store.pull(self.identity)
        except LocalStoreError as e:
            if backup is None:
                raise
            raise LocalStoreError(
                f"{e}; previous image kept as {backup}",
                command=e.command,
                returncode=e.returncode,
                stderr=e.stderr,
            ) from e

    async def _remove_backup(self, backup: ImageIdentity) -> None:
        try:
            await self.store.remove_tag(backup)
        except LocalStoreError as e:
            logger.warning(f"Could not remove backup image {backup}: {e}")
