import asyncio
from collections.abc import Callable
from contextlib import suppress
from enum import StrEnum
from logging import Logger

from pydantic import ValidationError

from cart.domain.interfaces import KeyValueStorageI
from cart.domain.store import CartStore
from cart.schemas import Snapshot, dump_snapshot, load_snapshot
from core.services.exceptions import SnapshotDecodeError, SynchronizerStateError
from gateways.exceptions import StorageDecodeError, StorageError

DEFAULT_STORAGE_KEY = "@GoMarketplace:products"


class SyncState(StrEnum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    CLOSED = "closed"


class PersistenceSynchronizer:
    """Keeps storage in sync with the cart store.

    Loads the persisted snapshot once on start, then writes every new snapshot
    emitted by the store. Writes are done by a single background task which
    always takes the latest pending snapshot, so intermediate snapshots produced
    while a write is in flight are skipped. Mutations never wait for storage.
    """

    def __init__(
        self,
        store: CartStore,
        storage: KeyValueStorageI,
        logger: Logger,
        storage_key: str = DEFAULT_STORAGE_KEY,
    ):
        self._store = store
        self._storage = storage
        self._logger = logger
        self._storage_key = storage_key
        self._state = SyncState.UNINITIALIZED
        self._pending: Snapshot | None = None
        self._has_pending = asyncio.Event()
        self._idle = asyncio.Event()
        self._idle.set()
        self._writer: asyncio.Task | None = None
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def storage_key(self) -> str:
        return self._storage_key

    async def start(self) -> None:
        if self._state != SyncState.UNINITIALIZED:
            raise SynchronizerStateError(self._state)
        self._state = SyncState.LOADING
        try:
            snapshot = await self._load()
        except Exception:
            self._state = SyncState.CLOSED
            raise
        self._unsubscribe = self._store.subscribe(self._on_change)
        self._writer = asyncio.create_task(
            self._write_loop(), name="cart-persistence-writer"
        )
        if snapshot is not None:
            self._store.replace(snapshot)
            self._logger.info(
                "Cart snapshot loaded (%d items)", len(self._store.products)
            )
        self._state = SyncState.READY

    async def _load(self) -> Snapshot | None:
        try:
            raw = await self._storage.get(self._storage_key)
        except StorageDecodeError as e:
            raise SnapshotDecodeError(
                f"Persisted cart snapshot under key {self._storage_key} "
                f"can't be decoded: {e}"
            ) from e
        except StorageError as e:
            self._logger.warning(
                "Failed to load cart snapshot, starting with empty cart: %s", e
            )
            return None
        if raw is None:
            self._logger.info("No persisted cart snapshot found")
            return None
        try:
            return load_snapshot(raw)
        except ValidationError as e:
            raise SnapshotDecodeError(
                f"Persisted cart snapshot under key {self._storage_key} is malformed: "
                f"{e.error_count()} validation error(s)"
            ) from e

    def _on_change(self, snapshot: Snapshot) -> None:
        self._pending = snapshot
        self._idle.clear()
        self._has_pending.set()

    async def _write_loop(self) -> None:
        while True:
            await self._has_pending.wait()
            self._has_pending.clear()
            snapshot, self._pending = self._pending, None
            if snapshot is not None:
                await self._persist(snapshot)
            if not self._has_pending.is_set():
                self._idle.set()

    async def _persist(self, snapshot: Snapshot) -> None:
        try:
            await self._storage.set(self._storage_key, dump_snapshot(snapshot))
        except StorageError as e:
            self._logger.warning("Failed to persist cart snapshot: %s", e)
        except Exception:
            self._logger.exception("Unexpected error while persisting cart snapshot")
        else:
            self._logger.debug("Cart snapshot persisted (%d items)", len(snapshot))

    async def flush(self) -> None:
        """Waits until the latest snapshot is written"""
        if self._writer is None or self._writer.done():
            return
        await self._idle.wait()

    async def aclose(self) -> None:
        if self._state == SyncState.CLOSED:
            return
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        await self.flush()
        if self._writer is not None:
            self._writer.cancel()
            with suppress(asyncio.CancelledError):
                await self._writer
            self._writer = None
        self._state = SyncState.CLOSED
