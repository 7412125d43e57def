import logging
import threading

from .config import TrackerConfig
from .events import (
    BlockManagerAdded,
    BlockManagerId,
    BlockManagerRemoved,
    ListenerEvent,
    TaskEnd,
    UnpersistRDD,
)
from .storage.block import BlockId, BlockStatus
from .storage.storage_status import StorageStatus

logger = logging.getLogger("StorageStatusTracker")


class StorageStatusTracker:
    """
    Listener that mirrors the cached blocks of every executor and tracks the peak memory each executor has used for
    cached blocks over the lifetime of the application.

    Every public method runs under a single lock, so the storage status map and the peak map always change together: a
    reader can never see a block update without the peak that goes with it. Nothing in here raises on bad input.
    Events with missing data, or that refer to an executor we don't know about, are ignored.
    """

    def __init__(self, config: TrackerConfig = None):
        self.config = config if config is not None else TrackerConfig()
        self._lock = threading.Lock()

        # Only blocks that are cached (i.e. storage level is not StorageLevel.NONE) are kept
        self._executor_id_to_storage_status: dict[str, StorageStatus] = {}
        self._executor_id_to_max_used_mem: dict[str, int] = {}

    # Listener entry point

    def on_event(self, event: ListenerEvent):
        match event:
            case TaskEnd():
                self.on_task_end(event)
            case UnpersistRDD():
                self.on_unpersist_rdd(event)
            case BlockManagerAdded():
                self.on_block_manager_added(event)
            case BlockManagerRemoved():
                self.on_block_manager_removed(event)
            case _:
                logger.debug("Ignoring unsupported event %r", event)

    def on_task_end(self, task_end: TaskEnd):
        info = task_end.task_info
        metrics = task_end.task_metrics
        if info is None or metrics is None:
            return

        if metrics.updated_blocks:
            self.on_block_status_updated(info.executor_id, metrics.updated_blocks)

    def on_unpersist_rdd(self, unpersist_rdd: UnpersistRDD):
        self.on_dataset_unpersisted(unpersist_rdd.rdd_id)

    def on_block_manager_added(self, block_manager_added: BlockManagerAdded):
        block_manager_id = block_manager_added.block_manager_id
        self.on_executor_added(
            block_manager_id.executor_id, block_manager_added.max_mem, block_manager_id=block_manager_id
        )

    def on_block_manager_removed(self, block_manager_removed: BlockManagerRemoved):
        self.on_executor_removed(block_manager_removed.block_manager_id.executor_id)

    # State changes

    def on_executor_added(self, executor_id: str, max_mem: int, block_manager_id: BlockManagerId = None):
        """
        Register an executor with an empty storage status. Registering an executor id that is already tracked replaces
        its storage status, blocks and all.
        """
        if executor_id is None:
            return

        with self._lock:
            if executor_id in self._executor_id_to_storage_status:
                logger.debug("Executor %s registered again, resetting its storage status", executor_id)

            self._executor_id_to_storage_status[executor_id] = StorageStatus(
                executor_id, max_mem, block_manager_id=block_manager_id
            )
            self._update_used_mem()

    def on_executor_removed(self, executor_id: str):
        with self._lock:
            self._executor_id_to_storage_status.pop(executor_id, None)
            if not self.config.retain_peak_on_removal:
                self._executor_id_to_max_used_mem.pop(executor_id, None)

    def on_block_status_updated(self, executor_id: str, updated_blocks: list[tuple[BlockId, BlockStatus]]):
        """Apply a batch of block updates reported by one executor, then refresh every executor's peak"""
        if not isinstance(updated_blocks, (list, tuple)):
            return

        with self._lock:
            storage_status = self._executor_id_to_storage_status.get(executor_id)
            if storage_status is None:
                logger.debug("Ignoring block updates for unknown executor %s", executor_id)
                return

            for block_id, updated_status in self._well_formed_updates(executor_id, updated_blocks):
                if not updated_status.is_cached:
                    storage_status.remove_block(block_id)
                else:
                    storage_status.update_block(block_id, updated_status)

            self._update_used_mem()

    @staticmethod
    def _well_formed_updates(executor_id, updated_blocks) -> list[tuple[BlockId, BlockStatus]]:
        # Checked up front so that a bad entry is never stored, and the rest of the batch still applies
        well_formed = []
        for entry in updated_blocks:
            if (
                isinstance(entry, tuple)
                and len(entry) == 2
                and isinstance(entry[0], BlockId)
                and isinstance(entry[1], BlockStatus)
                and entry[1].is_well_formed
            ):
                well_formed.append(entry)
            else:
                logger.debug("Ignoring malformed block update %r for executor %s", entry, executor_id)

        return well_formed

    def on_dataset_unpersisted(self, rdd_id: int):
        """Drop every block of the given RDD from every executor"""
        with self._lock:
            for storage_status in self._executor_id_to_storage_status.values():
                for block_id in storage_status.rdd_blocks_by_id(rdd_id):
                    storage_status.remove_block(block_id)

            self._update_used_mem()

    def _update_used_mem(self):
        # Caller must hold self._lock
        for executor_id, storage_status in self._executor_id_to_storage_status.items():
            current_mem_used = storage_status.mem_used
            if current_mem_used >= self._executor_id_to_max_used_mem.get(executor_id, 0):
                self._executor_id_to_max_used_mem[executor_id] = current_mem_used

    # Accessors

    def storage_status_list(self) -> list[StorageStatus]:
        """Point-in-time copies of every tracked executor's storage status"""
        with self._lock:
            return [status.copy() for status in self._executor_id_to_storage_status.values()]

    def storage_status(self, executor_id: str) -> StorageStatus | None:
        with self._lock:
            status = self._executor_id_to_storage_status.get(executor_id)
            return status.copy() if status is not None else None

    def peak_memory_used(self, executor_id: str) -> int:
        with self._lock:
            return self._executor_id_to_max_used_mem.get(executor_id, 0)

    def executor_id_to_max_used_mem(self) -> dict[str, int]:
        with self._lock:
            return dict(self._executor_id_to_max_used_mem)

    def snapshot(self) -> tuple[list[StorageStatus], dict[str, int]]:
        """Storage statuses and peaks read together, so the two always agree"""
        with self._lock:
            return (
                [status.copy() for status in self._executor_id_to_storage_status.values()],
                dict(self._executor_id_to_max_used_mem),
            )

    def __len__(self):
        with self._lock:
            return len(self._executor_id_to_storage_status)
