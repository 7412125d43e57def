import collections

from .block import BlockId, BlockStatus


class StorageStatus:
    """
    Storage information for a single executor's block manager.

    Only cached blocks are kept here, i.e. blocks whose storage level uses memory or disk. RDD blocks are additionally
    indexed by the id of the RDD they belong to, so that unpersisting an RDD does not need to scan every block the
    executor holds.
    """

    def __init__(self, executor_id: str, max_mem: int, block_manager_id=None):
        self.executor_id = executor_id
        self.block_manager_id = block_manager_id
        self.max_mem = max_mem

        self._non_rdd_blocks: dict[BlockId, BlockStatus] = {}
        self._rdd_blocks: dict[int, dict[BlockId, BlockStatus]] = collections.defaultdict(dict)

    @property
    def blocks(self) -> dict[BlockId, BlockStatus]:
        """All cached blocks, RDD and non-RDD alike"""
        blocks = dict(self._non_rdd_blocks)
        for rdd_blocks in self._rdd_blocks.values():
            blocks.update(rdd_blocks)

        return blocks

    def rdd_blocks_by_id(self, rdd_id: int) -> dict[BlockId, BlockStatus]:
        return dict(self._rdd_blocks.get(rdd_id, {}))

    @property
    def rdd_ids(self) -> list[int]:
        return sorted(self._rdd_blocks)

    def get_block(self, block_id: BlockId) -> BlockStatus | None:
        if block_id.is_rdd:
            return self._rdd_blocks.get(block_id.rdd_id, {}).get(block_id)

        return self._non_rdd_blocks.get(block_id)

    def contains_block(self, block_id: BlockId) -> bool:
        return self.get_block(block_id) is not None

    def update_block(self, block_id: BlockId, block_status: BlockStatus):
        # A block that is no longer stored anywhere is dropped rather than recorded
        if not block_status.is_cached:
            self.remove_block(block_id)
            return

        if block_id.is_rdd:
            self._rdd_blocks[block_id.rdd_id][block_id] = block_status
        else:
            self._non_rdd_blocks[block_id] = block_status

    def remove_block(self, block_id: BlockId) -> BlockStatus | None:
        if not block_id.is_rdd:
            return self._non_rdd_blocks.pop(block_id, None)

        rdd_blocks = self._rdd_blocks.get(block_id.rdd_id)
        if rdd_blocks is None:
            return None

        removed = rdd_blocks.pop(block_id, None)
        if not rdd_blocks:
            del self._rdd_blocks[block_id.rdd_id]

        return removed

    @property
    def num_blocks(self) -> int:
        return len(self._non_rdd_blocks) + self.num_rdd_blocks

    @property
    def num_rdd_blocks(self) -> int:
        return sum(len(rdd_blocks) for rdd_blocks in self._rdd_blocks.values())

    @property
    def mem_used(self) -> int:
        return sum(status.mem_size for status in self.blocks.values())

    @property
    def off_heap_mem_used(self) -> int:
        return sum(
            status.mem_size for status in self.blocks.values() if status.storage_level.use_off_heap
        )

    @property
    def on_heap_mem_used(self) -> int:
        return self.mem_used - self.off_heap_mem_used

    @property
    def mem_remaining(self) -> int:
        return self.max_mem - self.mem_used

    @property
    def disk_used(self) -> int:
        return sum(status.disk_size for status in self.blocks.values())

    def mem_used_by_rdd(self, rdd_id: int) -> int:
        return sum(status.mem_size for status in self._rdd_blocks.get(rdd_id, {}).values())

    def copy(self) -> "StorageStatus":
        status = StorageStatus(self.executor_id, self.max_mem, self.block_manager_id)
        status._non_rdd_blocks = dict(self._non_rdd_blocks)
        for rdd_id, rdd_blocks in self._rdd_blocks.items():
            status._rdd_blocks[rdd_id] = dict(rdd_blocks)

        return status

    def __repr__(self):
        return (
            f"StorageStatus(executor_id={self.executor_id!r}, max_mem={self.max_mem}, "
            f"mem_used={self.mem_used}, num_blocks={self.num_blocks})"
        )
