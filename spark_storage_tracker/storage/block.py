import re
from dataclasses import dataclass


class BlockId:
    """
    Identifies a block of cached data held by an executor's block manager.

    Spark names blocks by what produced them ("rdd_3_0", "broadcast_1_piece0", "shuffle_0_1_2", ...). Only RDD blocks
    matter for unpersisting, so those get their own subclass and everything else stays a plain BlockId.
    """

    RDD_PATTERN = re.compile(r"^rdd_(\d+)_(\d+)$")

    def __init__(self, name: str):
        self.name = name

    @classmethod
    def parse(cls, name: str) -> "BlockId":
        if match := cls.RDD_PATTERN.match(name):
            return RDDBlockId(int(match.group(1)), int(match.group(2)))

        return BlockId(name)

    @property
    def is_rdd(self) -> bool:
        return False

    def __eq__(self, other):
        return isinstance(other, BlockId) and self.name == other.name

    def __hash__(self):
        return hash(self.name)

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r})"

    def __str__(self):
        return self.name


class RDDBlockId(BlockId):
    def __init__(self, rdd_id: int, split_index: int):
        super().__init__(f"rdd_{rdd_id}_{split_index}")
        self.rdd_id = rdd_id
        self.split_index = split_index

    @property
    def is_rdd(self) -> bool:
        return True


@dataclass(frozen=True)
class StorageLevel:
    use_disk: bool = False
    use_memory: bool = False
    use_off_heap: bool = False
    deserialized: bool = False
    replication: int = 1

    @property
    def is_valid(self) -> bool:
        return (self.use_memory or self.use_disk) and self.replication > 0

    @classmethod
    def from_json(cls, data: dict) -> "StorageLevel":
        # Spark 1.x logs called off-heap storage "ExternalBlockStore", and before that "Tachyon"
        use_off_heap = data.get(
            "Use Off Heap", data.get("Use ExternalBlockStore", data.get("Use Tachyon", False))
        )
        return cls(
            use_disk=data.get("Use Disk", False),
            use_memory=data.get("Use Memory", False),
            use_off_heap=use_off_heap,
            deserialized=data.get("Deserialized", False),
            replication=data.get("Replication", 1),
        )


StorageLevel.NONE = StorageLevel()


@dataclass(frozen=True)
class BlockStatus:
    storage_level: StorageLevel
    mem_size: int = 0
    disk_size: int = 0

    @property
    def is_cached(self) -> bool:
        return self.storage_level.is_valid

    @property
    def is_well_formed(self) -> bool:
        """Sizes and replication are all non-negative integers, so usage totals can be summed safely"""
        return (
            isinstance(self.storage_level, StorageLevel)
            and _is_count(self.storage_level.replication)
            and _is_count(self.mem_size)
            and _is_count(self.disk_size)
        )

    @classmethod
    def from_json(cls, data: dict) -> "BlockStatus":
        status = cls(
            storage_level=StorageLevel.from_json(data.get("Storage Level", {})),
            mem_size=data.get("Memory Size", 0),
            disk_size=data.get("Disk Size", 0),
        )
        if not status.is_well_formed:
            raise TypeError(f"Block sizes must be non-negative integers: {data!r}")

        return status


def _is_count(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0
