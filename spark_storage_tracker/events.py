import logging
from dataclasses import dataclass, field

from .storage.block import BlockId, BlockStatus

logger = logging.getLogger("ListenerEvents")


@dataclass(frozen=True)
class BlockManagerId:
    executor_id: str
    host: str = None
    port: int = None

    @classmethod
    def from_json(cls, data: dict) -> "BlockManagerId":
        return cls(executor_id=data["Executor ID"], host=data.get("Host"), port=data.get("Port"))


@dataclass(frozen=True)
class TaskInfo:
    executor_id: str
    task_id: int = None
    host: str = None


@dataclass(frozen=True)
class TaskMetrics:
    updated_blocks: list[tuple[BlockId, BlockStatus]] | None = None


@dataclass(frozen=True)
class TaskEnd:
    task_info: TaskInfo | None = None
    task_metrics: TaskMetrics | None = None
    stage_id: int = None


@dataclass(frozen=True)
class UnpersistRDD:
    rdd_id: int


@dataclass(frozen=True)
class BlockManagerAdded:
    block_manager_id: BlockManagerId
    max_mem: int
    timestamp: int = None


@dataclass(frozen=True)
class BlockManagerRemoved:
    block_manager_id: BlockManagerId
    timestamp: int = None


ListenerEvent = TaskEnd | UnpersistRDD | BlockManagerAdded | BlockManagerRemoved


@dataclass
class EventCounts:
    """Tallies of what happened to each line of an event log during replay"""

    seen: int = 0
    posted: int = 0
    skipped: int = 0
    malformed: int = 0
    by_type: dict[str, int] = field(default_factory=dict)

    def record(self, event: ListenerEvent):
        self.posted += 1
        name = type(event).__name__
        self.by_type[name] = self.by_type.get(name, 0) + 1


def _parse_updated_blocks(task_metrics: dict) -> list[tuple[BlockId, BlockStatus]] | None:
    updated_blocks = task_metrics.get("Updated Blocks")
    if updated_blocks is None:
        return None

    return [
        (BlockId.parse(block["Block ID"]), BlockStatus.from_json(block.get("Status", {})))
        for block in updated_blocks
    ]


def _parse_task_end(json_data: dict) -> TaskEnd:
    task_info = None
    if (info := json_data.get("Task Info")) is not None:
        task_info = TaskInfo(
            executor_id=info.get("Executor ID"), task_id=info.get("Task ID"), host=info.get("Host")
        )

    task_metrics = None
    if (metrics := json_data.get("Task Metrics")) is not None:
        task_metrics = TaskMetrics(updated_blocks=_parse_updated_blocks(metrics))

    return TaskEnd(task_info=task_info, task_metrics=task_metrics, stage_id=json_data.get("Stage ID"))


def _parse_block_manager_added(json_data: dict) -> BlockManagerAdded:
    return BlockManagerAdded(
        block_manager_id=BlockManagerId.from_json(json_data["Block Manager ID"]),
        max_mem=json_data["Maximum Memory"],
        timestamp=json_data.get("Timestamp"),
    )


def _parse_block_manager_removed(json_data: dict) -> BlockManagerRemoved:
    return BlockManagerRemoved(
        block_manager_id=BlockManagerId.from_json(json_data["Block Manager ID"]),
        timestamp=json_data.get("Timestamp"),
    )


def _parse_unpersist_rdd(json_data: dict) -> UnpersistRDD:
    return UnpersistRDD(rdd_id=json_data["RDD ID"])


EVENT_PARSERS = {
    "SparkListenerTaskEnd": _parse_task_end,
    "SparkListenerUnpersistRDD": _parse_unpersist_rdd,
    "SparkListenerBlockManagerAdded": _parse_block_manager_added,
    "SparkListenerBlockManagerRemoved": _parse_block_manager_removed,
}


def parse_event(json_data: dict) -> ListenerEvent | None:
    """
    Convert one line of a Spark eventlog into the listener event it describes.

    Returns None for event types that don't affect block storage, and for events that are missing the fields needed to
    build them. A missing field is never an error here: the eventlog is written by Spark, and we would rather drop
    one event than abort a replay.
    """
    parser = EVENT_PARSERS.get(json_data.get("Event"))
    if parser is None:
        return None

    try:
        return parser(json_data)
    except (KeyError, TypeError, AttributeError) as exc:
        logger.debug("Dropping malformed %s event: %r", json_data.get("Event"), exc)
        return None
