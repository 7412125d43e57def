import pytest

from spark_storage_tracker.events import (
    BlockManagerAdded,
    BlockManagerId,
    BlockManagerRemoved,
    EventCounts,
    TaskEnd,
    UnpersistRDD,
    parse_event,
)
from spark_storage_tracker.storage.block import RDDBlockId, StorageLevel

MEMORY_AND_DISK = {"Use Disk": True, "Use Memory": True, "Deserialized": True, "Replication": 1}


def test_parse_task_end():
    event = parse_event(
        {
            "Event": "SparkListenerTaskEnd",
            "Stage ID": 3,
            "Task Info": {"Task ID": 17, "Executor ID": "2", "Host": "10.0.0.3"},
            "Task Metrics": {
                "Executor Run Time": 120,
                "Updated Blocks": [
                    {
                        "Block ID": "rdd_4_1",
                        "Status": {"Storage Level": MEMORY_AND_DISK, "Memory Size": 1024, "Disk Size": 2048},
                    }
                ],
            },
        }
    )

    assert isinstance(event, TaskEnd)
    assert event.stage_id == 3
    assert event.task_info.executor_id == "2"
    assert event.task_info.task_id == 17

    [(block_id, status)] = event.task_metrics.updated_blocks
    assert block_id == RDDBlockId(4, 1)
    assert status.storage_level == StorageLevel(use_disk=True, use_memory=True, deserialized=True)
    assert (status.mem_size, status.disk_size) == (1024, 2048)


def test_parse_task_end_without_optional_sections():
    event = parse_event({"Event": "SparkListenerTaskEnd", "Stage ID": 0})
    assert event == TaskEnd(task_info=None, task_metrics=None, stage_id=0)

    event = parse_event({"Event": "SparkListenerTaskEnd", "Task Info": {"Executor ID": "1"}, "Task Metrics": {}})
    assert event.task_info.executor_id == "1"
    assert event.task_metrics.updated_blocks is None


def test_parse_block_manager_events():
    block_manager = {"Executor ID": "driver", "Host": "10.0.0.1", "Port": 40000}

    added = parse_event(
        {
            "Event": "SparkListenerBlockManagerAdded",
            "Block Manager ID": block_manager,
            "Maximum Memory": 4096,
            "Maximum Onheap Memory": 4096,
            "Timestamp": 1650000000000,
        }
    )
    removed = parse_event(
        {"Event": "SparkListenerBlockManagerRemoved", "Block Manager ID": block_manager, "Timestamp": 1650000001000}
    )

    block_manager_id = BlockManagerId("driver", "10.0.0.1", 40000)
    assert added == BlockManagerAdded(block_manager_id, max_mem=4096, timestamp=1650000000000)
    assert removed == BlockManagerRemoved(block_manager_id, timestamp=1650000001000)


def test_parse_unpersist_rdd():
    assert parse_event({"Event": "SparkListenerUnpersistRDD", "RDD ID": 5}) == UnpersistRDD(5)


@pytest.mark.parametrize(
    "json_data",
    [
        {"Event": "SparkListenerJobStart", "Job ID": 0},
        {"Event": "SparkListenerApplicationEnd", "Timestamp": 0},
        {"Timestamp": 0},
        {},
    ],
)
def test_unrelated_events_are_skipped(json_data):
    assert parse_event(json_data) is None


@pytest.mark.parametrize(
    "json_data",
    [
        {"Event": "SparkListenerUnpersistRDD"},
        {"Event": "SparkListenerBlockManagerAdded", "Block Manager ID": {"Executor ID": "1"}},
        {"Event": "SparkListenerBlockManagerRemoved"},
        {"Event": "SparkListenerBlockManagerRemoved", "Block Manager ID": None},
        {"Event": "SparkListenerTaskEnd", "Task Info": {}, "Task Metrics": {"Updated Blocks": [{"Status": {}}]}},
        {
            "Event": "SparkListenerTaskEnd",
            "Task Info": {"Executor ID": "1"},
            "Task Metrics": {"Updated Blocks": [{"Block ID": "rdd_0_0", "Status": {"Memory Size": None}}]},
        },
        {
            "Event": "SparkListenerTaskEnd",
            "Task Info": {"Executor ID": "1"},
            "Task Metrics": {"Updated Blocks": [{"Block ID": "rdd_0_0", "Status": {"Disk Size": "64"}}]},
        },
    ],
)
def test_malformed_events_are_dropped(json_data):
    assert parse_event(json_data) is None


def test_event_counts():
    counts = EventCounts()
    counts.record(UnpersistRDD(1))
    counts.record(UnpersistRDD(2))
    counts.record(TaskEnd())

    assert counts.posted == 3
    assert counts.by_type == {"UnpersistRDD": 2, "TaskEnd": 1}
