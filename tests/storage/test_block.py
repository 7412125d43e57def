import pytest

from spark_storage_tracker.storage.block import BlockId, BlockStatus, RDDBlockId, StorageLevel


def test_parse_rdd_block_id():
    block_id = BlockId.parse("rdd_12_3")

    assert isinstance(block_id, RDDBlockId)
    assert block_id.is_rdd
    assert (block_id.rdd_id, block_id.split_index) == (12, 3)
    assert block_id == RDDBlockId(12, 3)
    assert hash(block_id) == hash(BlockId("rdd_12_3"))


def test_parse_other_block_ids():
    for name in ["broadcast_0_piece0", "shuffle_0_1_2", "taskresult_7", "rdd_x_1", "input-0-1"]:
        block_id = BlockId.parse(name)
        assert not block_id.is_rdd
        assert str(block_id) == name


def test_storage_level_none():
    assert StorageLevel.NONE == StorageLevel(False, False, False, False, 1)
    assert not StorageLevel.NONE.is_valid
    assert StorageLevel(use_memory=True).is_valid
    assert StorageLevel(use_disk=True).is_valid
    assert not StorageLevel(use_memory=True, replication=0).is_valid


def test_block_status_from_json():
    status = BlockStatus.from_json(
        {
            "Storage Level": {"Use Disk": True, "Use Memory": True, "Deserialized": False, "Replication": 2},
            "Memory Size": 128,
            "Disk Size": 256,
        }
    )

    assert status.is_cached
    assert status.storage_level == StorageLevel(use_disk=True, use_memory=True, replication=2)
    assert (status.mem_size, status.disk_size) == (128, 256)


def test_legacy_off_heap_keys():
    assert StorageLevel.from_json({"Use Memory": True, "Use ExternalBlockStore": True}).use_off_heap
    assert StorageLevel.from_json({"Use Memory": True, "Use Tachyon": True}).use_off_heap
    assert not BlockStatus.from_json({}).is_cached


@pytest.mark.parametrize(
    "status_json",
    [
        {"Memory Size": None},
        {"Memory Size": "128"},
        {"Disk Size": -1},
        {"Memory Size": True},
        {"Storage Level": {"Use Memory": True, "Replication": None}, "Memory Size": 8},
    ],
)
def test_block_status_with_bad_sizes_is_rejected(status_json):
    with pytest.raises(TypeError):
        BlockStatus.from_json(status_json)


def test_block_status_is_well_formed():
    assert BlockStatus(StorageLevel(use_memory=True), mem_size=10).is_well_formed
    assert BlockStatus.from_json({}).is_well_formed
    assert not BlockStatus(StorageLevel(use_memory=True), mem_size=None).is_well_formed
    assert not BlockStatus(StorageLevel(use_disk=True), disk_size=1.5).is_well_formed
