import gzip
import shutil
from pathlib import Path

import pytest

from spark_storage_tracker.storage.block import BlockStatus, StorageLevel
from spark_storage_tracker.tracker import StorageStatusTracker
from tests import STORAGE_EVENT_LOG

MEMORY_ONLY = StorageLevel(use_memory=True, deserialized=True)
DISK_ONLY = StorageLevel(use_disk=True)


def in_memory(mem_size: int) -> BlockStatus:
    return BlockStatus(MEMORY_ONLY, mem_size=mem_size, disk_size=0)


def gzip_copy(path: Path, target_dir: Path) -> Path:
    """
    Given a plain event log, writes a gzipped copy of it into target_dir
    """
    target = target_dir.joinpath(path.name + ".gz")
    with open(path, "rb") as fin, gzip.open(target, "wb") as fout:
        shutil.copyfileobj(fin, fout)

    return target


@pytest.fixture
def tracker() -> StorageStatusTracker:
    return StorageStatusTracker()


@pytest.fixture
def replayed_reports(request, tmp_path) -> list[dict]:
    """
    Given a plain event log and some replay function, this fixture will -
    - Replay the plain event log using the given `replay_fn`,
    - Write a gzipped copy of the event log and replay that too,
    - Return the StorageReport dict for each replay
    """
    (log_path, replay_fn) = request.param
    plain = replay_fn(log_path)
    gzipped = replay_fn(gzip_copy(log_path, tmp_path))

    return [plain, gzipped]


@pytest.fixture
def storage_event_log() -> Path:
    return STORAGE_EVENT_LOG
