from .block import BlockId, BlockStatus, RDDBlockId, StorageLevel
from .storage_status import StorageStatus

__all__ = ["BlockId", "BlockStatus", "RDDBlockId", "StorageLevel", "StorageStatus"]
