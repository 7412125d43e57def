__version__ = "0.1.0"

from .config import TrackerConfig  # noqa: E402
from .tracker import StorageStatusTracker  # noqa: E402

__all__ = ["StorageStatusTracker", "TrackerConfig", "__version__"]
