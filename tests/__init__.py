import logging
from pathlib import Path
from pprint import pformat

from deepdiff import DeepDiff

logging.basicConfig()
logging.root.setLevel(logging.INFO)

ROOT_DIR = Path(__file__).parent

STORAGE_EVENT_LOG = ROOT_DIR.joinpath("logs", "storage-events.json")

# All the top-level keys that we would expect to be present in the JSON representation of a saved StorageReport
REPORT_KEYS = [
    "executors",
    "metadata",
    "peaks",
]

REPORT_KEYS_MISSING_MESSAGE = "Not all keys present in saved storage report"


def assert_all_reports_identical(reports):
    """
    Given a list of StorageReport.to_dict() dictionaries, assert that they all describe the same tracker state.
    """
    [first, *rest] = reports
    for curr in rest:
        diff = DeepDiff(first, curr)
        if diff:
            raise ValueError(f"Detected a difference between storage reports\n{pformat(diff)}")
